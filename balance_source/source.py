"""Collaborator contracts for the external balance source and token mover.

The registry never implements either; it only calls them. A balance source
signals failure by raising BalanceReadError, which keeps a failed read apart
from a legitimate zero balance. `read_balance` is the single place where the
registry turns such a call into a (success, balance) pair.
"""

import logging
from abc import ABC, abstractmethod
from typing import Tuple

from errors.exceptions import BalanceReadError

logger = logging.getLogger(__name__)


class BalanceSource(ABC):
    """Answers balance_of(user, token) for any registered pair."""

    @abstractmethod
    def balance_of(self, user: str, token: str) -> int:
        """
        Return the balance of `user` for `token` in base units.

        Raises:
            BalanceReadError: the source could not answer
        """


class TokenMover(ABC):
    """Moves value between accounts on behalf of the cached-balance registry."""

    @abstractmethod
    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        """
        Move `amount` of `token` from `sender` to `recipient`.

        Raises:
            TransferError: the move was rejected or failed
        """


def read_balance(source: BalanceSource, user: str, token: str) -> Tuple[bool, int]:
    """
    Read one balance without letting a source failure escape.

    Returns:
        Tuple of (success, balance); balance is 0 whenever success is False
    """
    try:
        balance = source.balance_of(user, token)
    except BalanceReadError as e:
        logger.warning(f"Balance source failed for {user}/{token}: {e.reason}")
        return False, 0
    except Exception as e:
        # Anything else from the source counts as a malformed reply
        logger.warning(f"Balance source raised {type(e).__name__} for {user}/{token}: {e}")
        return False, 0

    if isinstance(balance, bool) or not isinstance(balance, int) or balance < 0:
        logger.warning(f"Balance source returned malformed balance {balance!r} for {user}/{token}")
        return False, 0

    return True, balance
