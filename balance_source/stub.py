"""In-process balance table standing in for an external token contract.

Used by the test-suite and the command-line report. Failures can be injected
per (user, token) pair or for every read to simulate an unreachable source.
"""

from collections import defaultdict
from typing import Dict, Set, Tuple

from balance_source.source import BalanceSource, TokenMover
from errors.exceptions import BalanceReadError, TransferError


class InMemoryBalanceSource(BalanceSource):
    """
    Per-(user, token) balances held in a dict; unknown pairs read as 0
    """

    def __init__(self, balances: Dict[Tuple[str, str], int] = None):
        self.balances: Dict[Tuple[str, str], int] = {}
        self.failing: Set[Tuple[str, str]] = set()
        self.unavailable = False
        self.calls: Dict[Tuple[str, str], int] = defaultdict(int)
        for (user, token), amount in (balances or {}).items():
            self.set_balance(user, token, amount)

    def set_balance(self, user: str, token: str, amount: int):
        """
        Raises:
            ValueError: amount is not a non-negative int (bools and floats included)
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValueError(f"Balance must be a non-negative integer, got {amount!r}")
        self.balances[(user.lower(), token.lower())] = amount

    def fail(self, user: str, token: str):
        """
        Make every read of (user, token) raise BalanceReadError until recover() is called
        """
        self.failing.add((user.lower(), token.lower()))

    def recover(self, user: str, token: str):
        self.failing.discard((user.lower(), token.lower()))

    def balance_of(self, user: str, token: str) -> int:
        key = (user.lower(), token.lower())
        self.calls[key] += 1
        if self.unavailable:
            raise BalanceReadError(user, token, "source unavailable")
        if key in self.failing:
            raise BalanceReadError(user, token, "injected failure")
        return self.balances.get(key, 0)


class InMemoryTokenMover(TokenMover):
    """
    Moves balances inside an InMemoryBalanceSource, as a confirmed on-chain transfer would
    """

    def __init__(self, source: InMemoryBalanceSource):
        self.source = source
        self.transfers = []

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        sender_key = (sender.lower(), token.lower())
        recipient_key = (recipient.lower(), token.lower())
        available = self.source.balances.get(sender_key, 0)
        if available < amount:
            raise TransferError(f"Insufficient balance: need {amount}, have {available}")
        self.source.balances[sender_key] = available - amount
        self.source.balances[recipient_key] = self.source.balances.get(recipient_key, 0) + amount
        self.transfers.append((token.lower(), sender.lower(), recipient.lower(), amount))
