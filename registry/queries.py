"""
Read-only queries over the membership index.

Every multi-user query is bounded by `max_iterations`: only that many users from
the front of the registration-ordered user list are scanned, so callers trade
completeness for a fixed upper bound on work. A bound of 0 or an empty registry
gives an empty or zero result.

Balances come from a reader callable supplied by the owning registry. The reader
never raises: the cached policy looks the pair up in its snapshot, the live
policy asks the balance source and substitutes 0 on failure. Queries emit no
signals.
"""

from typing import Callable, List, Tuple

from log_utils import get_logger
from monitoring.metrics import query_seconds
from registry.index import MembershipIndex

logger = get_logger(__name__)

BalanceReader = Callable[[str, str], int]


class QueryEngine:

    def __init__(self, index: MembershipIndex, balance_reader: BalanceReader):
        self.index = index
        self.balance_reader = balance_reader

    def _scan(self, max_iterations: int) -> List[str]:
        """The first `max_iterations` registered users, in registration order."""
        if max_iterations <= 0:
            return []
        return self.index.users[:max_iterations]

    def tokens_of(self, user: str) -> List[str]:
        return self.index.tokens_of(user)

    def balance_of(self, user: str, token: str) -> int:
        return self.balance_reader(user, token)

    def all_balances(self, user: str) -> Tuple[List[str], List[int]]:
        """Parallel lists of the user's tokens and their balances."""
        tokens = self.index.tokens_of(user)
        return tokens, [self.balance_reader(user, token) for token in tokens]

    def all_tokens(self, max_iterations: int) -> List[str]:
        """
        Unique tokens held by the scanned users, in first-seen order.

        Tokens are kept only while the global token set still knows them.
        """
        with query_seconds.labels(operation="all_tokens").time():
            tokens: List[str] = []
            seen = set()
            for user in self._scan(max_iterations):
                for token in self.index.user_tokens.get(user, []):
                    if token in seen or not self.index.has_token(token):
                        continue
                    seen.add(token)
                    tokens.append(token)
            return tokens

    def all_users(self, max_iterations: int) -> List[str]:
        return list(self._scan(max_iterations))

    def top_holders(self, token: str, n: int, max_iterations: int) -> Tuple[List[str], List[int]]:
        """
        Holders of `token` with the largest positive balances among the scanned users.

        Ranking is a partial selection sort over the candidates in scan order:
        for each of the first min(n, candidates) slots, the first maximum found
        in the remaining suffix is swapped into the slot. Among equal balances
        the candidate met first in that suffix wins.

        Returns:
            Tuple of (holders, balances), balances non-increasing
        """
        with query_seconds.labels(operation="top_holders").time():
            candidates: List[Tuple[str, int]] = []
            for user in self._scan(max_iterations):
                balance = self.balance_reader(user, token)
                if balance > 0:
                    candidates.append((user, balance))

            slots = min(n, len(candidates))
            for i in range(slots):
                best = i
                for j in range(i + 1, len(candidates)):
                    if candidates[j][1] > candidates[best][1]:
                        best = j
                if best != i:
                    candidates[i], candidates[best] = candidates[best], candidates[i]

            ranked = candidates[:slots]
            logger.debug(
                f"Ranked {slots} of {len(candidates)} holders",
                extra={"token": token, "operation": "top_holders"}
            )
            return [user for user, _ in ranked], [balance for _, balance in ranked]

    def token_summary(self, token: str, max_iterations: int) -> Tuple[int, int]:
        """
        Returns:
            Tuple of (total balance, holder count) over positive balances of the scanned users
        """
        with query_seconds.labels(operation="token_summary").time():
            total = 0
            holders = 0
            for user in self._scan(max_iterations):
                balance = self.balance_reader(user, token)
                if balance > 0:
                    total += balance
                    holders += 1
            return total, holders
