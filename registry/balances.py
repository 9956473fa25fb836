from typing import Dict, Tuple


class BalanceCache:
    """
    Snapshot of (user, token) balances as of the last refresh of each pair.

    Nothing here goes stale on a timer; a value changes only when an initialize
    or transfer call touches that pair again.
    """

    def __init__(self):
        self.balances: Dict[Tuple[str, str], int] = {}

    def get(self, user: str, token: str) -> int:
        """Cached balance, or 0 if the pair was never refreshed."""
        return self.balances.get((user, token), 0)

    def set(self, user: str, token: str, amount: int) -> None:
        self.balances[(user, token)] = amount

    def __len__(self) -> int:
        return len(self.balances)
