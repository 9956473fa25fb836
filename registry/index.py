import logging
from typing import Dict, List, NamedTuple, Set, Tuple

logger = logging.getLogger(__name__)


class Registration(NamedTuple):
    """What a register() call added to the index."""
    pair: bool
    user: bool
    token: bool


class MembershipIndex:
    """
    Bidirectional user <-> token membership with insertion-ordered iteration.

    Ordered lists carry registration order; the companion sets answer membership
    in O(1). Two asymmetries are kept on purpose:
    removing a user's last token leaves the user in `users`, and no removal ever
    clears a token from the global token set.
    """

    def __init__(self):
        self.user_tokens: Dict[str, List[str]] = {}
        self.user_token_exists: Set[Tuple[str, str]] = set()
        self.users: List[str] = []
        self._user_set: Set[str] = set()
        # dict preserves first-seen order for all_tokens()
        self.token_exists: Dict[str, bool] = {}

    def register(self, user: str, token: str) -> Registration:
        """
        Insert (user, token) if absent.

        Returns:
            Registration flags telling which of pair, user and token were new
        """
        if (user, token) in self.user_token_exists:
            return Registration(False, False, False)

        new_user = user not in self._user_set
        if new_user:
            self.users.append(user)
            self._user_set.add(user)

        new_token = not self.token_exists.get(token, False)
        if new_token:
            self.token_exists[token] = True

        self.user_tokens.setdefault(user, []).append(token)
        self.user_token_exists.add((user, token))
        logger.debug(f"Indexed token {token} for user {user}")
        return Registration(True, new_user, new_token)

    def remove(self, user: str, token: str) -> bool:
        """
        Drop token from the user's sequence.

        Returns:
            True if the pair was registered, False if there was nothing to remove
        """
        if (user, token) not in self.user_token_exists:
            return False
        self.user_tokens[user].remove(token)
        self.user_token_exists.discard((user, token))
        logger.debug(f"Unindexed token {token} for user {user}")
        return True

    def contains(self, user: str, token: str) -> bool:
        return (user, token) in self.user_token_exists

    def has_token(self, token: str) -> bool:
        return self.token_exists.get(token, False)

    def tokens_of(self, user: str) -> List[str]:
        return list(self.user_tokens.get(user, []))

    def all_users(self) -> List[str]:
        return list(self.users)

    def all_tokens(self) -> List[str]:
        """Every token ever registered, in first-seen order."""
        return [token for token, seen in self.token_exists.items() if seen]
