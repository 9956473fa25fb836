"""
Unit-tests for registry.index
"""

import pytest

from registry.index import MembershipIndex
from tests.conftest import ALICE, BOB, T1, T2, T3


class TestMembershipIndex:

    def setup_method(self):
        self.index = MembershipIndex()

    def test_register_reports_what_was_new(self):
        first = self.index.register(ALICE, T1)
        assert first.pair and first.user and first.token

        second = self.index.register(ALICE, T2)
        assert second.pair and not second.user and second.token

        third = self.index.register(BOB, T1)
        assert third.pair and third.user and not third.token

    def test_register_is_idempotent(self):
        self.index.register(ALICE, T1)
        again = self.index.register(ALICE, T1)

        assert not any(again)
        assert self.index.tokens_of(ALICE) == [T1]
        assert self.index.all_users() == [ALICE]

    def test_tokens_keep_registration_order(self):
        for token in (T3, T1, T2):
            self.index.register(ALICE, token)
        assert self.index.tokens_of(ALICE) == [T3, T1, T2]

    def test_users_keep_registration_order(self):
        self.index.register(BOB, T1)
        self.index.register(ALICE, T1)
        self.index.register(BOB, T2)
        assert self.index.all_users() == [BOB, ALICE]

    def test_membership_matches_token_lists(self):
        """contains(u, t) holds exactly when t is in tokens_of(u)."""
        pairs = [(ALICE, T1), (ALICE, T2), (BOB, T2), (BOB, T3)]
        for user, token in pairs:
            self.index.register(user, token)
        self.index.remove(ALICE, T2)

        for user in (ALICE, BOB):
            for token in (T1, T2, T3):
                assert self.index.contains(user, token) == (token in self.index.tokens_of(user))

    def test_remove_keeps_user_and_global_token(self):
        self.index.register(ALICE, T1)

        assert self.index.remove(ALICE, T1) is True
        assert self.index.tokens_of(ALICE) == []
        assert not self.index.contains(ALICE, T1)
        # Known asymmetry: the user stays listed and the token stays known
        assert self.index.all_users() == [ALICE]
        assert self.index.has_token(T1)
        assert self.index.all_tokens() == [T1]

    def test_remove_unknown_pair_is_noop(self):
        assert self.index.remove(ALICE, T1) is False
        self.index.register(ALICE, T1)
        assert self.index.remove(ALICE, T2) is False
        assert self.index.tokens_of(ALICE) == [T1]

    def test_reregister_after_remove_appends_at_end(self):
        self.index.register(ALICE, T1)
        self.index.register(ALICE, T2)
        self.index.remove(ALICE, T1)

        again = self.index.register(ALICE, T1)
        assert again.pair and not again.user and not again.token
        assert self.index.tokens_of(ALICE) == [T2, T1]

    def test_accessors_return_copies(self):
        self.index.register(ALICE, T1)
        self.index.tokens_of(ALICE).append(T2)
        self.index.all_users().append(BOB)

        assert self.index.tokens_of(ALICE) == [T1]
        assert self.index.all_users() == [ALICE]

    @pytest.mark.parametrize("user", [ALICE, BOB])
    def test_unknown_user_has_no_tokens(self, user):
        assert self.index.tokens_of(user) == []
        assert user not in self.index.all_users()
