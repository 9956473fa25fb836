"""
Registration policies over the membership index.

Both policies walk every (user, token) pair of an initialize call in input order
and never abort on a failed balance read; a failure is turned into a
BalanceUpdateFailed signal and the loop moves on.

- CachedBalanceRegistrar: snapshot every read into a BalanceCache and register
  the pair whatever the outcome (a failed read is cached as 0).
- LiveBalanceRegistrar: keep no balances; a positive read registers the pair,
  a zero read prunes it, a failed read leaves it alone.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from balance_source.source import BalanceSource, read_balance
from config.config import POLICY_CACHED, POLICY_LIVE
from events.event_bus import EventBus, EventTypes
from log_utils import get_logger
from monitoring.metrics import balance_read_failures_total, registrations_total, removals_total
from registry.balances import BalanceCache
from registry.index import MembershipIndex

logger = get_logger(__name__)


class Registrar(ABC):
    """Mutates a MembershipIndex in response to initialize calls"""

    policy: Optional[str] = None

    def __init__(self, index: MembershipIndex, source: BalanceSource, events: EventBus):
        self.index = index
        self.source = source
        self.events = events
        self.logger = logger.with_context(policy=self.policy)

    def initialize_balances(self, token: str, users: List[str]):
        """Sync `token` for each user in order."""
        for user in users:
            self.sync_pair(user, token)

    def initialize_tokens(self, user: str, tokens: List[str]):
        """Sync each token in order for `user`."""
        for token in tokens:
            self.sync_pair(user, token)

    @abstractmethod
    def sync_pair(self, user: str, token: str):
        """Read the balance of (user, token) and apply the policy to the index."""

    def _read(self, user: str, token: str) -> Tuple[bool, int]:
        success, balance = read_balance(self.source, user, token)
        if not success:
            balance_read_failures_total.labels(policy=self.policy, path="mutation").inc()
            self.logger.warning(
                "Balance update failed",
                extra={"user": user, "token": token, "event_type": EventTypes.BALANCE_UPDATE_FAILED}
            )
            self.events.emit(EventTypes.BALANCE_UPDATE_FAILED, {"user": user, "token": token})
        return success, balance

    def _register(self, user: str, token: str) -> bool:
        registration = self.index.register(user, token)
        if not registration.pair:
            return False

        if registration.user:
            self.events.emit(EventTypes.USER_ADDED, {"user": user})
        if registration.token:
            self.events.emit(EventTypes.TOKEN_ADDED, {"token": token})
        self.events.emit(EventTypes.TOKEN_REGISTERED, {"user": user, "token": token})

        registrations_total.labels(policy=self.policy).inc()
        self.logger.info("Token registered", extra={"user": user, "token": token})
        return True


class CachedBalanceRegistrar(Registrar):
    """Policy A: balances are snapshotted on every sync and served from the cache"""

    policy = POLICY_CACHED

    def __init__(self, index: MembershipIndex, source: BalanceSource, events: EventBus,
                 cache: BalanceCache = None):
        super().__init__(index, source, events)
        self.cache = cache if cache is not None else BalanceCache()

    def sync_pair(self, user: str, token: str) -> int:
        """
        Refresh the cached balance of (user, token) and register the pair if new.

        A failed read still registers the pair, with a cached balance of 0.

        Returns:
            The balance now cached for the pair
        """
        _, balance = self._read(user, token)
        self.cache.set(user, token, balance)
        self._register(user, token)
        return balance


class LiveBalanceRegistrar(Registrar):
    """Policy B: the source decides membership, zero balances are pruned"""

    policy = POLICY_LIVE

    def sync_pair(self, user: str, token: str):
        success, balance = self._read(user, token)
        if not success:
            return

        registered = self.index.contains(user, token)
        if balance > 0 and not registered:
            self._register(user, token)
        elif balance == 0 and registered:
            self._remove(user, token)

    def _remove(self, user: str, token: str):
        if not self.index.remove(user, token):
            return
        self.events.emit(EventTypes.TOKEN_REMOVED, {"user": user, "token": token})
        removals_total.labels(policy=self.policy).inc()
        self.logger.info("Token removed", extra={"user": user, "token": token})
