"""
Public surface of the token holder registry.

A registry owns its MembershipIndex (and, for the cached policy, its
BalanceCache) and serializes every call behind one re-entrant lock, so no caller
ever observes a half-applied initialize. Arguments are validated in full before
the lock is taken; a rejected call raises InvalidArgumentError with no effects.
There is no access control: any caller may invoke the mutation entry points.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from balance_source.source import BalanceSource, TokenMover, read_balance
from config.config import DEFAULT_MAX_ITERATIONS, POLICY_CACHED, POLICY_LIVE, REGISTRY_POLICY
from errors.exceptions import InvalidArgumentError, RegistryError
from events.event_bus import EventBus
from log_utils import get_logger, log_performance
from models.validation import (
    BalanceQuery,
    BoundedQuery,
    InitializeBalancesRequest,
    InitializeTokensRequest,
    TokenSummaryQuery,
    TopHoldersQuery,
    TransferRequest,
    UserRequest,
    validate_request,
)
from monitoring.metrics import balance_read_failures_total
from registry.balances import BalanceCache
from registry.index import MembershipIndex
from registry.queries import QueryEngine
from registry.registrar import CachedBalanceRegistrar, LiveBalanceRegistrar, Registrar

logger = get_logger(__name__)


class TokenRegistry(ABC):
    """Index, registrar and query engine behind one lock"""

    policy: Optional[str] = None

    def __init__(self, source: BalanceSource, events: Optional[EventBus] = None,
                 default_max_iterations: int = DEFAULT_MAX_ITERATIONS):
        self.source = source
        self.events = events if events is not None else EventBus()
        self.default_max_iterations = default_max_iterations
        self.index = MembershipIndex()
        self.registrar = self._create_registrar()
        self.queries = QueryEngine(self.index, self._read_balance)
        self.logger = logger.with_context(policy=self.policy)
        self._lock = threading.RLock()

    @abstractmethod
    def _create_registrar(self) -> Registrar:
        """Build the registrar that applies this policy to the index."""

    @abstractmethod
    def _read_balance(self, user: str, token: str) -> int:
        """Balance served to queries; never raises."""

    def _bound(self, max_iterations: Optional[int]) -> int:
        if max_iterations is None:
            max_iterations = self.default_max_iterations
        return validate_request(BoundedQuery, max_iterations=max_iterations).max_iterations

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @log_performance(logger, "initialize_balances")
    def initialize_balances(self, token: str, users: List[str]) -> None:
        """Sync `token` for every user in `users`, emitting signals as state changes."""
        request = validate_request(InitializeBalancesRequest, token=token, users=users)
        with self._lock:
            self.registrar.initialize_balances(request.token, request.users)

    @log_performance(logger, "initialize_tokens")
    def initialize_tokens(self, user: str, tokens: List[str]) -> None:
        """Sync every token in `tokens` for `user`, emitting signals as state changes."""
        request = validate_request(InitializeTokensRequest, user=user, tokens=tokens)
        with self._lock:
            self.registrar.initialize_tokens(request.user, request.tokens)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_tokens(self, user: str) -> List[str]:
        request = validate_request(UserRequest, user=user)
        with self._lock:
            return self.queries.tokens_of(request.user)

    def get_balance(self, user: str, token: str) -> int:
        request = validate_request(BalanceQuery, user=user, token=token)
        with self._lock:
            return self.queries.balance_of(request.user, request.token)

    def get_all_balances(self, user: str) -> Tuple[List[str], List[int]]:
        request = validate_request(UserRequest, user=user)
        with self._lock:
            return self.queries.all_balances(request.user)

    def get_all_tokens(self, max_iterations: Optional[int] = None) -> List[str]:
        bound = self._bound(max_iterations)
        with self._lock:
            return self.queries.all_tokens(bound)

    def get_all_users(self, max_iterations: Optional[int] = None) -> List[str]:
        bound = self._bound(max_iterations)
        with self._lock:
            return self.queries.all_users(bound)

    def get_top_holders(self, token: str, n: int,
                        max_iterations: Optional[int] = None) -> Tuple[List[str], List[int]]:
        if max_iterations is None:
            max_iterations = self.default_max_iterations
        request = validate_request(TopHoldersQuery, token=token, n=n, max_iterations=max_iterations)
        with self._lock:
            return self.queries.top_holders(request.token, request.n, request.max_iterations)

    def get_token_summary(self, token: str, max_iterations: Optional[int] = None) -> Tuple[int, int]:
        if max_iterations is None:
            max_iterations = self.default_max_iterations
        request = validate_request(TokenSummaryQuery, token=token, max_iterations=max_iterations)
        with self._lock:
            return self.queries.token_summary(request.token, request.max_iterations)


class CachedTokenRegistry(TokenRegistry):
    """
    Policy A: queries read the snapshot taken by the last initialize (or transfer)
    touching each pair. Staleness is unbounded until the pair is synced again.
    """

    policy = POLICY_CACHED

    def __init__(self, source: BalanceSource, events: Optional[EventBus] = None,
                 default_max_iterations: int = DEFAULT_MAX_ITERATIONS,
                 mover: Optional[TokenMover] = None):
        self.cache = BalanceCache()
        self.mover = mover
        super().__init__(source, events, default_max_iterations)

    def _create_registrar(self) -> Registrar:
        return CachedBalanceRegistrar(self.index, self.source, self.events, self.cache)

    def _read_balance(self, user: str, token: str) -> int:
        return self.cache.get(user, token)

    @log_performance(logger, "transfer")
    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        """
        Hand the move to the configured TokenMover, then refresh both parties.

        A TransferError from the mover propagates and leaves the registry untouched.
        """
        request = validate_request(
            TransferRequest, token=token, sender=sender, recipient=recipient, amount=amount
        )
        if self.mover is None:
            raise RegistryError("No token mover configured", "TRANSFER_UNAVAILABLE")
        with self._lock:
            self.mover.transfer(request.token, request.sender, request.recipient, request.amount)
            self.registrar.sync_pair(request.sender, request.token)
            self.registrar.sync_pair(request.recipient, request.token)
            self.logger.info(
                f"Transferred {request.amount}",
                extra={"token": request.token, "user": request.sender, "recipient": request.recipient}
            )


class LiveTokenRegistry(TokenRegistry):
    """Policy B: every balance is read from the source at query time."""

    policy = POLICY_LIVE

    def _create_registrar(self) -> Registrar:
        return LiveBalanceRegistrar(self.index, self.source, self.events)

    def _read_balance(self, user: str, token: str) -> int:
        success, balance = read_balance(self.source, user, token)
        if not success:
            balance_read_failures_total.labels(policy=self.policy, path="query").inc()
        return balance


_REGISTRY_CLASSES = {
    POLICY_CACHED: CachedTokenRegistry,
    POLICY_LIVE: LiveTokenRegistry,
}


def create_registry(source: BalanceSource, policy: Optional[str] = None, **kwargs) -> TokenRegistry:
    """Build a registry for `policy` ("cached" or "live"; defaults to TOKEN_REGISTRY_POLICY)."""
    policy = policy or REGISTRY_POLICY
    registry_class = _REGISTRY_CLASSES.get(policy)
    if registry_class is None:
        raise InvalidArgumentError(
            f"Unknown registry policy: {policy}",
            details={"policy": f"must be one of {', '.join(_REGISTRY_CLASSES)}"}
        )
    return registry_class(source, **kwargs)
