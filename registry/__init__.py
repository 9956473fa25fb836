from registry.index import MembershipIndex, Registration
from registry.balances import BalanceCache
from registry.queries import QueryEngine
from registry.registrar import Registrar, CachedBalanceRegistrar, LiveBalanceRegistrar
from registry.token_registry import TokenRegistry, CachedTokenRegistry, LiveTokenRegistry, create_registry

__all__ = [
    "MembershipIndex",
    "Registration",
    "BalanceCache",
    "QueryEngine",
    "Registrar",
    "CachedBalanceRegistrar",
    "LiveBalanceRegistrar",
    "TokenRegistry",
    "CachedTokenRegistry",
    "LiveTokenRegistry",
    "create_registry",
]
