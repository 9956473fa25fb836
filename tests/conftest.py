# tests/conftest.py
"""
Shared fixtures for the test suite.

Key design points
─────────────────
1.  Make project-root importable so `from registry import …` works no
    matter where pytest is launched.
2.  Provide a fresh in-memory balance source per test; tests set balances
    and inject failures on it directly.
3.  Every registry gets its own EventBus so emitted signals never leak
    between tests.
"""

from __future__ import annotations
import logging
import pathlib
import sys
import pytest

# ─────────────────────────────────────────────────────────────────────────────
#  Ensure the repo root is on sys.path
# ─────────────────────────────────────────────────────────────────────────────
ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Only now import modules that live in the repo
from balance_source import InMemoryBalanceSource, InMemoryTokenMover
from events import EventBus
from registry import CachedTokenRegistry, LiveTokenRegistry


def addr(n: int) -> str:
    """Deterministic 20-byte address for tests."""
    return "0x" + format(n, "040x")


ALICE = addr(0xA1)
BOB = addr(0xB2)
CAROL = addr(0xC3)
DAVE = addr(0xD4)
T1 = addr(0x7001)
T2 = addr(0x7002)
T3 = addr(0x7003)
ZERO = addr(0)


# ────────────────────────────── balance source ──────────────────────────────
@pytest.fixture
def source():
    return InMemoryBalanceSource()


@pytest.fixture
def mover(source):
    return InMemoryTokenMover(source)


# ──────────────────────────────── registries ────────────────────────────────
@pytest.fixture
def cached(source, mover):
    """Policy A registry with a token mover attached."""
    return CachedTokenRegistry(source, events=EventBus(), mover=mover)


@pytest.fixture
def live(source):
    """Policy B registry."""
    return LiveTokenRegistry(source, events=EventBus())


@pytest.fixture(params=["cached", "live"])
def registry(request, source, mover):
    """Either policy, for behaviour both must share."""
    if request.param == "cached":
        return CachedTokenRegistry(source, events=EventBus(), mover=mover)
    return LiveTokenRegistry(source, events=EventBus())


@pytest.fixture
def scenario_balances(source):
    """T1 balances 100 / 0 / 50 for Alice / Bob / Carol."""
    source.set_balance(ALICE, T1, 100)
    source.set_balance(BOB, T1, 0)
    source.set_balance(CAROL, T1, 50)
    return source


# ───────────────────────── root logger isolation ────────────────────────────
@pytest.fixture
def restore_root_logging():
    """setup_logging() replaces root handlers; put the originals back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
