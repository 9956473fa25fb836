from balance_source.source import BalanceSource, TokenMover, read_balance
from balance_source.stub import InMemoryBalanceSource, InMemoryTokenMover

__all__ = ["BalanceSource", "TokenMover", "read_balance", "InMemoryBalanceSource", "InMemoryTokenMover"]
