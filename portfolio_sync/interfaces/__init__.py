"""Protocol interfaces for the portfolio sync engine."""
from .balance_source import BalanceSource
from .notifier import Notifier
from .price_source import PriceSource

__all__ = ["BalanceSource", "Notifier", "PriceSource"]
