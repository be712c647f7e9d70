"""Service modules"""
from .portfolio import PortfolioService
from .providers import build_balance_sources, build_price_source
from .summary import PortfolioSummary, format_summary, summarize

__all__ = [
    "PortfolioService",
    "PortfolioSummary",
    "build_balance_sources",
    "build_price_source",
    "format_summary",
    "summarize",
]
