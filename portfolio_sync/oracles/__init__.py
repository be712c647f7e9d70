"""Price oracle implementations."""
from .alchemy import AlchemyPriceOracle

__all__ = ["AlchemyPriceOracle"]
