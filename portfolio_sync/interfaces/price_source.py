"""Price source protocol: fiat price feed abstraction."""
from typing import Protocol, Sequence

from ..models import PriceTable, Symbol


class PriceSource(Protocol):
    """Abstract interface for fetching fiat prices of tracked symbols."""

    async def get_prices(
        self, currency: str, symbols: Sequence[Symbol]
    ) -> PriceTable: ...
