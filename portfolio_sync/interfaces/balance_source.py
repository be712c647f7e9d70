"""Balance source protocol: per-asset on-chain balance lookup."""
from typing import Protocol

from ..models import AssetInfo, Symbol


class BalanceSource(Protocol):
    """Fetch raw balances of one symbol for a list of addresses.

    Implementations return one AssetInfo per input address, in input order,
    and never raise: failures degrade to zero-balance entries.
    """

    symbol: Symbol

    async def get_balances(self, addresses: list[str]) -> list[AssetInfo]: ...
