"""Bitcoin balance source backed by blockchain.info."""
from __future__ import annotations

import logging

from ..clients.blockchain_info import BlockchainInfoClient
from ..constants import BTC
from ..models import AssetInfo, Symbol

logger = logging.getLogger(__name__)


class BtcBalanceSource:
    """Fetch BTC balances in one batch request.

    blockchain.info answers for the whole batch, so a failed request zeroes
    every address in it.
    """

    def __init__(
        self,
        client: BlockchainInfoClient | None = None,
        symbol: Symbol = BTC,
        log: logging.Logger | None = None,
    ) -> None:
        self.symbol = symbol
        self._client = client or BlockchainInfoClient()
        self._log = log or logger

    async def get_balances(self, addresses: list[str]) -> list[AssetInfo]:
        if not addresses:
            return []

        self._log.info("Fetching %d BTC addresses", len(addresses))
        try:
            balances = await self._client.fetch_balances(addresses)
        except Exception as e:
            self._log.error("Failed to fetch BTC balances: %s", e)
            return [AssetInfo.zero(addr) for addr in addresses]

        return [
            AssetInfo.from_raw(addr, balances.get(addr, 0), self.symbol.decimals)
            for addr in addresses
        ]
