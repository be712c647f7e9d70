"""ETH and ERC-20 balance source backed by Alchemy JSON-RPC batches."""
from __future__ import annotations

import logging

from ..clients.alchemy import AlchemyClient
from ..models import AssetInfo, Symbol

logger = logging.getLogger(__name__)


class AlchemyBalanceSource:
    """Fetch one symbol's balances for every address in a single batch.

    Errors reported for individual batch entries zero only those addresses.
    """

    def __init__(
        self,
        symbol: Symbol,
        client: AlchemyClient,
        log: logging.Logger | None = None,
    ) -> None:
        self.symbol = symbol
        self._client = client
        self._log = log or logger

    async def get_balances(self, addresses: list[str]) -> list[AssetInfo]:
        if not addresses:
            return []
        if not self._client.api_key:
            self._log.error(
                "No Alchemy API key provided, %s balances left at zero",
                self.symbol.code.upper(),
            )
            return [AssetInfo.zero(addr) for addr in addresses]

        self._log.info(
            "Fetching %d %s addresses", len(addresses), self.symbol.code.upper()
        )
        try:
            if self.symbol.is_native:
                balances = await self._client.eth_balances(addresses)
            else:
                balances = await self._client.erc20_balances(
                    addresses, self.symbol.contract_address or ""
                )
        except Exception as e:
            self._log.error("Failed to fetch %s balances: %s", self.symbol.code, e)
            return [AssetInfo.zero(addr) for addr in addresses]

        return [
            AssetInfo.from_raw(addr, balances.get(addr, 0), self.symbol.decimals)
            for addr in addresses
        ]
