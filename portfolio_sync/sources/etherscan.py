"""ETH and ERC-20 balance source backed by Etherscan."""
from __future__ import annotations

import asyncio
import logging

from ..clients.etherscan import EtherscanClient
from ..models import AssetInfo, Symbol
from ..throttler import Throttler

logger = logging.getLogger(__name__)

# balancemulti accepts at most 20 addresses per call
BALANCEMULTI_CHUNK = 20


class EtherscanBalanceSource:
    """Native balances via ``balancemulti``; token balances one address at a time.

    Token lookups go through the shared throttler so consecutive calls are
    spaced by its interval. A failed call zeroes only the addresses it covered.
    """

    def __init__(
        self,
        symbol: Symbol,
        client: EtherscanClient,
        throttler: Throttler,
        log: logging.Logger | None = None,
    ) -> None:
        self.symbol = symbol
        self._client = client
        self._throttler = throttler
        self._log = log or logger

    async def get_balances(self, addresses: list[str]) -> list[AssetInfo]:
        if not addresses:
            return []
        if not self._client.api_key:
            self._log.error(
                "No Etherscan API key provided, %s balances left at zero",
                self.symbol.code.upper(),
            )
            return [AssetInfo.zero(addr) for addr in addresses]

        if self.symbol.is_native:
            return await self._native_balances(addresses)
        return await self._token_balances(addresses)

    async def _native_balances(self, addresses: list[str]) -> list[AssetInfo]:
        results: list[AssetInfo] = []
        for start in range(0, len(addresses), BALANCEMULTI_CHUNK):
            chunk = addresses[start:start + BALANCEMULTI_CHUNK]
            try:
                balances = await self._throttler.throttle(
                    lambda chunk=chunk: self._client.balance_multi(chunk)
                )
            except Exception as e:
                self._log.error(
                    "[%s] balancemulti failed for %d addresses: %s",
                    self.symbol.code, len(chunk), e,
                )
                results.extend(AssetInfo.zero(addr) for addr in chunk)
                continue

            results.extend(
                AssetInfo.from_raw(addr, balances.get(addr, 0), self.symbol.decimals)
                for addr in chunk
            )
        return results

    async def _token_balances(self, addresses: list[str]) -> list[AssetInfo]:
        self._log.info(
            "[%s] Fetching token balances for %d addresses",
            self.symbol.code, len(addresses),
        )
        return list(
            await asyncio.gather(*(self._token_balance(addr) for addr in addresses))
        )

    async def _token_balance(self, address: str) -> AssetInfo:
        contract = self.symbol.contract_address or ""
        try:
            balance = await self._throttler.throttle(
                lambda: self._client.token_balance(address, contract)
            )
        except Exception as e:
            self._log.error("[%s] Error for %s: %s", self.symbol.code, address, e)
            return AssetInfo.zero(address)

        return AssetInfo.from_raw(address, balance, self.symbol.decimals)
