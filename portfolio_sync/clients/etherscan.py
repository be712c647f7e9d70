"""Etherscan v2 account API client."""
from __future__ import annotations

from typing import Any

from ..constants import REQUEST_TIMEOUT_SECONDS
from .http import ProviderError, request_json

ETHERSCAN_API_URL = "https://api.etherscan.io/v2/api"
MAINNET_CHAIN_ID = 1


class EtherscanClient:
    """Etherscan account endpoints.

    ``balancemulti`` is batched; ``tokenbalance`` takes a single address, so
    callers should route it through a Throttler.
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        chain_id: int = MAINNET_CHAIN_ID,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.chain_id = chain_id

    async def _call(self, **params: Any) -> Any:
        query = {
            "chainid": self.chain_id,
            "module": "account",
            "tag": "latest",
            "apikey": self.api_key,
            **params,
        }
        data = await request_json(
            "GET", ETHERSCAN_API_URL, params=query, timeout=self.timeout,
            label="Etherscan",
        )
        if not isinstance(data, dict):
            raise ProviderError("Etherscan returned an unexpected payload")
        if str(data.get("status")) != "1":
            raise ProviderError(
                f"Etherscan {params.get('action')} failed: "
                f"{data.get('message')} ({data.get('result')})"
            )
        return data.get("result")

    async def balance_multi(self, addresses: list[str]) -> dict[str, int]:
        """Native ETH balances in wei for up to 20 addresses."""
        if not addresses:
            return {}

        result = await self._call(action="balancemulti", address=",".join(addresses))
        by_account = {
            str(r.get("account", "")).lower(): int(r.get("balance", 0) or 0)
            for r in result or []
        }
        return {addr: by_account.get(addr.lower(), 0) for addr in addresses}

    async def token_balance(self, address: str, contract_address: str) -> int:
        """ERC-20 balance in raw units for one address."""
        result = await self._call(
            action="tokenbalance",
            contractaddress=contract_address,
            address=address,
        )
        return int(result or 0)
