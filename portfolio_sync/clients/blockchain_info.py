"""blockchain.info balance API client."""
from __future__ import annotations

from ..constants import REQUEST_TIMEOUT_SECONDS
from .http import ProviderError, request_json

BLOCKCHAIN_INFO_BALANCE_URL = "https://blockchain.info/balance"


class BlockchainInfoClient:
    """Batch BTC balance lookups (``active=addr1|addr2``)."""

    def __init__(
        self,
        base_url: str = BLOCKCHAIN_INFO_BALANCE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout

    async def fetch_balances(self, addresses: list[str]) -> dict[str, int]:
        """Return the final balance in satoshi for every address."""
        if not addresses:
            return {}

        data = await request_json(
            "GET",
            self.base_url,
            params={"active": "|".join(addresses)},
            timeout=self.timeout,
            label="blockchain.info",
        )
        if not isinstance(data, dict):
            raise ProviderError("blockchain.info returned an unexpected payload")

        balances: dict[str, int] = {}
        for addr in addresses:
            info = data.get(addr) or {}
            balances[addr] = int(info.get("final_balance", 0))
        return balances
