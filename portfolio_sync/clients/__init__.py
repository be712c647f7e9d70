"""HTTP clients for third-party balance and price providers."""
from .alchemy import AlchemyClient
from .blockchain_info import BlockchainInfoClient
from .etherscan import EtherscanClient
from .http import ProviderError

__all__ = ["AlchemyClient", "BlockchainInfoClient", "EtherscanClient", "ProviderError"]
