"""Balance source implementations, one per provider."""
from .alchemy import AlchemyBalanceSource
from .btc import BtcBalanceSource
from .etherscan import EtherscanBalanceSource

__all__ = ["AlchemyBalanceSource", "BtcBalanceSource", "EtherscanBalanceSource"]
