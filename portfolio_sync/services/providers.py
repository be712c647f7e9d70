"""Provider registry: builds balance and price sources from credentials."""
from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from ..clients.alchemy import AlchemyClient
from ..clients.blockchain_info import BlockchainInfoClient
from ..clients.etherscan import EtherscanClient
from ..config import ProvidersConfig
from ..constants import BITCOIN
from ..interfaces.balance_source import BalanceSource
from ..interfaces.price_source import PriceSource
from ..models import Symbol
from ..oracles.alchemy import AlchemyPriceOracle
from ..sources.alchemy import AlchemyBalanceSource
from ..sources.btc import BtcBalanceSource
from ..sources.etherscan import EtherscanBalanceSource
from ..throttler import Throttler

logger = logging.getLogger(__name__)


def _alchemy_sources(
    symbols: Sequence[Symbol], providers: ProvidersConfig
) -> list[BalanceSource]:
    client = AlchemyClient(providers.alchemy_api_key, timeout=providers.request_timeout)
    return [AlchemyBalanceSource(symbol, client) for symbol in symbols]


def _etherscan_sources(
    symbols: Sequence[Symbol], providers: ProvidersConfig
) -> list[BalanceSource]:
    client = EtherscanClient(
        providers.etherscan_api_key, timeout=providers.request_timeout
    )
    # every Etherscan source draws on the same API key quota
    throttler = Throttler(providers.throttle_interval)
    return [EtherscanBalanceSource(symbol, client, throttler) for symbol in symbols]


# Registry of EVM balance source factories keyed by provider name.
_EVM_SOURCE_FACTORIES: dict[str, Any] = {
    "alchemy": _alchemy_sources,
    "etherscan": _etherscan_sources,
}


def build_balance_sources(
    symbols: Sequence[Symbol], providers: ProvidersConfig
) -> list[BalanceSource]:
    """Build one balance source per symbol, in symbol order."""
    factory = _EVM_SOURCE_FACTORIES.get(providers.evm_provider)
    if factory is None:
        raise ValueError(f"No balance source factory for '{providers.evm_provider}'")

    evm_symbols = [s for s in symbols if s.chain != BITCOIN]
    evm_sources = iter(factory(evm_symbols, providers))
    btc_client = BlockchainInfoClient(timeout=providers.request_timeout)

    sources: list[BalanceSource] = []
    for symbol in symbols:
        if symbol.chain == BITCOIN:
            sources.append(BtcBalanceSource(btc_client, symbol))
        else:
            sources.append(next(evm_sources))

    logger.info(
        "Built %d balance sources (EVM provider: %s)",
        len(sources), providers.evm_provider,
    )
    return sources


def build_price_source(providers: ProvidersConfig) -> PriceSource:
    return AlchemyPriceOracle(
        AlchemyClient(providers.alchemy_api_key, timeout=providers.request_timeout)
    )


BalanceSourcesFactory = Callable[[Sequence[Symbol], ProvidersConfig], list[BalanceSource]]
PriceSourceFactory = Callable[[ProvidersConfig], PriceSource]
