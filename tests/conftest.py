"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from portfolio_sync.config import (
    AppConfig,
    NotificationsConfig,
    PortfolioConfig,
    ProvidersConfig,
    TelegramConfig,
)
from portfolio_sync.constants import BTC, ETH, USDC
from portfolio_sync.models import AddressConfig, AssetInfo, Symbol


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_providers() -> ProvidersConfig:
    return ProvidersConfig(
        evm_provider="alchemy",
        alchemy_api_key="alchemy-key",
        etherscan_api_key="etherscan-key",
        request_timeout=5,
        throttle_interval=0.01,
    )


@pytest.fixture()
def btc_addresses() -> tuple[AddressConfig, ...]:
    return (
        AddressConfig(address="A1", tags=("cold",)),
        AddressConfig(address="A2", tags=()),
    )


@pytest.fixture()
def evm_addresses() -> tuple[AddressConfig, ...]:
    return (AddressConfig(address="0xE1", tags=("hot", "Main")),)


@pytest.fixture()
def sample_app_config(
    sample_providers: ProvidersConfig,
    btc_addresses: tuple[AddressConfig, ...],
    evm_addresses: tuple[AddressConfig, ...],
) -> AppConfig:
    return AppConfig(
        portfolio=PortfolioConfig(currency="USD", min_value=1.0, sync_interval_seconds=60),
        btc_addresses=btc_addresses,
        evm_addresses=evm_addresses,
        providers=sample_providers,
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    portfolio:
      currency: EUR
      min_value: 5
      sync_interval_seconds: 30
    addresses:
      btc:
        - address: bc1qtest
          tags: [cold]
        - bc1qplain
      evm:
        - address: "0xABC"
          tags: [hot, Main]
    providers:
      evm_provider: etherscan
      alchemy_api_key: "alc"
      etherscan_api_key: "eth"
      request_timeout: 7
      throttle_interval: 1.5
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: 999
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Source doubles
# ---------------------------------------------------------------------------


def make_balance_source(symbol: Symbol, balances: dict[str, int] | None = None,
                        error: Exception | None = None) -> AsyncMock:
    """AsyncMock balance source returning ``balances`` (raw units) per address."""
    source = AsyncMock()
    source.symbol = symbol

    async def _get_balances(addresses: list[str]) -> list[AssetInfo]:
        if error is not None:
            raise error
        return [
            AssetInfo.from_raw(addr, (balances or {}).get(addr, 0), symbol.decimals)
            for addr in addresses
        ]

    source.get_balances = AsyncMock(side_effect=_get_balances)
    return source


@pytest.fixture()
def balance_source_factory():
    return make_balance_source


@pytest.fixture()
def sample_prices() -> dict[str, dict[str, float]]:
    return {
        BTC.code: {"usd": 50000.0},
        ETH.code: {"usd": 3000.0},
        USDC.code: {"usd": 1.0},
    }


# ---------------------------------------------------------------------------
# aiohttp session double
# ---------------------------------------------------------------------------


def make_mock_session(
    data: Any = None, status: int = 200, error: Exception | None = None
) -> AsyncMock:
    """Mock aiohttp.ClientSession whose ``request`` returns ``data`` or raises."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=data)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    if error is not None:
        mock_session.request = MagicMock(side_effect=error)
    else:
        mock_session.request = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


@pytest.fixture()
def mock_session_factory():
    return make_mock_session
