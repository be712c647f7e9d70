"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .constants import (
    REQUEST_TIMEOUT_SECONDS,
    SYNC_INTERVAL_SECONDS,
    THROTTLE_INTERVAL_SECONDS,
)
from .models import AddressConfig

logger = logging.getLogger(__name__)

EVM_PROVIDERS = ("alchemy", "etherscan")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PortfolioConfig:
    currency: str = "USD"
    min_value: float = 0.0
    sync_interval_seconds: int = SYNC_INTERVAL_SECONDS


@dataclass(frozen=True)
class ProvidersConfig:
    evm_provider: str = "alchemy"
    alchemy_api_key: str = ""
    etherscan_api_key: str = ""
    request_timeout: int = REQUEST_TIMEOUT_SECONDS
    throttle_interval: float = THROTTLE_INTERVAL_SECONDS


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    portfolio: PortfolioConfig = field(default_factory=PortfolioConfig)
    btc_addresses: tuple[AddressConfig, ...] = ()
    evm_addresses: tuple[AddressConfig, ...] = ()
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_portfolio(raw: dict[str, Any]) -> PortfolioConfig:
    return PortfolioConfig(
        currency=str(raw.get("currency", "USD")).strip(),
        min_value=float(raw.get("min_value", 0.0)),
        sync_interval_seconds=int(
            raw.get("sync_interval_seconds", SYNC_INTERVAL_SECONDS)
        ),
    )


def _build_addresses(raw: list[Any] | None) -> tuple[AddressConfig, ...]:
    """Accept either plain strings or ``{address, tags}`` mappings."""
    addresses: list[AddressConfig] = []
    for entry in raw or []:
        if isinstance(entry, str):
            addresses.append(AddressConfig(address=entry.strip()))
            continue
        if not isinstance(entry, dict):
            # YAML reads an unquoted 0x... address as an integer
            raise ValueError(f"Address {entry!r} must be a quoted string")
        addresses.append(
            AddressConfig(
                address=str(entry.get("address", "")).strip(),
                tags=tuple(str(t) for t in entry.get("tags", []) or []),
            )
        )
    return tuple(addresses)


def _build_providers(raw: dict[str, Any]) -> ProvidersConfig:
    return ProvidersConfig(
        evm_provider=str(raw.get("evm_provider", "alchemy")).lower(),
        alchemy_api_key=raw.get("alchemy_api_key", "") or "",
        etherscan_api_key=raw.get("etherscan_api_key", "") or "",
        request_timeout=int(raw.get("request_timeout", REQUEST_TIMEOUT_SECONDS)),
        throttle_interval=float(
            raw.get("throttle_interval", THROTTLE_INTERVAL_SECONDS)
        ),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)
    addresses = raw.get("addresses", {}) or {}

    cfg = AppConfig(
        portfolio=_build_portfolio(raw.get("portfolio", {}) or {}),
        btc_addresses=_build_addresses(addresses.get("btc")),
        evm_addresses=_build_addresses(addresses.get("evm")),
        providers=_build_providers(raw.get("providers", {}) or {}),
        notifications=_build_notifications(raw.get("notifications", {}) or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.btc_addresses and not cfg.evm_addresses:
        raise ValueError("At least one address must be configured")

    for entry in (*cfg.btc_addresses, *cfg.evm_addresses):
        if not entry.address:
            raise ValueError(f"Address entry with tags {list(entry.tags)} is empty")

    if not cfg.portfolio.currency:
        raise ValueError("Currency must not be empty")
    if cfg.portfolio.min_value < 0:
        raise ValueError("min_value must not be negative")
    if cfg.portfolio.sync_interval_seconds <= 0:
        raise ValueError("sync_interval_seconds must be positive")

    if cfg.providers.evm_provider not in EVM_PROVIDERS:
        raise ValueError(
            f"Unknown evm_provider '{cfg.providers.evm_provider}' "
            f"(expected one of {', '.join(EVM_PROVIDERS)})"
        )
