"""Unit tests for the CLI: argument parsing, notifier wiring and commands."""
from __future__ import annotations

import asyncio
from dataclasses import replace
from functools import partial
from unittest.mock import AsyncMock, patch

import pytest

from portfolio_sync.cli import _run, build_notifiers, build_parser, sync_once, watch
from portfolio_sync.config import AppConfig, NotificationsConfig
from portfolio_sync.constants import BTC
from portfolio_sync.notifications import TelegramNotifier
from portfolio_sync.services import PortfolioService


class TestBuildParser:
    def test_sync_command(self) -> None:
        args = build_parser().parse_args(["sync"])
        assert args.command == "sync"

    def test_report_command(self) -> None:
        args = build_parser().parse_args(["report"])
        assert args.command == "report"

    def test_watch_command_default_interval(self) -> None:
        args = build_parser().parse_args(["watch"])
        assert args.command == "watch"
        assert args.interval is None

    def test_watch_command_custom_interval(self) -> None:
        args = build_parser().parse_args(["watch", "30"])
        assert args.interval == 30

    def test_config_flag(self) -> None:
        args = build_parser().parse_args(["--config", "/tmp/c.yaml", "sync"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "sync"])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        args = build_parser().parse_args([])
        assert args.command is None


class TestBuildNotifiers:
    def test_telegram_enabled(self, sample_app_config: AppConfig) -> None:
        notifiers = build_notifiers(sample_app_config)
        assert len(notifiers) == 1
        assert isinstance(notifiers[0], TelegramNotifier)

    def test_nothing_enabled(self, sample_app_config: AppConfig) -> None:
        config = replace(sample_app_config, notifications=NotificationsConfig())
        assert build_notifiers(config) == []


def _patched_service(source, prices: dict | None = None):
    """Patch the CLI's service class to use ``source`` and a fixed price table."""
    price_source = AsyncMock()
    price_source.get_prices = AsyncMock(return_value=prices or {})
    factory = partial(
        PortfolioService,
        symbols=[BTC],
        balance_sources_factory=lambda symbols, providers: [source],
        price_source_factory=lambda providers: price_source,
    )
    return patch("portfolio_sync.cli.PortfolioService", factory)


class TestSyncOnce:
    @pytest.mark.asyncio
    async def test_successful_round(
        self, sample_app_config: AppConfig, balance_source_factory
    ) -> None:
        source = balance_source_factory(BTC, {"A1": 100_000_000})

        with _patched_service(source, {"btc": {"usd": 50000.0}}):
            success, report = await sync_once(sample_app_config)

        assert success is True
        assert report.startswith("💰 Total: 50,000.00 USD")
        assert "[cold]" in report

    @pytest.mark.asyncio
    async def test_failed_round(
        self, sample_app_config: AppConfig, balance_source_factory
    ) -> None:
        source = balance_source_factory(BTC, error=RuntimeError("down"))

        with _patched_service(source):
            success, report = await sync_once(sample_app_config)

        assert success is False
        assert "Updated: never" in report

    @pytest.mark.asyncio
    async def test_sync_command_exit_code_on_failure(
        self, sample_app_config: AppConfig, balance_source_factory
    ) -> None:
        source = balance_source_factory(BTC, error=RuntimeError("down"))
        args = build_parser().parse_args(["sync"])

        with _patched_service(source), \
                patch("portfolio_sync.cli.load_config", return_value=sample_app_config), \
                patch("portfolio_sync.cli.configure_logging"):
            assert await _run(args) == 1

    @pytest.mark.asyncio
    async def test_sync_command_exit_code_on_success(
        self, sample_app_config: AppConfig, balance_source_factory
    ) -> None:
        source = balance_source_factory(BTC)
        args = build_parser().parse_args(["sync"])

        with _patched_service(source), \
                patch("portfolio_sync.cli.load_config", return_value=sample_app_config), \
                patch("portfolio_sync.cli.configure_logging"):
            assert await _run(args) == 0


class TestWatch:
    @pytest.mark.asyncio
    async def test_failed_round_alerts_notifiers(
        self, sample_app_config: AppConfig, balance_source_factory
    ) -> None:
        source = balance_source_factory(BTC, error=RuntimeError("down"))
        notifier = AsyncMock()
        alerted = asyncio.Event()
        notifier.send_alert = AsyncMock(side_effect=lambda *a, **kw: alerted.set())

        with _patched_service(source), \
                patch("portfolio_sync.cli.build_notifiers", return_value=[notifier]):
            runner = asyncio.ensure_future(watch(sample_app_config, interval=3600))
            try:
                await asyncio.wait_for(alerted.wait(), 2.0)
            finally:
                runner.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await runner

        _, kwargs = notifier.send_alert.call_args
        assert kwargs["subject"] == "⚠️ Sync failed"
