"""Command-line host for the portfolio sync engine."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import AppConfig, load_config
from .constants import ALL_SYMBOLS
from .interfaces.notifier import Notifier
from .logging_setup import configure_logging
from .notifications import TelegramNotifier
from .services import PortfolioService, format_summary, summarize

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="portfolio-sync",
        description="Multi-chain crypto portfolio tracker",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("sync", help="Run one sync round and print the portfolio")
    sub.add_parser("report", help="Run one sync round and send the portfolio report")

    watch_parser = sub.add_parser("watch", help="Keep syncing on a timer")
    watch_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Sync interval in seconds (overrides config)",
    )

    return parser


def build_notifiers(config: AppConfig) -> list[Notifier]:
    notifiers: list[Notifier] = []
    if config.notifications.telegram.enabled:
        notifiers.append(
            TelegramNotifier(
                config.notifications.telegram,
                timeout=config.providers.request_timeout,
            )
        )
    return notifiers


def _configure(service: PortfolioService, config: AppConfig, interval: int | None) -> None:
    service.configure(
        config.portfolio.currency,
        config.portfolio.min_value,
        config.btc_addresses,
        config.evm_addresses,
        config.providers,
        interval_seconds=interval or config.portfolio.sync_interval_seconds,
    )


def _report(service: PortfolioService) -> str:
    summary = summarize(
        service.get_state(),
        ALL_SYMBOLS,
        service.get_currency(),
        service.get_min_value(),
    )
    return format_summary(summary)


async def sync_once(config: AppConfig) -> tuple[bool, str]:
    """Configure, wait for the first round and return ``(success, report)``."""
    service = PortfolioService()
    done = asyncio.Event()
    outcome: list[bool] = []

    def _on_done(success: bool) -> None:
        outcome.append(success)
        done.set()

    service.on_sync_done(_on_done)
    _configure(service, config, None)
    try:
        await done.wait()
    finally:
        await service.close()

    return outcome[0], _report(service)


async def watch(config: AppConfig, interval: int | None = None) -> None:
    """Sync forever; failed rounds are pushed to the notifiers."""
    service = PortfolioService()
    notifiers = build_notifiers(config)

    async def _on_done(success: bool) -> None:
        if success:
            logger.info("Portfolio value: %s", _report(service).splitlines()[0])
            return
        for notifier in notifiers:
            await notifier.send_alert(
                "Portfolio sync failed, showing the previous snapshot.",
                subject="⚠️ Sync failed",
            )

    service.on_sync_done(_on_done)
    _configure(service, config, interval)
    logger.info(
        "Watching portfolio (syncing every %d seconds)",
        interval or config.portfolio.sync_interval_seconds,
    )
    await service.run_forever()


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command; return the process exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "sync":
        success, report = await sync_once(config)
        print(report)
        return 0 if success else 1

    if args.command == "report":
        success, report = await sync_once(config)
        notifiers = build_notifiers(config)
        if not notifiers:
            logger.warning("No notifiers enabled, printing report instead")
            print(report)
        for notifier in notifiers:
            await notifier.send_log(report, silent=False)
        return 0 if success else 1

    if args.command == "watch":
        await watch(config, args.interval)
        return 0

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
