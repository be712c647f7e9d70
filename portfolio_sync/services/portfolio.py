"""Portfolio sync engine: periodic, single-flight balance and price sync."""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Sequence

from ..config import ProvidersConfig
from ..constants import ALL_SYMBOLS, BITCOIN, SYNC_INTERVAL_SECONDS
from ..interfaces.balance_source import BalanceSource
from ..interfaces.price_source import PriceSource
from ..models import AddressConfig, AssetInfo, PortfolioState, PriceTable, Symbol, price_of
from .providers import (
    BalanceSourcesFactory,
    PriceSourceFactory,
    build_balance_sources,
    build_price_source,
)

logger = logging.getLogger(__name__)

SyncListener = Callable[[bool], "Awaitable[Any] | None"]


class PortfolioService:
    """Owns the portfolio snapshot and keeps it in sync with the providers.

    At most one sync round runs at a time. A round fans out to the price
    source and every balance source concurrently, waits for all of them to
    settle and then swaps ``prices`` and ``assets`` in one step. Sources
    degrade on their own errors; an exception escaping a source fails the
    round and leaves the previous snapshot in place.
    """

    def __init__(
        self,
        symbols: Sequence[Symbol] = ALL_SYMBOLS,
        interval_seconds: float = SYNC_INTERVAL_SECONDS,
        balance_sources_factory: BalanceSourcesFactory = build_balance_sources,
        price_source_factory: PriceSourceFactory = build_price_source,
        log: logging.Logger | None = None,
    ) -> None:
        self._symbols: tuple[Symbol, ...] = tuple(symbols)
        self._interval = interval_seconds
        self._balance_sources_factory = balance_sources_factory
        self._price_source_factory = price_source_factory
        self._log = log or logger

        self._state = PortfolioState()
        self._currency = "USD"
        self._min_value = 0.0
        self._btc_addresses: tuple[AddressConfig, ...] = ()
        self._evm_addresses: tuple[AddressConfig, ...] = ()

        self._balance_sources: list[BalanceSource] = []
        self._price_source: PriceSource | None = None
        self._generation = 0

        self._listeners: list[SyncListener] = []
        self._timer: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Host API
    # ------------------------------------------------------------------

    def configure(
        self,
        currency: str,
        min_value: float,
        btc_addresses: Sequence[AddressConfig],
        evm_addresses: Sequence[AddressConfig],
        providers: ProvidersConfig,
        interval_seconds: float | None = None,
    ) -> None:
        """Replace the whole configuration, restart the timer and sync now.

        Must be called from inside a running event loop.
        """
        self._currency = currency
        self._min_value = min_value
        self._btc_addresses = tuple(btc_addresses)
        self._evm_addresses = tuple(evm_addresses)
        if interval_seconds is not None:
            self._interval = interval_seconds

        self._balance_sources = list(
            self._balance_sources_factory(self._symbols, providers)
        )
        self._price_source = self._price_source_factory(providers)
        self._generation += 1

        # Placeholders so the host can render addresses before the first round
        self._state.prices = {}
        self._state.assets = {
            symbol.code: [
                AssetInfo(
                    address=cfg.address, balance=0, balance_formatted=0.0, tags=cfg.tags
                )
                for cfg in self._addresses_for(symbol)
            ]
            for symbol in self._symbols
        }

        self._log.info(
            "Configured %d BTC and %d EVM addresses across %d symbols (%s)",
            len(self._btc_addresses),
            len(self._evm_addresses),
            len(self._symbols),
            currency.upper(),
        )

        self._start_sync_loop()
        self._spawn_round()

    def get_state(self) -> PortfolioState:
        return self._state

    def get_currency(self) -> str:
        return self._currency

    def get_min_value(self) -> float:
        return self._min_value

    def on_sync_done(self, callback: SyncListener) -> None:
        """Register ``callback(success)``; called once per completed round."""
        self._listeners.append(callback)

    async def sync_now(self) -> bool:
        """Run one sync round unless one is already in flight.

        Returns True only when this call ran a round that updated the
        snapshot.
        """
        if self._state.is_syncing:
            self._log.debug("Sync already in progress, skipping")
            return False
        self._state.is_syncing = True

        success = False
        stale = False
        try:
            success, stale = await self._run_round()
        except Exception as e:
            self._log.error("Sync failed: %s", e)
            success = False
        finally:
            self._state.is_syncing = False
            self._notify(success)

        if stale:
            self._spawn_round()
        return success

    def stop(self) -> None:
        """Cancel the periodic timer; a round already started runs to completion."""
        if self._timer is not None:
            self._log.info("Stopping sync loop")
            self._timer.cancel()
            self._timer = None

    async def run_forever(self) -> None:
        """Keep the service alive while the timer runs; close on exit.

        Returns once ``stop()`` is called. Cancelling the caller also closes
        the service.
        """
        if self._timer is None:
            raise RuntimeError("configure() must be called before run_forever()")

        self._log.info("Running sync loop (every %s seconds)", self._interval)
        try:
            while self._timer is not None and not self._timer.done():
                await asyncio.sleep(min(self._interval, 1.0))
        finally:
            await self.close()

    async def close(self) -> None:
        """Stop the timer and wait for outstanding rounds and listeners."""
        self.stop()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ------------------------------------------------------------------
    # Round internals
    # ------------------------------------------------------------------

    def _addresses_for(self, symbol: Symbol) -> tuple[AddressConfig, ...]:
        return self._btc_addresses if symbol.chain == BITCOIN else self._evm_addresses

    async def _run_round(self) -> tuple[bool, bool]:
        """Fetch, merge and swap. Returns ``(success, stale)``."""
        if self._price_source is None:
            raise RuntimeError("configure() must be called before syncing")

        generation = self._generation
        currency = self._currency
        price_source = self._price_source
        sources = list(self._balance_sources)
        configs = [self._addresses_for(source.symbol) for source in sources]

        results = await asyncio.gather(
            price_source.get_prices(currency, self._symbols),
            *(
                source.get_balances([cfg.address for cfg in cfg_list])
                for source, cfg_list in zip(sources, configs)
            ),
            return_exceptions=True,
        )

        if generation != self._generation:
            self._log.info("Configuration changed during sync, discarding results")
            return False, True

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for failure in failures:
                self._log.error("Sync failed: %r", failure)
            return False, False

        prices: PriceTable = results[0]
        assets = {
            source.symbol.code: self._merge(source.symbol, infos, cfg_list, prices, currency)
            for source, cfg_list, infos in zip(sources, configs, results[1:])
        }

        # No await between these assignments: readers never see a mixed snapshot
        self._state.prices = prices
        self._state.assets = assets
        self._state.last_sync_time = datetime.now(timezone.utc)

        self._log.info("Sync finished at %s", self._state.last_sync_time.isoformat())
        return True, False

    @staticmethod
    def _merge(
        symbol: Symbol,
        infos: list[AssetInfo],
        configs: Sequence[AddressConfig],
        prices: PriceTable,
        currency: str,
    ) -> list[AssetInfo]:
        """Re-attach tags by address and value each entry at the round's price."""
        tags_by_address: dict[str, tuple[str, ...]] = {}
        for cfg in configs:
            tags_by_address.setdefault(cfg.address, cfg.tags)

        price = price_of(prices, symbol.code, currency)
        return [
            replace(
                info,
                value=info.balance_formatted * price,
                tags=tags_by_address.get(info.address, ()),
            )
            for info in infos
        ]

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _start_sync_loop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._sync_loop())

    async def _sync_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._spawn_round()

    def _spawn_round(self) -> None:
        self._track(asyncio.get_running_loop().create_task(self.sync_now()))

    def _track(self, task: asyncio.Task) -> None:
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _notify(self, success: bool) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(success)
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._track(task)
                    task.add_done_callback(self._log_listener_error)
            except Exception as e:
                self._log.error("Sync listener failed: %s", e)

    def _log_listener_error(self, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            self._log.error("Sync listener failed: %s", task.exception())
