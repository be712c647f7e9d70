"""Portfolio summary: totals, group split and a plain-text report."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from ..models import AssetInfo, PortfolioState, Symbol, price_of


@dataclass(frozen=True)
class SymbolSummary:
    """Totals for one symbol plus the rows worth displaying."""

    symbol: Symbol
    price: float
    total_balance: float
    total_value: float
    rows: tuple[AssetInfo, ...] = ()


@dataclass(frozen=True)
class PortfolioSummary:
    currency: str
    total_value: float
    symbols: tuple[SymbolSummary, ...] = ()
    group_shares: dict[str, float] = field(default_factory=dict)
    last_sync_time: datetime | None = None
    is_syncing: bool = False


def summarize(
    state: PortfolioState,
    symbols: Sequence[Symbol],
    currency: str,
    min_value: float = 0.0,
) -> PortfolioSummary:
    """Aggregate a snapshot for display.

    Rows below ``min_value`` are hidden, and a symbol whose total value is
    zero shows no rows at all. Group shares are percentages of the total.
    """
    summaries: list[SymbolSummary] = []
    group_values: dict[str, float] = {}

    for symbol in symbols:
        assets = state.assets.get(symbol.code, [])
        total_value = sum(a.value for a in assets)
        total_balance = sum(a.balance_formatted for a in assets)

        rows: tuple[AssetInfo, ...] = ()
        if total_value > 0:
            rows = tuple(a for a in assets if a.value >= min_value)

        summaries.append(
            SymbolSummary(
                symbol=symbol,
                price=price_of(state.prices, symbol.code, currency),
                total_balance=total_balance,
                total_value=total_value,
                rows=rows,
            )
        )
        group = symbol.group or symbol.code.upper()
        group_values[group] = group_values.get(group, 0.0) + total_value

    total = sum(s.total_value for s in summaries)
    shares = {
        group: (value / total * 100) if total > 0 else 0.0
        for group, value in group_values.items()
    }

    return PortfolioSummary(
        currency=currency.upper(),
        total_value=total,
        symbols=tuple(summaries),
        group_shares=shares,
        last_sync_time=state.last_sync_time,
        is_syncing=state.is_syncing,
    )


def _short(address: str) -> str:
    if len(address) > 16:
        return f"{address[:10]}...{address[-6:]}"
    return address


def format_summary(summary: PortfolioSummary) -> str:
    """Render a summary as a multi-line text report."""
    if summary.last_sync_time is None:
        updated = "never"
    else:
        updated = summary.last_sync_time.strftime("%Y-%m-%d %H:%M:%S") + " UTC"
    if summary.is_syncing:
        updated += " (syncing)"

    split = " · ".join(
        f"{group}: {share:.1f}%" for group, share in summary.group_shares.items()
    )
    lines = [
        f"💰 Total: {summary.total_value:,.2f} {summary.currency}",
        split,
        f"Updated: {updated}",
    ]

    for item in summary.symbols:
        if not item.rows:
            continue
        decimals = item.symbol.display_decimals
        lines.append("")
        lines.append(
            f"━━ {item.symbol.name} · {item.total_balance:.{decimals}f} · "
            f"{item.total_value:,.2f} {summary.currency} ━━"
        )
        for row in item.rows:
            tags = f" [{', '.join(row.tags)}]" if row.tags else ""
            lines.append(
                f"  {row.balance_formatted:.{decimals}f} {item.symbol.code.upper()}"
                f"  {row.value:,.2f} {summary.currency}  {_short(row.address)}{tags}"
            )

    return "\n".join(lines)
