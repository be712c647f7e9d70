"""Data models: value objects are frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

# symbol code -> lower-cased currency code -> price per whole unit
PriceTable = dict[str, dict[str, float]]


@dataclass(frozen=True)
class Symbol:
    """Descriptor of a tracked asset (native coin or token)."""

    code: str
    name: str
    icon: str
    contract_address: str | None
    decimals: int
    display_decimals: int
    group: str = ""
    chain: str = "ethereum"

    @property
    def is_native(self) -> bool:
        return self.contract_address is None


@dataclass(frozen=True)
class AddressConfig:
    """One user-configured address with its free-form tags."""

    address: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class AssetInfo:
    """Balance of one symbol held by one address."""

    address: str
    balance: int
    balance_formatted: float
    value: float = 0.0
    tags: tuple[str, ...] = ()

    @classmethod
    def zero(cls, address: str) -> AssetInfo:
        return cls(address=address, balance=0, balance_formatted=0.0)

    @classmethod
    def from_raw(cls, address: str, balance: int, decimals: int) -> AssetInfo:
        return cls(
            address=address,
            balance=balance,
            balance_formatted=balance / (10**decimals),
        )


@dataclass
class PortfolioState:
    """The engine's current merged view.

    ``prices`` and ``assets`` always come from the same completed sync round
    and are only ever replaced together. ``is_syncing`` toggles on its own.
    """

    last_sync_time: datetime | None = None
    prices: PriceTable = field(default_factory=dict)
    assets: dict[str, list[AssetInfo]] = field(default_factory=dict)
    is_syncing: bool = False


def price_of(prices: PriceTable, code: str, currency: str) -> float:
    """Return the price of ``code`` in ``currency``, 0.0 when unknown."""
    return prices.get(code, {}).get(currency.lower(), 0.0)
