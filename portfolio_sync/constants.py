"""Tracked symbols and provider constants."""
from .models import Symbol

BITCOIN = "bitcoin"
ETHEREUM = "ethereum"

# Native coins
BTC = Symbol("btc", "Bitcoin", "images/BTC.png", None, 8, 4, "BTC", chain=BITCOIN)
ETH = Symbol("eth", "Ethereum", "images/ETH.png", None, 18, 2, "ETH", chain=ETHEREUM)

# ERC-20 tokens
STETH = Symbol(
    "steth", "Lido Staked Ether", "images/STETH.png",
    "0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84", 18, 2, "ETH",
)
USDT = Symbol(
    "usdt", "Tether", "images/USDT.png",
    "0xdac17f958d2ee523a2206206994597c13d831ec7", 6, 2, "Stable",
)
USDC = Symbol(
    "usdc", "USD Coin", "images/USDC.png",
    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", 6, 2, "Stable",
)
AETHUSDT = Symbol(
    "aEthUSDT", "Aave Ethereum USDT", "images/USDT.png",
    "0x23878914efe38d27c4d67ab83ed1b93a74d4086a", 6, 2, "Stable",
)

ERC20_SYMBOLS: tuple[Symbol, ...] = (USDT, USDC, STETH, AETHUSDT)
ALL_SYMBOLS: tuple[Symbol, ...] = (BTC, ETH, *ERC20_SYMBOLS)

SYNC_INTERVAL_SECONDS = 60
REQUEST_TIMEOUT_SECONDS = 10
THROTTLE_INTERVAL_SECONDS = 0.5
