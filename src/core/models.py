"""
Data classes shared by the evaluation engine.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from .exceptions import ConfigurationError

DEFAULT_QUOTE_ASSET = "USDT"


class ExchangeID(str, Enum):
    """Supported exchanges. Declaration order is the evaluation order."""
    BINANCE = "binance"
    KUCOIN = "kucoin"
    BYBIT = "bybit"
    OKX = "okx"
    HUOBI = "huobi"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    """A spot market such as BTCUSDT, split into base and quote asset"""
    base: str
    quote: str = DEFAULT_QUOTE_ASSET

    def __post_init__(self):
        if not self.base or not self.quote:
            raise ConfigurationError(f"Invalid token: base={self.base!r} quote={self.quote!r}")

    @classmethod
    def parse(cls, symbol: str, quote: str = DEFAULT_QUOTE_ASSET) -> "Token":
        """Parse a concatenated symbol, e.g. ``Token.parse("ETHUSDT")``"""
        symbol = symbol.strip().upper()
        quote = quote.strip().upper()
        if len(symbol) <= len(quote) or not symbol.endswith(quote):
            raise ConfigurationError(
                f"Token {symbol!r} must be a base asset followed by {quote!r}"
            )
        return cls(base=symbol[:-len(quote)], quote=quote)

    @property
    def symbol(self) -> str:
        return f"{self.base}{self.quote}"

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class TradeLimits:
    """Economic parameters applied to every evaluated route"""
    min_profit_usd: float
    commission_percent: float
    min_trade_volume: float
    max_trade_volume: float
    bank_limit_usd: float


class PriceSnapshot:
    """
    Prices for one evaluation cycle: token symbol -> exchange -> price.

    Only strictly positive, finite prices are kept. A missing exchange is the
    only "no data" signal. The snapshot is read-only once built.
    """

    def __init__(
        self,
        prices: Optional[Mapping[str, Mapping[ExchangeID, float]]] = None,
        timestamp: Optional[datetime] = None,
    ):
        cleaned: Dict[str, Mapping[ExchangeID, float]] = {}
        for symbol, by_exchange in (prices or {}).items():
            cleaned[symbol] = MappingProxyType({
                ExchangeID(exchange): float(price)
                for exchange, price in by_exchange.items()
                if _is_usable_price(price)
            })
        self._prices = MappingProxyType(cleaned)
        self.timestamp = timestamp or datetime.now()

    @classmethod
    def empty(cls, tokens: Iterable[Token] = ()) -> "PriceSnapshot":
        return cls({token.symbol: {} for token in tokens})

    def price(self, token: str, exchange: ExchangeID) -> Optional[float]:
        return self._prices.get(token, {}).get(exchange)

    def prices_for(self, token: str) -> Mapping[ExchangeID, float]:
        return self._prices.get(token, MappingProxyType({}))

    @property
    def tokens(self) -> list:
        return list(self._prices.keys())

    def to_dict(self) -> dict:
        return {
            token: {exchange.value: price for exchange, price in by_exchange.items()}
            for token, by_exchange in self._prices.items()
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, PriceSnapshot):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"PriceSnapshot({self.to_dict()!r})"


def _is_usable_price(price) -> bool:
    try:
        value = float(price)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """A profitable transfer from one exchange to another via a route token"""
    token: Token
    source_exchange: ExchangeID
    dest_exchange: ExchangeID
    route_token: str
    volume: float  # base-asset units bought on the source exchange
    profit: float  # USD after fees and commission

    # Context for messages and the transfer guide
    source_price: float = 0.0
    dest_price: float = 0.0
    withdraw_fee: float = 0.0
    deposit_fee: float = 0.0
    source_network: str = ""
    dest_network: str = ""
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    @property
    def is_direct(self) -> bool:
        return self.route_token == self.token.base

    @property
    def message(self) -> str:
        return (
            f"Arbitrage: {self.source_exchange} -> {self.dest_exchange} via {self.route_token}. "
            f"{self.token} Volume: {self.volume:.4f}, Profit: {self.profit:.2f} USD (fees included)"
        )

    def to_dict(self) -> dict:
        return {
            "token": self.token.symbol,
            "base_asset": self.token.base,
            "source_exchange": self.source_exchange.value,
            "dest_exchange": self.dest_exchange.value,
            "route_token": self.route_token,
            "volume": round(self.volume, 8),
            "profit": round(self.profit, 2),
            "source_price": self.source_price,
            "dest_price": self.dest_price,
            "withdraw_fee": self.withdraw_fee,
            "deposit_fee": self.deposit_fee,
            "source_network": self.source_network,
            "dest_network": self.dest_network,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Stats:
    """Session counters, never decreasing for the life of the process"""
    routes_checked: int = 0
    opportunities_found: int = 0
    total_profit: float = 0.0
    max_profit: float = 0.0

    def to_dict(self) -> dict:
        return {
            "routes_checked": self.routes_checked,
            "opportunities_found": self.opportunities_found,
            "total_profit": round(self.total_profit, 2),
            "max_profit": round(self.max_profit, 2),
        }
