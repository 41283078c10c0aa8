"""Binance spot ticker"""
from typing import Any

from .base import ExchangeAdapter
from config import EXCHANGE_REST_URLS
from src.core.models import ExchangeID, Token


class BinanceAdapter(ExchangeAdapter):
    """GET /api/v3/ticker/price?symbol=BTCUSDT"""

    exchange = ExchangeID.BINANCE
    base_url = EXCHANGE_REST_URLS["binance"]

    def symbol(self, token: Token) -> str:
        return token.symbol

    def ticker_path(self, symbol: str) -> str:
        return f"/api/v3/ticker/price?symbol={symbol}"

    def parse_price(self, data: Any) -> float:
        # {"symbol": "BTCUSDT", "price": "97500.01000000"}
        return self.to_price(data["price"])
