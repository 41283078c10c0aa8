"""Bybit spot ticker"""
from typing import Any

from .base import ExchangeAdapter
from config import EXCHANGE_REST_URLS
from src.core.models import ExchangeID, Token


class BybitAdapter(ExchangeAdapter):
    """GET /v5/market/tickers?category=spot&symbol=BTCUSDT"""

    exchange = ExchangeID.BYBIT
    base_url = EXCHANGE_REST_URLS["bybit"]

    def symbol(self, token: Token) -> str:
        return token.symbol

    def ticker_path(self, symbol: str) -> str:
        return f"/v5/market/tickers?category=spot&symbol={symbol}"

    def parse_price(self, data: Any) -> float:
        # {"retCode": 0, "result": {"list": [{"symbol": "BTCUSDT", "lastPrice": "97500"}]}}
        tickers = (data.get("result") or {}).get("list") or []
        if not tickers:
            raise ValueError("no data from bybit")
        return self.to_price(tickers[0]["lastPrice"])
