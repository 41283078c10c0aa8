"""KuCoin spot ticker"""
from typing import Any

from .base import ExchangeAdapter
from config import EXCHANGE_REST_URLS
from src.core.models import ExchangeID, Token


class KuCoinAdapter(ExchangeAdapter):
    """GET /api/v1/market/orderbook/level1?symbol=BTC-USDT"""

    exchange = ExchangeID.KUCOIN
    base_url = EXCHANGE_REST_URLS["kucoin"]

    def symbol(self, token: Token) -> str:
        return f"{token.base}-{token.quote}"

    def ticker_path(self, symbol: str) -> str:
        return f"/api/v1/market/orderbook/level1?symbol={symbol}"

    def parse_price(self, data: Any) -> float:
        # {"code": "200000", "data": {"price": "97500.1", ...}}
        # Unknown symbols come back with "data": null
        if not data.get("data"):
            raise ValueError(f"no data from kucoin (code {data.get('code')})")
        return self.to_price(data["data"]["price"])
