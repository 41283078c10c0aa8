"""Huobi (HTX) spot ticker"""
from typing import Any

from .base import ExchangeAdapter
from config import EXCHANGE_REST_URLS
from src.core.models import ExchangeID, Token


class HuobiAdapter(ExchangeAdapter):
    """GET /market/detail/merged?symbol=btcusdt"""

    exchange = ExchangeID.HUOBI
    base_url = EXCHANGE_REST_URLS["huobi"]

    def symbol(self, token: Token) -> str:
        return token.symbol.lower()

    def ticker_path(self, symbol: str) -> str:
        return f"/market/detail/merged?symbol={symbol}"

    def parse_price(self, data: Any) -> float:
        # {"status": "ok", "tick": {"close": 97500.12, ...}}
        if data.get("status") == "error":
            raise ValueError(f"huobi error: {data.get('err-msg')}")
        return self.to_price(data["tick"]["close"])
