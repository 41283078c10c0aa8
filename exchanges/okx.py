"""OKX spot ticker"""
from typing import Any

from .base import ExchangeAdapter
from config import EXCHANGE_REST_URLS
from src.core.models import ExchangeID, Token


class OKXAdapter(ExchangeAdapter):
    """GET /api/v5/market/ticker?instId=BTC-USDT"""

    exchange = ExchangeID.OKX
    base_url = EXCHANGE_REST_URLS["okx"]

    def symbol(self, token: Token) -> str:
        return f"{token.base}-{token.quote}"

    def ticker_path(self, symbol: str) -> str:
        return f"/api/v5/market/ticker?instId={symbol}"

    def parse_price(self, data: Any) -> float:
        # {"code": "0", "data": [{"instId": "BTC-USDT", "last": "97500.1", ...}]}
        tickers = data.get("data") or []
        if not tickers:
            raise ValueError(f"no data from okx (code {data.get('code')})")
        return self.to_price(tickers[0]["last"])
