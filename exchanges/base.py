"""Base price source and exchange REST adapter"""
import logging
import math
from abc import ABC, abstractmethod
from typing import Any

from src.core.models import ExchangeID, Token

logger = logging.getLogger(__name__)


class PriceSource(ABC):
    """
    Anything that can quote a spot price for a token on an exchange.

    ``fetch_price`` returns a strictly positive price or raises
    ``DataUnavailable``; callers treat the latter as "no data" for that pair.
    """

    name = "price-source"

    async def start(self):
        """Acquire resources (HTTP sessions etc.)"""

    async def close(self):
        """Release resources"""

    @abstractmethod
    async def fetch_price(self, exchange: ExchangeID, token: Token) -> float:
        pass

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, *exc_info):
        await self.close()


class ExchangeAdapter(ABC):
    """Translates one exchange's public ticker endpoint into a price"""

    exchange: ExchangeID
    base_url: str

    def __init__(self, base_url: str = ""):
        if base_url:
            self.base_url = base_url

    @abstractmethod
    def symbol(self, token: Token) -> str:
        """Exchange-specific market symbol"""
        pass

    @abstractmethod
    def ticker_path(self, symbol: str) -> str:
        """Request path (with query) of the ticker endpoint"""
        pass

    @abstractmethod
    def parse_price(self, data: Any) -> float:
        """Extract the last price from the decoded JSON response"""
        pass

    def ticker_url(self, token: Token) -> str:
        return f"{self.base_url}{self.ticker_path(self.symbol(token))}"

    @staticmethod
    def to_price(value: Any) -> float:
        """Convert a raw field to a usable price, rejecting zero/negative/NaN"""
        price = float(value)
        if not math.isfinite(price) or price <= 0:
            raise ValueError(f"non-positive price {value!r}")
        return price

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.base_url})"
