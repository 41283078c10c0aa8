"""Polling price source over the exchanges' public REST APIs"""
import asyncio
import json
import logging
from typing import Dict, Iterable, Optional

import aiohttp

from .base import ExchangeAdapter, PriceSource
from src.core.exceptions import DataUnavailable
from src.core.models import ExchangeID, Token

logger = logging.getLogger(__name__)


class RestPriceSource(PriceSource):
    """
    Fetches last prices through per-exchange adapters.

    One ``aiohttp.ClientSession`` is shared by all requests; every request is
    bounded by ``timeout`` seconds so a hung exchange cannot stall a cycle.
    """

    name = "rest"

    def __init__(self, adapters: Iterable[ExchangeAdapter], timeout: float = 10.0):
        self.adapters: Dict[ExchangeID, ExchangeAdapter] = {a.exchange: a for a in adapters}
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self):
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            logger.info(f"REST price source ready for {', '.join(e.value for e in self.adapters)}")

    async def close(self):
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fetch_price(self, exchange: ExchangeID, token: Token) -> float:
        adapter = self.adapters.get(exchange)
        if adapter is None:
            raise DataUnavailable(exchange.value, token.symbol, "exchange not configured")
        if self._session is None:
            await self.start()

        url = adapter.ticker_url(token)
        try:
            async with self._session.get(url, timeout=self.timeout) as resp:
                if resp.status != 200:
                    raise DataUnavailable(exchange.value, token.symbol, f"HTTP {resp.status}")
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            raise DataUnavailable(exchange.value, token.symbol, "timed out")
        except (aiohttp.ClientError, json.JSONDecodeError) as e:
            raise DataUnavailable(exchange.value, token.symbol, str(e) or type(e).__name__)

        try:
            return adapter.parse_price(data)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise DataUnavailable(exchange.value, token.symbol, f"unexpected response: {e}")
