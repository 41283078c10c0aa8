"""Simulated price source for testing when real connections are blocked"""
import logging
import random
from typing import Dict, Optional

from .base import PriceSource
from src.core.exceptions import DataUnavailable
from src.core.models import ExchangeID, Token

logger = logging.getLogger(__name__)


# Realistic base prices for simulation, in USDT
BASE_PRICES = {
    "BTC": 97500.0,
    "ETH": 3250.0,
    "SOL": 245.0,
    "XRP": 3.15,
    "TON": 5.4,
    "DOGE": 0.38,
}

# Per-exchange offsets (percent) so that some transfers look profitable
EXCHANGE_OFFSETS = {
    ExchangeID.BINANCE: 0.0,
    ExchangeID.KUCOIN: 0.35,
    ExchangeID.BYBIT: -0.1,
    ExchangeID.OKX: 0.05,
    ExchangeID.HUOBI: -0.4,
}


class SimulatedPriceSource(PriceSource):
    """
    Random-walk prices with a fixed offset per exchange.

    Each fetch moves the token's reference price by up to +/-0.1% and applies
    the exchange offset. Tokens without a base price are reported as missing.
    """

    name = "simulation"

    def __init__(
        self,
        base_prices: Optional[Dict[str, float]] = None,
        offsets: Optional[Dict[ExchangeID, float]] = None,
        seed: Optional[int] = None,
    ):
        self.current_prices = dict(base_prices or BASE_PRICES)
        self.offsets = dict(EXCHANGE_OFFSETS if offsets is None else offsets)
        self._rng = random.Random(seed)

    async def start(self):
        logger.info("🎮 SIMULATION MODE - Generating mock prices")

    async def fetch_price(self, exchange: ExchangeID, token: Token) -> float:
        if token.base not in self.current_prices:
            raise DataUnavailable(exchange.value, token.symbol, "no simulated market")
        if exchange not in self.offsets:
            raise DataUnavailable(exchange.value, token.symbol, "exchange not simulated")

        # Small random movement (-0.1% to +0.1%)
        movement = self._rng.uniform(-0.001, 0.001)
        price = self.current_prices[token.base] * (1 + movement)
        self.current_prices[token.base] = price

        return price * (1 + self.offsets[exchange] / 100)
