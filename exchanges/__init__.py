"""Exchange price sources"""
from .base import ExchangeAdapter, PriceSource
from .binance import BinanceAdapter
from .kucoin import KuCoinAdapter
from .bybit import BybitAdapter
from .okx import OKXAdapter
from .huobi import HuobiAdapter
from .rest import RestPriceSource
from .simulator import SimulatedPriceSource


def create_adapters() -> list[ExchangeAdapter]:
    """One adapter per supported exchange, in evaluation order"""
    return [
        BinanceAdapter(),
        KuCoinAdapter(),
        BybitAdapter(),
        OKXAdapter(),
        HuobiAdapter(),
    ]


def create_price_source(mode: str = "live", timeout: float = 10.0) -> PriceSource:
    """Price source for the given operation mode ("live" or "simulation")"""
    if mode == "simulation":
        return SimulatedPriceSource()
    return RestPriceSource(create_adapters(), timeout=timeout)


__all__ = [
    "ExchangeAdapter",
    "PriceSource",
    "BinanceAdapter",
    "KuCoinAdapter",
    "BybitAdapter",
    "OKXAdapter",
    "HuobiAdapter",
    "RestPriceSource",
    "SimulatedPriceSource",
    "create_adapters",
    "create_price_source",
]
