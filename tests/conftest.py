"""
Pytest configuration and fixtures for RouteScout tests.
"""

import pytest
from datetime import date, timedelta
from typing import Generator

from fastapi.testclient import TestClient

# Import application
import sys
sys.path.insert(0, '.')

from config import AppConfig
from dashboard import app, manager
from src.auth.models import AccessKey
from src.auth.service import access_key_service
from src.core import (
    ExchangeID, FeeRouteModel, PriceSnapshot, SharedStateStore, Token, TradeLimits, TransferFees,
)


@pytest.fixture
def btc() -> Token:
    return Token.parse("BTCUSDT")


@pytest.fixture
def limits() -> TradeLimits:
    """Bank of 1000 USD, no commission, 10 USD minimum profit"""
    return TradeLimits(
        min_profit_usd=10.0,
        commission_percent=0.0,
        min_trade_volume=0.1,
        max_trade_volume=10000.0,
        bank_limit_usd=1000.0,
    )


@pytest.fixture
def btc_fee_model() -> FeeRouteModel:
    """Direct BTC transfers with a 0.01 BTC withdrawal fee everywhere"""
    return FeeRouteModel(fees={
        "BTC": TransferFees(withdraw={exchange: 0.01 for exchange in ExchangeID}),
    })


@pytest.fixture
def app_config() -> AppConfig:
    """Configuration equivalent to the limits/btc_fee_model fixtures"""
    return AppConfig(
        min_profit_usd=10.0,
        commission=0.0,
        tokens=["BTCUSDT"],
        min_trade_volume=0.1,
        max_trade_volume=10000.0,
        bank_limit=1000.0,
        poll_interval_sec=0.01,
        fetch_timeout_sec=0.2,
        transfer_fees={"BTC": {"withdraw": {e.value: 0.01 for e in ExchangeID}}},
    )


@pytest.fixture
def spread_snapshot() -> PriceSnapshot:
    """BTC at 100 on binance and 102 on kucoin, nothing elsewhere"""
    return PriceSnapshot({"BTCUSDT": {ExchangeID.BINANCE: 100.0, ExchangeID.KUCOIN: 102.0}})


@pytest.fixture
def valid_key() -> Generator[str, None, None]:
    """Install a single unexpired access key in the global service"""
    previous = list(access_key_service._keys)
    access_key_service.replace_keys([
        AccessKey(key="test-key", until=date.today() + timedelta(days=30)),
        AccessKey(key="old-key", until=date.today() - timedelta(days=1)),
    ])
    yield "test-key"
    access_key_service.replace_keys(previous)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create synchronous test client over a fresh state store"""
    previous = manager.store
    manager.store = SharedStateStore()
    with TestClient(app) as c:
        yield c
    manager.store = previous
