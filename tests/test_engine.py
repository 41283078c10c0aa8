"""
Tests for arbitrage engine.
"""

import asyncio
import math

import pytest

from engine import ArbitrageEngine
from engine_metrics import MetricsEngine
from exchanges.base import PriceSource
from src.core import DataUnavailable, ExchangeID, Token
from src.notifications import NotificationService


class FakePriceSource(PriceSource):
    """Serves fixed prices; anything else is reported as unavailable"""

    name = "fake"

    def __init__(self, prices=None, hang=(), broken=()):
        self.prices = prices or {}
        self.hang = set(hang)
        self.broken = set(broken)
        self.started = False
        self.closed = False
        self.calls = []

    async def start(self):
        self.started = True

    async def close(self):
        self.closed = True

    async def fetch_price(self, exchange: ExchangeID, token: Token) -> float:
        self.calls.append((exchange, token.symbol))
        if exchange in self.hang:
            await asyncio.sleep(10)
        if exchange in self.broken:
            raise RuntimeError("connection reset")
        try:
            return self.prices[token.symbol][exchange]
        except KeyError:
            raise DataUnavailable(exchange.value, token.symbol, "not listed")


class RecordingNotifier(NotificationService):
    """Collects opportunities instead of sending them"""

    def __init__(self, fail=False):
        super().__init__()
        self.fail = fail
        self.sent = []

    async def notify_arbitrage_opportunity(self, opportunity, guide):
        if self.fail:
            raise RuntimeError("telegram down")
        self.sent.append((opportunity, guide))


SPREAD = {"BTCUSDT": {ExchangeID.BINANCE: 100.0, ExchangeID.KUCOIN: 102.0}}


class TestArbitrageEngine:
    """Tests for ArbitrageEngine"""

    @pytest.fixture
    def engine(self, app_config):
        """Create a fresh engine over a binance/kucoin spread"""
        return ArbitrageEngine(app_config, FakePriceSource(SPREAD), metrics=MetricsEngine())

    async def test_fetch_snapshot_queries_every_pair(self, engine):
        snapshot = await engine.fetch_snapshot()

        assert len(engine.price_source.calls) == len(ExchangeID)
        assert snapshot.to_dict() == {"BTCUSDT": {"binance": 100.0, "kucoin": 102.0}}

    async def test_run_cycle_publishes_together(self, engine):
        """One cycle publishes snapshot, opportunities and stats as a unit"""
        result = await engine.run_cycle()

        state = engine.store.current()
        assert state.cycle == 1
        assert state.snapshot == result.snapshot
        assert list(state.opportunities) == result.opportunities
        assert state.stats.opportunities_found == 1
        assert state.stats.routes_checked == 2
        assert state.opportunities[0].profit == pytest.approx(18.59, abs=0.01)

    async def test_stats_accumulate_across_cycles(self, engine):
        await engine.run_cycle()
        await engine.run_cycle()

        stats = engine.store.current().stats
        assert engine.store.current().cycle == 2
        assert stats.routes_checked == 4
        assert stats.opportunities_found == 2

    async def test_failed_fetch_only_drops_that_pair(self, app_config):
        """A crashing exchange does not affect the others"""
        prices = {"BTCUSDT": {**SPREAD["BTCUSDT"], ExchangeID.OKX: 104.0}}
        engine = ArbitrageEngine(app_config, FakePriceSource(prices, broken=[ExchangeID.OKX]))

        snapshot = await engine.fetch_snapshot()

        assert set(snapshot.prices_for("BTCUSDT")) == {ExchangeID.BINANCE, ExchangeID.KUCOIN}

    async def test_hung_fetch_times_out(self, app_config):
        """A hanging exchange is bounded by fetch_timeout_sec"""
        prices = {"BTCUSDT": {**SPREAD["BTCUSDT"], ExchangeID.OKX: 104.0}}
        engine = ArbitrageEngine(app_config, FakePriceSource(prices, hang=[ExchangeID.OKX]))

        result = await asyncio.wait_for(engine.run_cycle(), timeout=5)

        assert ExchangeID.OKX not in result.snapshot.prices_for("BTCUSDT")
        assert result.opportunities_found == 1

    async def test_unusable_price_ignored(self, app_config):
        prices = {"BTCUSDT": {**SPREAD["BTCUSDT"], ExchangeID.OKX: math.nan, ExchangeID.BYBIT: -1.0}}
        engine = ArbitrageEngine(app_config, FakePriceSource(prices))

        snapshot = await engine.fetch_snapshot()

        assert set(snapshot.prices_for("BTCUSDT")) == {ExchangeID.BINANCE, ExchangeID.KUCOIN}

    async def test_metrics_recorded(self, engine):
        await engine.run_cycle()

        summary = engine.metrics.get_metrics_summary()["feed_statistics"]
        assert summary["binance"]["fetches_ok"] == 1
        assert summary["okx"]["fetches_failed"] == 1
        assert b"arb_routes_checked_total 2.0" in engine.metrics.get_prometheus_metrics()

    async def test_notifies_each_opportunity(self, app_config):
        notifier = RecordingNotifier()
        engine = ArbitrageEngine(app_config, FakePriceSource(SPREAD), notifier=notifier)

        await engine.run_cycle()

        [(opportunity, guide)] = notifier.sent
        assert opportunity.source_exchange == ExchangeID.BINANCE
        assert guide.startswith("STEPS:")

    async def test_notification_failure_contained(self, app_config):
        """A failing notifier does not fail the cycle or lose the results"""
        engine = ArbitrageEngine(app_config, FakePriceSource(SPREAD), notifier=RecordingNotifier(fail=True))

        result = await engine.run_cycle()

        assert result.opportunities_found == 1
        assert engine.store.current().stats.opportunities_found == 1

    async def test_on_cycle_callbacks(self, engine):
        seen = []
        engine.on_cycle(lambda state: seen.append(state.cycle))
        engine.on_cycle(lambda state: 1 / 0)

        await engine.run_cycle()

        assert seen == [1]

    async def test_on_opportunity_callbacks(self, engine):
        seen = []
        engine.on_opportunity(lambda opp: seen.append((opp.source_exchange, opp.dest_exchange)))

        await engine.run_cycle()

        assert seen == [(ExchangeID.BINANCE, ExchangeID.KUCOIN)]

    async def test_run_loop_stops_and_closes_source(self, engine):
        engine.on_cycle(lambda state: engine.stop())

        await asyncio.wait_for(engine.run(), timeout=5)

        assert engine.price_source.started
        assert engine.price_source.closed
        assert engine.store.current().cycle == 1

    def test_get_state(self, engine):
        state = engine.get_state()

        assert state["cycle"] == 0
        assert state["config"]["tokens"] == ["BTCUSDT"]
        assert state["config"]["exchanges"] == [e.value for e in ExchangeID]
        assert "notifications" not in state
