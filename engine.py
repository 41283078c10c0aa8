"""Arbitrage engine: fetch prices, evaluate transfer routes, publish results"""
import asyncio
import logging
import math
import time
from typing import Callable, Optional

from config import AppConfig
from engine_metrics import MetricsEngine
from exchanges.base import PriceSource
from src.core import (
    ArbitrageEvaluationCycle, ArbitrageOpportunity, CycleResult, DataUnavailable, ExchangeID,
    PriceSnapshot, PublishedState, SharedStateStore, StatsAccumulator, Token,
)
from src.notifications import NotificationService, build_transfer_guide

logger = logging.getLogger(__name__)


class ArbitrageEngine:
    """
    Drives the evaluation loop.

    Each cycle:
    1. fetch every (token, exchange) price concurrently, each bounded by
       ``fetch_timeout_sec``; a failed fetch only drops that pair
    2. evaluate all tokens x ordered exchange pairs x route tokens
    3. record stats and publish snapshot/opportunities/stats together
    4. notify about each opportunity and fire cycle callbacks

    Cycles run back to back with ``poll_interval_sec`` of sleep in between
    (fetch-then-sleep, not fixed rate).
    """

    def __init__(
        self,
        config: AppConfig,
        price_source: PriceSource,
        notifier: Optional[NotificationService] = None,
        metrics: Optional[MetricsEngine] = None,
        store: Optional[SharedStateStore] = None,
    ):
        self.config = config
        self.price_source = price_source
        self.notifier = notifier
        self.metrics = metrics

        self.tokens: list[Token] = config.parsed_tokens()
        self.exchanges: list[ExchangeID] = list(ExchangeID)
        self.cycle = ArbitrageEvaluationCycle(
            self.tokens, config.fee_route_model(), config.trade_limits(), self.exchanges
        )
        self.stats = StatsAccumulator()
        self.store = store or SharedStateStore()

        self._on_cycle_callbacks: list[Callable[[PublishedState], None]] = []
        self._on_opportunity_callbacks: list[Callable[[ArbitrageOpportunity], None]] = []
        self._last_stats_log = time.monotonic()
        self.running = False

    def on_cycle(self, callback: Callable[[PublishedState], None]):
        """Register callback invoked with each newly published state"""
        self._on_cycle_callbacks.append(callback)

    def on_opportunity(self, callback: Callable[[ArbitrageOpportunity], None]):
        """Register callback invoked with each opportunity of a published cycle"""
        self._on_opportunity_callbacks.append(callback)

    # ===== PRICE FETCHING =====

    async def fetch_snapshot(self) -> PriceSnapshot:
        """Fetch all prices concurrently and build this cycle's snapshot"""
        pairs = [(token, exchange) for token in self.tokens for exchange in self.exchanges]
        prices = await asyncio.gather(*(self._fetch_one(token, exchange) for token, exchange in pairs))

        quotes: dict[str, dict[ExchangeID, float]] = {token.symbol: {} for token in self.tokens}
        for (token, exchange), price in zip(pairs, prices):
            if price is not None:
                quotes[token.symbol][exchange] = price

        for symbol, by_exchange in quotes.items():
            listed = ", ".join(f"{ex}={price:.6f}" for ex, price in by_exchange.items()) or "no data"
            logger.debug(f"{symbol}: {listed}")

        return PriceSnapshot(quotes)

    async def _fetch_one(self, token: Token, exchange: ExchangeID) -> Optional[float]:
        timeout = self.config.fetch_timeout_sec
        started = time.monotonic()
        price = None
        try:
            price = await asyncio.wait_for(self.price_source.fetch_price(exchange, token), timeout=timeout)
        except DataUnavailable as e:
            logger.warning(f"[{exchange}] {token}: price unavailable ({e.reason})")
        except asyncio.TimeoutError:
            logger.warning(f"[{exchange}] {token}: no price within {timeout}s")
        except Exception as e:
            logger.error(f"[{exchange}] {token}: price source error: {e}")

        if price is not None and not (isinstance(price, (int, float)) and math.isfinite(price) and price > 0):
            logger.warning(f"[{exchange}] {token}: ignoring unusable price {price!r}")
            price = None

        if self.metrics:
            self.metrics.record_price_fetch(
                exchange.value, price is not None, time.monotonic() - started
            )
        return price

    # ===== EVALUATION =====

    async def run_cycle(self) -> CycleResult:
        """Run one full fetch/evaluate/publish cycle"""
        started = time.monotonic()
        snapshot = await self.fetch_snapshot()

        result = self.cycle.run(snapshot)
        self.stats.record(result)
        state = self.store.publish(snapshot, result.opportunities, self.stats.snapshot())

        if self.metrics:
            self.metrics.record_cycle(result.routes_checked, result.opportunities, time.monotonic() - started)

        logger.debug(
            f"Cycle {state.cycle}: {result.pairs_evaluated} pairs, "
            f"{result.routes_checked} routes checked, {result.opportunities_found} opportunities"
        )

        await self._notify(result)
        for callback in self._on_cycle_callbacks:
            try:
                callback(state)
            except Exception as e:
                logger.error(f"Cycle callback error: {e}")
        for opp in result.opportunities:
            for callback in self._on_opportunity_callbacks:
                try:
                    callback(opp)
                except Exception as e:
                    logger.error(f"Opportunity callback error: {e}")

        self._maybe_log_stats()
        return result

    async def _notify(self, result: CycleResult):
        if not self.notifier or not result.opportunities:
            return
        commission = self.config.commission
        outcomes = await asyncio.gather(
            *(
                self.notifier.notify_arbitrage_opportunity(opp, build_transfer_guide(opp, commission))
                for opp in result.opportunities
            ),
            return_exceptions=True,
        )
        for opp, outcome in zip(result.opportunities, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"Notification for {opp.token} {opp.source_exchange}->{opp.dest_exchange} failed: {outcome}")

    def _maybe_log_stats(self):
        now = time.monotonic()
        if now - self._last_stats_log >= self.config.stats_log_interval_sec:
            logger.info(f"📊 {self.stats.summary()}")
            self._last_stats_log = now

    # ===== LOOP =====

    async def run(self):
        """Evaluate until ``stop`` is called or the task is cancelled"""
        self.running = True
        await self.price_source.start()
        logger.info(
            f"Evaluating {', '.join(t.symbol for t in self.tokens)} on "
            f"{len(self.exchanges)} exchanges every {self.config.poll_interval_sec}s"
        )
        try:
            while self.running:
                try:
                    await self.run_cycle()
                except Exception as e:
                    logger.exception(f"Evaluation cycle failed: {e}")
                await asyncio.sleep(self.config.poll_interval_sec)
        finally:
            await self.price_source.close()
            logger.info(self.stats.summary())

    def stop(self):
        self.running = False

    def get_state(self) -> dict:
        """Get current state for API/dashboard"""
        state = self.store.current().to_dict()
        state["config"] = {
            "tokens": [t.symbol for t in self.tokens],
            "exchanges": [e.value for e in self.exchanges],
            "min_profit_usd": self.config.min_profit_usd,
            "commission": self.config.commission,
            "bank_limit": self.config.bank_limit,
            "poll_interval_sec": self.config.poll_interval_sec,
        }
        if self.notifier:
            state["notifications"] = self.notifier.get_statistics()
        return state
