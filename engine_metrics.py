"""
Prometheus Metrics

Provides metrics for:
- Price fetch health per exchange (successes, failures, latency)
- Routes checked and arbitrage opportunities detected
- Evaluation cycle duration

Exposes metrics in Prometheus format for Grafana dashboards.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Optional

from prometheus_client import (
    CollectorRegistry, Counter, Gauge, Histogram, Info,
    generate_latest, CONTENT_TYPE_LATEST,
)

logger = logging.getLogger(__name__)


class MetricsEngine:
    """
    Central metrics collection and export.

    Each instance owns its own ``CollectorRegistry`` so that several engines
    (e.g. in tests) never collide on metric names.
    """

    def __init__(self, mode: str = "live", registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._setup_prometheus_metrics(mode)

        # Feed health tracking for the JSON summary
        self._fetch_last_success: Dict[str, datetime] = {}
        self._fetch_counts: Dict[str, Dict[str, int]] = defaultdict(lambda: {"ok": 0, "failed": 0})

    def _setup_prometheus_metrics(self, mode: str):
        """Initialize Prometheus metrics"""

        # ===== PRICE FEED METRICS =====
        self.price_fetches_total = Counter(
            'arb_price_fetches_total',
            'Price fetches by exchange and result',
            ['exchange', 'result'],  # result: ok, failed
            registry=self.registry,
        )

        self.price_fetch_latency = Histogram(
            'arb_price_fetch_latency_seconds',
            'Latency of price fetches',
            ['exchange'],
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
            registry=self.registry,
        )

        # ===== ARBITRAGE METRICS =====
        self.routes_checked_total = Counter(
            'arb_routes_checked_total',
            'Routes that reached the profit comparison',
            registry=self.registry,
        )

        self.opportunities_detected_total = Counter(
            'arb_opportunities_detected_total',
            'Total arbitrage opportunities detected',
            ['token'],
            registry=self.registry,
        )

        self.opportunity_profit_usd = Histogram(
            'arb_opportunity_profit_usd',
            'Profit in USD of detected opportunities',
            buckets=[10, 25, 50, 100, 250, 500, 1000, 5000],
            registry=self.registry,
        )

        self.last_cycle_opportunities = Gauge(
            'arb_last_cycle_opportunities',
            'Opportunities found in the last evaluation cycle',
            registry=self.registry,
        )

        self.cycle_duration = Histogram(
            'arb_cycle_duration_seconds',
            'Wall-clock duration of fetch + evaluation',
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=self.registry,
        )

        # Info metric for version/config
        self.bot_info = Info(
            'arb_bot',
            'Arbitrage scanner information',
            registry=self.registry,
        )
        self.bot_info.info({
            'version': '1.0.0',
            'mode': mode,
        })

    # ===== PUBLIC METHODS FOR RECORDING METRICS =====

    def record_price_fetch(self, exchange: str, success: bool, latency_s: Optional[float] = None):
        """Record one price fetch"""
        result = "ok" if success else "failed"
        self.price_fetches_total.labels(exchange=exchange, result=result).inc()
        self._fetch_counts[exchange][result] += 1
        if success:
            self._fetch_last_success[exchange] = datetime.now()
        if latency_s is not None:
            self.price_fetch_latency.labels(exchange=exchange).observe(latency_s)

    def record_cycle(self, routes_checked: int, opportunities: list, duration_s: float):
        """Record the outcome of one evaluation cycle"""
        self.routes_checked_total.inc(routes_checked)
        self.last_cycle_opportunities.set(len(opportunities))
        self.cycle_duration.observe(duration_s)
        for opp in opportunities:
            self.opportunities_detected_total.labels(token=opp.token.symbol).inc()
            self.opportunity_profit_usd.observe(opp.profit)

    # ===== METRIC EXPORT =====

    def get_prometheus_metrics(self) -> bytes:
        """Generate Prometheus metrics output"""
        return generate_latest(self.registry)

    def get_prometheus_content_type(self) -> str:
        """Get Prometheus content type"""
        return CONTENT_TYPE_LATEST

    def get_metrics_summary(self) -> dict:
        """Get summary of feed health for the dashboard"""
        now = datetime.now()
        feeds = {}
        for exchange, counts in self._fetch_counts.items():
            last = self._fetch_last_success.get(exchange)
            feeds[exchange] = {
                "fetches_ok": counts["ok"],
                "fetches_failed": counts["failed"],
                "staleness_s": (now - last).total_seconds() if last else None,
            }
        return {"feed_statistics": feeds}
