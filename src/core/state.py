"""
Last published cycle, shared between the evaluation loop and the API.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Tuple

from .models import ArbitrageOpportunity, PriceSnapshot, Stats


@dataclass(frozen=True)
class PublishedState:
    """Snapshot, opportunities and stats of one cycle, always published together"""
    snapshot: PriceSnapshot
    opportunities: Tuple[ArbitrageOpportunity, ...] = ()
    stats: Stats = field(default_factory=Stats)
    cycle: int = 0
    published_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "cycle": self.cycle,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "prices": self.snapshot.to_dict(),
            "opportunities": [o.to_dict() for o in self.opportunities],
            "stats": self.stats.to_dict(),
        }


class SharedStateStore:
    """
    Holds the last published cycle.

    ``publish`` swaps a single immutable ``PublishedState`` under a lock, so
    readers always see prices, opportunities and stats from the same cycle.
    The lock is held only for the swap; evaluation happens outside it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = PublishedState(snapshot=PriceSnapshot())

    def publish(
        self,
        snapshot: PriceSnapshot,
        opportunities: Iterable[ArbitrageOpportunity],
        stats: Stats,
    ) -> PublishedState:
        opportunities = tuple(opportunities)
        with self._lock:
            state = PublishedState(
                snapshot=snapshot,
                opportunities=opportunities,
                stats=stats,
                cycle=self._state.cycle + 1,
                published_at=datetime.now(),
            )
            self._state = state
        return state

    def current(self) -> PublishedState:
        with self._lock:
            return self._state

    def get_prices(self) -> dict:
        return self.current().snapshot.to_dict()

    def get_opportunities(self) -> list:
        return [o.to_dict() for o in self.current().opportunities]

    def get_stats(self) -> dict:
        return self.current().stats.to_dict()
