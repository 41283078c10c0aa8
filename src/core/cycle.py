"""
One evaluation pass over a price snapshot.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence, Tuple

from .evaluator import RouteEvaluation, RouteEvaluator, RouteOutcome
from .fees import FeeRouteModel
from .models import ArbitrageOpportunity, ExchangeID, PriceSnapshot, Token, TradeLimits

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Opportunities and counters produced by one cycle"""
    snapshot: PriceSnapshot
    opportunities: List[ArbitrageOpportunity] = field(default_factory=list)
    routes_checked: int = 0
    pairs_evaluated: int = 0
    outcomes: Dict[RouteOutcome, int] = field(default_factory=dict)

    @property
    def opportunities_found(self) -> int:
        return len(self.opportunities)

    @property
    def total_profit(self) -> float:
        return sum(o.profit for o in self.opportunities)

    @property
    def best_profit(self) -> float:
        return max((o.profit for o in self.opportunities), default=0.0)


def exchange_pairs(exchanges: Sequence[ExchangeID]) -> Iterator[Tuple[ExchangeID, ExchangeID]]:
    """Ordered pairs of distinct exchanges; A->B and B->A are both produced"""
    for source in exchanges:
        for dest in exchanges:
            if source != dest:
                yield source, dest


class ArbitrageEvaluationCycle:
    """
    Runs the route evaluator over every token and ordered exchange pair.

    A pair is evaluated only when both exchanges have a price for the token.
    Opportunities are ranked by profit, highest first; ties keep the order in
    which they were evaluated.
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        fee_model: FeeRouteModel,
        limits: TradeLimits,
        exchanges: Sequence[ExchangeID] = tuple(ExchangeID),
    ):
        self.tokens = tuple(tokens)
        self.exchanges = tuple(exchanges)
        self.evaluator = RouteEvaluator(fee_model, limits)

    def run(self, snapshot: PriceSnapshot) -> CycleResult:
        result = CycleResult(snapshot=snapshot)
        outcomes: Counter = Counter()

        for token in self.tokens:
            prices = snapshot.prices_for(token.symbol)
            for source, dest in exchange_pairs(self.exchanges):
                source_price = prices.get(source)
                dest_price = prices.get(dest)
                if not source_price or not dest_price:
                    continue

                result.pairs_evaluated += 1
                evaluations = self.evaluator.evaluate(token, source, dest, source_price, dest_price)
                self._collect(result, outcomes, evaluations)

        result.outcomes = dict(outcomes)
        result.opportunities.sort(key=lambda o: o.profit, reverse=True)
        return result

    @staticmethod
    def _collect(result: CycleResult, outcomes: Counter, evaluations: List[RouteEvaluation]):
        for evaluation in evaluations:
            outcomes[evaluation.outcome] += 1
            if evaluation.outcome.checked:
                result.routes_checked += 1
            if evaluation.opportunity is not None:
                opp = evaluation.opportunity
                logger.info(
                    f"🎯 {opp.message} | "
                    f"Buy@{opp.source_exchange} ${opp.source_price:.2f} → "
                    f"Sell@{opp.dest_exchange} ${opp.dest_price:.2f}"
                )
                result.opportunities.append(opp)
