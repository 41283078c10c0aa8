"""
Core arbitrage evaluation: data structures, fee model, route evaluator,
cycle orchestration, statistics and shared state.
"""

from .exceptions import ArbitrageError, ConfigurationError, DataUnavailable, NotificationFailure
from .models import ArbitrageOpportunity, ExchangeID, PriceSnapshot, Stats, Token, TradeLimits
from .fees import FeeRouteModel, TransferFees
from .evaluator import RouteEvaluation, RouteEvaluator, RouteOutcome
from .cycle import ArbitrageEvaluationCycle, CycleResult, exchange_pairs
from .stats import StatsAccumulator
from .state import PublishedState, SharedStateStore

__all__ = [
    "ArbitrageError",
    "ConfigurationError",
    "DataUnavailable",
    "NotificationFailure",
    "ArbitrageOpportunity",
    "ExchangeID",
    "PriceSnapshot",
    "Stats",
    "Token",
    "TradeLimits",
    "FeeRouteModel",
    "TransferFees",
    "RouteEvaluation",
    "RouteEvaluator",
    "RouteOutcome",
    "ArbitrageEvaluationCycle",
    "CycleResult",
    "exchange_pairs",
    "StatsAccumulator",
    "PublishedState",
    "SharedStateStore",
]
