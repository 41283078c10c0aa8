"""
Route evaluation: fee arithmetic for one token and one ordered exchange pair.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .fees import FeeRouteModel
from .models import ArbitrageOpportunity, ExchangeID, Token, TradeLimits

logger = logging.getLogger(__name__)


class RouteOutcome(str, Enum):
    """Why a route was or was not turned into an opportunity"""
    NO_FEE_DATA = "no_fee_data"
    INSUFFICIENT_VOLUME = "insufficient_volume"
    NOTHING_AFTER_WITHDRAW = "nothing_after_withdraw"
    NOTHING_AFTER_CONVERSION = "nothing_after_conversion"
    INSUFFICIENT_PROFIT = "insufficient_profit"
    PROFITABLE = "profitable"

    @property
    def checked(self) -> bool:
        """Whether the route reached the profit comparison"""
        return self in (RouteOutcome.INSUFFICIENT_PROFIT, RouteOutcome.PROFITABLE)


@dataclass(frozen=True)
class RouteEvaluation:
    """Result of evaluating one (token, exchange pair, route token) triple"""
    route_token: str
    outcome: RouteOutcome
    volume: float = 0.0
    profit: Optional[float] = None
    opportunity: Optional[ArbitrageOpportunity] = None


class RouteEvaluator:
    """
    Computes transfer profit for every candidate route of an exchange pair.

    For each route token:
      cap        = min(bank / src_price, bank / dst_price, max_volume)
      after_wd   = cap - withdraw_fee                       (route-token units)
      final      = after_wd                                 (direct route)
                 = cap * src_price / dst_price - withdraw_fee (via another token)
      received   = final * dst_price * (1 - commission%)
      spent      = cap * src_price + deposit_fee * dst_price
      profit     = received - spent

    Stateless: the same inputs always produce the same evaluations.
    """

    def __init__(self, fee_model: FeeRouteModel, limits: TradeLimits):
        self.fee_model = fee_model
        self.limits = limits

    def evaluate(
        self,
        token: Token,
        source: ExchangeID,
        dest: ExchangeID,
        source_price: float,
        dest_price: float,
    ) -> List[RouteEvaluation]:
        """Evaluate every candidate route for buying on ``source`` and selling on ``dest``"""
        return [
            self.evaluate_route(token, route_token, source, dest, source_price, dest_price)
            for route_token in self.fee_model.routes_for(token.base)
        ]

    def evaluate_route(
        self,
        token: Token,
        route_token: str,
        source: ExchangeID,
        dest: ExchangeID,
        source_price: float,
        dest_price: float,
    ) -> RouteEvaluation:
        limits = self.limits
        label = f"[{source}->{dest} via {route_token}]"

        fees = self.fee_model.fees_for(route_token)
        if fees is None:
            logger.debug(f"{label} {token}: no fee data")
            return RouteEvaluation(route_token, RouteOutcome.NO_FEE_DATA)

        volume = min(limits.bank_limit_usd / source_price, limits.bank_limit_usd / dest_price)
        volume = min(volume, limits.max_trade_volume)
        if volume < limits.min_trade_volume:
            logger.debug(f"{label} {token}: insufficient volume ({volume:.4f})")
            return RouteEvaluation(route_token, RouteOutcome.INSUFFICIENT_VOLUME, volume=volume)

        withdraw_fee = fees.withdraw_fee(source)
        deposit_fee = fees.deposit_fee(dest)

        volume_after_withdraw = volume - withdraw_fee
        if volume_after_withdraw <= 0:
            logger.debug(f"{label} {token}: nothing left after withdrawal ({volume_after_withdraw:.4f})")
            return RouteEvaluation(route_token, RouteOutcome.NOTHING_AFTER_WITHDRAW, volume=volume)

        final_volume = volume_after_withdraw
        if route_token != token.base:
            final_volume = (volume * source_price / dest_price) - withdraw_fee
            if final_volume <= 0:
                logger.debug(f"{label} {token}: nothing left after conversion ({final_volume:.4f})")
                return RouteEvaluation(route_token, RouteOutcome.NOTHING_AFTER_CONVERSION, volume=volume)

        usd_after_sell = final_volume * dest_price * (1 - limits.commission_percent / 100)
        usd_spent = volume * source_price + deposit_fee * dest_price
        profit = usd_after_sell - usd_spent

        if profit <= limits.min_profit_usd:
            logger.debug(f"{label} {token}: insufficient profit {profit:.2f} USD")
            return RouteEvaluation(
                route_token, RouteOutcome.INSUFFICIENT_PROFIT, volume=volume, profit=profit
            )

        opportunity = ArbitrageOpportunity(
            token=token,
            source_exchange=source,
            dest_exchange=dest,
            route_token=route_token,
            volume=volume,
            profit=profit,
            source_price=source_price,
            dest_price=dest_price,
            withdraw_fee=withdraw_fee,
            deposit_fee=deposit_fee,
            source_network=self.fee_model.network_for(route_token, source),
            dest_network=self.fee_model.network_for(route_token, dest),
        )
        return RouteEvaluation(
            route_token, RouteOutcome.PROFITABLE, volume=volume, profit=profit, opportunity=opportunity
        )
