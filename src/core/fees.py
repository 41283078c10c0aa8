"""
Transfer fee tables and route candidates.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import ExchangeID


class TransferFees(BaseModel):
    """
    Withdraw/deposit fees of one route token, in that token's own units.

    Accepts the nested layout ``{"withdraw": {"binance": 0.0005}}`` as well as
    the flat layout ``{"binance_withdraw": 0.0005, "okx_deposit": 0}``, but not
    both in one table. Unknown keys are rejected.
    An exchange missing from the table is charged nothing.
    """
    withdraw: Dict[ExchangeID, float] = Field(default_factory=dict)
    deposit: Dict[ExchangeID, float] = Field(default_factory=dict)

    model_config = {"frozen": True, "extra": "forbid"}

    @model_validator(mode="before")
    @classmethod
    def accept_flat_layout(cls, data):
        if not isinstance(data, dict):
            return data
        if "withdraw" in data or "deposit" in data:
            mixed = [key for key in data if key not in ("withdraw", "deposit")]
            if mixed:
                raise ValueError(f"Fee fields mix nested and flat layouts: {', '.join(mixed)}")
            return data
        withdraw, deposit = {}, {}
        for key, value in data.items():
            exchange, _, kind = key.rpartition("_")
            if kind == "withdraw":
                withdraw[exchange] = value
            elif kind == "deposit":
                deposit[exchange] = value
            else:
                raise ValueError(f"Unknown fee field: {key}")
        return {"withdraw": withdraw, "deposit": deposit}

    @field_validator("withdraw", "deposit")
    @classmethod
    def fees_not_negative(cls, v: Dict[ExchangeID, float]) -> Dict[ExchangeID, float]:
        for exchange, fee in v.items():
            if fee < 0:
                raise ValueError(f"Negative fee for {exchange.value}: {fee}")
        return v

    def withdraw_fee(self, exchange: ExchangeID) -> float:
        return self.withdraw.get(exchange, 0.0)

    def deposit_fee(self, exchange: ExchangeID) -> float:
        return self.deposit.get(exchange, 0.0)


class FeeRouteModel:
    """
    Read-only lookups over fee tables, network labels and route candidates.

    A miss is returned as ``None`` / a default, never raised: the caller
    skips that combination and carries on.
    """

    def __init__(
        self,
        fees: Optional[Mapping[str, TransferFees]] = None,
        networks: Optional[Mapping[str, Mapping[str, str]]] = None,
        routes: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self._fees = MappingProxyType({
            token.upper(): table for token, table in (fees or {}).items()
        })
        self._networks = MappingProxyType({
            token.upper(): MappingProxyType({ex.lower(): label for ex, label in labels.items()})
            for token, labels in (networks or {}).items()
        })
        self._routes = MappingProxyType({
            base.upper(): tuple(route.upper() for route in candidates)
            for base, candidates in (routes or {}).items()
        })

    def fees_for(self, route_token: str) -> Optional[TransferFees]:
        return self._fees.get(route_token.upper())

    def routes_for(self, base_asset: str) -> Tuple[str, ...]:
        """Ordered route tokens for a base asset, defaulting to a direct transfer"""
        routes = self._routes.get(base_asset.upper())
        if not routes:
            return (base_asset.upper(),)
        return routes

    def network_for(self, route_token: str, exchange: ExchangeID) -> str:
        return self._networks.get(route_token.upper(), {}).get(exchange.value, "")
