"""Configuration for the transfer arbitrage scanner"""
import json
import logging
import os
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from src.core.fees import FeeRouteModel, TransferFees
from src.core.models import DEFAULT_QUOTE_ASSET, Token, TradeLimits

logger = logging.getLogger(__name__)

# ============================================================
# OPERATION MODE
# ============================================================
# Options:
# - "live": poll the exchanges' public REST APIs
# - "simulation": generate mock prices (for testing when network is blocked)
MODE = os.getenv("MODE", "live")

# ============================================================
# FILES
# ============================================================
CONFIG_PATH = os.getenv("ARB_CONFIG_PATH", "config.json")

# ============================================================
# EXCHANGE REST ENDPOINTS
# ============================================================
EXCHANGE_REST_URLS = {
    "binance": "https://api.binance.com",
    "kucoin": "https://api.kucoin.com",
    "bybit": "https://api.bybit.com",
    "okx": "https://www.okx.com",
    "huobi": "https://api.huobi.pro",
}

# ============================================================
# DEFAULTS (used when config.json is missing or unusable)
# ============================================================
DEFAULT_MIN_PROFIT_USD = 10.0
DEFAULT_COMMISSION_PERCENT = 0.2
DEFAULT_TOKENS = ["BTCUSDT"]
DEFAULT_MIN_TRADE_VOLUME = 50.0
DEFAULT_MAX_TRADE_VOLUME = 10000.0
DEFAULT_BANK_LIMIT_USD = 5000.0
DEFAULT_POLL_INTERVAL_SEC = 5
DEFAULT_FETCH_TIMEOUT_SEC = 10.0
STATS_LOG_INTERVAL_SEC = 60

# Web server settings
WEB_HOST = os.getenv("HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("PORT", "8080"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class AppConfig(BaseModel):
    """Contents of config.json"""
    min_profit_usd: float = DEFAULT_MIN_PROFIT_USD
    commission: float = Field(DEFAULT_COMMISSION_PERCENT, ge=0, lt=100)
    tokens: List[str] = Field(default_factory=lambda: list(DEFAULT_TOKENS))
    quote_asset: str = DEFAULT_QUOTE_ASSET
    min_trade_volume: float = Field(DEFAULT_MIN_TRADE_VOLUME, ge=0)
    max_trade_volume: float = Field(DEFAULT_MAX_TRADE_VOLUME, gt=0)
    bank_limit: float = Field(DEFAULT_BANK_LIMIT_USD, gt=0)
    poll_interval_sec: float = Field(DEFAULT_POLL_INTERVAL_SEC, gt=0)
    fetch_timeout_sec: float = Field(DEFAULT_FETCH_TIMEOUT_SEC, gt=0)
    stats_log_interval_sec: float = Field(STATS_LOG_INTERVAL_SEC, ge=0)
    transfer_fees: Dict[str, TransferFees] = Field(default_factory=dict)
    transfer_networks: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    transfer_routes: Dict[str, List[str]] = Field(default_factory=dict)
    telegram_token: str = ""
    telegram_chat_id: str = ""

    @field_validator("quote_asset")
    @classmethod
    def quote_upper(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("quote_asset must not be empty")
        return v

    @model_validator(mode="after")
    def check_tokens(self) -> "AppConfig":
        # Raises ConfigurationError (a ValueError) for malformed symbols
        for symbol in self.tokens:
            Token.parse(symbol, self.quote_asset)
        if self.min_trade_volume > self.max_trade_volume:
            raise ValueError("min_trade_volume must not exceed max_trade_volume")
        return self

    def parsed_tokens(self) -> List[Token]:
        return [Token.parse(symbol, self.quote_asset) for symbol in self.tokens]

    def trade_limits(self) -> TradeLimits:
        return TradeLimits(
            min_profit_usd=self.min_profit_usd,
            commission_percent=self.commission,
            min_trade_volume=self.min_trade_volume,
            max_trade_volume=self.max_trade_volume,
            bank_limit_usd=self.bank_limit,
        )

    def fee_route_model(self) -> FeeRouteModel:
        return FeeRouteModel(
            fees=self.transfer_fees,
            networks=self.transfer_networks,
            routes=self.transfer_routes,
        )

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_token and self.telegram_chat_id)


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load config.json, falling back to the documented defaults.

    A missing file, invalid JSON or a failed validation (including malformed
    tokens) is logged and never fatal. Telegram credentials can be supplied
    through TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID instead of the file.
    """
    path = path or CONFIG_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        cfg = AppConfig.model_validate(raw)
        logger.info(f"Loaded configuration from {path}")
    except FileNotFoundError:
        logger.warning(f"{path} not found, using default configuration")
        cfg = AppConfig()
    except ValidationError as e:
        logger.error(f"Invalid configuration in {path}: {e}; using default configuration")
        cfg = AppConfig()
    except (OSError, ValueError) as e:
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        logger.error(f"Could not read {path}: {e}; using default configuration")
        cfg = AppConfig()

    overrides = {}
    if os.getenv("TELEGRAM_BOT_TOKEN"):
        overrides["telegram_token"] = os.environ["TELEGRAM_BOT_TOKEN"]
    if os.getenv("TELEGRAM_CHAT_ID"):
        overrides["telegram_chat_id"] = os.environ["TELEGRAM_CHAT_ID"]
    if overrides:
        cfg = cfg.model_copy(update=overrides)
    return cfg
