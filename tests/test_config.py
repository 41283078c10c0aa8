"""
Tests for configuration loading.
"""

import json

import pytest
from pydantic import ValidationError

from config import (
    DEFAULT_BANK_LIMIT_USD, DEFAULT_MIN_PROFIT_USD, DEFAULT_TOKENS, AppConfig, load_config,
)
from src.core import ConfigurationError, ExchangeID, Token, TransferFees


@pytest.fixture(autouse=True)
def no_telegram_env(monkeypatch):
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.delenv("TELEGRAM_CHAT_ID", raising=False)


def write_config(tmp_path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return str(path)


class TestLoadConfig:
    """Tests for load_config"""

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = load_config(str(tmp_path / "missing.json"))

        assert cfg == AppConfig()
        assert cfg.tokens == DEFAULT_TOKENS
        assert cfg.min_profit_usd == DEFAULT_MIN_PROFIT_USD
        assert cfg.bank_limit == DEFAULT_BANK_LIMIT_USD

    def test_invalid_json_uses_defaults(self, tmp_path):
        cfg = load_config(write_config(tmp_path, "{not json"))

        assert cfg == AppConfig()

    def test_malformed_token_uses_defaults(self, tmp_path):
        """A token without the quote suffix rejects the whole file"""
        cfg = load_config(write_config(tmp_path, {"tokens": ["BTCUSDT", "BTC"], "bank_limit": 1}))

        assert cfg == AppConfig()

    def test_loads_values(self, tmp_path):
        path = write_config(tmp_path, {
            "min_profit_usd": 25,
            "commission": 0.1,
            "tokens": ["btcusdt", "TONUSDT"],
            "bank_limit": 2000,
            "transfer_fees": {"TON": {"binance_withdraw": 0.05, "okx_deposit": 0.01}},
            "transfer_routes": {"TON": ["TON", "USDT"]},
            "transfer_networks": {"TON": {"binance": "TON"}},
        })

        cfg = load_config(path)

        assert cfg.min_profit_usd == 25
        assert cfg.parsed_tokens() == [Token("BTC", "USDT"), Token("TON", "USDT")]
        limits = cfg.trade_limits()
        assert limits.bank_limit_usd == 2000
        assert limits.commission_percent == 0.1

        fee_model = cfg.fee_route_model()
        fees = fee_model.fees_for("TON")
        assert fees.withdraw_fee(ExchangeID.BINANCE) == 0.05
        assert fees.deposit_fee(ExchangeID.OKX) == 0.01
        assert fees.withdraw_fee(ExchangeID.HUOBI) == 0.0
        assert fee_model.routes_for("TON") == ("TON", "USDT")
        assert fee_model.routes_for("BTC") == ("BTC",)
        assert fee_model.network_for("TON", ExchangeID.BINANCE) == "TON"
        assert fee_model.network_for("TON", ExchangeID.OKX) == ""

    def test_telegram_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "env-token")
        monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")

        cfg = load_config(write_config(tmp_path, {"telegram_token": "file-token"}))

        assert cfg.telegram_token == "env-token"
        assert cfg.telegram_chat_id == "42"
        assert cfg.telegram_enabled


class TestAppConfig:
    def test_min_volume_above_max_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(min_trade_volume=10, max_trade_volume=5)

    def test_quote_asset_applies_to_tokens(self):
        cfg = AppConfig(tokens=["ETHBTC"], quote_asset="btc")

        assert cfg.parsed_tokens() == [Token("ETH", "BTC")]

    def test_negative_fee_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(transfer_fees={"BTC": {"withdraw": {"binance": -1}}})

    def test_unknown_flat_fee_field_rejected(self):
        with pytest.raises(ValidationError):
            TransferFees.model_validate({"binance_fee": 1})

    def test_mixed_fee_layouts_rejected(self):
        """A flat key next to a nested section would otherwise be lost"""
        with pytest.raises(ValidationError, match="mix nested and flat"):
            TransferFees.model_validate({"withdraw": {"binance": 0.1}, "kucoin_deposit": 5})

    @pytest.mark.parametrize("data", [
        {"deposits": {"kucoin": 5}},
        {"withdraw": {"binance": 0.1}, "deposits": {"kucoin": 5}},
    ])
    def test_misspelled_section_rejected(self, data):
        with pytest.raises(ValidationError):
            TransferFees.model_validate(data)

    def test_misspelled_section_falls_back_to_defaults(self, tmp_path):
        path = write_config(tmp_path, {
            "bank_limit": 1234,
            "transfer_fees": {"BTC": {"withdraw": {"binance": 0.1}, "deposits": {"kucoin": 5}}},
        })

        assert load_config(path) == AppConfig()


class TestToken:
    def test_parse(self):
        token = Token.parse(" ethusdt ")

        assert token.base == "ETH"
        assert token.quote == "USDT"
        assert token.symbol == "ETHUSDT"

    @pytest.mark.parametrize("symbol", ["USDT", "BTC", "BTCUSDC", ""])
    def test_parse_rejects_malformed(self, symbol):
        with pytest.raises(ConfigurationError):
            Token.parse(symbol)
