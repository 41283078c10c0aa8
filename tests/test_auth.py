"""
Tests for authentication module.
"""

import json
from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from src.auth.models import AccessKey
from src.auth.service import AccessKeyService


class TestAccessKey:
    """Tests for AccessKey"""

    def test_active_until_start_of_day(self):
        key = AccessKey(key="abc", until=date(2026, 12, 31))

        assert key.is_active(datetime(2026, 12, 30, 23, 59, tzinfo=timezone.utc))
        assert not key.is_active(datetime(2026, 12, 31, 0, 0, tzinfo=timezone.utc))

    def test_blank_key_rejected(self):
        with pytest.raises(ValidationError):
            AccessKey(key="   ", until=date(2026, 12, 31))

    def test_key_is_stripped(self):
        assert AccessKey(key=" abc ", until="2026-12-31").key == "abc"

    def test_expiry_is_utc_midnight(self):
        """Expiry is the same instant whatever the caller's timezone"""
        key = AccessKey(key="abc", until=date(2026, 12, 31))
        plus_three = timezone(timedelta(hours=3))
        minus_five = timezone(timedelta(hours=-5))

        assert key.expires_at == datetime(2026, 12, 31, tzinfo=timezone.utc)
        # 01:00 at UTC+3 is still 22:00 UTC on the 30th
        assert key.is_active(datetime(2026, 12, 31, 1, 0, tzinfo=plus_three))
        # 20:00 at UTC-5 on the 30th is already 01:00 UTC on the 31st
        assert not key.is_active(datetime(2026, 12, 30, 20, 0, tzinfo=minus_five))


class TestAccessKeyService:
    """Tests for AccessKeyService"""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text(json.dumps([
            {"key": "alpha", "until": "2030-01-01"},
            {"key": "beta", "until": "2020-01-01"},
        ]))

        service = AccessKeyService(str(path))

        assert len(service) == 2
        assert service.is_valid("alpha")
        assert not service.is_valid("beta")
        assert not service.is_valid("gamma")

    def test_missing_file_disables_login(self, tmp_path):
        service = AccessKeyService(str(tmp_path / "missing.json"))

        assert len(service) == 0
        assert not service.is_valid("anything")

    def test_invalid_file_disables_login(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text(json.dumps([{"key": "alpha"}]))

        assert len(AccessKeyService(str(path))) == 0

    def test_malformed_entry_only_drops_that_key(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text(json.dumps([
            {"key": "good", "until": (date.today() + timedelta(days=30)).isoformat()},
            {"key": "bad", "until": "31.12.2026"},
            {"until": "2030-01-01"},
        ]))

        service = AccessKeyService(str(path))

        assert len(service) == 1
        assert service.is_valid("good")
        assert not service.is_valid("bad")

    def test_non_list_file_disables_login(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text(json.dumps({"key": "alpha", "until": "2030-01-01"}))

        assert len(AccessKeyService(str(path))) == 0

    def test_reload_picks_up_changes(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text("[]")
        service = AccessKeyService(str(path))
        assert not service.is_valid("alpha")

        path.write_text(json.dumps([{"key": "alpha", "until": "2030-01-01"}]))

        assert service.load() == 1
        assert service.is_valid("alpha")

    def test_empty_key_never_valid(self):
        service = AccessKeyService(keys=[AccessKey(key="alpha", until=date.today() + timedelta(days=1))])

        assert not service.is_valid("")
        assert not service.is_valid(None)

    def test_expiry_checked_at_given_time(self):
        service = AccessKeyService(keys=[AccessKey(key="alpha", until=date(2026, 6, 1))])

        assert service.is_valid("alpha", now=datetime(2026, 5, 31, 12, tzinfo=timezone.utc))
        assert not service.is_valid("alpha", now=datetime(2026, 6, 1, 12, tzinfo=timezone.utc))
