"""Tests for the settings models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dailytask.config import ApiSettings, StatsSettings, StoreSettings


class TestApiSettings:
    def test_base_url_gets_one_trailing_slash(self):
        assert ApiSettings(base_url="http://tracker.test/api").base_url_str == "http://tracker.test/api/"
        assert ApiSettings(base_url="http://tracker.test/api/").base_url_str == "http://tracker.test/api/"

    def test_token_is_secret(self):
        settings = ApiSettings(base_url="http://tracker.test/api", token="abc")
        assert "abc" not in repr(settings)
        assert settings.token.get_secret_value() == "abc"


class TestStoreSettings:
    def test_debounce_in_seconds(self):
        assert StoreSettings(debounce_ms=300).debounce_seconds == pytest.approx(0.3)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            StoreSettings(fetch_timeout_seconds=0)


class TestStatsSettings:
    def test_minimum_cannot_exceed_window(self):
        with pytest.raises(ValidationError):
            StatsSettings(period_window_days=3, period_min_days=5)
