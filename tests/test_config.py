"""Tests for settings loading and logging setup."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal

import pytest
import structlog
from pydantic import ValidationError

from amlaki_marketplace.config import Settings, get_settings
from amlaki_marketplace.domain.enums import DealStatus
from amlaki_marketplace.logging_config import bind_aggregate, get_logger, setup_logging


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in ("AMLAKI_APP_ENV", "AMLAKI_DEFAULT_CURRENCY", "AMLAKI_MAX_MEDIA_ITEMS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.default_currency == "IRR"
        assert settings.max_agent_commission_percent == Decimal("95")
        assert settings.max_media_items == 50
        assert settings.is_development

    def test_env_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("AMLAKI_APP_ENV", "production")
        monkeypatch.setenv("amlaki_listing_code_max_length", "20")
        settings = Settings(_env_file=None)
        assert settings.app_env == "production"
        assert settings.listing_code_max_length == 20
        assert not settings.is_development

    def test_currency_normalized(self, monkeypatch) -> None:
        monkeypatch.setenv("AMLAKI_DEFAULT_CURRENCY", " usd ")
        assert Settings(_env_file=None).default_currency == "USD"

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("AMLAKI_MAX_MEDIA_ITEMS", "0"),
            ("AMLAKI_MAX_AGENT_COMMISSION_PERCENT", "120"),
            ("AMLAKI_LISTING_CODE_MIN_LENGTH", "20"),
        ],
    )
    def test_invalid_policy_rejected(self, monkeypatch, name, value) -> None:
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestLogging:
    @pytest.fixture(autouse=True)
    def _restore_logging(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        structlog.reset_defaults()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_logs(self, capsys) -> None:
        setup_logging(log_level="DEBUG", json_logs=True)

        get_logger("amlaki.test").info("deal.started", deal_id="abc-123")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "deal.started"
        assert payload["deal_id"] == "abc-123"
        assert payload["level"] == "info"

    def test_level_filters(self, capsys) -> None:
        setup_logging(log_level="WARNING", json_logs=True)

        get_logger("amlaki.test.level").info("hidden")

        assert "hidden" not in capsys.readouterr().out

    def test_bound_aggregate_ids(self, capsys) -> None:
        setup_logging(json_logs=True)
        log = get_logger("amlaki.test.bound")
        deal_id = uuid.uuid4()

        with bind_aggregate(deal_id=deal_id):
            log.info("listing.sold")
        log.info("listing.published")

        first, second = (json.loads(line) for line in capsys.readouterr().out.splitlines()[-2:])
        assert first["deal_id"] == str(deal_id)
        assert "deal_id" not in second

    def test_domain_values_rendered(self, capsys) -> None:
        setup_logging(json_logs=True)

        get_logger("amlaki.test.values").info(
            "deal.payment_recorded",
            amount=Decimal("600.50"),
            status=DealStatus.PAYMENT_IN_PROGRESS,
            paid_at=datetime(2025, 3, 1, tzinfo=UTC),
        )

        payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert payload["amount"] == "600.50"
        assert payload["status"] == "PaymentInProgress"
        assert payload["paid_at"] == "2025-03-01T00:00:00+00:00"
