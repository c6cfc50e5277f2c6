"""
Tests for settings parsing and validation.
"""
import json

import pytest

from carrier_routing.core.config import DEFAULT_CARRIER_REGISTRY, Settings
from carrier_routing.modules.shipping.registry import CarrierRegistry


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.PICKUP_HOLIDAY_CATEGORIES == ["public", "bank", "optional"]
        assert settings.PICKUP_READY_TIME == "0900"
        assert settings.PICKUP_CLOSE_TIME == "1700"
        assert settings.FALLBACK_PHONE_COUNTRY_CALLING_CODE == "31"
        assert settings.CARRIER_REGISTRY == DEFAULT_CARRIER_REGISTRY

    def test_comma_separated_lists(self):
        settings = Settings(
            _env_file=None,
            PICKUP_HOLIDAY_CATEGORIES="Public, bank",
            SHIPPING_JOB_CARRIERS="ups,wuunder",
        )

        assert settings.PICKUP_HOLIDAY_CATEGORIES == ["public", "bank"]
        assert settings.SHIPPING_JOB_CARRIERS == ["UPS", "WUUNDER"]

    def test_registry_from_json(self):
        rows = [{"carrier": "DHL", "priority": 1, "supported_origin_countries": ["DE"]}]
        settings = Settings(_env_file=None, CARRIER_REGISTRY=json.dumps(rows))

        registry = CarrierRegistry.from_config(settings.CARRIER_REGISTRY)

        assert [e.carrier.value for e in registry.entries] == ["DHL"]

    def test_unknown_holiday_category_rejected(self):
        with pytest.raises(ValueError, match="Unknown holiday categories"):
            Settings(_env_file=None, PICKUP_HOLIDAY_CATEGORIES="public,carnival")

    @pytest.mark.parametrize("category", ["workday", "half_day"])
    def test_non_closure_holiday_category_rejected(self, category):
        """Categories that mark working days cannot close the pickup calendar."""
        with pytest.raises(ValueError, match="Unknown holiday categories"):
            Settings(_env_file=None, PICKUP_HOLIDAY_CATEGORIES=f"public,{category}")

    def test_duplicate_registry_priorities_rejected(self):
        rows = [
            {"carrier": "UPS", "priority": 1, "supported_origin_countries": ["NL"]},
            {"carrier": "DHL", "priority": 1, "supported_origin_countries": ["DE"]},
        ]
        with pytest.raises(ValueError, match="priorities must be unique"):
            Settings(_env_file=None, CARRIER_REGISTRY=rows)

    def test_pickup_time_format(self):
        with pytest.raises(ValueError, match="HHMM"):
            Settings(_env_file=None, PICKUP_READY_TIME="9:00")

    def test_attempts_must_be_positive(self):
        with pytest.raises(ValueError, match="PICKUP_MAX_ADVANCE_ATTEMPTS"):
            Settings(_env_file=None, PICKUP_MAX_ADVANCE_ATTEMPTS=0)
