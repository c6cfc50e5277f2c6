"""
Application configuration

Carrier routing, pickup scheduling and fallback contact settings.
Values load from the environment (or a .env file); list-valued settings accept
either a JSON array or a comma-separated string.
"""
import json
import logging
from typing import Any, Dict, List, Union

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Holiday categories that block a pickup. "observance" days are working days.
DEFAULT_HOLIDAY_CATEGORIES = ["public", "bank", "optional"]

KNOWN_HOLIDAY_CATEGORIES = {
    "public",
    "bank",
    "optional",
    "government",
    "school",
    "unofficial",
}

# Default routing table. Lower priority number wins the automatic scan.
DEFAULT_CARRIER_REGISTRY: List[Dict[str, Any]] = [
    {
        "carrier": "UPS",
        "priority": 1,
        "supported_origin_countries": [
            "NL", "BE", "LU", "DE", "FR", "AT", "ES", "IT", "PT",
            "DK", "SE", "FI", "IE", "PL", "GB", "US", "CA",
        ],
    },
    {
        "carrier": "DHL",
        "priority": 2,
        "supported_origin_countries": ["NL", "BE", "DE", "AT", "CH", "CZ", "PL"],
    },
    {
        "carrier": "WUUNDER",
        "priority": 3,
        "supported_origin_countries": ["NL", "BE"],
    },
    {
        "carrier": "PACKLINK",
        "priority": 4,
        "supported_origin_countries": ["ES", "FR", "IT", "DE", "GB"],
    },
    {
        "carrier": "MANUAL",
        "priority": 99,
        "supported_origin_countries": [],
        "any_origin": True,
    },
]


def _split_list(v):
    if isinstance(v, str):
        if not v.strip():
            return []
        if v.strip().startswith("["):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "Carrier Routing"
    ENVIRONMENT: str = "production"

    # Carrier gateway (service that speaks each carrier's wire protocol)
    CARRIER_GATEWAY_URL: str = "http://localhost:8080"
    CARRIER_GATEWAY_API_KEY: str = ""
    CARRIER_GATEWAY_TIMEOUT_SECONDS: float = 30.0

    # Routing table - JSON array of {carrier, priority, supported_origin_countries, any_origin}
    CARRIER_REGISTRY: Union[str, List[Dict[str, Any]]] = DEFAULT_CARRIER_REGISTRY

    @field_validator("CARRIER_REGISTRY", mode="before")
    @classmethod
    def parse_carrier_registry(cls, v):
        if isinstance(v, str):
            if not v.strip():
                return DEFAULT_CARRIER_REGISTRY
            return json.loads(v)
        return v

    # Pickup scheduling
    PICKUP_HOLIDAY_CATEGORIES: Union[str, List[str]] = DEFAULT_HOLIDAY_CATEGORIES
    PICKUP_MAX_ADVANCE_ATTEMPTS: int = 30
    PICKUP_READY_TIME: str = "0900"
    PICKUP_CLOSE_TIME: str = "1700"
    PICKUP_SERVICE_CODE: str = "11"  # standard service
    PICKUP_CONTAINER_CODE: str = "01"  # package

    @field_validator("PICKUP_HOLIDAY_CATEGORIES", mode="before")
    @classmethod
    def parse_holiday_categories(cls, v):
        v = _split_list(v)
        if isinstance(v, list):
            return [str(category).strip().lower() for category in v]
        return v

    # Fallback contact used when a location's phone number does not validate
    FALLBACK_PHONE_NUMBER: str = "203350350"
    FALLBACK_PHONE_COUNTRY_CALLING_CODE: str = "31"
    FALLBACK_PHONE_EXTENSION: str = ""

    DEFAULT_PROCESSED_BY: str = "SYSTEM"

    # Background pickup / tracking cycles
    SHIPPING_JOBS_ENABLED: bool = True
    SHIPPING_JOB_CARRIERS: Union[str, List[str]] = ["UPS", "DHL"]
    PICKUP_CYCLE_INTERVAL_SECONDS: int = 3600
    TRACKING_CYCLE_INTERVAL_SECONDS: int = 300

    @field_validator("SHIPPING_JOB_CARRIERS", mode="before")
    @classmethod
    def parse_job_carriers(cls, v):
        v = _split_list(v)
        if isinstance(v, list):
            return [str(carrier).strip().upper() for carrier in v]
        return v

    @model_validator(mode="after")
    def validate_routing_config(self):
        """Reject routing and scheduling setups that can never work."""
        errors = []

        unknown = set(self.PICKUP_HOLIDAY_CATEGORIES) - KNOWN_HOLIDAY_CATEGORIES
        if unknown:
            errors.append(f"Unknown holiday categories: {sorted(unknown)}")

        if self.PICKUP_MAX_ADVANCE_ATTEMPTS < 1:
            errors.append("PICKUP_MAX_ADVANCE_ATTEMPTS must be at least 1")

        priorities = [entry.get("priority") for entry in self.CARRIER_REGISTRY]
        if len(priorities) != len(set(priorities)):
            errors.append("CARRIER_REGISTRY priorities must be unique")

        for time_value in (self.PICKUP_READY_TIME, self.PICKUP_CLOSE_TIME):
            if len(time_value) != 4 or not time_value.isdigit():
                errors.append(f"Pickup time {time_value!r} must use HHMM format")

        if errors:
            raise ValueError(
                "INVALID ROUTING CONFIGURATION:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        return self


settings = Settings()
