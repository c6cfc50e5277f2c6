"""
Holiday calendar for pickup planning

Backed by the ``holidays`` package. A date is a non-working day when it is a
holiday in one of the enabled categories (public, bank and optional by
default). Days that are only observances do not block pickups.
"""
import logging
from datetime import date
from typing import Dict, Iterable, Optional, Protocol, Set, Tuple

import holidays

logger = logging.getLogger(__name__)


class HolidayProvider(Protocol):
    """Source of holiday dates per country, year and category."""

    def holiday_dates(self, country: str, year: int, categories: Tuple[str, ...]) -> Set[date]:
        ...


class HolidaysLibraryProvider:
    """HolidayProvider backed by ``holidays.country_holidays``."""

    def holiday_dates(self, country: str, year: int, categories: Tuple[str, ...]) -> Set[date]:
        try:
            country_calendar = holidays.country_holidays(country, years=year)
        except NotImplementedError:
            logger.warning(f"No holiday data for country {country}; only weekends are skipped")
            return set()

        supported = set(getattr(country_calendar, "supported_categories", ("public",)))
        usable = tuple(category for category in categories if category in supported)
        if not usable:
            return set()

        calendar = holidays.country_holidays(country, years=year, categories=usable)
        return set(calendar.keys())


class HolidayCalendar:
    """
    Answers "is this a non-working day in this country?".

    Results are cached per (country, year); the calendar is read-only once
    a year has been loaded.
    """

    def __init__(
        self,
        categories: Optional[Iterable[str]] = None,
        provider: Optional[HolidayProvider] = None,
    ):
        if categories is None:
            from carrier_routing.core.config import settings
            categories = settings.PICKUP_HOLIDAY_CATEGORIES
        self.categories: Tuple[str, ...] = tuple(c.lower() for c in categories)
        self._provider = provider or HolidaysLibraryProvider()
        self._cache: Dict[Tuple[str, int], Set[date]] = {}

    def _dates_for(self, country: str, year: int) -> Set[date]:
        key = (country, year)
        if key not in self._cache:
            self._cache[key] = self._provider.holiday_dates(country, year, self.categories)
            logger.debug(f"Loaded {len(self._cache[key])} holidays for {country}/{year}")
        return self._cache[key]

    def is_holiday(self, country_code: str, day: date) -> bool:
        if not country_code:
            return False
        return day in self._dates_for(country_code.upper(), day.year)
