"""
Pickup scheduling

Pickups are booked for the next working day: never on a weekend and never on
a holiday in the pickup country. The search is bounded so a misconfigured
calendar fails loudly instead of looping forever.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from carrier_routing.core.exceptions import SchedulingFailureError
from carrier_routing.modules.shipping.calendar import HolidayCalendar

logger = logging.getLogger(__name__)

FRIDAY = 4
SATURDAY = 5


def advance_one_working_step(day: date) -> date:
    """Friday jumps to Monday, Saturday to Monday, any other day to the next."""
    weekday = day.weekday()
    if weekday == FRIDAY:
        return day + timedelta(days=3)
    if weekday == SATURDAY:
        return day + timedelta(days=2)
    return day + timedelta(days=1)


class PickupScheduler:
    """
    Computes the next valid pickup date for a country.

    Args:
        calendar: Holiday lookups for the pickup country
        clock: Returns "now"; injectable for tests
        max_attempts: Number of advances tried before giving up
    """

    def __init__(
        self,
        calendar: Optional[HolidayCalendar] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_attempts: Optional[int] = None,
    ):
        from carrier_routing.core.config import settings

        self.calendar = calendar or HolidayCalendar()
        self.clock = clock or datetime.now
        self.max_attempts = settings.PICKUP_MAX_ADVANCE_ATTEMPTS if max_attempts is None else max_attempts
        self.ready_time = settings.PICKUP_READY_TIME
        self.close_time = settings.PICKUP_CLOSE_TIME

    def next_pickup_date(self, country_code: str) -> date:
        """
        First date after today that is neither a weekend day nor a holiday.

        Raises:
            SchedulingFailureError: no such date within max_attempts advances
        """
        day = self.clock().date()

        for _ in range(self.max_attempts):
            day = advance_one_working_step(day)
            if not self.calendar.is_holiday(country_code, day):
                return day
            logger.debug(f"{day.isoformat()} is a holiday in {country_code}, skipping")

        logger.error(
            f"No pickup date found for {country_code} within {self.max_attempts} attempts"
        )
        raise SchedulingFailureError(
            f"Could not find a pickup date for {country_code} within {self.max_attempts} days",
            country=country_code,
            attempts=self.max_attempts,
        )
