"""
Contact phone normalization

Carriers reject bookings with malformed phone numbers, so every phone number
is parsed against its country before it goes out. Phone validity is advisory:
when a number is missing or does not validate, the organization's own
contact number is used instead of failing the booking.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import phonenumbers
from phonenumbers import NumberParseException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contact:
    """Normalized phone contact (national number, calling code, extension)."""
    national_number: str
    country_calling_code: str
    extension: str = ""
    is_fallback: bool = False

    def dial_string(self, international_prefix: str = "00") -> str:
        """Full number as dialed from abroad, e.g. 0031201234567."""
        return f"{international_prefix}{self.country_calling_code}{self.national_number}"


class ContactNormalizer:
    """
    Validates phone numbers and substitutes a fixed fallback contact.

    Args:
        fallback: Contact returned for absent, unparseable or invalid numbers.
            Defaults to the FALLBACK_PHONE_* settings.
    """

    def __init__(self, fallback: Optional[Contact] = None):
        if fallback is None:
            from carrier_routing.core.config import settings
            fallback = Contact(
                national_number=settings.FALLBACK_PHONE_NUMBER,
                country_calling_code=settings.FALLBACK_PHONE_COUNTRY_CALLING_CODE,
                extension=settings.FALLBACK_PHONE_EXTENSION,
                is_fallback=True,
            )
        self.fallback = fallback

    def normalize(self, raw_phone: Optional[str], country_code: Optional[str]) -> Contact:
        if not isinstance(raw_phone, str) or not raw_phone.strip():
            return self.fallback

        region = country_code.upper() if country_code else None
        try:
            number = phonenumbers.parse(raw_phone, region)
        except NumberParseException as e:
            logger.warning(f"Unparseable phone number for {region}, using fallback contact: {e}")
            return self.fallback

        if not phonenumbers.is_valid_number(number):
            logger.warning(f"Invalid phone number for {region}, using fallback contact")
            return self.fallback

        return Contact(
            national_number=str(number.national_number),
            country_calling_code=str(number.country_code),
            extension=number.extension or "",
        )
