"""
Pytest configuration and fixtures for carrier routing tests.
"""
import os
from datetime import date, datetime
from typing import Dict, Set, Tuple
from unittest.mock import AsyncMock

import pytest

# Set test environment before importing package modules
os.environ.setdefault("ENVIRONMENT", "test")

from carrier_routing.core.config import DEFAULT_CARRIER_REGISTRY  # noqa: E402
from carrier_routing.modules.shipping.calendar import HolidayCalendar  # noqa: E402
from carrier_routing.modules.shipping.carriers.base import CarrierContext  # noqa: E402
from carrier_routing.modules.shipping.contact import ContactNormalizer  # noqa: E402
from carrier_routing.modules.shipping.registry import CarrierRegistry  # noqa: E402
from carrier_routing.modules.shipping.scheduler import PickupScheduler  # noqa: E402
from carrier_routing.services.shipping_service import ShippingService  # noqa: E402

# Wednesday
FIXED_NOW = datetime(2024, 5, 8, 10, 30)


class StaticHolidayProvider:
    """Holiday provider with a fixed table: {country: {category: {dates}}}."""

    def __init__(self, table: Dict[str, Dict[str, Set[date]]]):
        self.table = table
        self.calls = []

    def holiday_dates(self, country: str, year: int, categories: Tuple[str, ...]) -> Set[date]:
        self.calls.append((country, year, categories))
        by_category = self.table.get(country, {})
        dates = set()
        for category in categories:
            dates |= {d for d in by_category.get(category, set()) if d.year == year}
        return dates


def make_scheduler(table=None, now: datetime = FIXED_NOW, max_attempts: int = 30) -> PickupScheduler:
    calendar = HolidayCalendar(
        categories=["public", "bank", "optional"],
        provider=StaticHolidayProvider(table or {}),
    )
    return PickupScheduler(calendar=calendar, clock=lambda: now, max_attempts=max_attempts)


@pytest.fixture
def registry() -> CarrierRegistry:
    """Registry built from the default routing table."""
    return CarrierRegistry.from_config(DEFAULT_CARRIER_REGISTRY)


@pytest.fixture
def scheduler_factory():
    """Build a PickupScheduler over a static holiday table and a fixed clock."""
    return make_scheduler


@pytest.fixture
def holiday_provider_factory():
    return StaticHolidayProvider


@pytest.fixture
def scheduler() -> PickupScheduler:
    return make_scheduler()


@pytest.fixture
def mock_gateway() -> AsyncMock:
    """Create mock carrier gateway."""
    gateway = AsyncMock()
    gateway.submit_shipment = AsyncMock(return_value={
        "provider_id": "SHP-1001",
        "tracking_number": "1Z999AA10123456784",
        "label_url": "https://labels.example.com/SHP-1001.pdf",
    })
    gateway.submit_pickup = AsyncMock(return_value={"prn": "PRN-2002"})
    gateway.push_tracking = AsyncMock(return_value={"status": "accepted"})
    return gateway


@pytest.fixture
def mock_warehouse() -> AsyncMock:
    """Create mock warehouse data source."""
    warehouse = AsyncMock()
    warehouse.get_warehouse_info = AsyncMock(return_value={
        "companyname": "Comic Corner",
        "firstname": "Sam",
        "lastname": "Jansen",
        "address": "Kerkstraat 1",
        "city": "Rotterdam",
        "postalcode": "3011AA",
        "country": "nl",
        "email": "dealer@example.com",
        "phone": "010 123 4567",
    })
    warehouse.get_account_info = AsyncMock(return_value={"account_number": "A1B2C3"})
    warehouse.requires_pickup = AsyncMock(return_value=True)
    warehouse.mark_pickup_booked = AsyncMock(return_value=None)
    warehouse.get_pending_pickups = AsyncMock(return_value=[])
    warehouse.get_pending_tracking_updates = AsyncMock(return_value=[])
    return warehouse


@pytest.fixture
def mock_fulfillments() -> AsyncMock:
    store = AsyncMock()
    store.add_to_fulfillment = AsyncMock(return_value=501)
    store.add_to_fulfilled_lines = AsyncMock(return_value=None)
    store.fulfill_on_platform = AsyncMock(return_value=None)
    return store


@pytest.fixture
def mock_eligibility() -> AsyncMock:
    checker = AsyncMock()
    checker.can_create_shipment = AsyncMock(return_value=True)
    checker.can_invoice_and_notify = AsyncMock(return_value=True)
    return checker


@pytest.fixture
def mock_notifier() -> AsyncMock:
    notifier = AsyncMock()
    notifier.send_dealer_notification = AsyncMock(return_value=None)
    return notifier


@pytest.fixture
def mock_invoices() -> AsyncMock:
    invoices = AsyncMock()
    invoices.convert_concept_to_paid = AsyncMock(return_value=None)
    return invoices


@pytest.fixture
def carrier_context(mock_gateway, mock_warehouse, scheduler) -> CarrierContext:
    return CarrierContext(
        gateway=mock_gateway,
        warehouse=mock_warehouse,
        scheduler=scheduler,
        contacts=ContactNormalizer(),
        default_processed_by="SYSTEM",
    )


@pytest.fixture
def shipping_service(
    registry,
    carrier_context,
    mock_warehouse,
    mock_fulfillments,
    mock_eligibility,
    mock_notifier,
    mock_invoices,
) -> ShippingService:
    return ShippingService(
        registry=registry,
        warehouse=mock_warehouse,
        fulfillments=mock_fulfillments,
        eligibility=mock_eligibility,
        notifier=mock_notifier,
        invoices=mock_invoices,
        context=carrier_context,
    )


@pytest.fixture
def shipment_fields() -> dict:
    """Raw shipment request as sent by the storefront."""
    return {
        "order_id": 42,
        "bc_id": 1042,
        "bc_store_hash": "abc123",
        "from_warehouse_id": 7,
        "pack_customer_reference": "REF-42",
        "from_business": "Comic Corner",
        "from_given_name": "Sam",
        "from_family_name": "Jansen",
        "from_phone_number": "010 123 4567",
        "from_street": "Kerkstraat",
        "from_house_number": "1",
        "from_zip_code": "3011AA",
        "from_locality": "Rotterdam",
        "from_country": "nl",
        "to_given_name": "Alex",
        "to_family_name": "Smith",
        "to_phone_number": "+1 650-253-0000",
        "to_street": "Main Street",
        "to_house_number": "10",
        "to_zip_code": "94043",
        "to_locality": "Mountain View",
        "to_province_code": "CA",
        "to_country": "US",
        "fulfillmentlines": [{"line_id": 1, "quantity": 2}],
    }
