"""
Collaborator interfaces

Everything outside the routing core (order database, e-commerce platform,
invoicing, mail, carrier wire protocols) is reached through these narrow
protocols. Implementations are injected into ShippingService and the carrier
adapters.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from carrier_routing.models.carrier import CarrierCode, NotificationKind


@dataclass(frozen=True)
class WarehouseInfo:
    """Pickup address and contact details of a dealer location."""
    company_name: str
    first_name: str
    last_name: str
    address: str
    city: str
    postal_code: str
    country: str
    address2: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def coerce(cls, value: Any) -> "WarehouseInfo":
        """Accept a WarehouseInfo or a raw row using the legacy column names."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Cannot read warehouse info from {type(value).__name__}")
        return cls(
            company_name=str(value.get("company_name") or value.get("companyname") or ""),
            first_name=str(value.get("first_name") or value.get("firstname") or ""),
            last_name=str(value.get("last_name") or value.get("lastname") or ""),
            address=str(value["address"]),
            address2=value.get("address2"),
            city=str(value["city"]),
            postal_code=str(value.get("postal_code") or value.get("postalcode") or ""),
            country=str(value["country"]).upper(),
            email=value.get("email"),
            phone=value.get("phone"),
        )


class CarrierGateway(Protocol):
    """
    Speaks each carrier's wire protocol.

    Requests are carrier-agnostic dataclasses with a ``to_payload()`` method;
    responses are plain mappings. Any exception means the carrier call failed.
    """

    async def submit_shipment(self, carrier: CarrierCode, request: Any) -> Mapping[str, Any]:
        ...

    async def submit_pickup(self, carrier: CarrierCode, request: Any) -> Mapping[str, Any]:
        ...

    async def push_tracking(self, carrier: CarrierCode, record: Mapping[str, Any]) -> Mapping[str, Any]:
        ...


class FulfillmentStore(Protocol):
    async def add_to_fulfillment(self, shipment: Any) -> Any:
        """Persist the shipment as a fulfillment; returns the fulfillment id."""
        ...

    async def add_to_fulfilled_lines(self, lines: Sequence[Dict[str, Any]], fulfillment_id: Any) -> None:
        ...

    async def fulfill_on_platform(self, order_id: Any, fulfillment_id: Any) -> None:
        ...


class EligibilityChecker(Protocol):
    async def can_create_shipment(
        self,
        platform_order_id: Any,
        store_hash: Optional[str],
        order_id: Any,
        lines: Sequence[Dict[str, Any]],
    ) -> bool:
        ...

    async def can_invoice_and_notify(self, order_id: Any, lines: Sequence[Dict[str, Any]]) -> bool:
        ...


class DealerNotifier(Protocol):
    async def send_dealer_notification(
        self,
        kind: NotificationKind,
        location_id: Any,
        order_id: Any,
        fulfillment_id: Any,
    ) -> None:
        ...


class InvoiceService(Protocol):
    async def convert_concept_to_paid(
        self,
        order_id: Any,
        fulfillment_id: Any,
        platform_order_id: Any,
        store_hash: Optional[str],
    ) -> None:
        ...


class WarehouseDataSource(Protocol):
    async def get_warehouse_info(self, location_id: Any) -> Any:
        """WarehouseInfo or a mapping accepted by WarehouseInfo.coerce."""
        ...

    async def get_account_info(self, carrier: CarrierCode, country: str) -> Optional[Mapping[str, Any]]:
        ...

    async def get_pending_pickups(self, carrier: CarrierCode) -> List[Any]:
        ...

    async def get_pending_tracking_updates(self, carrier: CarrierCode) -> List[Mapping[str, Any]]:
        ...

    async def mark_pickup_booked(self, fulfillment_id: Any) -> None:
        ...

    async def requires_pickup(self, location_id: Any) -> bool:
        ...
