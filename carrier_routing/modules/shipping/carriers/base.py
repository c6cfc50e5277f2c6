"""
Base Carrier Interface

- All carriers implement create_shipment / post_pickups / update_track_and_trace
- GatewayCarrier holds the shared flow for carriers reached through the
  CarrierGateway; concrete carriers only declare their identity and quirks
- The request document is attached at construction and never mutated
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from carrier_routing.core.exceptions import (
    CarrierRequestFailedError,
    DocumentValidationError,
)
from carrier_routing.models.carrier import CarrierCode
from carrier_routing.modules.shipping.consolidation import PickupBatch
from carrier_routing.modules.shipping.contact import Contact, ContactNormalizer
from carrier_routing.modules.shipping.documents import ShipmentDocument
from carrier_routing.modules.shipping.scheduler import PickupScheduler
from carrier_routing.services.collaborators import (
    CarrierGateway,
    WarehouseDataSource,
    WarehouseInfo,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Carrier-Agnostic Data Classes
# =============================================================================

@dataclass(frozen=True)
class Address:
    """Address with a normalized contact, as sent to the gateway."""
    name: str
    street: str
    zip_code: str
    locality: str
    country: str
    contact: Contact
    business: Optional[str] = None
    street2: Optional[str] = None
    house_number: Optional[str] = None
    province_code: Optional[str] = None
    email: Optional[str] = None
    tax_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "business": self.business,
            "street": self.street,
            "street2": self.street2,
            "house_number": self.house_number,
            "zip_code": self.zip_code,
            "locality": self.locality,
            "province_code": self.province_code,
            "country": self.country,
            "email": self.email,
            "tax_id": self.tax_id,
            "phone": self.contact.dial_string(),
            "phone_extension": self.contact.extension,
        }


@dataclass(frozen=True)
class ShipmentRequest:
    """Shipment booking handed to the gateway."""
    carrier: CarrierCode
    order_id: Any
    warehouse_id: Any
    reference: str
    origin: Address
    destination: Address
    account: Optional[Mapping[str, Any]] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "carrier": self.carrier.value,
            "order_id": self.order_id,
            "warehouse_id": self.warehouse_id,
            "reference": self.reference,
            "origin": self.origin.to_payload(),
            "destination": self.destination.to_payload(),
            "account": dict(self.account) if self.account else None,
        }


@dataclass(frozen=True)
class ShipmentResult:
    """
    Carrier-agnostic outcome of a shipment booking.

    has_callback: the carrier confirms asynchronously; follow-up steps wait
    for that callback instead of running now.
    """
    order_id: Any
    warehouse_id: Any
    shipping_company: str
    shipping_provider: str
    status: str
    has_callback: bool
    request_pickup: bool
    processed_by: str
    provider_id: Optional[str] = None
    label_url: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_url: Optional[str] = None


@dataclass(frozen=True)
class PickupLineItem:
    """Packages for one destination country in a pickup call."""
    destination_country: str
    quantity: int
    service_code: str
    container_code: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "destination_country": self.destination_country,
            "quantity": str(self.quantity),
            "service_code": self.service_code,
            "container_code": self.container_code,
        }


@dataclass(frozen=True)
class PickupSubmission:
    """One pickup call for one location."""
    carrier: CarrierCode
    location_id: Any
    pickup_date: date
    ready_time: str
    close_time: str
    address: Address
    line_items: List[PickupLineItem]
    account: Optional[Mapping[str, Any]] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "carrier": self.carrier.value,
            "location_id": self.location_id,
            "pickup_date": self.pickup_date.strftime("%Y%m%d"),
            "ready_time": self.ready_time,
            "close_time": self.close_time,
            "address": self.address.to_payload(),
            "line_items": [item.to_payload() for item in self.line_items],
            "account": dict(self.account) if self.account else None,
        }


@dataclass
class CarrierPickupConfirmation:
    """Per-location result of a pickup cycle."""
    carrier: CarrierCode
    location_id: Any
    success: bool
    package_count: int = 0
    pickup_date: Optional[date] = None
    confirmation: Optional[Mapping[str, Any]] = None
    error: Optional[str] = None


@dataclass
class TrackingUpdateResult:
    """Per-record result of a tracking push."""
    reference: Any
    success: bool
    response: Optional[Mapping[str, Any]] = None
    error: Optional[str] = None


@dataclass
class CarrierContext:
    """Collaborators every carrier adapter needs."""
    gateway: Optional[CarrierGateway]
    warehouse: Optional[WarehouseDataSource]
    scheduler: PickupScheduler = field(default_factory=PickupScheduler)
    contacts: ContactNormalizer = field(default_factory=ContactNormalizer)
    default_processed_by: Optional[str] = None
    pickup_service_code: Optional[str] = None
    pickup_container_code: Optional[str] = None

    def __post_init__(self):
        from carrier_routing.core.config import settings

        self.default_processed_by = self.default_processed_by or settings.DEFAULT_PROCESSED_BY
        self.pickup_service_code = self.pickup_service_code or settings.PICKUP_SERVICE_CODE
        self.pickup_container_code = self.pickup_container_code or settings.PICKUP_CONTAINER_CODE


# =============================================================================
# Base Carrier Interface
# =============================================================================

class BaseCarrier(ABC):
    """
    Abstract base class for all shipping carriers.

    Args:
        context: Shared collaborators (gateway, warehouse data, scheduler, contacts)
        document: The validated request document this adapter acts on
    """

    has_callback: bool = False

    def __init__(self, context: CarrierContext, document: Any = None):
        self.context = context
        self.document = document

    @property
    @abstractmethod
    def carrier_code(self) -> CarrierCode:
        """Return the carrier code enum value."""
        pass

    @property
    def carrier_name(self) -> str:
        return self.carrier_code.value

    @abstractmethod
    async def create_shipment(self) -> ShipmentResult:
        """Book the shipment described by the attached ShipmentDocument."""
        pass

    @abstractmethod
    async def post_pickups(self, batches: Sequence[PickupBatch]) -> List[CarrierPickupConfirmation]:
        """Book one pickup per location batch."""
        pass

    @abstractmethod
    async def update_track_and_trace(self, records: Sequence[Mapping[str, Any]]) -> List[TrackingUpdateResult]:
        """Push tracking records to the carrier; records fail independently."""
        pass

    def shipment_document(self) -> ShipmentDocument:
        if not isinstance(self.document, ShipmentDocument):
            raise DocumentValidationError(
                f"{self.carrier_name} needs a shipment document to create a shipment",
                field=None,
            )
        return self.document

    def processed_by(self, document: ShipmentDocument) -> str:
        return document.processed_by or self.context.default_processed_by

    @staticmethod
    def tracking_reference(record: Mapping[str, Any]) -> Any:
        return record.get("fulfillment_id") or record.get("tracking_number")


class GatewayCarrier(BaseCarrier):
    """
    Carrier reached through the CarrierGateway.

    Subclasses set:
        requires_account: a carrier account must exist for the origin country
        pickup_included: pickup is part of the booking, no separate pickup call
        tracking_url_template: public tracking page, ``{tracking_number}`` placeholder
    """

    requires_account: bool = True
    pickup_included: bool = False
    tracking_url_template: str = ""

    def get_tracking_url(self, tracking_number: Optional[str]) -> Optional[str]:
        if not tracking_number or not self.tracking_url_template:
            return None
        return self.tracking_url_template.format(tracking_number=tracking_number)

    def _gateway(self) -> CarrierGateway:
        if self.context.gateway is None:
            raise CarrierRequestFailedError(
                f"No carrier gateway configured for {self.carrier_name}",
                carrier=self.carrier_name,
            )
        return self.context.gateway

    async def _account_for(self, country: str, operation: str) -> Optional[Mapping[str, Any]]:
        if self.context.warehouse is None:
            account = None
        else:
            try:
                account = await self.context.warehouse.get_account_info(self.carrier_code, country)
            except Exception as e:
                raise CarrierRequestFailedError(
                    f"Could not retrieve {self.carrier_name} account info for {country}: {e}",
                    carrier=self.carrier_name,
                    operation=operation,
                ) from e

        if not account and self.requires_account:
            raise CarrierRequestFailedError(
                f"Could not find the {self.carrier_name} account, cannot ship from country: {country}",
                carrier=self.carrier_name,
                operation=operation,
                details={"country": country},
            )
        return account

    def _shipment_request(self, document: ShipmentDocument, account) -> ShipmentRequest:
        contacts = self.context.contacts
        origin_name = " ".join(
            part for part in (document.from_business, document.from_given_name, document.from_family_name) if part
        )
        destination_name = " ".join(
            part for part in (document.to_business, document.to_given_name, document.to_family_name) if part
        )
        reference = f"{document.customer_reference or document.order_id} / {document.warehouse_id}"

        return ShipmentRequest(
            carrier=self.carrier_code,
            order_id=document.order_id,
            warehouse_id=document.warehouse_id,
            reference=reference,
            origin=Address(
                name=origin_name,
                business=document.from_business,
                street=document.from_street,
                street2=document.from_street2,
                house_number=document.from_house_number,
                zip_code=document.from_zip_code,
                locality=document.from_locality,
                province_code=document.from_province_code,
                country=document.from_country,
                tax_id=document.from_chamber_of_commerce_number,
                contact=contacts.normalize(document.from_phone_number, document.from_country),
            ),
            destination=Address(
                name=destination_name,
                business=document.to_business,
                street=document.to_street,
                street2=document.to_street2,
                house_number=document.to_house_number,
                zip_code=document.to_zip_code,
                locality=document.to_locality,
                province_code=document.to_province_code,
                country=document.to_country,
                contact=contacts.normalize(document.to_phone_number, document.to_country),
            ),
            account=account,
        )

    async def _needs_pickup(self, document: ShipmentDocument) -> bool:
        if document.drop_off or self.pickup_included or self.context.warehouse is None:
            return False
        try:
            return bool(await self.context.warehouse.requires_pickup(document.warehouse_id))
        except Exception as e:
            logger.error(f"Could not determine pickup need for location {document.warehouse_id}: {e}")
            return True

    async def create_shipment(self) -> ShipmentResult:
        document = self.shipment_document()
        logger.info(f"{self.carrier_name}: creating shipment for order {document.order_id}")

        account = await self._account_for(document.from_country, "create_shipment")
        request = self._shipment_request(document, account)

        try:
            response = await self._gateway().submit_shipment(self.carrier_code, request)
        except CarrierRequestFailedError:
            raise
        except Exception as e:
            logger.error(f"{self.carrier_name} shipment creation failed for order {document.order_id}: {e}")
            raise CarrierRequestFailedError(
                f"Could not create {self.carrier_name} shipment: {e}",
                carrier=self.carrier_name,
                operation="create_shipment",
                details={"order_id": document.order_id},
            ) from e

        if not isinstance(response, Mapping):
            raise CarrierRequestFailedError(
                f"{self.carrier_name} returned an unreadable shipment response",
                carrier=self.carrier_name,
                operation="create_shipment",
                details={"response": response},
            )

        provider_id = response.get("provider_id") or response.get("shipment_id")
        if not provider_id:
            raise CarrierRequestFailedError(
                f"{self.carrier_name} returned no shipment identifier",
                carrier=self.carrier_name,
                operation="create_shipment",
                details={"response": dict(response)},
            )

        tracking_number = response.get("tracking_number")
        result = ShipmentResult(
            order_id=document.order_id,
            warehouse_id=document.warehouse_id,
            provider_id=str(provider_id),
            shipping_company=self.carrier_name,
            shipping_provider=self.carrier_name,
            label_url=response.get("label_url"),
            tracking_number=tracking_number,
            tracking_url=response.get("tracking_url") or self.get_tracking_url(tracking_number),
            status=response.get("status") or ("requested" if self.has_callback else "booked"),
            has_callback=self.has_callback,
            request_pickup=await self._needs_pickup(document),
            processed_by=self.processed_by(document),
        )
        logger.info(
            f"{self.carrier_name}: shipment {result.provider_id} booked for order {document.order_id}, "
            f"tracking {result.tracking_number}"
        )
        return result

    # ==================== Pickups ====================

    def _line_items(self, batch: PickupBatch) -> List[PickupLineItem]:
        return [
            PickupLineItem(
                destination_country=count.country,
                quantity=count.count,
                service_code=self.context.pickup_service_code,
                container_code=self.context.pickup_container_code,
            )
            for count in batch.country_counts()
        ]

    async def _mark_booked(self, batch: PickupBatch) -> None:
        warehouse = self.context.warehouse
        outcomes = await asyncio.gather(
            *(warehouse.mark_pickup_booked(pickup.fulfillment_id) for pickup in batch.pickups),
            return_exceptions=True,
        )
        for pickup, outcome in zip(batch.pickups, outcomes):
            if isinstance(outcome, Exception):
                logger.error(
                    f"Could not mark fulfillment {pickup.fulfillment_id} as pickup-booked: {outcome}"
                )

    async def _post_batch(self, batch: PickupBatch) -> CarrierPickupConfirmation:
        location_id = batch.location_id
        logger.info(f"{self.carrier_name}: {len(batch.pickups)} pickup(s) for location {location_id}")

        if self.context.warehouse is None:
            raise CarrierRequestFailedError(
                "No warehouse data source configured",
                carrier=self.carrier_name,
                operation="post_pickups",
            )

        try:
            info = WarehouseInfo.coerce(await self.context.warehouse.get_warehouse_info(location_id))
        except Exception as e:
            raise CarrierRequestFailedError(
                f"Could not create pickup for {location_id}, could not retrieve warehouse info: {e}",
                carrier=self.carrier_name,
                operation="post_pickups",
            ) from e

        account = await self._account_for(info.country, "post_pickups")
        pickup_date = self.context.scheduler.next_pickup_date(info.country)

        submission = PickupSubmission(
            carrier=self.carrier_code,
            location_id=location_id,
            pickup_date=pickup_date,
            ready_time=self.context.scheduler.ready_time,
            close_time=self.context.scheduler.close_time,
            address=Address(
                name=f"{info.first_name} {info.last_name}".strip(),
                business=info.company_name,
                street=info.address,
                street2=info.address2,
                zip_code=info.postal_code,
                locality=info.city,
                country=info.country,
                email=info.email,
                contact=self.context.contacts.normalize(info.phone, info.country),
            ),
            line_items=self._line_items(batch),
            account=account,
        )

        try:
            response = await self._gateway().submit_pickup(self.carrier_code, submission)
        except CarrierRequestFailedError:
            raise
        except Exception as e:
            raise CarrierRequestFailedError(
                f"{self.carrier_name} pickup request for location {location_id} failed: {e}",
                carrier=self.carrier_name,
                operation="post_pickups",
            ) from e

        await self._mark_booked(batch)

        return CarrierPickupConfirmation(
            carrier=self.carrier_code,
            location_id=location_id,
            success=True,
            package_count=len(batch.pickups),
            pickup_date=pickup_date,
            confirmation=response,
        )

    async def post_pickups(self, batches: Sequence[PickupBatch]) -> List[CarrierPickupConfirmation]:
        if not batches:
            return []

        outcomes = await asyncio.gather(
            *(self._post_batch(batch) for batch in batches),
            return_exceptions=True,
        )

        confirmations = []
        for batch, outcome in zip(batches, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"{self.carrier_name} pickup for location {batch.location_id} failed: {outcome}")
                confirmations.append(CarrierPickupConfirmation(
                    carrier=self.carrier_code,
                    location_id=batch.location_id,
                    success=False,
                    package_count=len(batch.pickups),
                    error=str(outcome),
                ))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                confirmations.append(outcome)
        return confirmations

    # ==================== Tracking ====================

    async def update_track_and_trace(self, records: Sequence[Mapping[str, Any]]) -> List[TrackingUpdateResult]:
        if not records:
            return []

        gateway = self._gateway()
        outcomes = await asyncio.gather(
            *(gateway.push_tracking(self.carrier_code, record) for record in records),
            return_exceptions=True,
        )

        results = []
        for record, outcome in zip(records, outcomes):
            reference = self.tracking_reference(record)
            if isinstance(outcome, Exception):
                logger.error(f"{self.carrier_name} tracking update failed for {reference}: {outcome}")
                results.append(TrackingUpdateResult(reference=reference, success=False, error=str(outcome)))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(TrackingUpdateResult(reference=reference, success=True, response=outcome))

        updated = sum(1 for r in results if r.success)
        logger.info(f"{self.carrier_name}: {updated}/{len(results)} tracking records updated")
        return results
