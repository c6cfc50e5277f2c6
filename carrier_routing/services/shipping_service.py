"""
Shipping Service

Entry point for inbound fulfillment requests:
- Shipment: validate, resolve carrier, check eligibility, book, record the
  fulfillment, then fulfill on the platform, notify the dealer and invoice
- Pickup: consolidate the carrier's pending pickups and book one per location
- Update: push the carrier's pending tracking records

Every request walks VALIDATING -> RESOLVING -> EXECUTING -> COMPLETED | FAILED;
transitions are logged with a per-request correlation id. Validation and
resolution errors happen before any side effect. Once the carrier has booked a
shipment nothing is rolled back: later failures surface as
PostProcessingFailedError carrying what was already done.
"""
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from carrier_routing.core.exceptions import (
    CarrierRoutingError,
    PostProcessingFailedError,
    ShipmentNotEligibleError,
)
from carrier_routing.models.carrier import (
    CarrierCode,
    NotificationKind,
    RequestType,
    ShippingState,
)
from carrier_routing.modules.shipping.carriers.base import (
    CarrierContext,
    CarrierPickupConfirmation,
    ShipmentResult,
    TrackingUpdateResult,
)
from carrier_routing.modules.shipping.consolidation import PickupConsolidator
from carrier_routing.modules.shipping.documents import (
    ShipmentDocument,
    build_document,
    parse_request_type,
)
from carrier_routing.modules.shipping.registry import CarrierRegistry
from carrier_routing.modules.shipping.resolver import CarrierResolver
from carrier_routing.services.collaborators import (
    CarrierGateway,
    DealerNotifier,
    EligibilityChecker,
    FulfillmentStore,
    InvoiceService,
    WarehouseDataSource,
)

logger = logging.getLogger(__name__)


class _RequestTrace:
    """Tracks and logs the state of one request."""

    def __init__(self, request_type: RequestType):
        self.request_type = request_type
        self.correlation_id = uuid.uuid4().hex[:12]
        self.state: Optional[ShippingState] = None

    def enter(self, state: ShippingState, detail: str = ""):
        self.state = state
        suffix = f": {detail}" if detail else ""
        if state == ShippingState.FAILED:
            logger.error(f"[{self.correlation_id}] {self.request_type.value} -> {state.value}{suffix}")
        else:
            logger.info(f"[{self.correlation_id}] {self.request_type.value} -> {state.value}{suffix}")


class ShippingService:
    """
    Coordinates documents, carrier resolution, carrier adapters and the
    fulfillment collaborators.

    Args:
        registry: Carrier routing table
        warehouse: Warehouse/account data and pending pickup/tracking queues
        fulfillments: Fulfillment persistence and platform fulfillment
        eligibility: Shipment and invoice eligibility checks
        notifier: Dealer notification mails
        invoices: Invoice conversion
        gateway: Carrier wire protocols
        context: Prebuilt carrier context; built from gateway and warehouse if omitted
    """

    def __init__(
        self,
        registry: CarrierRegistry,
        warehouse: WarehouseDataSource,
        fulfillments: FulfillmentStore,
        eligibility: EligibilityChecker,
        notifier: DealerNotifier,
        invoices: InvoiceService,
        gateway: Optional[CarrierGateway] = None,
        context: Optional[CarrierContext] = None,
    ):
        self.registry = registry
        self.warehouse = warehouse
        self.fulfillments = fulfillments
        self.eligibility = eligibility
        self.notifier = notifier
        self.invoices = invoices
        self.context = context or CarrierContext(gateway=gateway, warehouse=warehouse)
        self.resolver = CarrierResolver(registry, self.context)
        self.consolidator = PickupConsolidator()

    async def handle(self, request_type: Any, data: Optional[Mapping[str, Any]]) -> Any:
        """
        Dispatch a tagged request.

        Raises:
            UnsupportedOperationError: unknown request type tag
        """
        request_type = parse_request_type(request_type)
        if request_type == RequestType.SHIPMENT:
            return await self.create_shipment(data)
        if request_type == RequestType.PICKUP:
            return await self.request_pickups(data)
        return await self.update_shipment(data)

    # ==================== Shipments ====================

    async def create_shipment(self, data: Optional[Mapping[str, Any]]) -> ShipmentResult:
        """
        Book a shipment and run the follow-up steps.

        Returns the carrier's ShipmentResult. Callback carriers and manual
        shipments return right after the fulfillment is recorded.

        Raises:
            DocumentValidationError: missing or invalid fields
            ShipmentNotEligibleError: platform refuses another shipment for these lines
            CarrierResolutionError: no acceptable carrier
            CarrierRequestFailedError: carrier booking failed
            PostProcessingFailedError: a step after booking failed
        """
        trace = _RequestTrace(RequestType.SHIPMENT)
        try:
            trace.enter(ShippingState.VALIDATING)
            document = build_document(RequestType.SHIPMENT, data)

            trace.enter(ShippingState.RESOLVING, f"order {document.order_id} from {document.from_country}")
            carrier = self.resolver.resolve_for_document(RequestType.SHIPMENT, document)
            await self._check_eligibility(document)

            trace.enter(ShippingState.EXECUTING, f"{carrier.carrier_name} for order {document.order_id}")
            shipment = await carrier.create_shipment()
            result = await self._post_process(document, shipment)
        except CarrierRoutingError as e:
            trace.enter(ShippingState.FAILED, f"{e.code}: {e.message}")
            raise
        except Exception as e:
            trace.enter(ShippingState.FAILED, str(e))
            raise

        trace.enter(ShippingState.COMPLETED, f"order {document.order_id} via {result.shipping_provider}")
        return result

    async def _check_eligibility(self, document: ShipmentDocument) -> None:
        eligible = await self.eligibility.can_create_shipment(
            document.platform_order_id,
            document.store_hash,
            document.order_id,
            document.fulfillment_lines,
        )
        if not eligible:
            raise ShipmentNotEligibleError(
                f"Order {document.order_id} cannot get another shipment for these lines; "
                f"remove the existing shipment on the platform first",
                field="fulfillment_lines",
                details={"order_id": document.order_id},
            )

    async def _post_process(self, document: ShipmentDocument, shipment: ShipmentResult) -> ShipmentResult:
        try:
            fulfillment_id = await self.fulfillments.add_to_fulfillment(shipment)
        except Exception as e:
            raise PostProcessingFailedError(
                f"Could not add fulfillment for order {document.order_id}: {e}",
                steps=["add_to_fulfillment"],
                shipment=shipment,
            ) from e

        try:
            await self.fulfillments.add_to_fulfilled_lines(document.fulfillment_lines, fulfillment_id)
        except Exception as e:
            raise PostProcessingFailedError(
                f"Could not add lines to fulfillment {fulfillment_id}: {e}",
                steps=["add_to_fulfilled_lines"],
                shipment=shipment,
                fulfillment_id=fulfillment_id,
            ) from e

        if shipment.has_callback or shipment.shipping_provider == CarrierCode.MANUAL.value:
            logger.info(
                f"Fulfillment {fulfillment_id} recorded; follow-up for {shipment.shipping_provider} "
                f"{'waits for the carrier callback' if shipment.has_callback else 'is done by the dealer'}"
            )
            return shipment

        try:
            await self.fulfillments.fulfill_on_platform(document.order_id, fulfillment_id)
        except Exception as e:
            raise PostProcessingFailedError(
                f"Could not fulfill order {document.order_id} on the platform: {e}",
                steps=["fulfill_on_platform"],
                shipment=shipment,
                fulfillment_id=fulfillment_id,
            ) from e

        try:
            with_packing_slip = await self.eligibility.can_invoice_and_notify(
                document.order_id, document.fulfillment_lines
            )
        except Exception as e:
            raise PostProcessingFailedError(
                f"Could not check invoice eligibility for order {document.order_id}: {e}",
                steps=["can_invoice_and_notify"],
                shipment=shipment,
                fulfillment_id=fulfillment_id,
            ) from e

        failed: Dict[str, str] = {}

        kind = NotificationKind.LABEL if with_packing_slip else NotificationKind.LABEL_WITHOUT_PACKINGSLIP
        try:
            await self.notifier.send_dealer_notification(kind, shipment.warehouse_id, document.order_id, fulfillment_id)
        except Exception as e:
            logger.error(f"Could not send {kind.value} mail for fulfillment {fulfillment_id}: {e}")
            failed["send_dealer_notification"] = str(e)

        if with_packing_slip:
            try:
                await self.invoices.convert_concept_to_paid(
                    document.order_id,
                    fulfillment_id,
                    document.platform_order_id,
                    document.store_hash,
                )
            except Exception as e:
                logger.error(f"Could not convert invoice for fulfillment {fulfillment_id}: {e}")
                failed["convert_concept_to_paid"] = str(e)

        if failed:
            raise PostProcessingFailedError(
                f"Shipment {shipment.tracking_number or shipment.provider_id} booked but "
                f"{', '.join(failed)} failed",
                steps=list(failed),
                shipment=shipment,
                fulfillment_id=fulfillment_id,
                details={"errors": failed},
            )

        return shipment

    # ==================== Pickups ====================

    async def request_pickups(self, data: Optional[Mapping[str, Any]]) -> List[CarrierPickupConfirmation]:
        """Book pickups for every location with pending packages for the carrier."""
        trace = _RequestTrace(RequestType.PICKUP)
        try:
            trace.enter(ShippingState.VALIDATING)
            document = build_document(RequestType.PICKUP, data)

            trace.enter(ShippingState.RESOLVING, document.carrier)
            carrier = self.resolver.resolve_for_document(RequestType.PICKUP, document)

            trace.enter(ShippingState.EXECUTING, carrier.carrier_name)
            pending = await self.warehouse.get_pending_pickups(carrier.carrier_code)
            if not pending:
                logger.info(f"No pending {carrier.carrier_name} pickups")
                trace.enter(ShippingState.COMPLETED, "nothing to book")
                return []

            batches = self.consolidator.consolidate(pending)
            confirmations = await carrier.post_pickups(batches)
        except CarrierRoutingError as e:
            trace.enter(ShippingState.FAILED, f"{e.code}: {e.message}")
            raise
        except Exception as e:
            trace.enter(ShippingState.FAILED, str(e))
            raise

        booked = sum(1 for c in confirmations if c.success)
        trace.enter(ShippingState.COMPLETED, f"{booked}/{len(confirmations)} locations booked")
        return confirmations

    # ==================== Tracking ====================

    async def update_shipment(self, data: Optional[Mapping[str, Any]]) -> List[TrackingUpdateResult]:
        """Push all pending tracking records of the carrier."""
        trace = _RequestTrace(RequestType.UPDATE)
        try:
            trace.enter(ShippingState.VALIDATING)
            document = build_document(RequestType.UPDATE, data)

            trace.enter(ShippingState.RESOLVING, document.carrier)
            carrier = self.resolver.resolve_for_document(RequestType.UPDATE, document)

            trace.enter(ShippingState.EXECUTING, carrier.carrier_name)
            records = await self.warehouse.get_pending_tracking_updates(carrier.carrier_code)
            results = await carrier.update_track_and_trace(records or [])
        except CarrierRoutingError as e:
            trace.enter(ShippingState.FAILED, f"{e.code}: {e.message}")
            raise
        except Exception as e:
            trace.enter(ShippingState.FAILED, str(e))
            raise

        updated = sum(1 for r in results if r.success)
        trace.enter(ShippingState.COMPLETED, f"{updated}/{len(results)} tracking records pushed")
        return results

