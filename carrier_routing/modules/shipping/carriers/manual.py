"""
Manual Carrier

For shipments a dealer arranges outside any carrier integration. Nothing is
sent to a carrier: the shipment is recorded as "MANUAL" and pickups and
tracking updates succeed without any external call.
"""
import logging
from typing import Any, List, Mapping, Optional, Sequence

from carrier_routing.models.carrier import CarrierCode
from carrier_routing.modules.shipping.carriers import register_carrier
from carrier_routing.modules.shipping.carriers.base import (
    BaseCarrier,
    CarrierPickupConfirmation,
    ShipmentResult,
    TrackingUpdateResult,
)
from carrier_routing.modules.shipping.consolidation import PickupBatch

logger = logging.getLogger(__name__)

MANUAL_PROVIDER = "MANUAL"


@register_carrier(CarrierCode.MANUAL)
class ManualCarrier(BaseCarrier):
    has_callback = False

    @property
    def carrier_code(self) -> CarrierCode:
        return CarrierCode.MANUAL

    def get_tracking_url(self, tracking_number: Optional[str]) -> Optional[str]:
        return None

    async def create_shipment(self) -> ShipmentResult:
        document = self.shipment_document()
        logger.info(f"Recording manual shipment for order {document.order_id}")
        return ShipmentResult(
            order_id=document.order_id,
            warehouse_id=document.warehouse_id,
            shipping_company=MANUAL_PROVIDER,
            shipping_provider=MANUAL_PROVIDER,
            status="booked",
            has_callback=False,
            request_pickup=False,
            processed_by=self.processed_by(document),
        )

    async def post_pickups(self, batches: Sequence[PickupBatch]) -> List[CarrierPickupConfirmation]:
        return [
            CarrierPickupConfirmation(
                carrier=self.carrier_code,
                location_id=batch.location_id,
                success=True,
                package_count=len(batch.pickups),
            )
            for batch in batches
        ]

    async def update_track_and_trace(self, records: Sequence[Mapping[str, Any]]) -> List[TrackingUpdateResult]:
        return [
            TrackingUpdateResult(reference=self.tracking_reference(record), success=True)
            for record in records
        ]
