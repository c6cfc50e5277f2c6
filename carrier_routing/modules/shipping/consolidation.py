"""
Pickup consolidation

Carriers charge and schedule per pickup call, not per package. Pending pickup
requests are grouped per origin location, and each location's packages are
summarized per destination country, so one call per location carries one line
per destination country.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PickupRequest:
    """One package waiting to be collected from a location."""
    warehouse_id: Any
    shipping_country: str
    fulfillment_id: Any
    order_id: Any = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PickupRequest":
        known = {"warehouse_id", "shipping_country", "fulfillment_id", "order_id"}
        return cls(
            warehouse_id=record["warehouse_id"],
            shipping_country=str(record["shipping_country"]).upper(),
            fulfillment_id=record["fulfillment_id"],
            order_id=record.get("order_id"),
            extra={k: v for k, v in record.items() if k not in known},
        )


@dataclass(frozen=True)
class CountryPickupCount:
    country: str
    count: int


@dataclass
class PickupBatch:
    """All pending pickups of one origin location, in arrival order."""
    location_id: Any
    pickups: List[PickupRequest] = field(default_factory=list)

    def country_counts(self) -> List[CountryPickupCount]:
        """Package count per destination country, first-seen order."""
        counts: Dict[str, int] = {}
        for pickup in self.pickups:
            counts[pickup.shipping_country] = counts.get(pickup.shipping_country, 0) + 1
        return [CountryPickupCount(country=c, count=n) for c, n in counts.items()]

    @property
    def fulfillment_ids(self) -> List[Any]:
        return [pickup.fulfillment_id for pickup in self.pickups]


class PickupConsolidator:
    """Groups pickup requests by origin location."""

    def consolidate(
        self,
        requests: Sequence[Union[PickupRequest, Mapping[str, Any]]],
    ) -> List[PickupBatch]:
        batches: Dict[Any, PickupBatch] = {}

        for request in requests:
            if not isinstance(request, PickupRequest):
                request = PickupRequest.from_record(request)
            batch = batches.get(request.warehouse_id)
            if batch is None:
                batch = PickupBatch(location_id=request.warehouse_id)
                batches[request.warehouse_id] = batch
            batch.pickups.append(request)

        for batch in batches.values():
            summary = ", ".join(f"{c.country}:{c.count}" for c in batch.country_counts())
            logger.info(f"Pickup batch for location {batch.location_id}: {summary}")

        return list(batches.values())
