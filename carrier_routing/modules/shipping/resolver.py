"""
Carrier resolution

Decides which carrier handles a request and hands back an adapter bound to
the request document.

Shipments are routed on origin country only:
- a preferred carrier that ships from the origin wins
- an explicit (user-selected) carrier that does not is rejected, never
  substituted
- otherwise the registry is scanned in priority order

Pickups and tracking updates always name their carrier.
"""
import logging
from typing import Any, Optional

from carrier_routing.core.exceptions import (
    CarrierNotSupportedForRouteError,
    NoCarrierForRouteError,
    UnsupportedCarrierError,
)
from carrier_routing.models.carrier import CarrierCode, PreferenceKind, RequestType
from carrier_routing.modules.shipping.carriers import CarrierFactory
from carrier_routing.modules.shipping.carriers.base import BaseCarrier, CarrierContext
from carrier_routing.modules.shipping.documents import parse_request_type
from carrier_routing.modules.shipping.registry import CarrierRegistry

logger = logging.getLogger(__name__)


class CarrierResolver:
    """
    Args:
        registry: Routing table; read-only, shared across requests
        context: Collaborators passed to every adapter the resolver builds
    """

    def __init__(self, registry: CarrierRegistry, context: CarrierContext):
        self.registry = registry
        self.context = context

    def resolve_carrier(
        self,
        request_type: RequestType,
        preferred_carrier: Optional[str] = None,
        origin_country: Optional[str] = None,
        preference_kind: PreferenceKind = PreferenceKind.SOFT,
    ) -> CarrierCode:
        """
        Pick the carrier id for a request without building an adapter.

        Raises:
            UnsupportedCarrierError: named carrier is not registered
            CarrierNotSupportedForRouteError: explicit carrier does not ship from origin
            NoCarrierForRouteError: no carrier ships from origin
            UnsupportedOperationError: unknown request type
        """
        request_type = parse_request_type(request_type)
        origin = origin_country.upper() if origin_country else None

        if request_type in (RequestType.PICKUP, RequestType.UPDATE):
            entry = self.registry.get(preferred_carrier)
            if entry is None:
                raise UnsupportedCarrierError(
                    f"Carrier {preferred_carrier!r} is not supported",
                    carrier=preferred_carrier,
                )
            return entry.carrier

        if preferred_carrier:
            entry = self.registry.get(preferred_carrier)
            kind = PreferenceKind(preference_kind or PreferenceKind.SOFT)
            explicit = kind == PreferenceKind.EXPLICIT

            if entry is not None and entry.supports_origin(origin):
                logger.info(f"Using {kind.value} preference {entry.carrier.value} for origin {origin}")
                return entry.carrier

            if explicit and entry is None:
                raise UnsupportedCarrierError(
                    f"Selected carrier {preferred_carrier!r} is not supported",
                    carrier=preferred_carrier,
                    origin_country=origin,
                )
            if explicit:
                raise CarrierNotSupportedForRouteError(
                    f"Selected carrier {entry.carrier.value} does not ship from {origin}",
                    carrier=entry.carrier.value,
                    origin_country=origin,
                )

            if entry is None:
                logger.warning(f"Ignoring unknown preferred carrier {preferred_carrier!r}")
            else:
                logger.info(
                    f"Preferred carrier {entry.carrier.value} does not ship from {origin}, "
                    f"falling back to priority order"
                )

        entry = self.registry.first_for_origin(origin)
        if entry is None:
            raise NoCarrierForRouteError(
                f"No carrier ships from {origin}",
                origin_country=origin,
            )
        logger.info(f"Resolved {entry.carrier.value} (priority {entry.priority}) for origin {origin}")
        return entry.carrier

    def resolve(
        self,
        request_type: RequestType,
        preferred_carrier: Optional[str] = None,
        origin_country: Optional[str] = None,
        preference_kind: PreferenceKind = PreferenceKind.SOFT,
        document: Any = None,
    ) -> BaseCarrier:
        """Resolve the carrier and build its adapter with ``document`` attached."""
        carrier = self.resolve_carrier(
            request_type,
            preferred_carrier=preferred_carrier,
            origin_country=origin_country,
            preference_kind=preference_kind,
        )
        return CarrierFactory.create(carrier, self.context, document)

    def resolve_for_document(self, request_type: RequestType, document: Any) -> BaseCarrier:
        """Resolve using the routing fields of a validated document."""
        request_type = parse_request_type(request_type)
        if request_type == RequestType.SHIPMENT:
            return self.resolve(
                request_type,
                preferred_carrier=document.carrier,
                origin_country=document.from_country,
                preference_kind=document.preference_kind or PreferenceKind.SOFT,
                document=document,
            )
        return self.resolve(request_type, preferred_carrier=document.carrier, document=document)
