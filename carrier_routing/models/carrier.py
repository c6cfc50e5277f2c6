"""
Carrier and request enums shared by the routing core.
"""
import enum
from typing import Optional


class CarrierCode(str, enum.Enum):
    """
    Supported shipping carriers.

    MANUAL covers shipments booked outside any carrier integration
    (own transport, dealer drop-off with a paper label).
    """
    UPS = "UPS"
    DHL = "DHL"
    WUUNDER = "WUUNDER"
    PACKLINK = "PACKLINK"
    MANUAL = "MANUAL"

    @classmethod
    def parse(cls, value) -> Optional["CarrierCode"]:
        """Case-insensitive lookup; returns None for unknown identifiers."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class RequestType(str, enum.Enum):
    """Kinds of inbound fulfillment requests."""
    SHIPMENT = "Shipment"
    PICKUP = "Pickup"
    UPDATE = "Update"


class PreferenceKind(str, enum.Enum):
    """
    How binding a carrier preference is.

    SOFT preferences may be overridden by routing rules; EXPLICIT ones
    (a user's selection) are honored or the request is rejected.
    """
    SOFT = "soft"
    EXPLICIT = "explicit"


class NotificationKind(str, enum.Enum):
    """Dealer notification templates sent after a label is created."""
    LABEL = "LABEL"
    LABEL_WITHOUT_PACKINGSLIP = "LABEL_WITHOUT_PACKINGSLIP"


class ShippingState(str, enum.Enum):
    """Per-request orchestration states."""
    VALIDATING = "validating"
    RESOLVING = "resolving"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
