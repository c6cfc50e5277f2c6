"""
Carrier Routing Exception Hierarchy

All exceptions include code, message, and details so callers can log them or
hand them back to an API layer without parsing message strings.

Exception Hierarchy:
    CarrierRoutingError
    ├── DocumentValidationError
    │   └── ShipmentNotEligibleError
    ├── UnsupportedOperationError
    ├── CarrierResolutionError
    │   ├── UnsupportedCarrierError
    │   ├── CarrierNotSupportedForRouteError
    │   └── NoCarrierForRouteError
    ├── CarrierRequestFailedError
    ├── GatewayError
    ├── SchedulingFailureError
    └── PostProcessingFailedError
"""
import logging
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)


class CarrierRoutingError(Exception):
    """
    Base exception for all carrier routing errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging/audit
        severity: P0-P3 severity level
    """

    default_code: str = "CARRIER_ROUTING_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# DOCUMENT ERRORS
# =============================================================================

class DocumentValidationError(CarrierRoutingError):
    """A request document is missing a field or has a malformed one."""
    default_code = "DOCUMENT_VALIDATION_FAILED"
    default_severity = "P3"

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["field"] = field
        self.field = field
        super().__init__(message, details=details, **kwargs)


class ShipmentNotEligibleError(DocumentValidationError):
    """The order lines cannot be shipped (already fulfilled, quantities exceeded)."""
    default_code = "SHIPMENT_NOT_ELIGIBLE"


class UnsupportedOperationError(CarrierRoutingError):
    """Request type is not one of Shipment, Pickup or Update."""
    default_code = "UNSUPPORTED_OPERATION"
    default_severity = "P3"

    def __init__(self, message: str, request_type: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["request_type"] = request_type
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# RESOLUTION ERRORS
# =============================================================================

class CarrierResolutionError(CarrierRoutingError):
    """Base exception for carrier selection failures."""
    default_code = "CARRIER_RESOLUTION_FAILED"
    default_severity = "P2"

    def __init__(
        self,
        message: str,
        carrier: Optional[str] = None,
        origin_country: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "carrier": carrier,
            "origin_country": origin_country,
        })
        self.carrier = carrier
        self.origin_country = origin_country
        super().__init__(message, details=details, **kwargs)


class UnsupportedCarrierError(CarrierResolutionError):
    """Carrier identifier is not in the registry."""
    default_code = "UNSUPPORTED_CARRIER"


class CarrierNotSupportedForRouteError(CarrierResolutionError):
    """Explicitly selected carrier does not ship from the origin country."""
    default_code = "CARRIER_NOT_SUPPORTED_FOR_ROUTE"


class NoCarrierForRouteError(CarrierResolutionError):
    """No registered carrier ships from the origin country."""
    default_code = "NO_CARRIER_FOR_ROUTE"
    default_severity = "P1"


# =============================================================================
# CARRIER ERRORS
# =============================================================================

class GatewayError(CarrierRoutingError):
    """Transport or protocol error talking to the carrier gateway."""
    default_code = "GATEWAY_ERROR"
    default_severity = "P1"

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details=details, **kwargs)


class CarrierRequestFailedError(CarrierRoutingError):
    """The carrier rejected the request or could not be reached."""
    default_code = "CARRIER_REQUEST_FAILED"
    default_severity = "P1"

    def __init__(
        self,
        message: str,
        carrier: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "carrier": carrier,
            "operation": operation,
        })
        self.carrier = carrier
        self.operation = operation
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# SCHEDULING ERRORS
# =============================================================================

class SchedulingFailureError(CarrierRoutingError):
    """No pickup date found within the configured number of attempts."""
    default_code = "PICKUP_SCHEDULING_FAILED"
    default_severity = "P1"

    def __init__(
        self,
        message: str,
        country: Optional[str] = None,
        attempts: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "country": country,
            "attempts": attempts,
        })
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# POST-PROCESSING ERRORS
# =============================================================================

class PostProcessingFailedError(CarrierRoutingError):
    """
    A step after carrier booking failed.

    The carrier-side shipment already exists and is NOT rolled back;
    `shipment` and `fulfillment_id` are carried so operators can reconcile.
    """
    default_code = "POST_PROCESSING_FAILED"
    default_severity = "P1"

    def __init__(
        self,
        message: str,
        steps: Optional[List[str]] = None,
        shipment: Any = None,
        fulfillment_id: Any = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "steps": steps or [],
            "fulfillment_id": fulfillment_id,
            "tracking_number": getattr(shipment, "tracking_number", None),
            "shipping_provider": getattr(shipment, "shipping_provider", None),
        })
        self.steps = steps or []
        self.shipment = shipment
        self.fulfillment_id = fulfillment_id
        super().__init__(message, details=details, **kwargs)
