"""
Carrier Registry and Factory

- CarrierFactory creates a carrier adapter for a CarrierCode
- Adapters register themselves with @register_carrier
- Each adapter is bound to the request document it acts on
"""
from typing import Any, Dict, List, Type
import logging

from carrier_routing.core.exceptions import UnsupportedCarrierError
from carrier_routing.models.carrier import CarrierCode
from carrier_routing.modules.shipping.carriers.base import BaseCarrier, CarrierContext

logger = logging.getLogger(__name__)

# Registry of carrier implementations
_CARRIER_REGISTRY: Dict[CarrierCode, Type[BaseCarrier]] = {}


def register_carrier(carrier_code: CarrierCode):
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier(CarrierCode.UPS)
        class UPSCarrier(GatewayCarrier):
            ...
    """
    def decorator(cls: Type[BaseCarrier]):
        _CARRIER_REGISTRY[carrier_code] = cls
        logger.debug(f"Registered carrier: {carrier_code.value} -> {cls.__name__}")
        return cls
    return decorator


class CarrierFactory:
    """Creates carrier adapters bound to a context and a request document."""

    @classmethod
    def create(cls, carrier_code: CarrierCode, context: CarrierContext, document: Any = None) -> BaseCarrier:
        """
        Raises:
            UnsupportedCarrierError: no implementation registered for carrier_code
        """
        carrier_cls = _CARRIER_REGISTRY.get(carrier_code)
        if not carrier_cls:
            logger.warning(f"No implementation registered for carrier: {getattr(carrier_code, 'value', carrier_code)}")
            raise UnsupportedCarrierError(
                f"No implementation registered for carrier: {getattr(carrier_code, 'value', carrier_code)}",
                carrier=str(getattr(carrier_code, "value", carrier_code)),
            )
        return carrier_cls(context, document)

    @classmethod
    def get_registered_carriers(cls) -> List[CarrierCode]:
        """Get list of all registered carrier codes."""
        return list(_CARRIER_REGISTRY.keys())


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from carrier_routing.modules.shipping.carriers.ups import UPSCarrier  # noqa: E402, F401
from carrier_routing.modules.shipping.carriers.dhl import DHLCarrier  # noqa: E402, F401
from carrier_routing.modules.shipping.carriers.wuunder import WuunderCarrier  # noqa: E402, F401
from carrier_routing.modules.shipping.carriers.packlink import PacklinkCarrier  # noqa: E402, F401
from carrier_routing.modules.shipping.carriers.manual import ManualCarrier  # noqa: E402, F401
