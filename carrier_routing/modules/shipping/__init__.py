"""
Shipping Module

- CarrierRegistry: immutable origin-country/priority table
- CarrierResolver: picks the carrier and builds its adapter
- BaseCarrier interface for all carrier implementations
- CarrierFactory for adapter construction
"""
from carrier_routing.modules.shipping.carriers import CarrierFactory
from carrier_routing.modules.shipping.carriers.base import BaseCarrier, CarrierContext
from carrier_routing.modules.shipping.registry import CarrierRegistry, CarrierRegistryEntry
from carrier_routing.modules.shipping.resolver import CarrierResolver

__all__ = [
    "CarrierFactory",
    "BaseCarrier",
    "CarrierContext",
    "CarrierRegistry",
    "CarrierRegistryEntry",
    "CarrierResolver",
]
