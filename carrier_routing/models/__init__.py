from carrier_routing.models.carrier import (
    CarrierCode,
    NotificationKind,
    PreferenceKind,
    RequestType,
    ShippingState,
)

__all__ = [
    "CarrierCode",
    "NotificationKind",
    "PreferenceKind",
    "RequestType",
    "ShippingState",
]
