"""
UPS Carrier

- Synchronous booking: label and tracking number come back immediately
- Pickups are booked separately, one call per location
- An account per origin country is required
"""
from carrier_routing.models.carrier import CarrierCode
from carrier_routing.modules.shipping.carriers import register_carrier
from carrier_routing.modules.shipping.carriers.base import GatewayCarrier

UPS_TRACKING_URL = "https://www.ups.com/track?tracknum={tracking_number}"


@register_carrier(CarrierCode.UPS)
class UPSCarrier(GatewayCarrier):
    """UPS via the carrier gateway."""

    has_callback = False
    requires_account = True
    pickup_included = False
    tracking_url_template = UPS_TRACKING_URL

    @property
    def carrier_code(self) -> CarrierCode:
        return CarrierCode.UPS
