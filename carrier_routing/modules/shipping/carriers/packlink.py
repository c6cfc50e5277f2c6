"""
Packlink Carrier

Callback carrier like Wuunder; the pickup is part of the booking.
"""
from carrier_routing.models.carrier import CarrierCode
from carrier_routing.modules.shipping.carriers import register_carrier
from carrier_routing.modules.shipping.carriers.base import GatewayCarrier


@register_carrier(CarrierCode.PACKLINK)
class PacklinkCarrier(GatewayCarrier):
    has_callback = True
    requires_account = False
    pickup_included = True
    # Packlink hands out per-shipment tracking links in the callback
    tracking_url_template = ""

    @property
    def carrier_code(self) -> CarrierCode:
        return CarrierCode.PACKLINK
