"""
Wuunder Carrier

Wuunder books asynchronously: the booking is accepted now and the label,
tracking number and pickup arrive later through a callback. Follow-up steps
(fulfillment on the platform, notification, invoice) run when that callback
is processed, not here.
"""
from carrier_routing.models.carrier import CarrierCode
from carrier_routing.modules.shipping.carriers import register_carrier
from carrier_routing.modules.shipping.carriers.base import GatewayCarrier

WUUNDER_TRACKING_URL = "https://my.wearewuunder.com/track/{tracking_number}"


@register_carrier(CarrierCode.WUUNDER)
class WuunderCarrier(GatewayCarrier):
    has_callback = True
    requires_account = False
    pickup_included = True
    tracking_url_template = WUUNDER_TRACKING_URL

    @property
    def carrier_code(self) -> CarrierCode:
        return CarrierCode.WUUNDER
