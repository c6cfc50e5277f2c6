"""
DHL Carrier

Same flow as UPS: synchronous booking, separate pickup calls, account
required per origin country.
"""
from carrier_routing.models.carrier import CarrierCode
from carrier_routing.modules.shipping.carriers import register_carrier
from carrier_routing.modules.shipping.carriers.base import GatewayCarrier

DHL_TRACKING_URL = "https://www.dhl.com/nl-en/home/tracking.html?tracking-id={tracking_number}"


@register_carrier(CarrierCode.DHL)
class DHLCarrier(GatewayCarrier):
    has_callback = False
    requires_account = True
    pickup_included = False
    tracking_url_template = DHL_TRACKING_URL

    @property
    def carrier_code(self) -> CarrierCode:
        return CarrierCode.DHL
