"""
HTTP Carrier Gateway

Posts carrier-agnostic shipment, pickup and tracking requests to the carrier
integration service, which owns the per-carrier wire formats (UPS, DHL,
Wuunder, Packlink). Endpoints:

    POST {base_url}/carriers/{carrier}/shipments
    POST {base_url}/carriers/{carrier}/pickups
    POST {base_url}/carriers/{carrier}/tracking

All calls are logged; every failure is raised as GatewayError.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

import httpx

from carrier_routing.core.exceptions import GatewayError
from carrier_routing.models.carrier import CarrierCode

logger = logging.getLogger(__name__)

SHIPMENTS_PATH = "/carriers/{carrier}/shipments"
PICKUPS_PATH = "/carriers/{carrier}/pickups"
TRACKING_PATH = "/carriers/{carrier}/tracking"


class HTTPCarrierGateway:
    """
    CarrierGateway over HTTP.

    The underlying httpx.AsyncClient is created lazily and must be released
    with close().
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        from carrier_routing.core.config import settings

        self.base_url = (base_url or settings.CARRIER_GATEWAY_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.CARRIER_GATEWAY_API_KEY
        self.timeout = timeout or settings.CARRIER_GATEWAY_TIMEOUT_SECONDS
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _post(self, path: str, carrier: CarrierCode, payload: Dict[str, Any]) -> Dict[str, Any]:
        client = await self._get_http_client()
        headers = {"X-Transaction-Id": f"{carrier.value}-{datetime.now().strftime('%Y%m%d%H%M%S%f')}"}

        try:
            response = await client.post(path, json=payload, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Carrier gateway request failed: {carrier.value} {path}: {e}")
            raise GatewayError(f"Network error talking to carrier gateway: {e}")

        logger.debug(f"Carrier gateway POST {path} -> {response.status_code}")

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"raw": response.text[:500]}

            error_msg = "Carrier rejected the request"
            if isinstance(error_data, dict):
                errors = error_data.get("errors") or []
                if errors and isinstance(errors[0], dict):
                    error_msg = errors[0].get("message", error_msg)
                elif error_data.get("message"):
                    error_msg = error_data["message"]

            logger.error(f"Carrier gateway error {response.status_code} for {carrier.value}: {error_msg}")
            raise GatewayError(error_msg, status_code=response.status_code, details={"response": error_data})

        try:
            return response.json()
        except ValueError:
            raise GatewayError(
                "Carrier gateway returned a non-JSON response",
                status_code=response.status_code,
            )

    async def submit_shipment(self, carrier: CarrierCode, request: Any) -> Dict[str, Any]:
        return await self._post(SHIPMENTS_PATH.format(carrier=carrier.value.lower()), carrier, request.to_payload())

    async def submit_pickup(self, carrier: CarrierCode, request: Any) -> Dict[str, Any]:
        return await self._post(PICKUPS_PATH.format(carrier=carrier.value.lower()), carrier, request.to_payload())

    async def push_tracking(self, carrier: CarrierCode, record: Mapping[str, Any]) -> Dict[str, Any]:
        return await self._post(TRACKING_PATH.format(carrier=carrier.value.lower()), carrier, dict(record))
