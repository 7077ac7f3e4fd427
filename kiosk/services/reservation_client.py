import asyncio
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from kiosk.core.config import Settings
from kiosk.core.errors import InvalidArgument, MalformedResponse, UpstreamError, UpstreamUnavailable
from kiosk.core.logger import get_logger

logger = get_logger("reservation_client")


def _segment(name: str, value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{name} must be a non-empty string")
    return quote(value, safe="")


class ReservationClient:
    """
    Thin async client for the reservation service and the recommender.

    One request per call, no retries, no caching. Failures come back as
    UpstreamUnavailable, UpstreamError or MalformedResponse.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if settings.RESERVATION_API_KEY:
            headers["Authorization"] = f"Bearer {settings.RESERVATION_API_KEY}"
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(settings.UPSTREAM_TIMEOUT_SECONDS),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # -------------------------------------------------------------------
    # Common helper
    # -------------------------------------------------------------------
    async def _request(self, method: str, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        logger.info(f"Upstream {method} {url}")
        try:
            # httpx limits each phase separately; this bounds the whole call
            resp = await asyncio.wait_for(
                self._client.request(method, url, params=params),
                timeout=self.settings.UPSTREAM_TIMEOUT_SECONDS,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning(f"Upstream {method} {url} timed out: {e!r}")
            raise UpstreamUnavailable(f"Timed out calling {url}") from e
        except httpx.RequestError as e:
            logger.warning(f"Upstream {method} {url} unreachable: {e!r}")
            raise UpstreamUnavailable(f"Could not reach {url}: {e}") from e

        if not resp.is_success:
            logger.error(f"Upstream error {resp.status_code} for {method} {url}: {resp.text}")
            raise UpstreamError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse(f"Response from {url} is not valid JSON") from e
        if not isinstance(data, dict):
            raise MalformedResponse(f"Response from {url} is not a JSON object")
        return data

    def _booking_url(self, booking_id: str, *parts: str) -> str:
        path = "/".join(("booking", _segment("booking_id", booking_id)) + parts)
        return f"{self.settings.RESERVATION_BASE_URL.rstrip('/')}/{path}"

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    async def get_booking(self, booking_id: str) -> Dict[str, Any]:
        return await self._request("GET", self._booking_url(booking_id))

    async def list_vehicles(self, booking_id: str) -> Dict[str, Any]:
        return await self._request("GET", self._booking_url(booking_id, "vehicles"))

    async def list_protections(self, booking_id: str) -> Dict[str, Any]:
        return await self._request("GET", self._booking_url(booking_id, "protections"))

    async def list_addons(self, booking_id: str) -> Dict[str, Any]:
        return await self._request("GET", self._booking_url(booking_id, "addons"))

    async def get_recommendation(self, vehicle_id: str) -> Dict[str, Any]:
        _segment("vehicle_id", vehicle_id)
        url = f"{self.settings.RECOMMENDER_BASE_URL.rstrip('/')}/recommend"
        return await self._request("GET", url, params={"vehicle": vehicle_id})

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    async def create_booking(self) -> Dict[str, Any]:
        return await self._request("POST", f"{self.settings.RESERVATION_BASE_URL.rstrip('/')}/booking")

    async def select_protection(self, booking_id: str, protection_id: str) -> Dict[str, Any]:
        url = self._booking_url(booking_id, "protections", _segment("protection_id", protection_id))
        return await self._request("POST", url)

    async def complete_booking(self, booking_id: str) -> Dict[str, Any]:
        return await self._request("POST", self._booking_url(booking_id, "complete"))
