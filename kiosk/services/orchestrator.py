from typing import Any, Dict, Optional

from kiosk.core.config import Settings
from kiosk.core.errors import InvalidArgument
from kiosk.core.logger import get_logger
from kiosk.models.steps import NavigationResult, RouteToken
from kiosk.models.vehicle import Recommendation
from kiosk.services import normalizer, status_router
from kiosk.services.aggregators import run_step
from kiosk.services.reservation_client import ReservationClient
from kiosk.services.retry import call_with_retry

logger = get_logger("orchestrator")


def _require_id(name: str, value: Optional[str]) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{name} must be a non-empty string")
    return value


class BookingOrchestrator:
    """
    Entry point for the presentation layer.

    ``navigate`` is read-only: it resolves the booking, works out the step the
    kiosk should show and loads that step's data. Mutations are separate and
    go straight through to the reservation service.
    """

    def __init__(self, client: ReservationClient, settings: Settings):
        self.client = client
        self.settings = settings

    async def _read(self, label: str, operation):
        return await call_with_retry(
            operation,
            attempts=self.settings.UPSTREAM_RETRY_ATTEMPTS,
            backoff=self.settings.UPSTREAM_RETRY_BACKOFF_SECONDS,
            label=label,
        )

    async def navigate(self, booking_id: str, step: Optional[str] = None) -> NavigationResult:
        booking_id = _require_id("booking_id", booking_id)

        if step is None:
            raw = await self._read("getBooking", lambda: self.client.get_booking(booking_id))
            booking = normalizer.normalize_booking(raw)
            route = status_router.route_for(booking.status)
            logger.info(f"Booking {booking_id} has status {booking.status!r} -> {route.value}")
        else:
            try:
                route = RouteToken(step)
            except ValueError as e:
                raise InvalidArgument(f"Unknown step: {step!r}") from e
            logger.info(f"Loading step {route.value} for booking {booking_id}")

        outcome = await run_step(route, booking_id, self.client, self.settings)
        if outcome.degraded:
            logger.warning(f"Booking {booking_id} step {route.value} degraded: {', '.join(outcome.degraded)}")

        return NavigationResult(
            route=route, booking_id=booking_id, data=outcome.data, degraded=outcome.degraded
        )

    async def recommend(self, vehicle_id: str) -> Recommendation:
        vehicle_id = _require_id("vehicle_id", vehicle_id)
        raw = await self._read("getRecommendation", lambda: self.client.get_recommendation(vehicle_id))
        return normalizer.normalize_recommendation(raw)

    # -------------------------------------------------------------------
    # Mutations: never retried, payload passed through unchanged
    # -------------------------------------------------------------------
    async def create_booking(self) -> Dict[str, Any]:
        logger.info("Creating booking")
        return await self.client.create_booking()

    async def select_protection(self, booking_id: str, protection_id: str) -> Dict[str, Any]:
        booking_id = _require_id("booking_id", booking_id)
        protection_id = _require_id("protection_id", protection_id)
        logger.info(f"Selecting protection {protection_id} for booking {booking_id}")
        return await self.client.select_protection(booking_id, protection_id)

    async def complete_booking(self, booking_id: str) -> Dict[str, Any]:
        booking_id = _require_id("booking_id", booking_id)
        logger.info(f"Completing booking {booking_id}")
        return await self.client.complete_booking(booking_id)
