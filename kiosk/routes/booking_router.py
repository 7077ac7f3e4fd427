from fastapi import APIRouter, Depends

from kiosk.core.logger import get_logger
from kiosk.routes.dependencies import get_orchestrator
from kiosk.services.orchestrator import BookingOrchestrator

booking_router = APIRouter(prefix="/api/booking", tags=["Booking"])
logger = get_logger("booking_router")


@booking_router.post("")
async def create_booking(orchestrator: BookingOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.create_booking()


@booking_router.post("/{booking_id}/protections/{protection_id}")
async def select_protection(
    booking_id: str, protection_id: str, orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    logger.info(f"Protection {protection_id} chosen on kiosk for booking {booking_id}")
    return await orchestrator.select_protection(booking_id, protection_id)


@booking_router.post("/{booking_id}/complete")
async def complete_booking(booking_id: str, orchestrator: BookingOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.complete_booking(booking_id)
