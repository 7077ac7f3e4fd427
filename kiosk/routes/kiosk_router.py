from fastapi import APIRouter, Depends

from kiosk.routes.dependencies import get_orchestrator
from kiosk.services.orchestrator import BookingOrchestrator

kiosk_router = APIRouter(prefix="/kiosk", tags=["Kiosk"])


@kiosk_router.get("/recommendations/{vehicle_id}")
async def get_recommendation(vehicle_id: str, orchestrator: BookingOrchestrator = Depends(get_orchestrator)):
    """
    Upsell suggestion for the vehicle currently shown on the kiosk.
    """
    recommendation = await orchestrator.recommend(vehicle_id)
    return recommendation.to_payload()


@kiosk_router.get("/{booking_id}")
async def navigate(booking_id: str, orchestrator: BookingOrchestrator = Depends(get_orchestrator)):
    """
    Resolve the booking's status to a checkout step and load that step's data.
    """
    result = await orchestrator.navigate(booking_id)
    return result.to_payload()


@kiosk_router.get("/{booking_id}/{step}")
async def load_step(
    booking_id: str, step: str, orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """
    Load one specific step, e.g. the summary or key-locker screen.
    """
    result = await orchestrator.navigate(booking_id, step=step)
    return result.to_payload()
