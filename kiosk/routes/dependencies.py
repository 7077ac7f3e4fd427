from fastapi import Request

from kiosk.core.config import Settings
from kiosk.services.orchestrator import BookingOrchestrator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_orchestrator(request: Request) -> BookingOrchestrator:
    return request.app.state.orchestrator
