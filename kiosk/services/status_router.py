from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from kiosk.core.errors import WorkflowError
from kiosk.core.logger import get_logger
from kiosk.models.booking import BookingStatus
from kiosk.models.steps import RouteToken

logger = get_logger("status_router")


class WorkflowState(str, Enum):
    CREATED = "Created"
    VEHICLE_SELECTED = "VehicleSelected"
    RENTED = "Rented"
    COMPLETED = "Completed"
    UNKNOWN = "Unknown"


STATUS_STATES: Dict[str, WorkflowState] = {
    BookingStatus.BOOKING.value: WorkflowState.CREATED,
    BookingStatus.VEHICLE_SELECTED.value: WorkflowState.VEHICLE_SELECTED,
    BookingStatus.RENT.value: WorkflowState.RENTED,
    BookingStatus.COMPLETED.value: WorkflowState.COMPLETED,
}

STATE_ROUTES: Dict[WorkflowState, RouteToken] = {
    WorkflowState.CREATED: RouteToken.VEHICLE_SELECTION,
    WorkflowState.VEHICLE_SELECTED: RouteToken.PROTECTIONS,
    WorkflowState.RENTED: RouteToken.ADDONS,
    WorkflowState.COMPLETED: RouteToken.COMPLETED,
}

# Completed is terminal, Unknown goes nowhere
FORWARD_TRANSITIONS: Dict[WorkflowState, WorkflowState] = {
    WorkflowState.CREATED: WorkflowState.VEHICLE_SELECTED,
    WorkflowState.VEHICLE_SELECTED: WorkflowState.RENTED,
    WorkflowState.RENTED: WorkflowState.COMPLETED,
}


@dataclass(frozen=True)
class RouteDecision:
    status: str
    state: WorkflowState
    route: Optional[RouteToken]

    @property
    def is_known(self) -> bool:
        return self.state is not WorkflowState.UNKNOWN


def decide(status: str) -> RouteDecision:
    """Exact, case-sensitive lookup of a status token. Never mutates anything."""
    state = STATUS_STATES.get(status, WorkflowState.UNKNOWN)
    if state is WorkflowState.UNKNOWN:
        logger.warning(f"Unrecognized booking status: {status!r}")
    return RouteDecision(status=status, state=state, route=STATE_ROUTES.get(state))


def route_for(status: str) -> RouteToken:
    decision = decide(status)
    if decision.route is None:
        raise WorkflowError("unrecognized status", status=status)
    return decision.route


def next_state(state: WorkflowState) -> Optional[WorkflowState]:
    return FORWARD_TRANSITIONS.get(state)


def is_terminal(state: WorkflowState) -> bool:
    return state is WorkflowState.COMPLETED
