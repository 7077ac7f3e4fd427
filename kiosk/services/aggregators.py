"""
Per-step data loading.

Each workflow step declares the upstream calls it needs in STEP_POLICIES.
``run_step`` fires them all at once, waits for every one of them to settle
and only then applies the policy: a failed required call aborts the step with
StepDataUnavailable, a failed optional call is replaced by its default.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from kiosk.core.config import Settings
from kiosk.core.errors import CheckoutError, StepDataUnavailable
from kiosk.core.logger import get_logger
from kiosk.models.steps import (
    AddonsData,
    CompletedData,
    KeyLockerData,
    ProtectionsData,
    RouteToken,
    StepData,
    SummaryData,
    VehicleSelectionData,
)
from kiosk.services import normalizer
from kiosk.services.reservation_client import ReservationClient
from kiosk.services.retry import call_with_retry

logger = get_logger("aggregators")

Fetch = Callable[[ReservationClient, str], Awaitable[Any]]


@dataclass(frozen=True)
class Dependency:
    name: str
    fetch: Fetch
    required: bool = True
    default: Optional[Callable[[], Any]] = None


@dataclass(frozen=True)
class StepPolicy:
    route: RouteToken
    dependencies: Tuple[Dependency, ...]
    merge: Callable[[Dict[str, Any]], StepData]

    @property
    def required(self) -> List[str]:
        return [d.name for d in self.dependencies if d.required]

    @property
    def optional(self) -> List[str]:
        return [d.name for d in self.dependencies if not d.required]


@dataclass
class StepOutcome:
    data: StepData
    degraded: List[str] = field(default_factory=list)


# -------------------------------------------------------------------
# Upstream fetchers: one request, then normalization
# -------------------------------------------------------------------
async def fetch_booking(client: ReservationClient, booking_id: str):
    return normalizer.normalize_booking(await client.get_booking(booking_id))


async def fetch_vehicles(client: ReservationClient, booking_id: str):
    return normalizer.normalize_vehicle_catalog(await client.list_vehicles(booking_id))


async def fetch_protections(client: ReservationClient, booking_id: str):
    return normalizer.normalize_protections(await client.list_protections(booking_id))


async def fetch_addons(client: ReservationClient, booking_id: str):
    return normalizer.normalize_addon_groups(await client.list_addons(booking_id))


BOOKING = Dependency("getBooking", fetch_booking)
VEHICLES = Dependency("listVehicles", fetch_vehicles)
PROTECTIONS = Dependency("listProtections", fetch_protections)
ADDONS = Dependency("listAddons", fetch_addons)
OPTIONAL_ADDONS = Dependency("listAddons", fetch_addons, required=False, default=list)


STEP_POLICIES: Dict[RouteToken, StepPolicy] = {
    RouteToken.VEHICLE_SELECTION: StepPolicy(
        RouteToken.VEHICLE_SELECTION,
        (VEHICLES,),
        lambda r: VehicleSelectionData(
            deals=r["listVehicles"].deals,
            total_vehicles=r["listVehicles"].total_vehicles,
            reservation_id=r["listVehicles"].reservation_id,
        ),
    ),
    RouteToken.PROTECTIONS: StepPolicy(
        RouteToken.PROTECTIONS,
        (PROTECTIONS,),
        lambda r: ProtectionsData(packages=r["listProtections"]),
    ),
    RouteToken.ADDONS: StepPolicy(
        RouteToken.ADDONS,
        (ADDONS,),
        lambda r: AddonsData(addon_groups=r["listAddons"]),
    ),
    RouteToken.SUMMARY: StepPolicy(
        RouteToken.SUMMARY,
        (BOOKING, OPTIONAL_ADDONS),
        lambda r: SummaryData(booking=r["getBooking"], addon_groups=r["listAddons"]),
    ),
    RouteToken.KEY_LOCKER: StepPolicy(
        RouteToken.KEY_LOCKER,
        (BOOKING,),
        lambda r: KeyLockerData(booking=r["getBooking"]),
    ),
    RouteToken.COMPLETED: StepPolicy(RouteToken.COMPLETED, (), lambda r: CompletedData()),
}


def check_route_table(policies: Dict[RouteToken, StepPolicy]) -> None:
    missing = [route.value for route in RouteToken if route not in policies]
    if missing:
        raise RuntimeError(f"No step policy for routes: {', '.join(missing)}")
    for route, policy in policies.items():
        if policy.route is not route:
            raise RuntimeError(f"Step policy registered under {route.value} is for {policy.route.value}")


check_route_table(STEP_POLICIES)


async def run_step(
    route: RouteToken,
    booking_id: str,
    client: ReservationClient,
    settings: Settings,
    policies: Dict[RouteToken, StepPolicy] = STEP_POLICIES,
) -> StepOutcome:
    policy = policies[route]

    def attempt(dep: Dependency):
        return call_with_retry(
            lambda: dep.fetch(client, booking_id),
            attempts=settings.UPSTREAM_RETRY_ATTEMPTS,
            backoff=settings.UPSTREAM_RETRY_BACKOFF_SECONDS,
            label=f"{route.value}/{dep.name}",
        )

    # gather cancels the children if we are cancelled
    settled = await asyncio.gather(*(attempt(dep) for dep in policy.dependencies), return_exceptions=True)

    results: Dict[str, Any] = {}
    degraded: List[str] = []
    for dep, result in zip(policy.dependencies, settled):
        if not isinstance(result, BaseException):
            results[dep.name] = result
            continue
        if not isinstance(result, CheckoutError):
            raise result
        if dep.required:
            logger.error(f"Step {route.value} for booking {booking_id}: required {dep.name} failed: {result.message}")
            raise StepDataUnavailable(route.value, result) from result
        logger.warning(
            f"Step {route.value} for booking {booking_id}: optional {dep.name} failed "
            f"({result.kind.value}), using default"
        )
        results[dep.name] = dep.default() if dep.default else None
        degraded.append(dep.name)

    return StepOutcome(data=policy.merge(results), degraded=degraded)
