from enum import Enum
from typing import List, Optional, Union

from kiosk.models.addon import AddonGroup
from kiosk.models.base import UpstreamModel
from kiosk.models.booking import Booking
from kiosk.models.protection import ProtectionPackage
from kiosk.models.vehicle import Deal


class RouteToken(str, Enum):
    VEHICLE_SELECTION = "vehicle-selection"
    PROTECTIONS = "protections"
    ADDONS = "addons"
    SUMMARY = "summary"
    KEY_LOCKER = "key-locker"
    COMPLETED = "completed"


class VehicleSelectionData(UpstreamModel):
    deals: List[Deal]
    total_vehicles: int
    reservation_id: Optional[str] = None


class ProtectionsData(UpstreamModel):
    packages: List[ProtectionPackage]


class AddonsData(UpstreamModel):
    addon_groups: List[AddonGroup]


class SummaryData(UpstreamModel):
    booking: Booking
    addon_groups: List[AddonGroup] = []


class KeyLockerData(UpstreamModel):
    booking: Booking


class CompletedData(UpstreamModel):
    pass


StepData = Union[
    VehicleSelectionData, ProtectionsData, AddonsData, SummaryData, KeyLockerData, CompletedData
]


class NavigationResult(UpstreamModel):
    route: RouteToken
    booking_id: str
    data: StepData
    degraded: List[str] = []
