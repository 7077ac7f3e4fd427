from typing import List, Optional

from pydantic import Field, NonNegativeInt

from kiosk.models.base import UpstreamModel
from kiosk.models.pricing import Money, Price


class VehicleAttribute(UpstreamModel):
    attribute_type: str = ""
    key: str = ""
    title: str = ""
    value: str = ""
    icon_url: Optional[str] = None


class Vehicle(UpstreamModel):
    id: str = Field(min_length=1)
    brand: str = ""
    model: str = ""
    group_type: str = ""
    fuel_type: str = ""
    transmission_type: str = ""
    tyre_type: str = ""
    acriss_code: str = ""
    passengers_count: NonNegativeInt = 0
    bags_count: NonNegativeInt = 0
    attributes: List[VehicleAttribute] = []
    images: List[str] = []
    vehicle_cost: Optional[Money] = None
    vehicle_status: str = ""
    is_recommended: bool = False
    is_new_car: bool = False
    is_exciting_discount: bool = False
    is_more_luxury: bool = False
    upsell_reasons: List[str] = []


class Deal(UpstreamModel):
    vehicle: Vehicle
    pricing: Price
    tags: List[str] = []
    deal_info: str = ""
    price_tag: Optional[str] = None


class VehicleCatalog(UpstreamModel):
    deals: List[Deal] = []
    total_vehicles: NonNegativeInt = 0
    reservation_id: Optional[str] = None


class Recommendation(UpstreamModel):
    base_deal: Deal
    upsell_deal: Deal
    upsell_reasons: List[str] = []
