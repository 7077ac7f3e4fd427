"""
Turns raw reservation-service payloads into the internal domain models.

Every function is pure. Optional fields fall back to model defaults; a missing
identifier or a broken invariant raises MalformedResponse. Feeding the output
of ``to_payload()`` back in yields an equal entity.
"""
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from kiosk.core.errors import MalformedResponse
from kiosk.models.addon import AddonGroup
from kiosk.models.booking import Booking
from kiosk.models.pricing import Price
from kiosk.models.protection import ProtectionPackage
from kiosk.models.vehicle import Deal, Recommendation, VehicleCatalog

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model: Type[ModelT], payload: Any, what: str) -> ModelT:
    if not isinstance(payload, dict):
        raise MalformedResponse(f"Expected a JSON object for {what}, got {type(payload).__name__}")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise MalformedResponse(f"Invalid {what} payload: {problems}") from e


def _list_field(payload: Any, key: str, what: str) -> List[Any]:
    if not isinstance(payload, dict):
        raise MalformedResponse(f"Expected a JSON object for {what}, got {type(payload).__name__}")
    items = payload.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise MalformedResponse(f"Expected '{key}' to be a list in {what} payload")
    return items


def normalize_booking(payload: Any) -> Booking:
    return _validate(Booking, payload, "booking")


def normalize_price(payload: Any) -> Price:
    return _validate(Price, payload, "price")


def normalize_deal(payload: Any) -> Deal:
    return _validate(Deal, payload, "deal")


def normalize_vehicle_catalog(payload: Any) -> VehicleCatalog:
    deals = [normalize_deal(item) for item in _list_field(payload, "deals", "vehicle catalog")]
    total = payload.get("totalVehicles", payload.get("total_vehicles"))
    reservation_id = payload.get("reservationId", payload.get("reservation_id"))
    return _validate(
        VehicleCatalog,
        {
            "deals": deals,
            "totalVehicles": len(deals) if total is None else total,
            "reservationId": reservation_id,
        },
        "vehicle catalog",
    )


def normalize_protection_package(payload: Any) -> ProtectionPackage:
    return _validate(ProtectionPackage, payload, "protection package")


def normalize_protections(payload: Any) -> List[ProtectionPackage]:
    """Accepts ``{"protectionPackages": [...]}`` or an already unwrapped list."""
    if isinstance(payload, list):
        items = payload
    else:
        items = _list_field(payload, "protectionPackages", "protections")
    return [normalize_protection_package(item) for item in items]


def normalize_addon_groups(payload: Any) -> List[AddonGroup]:
    """Accepts ``{"addons": [...]}`` or an already unwrapped list."""
    if isinstance(payload, list):
        items = payload
    else:
        items = _list_field(payload, "addons", "addons")
    return [_validate(AddonGroup, item, "addon group") for item in items]


def _unwrap_raw(value: Any) -> Any:
    # the recommender nests each deal under "raw"
    if isinstance(value, dict) and "raw" in value:
        return value["raw"]
    return value


def normalize_recommendation(payload: Any) -> Recommendation:
    if isinstance(payload, dict) and "base_car" in payload:
        payload = {
            "baseDeal": _unwrap_raw(payload.get("base_car")),
            "upsellDeal": _unwrap_raw(payload.get("upsell_car")),
            "upsellReasons": payload.get("upsell_reasons") or [],
        }
    return _validate(Recommendation, payload, "recommendation")
