import os
import tempfile

os.environ.setdefault("KIOSK_LOG_DIR", os.path.join(tempfile.gettempdir(), "kiosk-test-logs"))

import httpx
import pytest

from kiosk.core.config import Settings
from kiosk.services.reservation_client import ReservationClient

UPSTREAM = "https://upstream.test/api"
RECOMMENDER = "https://recommender.test/api"


class FakeUpstream:
    """
    httpx transport double: maps (method, path) to a JSON payload, an
    httpx.Response or an exception, and records every request it sees.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, result):
        self.routes[(method, path)] = result
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        self.calls.append(key)
        if key not in self.routes:
            return httpx.Response(404, text=f"no route for {key}")
        result = self.routes[key]
        if isinstance(result, Exception):
            raise result
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)

    def paths(self):
        return [path for _, path in self.calls]


@pytest.fixture
def settings():
    return Settings(
        RESERVATION_BASE_URL=UPSTREAM,
        RECOMMENDER_BASE_URL=RECOMMENDER,
        UPSTREAM_TIMEOUT_SECONDS=1.0,
        UPSTREAM_RETRY_ATTEMPTS=1,
        UPSTREAM_RETRY_BACKOFF_SECONDS=0,
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def client(settings, upstream):
    return ReservationClient(settings, transport=httpx.MockTransport(upstream.handler))


def money(amount, currency="EUR", prefix="", suffix=""):
    return {"amount": amount, "currency": currency, "prefix": prefix, "suffix": suffix}


def make_vehicle(vehicle_id="V1", **overrides):
    vehicle = {
        "id": vehicle_id,
        "acrissCode": "CDMR",
        "brand": "BMW",
        "model": "1er",
        "groupType": "COMPACT",
        "fuelType": "PETROL",
        "transmissionType": "MANUAL",
        "tyreType": "SUMMER",
        "passengersCount": 5,
        "bagsCount": 2,
        "attributes": [
            {"attributeType": "FEATURE", "key": "AC", "title": "Air conditioning", "value": "yes"}
        ],
        "images": ["https://img.test/v1.png"],
        "vehicleCost": {"value": 32000, "currency": "EUR"},
        "vehicleStatus": "AVAILABLE",
        "isRecommended": False,
        "isNewCar": True,
        "isExcitingDiscount": False,
        "isMoreLuxury": False,
        "upsellReasons": [],
    }
    vehicle.update(overrides)
    return vehicle


def make_deal(vehicle_id="V1", **pricing_overrides):
    pricing = {
        "discountPercentage": 10,
        "displayPrice": money(45.0, suffix="/day"),
        "listPrice": money(150.0),
        "totalPrice": money(135.0),
    }
    pricing.update(pricing_overrides)
    return {
        "vehicle": make_vehicle(vehicle_id),
        "pricing": pricing,
        "tags": ["popular"],
        "dealInfo": "Free cancellation",
        "priceTag": "Best value",
    }


def make_protection(protection_id="P1", **overrides):
    package = {
        "id": protection_id,
        "name": "Smart protection",
        "ratingStars": 3,
        "deductibleAmount": {"value": 500, "currency": "EUR"},
        "isDeductibleAvailable": True,
        "includes": [{"id": "c1", "title": "Collision", "description": "Covers collision damage", "tags": []}],
        "excludes": [{"id": "c2", "title": "Tyres", "description": "Tyre damage", "tags": ["extra"]}],
        "price": {
            "discountPercentage": 0,
            "displayPrice": money(12.5, suffix="/day"),
            "totalPrice": money(37.5),
        },
        "isPreviouslySelected": False,
        "isSelected": False,
        "isNudge": True,
    }
    package.update(overrides)
    return package


def make_addon_group(group_id=1, **strategy):
    selection = {"currentSelection": 0, "maxSelectionLimit": 3, "isMultiSelectionAllowed": True}
    selection.update(strategy)
    return {
        "id": group_id,
        "name": "Child seats",
        "options": [
            {
                "chargeDetail": {
                    "id": "seat",
                    "title": "Child seat",
                    "description": "For children up to 4 years",
                    "tags": [],
                    "iconUrl": "https://img.test/seat.svg",
                },
                "additionalInfo": {
                    "isEnabled": True,
                    "isNudge": False,
                    "isPreviouslySelected": False,
                    "isSelected": False,
                    "price": {"discountPercentage": 0, "displayPrice": money(8.0, suffix="/day")},
                    "selectionStrategy": selection,
                },
            }
        ],
    }


def make_booking(booking_id="B1", status="booking", **extra):
    booking = {"id": booking_id, "status": status, "pickupBranch": "Munich Airport"}
    booking.update(extra)
    return booking
