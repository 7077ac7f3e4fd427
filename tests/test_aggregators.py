import asyncio

import httpx
import pytest

from kiosk.core.errors import ErrorKind, StepDataUnavailable
from kiosk.models.steps import (
    AddonsData,
    CompletedData,
    KeyLockerData,
    ProtectionsData,
    RouteToken,
    SummaryData,
    VehicleSelectionData,
)
from kiosk.services import aggregators
from kiosk.services.aggregators import STEP_POLICIES, check_route_table, run_step

from conftest import make_addon_group, make_booking, make_deal, make_protection

BOOKING_PATH = "/api/booking/B1"


def full_upstream(upstream):
    return (
        upstream.add("GET", BOOKING_PATH, make_booking("B1", "rent"))
        .add("GET", f"{BOOKING_PATH}/vehicles", {"deals": [make_deal()], "totalVehicles": 1})
        .add("GET", f"{BOOKING_PATH}/protections", {"protectionPackages": [make_protection()]})
        .add("GET", f"{BOOKING_PATH}/addons", {"addons": [make_addon_group()]})
    )


EXPECTED_PATHS = {
    RouteToken.VEHICLE_SELECTION: {f"{BOOKING_PATH}/vehicles"},
    RouteToken.PROTECTIONS: {f"{BOOKING_PATH}/protections"},
    RouteToken.ADDONS: {f"{BOOKING_PATH}/addons"},
    RouteToken.SUMMARY: {BOOKING_PATH, f"{BOOKING_PATH}/addons"},
    RouteToken.KEY_LOCKER: {BOOKING_PATH},
    RouteToken.COMPLETED: set(),
}


def test_route_table_covers_every_route():
    assert set(STEP_POLICIES) == set(RouteToken)
    check_route_table(STEP_POLICIES)


def test_route_table_check_rejects_missing_route():
    partial = {k: v for k, v in STEP_POLICIES.items() if k is not RouteToken.SUMMARY}
    with pytest.raises(RuntimeError, match="summary"):
        check_route_table(partial)


def test_declared_policies():
    assert STEP_POLICIES[RouteToken.SUMMARY].required == ["getBooking"]
    assert STEP_POLICIES[RouteToken.SUMMARY].optional == ["listAddons"]
    assert STEP_POLICIES[RouteToken.VEHICLE_SELECTION].required == ["listVehicles"]
    assert STEP_POLICIES[RouteToken.COMPLETED].dependencies == ()


@pytest.mark.parametrize("route", list(RouteToken))
def test_each_step_issues_exactly_its_declared_calls(route, client, settings, upstream):
    full_upstream(upstream)

    asyncio.run(run_step(route, "B1", client, settings))

    assert set(upstream.paths()) == EXPECTED_PATHS[route]
    assert len(upstream.calls) == len(EXPECTED_PATHS[route])


def test_step_result_shapes(client, settings, upstream):
    full_upstream(upstream)

    def data(route):
        return asyncio.run(run_step(route, "B1", client, settings)).data

    vehicles = data(RouteToken.VEHICLE_SELECTION)
    assert isinstance(vehicles, VehicleSelectionData)
    assert vehicles.deals[0].vehicle.id == "V1"

    protections = data(RouteToken.PROTECTIONS)
    assert isinstance(protections, ProtectionsData)
    assert protections.packages[0].id == "P1"

    addons = data(RouteToken.ADDONS)
    assert isinstance(addons, AddonsData)
    assert addons.addon_groups[0].id == "1"

    summary = data(RouteToken.SUMMARY)
    assert isinstance(summary, SummaryData)
    assert summary.booking.id == "B1"
    assert len(summary.addon_groups) == 1

    assert isinstance(data(RouteToken.KEY_LOCKER), KeyLockerData)
    assert isinstance(data(RouteToken.COMPLETED), CompletedData)


def test_optional_failure_falls_back_to_default(client, settings, upstream):
    upstream.add("GET", BOOKING_PATH, make_booking("B1", "rent"))
    upstream.add("GET", f"{BOOKING_PATH}/addons", httpx.Response(500, text="boom"))

    outcome = asyncio.run(run_step(RouteToken.SUMMARY, "B1", client, settings))

    assert outcome.data.addon_groups == []
    assert outcome.degraded == ["listAddons"]


def test_optional_malformed_payload_falls_back_to_default(client, settings, upstream):
    upstream.add("GET", BOOKING_PATH, make_booking("B1", "rent"))
    upstream.add("GET", f"{BOOKING_PATH}/addons", {"addons": [{"name": "no id"}]})

    outcome = asyncio.run(run_step(RouteToken.SUMMARY, "B1", client, settings))

    assert outcome.data.addon_groups == []
    assert outcome.degraded == ["listAddons"]


def test_required_failure_aborts_step(client, settings, upstream):
    upstream.add("GET", BOOKING_PATH, httpx.Response(404, text="not found"))
    upstream.add("GET", f"{BOOKING_PATH}/addons", {"addons": [make_addon_group()]})

    with pytest.raises(StepDataUnavailable) as exc_info:
        asyncio.run(run_step(RouteToken.SUMMARY, "B1", client, settings))

    error = exc_info.value
    assert error.step == "summary"
    assert error.cause.kind is ErrorKind.UPSTREAM_ERROR
    assert error.cause.status_code == 404
    # the optional sibling still ran to completion before the merge
    assert f"{BOOKING_PATH}/addons" in upstream.paths()


def test_required_malformed_payload_aborts_step(client, settings, upstream):
    upstream.add("GET", f"{BOOKING_PATH}/vehicles", {"deals": [{"vehicle": {}, "pricing": {}}]})

    with pytest.raises(StepDataUnavailable) as exc_info:
        asyncio.run(run_step(RouteToken.VEHICLE_SELECTION, "B1", client, settings))

    assert exc_info.value.cause.kind is ErrorKind.MALFORMED_RESPONSE


def test_unavailable_call_is_retried_once(client, settings, upstream):
    upstream.add("GET", f"{BOOKING_PATH}/protections", httpx.ConnectError("down"))

    with pytest.raises(StepDataUnavailable) as exc_info:
        asyncio.run(run_step(RouteToken.PROTECTIONS, "B1", client, settings))

    assert exc_info.value.cause.kind is ErrorKind.UPSTREAM_UNAVAILABLE
    assert upstream.paths() == [f"{BOOKING_PATH}/protections"] * 2


def test_merge_waits_for_every_call_to_settle(settings):
    order = []

    async def slow_booking(client, booking_id):
        await asyncio.sleep(0.05)
        order.append("getBooking")
        return make_booking(booking_id)

    async def fast_addons(client, booking_id):
        order.append("listAddons")
        return []

    def merge(results):
        order.append("merge")
        return CompletedData()

    policies = dict(STEP_POLICIES)
    policies[RouteToken.SUMMARY] = aggregators.StepPolicy(
        RouteToken.SUMMARY,
        (
            aggregators.Dependency("getBooking", slow_booking),
            aggregators.Dependency("listAddons", fast_addons, required=False, default=list),
        ),
        merge,
    )

    asyncio.run(run_step(RouteToken.SUMMARY, "B1", None, settings, policies=policies))

    assert order == ["listAddons", "getBooking", "merge"]


def test_unexpected_exceptions_propagate(settings):
    async def broken(client, booking_id):
        raise KeyError("bug")

    policies = dict(STEP_POLICIES)
    policies[RouteToken.ADDONS] = aggregators.StepPolicy(
        RouteToken.ADDONS,
        (aggregators.Dependency("listAddons", broken, required=False, default=list),),
        lambda r: AddonsData(addon_groups=r["listAddons"]),
    )

    with pytest.raises(KeyError):
        asyncio.run(run_step(RouteToken.ADDONS, "B1", None, settings, policies=policies))


def test_catalog_with_null_deal_fields_still_loads(client, settings, upstream):
    sparse = make_deal("V2")
    sparse["tags"] = None
    sparse["dealInfo"] = None
    upstream.add("GET", f"{BOOKING_PATH}/vehicles", {"deals": [make_deal("V1"), sparse]})

    outcome = asyncio.run(run_step(RouteToken.VEHICLE_SELECTION, "B1", client, settings))

    assert [d.vehicle.id for d in outcome.data.deals] == ["V1", "V2"]
    assert outcome.data.deals[1].tags == []
    assert outcome.degraded == []


def test_cancelling_the_caller_cancels_in_flight_calls(settings):
    started = []
    cancelled = []

    def hanging(name):
        async def fetch(client, booking_id):
            started.append(name)
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                cancelled.append(name)
                raise
        return fetch

    policies = dict(STEP_POLICIES)
    policies[RouteToken.SUMMARY] = aggregators.StepPolicy(
        RouteToken.SUMMARY,
        (
            aggregators.Dependency("getBooking", hanging("getBooking")),
            aggregators.Dependency("listAddons", hanging("listAddons"), required=False, default=list),
        ),
        lambda r: CompletedData(),
    )

    async def scenario():
        task = asyncio.create_task(run_step(RouteToken.SUMMARY, "B1", None, settings, policies=policies))
        while len(started) < 2:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert sorted(cancelled) == ["getBooking", "listAddons"]
