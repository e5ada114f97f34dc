import asyncio

import httpx
import pytest

from app.services.overpass_service import (
    ADDRESS_UNAVAILABLE,
    UNNAMED_HOSPITAL,
    DiscoveredHospital,
    discover_hospitals,
)
from tests.support import MUMBAI, OverpassStub, overpass_node, overpass_way


def _discover(stub: OverpassStub, radius_km: float = 5, on_discovered=None):
    async def go():
        async with httpx.AsyncClient(transport=stub.transport) as client:
            return await discover_hospitals(
                client, *MUMBAI, radius_km, on_discovered=on_discovered
            )
    return asyncio.run(go())


def test_normalizes_nodes_and_ways():
    stub = OverpassStub(elements=[
        overpass_node(
            1, 19.08, 72.88,
            name="City Hospital",
            **{"addr:street": "LBS Marg", "addr:city": "Mumbai", "contact:phone": "022 1111"},
        ),
        overpass_way(2, 19.10, 72.85, phone="022 2222"),
        {"type": "relation", "id": 3, "tags": {"name": "No Coordinates"}},
    ])

    hospitals = _discover(stub)

    assert [h.name for h in hospitals] == ["City Hospital", UNNAMED_HOSPITAL]
    city, unnamed = hospitals
    assert city.address == "LBS Marg, Mumbai"
    assert city.phone == "022 1111"
    assert (city.lat, city.lng) == (19.08, 72.88)
    assert city.type == "General"
    assert city.distance_km == pytest.approx(0.5, abs=0.1)

    assert unnamed.address == ADDRESS_UNAVAILABLE
    assert unnamed.phone == "022 2222"
    assert (unnamed.lat, unnamed.lng) == (19.10, 72.85)


def test_query_uses_radius_in_meters_and_timeout():
    stub = OverpassStub()
    _discover(stub, radius_km=7.5)

    (query,) = stub.queries
    assert "[out:json][timeout:25]" in query
    assert f'node["amenity"="hospital"](around:7500,{MUMBAI[0]},{MUMBAI[1]})' in query
    assert 'way["amenity"="hospital"]' in query
    assert 'relation["amenity"="hospital"]' in query
    assert "out center;" in query


def test_street_without_city_keeps_separator():
    stub = OverpassStub(elements=[overpass_node(1, 19.08, 72.88, name="A", **{"addr:street": "MG Road"})])
    (h,) = _discover(stub)
    assert h.address == "MG Road, "


def test_non_success_status_degrades_to_empty():
    seen = []
    stub = OverpassStub(status_code=503)
    assert _discover(stub, on_discovered=seen.append) == []
    assert seen == []


def test_non_json_content_type_degrades_to_empty():
    stub = OverpassStub(respond=lambda req: httpx.Response(
        200, text="<html>rate limited</html>", headers={"content-type": "text/html"}
    ))
    assert _discover(stub) == []


def test_malformed_json_degrades_to_empty():
    stub = OverpassStub(respond=lambda req: httpx.Response(
        200, content=b"{not json", headers={"content-type": "application/json"}
    ))
    assert _discover(stub) == []


@pytest.mark.parametrize("body", [b'{"elements": null}', b'{"elements": {"id": 1}}', b'[1, 2]', b'{}'])
def test_missing_elements_list_degrades_to_empty(body):
    seen = []
    stub = OverpassStub(respond=lambda req: httpx.Response(
        200, content=body, headers={"content-type": "application/json"}
    ))
    assert _discover(stub, on_discovered=seen.append) == []
    assert seen == []


def test_network_failure_degrades_to_empty():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert _discover(OverpassStub(respond=refuse)) == []


def test_timeout_degrades_to_empty():
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    assert _discover(OverpassStub(respond=slow)) == []


def test_non_positive_radius_skips_request():
    stub = OverpassStub(elements=[overpass_node(1, 19.08, 72.88, name="A")])
    assert _discover(stub, radius_km=0) == []
    assert stub.queries == []


def test_on_discovered_receives_results():
    seen = []
    stub = OverpassStub(elements=[overpass_node(1, 19.08, 72.88, name="A")])
    hospitals = _discover(stub, on_discovered=seen.append)
    assert seen == [hospitals]


def test_failing_on_discovered_does_not_lose_results():
    def explode(hospitals):
        raise RuntimeError("scheduler down")

    stub = OverpassStub(elements=[overpass_node(1, 19.08, 72.88, name="A")])
    hospitals = _discover(stub, on_discovered=explode)
    assert [h.name for h in hospitals] == ["A"]


def test_each_call_queries_again():
    stub = OverpassStub(elements=[overpass_node(1, 19.08, 72.88, name="A")])
    first = _discover(stub)
    second = _discover(stub)
    assert len(stub.queries) == 2
    assert first is not second


def test_synthetic_id_is_stable_per_point():
    a = DiscoveredHospital("A", 19.08, 72.88)
    b = DiscoveredHospital("A renamed", 19.08, 72.88)
    assert a.synthetic_id == b.synthetic_id == "osm-19.08-72.88"
