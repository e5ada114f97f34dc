"""
OpenStreetMap Hospital Discovery
Finds hospitals near a coordinate via the public Overpass API.

Overpass is unauthenticated and frequently slow or overloaded, so every failure
mode (bad status, non-JSON body, network error, timeout) degrades to an empty
result. Nothing in this module raises to its caller.

Results are DiscoveredHospital objects: ephemeral, unverified, zero-capacity
placeholders until the reconciliation step persists them.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import httpx

from app.config import settings
from app.models.hospital import HospitalType
from app.services.geo import haversine_km

logger = logging.getLogger(__name__)

UNNAMED_HOSPITAL = "Unnamed Hospital"
ADDRESS_UNAVAILABLE = "Address not available"
OSM_ID_PREFIX = "osm"


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

class DiscoveredHospital:
    def __init__(
        self,
        name: str,
        lat: float,
        lng: float,
        address: str = ADDRESS_UNAVAILABLE,
        phone: Optional[str] = None,
        distance_km: Optional[float] = None,
        type: str = HospitalType.General.value,
    ):
        self.name = name
        self.lat = lat
        self.lng = lng
        self.address = address
        self.phone = phone
        self.distance_km = distance_km
        self.type = type

    @property
    def synthetic_id(self) -> str:
        """Stable key for a point that has no authoritative row yet."""
        return f"{OSM_ID_PREFIX}-{self.lat}-{self.lng}"

    def __repr__(self) -> str:
        return f"DiscoveredHospital({self.name!r}, {self.lat}, {self.lng})"


# ---------------------------------------------------------------------------
# Query + normalization
# ---------------------------------------------------------------------------

def build_overpass_query(lat: float, lng: float, radius_m: int, timeout_s: int) -> str:
    return f"""
[out:json][timeout:{timeout_s}];
(
  node["amenity"="hospital"](around:{radius_m},{lat},{lng});
  way["amenity"="hospital"](around:{radius_m},{lat},{lng});
  relation["amenity"="hospital"](around:{radius_m},{lat},{lng});
);
out center;
"""


def _element_coords(el: dict) -> Optional[tuple[float, float]]:
    # Nodes carry lat/lon directly; ways and relations only have the computed center
    lat = el.get("lat")
    lon = el.get("lon")
    if lat is None or lon is None:
        center = el.get("center") or {}
        lat = center.get("lat")
        lon = center.get("lon")
    if lat is None or lon is None:
        return None
    try:
        return float(lat), float(lon)
    except (TypeError, ValueError):
        return None


def _overpass_element_to_hospital(
    el: dict,
    origin_lat: float,
    origin_lng: float,
) -> Optional[DiscoveredHospital]:
    """Convert an Overpass element to a DiscoveredHospital."""
    coords = _element_coords(el)
    if coords is None:
        return None
    h_lat, h_lng = coords

    tags = el.get("tags") or {}
    name = (tags.get("name") or "").strip() or UNNAMED_HOSPITAL

    street = tags.get("addr:street", "")
    if street:
        address = f"{street}, {tags.get('addr:city', '')}"
    else:
        address = ADDRESS_UNAVAILABLE

    phone = tags.get("contact:phone") or tags.get("phone") or None

    return DiscoveredHospital(
        name=name,
        lat=h_lat,
        lng=h_lng,
        address=address,
        phone=phone,
        distance_km=haversine_km(origin_lat, origin_lng, h_lat, h_lng),
    )


async def discover_hospitals(
    client: httpx.AsyncClient,
    lat: float,
    lng: float,
    radius_km: float,
    on_discovered: Optional[Callable[[list[DiscoveredHospital]], None]] = None,
) -> list[DiscoveredHospital]:
    """
    Query Overpass for hospitals within radius_km of (lat, lng).

    When the result is non-empty, on_discovered is called with it so the caller can
    schedule persistence; the result is returned whatever that callback does.
    """
    if radius_km <= 0:
        logger.warning(f"[Overpass] Ignoring non-positive radius {radius_km}")
        return []

    timeout_s = settings.OVERPASS_TIMEOUT_S
    query = build_overpass_query(lat, lng, int(radius_km * 1000), timeout_s)

    try:
        resp = await asyncio.wait_for(
            client.post(settings.OVERPASS_URL, data={"data": query}),
            timeout=timeout_s + 5,  # upstream [timeout:] plus transfer slack
        )
    except (asyncio.TimeoutError, httpx.HTTPError) as e:
        logger.warning(f"[Overpass] request failed near ({lat}, {lng}): {e!r}")
        return []

    if resp.status_code != 200:
        logger.warning(f"[Overpass] status {resp.status_code}: {resp.text[:100]!r}")
        return []

    content_type = resp.headers.get("content-type", "")
    if "application/json" not in content_type:
        logger.warning(f"[Overpass] non-JSON response: {content_type!r}")
        return []

    try:
        data = resp.json()
    except ValueError as e:
        logger.warning(f"[Overpass] malformed JSON: {e}")
        return []

    elements = data.get("elements") if isinstance(data, dict) else None
    if not isinstance(elements, list):
        logger.warning(f"[Overpass] response has no elements list: {type(elements).__name__}")
        return []

    hospitals: list[DiscoveredHospital] = []
    for el in elements:
        if not isinstance(el, dict):
            continue
        hospital = _overpass_element_to_hospital(el, lat, lng)
        if hospital:
            hospitals.append(hospital)

    logger.info(f"[Overpass] {len(hospitals)} hospitals within {radius_km} km of ({lat}, {lng})")

    if hospitals and on_discovered is not None:
        try:
            on_discovered(hospitals)
        except Exception:
            logger.exception("[Overpass] failed to schedule sync of discovered hospitals")

    return hospitals
