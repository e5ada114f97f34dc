"""
Geo helpers
Great-circle distance and the bounding box used to prefilter indexed lat/lng columns.
"""
import math

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance between two points on a spherical earth, in km, rounded to 0.1."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 1)


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    """Return (south, west, north, east) enclosing a circle of radius_km around a point."""
    d_lat = radius_km / KM_PER_DEGREE_LAT
    # Longitude degrees shrink towards the poles; clamp so the box stays finite
    cos_lat = max(math.cos(math.radians(lat)), 0.01)
    d_lng = radius_km / (KM_PER_DEGREE_LAT * cos_lat)
    return (lat - d_lat, lng - d_lng, lat + d_lat, lng + d_lng)
