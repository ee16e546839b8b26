"""Coordinate validation and great-circle distance helpers"""
import math
from math import asin, atan2, cos, degrees, radians, sin, sqrt
from typing import NamedTuple, Tuple

from roadside.core.exceptions import ValidationError

EARTH_RADIUS_M = 6_371_000

# Widens the prefilter box slightly against float rounding at its edges
_MARGIN = 1.001


class Coordinates(NamedTuple):
    """WGS84 point in [longitude, latitude] order"""
    longitude: float
    latitude: float


def validate_coordinates(coordinates) -> Coordinates:
    try:
        longitude, latitude = coordinates
        longitude, latitude = float(longitude), float(latitude)
    except (TypeError, ValueError):
        raise ValidationError(f"Coordinates must be a [longitude, latitude] pair, got {coordinates!r}")

    if not (math.isfinite(longitude) and math.isfinite(latitude)):
        raise ValidationError("Coordinates must be finite numbers")
    if not -180.0 <= longitude <= 180.0:
        raise ValidationError(f"Longitude {longitude} out of range [-180, 180]")
    if not -90.0 <= latitude <= 90.0:
        raise ValidationError(f"Latitude {latitude} out of range [-90, 90]")

    return Coordinates(longitude, latitude)


def validate_radius(max_distance_m, limit: float) -> float:
    try:
        radius = float(max_distance_m)
    except (TypeError, ValueError):
        raise ValidationError(f"Distance must be a number, got {max_distance_m!r}")

    if not math.isfinite(radius) or radius <= 0:
        raise ValidationError("Distance must be a positive number of meters")
    if radius > limit:
        raise ValidationError(f"Distance must not exceed {limit:g} meters")
    return radius


def haversine_distance_m(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points in meters."""
    lat1, lon1, lat2, lon2 = map(radians, [a.latitude, a.longitude, b.latitude, b.longitude])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(h), sqrt(1 - h))

    return EARTH_RADIUS_M * c


def bounding_box(center: Coordinates, radius_m: float) -> Tuple[float, float, float, float]:
    """(min_lon, min_lat, max_lon, max_lat) enclosing a circle of radius_m.

    Used as a coarse prefilter; callers must still check haversine distance.
    The longitude half-width is that of the circle's tangent meridians,
    asin(sin(d) / cos(lat)); when the circle reaches a pole or crosses the
    antimeridian the full longitude range is returned.
    """
    angular = radius_m / EARTH_RADIUS_M
    lat_delta = degrees(angular) * _MARGIN
    min_lat = max(-90.0, center.latitude - lat_delta)
    max_lat = min(90.0, center.latitude + lat_delta)

    ratio = sin(angular) / cos(radians(center.latitude)) if abs(center.latitude) < 90.0 else 2.0
    if ratio >= 1.0 or max_lat == 90.0 or min_lat == -90.0:
        return -180.0, min_lat, 180.0, max_lat

    lon_delta = degrees(asin(ratio)) * _MARGIN
    min_lon = center.longitude - lon_delta
    max_lon = center.longitude + lon_delta
    if min_lon < -180.0 or max_lon > 180.0:
        min_lon, max_lon = -180.0, 180.0

    return min_lon, min_lat, max_lon, max_lat
