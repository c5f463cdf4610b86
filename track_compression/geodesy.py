"""Spherical-earth distance and bearing helpers.

Scalar functions operate on ``(lat, lon)`` tuples in degrees. The ``*_array``
variants evaluate the same formulas over numpy arrays and back the hot paths
of the key point detector, the simplifier and the validator.
"""

from __future__ import annotations

import math

import numpy as np

from .config import EARTH_RADIUS_M
from .models import FloatArray, LatLon


def great_circle_distance(start: LatLon, end: LatLon) -> float:
    """Return the haversine distance in metres between two points."""

    lat1, lon1 = start
    lat2, lon2 = end
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2.0) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2.0) ** 2
    )
    a = min(a, 1.0)
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def perpendicular_distance(point: LatLon, line_start: LatLon, line_end: LatLon) -> float:
    """Return the distance in metres from ``point`` to the chord start-end.

    The projection parameter is computed in raw degree space and clamped to
    the segment; the distance to the projected location is haversine. A
    zero-length chord falls back to the point-to-start distance.
    """

    lat, lon = point
    start_lat, start_lon = line_start
    d_lat = line_end[0] - start_lat
    d_lon = line_end[1] - start_lon
    length_sq = d_lat * d_lat + d_lon * d_lon
    if length_sq == 0:
        return great_circle_distance(point, line_start)
    t = ((lat - start_lat) * d_lat + (lon - start_lon) * d_lon) / length_sq
    t = min(max(t, 0.0), 1.0)
    closest = (start_lat + t * d_lat, start_lon + t * d_lon)
    return great_circle_distance(point, closest)


def bearing(origin: LatLon, target: LatLon) -> float:
    """Return the initial forward azimuth from ``origin`` to ``target`` in [0, 360)."""

    lat1 = math.radians(origin[0])
    lat2 = math.radians(target[0])
    d_lon = math.radians(target[1] - origin[1])
    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        d_lon
    )
    value = math.degrees(math.atan2(y, x)) % 360.0
    # Tiny negative angles round up to exactly 360 under the modulo.
    return 0.0 if value >= 360.0 else value


def haversine_array(
    lat1: FloatArray,
    lon1: FloatArray,
    lat2: FloatArray,
    lon2: FloatArray,
) -> FloatArray:
    """Vectorised :func:`great_circle_distance`; inputs broadcast together."""

    lat1_r = np.radians(lat1)
    lat2_r = np.radians(lat2)
    d_lat = np.radians(np.subtract(lat2, lat1))
    d_lon = np.radians(np.subtract(lon2, lon1))
    a = np.sin(d_lat / 2.0) ** 2 + np.cos(lat1_r) * np.cos(lat2_r) * np.sin(
        d_lon / 2.0
    ) ** 2
    # Rounding can push ``a`` marginally past 1 for antipodal inputs.
    a = np.clip(a, 0.0, 1.0)
    c = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def perpendicular_distances(
    latitudes: FloatArray,
    longitudes: FloatArray,
    line_start: LatLon,
    line_end: LatLon,
) -> FloatArray:
    """Vectorised :func:`perpendicular_distance` for many points against one chord."""

    start_lat, start_lon = line_start
    d_lat = line_end[0] - start_lat
    d_lon = line_end[1] - start_lon
    length_sq = d_lat * d_lat + d_lon * d_lon
    if length_sq == 0:
        return haversine_array(latitudes, longitudes, start_lat, start_lon)
    t = ((latitudes - start_lat) * d_lat + (longitudes - start_lon) * d_lon) / length_sq
    t = np.clip(t, 0.0, 1.0)
    return haversine_array(
        latitudes,
        longitudes,
        start_lat + t * d_lat,
        start_lon + t * d_lon,
    )


def bearings_array(latitudes: FloatArray, longitudes: FloatArray) -> FloatArray:
    """Return the bearing of each consecutive leg; length is ``len(points) - 1``."""

    if latitudes.shape[0] < 2:
        return np.empty(0, dtype=float)
    lat1 = np.radians(latitudes[:-1])
    lat2 = np.radians(latitudes[1:])
    d_lon = np.radians(np.diff(longitudes))
    y = np.sin(d_lon) * np.cos(lat2)
    x = np.cos(lat1) * np.sin(lat2) - np.sin(lat1) * np.cos(lat2) * np.cos(d_lon)
    values = np.mod(np.degrees(np.arctan2(y, x)), 360.0)
    return np.where(values >= 360.0, 0.0, values)


def turn_angles(bearings: FloatArray) -> FloatArray:
    """Return signed bearing changes between consecutive legs in (-180, 180]."""

    if bearings.shape[0] < 2:
        return np.empty(0, dtype=float)
    delta = np.diff(bearings)
    return 180.0 - np.mod(180.0 - delta, 360.0)
