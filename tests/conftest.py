"""Global pytest fixtures & helpers.

Adds project root to path and provides synthetic track factories shared by
the compression tests.
"""
from __future__ import annotations

import math
import os
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from track_compression.config import EARTH_RADIUS_M
from track_compression.models import Sample

START_TIME = datetime(2025, 3, 1, 7, 30, tzinfo=timezone.utc)


# --- Factory helpers -------------------------------------------------
def metres_to_lat(metres: float) -> float:
    return math.degrees(metres / EARTH_RADIUS_M)


def metres_to_lon(metres: float, latitude: float) -> float:
    return math.degrees(metres / (EARTH_RADIUS_M * math.cos(math.radians(latitude))))


def make_sample(
    index: int,
    latitude: float,
    longitude: float,
    altitude: float = 100.0,
    speed: float = 1.5,
    **extra,
) -> Sample:
    return Sample(
        timestamp=START_TIME + timedelta(seconds=index),
        latitude=latitude,
        longitude=longitude,
        raw_altitude=altitude,
        horizontal_accuracy=5.0,
        vertical_accuracy=8.0,
        speed=speed,
        course=0.0,
        **extra,
    )


def straight_track(
    count: int,
    spacing_m: float = 1.0,
    *,
    base_lat: float = 0.0,
    base_lon: float = 10.0,
    altitudes: Optional[Sequence[float]] = None,
    speeds: Optional[Sequence[float]] = None,
) -> List[Sample]:
    """Return ``count`` samples heading due north ``spacing_m`` apart."""

    step = metres_to_lat(spacing_m)
    samples = []
    for idx in range(count):
        samples.append(
            make_sample(
                idx,
                base_lat + idx * step,
                base_lon,
                altitude=100.0 if altitudes is None else altitudes[idx],
                speed=1.5 if speeds is None else speeds[idx],
            )
        )
    return samples


def with_offset(samples: List[Sample], index: int, east_m: float) -> List[Sample]:
    """Return a copy of ``samples`` with one sample shifted east by ``east_m``."""

    shifted = list(samples)
    original = shifted[index]
    shifted[index] = make_sample(
        index,
        original.latitude,
        original.longitude + metres_to_lon(east_m, original.latitude),
        altitude=original.raw_altitude,
        speed=original.speed,
    )
    return shifted


def random_walk_track(
    count: int,
    *,
    seed: int = 11,
    step_m: float = 2.0,
    heading_sigma_deg: float = 6.0,
    altitude_sigma_m: float = 0.3,
) -> List[Sample]:
    """Return a seeded meandering walk with gently drifting heading and altitude."""

    rng = np.random.default_rng(seed)
    headings = np.cumsum(rng.normal(0.0, heading_sigma_deg, size=count))
    altitudes = 250.0 + np.cumsum(rng.normal(0.0, altitude_sigma_m, size=count))
    lat, lon = 46.5, 7.9
    samples = []
    for idx in range(count):
        heading = math.radians(float(headings[idx]))
        lat += metres_to_lat(step_m * math.cos(heading))
        lon += metres_to_lon(step_m * math.sin(heading), lat)
        samples.append(make_sample(idx, lat, lon, altitude=float(altitudes[idx])))
    return samples


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def line_track() -> List[Sample]:
    """Return the 100-point, 1 m spaced straight line used across tests."""

    return straight_track(100)


@pytest.fixture
def meandering_track() -> List[Sample]:
    return random_walk_track(600)
