"""Post-hoc quality checks for compressed tracks.

``validate`` is an acceptance gate over whole-track aggregates, not a proof of
correctness. Callers decide what to do with a failing result; nothing here
retries.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Sequence

import numpy as np

from .config import MAX_DISTANCE_ERROR_PCT, MAX_ELEVATION_GAIN_ERROR_PCT
from .geodesy import haversine_array, perpendicular_distances
from .models import DeviationSummary, Sample, TrackArrays, ValidationResult

LOGGER = logging.getLogger(__name__)


def elevation_gain(samples: Sequence[Sample]) -> float:
    """Return the summed positive best-altitude change along ``samples``."""

    if len(samples) < 2:
        return 0.0
    altitudes = TrackArrays.from_samples(samples).altitudes
    deltas = np.diff(altitudes)
    return float(np.sum(deltas[deltas > 0]))


def total_distance(samples: Sequence[Sample]) -> float:
    """Return the summed haversine length of ``samples`` in metres."""

    if len(samples) < 2:
        return 0.0
    arrays = TrackArrays.from_samples(samples)
    legs = haversine_array(
        arrays.latitudes[:-1],
        arrays.longitudes[:-1],
        arrays.latitudes[1:],
        arrays.longitudes[1:],
    )
    return float(np.sum(legs))


def _error_pct(original: float, error: float) -> float:
    return (error / original) * 100.0 if original > 0 else 0.0


def validate(
    original: Sequence[Sample],
    compressed: Sequence[Sample],
) -> ValidationResult:
    """Compare distance and elevation gain of a compressed track with its source."""

    original_gain = elevation_gain(original)
    compressed_gain = elevation_gain(compressed)
    gain_error = abs(original_gain - compressed_gain)
    gain_error_pct = _error_pct(original_gain, gain_error)

    original_distance = total_distance(original)
    compressed_distance = total_distance(compressed)
    distance_error = abs(original_distance - compressed_distance)
    distance_error_pct = _error_pct(original_distance, distance_error)

    is_valid = (
        gain_error_pct < MAX_ELEVATION_GAIN_ERROR_PCT
        and distance_error_pct < MAX_DISTANCE_ERROR_PCT
    )
    if not is_valid:
        LOGGER.warning(
            "Compressed track failed validation: elevation error %.2f%%, "
            "distance error %.2f%%",
            gain_error_pct,
            distance_error_pct,
        )
    return ValidationResult(
        elevation_gain_error=gain_error,
        elevation_gain_error_pct=gain_error_pct,
        distance_error=distance_error,
        distance_error_pct=distance_error_pct,
        is_valid=is_valid,
        original_elevation_gain=original_gain,
        compressed_elevation_gain=compressed_gain,
        original_distance_m=original_distance,
        compressed_distance_m=compressed_distance,
    )


def measure_deviation(
    samples: Sequence[Sample],
    kept_indices: Iterable[int],
) -> DeviationSummary:
    """Measure how far each dropped sample lies from the compressed path.

    Every index between two consecutive kept indices is compared against the
    chord joining them using the same metric as the simplifier.
    """

    kept = sorted(set(kept_indices))
    deviations: Dict[int, float] = {}
    if len(samples) < 3 or len(kept) < 2:
        return DeviationSummary(0.0, 0.0, None, deviations)

    arrays = TrackArrays.from_samples(samples)
    lats = arrays.latitudes
    lons = arrays.longitudes
    for left, right in zip(kept[:-1], kept[1:]):
        if right - left <= 1:
            continue
        values = perpendicular_distances(
            lats[left + 1 : right],
            lons[left + 1 : right],
            (float(lats[left]), float(lons[left])),
            (float(lats[right]), float(lons[right])),
        )
        for offset, value in enumerate(values):
            deviations[left + 1 + offset] = float(value)

    if not deviations:
        return DeviationSummary(0.0, 0.0, None, deviations)
    worst_index = max(deviations, key=deviations.__getitem__)
    return DeviationSummary(
        max_deviation_m=deviations[worst_index],
        mean_deviation_m=float(np.mean(list(deviations.values()))),
        worst_index=worst_index,
        deviations=deviations,
    )
