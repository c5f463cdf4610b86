"""Detection of samples that must survive compression for behavioural reasons.

Each rule yields a boolean mask over the track; the masks are independent and
combined with a logical OR. Endpoints are always kept.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence, Set, Union

import numpy as np
from numpy.typing import NDArray

from .config import (
    COMPRESSION_ELEVATION_THRESHOLD_M,
    COMPRESSION_PRESERVE_ELEVATION,
    SPEED_CHANGE_THRESHOLD_MPS,
    TURN_ANGLE_THRESHOLD_DEG,
)
from .geodesy import bearings_array, turn_angles
from .models import FloatArray, Sample, TrackArrays

BoolArray = NDArray[np.bool_]


@dataclass(slots=True)
class KeyPointDetection:
    """Combined key point mask with per-rule counts for diagnostics."""

    mask: BoolArray
    reason_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def indices(self) -> Set[int]:
        return {int(idx) for idx in np.flatnonzero(self.mask)}

    @property
    def count(self) -> int:
        return int(np.count_nonzero(self.mask))


def elevation_change_mask(altitudes: FloatArray, threshold: float) -> BoolArray:
    """Mark interior samples adjacent to an altitude step of at least ``threshold``."""

    count = altitudes.shape[0]
    mask = np.zeros(count, dtype=bool)
    if count < 3:
        return mask
    steps = np.abs(np.diff(altitudes))
    incoming = steps[:-1]
    outgoing = steps[1:]
    mask[1:-1] = (incoming >= threshold) | (outgoing >= threshold)
    return mask


def elevation_extremum_mask(altitudes: FloatArray, threshold: float) -> BoolArray:
    """Mark strict local peaks and valleys whose prominence reaches ``threshold``.

    A wiggle counts only when at least one neighbouring step is large enough,
    so sensor noise around a flat profile is ignored.
    """

    count = altitudes.shape[0]
    mask = np.zeros(count, dtype=bool)
    if count < 3:
        return mask
    prev_alt = altitudes[:-2]
    current = altitudes[1:-1]
    next_alt = altitudes[2:]
    is_max = (current > prev_alt) & (current > next_alt)
    is_min = (current < prev_alt) & (current < next_alt)
    prominent = (np.abs(current - prev_alt) >= threshold) | (
        np.abs(current - next_alt) >= threshold
    )
    mask[1:-1] = (is_max | is_min) & prominent
    return mask


def turn_mask(
    latitudes: FloatArray,
    longitudes: FloatArray,
    threshold_deg: float = TURN_ANGLE_THRESHOLD_DEG,
) -> BoolArray:
    """Mark interior samples where the heading changes by at least ``threshold_deg``."""

    count = latitudes.shape[0]
    mask = np.zeros(count, dtype=bool)
    if count < 3:
        return mask
    angles = turn_angles(bearings_array(latitudes, longitudes))
    mask[1:-1] = np.abs(angles) >= threshold_deg
    return mask


def speed_change_mask(
    speeds: FloatArray,
    threshold_mps: float = SPEED_CHANGE_THRESHOLD_MPS,
) -> BoolArray:
    """Mark samples whose speed differs from the previous sample by ``threshold_mps``."""

    count = speeds.shape[0]
    mask = np.zeros(count, dtype=bool)
    if count < 2:
        return mask
    mask[1:] = np.abs(np.diff(speeds)) >= threshold_mps
    return mask


def detect_key_points(
    track: Union[Sequence[Sample], TrackArrays],
    *,
    preserve_elevation_changes: bool = COMPRESSION_PRESERVE_ELEVATION,
    elevation_threshold: float = COMPRESSION_ELEVATION_THRESHOLD_M,
) -> KeyPointDetection:
    """Run every key point rule over ``track`` and combine the results."""

    arrays = track if isinstance(track, TrackArrays) else TrackArrays.from_samples(track)
    count = len(arrays)
    mask = np.zeros(count, dtype=bool)
    if count == 0:
        return KeyPointDetection(mask=mask)

    mask[0] = True
    mask[-1] = True
    reason_counts: Dict[str, int] = {"endpoints": int(np.count_nonzero(mask))}

    if preserve_elevation_changes:
        steps = elevation_change_mask(arrays.altitudes, elevation_threshold)
        extrema = elevation_extremum_mask(arrays.altitudes, elevation_threshold)
        reason_counts["elevation_change"] = int(np.count_nonzero(steps))
        reason_counts["elevation_extremum"] = int(np.count_nonzero(extrema))
        mask |= steps | extrema

    turns = turn_mask(arrays.latitudes, arrays.longitudes)
    reason_counts["turn"] = int(np.count_nonzero(turns))
    mask |= turns

    speed_changes = speed_change_mask(arrays.speeds)
    reason_counts["speed_change"] = int(np.count_nonzero(speed_changes))
    mask |= speed_changes

    return KeyPointDetection(mask=mask, reason_counts=reason_counts)


def find_key_points(
    samples: Sequence[Sample],
    *,
    preserve_elevation_changes: bool = COMPRESSION_PRESERVE_ELEVATION,
    elevation_threshold: float = COMPRESSION_ELEVATION_THRESHOLD_M,
) -> Set[int]:
    """Return the indices of ``samples`` that must be kept unconditionally."""

    return detect_key_points(
        samples,
        preserve_elevation_changes=preserve_elevation_changes,
        elevation_threshold=elevation_threshold,
    ).indices
