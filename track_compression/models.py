"""Dataclasses describing track samples and compression results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .config import (
    COMPRESSION_ELEVATION_THRESHOLD_M,
    COMPRESSION_EPSILON_M,
    COMPRESSION_PRESERVE_ELEVATION,
    FUSED_ALTITUDE_MIN_CONFIDENCE,
)

LatLon = Tuple[float, float]
FloatArray = NDArray[np.float64]


@dataclass(frozen=True, slots=True)
class Sample:
    """One timestamped position fix with its altitude estimates and motion data."""

    timestamp: datetime
    latitude: float
    longitude: float
    raw_altitude: float
    horizontal_accuracy: float = 0.0
    vertical_accuracy: float = 0.0
    speed: float = 0.0  # m/s
    course: float = -1.0  # degrees, negative when unknown
    barometric_altitude: Optional[float] = None
    fused_altitude: Optional[float] = None
    elevation_confidence: Optional[float] = None  # 0.0-1.0

    @property
    def latlon(self) -> LatLon:
        return (self.latitude, self.longitude)

    @property
    def has_course(self) -> bool:
        return self.course >= 0

    @property
    def best_altitude(self) -> float:
        """Return the most trustworthy altitude reading.

        Preference order:
        1. Fused altitude, when present with confidence >= 0.5
        2. Barometric altitude, when present
        3. Raw device altitude
        """

        if (
            self.fused_altitude is not None
            and self.elevation_confidence is not None
            and self.elevation_confidence >= FUSED_ALTITUDE_MIN_CONFIDENCE
        ):
            return self.fused_altitude
        if self.barometric_altitude is not None:
            return self.barometric_altitude
        return self.raw_altitude

    def elevation_change(self, other: Sample) -> float:
        """Return the best-altitude change from this sample to ``other``."""

        return other.best_altitude - self.best_altitude


@dataclass(slots=True)
class TrackArrays:
    """Column-oriented view of a sample sequence used by the numeric passes."""

    latitudes: FloatArray
    longitudes: FloatArray
    altitudes: FloatArray
    speeds: FloatArray

    @classmethod
    def from_samples(cls, samples: Sequence[Sample]) -> TrackArrays:
        count = len(samples)
        latitudes = np.empty(count, dtype=float)
        longitudes = np.empty(count, dtype=float)
        altitudes = np.empty(count, dtype=float)
        speeds = np.empty(count, dtype=float)
        for idx, sample in enumerate(samples):
            latitudes[idx] = sample.latitude
            longitudes[idx] = sample.longitude
            altitudes[idx] = sample.best_altitude
            speeds[idx] = sample.speed
        return cls(latitudes, longitudes, altitudes, speeds)

    def __len__(self) -> int:
        return int(self.latitudes.shape[0])


@dataclass(slots=True)
class CompressionRequest:
    """Inputs for a single compression run."""

    samples: Sequence[Sample]
    epsilon: float = COMPRESSION_EPSILON_M
    preserve_elevation_changes: bool = COMPRESSION_PRESERVE_ELEVATION
    elevation_threshold: float = COMPRESSION_ELEVATION_THRESHOLD_M


@dataclass(slots=True)
class CompressionResult:
    """Indices retained by a compression run plus summary statistics."""

    kept_indices: List[int]
    original_count: int
    compressed_count: int
    compression_ratio: float
    key_point_count: int = 0
    simplified_point_count: int = 0
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def select(self, samples: Sequence[Sample]) -> List[Sample]:
        """Return the kept samples from ``samples`` in their original order."""

        return [samples[idx] for idx in self.kept_indices]


@dataclass(slots=True)
class ValidationResult:
    """Whole-track aggregate comparison between an original and compressed track."""

    elevation_gain_error: float
    elevation_gain_error_pct: float
    distance_error: float
    distance_error_pct: float
    is_valid: bool
    original_elevation_gain: float = 0.0
    compressed_elevation_gain: float = 0.0
    original_distance_m: float = 0.0
    compressed_distance_m: float = 0.0


@dataclass(slots=True)
class DeviationSummary:
    """Per-point reconstruction error of a kept-index selection."""

    max_deviation_m: float
    mean_deviation_m: float
    worst_index: Optional[int]
    deviations: Dict[int, float] = field(default_factory=dict)
