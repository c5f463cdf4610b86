"""Benchmark the track compressor with large synthetic tracks."""

from __future__ import annotations

import argparse
from datetime import datetime, timedelta, timezone
import math
import statistics
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Late imports rely on the adjusted sys.path above.
from track_compression.config import (  # noqa: E402
    COMPRESSION_ELEVATION_THRESHOLD_M,
    COMPRESSION_EPSILON_M,
    EARTH_RADIUS_M,
)
from track_compression.keypoints import detect_key_points  # noqa: E402
from track_compression.models import Sample, TrackArrays  # noqa: E402
from track_compression.simplifier import simplify_indices  # noqa: E402
from track_compression.validation import validate  # noqa: E402


@dataclass(slots=True)
class StageDurations:
    """Timing measurements (in seconds) for the compression pipeline."""

    arrays: float
    key_points: float
    simplify: float
    validate: float

    @property
    def total(self) -> float:
        """Return the aggregate duration for this benchmark iteration."""

        return self.arrays + self.key_points + self.simplify + self.validate


@dataclass(slots=True)
class BenchmarkSummary:
    """Aggregated statistics for multiple benchmark iterations."""

    point_count: int
    iterations: int
    kept_count: int
    mean_arrays_ms: float
    mean_key_points_ms: float
    mean_simplify_ms: float
    mean_validate_ms: float
    mean_total_ms: float
    worst_total_ms: float


def _build_track(point_count: int, seed: int = 7) -> List[Sample]:
    """Generate a meandering walk with noisy altitude and pace."""

    rng = np.random.default_rng(seed)
    headings = np.cumsum(rng.normal(0.0, 4.0, size=point_count))
    step_m = 1.4
    lat = 51.5
    lon = -0.12
    altitude = 30.0
    started = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)
    samples: List[Sample] = []
    for idx in range(point_count):
        heading = math.radians(headings[idx])
        lat += math.degrees(step_m * math.cos(heading) / EARTH_RADIUS_M)
        lon += math.degrees(
            step_m * math.sin(heading) / (EARTH_RADIUS_M * math.cos(math.radians(lat)))
        )
        altitude += float(rng.normal(0.0, 0.4))
        samples.append(
            Sample(
                timestamp=started + timedelta(seconds=idx),
                latitude=lat,
                longitude=lon,
                raw_altitude=altitude,
                horizontal_accuracy=5.0,
                vertical_accuracy=8.0,
                speed=max(0.0, 1.4 + float(rng.normal(0.0, 0.3))),
            )
        )
    return samples


def _run_iteration(samples: List[Sample], max_workers: int) -> tuple[StageDurations, int]:
    """Execute one benchmark iteration and capture per-stage timings."""

    start = time.perf_counter()
    arrays = TrackArrays.from_samples(samples)
    arrays_dur = time.perf_counter() - start

    start = time.perf_counter()
    detection = detect_key_points(
        arrays, elevation_threshold=COMPRESSION_ELEVATION_THRESHOLD_M
    )
    key_points = time.perf_counter() - start

    start = time.perf_counter()
    simplified = simplify_indices(
        arrays,
        COMPRESSION_EPSILON_M,
        max_workers=max_workers,
        parallel_min_points=0,
    )
    simplify = time.perf_counter() - start

    kept = sorted(detection.indices.union(simplified))
    start = time.perf_counter()
    _ = validate(samples, [samples[idx] for idx in kept])
    validate_dur = time.perf_counter() - start

    durations = StageDurations(
        arrays=arrays_dur,
        key_points=key_points,
        simplify=simplify,
        validate=validate_dur,
    )
    return durations, len(kept)


def run_benchmark(
    point_count: int,
    iterations: int,
    max_workers: int = 1,
) -> BenchmarkSummary:
    """Benchmark the compression pipeline and return aggregated timings."""

    if point_count < 10000:
        raise ValueError("point_count must be at least 10,000")
    if iterations <= 0:
        raise ValueError("iterations must be positive")

    samples = _build_track(point_count)
    durations: List[StageDurations] = []
    kept_count = 0
    for _ in range(iterations):
        duration, kept_count = _run_iteration(samples, max_workers)
        durations.append(duration)

    return BenchmarkSummary(
        point_count=point_count,
        iterations=iterations,
        kept_count=kept_count,
        mean_arrays_ms=statistics.fmean(item.arrays for item in durations) * 1000.0,
        mean_key_points_ms=statistics.fmean(item.key_points for item in durations)
        * 1000.0,
        mean_simplify_ms=statistics.fmean(item.simplify for item in durations)
        * 1000.0,
        mean_validate_ms=statistics.fmean(item.validate for item in durations)
        * 1000.0,
        mean_total_ms=statistics.fmean(item.total for item in durations) * 1000.0,
        worst_total_ms=max(item.total for item in durations) * 1000.0,
    )


def _format_summary(summary: BenchmarkSummary) -> Dict[str, float]:
    """Return a JSON-friendly representation of the benchmark summary."""

    return {
        "point_count": summary.point_count,
        "iterations": summary.iterations,
        "kept_count": summary.kept_count,
        "mean_arrays_ms": summary.mean_arrays_ms,
        "mean_key_points_ms": summary.mean_key_points_ms,
        "mean_simplify_ms": summary.mean_simplify_ms,
        "mean_validate_ms": summary.mean_validate_ms,
        "mean_total_ms": summary.mean_total_ms,
        "worst_total_ms": summary.worst_total_ms,
    }


def _parse_args() -> argparse.Namespace:
    """Parse command-line arguments for the benchmark utility."""

    parser = argparse.ArgumentParser(
        description="Benchmark track compression with large synthetic tracks",
    )
    parser.add_argument(
        "--points",
        type=int,
        default=20000,
        help="Number of samples in the synthetic track",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=5,
        help="Number of repetitions for averaging",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used by the simplifier",
    )
    return parser.parse_args()


def main() -> None:
    """Entry point when running the module as a script."""

    args = _parse_args()
    summary = run_benchmark(args.points, args.iterations, args.workers)
    formatted = _format_summary(summary)
    for key, value in formatted.items():
        if key in {"point_count", "iterations", "kept_count"}:
            print(f"{key}: {value}")
        else:
            print(f"{key}: {value:.3f}")


if __name__ == "__main__":
    main()
