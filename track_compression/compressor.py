"""Compression entry points combining key point detection with Douglas-Peucker.

The two passes run independently over the full track and their index sets are
unioned. Nothing is cached between calls, so every function here is safe to
invoke concurrently on independent inputs.
"""

from __future__ import annotations

import logging
import time
from typing import List, Sequence

from .config import (
    COMPRESSION_ELEVATION_THRESHOLD_M,
    COMPRESSION_EPSILON_M,
    COMPRESSION_MAX_WORKERS,
    COMPRESSION_PARALLEL_MIN_POINTS,
    COMPRESSION_PRESERVE_ELEVATION,
)
from .keypoints import detect_key_points
from .models import CompressionRequest, CompressionResult, Sample, TrackArrays
from .simplifier import simplify_indices

LOGGER = logging.getLogger(__name__)


def compress(
    samples: Sequence[Sample],
    epsilon: float = COMPRESSION_EPSILON_M,
    preserve_elevation_changes: bool = COMPRESSION_PRESERVE_ELEVATION,
    elevation_threshold: float = COMPRESSION_ELEVATION_THRESHOLD_M,
    *,
    max_workers: int = COMPRESSION_MAX_WORKERS,
    parallel_min_points: int = COMPRESSION_PARALLEL_MIN_POINTS,
) -> CompressionResult:
    """Select the samples to keep from ``samples``.

    Args:
        samples: Complete track in timestamp order. Never modified.
        epsilon: Maximum perpendicular deviation (metres) for samples dropped
            by the geometric pass. Smaller values keep more samples.
        preserve_elevation_changes: Keep samples around altitude steps and
            real peaks/valleys.
        elevation_threshold: Minimum altitude change (metres) considered
            significant by the elevation rules.
        max_workers: Threads available to the geometric pass on large tracks.
        parallel_min_points: Track length at which threading kicks in.

    Returns:
        CompressionResult whose ``kept_indices`` always include the first and
        last sample. Tracks with two or fewer samples are returned unchanged.
    """

    original_count = len(samples)
    if original_count <= 2:
        LOGGER.debug("Too few points to compress: %d", original_count)
        return CompressionResult(
            kept_indices=list(range(original_count)),
            original_count=original_count,
            compressed_count=original_count,
            compression_ratio=1.0,
            key_point_count=original_count,
            simplified_point_count=original_count,
        )

    started = time.perf_counter()
    arrays = TrackArrays.from_samples(samples)

    detection = detect_key_points(
        arrays,
        preserve_elevation_changes=preserve_elevation_changes,
        elevation_threshold=elevation_threshold,
    )
    simplified = simplify_indices(
        arrays,
        epsilon,
        max_workers=max_workers,
        parallel_min_points=parallel_min_points,
    )

    kept = sorted(detection.indices.union(simplified))
    compressed_count = len(kept)
    ratio = compressed_count / original_count
    elapsed = time.perf_counter() - started

    LOGGER.info(
        "Track compression: %d -> %d points (%.1f%%), epsilon=%.2fm, %.3fs",
        original_count,
        compressed_count,
        ratio * 100.0,
        epsilon,
        elapsed,
    )
    return CompressionResult(
        kept_indices=kept,
        original_count=original_count,
        compressed_count=compressed_count,
        compression_ratio=ratio,
        key_point_count=detection.count,
        simplified_point_count=len(simplified),
        diagnostics={
            "epsilon_m": epsilon,
            "elevation_threshold_m": elevation_threshold,
            "preserve_elevation_changes": preserve_elevation_changes,
            "key_point_reasons": dict(detection.reason_counts),
            "elapsed_s": elapsed,
        },
    )


def compress_request(request: CompressionRequest) -> CompressionResult:
    """Run :func:`compress` with the parameters bundled in ``request``."""

    return compress(
        request.samples,
        request.epsilon,
        request.preserve_elevation_changes,
        request.elevation_threshold,
    )


def compress_samples(
    samples: Sequence[Sample],
    epsilon: float = COMPRESSION_EPSILON_M,
    preserve_elevation_changes: bool = COMPRESSION_PRESERVE_ELEVATION,
    elevation_threshold: float = COMPRESSION_ELEVATION_THRESHOLD_M,
) -> List[Sample]:
    """Return the compressed sample subsequence instead of indices."""

    result = compress(
        samples,
        epsilon,
        preserve_elevation_changes,
        elevation_threshold,
    )
    return result.select(samples)
