"""Douglas-Peucker simplification over index ranges of a sample sequence.

All functions return indices into the original sequence. The iterative
:func:`douglas_peucker` is the production path; :func:`douglas_peucker_recursive`
mirrors the textbook recursion and serves as a reference in tests. Both share
:func:`_split_index` so they evaluate identical distances.
"""

from __future__ import annotations

from collections import deque
from concurrent.futures import ThreadPoolExecutor, as_completed
import logging
from typing import List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from .config import COMPRESSION_MAX_WORKERS, COMPRESSION_PARALLEL_MIN_POINTS
from .geodesy import perpendicular_distances
from .models import Sample, TrackArrays

LOGGER = logging.getLogger(__name__)

Span = Tuple[int, int]
Track = Union[Sequence[Sample], TrackArrays]


def _as_arrays(track: Track) -> TrackArrays:
    if isinstance(track, TrackArrays):
        return track
    return TrackArrays.from_samples(track)


def _resolve_end(arrays: TrackArrays, end: Optional[int]) -> int:
    return len(arrays) - 1 if end is None else end


def _split_index(
    arrays: TrackArrays, epsilon: float, start: int, end: int
) -> Optional[int]:
    """Return the farthest interior index when it lies beyond ``epsilon``.

    ``None`` means the span collapses to its endpoints. Ties resolve to the
    lowest index.
    """

    if end - start <= 1:
        return None
    lats = arrays.latitudes
    lons = arrays.longitudes
    distances = perpendicular_distances(
        lats[start + 1 : end],
        lons[start + 1 : end],
        (float(lats[start]), float(lons[start])),
        (float(lats[end]), float(lons[end])),
    )
    offset = int(np.argmax(distances))
    if float(distances[offset]) > epsilon:
        return start + 1 + offset
    return None


def _simplify_span(
    arrays: TrackArrays, epsilon: float, start: int, end: int
) -> Set[int]:
    """Iteratively simplify ``[start, end]`` using an explicit work stack."""

    kept: Set[int] = set()
    stack: List[Span] = [(start, end)]
    while stack:
        span_start, span_end = stack.pop()
        split = _split_index(arrays, epsilon, span_start, span_end)
        if split is None:
            kept.add(span_start)
            kept.add(span_end)
            continue
        stack.append((split, span_end))
        stack.append((span_start, split))
    return kept


def douglas_peucker(
    track: Track,
    epsilon: float,
    start: int = 0,
    end: Optional[int] = None,
) -> Set[int]:
    """Return the indices kept by Douglas-Peucker over ``[start, end]``."""

    arrays = _as_arrays(track)
    end = _resolve_end(arrays, end)
    if end < start:
        return set()
    return _simplify_span(arrays, epsilon, start, end)


def douglas_peucker_recursive(
    track: Track,
    epsilon: float,
    start: int = 0,
    end: Optional[int] = None,
) -> Set[int]:
    """Recursive reference implementation; limited by the interpreter stack depth."""

    arrays = _as_arrays(track)
    end = _resolve_end(arrays, end)
    if end < start:
        return set()

    def _recurse(span_start: int, span_end: int) -> Set[int]:
        split = _split_index(arrays, epsilon, span_start, span_end)
        if split is None:
            return {span_start, span_end}
        return _recurse(span_start, split) | _recurse(split, span_end)

    return _recurse(start, end)


def douglas_peucker_parallel(
    track: Track,
    epsilon: float,
    start: int = 0,
    end: Optional[int] = None,
    *,
    max_workers: int = 4,
) -> Set[int]:
    """Fork-join variant that simplifies independent sub-spans on a thread pool.

    The top of the split tree is expanded breadth-first until there are enough
    spans to occupy the workers; each remaining span is then simplified
    independently. The result equals :func:`douglas_peucker`.
    """

    arrays = _as_arrays(track)
    end = _resolve_end(arrays, end)
    if end < start:
        return set()

    kept: Set[int] = set()
    pending = deque([(start, end)])
    target_spans = max(1, max_workers) * 2
    while pending and len(pending) < target_spans:
        span_start, span_end = pending.popleft()
        split = _split_index(arrays, epsilon, span_start, span_end)
        if split is None:
            kept.update((span_start, span_end))
            continue
        pending.append((span_start, split))
        pending.append((split, span_end))

    if not pending:
        return kept

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = [
            executor.submit(_simplify_span, arrays, epsilon, span_start, span_end)
            for span_start, span_end in pending
        ]
        for future in as_completed(futures):
            kept |= future.result()
    return kept


def simplify_indices(
    track: Track,
    epsilon: float,
    *,
    max_workers: int = COMPRESSION_MAX_WORKERS,
    parallel_min_points: int = COMPRESSION_PARALLEL_MIN_POINTS,
) -> List[int]:
    """Return the sorted Douglas-Peucker indices for the whole track.

    Large tracks are split across ``max_workers`` threads when more than one
    worker is configured; smaller ones always use the sequential path.
    """

    arrays = _as_arrays(track)
    count = len(arrays)
    if count == 0:
        return []
    if max_workers > 1 and count >= parallel_min_points:
        LOGGER.debug(
            "Simplifying %d points across %d workers", count, max_workers
        )
        kept = douglas_peucker_parallel(arrays, epsilon, max_workers=max_workers)
    else:
        kept = douglas_peucker(arrays, epsilon)
    return sorted(kept)
