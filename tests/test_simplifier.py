"""Tests for the Douglas-Peucker index simplifier."""

from __future__ import annotations

import sys
from typing import List

import pytest

from track_compression.geodesy import perpendicular_distance
from track_compression.models import Sample
from track_compression.simplifier import (
    douglas_peucker,
    douglas_peucker_parallel,
    douglas_peucker_recursive,
    simplify_indices,
)

from conftest import (
    make_sample,
    metres_to_lat,
    metres_to_lon,
    random_walk_track,
    with_offset,
)


def _zigzag_track(
    count: int, amplitude_m: float = 10.0, decay: float = 0.998
) -> List[Sample]:
    """Alternate sides with a shrinking swing so every split lands beside the start."""

    step = metres_to_lat(1.0)
    samples = []
    for idx in range(count):
        swing = amplitude_m * decay**idx
        east = swing if idx % 2 == 0 else -swing
        lat = idx * step
        samples.append(make_sample(idx, lat, 10.0 + metres_to_lon(east, lat)))
    return samples


def test_straight_line_collapses_to_endpoints(line_track) -> None:
    assert simplify_indices(line_track, 5.0) == [0, 99]


def test_offset_point_beyond_epsilon_is_kept(line_track) -> None:
    track = with_offset(line_track, 50, 10.0)
    kept = simplify_indices(track, 5.0)
    # The straight neighbours of the spike sit ~9.6 m off the slanted chords
    # towards it, so they survive too.
    assert kept == [0, 49, 50, 51, 99]


def test_offset_point_within_epsilon_is_dropped(line_track) -> None:
    track = with_offset(line_track, 50, 4.0)
    assert simplify_indices(track, 5.0) == [0, 99]


def test_sub_range_only_returns_indices_inside_span(line_track) -> None:
    track = with_offset(line_track, 50, 10.0)
    assert douglas_peucker(track, 5.0, 10, 40) == {10, 40}
    # Over the short span the neighbours sit only ~3.6 m off the chords.
    assert douglas_peucker(track, 5.0, 45, 55) == {45, 50, 55}


@pytest.mark.parametrize("count", [0, 1, 2])
def test_tiny_tracks_keep_everything(count: int) -> None:
    track = random_walk_track(count) if count else []
    assert simplify_indices(track, 5.0) == list(range(count))


def test_iterative_matches_recursive_reference(meandering_track) -> None:
    for epsilon in (0.5, 2.0, 8.0):
        assert douglas_peucker(meandering_track, epsilon) == douglas_peucker_recursive(
            meandering_track, epsilon
        )


def test_parallel_matches_sequential(meandering_track) -> None:
    sequential = simplify_indices(meandering_track, 1.5, max_workers=1)
    parallel = simplify_indices(
        meandering_track, 1.5, max_workers=4, parallel_min_points=0
    )
    assert parallel == sequential
    assert sorted(douglas_peucker_parallel(meandering_track, 1.5, max_workers=3)) == (
        sequential
    )


def test_dropped_points_stay_within_epsilon(meandering_track) -> None:
    epsilon = 3.0
    kept = simplify_indices(meandering_track, epsilon)
    for left, right in zip(kept[:-1], kept[1:]):
        for idx in range(left + 1, right):
            distance = perpendicular_distance(
                meandering_track[idx].latlon,
                meandering_track[left].latlon,
                meandering_track[right].latlon,
            )
            assert distance <= epsilon + 1e-9


def test_smaller_epsilon_keeps_a_superset(meandering_track) -> None:
    previous: set[int] = set()
    for epsilon in (20.0, 10.0, 5.0, 2.0, 1.0):
        kept = set(simplify_indices(meandering_track, epsilon))
        assert previous <= kept
        previous = kept


def test_degenerate_zigzag_does_not_exhaust_the_stack() -> None:
    count = 1500
    track = _zigzag_track(count)
    assert count > sys.getrecursionlimit()
    with pytest.raises(RecursionError):
        douglas_peucker_recursive(track, 0.01)
    assert simplify_indices(track, 0.01) == list(range(count))
