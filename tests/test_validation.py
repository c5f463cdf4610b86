"""Tests for compressed track validation and deviation measurement."""

from __future__ import annotations

import logging

import pytest

from track_compression import compress, measure_deviation, validate
from track_compression.simplifier import simplify_indices
from track_compression.validation import elevation_gain, total_distance

from conftest import straight_track, with_offset


def test_straight_line_round_trip_is_valid(line_track) -> None:
    result = compress(line_track, epsilon=5.0)
    compressed = result.select(line_track)

    validation = validate(line_track, compressed)
    assert validation.elevation_gain_error == 0.0
    assert validation.elevation_gain_error_pct == 0.0
    assert validation.distance_error_pct < 2.0
    assert validation.original_distance_m == pytest.approx(99.0, rel=1e-6)
    assert validation.compressed_distance_m == pytest.approx(99.0, rel=1e-6)
    assert validation.is_valid


def test_meandering_track_stays_within_tolerances(meandering_track) -> None:
    compressed = compress(meandering_track, epsilon=0.5).select(meandering_track)
    validation = validate(meandering_track, compressed)
    assert validation.compressed_distance_m <= validation.original_distance_m
    assert validation.distance_error_pct < 2.0


def test_elevation_gain_only_counts_climbs() -> None:
    samples = straight_track(5, altitudes=[100.0, 104.0, 101.0, 103.0, 90.0])
    assert elevation_gain(samples) == pytest.approx(6.0)


def test_aggregates_of_short_tracks_are_zero() -> None:
    single = straight_track(1)
    assert elevation_gain(single) == 0.0
    assert total_distance(single) == 0.0
    assert total_distance([]) == 0.0


def test_zero_original_gain_reports_zero_percent() -> None:
    original = straight_track(10)
    validation = validate(original, [original[0], original[-1]])
    assert validation.original_elevation_gain == 0.0
    assert validation.elevation_gain_error_pct == 0.0


def test_lost_climbs_fail_validation(caplog) -> None:
    altitudes = [100.0 if idx % 2 == 0 else 110.0 for idx in range(21)]
    original = straight_track(21, altitudes=altitudes)
    compressed = [original[0], original[-1]]

    with caplog.at_level(logging.WARNING, logger="track_compression.validation"):
        validation = validate(original, compressed)

    assert validation.original_elevation_gain == pytest.approx(100.0)
    assert validation.compressed_elevation_gain == 0.0
    assert validation.elevation_gain_error_pct == pytest.approx(100.0)
    assert not validation.is_valid
    assert any("failed validation" in rec.getMessage() for rec in caplog.records)


def test_deviation_reports_the_worst_dropped_sample(line_track) -> None:
    track = with_offset(line_track, 50, 4.0)
    summary = measure_deviation(track, [0, 99])
    assert summary.worst_index == 50
    assert summary.max_deviation_m == pytest.approx(4.0, rel=1e-3)
    assert len(summary.deviations) == 98
    assert 0.0 < summary.mean_deviation_m < summary.max_deviation_m


def test_deviation_of_simplifier_output_is_bounded(meandering_track) -> None:
    epsilon = 2.5
    kept = simplify_indices(meandering_track, epsilon)
    summary = measure_deviation(meandering_track, kept)
    assert summary.max_deviation_m <= epsilon + 1e-9
    assert set(summary.deviations).isdisjoint(kept)


def test_deviation_without_dropped_samples_is_empty() -> None:
    samples = straight_track(5)
    summary = measure_deviation(samples, range(5))
    assert summary.worst_index is None
    assert summary.max_deviation_m == 0.0
    assert summary.deviations == {}
