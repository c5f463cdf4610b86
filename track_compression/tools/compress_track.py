#!/usr/bin/env python3
"""Compress a recorded track stored as CSV and report what was kept.

The CSV needs ``timestamp``, ``latitude``, ``longitude`` and ``altitude``
columns. ``horizontal_accuracy``, ``vertical_accuracy``, ``speed``,
``course``, ``barometric_altitude``, ``fused_altitude`` and
``elevation_confidence`` are picked up when present; blank cells mean the
reading is unavailable.

Usage examples:

    # Compress with the configured defaults and print the summary
    python -m track_compression.tools.compress_track track.csv

    # Tighter tolerance, ignore elevation, compare against the original
    python -m track_compression.tools.compress_track track.csv \
        --epsilon 2.5 \
        --no-elevation \
        --validate
"""

from __future__ import annotations

import argparse
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from track_compression.compressor import compress
from track_compression.config import (
    COMPRESSION_ELEVATION_THRESHOLD_M,
    COMPRESSION_EPSILON_M,
    COMPRESSION_MAX_WORKERS,
    COMPRESSION_PRESERVE_ELEVATION,
)
from track_compression.errors import TrackFormatError
from track_compression.models import Sample
from track_compression.validation import measure_deviation, validate

LOGGER = logging.getLogger("compress_track")

_REQUIRED_COLS = ("timestamp", "latitude", "longitude", "altitude")
_OPTIONAL_FLOAT_COLS = (
    "barometric_altitude",
    "fused_altitude",
    "elevation_confidence",
)
_DEFAULTED_FLOAT_COLS = {
    "horizontal_accuracy": 0.0,
    "vertical_accuracy": 0.0,
    "speed": 0.0,
    "course": -1.0,
}


def _optional_float(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def _numeric_column(frame: pd.DataFrame, column: str) -> pd.Series:
    try:
        return pd.to_numeric(frame[column], errors="raise")
    except (TypeError, ValueError) as exc:
        raise TrackFormatError(f"Column '{column}' contains non-numeric values") from exc


def samples_from_frame(frame: pd.DataFrame) -> List[Sample]:
    """Convert a track DataFrame into :class:`Sample` objects, preserving row order."""

    missing = [col for col in _REQUIRED_COLS if col not in frame.columns]
    if missing:
        raise TrackFormatError(f"Track is missing required columns: {missing}")

    try:
        timestamps = pd.to_datetime(frame["timestamp"], utc=True, errors="raise")
    except (TypeError, ValueError) as exc:
        raise TrackFormatError("Column 'timestamp' contains unparsable values") from exc
    if timestamps.isna().any():
        first_bad = int(timestamps.isna().to_numpy().nonzero()[0][0])
        raise TrackFormatError(f"Column 'timestamp' is blank in data row {first_bad + 1}")

    columns: Dict[str, pd.Series] = {}
    for column in ("latitude", "longitude", "altitude"):
        series = _numeric_column(frame, column)
        if series.isna().any():
            first_bad = int(series.isna().to_numpy().nonzero()[0][0])
            raise TrackFormatError(
                f"Column '{column}' is blank in data row {first_bad + 1}"
            )
        columns[column] = series
    for column in _OPTIONAL_FLOAT_COLS:
        if column in frame.columns:
            columns[column] = _numeric_column(frame, column)
    for column, default in _DEFAULTED_FLOAT_COLS.items():
        if column in frame.columns:
            columns[column] = _numeric_column(frame, column).fillna(default)
        else:
            columns[column] = pd.Series(default, index=frame.index, dtype=float)

    values = {name: series.to_numpy(dtype=float) for name, series in columns.items()}

    def _optional(name: str, position: int) -> Optional[float]:
        if name not in values:
            return None
        return _optional_float(values[name][position])

    samples: List[Sample] = []
    for position in range(len(frame)):
        samples.append(
            Sample(
                timestamp=timestamps.iloc[position].to_pydatetime(),
                latitude=float(values["latitude"][position]),
                longitude=float(values["longitude"][position]),
                raw_altitude=float(values["altitude"][position]),
                horizontal_accuracy=float(values["horizontal_accuracy"][position]),
                vertical_accuracy=float(values["vertical_accuracy"][position]),
                speed=max(0.0, float(values["speed"][position])),
                course=float(values["course"][position]),
                barometric_altitude=_optional("barometric_altitude", position),
                fused_altitude=_optional("fused_altitude", position),
                elevation_confidence=_optional("elevation_confidence", position),
            )
        )
    return samples


def load_samples_csv(path: str | Path) -> List[Sample]:
    """Read a CSV track from ``path``."""

    try:
        frame = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise TrackFormatError(f"Unable to parse track file {path}") from exc
    except UnicodeDecodeError as exc:
        raise TrackFormatError(f"Track file {path} is not valid UTF-8 text") from exc
    return samples_from_frame(frame)


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def build_summary(
    samples: Sequence[Sample],
    *,
    epsilon: float,
    preserve_elevation_changes: bool,
    elevation_threshold: float,
    max_workers: int,
    include_validation: bool,
) -> Dict[str, Any]:
    """Compress ``samples`` and return a JSON-friendly report."""

    result = compress(
        samples,
        epsilon,
        preserve_elevation_changes,
        elevation_threshold,
        max_workers=max_workers,
    )
    summary: Dict[str, Any] = {
        "original_count": result.original_count,
        "compressed_count": result.compressed_count,
        "compression_ratio": result.compression_ratio,
        "key_point_count": result.key_point_count,
        "simplified_point_count": result.simplified_point_count,
        "kept_indices": result.kept_indices,
        "key_point_reasons": result.diagnostics.get("key_point_reasons", {}),
    }
    if include_validation:
        validation = validate(samples, result.select(samples))
        deviation = measure_deviation(samples, result.kept_indices)
        summary["validation"] = {
            "is_valid": validation.is_valid,
            "elevation_gain_error_m": validation.elevation_gain_error,
            "elevation_gain_error_pct": validation.elevation_gain_error_pct,
            "distance_error_m": validation.distance_error,
            "distance_error_pct": validation.distance_error_pct,
            "max_deviation_m": _finite_or_none(deviation.max_deviation_m),
            "mean_deviation_m": _finite_or_none(deviation.mean_deviation_m),
            "worst_index": deviation.worst_index,
        }
    return summary


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compress a CSV GPS track and print the kept sample indices",
    )
    parser.add_argument("input", type=Path, help="CSV file holding the track")
    parser.add_argument(
        "--epsilon",
        type=float,
        default=COMPRESSION_EPSILON_M,
        help="Maximum perpendicular deviation in metres (default: %(default)s)",
    )
    parser.add_argument(
        "--elevation-threshold",
        type=float,
        default=COMPRESSION_ELEVATION_THRESHOLD_M,
        help="Altitude change in metres that forces a sample to stay",
    )
    parser.add_argument(
        "--elevation",
        action=argparse.BooleanOptionalAction,
        default=COMPRESSION_PRESERVE_ELEVATION,
        help="Preserve samples around elevation changes (default: %(default)s)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=COMPRESSION_MAX_WORKERS,
        help="Threads for simplifying very large tracks",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Compare distance/elevation of the result against the original",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the compress_track tool."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=level,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    logging.getLogger().setLevel(level)

    try:
        samples = load_samples_csv(args.input)
    except (TrackFormatError, OSError) as exc:
        LOGGER.error("Cannot load %s: %s", args.input, exc)
        return 1

    LOGGER.info("Loaded %d samples from %s", len(samples), args.input)
    summary = build_summary(
        samples,
        epsilon=args.epsilon,
        preserve_elevation_changes=args.elevation,
        elevation_threshold=args.elevation_threshold,
        max_workers=args.max_workers,
        include_validation=args.validate,
    )
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
