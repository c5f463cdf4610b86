"""Central configuration for the track compression package.

Tunable defaults may be overridden through environment variables (optionally
via a local `.env`). Values in the "Fixed thresholds" section define the
accuracy contract of the compressor and are deliberately not configurable.
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except ImportError:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Compression defaults
# ---------------------------------------------------------------------------
# Maximum perpendicular deviation (metres) for points discarded by the
# Douglas-Peucker pass.
COMPRESSION_EPSILON_M = _env_float("COMPRESSION_EPSILON_M", 5.0)

# Minimum best-altitude change (metres) that forces a sample to be kept.
COMPRESSION_ELEVATION_THRESHOLD_M = _env_float(
    "COMPRESSION_ELEVATION_THRESHOLD_M", 2.0
)

# Keep samples adjacent to elevation jumps and real peaks/valleys.
COMPRESSION_PRESERVE_ELEVATION = _env_bool("COMPRESSION_PRESERVE_ELEVATION", True)


# ---------------------------------------------------------------------------
# Performance tuning
# ---------------------------------------------------------------------------
# Threads used to simplify independent sub-spans. 1 keeps the sequential path.
COMPRESSION_MAX_WORKERS = _env_int("COMPRESSION_MAX_WORKERS", 1)

# Tracks shorter than this are always simplified sequentially.
COMPRESSION_PARALLEL_MIN_POINTS = _env_int("COMPRESSION_PARALLEL_MIN_POINTS", 20000)


# ---------------------------------------------------------------------------
# Fixed thresholds
# ---------------------------------------------------------------------------
# Mean Earth radius (metres) used by the haversine metric.
EARTH_RADIUS_M = 6371000.0

# Bearing change (degrees) that marks a turn.
TURN_ANGLE_THRESHOLD_DEG = 30.0

# Speed delta (m/s) between consecutive samples that marks a pace change.
SPEED_CHANGE_THRESHOLD_MPS = 2.0

# Fused altitude is only trusted at or above this confidence.
FUSED_ALTITUDE_MIN_CONFIDENCE = 0.5

# Acceptance gate for validate(); errors must stay strictly below these.
MAX_ELEVATION_GAIN_ERROR_PCT = 5.0
MAX_DISTANCE_ERROR_PCT = 2.0
