"""GPS track compression with elevation, turn and pace preservation."""

from .compressor import compress, compress_request, compress_samples
from .errors import TrackFormatError
from .models import (
    CompressionRequest,
    CompressionResult,
    DeviationSummary,
    Sample,
    ValidationResult,
)
from .validation import measure_deviation, validate

__all__ = [
    "compress",
    "compress_request",
    "compress_samples",
    "validate",
    "measure_deviation",
    "Sample",
    "CompressionRequest",
    "CompressionResult",
    "ValidationResult",
    "DeviationSummary",
    "TrackFormatError",
]
