"""Central error types used across the package.

The compression core never raises for well-typed input; these errors are
reserved for the boundaries that parse caller-supplied data.
"""

from __future__ import annotations


class TrackFormatError(RuntimeError):
    """Raised when a track file is missing required columns or holds bad values."""


__all__ = ["TrackFormatError"]
