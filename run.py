#!/usr/bin/env python3
"""Convenience runner for the track compression tool.

Usage:
    python run.py track.csv --validate --log-level WARNING
"""
from track_compression.tools.compress_track import main

if __name__ == "__main__":
    raise SystemExit(main())
