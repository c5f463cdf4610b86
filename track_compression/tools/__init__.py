"""Command-line helpers built on the track compression package."""
