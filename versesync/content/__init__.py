"""
Content module for versesync.

Converts raw timing tables into playable Segments.
"""

from versesync.content.timing import extract_timing_data, build_playlist

__all__ = ["extract_timing_data", "build_playlist"]
