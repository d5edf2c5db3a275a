"""
Virtual timeline module for versesync.

This package contains the segment model, the segment map builder, and the
real/virtual position translator.
"""

from versesync.timeline.segment import Segment, EnhancedSegment, TimingData
from versesync.timeline.segment_map import build_segment_map, total_duration
from versesync.timeline.position import RealPosition, to_virtual, to_real, locate_segment

__all__ = [
    "Segment",
    "EnhancedSegment",
    "TimingData",
    "build_segment_map",
    "total_duration",
    "RealPosition",
    "to_virtual",
    "to_real",
    "locate_segment",
]
