"""
Position Translator.

Converts between real time (position inside one segment's audio file, as
reported by the audio backend) and virtual time (position on the continuous
timeline), and finds the segment that owns a virtual time.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from versesync.timeline.segment import EnhancedSegment


@dataclass(frozen=True)
class RealPosition:
    """
    Result of translating a virtual time into one segment.

    Attributes:
        real_time: Position inside the segment's audio file (seconds)
        offset: Position relative to the segment's start (seconds)
    """
    real_time: float
    offset: float


def to_virtual(segment: EnhancedSegment, real_time: float) -> float:
    """
    Translate a backend position into virtual time.

    Offsets before the segment's nominal start (seek jitter) clamp to 0.

    Args:
        segment: Segment whose audio file real_time refers to
        real_time: Backend position in seconds

    Returns:
        Virtual time in seconds
    """
    return segment.virtual_start + max(0.0, real_time - segment.start_timestamp)


def to_real(segment: EnhancedSegment, virtual_time: float) -> RealPosition:
    """
    Translate a virtual time into a position inside segment's audio file.

    Args:
        segment: Segment that owns virtual_time
        virtual_time: Position on the virtual timeline in seconds

    Returns:
        RealPosition with the backend seek target and the offset within the segment
    """
    offset = virtual_time - segment.virtual_start
    return RealPosition(real_time=segment.start_timestamp + offset, offset=offset)


def locate_segment(segment_map: Sequence[EnhancedSegment], virtual_time: float) -> Optional[EnhancedSegment]:
    """
    Find the segment owning a virtual time.

    Returns the first segment with virtual_start <= t <= virtual_end. Times
    before the timeline clamp to the first segment, times after it to the
    last segment, so a non-empty map always yields a segment.

    Args:
        segment_map: Segment map from build_segment_map()
        virtual_time: Position on the virtual timeline

    Returns:
        Owning EnhancedSegment, or None if the map is empty
    """
    if not segment_map:
        return None

    for segment in segment_map:
        if segment.virtual_start <= virtual_time <= segment.virtual_end:
            return segment

    if virtual_time < 0:
        return segment_map[0]
    return segment_map[-1]
