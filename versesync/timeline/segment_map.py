"""
Segment Map Builder.

Lays an ordered list of Segments end to end on one continuous virtual
timeline. The map is always rebuilt from scratch when the playlist changes,
since every later segment's offsets depend on all earlier ones.
"""

from typing import List, Optional, Sequence

from versesync.timeline.segment import EnhancedSegment, Segment


def build_segment_map(segments: Optional[Sequence[Segment]]) -> List[EnhancedSegment]:
    """
    Build the virtual-timeline segment map for a playlist.

    Pure and deterministic, O(n) in the number of segments.

    Args:
        segments: Ordered playlist segments (None or empty allowed)

    Returns:
        List of EnhancedSegments, contiguous on the virtual timeline
    """
    if not segments:
        return []

    segment_map: List[EnhancedSegment] = []
    cumulative = 0.0
    for index, segment in enumerate(segments):
        timestamps = segment.timing_data.timestamps

        duration = 0.0
        if len(timestamps) >= 2:
            duration = timestamps[-1] - timestamps[0]

        start_timestamp = timestamps[0] if timestamps else 0.0
        end_timestamp = timestamps[-1] if timestamps else start_timestamp

        segment_map.append(EnhancedSegment(
            segment=segment,
            index=index,
            start_timestamp=start_timestamp,
            end_timestamp=end_timestamp,
            duration=duration,
            virtual_start=cumulative,
            virtual_end=cumulative + duration,
        ))
        cumulative += duration

    return segment_map


def total_duration(segment_map: Sequence[EnhancedSegment]) -> float:
    """Length of the whole virtual timeline (0 for an empty map)."""
    if not segment_map:
        return 0.0
    return segment_map[-1].virtual_end
