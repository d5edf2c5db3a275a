"""
Verse Locator.

Derives the verse currently being heard from a segment's timing array and
the live backend position. Recomputed on every query; never cached.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from versesync.timeline.segment import EnhancedSegment
from versesync.verses.reference import parse_reference


@dataclass(frozen=True)
class VersePosition:
    """
    Current verse for display.

    Attributes:
        book: Book code from the segment reference
        chapter: Chapter number
        verse: Verse currently playing
        verse_start: First verse covered by the segment
        verse_end: Last verse covered by the segment
    """
    book: str
    chapter: int
    verse: int
    verse_start: int
    verse_end: int


def find_interval_index(timestamps: Sequence[float], real_time: Optional[float]) -> int:
    """
    Find the timing interval [timestamps[i], timestamps[i + 1]) holding real_time.

    Defaults to interval 0 when real_time is unknown, precedes every
    timestamp, lies past the last one, or when there are fewer than two
    timestamps.

    Args:
        timestamps: Ordered verse boundaries in seconds
        real_time: Backend position in seconds

    Returns:
        Interval index
    """
    if real_time is None:
        return 0
    for i in range(len(timestamps) - 1):
        if timestamps[i] <= real_time < timestamps[i + 1]:
            return i
    return 0


def locate_verse(segment: Optional[EnhancedSegment], real_time: Optional[float]) -> Optional[VersePosition]:
    """
    Determine the verse playing at real_time inside segment.

    The Nth timing interval maps to the Nth verse of the expanded
    reference. An interval past the end of the verse list falls back to the
    first verse.

    Args:
        segment: Currently loaded segment
        real_time: Backend position inside the segment's audio file

    Returns:
        VersePosition, or None if there is no segment, the reference does not
        parse, or the segment has no timestamps
    """
    if segment is None:
        return None

    parsed = parse_reference(segment.reference)
    if parsed is None or not parsed.verses:
        return None

    timestamps = segment.timestamps
    if not timestamps:
        return None

    index = find_interval_index(timestamps, real_time)
    verses = parsed.verses
    verse = verses[index] if index < len(verses) else verses[0]

    return VersePosition(
        book=parsed.book,
        chapter=parsed.chapter,
        verse=verse,
        verse_start=verses[0],
        verse_end=verses[-1],
    )
