"""
Timing table extraction and playlist assembly.

Turns the raw timing tables shipped with audio filesets into Segments ready
for playback. Two table layouts exist:

- Direct-audio tables, keyed "BOOK CHAPTER":
  {"JHN 3": {"verseTimestamps": {"1": 0.0, "2": 4.1, ...}}}
- Fileset tables, keyed by fileset then story number:
  {"ENGESVN2DA": {"12": {"JHN3:16-18": [100.0, 105.2, 111.0, 118.5]}}}
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from versesync.timeline.segment import Segment, TimingData
from versesync.verses.reference import parse_verse_spec

logger = logging.getLogger(__name__)

# Tail length assumed when a direct-audio table has no entry after the last verse
DEFAULT_LAST_VERSE_SECONDS = 10.0

# A segment needs at least one full verse interval to be playable
MIN_TIMESTAMPS = 2


def extract_timing_data(
    timing_data: Optional[Dict[str, Any]],
    audio_fileset_id: Optional[str],
    book_id: str,
    chapter: int,
    verse_spec: str,
) -> Optional[TimingData]:
    """
    Extract the timestamps for one reference from a raw timing table.

    Args:
        timing_data: Raw timing table (either layout)
        audio_fileset_id: Fileset key for fileset tables
        book_id: Book code, e.g. "JHN"
        chapter: Chapter number
        verse_spec: Verse specification, e.g. "16-18" or "1,3-5"

    Returns:
        TimingData for the reference, or None if the table has no entry for it
    """
    if not timing_data:
        return None

    direct_key = f"{book_id} {chapter}"
    direct_entry = timing_data.get(direct_key)
    if isinstance(direct_entry, dict) and direct_entry.get("verseTimestamps"):
        verse_timestamps = direct_entry["verseTimestamps"]
        verses = parse_verse_spec(verse_spec)

        timestamps = [
            float(verse_timestamps[str(v)])
            for v in verses
            if verse_timestamps.get(str(v)) is not None
        ]
        if not timestamps:
            return None

        # End boundary is the start of the verse after the last one requested
        end = verse_timestamps.get(str(verses[-1] + 1))
        if end is not None:
            timestamps.append(float(end))
        else:
            timestamps.append(timestamps[-1] + DEFAULT_LAST_VERSE_SECONDS)

        return TimingData(
            timestamps=tuple(timestamps),
            reference=f"{book_id}{chapter}:{verse_spec}",
        )

    if not audio_fileset_id or not timing_data.get(audio_fileset_id):
        return None

    search_ref = f"{book_id}{chapter}:{verse_spec}"
    for story_num, story_data in timing_data[audio_fileset_id].items():
        if isinstance(story_data, dict) and story_data.get(search_ref):
            logger.debug(f"[TIMING] {search_ref} found under story {story_num}")
            return TimingData(
                timestamps=tuple(float(t) for t in story_data[search_ref]),
                reference=search_ref,
            )

    return None


def build_playlist(entries: Iterable[Any]) -> List[Segment]:
    """
    Assemble a playable playlist from content-loader entries.

    Entries with fewer than two timestamps are dropped. The rest are
    ordered by section number, then by their order within the section.

    Args:
        entries: Segments or mappings accepted by Segment.from_dict()

    Returns:
        Ordered list of playable Segments
    """
    playlist: List[Segment] = []
    for entry in entries:
        segment = entry if isinstance(entry, Segment) else Segment.from_dict(entry)
        if len(segment.timing_data.timestamps) < MIN_TIMESTAMPS:
            logger.debug(f"[TIMING] Dropping {segment.reference}: not enough timestamps")
            continue
        playlist.append(segment)

    playlist.sort(key=lambda s: (s.section_num, s.ref_index))
    return playlist
