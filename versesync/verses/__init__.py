"""
Verse module for versesync.

Reference parsing and live verse lookup.
"""

from versesync.verses.reference import ParsedReference, parse_reference, parse_verse_spec
from versesync.verses.locator import VersePosition, find_interval_index, locate_verse

__all__ = [
    "ParsedReference",
    "parse_reference",
    "parse_verse_spec",
    "VersePosition",
    "find_interval_index",
    "locate_verse",
]
