"""
Scripture reference parsing.

References have the form "BOOK CHAPTER:VERSESPEC" where VERSESPEC is a
single verse, a hyphenated range, or a comma-separated list of both
("JHN 3:16", "JHN 3:16-18", "GEN 1:1-3,5,7-9").
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

REFERENCE_PATTERN = re.compile(r"^([A-Z0-9]+)\s+(\d+):(.+)$", re.IGNORECASE)
_LEADING_INT = re.compile(r"\s*(\d+)")


@dataclass(frozen=True)
class ParsedReference:
    """
    A reference split into its parts.

    Attributes:
        book: Book code as written (e.g. "JHN")
        chapter: Chapter number
        verses: Expanded, ordered verse numbers covered by the reference
    """
    book: str
    chapter: int
    verses: Tuple[int, ...]


def _leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def parse_verse_spec(verse_spec: str) -> List[int]:
    """
    Expand a verse specification into an ordered list of verse numbers.

    Parts that are not a number or a two-sided range are skipped.

    Args:
        verse_spec: e.g. "16-18", "4", "5-7,9-11"

    Returns:
        Verse numbers in reference order
    """
    verses: List[int] = []
    for part in verse_spec.split(","):
        bounds = part.strip().split("-")
        if len(bounds) == 2:
            start = _leading_int(bounds[0])
            end = _leading_int(bounds[1])
            if start is None or end is None:
                continue
            verses.extend(range(start, end + 1))
        elif len(bounds) == 1:
            verse = _leading_int(bounds[0])
            if verse is not None:
                verses.append(verse)
    return verses


def parse_reference(reference: Optional[str]) -> Optional[ParsedReference]:
    """
    Parse a "BOOK CHAPTER:VERSESPEC" reference.

    Args:
        reference: Reference string

    Returns:
        ParsedReference, or None if the string does not match the format
    """
    if not reference:
        return None
    match = REFERENCE_PATTERN.match(reference.strip())
    if not match:
        return None
    book, chapter, verse_spec = match.groups()
    return ParsedReference(
        book=book,
        chapter=int(chapter),
        verses=tuple(parse_verse_spec(verse_spec)),
    )
