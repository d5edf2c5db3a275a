"""
Segment model for the versesync playback core.

Defines the Segment dataclass (one audio-bearing unit of content) and the
EnhancedSegment produced by the segment map builder.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class TimingData:
    """
    Verse timing for one segment's audio file.

    Consecutive pairs (timestamps[i], timestamps[i + 1]) bound one verse.

    Attributes:
        timestamps: Ordered real-time offsets (seconds) into the audio file
        reference: Optional timing-table key the timestamps were read from
    """
    timestamps: Tuple[float, ...] = ()
    reference: Optional[str] = None

    @classmethod
    def from_value(cls, value: Any) -> "TimingData":
        """
        Build TimingData from a TimingData, a mapping, or a plain sequence.

        Args:
            value: TimingData instance, dict with "timestamps", list of floats, or None

        Returns:
            TimingData instance
        """
        if isinstance(value, TimingData):
            return value
        if value is None:
            return cls()
        if isinstance(value, dict):
            return cls(
                timestamps=tuple(float(t) for t in value.get("timestamps") or ()),
                reference=value.get("reference"),
            )
        return cls(timestamps=tuple(float(t) for t in value))


@dataclass(frozen=True)
class Segment:
    """
    One audio-bearing unit of content (e.g. a chapter's worth of verses).

    Immutable once loaded. Only audio_url and timing_data take part in
    playback math; everything else is passed through for display.

    Attributes:
        reference: Scripture reference, e.g. "JHN 3:1-15"
        audio_url: Remote URL (or local path) of the audio file for this segment
        timing_data: Verse timestamps into audio_url
        section_num: Grouping key (story section) for UI correlation
        image_url: Display payload, opaque to playback
        text: Display payload, opaque to playback
        ref_index: Order of this reference within its section
        book: Optional book code
        chapter: Optional chapter number
        testament: Optional testament marker ("OT"/"NT")
        audio_file: Optional audio file name
    """
    reference: str
    audio_url: str
    timing_data: TimingData = field(default_factory=TimingData)
    section_num: int = 0
    image_url: Optional[str] = None
    text: Optional[str] = None
    ref_index: int = 0
    book: Optional[str] = None
    chapter: Optional[int] = None
    testament: Optional[str] = None
    audio_file: Optional[str] = None

    @property
    def timestamps(self) -> Tuple[float, ...]:
        return self.timing_data.timestamps

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Segment":
        """
        Build a Segment from a content-loader record.

        Accepts both snake_case keys and the camelCase keys used by the
        JSON content loader (audioUrl, timingData, sectionNum, ...).

        Args:
            data: Mapping describing one playlist entry

        Returns:
            Segment instance

        Raises:
            ValueError: If the record has no reference
        """
        def pick(snake: str, camel: str, default=None):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        reference = data.get("reference")
        if not reference:
            raise ValueError(f"Playlist entry has no reference: {data!r}")

        chapter = data.get("chapter")
        return cls(
            reference=reference,
            audio_url=pick("audio_url", "audioUrl", "") or "",
            timing_data=TimingData.from_value(pick("timing_data", "timingData")),
            section_num=int(pick("section_num", "sectionNum", 0) or 0),
            image_url=pick("image_url", "imageUrl"),
            text=data.get("text"),
            ref_index=int(pick("ref_index", "refIndex", 0) or 0),
            book=data.get("book"),
            chapter=int(chapter) if chapter is not None else None,
            testament=data.get("testament"),
            audio_file=pick("audio_file", "audioFile"),
        )


@dataclass(frozen=True)
class EnhancedSegment:
    """
    Segment placed on the continuous virtual timeline.

    Produced by build_segment_map(); never constructed by callers directly.

    Attributes:
        segment: The wrapped Segment
        index: Position in the ordered segment list (0-based)
        start_timestamp: First timing entry (0 if none)
        end_timestamp: Last timing entry (start_timestamp if none)
        duration: end_timestamp - start_timestamp (0 if fewer than 2 timestamps)
        virtual_start: Offset of this segment on the virtual timeline
        virtual_end: virtual_start + duration
    """
    segment: Segment
    index: int
    start_timestamp: float
    end_timestamp: float
    duration: float
    virtual_start: float
    virtual_end: float

    @property
    def reference(self) -> str:
        return self.segment.reference

    @property
    def audio_url(self) -> str:
        return self.segment.audio_url

    @property
    def timing_data(self) -> TimingData:
        return self.segment.timing_data

    @property
    def timestamps(self) -> Tuple[float, ...]:
        return self.segment.timing_data.timestamps

    @property
    def section_num(self) -> int:
        return self.segment.section_num

    @property
    def image_url(self) -> Optional[str]:
        return self.segment.image_url

    @property
    def text(self) -> Optional[str]:
        return self.segment.text
