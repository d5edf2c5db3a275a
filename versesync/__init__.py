"""
versesync: virtual-timeline audio playback core.

Plays an ordered list of scripture segments (each a slice of an audio file
with per-verse timestamps) as one continuous timeline, and reports the
verse currently being heard.
"""

from versesync.config import PlayerConfig
from versesync.errors import LoadFailure, PlaybackStartFailure, PlaybackTimeout, PlayerError
from versesync.player.media_player import MediaPlayer, MODE_QUEUE, MODE_REPLACE, create_player
from versesync.state.playback_state import PlaybackState
from versesync.timeline.segment import EnhancedSegment, Segment, TimingData
from versesync.timeline.segment_map import build_segment_map
from versesync.verses.locator import VersePosition

__version__ = "0.1.0"

__all__ = [
    "PlayerConfig",
    "PlayerError",
    "LoadFailure",
    "PlaybackStartFailure",
    "PlaybackTimeout",
    "MediaPlayer",
    "MODE_QUEUE",
    "MODE_REPLACE",
    "create_player",
    "PlaybackState",
    "Segment",
    "EnhancedSegment",
    "TimingData",
    "build_segment_map",
    "VersePosition",
]
