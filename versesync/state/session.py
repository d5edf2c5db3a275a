"""
Playback session.

The state owned by one player instance and shared by reference with its
engine and transition controller: the lock, the observable state store,
the playlist queue, the current segment map and the playlist generation id.
There are no module-level singletons; every player owns its own session.
"""

import logging
import threading
from typing import List, Optional, Sequence

from versesync.config import PlayerConfig
from versesync.state.playlist_queue import PlaylistQueue
from versesync.state.playback_state import PlaybackStateStore
from versesync.timeline.segment import EnhancedSegment, Segment
from versesync.timeline.segment_map import build_segment_map, total_duration

logger = logging.getLogger(__name__)


class PlaybackSession:
    """
    Shared state of one playback session.

    All mutation happens with `lock` held. Asynchronous callbacks capture
    `generation` when they are scheduled and drop themselves when it has
    moved on (is_current() is False).
    """

    def __init__(self, config: Optional[PlayerConfig] = None):
        self.config = config or PlayerConfig()
        self.lock = threading.RLock()
        self.store = PlaybackStateStore()
        self.queue = PlaylistQueue()
        self.segment_map: List[EnhancedSegment] = []
        self.generation = 0

    def next_generation(self) -> int:
        """
        Invalidate every pending asynchronous callback.

        Returns:
            The new generation id
        """
        with self.lock:
            self.generation += 1
            logger.debug(f"[SESSION] Playlist generation -> {self.generation}")
            return self.generation

    def is_current(self, generation: int) -> bool:
        with self.lock:
            return generation == self.generation

    def install_playlist(self, segments: Optional[Sequence[Segment]]) -> List[EnhancedSegment]:
        """
        Rebuild the segment map for a new playlist.

        Args:
            segments: Playlist segments (None clears the map)

        Returns:
            The new segment map
        """
        with self.lock:
            self.segment_map = build_segment_map(segments)
            return self.segment_map

    @property
    def total_duration(self) -> float:
        return total_duration(self.segment_map)

    def segment_at(self, index: int) -> Optional[EnhancedSegment]:
        if 0 <= index < len(self.segment_map):
            return self.segment_map[index]
        return None

    def current_segment(self) -> Optional[EnhancedSegment]:
        return self.segment_at(self.store.state.current_segment_index)
