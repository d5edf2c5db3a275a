"""
Playlist Queue.

FIFO of playlists waiting to play once the current playlist ends.
"""

import logging
from collections import deque
from typing import Deque, Iterable, Optional, Tuple

from versesync.timeline.segment import Segment

logger = logging.getLogger(__name__)

Playlist = Tuple[Segment, ...]

POSITION_END = "end"
POSITION_NEXT = "next"


class PlaylistQueue:
    """
    FIFO queue of playlists.

    Playlists are stored as tuples so a queued playlist can never be
    mutated behind the player's back.
    """

    def __init__(self):
        """Initialize the playlist queue."""
        self._queue: Deque[Playlist] = deque()

    def enqueue(self, playlist: Iterable[Segment], position: str = POSITION_END) -> None:
        """
        Add a playlist to the queue.

        Args:
            playlist: Segments of the playlist
            position: "end" to append, "next" to play it before everything queued

        Raises:
            ValueError: If position is not "end" or "next"
        """
        items = tuple(playlist)
        if position == POSITION_NEXT:
            self._queue.appendleft(items)
        elif position == POSITION_END:
            self._queue.append(items)
        else:
            raise ValueError(f"Invalid queue position: {position!r} (expected 'end' or 'next')")
        logger.debug(f"[QUEUE] Enqueued playlist ({len(items)} segments) at {position}, size={len(self._queue)}")

    def dequeue(self) -> Optional[Playlist]:
        """
        Remove and return the first playlist.

        Returns:
            Playlist from front of queue, or None if queue is empty
        """
        if self.empty():
            return None
        playlist = self._queue.popleft()
        logger.debug(f"[QUEUE] Dequeued playlist ({len(playlist)} segments), size={len(self._queue)}")
        return playlist

    def peek(self) -> Optional[Playlist]:
        if self.empty():
            return None
        return self._queue[0]

    def remove(self, index: int) -> bool:
        """
        Remove the playlist at index.

        Args:
            index: Position in the queue (0 = next to play)

        Returns:
            True if a playlist was removed, False if index was out of range
        """
        if index < 0 or index >= len(self._queue):
            return False
        del self._queue[index]
        return True

    def empty(self) -> bool:
        return len(self._queue) == 0

    def size(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        """Clear all playlists from the queue."""
        self._queue.clear()
        logger.debug("[QUEUE] Queue cleared")

    def snapshot(self) -> Tuple[Playlist, ...]:
        """Queue contents in play order."""
        return tuple(self._queue)

    def dump(self) -> list:
        """
        Dump queue contents for debugging.

        Returns:
            List of string representations of queue items
        """
        return [
            f"{len(playlist)} segments: {playlist[0].reference if playlist else '-'}"
            for playlist in self._queue
        ]
