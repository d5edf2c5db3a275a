"""
Playback State Manager

Provides the authoritative, read-only playback state snapshot consumed by UI
collaborators, and notifies listeners whenever it changes.
"""

import logging
import threading
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, List, Optional, Tuple

from versesync.timeline.segment import Segment

logger = logging.getLogger(__name__)

Playlist = Tuple[Segment, ...]
StateListener = Callable[["PlaybackState"], None]


@dataclass(frozen=True)
class PlaybackState:
    """
    Immutable playback state snapshot.

    is_playing and is_paused are not an enum: both are False at rest.

    Attributes:
        current_playlist: Loaded playlist, or None when idle
        queue: Playlists waiting to play after the current one
        current_segment_index: Index of the loaded segment in the segment map
        is_playing: Audio is (or is about to be) advancing
        is_paused: Playback was paused by the user
        is_loading: A segment load is in flight
        current_time: Real position inside the current segment's audio file
        virtual_time: Position on the continuous timeline
        total_duration: Sum of all segment durations
        playback_rate: Rate multiplier applied to every segment
        error: Last error message, or None
        is_minimized: Player UI is minimized
        audio_language: Language of the audio (independent of display language)
        current_story_id: Story the playlist belongs to
        current_story_data: Story payload for navigating back to the playing story
    """
    current_playlist: Optional[Playlist] = None
    queue: Tuple[Playlist, ...] = ()
    current_segment_index: int = 0
    is_playing: bool = False
    is_paused: bool = False
    is_loading: bool = False
    current_time: float = 0.0
    virtual_time: float = 0.0
    total_duration: float = 0.0
    playback_rate: float = 1.0
    error: Optional[str] = None
    is_minimized: bool = False
    audio_language: Optional[str] = None
    current_story_id: Optional[str] = None
    current_story_data: Optional[Any] = None


_FIELD_NAMES = frozenset(f.name for f in fields(PlaybackState))


class PlaybackStateStore:
    """
    Holds the current PlaybackState.

    Written only by the player and its transition callbacks; everyone else
    reads snapshots or subscribes with add_listener().
    """

    def __init__(self):
        """Initialize state store with an empty state."""
        self._state = PlaybackState()
        self._lock = threading.RLock()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return self._state

    def update(self, **changes: Any) -> PlaybackState:
        """
        Apply field changes and notify listeners if anything changed.

        Args:
            **changes: PlaybackState field values

        Returns:
            The new state

        Raises:
            AttributeError: If a change names an unknown field
        """
        unknown = set(changes) - _FIELD_NAMES
        if unknown:
            raise AttributeError(f"Unknown playback state field(s): {sorted(unknown)}")

        with self._lock:
            previous = self._state
            new_state = replace(previous, **changes)
            if new_state == previous:
                return previous
            self._state = new_state
            self._notify_listeners(new_state)
            return new_state

    def reset(self, **keep: Any) -> PlaybackState:
        """
        Replace the state with a fresh one.

        Args:
            **keep: Field values to carry into the fresh state

        Returns:
            The new state
        """
        with self._lock:
            self._state = PlaybackState(**keep)
            logger.debug("[STATE] Playback state reset")
            self._notify_listeners(self._state)
            return self._state

    def add_listener(self, callback: StateListener) -> None:
        """
        Add a listener callback for state changes.

        Callback will be called with the new PlaybackState.

        Args:
            callback: Function to call on state changes
        """
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: StateListener) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def _notify_listeners(self, state: PlaybackState) -> None:
        # Copy listeners list so callbacks may unsubscribe while being notified
        listeners = self._listeners.copy()

        for callback in listeners:
            try:
                callback(state)
            except Exception as e:
                # Observer failures must not affect playback
                logger.debug(f"[STATE] Listener callback error: {e}")
