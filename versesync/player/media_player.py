"""
Media Player for versesync.

Public facade of the playback core: loads and queues playlists, exposes the
transport commands, and answers derived queries (current segment, verse and
image) against the observable playback state.
"""

import functools
import logging
from typing import List, Optional, Sequence

from versesync.backends.base import BackendFactory
from versesync.backends.headless import HeadlessBackend
from versesync.clock.scheduler import Scheduler
from versesync.config import PlayerConfig
from versesync.logging_setup import configure_logging
from versesync.playback.engine import PlaybackEngine
from versesync.playback.transition import TransitionController, TransportState
from versesync.state.playback_state import PlaybackState, StateListener
from versesync.state.playlist_queue import POSITION_END, POSITION_NEXT
from versesync.state.session import PlaybackSession
from versesync.timeline.segment import EnhancedSegment, Segment
from versesync.verses.locator import VersePosition, locate_verse

logger = logging.getLogger(__name__)

MODE_REPLACE = "replace"
MODE_QUEUE = "queue"


class MediaPlayer:
    """
    Playlist/queue manager and command surface of one player.

    Each MediaPlayer owns its session, engine and transition controller;
    several players can coexist. Commands run under the session lock and
    return once state is updated; audio loads complete asynchronously.
    """

    def __init__(
        self,
        backend_factory: Optional[BackendFactory] = None,
        config: Optional[PlayerConfig] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize media player.

        Args:
            backend_factory: Creates an AudioBackend for an audio URL
                (defaults to HeadlessBackend with the configured HTTP timeout)
            config: Player configuration (defaults to PlayerConfig.load_config())
            scheduler: Source of threads and timers (defaults to Scheduler())
        """
        self.config = config if config is not None else PlayerConfig.load_config()
        if backend_factory is None:
            backend_factory = functools.partial(HeadlessBackend, timeout=self.config.http_timeout_sec)

        self._session = PlaybackSession(self.config)
        self._scheduler = scheduler or Scheduler()
        self._engine = PlaybackEngine(self._session, backend_factory)
        self._controller = TransitionController(self._session, self._engine, self._scheduler)
        self._closed = False

        logger.info("[PLAYER] Media player initialized")

    def _rejects_command(self, command: str) -> bool:
        if self._closed:
            logger.warning(f"[PLAYER] {command}() ignored: player is closed")
            return True
        return False

    def __enter__(self) -> "MediaPlayer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        """Current read-only playback state snapshot."""
        return self._session.store.state

    @property
    def transport_state(self) -> TransportState:
        return self._controller.transport_state

    @property
    def generation(self) -> int:
        return self._session.generation

    def add_listener(self, callback: StateListener) -> None:
        """
        Subscribe to state changes.

        Args:
            callback: Called with the new PlaybackState after every change
        """
        self._session.store.add_listener(callback)

    def remove_listener(self, callback: StateListener) -> None:
        self._session.store.remove_listener(callback)

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------

    def load_playlist(
        self,
        segments: Optional[Sequence[Segment]],
        mode: str = MODE_REPLACE,
        auto_play: bool = False,
        clear_queue: bool = False,
        position: str = POSITION_END,
    ) -> None:
        """
        Load a playlist.

        Args:
            segments: Playlist segments in play order; empty or None clears the player
            mode: "replace" to play it now, "queue" to play it after the current playlist
            auto_play: Start playback once the first segment has loaded (replace mode)
            clear_queue: Drop queued playlists (replace mode and clearing)
            position: Queue position for mode="queue": "end" or "next"

        Raises:
            ValueError: If mode or position is unknown
        """
        if mode not in (MODE_REPLACE, MODE_QUEUE):
            raise ValueError(f"Invalid playlist mode: {mode!r} (expected 'replace' or 'queue')")
        if position not in (POSITION_END, POSITION_NEXT):
            raise ValueError(f"Invalid queue position: {position!r} (expected 'end' or 'next')")

        playlist = tuple(segments or ())

        with self._session.lock:
            if self._rejects_command("load_playlist"):
                return
            if not playlist:
                self._clear_playlist(clear_queue)
                return

            if mode == MODE_QUEUE:
                self._session.queue.enqueue(playlist, position)
                self._session.store.update(queue=self._session.queue.snapshot())
                logger.info(f"[PLAYER] Queued playlist ({len(playlist)} segments) at {position}")
                return

            self._session.next_generation()
            self._engine.release()
            if clear_queue:
                self._session.queue.clear()
            logger.info(f"[PLAYER] Loading playlist ({len(playlist)} segments, auto_play={auto_play})")
            self._controller.start_playlist(playlist, auto_play=auto_play)

    def _clear_playlist(self, clear_queue: bool) -> None:
        with self._session.lock:
            self._session.next_generation()
            self._controller.close()
            self._engine.release()
            self._session.install_playlist(None)
            if clear_queue:
                self._session.queue.clear()
            self._session.store.update(
                current_playlist=None,
                queue=self._session.queue.snapshot(),
                current_segment_index=0,
                current_time=0.0,
                virtual_time=0.0,
                total_duration=0.0,
                is_playing=False,
                is_paused=False,
                is_loading=False,
            )
            self._controller.mark_idle()
            logger.info("[PLAYER] Playlist cleared")

    def clear_queue(self) -> None:
        with self._session.lock:
            self._session.queue.clear()
            self._session.store.update(queue=())

    def remove_from_queue(self, index: int) -> bool:
        """
        Remove a queued playlist.

        Args:
            index: Position in the queue (0 = next to play)

        Returns:
            True if a playlist was removed
        """
        with self._session.lock:
            removed = self._session.queue.remove(index)
            if removed:
                self._session.store.update(queue=self._session.queue.snapshot())
            return removed

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def play(self) -> None:
        """Start or resume playback. No-op when nothing is loaded."""
        with self._session.lock:
            if self._rejects_command("play"):
                return
            self._controller.start_playback()

    def pause(self) -> None:
        self._controller.pause_playback()

    def toggle_play_pause(self) -> None:
        with self._session.lock:
            if self.state.is_playing:
                self.pause()
            else:
                self.play()

    def stop(self) -> None:
        """Stop playback and fully reset the player (playlist and queue are cleared)."""
        with self._session.lock:
            self._engine.stop()
            self._controller.reset()
            logger.info("[PLAYER] Stopped")

    def seek_to(self, virtual_time: float) -> None:
        """
        Seek on the virtual timeline.

        Args:
            virtual_time: Seconds from the start of the playlist
        """
        with self._session.lock:
            if self._rejects_command("seek_to"):
                return
            self._controller.seek(virtual_time)

    def play_segment(self, index: int) -> None:
        """
        Jump to a segment and start playing it once loaded.

        Out-of-range indexes are ignored.
        """
        with self._session.lock:
            if self._rejects_command("play_segment"):
                return
            if index < 0 or index >= len(self._session.segment_map):
                logger.debug(f"[PLAYER] play_segment({index}) ignored: out of range")
                return
            self._controller.switch_segment(index, 0.0, resume=True)

    def next_segment(self) -> None:
        with self._session.lock:
            self.play_segment(self.state.current_segment_index + 1)

    def previous_segment(self) -> None:
        with self._session.lock:
            self.play_segment(self.state.current_segment_index - 1)

    def set_playback_rate(self, rate: float) -> None:
        """
        Set the playback rate for the current and every later segment.

        Raises:
            ValueError: If rate is not positive
        """
        if rate <= 0:
            raise ValueError(f"Invalid playback rate: {rate} (must be > 0)")
        with self._session.lock:
            self._session.store.update(playback_rate=float(rate))
            self._engine.set_rate(rate)

    # ------------------------------------------------------------------
    # UI passthrough state
    # ------------------------------------------------------------------

    def set_minimized(self, minimized: bool) -> None:
        self._session.store.update(is_minimized=bool(minimized))

    def toggle_minimized(self) -> None:
        with self._session.lock:
            self._session.store.update(is_minimized=not self.state.is_minimized)

    def set_audio_language(self, language: Optional[str]) -> None:
        """Set the audio language (independent of the display language)."""
        self._session.store.update(audio_language=language)

    def set_current_story(self, story_id: Optional[str], story_data=None) -> None:
        """
        Remember which story the playlist belongs to.

        Args:
            story_id: Story identifier
            story_data: Story payload used to navigate back to it
        """
        self._session.store.update(current_story_id=story_id, current_story_data=story_data)

    # ------------------------------------------------------------------
    # Derived queries
    # ------------------------------------------------------------------

    def get_current_segment(self) -> Optional[EnhancedSegment]:
        with self._session.lock:
            return self._session.current_segment()

    def get_segment_map(self) -> List[EnhancedSegment]:
        with self._session.lock:
            return list(self._session.segment_map)

    def get_current_verse(self) -> Optional[VersePosition]:
        """
        Verse currently being heard.

        Returns:
            VersePosition, or None if nothing is loaded or the reference does not parse
        """
        with self._session.lock:
            return locate_verse(self._session.current_segment(), self._engine.position())

    def get_current_image(self) -> Optional[str]:
        with self._session.lock:
            segment = self._session.current_segment()
            return segment.image_url if segment is not None else None

    def close(self) -> None:
        """Stop the poll, cancel pending waits and release every backend handle."""
        with self._session.lock:
            if self._closed:
                return
            self._closed = True
            self._session.next_generation()
            self._controller.close()
            self._engine.release()
            logger.info("[PLAYER] Media player closed")


def create_player(
    backend_factory: Optional[BackendFactory] = None,
    scheduler: Optional[Scheduler] = None,
) -> MediaPlayer:
    """
    Create a MediaPlayer from the environment.

    Loads PlayerConfig from .env / VERSESYNC_* variables and configures
    logging from it before the player is built.

    Args:
        backend_factory: Creates an AudioBackend for an audio URL (defaults to HeadlessBackend)
        scheduler: Source of threads and timers (defaults to Scheduler())

    Returns:
        New MediaPlayer

    Raises:
        ValueError: If the configuration is invalid
    """
    config = PlayerConfig.load_config()
    configure_logging(config.log_level, config.log_file)
    return MediaPlayer(backend_factory=backend_factory, config=config, scheduler=scheduler)
