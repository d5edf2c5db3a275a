"""
Playback Engine for versesync.

Owns the audio backend handles of one player: exactly one "current" handle
for the loaded segment and at most one "prefetch" handle preloading the
segment after it. No other component touches the handles.
"""

import logging
from typing import Callable, Optional

from versesync.backends.base import AudioBackend, BackendFactory, STATE_LOADED, STATE_UNLOADED
from versesync.errors import LoadFailure, PlaybackStartFailure, PlayerError
from versesync.state.session import PlaybackSession
from versesync.timeline.segment import EnhancedSegment

logger = logging.getLogger(__name__)

LoadedCallback = Callable[[EnhancedSegment], None]
EngineErrorCallback = Callable[[PlayerError], None]


class PlaybackEngine:
    """
    Loads segments into backend handles and forwards transport commands.

    Load completion arrives asynchronously from the backend. Every load
    callback captures the playlist generation and its own handle; results
    for a superseded generation or a replaced handle are discarded and the
    handle is unloaded.
    """

    def __init__(
        self,
        session: PlaybackSession,
        backend_factory: BackendFactory,
        on_loaded: Optional[LoadedCallback] = None,
        on_error: Optional[EngineErrorCallback] = None,
    ):
        """
        Initialize the playback engine.

        Args:
            session: Session shared with the rest of the player
            backend_factory: Creates a backend handle for an audio URL
            on_loaded: Called with the segment once its audio is ready
            on_error: Called with LoadFailure / PlaybackStartFailure
        """
        self._session = session
        self._factory = backend_factory
        self._on_loaded = on_loaded
        self._on_error = on_error

        self._current: Optional[AudioBackend] = None
        self._current_segment: Optional[EnhancedSegment] = None
        self._prefetch: Optional[AudioBackend] = None
        self._prefetch_segment: Optional[EnhancedSegment] = None
        self._pending_seek: Optional[float] = None  # Seek target applied once the current handle loads

    def set_callbacks(self, on_loaded: Optional[LoadedCallback], on_error: Optional[EngineErrorCallback]) -> None:
        self._on_loaded = on_loaded
        self._on_error = on_error

    @property
    def has_handle(self) -> bool:
        return self._current is not None

    @property
    def current_segment(self) -> Optional[EnhancedSegment]:
        return self._current_segment

    @property
    def prefetch_segment(self) -> Optional[EnhancedSegment]:
        return self._prefetch_segment

    def state(self) -> str:
        """Load state of the current handle ("unloaded" when there is none)."""
        with self._session.lock:
            if self._current is None:
                return STATE_UNLOADED
            return self._current.state()

    def load_segment(self, segment: EnhancedSegment, seek_offset: float = 0.0) -> bool:
        """
        Make segment the current segment.

        Promotes the prefetch handle when it already holds this segment's
        audio and has finished loading; otherwise replaces the current handle
        with a fresh one. Once loaded, the handle is positioned at
        start_timestamp + seek_offset and given the current playback rate.

        Args:
            segment: Segment to load
            seek_offset: Offset from the segment's start in seconds

        Returns:
            True if the audio was ready immediately (promoted prefetch)
        """
        with self._session.lock:
            store = self._session.store
            target = segment.start_timestamp + seek_offset

            if not segment.audio_url:
                self._release_current()
                self._current_segment = segment
                store.update(is_loading=False)
                self._report(LoadFailure(None, message="No audio URL for segment"))
                return False

            prefetched = self._prefetch
            if (prefetched is not None
                    and prefetched.src == segment.audio_url
                    and prefetched.state() == STATE_LOADED):
                # Ownership transfer: the prefetch slot is emptied in the same step
                self._release_current()
                self._current, self._prefetch = prefetched, None
                self._prefetch_segment = None
                self._current_segment = segment
                self._pending_seek = None
                prefetched.on_play_error = lambda error: self._handle_play_error(prefetched, error)

                prefetched.seek(target)
                prefetched.rate(store.state.playback_rate)
                store.update(is_loading=False)
                logger.info(f"[PLAYBACK] Promoted prefetched audio for segment {segment.index} ({segment.reference})")

                self._notify_loaded(segment)
                self.prefetch_next()
                return True

            self._release_current()
            store.update(is_loading=True)

            generation = self._session.generation
            handle = self._factory(segment.audio_url)
            handle.on_load = lambda: self._handle_loaded(handle, segment, generation)
            handle.on_load_error = lambda error: self._handle_load_error(handle, segment, generation, error)
            handle.on_play_error = lambda error: self._handle_play_error(handle, error)

            self._current = handle
            self._current_segment = segment
            self._pending_seek = target
            logger.info(f"[PLAYBACK] Loading segment {segment.index} ({segment.reference}) from {segment.audio_url}")

            # May complete synchronously; the handle is already in place
            handle.load()
            return False

    def prefetch_next(self) -> None:
        """
        Preload the segment after the current one into the prefetch slot.

        Any previous prefetch handle is released first. Nothing is prefetched
        after the last segment.
        """
        with self._session.lock:
            self._release_prefetch()

            if self._current_segment is None:
                return
            next_segment = self._session.segment_at(self._current_segment.index + 1)
            if next_segment is None or not next_segment.audio_url:
                return

            handle = self._factory(next_segment.audio_url)
            handle.on_load_error = lambda error: self._handle_prefetch_error(handle, error)
            self._prefetch = handle
            self._prefetch_segment = next_segment
            logger.debug(f"[PLAYBACK] Prefetching segment {next_segment.index} ({next_segment.audio_url})")
            handle.load()

    def play(self) -> bool:
        """
        Start the current handle.

        Returns:
            False if there is no current handle (silent no-op)
        """
        with self._session.lock:
            if self._current is None:
                return False
            self._current.play()
            return True

    def pause(self) -> None:
        with self._session.lock:
            if self._current is not None:
                self._current.pause()

    def stop(self) -> None:
        with self._session.lock:
            if self._current is not None:
                self._current.stop()

    def playing(self) -> bool:
        with self._session.lock:
            return self._current is not None and self._current.playing()

    def seek(self, real_time: float) -> None:
        """
        Move the current handle to real_time.

        While the handle is still loading the target replaces the pending
        seek and is applied on load.
        """
        with self._session.lock:
            if self._current is None:
                return
            if self._current.state() == STATE_LOADED:
                self._current.seek(real_time)
            else:
                self._pending_seek = real_time

    def position(self) -> Optional[float]:
        """
        Real position of the current handle.

        Returns:
            Seconds into the current audio file, or None if nothing is loaded
        """
        with self._session.lock:
            if self._current is None or self._current.state() != STATE_LOADED:
                return None
            position = self._current.seek()
            return float(position) if isinstance(position, (int, float)) else None

    def set_rate(self, rate: float) -> None:
        with self._session.lock:
            if self._current is not None:
                self._current.rate(rate)

    def release(self) -> None:
        """Unload both handles. Required on teardown and playlist replacement."""
        with self._session.lock:
            self._release_current()
            self._release_prefetch()
            logger.debug("[PLAYBACK] Released backend handles")

    def _release_current(self) -> None:
        handle = self._current
        self._current = None
        self._current_segment = None
        self._pending_seek = None
        if handle is not None:
            handle.unload()

    def _release_prefetch(self) -> None:
        handle = self._prefetch
        self._prefetch = None
        self._prefetch_segment = None
        if handle is not None:
            handle.unload()

    def _is_stale(self, handle: AudioBackend, generation: int) -> bool:
        return not self._session.is_current(generation) or handle is not self._current

    def _handle_loaded(self, handle: AudioBackend, segment: EnhancedSegment, generation: int) -> None:
        with self._session.lock:
            if self._is_stale(handle, generation):
                logger.debug(f"[PLAYBACK] Discarding stale load of {segment.audio_url} (generation {generation})")
                if handle is not self._current and handle is not self._prefetch:
                    handle.unload()
                return

            target = self._pending_seek if self._pending_seek is not None else segment.start_timestamp
            self._pending_seek = None
            handle.seek(target)
            handle.rate(self._session.store.state.playback_rate)
            self._session.store.update(is_loading=False)
            logger.info(f"[PLAYBACK] Segment {segment.index} loaded ({segment.reference})")

            self._notify_loaded(segment)
            self.prefetch_next()

    def _handle_load_error(self, handle: AudioBackend, segment: EnhancedSegment, generation: int, error: object) -> None:
        with self._session.lock:
            if self._is_stale(handle, generation):
                logger.debug(f"[PLAYBACK] Ignoring load error of superseded handle {segment.audio_url}: {error}")
                return
            logger.error(f"[PLAYBACK] Failed to load audio {segment.audio_url}: {error}")
            self._session.store.update(is_loading=False)
            self._report(LoadFailure(segment.audio_url, error))

    def _handle_play_error(self, handle: AudioBackend, error: object) -> None:
        with self._session.lock:
            if handle is not self._current:
                return
            logger.error(f"[PLAYBACK] Playback error on {handle.src}: {error}")
            self._report(PlaybackStartFailure(error))

    def _handle_prefetch_error(self, handle: AudioBackend, error: object) -> None:
        with self._session.lock:
            if handle is not self._prefetch:
                return
            logger.warning(f"[PLAYBACK] Failed to prefetch {handle.src}: {error}")
            self._release_prefetch()

    def _notify_loaded(self, segment: EnhancedSegment) -> None:
        if self._on_loaded is not None:
            self._on_loaded(segment)

    def _report(self, error: PlayerError) -> None:
        if self._on_error is not None:
            self._on_error(error)
