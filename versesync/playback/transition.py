"""
Transition Controller for versesync.

Drives the position poll and moves playback across segment and playlist
boundaries: natural segment end, seeks that cross segments, playlist end
(advance to the queue or reset), and resuming once a freshly loaded segment
is ready.
"""

import enum
import logging
from typing import Optional

from versesync.backends.base import STATE_LOADED, STATE_UNLOADED
from versesync.clock.scheduler import PeriodicTask, Scheduler
from versesync.errors import LoadFailure, PlaybackTimeout, PlayerError
from versesync.playback.engine import PlaybackEngine
from versesync.playback.waiter import Attempt, WaitOutcome, wait_until_ready
from versesync.state.session import PlaybackSession
from versesync.timeline.position import locate_segment, to_real, to_virtual
from versesync.timeline.segment import EnhancedSegment

logger = logging.getLogger(__name__)


class TransportState(enum.Enum):
    """Transport state of the player."""
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"  # Loaded and not advancing (user pause, ready-not-started, halted by error)
    PLAYLIST_ENDED = "playlist_ended"


class TransitionController:
    """
    Owns the poll and every segment/playlist transition of one player.

    Every method runs with the session lock held (re-entrant). Resume waits
    run on scheduler workers and take the lock only for each attempt; they
    capture the playlist generation and a switch id and abandon themselves
    once either has moved on.
    """

    def __init__(self, session: PlaybackSession, engine: PlaybackEngine, scheduler: Scheduler):
        """
        Initialize transition controller.

        Args:
            session: Session shared with the engine
            engine: Playback engine (registers itself for load/error callbacks)
            scheduler: Source of the poll task, workers and timers
        """
        self._session = session
        self._engine = engine
        self._scheduler = scheduler
        self._config = session.config

        self._transport = TransportState.IDLE
        self._poll_task: Optional[PeriodicTask] = None
        self._poll_token = 0
        self._switch_id = 0
        self._settle_token = 0
        self._is_seeking = False
        self._waiting_switch: Optional[int] = None  # Switch id of the pending resume wait

        engine.set_callbacks(self.on_segment_loaded, self.on_engine_error)

    @property
    def transport_state(self) -> TransportState:
        return self._transport

    def _set_transport(self, new_state: TransportState) -> None:
        old_state = self._transport
        self._transport = new_state
        if old_state != new_state:
            logger.debug(f"[TRANSITION] Transport: {old_state.value} -> {new_state.value}")

    # ------------------------------------------------------------------
    # Position poll
    # ------------------------------------------------------------------

    def start_poll(self) -> None:
        """(Re)start the position poll. Any running poll is cancelled first."""
        with self._session.lock:
            self.stop_poll()
            self._poll_token += 1
            token = self._poll_token
            self._poll_task = self._scheduler.every(
                self._config.poll_interval_sec,
                lambda: self._on_tick(token),
                name="PositionPoll",
            )

    def stop_poll(self) -> None:
        with self._session.lock:
            # Ticks already waiting for the lock see a stale token and return
            self._poll_token += 1
            task = self._poll_task
            self._poll_task = None
            if task is not None:
                task.cancel()

    def _on_tick(self, token: int) -> None:
        with self._session.lock:
            if token != self._poll_token:
                return
            self.poll_once()

    def poll_once(self) -> None:
        """
        Publish the backend position and detect the end of the segment.

        Does nothing while a seek is in progress, while not playing, or while
        the current handle has no position yet.
        """
        with self._session.lock:
            if self._is_seeking or not self._session.store.state.is_playing:
                return

            segment = self._session.current_segment()
            real_time = self._engine.position()
            if segment is None or real_time is None:
                return

            self._session.store.update(
                current_time=real_time,
                virtual_time=to_virtual(segment, real_time),
            )

            if real_time >= segment.end_timestamp - self._config.end_epsilon_sec:
                self.handle_segment_end()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def start_playback(self) -> bool:
        """
        Start the current handle and the poll.

        A handle whose load failed is not started: playback is not marked
        active and the recorded load error stays visible.

        Returns:
            False if there is no handle (silent no-op) or playback did not start
        """
        with self._session.lock:
            if not self._engine.has_handle:
                logger.debug("[TRANSITION] play() ignored: no audio loaded")
                return False

            if self._engine.state() == STATE_UNLOADED:
                logger.warning("[TRANSITION] play() refused: audio is not loaded")
                return False

            # Cleared before play() so a synchronous play error stays recorded
            self._session.store.update(error=None)
            self._engine.play()
            if self._session.store.state.error is not None:
                logger.warning(f"[TRANSITION] play() refused: {self._session.store.state.error}")
                self._set_transport(TransportState.PAUSED)
                return False

            self._session.store.update(is_playing=True, is_paused=False)
            self.start_poll()
            if self._engine.state() == STATE_LOADED:
                self._set_transport(TransportState.PLAYING)
            else:
                self._set_transport(TransportState.LOADING)
            return True

    def pause_playback(self) -> bool:
        with self._session.lock:
            # A user pause cancels any pending resume of a segment switch
            self._switch_id += 1
            self._waiting_switch = None
            self._is_seeking = False
            if not self._engine.has_handle:
                return False
            self._engine.pause()
            self.stop_poll()
            self._session.store.update(is_playing=False, is_paused=True)
            self._set_transport(TransportState.PAUSED)
            return True

    def on_segment_loaded(self, segment: EnhancedSegment) -> None:
        """Engine callback: the current segment's audio is ready."""
        with self._session.lock:
            if self._session.store.state.is_playing and self._engine.playing():
                self._set_transport(TransportState.PLAYING)
            elif self._transport == TransportState.LOADING and self._waiting_switch != self._switch_id:
                self._set_transport(TransportState.PAUSED)

    def on_engine_error(self, error: PlayerError) -> None:
        """
        Engine callback: record the error without raising.

        A load failure halts progression at the current segment.
        """
        with self._session.lock:
            if isinstance(error, LoadFailure):
                logger.error(f"[TRANSITION] {error.message}; halting at segment {self._session.store.state.current_segment_index}")
                self.stop_poll()
                self._is_seeking = False
                self._session.store.update(error=error.message, is_loading=False, is_playing=False)
                self._set_transport(TransportState.PAUSED)
            else:
                logger.error(f"[TRANSITION] {error.message}")
                self._session.store.update(error=error.message)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def handle_segment_end(self) -> None:
        """Advance to the next segment, or end the playlist after the last one."""
        with self._session.lock:
            state = self._session.store.state
            segment_map = self._session.segment_map
            if not segment_map:
                return

            next_index = state.current_segment_index + 1
            if next_index < len(segment_map):
                logger.info(f"[TRANSITION] Segment {state.current_segment_index} ended, advancing to {next_index}")
                self.switch_segment(next_index, 0.0, resume=state.is_playing)
            else:
                logger.info("[TRANSITION] Last segment ended")
                self._engine.pause()
                self.stop_poll()
                self.handle_playlist_end()

    def switch_segment(
        self,
        index: int,
        seek_offset: float = 0.0,
        resume: bool = False,
        virtual_time: Optional[float] = None,
    ) -> None:
        """
        Make segment `index` current and load it.

        Args:
            index: Target index in the segment map
            seek_offset: Offset from the target's start in seconds
            resume: Start playback once the segment is loaded
            virtual_time: Virtual position to publish (defaults to the target's start + offset)
        """
        with self._session.lock:
            target = self._session.segment_at(index)
            if target is None:
                return

            self._engine.pause()
            self.stop_poll()
            self._switch_id += 1
            self._settle_token += 1

            if virtual_time is None:
                virtual_time = target.virtual_start + seek_offset
            position = to_real(target, virtual_time)
            self._session.store.update(
                current_segment_index=index,
                virtual_time=virtual_time,
                current_time=position.real_time,
            )
            self._set_transport(TransportState.LOADING)
            self._waiting_switch = self._switch_id if resume else None

            self._engine.load_segment(target, seek_offset)

            if resume:
                self.resume_when_loaded()
            else:
                self._is_seeking = False

    def handle_playlist_end(self) -> None:
        """Advance to the next queued playlist, or reset when the queue is empty."""
        with self._session.lock:
            self._set_transport(TransportState.PLAYLIST_ENDED)
            self.stop_poll()

            next_playlist = self._session.queue.dequeue()
            if next_playlist is None:
                logger.info("[TRANSITION] Playlist ended, queue empty")
                self.reset()
                return

            logger.info(f"[TRANSITION] Playlist ended, advancing to queued playlist ({len(next_playlist)} segments)")
            self._engine.release()
            self._session.next_generation()
            self.start_playlist(next_playlist, auto_play=True)

    def start_playlist(self, playlist, auto_play: bool = False) -> None:
        """
        Install a playlist as current and load its first segment.

        The caller has already bumped the generation and released the
        previous handles.

        Args:
            playlist: Tuple of Segments
            auto_play: Start playback once the first segment is loaded
        """
        with self._session.lock:
            self.stop_poll()
            segment_map = self._session.install_playlist(playlist)
            self._is_seeking = False
            self._switch_id += 1
            self._settle_token += 1
            self._session.store.update(
                current_playlist=playlist,
                queue=self._session.queue.snapshot(),
                current_segment_index=0,
                current_time=0.0,
                virtual_time=0.0,
                total_duration=self._session.total_duration,
                is_playing=False,
                is_paused=False,
                error=None,
            )

            if not segment_map:
                self._set_transport(TransportState.IDLE)
                return

            self._set_transport(TransportState.LOADING)
            self._waiting_switch = self._switch_id if auto_play else None
            self._engine.load_segment(segment_map[0])
            if auto_play:
                self.autoplay_when_ready()

    def reset(self) -> None:
        """
        Full reset: release both handles, clear playlist and queue, and drop
        the minimized flag and story references. Playback rate and audio
        language survive.
        """
        with self._session.lock:
            self.stop_poll()
            self._engine.release()
            self._session.next_generation()
            self._session.install_playlist(None)
            self._session.queue.clear()
            self._is_seeking = False
            self._switch_id += 1
            self._settle_token += 1

            previous = self._session.store.state
            self._session.store.reset(
                playback_rate=previous.playback_rate,
                audio_language=previous.audio_language,
            )
            self._set_transport(TransportState.IDLE)
            logger.info("[TRANSITION] Player reset")

    # ------------------------------------------------------------------
    # Seek
    # ------------------------------------------------------------------

    def seek(self, virtual_time: float) -> None:
        """
        Seek to a position on the virtual timeline.

        Targets outside [0, total_duration] are clamped. Within the current
        segment the backend is moved directly; otherwise the target segment is
        loaded at the translated offset and playback resumes if it was active.
        """
        with self._session.lock:
            segment_map = self._session.segment_map
            if not segment_map:
                return

            virtual_time = min(max(0.0, virtual_time), self._session.total_duration)
            target = locate_segment(segment_map, virtual_time)
            position = to_real(target, virtual_time)
            state = self._session.store.state

            self._is_seeking = True
            if target.index == state.current_segment_index and self._engine.has_handle:
                self._engine.seek(position.real_time)
                self._session.store.update(virtual_time=virtual_time, current_time=position.real_time)
                logger.debug(f"[TRANSITION] Seek within segment {target.index} to {position.real_time:.3f}s")
                self._settle_token += 1
                token = self._settle_token
                self._scheduler.call_later(
                    self._config.seek_settle_sec,
                    lambda: self._finish_seek(token),
                    name="SeekSettle",
                )
            else:
                logger.info(f"[TRANSITION] Seek across segments: {state.current_segment_index} -> {target.index}")
                self.switch_segment(target.index, position.offset, resume=state.is_playing, virtual_time=virtual_time)

    def _finish_seek(self, token: int) -> None:
        with self._session.lock:
            if token == self._settle_token:
                self._is_seeking = False

    # ------------------------------------------------------------------
    # Bounded waits
    # ------------------------------------------------------------------

    def autoplay_when_ready(self) -> None:
        """Start playback once the first segment of a new playlist has loaded."""
        self._wait_then_play(
            self._config.autoplay_max_attempts,
            self._config.autoplay_retry_sec,
            name="autoplay",
        )

    def resume_when_loaded(self) -> None:
        """Start playback once the current segment has loaded."""
        self._wait_then_play(
            self._config.resume_max_attempts,
            self._config.resume_retry_sec,
            name="resume",
        )

    def _wait_then_play(self, max_attempts: int, interval: float, name: str) -> None:
        with self._session.lock:
            generation = self._session.generation
            switch_id = self._switch_id

        def is_stale() -> bool:
            return not self._session.is_current(generation) or switch_id != self._switch_id

        def attempt() -> Attempt:
            with self._session.lock:
                if is_stale():
                    return Attempt.ABANDON
                backend_state = self._engine.state()
                if backend_state == STATE_LOADED:
                    self._waiting_switch = None
                    self._is_seeking = False
                    self.start_playback()
                    return Attempt.DONE
                if backend_state == STATE_UNLOADED:
                    # Load failed (error already recorded) or handle released
                    logger.warning(f"[TRANSITION] {name}: audio unloaded, not starting playback")
                    self._waiting_switch = None
                    self._is_seeking = False
                    return Attempt.ABANDON
                return Attempt.RETRY

        def on_timeout() -> None:
            with self._session.lock:
                if is_stale():
                    return
                error = PlaybackTimeout(max_attempts)
                self._waiting_switch = None
                self._is_seeking = False
                self._engine.pause()
                self.stop_poll()
                self._session.store.update(error=error.message, is_playing=False, is_loading=False)
                self._set_transport(TransportState.PAUSED)

        def run() -> WaitOutcome:
            return wait_until_ready(
                attempt,
                max_attempts,
                interval,
                self._scheduler.sleep,
                on_timeout=on_timeout,
                name=name,
            )

        self._scheduler.spawn(run, name=f"wait-{name}")

    def close(self) -> None:
        with self._session.lock:
            self.stop_poll()
            self._switch_id += 1
            self._settle_token += 1
            self._is_seeking = False

    def mark_idle(self) -> None:
        with self._session.lock:
            self._set_transport(TransportState.IDLE)
