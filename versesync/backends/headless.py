"""
Headless audio backend.

Fetches the audio file (over HTTP with httpx, or from a local path) on a
worker thread and runs a monotonic playback clock scaled by the playback
rate. No sound is produced; the position advances exactly as a real player
would, which is what the synchronization core consumes. Used for
simulation, server-side verse sync and integration tests.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

import httpx

from versesync.backends.base import (
    AudioBackend,
    ErrorCallback,
    LoadCallback,
    STATE_LOADED,
    STATE_LOADING,
    STATE_UNLOADED,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0


class HeadlessBackend(AudioBackend):
    """
    AudioBackend without audio output.

    Attributes:
        content_length: Number of bytes fetched (None until loaded)
    """

    def __init__(
        self,
        src: str,
        on_load: Optional[LoadCallback] = None,
        on_load_error: Optional[ErrorCallback] = None,
        on_play_error: Optional[ErrorCallback] = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize headless backend.

        Args:
            src: http(s) URL or local file path
            on_load: Called once the file has been fetched
            on_load_error: Called with the error if the fetch fails
            on_play_error: Called when play() is requested on an unloaded handle
            timeout: HTTP timeout in seconds
            client: Optional shared httpx.Client (not closed by this backend)
            clock: Monotonic time source
        """
        super().__init__(src, on_load=on_load, on_load_error=on_load_error, on_play_error=on_play_error)
        self.timeout = timeout
        self._client = client
        self._clock = clock
        self._lock = threading.RLock()
        self._state = STATE_UNLOADED
        self._released = False
        self._play_requested = False
        self._playing = False
        self._rate = 1.0
        self._position = 0.0  # Position at the last anchor
        self._anchor: Optional[float] = None  # Clock value when playback (re)started
        self.content_length: Optional[int] = None

    def load(self) -> None:
        with self._lock:
            if self._state != STATE_UNLOADED or self._released:
                return
            self._state = STATE_LOADING
        thread = threading.Thread(target=self._fetch, name="HeadlessBackendFetch", daemon=True)
        thread.start()

    def _open_stream(self):
        if self._client is not None:
            return self._client.stream("GET", self.src, timeout=self.timeout, follow_redirects=True)
        return httpx.stream("GET", self.src, timeout=self.timeout, follow_redirects=True)

    def _measure_source(self) -> int:
        """
        Fetch the source and return its size in bytes.

        HTTP bodies are streamed chunk by chunk and never held in memory;
        local files are only stat()-ed.
        """
        if self.src.startswith(("http://", "https://")):
            with self._open_stream() as response:
                response.raise_for_status()
                size = 0
                for chunk in response.iter_bytes():
                    if self._released:
                        break
                    size += len(chunk)
                return size
        return Path(self.src).stat().st_size

    def _fetch(self) -> None:
        try:
            size = self._measure_source()
        except (httpx.HTTPError, OSError) as e:
            logger.warning(f"[BACKEND] Failed to fetch {self.src}: {e}")
            with self._lock:
                if self._released:
                    return
                self._state = STATE_UNLOADED
                callback = self.on_load_error
            if callback:
                callback(e)
            return

        with self._lock:
            if self._released:
                logger.debug(f"[BACKEND] Fetch finished after unload: {self.src}")
                return
            self.content_length = size
            self._state = STATE_LOADED
            callback = self.on_load
        logger.debug(f"[BACKEND] Loaded {self.src} ({size} bytes)")

        if callback:
            callback()

        with self._lock:
            if self._play_requested and not self._released:
                self._start_clock()

    def state(self) -> str:
        with self._lock:
            return self._state

    def _current_position(self) -> float:
        if self._playing and self._anchor is not None:
            return self._position + (self._clock() - self._anchor) * self._rate
        return self._position

    def _start_clock(self) -> None:
        self._play_requested = False
        if not self._playing:
            self._anchor = self._clock()
            self._playing = True

    def play(self) -> None:
        with self._lock:
            if self._state == STATE_LOADED:
                self._start_clock()
                return
            if self._state == STATE_LOADING:
                self._play_requested = True
                return
            callback = self.on_play_error
        if callback:
            callback("Audio not loaded")

    def pause(self) -> None:
        with self._lock:
            self._play_requested = False
            if self._playing:
                self._position = self._current_position()
                self._playing = False
                self._anchor = None

    def stop(self) -> None:
        with self._lock:
            self.pause()
            self._position = 0.0

    def seek(self, position: Optional[float] = None) -> float:
        with self._lock:
            if position is None:
                return self._current_position()
            self._position = max(0.0, float(position))
            if self._playing:
                self._anchor = self._clock()
            return self._position

    def rate(self, rate: Optional[float] = None) -> float:
        with self._lock:
            if rate is None:
                return self._rate
            # Re-anchor so the elapsed time so far keeps the old rate
            self._position = self._current_position()
            if self._playing:
                self._anchor = self._clock()
            self._rate = float(rate)
            return self._rate

    def playing(self) -> bool:
        with self._lock:
            return self._playing

    def unload(self) -> None:
        # Never joins the fetch thread; a late fetch result is dropped via _released
        with self._lock:
            self._released = True
            self._state = STATE_UNLOADED
            self._playing = False
            self._play_requested = False
            self._anchor = None
            self._position = 0.0
            self.on_load = None
            self.on_load_error = None
            self.on_play_error = None
