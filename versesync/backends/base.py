"""
Audio backend interface.

An AudioBackend is one handle on one audio file: it loads asynchronously,
reports a load state, and accepts play/pause/seek/rate commands. The
playback engine owns every handle it creates and must unload() each one
explicitly; handles are not released by garbage collection.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

# Load states reported by AudioBackend.state()
STATE_UNLOADED = "unloaded"
STATE_LOADING = "loading"
STATE_LOADED = "loaded"

LoadCallback = Callable[[], None]
ErrorCallback = Callable[[object], None]


class AudioBackend(ABC):
    """
    Base class for audio backends.

    Callbacks may fire on any thread, including synchronously from inside
    load() when the audio is already available.
    """

    def __init__(
        self,
        src: str,
        on_load: Optional[LoadCallback] = None,
        on_load_error: Optional[ErrorCallback] = None,
        on_play_error: Optional[ErrorCallback] = None,
    ):
        """
        Initialize backend handle (does not start loading).

        Args:
            src: Audio URL or path
            on_load: Called once the audio is ready to play
            on_load_error: Called with an error description if loading fails
            on_play_error: Called with an error description if playback is refused
        """
        self.src = src
        self.on_load = on_load
        self.on_load_error = on_load_error
        self.on_play_error = on_play_error

    @abstractmethod
    def load(self) -> None:
        """Begin loading src. Returns immediately."""
        ...

    @abstractmethod
    def state(self) -> str:
        """
        Get load state.

        Returns:
            One of "unloaded", "loading", "loaded"
        """
        ...

    @abstractmethod
    def play(self) -> None:
        """Start or resume playback (deferred until loaded if still loading)."""
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop playback and rewind to the start of the file."""
        ...

    @abstractmethod
    def seek(self, position: Optional[float] = None) -> float:
        """
        Get or set the playback position.

        Args:
            position: New position in seconds, or None to only read it

        Returns:
            Current position in seconds
        """
        ...

    @abstractmethod
    def rate(self, rate: Optional[float] = None) -> float:
        """
        Get or set the playback rate multiplier.

        Args:
            rate: New rate, or None to only read it

        Returns:
            Current rate
        """
        ...

    @abstractmethod
    def playing(self) -> bool:
        ...

    @abstractmethod
    def unload(self) -> None:
        """Release the audio and any network or decoder resources."""
        ...


# Factory signature used by the playback engine: BackendFactory(src, on_load=..., ...)
BackendFactory = Callable[..., AudioBackend]
