"""
Playback error types.

Errors are recorded into PlaybackState.error as human-readable messages and
surfaced to observers; they never propagate out of backend callbacks.
"""

from typing import Optional


class PlayerError(Exception):
    """Base class for playback errors recorded into player state."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class LoadFailure(PlayerError):
    """The backend could not fetch or decode an audio URL."""

    def __init__(self, audio_url: Optional[str], reason: object = None, message: Optional[str] = None):
        self.audio_url = audio_url
        self.reason = reason
        super().__init__(message or f"Failed to load audio: {reason}")


class PlaybackStartFailure(PlayerError):
    """The backend refused to start playback (e.g. autoplay policy)."""

    def __init__(self, reason: object = None):
        self.reason = reason
        super().__init__(f"Playback failed: {reason}")


class PlaybackTimeout(PlayerError):
    """A bounded wait for audio to finish loading ran out of attempts."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("Timeout waiting for audio to load")
