"""
Audio backends for versesync.

The AudioBackend interface the playback engine drives, and a headless
implementation that fetches audio with httpx and runs a playback clock.
"""

from versesync.backends.base import (
    AudioBackend,
    BackendFactory,
    STATE_UNLOADED,
    STATE_LOADING,
    STATE_LOADED,
)
from versesync.backends.headless import HeadlessBackend

__all__ = [
    "AudioBackend",
    "BackendFactory",
    "STATE_UNLOADED",
    "STATE_LOADING",
    "STATE_LOADED",
    "HeadlessBackend",
]
