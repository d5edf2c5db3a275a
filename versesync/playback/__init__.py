"""
Playback module for versesync.

The engine that owns backend handles and the controller that moves playback
across segment and playlist boundaries.
"""

from versesync.playback.engine import PlaybackEngine
from versesync.playback.transition import TransitionController, TransportState
from versesync.playback.waiter import Attempt, WaitOutcome, wait_until_ready

__all__ = [
    "PlaybackEngine",
    "TransitionController",
    "TransportState",
    "Attempt",
    "WaitOutcome",
    "wait_until_ready",
]
