"""
State module for versesync.

Observable playback state, the playlist queue, and the per-player session
that owns them.
"""

from versesync.state.playback_state import PlaybackState, PlaybackStateStore
from versesync.state.playlist_queue import PlaylistQueue
from versesync.state.session import PlaybackSession

__all__ = ["PlaybackState", "PlaybackStateStore", "PlaylistQueue", "PlaybackSession"]
