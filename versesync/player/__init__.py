"""
Player module for versesync.

MediaPlayer is the public command and query surface of the playback core.
"""

from versesync.player.media_player import MediaPlayer, MODE_QUEUE, MODE_REPLACE, create_player

__all__ = ["MediaPlayer", "MODE_QUEUE", "MODE_REPLACE", "create_player"]
