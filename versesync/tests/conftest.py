"""
Shared pytest fixtures for versesync tests.

Tests use test doubles (fake backend, manual scheduler) to avoid real
threads, audio files and network access.
"""

import pytest

from versesync.config import PlayerConfig
from versesync.player.media_player import MediaPlayer
from versesync.playback.engine import PlaybackEngine
from versesync.state.session import PlaybackSession
from versesync.tests.test_doubles import (
    FakeBackendFactory,
    ManualScheduler,
    create_segment,
    genesis_playlist,
)


@pytest.fixture
def config():
    """Default player configuration."""
    return PlayerConfig()


@pytest.fixture
def backend_factory():
    """Factory of fake backends that load synchronously."""
    return FakeBackendFactory(auto_load=True)


@pytest.fixture
def manual_backend_factory():
    """Factory of fake backends whose loads the test completes by hand."""
    return FakeBackendFactory(auto_load=False)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def playlist():
    """Three Genesis segments with durations 10, 15 and 8."""
    return genesis_playlist()


@pytest.fixture
def second_playlist():
    return [
        create_segment("EXO 1:1-2", "https://audio.example/EXO1.mp3", [0.0, 6.0, 12.0]),
        create_segment("EXO 2:1", "https://audio.example/EXO2.mp3", [0.0, 9.0]),
    ]


@pytest.fixture
def session(config):
    return PlaybackSession(config)


@pytest.fixture
def engine(session, backend_factory):
    return PlaybackEngine(session, backend_factory)


@pytest.fixture
def player(backend_factory, config, scheduler):
    """MediaPlayer over fake backends and a manual scheduler."""
    media_player = MediaPlayer(backend_factory=backend_factory, config=config, scheduler=scheduler)
    yield media_player
    media_player.close()


@pytest.fixture
def manual_player(manual_backend_factory, config, scheduler):
    """MediaPlayer whose backend loads are completed by the test."""
    media_player = MediaPlayer(backend_factory=manual_backend_factory, config=config, scheduler=scheduler)
    yield media_player
    media_player.close()
