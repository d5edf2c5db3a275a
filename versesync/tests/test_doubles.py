"""
Test doubles (fakes, stubs) for versesync tests.

These provide minimal implementations of the backend and scheduler
interfaces without real threads, audio files or network access.
"""

from typing import Callable, List, Optional, Sequence

from versesync.backends.base import AudioBackend, STATE_LOADED, STATE_LOADING, STATE_UNLOADED
from versesync.clock.scheduler import Scheduler
from versesync.timeline.segment import Segment, TimingData


class FakeBackend(AudioBackend):
    """
    Fake audio backend.

    With auto_load the audio is ready synchronously inside load(); otherwise
    the test completes or fails the load with complete_load() / fail_load().
    The position only moves when the test calls set_position() or seek().
    """

    def __init__(self, src, on_load=None, on_load_error=None, on_play_error=None, auto_load: bool = True):
        super().__init__(src, on_load=on_load, on_load_error=on_load_error, on_play_error=on_play_error)
        self.auto_load = auto_load
        self._state = STATE_UNLOADED
        self._position = 0.0
        self._rate = 1.0
        self._playing = False
        self._play_requested = False
        self.unloaded = False
        self.play_error: Optional[str] = None  # Set to make play() fail like a blocked autoplay
        self.calls: List[tuple] = []

    def load(self) -> None:
        self.calls.append(("load",))
        self._state = STATE_LOADING
        if self.auto_load:
            self.complete_load()

    def complete_load(self) -> None:
        """Finish loading and fire on_load (also after unload, like a load racing its release)."""
        self._state = STATE_LOADED
        if self._play_requested:
            self._playing = True
        if self.on_load:
            self.on_load()

    def fail_load(self, error: str = "network error") -> None:
        self._state = STATE_UNLOADED
        if self.on_load_error:
            self.on_load_error(error)

    def fire_play_error(self, error: str = "play() rejected") -> None:
        if self.on_play_error:
            self.on_play_error(error)

    def state(self) -> str:
        return self._state

    def play(self) -> None:
        self.calls.append(("play",))
        if self.play_error is not None:
            self.fire_play_error(self.play_error)
        elif self._state == STATE_LOADED:
            self._playing = True
        elif self._state == STATE_LOADING:
            self._play_requested = True
        else:
            self.fire_play_error("Audio not loaded")

    def pause(self) -> None:
        self.calls.append(("pause",))
        self._playing = False
        self._play_requested = False

    def stop(self) -> None:
        self.calls.append(("stop",))
        self._playing = False
        self._play_requested = False
        self._position = 0.0

    def seek(self, position: Optional[float] = None) -> float:
        if position is not None:
            self.calls.append(("seek", position))
            self._position = float(position)
        return self._position

    def rate(self, rate: Optional[float] = None) -> float:
        if rate is not None:
            self.calls.append(("rate", rate))
            self._rate = float(rate)
        return self._rate

    def playing(self) -> bool:
        return self._playing

    def unload(self) -> None:
        self.calls.append(("unload",))
        self.unloaded = True
        self._state = STATE_UNLOADED
        self._playing = False
        self._play_requested = False

    def set_position(self, position: float) -> None:
        """Simulate playback progress."""
        self._position = float(position)

    def seeks(self) -> List[float]:
        return [call[1] for call in self.calls if call[0] == "seek"]


class FakeBackendFactory:
    """Backend factory recording every handle it creates."""

    def __init__(self, auto_load: bool = True):
        self.auto_load = auto_load
        self.created: List[FakeBackend] = []

    def __call__(self, src, **kwargs) -> FakeBackend:
        backend = FakeBackend(src, auto_load=self.auto_load, **kwargs)
        self.created.append(backend)
        return backend

    @property
    def last(self) -> Optional[FakeBackend]:
        return self.created[-1] if self.created else None

    def for_src(self, src: str) -> List[FakeBackend]:
        return [backend for backend in self.created if backend.src == src]

    def live(self) -> List[FakeBackend]:
        """Handles not yet unloaded."""
        return [backend for backend in self.created if not backend.unloaded]


class ManualTask:
    """Periodic task fired only by ManualScheduler.tick()."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str):
        self.interval = interval
        self.callback = callback
        self.name = name
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not self.cancelled

    def start(self) -> "ManualTask":
        return self

    def cancel(self) -> None:
        self.cancelled = True

    def join(self, timeout: float = 1.0) -> None:
        pass


class ManualTimer:
    """One-shot timer fired only by ManualScheduler.fire_timers()."""

    def __init__(self, delay: float, callback: Callable[[], None], name: str):
        self.delay = delay
        self.callback = callback
        self.name = name
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler.

    Periodic tasks fire on tick(), spawned work runs on run_pending(),
    timers fire on fire_timers(), and sleep() returns immediately.
    """

    def __init__(self):
        self.tasks: List[ManualTask] = []
        self.pending: List[tuple] = []
        self.timers: List[ManualTimer] = []
        self.sleeps: List[float] = []

    def every(self, interval, callback, name="PeriodicTask") -> ManualTask:
        task = ManualTask(interval, callback, name)
        self.tasks.append(task)
        return task

    def spawn(self, target, name="worker") -> None:
        self.pending.append((name, target))

    def call_later(self, delay, callback, name="timer") -> ManualTimer:
        timer = ManualTimer(delay, callback, name)
        self.timers.append(timer)
        return timer

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    @property
    def active_tasks(self) -> List[ManualTask]:
        return [task for task in self.tasks if not task.cancelled]

    def tick(self, count: int = 1) -> None:
        """Fire every active periodic task count times."""
        for _ in range(count):
            for task in self.active_tasks:
                if not task.cancelled:
                    task.callback()

    def run_pending(self) -> list:
        """Run spawned work (including work spawned while running). Returns the results."""
        results = []
        while self.pending:
            _, target = self.pending.pop(0)
            results.append(target())
        return results

    def fire_timers(self) -> None:
        timers, self.timers = self.timers, []
        for timer in timers:
            if not timer.cancelled:
                timer.callback()


def create_segment(
    reference: str = "JHN 3:1-3",
    audio_url: str = "https://audio.example/JHN3.mp3",
    timestamps: Sequence[float] = (0.0, 10.0),
    **kwargs,
) -> Segment:
    """Create a Segment for testing."""
    return Segment(
        reference=reference,
        audio_url=audio_url,
        timing_data=TimingData(timestamps=tuple(float(t) for t in timestamps)),
        **kwargs,
    )


def genesis_playlist() -> List[Segment]:
    """Three segments with durations 10, 15 and 8 seconds, each in its own file."""
    return [
        create_segment("GEN 1:1-2", "https://audio.example/GEN1.mp3", [0.0, 5.0, 10.0], section_num=1),
        create_segment("GEN 2:1-3", "https://audio.example/GEN2.mp3", [0.0, 5.0, 10.0, 15.0], section_num=2),
        create_segment("GEN 3:1", "https://audio.example/GEN3.mp3", [0.0, 8.0], section_num=3),
    ]
