"""
Bounded wait loops.

Audio loads asynchronously, so starting playback after a load means polling
the backend until it reports "loaded". Every such wait is bounded and ends in
exactly one of: done, abandoned, timed out.
"""

import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Attempt(Enum):
    """Result of one attempt inside a bounded wait."""
    DONE = "done"
    RETRY = "retry"
    ABANDON = "abandon"


class WaitOutcome(Enum):
    READY = "ready"
    ABANDONED = "abandoned"
    TIMED_OUT = "timed_out"


def wait_until_ready(
    attempt: Callable[[], Attempt],
    max_attempts: int,
    interval: float,
    sleep: Callable[[float], None],
    on_timeout: Optional[Callable[[], None]] = None,
    name: str = "wait",
) -> WaitOutcome:
    """
    Call attempt() up to max_attempts times, sleeping interval before each.

    Args:
        attempt: Returns DONE to finish, ABANDON to give up silently, RETRY to go again
        max_attempts: Attempt limit
        interval: Seconds slept before every attempt
        sleep: Sleep function (Scheduler.sleep)
        on_timeout: Called once if the limit is reached
        name: Label for logs

    Returns:
        How the wait ended
    """
    for attempt_number in range(1, max_attempts + 1):
        sleep(interval)
        result = attempt()
        if result is Attempt.DONE:
            logger.debug(f"[WAIT] {name} ready after {attempt_number} attempt(s)")
            return WaitOutcome.READY
        if result is Attempt.ABANDON:
            logger.debug(f"[WAIT] {name} abandoned after {attempt_number} attempt(s)")
            return WaitOutcome.ABANDONED

    logger.warning(f"[WAIT] {name} timed out after {max_attempts} attempts")
    if on_timeout is not None:
        on_timeout()
    return WaitOutcome.TIMED_OUT
