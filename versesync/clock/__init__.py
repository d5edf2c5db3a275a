"""
Clock module for versesync.

Periodic poll tasks and background scheduling.
"""

from versesync.clock.scheduler import PeriodicTask, Scheduler

__all__ = ["PeriodicTask", "Scheduler"]
