# Cancellable scheduled tasks for timer-driven phase transitions.

from crypto_monetizer.scheduler.engine import (
    AsyncioScheduler,
    ManualScheduler,
    ScheduledTask,
    Scheduler,
)

__all__ = [
    "AsyncioScheduler",
    "ManualScheduler",
    "ScheduledTask",
    "Scheduler",
]
