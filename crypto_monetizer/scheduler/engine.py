"""
Cancellable scheduled tasks: schedule(delay, action) -> handle.

Two schedulers share the same contract:
- AsyncioScheduler: APScheduler's AsyncIOScheduler with one-shot `date` jobs on
  the running event loop.
- ManualScheduler: virtual clock advanced explicitly; deterministic, used by
  tests and dry runs.

A cancelled task never fires. Tasks fire in due-time order, ties in scheduling order.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pytz import utc

from crypto_monetizer.logging import get_logger

logger = get_logger(__name__)

Action = Callable[[], None]


class ScheduledTask:
    """Handle for one scheduled action."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.cancelled = False
        self.fired = False
        self._on_cancel: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        """Invalidate the task. No-op once it has fired."""
        if not self.pending:
            return
        self.cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()

    def _run(self, action: Action) -> None:
        if not self.pending:
            return
        self.fired = True
        action()


class Scheduler(ABC):
    @abstractmethod
    def schedule(self, delay: float, action: Action) -> ScheduledTask:
        """Run `action` after `delay` seconds. Negative delays are treated as 0."""
        ...


async def _fire(task: ScheduledTask, action: Action) -> None:
    # Coroutine job: AsyncIOExecutor runs it on the loop, not in a worker thread.
    task._run(action)


class AsyncioScheduler(Scheduler):
    """
    One-shot jobs on an APScheduler AsyncIOScheduler bound to the running loop.

    The APScheduler instance is started lazily on the first schedule() call, so
    the object can be built outside of a running loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._scheduler: AsyncIOScheduler | None = None

    def _ensure_started(self) -> AsyncIOScheduler:
        if self._scheduler is None:
            loop = self._loop or asyncio.get_running_loop()
            self._scheduler = AsyncIOScheduler(event_loop=loop, timezone=utc)
            self._scheduler.start()
            logger.debug("asyncio_scheduler_started")
        return self._scheduler

    def schedule(self, delay: float, action: Action) -> ScheduledTask:
        scheduler = self._ensure_started()
        task = ScheduledTask(max(0.0, delay))
        job = scheduler.add_job(
            _fire,
            "date",
            run_date=datetime.now(utc) + timedelta(seconds=task.delay),
            args=[task, action],
            misfire_grace_time=None,
        )

        def remove_job() -> None:
            try:
                job.remove()
            except JobLookupError:
                # Already dispatched; the cancelled flag keeps it from running the action.
                pass

        task._on_cancel = remove_job
        return task

    def shutdown(self) -> None:
        """Drop pending jobs and stop the APScheduler instance."""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None


class ManualScheduler(Scheduler):
    """Virtual clock. Nothing fires until advance() or run_until_idle() is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, ScheduledTask, Action]] = []
        self._seq = itertools.count()

    def schedule(self, delay: float, action: Action) -> ScheduledTask:
        task = ScheduledTask(max(0.0, delay))
        heapq.heappush(self._queue, (self.now + task.delay, next(self._seq), task, action))
        return task

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task, _ in self._queue if task.pending)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every task due within the window.
        Tasks scheduled by a firing action run in the same call if they fall due in time.
        Returns the number of tasks fired.
        """
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task, action = heapq.heappop(self._queue)
            self.now = due
            if task.pending:
                task._run(action)
                fired += 1
        self.now = target
        return fired

    def run_until_idle(self, max_steps: int = 10_000) -> int:
        """Fire everything still queued, jumping the clock to each due time."""
        fired = 0
        for _ in range(max_steps):
            if not self._queue:
                return fired
            due = self._queue[0][0]
            fired += self.advance(max(0.0, due - self.now))
        logger.warning("manual_scheduler_step_limit", max_steps=max_steps)
        return fired
