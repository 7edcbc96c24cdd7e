# funnel/core/scheduler.py
"""
Clock facility for the loading sequence.

The sequencer only needs repeating callbacks and one-shot delayed callbacks,
both cancellable. `AsyncioScheduler` provides them on the running event loop;
tests substitute a manual clock with the same interface.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Protocol
import asyncio
import logging

from funnel.core.exceptions import config_error

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Periodic and delayed callbacks with cancellation"""

    @abstractmethod
    def call_every(self, period: float, callback: Callback) -> TimerHandle:
        """Run `callback` every `period` seconds until cancelled."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        """Run `callback` once after `delay` seconds unless cancelled."""


def _check_interval(name: str, value: float) -> None:
    if value <= 0:
        raise config_error(f"{name} must be positive, got {value}", component="scheduler")


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Repeating timer stopped by callback error: {error!r}", exc_info=error)


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_every(self, period: float, callback: Callback) -> TimerHandle:
        _check_interval("period", period)

        async def repeat():
            while True:
                await asyncio.sleep(period)
                callback()

        task = self.loop.create_task(repeat())
        task.add_done_callback(_log_task_failure)
        return task

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        _check_interval("delay", delay)
        return self.loop.call_later(delay, callback)


class TimerGroup:
    """
    Owning scope for timers that live and die together.

    Every handle created through the group is cancelled by `cancel_all()`,
    which also runs when the group is used as a context manager and the
    block exits.
    """

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._handles: List[TimerHandle] = []
        self._closed = False

    def every(self, period: float, callback: Callback) -> TimerHandle:
        return self._track(self._scheduler.call_every(period, callback))

    def later(self, delay: float, callback: Callback) -> TimerHandle:
        return self._track(self._scheduler.call_later(delay, callback))

    def _track(self, handle: TimerHandle) -> TimerHandle:
        if self._closed:
            # Group already torn down: nothing may outlive it
            handle.cancel()
        else:
            self._handles.append(handle)
        return handle

    @property
    def closed(self) -> bool:
        return self._closed

    def cancel_all(self) -> None:
        self._closed = True
        handles, self._handles = self._handles, []
        for handle in handles:
            handle.cancel()
        if handles:
            logger.debug(f"Cancelled {len(handles)} timers")

    def __enter__(self) -> "TimerGroup":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel_all()
