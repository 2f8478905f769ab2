"""
Timer scheduling for the erosion controller.

The controller never sleeps. It asks a scheduler to call it back later and
keeps one ArmedTimer per timer role, so arming a timer always cancels the
one it replaces.
"""

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, runtime_checkable


Callback = Callable[[], None]


@runtime_checkable
class TimerHandle(Protocol):
    def cancel(self) -> None: ...


@runtime_checkable
class Scheduler(Protocol):
    """Anything that can run a callback after a delay and report its clock."""

    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...

    def now(self) -> float: ...


@dataclass(order=True)
class _ScheduledCall:
    """A callback queued on the manual clock."""
    due: float
    seq: int
    callback: Callback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Virtual clock that only moves when told to.

    Used by tests and by the simulation runner: `advance()` fires every due
    callback in time order, including callbacks scheduled while advancing.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[_ScheduledCall] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> _ScheduledCall:
        if delay < 0:
            raise ValueError(f"Delay must be non-negative, got {delay}")
        call = _ScheduledCall(self._now + delay, next(self._counter), callback)
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        """Number of live (uncancelled) callbacks."""
        return sum(1 for call in self._queue if not call.cancelled)

    def next_due(self) -> Optional[float]:
        """Clock time of the next live callback, or None."""
        self._drop_cancelled()
        return self._queue[0].due if self._queue else None

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing callbacks that come due.

        Returns:
            Number of callbacks fired
        """
        target = self._now + seconds
        fired = 0

        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0].due > target:
                break
            call = heapq.heappop(self._queue)
            self._now = call.due
            call.callback()
            fired += 1

        self._now = target
        return fired

    def advance_to(self, when: float) -> int:
        return self.advance(max(0.0, when - self._now))

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop, for live hosts."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)


class ArmedTimer:
    """
    Single-slot timer for one role (cycle timer, final warning timer).

    Arming cancels whatever was armed before. A fire that arrives after the
    slot was cancelled or re-armed is dropped.
    """

    def __init__(self, scheduler: Scheduler, name: str = "timer"):
        self.name = name
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None
        self._token: Optional[object] = None
        self.due: Optional[float] = None

    @property
    def is_armed(self) -> bool:
        return self._token is not None

    def arm(self, delay: float, callback: Callback) -> None:
        self.cancel()
        token = object()

        def fire() -> None:
            if self._token is not token:
                return
            self._token = None
            self._handle = None
            self.due = None
            callback()

        self._token = token
        self.due = self._scheduler.now() + delay
        self._handle = self._scheduler.call_later(delay, fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._token = None
        self.due = None
