from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None] | None]

# Tasks in the phase group are cancelled on every phase transition.
PHASE_GROUP = "phase"
# Session tasks (ingest tick, notice/overlay expiry) live until the session stops.
SESSION_GROUP = "session"


class Scheduler(Protocol):
    """Named, cancellable, single-owner timers.

    Registering a name that is already pending replaces the old task.
    One-shot tasks are unregistered right before their callback runs.
    """

    def now_ms(self) -> int:  # pragma: no cover
        ...

    def call_later(self, name: str, delay_ms: int, callback: Callback, *, group: str = PHASE_GROUP) -> None:  # pragma: no cover
        ...

    def call_every(self, name: str, interval_ms: int, callback: Callback, *, group: str = PHASE_GROUP) -> None:  # pragma: no cover
        ...

    def cancel(self, name: str) -> bool:  # pragma: no cover
        ...

    def cancel_group(self, group: str) -> list[str]:  # pragma: no cover
        ...

    def cancel_all(self) -> list[str]:  # pragma: no cover
        ...

    def pending(self, group: str | None = None) -> list[str]:  # pragma: no cover
        ...


async def _invoke(name: str, callback: Callback) -> None:
    try:
        result = callback()
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception:
        # A failing callback must not take the rest of the timers down with it.
        logger.exception("Scheduled task %r failed", name)


class AsyncioScheduler:
    """Real-time scheduler backed by asyncio tasks on the running loop."""

    def __init__(self) -> None:
        self._tasks: dict[str, tuple[str, asyncio.Task[None]]] = {}

    def now_ms(self) -> int:
        return int(time.monotonic() * 1000)

    def call_later(self, name: str, delay_ms: int, callback: Callback, *, group: str = PHASE_GROUP) -> None:
        self.cancel(name)
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run_later(name, max(0, delay_ms), callback), name=f"wordlive:{name}")
        self._tasks[name] = (group, task)

    def call_every(self, name: str, interval_ms: int, callback: Callback, *, group: str = PHASE_GROUP) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self.cancel(name)
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run_every(name, interval_ms, callback), name=f"wordlive:{name}")
        self._tasks[name] = (group, task)

    async def _run_later(self, name: str, delay_ms: int, callback: Callback) -> None:
        await asyncio.sleep(delay_ms / 1000)
        entry = self._tasks.get(name)
        if entry is not None and entry[1] is asyncio.current_task():
            del self._tasks[name]
        await _invoke(name, callback)

    async def _run_every(self, name: str, interval_ms: int, callback: Callback) -> None:
        while True:
            await asyncio.sleep(interval_ms / 1000)
            await _invoke(name, callback)

    def cancel(self, name: str) -> bool:
        entry = self._tasks.pop(name, None)
        if entry is None:
            return False
        entry[1].cancel()
        return True

    def cancel_group(self, group: str) -> list[str]:
        names = [n for n, (g, _) in self._tasks.items() if g == group]
        for n in names:
            self.cancel(n)
        return names

    def cancel_all(self) -> list[str]:
        names = list(self._tasks)
        for n in names:
            self.cancel(n)
        return names

    def pending(self, group: str | None = None) -> list[str]:
        return sorted(n for n, (g, _) in self._tasks.items() if group is None or g == group)


@dataclass(slots=True)
class _Timer:
    name: str
    group: str
    due_ms: int
    interval_ms: int | None
    callback: Callback
    order: int


class ManualScheduler:
    """Virtual-clock scheduler: nothing fires until `advance()` is awaited.

    Timers due at the same instant fire in the order they were (re)armed.
    """

    def __init__(self, *, start_ms: int = 0) -> None:
        self._now = start_ms
        self._timers: dict[str, _Timer] = {}
        self._order = itertools.count()

    def now_ms(self) -> int:
        return self._now

    def call_later(self, name: str, delay_ms: int, callback: Callback, *, group: str = PHASE_GROUP) -> None:
        self._timers[name] = _Timer(
            name=name,
            group=group,
            due_ms=self._now + max(0, delay_ms),
            interval_ms=None,
            callback=callback,
            order=next(self._order),
        )

    def call_every(self, name: str, interval_ms: int, callback: Callback, *, group: str = PHASE_GROUP) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self._timers[name] = _Timer(
            name=name,
            group=group,
            due_ms=self._now + interval_ms,
            interval_ms=interval_ms,
            callback=callback,
            order=next(self._order),
        )

    def cancel(self, name: str) -> bool:
        return self._timers.pop(name, None) is not None

    def cancel_group(self, group: str) -> list[str]:
        names = [n for n, t in self._timers.items() if t.group == group]
        for n in names:
            del self._timers[n]
        return names

    def cancel_all(self) -> list[str]:
        names = list(self._timers)
        self._timers.clear()
        return names

    def pending(self, group: str | None = None) -> list[str]:
        return sorted(n for n, t in self._timers.items() if group is None or t.group == group)

    def due_at(self, name: str) -> int | None:
        timer = self._timers.get(name)
        return timer.due_ms if timer else None

    async def advance(self, ms: int) -> None:
        """Move the clock forward by `ms`, firing everything that falls due."""

        if ms < 0:
            raise ValueError("Cannot move the clock backwards")

        target = self._now + ms
        while True:
            due = [t for t in self._timers.values() if t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due_ms, t.order))
            self._now = timer.due_ms
            if timer.interval_ms is None:
                del self._timers[timer.name]
            else:
                timer.due_ms += timer.interval_ms
                timer.order = next(self._order)
            await _invoke(timer.name, timer.callback)
        self._now = target
