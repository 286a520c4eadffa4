"""Bounded-concurrency FIFO admission for merge engine invocations.

At most ``limit`` jobs run at once; the rest wait in arrival order. A finished
job hands its permit straight to the oldest waiter, so late arrivals cannot
overtake queued ones. Counters are only touched from the event loop thread.

Callers that abandon a queued job are not cancelled proactively; the job runs
once admitted unless the awaiting task itself is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

J = TypeVar("J")
R = TypeVar("R")

logger = logging.getLogger(__name__)


class AdmissionQueue(Generic[J, R]):
    """Semaphore-style executor with N permits and a FIFO wait list."""

    def __init__(self, runner: Callable[[J], Awaitable[R]], *, limit: int = 1) -> None:
        self._runner = runner
        self._limit = max(1, int(limit))
        self._active = 0
        self._peak_active = 0
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._log = logger

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def peak_active(self) -> int:
        return self._peak_active

    async def submit(self, job: J, *, on_admitted: Callable[[J], None] | None = None) -> R:
        """Run ``job`` once a slot is free and return the runner's result.

        ``on_admitted`` is called right before the runner starts.
        """
        await self._acquire()
        try:
            if on_admitted is not None:
                on_admitted(job)
            return await self._runner(job)
        finally:
            self._release()

    async def _acquire(self) -> None:
        if self._active < self._limit and not self._waiters:
            self._grant()
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self._log.debug(
            "merge.queue.waiting",
            extra={"active": self._active, "waiting": len(self._waiters), "limit": self._limit},
        )
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Permit was handed over before the cancellation landed.
                self._release()
            else:
                self._discard(waiter)
            raise

    def _grant(self) -> None:
        self._active += 1
        self._peak_active = max(self._peak_active, self._active)

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Hand the permit over; the active count is unchanged.
                waiter.set_result(None)
                return
        self._active -= 1

    def _discard(self, waiter: asyncio.Future[None]) -> None:
        try:
            self._waiters.remove(waiter)
        except ValueError:
            pass
