"""Single-consumer asyncio task queue.

Every task submitted to one TaskQueue runs alone and in submission order,
no matter how many coroutines call ``add`` concurrently.  Each caller gets
back a future carrying its own task's result or exception; a failing task
never stops the tasks queued behind it.

The consumer is a short-lived asyncio task that is started on demand and
exits once the queue is empty.  There is no priority, cancellation or
timeout support.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from histrack.observability.logging import get_logger

TaskFn = Callable[[], Awaitable[Any]]


class TaskQueue:
    """Serialises async work submitted from any number of callers."""

    def __init__(self, name: str = "default", logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self.name = name
        self._log = logger or get_logger("queue")
        self._pending: deque[tuple[TaskFn, asyncio.Future[Any]]] = deque()
        self._worker: asyncio.Task[None] | None = None
        self._active = False

    @property
    def pending(self) -> int:
        """Tasks queued but not yet started."""
        return len(self._pending)

    @property
    def idle(self) -> bool:
        return not self._active and not self._pending

    def add(self, task: TaskFn) -> asyncio.Future[Any]:
        """Enqueue *task* and return a future resolving with its outcome.

        Must be called from inside a running event loop.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        self._pending.append((task, future))
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._drain(), name=f"task-queue-{self.name}")
        return future

    async def join(self) -> None:
        """Wait until every queued task has finished."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)

    async def _drain(self) -> None:
        while self._pending:
            task, future = self._pending.popleft()
            self._active = True
            try:
                result = await task()
            except asyncio.CancelledError:
                future.cancel()
                raise
            except Exception as exc:  # noqa: BLE001
                self._log.debug("queued_task_failed", queue=self.name, error=str(exc))
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                self._active = False
