"""In-flight request coalescing.

:class:`InflightRegistry` maps a key to the single ``asyncio.Task`` that is
currently resolving it.  Every caller that asks for the same key while the
task is pending awaits that task instead of starting its own.

Atomicity
---------
``run`` looks the key up and registers the new task without an ``await`` in
between, so on one event loop no other task can observe a half-registered
entry.

Settlement
----------
The task removes its own entry in a ``finally`` block, i.e. at the moment it
settles and before any waiter resumes.  A call made after settlement always
starts fresh work.  Under ``asyncio.eager_task_factory`` work that never
suspends settles inside ``create_task``; such a task is returned but never
registered.

Cancellation
------------
Waiters await the task through ``asyncio.shield``: cancelling one waiter
never cancels the shared work that other waiters depend on.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InflightRegistry(Generic[T]):
    """Per-key registry of shared in-progress work.

    Args:
        name: Label used in log messages (e.g. ``"tenant-id"``).

    Example::

        searches: InflightRegistry[str] = InflightRegistry("tenant-id")
        tenant_id = await searches.run(domain, lambda: resolve(domain))
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._tasks: dict[str, asyncio.Task[T]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def start(self, key: str, work: Callable[[], Awaitable[T]]) -> asyncio.Task[T]:
        """Return the pending task for *key*, creating it from *work* if absent.

        Args:
            key: The lookup key (domain or tenant id).
            work: Zero-argument coroutine factory.  Called only when no task
                is pending for *key*.

        Returns:
            The task every caller for *key* shares.
        """
        task = self._tasks.get(key)
        if task is not None:
            logger.debug("Joining in-flight %s lookup key=%s", self._name, key)
            return task

        async def _settle() -> T:
            try:
                return await work()
            finally:
                if task is not None and self._tasks.get(key) is task:
                    self._tasks.pop(key, None)

        task = asyncio.create_task(_settle(), name=f"landlord-{self._name}:{key}")
        # An eager task factory may settle the work inside create_task.
        if not task.done():
            self._tasks[key] = task
        return task

    async def run(self, key: str, work: Callable[[], Awaitable[T]]) -> T:
        """Await the shared result for *key*, starting *work* if nothing is pending."""
        return await asyncio.shield(self.start(key, work))


__all__ = ["InflightRegistry"]
