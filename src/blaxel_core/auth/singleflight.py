"""Coalesce concurrent async calls into a single in-flight execution.

While a call for a given key is running, every other caller for the same key
awaits that call's result instead of starting its own. The in-flight entry is
registered synchronously, before the first ``await``, so on a single event
loop no two callers can both observe "nothing in flight" and start twice.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Keyed single-flight executor.

    Example:
        ```python
        flight: SingleFlight[str] = SingleFlight()

        async def fetch() -> str: ...

        # Ten concurrent callers, one fetch
        results = await asyncio.gather(*(flight.do("token", fetch) for _ in range(10)))
        ```
    """

    def __init__(self) -> None:
        self._tasks: dict[Any, asyncio.Task[T]] = {}

    def in_flight(self, key: Any = None) -> bool:
        """Whether a call for ``key`` is currently running."""
        return key in self._tasks

    async def wait(self, key: Any = None) -> T | None:
        """Await the in-flight call for ``key`` if there is one.

        Returns:
            The call's result, or None when nothing is in flight.
        """
        task = self._tasks.get(key)
        if task is None:
            return None
        return await asyncio.shield(task)

    async def do(self, key: Any, fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``fn`` for ``key`` unless a call is already running, then await it.

        Exceptions raised by ``fn`` propagate to every awaiting caller. A
        caller that is cancelled does not cancel the shared call.
        """
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, fn))
            task.add_done_callback(_retrieve_exception)
            self._tasks[key] = task
        return await asyncio.shield(task)

    async def _run(self, key: Any, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        finally:
            self._tasks.pop(key, None)


def _retrieve_exception(task: asyncio.Task) -> None:
    # Marks a failure as observed even when every caller was cancelled.
    if not task.cancelled():
        task.exception()
