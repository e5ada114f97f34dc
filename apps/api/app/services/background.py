"""
Detached background work.

Tasks spawned here are never awaited by the request that started them. Failures
go to the log, not back to the caller.
"""
import asyncio
import logging
from typing import Coroutine, Any

logger = logging.getLogger(__name__)


class BackgroundRunner:
    def __init__(self):
        # The event loop only keeps weak references to tasks
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str = "background") -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.info(f"[Background] {task.get_name()} cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"[Background] {task.get_name()} failed: {exc!r}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def drain(self) -> None:
        """Wait for every task spawned so far (used at shutdown and in tests)."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)


runner = BackgroundRunner()
