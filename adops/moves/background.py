"""Detached background work with an explicit error channel.

Tasks are kept referenced until they finish. Outcomes are reported as
structlog events; failures additionally go to the optional ``on_error``
callback. A failure never reaches the code that spawned the task.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

import structlog

logger = structlog.get_logger()

ErrorCallback = Callable[[str, BaseException], None]


class BackgroundTasks:
    def __init__(self, on_error: ErrorCallback | None = None) -> None:
        self._on_error = on_error
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def drain(self) -> None:
        """Wait until every spawned task, including ones spawned meanwhile, is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        name = task.get_name()
        if task.cancelled():
            logger.warning("background_task_cancelled", task=name)
            return

        error = task.exception()
        if error is None:
            logger.info("background_task_completed", task=name)
            return

        logger.error(
            "background_task_failed",
            task=name,
            error=str(error),
            error_type=type(error).__name__,
        )
        if self._on_error is not None:
            try:
                self._on_error(name, error)
            except Exception as callback_error:
                logger.error(
                    "background_error_callback_failed",
                    task=name,
                    error=str(callback_error),
                )
