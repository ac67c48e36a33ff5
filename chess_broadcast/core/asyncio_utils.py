"""Background tasks owned by a ManagedProcess (output readers, exit monitor)."""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, Optional

from .logging_utils import LoggerLike, as_component_logger


def create_logged_task(
    coro: Coroutine[Any, Any, Any],
    *,
    logger: LoggerLike = None,
    context: Optional[str] = None,
    pending: Optional[set[asyncio.Task[Any]]] = None,
) -> asyncio.Task[Any]:
    """Schedule ``coro`` so that an exception in it is logged, not lost.

    When ``pending`` is given the task sits in that set until it finishes,
    letting the owner cancel stragglers during stop.
    """
    task_logger = as_component_logger(logger, fallback_name="asyncio")
    task = asyncio.get_running_loop().create_task(coro, name=context)

    def _report(done: asyncio.Task[Any]) -> None:
        if done.cancelled() or done.exception() is None:
            return
        task_logger.error(
            "Unhandled exception in %s",
            context or done.get_name(),
            exc_info=done.exception(),
        )

    task.add_done_callback(_report)
    if pending is not None:
        pending.add(task)
        task.add_done_callback(pending.discard)
    return task


async def cancel_tasks(tasks: set[asyncio.Task[Any]]) -> None:
    """Cancel every unfinished task in ``tasks`` and wait for all of them."""
    snapshot = list(tasks)
    for task in snapshot:
        task.cancel()
    # Failures were already logged by the done callback.
    await asyncio.gather(*snapshot, return_exceptions=True)


__all__ = ["create_logged_task", "cancel_tasks"]
