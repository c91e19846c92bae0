"""
Detached Background Tasks

Runs a coroutine as a task whose lifetime is not tied to the caller.

Flow:
1. run_detached() schedules the coroutine as an asyncio task
2. The task is held in a module-level registry until it finishes
3. The caller receives a separate future mirroring the task's outcome
4. Cancelling that future (e.g. the HTTP client disconnected) leaves
   the task running to completion

The caller-facing future is completed exactly once, from the task's
done callback.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# asyncio only keeps weak references to running tasks
_background_tasks: set[asyncio.Task[Any]] = set()


def _transfer_outcome(task: asyncio.Task[T], waiter: asyncio.Future[T]) -> None:
    """Copy the task's outcome onto the caller-facing future."""
    _background_tasks.discard(task)

    if task.cancelled():
        if not waiter.done():
            waiter.cancel()
        return

    exc = task.exception()
    if waiter.done():
        # Nobody is listening anymore; the outcome would otherwise be lost
        if exc is not None:
            logger.warning(
                f"Detached task {task.get_name()} failed after its caller stopped waiting: {exc!r}"
            )
        else:
            logger.info(f"Detached task {task.get_name()} completed after its caller stopped waiting")
        return

    if exc is not None:
        waiter.set_exception(exc)
    else:
        waiter.set_result(task.result())


def run_detached(coro: Coroutine[Any, Any, T], name: str | None = None) -> asyncio.Future[T]:
    """
    Start ``coro`` as a detached task and return a future observing it.

    The returned future can be awaited or cancelled freely; cancellation
    never propagates into the task.

    Args:
        coro: Coroutine to run to completion
        name: Optional task name used in log messages

    Returns:
        Future resolved with the task's result or exception
    """
    loop = asyncio.get_running_loop()
    task = loop.create_task(coro, name=name)
    _background_tasks.add(task)

    waiter: asyncio.Future[T] = loop.create_future()
    task.add_done_callback(lambda t: _transfer_outcome(t, waiter))
    return waiter


def pending_task_count() -> int:
    """Number of detached tasks still running."""
    return len(_background_tasks)


async def wait_for_pending(timeout: float | None = None) -> None:
    """
    Wait for every detached task to finish.

    Used on shutdown so in-flight forks are not abandoned mid-copy.
    """
    if not _background_tasks:
        return
    logger.info(f"Waiting for {len(_background_tasks)} detached task(s) to finish")
    _, still_pending = await asyncio.wait(set(_background_tasks), timeout=timeout)
    if still_pending:
        logger.warning(f"{len(still_pending)} detached task(s) still running at shutdown")
