"""
Unit tests for detached background tasks.

The caller-facing future must mirror the task's outcome, and cancelling
it must never reach the task.
"""

import asyncio
import logging

import pytest

from forkflow.core.background import pending_task_count, run_detached, wait_for_pending


class TestRunDetached:
    @pytest.mark.asyncio
    async def test_returns_task_result(self):
        """Should resolve the future with the coroutine's result."""

        async def work():
            return 42

        assert await run_detached(work()) == 42

    @pytest.mark.asyncio
    async def test_propagates_task_exception(self):
        """Should raise the coroutine's exception from the future."""

        async def work():
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            await run_detached(work())

    @pytest.mark.asyncio
    async def test_cancelling_future_leaves_task_running(self):
        """Should keep running the task after the caller's future is cancelled."""
        gate = asyncio.Event()
        finished = asyncio.Event()

        async def work():
            await gate.wait()
            finished.set()
            return "done"

        waiter = run_detached(work(), name="slow-work")
        waiter.cancel()
        await asyncio.sleep(0)

        assert pending_task_count() == 1

        gate.set()
        await wait_for_pending(timeout=2)

        assert finished.is_set()
        assert pending_task_count() == 0

    @pytest.mark.asyncio
    async def test_cancelling_awaiting_caller_leaves_task_running(self):
        """Should survive cancellation of a task that awaits the future."""
        gate = asyncio.Event()
        results = []

        async def work():
            await gate.wait()
            results.append("copied")

        async def caller():
            await run_detached(work())

        caller_task = asyncio.create_task(caller())
        await asyncio.sleep(0)
        caller_task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller_task

        gate.set()
        await wait_for_pending(timeout=2)

        assert results == ["copied"]

    @pytest.mark.asyncio
    async def test_logs_failure_nobody_waits_for(self, caplog):
        """Should log a failure that finishes after the caller stopped waiting."""
        gate = asyncio.Event()

        async def work():
            await gate.wait()
            raise RuntimeError("copy failed")

        waiter = run_detached(work(), name="orphaned-fork")
        waiter.cancel()

        with caplog.at_level(logging.WARNING, logger="forkflow.core.background"):
            gate.set()
            await wait_for_pending(timeout=2)
            await asyncio.sleep(0)

        assert "orphaned-fork" in caplog.text
        assert "copy failed" in caplog.text


class TestWaitForPending:
    @pytest.mark.asyncio
    async def test_returns_immediately_without_tasks(self):
        await wait_for_pending(timeout=0.1)

    @pytest.mark.asyncio
    async def test_warns_when_tasks_outlive_timeout(self, caplog):
        """Should report tasks still running after the timeout."""
        gate = asyncio.Event()

        async def work():
            await gate.wait()

        waiter = run_detached(work())

        with caplog.at_level(logging.WARNING, logger="forkflow.core.background"):
            await wait_for_pending(timeout=0.01)

        assert "still running" in caplog.text

        gate.set()
        await waiter
