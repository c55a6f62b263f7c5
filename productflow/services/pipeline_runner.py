"""Detached execution for pipeline runs.

Work spawned here runs after the initiating request has returned. Exceptions
never propagate back to the caller: they are logged and routed to the
``on_failure`` handler supplied at spawn time, which records the terminal
status for the owning record.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)

FailureHandler = Callable[[BaseException], Awaitable[None]]


class PipelineRunner:
    """Own the asyncio tasks for in-flight pipeline runs."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def spawn(
        self,
        name: str,
        work: Awaitable[None],
        on_failure: Optional[FailureHandler] = None,
    ) -> asyncio.Task:
        """Schedule ``work`` and return immediately."""
        if self._closed:
            if asyncio.iscoroutine(work):
                work.close()
            raise RuntimeError("PipelineRunner is shut down")

        task = asyncio.create_task(self._supervise(name, work, on_failure), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def fire_and_forget(self, name: str, work: Awaitable[None]) -> asyncio.Task:
        """Best-effort side effect; failures are logged and dropped."""
        return self.spawn(name, work, on_failure=None)

    async def _supervise(
        self,
        name: str,
        work: Awaitable[None],
        on_failure: Optional[FailureHandler],
    ) -> None:
        try:
            await work
        except asyncio.CancelledError as exc:
            logger.warning("Pipeline %s cancelled", name)
            await self._handle_failure(name, exc, on_failure)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Pipeline %s failed", name)
            await self._handle_failure(name, exc, on_failure)

    async def _handle_failure(
        self,
        name: str,
        exc: BaseException,
        on_failure: Optional[FailureHandler],
    ) -> None:
        if on_failure is None:
            return
        try:
            await asyncio.shield(on_failure(exc))
        except asyncio.CancelledError:
            logger.warning("Failure handler for %s interrupted by cancellation", name)
        except Exception:  # noqa: BLE001
            logger.exception("Failure handler for %s raised", name)

    async def wait_idle(self) -> None:
        """Wait until every spawned task, including ones spawned meanwhile, has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, timeout: float = 10.0) -> None:
        """Stop accepting work, give in-flight runs ``timeout`` seconds, then cancel the rest."""
        self._closed = True
        if not self._tasks:
            return

        pending = list(self._tasks)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled %d pipeline run(s) at shutdown", len(still_running))
            await asyncio.gather(*still_running, return_exceptions=True)
