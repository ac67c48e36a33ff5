"""
Shutdown Coordinator - single execution point for run cleanup.

Normal completion, errors and signals all end up in ``initiate_shutdown()``;
only the first call runs the cleanup callbacks, later calls are no-ops.
"""

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

from chess_broadcast.core.logging_utils import get_module_logger


class ShutdownState(Enum):
    RUNNING = "running"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


CleanupCallback = Callable[[], Awaitable[None]]


class ShutdownCoordinator:
    """
    Runs registered cleanup callbacks exactly once, in registration order.

    Each callback is isolated: an exception is logged and the next callback
    still runs.
    """

    def __init__(self, name: str = "ShutdownCoordinator"):
        self.logger = get_module_logger(name)
        self._state = ShutdownState.RUNNING
        self._shutdown_event = asyncio.Event()
        self._cleanup_callbacks: list[tuple[str, CleanupCallback]] = []
        self._lock = asyncio.Lock()
        self._source: Optional[str] = None
        self._failures: list[str] = []

    @property
    def state(self) -> ShutdownState:
        return self._state

    @property
    def is_complete(self) -> bool:
        return self._state is ShutdownState.COMPLETE

    @property
    def source(self) -> Optional[str]:
        """What triggered the shutdown, once one has been initiated."""
        return self._source

    @property
    def failures(self) -> list[str]:
        """Names of cleanup callbacks that raised."""
        return list(self._failures)

    def register_cleanup(self, callback: CleanupCallback, name: Optional[str] = None) -> None:
        label = name or getattr(callback, "__name__", repr(callback))
        self._cleanup_callbacks.append((label, callback))
        self.logger.debug("Registered cleanup callback: %s", label)

    async def initiate_shutdown(self, source: str = "unknown") -> bool:
        """Run cleanup if nobody has yet.

        Returns True when this call performed the cleanup. Concurrent callers
        wait until the first one has finished.
        """
        async with self._lock:
            already_started = self._state is not ShutdownState.RUNNING
            if not already_started:
                self._state = ShutdownState.IN_PROGRESS
                self._source = source

        if already_started:
            self.logger.debug(
                "Shutdown already initiated by %s, ignoring request from %s",
                self._source, source,
            )
            await self._shutdown_event.wait()
            return False

        shutdown_start = time.perf_counter()
        self.logger.info("Shutdown initiated by: %s", source)
        try:
            await self._execute_cleanup()
        finally:
            async with self._lock:
                self._state = ShutdownState.COMPLETE
                self._shutdown_event.set()

        self.logger.info("Shutdown complete in %.3fs", time.perf_counter() - shutdown_start)
        return True

    async def _execute_cleanup(self) -> None:
        total = len(self._cleanup_callbacks)
        for i, (label, callback) in enumerate(self._cleanup_callbacks, 1):
            callback_start = time.perf_counter()
            self.logger.debug("Starting cleanup %d/%d: %s", i, total, label)
            try:
                await callback()
            except Exception as e:
                self._failures.append(label)
                self.logger.error("Error in cleanup callback %s: %s", label, e, exc_info=True)
                continue
            self.logger.debug("Completed %s in %.3fs", label, time.perf_counter() - callback_start)
