"""Process supervisor for one broadcast run.

The supervisor owns everything a run creates (runtime directory, config
document, the primary and consumer processes) and tears all of it down
exactly once, however the run ends.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Union

from chess_broadcast.consumers import FrameConsumer, consumer_for_mode

from .credentials import Credentials, StreamTarget
from .errors import ConfigurationError, ConsumerLostError, EnvironmentSetupError, ProcessSpawnError
from .logging_utils import get_module_logger
from .managed_process import ManagedProcess, ProcessRole
from .modes import Mode
from .platform_info import PlatformInfo
from .runtime_config import ConfigGenerator, RuntimeConfig
from .runtime_environment import RuntimeEnvironment
from .settings import LauncherSettings
from .shutdown_coordinator import ShutdownCoordinator, ShutdownState
from .stale_processes import terminate_stale_processes

logger = get_module_logger("ProcessSupervisor")


class ProcessSupervisor:
    """Starts the primary plus one consumer and guarantees cleanup.

    Typical use is ``await supervisor.run(mode)``. The pieces are also
    available separately::

        async with supervisor:            # cleanup on exit, once
            await supervisor.prepare()    # runtime dir + config document
            await supervisor.start(mode)  # spawn primary and consumer
            code = await supervisor.wait()
    """

    def __init__(
        self,
        settings: LauncherSettings,
        credentials: Credentials,
        stream_target: Optional[StreamTarget] = None,
        *,
        platform_info: Optional[PlatformInfo] = None,
        environment: Optional[RuntimeEnvironment] = None,
    ) -> None:
        self.settings = settings
        self.credentials = credentials
        self.stream_target = stream_target
        self.platform_info = platform_info
        self.environment = environment or RuntimeEnvironment(settings.runtime_dir)

        self.mode: Optional[Mode] = None
        self.config: Optional[RuntimeConfig] = None
        self.primary: Optional[ManagedProcess] = None
        self.consumer: Optional[ManagedProcess] = None

        self._cancel_event = asyncio.Event()
        self._cancel_reason: Optional[str] = None
        self._consumer_lost = False

        self._shutdown = ShutdownCoordinator("Supervisor.Shutdown")
        self._shutdown.register_cleanup(self._stop_consumer, "stop consumer")
        self._shutdown.register_cleanup(self._stop_primary, "stop primary")
        self._shutdown.register_cleanup(self._teardown_environment, "teardown runtime")

    # ------------------------------------------------------------------
    # Lifecycle

    async def __aenter__(self) -> "ProcessSupervisor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            source = "run finished"
        elif issubclass(exc_type, asyncio.CancelledError):
            source = "task cancelled"
        else:
            source = f"error: {exc_type.__name__}"
        await self.cleanup(source)

    async def run(self, mode: Union[Mode, str]) -> int:
        """Run one broadcast to completion and return the exit status.

        Configuration problems are raised before anything is created on disk.
        """
        mode = Mode.coerce(mode)
        self.credentials.validate()
        self._build_commands(mode)

        async with self:
            await self.prepare()
            await self.start(mode)
            return await self.wait()

    async def prepare(self) -> RuntimeConfig:
        """Create the runtime directory and write the config document."""
        self.credentials.validate()

        await asyncio.to_thread(
            terminate_stale_processes,
            self.environment.directory_path,
            self.settings.stop_timeout,
        )
        await asyncio.to_thread(self.environment.initialize)

        generator = ConfigGenerator(self.environment.config_path)
        self.config = await generator.generate(self.credentials, self.environment.frame_channel_path)
        return self.config

    def _frame_consumer(self, mode: Mode) -> FrameConsumer:
        return consumer_for_mode(
            mode,
            self.settings,
            stream_target=self.stream_target,
            platform_info=self.platform_info,
        )

    def _build_commands(self, mode: Mode) -> tuple[list[str], FrameConsumer, list[str]]:
        config_path = self.environment.config_path
        primary_command = [*self.settings.primary_command, str(config_path)]
        frame_consumer = self._frame_consumer(mode)
        consumer_command = frame_consumer.build_command(config_path, self.environment.frame_channel_path)
        return primary_command, frame_consumer, consumer_command

    async def start(self, mode: Union[Mode, str]) -> tuple[ManagedProcess, Optional[ManagedProcess]]:
        """Spawn the primary and the consumer for ``mode`` without waiting on them."""
        mode = Mode.coerce(mode)

        if not self.environment.is_initialized:
            raise EnvironmentSetupError("Runtime environment is not initialized")
        if self.config is None:
            raise ConfigurationError("Runtime configuration has not been generated")
        if self.primary is not None:
            raise RuntimeError("Supervisor already started")

        primary_command, frame_consumer, consumer_command = self._build_commands(mode)
        self.mode = mode
        logger.info("Starting %s run with consumer %s", mode.value, frame_consumer.describe())

        self.primary = ManagedProcess(ProcessRole.PRIMARY, primary_command, label="primary")
        await self.primary.start()

        consumer = ManagedProcess(
            ProcessRole.CONSUMER,
            consumer_command,
            label=frame_consumer.name,
            exit_callback=self._on_consumer_exit,
        )
        try:
            await consumer.start()
        except ProcessSpawnError as exc:
            if self.settings.require_consumer:
                raise
            logger.error(
                "%s; continuing without a consumer, frames will be neither shown nor streamed",
                exc,
            )
        else:
            self.consumer = consumer

        return self.primary, self.consumer

    async def wait(self) -> int:
        """Block until the primary exits or cancellation is requested.

        Returns the primary's exit status, or 0 when the run was interrupted.
        Raises ConsumerLostError when the consumer died and
        ``stop_on_consumer_exit`` is set.
        """
        if self.primary is None:
            raise RuntimeError("Supervisor has not been started")

        primary_done = asyncio.ensure_future(self.primary.wait())
        cancelled = asyncio.ensure_future(self._cancel_event.wait())
        try:
            await asyncio.wait({primary_done, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for future in (primary_done, cancelled):
                if not future.done():
                    future.cancel()

        if primary_done.done() and not primary_done.cancelled():
            returncode = primary_done.result()
            logger.info("Primary process finished with exit code %d", returncode)
            return returncode

        if self._consumer_lost:
            raise ConsumerLostError(
                f"Consumer exited while the primary was running ({self._cancel_reason})"
            )

        logger.info("Run interrupted: %s", self._cancel_reason)
        return 0

    def request_cancel(self, reason: str = "cancel requested") -> None:
        """Ask the run to end; safe to call repeatedly and from signal handlers."""
        if self._cancel_event.is_set():
            logger.debug("Cancellation already requested, ignoring: %s", reason)
            return
        logger.info("Cancellation requested: %s", reason)
        self._cancel_reason = reason
        self._cancel_event.set()

    async def cleanup(self, source: str = "cleanup") -> bool:
        """Stop the consumer and primary and remove the runtime directory, once."""
        return await self._shutdown.initiate_shutdown(source)

    # ------------------------------------------------------------------
    # Callbacks

    async def _on_consumer_exit(self, process: ManagedProcess) -> None:
        if self._shutdown.state is not ShutdownState.RUNNING or self._cancel_event.is_set():
            return
        if self.primary is None or not self.primary.is_running():
            return

        logger.error(
            "Consumer %s exited with code %s while the primary is still running; "
            "nothing is reading the frame channel",
            process.label,
            process.returncode,
        )
        if self.settings.stop_on_consumer_exit:
            self._consumer_lost = True
            self.request_cancel(f"{process.label} exited with code {process.returncode}")

    async def _stop_consumer(self) -> None:
        if self.consumer is not None:
            await self.consumer.stop(self.settings.stop_timeout)

    async def _stop_primary(self) -> None:
        if self.primary is not None:
            await self.primary.stop(self.settings.stop_timeout)

    async def _teardown_environment(self) -> None:
        await asyncio.to_thread(self.environment.teardown)

    # ------------------------------------------------------------------
    # Introspection

    @property
    def live_handles(self) -> list[ManagedProcess]:
        return [p for p in (self.primary, self.consumer) if p is not None and p.is_running()]

    @property
    def is_cleaned_up(self) -> bool:
        return self._shutdown.is_complete

    @property
    def cleanup_failures(self) -> list[str]:
        return self._shutdown.failures


__all__ = ["ProcessSupervisor"]
