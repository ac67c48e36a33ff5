
import asyncio
import os
import re
import signal
from enum import Enum
from typing import Awaitable, Callable, Optional

from chess_broadcast.core.asyncio_utils import cancel_tasks, create_logged_task
from chess_broadcast.core.errors import ProcessSpawnError
from chess_broadcast.core.logging_utils import get_module_logger

_LINE_SPLIT = re.compile(rb"[\r\n]+")
_READ_CHUNK = 4096


class ProcessRole(Enum):
    PRIMARY = "primary"
    CONSUMER = "consumer"


class ProcessState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    STOPPING = "stopping"
    EXITED = "exited"
    CRASHED = "crashed"


ExitCallback = Callable[["ManagedProcess"], Awaitable[None]]


class ManagedProcess:
    """One child process owned by the supervisor.

    The child runs in its own session so that signals reach everything it
    spawns (``cargo run`` and similar wrappers), and its stdout/stderr are
    forwarded line by line into the logger named after ``label``.
    """

    def __init__(
        self,
        role: ProcessRole,
        command: list[str],
        *,
        label: Optional[str] = None,
        exit_callback: Optional[ExitCallback] = None,
    ):
        if not command:
            raise ValueError("command must not be empty")

        self.role = role
        self.command = list(command)
        self.label = label or role.value
        self.exit_callback = exit_callback

        self.logger = get_module_logger(f"Process.{self.label}")

        self.process: Optional[asyncio.subprocess.Process] = None
        self.state = ProcessState.STOPPED
        self._stop_requested = False
        self._was_forcefully_stopped = False
        self._tasks: set[asyncio.Task] = set()

    async def start(self) -> None:
        if self.process is not None:
            raise RuntimeError(f"{self.label} process already started")

        self.logger.info("Starting %s process: %s", self.role.value, self.command[0])
        self.logger.debug("Command: %s", " ".join(self.command))

        try:
            self.process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            self.state = ProcessState.CRASHED
            self.logger.error("Failed to start process: %s", exc)
            raise ProcessSpawnError(self.role.value, self.command, exc) from exc

        self.state = ProcessState.RUNNING
        self.logger.info("Process started with PID: %d", self.process.pid)

        create_logged_task(
            self._forward_output(self.process.stdout, "stdout"),
            logger=self.logger,
            context=f"{self.label}-stdout",
            pending=self._tasks,
        )
        create_logged_task(
            self._forward_output(self.process.stderr, "stderr"),
            logger=self.logger,
            context=f"{self.label}-stderr",
            pending=self._tasks,
        )
        create_logged_task(
            self._process_monitor(),
            logger=self.logger,
            context=f"{self.label}-monitor",
            pending=self._tasks,
        )

    async def _forward_output(self, stream: Optional[asyncio.StreamReader], name: str) -> None:
        # Chunked reads: ffmpeg separates progress updates with bare '\r',
        # which would overflow a readline() buffer on a long stream.
        if stream is None:
            return

        pending = b""
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                break
            pending += chunk
            *lines, pending = _LINE_SPLIT.split(pending)
            for line in lines:
                self._log_line(name, line)

        if pending:
            self._log_line(name, pending)

    def _log_line(self, name: str, line: bytes) -> None:
        text = line.decode(errors="replace").strip()
        if text:
            self.logger.info("%s: %s", name, text)

    async def _process_monitor(self) -> None:
        if not self.process:
            return

        returncode = await self.process.wait()

        if self._stop_requested:
            self.logger.info("Process exited after stop request (code %d)", returncode)
            self.state = ProcessState.EXITED
        elif returncode == 0:
            self.logger.info("Process exited normally")
            self.state = ProcessState.EXITED
        else:
            self.logger.error("Process exited with code: %d", returncode)
            self.state = ProcessState.CRASHED

        if self.exit_callback:
            await self.exit_callback(self)

    def _signal(self, sig: signal.Signals) -> None:
        if not self.process or self.process.returncode is not None:
            return
        try:
            os.killpg(self.process.pid, sig)
        except ProcessLookupError:
            return
        except PermissionError:
            self.process.send_signal(sig)

    async def wait(self) -> int:
        if self.process is None:
            raise RuntimeError(f"{self.label} process was never started")
        return await self.process.wait()

    async def stop(self, timeout: float = 5.0) -> Optional[int]:
        """Stop the process: SIGTERM, then SIGKILL after ``timeout`` seconds.

        Returns the exit code, or None when the process was never started.
        A process that already exited is left alone.
        """
        if self.process is None:
            self.logger.debug("Process not running")
            return None

        if self.process.returncode is None:
            self._stop_requested = True
            self.state = ProcessState.STOPPING
            self.logger.info("Stopping %s process (PID %d)", self.role.value, self.process.pid)

            self._signal(signal.SIGTERM)
            try:
                await asyncio.wait_for(self.process.wait(), timeout=timeout)
                self.logger.info("Process stopped gracefully")
            except asyncio.TimeoutError:
                self.logger.warning("Process did not exit within %.1fs, killing...", timeout)
                self._was_forcefully_stopped = True
                self._signal(signal.SIGKILL)
                await self.process.wait()
        else:
            self.logger.debug("Process already exited with code %d", self.process.returncode)

        await self._drain_tasks()
        return self.process.returncode

    async def _drain_tasks(self, timeout: float = 1.0) -> None:
        # Let the readers flush what the child wrote before exiting.
        pending = [task for task in self._tasks if not task.done()]
        if pending:
            await asyncio.wait(pending, timeout=timeout)
        await cancel_tasks(self._tasks)

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process else None

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode if self.process else None

    def is_running(self) -> bool:
        return self.process is not None and self.process.returncode is None

    @property
    def was_forcefully_stopped(self) -> bool:
        return self._was_forcefully_stopped

    def __repr__(self) -> str:
        return f"ManagedProcess(role={self.role.value}, label={self.label!r}, pid={self.pid}, state={self.state.value})"
