"""Unit tests for ManagedProcess using real short-lived children."""

import asyncio
import logging
import sys

import psutil
import pytest

from chess_broadcast.core.errors import ProcessSpawnError
from chess_broadcast.core.managed_process import ManagedProcess, ProcessRole, ProcessState

pytestmark = pytest.mark.posix

SLEEPER = [sys.executable, "-c", "import time; time.sleep(30)"]
STUBBORN = [
    sys.executable,
    "-c",
    "import signal, time\n"
    "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
    "print('ready', flush=True)\n"
    "time.sleep(30)\n",
]


async def _wait_for_log(caplog, text: str, timeout: float = 5.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not any(text in record.getMessage() for record in caplog.records):
        if loop.time() > deadline:
            raise AssertionError(f"log line containing {text!r} never appeared")
        await asyncio.sleep(0.02)


async def _wait_until_gone(pid: int, timeout: float = 3.0) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        try:
            if psutil.Process(pid).status() == psutil.STATUS_ZOMBIE:
                return True
        except psutil.NoSuchProcess:
            return True
        await asyncio.sleep(0.05)
    return False


class TestStart:

    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            ManagedProcess(ProcessRole.PRIMARY, [])

    @pytest.mark.asyncio
    async def test_missing_binary_raises_spawn_error(self):
        proc = ManagedProcess(ProcessRole.CONSUMER, ["/nonexistent/definitely-not-ffmpeg", "-i", "x"])

        with pytest.raises(ProcessSpawnError) as excinfo:
            await proc.start()

        assert excinfo.value.role == "consumer"
        assert proc.state is ProcessState.CRASHED
        assert not proc.is_running()

    @pytest.mark.asyncio
    async def test_start_twice_rejected(self):
        proc = ManagedProcess(ProcessRole.PRIMARY, SLEEPER)
        await proc.start()
        try:
            with pytest.raises(RuntimeError):
                await proc.start()
        finally:
            await proc.stop(timeout=2.0)

    @pytest.mark.asyncio
    async def test_exit_code_and_callback(self):
        exited = []

        async def on_exit(process):
            exited.append(process.returncode)

        proc = ManagedProcess(
            ProcessRole.PRIMARY,
            [sys.executable, "-c", "raise SystemExit(7)"],
            exit_callback=on_exit,
        )
        await proc.start()

        assert await proc.wait() == 7
        await proc.stop(timeout=1.0)

        assert exited == [7]
        assert proc.state is ProcessState.CRASHED

    @pytest.mark.asyncio
    async def test_forwards_output_to_logger(self, caplog):
        caplog.set_level(logging.INFO, logger="chess_broadcast")
        proc = ManagedProcess(
            ProcessRole.PRIMARY,
            [
                sys.executable,
                "-c",
                "import sys\n"
                "print('engine ready')\n"
                "sys.stderr.write('frame=1\\rframe=2\\n')\n",
            ],
            label="chess",
        )
        await proc.start()
        await proc.wait()
        await proc.stop(timeout=1.0)

        messages = [record.getMessage() for record in caplog.records]
        assert any("stdout: engine ready" in m for m in messages)
        assert any("stderr: frame=1" in m for m in messages)
        assert any("stderr: frame=2" in m for m in messages)


class TestStop:

    @pytest.mark.asyncio
    async def test_stop_never_started(self):
        proc = ManagedProcess(ProcessRole.CONSUMER, SLEEPER)

        assert await proc.stop() is None

    @pytest.mark.asyncio
    async def test_graceful_stop(self):
        proc = ManagedProcess(ProcessRole.PRIMARY, SLEEPER)
        await proc.start()
        assert proc.is_running()

        returncode = await proc.stop(timeout=5.0)

        assert returncode is not None
        assert not proc.is_running()
        assert not proc.was_forcefully_stopped
        assert proc.state is ProcessState.EXITED

    @pytest.mark.asyncio
    async def test_force_kill_after_timeout(self, caplog):
        caplog.set_level(logging.INFO, logger="chess_broadcast")
        proc = ManagedProcess(ProcessRole.CONSUMER, STUBBORN)
        await proc.start()
        await _wait_for_log(caplog, "stdout: ready")

        loop = asyncio.get_running_loop()
        started = loop.time()
        await proc.stop(timeout=0.5)
        elapsed = loop.time() - started

        assert not proc.is_running()
        assert proc.was_forcefully_stopped
        assert proc.returncode == -9
        assert elapsed < 5.0

    @pytest.mark.asyncio
    async def test_stop_after_exit_is_noop(self):
        proc = ManagedProcess(ProcessRole.PRIMARY, [sys.executable, "-c", "pass"])
        await proc.start()
        await proc.wait()

        assert await proc.stop(timeout=1.0) == 0
        assert await proc.stop(timeout=1.0) == 0
        assert not proc.was_forcefully_stopped

    @pytest.mark.asyncio
    async def test_stop_reaches_grandchildren(self, tmp_path):
        pid_file = tmp_path / "grandchild.pid"
        wrapper = [
            sys.executable,
            "-c",
            "import subprocess, sys\n"
            "child = subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(30)'])\n"
            f"open({str(pid_file)!r}, 'w').write(str(child.pid))\n"
            "child.wait()\n",
        ]
        proc = ManagedProcess(ProcessRole.PRIMARY, wrapper)
        await proc.start()

        for _ in range(250):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.02)
        grandchild = int(pid_file.read_text())

        await proc.stop(timeout=2.0)

        assert await _wait_until_gone(grandchild)
