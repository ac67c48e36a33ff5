"""Signals delivered to the launcher process end the run through cleanup."""

import asyncio
import os
import shlex
import signal
import sys

import pytest

from chess_broadcast.app import launcher
from tests.infrastructure.fakes import FAKE_PRIMARY, FakeConsumer

pytestmark = [pytest.mark.posix, pytest.mark.slow]


@pytest.fixture
def broadcast_env(monkeypatch):
    monkeypatch.setenv("LICHESS_ID", "twitch-bot-blue")
    monkeypatch.setenv("LICHESS_AUTH", "lip_test_token")
    monkeypatch.setenv("TWITCH_ACCOUNT", "brongle")


@pytest.fixture
def holding_consumer(monkeypatch):
    consumer = FakeConsumer("--mode", "hold")
    monkeypatch.setattr(
        "chess_broadcast.core.supervisor.consumer_for_mode",
        lambda *args, **kwargs: consumer,
    )
    return consumer


class TestSignalShutdown:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
    async def test_signal_cleans_up_and_exits_zero(self, tmp_path, broadcast_env, holding_consumer, sig):
        config = tmp_path / "config.txt"
        config.write_text("stop_timeout = 2\n", encoding="utf-8")
        runtime = tmp_path / "runtime"
        primary = shlex.join([sys.executable, str(FAKE_PRIMARY), "--sleep", "30"])

        run = asyncio.create_task(launcher.main([
            "preview",
            "--config", str(config),
            "--runtime-dir", str(runtime),
            "--primary-command", primary,
        ]))

        # The config document appears only after the handlers are installed.
        loop = asyncio.get_running_loop()
        deadline = loop.time() + 10.0
        while not (runtime / "config.json").exists():
            assert loop.time() < deadline, "run never prepared its runtime directory"
            assert not run.done(), "launcher exited before preparing the run"
            await asyncio.sleep(0.02)
        await asyncio.sleep(0.3)

        os.kill(os.getpid(), sig)

        assert await asyncio.wait_for(run, timeout=15.0) == 0
        assert not runtime.exists()
