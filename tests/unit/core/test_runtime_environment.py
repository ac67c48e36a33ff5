"""Unit tests for RuntimeEnvironment."""

import os
import stat
from pathlib import Path

import pytest

from chess_broadcast.core.errors import EnvironmentSetupError
from chess_broadcast.core.runtime_environment import RuntimeEnvironment

pytestmark = pytest.mark.posix


def _is_fifo(path: Path) -> bool:
    return stat.S_ISFIFO(os.stat(path).st_mode)


class TestInitialize:
    """Test runtime directory creation."""

    def test_creates_directory_and_channel(self, runtime_dir):
        env = RuntimeEnvironment(runtime_dir).initialize()

        assert env.directory_path.is_dir()
        assert env.frame_channel_path == env.directory_path / "video"
        assert _is_fifo(env.frame_channel_path)
        assert env.is_initialized

    def test_paths_are_absolute(self, runtime_dir, monkeypatch):
        monkeypatch.chdir(runtime_dir.parent)
        env = RuntimeEnvironment("runtime")

        assert env.directory_path.is_absolute()
        assert env.directory_path == runtime_dir
        assert env.config_path == runtime_dir / "config.json"

    def test_replaces_stale_content(self, runtime_dir):
        runtime_dir.mkdir()
        (runtime_dir / "config.json").write_text("{}")
        (runtime_dir / "leftover").mkdir()
        (runtime_dir / "leftover" / "frame.png").write_bytes(b"old")
        (runtime_dir / "video").write_text("not a fifo")

        env = RuntimeEnvironment(runtime_dir).initialize()

        assert sorted(p.name for p in runtime_dir.iterdir()) == ["video"]
        assert _is_fifo(env.frame_channel_path)

    def test_replaces_stale_file_at_base_path(self, runtime_dir):
        runtime_dir.write_text("stray file")

        env = RuntimeEnvironment(runtime_dir).initialize()

        assert runtime_dir.is_dir()
        assert _is_fifo(env.frame_channel_path)

    def test_initialize_twice_leaves_single_channel(self, runtime_dir):
        env = RuntimeEnvironment(runtime_dir)
        env.initialize()
        env.initialize()

        assert [p.name for p in runtime_dir.iterdir()] == ["video"]

    def test_failure_raises_environment_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("regular file")

        env = RuntimeEnvironment(blocker / "runtime")

        with pytest.raises(EnvironmentSetupError):
            env.initialize()
        assert not env.is_initialized


class TestTeardown:
    """Test runtime directory removal."""

    def test_removes_directory(self, runtime_dir):
        env = RuntimeEnvironment(runtime_dir).initialize()
        env.config_path.write_text("{}")

        env.teardown()

        assert not runtime_dir.exists()
        assert not env.is_initialized

    def test_teardown_twice_is_noop(self, runtime_dir):
        env = RuntimeEnvironment(runtime_dir).initialize()

        env.teardown()
        env.teardown()

        assert not runtime_dir.exists()

    def test_teardown_never_initialized(self, runtime_dir):
        env = RuntimeEnvironment(runtime_dir)

        env.teardown()

        assert not runtime_dir.exists()

    def test_teardown_failure_raises(self, runtime_dir, monkeypatch):
        env = RuntimeEnvironment(runtime_dir).initialize()

        def fail(path):
            raise PermissionError("denied")

        monkeypatch.setattr("chess_broadcast.core.runtime_environment.shutil.rmtree", fail)

        with pytest.raises(EnvironmentSetupError):
            env.teardown()
