"""Shared pytest configuration and fixtures for the broadcast test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from chess_broadcast.core.credentials import Credentials, StreamTarget
from chess_broadcast.core.platform_info import PlatformInfo, reset_platform_info
from chess_broadcast.core.settings import LauncherSettings
from tests.infrastructure.fakes import FAKE_CONSUMER, FAKE_PRIMARY


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "posix: test needs named pipes and process groups"
    )


def pytest_collection_modifyitems(config, items):
    """Skip POSIX-only tests on Windows."""
    if sys.platform != "win32":
        return

    skip_posix = pytest.mark.skip(reason="Requires a POSIX host")
    for item in items:
        if "posix" in item.keywords:
            item.add_marker(skip_posix)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        account_id="twitch-bot-blue",
        access_token="lip_test_token",
        channel_name="brongle",
    )


@pytest.fixture
def stream_target() -> StreamTarget:
    return StreamTarget(ingestion_server="rtmp.example.com", stream_key="abcd")


@pytest.fixture
def linux_platform() -> PlatformInfo:
    return PlatformInfo(platform="linux", architecture="x86_64", os_release="6.1.0")


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    reset_platform_info()
    yield
    reset_platform_info()


@pytest.fixture
def runtime_dir(tmp_path: Path) -> Path:
    """A runtime directory path that does not exist yet."""
    return tmp_path / "runtime"


@pytest.fixture
def settings(runtime_dir: Path) -> LauncherSettings:
    """Settings wired to the fake primary with short stop timeouts."""
    return LauncherSettings(
        runtime_dir=runtime_dir,
        primary_command=[sys.executable, str(FAKE_PRIMARY)],
        stop_timeout=2.0,
    )


@pytest.fixture
def fake_primary() -> Path:
    return FAKE_PRIMARY


@pytest.fixture
def fake_consumer() -> Path:
    return FAKE_CONSUMER
