"""Host platform snapshot used to pick the audio capture device."""

import functools
import platform
import sys
from dataclasses import dataclass

from chess_broadcast.core.logging_utils import get_module_logger

logger = get_module_logger("PlatformInfo")


@dataclass(frozen=True)
class PlatformInfo:
    #: ``sys.platform`` value: 'linux', 'darwin', 'win32', ...
    platform: str
    architecture: str
    os_release: str

    def __str__(self) -> str:
        return f"{self.platform} {self.os_release} ({self.architecture})"


def detect_platform() -> PlatformInfo:
    return PlatformInfo(
        platform=sys.platform,
        architecture=platform.machine(),
        os_release=platform.release(),
    )


@functools.lru_cache(maxsize=None)
def get_platform_info() -> PlatformInfo:
    """Detect once per process."""
    info = detect_platform()
    logger.info("Platform detected: %s", info)
    return info


def reset_platform_info() -> None:
    """Forget the cached snapshot (tests)."""
    get_platform_info.cache_clear()


__all__ = ["PlatformInfo", "detect_platform", "get_platform_info", "reset_platform_info"]
