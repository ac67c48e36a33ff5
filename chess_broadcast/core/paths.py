"""Centralized path constants for the broadcast launcher."""

from __future__ import annotations

from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT = PACKAGE_ROOT.parent

# Launcher configuration (key = value)
CONFIG_PATH = PROJECT_ROOT / "config.txt"

# Relative to the working directory the launcher is started from.
DEFAULT_RUNTIME_DIR = Path("runtime")

# Names inside the runtime directory; the primary process depends on them.
RUNTIME_CONFIG_NAME = "config.json"
FRAME_CHANNEL_NAME = "video"


__all__ = [
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
    "CONFIG_PATH",
    "DEFAULT_RUNTIME_DIR",
    "RUNTIME_CONFIG_NAME",
    "FRAME_CHANNEL_NAME",
]
