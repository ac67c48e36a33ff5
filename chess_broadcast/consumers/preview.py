from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from .base import FrameConsumer


class PreviewConsumer(FrameConsumer):
    """Local window that shows the frames; runs this package's preview entry point."""

    name = "preview"

    def __init__(self, python_executable: Optional[str] = None) -> None:
        self.python_executable = python_executable or sys.executable

    def build_command(self, config_path: Path, frame_channel_path: Path) -> list[str]:
        # The preview reads the channel path from the config document, the same
        # way the primary does.
        return [self.python_executable, "-m", "chess_broadcast", "--run-preview", str(config_path)]
