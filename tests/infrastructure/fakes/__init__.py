"""Stand-in executables for the chess application and frame consumers.

Each script runs as a real child process; ``FAKES_DIR`` locates them.
"""

import sys
from pathlib import Path

from chess_broadcast.consumers import FrameConsumer

FAKES_DIR = Path(__file__).parent
FAKE_PRIMARY = FAKES_DIR / "fake_primary.py"
FAKE_CONSUMER = FAKES_DIR / "fake_consumer.py"


class FakeConsumer(FrameConsumer):
    """Consumer whose process is ``fake_consumer.py`` (or any fixed command)."""

    name = "fake-consumer"

    def __init__(self, *extra, command=None):
        self.extra = list(extra)
        self.command = command

    def build_command(self, config_path, frame_channel_path):
        if self.command is not None:
            return list(self.command)
        return [sys.executable, str(FAKE_CONSUMER), *self.extra, str(frame_channel_path)]
