"""Contract shared by every frame consumer variant."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class FrameConsumer(ABC):
    """Describes how to launch a process that reads the frame channel.

    A consumer opens ``frame_channel_path`` for reading, consumes the PNG
    frame sequence until the producer closes the channel or the process is
    stopped, and produces some observable output (a window, a stream).
    """

    #: Short label used for the process logger.
    name: str = "consumer"

    @abstractmethod
    def build_command(self, config_path: Path, frame_channel_path: Path) -> list[str]:
        """Return the argv used to spawn the consumer.

        Must not touch the filesystem or spawn anything; errors raised here
        abort the run before any process starts.
        """

    def describe(self) -> str:
        return self.name
