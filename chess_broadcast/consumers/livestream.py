"""ffmpeg encoder/publisher that pushes the frame channel to an RTMP endpoint."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from chess_broadcast.core.credentials import StreamTarget, require_stream_target
from chess_broadcast.core.errors import UnresolvedAudioSource
from chess_broadcast.core.platform_info import PlatformInfo, get_platform_info
from chess_broadcast.core.settings import DEFAULT_FFMPEG_PATH

from .base import FrameConsumer

FRAME_RATE = 30
VIDEO_CODEC = "libx264"
VIDEO_PRESET = "ultrafast"
PIXEL_FORMAT = "yuv420p"
AUDIO_CODEC = "aac"
CONTAINER_FORMAT = "flv"

# Generous probing so ffmpeg does not give up while the producer renders its
# first frame.
PROBE_ARGS = ["-analyzeduration", "100M", "-probesize", "500M"]


def audio_input_args(platform: str) -> list[str]:
    """Capture arguments for the default audio device of ``platform``.

    Only Linux (ALSA) and macOS (AVFoundation) are known. Anything else raises
    UnresolvedAudioSource rather than guessing.
    """
    if platform.startswith("linux"):
        return ["-f", "alsa", "-i", "hw:0"]
    if platform == "darwin":
        return ["-f", "avfoundation", "-i", ":default"]
    raise UnresolvedAudioSource(platform)


class LiveStreamConsumer(FrameConsumer):

    name = "encoder"

    def __init__(
        self,
        target: Optional[StreamTarget],
        *,
        ffmpeg_path: str = DEFAULT_FFMPEG_PATH,
        platform_info: Optional[PlatformInfo] = None,
    ) -> None:
        self.target = require_stream_target(target)
        self.ffmpeg_path = ffmpeg_path
        self.platform_info = platform_info or get_platform_info()

    @property
    def publish_endpoint(self) -> str:
        return self.target.publish_endpoint

    def build_command(self, config_path: Path, frame_channel_path: Path) -> list[str]:
        audio_input = audio_input_args(self.platform_info.platform)
        video_input = ["-f", "image2pipe", "-i", str(frame_channel_path)]
        audio_options = ["-c:a", AUDIO_CODEC]
        video_options = [
            "-c:v", VIDEO_CODEC,
            "-preset", VIDEO_PRESET,
            "-pix_fmt", PIXEL_FORMAT,
            "-f", CONTAINER_FORMAT,
            "-r", str(FRAME_RATE),
        ]
        return [
            self.ffmpeg_path,
            *PROBE_ARGS,
            *audio_input,
            *video_input,
            *audio_options,
            *video_options,
            self.publish_endpoint,
        ]

    def describe(self) -> str:
        return f"{self.name} -> rtmp://{self.target.ingestion_server}/app/***"
