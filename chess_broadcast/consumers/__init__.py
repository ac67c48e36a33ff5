"""Frame consumer variants, one per run mode."""

from __future__ import annotations

from typing import Optional

from chess_broadcast.core.credentials import StreamTarget
from chess_broadcast.core.errors import UsageError
from chess_broadcast.core.modes import Mode
from chess_broadcast.core.platform_info import PlatformInfo
from chess_broadcast.core.settings import LauncherSettings

from .base import FrameConsumer
from .livestream import LiveStreamConsumer, audio_input_args
from .preview import PreviewConsumer


def consumer_for_mode(
    mode: Mode,
    settings: LauncherSettings,
    stream_target: Optional[StreamTarget] = None,
    platform_info: Optional[PlatformInfo] = None,
) -> FrameConsumer:
    if mode is Mode.PREVIEW:
        return PreviewConsumer()
    if mode is Mode.LIVESTREAM:
        return LiveStreamConsumer(
            stream_target,
            ffmpeg_path=settings.ffmpeg_path,
            platform_info=platform_info,
        )
    raise UsageError(f"No consumer for mode {mode!r}")


__all__ = [
    "FrameConsumer",
    "LiveStreamConsumer",
    "PreviewConsumer",
    "audio_input_args",
    "consumer_for_mode",
]
