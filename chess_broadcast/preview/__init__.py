"""Local preview consumer: ``python -m chess_broadcast --run-preview <config>``."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from chess_broadcast.core.errors import ConfigurationError
from chess_broadcast.core.logging_utils import get_module_logger
from chess_broadcast.core.runtime_config import load_runtime_config

from .frame_reader import FrameStreamError, iter_png_frames, read_png_frame

logger = get_module_logger("Preview")


def run_preview(config_path: Union[str, Path]) -> int:
    """Show the frame channel named in ``config_path``; returns an exit status."""
    try:
        config = load_runtime_config(config_path)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    # Imported here so the launcher never needs a display or Pillow.
    from .window import PreviewWindow

    window = PreviewWindow(config.frame_channel_path)
    window.run()
    return 1 if isinstance(window.error, FrameStreamError) else 0


__all__ = ["FrameStreamError", "iter_png_frames", "read_png_frame", "run_preview"]
