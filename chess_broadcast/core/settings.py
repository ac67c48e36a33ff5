"""Launcher settings resolved from ``config.txt`` defaults."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .config_manager import ConfigManager, get_config_manager
from .paths import DEFAULT_RUNTIME_DIR

DEFAULT_PRIMARY_COMMAND = "chat-plays-chess"
DEFAULT_FFMPEG_PATH = "ffmpeg"
DEFAULT_STOP_TIMEOUT = 5.0


@dataclass
class LauncherSettings:
    """Everything the supervisor needs besides credentials.

    Attributes:
        runtime_dir: Per-run working directory. Wiped on start, so concurrent
            runs must each use their own.
        primary_command: Command line of the chess application, without the
            configuration path (appended at spawn time).
        ffmpeg_path: Encoder binary used in stream mode.
        stop_timeout: Seconds a process gets after SIGTERM before SIGKILL.
        require_consumer: Abort the run when the consumer cannot be launched.
        stop_on_consumer_exit: End the run when the consumer dies first.
    """

    runtime_dir: Path = DEFAULT_RUNTIME_DIR
    primary_command: list[str] = field(default_factory=lambda: [DEFAULT_PRIMARY_COMMAND])
    ffmpeg_path: str = DEFAULT_FFMPEG_PATH
    stop_timeout: float = DEFAULT_STOP_TIMEOUT
    require_consumer: bool = True
    stop_on_consumer_exit: bool = False
    log_level: str = "info"
    log_file: Optional[Path] = None
    console_output: bool = True

    @classmethod
    def from_config(
        cls,
        config: Dict[str, str],
        config_manager: Optional[ConfigManager] = None,
    ) -> "LauncherSettings":
        cm = config_manager or get_config_manager()

        primary = shlex.split(cm.get_str(config, "primary_command", DEFAULT_PRIMARY_COMMAND))
        log_file = cm.get_str(config, "log_file", "").strip()
        stop_timeout = cm.get_float(config, "stop_timeout", DEFAULT_STOP_TIMEOUT)

        return cls(
            runtime_dir=Path(cm.get_str(config, "runtime_dir", str(DEFAULT_RUNTIME_DIR))),
            primary_command=primary or [DEFAULT_PRIMARY_COMMAND],
            ffmpeg_path=cm.get_str(config, "ffmpeg_path", DEFAULT_FFMPEG_PATH),
            stop_timeout=max(0.0, stop_timeout),
            require_consumer=cm.get_bool(config, "require_consumer", True),
            stop_on_consumer_exit=cm.get_bool(config, "stop_on_consumer_exit", False),
            log_level=cm.get_str(config, "log_level", "info"),
            log_file=Path(log_file) if log_file else None,
            console_output=cm.get_bool(config, "console_output", True),
        )


__all__ = [
    "DEFAULT_PRIMARY_COMMAND",
    "DEFAULT_FFMPEG_PATH",
    "DEFAULT_STOP_TIMEOUT",
    "LauncherSettings",
]
