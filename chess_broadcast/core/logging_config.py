"""Root logging setup for the launcher and the preview process."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 3

# Marks handlers installed here so a second call replaces them and leaves
# anything else on the root logger (pytest's capture handler, for one) alone.
_OWNED = "_chess_broadcast_handler"


def coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


def _build_handlers(level: int, console: bool, log_file: Optional[Path]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if console:
        # stderr: the consumer's stdout may be a pipe owned by the supervisor.
        handlers.append(logging.StreamHandler(sys.stderr))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )

    formatter = logging.Formatter(LOG_FORMAT, LOG_DATEFMT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
    return handlers


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Install console and optional rotating file output on the root logger.

    Safe to call again (e.g. after the CLI has been parsed); earlier handlers
    from this function are closed and replaced.
    """
    numeric_level = coerce_level(level)
    root = logging.getLogger()

    for handler in [h for h in root.handlers if getattr(h, _OWNED, False)]:
        root.removeHandler(handler)
        handler.close()

    for handler in _build_handlers(numeric_level, console, Path(log_file) if log_file else None):
        root.addHandler(handler)

    root.setLevel(numeric_level)


__all__ = ["configure_logging", "coerce_level", "LOG_FORMAT", "LOG_DATEFMT"]
