"""Ephemeral runtime directory holding the config document and frame channel."""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path
from typing import Union

from .errors import EnvironmentSetupError
from .logging_utils import get_module_logger
from .paths import FRAME_CHANNEL_NAME, RUNTIME_CONFIG_NAME

logger = get_module_logger("RuntimeEnvironment")


class RuntimeEnvironment:
    """Owns one runtime directory and the named pipe inside it.

    ``initialize()`` is destructive: whatever already lives at ``base_path``
    is removed first. Two runs must never share a base path.
    """

    def __init__(self, base_path: Union[str, Path]) -> None:
        self.directory_path = Path(base_path).absolute()
        self.frame_channel_path = self.directory_path / FRAME_CHANNEL_NAME
        self.config_path = self.directory_path / RUNTIME_CONFIG_NAME

    def initialize(self) -> "RuntimeEnvironment":
        try:
            if self.directory_path.is_dir() and not self.directory_path.is_symlink():
                logger.info("Removing existing runtime %s", self.directory_path)
                shutil.rmtree(self.directory_path)
            elif self.directory_path.exists() or self.directory_path.is_symlink():
                logger.info("Removing stale file at runtime path %s", self.directory_path)
                self.directory_path.unlink()

            logger.info("Creating runtime directory %s", self.directory_path)
            self.directory_path.mkdir(parents=True)

            logger.info("Creating frame channel at %s", self.frame_channel_path)
            os.mkfifo(self.frame_channel_path, 0o600)
        except OSError as exc:
            raise EnvironmentSetupError(
                f"Cannot prepare runtime directory {self.directory_path}: {exc}"
            ) from exc
        return self

    def teardown(self) -> None:
        """Remove the runtime directory. Safe to call any number of times."""
        if not self.directory_path.exists() and not self.directory_path.is_symlink():
            logger.debug("Runtime directory %s already gone", self.directory_path)
            return

        logger.info("Deleting runtime directory %s", self.directory_path)
        try:
            if self.directory_path.is_dir() and not self.directory_path.is_symlink():
                shutil.rmtree(self.directory_path)
            else:
                self.directory_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise EnvironmentSetupError(
                f"Cannot remove runtime directory {self.directory_path}: {exc}"
            ) from exc

    @property
    def is_initialized(self) -> bool:
        try:
            return stat.S_ISFIFO(self.frame_channel_path.stat().st_mode)
        except OSError:
            return False

    def __repr__(self) -> str:
        return f"RuntimeEnvironment({str(self.directory_path)!r})"


__all__ = ["RuntimeEnvironment"]
