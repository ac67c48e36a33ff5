"""Runtime configuration document consumed by the primary process.

The document layout is a contract with the chess application::

    {
        "lichess": {"account": ..., "access_token": ...},
        "twitch": {"channel": ...},
        "livestream": {"video": {"fifo": ...}}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

import aiofiles

from .credentials import Credentials
from .errors import ConfigurationError, EnvironmentSetupError
from .logging_utils import get_module_logger

logger = get_module_logger("ConfigGenerator")


@dataclass(frozen=True)
class RuntimeConfig:
    account_id: str
    access_token: str = field(repr=False)
    channel_name: str
    frame_channel_path: Path

    def to_document(self) -> Dict[str, Any]:
        return {
            "lichess": {
                "account": self.account_id,
                "access_token": self.access_token,
            },
            "twitch": {
                "channel": self.channel_name,
            },
            "livestream": {
                "video": {
                    "fifo": str(self.frame_channel_path),
                },
            },
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "RuntimeConfig":
        try:
            return cls(
                account_id=document["lichess"]["account"],
                access_token=document["lichess"]["access_token"],
                channel_name=document["twitch"]["channel"],
                frame_channel_path=Path(document["livestream"]["video"]["fifo"]),
            )
        except (KeyError, TypeError) as exc:
            raise ConfigurationError(f"Malformed runtime configuration: missing {exc}") from exc


def load_runtime_config(config_path: Union[str, Path]) -> RuntimeConfig:
    """Read a document written by ConfigGenerator (used by the preview process)."""
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read runtime configuration {path}: {exc}") from exc
    return RuntimeConfig.from_document(document)


class ConfigGenerator:
    """Validates credentials and writes the runtime configuration document."""

    def __init__(self, config_path: Union[str, Path]) -> None:
        self.config_path = Path(config_path)

    async def generate(self, credentials: Credentials, frame_channel_path: Path) -> RuntimeConfig:
        # Nothing is written unless every credential is present.
        credentials.validate()

        config = RuntimeConfig(
            account_id=credentials.account_id,
            access_token=credentials.access_token,
            channel_name=credentials.channel_name,
            frame_channel_path=Path(frame_channel_path),
        )

        payload = json.dumps(config.to_document(), indent=4)
        try:
            async with aiofiles.open(self.config_path, "w", encoding="utf-8") as fh:
                await fh.write(payload + "\n")
        except OSError as exc:
            raise EnvironmentSetupError(f"Cannot write runtime configuration {self.config_path}: {exc}") from exc

        logger.info("Wrote runtime configuration to %s", self.config_path)
        return config


__all__ = ["RuntimeConfig", "ConfigGenerator", "load_runtime_config"]
