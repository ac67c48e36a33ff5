"""Credentials and stream target read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .errors import MissingCredential

LICHESS_ID_VAR = "LICHESS_ID"
LICHESS_AUTH_VAR = "LICHESS_AUTH"
TWITCH_ACCOUNT_VAR = "TWITCH_ACCOUNT"
INGESTION_SERVER_VAR = "TWITCH_INGESTION_SERVER"
STREAM_KEY_VAR = "TWITCH_STREAM_KEY"

# Field name -> environment variable, in validation order.
CREDENTIAL_VARIABLES = {
    "account_id": LICHESS_ID_VAR,
    "access_token": LICHESS_AUTH_VAR,
    "channel_name": TWITCH_ACCOUNT_VAR,
}


@dataclass(frozen=True)
class Credentials:
    account_id: str = ""
    access_token: str = field(default="", repr=False)
    channel_name: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Credentials":
        env = os.environ if environ is None else environ
        return cls(**{name: env.get(var, "").strip() for name, var in CREDENTIAL_VARIABLES.items()})

    def validate(self) -> None:
        """Raise MissingCredential for the first empty field."""
        for name, var in CREDENTIAL_VARIABLES.items():
            if not getattr(self, name):
                raise MissingCredential(name, var)


@dataclass(frozen=True)
class StreamTarget:
    ingestion_server: str
    stream_key: str

    @property
    def publish_endpoint(self) -> str:
        return f"rtmp://{self.ingestion_server}/app/{self.stream_key}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Optional["StreamTarget"]:
        """Return the target, or None when neither variable is set.

        A half-configured target is returned as is so that
        ``require_stream_target`` can name the missing variable.
        """
        env = os.environ if environ is None else environ
        server = env.get(INGESTION_SERVER_VAR, "").strip()
        key = env.get(STREAM_KEY_VAR, "").strip()
        if not server and not key:
            return None
        return cls(ingestion_server=server, stream_key=key)

    def __repr__(self) -> str:
        return f"StreamTarget(ingestion_server={self.ingestion_server!r}, stream_key='***')"


def require_stream_target(target: Optional[StreamTarget]) -> StreamTarget:
    if target is None:
        raise MissingCredential("stream_target", f"{INGESTION_SERVER_VAR}/{STREAM_KEY_VAR}")
    if not target.ingestion_server:
        raise MissingCredential("ingestion_server", INGESTION_SERVER_VAR)
    if not target.stream_key:
        raise MissingCredential("stream_key", STREAM_KEY_VAR)
    return target


__all__ = [
    "LICHESS_ID_VAR",
    "LICHESS_AUTH_VAR",
    "TWITCH_ACCOUNT_VAR",
    "INGESTION_SERVER_VAR",
    "STREAM_KEY_VAR",
    "CREDENTIAL_VARIABLES",
    "Credentials",
    "StreamTarget",
    "require_stream_target",
]
