from __future__ import annotations

from enum import Enum
from typing import Union

from .errors import UsageError


class Mode(Enum):
    """Which consumer reads the frame channel for this run."""

    PREVIEW = "preview"
    LIVESTREAM = "stream"

    @classmethod
    def choices(cls) -> list[str]:
        return [mode.value for mode in cls]

    @classmethod
    def coerce(cls, value: Union["Mode", str]) -> "Mode":
        if isinstance(value, Mode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UsageError(
                f"Unknown mode '{value}' (expected one of: {', '.join(cls.choices())})"
            ) from None


__all__ = ["Mode"]
