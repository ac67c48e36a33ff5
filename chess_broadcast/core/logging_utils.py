"""Component-scoped loggers for the broadcast launcher.

Every logger lives under the ``chess_broadcast`` namespace and tags its
messages with a short component name, so interleaved output from the
supervisor, the primary and the consumer stays readable on one console::

    2024-05-01 12:00:00 | INFO     | chess_broadcast.Process.encoder | [Process.encoder] stderr: frame=  31 fps=30
"""

from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional, Tuple, Union

LOGGER_NAMESPACE = "chess_broadcast"
DEFAULT_COMPONENT = "Core"


def qualified_name(name: Optional[str]) -> str:
    """``"Supervisor"`` -> ``"chess_broadcast.Supervisor"``; already qualified names pass through."""
    if not name:
        return LOGGER_NAMESPACE
    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return name
    return f"{LOGGER_NAMESPACE}.{name}"


def component_of(logger_name: str) -> str:
    if logger_name.startswith(LOGGER_NAMESPACE):
        return logger_name[len(LOGGER_NAMESPACE):].lstrip(".") or DEFAULT_COMPONENT
    return logger_name or DEFAULT_COMPONENT


class ComponentLogger(logging.LoggerAdapter):
    """LoggerAdapter that prefixes ``[component]`` to each message.

    Formatting arguments are left to the logging machinery, so records keep
    their ``msg``/``args`` split and are only rendered if a handler accepts
    them.
    """

    def __init__(self, logger: logging.Logger, component: Optional[str] = None) -> None:
        super().__init__(logger, {})
        self.component = component or component_of(logger.name)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        prefix = f"[{self.component}] "
        text = str(msg)
        if not text.startswith(prefix):
            text = prefix + text
        return text, kwargs

    @property
    def name(self) -> str:
        return self.logger.name

    def __repr__(self) -> str:
        return f"ComponentLogger({self.logger.name!r}, component={self.component!r})"


LoggerLike = Union[ComponentLogger, logging.Logger, logging.LoggerAdapter, None]


def get_module_logger(name: Optional[str] = None) -> ComponentLogger:
    return ComponentLogger(logging.getLogger(qualified_name(name)))


def as_component_logger(logger: LoggerLike, *, fallback_name: Optional[str] = None) -> ComponentLogger:
    """Wrap whatever logger a caller handed in; ``None`` gets a module logger."""
    if isinstance(logger, ComponentLogger):
        return logger
    if isinstance(logger, logging.LoggerAdapter):
        logger = logger.logger
    if isinstance(logger, logging.Logger):
        return ComponentLogger(logger)
    return get_module_logger(fallback_name)


__all__ = [
    "LOGGER_NAMESPACE",
    "ComponentLogger",
    "LoggerLike",
    "as_component_logger",
    "component_of",
    "get_module_logger",
    "qualified_name",
]
