"""Error taxonomy for the broadcast launcher.

Every error carries the process exit code the launcher reports for it.
"""

from __future__ import annotations

from typing import Optional

EXIT_USAGE = 2
EXIT_CONFIGURATION = 3
EXIT_ENVIRONMENT = 4
EXIT_SPAWN = 5
EXIT_CONSUMER_LOST = 6


class BroadcastError(Exception):
    exit_code = 1


class UsageError(BroadcastError, ValueError):
    """An invocation the launcher does not understand (e.g. unknown mode)."""

    exit_code = EXIT_USAGE


class ConfigurationError(BroadcastError):
    """Raised before any process is spawned; nothing is left behind."""

    exit_code = EXIT_CONFIGURATION


class MissingCredential(ConfigurationError):

    def __init__(self, field: str, variable: Optional[str] = None) -> None:
        self.field = field
        self.variable = variable
        if variable:
            message = f"Missing credential '{field}' ({variable} environment variable)"
        else:
            message = f"Missing credential '{field}'"
        super().__init__(message)


class UnresolvedAudioSource(ConfigurationError):
    """No capture device is known for this host platform."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(f"No default audio capture source for platform '{platform}'")


class EnvironmentSetupError(BroadcastError):
    """The runtime directory or frame channel could not be created or removed."""

    exit_code = EXIT_ENVIRONMENT


class ProcessSpawnError(BroadcastError):

    exit_code = EXIT_SPAWN

    def __init__(self, role: str, command: list[str], reason: object) -> None:
        self.role = role
        self.command = list(command)
        super().__init__(f"Failed to launch {role} process ({command[0] if command else '?'}): {reason}")


class ConsumerLostError(BroadcastError):
    """The frame consumer exited while the primary was still producing."""

    exit_code = EXIT_CONSUMER_LOST


__all__ = [
    "EXIT_USAGE",
    "EXIT_CONFIGURATION",
    "EXIT_ENVIRONMENT",
    "EXIT_SPAWN",
    "EXIT_CONSUMER_LOST",
    "BroadcastError",
    "UsageError",
    "ConfigurationError",
    "MissingCredential",
    "UnresolvedAudioSource",
    "EnvironmentSetupError",
    "ProcessSpawnError",
    "ConsumerLostError",
]
