
from .credentials import Credentials, StreamTarget
from .errors import (
    BroadcastError,
    ConfigurationError,
    ConsumerLostError,
    EnvironmentSetupError,
    MissingCredential,
    ProcessSpawnError,
    UnresolvedAudioSource,
    UsageError,
)
from .managed_process import ManagedProcess, ProcessRole, ProcessState
from .modes import Mode
from .runtime_config import ConfigGenerator, RuntimeConfig, load_runtime_config
from .runtime_environment import RuntimeEnvironment
from .settings import LauncherSettings
from .shutdown_coordinator import ShutdownCoordinator, ShutdownState
from .supervisor import ProcessSupervisor

__all__ = [
    'Credentials',
    'StreamTarget',
    'BroadcastError',
    'ConfigurationError',
    'ConsumerLostError',
    'EnvironmentSetupError',
    'MissingCredential',
    'ProcessSpawnError',
    'UnresolvedAudioSource',
    'UsageError',
    'ManagedProcess',
    'ProcessRole',
    'ProcessState',
    'Mode',
    'ConfigGenerator',
    'RuntimeConfig',
    'load_runtime_config',
    'RuntimeEnvironment',
    'LauncherSettings',
    'ShutdownCoordinator',
    'ShutdownState',
    'ProcessSupervisor',
]
