import argparse
import asyncio
import shlex
import signal
from pathlib import Path
from typing import Optional

from chess_broadcast.core import (
    BroadcastError,
    Credentials,
    LauncherSettings,
    Mode,
    ProcessSupervisor,
    StreamTarget,
)
from chess_broadcast.core.config_manager import get_config_manager
from chess_broadcast.core.logging_config import configure_logging
from chess_broadcast.core.logging_utils import get_module_logger
from chess_broadcast.core.paths import CONFIG_PATH


logger = get_module_logger("Launcher")

_LOG_LEVELS = ['debug', 'info', 'warning', 'error', 'critical']


def _config_path_from_argv(argv: Optional[list[str]]) -> Path:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", type=Path, default=CONFIG_PATH)
    known, _ = pre.parse_known_args(argv)
    return known.config


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments with config file defaults."""
    config_path = _config_path_from_argv(argv)
    config = get_config_manager().read_config(config_path)
    defaults = LauncherSettings.from_config(config)

    parser = argparse.ArgumentParser(
        prog="chess-broadcast",
        description="Run the chess application together with a local preview or a live stream",
    )

    parser.add_argument(
        "mode",
        choices=Mode.choices(),
        help="preview: show frames in a local window; stream: encode and publish over RTMP",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=config_path,
        help=f"Launcher settings file (default: {CONFIG_PATH.name})"
    )

    parser.add_argument(
        "--runtime-dir",
        type=Path,
        default=defaults.runtime_dir,
        help="Per-run working directory; removed and recreated on start (default: runtime/)"
    )

    parser.add_argument(
        "--primary-command",
        type=str,
        default=None,
        help="Command that starts the chess application (config path is appended)"
    )

    parser.add_argument(
        "--stop-timeout",
        type=float,
        default=defaults.stop_timeout,
        help="Seconds a process gets to exit after SIGTERM before it is killed (default: %(default)s)"
    )

    parser.add_argument(
        "--log-level",
        choices=_LOG_LEVELS,
        default=defaults.log_level if defaults.log_level in _LOG_LEVELS else 'info',
        help="Logging level (default: %(default)s)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=defaults.log_file,
        help="Also write logs to this rotating file"
    )

    args = parser.parse_args(argv)
    args.settings = defaults
    return args


def build_settings(args: argparse.Namespace) -> LauncherSettings:
    settings: LauncherSettings = args.settings
    settings.runtime_dir = args.runtime_dir
    settings.stop_timeout = max(0.0, args.stop_timeout)
    settings.log_level = args.log_level
    settings.log_file = args.log_file
    if args.primary_command:
        settings.primary_command = shlex.split(args.primary_command)
    return settings


def exit_status(returncode: int) -> int:
    """Map a child's return code to a shell-style exit status."""
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


async def run_broadcast(supervisor: ProcessSupervisor, mode: Mode) -> int:
    loop = asyncio.get_running_loop()
    installed = []

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, supervisor.request_cancel, f"signal {sig.name}")
            installed.append(sig)
        except NotImplementedError:
            pass  # Windows doesn't support add_signal_handler

    try:
        return await supervisor.run(mode)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


async def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    settings = build_settings(args)

    configure_logging(
        settings.log_level,
        console=settings.console_output,
        log_file=settings.log_file,
    )

    mode = Mode.coerce(args.mode)
    logger.info("Running ChatPlaysChess %s", mode.value)

    supervisor = ProcessSupervisor(
        settings,
        Credentials.from_env(),
        StreamTarget.from_env(),
    )

    try:
        returncode = await run_broadcast(supervisor, mode)
    except BroadcastError as exc:
        logger.error("%s", exc)
        return exc.exit_code

    if supervisor.cleanup_failures:
        logger.warning("Cleanup incomplete: %s", ", ".join(supervisor.cleanup_failures))

    return exit_status(returncode)


__all__ = ["parse_args", "build_settings", "exit_status", "run_broadcast", "main"]
