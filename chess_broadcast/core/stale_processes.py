"""Cleanup of processes left behind by an earlier, crashed run.

A launcher that was killed outright never runs its cleanup, so its primary
and consumer keep running in their own sessions and keep the old frame
channel open. Before a runtime directory is recreated, orphaned processes
whose command line points into that directory are stopped.
"""

import os
from pathlib import Path
from typing import List

import psutil

from chess_broadcast.core.logging_utils import get_module_logger

logger = get_module_logger("StaleProcesses")


def _references(cmdline: List[str], runtime_dir: str) -> bool:
    prefix = runtime_dir.rstrip(os.sep) + os.sep
    return any(arg == runtime_dir or arg.startswith(prefix) for arg in cmdline)


LAUNCHER_MARKERS = ("chess_broadcast", "chess-broadcast")


def _is_live_launcher(parent: psutil.Process) -> bool:
    if parent.pid == os.getpid():
        return True
    try:
        cmdline = parent.cmdline()
    except (psutil.NoSuchProcess, psutil.ZombieProcess):
        return False
    except psutil.AccessDenied:
        # Not ours to judge.
        return True
    return any(marker in arg for arg in cmdline for marker in LAUNCHER_MARKERS)


def find_stale_processes(runtime_dir: Path) -> List[psutil.Process]:
    """Find orphaned processes whose arguments reference ``runtime_dir``.

    A process counts as orphaned when its parent is gone or is not a
    launcher. Re-parenting goes to init or to the nearest subreaper (a
    systemd user manager, a container shim), so any non-launcher parent
    is treated as an adopter. Live children of another launcher are never
    returned.
    """
    marker = str(Path(runtime_dir).absolute())
    stale = []
    current_pid = os.getpid()
    current_ppid = os.getppid()

    for proc in psutil.process_iter(['pid', 'cmdline']):
        try:
            if proc.pid in (current_pid, current_ppid):
                continue

            cmdline = proc.info.get('cmdline') or []
            if not _references(cmdline, marker):
                continue

            try:
                parent = proc.parent()
                if parent is None or parent.pid == 1 or not _is_live_launcher(parent):
                    stale.append(proc)
                    logger.debug("Found stale process: pid=%d, cmd=%s", proc.pid, ' '.join(cmdline)[:80])
            except psutil.NoSuchProcess:
                stale.append(proc)

        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue

    return stale


def terminate_stale_processes(runtime_dir: Path, timeout: float = 5.0) -> int:
    """Terminate stale processes, force killing any that outlive ``timeout``.

    Returns:
        Number of processes signalled
    """
    stale = find_stale_processes(runtime_dir)
    if not stale:
        return 0

    logger.warning("Found %d stale process(es) from a previous run in %s", len(stale), runtime_dir)

    signalled = 0
    for proc in stale:
        try:
            logger.warning("Terminating stale process: pid=%d", proc.pid)
            proc.terminate()
            signalled += 1
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    gone, alive = psutil.wait_procs(stale, timeout=timeout)
    if gone:
        logger.debug("Gracefully terminated %d process(es)", len(gone))

    for proc in alive:
        try:
            logger.warning("Force killing unresponsive process: pid=%d", proc.pid)
            proc.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    if alive:
        psutil.wait_procs(alive, timeout=1.0)

    return signalled


__all__ = ["find_stale_processes", "terminate_stale_processes"]
