"""
Process tree termination for bundler subprocesses.

Bundler CLIs commonly spawn worker processes of their own, so stopping a
build means stopping the whole tree under the shell that launched it.
"""

import asyncio
import logging
from typing import List

import psutil

logger = logging.getLogger(__name__)


class TerminationTimeouts:
    """Seconds to wait after each escalation step."""
    GRACEFUL = 3.0
    FORCE = 2.0


def _is_process_alive(process: psutil.Process) -> bool:
    """Safely check if a process is still alive and not a zombie."""
    try:
        if not process.is_running():
            return False
        return process.status() not in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return False


def _get_process_children(parent: psutil.Process) -> List[psutil.Process]:
    """Safely get all live descendants of a process."""
    try:
        return [child for child in parent.children(recursive=True) if _is_process_alive(child)]
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return []


def _signal_all(processes: List[psutil.Process], force: bool) -> List[psutil.Process]:
    signaled = []
    for process in processes:
        try:
            if force:
                process.kill()
            else:
                process.terminate()
            signaled.append(process)
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            logger.warning(f"Access denied signalling PID {process.pid}")
    return signaled


def terminate_process_tree(pid: int, name: str) -> None:
    """
    Terminate a process and all of its descendants.

    Sends SIGTERM to the whole tree, then SIGKILL to whatever survives the
    grace period.
    """
    if pid <= 0:
        logger.warning(f"Invalid PID {pid} for {name}, skipping termination")
        return

    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        logger.debug(f"Process {name} (PID: {pid}) already terminated")
        return

    for force, timeout in ((False, TerminationTimeouts.GRACEFUL), (True, TerminationTimeouts.FORCE)):
        processes = [parent] + _get_process_children(parent)
        alive = [process for process in processes if _is_process_alive(process)]
        if not alive:
            break

        signaled = _signal_all(alive, force)
        _, still_alive = psutil.wait_procs(signaled, timeout=timeout)
        still_alive = [process for process in still_alive if _is_process_alive(process)]
        if not still_alive:
            logger.debug(f"Terminated {name} (PID: {pid}) and {len(signaled) - 1} children")
            break
        if force:
            logger.error(f"Failed to terminate {len(still_alive)} processes for {name}")


async def terminate_process_tree_async(pid: int, name: str) -> None:
    """Run ``terminate_process_tree`` without blocking the event loop."""
    await asyncio.get_running_loop().run_in_executor(None, terminate_process_tree, pid, name)
