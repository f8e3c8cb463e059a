"""
Process tree termination.

Used when the thread waiting on a build tool process is interrupted: the
process and everything it spawned are stopped so nothing keeps running
unobserved.
"""

import logging
from typing import List

import psutil

logger = logging.getLogger(__name__)

# Seconds to wait after SIGTERM before escalating to SIGKILL.
TERMINATION_GRACEFUL_TIMEOUT = 3.0
TERMINATION_FORCE_TIMEOUT = 2.0


def _is_process_alive(process: psutil.Process) -> bool:
    """Safely check if a process is still alive and not a zombie."""
    try:
        if not process.is_running():
            return False
        return process.status() not in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return False


def _get_process_children(parent: psutil.Process) -> List[psutil.Process]:
    """Get all live descendants of a process, tolerating races."""
    try:
        return [child for child in parent.children(recursive=True) if _is_process_alive(child)]
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return []


def terminate_process_tree(pid: int, name: str = "build tool") -> bool:
    """
    Terminate a process and all of its descendants.

    Sends SIGTERM to the whole tree, waits, then SIGKILLs whatever is left.

    Args:
        pid: PID of the root process
        name: Description used in log messages

    Returns:
        True if no process of the tree is left alive
    """
    if pid <= 0:
        logger.warning(f"Invalid PID {pid} for {name}, skipping termination")
        return True

    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        logger.debug(f"Process {name} (PID: {pid}) already terminated")
        return True

    processes = [parent] + _get_process_children(parent)
    logger.info(f"Terminating {name} (PID: {pid}) and {len(processes) - 1} children")

    for phase, timeout in (("terminate", TERMINATION_GRACEFUL_TIMEOUT),
                           ("kill", TERMINATION_FORCE_TIMEOUT)):
        signaled = []
        for process in processes:
            if not _is_process_alive(process):
                continue
            try:
                if phase == "terminate":
                    process.terminate()
                else:
                    process.kill()
                signaled.append(process)
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning(f"Access denied sending {phase} to PID {process.pid}")

        if not signaled:
            return True

        _, still_alive = psutil.wait_procs(signaled, timeout=timeout)
        processes = [p for p in still_alive if _is_process_alive(p)]
        if not processes:
            logger.info(f"{name} (PID: {pid}) terminated in phase '{phase}'")
            return True

    logger.error(f"Failed to terminate {len(processes)} processes of {name} (PID: {pid})")
    return False
