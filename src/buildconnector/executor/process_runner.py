"""
Execution of a single build tool process.

The ProcessRunner starts the build tool, drains its stdout and stderr
concurrently on the drain pool, waits for it to exit and folds everything
into one Outcome.
"""

import logging
import subprocess
import traceback
from concurrent.futures import Future
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence, Union

from ..models.job import Outcome
from ..system.processes import terminate_process_tree
from ..validation import ErrorSeverity, handle_error, handle_file_error, handle_subprocess_error
from .output_drain import OutputDrain
from .thread_pool import ManagedThreadPoolExecutor

if TYPE_CHECKING:
    from ..orchestration.log_rotation import LogRotationStore

logger = logging.getLogger(__name__)


class ProcessRunner:
    """
    Runs the build tool and aggregates its exit status and output.

    Only the exit code decides success. Standard error is reported through
    the module logger and never written to the rotation store.
    """

    def __init__(
        self,
        drain_pool: ManagedThreadPoolExecutor,
        log_store: Optional["LogRotationStore"] = None,
        encoding: str = "utf-8",
    ):
        """
        Args:
            drain_pool: Started pool used for the stdout/stderr readers
            log_store: Store to allocate a stdout log file from, or None to
                skip log files
            encoding: Encoding of the build tool's output
        """
        self.drain_pool = drain_pool
        self.log_store = log_store
        self.encoding = encoding

    def run(self, command: Sequence[str], working_directory: Union[str, Path]) -> Outcome:
        """
        Run one command to completion.

        Args:
            command: Argument vector, executable first
            working_directory: Directory to run the command in

        Returns:
            The Outcome. Launch failures and interrupted waits produce a
            failed Outcome describing the problem instead of raising.
        """
        command = list(command)
        command_str = " ".join(command)
        logger.info(f"Running '{command_str}' in directory '{working_directory}'")

        try:
            process = subprocess.Popen(
                command,
                cwd=working_directory,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            handle_subprocess_error(
                error=e,
                command=command_str,
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            return Outcome.failure(
                f"Failed to launch '{command_str}' in '{working_directory}': {type(e).__name__}: {e}"
            )

        log_file = self._allocate_log_file()
        stdout_future, stderr_future = self._start_drains(process, log_file)

        try:
            exit_code = process.wait()
            output = self._collect(stdout_future, "stdout")
            error_output = self._collect(stderr_future, "stderr")
        except KeyboardInterrupt:
            logger.error(f"Interrupted while waiting for '{command_str}' (PID {process.pid})")
            terminate_process_tree(process.pid, "build tool")
            process.wait()
            return Outcome(
                succeeded=False,
                captured_output=f"Interrupted while waiting for '{command_str}' (PID {process.pid}) to finish",
                log_file=log_file,
            )

        if error_output:
            logger.warning(f"Build tool error stream output: {error_output}")
        logger.info(f"Build tool exited with status {exit_code}")

        return Outcome(
            succeeded=exit_code == 0,
            captured_output=output,
            exit_code=exit_code,
            log_file=log_file,
        )

    def _allocate_log_file(self) -> Optional[Path]:
        if self.log_store is None:
            return None
        try:
            return self.log_store.allocate()
        except OSError as e:
            handle_file_error(
                error=e,
                context="allocating build output log",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return None

    def _start_drains(self, process: subprocess.Popen, log_file: Optional[Path]):
        try:
            stdout_future = self.drain_pool.submit(
                OutputDrain(process.stdout, log_file, "stdout", self.encoding)
            )
            stderr_future = self.drain_pool.submit(
                OutputDrain(process.stderr, None, "stderr", self.encoding)
            )
        except Exception:
            # Nobody would read the pipes; stop the process before reporting.
            terminate_process_tree(process.pid, "build tool")
            process.wait()
            raise
        return stdout_future, stderr_future

    def _collect(self, future: Future, name: str) -> str:
        """Wait for a drain and return its text, or the error's traceback."""
        try:
            return future.result()
        except Exception as e:
            handle_error(
                error=e,
                context=f"draining {name}",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            return "".join(traceback.format_exception(type(e), e, e.__traceback__))
