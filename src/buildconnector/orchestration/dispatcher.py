"""
Job dispatching and lifecycle event emission.

The JobDispatcher is the public engine of the connector. It accepts jobs,
runs them inline or on its single background worker, and reports each one
to the event sink as exactly one start event followed by exactly one
terminal event.
"""

import logging
import threading
import traceback
from typing import Any, Callable, Dict, List, Optional

from ..events import EventSink, FailureEvent, StartEvent, SuccessEvent
from ..executor import ManagedThreadPoolExecutor, ProcessRunner, ThreadPoolConfig
from ..models.config import ConnectorConfig
from ..models.job import EventKind, ExecutionMode, Job, JobId, Outcome
from ..system.artifacts import resolve_artifact_version
from ..system.commands import build_argument_vector
from ..validation import ErrorSeverity, handle_error
from .context import context_scope, get_current_context_id
from .log_rotation import LogRotationStore

logger = logging.getLogger(__name__)


class JobDispatcher:
    """
    Runs build tool jobs and raises their lifecycle events.

    The dispatcher owns two pools with an explicit lifecycle:

    - a single-slot job worker: asynchronous jobs queue behind each other and
      run in submission order, one at a time;
    - a drain pool used only to read process output streams.

    Process execution is also guarded by a lock, so a synchronous caller and
    the background worker never run two build tool processes at once through
    the same dispatcher.

    Usage:
        with JobDispatcher(config, sink) as dispatcher:
            job_id = dispatcher.submit(Job.create("clean compile", project_dir))
    """

    def __init__(
        self,
        config: ConnectorConfig,
        event_sink: EventSink,
        executable: Optional[str] = None,
        runner: Optional[ProcessRunner] = None,
    ):
        """
        Initialize the dispatcher. Call start() before submitting jobs.

        Args:
            config: Validated connector configuration
            event_sink: Receiver of start/success/failure events
            executable: Resolved build tool path, defaults to config.executable
            runner: Process runner to use; one bound to the dispatcher's
                drain pool and log store is created when omitted
        """
        self.config = config
        self.event_sink = event_sink
        self.executable = executable or config.executable

        self.job_worker = ManagedThreadPoolExecutor(
            ThreadPoolConfig(
                max_workers=1,
                thread_name_prefix="JobWorker",
                shutdown_timeout=config.shutdown_timeout,
            )
        )
        self.drain_pool = ManagedThreadPoolExecutor(
            ThreadPoolConfig(
                max_workers=config.drain_workers,
                thread_name_prefix="OutputDrain",
                shutdown_timeout=config.shutdown_timeout,
            )
        )
        self.log_store: Optional[LogRotationStore] = None
        if config.use_log_file:
            self.log_store = LogRotationStore(
                config.log_dir, prefix=config.log_prefix, max_files=config.max_log_files
            )
        self.runner = runner or ProcessRunner(self.drain_pool, self.log_store)

        self.is_started = False
        self._run_lock = threading.Lock()
        # Guards is_started and the count of jobs running on caller threads.
        self._lifecycle = threading.Condition()
        self._inline_jobs = 0

    def start(self) -> None:
        """
        Start the job worker and drain pool.

        Raises:
            RuntimeError: If the dispatcher was already started
        """
        with self._lifecycle:
            if self.is_started:
                raise RuntimeError("Dispatcher already started")
            self.drain_pool.start()
            self.job_worker.start()
            self.is_started = True
        logger.info(f"Job dispatcher started for executable '{self.executable}'")

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting jobs and release the worker threads.

        Jobs already accepted are never cancelled and always run to
        completion; the drain pool is released only after the last of them.

        Args:
            wait: Block until every accepted job has finished. A warning is
                logged every ``config.shutdown_timeout`` seconds while jobs
                are still running. Without waiting, the pools are released in
                the background once the queued jobs are done.
        """
        with self._lifecycle:
            if not self.is_started:
                return
            self.is_started = False

        if wait:
            self._wait_for_jobs()
            self.job_worker.shutdown(wait=True)
            self.drain_pool.shutdown(wait=True)
            logger.info("Job dispatcher shutdown")
        else:
            # The worker is FIFO, so this runs after every queued job.
            self.job_worker.submit(self._release_drain_pool)
            self.job_worker.shutdown(wait=False)
            logger.info("Job dispatcher shutdown initiated")

    def _wait_for_jobs(self) -> None:
        interval = self.config.shutdown_timeout
        while not self.job_worker.wait_idle(interval):
            logger.warning(f"Still waiting for queued jobs after {interval}s")
        with self._lifecycle:
            while not self._lifecycle.wait_for(lambda: self._inline_jobs == 0, timeout=interval):
                logger.warning(f"Still waiting for {self._inline_jobs} synchronous jobs")

    def _release_drain_pool(self) -> None:
        with self._lifecycle:
            self._lifecycle.wait_for(lambda: self._inline_jobs == 0)
        self.drain_pool.shutdown(wait=True)
        logger.debug("Drain pool released after the last queued job")

    def submit(
        self,
        job: Job,
        mode: Optional[ExecutionMode] = None,
        context_id: Optional[str] = None,
    ) -> JobId:
        """
        Run a job and report it through the event sink.

        Args:
            job: The job to run
            mode: SYNC to run on the calling thread, ASYNC to queue it on the
                background worker; defaults to ``config.synchronous``
            context_id: Correlation id for the job's events; defaults to the
                caller's current correlation id

        Returns:
            The job id. In SYNC mode both events have been raised when this
            returns; in ASYNC mode they are raised later on the worker thread.

        Raises:
            RuntimeError: If the dispatcher is not started
        """
        if mode is None:
            mode = ExecutionMode.SYNC if self.config.synchronous else ExecutionMode.ASYNC
        if context_id is None:
            context_id = get_current_context_id()
        command = build_argument_vector(self.executable, job.command)

        # Accept the job atomically with respect to shutdown().
        with self._lifecycle:
            if not self.is_started:
                raise RuntimeError("Dispatcher not started")
            logger.info(f"Submitting {job.event_kind.value} job {job.id} ({mode.value})")
            if mode is ExecutionMode.ASYNC:
                self.job_worker.submit(self._run_job, job, command, context_id)
                return job.id
            self._inline_jobs += 1

        try:
            self._run_job(job, command, context_id)
        finally:
            with self._lifecycle:
                self._inline_jobs -= 1
                self._lifecycle.notify_all()
        return job.id

    execute = submit

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        """Return usage statistics of the job worker and the drain pool."""
        return {
            "job_worker": self.job_worker.get_stats(),
            "drain_pool": self.drain_pool.get_stats(),
        }

    def _run_job(self, job: Job, command: List[str], context_id: Optional[str]) -> Outcome:
        with context_scope(context_id):
            outcome = self._execute_command(job, command)
            self._emit_events(job, outcome, context_id)
        return outcome

    def _execute_command(self, job: Job, command: List[str]) -> Outcome:
        """Run the process; any error becomes a failed Outcome."""
        try:
            with self._run_lock:
                return self.runner.run(command, job.working_directory)
        except Exception as e:
            handle_error(
                error=e,
                context=f"running {job.event_kind.value} job {job.id}",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            return Outcome.failure(
                "".join(traceback.format_exception(type(e), e, e.__traceback__))
            )

    def _emit_events(self, job: Job, outcome: Outcome, context_id: Optional[str]) -> None:
        # Resolved before the start event so nothing can raise between the two.
        result = self._success_result(job) if outcome.succeeded else None
        self._notify(
            self.event_sink.raise_start,
            StartEvent(job_id=job.id, kind=job.event_kind, context_id=context_id),
        )
        if outcome.succeeded:
            self._notify(
                self.event_sink.raise_success,
                SuccessEvent(
                    job_id=job.id,
                    kind=job.event_kind,
                    output=outcome.captured_output,
                    result=result,
                    context_id=context_id,
                ),
            )
        else:
            self._notify(
                self.event_sink.raise_failure,
                FailureEvent(
                    job_id=job.id,
                    kind=job.event_kind,
                    output=outcome.captured_output,
                    context_id=context_id,
                ),
            )

    def _notify(self, raise_event: Callable[[Any], None], event: Any) -> None:
        # A misbehaving sink must not suppress the events that follow.
        try:
            raise_event(event)
        except Exception as e:
            handle_error(
                error=e,
                context=f"raising {type(event).__name__} for job {event.job_id}",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )

    @staticmethod
    def _success_result(job: Job) -> Optional[str]:
        if job.event_kind is not EventKind.DEPLOY:
            return str(job.working_directory)
        try:
            return resolve_artifact_version(job.working_directory)
        except Exception as e:
            handle_error(
                error=e,
                context=f"resolving artifact version for job {job.id}",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return None

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown(wait=True)
