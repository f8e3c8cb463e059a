"""
Job and outcome data models.

This module defines the unit of work handed to the dispatcher and the
immutable result produced by running it.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

JobId = Union[str, int]


class EventKind(Enum):
    """Routing tag selecting which event channel a job reports to."""

    BUILD = "build"
    TEST = "test"
    DEPLOY = "deploy"


class ExecutionMode(Enum):
    """How the dispatcher runs a submitted job."""

    # Run inline on the caller's thread.
    SYNC = "sync"
    # Queue on the dispatcher's single background worker.
    ASYNC = "async"


@dataclass(frozen=True)
class Job:
    """
    A request to run the build tool against a project directory.

    Jobs are consumed exactly once by the process runner and are never
    persisted or retried.
    """

    # Caller-supplied numeric process id, or a generated UUID string.
    id: JobId
    # Whitespace-delimited argument template, e.g. "clean compile".
    command: str
    # Directory the subprocess executes in.
    working_directory: Path
    event_kind: EventKind = EventKind.BUILD

    @classmethod
    def create(
        cls,
        command: str,
        working_directory: Union[str, Path],
        event_kind: EventKind = EventKind.BUILD,
        job_id: Optional[JobId] = None,
    ) -> "Job":
        """
        Create a job, generating a random unique id when none is supplied.

        Args:
            command: Argument template for the build tool
            working_directory: Project directory to run in
            event_kind: Which event channel reports the job
            job_id: Caller-supplied process id, if any

        Returns:
            A new Job instance
        """
        if job_id is None:
            job_id = str(uuid.uuid4())
        return cls(
            id=job_id,
            command=command,
            working_directory=Path(working_directory),
            event_kind=event_kind,
        )


@dataclass(frozen=True)
class Outcome:
    """
    Result of running one job.

    ``captured_output`` holds the full standard output of the process, or a
    description of the failure when the process could not be launched or
    waited on.
    """

    succeeded: bool
    captured_output: str
    # None when the process never produced an exit status.
    exit_code: Optional[int] = None
    # Rotation-store file holding a copy of the output, if one was written.
    log_file: Optional[Path] = None

    @classmethod
    def failure(cls, description: str) -> "Outcome":
        """Build a failed outcome for an internal error (no exit status)."""
        return cls(succeeded=False, captured_output=description)
