"""
Lifecycle event types raised by the dispatcher.

Every job produces exactly one StartEvent followed by exactly one terminal
event (SuccessEvent or FailureEvent).
"""

from dataclasses import dataclass
from typing import Optional

from ..models.job import EventKind, JobId


@dataclass(frozen=True)
class StartEvent:
    """Raised once per job before its terminal event."""

    job_id: JobId
    kind: EventKind
    # Correlation id of the submitting caller, if one was set.
    context_id: Optional[str] = None


@dataclass(frozen=True)
class SuccessEvent:
    """
    Raised when the build tool exited with status zero.

    ``result`` is the working directory for build and test jobs, and the
    resolved artifact version for deploy jobs.
    """

    job_id: JobId
    kind: EventKind
    output: str
    result: Optional[str] = None
    context_id: Optional[str] = None


@dataclass(frozen=True)
class FailureEvent:
    """Raised when the build tool failed or could not be run at all."""

    job_id: JobId
    kind: EventKind
    output: str
    context_id: Optional[str] = None
