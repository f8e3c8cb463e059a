"""
Correlation context for submitted jobs.

A caller may tag its work with a correlation id. The dispatcher captures the
id when a job is submitted and installs it again on whichever thread runs
the job, so event sinks can attribute events to the originating caller.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional

_current_context_id: ContextVar[Optional[str]] = ContextVar(
    "buildconnector_context_id", default=None
)


def get_current_context_id() -> Optional[str]:
    """Return the correlation id active on the current thread, if any."""
    return _current_context_id.get()


def set_current_context_id(context_id: Optional[str]) -> Token:
    """Set the correlation id for the current thread; returns a reset token."""
    return _current_context_id.set(context_id)


def reset_current_context_id(token: Token) -> None:
    _current_context_id.reset(token)


@contextmanager
def context_scope(context_id: Optional[str]) -> Iterator[Optional[str]]:
    """
    Make ``context_id`` the current correlation id for the duration of the block.

    Usage:
        with context_scope("request-42"):
            dispatcher.submit(job)
    """
    token = set_current_context_id(context_id)
    try:
        yield context_id
    finally:
        reset_current_context_id(token)
