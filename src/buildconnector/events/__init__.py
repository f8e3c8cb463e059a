"""
Job lifecycle events and the sinks that receive them.
"""

from .sink import EventRouter, EventSink, LoggingEventSink
from .types import FailureEvent, StartEvent, SuccessEvent

__all__ = [
    "EventSink",
    "EventRouter",
    "LoggingEventSink",
    "StartEvent",
    "SuccessEvent",
    "FailureEvent",
]
