"""
Event sink interface and the sinks shipped with the connector.

The dispatcher's only side effect is calling an EventSink. How events reach
remote subscribers is up to the sink implementation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..models.job import EventKind
from .types import FailureEvent, StartEvent, SuccessEvent

logger = logging.getLogger(__name__)


class EventSink(ABC):
    """
    Receiver of job lifecycle notifications.
    """

    @abstractmethod
    def raise_start(self, event: StartEvent) -> None:
        """Notify that a job has started."""

    @abstractmethod
    def raise_success(self, event: SuccessEvent) -> None:
        """Notify that a job finished successfully."""

    @abstractmethod
    def raise_failure(self, event: FailureEvent) -> None:
        """Notify that a job failed."""


class EventRouter(EventSink):
    """
    Routes each event to the sink registered for its event kind.

    Kinds without a registered sink fall back to ``default`` when given;
    otherwise the event is dropped with a warning.
    """

    def __init__(
        self,
        sinks: Optional[Dict[EventKind, EventSink]] = None,
        default: Optional[EventSink] = None,
    ):
        self.sinks: Dict[EventKind, EventSink] = dict(sinks or {})
        self.default = default

    def register(self, kind: EventKind, sink: EventSink) -> None:
        self.sinks[kind] = sink

    def _sink_for(self, kind: EventKind) -> Optional[EventSink]:
        sink = self.sinks.get(kind, self.default)
        if sink is None:
            logger.warning(f"No event sink registered for {kind.value} events, dropping event")
        return sink

    def raise_start(self, event: StartEvent) -> None:
        sink = self._sink_for(event.kind)
        if sink is not None:
            sink.raise_start(event)

    def raise_success(self, event: SuccessEvent) -> None:
        sink = self._sink_for(event.kind)
        if sink is not None:
            sink.raise_success(event)

    def raise_failure(self, event: FailureEvent) -> None:
        sink = self._sink_for(event.kind)
        if sink is not None:
            sink.raise_failure(event)


class LoggingEventSink(EventSink):
    """Writes every event to a logger. Used by the command-line interface."""

    def __init__(self, event_logger: Optional[logging.Logger] = None,
                 include_output: bool = False):
        self.logger = event_logger or logger
        self.include_output = include_output

    def raise_start(self, event: StartEvent) -> None:
        self.logger.info(f"{event.kind.value} {event.job_id} started (context: {event.context_id})")

    def raise_success(self, event: SuccessEvent) -> None:
        self.logger.info(f"{event.kind.value} {event.job_id} succeeded, result: {event.result}")
        if self.include_output:
            self.logger.info(f"Output of {event.job_id}:\n{event.output}")

    def raise_failure(self, event: FailureEvent) -> None:
        self.logger.error(f"{event.kind.value} {event.job_id} failed")
        if self.include_output:
            self.logger.error(f"Output of {event.job_id}:\n{event.output}")
