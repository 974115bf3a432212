"""In-process event bus and shared error state for services."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import UUID

from shared_visions.domain.errors import SharedVisionsError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceEvent:
    """State change published by a service."""

    kind: str
    entity_id: UUID | None = None
    payload: object | None = None


Subscriber = Callable[[ServiceEvent], None]


@dataclass
class EventBus:
    """Synchronous fan-out of service events to subscribers."""

    _subscribers: list[Subscriber] = field(default_factory=list)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback and return a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: ServiceEvent) -> None:
        """Deliver an event to every subscriber."""
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                _logger.exception("Event subscriber failed for %s", event.kind)


@dataclass
class ObservableService:
    """Base for services exposing the most recent error and an event bus."""

    events: EventBus = field(default_factory=EventBus, kw_only=True)
    error_message: str | None = field(default=None, kw_only=True)

    def _record_error(self, exc: Exception, action: str) -> None:
        """Log a failure, expose its message and notify subscribers."""
        logger = logging.getLogger(type(self).__module__)
        if isinstance(exc, SharedVisionsError):
            logger.warning("%s failed: %s", action, exc)
        else:
            logger.exception("%s failed", action)
        self._report(str(exc))

    def _report(self, message: str) -> None:
        """Expose an error message and notify subscribers."""
        self.error_message = message
        self.events.publish(ServiceEvent(kind="error", payload=message))
