"""
Progress reporting.

The reporter is a synchronous sink: events are delivered to every subscribed
handler as soon as they are reported, with no buffering.
"""

from typing import Callable, List, Optional

from lingostat.models import ProgressEvent, ProgressType
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)

ProgressHandler = Callable[[ProgressEvent], None]


class ProgressReporter:
    """Fan progress events out to subscribed handlers."""

    def __init__(self) -> None:
        self._handlers: List[ProgressHandler] = []

    def subscribe(self, handler: ProgressHandler) -> None:
        """Register a handler for every subsequent event."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: ProgressHandler) -> None:
        """Remove a previously registered handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def report(self, event: ProgressEvent) -> None:
        """Deliver an event to all handlers; handler failures are logged only."""
        logger.debug(event.message, extra={"progress_type": event.type.value, "current_item": event.current_item})
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in progress handler: {e}")

    def emit(
        self,
        type: ProgressType,
        message: str,
        current_item: Optional[str] = None,
        percentage: Optional[float] = None,
    ) -> None:
        """Build and report an event."""
        self.report(
            ProgressEvent(type=type, message=message, current_item=current_item, percentage=percentage)
        )
