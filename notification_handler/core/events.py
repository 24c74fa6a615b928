"""
Published values and change events.

A Published value is a single-writer, multi-reader holder that notifies
observers when it changes. It backs the authorization status and the
monitoring flag exposed to the host application.

IMPORTANT:
- The first publication is silent (cold-start suppression): observers are
  not told about the initial value
- Every later publication is an event, even if the value is unchanged
- Observers are plain callables; an observer that raises is logged and skipped
"""

import logging
import uuid
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventType(str, Enum):
    """Types of published-value events"""
    AUTHORIZATION_STATUS_CHANGED = "authorization_status_changed"
    MONITORING_TOGGLED = "monitoring_toggled"


@dataclass(frozen=True)
class ChangeEvent(Generic[T]):
    """
    A visible transition of a published value.

    Attributes:
        event_type: What changed
        old_value: Value before the publication
        new_value: Value after the publication
        timestamp: When the publication happened (UTC)
        correlation_id: Identifier for correlating related log lines
    """
    event_type: EventType
    old_value: T
    new_value: T
    timestamp: datetime
    correlation_id: str

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["event_type"] = self.event_type.value
        result["timestamp"] = self.timestamp.isoformat()
        for key in ("old_value", "new_value"):
            value = result[key]
            if isinstance(value, Enum):
                result[key] = value.value
        return result


Observer = Callable[[ChangeEvent[T]], None]


class Published(Generic[T]):
    """
    Observable value with cold-start suppression.

    Usage:
        status = Published(EventType.AUTHORIZATION_STATUS_CHANGED, initial)
        unsubscribe = status.subscribe(lambda event: ...)
        status.publish(new_value)
    """

    def __init__(self, event_type: EventType, initial: T):
        self._event_type = event_type
        self._value = initial
        self._has_published = False
        self._observers: List[Observer] = []

    @property
    def value(self) -> T:
        return self._value

    @property
    def has_published(self) -> bool:
        """True once the first (silent) publication has happened"""
        return self._has_published

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register an observer for change events.

        Args:
            observer: Callable receiving a ChangeEvent

        Returns:
            Callable that removes the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def publish(self, value: T) -> Optional[ChangeEvent[T]]:
        """
        Set a new value.

        Args:
            value: New value

        Returns:
            The ChangeEvent delivered to observers, or None for the silent
            first publication
        """
        old_value = self._value
        self._value = value

        if not self._has_published:
            self._has_published = True
            logger.debug(f"[PUBLISHED] {self._event_type.value} initial value={value!r} (silent)")
            return None

        event = ChangeEvent(
            event_type=self._event_type,
            old_value=old_value,
            new_value=value,
            timestamp=datetime.now(timezone.utc),
            correlation_id=str(uuid.uuid4()),
        )
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception as e:
                logger.error(
                    f"[PUBLISHED] Observer failed for {self._event_type.value}: "
                    f"{type(e).__name__}: {str(e)[:100]}"
                )
                logger.debug("[PUBLISHED] Full traceback for observer failure", exc_info=True)
        return event
