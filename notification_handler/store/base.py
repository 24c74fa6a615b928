"""
Notification Store Boundary

Types and protocols for the platform notification store this package drives.

The store is an external collaborator:
- It owns the durable set of pending and delivered notifications
- It owns the permission state and the permission prompt
- It calls the registered delegate when a notification is presented in the foreground

Nothing in this package keeps its own copy of store data; every read goes
to the store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Protocol, Union


DEFAULT_SOUND = "default"


# ====================================================================================
# Authorization
# ====================================================================================

class AuthorizationStatus(str, Enum):
    """Permission state for delivering notifications"""
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    AUTHORIZED = "authorized"
    PROVISIONAL = "provisional"
    EPHEMERAL = "ephemeral"
    UNKNOWN = "unknown"  # Status reported by a newer platform than this package knows

    @classmethod
    def parse(cls, raw: Union["AuthorizationStatus", str, None]) -> "AuthorizationStatus":
        """
        Map a raw store value onto a known status.

        Args:
            raw: Status as reported by the store

        Returns:
            Matching AuthorizationStatus, or UNKNOWN if the value is not recognised
        """
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN

    @property
    def debug_description(self) -> str:
        if self is AuthorizationStatus.UNKNOWN:
            return "unable to provide a description"
        return self.value


class AuthorizationOption(str, Enum):
    """Capabilities requested from the permission prompt"""
    ALERT = "alert"
    BADGE = "badge"
    SOUND = "sound"


class PresentationOption(str, Enum):
    """How a notification is shown while the app is in the foreground"""
    BADGE = "badge"
    SOUND = "sound"
    BANNER = "banner"
    LIST = "list"


# ====================================================================================
# Triggers
# ====================================================================================

def _local(date: datetime) -> datetime:
    """Naive local wall-clock time for date"""
    if date.tzinfo is None:
        return date
    return date.astimezone().replace(tzinfo=None)


@dataclass(frozen=True)
class DateComponents:
    """
    Partial calendar pattern.

    Unset fields match any value. With every date and time field set, the
    pattern identifies a single instant.
    """
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    second: Optional[int] = None
    microsecond: Optional[int] = None
    weekday: Optional[int] = None  # Monday == 0, as datetime.weekday()

    @classmethod
    def from_datetime(cls, date: datetime) -> "DateComponents":
        """
        Calendar fields of date on the local wall clock.

        Aware datetimes are converted to the host's local time zone first;
        naive datetimes are taken as local already.
        """
        date = _local(date)
        return cls(
            year=date.year,
            month=date.month,
            day=date.day,
            hour=date.hour,
            minute=date.minute,
            second=date.second,
            microsecond=date.microsecond,
        )

    def is_specific_date(self) -> bool:
        """True if year through second are all set (a single point in time)"""
        return None not in (self.year, self.month, self.day, self.hour, self.minute, self.second)

    def to_datetime(self) -> Optional[datetime]:
        """Resolve a specific-date pattern back to a naive datetime"""
        if not self.is_specific_date():
            return None
        return datetime(
            self.year, self.month, self.day,
            self.hour, self.minute, self.second,
            self.microsecond or 0,
        )

    def matches(self, date: datetime) -> bool:
        """Check if every set field equals the corresponding local wall-clock field of date"""
        date = _local(date)
        for name, value in self.__dict__.items():
            if value is None:
                continue
            actual = date.weekday() if name == "weekday" else getattr(date, name)
            if actual != value:
                return False
        return True


@dataclass(frozen=True)
class TimeIntervalTrigger:
    """Fires after an interval, optionally repeating"""
    interval: float
    repeats: bool = False


@dataclass(frozen=True)
class CalendarTrigger:
    """Fires when wall-clock time matches a calendar pattern"""
    components: DateComponents
    repeats: bool = False


StoreTrigger = Union[TimeIntervalTrigger, CalendarTrigger]


# ====================================================================================
# Requests
# ====================================================================================

@dataclass(frozen=True)
class NotificationContent:
    """What the user sees when a notification fires"""
    title: str = ""
    subtitle: str = ""
    body: str = ""
    sound: Optional[str] = None  # None means silent
    user_info: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationRequest:
    """A notification as submitted to the store"""
    identifier: str
    content: NotificationContent
    trigger: Optional[StoreTrigger] = None


@dataclass(frozen=True)
class DeliveredNotification:
    """A request the store has already presented"""
    request: NotificationRequest
    date: datetime


# ====================================================================================
# Protocols
# ====================================================================================

class PresentationDelegate(Protocol):
    """Receives foreground presentation callbacks from the store"""

    async def will_present(self, notification: DeliveredNotification) -> FrozenSet[PresentationOption]:
        """Decide how to show a notification that arrived in the foreground."""


class NotificationStore(Protocol):
    """Platform notification store"""

    delegate: Optional[PresentationDelegate]

    async def request_permission(self, options: FrozenSet[AuthorizationOption]) -> bool:
        """Show the permission prompt. May raise."""

    async def current_permission_status(self) -> AuthorizationStatus:
        """Return the current permission state."""

    async def add(self, request: NotificationRequest) -> None:
        """Enqueue a request, replacing any pending request with the same identifier. May raise."""

    async def pending_requests(self) -> List[NotificationRequest]:
        """Return requests not yet delivered."""

    async def delivered_notifications(self) -> List[DeliveredNotification]:
        """Return notifications still shown to the user."""

    async def remove_delivered(self, identifiers: Iterable[str]) -> None:
        """Remove delivered notifications with these identifiers."""

    async def remove_pending(self, identifiers: Iterable[str]) -> None:
        """Remove pending requests with these identifiers."""

    async def remove_all_delivered(self) -> None:
        """Remove every delivered notification."""

    async def remove_all_pending(self) -> None:
        """Remove every pending request."""


class ResumeSubscription(Protocol):
    """One subscriber's view of the foreground-resume event source"""

    async def next(self) -> None:
        """Wait for the next foreground-resume signal."""

    def close(self) -> None:
        """Stop receiving signals."""


class ResumeSignal(Protocol):
    """Foreground-resume event source exposed by the host environment"""

    def subscribe(self) -> ResumeSubscription:
        """Start receiving foreground-resume signals."""
