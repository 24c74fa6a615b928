"""
Local notification lifecycle manager.

Schedules, updates and removes time-triggered local notifications through a
platform notification store, and keeps the notification permission status
published for the host application.
"""

from notification_handler.core.logging_config import setup_logging
from notification_handler.services.authorization import AuthorizationMonitor, MonitorState
from notification_handler.services.scheduling import (
    NOW,
    After,
    At,
    Every,
    IdentifierNotFoundError,
    InvalidContentError,
    InvalidTitleError,
    InvalidTriggerForUpdateError,
    InvalidTriggerTimeError,
    NotAuthorizedError,
    NotificationDescriptor,
    NotificationLifecycleManager,
    NotificationScope,
    Repeating,
    SchedulingError,
    TriggerTime,
    UnknownSchedulingError,
)
from notification_handler.store import (
    AuthorizationStatus,
    DateComponents,
    ForegroundResumeSignal,
    InMemoryNotificationStore,
    NotificationStore,
)

__all__ = [
    "AuthorizationMonitor",
    "MonitorState",
    "NOW",
    "After",
    "At",
    "Every",
    "Repeating",
    "TriggerTime",
    "NotificationDescriptor",
    "NotificationLifecycleManager",
    "NotificationScope",
    "SchedulingError",
    "NotAuthorizedError",
    "InvalidTitleError",
    "InvalidContentError",
    "InvalidTriggerTimeError",
    "InvalidTriggerForUpdateError",
    "IdentifierNotFoundError",
    "UnknownSchedulingError",
    "AuthorizationStatus",
    "DateComponents",
    "ForegroundResumeSignal",
    "InMemoryNotificationStore",
    "NotificationStore",
    "setup_logging",
]
