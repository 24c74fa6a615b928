"""
Notification Store Package

Boundary types for the platform notification store, plus an in-memory store.
"""

from notification_handler.store.base import (
    DEFAULT_SOUND,
    AuthorizationOption,
    AuthorizationStatus,
    CalendarTrigger,
    DateComponents,
    DeliveredNotification,
    NotificationContent,
    NotificationRequest,
    NotificationStore,
    PresentationDelegate,
    PresentationOption,
    ResumeSignal,
    ResumeSubscription,
    StoreTrigger,
    TimeIntervalTrigger,
)

from notification_handler.store.memory import (
    ForegroundResumeSignal,
    InMemoryNotificationStore,
)

__all__ = [
    "DEFAULT_SOUND",
    "AuthorizationOption",
    "AuthorizationStatus",
    "CalendarTrigger",
    "DateComponents",
    "DeliveredNotification",
    "NotificationContent",
    "NotificationRequest",
    "NotificationStore",
    "PresentationDelegate",
    "PresentationOption",
    "ResumeSignal",
    "ResumeSubscription",
    "StoreTrigger",
    "TimeIntervalTrigger",
    "ForegroundResumeSignal",
    "InMemoryNotificationStore",
]
