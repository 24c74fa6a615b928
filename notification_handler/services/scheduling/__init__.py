"""
Scheduling Service Package

This package provides trigger times, validation, the error taxonomy and the
notification lifecycle manager.
"""

from notification_handler.services.scheduling.service import (
    FOREGROUND_PRESENTATION,
    NotificationDescriptor,
    NotificationLifecycleManager,
    NotificationScope,
)

from notification_handler.services.scheduling.triggers import (
    IMMEDIATE_DELAY,
    MIN_REPEAT_INTERVAL,
    NOW,
    After,
    At,
    Every,
    Repeating,
    TriggerTime,
)

from notification_handler.services.scheduling.validation import (
    build_content,
    validate,
)

from notification_handler.services.scheduling.exceptions import (
    SchedulingErrorKind,
    SchedulingError,
    NotAuthorizedError,
    InvalidTitleError,
    InvalidContentError,
    InvalidTriggerTimeError,
    InvalidTriggerForUpdateError,
    IdentifierNotFoundError,
    UnknownSchedulingError,
    error_message,
)

__all__ = [
    "FOREGROUND_PRESENTATION",
    "NotificationDescriptor",
    "NotificationLifecycleManager",
    "NotificationScope",
    "IMMEDIATE_DELAY",
    "MIN_REPEAT_INTERVAL",
    "NOW",
    "After",
    "At",
    "Every",
    "Repeating",
    "TriggerTime",
    "build_content",
    "validate",
    "SchedulingErrorKind",
    "SchedulingError",
    "NotAuthorizedError",
    "InvalidTitleError",
    "InvalidContentError",
    "InvalidTriggerTimeError",
    "InvalidTriggerForUpdateError",
    "IdentifierNotFoundError",
    "UnknownSchedulingError",
    "error_message",
]
