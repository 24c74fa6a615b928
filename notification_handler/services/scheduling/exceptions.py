"""
Scheduling Service Domain Exceptions

Closed set of failures raised by the scheduling service layer. None of them
are retried here; callers decide retry policy.
"""

from enum import Enum
from typing import Optional


class SchedulingErrorKind(str, Enum):
    """Failure kinds"""
    NOT_AUTHORIZED = "not_authorized"
    INVALID_TITLE = "invalid_title"
    INVALID_CONTENT = "invalid_content"
    INVALID_TRIGGER_TIME = "invalid_trigger_time"
    INVALID_TRIGGER_FOR_UPDATE = "invalid_trigger_for_update"
    IDENTIFIER_NOT_FOUND = "identifier_not_found"
    UNKNOWN = "unknown"


class SchedulingError(Exception):
    """Base exception for scheduling service errors"""
    kind: SchedulingErrorKind = SchedulingErrorKind.UNKNOWN
    description: str = "The notification could not be scheduled."
    recovery_suggestion: Optional[str] = None

    def __str__(self) -> str:
        return self.description


class NotAuthorizedError(SchedulingError):
    """Raised when notification permission is not granted at mutation time"""
    kind = SchedulingErrorKind.NOT_AUTHORIZED
    description = "Not authorized to send notifications."
    recovery_suggestion = "Try checking the app's current notification authorization status."


class InvalidTitleError(SchedulingError):
    """Raised when the title is empty after merging"""
    kind = SchedulingErrorKind.INVALID_TITLE
    description = "The requested notification title cannot be empty."
    recovery_suggestion = (
        "Use a non-empty title. If you are updating a notification content, "
        "pass None to keep the original."
    )


class InvalidContentError(SchedulingError):
    """Raised when notification content cannot be built"""
    kind = SchedulingErrorKind.INVALID_CONTENT
    description = "The requested notification content is not valid."
    recovery_suggestion = "Check if the title is not empty and the trigger is in the future."


class InvalidTriggerTimeError(SchedulingError):
    """Raised when a trigger fails structural validation"""
    kind = SchedulingErrorKind.INVALID_TRIGGER_TIME
    description = (
        "A trigger cannot be scheduled with a non-positive time interval, "
        "or a repeating interval shorter than 60 seconds."
    )
    recovery_suggestion = "Make sure to use a positive time interval on the trigger."


class InvalidTriggerForUpdateError(SchedulingError):
    """Raised when an update has no usable trigger"""
    kind = SchedulingErrorKind.INVALID_TRIGGER_FOR_UPDATE
    description = (
        "A new trigger or a calendar trigger must originally be set on the "
        "notification request to allow for updates."
    )
    recovery_suggestion = "Make sure these requirements are being fulfilled."


class IdentifierNotFoundError(SchedulingError):
    """Raised when the identifier is not in the pending set"""
    kind = SchedulingErrorKind.IDENTIFIER_NOT_FOUND
    description = "Could not find a notification with the referred identifier."

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(identifier)
        self.identifier = identifier


class UnknownSchedulingError(SchedulingError):
    """Raised when the notification store fails unexpectedly"""
    kind = SchedulingErrorKind.UNKNOWN

    def __init__(self, cause: BaseException):
        super().__init__(cause)
        self.cause = cause

    @property
    def description(self) -> str:
        return (
            "An unknown error occurred while trying to schedule the notification. "
            f"{type(self.cause).__name__}: {self.cause}"
        )


def error_message(error: SchedulingError) -> str:
    """
    Format an error for logs.

    Args:
        error: Scheduling error

    Returns:
        "[kind] description (recovery suggestion)" style message
    """
    message = f"[{error.kind.value}] {error.description}"
    if error.recovery_suggestion:
        message = f"{message} Suggestion: {error.recovery_suggestion}"
    return message
