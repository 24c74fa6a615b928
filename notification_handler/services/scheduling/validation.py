"""
Scheduling validation.

Pure checks run before any call into the store or the permission system:
- No store access
- No clock access
- Raise a SchedulingError subclass on failure
"""

import dataclasses
import logging
from typing import Any, Dict, Optional

from notification_handler.services.scheduling.exceptions import (
    InvalidContentError,
    InvalidTitleError,
    InvalidTriggerTimeError,
)
from notification_handler.services.scheduling.triggers import (
    MIN_REPEAT_INTERVAL,
    After,
    Every,
    TriggerTime,
)
from notification_handler.store.base import DEFAULT_SOUND, NotificationContent

logger = logging.getLogger(__name__)


def validate(
    title: Optional[str] = None,
    trigger: Optional[TriggerTime] = None,
    repeats: Optional[bool] = None,
    allow_immediate: bool = False,
) -> None:
    """
    Validate the fields a caller intends to set.

    Fields left as None are not checked.

    Args:
        title: New title
        trigger: New trigger
        repeats: Repeat override that will be applied to trigger
        allow_immediate: Accept a non-positive After, which resolves to
            "now" when converted to a store trigger

    Raises:
        InvalidTitleError: If title is given and empty
        InvalidTriggerTimeError: If trigger is given and structurally invalid,
            or would repeat more often than MIN_REPEAT_INTERVAL
    """
    if title is not None and not title:
        raise InvalidTitleError()
    if trigger is None:
        return

    immediate = allow_immediate and isinstance(trigger, After) and trigger.interval <= 0
    if not immediate and not trigger.is_valid():
        raise InvalidTriggerTimeError()

    # The repeat override can turn a one-shot interval into a repeating one
    if repeats and isinstance(trigger, (After, Every)) and trigger.interval < MIN_REPEAT_INTERVAL:
        logger.debug(
            f"[VALIDATION] Repeating interval must be at least {MIN_REPEAT_INTERVAL:.0f}s, "
            f"got {trigger.interval}"
        )
        raise InvalidTriggerTimeError()


def build_content(
    base: Optional[NotificationContent] = None,
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    body: Optional[str] = None,
    silenced: Optional[bool] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> NotificationContent:
    """
    Merge overrides onto existing content.

    None keeps the current value of a field. silenced=True clears the sound,
    silenced=False sets the default sound. payload replaces user_info.

    Args:
        base: Content to start from (empty content if None)
        title: New title
        subtitle: New subtitle
        body: New body
        silenced: New silenced flag
        payload: New user info

    Returns:
        New NotificationContent; base is not modified

    Raises:
        InvalidContentError: If base is not a NotificationContent
        InvalidTitleError: If the merged title is empty
    """
    if base is None:
        base = NotificationContent()
    elif not isinstance(base, NotificationContent):
        raise InvalidContentError()

    changes: Dict[str, Any] = {}
    if title is not None:
        changes["title"] = title
    if subtitle is not None:
        changes["subtitle"] = subtitle
    if body is not None:
        changes["body"] = body
    if silenced is not None:
        changes["sound"] = None if silenced else DEFAULT_SOUND
    if payload is not None:
        changes["user_info"] = dict(payload)

    content = dataclasses.replace(base, **changes)
    if not content.title:
        raise InvalidTitleError()
    return content
