"""
Scheduling Service Layer

This module coordinates validation, authorization and the notification store
for schedule / update / reschedule / remove / query operations.

Order inside every mutating call:
1. Validation (pure, no store access, no permission prompt)
2. Authorization (status refresh, prompt only if never asked)
3. Store mutation

The store is the source of truth: nothing is cached here and every read
goes to the store. Read-then-write sequences (update) are not atomic.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

from notification_handler.config import NotificationSettings, get_settings
from notification_handler.core.structured_logger import log_event
from notification_handler.services.authorization.service import AuthorizationMonitor
from notification_handler.services.scheduling.exceptions import (
    IdentifierNotFoundError,
    InvalidTriggerForUpdateError,
    NotAuthorizedError,
    SchedulingError,
    UnknownSchedulingError,
    error_message,
)
from notification_handler.services.scheduling.triggers import NOW, TriggerTime
from notification_handler.services.scheduling.validation import build_content, validate
from notification_handler.store.base import (
    AuthorizationStatus,
    CalendarTrigger,
    DeliveredNotification,
    NotificationRequest,
    NotificationStore,
    PresentationOption,
    ResumeSignal,
)

logger = logging.getLogger(__name__)

# Foreground notifications are always shown in full
FOREGROUND_PRESENTATION: FrozenSet[PresentationOption] = frozenset({
    PresentationOption.BADGE,
    PresentationOption.SOUND,
    PresentationOption.BANNER,
    PresentationOption.LIST,
})


# ====================================================================================
# Types
# ====================================================================================

class NotificationScope(str, Enum):
    """Which notification set a removal acts on"""
    DELIVERED = "delivered"
    PENDING = "pending"
    BOTH = "both"

    @property
    def includes_delivered(self) -> bool:
        return self in (NotificationScope.DELIVERED, NotificationScope.BOTH)

    @property
    def includes_pending(self) -> bool:
        return self in (NotificationScope.PENDING, NotificationScope.BOTH)


@dataclass
class NotificationDescriptor:
    """
    Caller-facing description of a notification.

    Attributes:
        title: Primary text, must not be empty
        trigger: When the notification fires
        identifier: Handle for later update/remove (generated if None)
        subtitle: Additional context line
        body: Longer text
        silenced: True to deliver without sound
        payload: Opaque key-value data stored with the notification
        repeats: Overrides the trigger's own repeat flag if not None
    """
    title: str
    trigger: TriggerTime
    identifier: Optional[str] = None
    subtitle: Optional[str] = None
    body: Optional[str] = None
    silenced: bool = False
    payload: Dict[str, Any] = field(default_factory=dict)
    repeats: Optional[bool] = None

    @classmethod
    def from_request(cls, request: NotificationRequest) -> "NotificationDescriptor":
        """Rebuild a descriptor from a pending store request"""
        content = request.content
        if request.trigger is None:
            trigger, repeats = NOW, False
        else:
            trigger, repeats = TriggerTime.from_store_trigger(request.trigger), request.trigger.repeats

        return cls(
            identifier=request.identifier,
            title=content.title,
            subtitle=content.subtitle or None,
            body=content.body or None,
            silenced=content.sound is None,
            payload=dict(content.user_info),
            trigger=trigger,
            repeats=repeats,
        )


UpdateTarget = Union[str, NotificationRequest]


# ====================================================================================
# Lifecycle manager
# ====================================================================================

class NotificationLifecycleManager:
    """
    Schedules, updates and removes local notifications.

    One instance per process; construct it once and inject it where needed.

    Usage:
        manager = NotificationLifecycleManager(store, resume_signal)
        async with manager:
            identifier = await manager.schedule_notification(
                title="Reminder", trigger=After(600)
            )
    """

    def __init__(
        self,
        store: NotificationStore,
        resume_signal: Optional[ResumeSignal] = None,
        *,
        monitor: Optional[AuthorizationMonitor] = None,
        settings: Optional[NotificationSettings] = None,
    ):
        if monitor is None:
            if resume_signal is None:
                raise ValueError("Either resume_signal or monitor must be provided")
            settings = settings or get_settings()
            monitor = AuthorizationMonitor(
                store,
                resume_signal,
                monitoring_enabled=settings.monitor_authorization,
                authorization_options=settings.authorization_options,
            )

        self._store = store
        self.monitor = monitor

        # Receive foreground presentation callbacks
        self._store.delegate = self

        # Watching begins on construction; outside a loop it waits for start()
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("[SCHEDULING] No running event loop, authorization watcher deferred to start()")
        else:
            self.monitor.start()

    async def __aenter__(self) -> "NotificationLifecycleManager":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def start(self) -> None:
        """Start the authorization watcher if monitoring is enabled and it is not running yet."""
        self.monitor.start()

    async def close(self) -> None:
        """Stop the authorization watcher."""
        await self.monitor.stop()

    # ====================================================================================
    # Authorization
    # ====================================================================================

    @property
    def authorization_status(self) -> AuthorizationStatus:
        return self.monitor.authorization_status

    def set_monitoring_enabled(self, enabled: bool) -> None:
        self.monitor.set_monitoring_enabled(enabled)

    async def request_authorization(self) -> AuthorizationStatus:
        """Prompt for permission. Never raises; returns the last known status."""
        return await self.monitor.request_authorization()

    async def _ensure_authorized(self) -> None:
        """
        Re-check authorization for one mutating call.

        Prompts only when the user has never been asked.

        Raises:
            NotAuthorizedError: If the status is anything but AUTHORIZED
            UnknownSchedulingError: If the store fails to report the status
        """
        try:
            status = await self.monitor.refresh()
        except Exception as e:
            raise UnknownSchedulingError(e) from e

        if status == AuthorizationStatus.NOT_DETERMINED:
            status = await self.monitor.request_authorization()

        if status != AuthorizationStatus.AUTHORIZED:
            raise NotAuthorizedError()

    # ====================================================================================
    # Scheduling
    # ====================================================================================

    async def schedule(self, descriptor: NotificationDescriptor) -> str:
        """
        Schedule a notification.

        Args:
            descriptor: What to show and when

        Returns:
            Identifier of the scheduled notification (descriptor.identifier
            or a generated UUID)

        Raises:
            InvalidTitleError, InvalidTriggerTimeError: Before any store call
            NotAuthorizedError: If permission is not granted
            UnknownSchedulingError: If the store rejects the request
        """
        start_time = time.time()
        identifier = descriptor.identifier or str(uuid.uuid4())

        try:
            validate(title=descriptor.title, trigger=descriptor.trigger, repeats=descriptor.repeats)
            content = build_content(
                title=descriptor.title,
                subtitle=descriptor.subtitle,
                body=descriptor.body,
                silenced=descriptor.silenced,
                payload=descriptor.payload,
            )
            await self._ensure_authorized()

            request = NotificationRequest(
                identifier=identifier,
                content=content,
                trigger=descriptor.trigger.to_store_trigger(repeats=descriptor.repeats),
            )
            await self._submit(request)
        except SchedulingError as e:
            self._log_failure("schedule", identifier, e, start_time)
            raise

        self._log_success("schedule", identifier, start_time)
        return identifier

    async def schedule_notification(
        self,
        title: str,
        trigger: TriggerTime = NOW,
        identifier: Optional[str] = None,
        subtitle: Optional[str] = None,
        body: Optional[str] = None,
        silenced: bool = False,
        payload: Optional[Dict[str, Any]] = None,
        repeats: Optional[bool] = None,
    ) -> str:
        """Keyword form of schedule()."""
        return await self.schedule(NotificationDescriptor(
            identifier=identifier,
            title=title,
            subtitle=subtitle,
            body=body,
            silenced=silenced,
            payload=payload or {},
            trigger=trigger,
            repeats=repeats,
        ))

    async def update(
        self,
        target: UpdateTarget,
        *,
        title: Optional[str] = None,
        subtitle: Optional[str] = None,
        body: Optional[str] = None,
        silenced: Optional[bool] = None,
        trigger: Optional[TriggerTime] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Update a pending notification in place.

        Only the fields passed are changed. Without a new trigger the existing
        one is kept, which is only possible for calendar triggers. A new
        After with a non-positive delay fires as soon as possible.

        Args:
            target: Identifier of a pending notification, or the pending request itself
            title, subtitle, body, silenced, payload: New values (None keeps current)
            trigger: New trigger (None keeps the current calendar trigger)

        Returns:
            Identifier of the updated notification

        Raises:
            InvalidTitleError, InvalidTriggerTimeError: Before any store call
            IdentifierNotFoundError: If target is an identifier that is not pending
            InvalidTriggerForUpdateError: If no trigger is given and the current one is not reusable
            InvalidContentError: If the current content cannot be copied
            NotAuthorizedError: If permission is not granted
            UnknownSchedulingError: If the store fails
        """
        start_time = time.time()
        identifier = target.identifier if isinstance(target, NotificationRequest) else target
        logger.debug(f"[SCHEDULING] Update notification request {identifier}")

        try:
            # A non-positive After is resolved to "now" instead of rejected
            validate(title=title, trigger=trigger, allow_immediate=True)

            if isinstance(target, NotificationRequest):
                request = target
            else:
                request = await self._find_pending(target)
                if request is None:
                    raise IdentifierNotFoundError(target)

            if trigger is not None:
                store_trigger = trigger.to_store_trigger()
            elif isinstance(request.trigger, CalendarTrigger):
                store_trigger = request.trigger
            else:
                raise InvalidTriggerForUpdateError()

            content = build_content(
                request.content,
                title=title,
                subtitle=subtitle,
                body=body,
                silenced=silenced,
                payload=payload,
            )
            await self._ensure_authorized()

            await self._submit(NotificationRequest(
                identifier=request.identifier,
                content=content,
                trigger=store_trigger,
            ))
        except SchedulingError as e:
            self._log_failure("update", identifier, e, start_time)
            raise

        self._log_success("update", identifier, start_time)
        return request.identifier

    async def reschedule(self, target: UpdateTarget, trigger: TriggerTime) -> str:
        """Replace only the trigger of a pending notification."""
        return await self.update(target, trigger=trigger)

    async def _submit(self, request: NotificationRequest) -> None:
        try:
            await self._store.add(request)
        except Exception as e:
            raise UnknownSchedulingError(e) from e

    # ====================================================================================
    # Removal
    # ====================================================================================

    async def remove(
        self,
        identifiers: Union[str, Iterable[str]],
        scope: NotificationScope = NotificationScope.BOTH,
    ) -> None:
        """
        Remove notifications by identifier.

        Identifiers that are already gone are ignored.

        Args:
            identifiers: One identifier or several
            scope: Delivered, pending, or both

        Raises:
            UnknownSchedulingError: If the store fails
        """
        if isinstance(identifiers, str):
            identifiers = [identifiers]
        identifiers = list(identifiers)

        try:
            if scope.includes_delivered:
                await self._store.remove_delivered(identifiers)
            if scope.includes_pending:
                await self._store.remove_pending(identifiers)
        except Exception as e:
            error = UnknownSchedulingError(e)
            logger.error(f"[SCHEDULING] remove failed: {error_message(error)}")
            raise error from e

        log_event(
            logger,
            component="scheduling",
            operation="remove",
            outcome="success",
            reason=f"scope={scope.value} count={len(identifiers)}",
            level="debug",
        )

    async def remove_all(self, scope: NotificationScope = NotificationScope.BOTH) -> None:
        """
        Remove every notification in scope.

        Raises:
            UnknownSchedulingError: If the store fails
        """
        try:
            if scope.includes_delivered:
                await self._store.remove_all_delivered()
            if scope.includes_pending:
                await self._store.remove_all_pending()
        except Exception as e:
            error = UnknownSchedulingError(e)
            logger.error(f"[SCHEDULING] remove_all failed: {error_message(error)}")
            raise error from e

        log_event(
            logger,
            component="scheduling",
            operation="remove_all",
            outcome="success",
            reason=f"scope={scope.value}",
        )

    # ====================================================================================
    # Queries
    # ====================================================================================

    async def pending_requests(self) -> List[NotificationRequest]:
        try:
            return await self._store.pending_requests()
        except Exception as e:
            raise UnknownSchedulingError(e) from e

    async def delivered_notifications(self) -> List[DeliveredNotification]:
        try:
            return await self._store.delivered_notifications()
        except Exception as e:
            raise UnknownSchedulingError(e) from e

    async def query(self, identifier: str) -> Optional[NotificationDescriptor]:
        """
        Look up a pending notification.

        Delivered notifications are not returned.

        Returns:
            Descriptor, or None if nothing with this identifier is pending
        """
        request = await self._find_pending(identifier)
        if request is None:
            return None
        return NotificationDescriptor.from_request(request)

    async def _find_pending(self, identifier: str) -> Optional[NotificationRequest]:
        for request in await self.pending_requests():
            if request.identifier == identifier:
                return request
        return None

    # ====================================================================================
    # Foreground presentation
    # ====================================================================================

    async def will_present(self, notification: DeliveredNotification) -> FrozenSet[PresentationOption]:
        """Show notifications in full even while the app is in the foreground."""
        return FOREGROUND_PRESENTATION

    # ====================================================================================
    # Logging
    # ====================================================================================

    @staticmethod
    def _log_success(operation: str, identifier: str, start_time: float) -> None:
        log_event(
            logger,
            component="scheduling",
            operation=operation,
            outcome="success",
            identifier=identifier,
            duration_ms=int((time.time() - start_time) * 1000),
        )

    @staticmethod
    def _log_failure(operation: str, identifier: Optional[str], error: SchedulingError, start_time: float) -> None:
        logger.error(f"[SCHEDULING] {operation} failed for {identifier}: {error_message(error)}")
        log_event(
            logger,
            component="scheduling",
            operation=operation,
            outcome="failed",
            identifier=identifier,
            reason=error.kind.value,
            duration_ms=int((time.time() - start_time) * 1000),
            level="debug",
        )
