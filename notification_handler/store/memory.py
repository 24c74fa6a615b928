"""
In-memory notification store and foreground-resume signal.

Implements the store boundary without a platform behind it. Used by tests
and by hosts that want to drive the lifecycle manager directly.

IMPORTANT:
- Nothing is delivered on a timer; call deliver() or deliver_due() to present
  pending requests
- Permission prompt outcome is fixed by the constructor (grant or deny)
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from notification_handler.store.base import (
    AuthorizationOption,
    AuthorizationStatus,
    CalendarTrigger,
    DeliveredNotification,
    NotificationRequest,
    PresentationDelegate,
    PresentationOption,
)

logger = logging.getLogger(__name__)


class InMemoryNotificationStore:
    """
    Dictionary-backed notification store.

    Pending requests are keyed by identifier, so adding a request with an
    existing identifier replaces it (same as the platform store).
    """

    def __init__(
        self,
        status: AuthorizationStatus = AuthorizationStatus.NOT_DETERMINED,
        grant_on_request: bool = True,
    ):
        self.delegate: Optional[PresentationDelegate] = None
        self.in_foreground = True
        self._status = status
        self._grant_on_request = grant_on_request
        self._pending: Dict[str, NotificationRequest] = {}
        self._delivered: Dict[str, DeliveredNotification] = {}
        self.permission_requests = 0
        self.presentations: Dict[str, FrozenSet[PresentationOption]] = {}

    def set_status(self, status: AuthorizationStatus) -> None:
        """Simulate the user changing the permission in system settings"""
        self._status = status

    # ---------------------------------------------------------------- permission

    async def request_permission(self, options: FrozenSet[AuthorizationOption]) -> bool:
        self.permission_requests += 1
        if self._status == AuthorizationStatus.NOT_DETERMINED:
            self._status = (
                AuthorizationStatus.AUTHORIZED if self._grant_on_request
                else AuthorizationStatus.DENIED
            )
            logger.debug(f"[MEMORY_STORE] Permission prompt answered: {self._status.value}")
        return self._status == AuthorizationStatus.AUTHORIZED

    async def current_permission_status(self) -> AuthorizationStatus:
        return self._status

    # ---------------------------------------------------------------- requests

    async def add(self, request: NotificationRequest) -> None:
        self._pending[request.identifier] = request

    async def pending_requests(self) -> List[NotificationRequest]:
        return list(self._pending.values())

    async def delivered_notifications(self) -> List[DeliveredNotification]:
        return list(self._delivered.values())

    async def remove_delivered(self, identifiers: Iterable[str]) -> None:
        for identifier in identifiers:
            self._delivered.pop(identifier, None)

    async def remove_pending(self, identifiers: Iterable[str]) -> None:
        for identifier in identifiers:
            self._pending.pop(identifier, None)

    async def remove_all_delivered(self) -> None:
        self._delivered.clear()

    async def remove_all_pending(self) -> None:
        self._pending.clear()

    # ---------------------------------------------------------------- delivery

    async def deliver(self, identifier: str, now: Optional[datetime] = None) -> DeliveredNotification:
        """
        Present a pending request as if its trigger fired.

        Non-repeating requests leave the pending set; repeating ones stay.
        If the app is in the foreground the delegate is asked how to present it.

        Args:
            identifier: Identifier of a pending request
            now: Delivery time (defaults to datetime.now(timezone.utc))

        Returns:
            The delivered notification

        Raises:
            KeyError: If no pending request has this identifier
        """
        request = self._pending[identifier]
        if request.trigger is None or not request.trigger.repeats:
            del self._pending[identifier]

        delivered = DeliveredNotification(
            request=request,
            date=now or datetime.now(timezone.utc),
        )
        self._delivered[identifier] = delivered

        if self.in_foreground and self.delegate is not None:
            self.presentations[identifier] = await self.delegate.will_present(delivered)
        return delivered

    def due(self, now: datetime) -> List[NotificationRequest]:
        """
        Pending calendar requests whose pattern matches now.

        Interval triggers carry no reference date here, so they are never
        due on their own; deliver them by identifier.
        """
        return [
            request for request in self._pending.values()
            if isinstance(request.trigger, CalendarTrigger) and request.trigger.components.matches(now)
        ]

    async def deliver_due(self, now: Optional[datetime] = None) -> List[DeliveredNotification]:
        """
        Deliver every pending calendar request that matches now.

        Args:
            now: Wall-clock time to match against (defaults to datetime.now())

        Returns:
            Notifications delivered by this call
        """
        now = now or datetime.now()
        delivered = []
        for request in self.due(now):
            delivered.append(await self.deliver(request.identifier, now=now))
        if delivered:
            logger.debug(f"[MEMORY_STORE] Delivered {len(delivered)} due notification(s)")
        return delivered


class _QueueSubscription:
    """Subscription backed by an asyncio.Queue"""

    def __init__(self, signal: "ForegroundResumeSignal"):
        self._signal = signal
        self._queue: "asyncio.Queue[None]" = asyncio.Queue()

    def push(self) -> None:
        self._queue.put_nowait(None)

    async def next(self) -> None:
        await self._queue.get()

    def close(self) -> None:
        self._signal._unsubscribe(self)


class ForegroundResumeSignal:
    """
    Broadcasts "app returned to the foreground" to every subscriber.

    Signals emitted while nobody is subscribed are dropped.
    """

    def __init__(self):
        self._subscribers: Set[_QueueSubscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> _QueueSubscription:
        subscription = _QueueSubscription(self)
        self._subscribers.add(subscription)
        return subscription

    def _unsubscribe(self, subscription: _QueueSubscription) -> None:
        self._subscribers.discard(subscription)

    def emit(self) -> None:
        for subscription in list(self._subscribers):
            subscription.push()
