"""
Pytest configuration and shared fixtures for notification handler tests.
"""
import asyncio
import time
import pytest
from datetime import datetime
from typing import Callable, List
from unittest.mock import AsyncMock, MagicMock

from notification_handler.config import NotificationSettings
from notification_handler.services.authorization.service import AuthorizationMonitor
from notification_handler.services.scheduling.service import NotificationLifecycleManager
from notification_handler.store.base import AuthorizationStatus
from notification_handler.store.memory import ForegroundResumeSignal, InMemoryNotificationStore


class RecordingStore(InMemoryNotificationStore):
    """In-memory store that records every call made to it"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: List[str] = []

    async def request_permission(self, options):
        self.calls.append("request_permission")
        return await super().request_permission(options)

    async def current_permission_status(self):
        self.calls.append("current_permission_status")
        return await super().current_permission_status()

    async def add(self, request):
        self.calls.append("add")
        await super().add(request)

    async def pending_requests(self):
        self.calls.append("pending_requests")
        return await super().pending_requests()

    def count(self, name: str) -> int:
        return self.calls.count(name)


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until predicate() is true"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def fixed_datetime():
    """Fixed datetime for deterministic tests"""
    return datetime(2024, 1, 15, 12, 0, 0)


@pytest.fixture
def local_timezone(monkeypatch):
    """Run the test on a host whose local zone is UTC+9 with no DST"""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")
    monkeypatch.setenv("TZ", "JST-9")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def settings():
    """Settings with the background watcher off"""
    return NotificationSettings(monitor_authorization=False)


@pytest.fixture
def resume_signal():
    return ForegroundResumeSignal()


@pytest.fixture
def store():
    """Recording store that grants permission when asked"""
    return RecordingStore()


@pytest.fixture
def authorized_store():
    return RecordingStore(status=AuthorizationStatus.AUTHORIZED)


@pytest.fixture
def denied_store():
    return RecordingStore(status=AuthorizationStatus.DENIED)


@pytest.fixture
def manager(authorized_store, resume_signal, settings):
    return NotificationLifecycleManager(authorized_store, resume_signal, settings=settings)


@pytest.fixture
def monitor(store, resume_signal):
    return AuthorizationMonitor(store, resume_signal)


@pytest.fixture
def mock_store():
    """Spy store: every boundary method is an AsyncMock"""
    mock = MagicMock()
    mock.request_permission = AsyncMock(return_value=True)
    mock.current_permission_status = AsyncMock(return_value=AuthorizationStatus.AUTHORIZED)
    mock.add = AsyncMock()
    mock.pending_requests = AsyncMock(return_value=[])
    mock.delivered_notifications = AsyncMock(return_value=[])
    mock.remove_delivered = AsyncMock()
    mock.remove_pending = AsyncMock()
    mock.remove_all_delivered = AsyncMock()
    mock.remove_all_pending = AsyncMock()
    return mock


@pytest.fixture
def wait():
    return wait_until
