"""
Authorization Service Layer

This module watches the notification permission and republishes it to the
host application.

Monitor states:
- IDLE: no background watch
- WATCHING: one watcher loop polls the status, then re-polls on every
  foreground-resume signal until stopped

IMPORTANT:
- Status writes go through one asyncio.Lock (single writer, many readers)
- Stopping is cooperative: the stop flag is checked between iterations, an
  in-flight poll always completes
- At most one permission prompt is in flight; concurrent callers share it
- Permission prompt failures are logged, never raised
"""

import asyncio
import logging
import time
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Set

from notification_handler.config import DEFAULT_AUTHORIZATION_OPTIONS
from notification_handler.core.events import EventType, Published
from notification_handler.core.structured_logger import log_event
from notification_handler.store.base import (
    AuthorizationOption,
    AuthorizationStatus,
    NotificationStore,
    ResumeSignal,
    ResumeSubscription,
)

logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    """Watcher states"""
    IDLE = "idle"
    WATCHING = "watching"


class AuthorizationMonitor:
    """
    Publishes the notification permission status.

    Usage:
        monitor = AuthorizationMonitor(store, resume_signal)
        monitor.status.subscribe(on_change)
        monitor.start()
        ...
        await monitor.stop()
    """

    def __init__(
        self,
        store: NotificationStore,
        resume_signal: ResumeSignal,
        monitoring_enabled: bool = True,
        authorization_options: Iterable[AuthorizationOption] = DEFAULT_AUTHORIZATION_OPTIONS,
    ):
        self._store = store
        self._resume_signal = resume_signal
        self._options: FrozenSet[AuthorizationOption] = frozenset(authorization_options)

        self.status: Published[AuthorizationStatus] = Published(
            EventType.AUTHORIZATION_STATUS_CHANGED,
            AuthorizationStatus.NOT_DETERMINED,
        )
        self.monitoring: Published[bool] = Published(EventType.MONITORING_TOGGLED, monitoring_enabled)
        # Initial flag value is not a toggle
        self.monitoring.publish(monitoring_enabled)

        self._status_lock = asyncio.Lock()
        self._prompt: Optional[asyncio.Future] = None
        self._watch_task: Optional[asyncio.Task] = None
        # Every loop not yet finished, including ones already told to stop
        self._watch_tasks: Set[asyncio.Task] = set()
        self._stop_event: Optional[asyncio.Event] = None

    # ====================================================================================
    # Published state
    # ====================================================================================

    @property
    def authorization_status(self) -> AuthorizationStatus:
        return self.status.value

    @property
    def monitoring_enabled(self) -> bool:
        return self.monitoring.value

    @property
    def state(self) -> MonitorState:
        if self._watch_task is not None and not self._watch_task.done():
            return MonitorState.WATCHING
        return MonitorState.IDLE

    # ====================================================================================
    # Polling
    # ====================================================================================

    async def refresh(self) -> AuthorizationStatus:
        """
        Read the current status from the store and publish it.

        Returns:
            The status just published

        Raises:
            Whatever the store raises from current_permission_status()
        """
        async with self._status_lock:
            previous = self.status.value
            status = AuthorizationStatus.parse(await self._store.current_permission_status())
            self.status.publish(status)

        if status != previous:
            logger.info(
                f"[AUTHORIZATION] Status changed: {previous.debug_description} -> "
                f"{status.debug_description}"
            )
        return status

    async def request_authorization(
        self,
        options: Optional[Iterable[AuthorizationOption]] = None,
    ) -> AuthorizationStatus:
        """
        Show the permission prompt, then refresh the status.

        If a prompt is already in flight, waits for it instead of starting
        another. Never raises: on failure the status is left unchanged.

        Args:
            options: Capabilities to request (defaults to the configured options)

        Returns:
            The last published status
        """
        if self._prompt is None or self._prompt.done():
            requested = frozenset(options) if options is not None else self._options
            self._prompt = asyncio.ensure_future(self._run_prompt(requested))
        else:
            logger.debug("[AUTHORIZATION] Permission prompt already in flight, waiting for it")

        await asyncio.shield(self._prompt)
        return self.status.value

    async def _run_prompt(self, options: FrozenSet[AuthorizationOption]) -> None:
        start_time = time.time()
        try:
            granted = await self._store.request_permission(options)
        except Exception as e:
            logger.error(
                f"[AUTHORIZATION] Notification authorization request error: "
                f"{type(e).__name__}: {str(e)[:100]}"
            )
            logger.debug("[AUTHORIZATION] Full traceback for authorization request", exc_info=True)
            log_event(
                logger,
                component="authorization",
                operation="request_permission",
                outcome="failed",
                reason=type(e).__name__,
                duration_ms=int((time.time() - start_time) * 1000),
                level="debug",
            )
            return

        try:
            await self.refresh()
        except Exception as e:
            logger.error(
                f"[AUTHORIZATION] Status refresh after prompt failed: "
                f"{type(e).__name__}: {str(e)[:100]}"
            )
            return

        log_event(
            logger,
            component="authorization",
            operation="request_permission",
            outcome="success",
            reason=f"granted={granted} status={self.status.value.value}",
            duration_ms=int((time.time() - start_time) * 1000),
        )

    # ====================================================================================
    # Watcher loop
    # ====================================================================================

    def start(self) -> None:
        """Enter WATCHING if monitoring is enabled and no loop is running."""
        if self.monitoring_enabled and self.state is MonitorState.IDLE:
            self._start_watching()

    def set_monitoring_enabled(self, enabled: bool) -> None:
        """
        Toggle monitoring.

        The running loop (if any) is told to stop before a new one starts,
        so two loops never keep iterating side by side. The retired loop is
        collected by stop().

        Args:
            enabled: New flag value
        """
        self.monitoring.publish(enabled)
        self._stop_watching()
        if enabled:
            self._start_watching()

    async def stop(self) -> None:
        """
        Stop watching and wait for every loop to finish its current poll.

        Loops retired earlier by set_monitoring_enabled() are awaited too.
        """
        self._stop_watching()
        tasks = list(self._watch_tasks)
        self._watch_tasks.clear()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                self._log_crash(e)

    def _start_watching(self) -> None:
        self._reap_finished_loops()
        stop_event = asyncio.Event()
        self._stop_event = stop_event
        task = asyncio.create_task(
            self._watch(stop_event),
            name="authorization-monitor",
        )
        self._watch_task = task
        self._watch_tasks.add(task)
        logger.info("[AUTHORIZATION] Monitoring started")

    def _reap_finished_loops(self) -> None:
        """Collect results of retired loops that already exited."""
        for task in [task for task in self._watch_tasks if task.done()]:
            self._watch_tasks.discard(task)
            if not task.cancelled() and task.exception() is not None:
                self._log_crash(task.exception())

    @staticmethod
    def _log_crash(error: BaseException) -> None:
        logger.error(
            f"[AUTHORIZATION] Watch loop crashed: {type(error).__name__}: {str(error)[:100]}"
        )

    def _stop_watching(self) -> Optional[asyncio.Task]:
        task = self._watch_task
        if self._stop_event is not None:
            self._stop_event.set()
        self._watch_task = None
        self._stop_event = None
        if task is not None:
            logger.info("[AUTHORIZATION] Monitoring stopped")
        return task

    async def _watch(self, stop_event: asyncio.Event) -> None:
        # Subscribe before the first poll so a resume during it is not lost
        subscription = self._resume_signal.subscribe()
        iteration_number = 0
        try:
            while not stop_event.is_set():
                iteration_number += 1
                try:
                    await self.refresh()
                except Exception as e:
                    logger.error(
                        f"[AUTHORIZATION] Status poll failed (iteration {iteration_number}): "
                        f"{type(e).__name__}: {str(e)[:100]}"
                    )
                    logger.debug("[AUTHORIZATION] Full traceback for status poll", exc_info=True)

                if not await self._wait_for_resume(subscription, stop_event):
                    break
        finally:
            subscription.close()
            logger.debug(f"[AUTHORIZATION] Watch loop exited after {iteration_number} iterations")

    @staticmethod
    async def _wait_for_resume(subscription: ResumeSubscription, stop_event: asyncio.Event) -> bool:
        """
        Wait for the next resume signal or the stop flag.

        Returns:
            True if a resume signal arrived and the loop should poll again
        """
        next_signal = asyncio.ensure_future(subscription.next())
        stopped = asyncio.ensure_future(stop_event.wait())
        try:
            await asyncio.wait({next_signal, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in (next_signal, stopped):
                if not waiter.done():
                    waiter.cancel()
            await asyncio.gather(next_signal, stopped, return_exceptions=True)

        return next_signal.done() and not next_signal.cancelled() and not stop_event.is_set()
