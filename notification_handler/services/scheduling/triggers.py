"""
Trigger times: when a notification fires.

A TriggerTime is a pure value. It never consults the clock to decide
validity; a date in the past is still valid and the store decides whether it
fires immediately.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from notification_handler.store.base import (
    CalendarTrigger,
    DateComponents,
    StoreTrigger,
    TimeIntervalTrigger,
)

logger = logging.getLogger(__name__)

# Smallest delay used for "fire now"
IMMEDIATE_DELAY = 0.1

# Platform floor for repeating interval triggers
MIN_REPEAT_INTERVAL = 60.0

Interval = Union[float, int, timedelta]


def _seconds(interval: Interval) -> float:
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class TriggerTime:
    """Base class of the trigger variants: After, Every, At, Repeating"""

    def is_valid(self) -> bool:
        raise NotImplementedError

    def to_store_trigger(
        self,
        repeats: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> StoreTrigger:
        """
        Convert to the store's trigger representation.

        Args:
            repeats: Overrides the variant's own repeat flag if not None
            now: Reference time for the After fallback (defaults to datetime.now())

        Returns:
            TimeIntervalTrigger or CalendarTrigger
        """
        raise NotImplementedError

    @staticmethod
    def from_store_trigger(trigger: StoreTrigger) -> "TriggerTime":
        """
        Rebuild a TriggerTime from a store trigger.

        Non-repeating calendar triggers naming a single date become At;
        every other calendar trigger becomes Repeating.
        """
        if isinstance(trigger, TimeIntervalTrigger):
            if trigger.repeats:
                return Every(trigger.interval)
            return After(trigger.interval)

        if isinstance(trigger, CalendarTrigger):
            date = trigger.components.to_datetime()
            if not trigger.repeats and date is not None:
                return At(date)
            return Repeating(trigger.components)

        raise TypeError(f"Unsupported store trigger: {type(trigger).__name__}")


@dataclass(frozen=True)
class After(TriggerTime):
    """Fire once after interval seconds"""
    interval: float

    def __post_init__(self):
        object.__setattr__(self, "interval", _seconds(self.interval))

    def is_valid(self) -> bool:
        valid = self.interval > 0
        if not valid:
            logger.debug(f"[TRIGGER] Time interval must be greater than 0, got {self.interval}")
        return valid

    def to_store_trigger(self, repeats=None, now=None):
        if self.interval > 0:
            return TimeIntervalTrigger(interval=self.interval, repeats=bool(repeats))

        # Non-positive delay resolves to a date just ahead of now
        soon = (now or datetime.now()) + timedelta(seconds=IMMEDIATE_DELAY)
        return At(soon).to_store_trigger(repeats=repeats)


@dataclass(frozen=True)
class Every(TriggerTime):
    """Fire every interval seconds (at least MIN_REPEAT_INTERVAL)"""
    interval: float

    def __post_init__(self):
        object.__setattr__(self, "interval", _seconds(self.interval))

    def is_valid(self) -> bool:
        valid = self.interval >= MIN_REPEAT_INTERVAL
        if not valid:
            logger.debug(
                f"[TRIGGER] Repeating interval must be at least {MIN_REPEAT_INTERVAL:.0f}s, "
                f"got {self.interval}"
            )
        return valid

    def to_store_trigger(self, repeats=None, now=None):
        return TimeIntervalTrigger(
            interval=self.interval,
            repeats=True if repeats is None else repeats,
        )


@dataclass(frozen=True)
class At(TriggerTime):
    """Fire once when the local wall clock reaches date (aware dates are converted to local time)"""
    date: datetime

    def is_valid(self) -> bool:
        return True

    def to_store_trigger(self, repeats=None, now=None):
        return CalendarTrigger(
            components=DateComponents.from_datetime(self.date),
            repeats=bool(repeats),
        )


@dataclass(frozen=True)
class Repeating(TriggerTime):
    """Fire whenever the wall clock matches components"""
    components: DateComponents

    def is_valid(self) -> bool:
        return True

    def to_store_trigger(self, repeats=None, now=None):
        return CalendarTrigger(
            components=self.components,
            repeats=True if repeats is None else repeats,
        )


NOW = After(IMMEDIATE_DELAY)
