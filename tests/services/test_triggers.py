"""
Unit tests for trigger times.

Tests focus on:
- Structural validity per variant
- Conversion to store triggers (including the After fallback)
- Reconstruction from store triggers
"""
import pytest
from datetime import datetime, timedelta, timezone

from notification_handler.services.scheduling.triggers import (
    IMMEDIATE_DELAY,
    NOW,
    After,
    At,
    Every,
    Repeating,
    TriggerTime,
)
from notification_handler.store.base import CalendarTrigger, DateComponents, TimeIntervalTrigger


class TestIsValid:
    """Tests for TriggerTime.is_valid"""

    @pytest.mark.parametrize("interval", [0, -1, -0.5, timedelta(0)])
    def test_after_non_positive_is_invalid(self, interval):
        """After with a non-positive interval is invalid (and does not assert)"""
        assert After(interval).is_valid() is False

    def test_after_positive_is_valid(self):
        assert After(10).is_valid() is True

    @pytest.mark.parametrize("interval", [0, 1, 59, 59.9])
    def test_every_below_floor_is_invalid(self, interval):
        """Every below 60 seconds is invalid"""
        assert Every(interval).is_valid() is False

    def test_every_at_floor_is_valid(self):
        assert Every(60).is_valid() is True
        assert Every(timedelta(hours=1)).is_valid() is True

    def test_at_in_the_past_is_valid(self):
        """Validity never consults the clock"""
        assert At(datetime(2000, 1, 1)).is_valid() is True

    def test_repeating_is_valid(self):
        assert Repeating(DateComponents(hour=9)).is_valid() is True

    def test_now_is_valid(self):
        assert NOW == After(IMMEDIATE_DELAY)
        assert NOW.is_valid() is True


class TestToStoreTrigger:
    """Tests for TriggerTime.to_store_trigger"""

    def test_after_positive(self):
        assert After(10).to_store_trigger() == TimeIntervalTrigger(interval=10.0, repeats=False)

    def test_after_timedelta_is_normalized(self):
        assert After(timedelta(minutes=2)).interval == 120.0

    @pytest.mark.parametrize("interval", [0, -5])
    def test_after_non_positive_falls_back_to_calendar(self, interval, fixed_datetime):
        """Non-positive After resolves to a date just ahead of now instead of raising"""
        trigger = After(interval).to_store_trigger(now=fixed_datetime)

        assert isinstance(trigger, CalendarTrigger)
        assert trigger.repeats is False
        expected = fixed_datetime + timedelta(seconds=IMMEDIATE_DELAY)
        assert trigger.components.to_datetime() == expected

    def test_after_non_positive_without_now_does_not_raise(self):
        trigger = After(0).to_store_trigger()
        assert isinstance(trigger, CalendarTrigger)
        assert trigger.components.is_specific_date()

    def test_every_repeats(self):
        assert Every(3600).to_store_trigger() == TimeIntervalTrigger(interval=3600.0, repeats=True)

    def test_at_resolves_calendar_fields(self):
        date = datetime(2024, 3, 1, 8, 30, 15, 250)
        trigger = At(date).to_store_trigger()

        assert trigger == CalendarTrigger(
            components=DateComponents(
                year=2024, month=3, day=1, hour=8, minute=30, second=15, microsecond=250
            ),
            repeats=False,
        )

    def test_at_aware_date_resolves_to_local_clock(self, local_timezone):
        """12:00 UTC fires at 21:00 on a UTC+9 host, not at local 12:00"""
        trigger = At(datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)).to_store_trigger()

        assert trigger.components == DateComponents(
            year=2030, month=1, day=1, hour=21, minute=0, second=0, microsecond=0
        )

    def test_at_naive_date_is_taken_as_local(self, local_timezone):
        trigger = At(datetime(2030, 1, 1, 12, 0)).to_store_trigger()
        assert trigger.components.hour == 12

    def test_repeating_keeps_pattern(self):
        pattern = DateComponents(hour=9, minute=0)
        assert Repeating(pattern).to_store_trigger() == CalendarTrigger(components=pattern, repeats=True)

    def test_repeat_override(self):
        """A non-None repeats argument overrides the variant's flag"""
        assert At(datetime(2024, 3, 1)).to_store_trigger(repeats=True).repeats is True
        assert Repeating(DateComponents(hour=9)).to_store_trigger(repeats=False).repeats is False
        assert Every(120).to_store_trigger(repeats=False).repeats is False


class TestFromStoreTrigger:
    """Tests for TriggerTime.from_store_trigger"""

    def test_interval_triggers(self):
        assert TriggerTime.from_store_trigger(TimeIntervalTrigger(30)) == After(30)
        assert TriggerTime.from_store_trigger(TimeIntervalTrigger(90, repeats=True)) == Every(90)

    def test_specific_date_becomes_at(self):
        date = datetime(2024, 3, 1, 8, 30)
        assert TriggerTime.from_store_trigger(At(date).to_store_trigger()) == At(date)

    def test_partial_pattern_becomes_repeating(self):
        pattern = DateComponents(weekday=0, hour=9)
        trigger = CalendarTrigger(components=pattern, repeats=True)
        assert TriggerTime.from_store_trigger(trigger) == Repeating(pattern)

    def test_unsupported_trigger(self):
        with pytest.raises(TypeError):
            TriggerTime.from_store_trigger("tomorrow")


class TestDateComponents:
    """Tests for DateComponents matching"""

    def test_matches_partial_pattern(self):
        pattern = DateComponents(hour=9, minute=0)
        assert pattern.matches(datetime(2024, 1, 15, 9, 0, 42)) is True
        assert pattern.matches(datetime(2024, 1, 15, 10, 0)) is False

    def test_matches_weekday(self):
        monday = datetime(2024, 1, 15, 9, 0)
        assert DateComponents(weekday=0).matches(monday) is True
        assert DateComponents(weekday=1).matches(monday) is False

    def test_partial_pattern_has_no_date(self):
        assert DateComponents(day=1).is_specific_date() is False
        assert DateComponents(day=1).to_datetime() is None

    def test_matches_aware_date_on_local_clock(self, local_timezone):
        """An aware instant is matched against local wall-clock fields"""
        noon_utc = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert DateComponents(hour=21).matches(noon_utc) is True
        assert DateComponents(hour=12).matches(noon_utc) is False
