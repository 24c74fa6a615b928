"""
Unit tests for scheduling validation and the error taxonomy.
"""
import pytest

from notification_handler.services.scheduling.exceptions import (
    IdentifierNotFoundError,
    InvalidContentError,
    InvalidTitleError,
    InvalidTriggerTimeError,
    NotAuthorizedError,
    SchedulingError,
    SchedulingErrorKind,
    UnknownSchedulingError,
    error_message,
)
from notification_handler.services.scheduling.triggers import After, Every
from notification_handler.services.scheduling.validation import build_content, validate
from notification_handler.store.base import DEFAULT_SOUND, NotificationContent


class TestValidate:
    """Tests for validate function"""

    def test_nothing_to_check(self):
        validate()

    def test_empty_title(self):
        with pytest.raises(InvalidTitleError):
            validate(title="")

    def test_invalid_trigger(self):
        with pytest.raises(InvalidTriggerTimeError):
            validate(title="Reminder", trigger=Every(30))

    def test_checks_are_independent(self):
        """Each field is only checked when provided"""
        validate(trigger=After(5))
        validate(title="Reminder")
        with pytest.raises(InvalidTriggerTimeError):
            validate(trigger=After(0))

    @pytest.mark.parametrize("interval", [5, 59, 59.9])
    def test_repeat_override_respects_floor(self, interval):
        """Forcing repeats on a short interval is rejected like Every below 60 seconds"""
        with pytest.raises(InvalidTriggerTimeError):
            validate(title="Spam", trigger=After(interval), repeats=True)

    def test_repeat_override_at_floor(self):
        validate(title="Hourly", trigger=After(60), repeats=True)
        validate(title="Hourly", trigger=Every(3600), repeats=True)

    def test_one_shot_override_is_not_limited(self):
        validate(trigger=After(5), repeats=False)
        validate(trigger=Every(120), repeats=False)

    def test_allow_immediate(self):
        """A non-positive After passes only when the caller accepts the immediate fallback"""
        validate(trigger=After(0), allow_immediate=True)
        validate(trigger=After(-3), allow_immediate=True)
        with pytest.raises(InvalidTriggerTimeError):
            validate(trigger=Every(30), allow_immediate=True)


class TestBuildContent:
    """Tests for build_content function"""

    def test_new_content(self):
        content = build_content(title="Reminder", body="Stand up", silenced=False, payload={"a": 1})

        assert content.title == "Reminder"
        assert content.subtitle == ""
        assert content.body == "Stand up"
        assert content.sound == DEFAULT_SOUND
        assert content.user_info == {"a": 1}

    def test_empty_base_without_title(self):
        with pytest.raises(InvalidTitleError):
            build_content(body="No title")

    def test_merge_keeps_unset_fields(self):
        base = NotificationContent(title="Old", subtitle="Sub", body="Body", sound=DEFAULT_SOUND)

        content = build_content(base, body="New body")

        assert content.title == "Old"
        assert content.subtitle == "Sub"
        assert content.body == "New body"
        assert content.sound == DEFAULT_SOUND
        assert base.body == "Body"

    def test_silenced_clears_sound(self):
        base = NotificationContent(title="Old", sound=DEFAULT_SOUND)
        assert build_content(base, silenced=True).sound is None
        assert build_content(base, silenced=False).sound == DEFAULT_SOUND

    def test_merged_title_must_not_be_empty(self):
        """Update path: base title empty and no new title"""
        with pytest.raises(InvalidTitleError):
            build_content(NotificationContent(title=""), body="x")

    def test_foreign_base(self):
        with pytest.raises(InvalidContentError):
            build_content({"title": "dict is not content"}, title="x")


class TestSchedulingErrors:
    """Tests for the error taxonomy"""

    @pytest.mark.parametrize("error", [
        NotAuthorizedError(),
        InvalidTitleError(),
        InvalidContentError(),
        InvalidTriggerTimeError(),
        IdentifierNotFoundError("abc"),
        UnknownSchedulingError(RuntimeError("boom")),
    ])
    def test_every_error_has_description(self, error):
        assert isinstance(error, SchedulingError)
        assert error.description
        assert str(error) == error.description

    def test_unknown_wraps_cause(self):
        cause = RuntimeError("store offline")
        error = UnknownSchedulingError(cause)

        assert error.cause is cause
        assert error.kind is SchedulingErrorKind.UNKNOWN
        assert "store offline" in error.description
        assert error.recovery_suggestion is None

    def test_error_message(self):
        message = error_message(NotAuthorizedError())
        assert message.startswith("[not_authorized]")
        assert "authorization status" in message

    def test_identifier_is_kept(self):
        assert IdentifierNotFoundError("abc").identifier == "abc"
