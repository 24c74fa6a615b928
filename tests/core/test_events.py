"""
Unit tests for published values and change events.
"""
import logging

from notification_handler.core.events import EventType, Published
from notification_handler.store.base import AuthorizationStatus


class TestPublished:
    """Tests for Published"""

    def test_first_publication_is_silent(self):
        value = Published(EventType.AUTHORIZATION_STATUS_CHANGED, AuthorizationStatus.NOT_DETERMINED)
        events = []
        value.subscribe(events.append)

        assert value.publish(AuthorizationStatus.AUTHORIZED) is None
        assert value.value == AuthorizationStatus.AUTHORIZED
        assert value.has_published is True
        assert events == []

    def test_second_publication_of_same_value_is_an_event(self):
        value = Published(EventType.AUTHORIZATION_STATUS_CHANGED, AuthorizationStatus.NOT_DETERMINED)
        events = []
        value.subscribe(events.append)

        value.publish(AuthorizationStatus.AUTHORIZED)
        event = value.publish(AuthorizationStatus.AUTHORIZED)

        assert events == [event]
        assert event.event_type is EventType.AUTHORIZATION_STATUS_CHANGED
        assert event.old_value == event.new_value == AuthorizationStatus.AUTHORIZED

    def test_unsubscribe(self):
        value = Published(EventType.MONITORING_TOGGLED, True)
        events = []
        unsubscribe = value.subscribe(events.append)
        value.publish(True)

        unsubscribe()
        value.publish(False)

        assert events == []

    def test_failing_observer_does_not_block_others(self, caplog):
        value = Published(EventType.MONITORING_TOGGLED, True)
        events = []

        def broken(event):
            raise RuntimeError("render failed")

        value.subscribe(broken)
        value.subscribe(events.append)
        value.publish(True)

        with caplog.at_level(logging.ERROR):
            value.publish(False)

        assert len(events) == 1
        assert "Observer failed" in caplog.text

    def test_event_to_dict(self):
        value = Published(EventType.AUTHORIZATION_STATUS_CHANGED, AuthorizationStatus.NOT_DETERMINED)
        value.publish(AuthorizationStatus.AUTHORIZED)

        result = value.publish(AuthorizationStatus.DENIED).to_dict()

        assert result["event_type"] == "authorization_status_changed"
        assert result["old_value"] == "authorized"
        assert result["new_value"] == "denied"
        assert isinstance(result["timestamp"], str)
        assert result["correlation_id"]
