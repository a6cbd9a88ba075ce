"""Tests for the per-widget tag event notifier."""

import logging
import time

from taginput.core.event_system import (
    TagChangeEventData, TagEventNotifier, TagEventType, TextEventData,
)
from taginput.core.tag_model import TagModel


def _text_event(event_type, text="x"):
    return TextEventData(event_type=event_type, source="test", timestamp=time.time(), text=text)


class TestNotifier:

    def test_fan_out_in_registration_order(self):
        n = TagEventNotifier()
        calls = []
        n.subscribe(TagEventType.BLUR, lambda e: calls.append("first"))
        n.subscribe(TagEventType.BLUR, lambda e: calls.append("second"))
        n.publish(_text_event(TagEventType.BLUR))
        assert calls == ["first", "second"]

    def test_only_matching_type(self):
        n = TagEventNotifier()
        calls = []
        n.subscribe(TagEventType.FOCUS, calls.append)
        n.publish(_text_event(TagEventType.BLUR))
        assert calls == []

    def test_has_subscribers(self):
        n = TagEventNotifier()
        assert not n.has_subscribers(TagEventType.TEXT_CHANGE)
        cb = lambda e: None
        n.subscribe(TagEventType.TEXT_CHANGE, cb)
        assert n.has_subscribers(TagEventType.TEXT_CHANGE)
        n.unsubscribe(TagEventType.TEXT_CHANGE, cb)
        assert not n.has_subscribers(TagEventType.TEXT_CHANGE)

    def test_unsubscribe_unknown_warns(self, caplog):
        n = TagEventNotifier()
        n.subscribe(TagEventType.ADD, lambda e: None)
        with caplog.at_level(logging.WARNING):
            n.unsubscribe(TagEventType.ADD, lambda e: None)
        assert "Callback not found" in caplog.text

    def test_subscriber_error_isolated(self, caplog):
        n = TagEventNotifier()
        calls = []
        n.subscribe(TagEventType.ADD, lambda e: 1 / 0)
        n.subscribe(TagEventType.ADD, calls.append)
        event = TagChangeEventData(event_type=TagEventType.ADD, source="test",
                                   timestamp=time.time(), tag=TagModel("a"))
        with caplog.at_level(logging.ERROR):
            n.publish(event)
        assert calls == [event]
        assert "Error in tag event callback" in caplog.text

    def test_history(self):
        n = TagEventNotifier(history_size=2)
        for event_type in (TagEventType.FOCUS, TagEventType.BLUR, TagEventType.PASTE):
            n.publish(_text_event(event_type))
        assert [e.event_type for e in n.get_event_history()] == [TagEventType.BLUR, TagEventType.PASTE]
        assert len(n.get_event_history(TagEventType.PASTE)) == 1
        n.clear_history()
        assert n.get_event_history() == []
