"""Tests for splitting pasted text into tags."""

import re

from taginput.core.event_system import TagEventType
from taginput.core.paste import split_pasted

from conftest import EventRecorder


def _values(controller):
    return [t.value for t in controller.items]


class TestSplit:

    def test_literal(self):
        assert split_pasted("a,b,,c", ",") == ["a", "b", "", "c"]

    def test_regex(self):
        assert split_pasted("a, b;c", re.compile(r"[,;]\s*")) == ["a", "b", "c"]

    def test_empty_pattern_keeps_text_whole(self):
        assert split_pasted("a,b", "") == ["a,b"]


class TestPaste:

    def test_duplicates_rejected_individually(self, make_controller, scheduler):
        c = make_controller(add_on_paste=True)
        rec = EventRecorder(c)
        assert c.paste("a,b,a,c") is True
        assert _values(c) == ["a", "b", "c"]
        assert rec.of(TagEventType.VALIDATION_ERROR) == ["a"]
        assert rec.of(TagEventType.PASTE) == ["a,b,a,c"]

    def test_paste_event_after_adds(self, make_controller):
        c = make_controller(add_on_paste=True)
        rec = EventRecorder(c)
        c.paste("x,y")
        assert rec.kinds() == [TagEventType.ADD, TagEventType.ADD, TagEventType.PASTE]

    def test_buffer_cleared_on_next_tick(self, make_controller, scheduler, input_view):
        c = make_controller(add_on_paste=True)
        c.set_text("a,b")
        c.paste("a,b")
        assert c.text == "a,b"
        scheduler.advance(0)
        assert c.text == ""
        assert input_view.text == ""
        assert input_view.focus_requests == 1

    def test_transform_per_piece(self, make_controller):
        c = make_controller(add_on_paste=True, transform=str.strip)
        c.paste(" a , b ,  ")
        assert _values(c) == ["a", "b"]

    def test_capacity_stops_later_pieces(self, make_controller):
        c = make_controller(add_on_paste=True, max_items=2)
        rec = EventRecorder(c)
        c.paste("a,b,c,d")
        assert _values(c) == ["a", "b"]
        assert rec.of(TagEventType.VALIDATION_ERROR) == ["c", "d"]
        assert len(rec.of(TagEventType.PASTE)) == 1

    def test_regex_pattern(self, make_controller):
        c = make_controller(add_on_paste=True, paste_split_pattern=re.compile(r"\s*[;,]\s*"))
        c.paste("one; two,three")
        assert _values(c) == ["one", "two", "three"]

    def test_disabled_without_add_on_paste(self, make_controller, scheduler):
        c = make_controller()
        rec = EventRecorder(c)
        assert c.paste("a,b") is False
        assert _values(c) == []
        assert rec.events == []
        assert scheduler.pending == []

    def test_destroy_cancels_deferred_clear(self, make_controller, scheduler):
        c = make_controller(add_on_paste=True)
        c.set_text("typed")
        c.paste("a")
        c.destroy()
        scheduler.advance(0)
        assert c.text == "typed"

    def test_only_from_autocomplete_rejects_paste(self, make_controller):
        c = make_controller(add_on_paste=True, only_from_autocomplete=True)
        rec = EventRecorder(c)
        c.paste("a,b")
        assert _values(c) == []
        assert rec.of(TagEventType.VALIDATION_ERROR) == ["a", "b"]
