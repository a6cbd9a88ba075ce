"""Tests for TagCollectionStore: ordering, uniqueness, selection and seeding."""

import logging

import pytest

from taginput.config.options import MAX_ITEMS_WARNING
from taginput.core.tag_model import TagModel
from taginput.core.tag_store import InputBuffer, TagCollectionStore


def _store(values=(), **kwargs):
    store = TagCollectionStore(**kwargs)
    for value in values:
        store.add(TagModel(value))
    return store


class TestQueries:

    def test_order_preserved(self):
        store = _store(["b", "a", "c"])
        assert [t.value for t in store] == ["b", "a", "c"]
        assert store.last == TagModel("c")

    def test_items_is_a_copy(self):
        store = _store(["a"])
        store.items.append(TagModel("x"))
        assert len(store) == 1

    def test_contains_accepts_str_and_model(self):
        store = _store(["a"])
        assert "a" in store
        assert TagModel("a", display="A") in store
        assert "b" not in store

    def test_index_of(self):
        store = _store(["a", "b"])
        assert store.index_of("b") == 1
        assert store.index_of("z") == -1

    def test_max_items_reached(self):
        assert not _store(["a"]).max_items_reached
        assert _store(["a", "b"], capacity=2).max_items_reached


class TestMutations:

    def test_add_duplicate_raises(self):
        store = _store(["a"])
        with pytest.raises(ValueError):
            store.add(TagModel("a", display="other"))

    def test_remove_clears_selection(self):
        store = _store(["a", "b"])
        store.select("b")
        removed = store.remove("b")
        assert removed == TagModel("b")
        assert store.selected is None

    def test_remove_missing_or_none(self):
        store = _store(["a"])
        assert store.remove(None) is None
        assert store.remove("z") is None
        assert len(store) == 1

    def test_readonly_blocks_remove_and_select(self):
        store = _store(["a"], readonly=True)
        assert store.remove("a") is None
        assert store.select("a") is False
        assert len(store) == 1

    def test_select_reports_change(self):
        store = _store(["a", "b"])
        assert store.select("a") is True
        assert store.select("a") is False
        assert store.select("b") is True
        assert store.selected == TagModel("b")

    def test_selection_resolved_by_value(self):
        store = _store(["a", "b"])
        store.select("a")
        store.seed(["b", "c"])
        assert store.selected is None


class TestSeed:

    def test_seed_coerces_and_dedupes(self):
        store = TagCollectionStore()
        store.seed(["a", {"value": "b", "display": "B"}, TagModel("a")])
        assert [t.value for t in store] == ["a", "b"]
        assert store.find("b").display == "B"

    def test_seed_over_capacity_raises_capacity(self, caplog):
        store = TagCollectionStore(capacity=2)
        with caplog.at_level(logging.WARNING):
            store.seed(["a", "b", "c"])
        assert len(store) == 3
        assert store.capacity == 3
        assert store.max_items_reached
        assert MAX_ITEMS_WARNING in caplog.text

    def test_capacity_returns_to_configured_limit(self, caplog):
        store = TagCollectionStore(capacity=2)
        with caplog.at_level(logging.WARNING):
            store.seed(["a", "b", "c"])
            store.seed(["a", "b", "c", "d"])
            store.seed([])
        assert store.capacity == 2
        assert caplog.text.count(MAX_ITEMS_WARNING) == 1

    def test_seed_keeps_selection_still_present(self):
        store = _store(["a", "b"])
        store.select("b")
        store.seed(["b", "c"])
        assert store.selected == TagModel("b")


class TestChangeCallbacks:

    def test_callbacks_get_snapshot(self):
        store = TagCollectionStore()
        seen = []
        store.register_on_change(seen.append)
        store.add(TagModel("a"))
        store.remove("a")
        assert [[t.value for t in snap] for snap in seen] == [["a"], []]

    def test_failing_callback_is_isolated(self, caplog):
        store = TagCollectionStore()
        seen = []

        def boom(_items):
            raise RuntimeError("boom")

        store.register_on_change(boom)
        store.register_on_change(seen.append)
        with caplog.at_level(logging.ERROR):
            store.add(TagModel("a"))
        assert len(seen) == 1
        assert "boom" in caplog.text


class TestInputBuffer:

    def test_blank_and_clear(self):
        buffer = InputBuffer()
        buffer.text = "  "
        assert buffer.blank
        buffer.text = "x"
        assert not buffer.blank
        buffer.clear()
        assert buffer.text == ""

    def test_validity_callable(self):
        buffer = InputBuffer(validity=lambda text: len(text) < 3)
        buffer.text = "ab"
        assert buffer.valid
        buffer.text = "abcd"
        assert not buffer.valid


class TestReplaceAll:

    def test_replace_all_keeps_capacity(self):
        store = TagCollectionStore(capacity=2)
        seen = []
        store.register_on_change(seen.append)
        store.replace_all(["a", "b", "c", "a"])
        assert [t.value for t in store] == ["a", "b", "c"]
        assert store.capacity == 2
        assert len(seen) == 1

    def test_replace_all_drops_missing_selection(self):
        store = _store(["a", "b"])
        store.select("a")
        store.replace_all(["b"])
        assert store.selected is None
