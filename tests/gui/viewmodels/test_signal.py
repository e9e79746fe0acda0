"""Tests for the pure Python Signal, ObservableProperty and ReadOnlyProperty."""

import threading

import pytest

from adminconsole.gui.viewmodels.signal import ObservableProperty, ReadOnlyProperty, Signal


class TestSignal:
    def test_emit_reaches_every_handler_in_order(self):
        sig = Signal()
        calls = []
        sig.connect(lambda page: calls.append(("first", page)))
        sig.connect(lambda page: calls.append(("second", page)))

        sig.emit(3)

        assert calls == [("first", 3), ("second", 3)]

    def test_connect_returns_handler_for_later_disconnect(self):
        sig = Signal()
        seen = []
        handler = sig.connect(seen.append)

        sig.emit("a")
        sig.disconnect(handler)
        sig.emit("b")

        assert seen == ["a"]
        assert sig.handler_count == 0

    def test_disconnect_unknown_handler_raises(self):
        with pytest.raises(ValueError):
            Signal().disconnect(print)

    def test_disconnect_all(self):
        sig = Signal()
        sig.connect(lambda: None)
        sig.connect(lambda: None)

        sig.disconnect_all()

        assert sig.handler_count == 0

    def test_same_handler_connected_once(self):
        sig = Signal()
        seen = []
        sig.connect(seen.append)
        sig.connect(seen.append)

        sig.emit(1)

        assert seen == [1]

    def test_failing_handler_is_logged_and_skipped(self, caplog):
        sig = Signal()
        seen = []

        def broken(value):
            raise RuntimeError("widget gone")

        sig.connect(broken)
        sig.connect(seen.append)

        sig.emit("row-1")

        assert seen == ["row-1"]
        assert "widget gone" in caplog.text

    def test_handler_may_disconnect_itself_during_emit(self):
        sig = Signal()
        seen = []

        def once(value):
            seen.append(value)
            sig.disconnect(once)

        sig.connect(once)
        sig.emit(1)
        sig.emit(2)

        assert seen == [1]


class TestObservableProperty:
    def test_changed_carries_new_and_old(self):
        prop = ObservableProperty(False)
        changes = []
        prop.changed.connect(lambda new, old: changes.append((new, old)))

        prop.value = True
        prop.value = True
        prop.value = False

        assert changes == [(True, False), (False, True)]

    def test_equal_frozensets_do_not_emit(self):
        prop = ObservableProperty(frozenset({1, 2}))
        changes = []
        prop.changed.connect(lambda new, old: changes.append(new))

        prop.value = frozenset({2, 1})

        assert changes == []

    def test_concurrent_writers_keep_last_value_consistent(self):
        prop = ObservableProperty(0)
        threads = [threading.Thread(target=setattr, args=(prop, "value", n)) for n in range(1, 21)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert prop.value in range(1, 21)


class TestReadOnlyProperty:
    def test_view_follows_source(self):
        prop = ObservableProperty("draft")
        view = prop.read_only()
        changes = []
        view.changed.connect(lambda new, old: changes.append(new))

        prop.value = "applied"

        assert isinstance(view, ReadOnlyProperty)
        assert view.value == "applied"
        assert changes == ["applied"]

    def test_view_has_no_setter(self):
        view = ObservableProperty(1).read_only()
        with pytest.raises(AttributeError):
            view.value = 2
