"""Test the EventDispatcher directly."""

import pytest

from attrmodel.core.enums import ModelEvent
from attrmodel.core.errors import UnknownEventError
from attrmodel.model.dispatch import EVENT_NAMES, EventDispatcher, coerce_event


@pytest.fixture
def dispatcher() -> EventDispatcher:
    return EventDispatcher("test")


class TestCoerceEvent:
    @pytest.mark.parametrize("name", ["setting", "set", "resetting", "reset"])
    def test_known_names(self, name):
        assert coerce_event(name).value == name

    def test_enum_passes_through(self):
        assert coerce_event(ModelEvent.RESET) is ModelEvent.RESET

    def test_unknown_name_lists_allowed(self):
        with pytest.raises(UnknownEventError) as exc_info:
            coerce_event("changed")
        assert exc_info.value.allowed == EVENT_NAMES
        assert "resetting" in str(exc_info.value)


class TestEventDispatcher:
    def test_emit_calls_handlers_with_args(self, dispatcher):
        received = []
        dispatcher.subscribe("set", lambda *args: received.append(args))
        dispatcher.emit(ModelEvent.SET, "x", 1)
        assert received == [("x", 1)]
        assert dispatcher.messages_processed == 1

    def test_no_handlers_is_fine(self, dispatcher):
        dispatcher.emit(ModelEvent.RESET, {})
        assert dispatcher.messages_processed == 0

    def test_handlers_listing(self, dispatcher):
        def handler(*args):
            pass

        dispatcher.subscribe(ModelEvent.SETTING, handler)
        assert dispatcher.handlers("setting") == (handler,)
        assert dispatcher.handlers("set") == ()

    def test_unsubscribe_reports_result(self, dispatcher):
        def handler(*args):
            pass

        dispatcher.subscribe("set", handler)
        assert dispatcher.unsubscribe("set", handler) is True
        assert dispatcher.unsubscribe("set", handler) is False

    def test_subscribe_rejects_non_callable(self, dispatcher):
        with pytest.raises(TypeError):
            dispatcher.subscribe("set", "nope")

    def test_handler_added_during_emit_runs_next_time(self, dispatcher):
        received = []

        def late(*args):
            received.append("late")

        def first(*args):
            received.append("first")
            dispatcher.subscribe("set", late)

        dispatcher.subscribe("set", first)
        dispatcher.emit(ModelEvent.SET, "x", 1)
        assert received == ["first"]

    def test_clear_dead_letters(self):
        dispatcher = EventDispatcher("test", isolate_errors=True)

        def boom(*args):
            raise ValueError("bad")

        dispatcher.subscribe("reset", boom)
        dispatcher.emit(ModelEvent.RESET, {})
        drained = dispatcher.clear_dead_letters()
        assert len(drained) == 1
        assert drained[0].event is ModelEvent.RESET
        assert dispatcher.dead_letters == []
