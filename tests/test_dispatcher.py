import threading
import time

from hotkey_core import ActionDispatcher, ActionQueue, HotkeyAction


def test_dispatch_enqueues_wrapped_callback(context):
    calls = []
    assert ActionDispatcher(context).dispatch(HotkeyAction.TOGGLE, "BTN_A", lambda: calls.append(1))
    assert calls == []
    context.run_all()
    assert calls == [1]


def test_dispatch_without_callback_or_button(context):
    dispatcher = ActionDispatcher(context)
    assert not dispatcher.dispatch(HotkeyAction.MENU, "BTN_B", None)
    assert not dispatcher.dispatch(HotkeyAction.MENU, None, lambda: None)
    assert context.callbacks == []


def test_dispatch_without_context():
    assert not ActionDispatcher(None).dispatch(HotkeyAction.TOGGLE, "BTN_A", lambda: None)


def test_refused_enqueue_is_dropped(refusing_context):
    assert not ActionDispatcher(refusing_context).dispatch(HotkeyAction.TOGGLE, "BTN_A", lambda: None)


def test_raising_context_is_dropped():
    class Broken:
        def try_enqueue(self, callback):
            raise RuntimeError("context gone")
    assert not ActionDispatcher(Broken()).dispatch(HotkeyAction.TOGGLE, "BTN_A", lambda: None)


def test_action_exception_is_contained(context):
    def explode():
        raise RuntimeError("boom")
    ActionDispatcher(context).dispatch(HotkeyAction.TOGGLE, "BTN_A", explode)
    assert context.run_all() == 1


def test_action_queue_runs_in_order():
    done = threading.Event()
    calls = []
    actions = ActionQueue()
    actions.start()
    try:
        for i in range(5):
            assert actions.try_enqueue(lambda i=i: calls.append(i))
        assert actions.try_enqueue(done.set)
        assert done.wait(2.0)
        assert calls == [0, 1, 2, 3, 4]
    finally:
        actions.stop()
    assert not actions.consumer_thread.is_alive()


def test_action_queue_survives_failing_action():
    done = threading.Event()
    actions = ActionQueue()
    actions.start()
    try:
        actions.try_enqueue(lambda: 1 / 0)
        actions.try_enqueue(done.set)
        assert done.wait(2.0)
    finally:
        actions.stop()


def test_action_queue_refuses_when_full():
    actions = ActionQueue(max_size=2)  # consumer not started
    assert actions.try_enqueue(lambda: None)
    assert actions.try_enqueue(lambda: None)
    assert not actions.try_enqueue(lambda: None)


def test_action_queue_refuses_after_stop():
    actions = ActionQueue()
    actions.start()
    actions.stop()
    assert not actions.try_enqueue(lambda: None)


def test_stale_actions_are_discarded():
    calls = []
    done = threading.Event()
    actions = ActionQueue(max_event_age=0.05)
    actions.try_enqueue(lambda: calls.append("stale"))
    time.sleep(0.1)
    actions.try_enqueue(done.set)
    actions.start()
    try:
        assert done.wait(2.0)
        assert calls == []
    finally:
        actions.stop()
