import threading
import time

from run_state import RunMode, RunState


def test_defaults_to_running():
    state = RunState()
    assert state.mode == RunMode.RUNNING
    assert state.wait_while_paused(timeout=0.01)


def test_pause_and_resume_are_idempotent():
    state = RunState()
    assert state.pause()
    assert not state.pause()
    assert state.paused
    assert state.resume()
    assert not state.resume()
    assert state.mode == RunMode.RUNNING


def test_resume_requests_one_edge_reset():
    state = RunState()
    assert not state.consume_edge_reset()
    state.pause()
    state.resume()
    assert state.consume_edge_reset()
    assert not state.consume_edge_reset()


def test_resume_cannot_reopen_a_stopping_state():
    state = RunState(paused=True)
    state.stop()
    assert not state.resume()
    assert state.stopping


def test_stop_releases_pause_gate_waiter():
    state = RunState(paused=True)
    result = {}

    def waiter():
        result['proceed'] = state.wait_while_paused()

    thread = threading.Thread(target=waiter)
    thread.start()
    time.sleep(0.05)
    assert thread.is_alive()
    state.stop()
    thread.join(timeout=1.0)
    assert not thread.is_alive()
    assert result['proceed'] is False


def test_resume_releases_pause_gate_waiter():
    state = RunState(paused=True)
    result = {}
    thread = threading.Thread(target=lambda: result.setdefault('proceed', state.wait_while_paused()))
    thread.start()
    time.sleep(0.05)
    state.resume()
    thread.join(timeout=1.0)
    assert result['proceed'] is True


def test_sleep_is_cut_short_by_stop():
    state = RunState()
    threading.Timer(0.05, state.stop).start()
    started = time.monotonic()
    assert state.sleep(5.0) is False
    assert time.monotonic() - started < 2.0


def test_sleep_completes_when_not_stopped():
    assert RunState().sleep(0.01) is True


def test_rearm_after_stop():
    state = RunState()
    state.stop()
    state.rearm()
    assert state.mode == RunMode.RUNNING
    state.stop()
    state.rearm(paused=True)
    assert state.mode == RunMode.PAUSED
