import threading
import time

from keys_arena.services.rooms.scheduler import BackgroundScheduler, ManualScheduler


def test_manual_repeating_timer_fires_per_interval():
    scheduler = ManualScheduler()
    fired = []
    scheduler.call_every(0.9, lambda h: fired.append(scheduler.now_ms))
    scheduler.advance(3)
    assert fired == [900, 1800, 2700]
    assert scheduler.now == 3.0


def test_manual_timers_fire_in_time_order():
    scheduler = ManualScheduler()
    order = []
    scheduler.call_every(1.0, lambda h: order.append(('sec', scheduler.now_ms)))
    scheduler.call_later(2.5, lambda h: order.append(('once', scheduler.now_ms)))
    scheduler.advance(3)
    assert order == [('sec', 1000), ('sec', 2000), ('once', 2500), ('sec', 3000)]


def test_manual_cancel_stops_timer():
    scheduler = ManualScheduler()
    fired = []
    handle = scheduler.call_every(1.0, lambda h: fired.append(1))
    scheduler.advance(2)
    handle.cancel()
    scheduler.advance(5)
    assert fired == [1, 1]
    assert scheduler.pending() == []


def test_manual_callback_can_cancel_itself():
    scheduler = ManualScheduler()
    fired = []

    def _cb(handle):
        fired.append(scheduler.now_ms)
        if len(fired) == 2:
            handle.cancel()

    scheduler.call_every(1.0, _cb)
    scheduler.advance(10)
    assert fired == [1000, 2000]


def test_manual_one_shot_finishes():
    scheduler = ManualScheduler()
    handle = scheduler.call_later(1.0, lambda h: None)
    assert handle.active
    scheduler.advance(1)
    assert handle.finished
    assert not handle.active


def test_manual_timer_scheduled_from_callback():
    scheduler = ManualScheduler()
    fired = []
    scheduler.call_later(1.0, lambda h: scheduler.call_later(1.0, lambda h2: fired.append(scheduler.now_ms)))
    scheduler.advance(5)
    assert fired == [2000]


class _ThreadSocketIO:
    """Minimal start_background_task/sleep pair backed by real threads."""

    def start_background_task(self, target, *args):
        thread = threading.Thread(target=target, args=args, daemon=True)
        thread.start()
        return thread

    def sleep(self, seconds):
        time.sleep(seconds)


def test_background_scheduler_repeats_until_cancelled():
    scheduler = BackgroundScheduler(_ThreadSocketIO())
    done = threading.Event()
    ticks = []

    def _cb(handle):
        ticks.append(handle)
        if len(ticks) == 3:
            handle.cancel()
            done.set()

    scheduler.call_every(0.01, _cb, name='fast')
    assert done.wait(2.0)
    time.sleep(0.05)
    assert len(ticks) == 3


def test_background_scheduler_survives_callback_errors():
    scheduler = BackgroundScheduler(_ThreadSocketIO())
    done = threading.Event()
    calls = []

    def _cb(handle):
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError('boom')
        handle.cancel()
        done.set()

    scheduler.call_every(0.01, _cb)
    assert done.wait(2.0)


def test_background_one_shot_skipped_when_cancelled():
    scheduler = BackgroundScheduler(_ThreadSocketIO())
    fired = []
    handle = scheduler.call_later(0.05, lambda h: fired.append(1))
    handle.cancel()
    time.sleep(0.15)
    assert fired == []
