import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional, Tuple


class TimerHandle:
    """Cancelable token for one scheduled timer.

    Callbacks receive their own handle, so a tick that was already in flight
    when ``cancel()`` ran can notice and do nothing.
    """

    def __init__(self, name: str = ''):
        self.name = name
        self.cancelled = False
        self.finished = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished)

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self):
        state = 'cancelled' if self.cancelled else ('finished' if self.finished else 'active')
        return f"<TimerHandle {self.name or '?'} {state}>"


Callback = Callable[[TimerHandle], None]


class BackgroundScheduler:
    """Runs timers as Socket.IO background tasks.

    Each timer gets its own task which sleeps with ``socketio.sleep`` so it
    cooperates with whichever async mode the server was started in.
    """

    def __init__(self, socketio, logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)

    def call_every(self, interval: float, callback: Callback, name: str = '') -> TimerHandle:
        handle = TimerHandle(name)
        self.socketio.start_background_task(self._repeat, handle, float(interval), callback)
        return handle

    def call_later(self, delay: float, callback: Callback, name: str = '') -> TimerHandle:
        handle = TimerHandle(name)
        self.socketio.start_background_task(self._once, handle, float(delay), callback)
        return handle

    def _repeat(self, handle: TimerHandle, interval: float, callback: Callback) -> None:
        # Schedule against the monotonic clock so slow callbacks don't drift the period
        next_at = time.monotonic() + interval
        while not handle.cancelled:
            self.socketio.sleep(max(0.0, next_at - time.monotonic()))
            if handle.cancelled:
                return
            next_at += interval
            self._fire(handle, callback)

    def _once(self, handle: TimerHandle, delay: float, callback: Callback) -> None:
        self.socketio.sleep(delay)
        if handle.cancelled:
            return
        self._fire(handle, callback)
        handle.finished = True

    def _fire(self, handle: TimerHandle, callback: Callback) -> None:
        try:
            callback(handle)
        except Exception:
            self.logger.exception(f"[timer-error] timer={handle.name}")


class ManualScheduler:
    """Virtual-clock scheduler; nothing fires until ``advance`` is called.

    Used when TESTING is on so room lifecycles can be stepped second by
    second. Time is kept in integer milliseconds so 0.9s intervals line up
    exactly.
    """

    def __init__(self):
        self.now_ms = 0
        self._seq = itertools.count()
        self._queue: List[Tuple[int, int, TimerHandle, Optional[int], Callback]] = []

    @property
    def now(self) -> float:
        return self.now_ms / 1000.0

    def call_every(self, interval: float, callback: Callback, name: str = '') -> TimerHandle:
        interval_ms = _to_ms(interval)
        return self._push(interval_ms, interval_ms, callback, name)

    def call_later(self, delay: float, callback: Callback, name: str = '') -> TimerHandle:
        return self._push(_to_ms(delay), None, callback, name)

    def advance(self, seconds: float) -> None:
        target = self.now_ms + _to_ms(seconds)
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, interval_ms, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now_ms = due
            if interval_ms is not None:
                heapq.heappush(self._queue, (due + interval_ms, next(self._seq), handle, interval_ms, callback))
                callback(handle)
            else:
                callback(handle)
                handle.finished = True
        self.now_ms = target

    def pending(self) -> List[TimerHandle]:
        return [entry[2] for entry in self._queue if entry[2].active]

    def callback_for(self, handle: TimerHandle) -> Optional[Callback]:
        """Return the queued callback for ``handle``, even if it was cancelled."""
        for entry in self._queue:
            if entry[2] is handle:
                return entry[4]
        return None

    def _push(self, delay_ms: int, interval_ms: Optional[int], callback: Callback, name: str) -> TimerHandle:
        handle = TimerHandle(name)
        heapq.heappush(self._queue, (self.now_ms + delay_ms, next(self._seq), handle, interval_ms, callback))
        return handle


def _to_ms(seconds: float) -> int:
    return int(round(float(seconds) * 1000))
