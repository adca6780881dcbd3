"""
Timer sources for the simulation scheduler.

Both expose schedule(delay_ms, callback) -> handle with cancel().
ThreadingTimerSource runs callbacks on daemon threading.Timer threads.
ManualTimerSource fires nothing until advance() moves its virtual clock.
"""

import heapq
import itertools
import threading


class ThreadingTimerSource:

    def schedule(self, delay_ms, callback):
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


class ManualTimer:

    def __init__(self, due_ms, callback):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualTimerSource:
    """Virtual clock in milliseconds, advanced explicitly by the caller."""

    def __init__(self):
        self.now_ms = 0.0
        self._queue = []
        self._seq = itertools.count()

    def schedule(self, delay_ms, callback):
        timer = ManualTimer(self.now_ms + delay_ms, callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))
        return timer

    def pending(self):
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, ms):
        """Fire every timer due within the next ``ms``, in due order."""
        target = self.now_ms + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self.now_ms = due
            if not timer.cancelled:
                timer.callback()
        self.now_ms = target
