"""Deferred callbacks driven by the game loop instead of a wall clock."""
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)


class Timer:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self):
        return not (self.cancelled or self.fired)

    def cancel(self):
        self.cancelled = True


class FrameScheduler:
    """Fires callbacks once ``advance`` has moved the clock past their due time.

    The pygame loop advances it by the frame delta; tests advance it by hand.
    Callbacks run on the caller's thread, inside ``advance``.
    """

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._counter = itertools.count()

    def call_later(self, delay, callback):
        timer = Timer(self.now + delay, callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    def pending(self):
        return sum(1 for _, _, t in self._queue if t.active)

    def advance(self, seconds):
        self.now += seconds
        while self._queue and self._queue[0][0] <= self.now:
            _, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            timer.fired = True
            timer.callback()
