"""Cooperative frame and timer scheduling.

A ``FrameScheduler`` is the single source of time for the effects. The host
loop calls ``tick()`` once per displayed frame; due timers run first, then
every frame callback that was requested before the tick started.
"""

import itertools

import pygame


class FrameScheduler:
    def __init__(self, clock=None):
        self.clock = clock or pygame.time.get_ticks
        self._ids = itertools.count(1)
        self._frames = {}
        self._running = {}
        self._timers = {}

    def now(self):
        return self.clock()

    @property
    def pending_frames(self):
        return len(self._frames) + len(self._running)

    @property
    def pending_timers(self):
        return len(self._timers)

    def request_frame(self, callback):
        handle = next(self._ids)
        self._frames[handle] = callback
        return handle

    def cancel_frame(self, handle):
        self._frames.pop(handle, None)
        self._running.pop(handle, None)

    def set_timeout(self, callback, delay_ms=0):
        handle = next(self._ids)
        self._timers[handle] = (self.now() + max(0, delay_ms), callback)
        return handle

    def clear_timeout(self, handle):
        self._timers.pop(handle, None)

    def tick(self):
        now = self.now()

        due = sorted(
            (when, handle) for handle, (when, _) in self._timers.items() if when <= now
        )
        for _, handle in due:
            # An earlier timer in this batch may have cleared it.
            entry = self._timers.pop(handle, None)
            if entry is not None:
                entry[1]()

        self._running, self._frames = self._frames, {}
        while self._running:
            handle = next(iter(self._running))
            self._running.pop(handle)(now)
        return now
