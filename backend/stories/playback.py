"""
Story viewer playback.

The viewer shows one item at a time and auto-advances when the item's
duration has elapsed. StoryPlayback models that as a small state machine
over an injectable millisecond clock, so it can be driven by real time in a
client and by a fake clock in tests. `timeline()` gives the same schedule as
offsets, which the story detail endpoint returns.
"""

from __future__ import annotations

import time
from typing import Callable, Iterable, Optional

DEFAULT_DURATION_MS = 30000
MIN_DURATION_MS = 1000

IDLE = "idle"
PLAYING = "playing"
PAUSED = "paused"
FINISHED = "finished"


def effective_duration(duration_ms: Optional[int]) -> int:
    return max(duration_ms or DEFAULT_DURATION_MS, MIN_DURATION_MS)


def _duration_of(item) -> Optional[int]:
    if isinstance(item, int):
        return item
    if isinstance(item, dict):
        return item.get("duration_ms")
    return getattr(item, "duration_ms", None)


def timeline(items: Iterable) -> dict:
    rows = []
    offset = 0
    for index, item in enumerate(items):
        d = effective_duration(_duration_of(item))
        rows.append({"index": index, "start_ms": offset, "duration_ms": d})
        offset += d
    return {"items": rows, "total_ms": offset}


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class StoryPlayback:
    """
    items: story items (model instances, dicts with duration_ms, or raw ints).
    clock: callable returning milliseconds; only differences are used.
    """

    def __init__(self, items: Iterable, clock: Callable[[], float] = _monotonic_ms):
        self.durations = [effective_duration(_duration_of(i)) for i in items]
        self.clock = clock
        self.state = IDLE
        self.index = 0
        self._elapsed = 0.0        # time spent on the current item before _since
        self._since = None         # clock value when playing last (re)started

    def __len__(self):
        return len(self.durations)

    @property
    def current_duration(self) -> int:
        return self.durations[self.index] if self.durations else 0

    def _elapsed_now(self) -> float:
        if self.state == PLAYING and self._since is not None:
            return self._elapsed + (self.clock() - self._since)
        return self._elapsed

    def _enter(self, index: int):
        self.index = index
        self._elapsed = 0.0
        self._since = self.clock() if self.state == PLAYING else None

    def _finish(self):
        self.state = FINISHED
        self.index = max(len(self.durations) - 1, 0)
        self._elapsed = float(self.current_duration)
        self._since = None

    def start(self) -> str:
        if not self.durations:
            self._finish()
            return self.state
        self.state = PLAYING
        self._enter(0)
        return self.state

    def pause(self) -> str:
        if self.state == PLAYING:
            self.tick()
        if self.state == PLAYING:
            self._elapsed = self._elapsed_now()
            self._since = None
            self.state = PAUSED
        return self.state

    def resume(self) -> str:
        if self.state == PAUSED:
            self.state = PLAYING
            self._since = self.clock()
        return self.state

    def next(self) -> str:
        if self.state == IDLE:
            return self.start()
        if self.state == FINISHED:
            return self.state
        if self.index + 1 >= len(self.durations):
            self._finish()
        else:
            self._enter(self.index + 1)
        return self.state

    def previous(self) -> str:
        if self.state == IDLE:
            return self.start()
        if self.state == FINISHED:
            # back into the last item
            self.state = PLAYING
            self._enter(self.index)
            return self.state
        self._enter(max(self.index - 1, 0))
        return self.state

    def tick(self) -> str:
        """Advance across every item the clock has fully covered."""
        if self.state != PLAYING:
            return self.state
        now = self.clock()
        elapsed = self._elapsed + (now - self._since)
        while elapsed >= self.durations[self.index]:
            elapsed -= self.durations[self.index]
            if self.index + 1 >= len(self.durations):
                self._finish()
                return self.state
            self.index += 1
        self._elapsed = elapsed
        self._since = now
        return self.state

    @property
    def progress(self) -> float:
        if self.state == IDLE or not self.durations:
            return 0.0
        if self.state == FINISHED:
            return 1.0
        return min(max(self._elapsed_now() / self.current_duration, 0.0), 1.0)

    @property
    def remaining_ms(self) -> int:
        if self.state == IDLE:
            return self.current_duration
        if self.state == FINISHED:
            return 0
        return max(int(self.current_duration - self._elapsed_now()), 0)
