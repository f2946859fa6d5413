"""Shared fixtures: a hand-cranked timer facility and a recording engine."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from intuitune.midi_engine import MidiFileEngine


@dataclass
class ManualTimer:
    when: float
    seq: int
    callback: Callable[[], object]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualTimers:
    """Timer facility whose clock only moves when ``advance`` is called."""

    now: float = 0.0
    timers: list[ManualTimer] = field(default_factory=list)
    _counter: itertools.count = field(default_factory=itertools.count)

    def call_later(self, delay: float, callback: Callable[[], object]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, next(self._counter), callback)
        self.timers.append(timer)
        return timer

    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Fire, in time order, every live timer due within *seconds*."""
        target = self.now + seconds
        while True:
            due = [t for t in self.pending() if t.when <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when, t.seq))
            self.timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def engine(timers: ManualTimers) -> MidiFileEngine:
    """A MidiFileEngine whose clock follows the manual timers."""
    return MidiFileEngine(clock=lambda: timers.now)
