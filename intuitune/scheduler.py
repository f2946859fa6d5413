"""PlaybackScheduler: drives an audio engine from a Music sequence in real time.

Every unit of a score gets its own fire-once timer; a final timer marks the
playback complete. The returned PlaybackHandle owns those timers, so stopping
a playback only ever touches its own pending work.

Dispatch policy
---------------
- Single pitches play at velocity 1.0 and start as soon as their timer fires.
- Groups (chords) play at velocity 0.65 and start half their own duration
  after their timer fires, so the chord settles after a preceding arpeggio.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Protocol

import numpy as np

from intuitune.aural_objects import AuralInput, resolve_aural_object
from intuitune.midi_engine import MidiFileEngine
from intuitune.models import MusicEvent
from intuitune.score_builder import PlaybackOptions, build_score
from intuitune.timing import REFERENCE_TEMPO, duration_to_seconds

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class TimerFacility(Protocol):
    """Anything with asyncio's ``call_later``; the event loop itself qualifies."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> Cancellable: ...


class AudioEngine(Protocol):
    """Sound-producing collaborator. Durations and start times are seconds."""

    def now(self) -> float: ...

    def trigger(
        self,
        note: str | Sequence[str],
        duration: float,
        start: float,
        velocity: float = 1.0,
    ) -> None: ...


def default_engine() -> AudioEngine:
    """Engine used when the caller does not supply one."""
    return MidiFileEngine()


class PlaybackHandle:
    """
    Cancellable, completion-observable result of starting a playback.

    ``stop_playback`` cancels whatever has not fired yet and calls
    ``on_finish``; once the playback has finished (naturally or not) it does
    nothing, so ``on_finish`` is called at most once.

    ``engine`` is the engine the units are dispatched to, including the
    MidiFileEngine created when the caller passed none, so its recorded notes
    can be read or written out with ``handle.engine.write(path)``. It is
    ``None`` for a silent handle.
    """

    def __init__(
        self,
        length: float,
        on_finish: Callable[[], None] | None = None,
        engine: AudioEngine | None = None,
    ) -> None:
        self.length = length
        self.engine = engine
        self._on_finish = on_finish
        self._pending: list[Cancellable] = []
        self._finished = False
        self._notified = False

    @classmethod
    def silent(cls, on_finish: Callable[[], None] | None = None) -> PlaybackHandle:
        """
        Handle for an object with nothing to play.

        It is finished from the start and schedules nothing; ``stop_playback``
        is its only completion path.
        """
        handle = cls(0.0, on_finish)
        handle._finished = True
        return handle

    def has_finished(self) -> bool:
        return self._finished

    def stop_playback(self) -> None:
        if self._notified:
            logger.debug("stop_playback on a finished playback ignored")
            return
        for timer in self._pending:
            timer.cancel()
        logger.debug("Playback stopped, %d pending timer(s) cancelled", len(self._pending))
        self._pending.clear()
        self._finish()

    # ------------------------------------------------------------------
    # Scheduler hooks
    # ------------------------------------------------------------------

    def _track(self, timer: Cancellable) -> None:
        self._pending.append(timer)

    def _forget(self, timer: Cancellable) -> None:
        self._pending = [pending for pending in self._pending if pending is not timer]

    def _complete(self) -> None:
        if self._notified:
            return
        self._pending.clear()
        self._finish()

    def _finish(self) -> None:
        self._finished = True
        self._notified = True
        if self._on_finish is not None:
            self._on_finish()


# ------------------------------------------------------------------
# Timing helpers
# ------------------------------------------------------------------

def _tempo_scale(tempo: float) -> float:
    if tempo <= 0:
        raise ValueError(f"tempo must be positive, got {tempo}")
    return REFERENCE_TEMPO / tempo


def unit_seconds(event: MusicEvent, tempo: float = REFERENCE_TEMPO) -> float:
    """Length of *event* in seconds at *tempo*."""
    if isinstance(event.duration, str):
        return duration_to_seconds(event.duration, tempo)
    return float(event.duration) * _tempo_scale(tempo)


def onset_offset(event: MusicEvent, seconds: float) -> float:
    """Extra delay before a unit sounds: half its length for a group, else none."""
    return seconds / 2 if event.is_group else 0.0


def score_length(score: Sequence[MusicEvent], tempo: float = REFERENCE_TEMPO) -> float:
    """Nominal length in seconds: where the last-ending unit ends."""
    scale = _tempo_scale(tempo)
    return max((e.time * scale + unit_seconds(e, tempo) for e in score), default=0.0)


def _dispatch(engine: AudioEngine, event: MusicEvent, seconds: float, at: float) -> None:
    engine.trigger(event.note, seconds, at + onset_offset(event, seconds), event.velocity)


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def schedule_playback(
    score: Sequence[MusicEvent],
    engine: AudioEngine | None = None,
    *,
    on_finish: Callable[[], None] | None = None,
    timers: TimerFacility | None = None,
    tempo: float = REFERENCE_TEMPO,
) -> PlaybackHandle:
    """
    Schedule every unit of *score* against *engine* and return a handle.

    Args:
        score:     Compiled Music or a built score.
        engine:    Audio engine; a fresh MidiFileEngine when omitted. Either
                   way it is available afterwards as ``handle.engine``.
        on_finish: Called once on completion or on the first stop.
        timers:    Timer facility; defaults to the running asyncio loop.
        tempo:     Playback tempo. Times are laid out at REFERENCE_TEMPO and
                   stretched or squeezed to match.

    Raises:
        RuntimeError: If *timers* is omitted and no event loop is running.
    """
    engine = engine if engine is not None else default_engine()
    timers = timers if timers is not None else asyncio.get_running_loop()
    scale = _tempo_scale(tempo)

    handle = PlaybackHandle(score_length(score, tempo), on_finish, engine)

    for event in score:
        seconds = unit_seconds(event, tempo)
        _schedule_unit(handle, timers, engine, event, seconds, event.time * scale)

    handle._track(timers.call_later(handle.length, handle._complete))
    logger.debug("Scheduled %d unit(s) over %.3fs", len(score), handle.length)
    return handle


def _schedule_unit(
    handle: PlaybackHandle,
    timers: TimerFacility,
    engine: AudioEngine,
    event: MusicEvent,
    seconds: float,
    delay: float,
) -> None:
    timer: Cancellable | None = None

    def fire() -> None:
        if timer is not None:
            handle._forget(timer)
        _dispatch(engine, event, seconds, engine.now())

    timer = timers.call_later(delay, fire)
    handle._track(timer)


def play_aural(
    name_or_degrees: AuralInput,
    engine: AudioEngine | None = None,
    options: PlaybackOptions | None = None,
    *,
    timers: TimerFacility | None = None,
    rng: np.random.Generator | None = None,
) -> PlaybackHandle:
    """
    Resolve an aural object, build its score and start playing it.

    Raises:
        UnknownAuralName: If *name_or_degrees* is an unknown phrase.
    """
    options = options or PlaybackOptions()
    degrees = resolve_aural_object(name_or_degrees)
    if not degrees:
        return PlaybackHandle.silent(options.on_finish)

    score = build_score(degrees, options, rng=rng)
    return schedule_playback(score, engine, on_finish=options.on_finish, timers=timers)


def render_offline(
    score: Sequence[MusicEvent],
    engine: AudioEngine,
    *,
    start: float = 0.0,
    tempo: float = REFERENCE_TEMPO,
) -> float:
    """
    Send every unit to *engine* at once with absolute start times.

    Uses the same velocity and onset policy as real-time playback. Returns
    the score length in seconds.
    """
    scale = _tempo_scale(tempo)
    for event in score:
        _dispatch(engine, event, unit_seconds(event, tempo), start + event.time * scale)
    return score_length(score, tempo)
