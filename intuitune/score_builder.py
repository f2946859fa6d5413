"""ScoreBuilder: turns the degrees of an aural object into playable units."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Literal, Union

import numpy as np

from intuitune.models import Music, MusicEvent
from intuitune.pitch import midi_to_pitch, pitch_to_midi

DEFAULT_ROOT = "F4"
DEFAULT_NOTE_DURATION = 0.6  # seconds per unit
AUTO_NOTE_DURATION_TOTAL = 1.0  # seconds shared by all degrees when note_duration="auto"

#: Inclusive semitone range for transpose="random"
RANDOM_TRANSPOSE_RANGE: tuple[int, int] = (-5, 6)

Transpose = Union[int, Literal["random"]]
NoteDuration = Union[float, Literal["auto"]]


@dataclass(frozen=True)
class PlaybackOptions:
    """
    How an aural object is turned into sound.

    Attributes:
        root:          Pitch that degree 0 maps to.
        transpose:     Semitones added to the root, or "random" for a fresh
                       draw from RANDOM_TRANSPOSE_RANGE on every build.
        arpeggio:      Play each note on its own, in degree order.
        chord:         Finish with all notes sounding together.
        note_duration: Seconds per unit, or "auto" to fit all degrees into
                       AUTO_NOTE_DURATION_TOTAL seconds.
        on_finish:     Called once when playback completes or is stopped.
    """

    root: str = DEFAULT_ROOT
    transpose: Transpose = 0
    arpeggio: bool = True
    chord: bool = True
    note_duration: NoteDuration = DEFAULT_NOTE_DURATION
    on_finish: Callable[[], None] | None = None

    def __post_init__(self) -> None:
        """Validate options."""
        pitch_to_midi(self.root)
        if self.transpose != "random" and (
            isinstance(self.transpose, bool) or not isinstance(self.transpose, int)
        ):
            raise ValueError(f"transpose must be an integer or 'random', got {self.transpose!r}")
        if self.note_duration != "auto":
            if isinstance(self.note_duration, str) or self.note_duration <= 0:
                raise ValueError(
                    f"note_duration must be positive seconds or 'auto', got {self.note_duration!r}"
                )


def resolve_transpose(transpose: Transpose, rng: np.random.Generator | None = None) -> int:
    """Return a fixed semitone shift, drawing one when *transpose* is "random"."""
    if transpose == "random":
        generator = rng if rng is not None else np.random.default_rng()
        low, high = RANDOM_TRANSPOSE_RANGE
        return int(generator.integers(low, high, endpoint=True))
    return int(transpose)


def unit_duration(note_duration: NoteDuration, degree_count: int) -> float:
    if note_duration == "auto":
        return AUTO_NOTE_DURATION_TOTAL / degree_count
    return float(note_duration)


def build_score(
    degrees: Sequence[int],
    options: PlaybackOptions | None = None,
    *,
    rng: np.random.Generator | None = None,
) -> Music:
    """
    Build the ordered playable units for *degrees*.

    Units are the individual pitches (when ``arpeggio``) followed by a single
    group of every pitch (when ``chord``); unit *i* starts at
    ``i * note_duration``.

    Args:
        degrees: Semitone offsets from the root.
        options: Playback options; defaults to PlaybackOptions().
        rng:     Random generator for transpose="random".

    Returns:
        Music whose events carry durations in seconds. Empty for no degrees.
    """
    options = options or PlaybackOptions()
    if not degrees:
        return ()

    start = pitch_to_midi(options.root) + resolve_transpose(options.transpose, rng)
    notes = [midi_to_pitch(start + degree) for degree in degrees]
    duration = unit_duration(options.note_duration, len(degrees))

    units: list[str | tuple[str, ...]] = []
    if options.arpeggio:
        units.extend(notes)
    if options.chord:
        units.append(tuple(notes))

    return tuple(
        MusicEvent(time=index * duration, note=unit, duration=duration)
        for index, unit in enumerate(units)
    )
