"""NotationCompiler: turns shorthand text into a timed Music sequence.

Pipeline
--------
1. **Tokenize** – whitespace is normalised, characters outside the shorthand
   alphabet are dropped and the text is split into tokens.

2. **Match** – every token is run through the note grammar. Tokens that do
   not match are remembered for the warning and otherwise ignored.

3. **Resolve** – omitted octaves and durations are carried forward from the
   previous matched note ("sticky" octave/duration), starting from
   ``DEFAULT_OCTAVE`` and ``DEFAULT_DURATION``.

4. **Accumulate** – resolved notes are laid end to end on a time axis.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Literal

import numpy as np

from intuitune.grammar import try_match
from intuitune.models import CompileResult, Music, MusicEvent, PartialNote, ResolvedNote
from intuitune.pitch import transpose_pitch
from intuitune.score_builder import resolve_transpose
from intuitune.timing import REFERENCE_TEMPO, duration_to_seconds

logger = logging.getLogger(__name__)

DEFAULT_OCTAVE = "3"
DEFAULT_DURATION = "4n"

_WHITESPACE_RE = re.compile(r"\s+")
_ILLEGAL_RE = re.compile(r"[^a-gA-G0-9+\-#bx.mnt, ]")


@dataclass(frozen=True)
class CarryState:
    """Octave and duration carried from one note to the next."""

    octave: str = DEFAULT_OCTAVE
    duration: str = DEFAULT_DURATION

    def __post_init__(self) -> None:
        if not self.octave or not self.duration:
            raise ValueError("CarryState needs a non-empty octave and duration")


# ------------------------------------------------------------------
# Tokenizing
# ------------------------------------------------------------------

def tokenize(text: str) -> list[str]:
    """Sanitize *text* and split it into non-empty tokens."""
    clean = _WHITESPACE_RE.sub(" ", text.strip())
    clean = _ILLEGAL_RE.sub("", clean)
    return [token for token in clean.split(" ") if token.strip()]


# ------------------------------------------------------------------
# Resolving
# ------------------------------------------------------------------

def resolve_step(state: CarryState, partial: PartialNote) -> tuple[ResolvedNote, CarryState]:
    """Fill in one note from *state* and return it with the next state."""
    resolved = ResolvedNote(
        pitch_class=partial.pitch_class,
        octave=partial.octave or state.octave,
        duration=partial.duration or state.duration,
    )
    return resolved, replace(state, octave=resolved.octave, duration=resolved.duration)


def resolve_notes(
    partials: Iterable[PartialNote],
    initial: CarryState | None = None,
) -> list[ResolvedNote]:
    """
    Resolve a sequence of partial notes, carrying octave/duration forward.

    Args:
        partials: Successfully matched notes, in their original order.
        initial:  Starting carry state. Defaults to octave 3, quarter note.

    Returns:
        One ResolvedNote per input, same order.
    """
    state = initial or CarryState()
    resolved: list[ResolvedNote] = []
    for partial in partials:
        note, state = resolve_step(state, partial)
        resolved.append(note)
    return resolved


# ------------------------------------------------------------------
# Accumulating
# ------------------------------------------------------------------

def accumulate_timecodes(notes: Iterable[ResolvedNote], tempo: float = REFERENCE_TEMPO) -> Music:
    """Lay *notes* back to back, each starting where the previous one ends."""
    clock = 0.0
    events: list[MusicEvent] = []
    for note in notes:
        events.append(MusicEvent(time=clock, note=note.pitch_name, duration=note.duration))
        clock += duration_to_seconds(note.duration, tempo)
    return tuple(events)


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def compile_shorthand(text: str) -> CompileResult:
    """
    Compile shorthand notation into Music.

    Tokens that are not notes never raise: they are left out of the music and
    listed, comma-separated and in order, in ``CompileResult.warning``.
    """
    tokens = tokenize(text)
    parsed = [(token, try_match(token)) for token in tokens]

    matched = [note for _, note in parsed if note is not None]
    failed = [token.strip() for token, note in parsed if note is None]
    failed = [token for token in failed if token]

    music = accumulate_timecodes(resolve_notes(matched))
    warning = ", ".join(failed) if failed else None

    logger.debug("Compiled %d token(s): %d event(s), %d rejected", len(tokens), len(music), len(failed))
    return CompileResult(music=music, warning=warning)


def string_to_music(text: str) -> Music:
    """Compile *text*, logging any rejected tokens instead of returning them."""
    result = compile_shorthand(text)
    if result.warning:
        logger.warning("Failed to parse the tokens: %s", result.warning)
    return result.music


def transpose(
    music: Sequence[MusicEvent],
    semitones: int | Literal["random"],
    rng: np.random.Generator | None = None,
) -> Music:
    """
    Return a copy of *music* with every pitch shifted by *semitones*.

    ``"random"`` draws the shift once for the whole phrase from the same
    range the score builder uses. Times and durations are left untouched.
    """
    shift = resolve_transpose(semitones, rng)

    def shifted(event: MusicEvent) -> MusicEvent:
        if isinstance(event.note, tuple):
            note: str | tuple[str, ...] = tuple(transpose_pitch(p, shift) for p in event.note)
        else:
            note = transpose_pitch(event.note, shift)
        return replace(event, note=note)

    return tuple(shifted(event) for event in music)
