"""Pitch-name, MIDI number and frequency conversions."""

from __future__ import annotations

import re

# ── MIDI constants ──────────────────────────────────────────────────────────
SEMITONES_PER_OCTAVE = 12
MIDDLE_C_MIDI = 60  # C4 in Scientific Pitch Notation
A4_MIDI = 69
A4_FREQUENCY = 440.0

# Chromatic pitch class names (index 0 = C), sharp spelling
NOTE_NAMES: list[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

_LETTER_SEMITONES: dict[str, int] = {
    "C": 0,
    "D": 2,
    "E": 4,
    "F": 5,
    "G": 7,
    "A": 9,
    "B": 11,
}

_ACCIDENTAL_SEMITONES: dict[str, int] = {
    "": 0,
    "bb": -2,
    "b": -1,
    "#": 1,
    "x": 2,
}

_PITCH_RE = re.compile(r"([a-gA-G])(bb|b|#|x)?(-?\d+)")


class InvalidPitch(ValueError):
    """Raised when a string is not a pitch name such as 'C#4' or 'bb3'."""


def parse_pitch(name: str) -> tuple[str, str, int]:
    """
    Split a pitch name into its letter, accidental and octave.

    The letter is returned upper-cased; the accidental is one of
    '', 'bb', 'b', '#' or 'x'.

    Raises:
        InvalidPitch: If *name* is not a well-formed pitch name.
    """
    match = _PITCH_RE.fullmatch(name.strip())
    if match is None:
        raise InvalidPitch(f"Not a pitch name: {name!r}")
    letter, accidental, octave = match.groups()
    return letter.upper(), accidental or "", int(octave)


def pitch_class_to_midi(pitch_class: int, octave: int) -> int:
    """
    Convert a pitch class (0-11) and an octave number to an absolute MIDI note.

    MIDI octave numbering: C-1 = 0, C0 = 12, C1 = 24, ... C4 (Middle C) = 60.
    Octaves below -1 give negative numbers; callers that talk to real MIDI
    devices must range-check.
    """
    return (octave + 1) * SEMITONES_PER_OCTAVE + pitch_class


def pitch_to_midi(name: str) -> int:
    """Convert a pitch name ('F4', 'Bb3', 'cx5') to a MIDI note number."""
    letter, accidental, octave = parse_pitch(name)
    semitone = _LETTER_SEMITONES[letter] + _ACCIDENTAL_SEMITONES[accidental]
    return pitch_class_to_midi(semitone, octave)


def midi_to_pitch(number: int) -> str:
    """Convert a MIDI note number to a sharp-spelled pitch name, e.g. 61 -> 'C#4'."""
    octave = number // SEMITONES_PER_OCTAVE - 1
    return f"{NOTE_NAMES[number % SEMITONES_PER_OCTAVE]}{octave}"


def transpose_pitch(name: str, semitones: int) -> str:
    return midi_to_pitch(pitch_to_midi(name) + semitones)


def midi_to_frequency(number: float, a4: float = A4_FREQUENCY) -> float:
    """Equal-tempered frequency in Hz of a (possibly fractional) MIDI number."""
    return a4 * 2.0 ** ((number - A4_MIDI) / SEMITONES_PER_OCTAVE)


def pitch_to_frequency(name: str, a4: float = A4_FREQUENCY) -> float:
    return midi_to_frequency(pitch_to_midi(name), a4)
