"""Data models shared by the notation compiler and the playback scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

# Velocity policy for playable units
SINGLE_VELOCITY = 1.0
GROUP_VELOCITY = 0.65  # several voices at once would otherwise clip

Pitches = Union[str, tuple[str, ...]]
Duration = Union[str, float]


@dataclass(frozen=True)
class PartialNote:
    """A note as written in shorthand; octave and duration may be omitted."""

    pitch_class: str
    octave: str | None = None
    duration: str | None = None


@dataclass(frozen=True)
class ResolvedNote:
    """A note with every field filled in by the resolver."""

    pitch_class: str
    octave: str
    duration: str

    @property
    def pitch_name(self) -> str:
        """Pitch class and octave concatenated, e.g. 'c#4'."""
        return f"{self.pitch_class}{self.octave}"


@dataclass(frozen=True)
class MusicEvent:
    """
    One playable unit on a timeline.

    Attributes:
        time:     Start offset in seconds from the beginning of the phrase.
        note:     A single pitch name, or a tuple of names sounding together.
        duration: A duration code such as '4n', or a length in seconds.
    """

    time: float
    note: Pitches
    duration: Duration

    @property
    def is_group(self) -> bool:
        return isinstance(self.note, tuple)

    @property
    def pitches(self) -> tuple[str, ...]:
        """The event's pitch names, always as a tuple."""
        if isinstance(self.note, tuple):
            return self.note
        return (self.note,)

    @property
    def velocity(self) -> float:
        return GROUP_VELOCITY if self.is_group else SINGLE_VELOCITY


Music = tuple[MusicEvent, ...]


@dataclass(frozen=True)
class CompileResult:
    """Output of the notation compiler: parsed music plus rejected tokens."""

    music: Music
    warning: str | None = None
