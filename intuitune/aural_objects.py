"""Named aural objects (intervals, triads, scales) and their semitone degrees.

Degree 0 is the root; positive degrees are semitones above it and negative
degrees below it. A major triad in first inversion, for example, is
``(-8, -5, 0)``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from numbers import Integral
from types import MappingProxyType
from typing import Final, Union

Degrees = tuple[int, ...]
AuralInput = Union[str, Sequence[int]]

OCTAVE = 12

# ── Canonical objects ───────────────────────────────────────────────────────

AURAL_OBJECTS: Final[Mapping[str, Degrees]] = MappingProxyType(
    {
        "Silent": (),
        "Triad.Major": (0, 4, 7),
        "Triad.Minor": (0, 3, 7),
        "Triad.Diminished": (0, 3, 6),
        "Interval.Unison": (0, 0),
        "Interval.Minor2nd": (0, 1),
        "Interval.Major2nd": (0, 2),
        "Interval.Minor3rd": (0, 3),
        "Interval.Major3rd": (0, 4),
        "Interval.Perfect4th": (0, 5),
        "Interval.Diminished5th": (0, 6),
        "Interval.Perfect5th": (0, 7),
        "Interval.Minor6th": (0, 8),
        "Interval.Major6th": (0, 9),
        "Interval.Minor7th": (0, 10),
        "Interval.Major7th": (0, 11),
        "Interval.Octave": (0, 12),
        "Scale.Major": (0, 2, 4, 5, 7, 9, 11, 12),
        "Scale.NaturalMinor": (0, 2, 3, 5, 7, 8, 10, 12),
    }
)

# ── Human phrases ───────────────────────────────────────────────────────────

ALIASES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "silent": "Silent",
        "major triad": "Triad.Major",
        "major chord": "Triad.Major",
        "minor triad": "Triad.Minor",
        "minor chord": "Triad.Minor",
        "diminished triad": "Triad.Diminished",
        "diminished chord": "Triad.Diminished",
        "unison": "Interval.Unison",
        "semitone": "Interval.Minor2nd",
        "tone": "Interval.Major2nd",
        "minor 2nd": "Interval.Minor2nd",
        "major 2nd": "Interval.Major2nd",
        "minor 3rd": "Interval.Minor3rd",
        "major 3rd": "Interval.Major3rd",
        "perfect 4th": "Interval.Perfect4th",
        "tritone": "Interval.Diminished5th",
        "perfect 5th": "Interval.Perfect5th",
        "minor 6th": "Interval.Minor6th",
        "major 6th": "Interval.Major6th",
        "minor 7th": "Interval.Minor7th",
        "major 7th": "Interval.Major7th",
        "octave": "Interval.Octave",
        "major scale": "Scale.Major",
        "minor scale": "Scale.NaturalMinor",
        "natural minor scale": "Scale.NaturalMinor",
    }
)

_CANONICAL_BY_LOWER: Final[Mapping[str, str]] = MappingProxyType(
    {name.lower(): name for name in AURAL_OBJECTS}
)

# Step units used when building scales and chords by hand
STEP_SEMITONES: Final[Mapping[str, int]] = MappingProxyType({"S": 1, "T": 2})
SCALE_STEP_COUNT = 7
TRIAD_STEP_COUNT = 4
MAX_INTERVAL_STEPS = 12


class UnknownAuralName(KeyError):
    """Raised when a phrase names no known aural object."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unrecognised aural object name: {self.name!r}"


def _canonical_name(name: str) -> str | None:
    key = name.strip().lower()
    if key in ALIASES:
        return ALIASES[key]
    return _CANONICAL_BY_LOWER.get(key)


def is_valid_aural_name(name: str) -> bool:
    return _canonical_name(name) is not None


def aural_names() -> list[str]:
    """All accepted human phrases, sorted."""
    return sorted(ALIASES)


def resolve_aural_object(name_or_degrees: AuralInput) -> Degrees:
    """
    Map a phrase such as ``"major chord"`` (or an explicit degree list) to degrees.

    Raw degree sequences are returned unchanged, as a tuple. Phrases are
    matched case-insensitively against the alias table and then against the
    canonical names.

    Raises:
        ValueError: If a raw degree is not an integer.
        UnknownAuralName: If the phrase matches nothing. No default object is
            ever substituted.
    """
    if not isinstance(name_or_degrees, str):
        degrees = tuple(name_or_degrees)
        for degree in degrees:
            if isinstance(degree, bool) or not isinstance(degree, Integral):
                raise ValueError(f"Degrees must be whole semitones, got {degree!r}")
        return degrees

    canonical = _canonical_name(name_or_degrees)
    if canonical is None:
        raise UnknownAuralName(name_or_degrees)
    return AURAL_OBJECTS[canonical]


def _step_sizes(steps: Sequence[str]) -> list[int]:
    sizes: list[int] = []
    for unit in steps:
        key = unit.strip().upper()
        if key not in STEP_SEMITONES:
            raise ValueError(f"Unknown step unit {unit!r}; use 'S' (semitone) or 'T' (tone)")
        sizes.append(STEP_SEMITONES[key])
    return sizes


def steps_to_degrees(steps: Sequence[str]) -> Degrees:
    """
    Build a scale from seven semitone/tone steps, e.g. ``T T S T T T S`` -> major scale.

    Degree *i* is the sum of the steps before it, so the seventh step only
    closes the scale. The octave is appended when the seventh degree is still
    below it: ``T`` x 7 gives ``(0, 2, 4, 6, 8, 10, 12)``.
    """
    if len(steps) != SCALE_STEP_COUNT:
        raise ValueError(f"A scale needs exactly {SCALE_STEP_COUNT} steps, got {len(steps)}")
    degrees = [0]
    for size in _step_sizes(steps)[:-1]:
        degrees.append(degrees[-1] + size)
    if degrees[-1] < OCTAVE:
        degrees.append(OCTAVE)
    return tuple(degrees)


def steps_to_interval(steps: Sequence[str]) -> Degrees:
    """Stack up to twelve steps into one interval: ``T T T S`` -> perfect 5th."""
    if not 1 <= len(steps) <= MAX_INTERVAL_STEPS:
        raise ValueError(f"An interval needs 1 to {MAX_INTERVAL_STEPS} steps, got {len(steps)}")
    return (0, sum(_step_sizes(steps)))


def steps_to_triad(steps: Sequence[str]) -> Degrees:
    """
    Build a root-position triad from four steps: two up to the 3rd, two to the 5th.

    ``T T T S`` gives a major triad, ``T S T T`` a minor one.
    """
    if len(steps) != TRIAD_STEP_COUNT:
        raise ValueError(f"A triad needs exactly {TRIAD_STEP_COUNT} steps, got {len(steps)}")
    sizes = _step_sizes(steps)
    third = sizes[0] + sizes[1]
    fifth = third + sizes[2] + sizes[3]
    return (0, third, fifth)
