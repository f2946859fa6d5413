"""Duration-code to seconds conversion.

Duration codes follow the usual subdivision notation: ``4n`` is a quarter
note, ``8n.`` a dotted eighth, ``8t`` an eighth-note triplet, ``1m`` one
measure and ``0`` no time at all. Everything assumes 4/4.
"""

from __future__ import annotations

import re
from fractions import Fraction

REFERENCE_TEMPO = 120.0  # BPM at which compiled music is laid out
BEATS_PER_MEASURE = 4

_CODE_RE = re.compile(r"(\d+)(m|n\.|n|t)")

_SUFFIX_FACTORS: dict[str, Fraction] = {
    "n": Fraction(1),
    "n.": Fraction(3, 2),
    "t": Fraction(2, 3),
}


class InvalidDuration(ValueError):
    """Raised when a duration code cannot be interpreted."""


def _code_to_quarters(code: str) -> Fraction:
    if code == "0":
        return Fraction(0)

    match = _CODE_RE.fullmatch(code)
    if match is None:
        raise InvalidDuration(f"Not a duration code: {code!r}")

    count, suffix = int(match.group(1)), match.group(2)
    if count == 0:
        raise InvalidDuration(f"Subdivision must be positive: {code!r}")
    if suffix == "m":
        return Fraction(count * BEATS_PER_MEASURE)
    return Fraction(4, count) * _SUFFIX_FACTORS[suffix]


def is_duration_code(code: str) -> bool:
    try:
        _code_to_quarters(code)
    except InvalidDuration:
        return False
    return True


def duration_to_seconds(duration: str | float, tempo: float = REFERENCE_TEMPO) -> float:
    """
    Convert a duration code to seconds at *tempo* BPM.

    Numbers are taken to already be seconds and are returned unchanged.

    Raises:
        InvalidDuration: If *duration* is a string that is not a known code.
        ValueError:      If *tempo* is not positive.
    """
    if tempo <= 0:
        raise ValueError(f"tempo must be positive, got {tempo}")
    if not isinstance(duration, str):
        return float(duration)

    quarter_seconds = 60.0 / tempo
    return float(_code_to_quarters(duration.strip())) * quarter_seconds
