"""Grammar for a single shorthand-note token.

A token is ``<pitch class><octave>?,?<duration>?``, for example ``c``,
``F#4``, ``bb3,8n.`` or ``e16t``. Anything the grammar does not cover in
full is rejected; the compiler decides what to do with rejected tokens.
"""

from __future__ import annotations

import re

from intuitune.models import PartialNote

_NOTE_RE = re.compile(
    r"""
    (?P<pitch_class>[a-gA-G](?:bb|b|\#|x)?)      # letter plus optional accidental
    (?P<octave>10|11|-[1-4]|[0-9])?              # octave -4 .. 11
    ,?                                            # readability separator
    (?P<duration>
        0|1m|1n\.|1n                              # whole-length special cases
        |(?:2|4|8|16|32|64|128)(?:n\.|n|t)        # plain, dotted, triplet
    )?
    """,
    re.VERBOSE,
)


class NoMatch(ValueError):
    """Raised when a token is not a shorthand note."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Token was not recognised as a valid note: {token!r}")
        self.token = token


def try_match(token: str) -> PartialNote | None:
    """Match *token* against the note grammar, returning None on failure."""
    match = _NOTE_RE.fullmatch(token)
    if match is None:
        return None
    return PartialNote(
        pitch_class=match.group("pitch_class"),
        octave=match.group("octave"),
        duration=match.group("duration"),
    )


def match_token(token: str) -> PartialNote:
    """
    Classify one token as a partially-specified note.

    Raises:
        NoMatch: If the token does not match the grammar in its entirety.
    """
    note = try_match(token)
    if note is None:
        raise NoMatch(token)
    return note
