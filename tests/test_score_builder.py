"""Unit tests for PlaybackOptions and build_score."""

import numpy as np
import pytest

from intuitune.models import GROUP_VELOCITY, SINGLE_VELOCITY
from intuitune.pitch import pitch_to_midi
from intuitune.score_builder import (
    RANDOM_TRANSPOSE_RANGE,
    PlaybackOptions,
    build_score,
    resolve_transpose,
    unit_duration,
)


def test_defaults() -> None:
    options = PlaybackOptions()
    assert options.root == "F4"
    assert options.transpose == 0
    assert options.arpeggio and options.chord
    assert options.note_duration == 0.6
    assert options.on_finish is None


def test_arpeggio_only() -> None:
    score = build_score((0, 4, 7), PlaybackOptions(root="C4", chord=False, note_duration=0.5))
    assert [u.time for u in score] == pytest.approx([0.0, 0.5, 1.0])
    assert [u.note for u in score] == ["C4", "E4", "G4"]
    assert all(not u.is_group and u.velocity == SINGLE_VELOCITY for u in score)


def test_arpeggio_then_chord() -> None:
    score = build_score((0, 4, 7), PlaybackOptions(root="C4", note_duration=0.5))
    assert len(score) == 4
    chord = score[3]
    assert chord.time == pytest.approx(1.5)
    assert chord.note == ("C4", "E4", "G4")
    assert chord.velocity == GROUP_VELOCITY
    assert chord.duration == 0.5


def test_chord_only() -> None:
    score = build_score((0, 7), PlaybackOptions(root="A3", arpeggio=False))
    assert len(score) == 1
    assert score[0].time == 0.0
    assert score[0].note == ("A3", "E4")


def test_neither_arpeggio_nor_chord() -> None:
    assert build_score((0, 4), PlaybackOptions(arpeggio=False, chord=False)) == ()


def test_fixed_transpose() -> None:
    score = build_score((0,), PlaybackOptions(root="C4", transpose=-3, chord=False))
    assert score[0].note == "A3"


def test_auto_duration_fills_one_second() -> None:
    score = build_score((0, 2, 4, 5), PlaybackOptions(note_duration="auto", chord=False))
    assert all(u.duration == pytest.approx(0.25) for u in score)
    assert unit_duration("auto", 8) == pytest.approx(0.125)


def test_negative_degrees_below_root() -> None:
    score = build_score((-8, -5, 0), PlaybackOptions(root="C5", chord=False))
    assert [u.note for u in score] == ["E4", "G4", "C5"]


def test_empty_degrees() -> None:
    assert build_score(()) == ()


def test_random_transpose_in_range() -> None:
    rng = np.random.default_rng(1234)
    low, high = RANDOM_TRANSPOSE_RANGE
    draws = {resolve_transpose("random", rng) for _ in range(2000)}
    assert draws <= set(range(low, high + 1))
    assert draws == set(range(-5, 7))


def test_random_transpose_score_in_range() -> None:
    rng = np.random.default_rng(99)
    options = PlaybackOptions(root="F4", transpose="random", chord=False)
    for _ in range(300):
        [unit] = build_score((0,), options, rng=rng)
        assert isinstance(unit.note, str)
        assert -5 <= pitch_to_midi(unit.note) - pitch_to_midi("F4") <= 6


@pytest.mark.parametrize(
    "kwargs",
    [
        {"transpose": "up"},
        {"transpose": 1.5},
        {"transpose": True},
        {"note_duration": 0},
        {"note_duration": "fast"},
    ],
)
def test_invalid_options(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        PlaybackOptions(**kwargs)


def test_invalid_root() -> None:
    with pytest.raises(ValueError):
        PlaybackOptions(root="middle C")
