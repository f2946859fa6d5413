"""Unit tests for PlaybackHandle, schedule_playback, play_aural and render_offline."""

import asyncio
from unittest.mock import MagicMock

import pytest

from intuitune.aural_objects import UnknownAuralName
from intuitune.midi_engine import MidiFileEngine
from intuitune.models import MusicEvent
from intuitune.notation_compiler import compile_shorthand
from intuitune.scheduler import (
    PlaybackHandle,
    play_aural,
    render_offline,
    schedule_playback,
    score_length,
)
from intuitune.score_builder import PlaybackOptions, build_score


def _triad_score() -> tuple[MusicEvent, ...]:
    return build_score((0, 4, 7), PlaybackOptions(root="C4", note_duration=0.5))


# ---------------------------------------------------------------------------
# schedule_playback
# ---------------------------------------------------------------------------

def test_length_of_score(timers, engine) -> None:
    handle = schedule_playback(_triad_score(), engine, timers=timers)
    assert handle.length == pytest.approx(2.0)
    assert not handle.has_finished()


def test_units_fire_in_order(timers, engine) -> None:
    schedule_playback(_triad_score(), engine, timers=timers)
    timers.advance(1.0)
    assert [(n.midi, n.start) for n in engine.notes] == [(60, 0.0), (64, 0.5), (67, 1.0)]
    assert all(n.velocity == 1.0 for n in engine.notes)


def test_chord_is_delayed_and_softer(timers, engine) -> None:
    schedule_playback(_triad_score(), engine, timers=timers)
    timers.advance(2.0)
    chord = engine.notes[3:]
    assert [n.midi for n in chord] == [60, 64, 67]
    assert all(n.start == pytest.approx(1.75) for n in chord)
    assert all(n.velocity == 0.65 for n in chord)


def test_natural_completion_calls_on_finish_once(timers, engine) -> None:
    on_finish = MagicMock()
    handle = schedule_playback(_triad_score(), engine, on_finish=on_finish, timers=timers)
    timers.advance(1.99)
    on_finish.assert_not_called()
    timers.advance(0.02)
    assert handle.has_finished()
    on_finish.assert_called_once()
    assert timers.pending() == []


def test_stop_twice_calls_on_finish_once(timers, engine) -> None:
    on_finish = MagicMock()
    handle = schedule_playback(_triad_score(), engine, on_finish=on_finish, timers=timers)
    handle.stop_playback()
    handle.stop_playback()
    on_finish.assert_called_once()
    assert handle.has_finished()


def test_stop_cancels_pending_units(timers, engine) -> None:
    handle = schedule_playback(_triad_score(), engine, timers=timers)
    timers.advance(0.6)
    handle.stop_playback()
    assert timers.pending() == []
    timers.advance(5.0)
    assert [n.midi for n in engine.notes] == [60, 64]


def test_stop_after_completion_is_noop(timers, engine) -> None:
    on_finish = MagicMock()
    handle = schedule_playback(_triad_score(), engine, on_finish=on_finish, timers=timers)
    timers.advance(3.0)
    handle.stop_playback()
    on_finish.assert_called_once()


def test_playbacks_are_independent(timers, engine) -> None:
    first = schedule_playback(_triad_score(), engine, timers=timers)
    second = schedule_playback(_triad_score(), engine, timers=timers)
    first.stop_playback()
    assert not second.has_finished()
    timers.advance(3.0)
    assert second.has_finished()
    assert len(engine.notes) == 6


def test_compiled_music_uses_code_durations(timers, engine) -> None:
    music = compile_shorthand("c4,4n e,8n g,2n").music
    handle = schedule_playback(music, engine, timers=timers)
    assert handle.length == pytest.approx(1.75)
    timers.advance(2.0)
    assert [n.start for n in engine.notes] == pytest.approx([0.0, 0.5, 0.75])
    assert [n.duration for n in engine.notes] == pytest.approx([0.5, 0.25, 1.0])


def test_tempo_stretches_music(timers, engine) -> None:
    music = compile_shorthand("c4,4n e").music
    handle = schedule_playback(music, engine, timers=timers, tempo=60)
    assert handle.length == pytest.approx(2.0)
    timers.advance(2.0)
    assert [n.start for n in engine.notes] == pytest.approx([0.0, 1.0])


def test_empty_music_finishes_immediately(timers, engine) -> None:
    on_finish = MagicMock()
    handle = schedule_playback((), engine, on_finish=on_finish, timers=timers)
    assert handle.length == 0.0
    timers.advance(0.0)
    assert handle.has_finished()
    on_finish.assert_called_once()


def test_score_length_rejects_bad_tempo() -> None:
    with pytest.raises(ValueError):
        score_length(_triad_score(), tempo=0)


# ---------------------------------------------------------------------------
# play_aural
# ---------------------------------------------------------------------------

def test_play_aural_by_name(timers, engine) -> None:
    on_finish = MagicMock()
    options = PlaybackOptions(root="C4", chord=False, note_duration=0.25, on_finish=on_finish)
    handle = play_aural("perfect 5th", engine, options, timers=timers)
    assert handle.length == pytest.approx(0.5)
    timers.advance(1.0)
    assert [n.midi for n in engine.notes] == [60, 67]
    on_finish.assert_called_once()


def test_play_aural_silent(timers, engine) -> None:
    on_finish = MagicMock()
    handle = play_aural("silent", engine, PlaybackOptions(on_finish=on_finish), timers=timers)
    assert handle.length == 0.0
    assert handle.has_finished()
    assert timers.timers == []
    handle.stop_playback()
    handle.stop_playback()
    on_finish.assert_called_once()


def test_silent_handle_without_callback() -> None:
    handle = PlaybackHandle.silent()
    handle.stop_playback()
    assert handle.has_finished()


def test_handle_exposes_given_engine(timers, engine) -> None:
    handle = schedule_playback(_triad_score(), engine, timers=timers)
    assert handle.engine is engine


def test_default_engine_is_reachable_from_handle(timers, tmp_path) -> None:
    score = build_score((0, 7), PlaybackOptions(root="C4", note_duration=0.5))
    handle = schedule_playback(score, timers=timers)
    timers.advance(5.0)
    assert handle.has_finished()
    assert isinstance(handle.engine, MidiFileEngine)
    assert [n.midi for n in handle.engine.notes] == [60, 67, 60, 67]

    output = tmp_path / "fifth.mid"
    handle.engine.write(str(output))
    assert output.read_bytes().startswith(b"MThd")


def test_play_aural_default_engine(timers) -> None:
    options = PlaybackOptions(root="C4", chord=False, note_duration=0.25)
    handle = play_aural("perfect 5th", options=options, timers=timers)
    timers.advance(1.0)
    assert isinstance(handle.engine, MidiFileEngine)
    assert [n.midi for n in handle.engine.notes] == [60, 67]


def test_silent_handle_has_no_engine(timers) -> None:
    assert play_aural("silent", timers=timers).engine is None


def test_play_aural_unknown_name(timers, engine) -> None:
    with pytest.raises(UnknownAuralName):
        play_aural("ninth chord", engine, timers=timers)
    assert timers.timers == []


# ---------------------------------------------------------------------------
# render_offline
# ---------------------------------------------------------------------------

def test_render_offline_matches_realtime_policy() -> None:
    engine = MidiFileEngine(clock=lambda: 0.0)
    length = render_offline(_triad_score(), engine, start=10.0)
    assert length == pytest.approx(2.0)
    assert [n.start for n in engine.notes] == pytest.approx([10.0, 10.5, 11.0, 11.75, 11.75, 11.75])


# ---------------------------------------------------------------------------
# Real event loop
# ---------------------------------------------------------------------------

@pytest.mark.integration
@pytest.mark.asyncio
async def test_runs_on_asyncio_loop() -> None:
    engine = MidiFileEngine()
    done = asyncio.Event()
    score = build_score((0, 12), PlaybackOptions(note_duration=0.01))
    handle = schedule_playback(score, engine, on_finish=done.set)
    await asyncio.wait_for(done.wait(), timeout=2.0)
    assert handle.has_finished()
    assert len(engine.notes) == 4


@pytest.mark.integration
@pytest.mark.asyncio
async def test_stop_on_asyncio_loop() -> None:
    engine = MidiFileEngine()
    handle = schedule_playback(build_score((0, 4, 7), PlaybackOptions(note_duration=5.0)), engine)
    await asyncio.sleep(0.01)
    handle.stop_playback()
    await asyncio.sleep(0.01)
    assert handle.has_finished()
    assert len(engine.notes) == 1


def test_requires_running_loop_without_timers() -> None:
    with pytest.raises(RuntimeError):
        schedule_playback(_triad_score(), MidiFileEngine())
