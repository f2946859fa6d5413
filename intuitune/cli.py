"""intuitune CLI entry point."""

import logging
import sys
from typing import Any

import click

from intuitune import __version__
from intuitune.aural_objects import ALIASES, UnknownAuralName, aural_names, resolve_aural_object
from intuitune.midi_engine import MidiFileEngine
from intuitune.models import Music
from intuitune.notation_compiler import compile_shorthand, transpose
from intuitune.pitch import pitch_to_frequency
from intuitune.scheduler import render_offline
from intuitune.score_builder import PlaybackOptions, build_score
from intuitune.timing import REFERENCE_TEMPO

MAX_TRANSPOSE = 24


class TransposeParam(click.ParamType):
    """Accepts a semitone count or the word 'random'."""

    name = "semitones|random"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> int | str:
        if isinstance(value, int) or value == "random":
            return value
        try:
            semitones = int(value)
        except ValueError:
            self.fail(f"{value!r} is neither an integer nor 'random'", param, ctx)
        if abs(semitones) > MAX_TRANSPOSE:
            self.fail(f"transpose must be within ±{MAX_TRANSPOSE} semitones", param, ctx)
        return semitones


class NoteDurationParam(click.ParamType):
    """Accepts seconds or the word 'auto'."""

    name = "secs|auto"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> float | str:
        if isinstance(value, float) or value == "auto":
            return value
        try:
            seconds = float(value)
        except ValueError:
            self.fail(f"{value!r} is neither a number nor 'auto'", param, ctx)
        if seconds <= 0:
            self.fail("note duration must be positive", param, ctx)
        return seconds


TRANSPOSE = TransposeParam()
NOTE_DURATION = NoteDurationParam()


def _format_note(note: str | tuple[str, ...]) -> str:
    if isinstance(note, tuple):
        return "[" + " ".join(note) + "]"
    return note


def _write_midi(music: Music, output: str, tempo: float) -> None:
    engine = MidiFileEngine(tempo=tempo)
    render_offline(music, engine, tempo=tempo)
    try:
        engine.write(output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write MIDI file — {exc}", err=True)
        sys.exit(1)


def _compile_or_exit(text: str, semitones: int | str) -> Music:
    result = compile_shorthand(text)
    if result.warning:
        click.echo(f"  WARNING: Failed to parse the tokens: {result.warning}", err=True)
    if not result.music:
        click.echo("  ERROR: No notes found in the input.", err=True)
        sys.exit(1)
    if semitones != 0:
        return transpose(result.music, semitones)
    return result.music


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="intuitune")
@click.option("-v", "--verbose", is_flag=True, help="Log scheduling and parsing detail.")
def main(verbose: bool) -> None:
    """intuitune — shorthand music notation and aural-object playback."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── compile subcommand ─────────────────────────────────────────────────────────

@main.command(name="compile")
@click.argument("text")
@click.option(
    "--transpose",
    "semitones",
    type=TRANSPOSE,
    default=0,
    show_default=True,
    help="Shift every note by this many semitones, or 'random'.",
)
def compile_command(text: str, semitones: int | str) -> None:
    """
    Compile shorthand TEXT and print its timed events.

    \b
    Examples:
      intuitune compile "c4,4n e g c5,2n"
      intuitune compile "a3,8n b c4 d e" --transpose 2
    """
    music = _compile_or_exit(text, semitones)
    for event in music:
        note = _format_note(event.note)
        freqs = " ".join(f"{pitch_to_frequency(p):.2f}" for p in event.pitches)
        click.echo(f"{event.time:7.3f}s  {note:<6} {str(event.duration):<5} {freqs} Hz")


# ── render subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("text")
@click.option("--output", "-o", required=True, metavar="PATH", help="Destination MIDI file path.")
@click.option(
    "--tempo",
    type=click.IntRange(20, 300),
    default=int(REFERENCE_TEMPO),
    show_default=True,
    help="Playback tempo in BPM.",
)
@click.option(
    "--transpose",
    "semitones",
    type=TRANSPOSE,
    default=0,
    show_default=True,
    help="Shift every note by this many semitones, or 'random'.",
)
def render(text: str, output: str, tempo: int, semitones: int | str) -> None:
    """
    Compile shorthand TEXT and write it to a MIDI file.

    \b
    Examples:
      intuitune render "c4,4n d e f g,2n" -o scale.mid
      intuitune render "e4,8n d c d e e e,4n" -o mary.mid --tempo 90
    """
    music = _compile_or_exit(text, semitones)
    _write_midi(music, output, tempo)
    click.echo(f"Done!  Wrote {len(music)} event(s) to '{output}'.")


# ── aural subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("name")
@click.option("--output", "-o", required=True, metavar="PATH", help="Destination MIDI file path.")
@click.option("--root", default="F4", show_default=True, help="Pitch of degree 0.")
@click.option(
    "--transpose",
    "semitones",
    type=TRANSPOSE,
    default=0,
    show_default=True,
    help="Shift the root by this many semitones, or 'random'.",
)
@click.option("--arpeggio/--no-arpeggio", default=True, show_default=True, help="Play notes one by one.")
@click.option("--chord/--no-chord", default=True, show_default=True, help="Finish with all notes together.")
@click.option(
    "--note-duration",
    type=NOTE_DURATION,
    default="0.6",
    show_default=True,
    help="Seconds per note, or 'auto' to fit the object into one second.",
)
def aural(
    name: str,
    output: str,
    root: str,
    semitones: int | str,
    arpeggio: bool,
    chord: bool,
    note_duration: float | str,
) -> None:
    """
    Write the aural object NAME (e.g. "major chord") to a MIDI file.

    \b
    Examples:
      intuitune aural "perfect 5th" -o fifth.mid
      intuitune aural "major scale" -o scale.mid --no-chord --note-duration auto
    """
    try:
        degrees = resolve_aural_object(name)
        options = PlaybackOptions(
            root=root,
            transpose=semitones,
            arpeggio=arpeggio,
            chord=chord,
            note_duration=note_duration,
        )
    except UnknownAuralName as exc:
        click.echo(f"  ERROR: {exc}. Run 'intuitune names' for the list.", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)

    score = build_score(degrees, options)
    if not score:
        click.echo("Nothing to play.")
        return

    _write_midi(score, output, REFERENCE_TEMPO)
    click.echo(f"Done!  Wrote {len(score)} unit(s) to '{output}'.")


# ── names subcommand ───────────────────────────────────────────────────────────

@main.command()
def names() -> None:
    """List the phrases accepted by 'aural'."""
    for phrase in aural_names():
        degrees = " ".join(str(d) for d in resolve_aural_object(phrase)) or "-"
        click.echo(f"{phrase:<22} {ALIASES[phrase]:<24} {degrees}")
