"""intuitune — shorthand music notation and aural-object playback scheduling."""

from intuitune.aural_objects import UnknownAuralName, resolve_aural_object
from intuitune.grammar import NoMatch, match_token
from intuitune.midi_engine import MidiFileEngine
from intuitune.models import CompileResult, Music, MusicEvent
from intuitune.notation_compiler import compile_shorthand, string_to_music, transpose
from intuitune.scheduler import PlaybackHandle, play_aural, render_offline, schedule_playback
from intuitune.score_builder import PlaybackOptions, build_score

__version__ = "0.1.0"

__all__ = [
    "CompileResult",
    "MidiFileEngine",
    "Music",
    "MusicEvent",
    "NoMatch",
    "PlaybackHandle",
    "PlaybackOptions",
    "UnknownAuralName",
    "build_score",
    "compile_shorthand",
    "match_token",
    "play_aural",
    "render_offline",
    "resolve_aural_object",
    "schedule_playback",
    "string_to_music",
    "transpose",
]
