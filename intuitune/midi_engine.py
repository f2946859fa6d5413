"""MidiFileEngine: an audio engine that records triggered notes to a MIDI file."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from midiutil import MIDIFile

from intuitune.pitch import pitch_to_midi
from intuitune.timing import REFERENCE_TEMPO

logger = logging.getLogger(__name__)

# In midiutil Format 1 MIDI, track 0 is the conductor/tempo track.
# Note data written to track 0 is ignored by most players and notation apps.
TRACK_CONDUCTOR = 0  # Tempo only — never receives notes
TRACK_NOTES = 1
CHANNEL_NOTES = 0

MIDI_NOTE_RANGE = range(0, 128)
MAX_VELOCITY = 127


@dataclass(frozen=True)
class RecordedNote:
    """
    One note received by the engine.

    Attributes:
        midi:     MIDI note number.
        start:    Start time in seconds on the engine clock.
        duration: Length in seconds.
        velocity: Loudness in the range 0..1.
    """

    midi: int
    start: float
    duration: float
    velocity: float


class MidiFileEngine:
    """
    Audio engine that captures every trigger and writes it out as MIDI.

    Works both in real time (``now()`` follows *clock*, so notes land where
    the scheduler fired them) and offline (callers pass absolute start times).

    Track layout (Format 1, 2 internal tracks)
    ------------------------------------------
    Track 0 — conductor track (tempo only, no notes)

    Track 1 — every triggered note, on a single channel with the chosen
        General MIDI program.

    Timing
    ------
    Start times and durations (seconds) are converted to beats using:
    beats = seconds × (tempo / 60).
    """

    def __init__(
        self,
        tempo: float = REFERENCE_TEMPO,
        program: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            tempo:   Tempo written to the file, in beats per minute.
            program: General MIDI program number (0 = Acoustic Grand Piano).
            clock:   Monotonic time source in seconds.
        """
        if not 0 <= program <= 127:
            raise ValueError(f"program must be in 0..127, got {program}")
        self.tempo = tempo
        self.program = program
        self._clock = clock
        self._origin = clock()
        self._notes: list[RecordedNote] = []

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _seconds_to_beats(self, seconds: float) -> float:
        """Convert a time in seconds to beats at the current tempo."""
        return seconds * (self.tempo / 60.0)

    def _midi_volume(self, velocity: float) -> int:
        return max(1, min(MAX_VELOCITY, round(velocity * MAX_VELOCITY)))

    # ------------------------------------------------------------------
    # AudioEngine protocol
    # ------------------------------------------------------------------

    def now(self) -> float:
        """Seconds elapsed since the engine was created."""
        return self._clock() - self._origin

    def trigger(
        self,
        note: str | Sequence[str],
        duration: float,
        start: float,
        velocity: float = 1.0,
    ) -> None:
        """Record *note* (one pitch name or several) sounding from *start*."""
        names = [note] if isinstance(note, str) else list(note)
        for name in names:
            self._notes.append(
                RecordedNote(
                    midi=pitch_to_midi(name),
                    start=start,
                    duration=duration,
                    velocity=velocity,
                )
            )
        logger.debug("Triggered %s at %.3fs for %.3fs (velocity %.2f)", names, start, duration, velocity)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def notes(self) -> list[RecordedNote]:
        return list(self._notes)

    def clear(self) -> None:
        self._notes.clear()

    def write(self, output_path: str) -> None:
        """
        Render the recorded notes to a Standard MIDI File.

        Notes are shifted so the earliest one starts at beat 0. Notes outside
        the MIDI range are skipped with a warning.

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        midi = MIDIFile(numTracks=2, removeDuplicates=False, deinterleave=False)

        # --- Track 0: conductor (tempo only — no notes) ---
        midi.addTempo(TRACK_CONDUCTOR, 0, self.tempo)

        # --- Track 1: notes ---
        midi.addTrackName(TRACK_NOTES, 0, "intuitune")
        midi.addProgramChange(TRACK_NOTES, CHANNEL_NOTES, 0, self.program)

        origin = min((n.start for n in self._notes), default=0.0)
        for recorded in self._notes:
            if recorded.midi not in MIDI_NOTE_RANGE:
                logger.warning("Skipping note %d outside the MIDI range", recorded.midi)
                continue
            midi.addNote(
                track=TRACK_NOTES,
                channel=CHANNEL_NOTES,
                pitch=recorded.midi,
                time=self._seconds_to_beats(recorded.start - origin),
                duration=self._seconds_to_beats(recorded.duration),
                volume=self._midi_volume(recorded.velocity),
            )

        with open(output_path, "wb") as f:
            midi.writeFile(f)
