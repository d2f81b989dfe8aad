"""MidiExporter: writes a diagonal run or a harmonisation tab to a MIDI file."""

from __future__ import annotations

from typing import Sequence

from midiutil import MIDIFile

from fretscale.diagonal_run import DiagonalRunNote
from fretscale.fretboard import Instrument
from fretscale.tab_models import Played, StructuredTab, TabEntry, Technique

# In midiutil Format 1 MIDI, track 0 is the conductor/tempo track.
TRACK_CONDUCTOR = 0  # Tempo only, never receives notes
TRACK_GUITAR = 1

CHANNEL_GUITAR = 0
NYLON_GUITAR_PROGRAM = 24  # General MIDI "Acoustic Guitar (nylon)", zero-based


class MidiExporter:
    """
    Writes practice material as a Format-1 MIDI file.

    Track layout
    ------------
    Track 0 - conductor track (tempo only).
    Track 1 - "Guitar": one note per run note, or per sounding tab entry.

    Timing
    ------
    Every run note and every tab column lasts one beat. Rest columns keep
    their beat silent; bar-line columns take no time.
    """

    DEFAULT_TEMPO = 90     # BPM
    DEFAULT_VELOCITY = 84  # 0-127

    def __init__(
        self,
        tempo: int = DEFAULT_TEMPO,
        velocity: int = DEFAULT_VELOCITY,
    ) -> None:
        """
        Args:
            tempo:    Playback tempo in beats per minute.
            velocity: MIDI note-on velocity.
        """
        self.tempo = tempo
        self.velocity = velocity

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _entry_pitch(self, entry: TabEntry, instrument: Instrument) -> int | None:
        """Absolute pitch for a tab entry; techniques sound their starting fret."""
        value = entry.value
        if isinstance(value, Played):
            fret: int | None = value.fret
        elif isinstance(value, Technique):
            fret = value.base_fret
        else:
            fret = None
        if fret is None or not 0 <= entry.string < instrument.num_strings:
            return None
        return instrument.open_midi[entry.string] + fret

    def run_events(self, run: Sequence[DiagonalRunNote], instrument: Instrument) -> list[tuple[float, int]]:
        """``(beat, pitch)`` pairs for a diagonal run."""
        return [
            (float(beat), instrument.open_midi[note.string] + note.fret)
            for beat, note in enumerate(run)
        ]

    def tab_events(self, tab: StructuredTab, instrument: Instrument) -> list[tuple[float, int]]:
        """``(beat, pitch)`` pairs for a structured tab."""
        events: list[tuple[float, int]] = []
        beat = 0.0
        for column in tab.columns:
            if column.is_bar:
                continue
            for entry in column.entries:
                pitch = self._entry_pitch(entry, instrument)
                if pitch is not None:
                    events.append((beat, pitch))
            beat += 1.0
        return events

    def _write(self, events: list[tuple[float, int]], output_path: str) -> None:
        midi = MIDIFile(numTracks=2, removeDuplicates=False, deinterleave=False)
        midi.addTempo(TRACK_CONDUCTOR, 0, self.tempo)
        midi.addTrackName(TRACK_GUITAR, 0, "Guitar")
        midi.addProgramChange(TRACK_GUITAR, CHANNEL_GUITAR, 0, NYLON_GUITAR_PROGRAM)

        for beat, pitch in events:
            midi.addNote(
                track=TRACK_GUITAR,
                channel=CHANNEL_GUITAR,
                pitch=pitch,
                time=beat,
                duration=1,
                volume=self.velocity,
            )

        with open(output_path, "wb") as f:
            midi.writeFile(f)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def export_run(self, run: Sequence[DiagonalRunNote], instrument: Instrument, output_path: str) -> None:
        """
        Write a diagonal run as a one-beat-per-note melody.

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        self._write(self.run_events(run, instrument), output_path)

    def export_tab(self, tab: StructuredTab, instrument: Instrument, output_path: str) -> None:
        """
        Write a structured tab, one beat per column.

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        self._write(self.tab_events(tab, instrument), output_path)
