"""Instrument configuration and exhaustive scale-to-fretboard mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

import numpy as np

from fretscale.theory import ALL_NOTES, NOTE_MAP, SEMITONES, InvalidNoteName, ScaleNote, canonical_note


def _is_note_name(name: str) -> bool:
    try:
        canonical_note(name)
    except InvalidNoteName:
        return False
    return True


@dataclass(frozen=True)
class Instrument:
    """
    A fretted instrument: tuning, absolute open-string pitches and fret count.

    String index 0 is the highest-pitched string; the last index is the
    lowest. ``open_midi`` is only needed for MIDI export, but is kept here
    so tuning and pitch can never drift apart.
    """

    name: str
    tuning: tuple[str, ...]
    open_midi: tuple[int, ...]
    num_frets: int

    def __post_init__(self) -> None:
        if not self.tuning:
            raise ValueError("An instrument needs at least one string.")
        if len(self.tuning) != len(self.open_midi):
            raise ValueError(
                f"Tuning has {len(self.tuning)} strings but open_midi has {len(self.open_midi)}."
            )
        unknown = [note for note in self.tuning if not _is_note_name(note)]
        if unknown:
            raise ValueError(f"Unknown tuning note(s): {', '.join(unknown)}.")
        object.__setattr__(self, "tuning", tuple(canonical_note(note) for note in self.tuning))
        for note, midi in zip(self.tuning, self.open_midi):
            if (midi - 9) % SEMITONES != NOTE_MAP[note]:
                raise ValueError(f"MIDI pitch {midi} does not sound {note}.")
        if self.num_frets < 1:
            raise ValueError("num_frets must be positive.")

    @property
    def num_strings(self) -> int:
        return len(self.tuning)

    def open_pitch_class(self, string: int) -> int:
        return NOTE_MAP[self.tuning[string]]


# MIDI 69 is A4; ``(midi - 9) % 12`` lines MIDI numbers up with ALL_NOTES (A = 0).
SEVEN_STRING: Final[Instrument] = Instrument(
    name="7-string",
    tuning=("E", "B", "G", "D", "A", "E", "B"),
    open_midi=(64, 59, 55, 50, 45, 40, 35),
    num_frets=24,
)

SIX_STRING: Final[Instrument] = Instrument(
    name="6-string",
    tuning=("E", "B", "G", "D", "A", "E"),
    open_midi=(64, 59, 55, 50, 45, 40),
    num_frets=22,
)

INSTRUMENTS: Final[dict[str, Instrument]] = {
    SEVEN_STRING.name: SEVEN_STRING,
    SIX_STRING.name: SIX_STRING,
}


@dataclass(frozen=True)
class FretboardNote:
    """A scale tone at a concrete (string, fret) location."""

    string: int
    fret: int
    note_name: str
    degree: str

    @property
    def key(self) -> tuple[int, int]:
        return (self.string, self.fret)

    @property
    def is_open(self) -> bool:
        return self.fret == 0


def pitch_class_at(instrument: Instrument, string: int, fret: int) -> int:
    """Pitch class sounding at ``(string, fret)``."""
    return (instrument.open_pitch_class(string) + fret) % SEMITONES


def pitch_class_grid(instrument: Instrument) -> np.ndarray:
    """Pitch classes for every position, shape ``(num_strings, num_frets + 1)``."""
    open_classes = np.array([NOTE_MAP[n] for n in instrument.tuning], dtype=np.int64)
    frets = np.arange(instrument.num_frets + 1, dtype=np.int64)
    return (open_classes[:, np.newaxis] + frets[np.newaxis, :]) % SEMITONES


def map_notes_on_fretboard(
    scale_notes: tuple[ScaleNote, ...] | list[ScaleNote],
    instrument: Instrument,
) -> list[FretboardNote]:
    """
    Enumerate every occurrence of the scale's pitch classes on the neck.

    The result is ordered by string, then fret, and contains exactly one
    entry per (string, fret) whose pitch class belongs to the scale.
    """
    if not scale_notes:
        return []

    degree_by_class: dict[int, str] = {}
    for note in scale_notes:
        degree_by_class.setdefault(note.pitch_class, note.degree)

    grid = pitch_class_grid(instrument)
    members = np.isin(grid, np.fromiter(degree_by_class, dtype=np.int64))

    notes: list[FretboardNote] = []
    # argwhere yields row-major (string, fret) pairs
    for string, fret in np.argwhere(members):
        pitch_class = int(grid[string, fret])
        notes.append(
            FretboardNote(
                string=int(string),
                fret=int(fret),
                note_name=ALL_NOTES[pitch_class],
                degree=degree_by_class[pitch_class],
            )
        )
    return notes
