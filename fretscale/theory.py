"""Scale formulas, pitch-class canonicalisation and degree metadata."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Final

# Canonical chromatic table. Every pitch comparison in the package goes
# through an index into this list, never through raw string equality.
ALL_NOTES: Final[list[str]] = ["A", "A#", "B", "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#"]
NOTE_MAP: Final[dict[str, int]] = {note: i for i, note in enumerate(ALL_NOTES)}
SEMITONES: Final[int] = len(ALL_NOTES)

ENHARMONIC_ALIASES: Final[dict[str, str]] = {
    "Bb": "A#",
    "Cb": "B",
    "B#": "C",
    "Db": "C#",
    "Eb": "D#",
    "Fb": "E",
    "E#": "F",
    "Gb": "F#",
    "Ab": "G#",
}

# Each formula step is (semitones from the previous scale tone, degree label).
# The root ("R") is implicit.
SCALE_FORMULAS: Final[dict[str, tuple[tuple[int, str], ...]]] = {
    "Major": ((2, "2"), (2, "3"), (1, "4"), (2, "5"), (2, "6"), (2, "7")),
    "Natural Minor": ((2, "2"), (1, "b3"), (2, "4"), (2, "5"), (1, "b6"), (2, "b7")),
    "Harmonic Minor": ((2, "2"), (1, "b3"), (2, "4"), (2, "5"), (1, "b6"), (3, "7")),
    "Melodic Minor": ((2, "2"), (1, "b3"), (2, "4"), (2, "5"), (2, "6"), (2, "7")),
    "Ionian": ((2, "2"), (2, "3"), (1, "4"), (2, "5"), (2, "6"), (2, "7")),
    "Dorian": ((2, "2"), (1, "b3"), (2, "4"), (2, "5"), (2, "6"), (1, "b7")),
    "Phrygian": ((1, "b2"), (2, "b3"), (2, "4"), (2, "5"), (1, "b6"), (2, "b7")),
    "Lydian": ((2, "2"), (2, "3"), (2, "#4"), (1, "5"), (2, "6"), (2, "7")),
    "Mixolydian": ((2, "2"), (2, "3"), (1, "4"), (2, "5"), (2, "6"), (1, "b7")),
    "Aeolian": ((2, "2"), (1, "b3"), (2, "4"), (2, "5"), (1, "b6"), (2, "b7")),
    "Locrian": ((1, "b2"), (2, "b3"), (2, "4"), (1, "b5"), (2, "b6"), (2, "b7")),
    "Phrygian Dominant": ((1, "b2"), (3, "3"), (1, "4"), (2, "5"), (1, "b6"), (2, "b7")),
    "Lydian Dominant": ((2, "2"), (2, "3"), (2, "#4"), (1, "5"), (2, "6"), (1, "b7")),
    "Hungarian Minor": ((2, "2"), (1, "b3"), (3, "#4"), (1, "5"), (1, "b6"), (3, "7")),
    "Major Pentatonic": ((2, "2"), (2, "3"), (3, "5"), (2, "6")),
    "Minor Pentatonic": ((3, "b3"), (2, "4"), (2, "5"), (3, "b7")),
    "Blues": ((3, "b3"), (2, "4"), (1, "b5"), (1, "5"), (3, "b7")),
    "Whole Tone": ((2, "2"), (2, "3"), (2, "#4"), (2, "#5"), (2, "b7")),
}

INTERVAL_NAMES: Final[dict[str, str]] = {
    "R": "Root",
    "b2": "Minor Second",
    "2": "Major Second",
    "b3": "Minor Third",
    "3": "Major Third",
    "4": "Perfect Fourth",
    "#4": "Augmented Fourth",
    "b5": "Diminished Fifth",
    "5": "Perfect Fifth",
    "#5": "Augmented Fifth",
    "b6": "Minor Sixth",
    "6": "Major Sixth",
    "b7": "Minor Seventh",
    "7": "Major Seventh",
}


class ScaleInputError(ValueError):
    """Base class for terminal input errors (bad root or scale name)."""


class FormulaNotFound(ScaleInputError):
    """Raised when a scale name has no entry in :data:`SCALE_FORMULAS`."""

    def __init__(self, scale_name: str) -> None:
        self.scale_name = scale_name
        super().__init__(f"Unknown scale '{scale_name}'.")


class InvalidNoteName(ScaleInputError):
    """Raised when a root note cannot be mapped onto the chromatic table."""

    def __init__(self, note_name: str) -> None:
        self.note_name = note_name
        super().__init__(f"Unknown note name '{note_name}'.")


@dataclass(frozen=True)
class ScaleNote:
    """One tone of a resolved scale.

    Attributes:
        note_name: Canonical pitch-class name from :data:`ALL_NOTES`.
        degree:    Scale-degree label, e.g. ``"R"``, ``"b3"``, ``"#4"``.
    """

    note_name: str
    degree: str

    @property
    def pitch_class(self) -> int:
        return NOTE_MAP[self.note_name]


@lru_cache(maxsize=None)
def canonical_note(name: str) -> str:
    """Return the canonical sharp spelling for ``name``.

    Accepts any capitalisation and the common flat spellings
    (``"bb"`` -> ``"A#"``).

    Raises:
        InvalidNoteName: If ``name`` is not a recognised pitch class.
    """
    cleaned = name.strip()
    if not cleaned:
        raise InvalidNoteName(name)
    spelled = cleaned[0].upper() + cleaned[1:].lower()
    spelled = ENHARMONIC_ALIASES.get(spelled, spelled)
    if spelled not in NOTE_MAP:
        raise InvalidNoteName(name)
    return spelled


def note_index(name: str) -> int:
    """Index of ``name`` in the canonical chromatic table."""
    return NOTE_MAP[canonical_note(name)]


def scale_names() -> list[str]:
    """All supported scale names, in table order."""
    return list(SCALE_FORMULAS)


def generate_scale_notes(root_note: str, scale_name: str) -> tuple[ScaleNote, ...]:
    """
    Resolve ``root_note`` + ``scale_name`` into an ordered scale.

    Walks the chromatic circle from the root, adding each formula step
    modulo 12. The first element is always the root with degree ``"R"``
    and the result has ``len(formula) + 1`` notes.

    Raises:
        FormulaNotFound: If ``scale_name`` is not a known scale.
        InvalidNoteName: If ``root_note`` is not a recognised pitch class.
    """
    formula = SCALE_FORMULAS.get(scale_name)
    if formula is None:
        raise FormulaNotFound(scale_name)

    root = canonical_note(root_note)
    notes = [ScaleNote(note_name=root, degree="R")]
    current = NOTE_MAP[root]
    for step, degree in formula:
        current = (current + step) % SEMITONES
        notes.append(ScaleNote(note_name=ALL_NOTES[current], degree=degree))
    return tuple(notes)


def diagram_metadata(scale_notes: tuple[ScaleNote, ...]) -> tuple[list[str], list[str]]:
    """
    Return ``(tonic_chord_degrees, characteristic_degrees)`` for a scale.

    Tonic chord degrees are the root plus whichever thirds and fifths the
    scale contains. Characteristic degrees are the tones that give a mode
    its colour relative to plain major/minor.
    """
    degrees = {n.degree for n in scale_notes}

    tonic = ["R"] + [d for d in ("3", "b3", "5", "b5") if d in degrees]

    characteristic = [d for d in ("b2", "#4", "b6") if d in degrees]
    if "7" in degrees and "b6" in degrees:
        characteristic.append("7")
    if "6" in degrees and "b7" in degrees:
        characteristic.append("6")
    return tonic, characteristic


def degree_table_markdown(scale_notes: tuple[ScaleNote, ...]) -> str:
    """Markdown table of degree, interval name and note for each scale tone."""
    lines = ["| Degree | Interval | Note |", "|---|---|---|"]
    for note in scale_notes:
        interval = INTERVAL_NAMES.get(note.degree, note.degree)
        lines.append(f"| {note.degree} | {interval} | {note.note_name} |")
    return "\n".join(lines)
