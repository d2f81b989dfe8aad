"""Diatonic triads with voicings looked up from a fixed shape library."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Sequence

from fretscale.fingering import DEFAULT_FRET_RANGE, POSITION_SPAN
from fretscale.fretboard import Instrument, map_notes_on_fretboard
from fretscale.theory import SEMITONES, ScaleNote

ROMAN_NUMERALS: Final[list[str]] = ["I", "II", "III", "IV", "V", "VI", "VII"]

MINOR_THIRD = 3
DIMINISHED_FIFTH = 6
AUGMENTED_FIFTH = 8

# Movable shapes are transposed to roots within this fret range (inclusive).
MOVABLE_ROOT_MIN_FRET = 1
MOVABLE_ROOT_MAX_FRET = 14


@dataclass(frozen=True)
class VoicingNote:
    """A chord tone; ``finger`` 0 means the string rings open."""

    string: int
    fret: int
    finger: int


@dataclass(frozen=True)
class Barre:
    from_string: int
    to_string: int
    fret: int


@dataclass(frozen=True)
class VoicingTemplate:
    """A library chord shape, either fixed (open) or movable (barre)."""

    name: str
    quality: str
    is_movable: bool
    root_string: int
    root_fret: int
    notes: tuple[VoicingNote, ...]
    barres: tuple[Barre, ...] = ()
    open_strings: tuple[int, ...] = ()
    muted_strings: tuple[int, ...] = ()
    root_note_name: str | None = None


@dataclass(frozen=True)
class Voicing:
    name: str
    notes: tuple[VoicingNote, ...]
    barres: tuple[Barre, ...] = ()
    open_strings: tuple[int, ...] = ()
    muted_strings: tuple[int, ...] = ()


@dataclass(frozen=True)
class Chord:
    name: str
    degree: str
    voicings: tuple[Voicing, ...]


def _notes(*triples: tuple[int, int, int]) -> tuple[VoicingNote, ...]:
    return tuple(VoicingNote(string=s, fret=f, finger=g) for s, f, g in triples)


# Shapes are written for the 7-string layout (string 0 = high E, 6 = low B).
CHORD_VOICING_LIBRARY: Final[tuple[VoicingTemplate, ...]] = (
    # Fixed shapes, matched by root name
    VoicingTemplate(
        "Open E Major", "maj", False, 5, 0,
        _notes((5, 0, 0), (4, 2, 2), (3, 2, 3), (2, 1, 1), (1, 0, 0), (0, 0, 0)),
        open_strings=(6, 5, 1, 0), root_note_name="E",
    ),
    VoicingTemplate(
        "Open E Minor", "min", False, 5, 0,
        _notes((5, 0, 0), (4, 2, 2), (3, 2, 3), (2, 0, 0), (1, 0, 0), (0, 0, 0)),
        open_strings=(6, 5, 2, 1, 0), root_note_name="E",
    ),
    VoicingTemplate(
        "Open A Major", "maj", False, 4, 0,
        _notes((4, 0, 0), (3, 2, 1), (2, 2, 2), (1, 2, 3), (0, 0, 0)),
        open_strings=(5, 4, 0), muted_strings=(6,), root_note_name="A",
    ),
    VoicingTemplate(
        "Open A Minor", "min", False, 4, 0,
        _notes((4, 0, 0), (3, 2, 2), (2, 2, 3), (1, 1, 1), (0, 0, 0)),
        open_strings=(5, 4, 0), muted_strings=(6,), root_note_name="A",
    ),
    VoicingTemplate(
        "Open D Major", "maj", False, 3, 0,
        _notes((3, 0, 0), (2, 2, 1), (1, 3, 3), (0, 2, 2)),
        open_strings=(4, 3), muted_strings=(6, 5), root_note_name="D",
    ),
    VoicingTemplate(
        "Open D Minor", "min", False, 3, 0,
        _notes((3, 0, 0), (2, 2, 2), (1, 3, 3), (0, 1, 1)),
        open_strings=(4, 3), muted_strings=(6, 5), root_note_name="D",
    ),
    VoicingTemplate(
        "Open G Major", "maj", False, 2, 0,
        _notes((5, 3, 2), (4, 2, 1), (3, 0, 0), (2, 0, 0), (1, 0, 0), (0, 3, 3)),
        open_strings=(3, 2, 1), muted_strings=(6,), root_note_name="G",
    ),
    VoicingTemplate(
        "Open C Major", "maj", False, 4, 3,
        _notes((4, 3, 3), (3, 2, 2), (2, 0, 0), (1, 1, 1), (0, 0, 0)),
        open_strings=(2, 0), muted_strings=(6, 5), root_note_name="C",
    ),
    VoicingTemplate(
        "B Diminished", "dim", False, 4, 2,
        _notes((4, 2, 1), (3, 3, 2), (2, 4, 4), (1, 3, 3)),
        muted_strings=(6, 5, 0), root_note_name="B",
    ),
    # Movable barre shapes, transposed along the root string
    VoicingTemplate(
        "E-Shape Barre", "maj", True, 5, 1,
        _notes((6, 1, 1), (5, 1, 1), (4, 3, 3), (3, 3, 4), (2, 2, 2), (1, 1, 1), (0, 1, 1)),
        barres=(Barre(0, 6, 1),),
    ),
    VoicingTemplate(
        "E-Shape Barre", "min", True, 5, 1,
        _notes((6, 1, 1), (5, 1, 1), (4, 3, 3), (3, 3, 4), (2, 1, 1), (1, 1, 1), (0, 1, 1)),
        barres=(Barre(0, 6, 1),),
    ),
    VoicingTemplate(
        "A-Shape Barre", "maj", True, 4, 1,
        _notes((5, 1, 1), (4, 1, 1), (3, 3, 2), (2, 3, 3), (1, 3, 4), (0, 1, 1)),
        barres=(Barre(0, 5, 1),),
    ),
    VoicingTemplate(
        "A-Shape Barre", "min", True, 4, 1,
        _notes((5, 1, 1), (4, 1, 1), (3, 3, 3), (2, 3, 4), (1, 2, 2), (0, 1, 1)),
        barres=(Barre(0, 5, 1),),
    ),
)


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def triad_quality(root: int, third: int, fifth: int) -> str:
    """Classify a triad from its pitch classes as maj, min, dim or aug."""
    third_interval = (third - root) % SEMITONES
    fifth_interval = (fifth - root) % SEMITONES
    if third_interval == MINOR_THIRD:
        return "dim" if fifth_interval == DIMINISHED_FIFTH else "min"
    return "aug" if fifth_interval == AUGMENTED_FIFTH else "maj"


def _degree_label(numeral: str, quality: str) -> str:
    if quality == "min":
        return numeral.lower()
    if quality == "dim":
        return f"{numeral.lower()}°"
    if quality == "aug":
        return f"{numeral}+"
    return numeral


def _fit_to_instrument(voicing: Voicing, num_strings: int) -> Voicing:
    """Drop anything on strings the instrument does not have."""
    top = num_strings - 1
    return Voicing(
        name=voicing.name,
        notes=tuple(n for n in voicing.notes if n.string <= top),
        barres=tuple(
            Barre(b.from_string, min(b.to_string, top), b.fret) for b in voicing.barres if b.from_string <= top
        ),
        open_strings=tuple(s for s in voicing.open_strings if s <= top),
        muted_strings=tuple(s for s in voicing.muted_strings if s <= top),
    )


def generate_diatonic_chords(
    scale_notes: Sequence[ScaleNote],
    instrument: Instrument,
) -> dict[str, Chord]:
    """
    Map each diatonic degree label (``"I"``, ``"ii"``, ``"vii°"``...) to its chord.

    Triads are stacked in scale thirds. Open shapes are used when their
    root name matches; movable shapes are shifted onto every occurrence
    of the chord root on the shape's root string between frets 1 and 14.
    Degrees with no matching shape are left out.
    """
    chords: dict[str, Chord] = {}
    if not scale_notes:
        return chords
    fretboard = map_notes_on_fretboard(tuple(scale_notes), instrument)
    size = len(scale_notes)

    for i, root in enumerate(scale_notes[: len(ROMAN_NUMERALS)]):
        third = scale_notes[(i + 2) % size]
        fifth = scale_notes[(i + 4) % size]
        quality = triad_quality(root.pitch_class, third.pitch_class, fifth.pitch_class)
        degree = _degree_label(ROMAN_NUMERALS[i], quality)

        voicings: list[Voicing] = []
        for template in CHORD_VOICING_LIBRARY:
            if template.quality != quality:
                continue
            if not template.is_movable:
                if template.root_note_name == root.note_name:
                    voicings.append(
                        Voicing(
                            name=template.name,
                            notes=template.notes,
                            barres=template.barres,
                            open_strings=template.open_strings,
                            muted_strings=template.muted_strings,
                        )
                    )
                continue

            anchors = [
                n
                for n in fretboard
                if n.note_name == root.note_name
                and n.string == template.root_string
                and MOVABLE_ROOT_MIN_FRET <= n.fret <= MOVABLE_ROOT_MAX_FRET
            ]
            for anchor in anchors:
                shift = anchor.fret - template.root_fret
                voicings.append(
                    Voicing(
                        name=f"{template.name} @ {_ordinal(anchor.fret)} fret",
                        notes=tuple(VoicingNote(n.string, n.fret + shift, n.finger) for n in template.notes),
                        barres=tuple(Barre(b.from_string, b.to_string, b.fret + shift) for b in template.barres),
                        muted_strings=template.muted_strings,
                    )
                )

        fitted = tuple(
            v for v in (_fit_to_instrument(v, instrument.num_strings) for v in voicings) if v.notes
        )
        if fitted:
            suffix = "maj" if quality == "maj" else quality
            chords[degree] = Chord(name=f"{root.note_name}{suffix}", degree=degree, voicings=fitted)
    return chords


def voicing_fret_range(voicing: Voicing) -> tuple[int, int]:
    """Five-fret drawing window for a voicing; (1, 5) when nothing is fretted."""
    fretted = [n.fret for n in voicing.notes if n.fret > 0]
    if not fretted:
        return DEFAULT_FRET_RANGE
    lowest = min(fretted)
    start = lowest if lowest > 1 else 1
    return (start, start + POSITION_SPAN - 1)
