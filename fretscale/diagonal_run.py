"""Ascending three-notes-per-string run across the whole neck."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Final

from fretscale.fretboard import FretboardNote

logger = logging.getLogger(__name__)

NOTES_PER_STRING: Final[int] = 3


@dataclass(frozen=True)
class DiagonalRunNote:
    """A fretboard note placed on the run, with its fretting finger."""

    string: int
    fret: int
    note_name: str
    degree: str
    finger: int

    @property
    def key(self) -> tuple[int, int]:
        return (self.string, self.fret)


def finger_for_offset(offset: int) -> int:
    """
    Finger for a note ``offset`` frets above the first note on its string.

    0 -> index, 1-2 -> middle, 3-4 -> ring, further -> pinky.
    """
    if offset <= 0:
        return 1
    if offset <= 2:
        return 2
    if offset <= 4:
        return 3
    return 4


def plan_diagonal_run(notes: list[FretboardNote], num_strings: int) -> list[DiagonalRunNote]:
    """
    Plan one ascending path from the lowest string to the highest.

    Strings are walked from index ``num_strings - 1`` down to 0. Each
    string contributes up to :data:`NOTES_PER_STRING` notes, all strictly
    above the last fret used on the previous string, so frets never
    decrease along the run. Strings with nothing above that floor are
    skipped.
    """
    by_string: dict[int, list[FretboardNote]] = defaultdict(list)
    for note in notes:
        by_string[note.string].append(note)

    run: list[DiagonalRunNote] = []
    floor = -1
    for string in range(num_strings - 1, -1, -1):
        candidates = sorted(by_string.get(string, []), key=lambda n: n.fret)
        taken = [n for n in candidates if n.fret > floor][:NOTES_PER_STRING]
        if not taken:
            continue

        first_fret = taken[0].fret
        for note in taken:
            run.append(
                DiagonalRunNote(
                    string=note.string,
                    fret=note.fret,
                    note_name=note.note_name,
                    degree=note.degree,
                    finger=finger_for_offset(note.fret - first_fret),
                )
            )
        floor = taken[-1].fret

    logger.debug("Diagonal run spans %d note(s)", len(run))
    return run
