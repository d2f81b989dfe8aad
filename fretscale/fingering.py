"""Box-shaped fingering positions anchored on root notes of the lowest strings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Iterable

from fretscale.fretboard import FretboardNote

logger = logging.getLogger(__name__)

POSITION_SPAN: Final[int] = 5        # frets covered by one hand position
MIN_POSITION_NOTES: Final[int] = 5   # candidates with this many notes or fewer are dropped
MAX_POSITIONS: Final[int] = 3
ANCHOR_STRING_COUNT: Final[int] = 2  # roots on the N lowest strings seed candidates
MAX_FINGER: Final[int] = 4

DEFAULT_FRET_RANGE: Final[tuple[int, int]] = (1, POSITION_SPAN)


@dataclass(frozen=True)
class FingeringEntry:
    """A fretted note inside a position, with the finger that plays it (1-4)."""

    string: int
    fret: int
    finger: int

    @property
    def key(self) -> tuple[int, int]:
        return (self.string, self.fret)


@dataclass(frozen=True)
class FingeringPosition:
    """
    A hand position: fretted notes inside ``[start_fret, start_fret + 4]``.

    Entries are ordered low to high pitch: descending string index, then
    ascending fret. An empty position (no entries) pads the result when
    fewer than :data:`MAX_POSITIONS` candidates survive.
    """

    start_fret: int
    entries: tuple[FingeringEntry, ...] = ()

    @classmethod
    def empty(cls) -> FingeringPosition:
        return cls(start_fret=DEFAULT_FRET_RANGE[0])

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def end_fret(self) -> int:
        return self.start_fret + POSITION_SPAN - 1

    @property
    def keys(self) -> frozenset[tuple[int, int]]:
        return frozenset(entry.key for entry in self.entries)

    def finger_at(self, string: int, fret: int) -> int | None:
        for entry in self.entries:
            if entry.string == string and entry.fret == fret:
                return entry.finger
        return None

    def as_mapping(self) -> dict[tuple[int, int], int]:
        """Ordered ``(string, fret) -> finger`` mapping."""
        return {entry.key: entry.finger for entry in self.entries}

    def __len__(self) -> int:
        return len(self.entries)


def _window_start(root_fret: int) -> int:
    # Roots at or near the nut share the open-position box.
    if root_fret <= 2:
        return 1
    return root_fret - 1


def _finger_for(fret: int, start_fret: int) -> int:
    return max(1, min(MAX_FINGER, fret - start_fret + 1))


def _build_position(notes: Iterable[FretboardNote], start_fret: int) -> FingeringPosition:
    ordered = sorted(notes, key=lambda n: (-n.string, n.fret))
    entries = tuple(
        FingeringEntry(string=n.string, fret=n.fret, finger=_finger_for(n.fret, start_fret))
        for n in ordered
    )
    return FingeringPosition(start_fret=start_fret, entries=entries)


def find_fingering_positions(
    notes: list[FretboardNote],
    num_strings: int,
    max_positions: int = MAX_POSITIONS,
) -> list[FingeringPosition]:
    """
    Partition the fretboard into up to ``max_positions`` playable boxes.

    Algorithm
    ---------
    1. Every root-degree note on the two lowest strings proposes a window
       of :data:`POSITION_SPAN` frets (starting at fret 1 for roots at or
       below fret 2, otherwise one fret below the root).
    2. The window collects every non-open note whose fret lies inside it.
       Windows with :data:`MIN_POSITION_NOTES` notes or fewer, and windows
       whose note set equals an already kept window, are discarded.
    3. Survivors are sorted by their lowest fret; the first
       ``max_positions`` are returned, padded with empty positions.

    Fingers are assigned linearly: ``clamp(fret - start + 1, 1, 4)``.
    """
    anchor_strings = set(range(max(0, num_strings - ANCHOR_STRING_COUNT), num_strings))
    roots = [n for n in notes if n.degree == "R" and n.string in anchor_strings]

    seen: set[frozenset[tuple[int, int]]] = set()
    candidates: list[FingeringPosition] = []
    for root in roots:
        start = _window_start(root.fret)
        end = start + POSITION_SPAN - 1
        in_window = [n for n in notes if not n.is_open and start <= n.fret <= end]
        if len(in_window) <= MIN_POSITION_NOTES:
            continue
        signature = frozenset(n.key for n in in_window)
        if signature in seen:
            continue
        seen.add(signature)
        candidates.append(_build_position(in_window, start))

    candidates.sort(key=lambda pos: min(entry.fret for entry in pos.entries))
    positions = candidates[:max_positions]
    logger.debug(
        "Kept %d of %d fingering candidate(s) from %d root anchor(s)",
        len(positions),
        len(candidates),
        len(roots),
    )
    while len(positions) < max_positions:
        positions.append(FingeringPosition.empty())
    return positions


def playable_fret_range(position: FingeringPosition) -> tuple[int, int]:
    """
    Five-fret drawing window for a position.

    Starts at the lowest fretted note when it is above fret 1, otherwise
    at fret 1. Empty positions fall back to frets 1-5.
    """
    fretted = [entry.fret for entry in position.entries if entry.fret > 0]
    if not fretted:
        return DEFAULT_FRET_RANGE
    lowest = min(fretted)
    start = lowest if lowest > 1 else 1
    return (start, start + POSITION_SPAN - 1)
