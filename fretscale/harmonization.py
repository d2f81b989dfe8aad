"""Interval-harmonised note pairs drawn from the fingering positions."""

from __future__ import annotations

import logging
from typing import Final, NamedTuple, Sequence

from fretscale.fingering import FingeringPosition
from fretscale.fretboard import Instrument, pitch_class_at
from fretscale.tab_models import StructuredTab, TabColumn
from fretscale.theory import ScaleNote

logger = logging.getLogger(__name__)

HARMONY_MAX_SPAN: Final[int] = 4  # both notes of a pair fit inside this many frets
THIRDS: Final[int] = 2


class _Located(NamedTuple):
    string: int
    fret: int
    pitch_class: int


def _within_span(fret_a: int, fret_b: int) -> bool:
    return abs(fret_a - fret_b) + 1 <= HARMONY_MAX_SPAN


def _find_partner(root: _Located, notes: Sequence[_Located], target_class: int) -> _Located | None:
    """Closest note of ``target_class`` on a higher-pitched string within reach."""
    candidates = [
        n
        for n in notes
        if n.pitch_class == target_class and n.string < root.string and _within_span(root.fret, n.fret)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda n: (root.string - n.string, abs(n.fret - root.fret), n.fret))


def generate_harmonization_tab(
    positions: Sequence[FingeringPosition],
    scale_notes: Sequence[ScaleNote],
    interval: int,
    instrument: Instrument,
) -> StructuredTab:
    """
    Build a tab of harmonised pairs, one position at a time.

    For each note of a non-empty position (low to high pitch), the partner
    is the scale tone ``interval`` degrees above it, searched within the
    same position on a lower string index and inside a
    :data:`HARMONY_MAX_SPAN`-fret span. Each pair is emitted as two
    sequential single-note columns. A bar line closes every position and
    the tab never ends without one.

    Raises:
        ValueError: If ``interval`` is negative.
    """
    if interval < 0:
        raise ValueError("Harmony interval must be non-negative.")

    if len(scale_notes) < 2:
        return StructuredTab()

    degree_index: dict[int, int] = {}
    for i, note in enumerate(scale_notes):
        degree_index.setdefault(note.pitch_class, i)

    columns: list[TabColumn] = []
    pairs = 0
    for position in positions:
        if position.is_empty:
            continue

        located = sorted(
            (
                _Located(e.string, e.fret, pitch_class_at(instrument, e.string, e.fret))
                for e in position.entries
            ),
            key=lambda n: (-n.string, n.fret),
        )
        for root in located:
            index = degree_index.get(root.pitch_class)
            if index is None:
                continue
            target = scale_notes[(index + interval) % len(scale_notes)].pitch_class
            partner = _find_partner(root, located, target)
            if partner is None:
                continue
            columns.append(TabColumn.played(root.string, root.fret))
            columns.append(TabColumn.played(partner.string, partner.fret))
            pairs += 1

        columns.append(TabColumn.bar(instrument.num_strings))

    tab = StructuredTab(tuple(columns)).closed(instrument.num_strings)
    logger.debug("Harmonised %d pair(s) at interval %d", pairs, interval)
    return tab
