"""Pixel geometry for drawing a fret window as a rectangular grid."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Sequence

FULL_NECK_FRET_WIDTH: Final[int] = 50
POSITION_FRET_WIDTH: Final[int] = 100
FRET_HEIGHT: Final[int] = 40
DIAGRAM_PADDING: Final[int] = 60   # above the first string and below the last
FULL_NECK_MIN_SPAN: Final[int] = 20


@dataclass(frozen=True)
class DiagramGeometry:
    """
    Derived layout for one diagram; recomputed whenever the window or notes change.

    ``notes_to_render`` holds whatever note objects were passed in (fretboard
    notes, run notes, voicing notes) that fall inside the fret window.
    """

    start_fret: int
    end_fret: int
    num_strings: int
    fret_width: int
    fret_height: int
    has_open_column: bool
    is_full_neck: bool
    notes_to_render: tuple[Any, ...]

    @property
    def displayed_fret_count(self) -> int:
        return self.end_fret - self.start_fret + 1

    @property
    def width(self) -> int:
        # Position windows reserve one extra column for the start-fret border.
        columns = self.displayed_fret_count if self.has_open_column else self.displayed_fret_count + 1
        return columns * self.fret_width

    @property
    def height(self) -> int:
        return (self.num_strings - 1) * self.fret_height + 2 * DIAGRAM_PADDING

    @property
    def frets_to_render(self) -> list[int]:
        return list(range(self.start_fret, self.end_fret + 1))

    def x(self, fret: int) -> float:
        """Horizontal centre of ``fret``."""
        if self.has_open_column:
            return (fret - self.start_fret + 0.5) * self.fret_width
        if fret == 0:
            # Open strings in a position window sit in the margin by the border.
            return 0.5 * self.fret_width
        return float((fret - self.start_fret + 1) * self.fret_width)

    def y(self, string: int) -> float:
        return float(DIAGRAM_PADDING + string * self.fret_height)


def compute_layout(
    fret_range: tuple[int, int],
    notes: Sequence[Any],
    num_strings: int,
) -> DiagramGeometry:
    """
    Lay out ``notes`` inside ``fret_range`` for an instrument of ``num_strings``.

    A window starting at the nut and spanning more than
    :data:`FULL_NECK_MIN_SPAN` frets is drawn as a full neck with narrow
    fret columns; anything else uses wide position columns.

    Raises:
        ValueError: If the window is inverted or starts below fret 0.
    """
    start_fret, end_fret = fret_range
    if start_fret < 0 or end_fret < start_fret:
        raise ValueError(f"Invalid fret window [{start_fret}, {end_fret}].")

    is_full_neck = start_fret == 0 and end_fret > FULL_NECK_MIN_SPAN
    visible = tuple(n for n in notes if start_fret <= n.fret <= end_fret)
    return DiagramGeometry(
        start_fret=start_fret,
        end_fret=end_fret,
        num_strings=num_strings,
        fret_width=FULL_NECK_FRET_WIDTH if is_full_neck else POSITION_FRET_WIDTH,
        fret_height=FRET_HEIGHT,
        has_open_column=start_fret == 0,
        is_full_neck=is_full_neck,
        notes_to_render=visible,
    )
