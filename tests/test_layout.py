"""Unit tests for diagram geometry."""

import pytest

from fretscale.fretboard import FretboardNote
from fretscale.layout import (
    FULL_NECK_FRET_WIDTH,
    POSITION_FRET_WIDTH,
    compute_layout,
)

_MASTER_NOTES = [
    FretboardNote(string=0, fret=5, note_name="A", degree="5"),
    FretboardNote(string=6, fret=12, note_name="B", degree="R"),
    FretboardNote(string=3, fret=0, note_name="D", degree="b3"),
]


def test_full_neck_layout() -> None:
    geometry = compute_layout((0, 24), _MASTER_NOTES, 7)
    assert geometry.is_full_neck
    assert geometry.fret_width == FULL_NECK_FRET_WIDTH == 50
    assert geometry.has_open_column
    assert geometry.x(5) == 5.5 * geometry.fret_width
    assert geometry.x(0) == 0.5 * geometry.fret_width
    assert geometry.width == 25 * 50
    assert len(geometry.notes_to_render) == 3


def test_position_layout() -> None:
    geometry = compute_layout((3, 7), _MASTER_NOTES, 7)
    assert not geometry.is_full_neck
    assert geometry.fret_width == POSITION_FRET_WIDTH == 100
    assert not geometry.has_open_column
    assert geometry.x(3) == 1 * geometry.fret_width
    assert geometry.x(5) == 3 * geometry.fret_width
    # one extra column for the start-fret border
    assert geometry.width == 6 * 100
    assert geometry.frets_to_render == [3, 4, 5, 6, 7]


def test_notes_outside_window_are_filtered() -> None:
    geometry = compute_layout((3, 7), _MASTER_NOTES, 7)
    assert [n.fret for n in geometry.notes_to_render] == [5]


def test_short_window_from_nut_keeps_open_column() -> None:
    geometry = compute_layout((0, 5), _MASTER_NOTES, 6)
    assert not geometry.is_full_neck
    assert geometry.fret_width == POSITION_FRET_WIDTH
    assert geometry.has_open_column
    assert {n.fret for n in geometry.notes_to_render} == {0, 5}


def test_vertical_geometry() -> None:
    geometry = compute_layout((0, 24), [], 7)
    assert geometry.y(0) == 60
    assert geometry.y(6) == 60 + 6 * 40
    assert geometry.height == 6 * 40 + 120
    assert geometry.notes_to_render == ()


def test_open_string_in_position_window_sits_by_border() -> None:
    geometry = compute_layout((5, 9), [], 7)
    assert geometry.x(0) == 0.5 * geometry.fret_width


@pytest.mark.parametrize("fret_range", [(5, 3), (-1, 4)])
def test_invalid_window_rejected(fret_range: tuple[int, int]) -> None:
    with pytest.raises(ValueError):
        compute_layout(fret_range, [], 7)
