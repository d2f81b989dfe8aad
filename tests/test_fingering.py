"""Unit tests for fingering position discovery."""

from fretscale.fingering import (
    DEFAULT_FRET_RANGE,
    MAX_POSITIONS,
    FingeringEntry,
    FingeringPosition,
    find_fingering_positions,
    playable_fret_range,
)
from fretscale.fretboard import SEVEN_STRING, FretboardNote, map_notes_on_fretboard
from fretscale.theory import generate_scale_notes


def _positions(root: str, scale: str) -> list[FingeringPosition]:
    notes = map_notes_on_fretboard(generate_scale_notes(root, scale), SEVEN_STRING)
    return find_fingering_positions(notes, SEVEN_STRING.num_strings)


def _note(string: int, fret: int, degree: str = "2") -> FretboardNote:
    return FretboardNote(string=string, fret=fret, note_name="C", degree=degree)


def test_c_major_positions_start_on_root_windows() -> None:
    positions = _positions("C", "Major")
    assert len(positions) == MAX_POSITIONS
    assert [p.start_fret for p in positions] == [1, 7, 12]


def test_positions_fit_one_five_fret_window() -> None:
    for root, scale in [("C", "Major"), ("E", "Harmonic Minor"), ("A", "Minor Pentatonic")]:
        for position in _positions(root, scale):
            if position.is_empty:
                continue
            frets = [entry.fret for entry in position.entries]
            assert min(frets) >= position.start_fret
            assert max(frets) <= position.start_fret + 4
            assert 0 not in frets
            assert len(position) > 5


def test_positions_are_distinct() -> None:
    positions = [p for p in _positions("E", "Harmonic Minor") if not p.is_empty]
    signatures = [p.keys for p in positions]
    assert len(signatures) == len(set(signatures))


def test_positions_sorted_by_lowest_fret() -> None:
    positions = [p for p in _positions("G", "Mixolydian") if not p.is_empty]
    lowest = [min(e.fret for e in p.entries) for p in positions]
    assert lowest == sorted(lowest)


def test_fingers_follow_linear_offset() -> None:
    for position in _positions("C", "Major"):
        for entry in position.entries:
            expected = max(1, min(4, entry.fret - position.start_fret + 1))
            assert entry.finger == expected


def test_entries_ordered_low_to_high_pitch() -> None:
    position = _positions("C", "Major")[0]
    order = [(-e.string, e.fret) for e in position.entries]
    assert order == sorted(order)


def test_no_notes_gives_padded_empty_positions() -> None:
    positions = find_fingering_positions([], SEVEN_STRING.num_strings)
    assert positions == [FingeringPosition.empty()] * MAX_POSITIONS


def test_sparse_windows_are_discarded() -> None:
    notes = map_notes_on_fretboard(generate_scale_notes("C", "Major"), SEVEN_STRING)
    roots_only = [n for n in notes if n.degree == "R"]
    positions = find_fingering_positions(roots_only, SEVEN_STRING.num_strings)
    assert all(p.is_empty for p in positions)


def test_exactly_five_notes_is_not_enough() -> None:
    notes = [_note(6, 3, "R"), _note(0, 2), _note(1, 3), _note(2, 4), _note(3, 6)]
    positions = find_fingering_positions(notes, 7)
    assert all(p.is_empty for p in positions)


def test_identical_windows_are_kept_once() -> None:
    # Roots at frets 1 and 2 both anchor the fret-1 box.
    notes = [
        _note(6, 1, "R"),
        _note(5, 2, "R"),
        _note(0, 1),
        _note(1, 2),
        _note(2, 3),
        _note(3, 4),
        _note(4, 5),
    ]
    positions = find_fingering_positions(notes, 7)
    kept = [p for p in positions if not p.is_empty]
    assert len(kept) == 1
    assert kept[0].start_fret == 1
    assert len(kept[0]) == 7


def test_roots_off_anchor_strings_are_ignored() -> None:
    notes = [_note(0, 5, "R")] + [_note(s, 5) for s in range(1, 7)]
    positions = find_fingering_positions(notes, 7)
    assert all(p.is_empty for p in positions)


def test_as_mapping_and_finger_lookup() -> None:
    position = FingeringPosition(
        start_fret=5,
        entries=(FingeringEntry(6, 5, 1), FingeringEntry(6, 7, 3)),
    )
    assert position.as_mapping() == {(6, 5): 1, (6, 7): 3}
    assert position.finger_at(6, 7) == 3
    assert position.finger_at(0, 7) is None


def test_playable_fret_range_defaults_for_empty_position() -> None:
    assert playable_fret_range(FingeringPosition.empty()) == DEFAULT_FRET_RANGE == (1, 5)


def test_playable_fret_range_starts_at_lowest_fret() -> None:
    position = FingeringPosition(
        start_fret=7,
        entries=(FingeringEntry(6, 8, 2), FingeringEntry(5, 7, 1), FingeringEntry(4, 9, 3)),
    )
    assert playable_fret_range(position) == (7, 11)


def test_playable_fret_range_low_positions_start_at_one() -> None:
    position = FingeringPosition(start_fret=1, entries=(FingeringEntry(6, 1, 1), FingeringEntry(5, 3, 3)))
    assert playable_fret_range(position) == (1, 5)
