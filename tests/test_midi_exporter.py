"""Unit tests for MidiExporter."""

from pathlib import Path

import pytest

from fretscale.diagonal_run import DiagonalRunNote
from fretscale.fretboard import SEVEN_STRING
from fretscale.generator import ScaleGenerator
from fretscale.midi_exporter import MidiExporter
from fretscale.tab_models import StructuredTab, TabColumn, TabEntry, Technique


def _sample_run() -> list[DiagonalRunNote]:
    return [
        DiagonalRunNote(string=6, fret=0, note_name="B", degree="R", finger=1),
        DiagonalRunNote(string=6, fret=2, note_name="C#", degree="2", finger=2),
        DiagonalRunNote(string=5, fret=0, note_name="E", degree="4", finger=1),
    ]


def test_run_events_one_beat_per_note() -> None:
    events = MidiExporter().run_events(_sample_run(), SEVEN_STRING)
    assert events == [(0.0, 35), (1.0, 37), (2.0, 40)]


def test_tab_events_timing() -> None:
    tab = StructuredTab(
        [
            TabColumn.played(0, 5),
            TabColumn.bar(7),
            TabColumn.rest(),
            TabColumn.of(TabEntry(1, Technique("5h7")), TabEntry(2, Technique("x"))),
        ]
    )
    events = MidiExporter().tab_events(tab, SEVEN_STRING)
    assert events == [(0.0, 69), (2.0, 64)]


@pytest.mark.integration
def test_export_run_writes_midi_file(tmp_path: Path) -> None:
    output = tmp_path / "run.mid"
    MidiExporter(tempo=120).export_run(_sample_run(), SEVEN_STRING, str(output))
    assert output.read_bytes().startswith(b"MThd")


@pytest.mark.integration
def test_export_harmonization_tab(tmp_path: Path) -> None:
    details = ScaleGenerator().generate("C", "Major")
    output = tmp_path / "harmony.mid"
    MidiExporter().export_tab(details.harmonization.tab, details.instrument, str(output))
    assert output.stat().st_size > 0
