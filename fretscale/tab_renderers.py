"""Renderer implementations for text and Markdown output formats."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, Sequence

from fretscale.diagonal_run import DiagonalRunNote
from fretscale.fingering import playable_fret_range
from fretscale.fretboard import Instrument
from fretscale.generator import ScaleDetails
from fretscale.tab_models import StructuredTab, TabColumn


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def run_to_tab(run: Sequence[DiagonalRunNote], num_strings: int) -> StructuredTab:
    """One column per run note, closed with a bar line."""
    columns = tuple(TabColumn.played(note.string, note.fret) for note in run)
    return StructuredTab(columns).closed(num_strings)


class AsciiTabRenderer:
    """Render a :class:`StructuredTab` as plain-text tablature, one line per string."""

    def _cell_width(self, column: TabColumn) -> int:
        return max((len(entry.token) for entry in column.entries), default=1)

    def _cell(self, column: TabColumn, string: int) -> str:
        if column.is_bar:
            return "|"
        width = self._cell_width(column)
        entry = column.entry_for(string)
        token = entry.token if entry is not None else ""
        return "-" + token.ljust(width, "-")

    def render(self, tab: StructuredTab, instrument: Instrument) -> str:
        label_width = max(len(note) for note in instrument.tuning)
        lines = []
        for string, open_note in enumerate(instrument.tuning):
            cells = "".join(self._cell(column, string) for column in tab.columns)
            lines.append(f"{open_note.ljust(label_width)}|{cells}")
        return "\n".join(lines)


class ScaleRenderer(ABC):
    """Abstract renderer for a complete scale result."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(self, details: ScaleDetails) -> str:
        """Render output into a file content string."""


class TabTextRenderer(ScaleRenderer):
    """Plain-text sheet with the diagonal run and the harmonisation exercise."""

    def __init__(self) -> None:
        self.tab_renderer = AsciiTabRenderer()

    @property
    def default_extension(self) -> str:
        return ".txt"

    def render(self, details: ScaleDetails) -> str:
        instrument = details.instrument
        run_tab = run_to_tab(details.diagram_data.diagonal_run, instrument.num_strings)
        parts = [
            details.title,
            "",
            "Ascending diagonal run:",
            self.tab_renderer.render(run_tab, instrument),
            "",
            f"{details.harmonization.name}:",
            self.tab_renderer.render(details.harmonization.tab, instrument),
        ]
        return "\n".join(parts) + "\n"


class MarkdownReportRenderer(ScaleRenderer):
    """Render a scale result as Markdown with an embedded JSON diagram payload."""

    def __init__(self) -> None:
        self.tab_renderer = AsciiTabRenderer()

    @property
    def default_extension(self) -> str:
        return ".md"

    def _positions_section(self, details: ScaleDetails) -> str:
        lines = []
        for number, position in enumerate(details.diagram_data.fingering, start=1):
            if position.is_empty:
                lines.append(f"- Position {number}: (none)")
                continue
            start, end = playable_fret_range(position)
            lines.append(f"- Position {number}: frets {start}-{end}, {len(position)} notes")
        return "\n".join(lines)

    def _chords_section(self, details: ScaleDetails) -> str:
        if not details.diatonic_chords:
            return "_No library voicings for this scale._"
        lines = ["| Degree | Chord | Voicings |", "|---|---|---|"]
        for degree, chord in details.diatonic_chords.items():
            names = ", ".join(v.name for v in chord.voicings)
            lines.append(f"| {degree} | {chord.name} | {names} |")
        return "\n".join(lines)

    def _enrichment_section(self, enrichment: dict[str, Any]) -> str:
        blocks = []
        for key in sorted(enrichment):
            heading = key.replace("_", " ").title()
            value = enrichment[key]
            if isinstance(value, str):
                body = _escape_html(value)
            else:
                body = f"```json\n{json.dumps(value, indent=2, default=str)}\n```"
            blocks.append(f"## {heading}\n\n{body}\n")
        return "\n".join(blocks)

    def render(self, details: ScaleDetails) -> str:
        instrument = details.instrument
        title_safe = _escape_html(details.title)
        run_tab = run_to_tab(details.diagram_data.diagonal_run, instrument.num_strings)
        payload = json.dumps(asdict(details.diagram_data), separators=(",", ":"))
        payload = payload.replace("</", "<\\/")
        tuning = " ".join(instrument.tuning)

        return f"""# {title_safe}

**Instrument:** {instrument.name} ({tuning}), {instrument.num_frets} frets

## Scale Degrees

{details.degree_explanation}

## Fingering Positions

{self._positions_section(details)}

## Ascending Diagonal Run

```text
{self.tab_renderer.render(run_tab, instrument)}
```

## Diatonic Chords

{self._chords_section(details)}

## {details.harmonization.name}

{details.harmonization.description}

```text
{self.tab_renderer.render(details.harmonization.tab, instrument)}
```

{self._enrichment_section(dict(details.enrichment))}
<script id="fretscale-diagram-data" type="application/json">{payload}</script>
"""
