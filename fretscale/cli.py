"""fretscale CLI entry point."""

import logging
import re
import sys

import click

from fretscale import __version__
from fretscale.fingering import playable_fret_range
from fretscale.fretboard import INSTRUMENTS, SEVEN_STRING
from fretscale.generator import ScaleDetails, ScaleGenerator
from fretscale.harmonization import THIRDS
from fretscale.midi_exporter import MidiExporter
from fretscale.tab_renderers import (
    AsciiTabRenderer,
    MarkdownReportRenderer,
    ScaleRenderer,
    TabTextRenderer,
    run_to_tab,
)
from fretscale.theory import ScaleInputError, scale_names

MAX_INTERVAL = 6

_instrument_option = click.option(
    "--instrument",
    type=click.Choice(sorted(INSTRUMENTS)),
    default=SEVEN_STRING.name,
    show_default=True,
    help="Tuning and fret count to map the scale onto.",
)
_interval_option = click.option(
    "--interval",
    type=click.IntRange(0, MAX_INTERVAL),
    default=THIRDS,
    show_default=True,
    help="Harmony distance in scale degrees (2 = thirds, 4 = fifths).",
)


def _title_to_filename(title: str, suffix: str) -> str:
    """Turn a scale title into a safe filename, e.g. 'E Harmonic Minor' -> 'E_Harmonic_Minor.md'."""
    sanitized = title.replace("#", "sharp")
    sanitized = re.sub(r"[^\w\s-]", "", sanitized)
    sanitized = re.sub(r"\s+", "_", sanitized.strip())
    return f"{sanitized}{suffix}"


def _generate(root: str, scale: str, instrument: str, interval: int) -> ScaleDetails:
    """Run the engine, turning input errors into a clean CLI exit."""
    generator = ScaleGenerator(instrument=INSTRUMENTS[instrument], harmony_interval=interval)
    try:
        return generator.generate(root, scale)
    except ScaleInputError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        click.echo("  Run 'fretscale scales' to list supported scale names.", err=True)
        sys.exit(1)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="fretscale")
@click.option("--verbose", "-v", is_flag=True, help="Log engine internals at DEBUG level.")
def main(verbose: bool) -> None:
    """fretscale — scale positions, runs and harmony tabs for extended-range guitar."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


# ── scales subcommand ──────────────────────────────────────────────────────────

@main.command()
def scales() -> None:
    """List the supported scale names."""
    for name in scale_names():
        click.echo(name)


# ── show subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("root")
@click.argument("scale")
@_instrument_option
@_interval_option
def show(root: str, scale: str, instrument: str, interval: int) -> None:
    """
    Print the scale, its positions, the diagonal run and a harmony tab.

    ROOT is a note name (sharps or flats, e.g. F# or Gb).
    SCALE is a scale name; quote names containing spaces.

    \b
    Examples:
      fretscale show E "Harmonic Minor"
      fretscale show Bb Dorian --instrument 6-string --interval 4
    """
    details = _generate(root, scale, instrument, interval)
    tab_renderer = AsciiTabRenderer()
    inst = details.instrument

    click.echo(f"{details.title}  ({inst.name}, {inst.num_frets} frets)")
    click.echo()
    click.echo("  Notes   : " + "  ".join(n.note_name for n in details.scale_notes))
    click.echo("  Degrees : " + "  ".join(n.degree for n in details.scale_notes))
    click.echo(f"  On neck : {len(details.diagram_data.notes_on_fretboard)} positions")
    click.echo()

    for number, position in enumerate(details.diagram_data.fingering, start=1):
        if position.is_empty:
            click.echo(f"  Position {number}: none")
            continue
        start, end = playable_fret_range(position)
        click.echo(f"  Position {number}: frets {start}-{end} ({len(position)} notes)")
    click.echo()

    if details.diatonic_chords:
        chords = "  ".join(f"{degree}={chord.name}" for degree, chord in details.diatonic_chords.items())
        click.echo(f"  Chords  : {chords}")
        click.echo()

    click.echo("Ascending diagonal run:")
    click.echo(tab_renderer.render(run_to_tab(details.diagram_data.diagonal_run, inst.num_strings), inst))
    click.echo()
    click.echo(f"{details.harmonization.name}:")
    click.echo(tab_renderer.render(details.harmonization.tab, inst))


# ── export subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("root")
@click.argument("scale")
@_instrument_option
@_interval_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["md", "txt", "midi"], case_sensitive=False),
    default="md",
    show_default=True,
    help="Markdown report, plain-text tab sheet, or MIDI practice file.",
)
@click.option(
    "--source",
    type=click.Choice(["run", "harmony"], case_sensitive=False),
    default="run",
    show_default=True,
    help="What the MIDI file plays (ignored for text formats).",
)
@click.option(
    "--tempo",
    type=click.IntRange(20, 300),
    default=MidiExporter.DEFAULT_TEMPO,
    show_default=True,
    help="MIDI playback tempo in BPM.",
)
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file path. Defaults to <root>_<scale> with the format's extension.",
)
def export(
    root: str,
    scale: str,
    instrument: str,
    interval: int,
    output_format: str,
    source: str,
    tempo: int,
    output: str | None,
) -> None:
    """
    Write the scale material to a file.

    \b
    Examples:
      fretscale export E "Harmonic Minor"
      fretscale export A "Natural Minor" --format txt -o a_minor.txt
      fretscale export C Major --format midi --source harmony --tempo 70
    """
    details = _generate(root, scale, instrument, interval)
    normalized_format = output_format.lower()

    if normalized_format == "midi":
        resolved_output = output or _title_to_filename(details.title, ".mid")
        exporter = MidiExporter(tempo=tempo)
        try:
            if source.lower() == "harmony":
                exporter.export_tab(details.harmonization.tab, details.instrument, resolved_output)
            else:
                exporter.export_run(details.diagram_data.diagonal_run, details.instrument, resolved_output)
        except OSError as exc:
            click.echo(f"  ERROR: Could not write MIDI file — {exc}", err=True)
            sys.exit(1)
        click.echo(f"Done!  Wrote {source} MIDI to '{resolved_output}'.")
        return

    renderer: ScaleRenderer = MarkdownReportRenderer() if normalized_format == "md" else TabTextRenderer()
    resolved_output = output or _title_to_filename(details.title, renderer.default_extension)
    try:
        with open(resolved_output, "w", encoding="utf-8") as fh:
            fh.write(renderer.render(details))
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file — {exc}", err=True)
        sys.exit(1)
    click.echo(f"Done!  Wrote '{resolved_output}'.")
