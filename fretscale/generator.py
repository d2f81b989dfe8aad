"""Generation entry point: runs the full pipeline for one (root, scale) request."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Final, Mapping

from fretscale.chords import Chord, generate_diatonic_chords
from fretscale.diagonal_run import DiagonalRunNote, plan_diagonal_run
from fretscale.fingering import FingeringPosition, find_fingering_positions
from fretscale.fretboard import SEVEN_STRING, FretboardNote, Instrument, map_notes_on_fretboard
from fretscale.harmonization import THIRDS, generate_harmonization_tab
from fretscale.tab_models import StructuredTab
from fretscale.theory import (
    ScaleNote,
    canonical_note,
    degree_table_markdown,
    diagram_metadata,
    generate_scale_notes,
)

logger = logging.getLogger(__name__)

# Fields filled in by the content pipeline, outside this engine.
EXTERNAL_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "overview",
        "listening_guide",
        "youtube_tutorials",
        "creative_application",
        "jam_tracks",
        "tone_and_gear",
        "key_chords",
        "licks",
        "advanced_harmonization",
        "etudes",
        "mode_spotlight",
    }
)

_INTERVAL_NAMES: Final[dict[int, str]] = {
    0: "Unison",
    1: "Seconds",
    2: "Thirds",
    3: "Fourths",
    4: "Fifths",
    5: "Sixths",
    6: "Sevenths",
}


@dataclass(frozen=True)
class DiagramData:
    """Everything a fretboard diagram needs, computed from the scale alone."""

    tonic_chord_degrees: tuple[str, ...]
    characteristic_degrees: tuple[str, ...]
    notes_on_fretboard: tuple[FretboardNote, ...]
    fingering: tuple[FingeringPosition, ...]
    diagonal_run: tuple[DiagonalRunNote, ...]


@dataclass(frozen=True)
class HarmonizationExercise:
    name: str
    description: str
    tab: StructuredTab


@dataclass(frozen=True)
class ScaleDetails:
    """
    Aggregate result for one request.

    The engine-owned fields are always present and consistent. ``enrichment``
    carries whatever the content pipeline managed to fetch, keyed by
    :data:`EXTERNAL_FIELDS`, and may be empty.
    """

    root_note: str
    scale_name: str
    instrument: Instrument
    scale_notes: tuple[ScaleNote, ...]
    diagram_data: DiagramData
    degree_explanation: str
    diatonic_chords: Mapping[str, Chord]
    harmonization: HarmonizationExercise
    enrichment: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def title(self) -> str:
        return f"{self.root_note} {self.scale_name}"

    def with_enrichment(self, fields: Mapping[str, Any]) -> ScaleDetails:
        """Return a copy with external fields merged in; unknown keys are dropped."""
        unknown = sorted(set(fields) - EXTERNAL_FIELDS)
        if unknown:
            logger.warning("Ignoring unknown enrichment field(s): %s", ", ".join(unknown))
        merged = dict(self.enrichment)
        merged.update({k: v for k, v in fields.items() if k in EXTERNAL_FIELDS})
        return replace(self, enrichment=MappingProxyType(merged))


class ScaleCache:
    """
    ``"<instrument>:<interval>:<root>_<scale>"`` -> :class:`ScaleDetails` table.

    Keys carry the instrument and harmony interval, so one cache can be
    shared by generators configured differently.

    Unbounded by default. With a ``capacity`` it evicts the least recently
    used entry once full.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity < 1:
            raise ValueError("Cache capacity must be positive.")
        self.capacity = capacity
        self._entries: OrderedDict[str, ScaleDetails] = OrderedDict()

    @staticmethod
    def key(root_note: str, scale_name: str, instrument_name: str, harmony_interval: int) -> str:
        return f"{instrument_name}:{harmony_interval}:{root_note}_{scale_name}"

    def get(self, key: str) -> ScaleDetails | None:
        details = self._entries.get(key)
        if details is not None:
            self._entries.move_to_end(key)
        return details

    def put(self, key: str, details: ScaleDetails) -> None:
        self._entries[key] = details
        self._entries.move_to_end(key)
        if self.capacity is not None:
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted %s from scale cache", evicted)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ScaleGenerator:
    """
    Runs resolver -> mapper -> positions/run -> harmonisation for a request.

    Usage::

        generator = ScaleGenerator()
        details = generator.generate("E", "Harmonic Minor")
    """

    def __init__(
        self,
        instrument: Instrument = SEVEN_STRING,
        cache: ScaleCache | None = None,
        harmony_interval: int = THIRDS,
    ) -> None:
        """
        Args:
            instrument:       Tuning and fret count to map onto.
            cache:            Result cache; a private unbounded one when omitted.
            harmony_interval: Scale-degree distance for the harmonisation tab.
        """
        if harmony_interval < 0:
            raise ValueError("Harmony interval must be non-negative.")
        self.instrument = instrument
        self.cache = cache if cache is not None else ScaleCache()
        self.harmony_interval = harmony_interval

    def _harmonization(
        self,
        positions: list[FingeringPosition],
        scale_notes: tuple[ScaleNote, ...],
    ) -> HarmonizationExercise:
        interval_name = _INTERVAL_NAMES.get(self.harmony_interval, f"{self.harmony_interval}-step intervals")
        tab = generate_harmonization_tab(positions, scale_notes, self.harmony_interval, self.instrument)
        return HarmonizationExercise(
            name=f"Diatonic {interval_name}",
            description=(
                f"Each scale tone paired with the tone {self.harmony_interval} degree(s) above it, "
                "position by position, low to high."
            ),
            tab=tab,
        )

    def cache_key(self, root_note: str, scale_name: str) -> str:
        """Cache key for a request; ``root_note`` must already be canonical."""
        return ScaleCache.key(root_note, scale_name, self.instrument.name, self.harmony_interval)

    def generate(self, root_note: str, scale_name: str) -> ScaleDetails:
        """
        Produce the full engine result for ``root_note`` + ``scale_name``.

        Raises:
            FormulaNotFound: If the scale name is unknown.
            InvalidNoteName: If the root note is unknown.
        """
        scale_notes = generate_scale_notes(root_note, scale_name)
        root = canonical_note(root_note)
        cache_key = self.cache_key(root, scale_name)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Returning cached data for %s", cache_key)
            return cached

        num_strings = self.instrument.num_strings
        notes = map_notes_on_fretboard(scale_notes, self.instrument)
        positions = find_fingering_positions(notes, num_strings)
        run = plan_diagonal_run(notes, num_strings)
        tonic, characteristic = diagram_metadata(scale_notes)

        details = ScaleDetails(
            root_note=root,
            scale_name=scale_name,
            instrument=self.instrument,
            scale_notes=scale_notes,
            diagram_data=DiagramData(
                tonic_chord_degrees=tuple(tonic),
                characteristic_degrees=tuple(characteristic),
                notes_on_fretboard=tuple(notes),
                fingering=tuple(positions),
                diagonal_run=tuple(run),
            ),
            degree_explanation=degree_table_markdown(scale_notes),
            diatonic_chords=MappingProxyType(generate_diatonic_chords(scale_notes, self.instrument)),
            harmonization=self._harmonization(positions, scale_notes),
        )
        logger.debug(
            "Generated %s: %d fretboard note(s), %d run note(s)",
            cache_key,
            len(notes),
            len(run),
        )
        self.cache.put(cache_key, details)
        return details
