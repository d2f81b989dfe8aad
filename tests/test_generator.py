"""Unit tests for ScaleGenerator and its result cache."""

import logging

import pytest

from fretscale.fretboard import SEVEN_STRING, SIX_STRING
from fretscale.generator import EXTERNAL_FIELDS, ScaleCache, ScaleGenerator
from fretscale.theory import FormulaNotFound, InvalidNoteName


def test_generate_populates_engine_fields() -> None:
    details = ScaleGenerator().generate("E", "Harmonic Minor")
    assert details.title == "E Harmonic Minor"
    assert [n.note_name for n in details.scale_notes] == ["E", "F#", "G", "A", "B", "C", "D#"]
    assert details.diagram_data.tonic_chord_degrees == ("R", "b3", "5")
    assert details.diagram_data.characteristic_degrees == ("b6", "7")
    assert len(details.diagram_data.fingering) == 3
    assert details.diagram_data.diagonal_run
    assert details.degree_explanation.startswith("| Degree | Interval | Note |")
    assert details.harmonization.name == "Diatonic Thirds"
    assert details.harmonization.tab.ends_with_bar
    assert dict(details.enrichment) == {}


def test_repeated_request_is_served_from_cache() -> None:
    generator = ScaleGenerator()
    first = generator.generate("E", "Harmonic Minor")
    assert generator.cache_key("E", "Harmonic Minor") in generator.cache
    assert generator.generate("E", "Harmonic Minor") is first


def test_enharmonic_roots_share_a_cache_entry() -> None:
    generator = ScaleGenerator()
    flat = generator.generate("Bb", "Major")
    assert flat.root_note == "A#"
    assert generator.generate("A#", "Major") is flat
    assert len(generator.cache) == 1


@pytest.mark.parametrize(
    ("root", "scale", "error"),
    [("E", "Nonexistent", FormulaNotFound), ("H", "Major", InvalidNoteName)],
)
def test_failed_requests_are_not_cached(root: str, scale: str, error: type) -> None:
    generator = ScaleGenerator()
    with pytest.raises(error):
        generator.generate(root, scale)
    assert len(generator.cache) == 0


def test_bounded_cache_evicts_least_recently_used() -> None:
    generator = ScaleGenerator(cache=ScaleCache(capacity=2))
    generator.generate("C", "Major")
    generator.generate("D", "Major")
    generator.generate("C", "Major")
    generator.generate("E", "Major")
    assert generator.cache_key("C", "Major") in generator.cache
    assert generator.cache_key("E", "Major") in generator.cache
    assert generator.cache_key("D", "Major") not in generator.cache


def test_cache_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        ScaleCache(capacity=0)


def test_generator_rejects_negative_interval() -> None:
    with pytest.raises(ValueError):
        ScaleGenerator(harmony_interval=-1)


def test_custom_interval_names_the_exercise() -> None:
    details = ScaleGenerator(harmony_interval=4).generate("A", "Dorian")
    assert details.harmonization.name == "Diatonic Fifths"


def test_with_enrichment_merges_known_fields(caplog: pytest.LogCaptureFixture) -> None:
    details = ScaleGenerator().generate("D", "Dorian")
    with caplog.at_level(logging.WARNING, logger="fretscale.generator"):
        enriched = details.with_enrichment({"overview": "Minor with a bright sixth.", "bogus": 1})
    assert dict(enriched.enrichment) == {"overview": "Minor with a bright sixth."}
    assert "bogus" in caplog.text
    assert dict(details.enrichment) == {}
    assert "overview" in EXTERNAL_FIELDS


def test_six_string_instrument() -> None:
    details = ScaleGenerator(instrument=SIX_STRING).generate("G", "Major")
    assert details.instrument is SIX_STRING
    notes = details.diagram_data.notes_on_fretboard
    assert all(0 <= n.string < 6 and 0 <= n.fret <= 22 for n in notes)
    assert all(n.string < 6 for n in details.diagram_data.diagonal_run)


def test_shared_cache_keeps_instruments_apart() -> None:
    cache = ScaleCache()
    seven = ScaleGenerator(instrument=SEVEN_STRING, cache=cache)
    six = ScaleGenerator(instrument=SIX_STRING, cache=cache, harmony_interval=4)

    first = seven.generate("E", "Major")
    second = six.generate("E", "Major")
    assert first.instrument is SEVEN_STRING
    assert second.instrument is SIX_STRING
    assert second.harmonization.name == "Diatonic Fifths"
    assert len(cache) == 2
    assert seven.generate("E", "Major") is first


def test_cache_key_includes_instrument_and_interval() -> None:
    assert ScaleCache.key("E", "Major", "7-string", 2) != ScaleCache.key("E", "Major", "6-string", 2)
    assert ScaleCache.key("E", "Major", "7-string", 2) != ScaleCache.key("E", "Major", "7-string", 4)


def test_cached_result_cannot_be_mutated() -> None:
    generator = ScaleGenerator()
    first = generator.generate("C", "Major")

    with pytest.raises(TypeError):
        first.enrichment["bogus"] = 1  # type: ignore[index]
    with pytest.raises(TypeError):
        first.diatonic_chords["I"] = None  # type: ignore[index]
    with pytest.raises(AttributeError):
        first.harmonization.tab.columns.clear()  # type: ignore[attr-defined]

    again = generator.generate("C", "Major")
    assert again is first
    assert dict(again.enrichment) == {}
    assert again.harmonization.tab.ends_with_bar
