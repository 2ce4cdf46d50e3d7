"""Tests for chord spelling and Roman numeral resolution."""

import importlib
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

chords = importlib.import_module("circle_of_fifths.chords")
pitch = importlib.import_module("circle_of_fifths.pitch")


def test_chord_notes_spelled_in_thirds():
    """Members are spelled on alternating letters above the root."""
    assert chords.chord_notes("C") == ["C", "E", "G"]
    assert chords.chord_notes("G#") == ["G#", "B#", "D#"]
    assert chords.chord_notes("C", chords.DOMINANT7) == ["C", "E", "G", "Bb"]
    assert chords.chord_notes("B", chords.DIMINISHED7) == ["B", "D", "F", "Ab"]
    assert chords.chord_notes("D", chords.HALF_DIMINISHED7) == ["D", "F", "Ab", "C"]
    assert chords.chord_notes("eb", chords.AUGMENTED) == ["Eb", "G", "B"]


def test_chord_notes_accepts_abbreviations():
    """Chord-symbol abbreviations resolve to the full quality."""
    assert chords.chord_notes("C", "m7") == ["C", "Eb", "G", "Bb"]
    assert chords.chord_notes("F", "maj7") == ["F", "A", "C", "E"]
    assert chords.chord_notes("A", "m") == ["A", "C", "E"]


def test_unknown_quality_falls_back_to_major(caplog):
    """Unsupported qualities log a warning and produce a major triad."""
    with caplog.at_level(logging.WARNING):
        assert chords.chord_notes("D", "sus13") == ["D", "F#", "A"]
    assert "Unsupported chord quality" in caplog.text


def test_chord_notes_invalid_root():
    """An invalid root propagates ``InvalidNote``."""
    with pytest.raises(pitch.InvalidNote):
        chords.chord_notes("H")


@pytest.mark.parametrize(
    "numeral, mode, quality",
    [
        ("I", "major", chords.MAJOR_TRIAD),
        ("ii", "major", chords.MINOR_TRIAD),
        ("vii", "major", chords.DIMINISHED),
        ("ii", "minor", chords.DIMINISHED),
        ("vii°", "major", chords.DIMINISHED),
        ("V7", "major", chords.DOMINANT7),
        ("ii7", "major", chords.MINOR7),
        ("IVmaj7", "major", chords.MAJOR7),
        ("IΔ7", "major", chords.MAJOR7),
        ("viiø7", "major", chords.HALF_DIMINISHED7),
        ("vii°7", "harmonic minor", chords.DIMINISHED7),
        ("III+", "harmonic minor", chords.AUGMENTED),
        ("vii", "minor", chords.DIMINISHED),
        ("VII", "minor", chords.MAJOR_TRIAD),
        ("V/V", "major", chords.MAJOR_TRIAD),
        ("XIV", "major", chords.MAJOR_TRIAD),
    ],
)
def test_chord_quality(numeral, mode, quality):
    """Suffixes win over case; case decides otherwise."""
    assert chords.chord_quality(numeral, mode) == quality


def test_roman_to_chord_root():
    """Degrees index the scale of the key and mode."""
    assert chords.roman_to_chord_root("ii", "C") == "D"
    assert chords.roman_to_chord_root("V", "G") == "D"
    assert chords.roman_to_chord_root("IV", "Bb") == "Eb"
    assert chords.roman_to_chord_root("vii°", "A", "harmonic minor") == "G#"
    assert chords.roman_to_chord_root("VII", "A", "minor") == "G"


def test_roman_accidentals_and_secondary_functions():
    """Accidentals alter the major-scale degree; slashes borrow a key."""
    assert chords.roman_to_chord_root("bVII", "C") == "Bb"
    assert chords.roman_to_chord_root("bIII", "C", "minor") == "Eb"
    assert chords.roman_to_chord_root("#iv", "C") == "F#"
    assert chords.roman_to_chord_root("V/V", "C") == "D"
    assert chords.roman_to_chord_root("vii°/V", "C") == "F#"


def test_unknown_numeral_passes_through():
    """Unparseable numerals come back unchanged and resolve to no notes."""
    assert chords.roman_to_chord_root("XIV", "C") == "XIV"
    assert chords.roman_to_chord_root("ii", "H") == "ii"
    assert chords.chord_notes_for_degree("XIV", "C") == []
    assert chords.chord_notes_for_degree("ii", "H") == []


def test_chord_notes_for_degree():
    """Numerals resolve to complete chords in the key."""
    assert chords.chord_notes_for_degree("ii", "C") == ["D", "F", "A"]
    assert chords.chord_notes_for_degree("V", "A", "minor") == ["E", "G#", "B"]
    assert chords.chord_notes_for_degree("vii°", "C") == ["B", "D", "F"]
    assert chords.chord_notes_for_degree("V7", "F") == ["C", "E", "G", "Bb"]
    assert chords.chord_notes_for_degree("V/V", "C") == ["D", "F#", "A"]


def test_diatonic_chords_major_and_minor():
    """The seven triads carry conventional numerals."""
    major = chords.diatonic_chords("C")
    assert [c.numeral for c in major] == ["I", "ii", "iii", "IV", "V", "vi", "vii°"]
    assert [c.root for c in major] == ["C", "D", "E", "F", "G", "A", "B"]
    assert major[6].notes == ["B", "D", "F"]

    minor = chords.diatonic_chords("A", "minor")
    assert [c.numeral for c in minor] == ["i", "ii°", "III", "iv", "v", "VI", "VII"]

    harmonic = chords.diatonic_chords("A", "harmonic minor")
    assert harmonic[2].numeral == "III+"
    assert harmonic[2].notes == ["C", "E", "G#"]

    assert chords.diatonic_chords("H") == []


@pytest.mark.parametrize("key", ["C", "G", "Eb", "F#", "Cb"])
def test_diatonic_triads_stay_in_key(key):
    """Every diatonic triad of a major key uses only scale notes."""
    scale = set(importlib.import_module("circle_of_fifths.keys").scale_notes(key))
    for chord in chords.diatonic_chords(key):
        assert set(chord.notes) <= scale


def test_leading_tone_chords_in_natural_minor():
    """A lower-case or diminished ``vii`` in minor sits on the raised seventh."""
    assert chords.chord_notes_for_degree("vii°7", "A", "minor") == ["G#", "B", "D", "F"]
    assert chords.chord_notes_for_degree("vii°", "A", "minor") == ["G#", "B", "D"]
    assert chords.chord_notes_for_degree("vii", "A", "minor") == ["G#", "B", "D"]
    assert chords.chord_notes_for_degree("viiø7", "E", "minor") == ["D#", "F#", "A", "C#"]
    assert chords.roman_to_chord_root("vii°", "C", "minor") == "B"
    # The subtonic keeps its natural spelling.
    assert chords.chord_notes_for_degree("VII", "A", "minor") == ["G", "B", "D"]


@pytest.mark.parametrize("numeral", ["Vxyz", "ii9", "IVsus4", "Im", "vii°°"])
def test_unknown_suffix_is_rejected(numeral):
    """Suffixes outside the documented set make the numeral unresolvable."""
    assert chords.chord_notes_for_degree(numeral, "C") == []
    assert chords.roman_to_chord_root(numeral, "C") == numeral


@pytest.mark.parametrize(
    "numeral",
    ["IVmaj7", "IM7", "IΔ", "IΔ7", "ii7", "iim7", "iimin7", "ii-7", "viiø7", "vii°7",
     "viio7", "viidim", "III+", "IIIaug", "V7", "vii°", "viio"],
)
def test_documented_suffixes_resolve(numeral):
    assert chords.chord_notes_for_degree(numeral, "C") != []
