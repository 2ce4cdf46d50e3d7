"""End-to-end tests for named progressions."""

import importlib
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

progressions = importlib.import_module("circle_of_fifths.progressions")
keys = importlib.import_module("circle_of_fifths.keys")
vl = importlib.import_module("circle_of_fifths.voice_leading")


def test_tables_and_lookup():
    """Both mode families expose their progressions by key and display name."""
    assert "ii-V-I" in progressions.get_progressions("major")
    assert "i-VI-III-VII" in progressions.get_progressions("harmonic minor")
    assert progressions.get_progressions("dorian") == {}

    jazz = progressions.get_progression("ii-V-I")
    assert jazz.name == "Jazz Progression"
    assert jazz.numerals == ("ii", "V", "I")
    assert progressions.get_progression("minor pop", "minor").numerals == (
        "i", "VII", "VI", "VII",
    )
    assert progressions.get_progression("ii-V-I", "minor") is None


def test_parse_numerals():
    """Commas, dashes and spaces all separate numerals."""
    assert progressions.parse_numerals("ii, V7 ,I") == ["ii", "V7", "I"]
    assert progressions.parse_numerals("I-vi-IV-V") == ["I", "vi", "IV", "V"]
    assert progressions.parse_numerals("  ") == []


def test_progression_chords_in_major_and_minor():
    """Named progressions resolve against the requested key."""
    pop = progressions.progression_chords("C", "major", "I-V-vi-IV")
    assert [c.root for c in pop] == ["C", "G", "A", "F"]
    assert [c.quality for c in pop] == ["major", "major", "minor", "major"]

    cadence = progressions.progression_chords("A", "minor", "i-iv-V-i")
    assert [c.notes for c in cadence] == [
        ["A", "C", "E"],
        ["D", "F", "A"],
        ["E", "G#", "B"],
        ["A", "C", "E"],
    ]

    custom = progressions.progression_chords("G", "major", ["ii", "V7", "I"])
    assert custom[1].notes == ["D", "F#", "A", "C"]


def test_unresolved_numeral_is_reported(caplog):
    """Unknown numerals keep their text as root and have no notes."""
    with caplog.at_level(logging.WARNING):
        chords = progressions.progression_chords("C", "major", "I, XIV")
    assert chords[1].root == "XIV"
    assert chords[1].notes == []
    assert "XIV" in caplog.text


def _table_cases():
    for mode, table in (("major", keys.MAJOR_KEYS), ("minor", keys.MINOR_KEYS)):
        for key in table:
            for name in progressions.get_progressions(mode):
                yield key, mode, name


@pytest.mark.parametrize("key, mode, name", list(_table_cases()))
def test_named_progressions_are_diatonic(key, mode, name):
    """Every chord uses notes of the key (harmonic minor for the raised V)."""
    allowed = set(keys.scale_notes(key, mode))
    if mode == "minor":
        allowed |= set(keys.scale_notes(key, "harmonic minor"))
    for chord in progressions.progression_chords(key, mode, name):
        assert chord.notes
        assert set(chord.notes) <= allowed


def test_voice_named_progression_loops():
    """Voicing a named progression repeats it ``loops`` times."""
    voicings = progressions.voice_named_progression("C", "major", "ii-V-I", loops=3)
    assert len(voicings) == 9
    assert [str(v) for v in voicings[0]] == ["D3", "F3", "A3"]
    for a, b in zip(voicings, voicings[1:]):
        assert vl.find_voice_assignment(a, b).total_movement < 10


def test_voice_named_progression_basic_cadence():
    """The basic cadence in C stays under twenty semitones of movement."""
    voicings = progressions.voice_named_progression("C", "major", "I-IV-V-I")
    assert vl.total_movement(voicings) < 20


def test_voice_named_progression_unknown_name():
    with pytest.raises(ValueError, match="Unknown progression"):
        progressions.voice_named_progression("C", "major", "I-II-III")
