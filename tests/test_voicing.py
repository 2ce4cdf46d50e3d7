"""Tests for octave placement and candidate generation."""

import importlib
import itertools
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

voicing = importlib.import_module("circle_of_fifths.voicing")
pitch = importlib.import_module("circle_of_fifths.pitch")


def _names(voices):
    return [str(v) for v in voices]


def test_voice_midi_and_str():
    """``Voice`` exposes a MIDI number and prints as note plus octave."""
    assert voicing.Voice("C", 4).midi == 60
    assert voicing.Voice("Bb", 3).midi == 58
    # The octave belongs to the letter: B#3 sounds as C4, Cb4 as B3.
    assert voicing.Voice("B#", 3).midi == 60
    assert voicing.Voice("Cb", 4).midi == 59
    assert str(voicing.Voice("F#", 2)) == "F#2"


def test_create_voicing_wraps_upwards():
    """Notes below their predecessor move up one octave."""
    assert _names(voicing.create_voicing(["G", "B", "D"], 3)) == ["G3", "B3", "D4"]
    assert _names(voicing.create_voicing(["C", "E", "G"], 4)) == ["C4", "E4", "G4"]
    assert _names(voicing.create_voicing(["E", "G", "C"], 2)) == ["E2", "G2", "C3"]


@pytest.mark.parametrize(
    "notes",
    [["C", "E", "G"], ["A", "C", "E", "G"], ["F#", "A#", "C#"], ["B", "D", "F", "Ab"]],
)
def test_create_voicing_is_close_and_ascending(notes):
    """Pitches never decrease and adjacent voices stay within an octave."""
    pitches = voicing.voicing_midi(voicing.create_voicing(notes, 3))
    assert pitches == sorted(pitches)
    assert all(0 <= b - a <= 12 for a, b in zip(pitches, pitches[1:]))


def test_create_voicing_pans_outer_voices():
    """Outer voices sit at the stereo edges, a single voice in the centre."""
    voices = voicing.create_voicing(["C", "E", "G"], 3)
    assert [v.pan for v in voices] == pytest.approx([-0.5, 0.0, 0.5])
    assert voicing.create_voicing(["C"], 3)[0].pan == 0.0


def test_create_voicing_edge_cases():
    """Empty input gives an empty voicing; bad names raise."""
    assert voicing.create_voicing([], 3) == []
    with pytest.raises(pitch.InvalidNote):
        voicing.create_voicing(["C", "Q"], 3)


def test_generate_candidates_order_and_size():
    """Rotations are outer, octave offsets inner, lowest octave first."""
    candidates = voicing.generate_candidates(["C", "E", "G"], 3)
    assert len(candidates) == 9
    assert _names(candidates[0]) == ["C2", "E2", "G2"]
    assert _names(candidates[1]) == ["C3", "E3", "G3"]
    assert _names(candidates[2]) == ["C4", "E4", "G4"]
    assert _names(candidates[3]) == ["E2", "G2", "C3"]
    assert _names(candidates[8]) == ["G4", "C5", "E5"]


def test_generate_candidates_keep_pitch_classes():
    """Every candidate contains exactly the chord's notes."""
    notes = ["D", "F#", "A", "C"]
    candidates = voicing.generate_candidates(notes, 4)
    assert len(candidates) == len(notes) * len(voicing.OCTAVE_WINDOW)
    for candidate in candidates:
        assert sorted(v.note for v in candidate) == sorted(notes)


def test_generate_candidates_empty():
    assert voicing.generate_candidates([], 3) == []


def test_voicing_span():
    """Span is measured from the lowest to the highest voice."""
    assert voicing.voicing_span(voicing.create_voicing(["G", "B", "D"], 3)) == 7
    assert voicing.voicing_span([]) == 0


@pytest.mark.parametrize(
    "triad",
    [["C", "E", "G"], ["C", "A", "B"], ["A", "C", "E"], ["B", "D", "F"], ["Db", "F", "Ab"]],
)
def test_create_voicing_span_for_any_order(triad):
    """Every ordering of a triad is voiced within a twelfth."""
    for order in itertools.permutations(triad):
        voices = voicing.create_voicing(list(order), 3)
        assert voicing.voicing_span(voices) <= voicing.MAX_CLOSE_SPAN
        assert voices[0].note == order[0]
        pitches = voicing.voicing_midi(voices)
        assert pitches == sorted(pitches)


def test_wide_orders_are_restacked_above_the_bass():
    assert _names(voicing.create_voicing(["E", "D", "C"], 3)) == ["E3", "C4", "D4"]
    assert _names(voicing.create_voicing(["C", "B", "A"], 3)) == ["C3", "A3", "B3"]
    # Orders that already fit are left alone.
    assert _names(voicing.create_voicing(["C", "G", "E"], 3)) == ["C3", "G3", "E4"]


def test_create_voicing_spells_octaves_by_letter():
    """Accidentals crossing C keep the octave written on their letter."""
    assert _names(voicing.create_voicing(["G#", "B#", "D#"], 3)) == ["G#3", "B#3", "D#4"]
    assert voicing.voicing_midi(voicing.create_voicing(["G#", "B#", "D#"], 3)) == [56, 60, 63]
    assert _names(voicing.create_voicing(["Ab", "Cb", "Eb"], 3)) == ["Ab3", "Cb4", "Eb4"]
