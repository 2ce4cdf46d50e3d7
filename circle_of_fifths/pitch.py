"""Pitch helpers shared by every other module of the theory engine.

Note names are plain strings such as ``"C"``, ``"F#"`` or ``"Bb"``. The
helpers in this module translate those names into chromatic semitone
indices, spell semitones back onto a requested letter and convert between
``(note, octave)`` pairs, MIDI numbers and frequencies.

Example
-------
>>> from circle_of_fifths.pitch import note_to_semitone, spell_note
>>> note_to_semitone("Db")
1
>>> spell_note("E", 5)
'E#'

Design Notes
------------
- Octaves follow scientific pitch notation: the octave number belongs to
  the letter, so ``B#3`` sounds as ``C4`` (MIDI 60) and ``Cb4`` as ``B3``
  (MIDI 59). :func:`note_to_semitone` still wraps into ``0-11``;
  :func:`note_pitch` carries the crossing into the neighbouring octave.
- Double accidentals are accepted because letter-based spelling of harmonic
  minor scales can require them (``F##`` in G# harmonic minor).
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Tuple

__all__ = [
    "InvalidNote",
    "NOTES",
    "FLAT_NOTES",
    "LETTERS",
    "normalize_note_name",
    "note_to_semitone",
    "note_letter",
    "spell_note",
    "semitone_to_note",
    "enharmonic",
    "note_pitch",
    "note_to_midi",
    "midi_to_note",
    "note_frequency",
]

logger = logging.getLogger(__name__)


class InvalidNote(ValueError):
    """Raised when a string cannot be parsed as a note name."""


# Chromatic names using sharps, indexed by semitone (0 == C).
NOTES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# The same chromatic scale spelled with flats.
FLAT_NOTES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Letter names in scale order along with the semitone of each natural.
LETTERS = ["C", "D", "E", "F", "G", "A", "B"]
_NATURAL_SEMITONES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

_ACCIDENTAL_OFFSETS = {"#": 1, "b": -1}

# Accidental strings for offsets of up to two semitones either way.
_ACCIDENTAL_NAMES = {0: "", 1: "#", 2: "##", -1: "b", -2: "bb"}

_NOTE_PATTERN = re.compile(r"[A-G](#{1,2}|b{1,2})?")

# A4 sits nine semitones above C4 and defines concert pitch.
A4_FREQUENCY = 440.0
A4_MIDI = 69


@lru_cache(maxsize=None)
def normalize_note_name(name: str) -> str:
    """Return ``name`` in canonical form (``"bb"`` -> ``"Bb"``).

    Parameters
    ----------
    name:
        Note name in any capitalisation. Unicode ``♯``/``♭`` and the ``x``
        double-sharp sign are accepted.

    Returns
    -------
    str
        Upper-case letter followed by ASCII accidentals.

    Raises
    ------
    InvalidNote
        If ``name`` is not a string or does not describe a note.
    """

    if not isinstance(name, str) or not name.strip():
        raise InvalidNote(f"Invalid note: {name!r}")

    text = name.strip()
    letter, accidentals = text[0].upper(), text[1:]
    accidentals = accidentals.replace("♯", "#").replace("♭", "b").replace("x", "##")
    normalised = letter + accidentals
    if not _NOTE_PATTERN.fullmatch(normalised):
        raise InvalidNote(f"Invalid note: {name!r}")
    return normalised


@lru_cache(maxsize=None)
def note_to_semitone(name: str) -> int:
    """Return the chromatic index ``0-11`` of ``name``.

    Parameters
    ----------
    name:
        Note name such as ``"C#"``, ``"db"`` or ``"B#"``.

    Returns
    -------
    int
        Semitone above C. Enharmonic spellings share a value.

    Raises
    ------
    InvalidNote
        If ``name`` is empty or malformed.

    Examples
    --------
    >>> note_to_semitone("C#") == note_to_semitone("Db")
    True
    >>> note_to_semitone("Cb")
    11
    """

    return _unwrapped_semitone(name) % 12


@lru_cache(maxsize=None)
def _unwrapped_semitone(name: str) -> int:
    """Return the natural of the letter plus its accidentals (``-2`` to ``13``)."""

    note = normalize_note_name(name)
    offset = sum(_ACCIDENTAL_OFFSETS[ch] for ch in note[1:])
    return _NATURAL_SEMITONES[note[0]] + offset


def note_letter(name: str) -> str:
    """Return the letter name of ``name`` without accidentals."""

    return normalize_note_name(name)[0]


def spell_note(letter: str, semitone: int) -> str:
    """Spell ``semitone`` using ``letter`` as the note name.

    The accidental is the smallest signed offset from the natural letter.
    When more than two accidentals would be required the default sharp
    spelling from :data:`NOTES` is returned instead.

    >>> spell_note("B", 0)
    'B#'
    >>> spell_note("F", 7)
    'F##'
    >>> spell_note("C", 6)
    'F#'
    """

    letter = letter.upper()
    diff = (semitone - _NATURAL_SEMITONES[letter]) % 12
    if diff > 6:
        diff -= 12
    accidental = _ACCIDENTAL_NAMES.get(diff)
    if accidental is None:
        return NOTES[semitone % 12]
    return letter + accidental


def semitone_to_note(semitone: int, prefer_flats: bool = False) -> str:
    """Return the default name for ``semitone`` using sharps or flats."""

    table = FLAT_NOTES if prefer_flats else NOTES
    return table[semitone % 12]


def enharmonic(name: str) -> str:
    """Return the single-accidental partner of a black-key note.

    White-key names and spellings without a simple partner are returned in
    canonical form.

    >>> enharmonic("C#")
    'Db'
    >>> enharmonic("Bb")
    'A#'
    """

    note = normalize_note_name(name)
    if len(note) != 2:
        return note
    semitone = note_to_semitone(note)
    if note[1] == "#":
        return FLAT_NOTES[semitone]
    return NOTES[semitone]


def note_pitch(name: str, octave: int) -> int:
    """Return the MIDI-style number of ``name`` in ``octave`` without range checks.

    The octave is that of the letter, so accidentals may cross into the
    neighbouring octave.

    >>> note_pitch("B#", 3)
    60
    >>> note_pitch("Cb", 4)
    59
    """

    return (octave + 1) * 12 + _unwrapped_semitone(name)


def note_to_midi(name: str, octave: int) -> int:
    """Return the MIDI number of ``name`` in ``octave`` (``C4`` == 60).

    Octaves follow scientific pitch notation, so ``note_to_midi("B#", 3)``
    is 60.

    Raises
    ------
    InvalidNote
        If ``name`` is malformed.
    ValueError
        If the resulting number falls outside ``0-127``.
    """

    midi_val = note_pitch(name, octave)
    if not 0 <= midi_val <= 127:
        logger.error("MIDI value out of range: %s%d -> %d", name, octave, midi_val)
        raise ValueError(
            f"Computed MIDI value {midi_val} out of range 0-127 for note {name}{octave}"
        )
    return midi_val


def midi_to_note(midi_note: int, prefer_flats: bool = False) -> Tuple[str, int]:
    """Return ``(name, octave)`` for ``midi_note``.

    >>> midi_to_note(61)
    ('C#', 4)
    >>> midi_to_note(61, prefer_flats=True)
    ('Db', 4)
    """

    if not 0 <= midi_note <= 127:
        raise ValueError(f"MIDI note {midi_note} out of range 0-127")
    return semitone_to_note(midi_note % 12, prefer_flats), midi_note // 12 - 1


def note_frequency(name: str, octave: int = 4) -> float:
    """Return the equal-tempered frequency of ``name`` in Hz (A4 = 440)."""

    semitones = note_pitch(name, octave) - A4_MIDI
    return A4_FREQUENCY * 2 ** (semitones / 12)
