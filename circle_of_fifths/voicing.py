"""Octave placement of chord notes.

A *voicing* is a list of :class:`Voice` objects ordered from the lowest to
the highest pitch. :func:`create_voicing` stacks the notes of a chord in the
order given, starting at ``base_octave`` and moving up an octave only when a
note would otherwise fall below its predecessor; orders that would spread
wider than a twelfth are restacked above the bass. :func:`generate_candidates`
produces the pool of alternatives scored by the voice-leading optimizer:
every inversion (a rotation of the note list) in three neighbouring octaves.

Example
-------
>>> [str(v) for v in create_voicing(["G", "B", "D"], 3)]
['G3', 'B3', 'D4']
>>> len(generate_candidates(["C", "E", "G"], 3))
9
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .pitch import note_pitch, note_to_semitone

__all__ = [
    "Voice",
    "DEFAULT_OCTAVE",
    "OCTAVE_WINDOW",
    "MAX_CLOSE_SPAN",
    "create_voicing",
    "generate_candidates",
    "voicing_midi",
    "voicing_span",
]

DEFAULT_OCTAVE = 3

# Octave offsets tried around the target octave for every inversion.
OCTAVE_WINDOW = (-1, 0, 1)

# Widest span in semitones accepted from stacking notes in the given order.
MAX_CLOSE_SPAN = 19

# Stereo positions of the outer voices. Inner voices are spread evenly.
_PAN_WIDTH = 0.5


@dataclass(frozen=True)
class Voice:
    """A single sounding note of a voicing.

    Attributes
    ----------
    note:
        Note name as supplied by the chord (``"Bb"``, ``"F#"``).
    octave:
        Octave number in scientific pitch notation (``C4`` is middle C). The
        octave belongs to the letter, so ``B#3`` sounds as ``C4``.
    pan:
        Stereo position between ``-0.5`` (left) and ``0.5`` (right).
    """

    note: str
    octave: int
    pan: float = 0.0

    @property
    def midi(self) -> int:
        """Pitch as a MIDI-style number, used for all distance calculations."""
        return note_pitch(self.note, self.octave)

    def __str__(self) -> str:
        return f"{self.note}{self.octave}"


def _pan_for(index: int, count: int) -> float:
    if count < 2:
        return 0.0
    return -_PAN_WIDTH + 2 * _PAN_WIDTH * index / (count - 1)


def _stack(notes: Sequence[str], base_octave: int) -> List[Voice]:
    voices: List[Voice] = []
    count = len(notes)
    octave = base_octave
    previous_pitch = None
    for index, note in enumerate(notes):
        pitch = note_pitch(note, octave)
        while previous_pitch is not None and pitch < previous_pitch:
            octave += 1
            pitch += 12
        voices.append(Voice(note, octave, _pan_for(index, count)))
        previous_pitch = pitch
    return voices


def create_voicing(notes: Sequence[str], base_octave: int = DEFAULT_OCTAVE) -> List[Voice]:
    """Return a close-position voicing of ``notes`` starting at ``base_octave``.

    The first note is placed in ``base_octave``. Each following note keeps
    the octave of the previous note unless that would put it below the
    previous pitch, in which case it moves up an octave. The result is
    therefore non-decreasing in pitch with no gap wider than an octave.

    Notes given as a stack of thirds (the output of
    :func:`~circle_of_fifths.chords.chord_notes` or any rotation of it) fit
    well inside :data:`MAX_CLOSE_SPAN`. When the given order would spread
    wider, for example ``["E", "D", "C"]``, the bass is kept and the other
    notes are restacked by pitch class above it.

    Parameters
    ----------
    notes:
        Chord members in the order they should be stacked. The first element
        becomes the bass.
    base_octave:
        Octave of the bass note.

    Returns
    -------
    list[Voice]
        One voice per note. Empty input yields an empty list.

    Raises
    ------
    InvalidNote
        If any element of ``notes`` is not a note name.

    Examples
    --------
    >>> [str(v) for v in create_voicing(["E", "D", "C"], 3)]
    ['E3', 'C4', 'D4']
    """

    voices = _stack(notes, base_octave)
    if voicing_span(voices) <= MAX_CLOSE_SPAN:
        return voices
    bass = note_to_semitone(notes[0])
    upper = sorted(notes[1:], key=lambda note: (note_to_semitone(note) - bass) % 12)
    return _stack([notes[0]] + upper, base_octave)


def generate_candidates(
    notes: Sequence[str], target_octave: int = DEFAULT_OCTAVE
) -> List[List[Voice]]:
    """Return candidate voicings for every inversion of ``notes``.

    Rotation ``r`` moves the first ``r`` notes to the top of the chord. For
    each rotation a voicing is built at ``target_octave - 1``,
    ``target_octave`` and ``target_octave + 1``, in that order. Duplicate
    voicings are kept; the optimizer's scoring sorts them out and ties are
    resolved by this generation order.
    """

    notes = list(notes)
    candidates: List[List[Voice]] = []
    for rotation in range(len(notes)):
        inversion = notes[rotation:] + notes[:rotation]
        for offset in OCTAVE_WINDOW:
            candidates.append(create_voicing(inversion, target_octave + offset))
    return candidates


def voicing_midi(voicing: Sequence[Voice]) -> List[int]:
    """Return the MIDI numbers of ``voicing`` in order."""

    return [voice.midi for voice in voicing]


def voicing_span(voicing: Sequence[Voice]) -> int:
    """Return the distance in semitones between the lowest and highest voice."""

    if not voicing:
        return 0
    pitches = voicing_midi(voicing)
    return max(pitches) - min(pitches)
