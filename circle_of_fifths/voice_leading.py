"""Voice-leading optimizer for chord progressions.

Given the notes of the next chord and the voicing chosen for the previous
one, :func:`optimize_voicing` picks the candidate voicing (see
:mod:`circle_of_fifths.voicing`) that moves the voices the least, keeps
common tones in place and keeps the top voice singable.

Example
-------
>>> from circle_of_fifths.voicing import create_voicing
>>> c_major = create_voicing(["C", "E", "G"], 3)
>>> [str(v) for v in optimize_voicing(["F", "A", "C"], c_major)]
['C3', 'F3', 'A3']

Algorithm
---------
Voices of two voicings are paired by :func:`find_voice_assignment` in two
greedy passes::

    for (prev, next) with the same note name, closest first:
        pair them if both are still free          # common tones
    while both sides have free voices:
        pair the closest remaining (prev, next)   # nearest neighbour

Candidates are then scored, lower being better::

    0.4 * total + 0.8 * top_voice + 0.2 * max_leap + range + spacing

so the top voice counts twice as much as aggregate movement. Without a
previous voicing only the range and spacing penalties apply.

Design Notes
------------
- The assignment is a heuristic, not an optimal bipartite matching. The two
  explicit passes keep tie-breaking deterministic: equal distances resolve
  by previous-voice index, then candidate-voice index.
- ``numpy`` builds the pairwise distance matrix once per assignment and
  ``argmin`` over the masked matrix gives the row-major tie order above.
- Every function is pure. Callers voicing a progression pass each result
  back in as ``previous`` for the next chord; :func:`voice_progression`
  does exactly that.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .pitch import normalize_note_name
from .voicing import DEFAULT_OCTAVE, Voice, generate_candidates

__all__ = [
    "Movement",
    "VoiceAssignment",
    "find_voice_assignment",
    "range_penalty",
    "spacing_penalty",
    "score_voicing",
    "optimize_voicing",
    "voice_progression",
    "total_movement",
]

logger = logging.getLogger(__name__)

MOVEMENT_WEIGHT = 0.4
# The melodic line is weighted twice as heavily as aggregate movement.
TOP_VOICE_WEIGHT = 0.4 * 2
LEAP_WEIGHT = 0.2

# Octaves that need no range penalty, and the wider band beyond which the
# penalty becomes steep.
TARGET_OCTAVES = (3, 4)
COMFORT_OCTAVES = (2, 5)
RANGE_WEIGHT = 2.0
COMFORT_WEIGHT = 8.0
SPACING_WEIGHT = 0.1


class Movement(NamedTuple):
    """One voice moving from ``source`` to ``target``."""

    source: Voice
    target: Voice
    distance: int


class VoiceAssignment(NamedTuple):
    """Pairing between two voicings and its aggregate movement.

    Attributes
    ----------
    movements:
        Paired voices ordered by the source voice's position.
    total_movement:
        Sum of all distances in semitones.
    max_leap:
        Largest single distance.
    top_voice_movement:
        Distance travelled into the highest voice of the new voicing.
    """

    movements: List[Movement]
    total_movement: int
    max_leap: int
    top_voice_movement: int


def _same_note(a: str, b: str) -> bool:
    return normalize_note_name(a) == normalize_note_name(b)


def find_voice_assignment(
    previous: Sequence[Voice], candidate: Sequence[Voice]
) -> VoiceAssignment:
    """Pair the voices of ``previous`` with the voices of ``candidate``.

    Parameters
    ----------
    previous:
        Voicing currently sounding.
    candidate:
        Voicing that would sound next.

    Returns
    -------
    VoiceAssignment
        ``min(len(previous), len(candidate))`` movements and their totals.
        Empty input yields no movements and zero totals.

    Notes
    -----
    Common tones are paired first, closest octave first, so a shared note
    is held (or moved by an octave at most) whenever possible. Remaining
    voices are paired nearest-first. When the new top voice is left
    unpaired because ``candidate`` has more voices, its movement is measured
    from the previous top voice.
    """

    previous = list(previous)
    candidate = list(candidate)
    if not previous or not candidate:
        return VoiceAssignment([], 0, 0, 0)

    prev_pitches = np.array([voice.midi for voice in previous], dtype=np.int64)
    cand_pitches = np.array([voice.midi for voice in candidate], dtype=np.int64)
    distances = np.abs(prev_pitches[:, None] - cand_pitches[None, :])

    pairs: List[Tuple[int, int]] = []
    free_prev = set(range(len(previous)))
    free_cand = set(range(len(candidate)))

    # Phase 1: common tones, nearest octave first.
    matches = sorted(
        (int(distances[i, j]), i, j)
        for i, source in enumerate(previous)
        for j, target in enumerate(candidate)
        if _same_note(source.note, target.note)
    )
    for _, i, j in matches:
        if i in free_prev and j in free_cand:
            pairs.append((i, j))
            free_prev.discard(i)
            free_cand.discard(j)

    # Phase 2: nearest neighbour over whatever is left.
    cost = distances.astype(np.float64)
    for i, j in pairs:
        cost[i, :] = np.inf
        cost[:, j] = np.inf
    while free_prev and free_cand:
        i, j = np.unravel_index(int(np.argmin(cost)), cost.shape)
        i, j = int(i), int(j)
        pairs.append((i, j))
        free_prev.discard(i)
        free_cand.discard(j)
        cost[i, :] = np.inf
        cost[:, j] = np.inf

    pairs.sort()
    movements = [
        Movement(previous[i], candidate[j], int(distances[i, j])) for i, j in pairs
    ]
    total = sum(m.distance for m in movements)
    max_leap = max(m.distance for m in movements)

    top = int(np.argmax(cand_pitches))
    top_movement = next((int(distances[i, j]) for i, j in pairs if j == top), None)
    if top_movement is None:
        top_movement = abs(int(cand_pitches[top]) - int(prev_pitches.max()))

    return VoiceAssignment(movements, total, max_leap, top_movement)


def _outside(value: int, band: Tuple[int, int]) -> int:
    low, high = band
    return max(low - value, 0, value - high)


def range_penalty(voicing: Sequence[Voice]) -> float:
    """Return the penalty for voices lying outside the comfortable octaves."""

    penalty = 0.0
    for voice in voicing:
        penalty += RANGE_WEIGHT * _outside(voice.octave, TARGET_OCTAVES)
        penalty += COMFORT_WEIGHT * _outside(voice.octave, COMFORT_OCTAVES)
    return penalty


def spacing_penalty(voicing: Sequence[Voice]) -> float:
    """Return the penalty for uneven gaps between adjacent voices."""

    if len(voicing) < 3:
        return 0.0
    gaps = np.diff([voice.midi for voice in voicing])
    return SPACING_WEIGHT * float(np.abs(gaps - gaps.mean()).sum())


def score_voicing(
    candidate: Sequence[Voice], previous: Optional[Sequence[Voice]] = None
) -> float:
    """Return the cost of moving to ``candidate`` (lower is better).

    Without ``previous`` only the range and spacing penalties count, which
    favours an evenly spaced voicing around octaves 3-4 for the first chord
    of a progression.
    """

    penalty = range_penalty(candidate) + spacing_penalty(candidate)
    if not previous:
        return penalty
    assignment = find_voice_assignment(previous, candidate)
    return (
        MOVEMENT_WEIGHT * assignment.total_movement
        + TOP_VOICE_WEIGHT * assignment.top_voice_movement
        + LEAP_WEIGHT * assignment.max_leap
        + penalty
    )


def optimize_voicing(
    notes: Sequence[str],
    previous: Optional[Sequence[Voice]] = None,
    target_octave: int = DEFAULT_OCTAVE,
) -> List[Voice]:
    """Return the best voicing of ``notes`` following ``previous``.

    Parameters
    ----------
    notes:
        Chord members, typically from :func:`~circle_of_fifths.chords.chord_notes`.
    previous:
        Voicing of the preceding chord or ``None`` for the first chord.
    target_octave:
        Centre of the octave window searched for candidates.

    Returns
    -------
    list[Voice]
        The lowest-scoring candidate; the earliest generated wins ties so the
        result is deterministic. Empty ``notes`` yield an empty voicing.
    """

    candidates = generate_candidates(notes, target_octave)
    if not candidates:
        return []
    scores = [score_voicing(candidate, previous) for candidate in candidates]
    best = min(range(len(candidates)), key=scores.__getitem__)
    logger.debug(
        "Voiced %s as %s (score %.2f of %d candidates)",
        list(notes),
        [str(v) for v in candidates[best]],
        scores[best],
        len(candidates),
    )
    return candidates[best]


def voice_progression(
    chords: Sequence[Sequence[str]],
    target_octave: int = DEFAULT_OCTAVE,
    loops: int = 1,
    previous: Optional[Sequence[Voice]] = None,
) -> List[List[Voice]]:
    """Voice every chord of ``chords`` in order, ``loops`` times.

    Each voicing is fed back as ``previous`` for the next chord, including
    across the boundary from the last chord of one loop to the first chord
    of the next.

    Raises
    ------
    ValueError
        If ``loops`` is smaller than one.
    """

    if loops < 1:
        raise ValueError("loops must be at least 1")
    voicings: List[List[Voice]] = []
    for _ in range(loops):
        for notes in chords:
            voicing = optimize_voicing(notes, previous or None, target_octave)
            voicings.append(voicing)
            previous = voicing
    return voicings


def total_movement(voicings: Sequence[Sequence[Voice]]) -> int:
    """Return the summed movement across consecutive ``voicings``."""

    return sum(
        find_voice_assignment(a, b).total_movement
        for a, b in zip(voicings, voicings[1:])
    )
