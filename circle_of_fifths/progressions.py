"""Named chord progressions and helpers to resolve and voice them.

Progressions are stored as Roman numerals so the same entry works in every
key. :func:`progression_chords` resolves the numerals against a key and
:func:`voice_named_progression` runs the result through the voice-leading
optimizer.

Example
-------
>>> [c.root for c in progression_chords("C", "major", "I-V-vi-IV")]
['C', 'G', 'A', 'F']
>>> [c.notes for c in progression_chords("A", "minor", "i-iv-V-i")][2]
['E', 'G#', 'B']
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from .chords import chord_notes_for_degree, chord_quality, roman_to_chord_root
from .keys import MAJOR, MINOR, is_minor_mode, normalize_mode
from .voice_leading import voice_progression
from .voicing import DEFAULT_OCTAVE, Voice

__all__ = [
    "Progression",
    "ProgressionChord",
    "CHORD_PROGRESSIONS",
    "get_progressions",
    "get_progression",
    "parse_numerals",
    "progression_chords",
    "voice_named_progression",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progression:
    """A named sequence of Roman numerals."""

    name: str
    numerals: Tuple[str, ...]
    description: str


class ProgressionChord(NamedTuple):
    """A numeral of a progression resolved in a concrete key."""

    numeral: str
    root: str
    quality: str
    notes: List[str]


# Keyed by mode family and then by the numerals joined with dashes.
CHORD_PROGRESSIONS: Dict[str, Dict[str, Progression]] = {
    MAJOR: {
        "I-V-vi-IV": Progression(
            "Pop Progression", ("I", "V", "vi", "IV"),
            "Most popular progression in modern music",
        ),
        "ii-V-I": Progression(
            "Jazz Progression", ("ii", "V", "I"), "Essential jazz cadence"
        ),
        "vi-IV-I-V": Progression(
            "Circle Progression", ("vi", "IV", "I", "V"),
            "Follows circle of fifths backwards",
        ),
        "I-vi-ii-V": Progression(
            "Doo-Wop Progression", ("I", "vi", "ii", "V"),
            "Classic 1950s progression",
        ),
        "I-IV-V-I": Progression(
            "Basic Cadence", ("I", "IV", "V", "I"),
            "Fundamental tonic-subdominant-dominant-tonic",
        ),
    },
    MINOR: {
        "i-VII-VI-VII": Progression(
            "Minor Pop", ("i", "VII", "VI", "VII"), "Popular minor progression"
        ),
        # V borrows the raised leading tone of harmonic minor.
        "i-iv-V-i": Progression(
            "Minor Cadence", ("i", "iv", "V", "i"), "Basic minor cadence"
        ),
        "i-VI-III-VII": Progression(
            "Andalusian", ("i", "VI", "III", "VII"), "Spanish/Flamenco progression"
        ),
        "i-v-iv-i": Progression(
            "Natural Minor", ("i", "v", "iv", "i"), "All natural minor chords"
        ),
    },
}

_SEPARATORS = re.compile(r"[\s,\-]+")


def get_progressions(mode: str = MAJOR) -> Dict[str, Progression]:
    """Return the progressions available for ``mode``.

    Every minor variant shares the minor table. Unknown modes yield an empty
    mapping.
    """

    canonical = normalize_mode(mode)
    if canonical is None:
        return {}
    return dict(CHORD_PROGRESSIONS[MINOR if is_minor_mode(canonical) else MAJOR])


def get_progression(name: str, mode: str = MAJOR) -> Optional[Progression]:
    """Return the progression ``name`` in ``mode`` or ``None``.

    ``name`` may be the table key (``"ii-V-I"``) or the display name
    (``"Jazz Progression"``), compared case-insensitively.
    """

    table = get_progressions(mode)
    if name in table:
        return table[name]
    wanted = name.strip().lower()
    for progression in table.values():
        if progression.name.lower() == wanted:
            return progression
    return None


def parse_numerals(text: str) -> List[str]:
    """Split ``"ii, V, I"`` or ``"ii-V-I"`` into a list of numerals."""

    return [part for part in _SEPARATORS.split(text.strip()) if part]


def progression_chords(
    key: str, mode: str, progression: Union[str, Sequence[str]]
) -> List[ProgressionChord]:
    """Resolve ``progression`` in ``key``/``mode``.

    Parameters
    ----------
    key, mode:
        The key to resolve the numerals against.
    progression:
        A progression name known to :func:`get_progression`, a string of
        numerals separated by commas, dashes or spaces, or a sequence of
        numerals.

    Returns
    -------
    list[ProgressionChord]
        One entry per numeral. Numerals that cannot be resolved keep the
        numeral as ``root`` and have no ``notes``.
    """

    if isinstance(progression, str):
        named = get_progression(progression, mode)
        numerals = list(named.numerals) if named else parse_numerals(progression)
    else:
        numerals = list(progression)

    chords: List[ProgressionChord] = []
    for numeral in numerals:
        notes = chord_notes_for_degree(numeral, key, mode)
        if not notes:
            logger.warning("Could not resolve %r in %s %s", numeral, key, mode)
        chords.append(
            ProgressionChord(
                numeral,
                roman_to_chord_root(numeral, key, mode),
                chord_quality(numeral, mode),
                notes,
            )
        )
    return chords


def voice_named_progression(
    key: str,
    mode: str,
    name: str,
    *,
    loops: int = 1,
    target_octave: int = DEFAULT_OCTAVE,
) -> List[List[Voice]]:
    """Resolve the progression ``name`` in ``key`` and voice every chord.

    Raises
    ------
    ValueError
        If ``name`` is not a known progression for ``mode`` or ``loops`` is
        smaller than one.
    """

    progression = get_progression(name, mode)
    if progression is None:
        raise ValueError(f"Unknown progression {name!r} for mode {mode!r}")
    chords = progression_chords(key, mode, progression.numerals)
    return voice_progression(
        [chord.notes for chord in chords], target_octave=target_octave, loops=loops
    )
