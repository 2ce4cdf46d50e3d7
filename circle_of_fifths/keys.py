"""Scales, key signatures and circle-of-fifths relationships.

Scales are spelled from the tonic's letter so each of the seven letter names
appears exactly once. Sharp keys therefore produce sharps, flat keys produce
flats and the raised degrees of harmonic and melodic minor receive the
accidental they actually need (``G#`` in A harmonic minor, ``F##`` in G#
harmonic minor).

Key signatures and the circle of fifths are fixed tables built once at
import time. Lookups that miss return explicit "not found" values
(``[]``, ``None`` or a signature with ``known=False``) so interface code can
show a neutral state instead of handling exceptions.

Example
-------
>>> scale_notes("G")
['G', 'A', 'B', 'C', 'D', 'E', 'F#']
>>> key_signature("D", "minor").description
'1 flat (Bb)'
>>> related_keys("C").dominant
KeyRef(key='G', mode='major')
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Tuple

from .pitch import LETTERS, InvalidNote, normalize_note_name, note_to_semitone, spell_note

__all__ = [
    "MAJOR",
    "MINOR",
    "HARMONIC_MINOR",
    "MELODIC_MINOR",
    "MODES",
    "SCALE_PATTERNS",
    "SHARP_ORDER",
    "FLAT_ORDER",
    "CIRCLE_OF_FIFTHS",
    "MINOR_CIRCLE_OF_FIFTHS",
    "MAJOR_KEYS",
    "MINOR_KEYS",
    "KeySignature",
    "KeyRef",
    "RelatedKeys",
    "normalize_mode",
    "is_minor_mode",
    "scale_notes",
    "key_signature",
    "related_keys",
    "circle_of_fifths_position",
    "circle_of_fifths_keys",
]

logger = logging.getLogger(__name__)

MAJOR = "major"
MINOR = "minor"
HARMONIC_MINOR = "harmonic minor"
MELODIC_MINOR = "melodic minor"
MODES = (MAJOR, MINOR, HARMONIC_MINOR, MELODIC_MINOR)

# Semitone steps between consecutive degrees. The final step returns to the
# octave so every pattern sums to twelve.
SCALE_PATTERNS: Dict[str, Tuple[int, ...]] = {
    MAJOR: (2, 2, 1, 2, 2, 2, 1),
    MINOR: (2, 1, 2, 2, 1, 2, 2),
    HARMONIC_MINOR: (2, 1, 2, 2, 1, 3, 1),
    MELODIC_MINOR: (2, 1, 2, 2, 2, 2, 1),
}

# Accepted spellings mapped to canonical mode names. Keys are lower-case with
# every non-letter removed so "Harmonic-Minor" and "harmonicMinor" match.
_MODE_ALIASES: Dict[str, str] = {
    "major": MAJOR,
    "ionian": MAJOR,
    "minor": MINOR,
    "naturalminor": MINOR,
    "aeolian": MINOR,
    "harmonicminor": HARMONIC_MINOR,
    "melodicminor": MELODIC_MINOR,
}

SHARP_ORDER = ("F#", "C#", "G#", "D#", "A#", "E#", "B#")
FLAT_ORDER = ("Bb", "Eb", "Ab", "Db", "Gb", "Cb", "Fb")

# Clockwise from the top of the wheel; neighbours are a perfect fifth apart.
CIRCLE_OF_FIFTHS: Tuple[str, ...] = (
    "C", "G", "D", "A", "E", "B", "F#", "Db", "Ab", "Eb", "Bb", "F",
)
# Inner ring: the relative minor of the major key at the same position.
MINOR_CIRCLE_OF_FIFTHS: Tuple[str, ...] = (
    "A", "E", "B", "F#", "C#", "G#", "D#", "Bb", "F", "C", "G", "D",
)

# Tonics ordered by accidental count. Index ``i`` of the sharp lists carries
# ``i`` sharps; index ``i`` of the flat lists carries ``i + 1`` flats.
_MAJOR_SHARP_KEYS = ("C", "G", "D", "A", "E", "B", "F#", "C#")
_MAJOR_FLAT_KEYS = ("F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb")
_MINOR_SHARP_KEYS = ("A", "E", "B", "F#", "C#", "G#", "D#", "A#")
_MINOR_FLAT_KEYS = ("D", "G", "C", "F", "Bb", "Eb", "Ab")

_UNKNOWN_DESCRIPTION = "Unknown key"


@dataclass(frozen=True)
class KeySignature:
    """Accidentals carried by a key.

    Attributes
    ----------
    key, mode:
        The key as requested (canonical spelling) and its canonical mode.
    sharps, flats:
        Accidental counts. At most one of them is non-zero.
    description:
        Human readable summary such as ``"2 sharps (F#, C#)"``.
    accidentals:
        Sharped or flatted notes in signature order.
    relative:
        Relative major of a minor key or relative minor of a major key.
    known:
        ``False`` when the key/mode pair is absent from the tables.
    """

    key: str
    mode: str
    sharps: int
    flats: int
    description: str
    accidentals: Tuple[str, ...]
    relative: Optional[str] = None
    known: bool = True


class KeyRef(NamedTuple):
    """A ``(key, mode)`` pair returned by :func:`related_keys`."""

    key: str
    mode: str


class RelatedKeys(NamedTuple):
    """The three closest neighbours of a key on the circle of fifths."""

    dominant: KeyRef
    subdominant: KeyRef
    relative: KeyRef


def _describe(sharps: int, flats: int, accidentals: Tuple[str, ...]) -> str:
    if not accidentals:
        return "No sharps or flats"
    count = sharps or flats
    kind = "sharp" if sharps else "flat"
    plural = "" if count == 1 else "s"
    return f"{count} {kind}{plural} ({', '.join(accidentals)})"


def _build_signatures(
    sharp_keys: Tuple[str, ...],
    flat_keys: Tuple[str, ...],
    relatives: Tuple[Tuple[str, ...], Tuple[str, ...]],
    mode: str,
) -> Dict[str, KeySignature]:
    table: Dict[str, KeySignature] = {}
    for count, (tonic, relative) in enumerate(zip(sharp_keys, relatives[0])):
        accidentals = SHARP_ORDER[:count]
        table[tonic] = KeySignature(
            tonic, mode, count, 0, _describe(count, 0, accidentals), accidentals, relative
        )
    for index, (tonic, relative) in enumerate(zip(flat_keys, relatives[1])):
        count = index + 1
        accidentals = FLAT_ORDER[:count]
        table[tonic] = KeySignature(
            tonic, mode, 0, count, _describe(0, count, accidentals), accidentals, relative
        )
    return table


MAJOR_KEYS: Dict[str, KeySignature] = _build_signatures(
    _MAJOR_SHARP_KEYS, _MAJOR_FLAT_KEYS, (_MINOR_SHARP_KEYS, _MINOR_FLAT_KEYS), MAJOR
)
MINOR_KEYS: Dict[str, KeySignature] = _build_signatures(
    _MINOR_SHARP_KEYS, _MINOR_FLAT_KEYS, (_MAJOR_SHARP_KEYS, _MAJOR_FLAT_KEYS), MINOR
)


def normalize_mode(mode: Optional[str]) -> Optional[str]:
    """Return the canonical mode name for ``mode`` or ``None`` if unknown.

    ``None`` and empty strings default to :data:`MAJOR`.
    """

    if not mode:
        return MAJOR
    if not isinstance(mode, str):
        return None
    return _MODE_ALIASES.get(re.sub(r"[^a-z]", "", mode.lower()))


def is_minor_mode(mode: Optional[str]) -> bool:
    """Return ``True`` for any of the three minor modes."""

    return normalize_mode(mode) in (MINOR, HARMONIC_MINOR, MELODIC_MINOR)


def _parse_key(key: str, mode: Optional[str]) -> Optional[Tuple[str, str]]:
    """Return ``(tonic, mode)`` in canonical form or ``None`` when invalid."""

    canonical_mode = normalize_mode(mode)
    if canonical_mode is None:
        logger.debug("Unknown mode: %r", mode)
        return None
    try:
        tonic = normalize_note_name(key)
    except (InvalidNote, TypeError):
        logger.debug("Unknown key: %r", key)
        return None
    return tonic, canonical_mode


def scale_notes(key: str, mode: str = MAJOR) -> List[str]:
    """Return the seven notes of ``key`` in ``mode``.

    Parameters
    ----------
    key:
        Tonic name, case-insensitive (``"bb"`` is read as ``Bb``).
    mode:
        ``"major"``, ``"minor"``, ``"harmonic minor"`` or
        ``"melodic minor"`` (ascending form). Defaults to major.

    Returns
    -------
    list[str]
        Notes starting on the tonic, one per letter name. Empty when the
        tonic cannot be parsed or the mode is unknown.

    Examples
    --------
    >>> scale_notes("F#")
    ['F#', 'G#', 'A#', 'B', 'C#', 'D#', 'E#']
    >>> scale_notes("A", "harmonic minor")
    ['A', 'B', 'C', 'D', 'E', 'F', 'G#']
    """

    parsed = _parse_key(key, mode)
    if parsed is None:
        return []
    tonic, canonical_mode = parsed

    letter_index = LETTERS.index(tonic[0])
    semitone = note_to_semitone(tonic)
    notes = [tonic]
    # The last step of each pattern closes the octave and is not needed.
    for degree, step in enumerate(SCALE_PATTERNS[canonical_mode][:-1], start=1):
        semitone = (semitone + step) % 12
        letter = LETTERS[(letter_index + degree) % 7]
        notes.append(spell_note(letter, semitone))
    return notes


def key_signature(key: str, mode: str = MAJOR) -> KeySignature:
    """Return the key signature of ``key`` in ``mode``.

    Harmonic and melodic minor share the signature of the natural minor.
    Unknown keys yield a signature with ``known=False`` and the description
    ``"Unknown key"`` rather than raising.
    """

    parsed = _parse_key(key, mode)
    if parsed is not None:
        tonic, canonical_mode = parsed
        table = MAJOR_KEYS if canonical_mode == MAJOR else MINOR_KEYS
        signature = table.get(tonic)
        if signature is not None:
            if signature.mode != canonical_mode:
                return KeySignature(
                    signature.key,
                    canonical_mode,
                    signature.sharps,
                    signature.flats,
                    signature.description,
                    signature.accidentals,
                    signature.relative,
                )
            return signature
    logger.debug("No key signature for %r %r", key, mode)
    return KeySignature(
        key if isinstance(key, str) else "",
        mode if isinstance(mode, str) else "",
        0,
        0,
        _UNKNOWN_DESCRIPTION,
        (),
        None,
        known=False,
    )


def _ring_index(tonic: str, ring: Tuple[str, ...]) -> int:
    semitone = note_to_semitone(tonic)
    for index, name in enumerate(ring):
        if note_to_semitone(name) == semitone:
            return index
    raise AssertionError("every pitch class appears on the circle")  # pragma: no cover


def circle_of_fifths_position(key: str, mode: str = MAJOR) -> Optional[int]:
    """Return the clockwise position ``0-11`` of ``key`` (C major == 0).

    Minor keys use the inner ring so A minor shares position ``0`` with its
    relative C major. Lookups compare pitch classes, so ``"gb"`` finds the
    ``F#`` slot. ``None`` is returned for anything that is not a key.
    """

    parsed = _parse_key(key, mode)
    if parsed is None:
        return None
    tonic, canonical_mode = parsed
    ring = CIRCLE_OF_FIFTHS if canonical_mode == MAJOR else MINOR_CIRCLE_OF_FIFTHS
    return _ring_index(tonic, ring)


def circle_of_fifths_keys(mode: str = MAJOR) -> List[str]:
    """Return the ring for ``mode`` in clockwise order (empty if unknown)."""

    canonical_mode = normalize_mode(mode)
    if canonical_mode is None:
        return []
    ring = CIRCLE_OF_FIFTHS if canonical_mode == MAJOR else MINOR_CIRCLE_OF_FIFTHS
    return list(ring)


def related_keys(key: str, mode: str = MAJOR) -> Optional[RelatedKeys]:
    """Return the dominant, subdominant and relative keys of ``key``.

    The dominant and subdominant are the neighbours one step clockwise and
    counter-clockwise on the circle and keep the requested mode. They are
    spelled on the letters a fifth and a fourth above the tonic, so the
    dominant of ``F#`` major is ``C#`` rather than the ``Db`` printed on the
    wheel. The relative key comes from the signature tables when the key is
    listed there (A# minor pairs with C# major) and is otherwise spelled a
    third away on the tonic's letter. ``None`` is returned for invalid input.

    >>> related_keys("A", "minor")
    RelatedKeys(dominant=KeyRef(key='E', mode='minor'), subdominant=KeyRef(key='D', mode='minor'), relative=KeyRef(key='C', mode='major'))
    >>> related_keys("A#", "minor").dominant
    KeyRef(key='E#', mode='minor')
    """

    parsed = _parse_key(key, mode)
    if parsed is None:
        return None
    tonic, canonical_mode = parsed
    letter_index = LETTERS.index(tonic[0])
    semitone = note_to_semitone(tonic)

    def _above(steps: int, semitones: int) -> str:
        return spell_note(LETTERS[(letter_index + steps) % 7], semitone + semitones)

    if canonical_mode == MAJOR:
        other_mode = MINOR
        relative = _above(5, 9)
    else:
        other_mode = MAJOR
        relative = _above(2, 3)
    signature = key_signature(tonic, canonical_mode)
    if signature.known and signature.relative:
        relative = signature.relative

    return RelatedKeys(
        dominant=KeyRef(_above(4, 7), canonical_mode),
        subdominant=KeyRef(_above(3, 5), canonical_mode),
        relative=KeyRef(relative, other_mode),
    )
