"""Chord spelling and Roman-numeral (scale degree) resolution.

A chord is a ``(root, quality)`` pair. :func:`chord_notes` expands it using
a fixed semitone stack per quality and spells every member on the letter a
third above the previous member, so ``C`` dominant seventh is
``C E G Bb`` and ``G#`` major is ``G# B# D#``.

Roman numerals map scale degrees of a key to concrete chords. Upper case
means a major triad and lower case a minor triad unless a suffix says
otherwise; lower-case numerals on a degree whose diatonic triad is
diminished (``vii`` in major, ``ii`` in minor) resolve to diminished.
In natural minor a lower-case or diminished ``vii`` is built on the raised
leading tone, as in the harmonic minor: ``vii°7`` in A minor is
``G# B D F``.

Example
-------
>>> roman_to_chord_root("ii", "C")
'D'
>>> chord_quality("ii", "major")
'minor'
>>> chord_notes_for_degree("V7", "F")
['C', 'E', 'G', 'Bb']

Numerals that cannot be parsed are passed through unchanged by
:func:`roman_to_chord_root`. Callers that need validation should use
:func:`chord_notes_for_degree`, which returns an empty list instead.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, NamedTuple, Optional, Tuple

from .keys import HARMONIC_MINOR, MAJOR, MELODIC_MINOR, MINOR, normalize_mode, scale_notes
from .pitch import LETTERS, normalize_note_name, note_to_semitone, spell_note

__all__ = [
    "MAJOR_TRIAD",
    "MINOR_TRIAD",
    "DIMINISHED",
    "AUGMENTED",
    "DOMINANT7",
    "MAJOR7",
    "MINOR7",
    "DIMINISHED7",
    "HALF_DIMINISHED7",
    "CHORD_INTERVALS",
    "DiatonicChord",
    "chord_notes",
    "chord_quality",
    "roman_to_chord_root",
    "chord_notes_for_degree",
    "diatonic_chords",
]

logger = logging.getLogger(__name__)

MAJOR_TRIAD = "major"
MINOR_TRIAD = "minor"
DIMINISHED = "diminished"
AUGMENTED = "augmented"
DOMINANT7 = "dominant7"
MAJOR7 = "major7"
MINOR7 = "minor7"
DIMINISHED7 = "diminished7"
HALF_DIMINISHED7 = "half-diminished7"

# Semitone offsets above the root. Each member sits a third above the
# previous one which lets :func:`chord_notes` derive the letter names.
CHORD_INTERVALS: Dict[str, Tuple[int, ...]] = {
    MAJOR_TRIAD: (0, 4, 7),
    MINOR_TRIAD: (0, 3, 7),
    DIMINISHED: (0, 3, 6),
    AUGMENTED: (0, 4, 8),
    DOMINANT7: (0, 4, 7, 10),
    MAJOR7: (0, 4, 7, 11),
    MINOR7: (0, 3, 7, 10),
    DIMINISHED7: (0, 3, 6, 9),
    HALF_DIMINISHED7: (0, 3, 6, 10),
}

# Chord-symbol style abbreviations accepted in place of the full names.
_QUALITY_ALIASES: Dict[str, str] = {
    "": MAJOR_TRIAD,
    "maj": MAJOR_TRIAD,
    "M": MAJOR_TRIAD,
    "m": MINOR_TRIAD,
    "min": MINOR_TRIAD,
    "dim": DIMINISHED,
    "°": DIMINISHED,
    "aug": AUGMENTED,
    "+": AUGMENTED,
    "7": DOMINANT7,
    "dom7": DOMINANT7,
    "maj7": MAJOR7,
    "M7": MAJOR7,
    "m7": MINOR7,
    "min7": MINOR7,
    "dim7": DIMINISHED7,
    "°7": DIMINISHED7,
    "m7b5": HALF_DIMINISHED7,
    "ø": HALF_DIMINISHED7,
    "ø7": HALF_DIMINISHED7,
}

# Triad quality on each scale degree per mode.
_DIATONIC_QUALITIES: Dict[str, Tuple[str, ...]] = {
    MAJOR: (
        MAJOR_TRIAD, MINOR_TRIAD, MINOR_TRIAD, MAJOR_TRIAD,
        MAJOR_TRIAD, MINOR_TRIAD, DIMINISHED,
    ),
    MINOR: (
        MINOR_TRIAD, DIMINISHED, MAJOR_TRIAD, MINOR_TRIAD,
        MINOR_TRIAD, MAJOR_TRIAD, MAJOR_TRIAD,
    ),
    HARMONIC_MINOR: (
        MINOR_TRIAD, DIMINISHED, AUGMENTED, MINOR_TRIAD,
        MAJOR_TRIAD, MAJOR_TRIAD, DIMINISHED,
    ),
    MELODIC_MINOR: (
        MINOR_TRIAD, MINOR_TRIAD, AUGMENTED, MAJOR_TRIAD,
        MAJOR_TRIAD, DIMINISHED, DIMINISHED,
    ),
}

_ROMAN_DEGREES: Dict[str, int] = {
    "i": 0,
    "ii": 1,
    "iii": 2,
    "iv": 3,
    "v": 4,
    "vi": 5,
    "vii": 6,
}
_ROMAN_NAMES = ("i", "ii", "iii", "iv", "v", "vi", "vii")

_ACCIDENTAL_OFFSETS = {"b": -1, "#": 1}

_NUMERAL_PATTERN = re.compile(r"^([b#]*)([ivIV]+)(.*)$")

# Suffixes understood by chord_quality. Numerals with any other suffix are
# rejected.
_SUFFIX_PATTERN = re.compile(r"^(?:(?:°|o|dim|ø|\+|aug|Δ)7?|(?:maj|M|min|m|-)7|7)?$")


class DiatonicChord(NamedTuple):
    """One row of :func:`diatonic_chords`."""

    numeral: str
    root: str
    quality: str
    notes: List[str]


def _normalise_numeral(numeral: str) -> str:
    """Replace unicode accidentals and trim surrounding whitespace."""

    return numeral.replace("♭", "b").replace("♯", "#").strip()


def _parse_numeral(numeral: str) -> Optional[Tuple[str, str, str]]:
    """Return ``(accidentals, base, suffix)`` or ``None`` if not a numeral.

    The base must be one of I-VII in a single case; ``"Ii"`` is rejected, as
    is any suffix :func:`chord_quality` does not understand (``"Vxyz"``).
    """

    if not isinstance(numeral, str):
        return None
    match = _NUMERAL_PATTERN.match(_normalise_numeral(numeral))
    if not match:
        return None
    accidentals, base, suffix = match.groups()
    if base.lower() not in _ROMAN_DEGREES:
        return None
    if not _SUFFIX_PATTERN.match(suffix):
        return None
    if not (base.isupper() or base.islower()):
        return None
    return accidentals, base, suffix


def chord_notes(root: str, quality: str = MAJOR_TRIAD) -> List[str]:
    """Return the notes of the chord on ``root`` with ``quality``.

    Parameters
    ----------
    root:
        Root note name, case-insensitive.
    quality:
        One of :data:`CHORD_INTERVALS` or a common abbreviation such as
        ``"m7"`` or ``"dim"``. Unknown qualities fall back to a major
        triad and log a warning.

    Returns
    -------
    list[str]
        Chord members from the root upward.

    Raises
    ------
    InvalidNote
        If ``root`` is not a note name.

    Examples
    --------
    >>> chord_notes("C")
    ['C', 'E', 'G']
    >>> chord_notes("B", "diminished7")
    ['B', 'D', 'F', 'Ab']
    """

    root = normalize_note_name(root)
    if quality in CHORD_INTERVALS:
        intervals = CHORD_INTERVALS[quality]
    elif quality in _QUALITY_ALIASES:
        intervals = CHORD_INTERVALS[_QUALITY_ALIASES[quality]]
    else:
        logger.warning("Unsupported chord quality %r; using a major triad", quality)
        intervals = CHORD_INTERVALS[MAJOR_TRIAD]

    letter_index = LETTERS.index(root[0])
    base = note_to_semitone(root)
    notes = [root]
    for member, offset in enumerate(intervals[1:], start=1):
        letter = LETTERS[(letter_index + 2 * member) % 7]
        notes.append(spell_note(letter, base + offset))
    return notes


def _leading_tone_mode(base: str, suffix: str, mode: str) -> str:
    """Return the mode a degree is read in, raising ``vii`` in natural minor.

    A lower-case or diminished ``vii`` in natural minor names the chord on
    the raised leading tone, so it is read in the harmonic minor.
    """

    canonical = normalize_mode(mode) or MAJOR
    if canonical != MINOR or _ROMAN_DEGREES[base.lower()] != 6:
        return canonical
    if base.islower() or re.search(r"°|ø|dim|^o", suffix):
        return HARMONIC_MINOR
    return canonical


def chord_quality(numeral: str, mode: str = MAJOR) -> str:
    """Return the chord quality implied by ``numeral`` within ``mode``.

    Suffixes take priority: ``°`` (or ``o``/``dim``) gives a diminished
    triad or, with ``7``, a diminished seventh; ``ø`` a half-diminished
    seventh; ``+`` (or ``aug``) an augmented triad; ``maj7`` a major
    seventh. A bare ``7`` gives a minor seventh on a lower-case numeral and
    a dominant seventh on an upper-case one. Without a suffix the case of
    the numeral decides between major and minor, with lower-case numerals
    on a diatonically diminished degree resolving to diminished. In natural
    minor a lower-case ``vii`` is the diminished triad on the raised leading
    tone.

    Unparseable numerals yield ``"major"``.
    """

    if isinstance(numeral, str) and "/" in numeral:
        numeral = numeral.split("/", 1)[0]
    parsed = _parse_numeral(numeral)
    if parsed is None:
        logger.debug("Cannot determine quality of %r; assuming major", numeral)
        return MAJOR_TRIAD
    _, base, suffix = parsed
    upper = base.isupper()

    if "ø" in suffix:
        return HALF_DIMINISHED7
    if "°" in suffix or "dim" in suffix or suffix.startswith("o"):
        return DIMINISHED7 if "7" in suffix else DIMINISHED
    if "+" in suffix or "aug" in suffix:
        return AUGMENTED
    if re.search(r"(maj|M)7", suffix) or "Δ" in suffix:
        return MAJOR7
    if re.search(r"(min|m|-)7", suffix):
        return MINOR7
    if "7" in suffix:
        return DOMINANT7 if upper else MINOR7
    if upper:
        return MAJOR_TRIAD

    qualities = _DIATONIC_QUALITIES.get(
        _leading_tone_mode(base, suffix, mode), _DIATONIC_QUALITIES[MAJOR]
    )
    if qualities[_ROMAN_DEGREES[base.lower()]] == DIMINISHED:
        return DIMINISHED
    return MINOR_TRIAD


def _resolve_root(numeral: str, key: str, mode: str) -> Optional[str]:
    """Return the root for ``numeral`` in ``key`` or ``None`` if unresolved."""

    if not numeral or not key or not isinstance(numeral, str):
        return None
    token = _normalise_numeral(numeral)

    if "/" in token:
        # Secondary function: resolve the part before the slash inside the
        # key built on the target degree. Minor targets borrow the harmonic
        # minor so ``vii°/ii`` finds the raised leading tone.
        base, target = token.split("/", 1)
        target_root = _resolve_root(target, key, mode)
        if target_root is None:
            return None
        if chord_quality(target, mode) in (MAJOR_TRIAD, AUGMENTED, DOMINANT7, MAJOR7):
            target_mode = MAJOR
        else:
            target_mode = HARMONIC_MINOR
        return _resolve_root(base, target_root, target_mode)

    parsed = _parse_numeral(token)
    if parsed is None:
        return None
    accidentals, base, suffix = parsed
    degree = _ROMAN_DEGREES[base.lower()]

    scale = scale_notes(key, _leading_tone_mode(base, suffix, mode))
    if not scale:
        return None
    if not accidentals:
        return scale[degree]

    # Accidentals are read against the parallel major, so ``bVI`` is the
    # same chord in C major and C minor.
    natural = scale_notes(scale[0], MAJOR)[degree]
    offset = sum(_ACCIDENTAL_OFFSETS[ch] for ch in accidentals)
    return spell_note(natural[0], note_to_semitone(natural) + offset)


def roman_to_chord_root(numeral: str, key: str, mode: str = MAJOR) -> str:
    """Return the root note of ``numeral`` in ``key``.

    Parameters
    ----------
    numeral:
        Roman numeral such as ``"ii"``, ``"V7"``, ``"bVII"`` or ``"V/V"``.
    key:
        Tonic of the key, case-insensitive.
    mode:
        Mode of the key. The degree indexes :func:`scale_notes` for this
        mode, so ``vii°`` in A harmonic minor is ``G#``.

    Returns
    -------
    str
        The chord root. Unknown numerals and keys are returned unchanged.

    Examples
    --------
    >>> roman_to_chord_root("V", "G")
    'D'
    >>> roman_to_chord_root("bVII", "C")
    'Bb'
    >>> roman_to_chord_root("V/V", "C")
    'D'
    >>> roman_to_chord_root("XIV", "C")
    'XIV'
    """

    root = _resolve_root(numeral, key, mode)
    if root is None:
        logger.debug("Unresolved degree %r in %r %r; passing through", numeral, key, mode)
        return numeral
    return root


def chord_notes_for_degree(numeral: str, key: str, mode: str = MAJOR) -> List[str]:
    """Return the notes of the chord ``numeral`` in ``key``.

    Returns an empty list when the numeral or key cannot be resolved.

    >>> chord_notes_for_degree("ii", "C")
    ['D', 'F', 'A']
    >>> chord_notes_for_degree("V", "A", "minor")
    ['E', 'G#', 'B']
    """

    root = _resolve_root(numeral, key, mode)
    if root is None:
        logger.debug("No chord for degree %r in %r %r", numeral, key, mode)
        return []
    return chord_notes(root, chord_quality(numeral, mode))


def diatonic_chords(key: str, mode: str = MAJOR) -> List[DiatonicChord]:
    """Return the seven diatonic triads of ``key`` in ``mode``.

    Numerals follow the usual labelling: ``I ii iii IV V vi vii°`` in
    major and ``i ii° III iv v VI VII`` in natural minor.
    """

    scale = scale_notes(key, mode)
    if not scale:
        return []
    qualities = _DIATONIC_QUALITIES[normalize_mode(mode)]
    rows: List[DiatonicChord] = []
    for degree, (root, quality) in enumerate(zip(scale, qualities)):
        name = _ROMAN_NAMES[degree]
        if quality in (MAJOR_TRIAD, AUGMENTED):
            name = name.upper()
        if quality == DIMINISHED:
            name += "°"
        elif quality == AUGMENTED:
            name += "+"
        rows.append(DiatonicChord(name, root, quality, chord_notes(root, quality)))
    return rows
