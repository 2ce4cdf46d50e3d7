"""Check every named progression in every key for diatonic spelling and smoothness.

The script resolves each progression of :data:`CHORD_PROGRESSIONS` in every
key of the signature tables, voices it ``--loops`` times and reports chords
that leave the key or transitions that move more than ``--max-movement``
semitones in total. The exit status is ``1`` when any problem was found so
the script can run in CI.

Example
-------
::

    python scripts/validate_progressions.py --loops 3 --max-movement 10

Design Notes
------------
The minor cadence uses the harmonic minor scale for its ``V`` chord, so
minor-mode chords are accepted when their notes belong to either the natural
or the harmonic minor scale.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Set

from circle_of_fifths.keys import HARMONIC_MINOR, MAJOR, MAJOR_KEYS, MINOR, MINOR_KEYS, scale_notes
from circle_of_fifths.progressions import get_progressions, progression_chords
from circle_of_fifths.voice_leading import find_voice_assignment, voice_progression


def _allowed_notes(key: str, mode: str) -> Set[str]:
    notes = set(scale_notes(key, mode))
    if mode == MINOR:
        notes.update(scale_notes(key, HARMONIC_MINOR))
    return notes


def validate(loops: int = 3, max_movement: int = 10) -> List[str]:
    """Return a list of human readable problems (empty when all is well)."""

    problems: List[str] = []
    for mode, table in ((MAJOR, MAJOR_KEYS), (MINOR, MINOR_KEYS)):
        for key in table:
            allowed = _allowed_notes(key, mode)
            for name in get_progressions(mode):
                chords = progression_chords(key, mode, name)
                for chord in chords:
                    outside = [n for n in chord.notes if n not in allowed]
                    if not chord.notes or outside:
                        problems.append(
                            f"{key} {mode} {name}: {chord.numeral} -> {chord.notes} leaves the key"
                        )
                voicings = voice_progression([c.notes for c in chords], loops=loops)
                for step, (a, b) in enumerate(zip(voicings, voicings[1:]), start=1):
                    moved = find_voice_assignment(a, b).total_movement
                    if moved > max_movement:
                        problems.append(
                            f"{key} {mode} {name}: transition {step} moves {moved} semitones"
                        )
    return problems


def main() -> None:
    """Parse arguments, run :func:`validate` and exit non-zero on problems."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--loops", type=int, default=3, help="Repetitions per progression.")
    parser.add_argument(
        "--max-movement", type=int, default=10, help="Largest acceptable total movement."
    )
    args = parser.parse_args()

    problems = validate(args.loops, args.max_movement)
    for problem in problems:
        logging.error(problem)
    if problems:
        sys.exit(1)
    logging.info("All progressions are diatonic and smooth.")


if __name__ == "__main__":
    main()
