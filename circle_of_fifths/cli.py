"""Command line interface for the circle-of-fifths engine.

The CLI prints the scale, key signature and neighbouring keys of a key and,
when a progression is requested, each chord with the voicing chosen by the
voice-leading optimizer. ``--output`` additionally writes the voiced
progression to a MIDI file.

Example
-------
Running ``python -m circle_of_fifths --key C --progression ii-V-I --loops 2 \
    --output out.mid`` prints six voiced chords and saves them to ``out.mid``.

Defaults for ``--octave`` and ``--bpm`` can be supplied through the
``CIRCLE_OF_FIFTHS_OCTAVE`` and ``CIRCLE_OF_FIFTHS_BPM`` environment
variables. Malformed values are ignored with a warning.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional, Sequence

from .keys import (
    MAJOR,
    MAJOR_KEYS,
    MINOR_KEYS,
    key_signature,
    normalize_mode,
    related_keys,
    scale_notes,
)
from .progressions import get_progression, get_progressions, parse_numerals, progression_chords
from .voice_leading import find_voice_assignment, voice_progression
from .voicing import DEFAULT_OCTAVE, Voice

__all__ = ["run_cli", "main", "build_parser"]

DEFAULT_BPM = 90
MIN_OCTAVE = 1
MAX_OCTAVE = 6

OCTAVE_ENV = "CIRCLE_OF_FIFTHS_OCTAVE"
BPM_ENV = "CIRCLE_OF_FIFTHS_BPM"


def _env_int(name: str, default: int) -> int:
    """Return the integer in environment variable ``name`` or ``default``."""

    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logging.warning("Ignoring %s=%r; expected an integer", name, raw)
        return default


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser with environment-derived defaults."""

    parser = argparse.ArgumentParser(
        prog="circle-of-fifths",
        description="Explore keys and voice chord progressions with smooth voice leading.",
    )
    parser.add_argument("--key", type=str, default="C", help="Tonic of the key (e.g., C, F#, Bb).")
    parser.add_argument(
        "--mode",
        type=str,
        default=MAJOR,
        help="major, minor, harmonic minor or melodic minor (default: major).",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--progression", type=str, help="Named progression such as ii-V-I.")
    group.add_argument("--numerals", type=str, help="Comma-separated Roman numerals (e.g., ii,V7,I).")
    parser.add_argument("--loops", type=int, default=1, help="How many times to repeat the progression.")
    parser.add_argument(
        "--octave",
        type=int,
        default=_env_int(OCTAVE_ENV, DEFAULT_OCTAVE),
        help=f"Target octave for voicings (default: {DEFAULT_OCTAVE}).",
    )
    parser.add_argument(
        "--bpm",
        type=int,
        default=_env_int(BPM_ENV, DEFAULT_BPM),
        help=f"Tempo of the MIDI output (default: {DEFAULT_BPM}).",
    )
    parser.add_argument("--beats-per-chord", type=int, default=4, help="Length of each chord in beats.")
    parser.add_argument("--output", type=str, help="Write the voiced progression to this MIDI file.")
    parser.add_argument("--list-keys", action="store_true", help="List all keys with signatures and exit.")
    parser.add_argument(
        "--list-progressions", action="store_true", help="List progressions for --mode and exit."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def _format_voicing(voicing: Sequence[Voice]) -> str:
    return " ".join(str(voice) for voice in voicing) or "-"


def _list_keys() -> None:
    for label, table in (("major", MAJOR_KEYS), ("minor", MINOR_KEYS)):
        for tonic, signature in table.items():
            print(f"{tonic} {label}: {signature.description}")


def _list_progressions(mode: str) -> None:
    for key, progression in get_progressions(mode).items():
        print(f"{key}: {progression.name} - {progression.description}")


def _print_key(key: str, mode: str) -> None:
    signature = key_signature(key, mode)
    related = related_keys(key, mode)
    print(f"Key: {signature.key} {signature.mode}")
    print(f"Scale: {' '.join(scale_notes(key, mode))}")
    print(f"Signature: {signature.description}")
    if related is not None:
        print(
            "Related: dominant {} {}, subdominant {} {}, relative {} {}".format(
                related.dominant.key,
                related.dominant.mode,
                related.subdominant.key,
                related.subdominant.mode,
                related.relative.key,
                related.relative.mode,
            )
        )


def run_cli(argv: Optional[List[str]] = None) -> None:
    """Parse ``argv`` (default ``sys.argv[1:]``) and print the results.

    Invalid input is logged with :func:`logging.error` and terminates the
    process with exit status ``1``.
    """

    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    mode = normalize_mode(args.mode)
    if mode is None:
        logging.error("Unknown mode: %s", args.mode)
        sys.exit(1)

    if args.list_keys:
        _list_keys()
        return
    if args.list_progressions:
        _list_progressions(mode)
        return

    if not scale_notes(args.key, mode):
        logging.error("Invalid key provided: %s", args.key)
        sys.exit(1)
    if args.loops < 1:
        logging.error("Loops must be a positive integer.")
        sys.exit(1)
    if not MIN_OCTAVE <= args.octave <= MAX_OCTAVE:
        logging.error(f"Octave must be between {MIN_OCTAVE} and {MAX_OCTAVE}.")
        sys.exit(1)
    if args.bpm <= 0:
        logging.error("BPM must be a positive integer.")
        sys.exit(1)
    if args.beats_per_chord <= 0:
        logging.error("Beats per chord must be a positive integer.")
        sys.exit(1)

    _print_key(args.key, mode)

    if args.progression:
        if get_progression(args.progression, mode) is None:
            logging.error("Unknown progression for %s: %s", mode, args.progression)
            sys.exit(1)
        chords = progression_chords(args.key, mode, args.progression)
    elif args.numerals:
        numerals = parse_numerals(args.numerals)
        if not numerals:
            logging.error("No numerals supplied.")
            sys.exit(1)
        chords = progression_chords(args.key, mode, numerals)
    else:
        if args.output:
            logging.error("--output requires --progression or --numerals.")
            sys.exit(1)
        return

    unresolved = [chord.numeral for chord in chords if not chord.notes]
    if unresolved:
        logging.error("Invalid numeral in progression: %s", ", ".join(unresolved))
        sys.exit(1)

    voicings = voice_progression(
        [chord.notes for chord in chords], target_octave=args.octave, loops=args.loops
    )
    previous: Optional[Sequence[Voice]] = None
    for index, voicing in enumerate(voicings):
        chord = chords[index % len(chords)]
        line = f"{chord.numeral:<6} {chord.root:<3} {chord.quality:<17} {_format_voicing(voicing)}"
        if previous is not None:
            assignment = find_voice_assignment(previous, voicing)
            line += f"  (movement {assignment.total_movement}, top {assignment.top_voice_movement})"
        print(line)
        previous = voicing

    if args.output:
        from .midi_io import create_progression_midi

        try:
            create_progression_midi(
                voicings,
                args.bpm,
                args.output,
                beats_per_chord=args.beats_per_chord,
            )
        except (OSError, ValueError) as exc:
            logging.error("Could not write MIDI file: %s", exc)
            sys.exit(1)


def main() -> None:
    """Console entry point: configure logging and run the CLI."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    run_cli()
