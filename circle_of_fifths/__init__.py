"""Circle of fifths theory engine and voice-leading optimizer.

The package derives scales, key signatures, related keys and chord
spellings from a small set of constant tables, and chooses octave
placements for successive chords so that voices move as little as
possible.

Underlying Algorithm
--------------------
Every chord of a progression is voiced in three steps::

    notes = chord_notes_for_degree(numeral, key, mode)
    candidates = generate_candidates(notes, target_octave)   # inversions x octaves
    voicing = min(candidates, key=score_voicing(c, previous))

Scoring pairs the voices of the previous voicing with the candidate, common
tones first, and weighs total movement, top-voice movement, the largest leap
and range/spacing penalties.

Modules
-------
- :mod:`~circle_of_fifths.pitch` - note names, semitones and MIDI numbers.
- :mod:`~circle_of_fifths.keys` - scales, signatures and the circle itself.
- :mod:`~circle_of_fifths.chords` - chord spelling and Roman numerals.
- :mod:`~circle_of_fifths.voicing` - octave placement and candidate pools.
- :mod:`~circle_of_fifths.voice_leading` - assignment and scoring.
- :mod:`~circle_of_fifths.progressions` - named progressions.
- :mod:`~circle_of_fifths.midi_io` - MIDI export (requires ``mido``).
"""

__version__ = "0.1.0"

from .pitch import (
    InvalidNote,
    enharmonic,
    midi_to_note,
    note_frequency,
    note_pitch,
    note_to_midi,
    note_to_semitone,
    spell_note,
)
from .keys import (
    CIRCLE_OF_FIFTHS,
    HARMONIC_MINOR,
    MAJOR,
    MELODIC_MINOR,
    MINOR,
    MINOR_CIRCLE_OF_FIFTHS,
    KeyRef,
    KeySignature,
    RelatedKeys,
    circle_of_fifths_keys,
    circle_of_fifths_position,
    key_signature,
    normalize_mode,
    related_keys,
    scale_notes,
)
from .chords import (
    CHORD_INTERVALS,
    chord_notes,
    chord_notes_for_degree,
    chord_quality,
    diatonic_chords,
    roman_to_chord_root,
)
from .voicing import Voice, create_voicing, generate_candidates
from .voice_leading import (
    Movement,
    VoiceAssignment,
    find_voice_assignment,
    optimize_voicing,
    score_voicing,
    total_movement,
    voice_progression,
)
from .progressions import (
    CHORD_PROGRESSIONS,
    Progression,
    ProgressionChord,
    get_progression,
    get_progressions,
    progression_chords,
    voice_named_progression,
)

# The spelling of the public call surface used by interface code.
optimize = optimize_voicing

__all__ = [
    "__version__",
    "InvalidNote",
    "enharmonic",
    "midi_to_note",
    "note_frequency",
    "note_pitch",
    "note_to_midi",
    "note_to_semitone",
    "spell_note",
    "CIRCLE_OF_FIFTHS",
    "MINOR_CIRCLE_OF_FIFTHS",
    "MAJOR",
    "MINOR",
    "HARMONIC_MINOR",
    "MELODIC_MINOR",
    "KeyRef",
    "KeySignature",
    "RelatedKeys",
    "circle_of_fifths_keys",
    "circle_of_fifths_position",
    "key_signature",
    "normalize_mode",
    "related_keys",
    "scale_notes",
    "CHORD_INTERVALS",
    "chord_notes",
    "chord_notes_for_degree",
    "chord_quality",
    "diatonic_chords",
    "roman_to_chord_root",
    "Voice",
    "create_voicing",
    "generate_candidates",
    "Movement",
    "VoiceAssignment",
    "find_voice_assignment",
    "optimize",
    "optimize_voicing",
    "score_voicing",
    "total_movement",
    "voice_progression",
    "CHORD_PROGRESSIONS",
    "Progression",
    "ProgressionChord",
    "get_progression",
    "get_progressions",
    "progression_chords",
    "voice_named_progression",
]
