"""Write voiced progressions to Standard MIDI Files.

Each chord of the progression sounds for ``beats_per_chord`` beats. Voices
are written to separate channels so the stereo position computed by the
voicing generator survives as a pan controller (CC 10) per voice.

Modification summary
--------------------
* ``mido`` is imported inside :func:`create_progression_midi` so the theory
  modules load without the optional dependency.
* The destination directory is created automatically.
* Tempo, time signature and the voicing list are validated before any event
  is generated.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence, Tuple

from .voicing import Voice

if TYPE_CHECKING:
    from mido import MidiFile

__all__ = ["create_progression_midi", "voice_channels", "pan_to_controller"]

logger = logging.getLogger(__name__)

TICKS_PER_BEAT = 480

# Channel 10 (index 9) is reserved for percussion in General MIDI.
PERCUSSION_CHANNEL = 9
PAN_CONTROLLER = 10

_VALID_DENOMINATORS = {1, 2, 4, 8, 16}


def voice_channels(count: int) -> List[int]:
    """Return ``count`` channel numbers, skipping the percussion channel.

    Channels are reused cyclically once the fifteen melodic channels are
    exhausted.
    """

    melodic = [ch for ch in range(16) if ch != PERCUSSION_CHANNEL]
    return [melodic[i % len(melodic)] for i in range(count)]


def pan_to_controller(pan: float) -> int:
    """Map a pan position in ``[-0.5, 0.5]`` onto the MIDI range ``0-127``."""

    value = round((pan + 0.5) * 127)
    return max(0, min(127, value))


def create_progression_midi(
    voicings: Sequence[Sequence[Voice]],
    bpm: int,
    output_file: str,
    *,
    beats_per_chord: int = 4,
    time_signature: Tuple[int, int] = (4, 4),
    velocity: int = 64,
    program: int = 0,
) -> "MidiFile":
    """Write ``voicings`` to ``output_file`` and return the ``MidiFile``.

    Parameters
    ----------
    voicings:
        One voicing per chord, usually from
        :func:`~circle_of_fifths.voice_leading.voice_progression`.
    bpm:
        Tempo in beats per minute.
    output_file:
        Destination path. Missing parent directories are created.
    beats_per_chord:
        Duration of every chord in beats.
    time_signature:
        ``(numerator, denominator)`` written as a meta message.
    velocity:
        Note-on velocity for every voice.
    program:
        General MIDI program applied to every voice channel.

    Returns
    -------
    MidiFile
        In-memory representation of the written file.

    Raises
    ------
    ValueError
        For a non-positive tempo or chord length, an invalid time signature,
        an out-of-range velocity or program, or an empty ``voicings`` list.
    ImportError
        If ``mido`` is not installed.
    """
    try:
        import mido
        from mido import Message, MidiFile, MidiTrack
    except ModuleNotFoundError as exc:
        raise ImportError(
            "mido is required to create MIDI files; install it with 'pip install mido'"
        ) from exc

    if bpm <= 0:
        raise ValueError("bpm must be a positive integer")
    if beats_per_chord <= 0:
        raise ValueError("beats_per_chord must be a positive integer")
    if (time_signature[0] <= 0 or time_signature[1] <= 0 or
            time_signature[1] not in _VALID_DENOMINATORS):
        raise ValueError(
            "time_signature denominator must be one of 1, 2, 4, 8 or 16 and numerator must be > 0"
        )
    if not 0 <= velocity <= 127:
        raise ValueError("velocity must be between 0 and 127")
    if not 0 <= program <= 127:
        raise ValueError("program must be between 0 and 127")
    if not voicings or not any(voicings):
        raise ValueError("voicings must contain at least one voiced chord")

    mid = MidiFile(ticks_per_beat=TICKS_PER_BEAT)
    track = MidiTrack()
    mid.tracks.append(track)
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm)))
    track.append(
        mido.MetaMessage(
            "time_signature", numerator=time_signature[0], denominator=time_signature[1]
        )
    )

    # Beats are counted in the signature's own unit, as in a quarter note for 4/4.
    chord_ticks = int(beats_per_chord * TICKS_PER_BEAT * 4 / time_signature[1])
    width = max(len(v) for v in voicings)
    channels = voice_channels(width)
    for channel in sorted(set(channels)):
        track.append(Message("program_change", program=program, channel=channel, time=0))

    pending = 0
    for voicing in voicings:
        if not voicing:
            pending += chord_ticks
            continue
        for index, voice in enumerate(voicing):
            channel = channels[index]
            track.append(
                Message(
                    "control_change",
                    control=PAN_CONTROLLER,
                    value=pan_to_controller(voice.pan),
                    channel=channel,
                    time=pending if index == 0 else 0,
                )
            )
            track.append(
                Message("note_on", note=voice.midi, velocity=velocity, channel=channel, time=0)
            )
        pending = 0
        for index, voice in enumerate(voicing):
            track.append(
                Message(
                    "note_off",
                    note=voice.midi,
                    velocity=velocity,
                    channel=channels[index],
                    time=chord_ticks if index == 0 else 0,
                )
            )

    Path(output_file).expanduser().parent.mkdir(parents=True, exist_ok=True)
    mid.save(output_file)
    logger.info("MIDI file saved to %s", output_file)
    return mid
