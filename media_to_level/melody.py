"""Melody reduction and timing-to-physics conversion.

This module turns one track of a decoded performance into a row of music
blocks. Simultaneous notes are collapsed to a single monophonic line that
keeps the top voice, then the gap between consecutive onsets sets both the
horizontal spacing and the bounce factor of each block: short gaps place
blocks close together with small bounces, long gaps spread them out.
"""

import logging

from media_to_level.errors import EmptyTrack, InvalidConfiguration, NoActiveTrack
from media_to_level.models import (
    MelodyNote,
    MusicBlock,
    MusicParams,
    NoteEvent,
    Performance,
    Track,
    round_position,
)

logger = logging.getLogger(__name__)


def select_track(
    performance: Performance | None, track_index: int | None = None
) -> tuple[int, Track]:
    """Pick the track to convert.

    Args:
        performance: Decoded performance, or None if nothing is loaded.
        track_index: Explicit track index, or None to take the track with the
                     most notes (first one wins on ties).

    Returns:
        Tuple of (track_index, track).

    Raises:
        NoActiveTrack: If no performance is loaded or it has no tracks.
        InvalidConfiguration: If an explicit index is out of range.
    """
    if performance is None or not performance.tracks:
        raise NoActiveTrack("Load a MIDI file before generating a level.")

    if track_index is not None:
        if not 0 <= track_index < len(performance.tracks):
            raise InvalidConfiguration(
                f"Track {track_index} does not exist "
                f"(performance has {len(performance.tracks)} tracks)."
            )
        return track_index, performance.tracks[track_index]

    best_index = 0
    max_notes = 0
    for index, track in enumerate(performance.tracks):
        if len(track.notes) > max_notes:
            max_notes = len(track.notes)
            best_index = index

    return best_index, performance.tracks[best_index]


def onset_bucket(onset: float, tolerance: float) -> int:
    """Return the bucket key of an onset rounded to the tolerance granularity."""
    return int(round(onset / tolerance))


def reduce_melody(
    track: Track, tolerance: float = 0.001, track_index: int | None = None
) -> list[MelodyNote]:
    """Collapse a track into a monophonic, time-ordered melody.

    Notes whose onsets fall into the same tolerance bucket are treated as one
    chord and only the highest pitch is kept; on equal pitches the note met
    first in onset order wins.

    Args:
        track: Track to reduce.
        tolerance: Onset coincidence tolerance in seconds.
        track_index: Index of the track, used only for error messages.

    Returns:
        One MelodyNote per distinct onset bucket, sorted by onset.

    Raises:
        EmptyTrack: If the track has no notes.
    """
    if not track.notes:
        raise EmptyTrack(track_index, track.label)

    ordered = sorted(track.notes, key=lambda n: n.onset)

    buckets: dict[int, NoteEvent] = {}
    for note in ordered:
        key = onset_bucket(note.onset, tolerance)
        best = buckets.get(key)
        if best is None or note.pitch > best.pitch:
            buckets[key] = note

    melody = [MelodyNote.from_event(buckets[key]) for key in sorted(buckets)]

    logger.debug(
        f"Reduced {len(track.notes)} notes to {len(melody)} melody notes "
        f"(tolerance {tolerance}s)"
    )
    return melody


def seconds_per_quarter(bpm: float) -> float:
    """Length of one quarter note in seconds at the given tempo."""
    return 60.0 / bpm


def gap_ratios(melody: list[MelodyNote], bpm: float) -> list[float]:
    """Express the gap after each melody note in quarter notes.

    The gap is the distance to the next onset; the final note uses its own
    duration.

    Args:
        melody: Time-ordered monophonic melody.
        bpm: Tempo in beats per minute.

    Returns:
        One ratio per melody note.
    """
    quarter = seconds_per_quarter(bpm)
    ratios: list[float] = []
    for i, note in enumerate(melody):
        if i + 1 < len(melody):
            duration_to_next = melody[i + 1].onset - note.onset
        else:
            duration_to_next = note.duration
        ratios.append(duration_to_next / quarter)
    return ratios


def build_music_blocks(
    melody: list[MelodyNote], bpm: float, params: MusicParams
) -> list[MusicBlock]:
    """Place one music block per melody note.

    The x cursor starts at ``params.start_x`` and advances by
    ``base_spacing * ratio`` after each block, so a block's own gap decides
    where the next one lands. Every block sits on the same row.

    Args:
        melody: Time-ordered monophonic melody.
        bpm: Tempo in beats per minute.
        params: Melody converter parameters.

    Returns:
        Music blocks in melody order.
    """
    blocks: list[MusicBlock] = []
    cursor_x = params.start_x

    for note, ratio in zip(melody, gap_ratios(melody, bpm)):
        blocks.append(
            MusicBlock(
                x=round_position(cursor_x),
                y=round_position(params.start_y),
                note_name=note.pitch_name,
                instrument=params.instrument,
                bounce_factor=round_position(params.base_bounce * ratio),
                scale=params.block_scale,
            )
        )
        cursor_x += params.base_spacing * ratio

    return blocks
