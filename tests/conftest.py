import io

import cv2
import matplotlib
import mido
import numpy as np
import pytest
from mido import Message, MetaMessage, MidiFile, MidiTrack

from media_to_level.models import NoteEvent, Performance, Raster, Track

matplotlib.use("Agg")


def write_midi_bytes(
    tracks: list[tuple[str, list[tuple[int, float, float]]]],
    tempo_bpm: float | None = 120,
    ticks_per_beat: int = 480,
) -> bytes:
    """Build a type-1 MIDI file.

    Each track is (name, [(note, start_beat, duration_beats), ...]); the
    tempo goes on a conductor track of its own.
    """
    midi_file = MidiFile(type=1, ticks_per_beat=ticks_per_beat)

    conductor = MidiTrack()
    midi_file.tracks.append(conductor)
    if tempo_bpm is not None:
        conductor.append(
            MetaMessage("set_tempo", tempo=mido.bpm2tempo(tempo_bpm), time=0)
        )

    for channel, (name, notes) in enumerate(tracks):
        track = MidiTrack()
        midi_file.tracks.append(track)
        track.append(MetaMessage("track_name", name=name, time=0))
        track.append(Message("program_change", program=0, channel=channel, time=0))

        timeline: list[tuple[int, int, int]] = []
        for note, start, duration in notes:
            on = int(round(start * ticks_per_beat))
            off = int(round((start + duration) * ticks_per_beat))
            timeline.append((on, 1, note))
            timeline.append((off, 0, note))
        # note_off before note_on on the same tick
        timeline.sort(key=lambda e: (e[0], e[1]))

        previous_tick = 0
        for tick, is_on, note in timeline:
            message_type = "note_on" if is_on else "note_off"
            track.append(
                Message(
                    message_type,
                    note=note,
                    velocity=64,
                    channel=channel,
                    time=tick - previous_tick,
                )
            )
            previous_tick = tick

    buffer = io.BytesIO()
    midi_file.save(file=buffer)
    return buffer.getvalue()


@pytest.fixture
def midi_bytes_factory():
    return write_midi_bytes


@pytest.fixture
def two_note_track():
    # Quarter note gap at 120 BPM, second note an eighth long
    return Track(
        label="Melody",
        notes=[
            NoteEvent(pitch_name="C4", pitch=60, onset=0.0, duration=0.5),
            NoteEvent(pitch_name="D4", pitch=62, onset=0.5, duration=0.25),
        ],
    )


@pytest.fixture
def chord_track():
    # C major triad, then a G/B dyad, then a single E5
    return Track(
        label="Piano",
        notes=[
            NoteEvent(pitch_name="E4", pitch=64, onset=0.0, duration=0.5),
            NoteEvent(pitch_name="C4", pitch=60, onset=0.0, duration=0.5),
            NoteEvent(pitch_name="G4", pitch=67, onset=0.0, duration=0.5),
            NoteEvent(pitch_name="B3", pitch=59, onset=0.5, duration=0.5),
            NoteEvent(pitch_name="G4", pitch=67, onset=0.5004, duration=0.5),
            NoteEvent(pitch_name="E5", pitch=76, onset=1.0, duration=1.0),
        ],
    )


@pytest.fixture
def performance(two_note_track, chord_track):
    return Performance(
        name="song",
        bpm=120.0,
        tempo_declared=True,
        duration=2.0,
        tracks=[two_note_track, chord_track, Track(label="Empty")],
    )


@pytest.fixture
def red_pixel_raster():
    return Raster(pixels=np.array([[[255, 0, 0, 255]]], dtype=np.uint8))


@pytest.fixture
def opaque_raster():
    # 10×10 fully opaque gradient
    pixels = np.zeros((10, 10, 4), dtype=np.uint8)
    pixels[..., 0] = np.arange(10, dtype=np.uint8)[None, :] * 20
    pixels[..., 1] = np.arange(10, dtype=np.uint8)[:, None] * 20
    pixels[..., 3] = 255
    return Raster(pixels=pixels)


@pytest.fixture
def checkerboard_raster():
    # 6×4 checkerboard: opaque white on transparent black
    pixels = np.zeros((4, 6, 4), dtype=np.uint8)
    for y in range(4):
        for x in range(6):
            if (x + y) % 2 == 0:
                pixels[y, x] = (255, 255, 255, 255)
    return Raster(pixels=pixels)


@pytest.fixture
def png_bytes():
    # 2×2 BGRA image: blue, green / red, transparent
    bgra = np.array(
        [
            [[255, 0, 0, 255], [0, 255, 0, 255]],
            [[0, 0, 255, 255], [0, 0, 0, 0]],
        ],
        dtype=np.uint8,
    )
    ok, encoded = cv2.imencode(".png", bgra)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def small_rgb_image():
    # 2×2 RGB: red, green / blue, white
    return np.array(
        [
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 255]],
        ],
        dtype=np.uint8,
    )
