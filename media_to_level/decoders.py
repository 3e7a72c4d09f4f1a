"""Decoders turning raw MIDI and image bytes into domain models.

These are thin adapters over mido, pretty_midi and OpenCV. Any failure of
the underlying library is reported as ``DecodeFailure`` so that callers
never see library-specific exceptions.
"""

import io
import logging
from pathlib import Path

import cv2
import mido
import numpy as np
import pretty_midi

from media_to_level.errors import DecodeFailure
from media_to_level.models import NoteEvent, Performance, Raster, Track

logger = logging.getLogger(__name__)

DEFAULT_BPM = 120.0


def first_declared_bpm(midi_file: mido.MidiFile) -> float | None:
    """Return the tempo of the earliest set_tempo message, if any.

    Args:
        midi_file: Parsed MIDI file.

    Returns:
        Tempo in beats per minute, or None if no tempo is declared.
    """
    first: tuple[int, int] | None = None
    for track in midi_file.tracks:
        tick = 0
        for message in track:
            tick += message.time
            if message.type == "set_tempo":
                if first is None or tick < first[0]:
                    first = (tick, message.tempo)
                break
    if first is None:
        return None
    return mido.tempo2bpm(first[1])


def track_label(instrument: pretty_midi.Instrument) -> str:
    """Human-readable label for a decoded instrument track."""
    if instrument.name and instrument.name.strip():
        return instrument.name.strip()
    if instrument.is_drum:
        return "Drums"
    return pretty_midi.program_to_instrument_name(instrument.program)


def decode_midi(
    data: bytes, name: str | None = None, default_bpm: float = DEFAULT_BPM
) -> Performance:
    """Decode Standard MIDI File bytes into a performance.

    Args:
        data: Raw MIDI file content.
        name: Source file name; its stem becomes the performance name.
        default_bpm: Tempo used when the file declares none.

    Returns:
        Performance with one track per decoded instrument.

    Raises:
        DecodeFailure: If the data is not a readable MIDI file.
    """
    try:
        midi_file = mido.MidiFile(file=io.BytesIO(data))
        pm = pretty_midi.PrettyMIDI(io.BytesIO(data))
    except Exception as e:
        logger.error(f"Failed to parse MIDI: {e}")
        raise DecodeFailure("Failed to parse MIDI file.") from e

    bpm = first_declared_bpm(midi_file)
    if bpm is None:
        logger.warning(f"No tempo declared, defaulting to {default_bpm} BPM")

    tracks = [
        Track(
            label=track_label(instrument),
            notes=[
                NoteEvent(
                    pitch_name=pretty_midi.note_number_to_name(note.pitch),
                    pitch=note.pitch,
                    onset=max(float(note.start), 0.0),
                    duration=max(float(note.end - note.start), 0.0),
                )
                for note in instrument.notes
            ],
        )
        for instrument in pm.instruments
    ]

    return Performance(
        name=Path(name).stem if name else "",
        bpm=bpm if bpm is not None else default_bpm,
        tempo_declared=bpm is not None,
        duration=max(float(pm.get_end_time()), 0.0),
        tracks=tracks,
    )


def raster_from_array(image: np.ndarray) -> Raster:
    """Build a raster from a grayscale, RGB or RGBA array.

    Missing alpha is treated as fully opaque.

    Args:
        image: Array of shape (H, W), (H, W, 3) or (H, W, 4).

    Returns:
        Raster owning an RGBA copy of the pixels.

    Raises:
        DecodeFailure: If the array has an unsupported shape.
    """
    if image is None or image.size == 0:
        raise DecodeFailure("Image contains no pixels.")

    image = np.asarray(image)
    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.ndim == 3 and image.shape[2] == 3:
        rgba = cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)
    elif image.ndim == 3 and image.shape[2] == 4:
        rgba = image.copy()
    else:
        raise DecodeFailure(f"Unsupported image shape {image.shape}.")

    return Raster(pixels=rgba)


def decode_image(data: bytes) -> Raster:
    """Decode encoded image bytes (PNG, JPEG, ...) into an RGBA raster.

    Args:
        data: Raw image file content.

    Returns:
        Raster with RGBA samples.

    Raises:
        DecodeFailure: If OpenCV cannot decode the data.
    """
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED) if buffer.size else None
    if image is None:
        logger.error("Failed to decode image data")
        raise DecodeFailure("Failed to decode image.")

    # OpenCV decodes to BGR(A); 16-bit sources are reduced to 8 bits
    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    if image.ndim == 3 and image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    elif image.ndim == 3 and image.shape[2] == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    return raster_from_array(image)


def decode_rgba(width: int, height: int, data: bytes) -> Raster:
    """Wrap a flat row-major RGBA buffer in a raster.

    Raises:
        DecodeFailure: If the buffer length does not match the dimensions.
    """
    try:
        return Raster.from_rgba_bytes(width, height, data)
    except ValueError as e:
        raise DecodeFailure(str(e)) from e


def load_midi_file(path: str | Path, default_bpm: float = DEFAULT_BPM) -> Performance:
    """Read and decode a MIDI file from disk."""
    path = Path(path)
    return decode_midi(path.read_bytes(), name=path.name, default_bpm=default_bpm)


def load_image_file(path: str | Path) -> Raster:
    """Read and decode an image file from disk."""
    return decode_image(Path(path).read_bytes())
