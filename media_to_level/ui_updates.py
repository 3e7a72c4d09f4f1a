"""UI update functions for the Gradio interface.

This module sits between the Gradio components and the conversion
pipelines. Each function takes raw component values, runs one conversion
step and returns plain values for display. Conversion errors are caught
here: the user sees the message and the previous output is cleared, while
the rest of the session keeps working.
"""

import logging

from media_to_level.decoders import decode_midi, raster_from_array
from media_to_level.errors import ConversionError
from media_to_level.file_manager import LevelFileManager
from media_to_level.level import serialize_level
from media_to_level.melody import select_track
from media_to_level.models import ImageParams, MusicParams, Performance, Raster
from media_to_level.pipeline import (
    build_params,
    check_image_size,
    convert_performance,
    convert_raster,
)
from media_to_level.visualization import (
    create_level_preview,
    create_melody_roll_visualization,
)

logger = logging.getLogger(__name__)

# Active file managers by session ID
_file_managers: dict[str, LevelFileManager] = {}


def get_or_create_file_manager(session_id: str) -> LevelFileManager:
    """Return the file manager of a session, creating it on first use."""
    if session_id not in _file_managers:
        _file_managers[session_id] = LevelFileManager(session_id)
    return _file_managers[session_id]


def cleanup_session(session_id: str) -> None:
    """Remove a session's files and forget its file manager."""
    manager = _file_managers.pop(session_id, None)
    if manager is not None:
        manager.cleanup_all()


def cleanup_cache(session_id: str | None = None) -> None:
    """Clean up one session, or every session when session_id is None."""
    if session_id is not None:
        cleanup_session(session_id)
        return
    for sid in list(_file_managers):
        cleanup_session(sid)


def track_choices(performance: Performance | None) -> list[tuple[str, int]]:
    """Dropdown choices describing every track of a performance."""
    if performance is None:
        return []
    return [
        (f"Track {i} ({len(t.notes)} notes, {t.label or 'Unknown'})", i)
        for i, t in enumerate(performance.tracks)
    ]


def describe_performance(performance: Performance | None) -> str:
    """Markdown summary of a loaded performance."""
    if performance is None:
        return ""
    bpm = f"{performance.bpm:.0f}" if performance.tempo_declared else "120 (Default)"
    return (
        "### Midi Info\n"
        f"**Name:** {performance.name or 'Untitled'}  \n"
        f"**Duration:** {performance.duration:.2f}s  \n"
        f"**Tracks:** {len(performance.tracks)}  \n"
        f"**BPM:** {bpm}"
    )


def load_midi_source(
    file_path: str | None,
) -> tuple[Performance | None, str, list[tuple[str, int]], int | None, str]:
    """Decode an uploaded MIDI file and pick its default track.

    Args:
        file_path: Path of the uploaded file, or None when cleared.

    Returns:
        Tuple of (performance, info_markdown, track_choices, selected_track,
        error_message). On failure the performance is None and the error
        message is set.
    """
    if not file_path:
        return None, "", [], None, ""

    try:
        with open(file_path, "rb") as f:
            performance = decode_midi(f.read(), name=file_path)
    except (OSError, ConversionError) as e:
        logger.error(f"Failed to load MIDI {file_path}: {e}")
        return None, "", [], None, "Failed to parse MIDI file."

    selected = select_track(performance)[0] if performance.tracks else None

    return (
        performance,
        describe_performance(performance),
        track_choices(performance),
        selected,
        "",
    )


def update_midi_view(
    performance: Performance | None,
    session_id: str,
    instrument: str,
    track_index: int | None,
    start_x: float,
    start_y: float,
    base_bounce: float,
    base_spacing: float,
    block_scale: float,
) -> tuple:
    """Generate a level from the loaded performance.

    Args:
        performance: Loaded performance, or None.
        session_id: Session identifier for the download file.
        instrument: Instrument tag.
        track_index: Selected track, or None for the track with most notes.
        start_x: First block x.
        start_y: Block row y.
        base_bounce: Bounce factor of one quarter note.
        base_spacing: Spacing of one quarter note.
        block_scale: Uniform block scale.

    Returns:
        Tuple of (json_text, message, download_path, melody_roll_figure).
        On failure the JSON, download and figure are cleared.
    """
    try:
        params = build_params(
            MusicParams,
            instrument=instrument,
            track_index=track_index,
            start_x=start_x,
            start_y=start_y,
            base_bounce=base_bounce,
            base_spacing=base_spacing,
            block_scale=block_scale,
        )
        result = convert_performance(performance, params)
    except ConversionError as e:
        logger.error(f"MIDI conversion failed: {e}")
        get_or_create_file_manager(session_id).discard("midi")
        return "", f"**Error:** {e}", None, None

    text = serialize_level(result.document)
    download = get_or_create_file_manager(session_id).write_level(
        "midi", text, stem=result.document.name
    )
    message = "\n\n".join(
        [f"Generated {result.block_count} blocks from track {result.track_index}."]
        + result.warnings
    )
    figure = create_melody_roll_visualization(result.melody)
    return text, message, download, figure


def load_image_source(image) -> tuple[Raster | None, str]:
    """Wrap an uploaded image array as a raster.

    Args:
        image: RGB or RGBA NumPy array from the image component, or None.

    Returns:
        Tuple of (raster, error_message).
    """
    if image is None:
        return None, ""
    try:
        return raster_from_array(image), ""
    except ConversionError as e:
        logger.error(f"Failed to load image: {e}")
        return None, str(e)


def image_size_warning(
    raster: Raster | None, resample_percent: float, lag_threshold: int = 2000
) -> str:
    """Advisory text about the projected block count of a loaded image."""
    if raster is None:
        return ""
    try:
        params = build_params(
            ImageParams,
            resample_percent=resample_percent,
            lag_threshold=lag_threshold,
        )
    except ConversionError as e:
        return f"**Error:** {e}"
    _, warning = check_image_size(raster, params)
    return warning or ""


def update_image_view(
    raster: Raster | None,
    session_id: str,
    block_scale: float,
    resample_percent: float,
    start_x: float,
    start_y: float,
    center_vertically: bool,
) -> tuple:
    """Generate a level from the loaded image.

    Args:
        raster: Loaded raster, or None.
        session_id: Session identifier for the download file.
        block_scale: Block scale parameter.
        resample_percent: Resample percentage (1-100).
        start_x: Left column x.
        start_y: Top row y.
        center_vertically: Center the image around the anchor row.

    Returns:
        Tuple of (json_text, message, download_path, preview_image).
        On failure the JSON, download and preview are cleared.
    """
    try:
        params = build_params(
            ImageParams,
            block_scale=block_scale,
            resample_percent=resample_percent,
            start_x=start_x,
            start_y=start_y,
            center_vertically=center_vertically,
        )
        result = convert_raster(raster, params)
    except ConversionError as e:
        logger.error(f"Image conversion failed: {e}")
        get_or_create_file_manager(session_id).discard("image")
        return "", f"**Error:** {e}", None, None

    text = serialize_level(result.document)
    download = get_or_create_file_manager(session_id).write_level("image", text)
    message = "\n\n".join([f"Generated {result.block_count} blocks"] + result.warnings)
    preview = create_level_preview(result.document.objects)
    return text, message, download, preview
