"""
Conversion pipelines for media-to-level generation.

This module wires the melody reducer and the raster mapper to the level
assembler. Each function is a pure function of its inputs: it owns nothing
between calls, and converting again with the same inputs yields an
identical document.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from media_to_level.errors import (
    InvalidConfiguration,
    NoActiveImage,
    validation_summary,
)
from media_to_level.level import assemble_level
from media_to_level.melody import build_music_blocks, reduce_melody, select_track
from media_to_level.models import (
    ImageParams,
    ImageResult,
    LevelMetadata,
    LevelParams,
    MusicParams,
    MusicResult,
    Performance,
    Raster,
)
from media_to_level.raster import (
    estimate_object_count,
    lag_warning,
    map_raster,
    scaled_size,
)

logger = logging.getLogger(__name__)

ParamsT = TypeVar("ParamsT", bound=BaseModel)

MUSIC_DESCRIPTION = "Generated from MIDI"

# Document fields the image converter has always written
IMAGE_DOCUMENT_OVERRIDES = {
    "propel_flap": False,
    "propel_flap_force_x": 8,
    "propel_flap_force_y": -8,
    "floor": False,
}


def build_params(model: type[ParamsT], **values: Any) -> ParamsT:
    """Validate raw configuration values into a parameter model.

    Args:
        model: Parameter model class (MusicParams, ImageParams, ...).
        **values: Raw values, typically straight from form fields.

    Returns:
        The validated parameter model.

    Raises:
        InvalidConfiguration: If any value is rejected.
    """
    try:
        return model(**values)
    except ValidationError as e:
        raise InvalidConfiguration(
            f"Invalid settings: {validation_summary(e)}"
        ) from e


def default_music_level_params() -> LevelParams:
    """Level parameters used by melody conversion when none are given."""
    return LevelParams(finish_mode="content")


def default_image_level_params() -> LevelParams:
    """Level parameters used by image conversion when none are given."""
    return LevelParams(
        finish_mode="fixed", document_overrides=dict(IMAGE_DOCUMENT_OVERRIDES)
    )


def convert_performance(
    performance: Performance | None,
    params: MusicParams,
    level_params: LevelParams | None = None,
) -> MusicResult:
    """Convert a decoded performance into a level.

    Args:
        performance: Decoded performance, or None if nothing is loaded.
        params: Melody converter parameters.
        level_params: Level assembly parameters; defaults place the finish
                      line past the last block.

    Returns:
        MusicResult with the assembled document and the reduced melody.

    Raises:
        NoActiveTrack: If no performance is loaded.
        InvalidConfiguration: If the selected track does not exist.
        EmptyTrack: If the selected track has no notes.
    """
    track_index, track = select_track(performance, params.track_index)
    melody = reduce_melody(track, params.time_tolerance, track_index=track_index)

    warnings: list[str] = []
    bpm = performance.bpm if performance.tempo_declared else params.default_bpm
    if not performance.tempo_declared:
        warnings.append(f"No tempo declared; using {bpm:g} BPM.")

    blocks = build_music_blocks(melody, bpm, params)
    metadata = LevelMetadata(
        name=performance.name or "My Custom Level",
        description=MUSIC_DESCRIPTION,
        y_track=True,
    )
    document = assemble_level(
        blocks, metadata, level_params or default_music_level_params()
    )

    return MusicResult(
        document=document,
        track_index=track_index,
        track_label=track.label,
        bpm=bpm,
        melody=melody,
        warnings=warnings,
    )


def check_image_size(raster: Raster, params: ImageParams) -> tuple[int, str | None]:
    """Estimate the block count of a raster before scanning it.

    Args:
        raster: Source raster.
        params: Image converter parameters.

    Returns:
        Tuple of (projected_count, warning) where warning is None when the
        count is within the lag threshold.
    """
    projected = estimate_object_count(
        raster.width, raster.height, params.resample_percent
    )
    warning = lag_warning(projected, params.lag_threshold)
    if warning:
        logger.warning(warning)
    return projected, warning


def convert_raster(
    raster: Raster | None,
    params: ImageParams,
    level_params: LevelParams | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> ImageResult:
    """Convert a decoded raster into a level.

    A projected block count above the lag threshold only adds a warning to
    the result; generation always proceeds.

    Args:
        raster: Decoded raster, or None if nothing is loaded.
        params: Image converter parameters.
        level_params: Level assembly parameters; defaults use a fixed finish
                      line and the flap/floor fields of image levels.
        should_cancel: Optional callback checked between rows of the scan.

    Returns:
        ImageResult with the assembled document.

    Raises:
        NoActiveImage: If no raster is loaded.
        ConversionCancelled: If should_cancel fires during the scan.
    """
    if raster is None:
        raise NoActiveImage("Load an image before generating a level.")

    projected, warning = check_image_size(raster, params)
    blocks = map_raster(raster, params, should_cancel=should_cancel)
    metadata = LevelMetadata(name="My Custom Level", description="", y_track=False)
    document = assemble_level(
        blocks, metadata, level_params or default_image_level_params()
    )

    grid_w, grid_h = scaled_size(raster.width, raster.height, params.resample_percent)
    return ImageResult(
        document=document,
        grid_width=grid_w,
        grid_height=grid_h,
        projected_count=projected,
        block_count=len(blocks),
        warnings=[warning] if warning else [],
    )
