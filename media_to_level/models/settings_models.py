"""Parameter models for converter configuration.

This module defines Pydantic models that encapsulate every configurable
value of the two converters and the level assembler. Parameters are plain
values passed explicitly to each conversion call; changing a setting simply
means converting again with a new model.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class MusicParams(BaseModel):
    """Configuration parameters for the melody-to-level converter.

    The bounce and spacing bases describe exactly one quarter note at
    120 BPM; both scale linearly with the gap to the next note.

    Attributes:
        instrument: Instrument tag written on every music block (default "piano").
        track_index: Explicit track to convert, or None to pick the track with
                     the most notes.
        start_x: X position of the first block (default 191).
        start_y: Y position shared by every block (default 331).
        base_bounce: Bounce factor of a quarter-note gap (default 5.94).
        base_spacing: Horizontal spacing of a quarter-note gap (default 63.44).
        block_scale: Uniform block scale (default 0.5).
        default_bpm: Tempo used when the source declares none (default 120).
        time_tolerance: Onset coincidence tolerance in seconds (default 1 ms).
    """

    instrument: str = Field("piano", description="Instrument tag")
    track_index: int | None = Field(
        None, ge=0, description="Track to convert, None for most notes"
    )
    start_x: float = Field(191.0, allow_inf_nan=False, description="First block x")
    start_y: float = Field(331.0, allow_inf_nan=False, description="Block row y")
    base_bounce: float = Field(
        5.94, allow_inf_nan=False, description="Bounce factor of one quarter note"
    )
    base_spacing: float = Field(
        63.44, allow_inf_nan=False, description="Spacing of one quarter note"
    )
    block_scale: float = Field(0.5, allow_inf_nan=False, description="Block scale")
    default_bpm: float = Field(
        120.0, gt=0.0, allow_inf_nan=False, description="Fallback tempo"
    )
    time_tolerance: float = Field(
        0.001, gt=0.0, allow_inf_nan=False, description="Onset tolerance in seconds"
    )


class ImageParams(BaseModel):
    """Configuration parameters for the image-to-level converter.

    The block scale both sizes the blocks and sets the spacing between
    them: a scale of -0.1 places neighbouring pixels 4 units apart and the
    spacing grows linearly with the magnitude of the scale.

    Attributes:
        block_scale: Block scale parameter (default -0.1).
        resample_percent: Percentage to downsize the image to before sampling,
                          clamped into 1-100 (default 100).
        start_x: X position of the left pixel column (default 200).
        start_y: Y position of the top pixel row (default 300).
        center_vertically: Recompute start_y so the image is centered on anchor_y.
        anchor_y: Row the image is centered on when centering (default 300).
        lag_threshold: Projected block count above which a warning is raised.
    """

    block_scale: float = Field(-0.1, allow_inf_nan=False, description="Block scale")
    resample_percent: int = Field(100, description="Resample percentage (1-100)")
    start_x: float = Field(200.0, allow_inf_nan=False, description="Left column x")
    start_y: float = Field(300.0, allow_inf_nan=False, description="Top row y")
    center_vertically: bool = Field(False, description="Center on anchor_y")
    anchor_y: float = Field(300.0, allow_inf_nan=False, description="Centering row")
    lag_threshold: int = Field(2000, ge=1, description="Lag warning block count")

    @field_validator("resample_percent")
    @classmethod
    def _clamp_percent(cls, value: int) -> int:
        return min(max(value, 1), 100)


class LevelParams(BaseModel):
    """Configuration parameters for level assembly.

    Attributes:
        finish_mode: "content" places the finish line past the rightmost
                     object, "fixed" uses fixed_finish_x.
        finish_margin: Distance between the rightmost object and the finish line.
        fixed_finish_x: Finish line x used in "fixed" mode.
        marker_x: X position of the decorative marker.
        marker_y: Y position of the decorative marker.
        marker_scale: Scale factor of the decorative marker.
        document_overrides: Document field values replacing the defaults,
                            keyed by field name.
    """

    finish_mode: Literal["content", "fixed"] = Field(
        "content", description="Finish line placement policy"
    )
    finish_margin: float = Field(200.0, allow_inf_nan=False, description="Finish margin")
    fixed_finish_x: int = Field(1559, description="Fixed finish line x")
    marker_x: float = Field(114, description="Marker x")
    marker_y: float = Field(298, description="Marker y")
    marker_scale: float = Field(1, description="Marker scale factor")
    document_overrides: dict[str, Any] = Field(
        default_factory=dict, description="Document default overrides"
    )


class ConversionParameters(BaseModel):
    """Complete configuration for both converters.

    Attributes:
        music: Parameters for the melody converter.
        image: Parameters for the image converter.
        level: Parameters for level assembly.
    """

    music: MusicParams = Field(
        default_factory=MusicParams, description="Melody converter parameters"
    )
    image: ImageParams = Field(
        default_factory=ImageParams, description="Image converter parameters"
    )
    level: LevelParams = Field(
        default_factory=LevelParams, description="Level assembly parameters"
    )
