"""Models for representing conversion results.

Each converter returns a result model holding the assembled level together
with the intermediate data the front end shows to the user, so that a
single call yields everything needed for display and download.
"""

from pydantic import BaseModel, Field

from media_to_level.models.core_models import MelodyNote
from media_to_level.models.level_models import LevelDocument


class MusicResult(BaseModel):
    """Result of converting a performance into a level.

    Attributes:
        document: The assembled level, or None if nothing was produced.
        track_index: Index of the converted track.
        track_label: Display label of the converted track.
        bpm: Tempo used for timing calculations.
        melody: Monophonic melody the blocks were derived from.
        warnings: Advisory messages for the user.
    """

    document: LevelDocument | None = Field(None, description="Assembled level")
    track_index: int = Field(0, ge=0, description="Index of the converted track")
    track_label: str = Field("", description="Label of the converted track")
    bpm: float = Field(120.0, gt=0.0, description="Tempo used for timing")
    melody: list[MelodyNote] = Field(
        default_factory=list, description="Reduced melody"
    )
    warnings: list[str] = Field(default_factory=list, description="Advisory messages")

    @property
    def block_count(self) -> int:
        return len(self.melody)


class ImageResult(BaseModel):
    """Result of converting a raster into a level.

    Attributes:
        document: The assembled level, or None if nothing was produced.
        grid_width: Width of the sampled grid after resampling.
        grid_height: Height of the sampled grid after resampling.
        projected_count: Upper bound on the block count estimated before the scan.
        block_count: Number of color blocks actually emitted.
        warnings: Advisory messages for the user.
    """

    document: LevelDocument | None = Field(None, description="Assembled level")
    grid_width: int = Field(0, ge=0, description="Sampled grid width")
    grid_height: int = Field(0, ge=0, description="Sampled grid height")
    projected_count: int = Field(0, ge=0, description="Projected block count")
    block_count: int = Field(0, ge=0, description="Emitted block count")
    warnings: list[str] = Field(default_factory=list, description="Advisory messages")
