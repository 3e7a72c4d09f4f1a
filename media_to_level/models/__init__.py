"""Domain models for the media-to-level application.

This module provides a centralized location for all data models used by
the converters. It includes:

- Core domain models (NoteEvent, Track, Performance, Raster, ...)
- Placement objects written into levels (MusicBlock, ColorBlock, ...)
- The level document and its nested settings
- Conversion results and configuration parameters

All models are built using Pydantic for data validation and serialization,
ensuring type safety and clear interfaces between components.
"""

# Re-export core models
from media_to_level.models.core_models import (
    NoteEvent,
    MelodyNote,
    Track,
    Performance,
    PixelSample,
    Raster,
)

# Re-export placement models
from media_to_level.models.placement_models import (
    MusicBlock,
    ColorBlock,
    TinyMushroom,
    PlacementObject,
    round_position,
)

# Re-export level models
from media_to_level.models.level_models import (
    MidiConfig,
    Layers,
    CompletionRequirement,
    LevelMetadata,
    LevelDocument,
)

# Re-export pipeline models
from media_to_level.models.pipeline_models import MusicResult, ImageResult

# Re-export setting models
from media_to_level.models.settings_models import (
    MusicParams,
    ImageParams,
    LevelParams,
    ConversionParameters,
)
