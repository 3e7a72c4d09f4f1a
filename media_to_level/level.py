"""Level document assembly and serialization.

Both converters hand their placement objects to ``assemble_level``, which
adds the decorative marker, places the finish line and fills in the fixed
document defaults. Assembly performs no I/O; ``serialize_level`` produces
the indented JSON text the game engine loads.
"""

import logging
import math
from collections.abc import Sequence

from pydantic import ValidationError

from media_to_level.errors import InvalidConfiguration, validation_summary
from media_to_level.models import (
    LevelDocument,
    LevelMetadata,
    LevelParams,
    PlacementObject,
    TinyMushroom,
)

logger = logging.getLogger(__name__)


def finish_line_x(objects: Sequence[PlacementObject], params: LevelParams) -> int:
    """Compute the finish line position.

    In "content" mode the line sits ``finish_margin`` past the rightmost
    object; in "fixed" mode it is ``fixed_finish_x`` regardless of content.

    Args:
        objects: Every object of the level, marker included.
        params: Level assembly parameters.

    Returns:
        Finish line x as an integer.
    """
    if params.finish_mode == "fixed" or not objects:
        return params.fixed_finish_x
    return math.ceil(max(obj.x for obj in objects) + params.finish_margin)


def assemble_level(
    objects: Sequence[PlacementObject],
    metadata: LevelMetadata | None = None,
    params: LevelParams | None = None,
) -> LevelDocument:
    """Wrap placement objects into a complete level document.

    Args:
        objects: Placement objects produced by a converter. The sequence is
                 copied, never modified.
        metadata: Name, description and camera tracking of the level.
        params: Finish line policy, marker and document overrides.

    Returns:
        A new LevelDocument.

    Raises:
        InvalidConfiguration: If a document override names an unknown field
            or carries a value of the wrong type.
    """
    metadata = metadata or LevelMetadata()
    params = params or LevelParams()

    level_objects: list[PlacementObject] = list(objects)
    level_objects.append(
        TinyMushroom(
            x=params.marker_x, y=params.marker_y, scale_factor=params.marker_scale
        )
    )

    fields = {
        "name": metadata.name,
        "description": metadata.description,
        "y_track": metadata.y_track,
        **params.document_overrides,
        "objects": level_objects,
        "finish_x": finish_line_x(level_objects, params),
    }
    try:
        document = LevelDocument(**fields)
    except ValidationError as e:
        raise InvalidConfiguration(
            f"Invalid document overrides: {validation_summary(e)}"
        ) from e

    logger.info(
        f"Assembled level {document.name!r} with {len(level_objects)} objects, "
        f"finish line at {document.finish_x}"
    )
    return document


def serialize_level(document: LevelDocument) -> str:
    """Serialize a level to 2-space indented JSON with engine field names.

    Optional fields left unset are omitted.
    """
    return document.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def parse_level(text: str) -> LevelDocument:
    """Parse level JSON produced by ``serialize_level``."""
    return LevelDocument.model_validate_json(text)
