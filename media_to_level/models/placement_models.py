"""Placement objects shared by both converters and the level assembler.

Field names are Pythonic; aliases carry the keys the game engine reads
(``musicalNote``, ``bF``, ``s`` and so on). Serialize with ``by_alias=True``.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class MusicBlock(BaseModel):
    """A block that plays a note and bounces the player onwards.

    Attributes:
        x: Horizontal document position, rounded to 2 decimals.
        y: Vertical document position.
        note_name: Pitch name played when the block is hit.
        instrument: Instrument tag understood by the engine.
        bounce_factor: Bounce impulse derived from the gap to the next note.
        scale: Uniform block scale.
    """

    type: Literal["musicBlock"] = "musicBlock"
    x: float
    y: float
    note_name: str = Field(..., alias="musicalNote")
    instrument: str = Field(..., alias="instrumentType")
    bounce_factor: float = Field(..., alias="bF")
    scale: float = Field(..., alias="s")

    class Config:
        populate_by_name = True


class ColorBlock(BaseModel):
    """A solid colored block sampled from one opaque pixel.

    Attributes:
        x: Horizontal document position, rounded to 2 decimals.
        y: Vertical document position, rounded to 2 decimals.
        color: Lowercase ``#rrggbb`` hex color.
        scale: Block scale parameter.
    """

    type: Literal["colorBlock"] = "colorBlock"
    x: float
    y: float
    color: str = Field(..., pattern=r"^#[0-9a-f]{6}$")
    scale: float = Field(..., alias="s")

    class Config:
        populate_by_name = True


class TinyMushroom(BaseModel):
    """Decorative marker appended to every level."""

    type: Literal["tinyMushroom"] = "tinyMushroom"
    x: float = 114
    y: float = 298
    scale_factor: float = Field(1, alias="sF")

    class Config:
        populate_by_name = True


PlacementObject = Annotated[
    Union[MusicBlock, ColorBlock, TinyMushroom], Field(discriminator="type")
]


def round_position(value: float, digits: int = 2) -> float:
    """Round a document value to ``digits`` decimals, halves away from zero.

    The exact binary value is rounded, so 0.125 becomes 0.13 while 1.005
    (stored as 1.00499...) becomes 1.0, the same digits the engine's own
    editor writes.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
