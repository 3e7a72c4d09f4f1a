"""Level document models.

The level document is the single output of a conversion run. Its defaults
are the values the game engine ships with and must be reproduced exactly
unless a caller overrides them.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from media_to_level.models.placement_models import PlacementObject


class MidiConfig(BaseModel):
    """Background music settings of a level."""

    restart_on_death: bool = Field(False, alias="restartOnDeath")
    volume: int = Field(100, ge=0, le=100)

    class Config:
        populate_by_name = True


class Layers(BaseModel):
    """Editor layer metadata."""

    current_layer: int = Field(1, ge=1, alias="currentLayer")
    max_layers: int = Field(3, ge=1, alias="maxLayers")

    class Config:
        populate_by_name = True


class CompletionRequirement(BaseModel):
    """Rule that completes the level."""

    type: Literal["crossFinishLine"] = "crossFinishLine"


class LevelMetadata(BaseModel):
    """Per-run descriptive fields supplied by the converter.

    Attributes:
        name: Level name shown by the engine.
        description: Free-form description.
        y_track: Whether the camera follows the player vertically.
    """

    name: str = Field("My Custom Level", description="Level name")
    description: str = Field("", description="Level description")
    y_track: bool = Field(True, description="Vertical camera tracking")


class LevelDocument(BaseModel):
    """A complete level description consumed by the game engine.

    Attributes:
        name: Level name.
        description: Level description.
        version: Engine format version tag.
        scroll_speed: Horizontal scroll speed.
        gravity: Global gravity.
        antigravity: Inverted gravity toggle.
        y_track: Vertical camera tracking toggle.
        gradient_top_color: Background gradient top color.
        gradient_bottom_color: Background gradient bottom color.
        disable_background_music: Background music toggle.
        midi_config: Background music settings.
        bird_start_x: Player start x.
        bird_start_y: Player start y.
        pipes: Unused pipe collection.
        bullets: Unused projectile collection.
        bullet_triggers: Unused projectile trigger collection.
        layers: Editor layer metadata.
        objects: Placement objects in emission order.
        finish_x: Finish line x position.
        completion_requirement: Completion rule.
        propel_flap: Optional flap propulsion toggle.
        propel_flap_force_x: Optional horizontal flap force.
        propel_flap_force_y: Optional vertical flap force.
        floor: Optional floor toggle.
    """

    name: str = "My Custom Level"
    description: str = ""
    version: float = 1.702
    scroll_speed: float = Field(2.4, alias="scrollSpeed")
    gravity: float = 0.4
    antigravity: bool = False
    y_track: bool = Field(True, alias="yTrack")
    gradient_top_color: str = Field("#009dff", alias="gradientTopColor")
    gradient_bottom_color: str = Field("#c2ccff", alias="gradientBottomColor")
    disable_background_music: bool = Field(False, alias="disableBackgroundMusic")
    midi_config: MidiConfig = Field(default_factory=MidiConfig, alias="midiConfig")
    bird_start_x: int = Field(100, alias="birdStartX")
    bird_start_y: int = Field(300, alias="birdStartY")
    pipes: list[dict[str, Any]] = Field(default_factory=list)
    bullets: list[dict[str, Any]] = Field(default_factory=list)
    bullet_triggers: list[dict[str, Any]] = Field(
        default_factory=list, alias="bulletTriggers"
    )
    layers: Layers = Field(default_factory=Layers)
    objects: list[PlacementObject] = Field(
        default_factory=list, alias="genericObjects"
    )
    finish_x: int = Field(0, alias="finishLineX")
    completion_requirement: CompletionRequirement = Field(
        default_factory=CompletionRequirement, alias="completionRequirement"
    )
    propel_flap: bool | None = Field(None, alias="propelFlap")
    propel_flap_force_x: int | None = Field(None, alias="propelFlapForceX")
    propel_flap_force_y: int | None = Field(None, alias="propelFlapForceY")
    floor: bool | None = None

    class Config:
        populate_by_name = True
        extra = "forbid"
