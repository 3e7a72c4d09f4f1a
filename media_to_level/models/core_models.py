"""Core domain models for media-to-level conversion."""

from collections.abc import Iterator

import numpy as np
from pydantic import BaseModel, Field, field_validator


class NoteEvent(BaseModel):
    """A single decoded note with timing in seconds.

    Note events are produced by the MIDI decoder and never modified by the
    converters.

    Attributes:
        pitch_name: Scientific pitch name such as "C4" or "F#5".
        pitch: MIDI note number (0-127, where 60 is middle C).
        onset: Start time in seconds from the start of the performance.
        duration: Sounding length in seconds.
    """

    pitch_name: str = Field(..., description="Scientific pitch name")
    pitch: int = Field(..., ge=0, le=127, description="MIDI note number (0-127)")
    onset: float = Field(..., ge=0.0, description="Start time in seconds")
    duration: float = Field(..., ge=0.0, description="Duration in seconds")

    class Config:
        frozen = True


class MelodyNote(NoteEvent):
    """The note kept for one onset bucket after melody reduction."""

    @classmethod
    def from_event(cls, event: NoteEvent) -> "MelodyNote":
        return cls(**event.model_dump())


class Track(BaseModel):
    """An ordered sequence of note events with a display label.

    Attributes:
        label: Human-readable track name (instrument name or program name).
        notes: Note events in decoder order; order is not trusted downstream.
    """

    label: str = Field("", description="Display label for the track")
    notes: list[NoteEvent] = Field(
        default_factory=list, description="Decoded note events"
    )


class Performance(BaseModel):
    """A decoded multi-track musical performance.

    Attributes:
        name: Source name, usually the file stem.
        bpm: First declared tempo in beats per minute, or the default.
        tempo_declared: Whether the source declared a tempo at all.
        duration: Length of the performance in seconds.
        tracks: Decoded tracks in source order.
    """

    name: str = Field("", description="Source name")
    bpm: float = Field(120.0, gt=0.0, description="Tempo in beats per minute")
    tempo_declared: bool = Field(False, description="Whether a tempo was declared")
    duration: float = Field(0.0, ge=0.0, description="Length in seconds")
    tracks: list[Track] = Field(default_factory=list, description="Decoded tracks")


class PixelSample(BaseModel):
    """One RGBA sample of a raster at integer coordinates."""

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)
    alpha: int = Field(..., ge=0, le=255)

    @property
    def hex_color(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


class Raster(BaseModel):
    """A dense rectangular grid of RGBA samples.

    The pixel array is stored row-major with shape ``(height, width, 4)``
    and dtype ``uint8``.

    Attributes:
        pixels: RGBA pixel data.
    """

    pixels: np.ndarray = Field(..., description="RGBA pixels, shape (H, W, 4)")

    class Config:
        arbitrary_types_allowed = True

    @field_validator("pixels")
    @classmethod
    def _check_shape(cls, value: np.ndarray) -> np.ndarray:
        if value.ndim != 3 or value.shape[2] != 4:
            raise ValueError(f"expected an (H, W, 4) array, got {value.shape}")
        if value.shape[0] < 1 or value.shape[1] < 1:
            raise ValueError("raster must be at least 1x1")
        return value.astype(np.uint8, copy=False)

    @classmethod
    def from_rgba_bytes(cls, width: int, height: int, data: bytes) -> "Raster":
        """Build a raster from a flat row-major RGBA byte sequence.

        Args:
            width: Raster width in pixels.
            height: Raster height in pixels.
            data: ``width * height * 4`` bytes of RGBA samples.

        Returns:
            A Raster owning a copy of the samples.

        Raises:
            ValueError: If the byte count does not match the dimensions.
        """
        expected = width * height * 4
        if width < 1 or height < 1 or len(data) != expected:
            raise ValueError(
                f"RGBA buffer of {len(data)} bytes does not match {width}x{height}"
            )
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
        return cls(pixels=pixels.copy())

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def iter_samples(self) -> Iterator[PixelSample]:
        """Yield every sample in row-major order (y outer, x inner)."""
        for y in range(self.height):
            for x in range(self.width):
                r, g, b, a = (int(c) for c in self.pixels[y, x])
                yield PixelSample(x=x, y=y, r=r, g=g, b=b, alpha=a)
