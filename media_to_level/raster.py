"""Raster-to-level mapping.

This module converts every opaque pixel of an image into a color block on
a regular lattice. Fully transparent pixels are skipped, which is what lets
arbitrary silhouettes come through. Large images can be downsized first to
keep the number of blocks manageable.

The scan holds no shared state: it reads the raster it is given and returns
a fresh list, so it can be handed to a worker thread as-is.
"""

import logging
import math
from collections.abc import Callable

import cv2
import numpy as np

from media_to_level.errors import ConversionCancelled
from media_to_level.models import ColorBlock, ImageParams, Raster, round_position

logger = logging.getLogger(__name__)

# Block scale that yields REFERENCE_SPACING between neighbouring pixels
REFERENCE_SCALE = -0.1
REFERENCE_SPACING = 4.0


def pixel_spacing(block_scale: float) -> float:
    """Distance in document units between neighbouring pixel blocks.

    Only the magnitude of the scale matters: -0.1 and 0.1 both give 4.0.
    """
    return abs(REFERENCE_SPACING * (block_scale / REFERENCE_SCALE))


def scaled_size(width: int, height: int, percent: int) -> tuple[int, int]:
    """Reduce image dimensions by a percentage, flooring and keeping at least 1."""
    if percent >= 100:
        return width, height
    scaled_w = max(1, math.floor(width * percent / 100))
    scaled_h = max(1, math.floor(height * percent / 100))
    return scaled_w, scaled_h


def resample_raster(raster: Raster, percent: int) -> Raster:
    """Downsize a raster to the given percentage of its size.

    Args:
        raster: Source raster.
        percent: Target size in percent (1-100). 100 returns the raster unchanged.

    Returns:
        The resampled raster.
    """
    width, height = scaled_size(raster.width, raster.height, percent)
    if (width, height) == (raster.width, raster.height):
        return raster

    # Average in premultiplied space so transparent pixels carry no color
    pixels = raster.pixels.astype(np.float32)
    alpha = pixels[..., 3:4]
    premultiplied = np.concatenate([pixels[..., :3] * (alpha / 255.0), alpha], axis=2)
    averaged = cv2.resize(premultiplied, (width, height), interpolation=cv2.INTER_AREA)

    new_alpha = averaged[..., 3:4]
    rgb = np.where(
        new_alpha > 0, averaged[..., :3] * 255.0 / np.maximum(new_alpha, 1e-6), 0.0
    )
    resized = np.clip(np.rint(np.concatenate([rgb, new_alpha], axis=2)), 0, 255)
    resized = resized.astype(np.uint8)
    logger.debug(
        f"Resampled raster {raster.width}x{raster.height} -> {width}x{height}"
    )
    return Raster(pixels=resized)


def estimate_object_count(width: int, height: int, percent: int = 100) -> int:
    """Upper bound on the number of color blocks a raster can produce."""
    scaled_w, scaled_h = scaled_size(width, height, percent)
    return scaled_w * scaled_h


def lag_warning(count: int, threshold: int) -> str | None:
    """Build an advisory message when a block count may slow the game down.

    Args:
        count: Projected block count.
        threshold: Count above which levels may lag.

    Returns:
        Warning text, or None if the count is within the threshold.
    """
    if count <= threshold:
        return None
    return (
        f"Warning: This image will generate approximately {count} blocks. "
        f"Levels with more than {threshold} blocks may cause lag."
    )


def centered_start_y(anchor_y: float, scaled_height: int, spacing: float) -> float:
    """Top row position that centers the rasterized image on ``anchor_y``."""
    return math.floor(anchor_y - (scaled_height * spacing) / 2)


def map_raster(
    raster: Raster,
    params: ImageParams,
    should_cancel: Callable[[], bool] | None = None,
) -> list[ColorBlock]:
    """Convert each opaque pixel of a raster into a color block.

    Pixels are visited row by row from the top-left corner. The raster is
    resampled first when ``params.resample_percent`` is below 100.

    Args:
        raster: Source raster.
        params: Image converter parameters.
        should_cancel: Optional callback checked before each row; when it
                       returns True the scan stops.

    Returns:
        Color blocks in row-major order.

    Raises:
        ConversionCancelled: If should_cancel fires during the scan.
    """
    grid = resample_raster(raster, params.resample_percent)
    spacing = pixel_spacing(params.block_scale)

    start_y = params.start_y
    if params.center_vertically:
        start_y = centered_start_y(params.anchor_y, grid.height, spacing)

    pixels = grid.pixels
    blocks: list[ColorBlock] = []
    for y in range(grid.height):
        if should_cancel is not None and should_cancel():
            raise ConversionCancelled(f"Image scan cancelled at row {y}.")

        row = pixels[y]
        for x in np.flatnonzero(row[:, 3]):
            r, g, b = (int(c) for c in row[x, :3])
            blocks.append(
                ColorBlock(
                    x=round_position(params.start_x + int(x) * spacing),
                    y=round_position(start_y + y * spacing),
                    color=f"#{r:02x}{g:02x}{b:02x}",
                    scale=params.block_scale,
                )
            )

    logger.debug(
        f"Mapped {grid.width}x{grid.height} grid to {len(blocks)} color blocks"
    )
    return blocks
