import numpy as np
import pytest

from media_to_level.errors import ConversionCancelled
from media_to_level.models import ImageParams, Raster
from media_to_level.raster import (
    centered_start_y,
    estimate_object_count,
    lag_warning,
    map_raster,
    pixel_spacing,
    resample_raster,
    scaled_size,
)


def test_pixel_spacing_reference_value():
    assert pixel_spacing(-0.1) == 4.0


@pytest.mark.parametrize("scale", [0.05, 0.1, 0.25, 1.0])
def test_pixel_spacing_ignores_sign(scale):
    assert pixel_spacing(scale) == pixel_spacing(-scale)
    assert pixel_spacing(scale) == pytest.approx(40 * scale)


@pytest.mark.parametrize(
    "size, percent, expected",
    [
        ((10, 10), 100, (10, 10)),
        ((10, 10), 50, (5, 5)),
        ((7, 3), 50, (3, 1)),
        ((3, 3), 1, (1, 1)),
    ],
)
def test_scaled_size(size, percent, expected):
    assert scaled_size(*size, percent) == expected


def test_resample_identity_at_full_size(opaque_raster):
    assert resample_raster(opaque_raster, 100) is opaque_raster


def test_resample_half_size(opaque_raster):
    resampled = resample_raster(opaque_raster, 50)
    assert (resampled.width, resampled.height) == (5, 5)


def test_map_single_red_pixel(red_pixel_raster):
    params = ImageParams(block_scale=-0.1, start_x=200, start_y=300)
    blocks = map_raster(red_pixel_raster, params)
    assert len(blocks) == 1
    assert (blocks[0].x, blocks[0].y) == (200.0, 300.0)
    assert blocks[0].color == "#ff0000"
    assert blocks[0].scale == pytest.approx(-0.1)


def test_map_skips_transparent_pixels(checkerboard_raster):
    blocks = map_raster(checkerboard_raster, ImageParams())
    opaque = int(np.count_nonzero(checkerboard_raster.pixels[..., 3]))
    assert len(blocks) == opaque == 12
    assert all(b.color == "#ffffff" for b in blocks)


def test_map_count_independent_of_sample_order(checkerboard_raster):
    flipped = Raster(pixels=checkerboard_raster.pixels[::-1, ::-1].copy())
    assert len(map_raster(flipped, ImageParams())) == len(
        map_raster(checkerboard_raster, ImageParams())
    )


def test_map_row_major_positions(checkerboard_raster):
    params = ImageParams(start_x=0, start_y=0)
    blocks = map_raster(checkerboard_raster, params)
    positions = [(b.x, b.y) for b in blocks]
    assert positions[:4] == [(0.0, 0.0), (8.0, 0.0), (16.0, 0.0), (4.0, 4.0)]
    assert positions == sorted(positions, key=lambda p: (p[1], p[0]))
    assert len(set(positions)) == len(positions)


def test_map_colors_are_lowercase_zero_padded():
    pixels = np.array([[[10, 171, 0, 1]]], dtype=np.uint8)
    blocks = map_raster(Raster(pixels=pixels), ImageParams())
    assert blocks[0].color == "#0aab00"


def test_map_resampled_grid(opaque_raster):
    blocks = map_raster(opaque_raster, ImageParams(resample_percent=50))
    assert len(blocks) == 25
    assert max(b.x for b in blocks) == pytest.approx(200 + 4 * 4)


def test_map_resampled_grid_drops_transparent(opaque_raster):
    pixels = opaque_raster.pixels.copy()
    pixels[:2, :2, 3] = 0  # one fully transparent cell after halving
    blocks = map_raster(Raster(pixels=pixels), ImageParams(resample_percent=50))
    assert len(blocks) == 24


def test_map_spacing_follows_block_scale(checkerboard_raster):
    blocks = map_raster(
        checkerboard_raster, ImageParams(block_scale=0.2, start_x=0, start_y=0)
    )
    assert blocks[1].x == pytest.approx(16.0)


def test_centered_start_y():
    assert centered_start_y(300, 10, 4.0) == 280
    assert centered_start_y(300, 3, 4.0) == 294


def test_map_centered_vertically(opaque_raster):
    params = ImageParams(center_vertically=True, start_y=0)
    blocks = map_raster(opaque_raster, params)
    assert min(b.y for b in blocks) == 280.0
    assert max(b.y for b in blocks) == 280.0 + 9 * 4


def test_map_cancelled_between_rows(opaque_raster):
    rows_started = []

    def should_cancel():
        rows_started.append(True)
        return len(rows_started) > 3

    with pytest.raises(ConversionCancelled):
        map_raster(opaque_raster, ImageParams(), should_cancel=should_cancel)
    assert len(rows_started) == 4


def test_map_is_deterministic(opaque_raster):
    params = ImageParams(resample_percent=70)
    assert map_raster(opaque_raster, params) == map_raster(opaque_raster, params)


def test_estimate_object_count():
    assert estimate_object_count(100, 50) == 5000
    assert estimate_object_count(100, 50, 10) == 50


def test_lag_warning_threshold():
    assert lag_warning(2000, 2000) is None
    message = lag_warning(2001, 2000)
    assert "2001" in message
    assert "2000" in message


def test_resample_keeps_color_of_partial_cover():
    pixels = np.zeros((2, 2, 4), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0, 255)
    resampled = resample_raster(Raster(pixels=pixels), 50)
    assert resampled.pixels[0, 0, :3].tolist() == [255, 0, 0]
    assert resampled.pixels[0, 0, 3] == 64


def test_map_resampled_edge_color():
    pixels = np.zeros((2, 2, 4), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0, 255)
    blocks = map_raster(Raster(pixels=pixels), ImageParams(resample_percent=50))
    assert [b.color for b in blocks] == ["#ff0000"]


def test_map_rounds_positions_half_up():
    params = ImageParams(start_x=0.125, start_y=2.675)
    red = Raster(pixels=np.array([[[255, 0, 0, 255]]], dtype=np.uint8))
    block = map_raster(red, params)[0]
    # 2.675 is stored just below the half, so it stays at 2.67
    assert (block.x, block.y) == (0.13, 2.67)
