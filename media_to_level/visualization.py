"""
Visualization functions for generated levels.

This module provides previews shown next to the generated JSON: a melody
roll of the reduced melody and a top-down rendering of the placement
objects of a level.
"""

from collections.abc import Sequence

import cv2
import numpy as np
from matplotlib.figure import Figure

from media_to_level.models import (
    ColorBlock,
    MelodyNote,
    MusicBlock,
    PlacementObject,
    TinyMushroom,
)


def create_melody_roll_visualization(
    melody: Sequence[MelodyNote],
    *,
    width_px: int = 1200,
    note_h_in: float = 0.28,
    max_h_in: float = 12.0,
    min_h_in: float = 2.0,
    dpi: int = 150,
    margin_frac: float = 0.05,
) -> Figure:
    """Create a piano roll of a reduced melody with note labels.

    Each row is one pitch; notes are drawn as bars from onset to onset plus
    duration and colored by pitch class.

    Args:
        melody: Time-ordered melody notes.
        width_px: Logical bitmap width in pixels (default 1200).
        note_h_in: Physical height per pitch row in inches (default 0.28).
        max_h_in: Maximum figure height in inches (default 12.0).
        min_h_in: Minimum figure height in inches (default 2.0).
        dpi: Raster resolution for output (default 150).
        margin_frac: Fraction of row height to leave as margin (default 0.05).

    Returns:
        Matplotlib Figure; shows a "No melody" message if melody is empty.
    """
    import matplotlib.patches as patches
    from matplotlib.colors import hsv_to_rgb

    if not melody:
        fig = Figure(figsize=(width_px / dpi, min_h_in), dpi=dpi)
        ax = fig.subplots()
        ax.text(0.5, 0.5, "No melody", ha="center", va="center", transform=ax.transAxes)
        ax.axis("off")
        return fig

    lo_pitch = min(n.pitch for n in melody)
    hi_pitch = max(n.pitch for n in melody)
    start = min(n.onset for n in melody)
    end = max(n.onset + n.duration for n in melody)
    if end <= start:
        end = start + 1.0

    pitch_span = hi_pitch - lo_pitch + 1
    height_in = max(min_h_in, min(max_h_in, pitch_span * note_h_in))
    fig = Figure(figsize=(width_px / dpi, height_in), dpi=dpi)
    ax = fig.subplots()

    ax.set_xlim(start, end)
    ax.set_ylim(lo_pitch - 0.5, hi_pitch + 0.5)

    for k in range(pitch_span + 1):
        ax.axhline(lo_pitch - 0.5 + k, color="black", linewidth=1, zorder=0)

    cell_h = 1 - 2 * margin_frac
    y_shift = 0.5 - margin_frac
    for note in melody:
        rgb = hsv_to_rgb(((note.pitch % 12) / 12.0, 0.8, 0.85))
        ax.add_patch(
            patches.Rectangle(
                (note.onset, note.pitch - y_shift),
                note.duration,
                cell_h,
                facecolor=rgb,
                edgecolor="black",
                linewidth=0.8,
                zorder=1,
            )
        )

    # Label every row with the name of the first melody note at that pitch
    names = {}
    for note in melody:
        names.setdefault(note.pitch, note.pitch_name)
    ticks = sorted(names)
    ax.set_yticks(ticks)
    ax.set_yticklabels([names[p] for p in ticks], fontsize=8)

    ax.set_xlabel("Time (s)")
    ax.set_title(f"Melody ({len(melody)} notes)")
    fig.tight_layout()
    return fig


def _hex_to_bgr(color: str) -> tuple[int, int, int]:
    r, g, b = (int(color[i : i + 2], 16) for i in (1, 3, 5))
    return b, g, r


def create_level_preview(
    objects: Sequence[PlacementObject],
    *,
    max_size: int = 800,
    padding: int = 20,
) -> np.ndarray | None:
    """Render the placement objects of a level as an RGB image.

    Color blocks are drawn as filled squares in their color, music blocks as
    labelled circles and markers as small triangles. The drawing is scaled
    so its longest side fits ``max_size``.

    Args:
        objects: Placement objects of a level.
        max_size: Longest side of the drawing area in pixels.
        padding: Border around the drawing in pixels.

    Returns:
        RGB image as a NumPy array, or None if there is nothing to draw.
    """
    if not objects:
        return None

    xs = np.array([obj.x for obj in objects], dtype=float)
    ys = np.array([obj.y for obj in objects], dtype=float)
    min_x, min_y = xs.min(), ys.min()
    span = max(xs.max() - min_x, ys.max() - min_y, 1.0)
    factor = max_size / span

    width = int((xs.max() - min_x) * factor) + 2 * padding + 1
    height = int((ys.max() - min_y) * factor) + 2 * padding + 1
    canvas = np.full((height, width, 3), 255, dtype=np.uint8)

    def to_px(x: float, y: float) -> tuple[int, int]:
        return int((x - min_x) * factor) + padding, int((y - min_y) * factor) + padding

    color_blocks = [o for o in objects if isinstance(o, ColorBlock)]
    cell = max(1, int(round(factor * _color_block_spacing(color_blocks))))
    for block in color_blocks:
        px, py = to_px(block.x, block.y)
        cv2.rectangle(
            canvas, (px, py), (px + cell - 1, py + cell - 1), _hex_to_bgr(block.color), -1
        )

    for obj in objects:
        px, py = to_px(obj.x, obj.y)
        if isinstance(obj, MusicBlock):
            cv2.circle(canvas, (px, py), 6, (255, 100, 100), -1)
            cv2.putText(
                canvas,
                obj.note_name,
                (px - 8, py - 10),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.35,
                (0, 0, 0),
                1,
            )
        elif isinstance(obj, TinyMushroom):
            triangle = np.array(
                [[px, py - 6], [px - 5, py + 4], [px + 5, py + 4]], dtype=np.int32
            )
            cv2.fillPoly(canvas, [triangle], (0, 160, 0))

    return cv2.cvtColor(canvas, cv2.COLOR_BGR2RGB)


def _color_block_spacing(blocks: Sequence[ColorBlock]) -> float:
    """Smallest non-zero horizontal distance between color blocks."""
    xs = np.unique([b.x for b in blocks])
    if xs.size < 2:
        return 1.0
    return float(np.diff(xs).min())
