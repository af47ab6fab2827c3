"""
Mesmerise Image Editor - Geometry Utilities

Pure placement and resampling math shared by the session commands and
the interaction controller:
- Position clamping against the base canvas
- Centering of freshly added layers
- Source-to-footprint resampling (bilinear, used on resize and crop commit)
- Crop rectangle clamping against its target bounds
"""

import logging
from typing import Optional, Tuple

from PIL import Image

from models.transform import Rect
from utils.coordinate_transforms import round_half_up

logger = logging.getLogger(__name__)


def clamp_range(canvas_dim: int, layer_dim: int) -> Tuple[int, int]:
    """Allowed offset range along one axis

    A layer smaller than the canvas stays inside it; a larger one may
    slide but must keep covering it. Both cases reduce to
    [min(0, c - l), max(0, c - l)].
    """
    diff = canvas_dim - layer_dim
    return min(0, diff), max(0, diff)


def clamp_position(x, y, layer_width, layer_height, canvas_width, canvas_height) -> Tuple[int, int]:
    """Clamp a layer offset so the layer keeps overlapping the canvas"""
    min_x, max_x = clamp_range(canvas_width, layer_width)
    min_y, max_y = clamp_range(canvas_height, layer_height)
    return (
        int(max(min_x, min(max_x, round_half_up(x)))),
        int(max(min_y, min(max_y, round_half_up(y)))),
    )


def centered_position(canvas_width, canvas_height, layer_width, layer_height) -> Tuple[int, int]:
    return (
        round_half_up((canvas_width - layer_width) / 2),
        round_half_up((canvas_height - layer_height) / 2),
    )


def source_box(layer_rect: Rect, region: Rect, source_width: int, source_height: int) -> Tuple[float, float, float, float]:
    """Map a canvas-space region of a layer footprint onto its source bitmap

    The source may be larger or smaller than the drawn footprint, so the
    region is scaled by source size / natural size on each axis.
    """
    scale_x = source_width / layer_rect.width
    scale_y = source_height / layer_rect.height
    return (
        (region.left - layer_rect.left) * scale_x,
        (region.top - layer_rect.top) * scale_y,
        (region.right - layer_rect.left) * scale_x,
        (region.bottom - layer_rect.top) * scale_y,
    )


def resample(source: Image.Image, width: int, height: int,
             box: Optional[Tuple[float, float, float, float]] = None) -> Image.Image:
    """Produce a new bitmap of exactly width x height from (a region of) source

    An integer box that already matches the output size is a plain crop,
    so a 1:1 crop never blurs.

    Raises:
        ValueError: If the output size is not positive
    """
    width, height = int(width), int(height)
    if width <= 0 or height <= 0:
        raise ValueError(f"Resample target must be positive, got {width}x{height}")

    if box is None:
        box = (0, 0, source.width, source.height)

    left, top, right, bottom = box
    if (all(float(v).is_integer() for v in box)
            and int(right - left) == width and int(bottom - top) == height):
        return source.crop((int(left), int(top), int(right), int(bottom)))

    logger.debug(f"Resampling {source.size} box={box} -> {width}x{height}")
    return source.resize((width, height), Image.Resampling.BILINEAR, box=box)


def clamp_crop_edges(left, top, right, bottom, bounds: Rect) -> Rect:
    """Clamp absolute crop edges into bounds and keep a 1 px minimum size

    Edges are clamped to the bounds first; an inverted or empty result
    is then pushed open to one pixel, preferring to move the far edge.
    """
    left = max(bounds.left, min(bounds.right - 1, left))
    top = max(bounds.top, min(bounds.bottom - 1, top))
    right = max(bounds.left + 1, min(bounds.right, right))
    bottom = max(bounds.top + 1, min(bounds.bottom, bottom))

    if right <= left:
        right = left + 1
    if bottom <= top:
        bottom = top + 1
    return Rect(left, top, right, bottom)


def place_unpositioned(layers) -> list:
    """Center every layer that has no offset yet on the base

    Layers get their first position lazily so a layer added before the
    base has finished loading still lands in the middle of the canvas.
    The base itself lands at the origin.

    Returns:
        Ids of the layers that were placed
    """
    if not layers:
        return []
    canvas_width, canvas_height = layers[0].natural_size

    placed = []
    for layer in layers:
        if layer.is_positioned:
            continue
        layer.x, layer.y = centered_position(
            canvas_width, canvas_height, layer.natural_width, layer.natural_height
        )
        placed.append(layer.id)
        logger.debug(f"Placed {layer.id} at ({layer.x}, {layer.y})")
    return placed
