"""Compositor Service.

Paints the layer stack onto the output surface in stack order (index 0
at the back). The base layer's natural size defines the surface size;
every other layer is drawn at its offset, clipped at the canvas edges.

A layer whose processed raster cannot be drawn falls back to its raw
source; if that fails too the layer is skipped for this frame only.
"""

import logging
from typing import Optional, Sequence

import numpy as np
from PIL import Image

from models.session import Layer
from services.layer_cache import get_processed_raster
from utils.geometry import place_unpositioned

logger = logging.getLogger(__name__)


class Surface:
    """Numpy-backed RGBA output surface

    Pixels are straight (non-premultiplied) RGBA, shape (height, width, 4).
    """

    def __init__(self, width: int = 0, height: int = 0):
        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self):
        return (self.width, self.height)

    def resize_to(self, width: int, height: int):
        """Set the surface size; contents are cleared"""
        self._pixels = np.zeros((int(height), int(width), 4), dtype=np.uint8)

    def clear(self):
        self._pixels[:] = 0

    def read_pixels(self) -> np.ndarray:
        return self._pixels.copy()

    def write_pixels(self, pixels: np.ndarray):
        pixels = np.asarray(pixels)
        if pixels.shape != self._pixels.shape:
            raise ValueError(f"Expected pixels of shape {self._pixels.shape}, got {pixels.shape}")
        self._pixels = pixels.astype(np.uint8, copy=True)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self._pixels))

    def draw_bitmap_at(self, bitmap, x: int, y: int, width: int, height: int):
        """Source-over draw of a bitmap scaled to width x height at (x, y)

        Args:
            bitmap: PIL image or (H, W, 4) uint8 array
            x, y: Destination offset (may be negative)
            width, height: Destination size (nearest-neighbour scaled)

        Raises:
            ValueError: If the bitmap or destination size is empty
        """
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Cannot draw at size {width}x{height}")

        if isinstance(bitmap, Image.Image):
            if bitmap.width <= 0 or bitmap.height <= 0:
                raise ValueError("Cannot draw an empty bitmap")
            if bitmap.size != (width, height):
                bitmap = bitmap.resize((width, height), Image.Resampling.NEAREST)
            if bitmap.mode != 'RGBA':
                bitmap = bitmap.convert('RGBA')
            src = np.asarray(bitmap, dtype=np.uint8)
        else:
            src = np.asarray(bitmap)
            if src.ndim != 3 or src.shape[2] != 4 or src.shape[0] == 0 or src.shape[1] == 0:
                raise ValueError(f"Cannot draw bitmap of shape {src.shape}")
            if src.shape[:2] != (height, width):
                image = Image.fromarray(np.ascontiguousarray(src, dtype=np.uint8))
                src = np.asarray(image.resize((width, height), Image.Resampling.NEAREST))

        # Clip the destination rectangle against the surface
        x, y = int(x), int(y)
        left, top = max(0, x), max(0, y)
        right, bottom = min(self.width, x + width), min(self.height, y + height)
        if right <= left or bottom <= top:
            return

        src = src[top - y:bottom - y, left - x:right - x].astype(np.float32) / 255.0
        dst = self._pixels[top:bottom, left:right].astype(np.float32) / 255.0

        src_a = src[..., 3:4]
        dst_a = dst[..., 3:4]
        out_a = src_a + dst_a * (1.0 - src_a)
        out_rgb = src[..., :3] * src_a + dst[..., :3] * dst_a * (1.0 - src_a)
        out_rgb = np.divide(out_rgb, out_a, out=np.zeros_like(out_rgb), where=out_a > 0)

        out = np.concatenate([out_rgb, out_a], axis=-1) * 255.0
        self._pixels[top:bottom, left:right] = np.clip(np.rint(out), 0, 255).astype(np.uint8)


def _draw_layer(surface: Surface, layer: Layer, rng):
    """Draw one layer, falling back to the raw source on failure"""
    try:
        raster = get_processed_raster(layer, rng=rng)
        surface.draw_bitmap_at(raster, layer.x, layer.y, layer.natural_width, layer.natural_height)
        return
    except (OSError, ValueError) as e:
        logger.warning(f"Drawing {layer.id} failed, trying its raw source: {e}")

    try:
        surface.draw_bitmap_at(layer.source, layer.x, layer.y, layer.natural_width, layer.natural_height)
    except (OSError, ValueError) as e:
        logger.warning(f"Skipping {layer.id} for this frame: {e}")


def render_all(layers: Sequence[Layer], surface: Surface, rng: Optional[np.random.Generator] = None):
    """Paint the whole stack onto surface

    An empty stack clears the surface. Otherwise the surface takes the
    base's natural size, unplaced layers are centered on the base, and
    every layer is drawn back to front.
    """
    if not layers:
        surface.clear()
        return

    base = layers[0]
    if surface.size != base.natural_size:
        surface.resize_to(base.natural_width, base.natural_height)
    else:
        surface.clear()

    place_unpositioned(layers)

    for layer in layers:
        _draw_layer(surface, layer, rng)

    logger.debug(f"Rendered {len(layers)} layer(s) at {surface.width}x{surface.height}")
