"""
Mesmerise Image Editor - Layer Cache Service

Memoizes each layer's processed raster so a frame only pays for the
effect pipeline of layers that actually changed.

A cache hit needs both a clean dirty flag and a cache built at the
layer's current natural size. A live resize preview changes the natural
size without dirtying the layer, so the size check alone forces the
rebuild at the new scale.
"""

import logging
from typing import Optional

import numpy as np
from PIL import Image

from models.session import Layer
from services.effect_pipeline import apply_effects

logger = logging.getLogger(__name__)


def scaled_source(layer: Layer) -> Image.Image:
    """Source bitmap drawn at the layer's natural size (nearest neighbour)"""
    if layer.source.size == layer.natural_size:
        return layer.source
    return layer.source.resize(layer.natural_size, Image.Resampling.NEAREST)


def read_pixels(image: Image.Image) -> np.ndarray:
    """Read a bitmap back into a fresh (H, W, 4) uint8 buffer"""
    if image.mode != 'RGBA':
        image = image.convert('RGBA')
    return np.array(image, dtype=np.uint8)


def get_processed_raster(layer: Layer, rng: Optional[np.random.Generator] = None):
    """Return the layer's processed raster, rebuilding it when stale

    Args:
        layer: Layer to fetch
        rng: Optional generator for reproducible grain

    Returns:
        (H, W, 4) uint8 array, or the unprocessed scaled bitmap when the
        pixels could not be read back or processed

    Raises:
        OSError, ValueError: Only when the source itself cannot be scaled
            (the compositor handles that as a draw failure)
    """
    if layer.cache_valid():
        return layer.cached_raster

    scaled = scaled_source(layer)

    try:
        raster = read_pixels(scaled)
        if layer.effect_chain:
            raster = apply_effects(raster, layer.effect_chain, rng=rng)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not process {layer.id}, drawing it unfiltered: {e}")
        raster = scaled

    layer.store_cache(raster)
    logger.debug(f"Rebuilt cache for {layer.id} at {layer.natural_width}x{layer.natural_height}")
    return raster
