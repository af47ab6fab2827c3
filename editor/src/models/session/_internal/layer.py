"""
Mesmerise Image Editor - Layer Data Model

One independently positioned, independently filtered raster in the stack.

Holds:
- The source bitmap handle (PIL image, treated as immutable)
- Natural size (intrinsic pixel dimensions used for drawing)
- Canvas offset (x, y), None until first placed on the base
- The ordered effect chain
- The processed-raster cache and its dirty flag

This is part of the MODEL layer - pure data, no UI logic.

Cache ownership:
    mark_dirty() is called ONLY by EditorSession.invalidate()
    store_cache() is called ONLY by services.layer_cache
"""

import logging
from typing import List, Optional, Tuple, Union

import numpy as np
from PIL import Image

from models.effect import EffectInstance
from models.transform import Rect

Bitmap = Union[np.ndarray, Image.Image]


class Layer:
    """Raster layer with geometry, effect chain and processed cache

    Properties:
        id: Stable layer id ('layer<N>')
        source: RGBA bitmap handle
        natural_width, natural_height: Drawn size in canvas pixels
        x, y: Canvas offset (None until positioned)
        effect_chain: Ordered list of EffectInstance
        dirty: True when the cache must be rebuilt
    """

    _logger = logging.getLogger('Layer')

    def __init__(self, layer_id: str, source: Image.Image,
                 natural_width: Optional[int] = None, natural_height: Optional[int] = None):
        """Create a layer from a decoded bitmap

        Args:
            layer_id: Stable identifier
            source: Decoded bitmap (converted to RGBA if needed)
            natural_width: Drawn width, defaults to the bitmap width
            natural_height: Drawn height, defaults to the bitmap height

        Raises:
            ValueError: If the resulting natural size is not positive
        """
        if source.mode != 'RGBA':
            source = source.convert('RGBA')

        width = source.width if natural_width is None else int(natural_width)
        height = source.height if natural_height is None else int(natural_height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Layer size must be positive, got {width}x{height}")

        self._id = layer_id
        self._source = source
        self._natural_width = width
        self._natural_height = height

        self.x: Optional[int] = None
        self.y: Optional[int] = None
        self.effect_chain: List[EffectInstance] = []

        # Cache state
        self._dirty = True
        self._cached_raster: Optional[Bitmap] = None
        self._cache_size: Optional[Tuple[int, int]] = None

        self._logger.debug(f"Created {layer_id} ({width}x{height})")

    # ========================================
    # Identity and source
    # ========================================

    @property
    def id(self) -> str:
        return self._id

    @property
    def source(self) -> Image.Image:
        return self._source

    # ========================================
    # Geometry
    # ========================================

    @property
    def natural_width(self) -> int:
        return self._natural_width

    @property
    def natural_height(self) -> int:
        return self._natural_height

    @property
    def natural_size(self) -> Tuple[int, int]:
        return (self._natural_width, self._natural_height)

    @property
    def is_positioned(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def footprint(self) -> Rect:
        """Canvas rectangle covered by this layer (origin if not yet placed)"""
        x = self.x if self.x is not None else 0
        y = self.y if self.y is not None else 0
        return Rect.from_xywh(x, y, self._natural_width, self._natural_height)

    def set_natural_size(self, width: int, height: int):
        """Change the drawn size without touching the source (live resize preview)

        The cache is keyed by natural size, so the next fetch rebuilds.
        """
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Layer size must be positive, got {width}x{height}")
        self._natural_width = width
        self._natural_height = height

    def replace_source(self, source: Image.Image):
        """Swap in a resampled bitmap; natural size follows the new bitmap"""
        if source.mode != 'RGBA':
            source = source.convert('RGBA')
        if source.width <= 0 or source.height <= 0:
            raise ValueError("Replacement bitmap is empty")
        self._source = source
        self._natural_width = source.width
        self._natural_height = source.height

    # ========================================
    # Effect chain
    # ========================================

    def find_effect(self, instance_id: str) -> Optional[EffectInstance]:
        for instance in self.effect_chain:
            if instance.instance_id == instance_id:
                return instance
        return None

    def has_effect_kind(self, kind: str) -> bool:
        return any(instance.kind == kind for instance in self.effect_chain)

    # ========================================
    # Cache
    # ========================================

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def cached_raster(self) -> Optional[Bitmap]:
        return self._cached_raster

    def cache_valid(self) -> bool:
        """Hit requires a clean flag and a cache built at the current natural size"""
        return (
            self._cached_raster is not None
            and not self._dirty
            and self._cache_size == self.natural_size
        )

    def mark_dirty(self):
        self._dirty = True

    def store_cache(self, raster: Bitmap):
        self._cached_raster = raster
        self._cache_size = self.natural_size
        self._dirty = False

    def __repr__(self):
        return f"Layer({self._id!r}, {self._natural_width}x{self._natural_height}, x={self.x}, y={self.y})"
