"""
Mesmerise Image Editor - Effect Pipeline Service

Applies an ordered effect chain to a pixel buffer. Effects compose
sequentially: each instance reads the buffer left by the previous one,
so order matters (sepia-then-tint differs from tint-then-sepia).
"""

import logging
from typing import Callable, Dict, Iterable, Optional

import numpy as np

from models.effect import EffectInstance
from services import kernels

logger = logging.getLogger(__name__)


def _scalar(kernel):
    """Adapt a (pixels, value) kernel; non-numeric values count as 0"""
    def apply(pixels, value, rng):
        amount = value if isinstance(value, (int, float)) else 0
        return kernel(pixels, amount)
    return apply


def _grain(pixels, value, rng):
    amount = value if isinstance(value, (int, float)) else 0
    return kernels.grain(pixels, amount, rng=rng)


def _resolution(pixels, value, rng):
    amount = value if isinstance(value, (int, float)) else 100
    return kernels.resolution(pixels, amount)


def _tint(pixels, value, rng):
    if not isinstance(value, dict):
        return pixels
    return kernels.tint(pixels, value.get('color', '#000000'), value.get('mix', 0))


def _duotone(pixels, value, rng):
    # 'mode' (replace/overlay) renders with the same blend
    if not isinstance(value, dict):
        return pixels
    return kernels.duotone(pixels, value.get('colorA'), value.get('colorB'), value.get('mix', 100))


def _halftone(pixels, value, rng):
    if not isinstance(value, dict):
        return pixels
    return kernels.halftone(
        pixels,
        shape=value.get('shape', 'circle'),
        size=value.get('size', 'medium'),
        mode=value.get('mode', 'monochrome'),
        blend=value.get('blend', 'replace'),
    )


EFFECT_DISPATCH: Dict[str, Callable] = {
    'brightness': _scalar(kernels.brightness),
    'contrast': _scalar(kernels.contrast),
    'saturation': _scalar(kernels.saturation),
    'sepia': _scalar(kernels.sepia),
    'invert': _scalar(kernels.invert),
    'vignette': _scalar(kernels.vignette),
    'sharpen': _scalar(kernels.sharpen),
    'grain': _grain,
    'resolution': _resolution,
    'tint': _tint,
    'duotone': _duotone,
    'halftone': _halftone,
}


def apply_effects(pixels: np.ndarray, effect_chain: Iterable[EffectInstance],
                  rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Run an effect chain over an RGBA buffer

    Args:
        pixels: (H, W, 4) uint8 buffer (not modified)
        effect_chain: Effect instances in application order
        rng: Optional generator for reproducible grain

    Returns:
        New (H, W, 4) uint8 buffer

    Raises:
        ValueError: If an instance has a kind with no kernel
    """
    result = pixels
    for instance in effect_chain:
        try:
            handler = EFFECT_DISPATCH[instance.kind]
        except KeyError:
            raise ValueError(f"No kernel registered for effect kind '{instance.kind}'") from None
        result = handler(result, instance.value, rng)
        logger.debug("Applied %s (%s)", instance.kind, instance.instance_id)

    if result is pixels:
        result = pixels.copy()
    return result
