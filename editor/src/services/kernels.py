"""Color and convolution kernel library.

Stateless pixel math over RGBA buffers. Every function takes an
(H, W, 4) uint8 array and returns a NEW (H, W, 4) uint8 array; the input
is never modified. Alpha passes through untouched. All channel math runs
in float and is rounded and clamped to [0, 255] on the way out.
"""

import math
from typing import Optional, Sequence, Union

import numpy as np
from PIL import Image, ImageDraw
from scipy import ndimage

from models.color import Color
from constants import (
    CHANNEL_UNIT, SATURATION_LUMA, LUMA_WEIGHTS, SEPIA_MATRIX,
    SHARPEN_KERNEL, IDENTITY_KERNEL,
    HALFTONE_DOT_SIZES, HALFTONE_GAMMA, HALFTONE_MIN_DARKNESS, HALFTONE_MIN_EXTENT,
)


ColorLike = Union[Color, str]


# ======================================================================
# Buffer helpers
# ======================================================================

def clamp_channels(values: np.ndarray) -> np.ndarray:
    """Round to nearest and clamp float channel values into uint8"""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _rgb(pixels: np.ndarray) -> np.ndarray:
    return pixels[..., :3].astype(np.float64)


def _with_rgb(pixels: np.ndarray, rgb: np.ndarray) -> np.ndarray:
    out = pixels.copy()
    out[..., :3] = clamp_channels(rgb)
    return out


def _luma(rgb: np.ndarray, weights=LUMA_WEIGHTS) -> np.ndarray:
    """Weighted luma with a trailing axis so it broadcasts against rgb"""
    wr, wg, wb = weights
    return (wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2])[..., np.newaxis]


def _as_color(color: ColorLike) -> Color:
    if isinstance(color, Color):
        return color
    return Color.from_hex(color)


# ======================================================================
# Pointwise adjustments
# ======================================================================

def brightness(pixels: np.ndarray, value: float) -> np.ndarray:
    """Add value * 2.55 to every colour channel (value in [-100, 100])"""
    return _with_rgb(pixels, _rgb(pixels) + value * CHANNEL_UNIT)


def contrast(pixels: np.ndarray, value: float) -> np.ndarray:
    """Classic contrast curve around mid-grey (value in [-100, 100])"""
    factor = (259.0 * (value + 255.0)) / (255.0 * (259.0 - value))
    return _with_rgb(pixels, factor * (_rgb(pixels) - 128.0) + 128.0)


def saturation(pixels: np.ndarray, value: float) -> np.ndarray:
    """Push channels away from (or toward) their luma (value in [-100, 100])"""
    rgb = _rgb(pixels)
    gray = _luma(rgb, SATURATION_LUMA)
    return _with_rgb(pixels, gray + (1.0 + value / 100.0) * (rgb - gray))


def sepia(pixels: np.ndarray, value: float) -> np.ndarray:
    """Blend the sepia matrix output with the original by value / 100"""
    if value <= 0:
        return pixels.copy()
    t = max(0.0, min(1.0, value / 100.0))
    rgb = _rgb(pixels)
    toned = rgb @ np.asarray(SEPIA_MATRIX, dtype=np.float64).T
    return _with_rgb(pixels, rgb * (1.0 - t) + toned * t)


def invert(pixels: np.ndarray, value: float) -> np.ndarray:
    """Partial inversion: 100 gives 255 - in, 50 collapses to mid-grey"""
    if value <= 0:
        return pixels.copy()
    rgb = _rgb(pixels)
    return _with_rgb(pixels, rgb + (255.0 - 2.0 * rgb) * (value / 100.0))


def vignette(pixels: np.ndarray, value: float) -> np.ndarray:
    """Radial darkening toward the corners.

    factor = 1 - (distance / max_distance) * (value / 100), where distance
    is measured from the buffer centre (width/2, height/2) to each pixel's
    integer (x, y) coordinate.
    """
    if value <= 0:
        return pixels.copy()
    height, width = pixels.shape[:2]
    center_x, center_y = width / 2.0, height / 2.0
    max_distance = math.sqrt(center_x * center_x + center_y * center_y)
    ys, xs = np.indices((height, width), dtype=np.float64)
    distance = np.sqrt((xs - center_x) ** 2 + (ys - center_y) ** 2)
    factor = 1.0 - (distance / max_distance) * (value / 100.0)
    return _with_rgb(pixels, _rgb(pixels) * factor[..., np.newaxis])


def grain(pixels: np.ndarray, value: float, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Additive uniform noise in [-value*2.55/2, +value*2.55/2].

    One sample per pixel, shared by r, g and b, so grain stays colourless.

    Args:
        pixels: RGBA buffer
        value: Strength (0-100)
        rng: Optional generator for reproducible noise
    """
    if value <= 0:
        return pixels.copy()
    if rng is None:
        rng = np.random.default_rng()
    height, width = pixels.shape[:2]
    noise = (rng.random((height, width, 1)) - 0.5) * (value * CHANNEL_UNIT)
    return _with_rgb(pixels, _rgb(pixels) + noise)


def tint(pixels: np.ndarray, color: ColorLike, mix: float) -> np.ndarray:
    """Keep luminance, pull chrominance toward color.

    out = in * (1 - m) + color * luma(in) * m, with m = mix / 100 and
    luma normalised to [0, 1].
    """
    m = mix / 100.0
    if m <= 0:
        return pixels.copy()
    rgb = _rgb(pixels)
    lum = _luma(rgb) / 255.0
    target = _as_color(color).to_array().astype(np.float64)
    return _with_rgb(pixels, rgb * (1.0 - m) + target * lum * m)


def duotone(pixels: np.ndarray, color_a: ColorLike, color_b: ColorLike, mix: float) -> np.ndarray:
    """Map luminance onto the colour_a -> colour_b ramp, mixed back by mix"""
    m = mix / 100.0
    rgb = _rgb(pixels)
    lum = np.clip(_luma(rgb) / 255.0, 0.0, 1.0)
    a = _as_color(color_a).to_array().astype(np.float64)
    b = _as_color(color_b).to_array().astype(np.float64)
    ramp = a + (b - a) * lum
    return _with_rgb(pixels, rgb * (1.0 - m) + ramp * m)


# ======================================================================
# Neighbourhood operations
# ======================================================================

def convolve(pixels: np.ndarray, kernel: Sequence[float]) -> np.ndarray:
    """Square-kernel convolution with edge clamping and sum normalisation.

    Samples outside the buffer clamp to the nearest edge pixel. Weights
    are divided by their sum (a zero-sum kernel is used as-is).

    Args:
        pixels: RGBA buffer
        kernel: Flat row-major list of size*size weights

    Raises:
        ValueError: If kernel length is not a perfect square
    """
    weights = np.asarray(kernel, dtype=np.float64)
    size = int(round(math.sqrt(weights.size)))
    if size * size != weights.size or size == 0:
        raise ValueError(f"Kernel must be square, got {weights.size} weights")
    weights = weights.reshape(size, size)
    total = weights.sum()
    if total != 0:
        weights = weights / total

    rgb = _rgb(pixels)
    out = np.empty_like(rgb)
    for channel in range(3):
        out[..., channel] = ndimage.correlate(rgb[..., channel], weights, mode='nearest')
    return _with_rgb(pixels, out)


def sharpen(pixels: np.ndarray, value: float) -> np.ndarray:
    """Blend identity toward the 3x3 unsharp kernel by min(1, value / 100)"""
    if value <= 0:
        return pixels.copy()
    strength = min(1.0, max(0.0, value / 100.0))
    kernel = [i * (1.0 - strength) + k * strength
              for i, k in zip(IDENTITY_KERNEL, SHARPEN_KERNEL)]
    return convolve(pixels, kernel)


def resolution(pixels: np.ndarray, value: float) -> np.ndarray:
    """Pixelate: nearest-neighbour down to value% then back up"""
    if value >= 100:
        return pixels.copy()
    height, width = pixels.shape[:2]
    scale = max(0.0, value) / 100.0
    small = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
    img = Image.fromarray(np.ascontiguousarray(pixels))
    img = img.resize(small, Image.Resampling.NEAREST)
    img = img.resize((width, height), Image.Resampling.NEAREST)
    return np.array(img, dtype=np.uint8)


# ======================================================================
# Halftone
# ======================================================================

def _draw_dot(draw, shape, cx, cy, extent, cell_left, dot_size, fill):
    half = extent / 2.0
    if shape == 'circle':
        draw.ellipse((cx - half, cy - half, cx + half, cy + half), fill=fill)
    elif shape == 'square':
        draw.rectangle((cx - half, cy - half, cx + half, cy + half), fill=fill)
    elif shape == 'triangle':
        draw.polygon([(cx, cy - half), (cx + half, cy + half), (cx - half, cy + half)], fill=fill)
    elif shape == 'line':
        draw.rectangle((cell_left, cy - half, cell_left + dot_size - 1, cy + half), fill=fill)
    else:
        raise ValueError(f"Unknown halftone shape '{shape}'")


def halftone(pixels: np.ndarray, shape: str = 'circle', size: str = 'medium',
             mode: str = 'monochrome', blend: str = 'replace') -> np.ndarray:
    """Rasterize a halftone screen.

    The buffer is tiled into dot_size x dot_size cells. Each cell samples
    its centre pixel, converts brightness to darkness
    ((1 - brightness / 255) ** 0.9) and draws one shape whose extent is
    proportional to darkness, never smaller than a visible floor. Shapes
    are black (monochrome) or the sampled colour (color).

    Args:
        pixels: RGBA buffer
        shape: 'circle', 'square', 'triangle' or 'line'
        size: 'small', 'medium' or 'large' (4, 8 or 12 px cells)
        mode: 'monochrome' or 'color'
        blend: 'replace' paints over white, 'overlay' paints over the pixels
    """
    dot_size = HALFTONE_DOT_SIZES[size]
    height, width = pixels.shape[:2]
    rgb = pixels[..., :3]

    if blend == 'overlay':
        screen = Image.fromarray(np.ascontiguousarray(rgb))
    else:
        screen = Image.new('RGB', (width, height), (255, 255, 255))
    draw = ImageDraw.Draw(screen)

    wr, wg, wb = LUMA_WEIGHTS
    for top in range(0, height, dot_size):
        sy = min(height - 1, top + dot_size // 2)
        for left in range(0, width, dot_size):
            sx = min(width - 1, left + dot_size // 2)
            r, g, b = (int(c) for c in rgb[sy, sx])
            lum = wr * r + wg * g + wb * b
            darkness = max(0.0, 1.0 - lum / 255.0) ** HALFTONE_GAMMA
            if darkness < HALFTONE_MIN_DARKNESS:
                continue
            extent = max(HALFTONE_MIN_EXTENT, dot_size * darkness)
            fill = (r, g, b) if mode == 'color' else (0, 0, 0)
            _draw_dot(draw, shape, left + dot_size / 2.0, top + dot_size / 2.0,
                      extent, left, dot_size, fill)

    out = pixels.copy()
    out[..., :3] = np.asarray(screen, dtype=np.uint8)
    return out
