"""
Mesmerise Image Editor - Color Domain Model

Canonical color representation for effect parameters (tint, duotone).
All hex parsing flows through this class.
"""

import re
from typing import Tuple

import numpy as np


_HEX_PATTERN = re.compile(r'^[0-9a-fA-F]{1,6}$')


def _channel(value) -> int:
    return max(0, min(255, int(value)))


class Color:
    """Immutable color with uint8 RGB storage.

    Internal storage: _r, _g, _b (uint8 0-255)
    """

    def __init__(self, r: int, g: int, b: int):
        """Build from channel values; anything outside 0-255 is clamped"""
        self._r, self._g, self._b = (_channel(v) for v in (r, g, b))

    @property
    def r(self) -> int:
        """Red channel"""
        return self._r

    @property
    def g(self) -> int:
        """Green channel"""
        return self._g

    @property
    def b(self) -> int:
        """Blue channel"""
        return self._b

    # ========================================
    # Factory Methods
    # ========================================

    @classmethod
    def from_hex(cls, hex_string: str) -> 'Color':
        """Parse #RGB, #RRGGBB or the same without the leading #.

        Parsing is lenient: anything unparseable becomes black, the way
        a colour input with a half-typed value behaves.

        Args:
            hex_string: Hex color string

        Returns:
            Color instance
        """
        try:
            h = hex_string.strip().lstrip("#")
        except AttributeError:
            return cls(0, 0, 0)

        # Expand shorthand #abc -> #aabbcc
        if len(h) == 3:
            h = ''.join(c + c for c in h)

        if not _HEX_PATTERN.match(h):
            return cls(0, 0, 0)

        value = int(h, 16)
        return cls((value >> 16) & 255, (value >> 8) & 255, value & 255)

    @classmethod
    def from_rgb255(cls, r: int, g: int, b: int) -> 'Color':
        """Create from RGB uint8 values (0-255)"""
        return cls(r, g, b)

    # ========================================
    # Output Formats
    # ========================================

    def to_hex(self) -> str:
        """Get as lowercase #rrggbb string"""
        return f"#{self._r:02x}{self._g:02x}{self._b:02x}"

    def to_rgb255(self) -> Tuple[int, int, int]:
        """Get as (r, g, b) uint8 tuple"""
        return (self._r, self._g, self._b)

    def to_array(self) -> np.ndarray:
        """Get as float32 array of shape (3,) for broadcasting over pixels"""
        return np.array([self._r, self._g, self._b], dtype=np.float32)

    # ========================================
    # Comparison
    # ========================================

    def __eq__(self, other):
        return isinstance(other, Color) and self.to_rgb255() == other.to_rgb255()

    def __hash__(self):
        return hash(self.to_rgb255())

    def __repr__(self):
        return f"Color({self.to_hex()})"
