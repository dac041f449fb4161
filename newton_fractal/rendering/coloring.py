"""
Root colors and convergence-speed shading.

Every root carries a base color; a pixel converging to that root is drawn in
the base color darkened in proportion to the number of iterations it needed.
Pixels that never converge get a single background color.
"""

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple
import logging

import numpy as np
from numba import njit

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r'^#([0-9a-fA-F]{6})$')

# darker() factor for a pixel converged after ``count`` iterations is
# DARKEN_BASE + DARKEN_STEP * count; factors up to 100 leave the color as is
DARKEN_BASE = 50
DARKEN_STEP = 10


@dataclass(frozen=True)
class ColorRGB:
    """8-bit RGB color."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        """Validate RGB values."""
        for component in (self.r, self.g, self.b):
            if not 0 <= component <= 255:
                raise ValueError("RGB components must be between 0 and 255")

    def to_tuple(self) -> Tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        """Format as ``#RRGGBB``."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    @classmethod
    def from_hex(cls, text: str) -> 'ColorRGB':
        """Parse a ``#RRGGBB`` string."""
        match = _HEX_COLOR.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid color '{text}', expected #RRGGBB")
        value = int(match.group(1), 16)
        return cls((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    def darker(self, factor: int) -> 'ColorRGB':
        """
        Return a darker copy of this color.

        A factor of 200 halves the brightness; factors of 100 or less return
        the color unchanged.
        """
        return ColorRGB(*(int(c) for c in darken_channels(self.r, self.g, self.b, factor)))


@njit(cache=True, nogil=True)
def darken_channels(r, g, b, factor):
    """Scale channels by ``100 / factor``, never brightening."""
    if factor < 100:
        factor = 100
    return r * 100 // factor, g * 100 // factor, b * 100 // factor


@njit(cache=True, nogil=True)
def darken_factor(count):
    """darker() factor encoding the iteration count of a converged pixel."""
    return DARKEN_BASE + DARKEN_STEP * count


# Default root palette, in root index order
RED = ColorRGB(255, 0, 0)
GREEN = ColorRGB(0, 255, 0)
BLUE = ColorRGB(0, 0, 255)
CYAN = ColorRGB(0, 255, 255)
MAGENTA = ColorRGB(255, 0, 255)
YELLOW = ColorRGB(255, 255, 0)
BLACK = ColorRGB(0, 0, 0)

ROOT_PALETTE: Tuple[ColorRGB, ...] = (RED, GREEN, BLUE, CYAN, MAGENTA, YELLOW)

# Color of pixels that did not converge to a known root
BACKGROUND = BLACK


def palette_color(index: int) -> ColorRGB:
    """Default color for the root at ``index``; black past the palette."""
    if 0 <= index < len(ROOT_PALETTE):
        return ROOT_PALETTE[index]
    return BLACK


def color_table(colors: Sequence[ColorRGB]) -> np.ndarray:
    """Pack colors into an (n, 3) int64 array for the compiled kernels."""
    table = np.zeros((len(colors), 3), dtype=np.int64)
    for i, color in enumerate(colors):
        table[i] = color.to_tuple()
    return table


def root_coverage(root_map: np.ndarray, root_count: int) -> List[float]:
    """
    Fraction of pixels attributed to each root.

    Args:
        root_map: Per-pixel root index, -1 for background
        root_count: Number of roots in the render

    Returns:
        One fraction per root followed by the background fraction
    """
    total = max(1, root_map.size)
    fractions = [float(np.count_nonzero(root_map == i)) / total for i in range(root_count)]
    fractions.append(float(np.count_nonzero(root_map < 0)) / total)
    return fractions
