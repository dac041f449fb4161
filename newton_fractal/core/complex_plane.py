"""
Coordinate mapping between pixel space and the complex plane.

This module provides the pure conversion functions shared by the renderer
(per-pixel iteration), the orbit tracer and any interactive front-end (root
dragging, cursor read-out). Pixel row 0 maps to ``viewport.top`` and the last
row maps to ``viewport.bottom``; column 0 maps to ``viewport.left``.
"""

from typing import Tuple, TYPE_CHECKING
import logging

from numba import njit

if TYPE_CHECKING:
    from .viewport import Viewport

logger = logging.getLogger(__name__)

Pixel = Tuple[int, int]
Size = Tuple[int, int]


@njit(cache=True, nogil=True)
def interpolate(p, lo, hi, n):
    """Map pixel index ``p`` in ``[0, n-1]`` linearly onto ``[lo, hi]``."""
    return lo + p * (hi - lo) / (n - 1)


@njit(cache=True, nogil=True)
def deinterpolate(v, lo, hi, n):
    """Inverse of :func:`interpolate`, without rounding."""
    return (v - lo) * (n - 1) / (hi - lo)


def pixel_to_complex(pixel: Pixel, size: Size, viewport: 'Viewport') -> complex:
    """
    Convert pixel coordinates to a point on the complex plane.

    Args:
        pixel: (x, y) pixel position, may be fractional
        size: (width, height) of the image; both must be >= 2
        viewport: Visible plane rectangle

    Returns:
        Complex plane point
    """
    width, height = size
    real = interpolate(float(pixel[0]), viewport.left, viewport.right, width)
    imag = interpolate(float(pixel[1]), viewport.top, viewport.bottom, height)
    return complex(real, imag)


def complex_to_pixel(z: complex, size: Size, viewport: 'Viewport') -> Pixel:
    """
    Convert a complex plane point to the nearest pixel.

    Args:
        z: Complex plane point
        size: (width, height) of the image
        viewport: Visible plane rectangle

    Returns:
        (x, y) integer pixel position
    """
    width, height = size
    x = deinterpolate(z.real, viewport.left, viewport.right, width)
    y = deinterpolate(z.imag, viewport.top, viewport.bottom, height)
    return int(round(x)), int(round(y))


def distance_in_plane(delta: Tuple[float, float], size: Size, viewport: 'Viewport') -> complex:
    """
    Scale a pixel displacement into a plane displacement.

    Used for panning: dragging by ``delta`` pixels moves the view by the
    returned amount.
    """
    width, height = size
    dx = delta[0] * (viewport.right - viewport.left) / (width - 1)
    dy = delta[1] * (viewport.bottom - viewport.top) / (height - 1)
    return complex(dx, dy)


class ComplexPlane:
    """Represents a viewport sampled at a fixed resolution."""

    def __init__(self, viewport: 'Viewport', width: int, height: int):
        """
        Initialize the sampled plane.

        Args:
            viewport: Visible plane rectangle
            width, height: Image resolution in pixels
        """
        if width < 2 or height < 2:
            raise ValueError("Width and height must be at least 2 pixels")

        self.viewport = viewport
        self.width = width
        self.height = height

        # Plane units per pixel step
        self.x_scale = (viewport.right - viewport.left) / (width - 1)
        self.y_scale = (viewport.bottom - viewport.top) / (height - 1)

    @property
    def size(self) -> Size:
        return self.width, self.height

    def row_coordinate(self, y: int) -> float:
        """Imaginary coordinate shared by every pixel of scanline ``y``."""
        return interpolate(float(y), self.viewport.top, self.viewport.bottom, self.height)

    def pixel_to_complex(self, px: float, py: float) -> complex:
        """Convert pixel coordinates to complex number."""
        return pixel_to_complex((px, py), self.size, self.viewport)

    def complex_to_pixel(self, c: complex) -> Pixel:
        """Convert complex number to pixel coordinates."""
        return complex_to_pixel(c, self.size, self.viewport)
