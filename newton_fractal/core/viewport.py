"""
Viewport bounds on the complex plane and the pan/zoom/resize rules.

The imaginary axis grows downward: ``top`` is the value at pixel row 0 and
must be smaller than ``bottom``.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging

from .complex_plane import Size, distance_in_plane

logger = logging.getLogger(__name__)

ZOOM_STEP = 1.1

# Half of the shorter visible axis in the default view
DEFAULT_HALF_EXTENT = 2.0


@dataclass
class Viewport:
    """Visible rectangle of the complex plane."""

    left: float = -DEFAULT_HALF_EXTENT
    right: float = DEFAULT_HALF_EXTENT
    top: float = -DEFAULT_HALF_EXTENT
    bottom: float = DEFAULT_HALF_EXTENT
    zoom_factor: float = 1.0
    original: Optional['Viewport'] = field(default=None, repr=False)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate bounds and zoom factor."""
        if not self.left < self.right:
            raise ValueError("Invalid bounds: left must be less than right")
        if not self.top < self.bottom:
            raise ValueError("Invalid bounds: top must be less than bottom")
        if self.zoom_factor <= 0:
            raise ValueError("zoom_factor must be positive")

    @classmethod
    def fit(cls, size: Size, half_extent: float = DEFAULT_HALF_EXTENT) -> 'Viewport':
        """
        Create a root viewport centred on the origin with square pixels.

        The shorter image axis spans ``[-half_extent, half_extent]``.
        """
        width, height = size
        if width >= height:
            hx, hy = half_extent * width / height, half_extent
        else:
            hx, hy = half_extent, half_extent * height / width
        return cls(-hx, hx, -hy, hy)

    @classmethod
    def with_baseline(cls, left: float, right: float, top: float, bottom: float) -> 'Viewport':
        """Create a viewport whose reset baseline equals its initial bounds."""
        viewport = cls(left, right, top, bottom)
        viewport.original = cls(left, right, top, bottom)
        return viewport

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> complex:
        return complex((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(left, right, top, bottom)"""
        return self.left, self.right, self.top, self.bottom

    def copy(self) -> 'Viewport':
        """Independent copy, including the baseline."""
        original = self.original.copy() if self.original is not None else None
        return Viewport(self.left, self.right, self.top, self.bottom, self.zoom_factor, original)

    def set(self, left: float, right: float, top: float, bottom: float) -> None:
        """Replace the current bounds, keeping the baseline."""
        Viewport(left, right, top, bottom).validate()
        self.left, self.right, self.top, self.bottom = left, right, top, bottom

    def move(self, delta: Tuple[float, float], size: Size) -> None:
        """
        Pan by a pixel displacement.

        Args:
            delta: (dx, dy) displacement in pixels
            size: Current image size used for the pixel-to-plane scale
        """
        d = distance_in_plane(delta, size, self)
        self.left += d.real
        self.right += d.real
        self.top += d.imag
        self.bottom += d.imag

    def zoom(self, zoom_in: bool, focus_x: float = 0.5, focus_y: float = 0.5) -> None:
        """
        Zoom one step in or out around a focus point.

        Args:
            zoom_in: True to magnify, False to shrink
            focus_x, focus_y: Focus point as fractions (0-1) of the current
                width and height; the plane point under it stays fixed
        """
        scale = 1.0 / ZOOM_STEP if zoom_in else ZOOM_STEP
        new_width = self.width * scale
        new_height = self.height * scale

        self.left += focus_x * (self.width - new_width)
        self.top += focus_y * (self.height - new_height)
        self.right = self.left + new_width
        self.bottom = self.top + new_height

        if zoom_in:
            self.zoom_factor *= ZOOM_STEP
        else:
            self.zoom_factor /= ZOOM_STEP

        logger.debug(f"Zoom {'in' if zoom_in else 'out'} -> factor {self.zoom_factor:.4f}")

    def set_zoom_factor(self, factor: float) -> None:
        """Rescale around the current centre so the view is ``factor`` times the baseline."""
        if factor <= 0:
            raise ValueError("zoom factor must be positive")
        base = self.original if self.original is not None else self
        new_width = base.width * base.zoom_factor / factor
        new_height = base.height * base.zoom_factor / factor
        center = self.center
        self.left = center.real - new_width / 2
        self.right = center.real + new_width / 2
        self.top = center.imag - new_height / 2
        self.bottom = center.imag + new_height / 2
        self.zoom_factor = factor

    def reset(self, size: Optional[Size] = None) -> None:
        """
        Restore the baseline bounds and a zoom factor of 1.

        Without a baseline the default view for ``size`` (or the default
        square view) is used.
        """
        if self.original is not None:
            base = self.original
        elif size is not None:
            base = Viewport.fit(size)
        else:
            base = Viewport()
        self.left, self.right, self.top, self.bottom = base.bounds
        self.zoom_factor = 1.0

    def resize(self, old_size: Size, new_size: Size) -> None:
        """
        Adapt the bounds to a new canvas size.

        The plane centre and the plane distance per pixel are preserved, so
        the aspect ratio of the visible region follows the canvas.
        """
        sx = (new_size[0] - 1) / (old_size[0] - 1)
        sy = (new_size[1] - 1) / (old_size[1] - 1)
        self._scale_about_center(sx, sy)
        if self.original is not None:
            self.original._scale_about_center(sx, sy)

    def _scale_about_center(self, sx: float, sy: float) -> None:
        center = self.center
        half_w = self.width * sx / 2
        half_h = self.height * sy / 2
        self.left, self.right = center.real - half_w, center.real + half_w
        self.top, self.bottom = center.imag - half_h, center.imag + half_h
