"""
Render parameter snapshot and its editing rules.

The interactive layer owns a live :class:`RenderParameters` and edits it
freely; the scheduler only ever works on a :meth:`RenderParameters.copy`
taken under its lock, so a frame never observes a half-applied edit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from .complex_plane import Pixel, Size, complex_to_pixel
from .roots import Root, MAX_ROOTS, DEFAULT_ROOT_COUNT, equidistant_roots
from .viewport import Viewport
from ..rendering.coloring import ColorRGB, palette_color

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 500
MAX_ITERATIONS = 5000
DEFAULT_SIZE = (500, 500)
DEFAULT_SCALE_DOWN_FACTOR = 0.5
MIN_DIMENSION = 2


class Processor(Enum):
    """Execution substrate for a frame."""
    CPU_SINGLE = 'cpu_single'
    CPU_MULTI = 'cpu_multi'
    GPU = 'gpu'

    @classmethod
    def parse(cls, value: Any) -> 'Processor':
        """Accept a member, its value or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        available = ', '.join(m.value for m in cls)
        raise ValueError(f"Unknown processor '{value}'. Available: {available}")


@dataclass
class RenderParameters:
    """Everything needed to compute one frame, orbit or benchmark."""

    result_size: Size = DEFAULT_SIZE
    roots: List[Root] = field(default_factory=lambda: equidistant_roots(DEFAULT_ROOT_COUNT))
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    damping: complex = 1 + 0j
    scale_down_factor: float = DEFAULT_SCALE_DOWN_FACTOR
    scale_down: bool = False
    viewport: Viewport = field(default_factory=Viewport)
    processor: Processor = Processor.CPU_MULTI
    orbit_mode: bool = False
    orbit_start: Pixel = (0, 0)
    benchmark: bool = False

    def __post_init__(self):
        self.result_size = (int(self.result_size[0]), int(self.result_size[1]))
        self.damping = complex(self.damping)
        self.processor = Processor.parse(self.processor)
        self.validate()

    def validate(self) -> None:
        """Validate parameter values."""
        width, height = self.result_size
        if width < MIN_DIMENSION or height < MIN_DIMENSION:
            raise ValueError(f"result_size must be at least {MIN_DIMENSION}x{MIN_DIMENSION}")
        if not 1 <= self.max_iterations <= MAX_ITERATIONS:
            raise ValueError(f"max_iterations must be between 1 and {MAX_ITERATIONS}")
        if not 0 < self.scale_down_factor <= 1:
            raise ValueError("scale_down_factor must be in (0, 1]")
        self.viewport.validate()

    def copy(self) -> 'RenderParameters':
        """Deep value copy; shares no mutable state with ``self``."""
        return RenderParameters(
            result_size=self.result_size,
            roots=[root.copy() for root in self.roots],
            max_iterations=self.max_iterations,
            damping=self.damping,
            scale_down_factor=self.scale_down_factor,
            scale_down=self.scale_down,
            viewport=self.viewport.copy(),
            processor=self.processor,
            orbit_mode=self.orbit_mode,
            orbit_start=self.orbit_start,
            benchmark=self.benchmark,
        )

    def clamped(self) -> 'RenderParameters':
        """
        Copy with contract violations clamped instead of rejected.

        Sizes are raised to ``MIN_DIMENSION``, ``max_iterations`` is brought
        into ``[1, MAX_ITERATIONS]``, an out-of-range scale-down factor falls
        back to the default and the root list is truncated to ``MAX_ROOTS``.
        """
        width, height = self.result_size
        size = (max(MIN_DIMENSION, int(width)), max(MIN_DIMENSION, int(height)))
        if size != (width, height):
            logger.warning(f"result_size {width}x{height} clamped to {size[0]}x{size[1]}")

        iterations = min(max(1, int(self.max_iterations)), MAX_ITERATIONS)
        if iterations != self.max_iterations:
            logger.warning(f"max_iterations {self.max_iterations} clamped to {iterations}")

        factor = self.scale_down_factor
        if not 0 < factor <= 1:
            logger.warning(f"scale_down_factor {factor} out of range, using {DEFAULT_SCALE_DOWN_FACTOR}")
            factor = DEFAULT_SCALE_DOWN_FACTOR

        result = RenderParameters(
            result_size=size,
            roots=[root.copy() for root in self.roots[:MAX_ROOTS]],
            max_iterations=iterations,
            damping=self.damping,
            scale_down_factor=factor,
            scale_down=self.scale_down,
            viewport=self.viewport.copy(),
            processor=self.processor,
            orbit_mode=self.orbit_mode,
            orbit_start=self.orbit_start,
            benchmark=self.benchmark,
        )
        if len(self.roots) > MAX_ROOTS:
            logger.warning(f"{len(self.roots)} roots requested, only the first {MAX_ROOTS} are rendered")
        return result

    def scaled_size(self) -> Size:
        """Resolution the frame is computed at, honouring scale-down."""
        if not self.scale_down:
            return self.result_size
        width, height = self.result_size
        return (max(MIN_DIMENSION, int(width * self.scale_down_factor)),
                max(MIN_DIMENSION, int(height * self.scale_down_factor)))

    # Root list editing

    def add_root(self, value: complex = 0j, color: Optional[ColorRGB] = None) -> Root:
        """Append a root; without a color the next palette color is used."""
        root = Root(complex(value), color if color is not None else palette_color(len(self.roots)))
        self.roots.append(root)
        return root

    def remove_root(self, index: int = -1) -> Root:
        """Remove the root at ``index`` (last by default); later roots shift down."""
        return self.roots.pop(index)

    def move_root(self, index: int, value: complex) -> None:
        self.roots[index].value = complex(value)

    def mirror_root_x(self, index: int) -> Root:
        """Append the mirror image of a root across the real axis."""
        value = self.roots[index].value
        return self.add_root(value.conjugate())

    def mirror_root_y(self, index: int) -> Root:
        """Append the mirror image of a root across the imaginary axis."""
        value = self.roots[index].value
        return self.add_root(complex(-value.real, value.imag))

    def reset(self) -> None:
        """Redistribute the current number of roots evenly and reset the view."""
        self.roots = equidistant_roots(len(self.roots))
        self.viewport.reset(self.result_size)

    def resize(self, size: Size) -> None:
        """Change the output resolution, adapting the viewport to keep its scale."""
        size = (max(MIN_DIMENSION, int(size[0])), max(MIN_DIMENSION, int(size[1])))
        self.viewport.resize(self.result_size, size)
        self.result_size = size

    def to_dict(self) -> Dict[str, Any]:
        """Summary suitable for logging."""
        return {
            'result_size': self.result_size,
            'roots': [root.value for root in self.roots],
            'max_iterations': self.max_iterations,
            'damping': self.damping,
            'scale_down': self.scale_down,
            'bounds': self.viewport.bounds,
            'zoom_factor': self.viewport.zoom_factor,
            'processor': self.processor.value,
            'orbit_mode': self.orbit_mode,
            'benchmark': self.benchmark,
        }


def root_at_pixel(params: RenderParameters, pixel: Pixel, radius: float = 8.0) -> Optional[int]:
    """
    Index of the root drawn under ``pixel``, for picking roots with the mouse.

    Args:
        params: Parameters whose roots and viewport are used
        pixel: Pixel in ``params.result_size`` coordinates
        radius: Hit radius in pixels

    Returns:
        Index of the nearest root within ``radius``, or None
    """
    best, best_distance = None, radius
    for i, root in enumerate(params.roots):
        rx, ry = complex_to_pixel(root.value, params.result_size, params.viewport)
        distance = ((rx - pixel[0]) ** 2 + (ry - pixel[1]) ** 2) ** 0.5
        if distance <= best_distance and (best is None or distance < best_distance):
            best, best_distance = i, distance
    return best
