"""
Orbit tracing: the path a single starting pixel takes under Newton iteration.
"""

from typing import List, Optional
import logging

import numpy as np

from .complex_plane import Pixel, pixel_to_complex, complex_to_pixel
from .parameters import RenderParameters
from .roots import STEP, root_values
from ..acceleration.numba_backend import orbit_kernel

logger = logging.getLogger(__name__)


def trace_orbit_points(params: RenderParameters, start: Optional[Pixel] = None) -> List[complex]:
    """
    Visited plane points, starting with the point under ``start``.

    Args:
        params: Parameter snapshot; ``orbit_start`` is used when ``start`` is None
        start: Starting pixel in ``params.result_size`` coordinates

    Returns:
        Ordered list of plane points, at most ``max_iterations + 1`` long
    """
    if start is None:
        start = params.orbit_start
    size = params.result_size
    z = pixel_to_complex(start, size, params.viewport)

    out = np.empty(params.max_iterations + 1, dtype=np.complex128)
    count = orbit_kernel(z, root_values(params.roots), complex(params.damping),
                         params.max_iterations, STEP, out)
    return [complex(p) for p in out[:count]]


def trace_orbit(params: RenderParameters, start: Optional[Pixel] = None) -> List[Pixel]:
    """
    Orbit of a starting pixel, projected back to pixel space.

    The sequence is finite and recomputed from scratch on every call; it
    ends early once a step is shorter than the convergence tolerance.
    """
    size = params.result_size
    points = [complex_to_pixel(z, size, params.viewport)
              for z in trace_orbit_points(params, start)]
    logger.debug(f"Orbit from {start if start is not None else params.orbit_start}: {len(points)} points")
    return points
