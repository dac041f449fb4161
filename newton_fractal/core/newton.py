"""
Per-point Newton iteration with explicit outcome classification.

The compiled kernels in :mod:`newton_fractal.acceleration.numba_backend` do
the bulk work; this module exposes the same computation one point at a time
as an ``ITERATING -> CONVERGED | EXHAUSTED`` state machine, together with the
coloring rule applied to the outcome.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence
import logging

from .complex_plane import Pixel, pixel_to_complex
from .roots import Root, STEP, root_values
from ..acceleration.numba_backend import newton_iterate, NO_ROOT
from ..rendering.coloring import ColorRGB, BACKGROUND, DARKEN_BASE, DARKEN_STEP

logger = logging.getLogger(__name__)


class NewtonState(Enum):
    ITERATING = 'iterating'
    CONVERGED = 'converged'
    EXHAUSTED = 'exhausted'


@dataclass(frozen=True)
class NewtonOutcome:
    """Terminal state of one point's iteration."""
    state: NewtonState
    count: int
    root_index: int = NO_ROOT

    @property
    def converged(self) -> bool:
        return self.state is NewtonState.CONVERGED

    def color(self, roots: Sequence[Root]) -> ColorRGB:
        """
        Color for this outcome.

        Converged points get their root's color darkened by iteration count;
        everything else gets the background color.
        """
        if not self.converged:
            return BACKGROUND
        return roots[self.root_index].color.darker(DARKEN_BASE + DARKEN_STEP * self.count)


def iterate_point(z: complex, roots: Sequence[Root], damping: complex = 1 + 0j,
                  max_iterations: int = 500) -> NewtonOutcome:
    """
    Run the Newton iteration for a single plane point.

    Args:
        z: Starting point
        roots: Polynomial roots, scanned in index order on convergence
        damping: Complex damping factor applied to every step
        max_iterations: Iteration budget

    Returns:
        NewtonOutcome with CONVERGED or EXHAUSTED state
    """
    index, count = newton_iterate(complex(z), root_values(roots), complex(damping),
                                  int(max_iterations), STEP)
    if index == NO_ROOT:
        return NewtonOutcome(NewtonState.EXHAUSTED, int(count))
    return NewtonOutcome(NewtonState.CONVERGED, int(count), int(index))


def classify_pixel(pixel: Pixel, params) -> NewtonOutcome:
    """Outcome for one pixel of the frame described by ``params``."""
    z = pixel_to_complex(pixel, params.scaled_size(), params.viewport)
    return iterate_point(z, params.roots, params.damping, params.max_iterations)
