"""
Polynomial roots and evaluation.

The target polynomial is represented implicitly by its roots,
p(z) = (z - r0)(z - r1)...(z - rn). Its derivative is approximated by a
forward difference with a fixed, non-infinitesimal complex step; the
convergence behaviour of the renderer depends on that step, so it is a
module constant rather than a parameter.
"""

import cmath
import re
from dataclasses import dataclass
from typing import Dict, List, Sequence
import logging

import numpy as np
from numba import njit

from ..rendering.coloring import ColorRGB, palette_color, ROOT_PALETTE

logger = logging.getLogger(__name__)

# Maximum number of roots; one per palette color
MAX_ROOTS = len(ROOT_PALETTE)
DEFAULT_ROOT_COUNT = 3

# Finite difference step for the derivative
HS = 1e-4
STEP = complex(HS, HS)

_ROOT_TEXT = re.compile(r'^\s*([^,:]+),([^,:]+?)\s*:\s*(#[0-9a-fA-F]{6})\s*$')


@dataclass
class Root:
    """A polynomial root and the color of its basin."""
    value: complex
    color: ColorRGB

    def copy(self) -> 'Root':
        return Root(self.value, self.color)


@njit(cache=True, nogil=True)
def evaluate_values(z, values):
    """Product of (z - r) over all root values."""
    result = 1.0 + 0.0j
    for i in range(values.shape[0]):
        result *= z - values[i]
    return result


@njit(cache=True, nogil=True)
def derivative_values(z, values, step):
    """Forward-difference derivative of the root polynomial."""
    return (evaluate_values(z + step, values) - evaluate_values(z, values)) / step


def root_values(roots: Sequence[Root]) -> np.ndarray:
    """Root values as a complex128 array for the compiled kernels."""
    return np.array([root.value for root in roots], dtype=np.complex128)


def evaluate(z: complex, roots: Sequence[Root]) -> complex:
    """
    Evaluate the polynomial defined by ``roots`` at ``z``.

    An empty root list is the constant polynomial 1.
    """
    return complex(evaluate_values(complex(z), root_values(roots)))


def derivative_approx(z: complex, roots: Sequence[Root], step: complex = STEP) -> complex:
    """
    Approximate the polynomial derivative at ``z``.

    Args:
        z: Evaluation point
        roots: Polynomial roots
        step: Complex difference step

    Returns:
        (p(z + step) - p(z)) / step
    """
    return complex(derivative_values(complex(z), root_values(roots), complex(step)))


def equidistant_roots(count: int, radius: float = 1.0) -> List[Root]:
    """
    Place ``count`` roots evenly on a circle, colored from the default palette.

    Args:
        count: Number of roots (clamped to ``MAX_ROOTS``)
        radius: Circle radius

    Returns:
        List of roots, the first one on the positive real axis
    """
    count = max(0, min(count, MAX_ROOTS))
    roots = []
    for i in range(count):
        value = cmath.rect(radius, 2.0 * cmath.pi * i / count)
        # Snap tiny components so that e.g. the 4th roots of unity are exact
        value = complex(round(value.real, 12), round(value.imag, 12))
        roots.append(Root(value, palette_color(i)))
    return roots


def parse_root(text: str) -> Root:
    """
    Parse the persisted root form ``"<real>,<imag> : #RRGGBB"``.

    Raises:
        ValueError: If the text is not in that form
    """
    match = _ROOT_TEXT.match(text)
    if match is None:
        raise ValueError(f"Invalid root '{text}', expected '<real>,<imag> : #RRGGBB'")
    try:
        value = complex(float(match.group(1)), float(match.group(2)))
    except ValueError:
        raise ValueError(f"Invalid root value in '{text}'") from None
    return Root(value, ColorRGB.from_hex(match.group(3)))


def format_root(root: Root) -> str:
    """Format a root as ``"<real>,<imag> : #RRGGBB"``."""
    return f"{root.value.real!r},{root.value.imag!r} : {root.color.to_hex()}"


def _preset(values: Sequence[complex]) -> List[Root]:
    return [Root(complex(v), palette_color(i)) for i, v in enumerate(values)]


# Predefined root configurations
ROOT_PRESETS: Dict[str, List[Root]] = {
    'unity-3': equidistant_roots(3),
    'unity-4': equidistant_roots(4),
    'unity-5': equidistant_roots(5),
    'unity-6': equidistant_roots(6),
    'real-3': _preset([-1, 1j, 1]),
    'cross': _preset([1, 1j, -1, -1j]),
}


def get_preset(name: str) -> List[Root]:
    """Return a fresh copy of a named root preset."""
    roots = ROOT_PRESETS.get(name.lower())
    if roots is None:
        available = ', '.join(ROOT_PRESETS.keys())
        raise ValueError(f"Unknown root preset '{name}'. Available: {available}")
    return [root.copy() for root in roots]
