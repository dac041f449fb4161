"""
Numba JIT compilation backend for Newton fractal computation.

This module provides the compiled per-pixel Newton iteration and the
scanline kernel that fills one image row. Kernels are compiled with
``nogil=True`` so that scanlines can run truly in parallel on a thread pool,
and they allocate nothing inside the pixel loop.
"""

import math
import sys
import logging

import numba
import numpy as np
from numba import njit

from ..core.complex_plane import interpolate
from ..core.roots import evaluate_values, derivative_values, STEP
from ..rendering.coloring import darken_channels, darken_factor

logger = logging.getLogger(__name__)

# Fixed-point and root-match tolerance, in plane units
EPS = 1e-6

# Derivatives smaller than this are treated as non-convergence
DERIVATIVE_EPS = sys.float_info.epsilon

# Root index stored for pixels that did not converge
NO_ROOT = -1


@njit(cache=True, nogil=True)
def newton_step(z, values, damping, step):
    """
    One damped Newton step.

    Returns:
        Tuple of (next z, ok); ok is False when the derivative is degenerate
        or the iterate is no longer finite, in which case z is returned as is
    """
    dz = derivative_values(z, values, step)
    if abs(dz) < DERIVATIVE_EPS:
        return z, False
    z_new = z - damping * evaluate_values(z, values) / dz
    if not (math.isfinite(z_new.real) and math.isfinite(z_new.imag)):
        return z, False
    return z_new, True


@njit(cache=True, nogil=True)
def newton_iterate(z, values, damping, max_iter, step):
    """
    Iterate a single point until it settles or the budget runs out.

    Args:
        z: Starting point
        values: Root values (complex128 array)
        damping: Complex damping factor
        max_iter: Iteration budget
        step: Finite difference step

    Returns:
        Tuple of (root index or NO_ROOT, iteration count)
    """
    if damping == 0:
        # Every step is zero, the iteration stalls wherever it starts
        return NO_ROOT, max_iter

    for i in range(max_iter):
        z_new, ok = newton_step(z, values, damping, step)
        if not ok:
            return NO_ROOT, i

        if abs(z_new - z) < EPS:
            # Fixed point reached; first root within tolerance wins
            for r in range(values.shape[0]):
                if abs(z_new - values[r]) < EPS:
                    return r, i
            return NO_ROOT, i

        z = z_new

    return NO_ROOT, max_iter


@njit(cache=True, nogil=True)
def iterate_scanline(rgb_row, index_row, iter_row, zy, left, right,
                     values, colors, background, damping, max_iter, step):
    """
    Compute and color every pixel of one scanline in place.

    Args:
        rgb_row: (width, 3) uint8 output row
        index_row: (width,) int16 root index output row
        iter_row: (width,) int32 iteration count output row
        zy: Imaginary coordinate of this row
        left, right: Real bounds of the viewport
        values: Root values
        colors: (n, 3) int64 root colors
        background: (3,) int64 background color
        damping: Complex damping factor
        max_iter: Iteration budget
        step: Finite difference step
    """
    width = rgb_row.shape[0]
    for x in range(width):
        zx = interpolate(x, left, right, width)
        r, n = newton_iterate(complex(zx, zy), values, damping, max_iter, step)
        index_row[x] = r
        iter_row[x] = n

        if r >= 0:
            cr, cg, cb = darken_channels(colors[r, 0], colors[r, 1], colors[r, 2], darken_factor(n))
            rgb_row[x, 0] = cr
            rgb_row[x, 1] = cg
            rgb_row[x, 2] = cb
        else:
            rgb_row[x, 0] = background[0]
            rgb_row[x, 1] = background[1]
            rgb_row[x, 2] = background[2]


@njit(cache=True, nogil=True)
def orbit_kernel(z, values, damping, max_iter, step, out):
    """
    Record the Newton orbit of ``z`` into ``out``.

    ``out`` must hold at least ``max_iter + 1`` points. The starting point is
    always recorded; a step shorter than EPS ends the orbit without being
    recorded, as does a degenerate derivative. Zero damping never moves the
    point, so its orbit is the start alone.

    Returns:
        Number of points written
    """
    out[0] = z
    count = 1
    if damping == 0:
        return count

    for _ in range(max_iter):
        z_new, ok = newton_step(z, values, damping, step)
        if not ok or abs(z_new - z) < EPS:
            break
        out[count] = z_new
        count += 1
        z = z_new
    return count


def warm_up() -> None:
    """Compile the kernels on a tiny input so the first frame is not charged for it."""
    values = np.array([1 + 0j, -1 + 0j], dtype=np.complex128)
    colors = np.zeros((2, 3), dtype=np.int64)
    background = np.zeros(3, dtype=np.int64)
    rgb = np.zeros((2, 3), dtype=np.uint8)
    index = np.zeros(2, dtype=np.int16)
    iters = np.zeros(2, dtype=np.int32)
    iterate_scanline(rgb, index, iters, 0.0, -1.0, 1.0, values, colors, background,
                     1 + 0j, 2, STEP)
    orbit_kernel(0.5 + 0j, values, 1 + 0j, 2, STEP, np.zeros(3, dtype=np.complex128))
    logger.debug("Numba kernels compiled")


def numba_version() -> str:
    return numba.__version__
