"""
Concurrent Newton fractal rendering engine.

This library renders Newton fractals of polynomials given by their roots:
every pixel of a viewport on the complex plane is iterated with a damped
Newton step and colored by the root it converges to, darkened by the number
of steps it took.

Key Features:
- Numba-compiled per-pixel kernels, one scanline per unit of work
- Thread-pool frame computation with a single barrier per frame
- Latest-wins request scheduling for interactive editing
- Orbit tracing and single-frame benchmarking
- JSON parameter records and root presets

Example usage:
    >>> from newton_fractal import FractalRenderer, RenderParameters
    >>> renderer = FractalRenderer()
    >>> frame = renderer.render(RenderParameters(result_size=(400, 400)))
    >>> frame.image.shape
    (400, 400, 3)
"""

__version__ = "1.0.0"
__author__ = "Newton Fractal Team"

from newton_fractal.core.roots import Root, equidistant_roots, get_preset, ROOT_PRESETS
from newton_fractal.core.viewport import Viewport
from newton_fractal.core.parameters import RenderParameters, Processor, root_at_pixel
from newton_fractal.core.newton import iterate_point, NewtonOutcome, NewtonState
from newton_fractal.rendering.coloring import ColorRGB
from newton_fractal.io.config import ConfigManager, ConfigError

# Main API classes
from newton_fractal.api import FractalRenderer, FrameResult, OrbitResult, BenchmarkResult
from newton_fractal.scheduler import RenderScheduler, RenderConsumer

__all__ = [
    "FractalRenderer",
    "RenderScheduler",
    "RenderConsumer",
    "RenderParameters",
    "Processor",
    "FrameResult",
    "OrbitResult",
    "BenchmarkResult",
    "Root",
    "ColorRGB",
    "Viewport",
    "NewtonOutcome",
    "NewtonState",
    "iterate_point",
    "equidistant_roots",
    "get_preset",
    "root_at_pixel",
    "ROOT_PRESETS",
    "ConfigManager",
    "ConfigError",
]
