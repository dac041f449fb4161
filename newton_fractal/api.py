"""
Main API classes for Newton fractal generation.

This module provides the synchronous rendering engine and the result types
it produces. :class:`FractalRenderer` computes exactly what it is asked for
on the calling thread; :class:`newton_fractal.scheduler.RenderScheduler`
wraps it with a worker thread and latest-wins request coalescing for
interactive use.
"""

from dataclasses import dataclass
from typing import List, Optional
import logging
import time

import numpy as np

from .core.complex_plane import Pixel
from .core.orbit import trace_orbit
from .core.parameters import RenderParameters
from .acceleration.numba_backend import warm_up
from .acceleration.parallel import ParallelAccelerator

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """A completed frame."""
    image: np.ndarray
    root_map: np.ndarray
    iterations: np.ndarray
    fps: float
    parameters: RenderParameters

    @property
    def size(self):
        """(width, height) of the computed image."""
        return self.image.shape[1], self.image.shape[0]


@dataclass
class OrbitResult:
    """Pixel path of an orbit trace."""
    points: List[Pixel]
    fps: float


@dataclass
class BenchmarkResult:
    """Timing of a single full-resolution frame."""
    image: np.ndarray
    elapsed_ms: float
    pixel_count: int

    @property
    def pixels_per_second(self) -> float:
        return self.pixel_count / (self.elapsed_ms / 1000.0)


def _rate(elapsed: float) -> float:
    """Frames per second for a computation that took ``elapsed`` seconds."""
    return 1.0 / max(elapsed, 1e-9)


class FractalRenderer:
    """Synchronous Newton fractal rendering engine."""

    def __init__(self, num_workers: Optional[int] = None):
        """
        Initialize fractal renderer.

        Args:
            num_workers: Scanline worker threads (None for CPU count)
        """
        self.accelerator = ParallelAccelerator(num_workers)
        warm_up()
        logger.info(f"FractalRenderer initialized with {self.accelerator.num_workers} workers")

    def render(self, params: RenderParameters) -> FrameResult:
        """
        Render one frame.

        Args:
            params: Parameter snapshot, not mutated

        Returns:
            FrameResult with the achieved frame rate
        """
        start_time = time.perf_counter()
        frame = self.accelerator.compute_frame(params)
        elapsed = time.perf_counter() - start_time

        width, height = frame.image.shape[1], frame.image.shape[0]
        logger.debug(f"Frame complete: {width}x{height} in {elapsed * 1000:.1f}ms")
        return FrameResult(frame.image, frame.root_map, frame.iterations, _rate(elapsed), params)

    def trace_orbit(self, params: RenderParameters, start: Optional[Pixel] = None) -> OrbitResult:
        """Trace the orbit of ``start`` (or ``params.orbit_start``)."""
        start_time = time.perf_counter()
        points = trace_orbit(params, start)
        return OrbitResult(points, _rate(time.perf_counter() - start_time))

    def benchmark(self, params: RenderParameters) -> BenchmarkResult:
        """
        Time exactly one full-resolution frame.

        Scale-down is forced off; there is no warm-up frame and no averaging.
        """
        params = params.copy()
        params.scale_down = False
        width, height = params.result_size

        logger.info(f"Starting benchmark: {width}x{height}, {params.max_iterations} iterations")
        start_time = time.perf_counter()
        frame = self.accelerator.compute_frame(params)
        elapsed_ms = (time.perf_counter() - start_time) * 1000.0

        result = BenchmarkResult(frame.image, elapsed_ms, width * height)
        logger.info(f"Benchmark complete: {elapsed_ms:.1f}ms, "
                    f"{result.pixels_per_second:,.0f} pixels/sec")
        return result

    def shutdown(self) -> None:
        self.accelerator.shutdown()
