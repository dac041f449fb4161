"""
Scanline-parallel frame computation.

A frame is split into one independent unit per scanline. Each unit carries
its own imaginary coordinate, a reference to the read-only kernel inputs of
the frame and views onto its output rows. Units run on a thread pool (the
compiled kernels release the GIL) and are joined with a single barrier per
frame, so a frame is either complete or not produced at all.
"""

import os
import time
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..core.complex_plane import ComplexPlane
from ..core.parameters import RenderParameters, Processor
from ..core.roots import STEP, root_values
from ..rendering.coloring import BACKGROUND, color_table
from .numba_backend import iterate_scanline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameInputs:
    """Kernel inputs shared read-only by every scanline of a frame."""
    left: float
    right: float
    values: np.ndarray
    colors: np.ndarray
    background: np.ndarray
    damping: complex
    max_iterations: int

    @classmethod
    def from_parameters(cls, params: RenderParameters) -> 'FrameInputs':
        return cls(
            left=params.viewport.left,
            right=params.viewport.right,
            values=root_values(params.roots),
            colors=color_table([root.color for root in params.roots]),
            background=np.array(BACKGROUND.to_tuple(), dtype=np.int64),
            damping=complex(params.damping),
            max_iterations=params.max_iterations,
        )


@dataclass
class FrameData:
    """Output buffers of one frame."""
    image: np.ndarray       # (height, width, 3) uint8
    root_map: np.ndarray    # (height, width) int16, -1 where nothing converged
    iterations: np.ndarray  # (height, width) int32

    @classmethod
    def allocate(cls, width: int, height: int) -> 'FrameData':
        return cls(
            image=np.empty((height, width, 3), dtype=np.uint8),
            root_map=np.empty((height, width), dtype=np.int16),
            iterations=np.empty((height, width), dtype=np.int32),
        )


@dataclass
class ImageLine:
    """A single scanline unit of work."""
    index: int
    zy: float
    inputs: FrameInputs
    rgb: np.ndarray
    root_index: np.ndarray
    iterations: np.ndarray


def create_scanlines(plane: ComplexPlane, inputs: FrameInputs, frame: FrameData) -> List[ImageLine]:
    """
    Split a frame into scanline units.

    Args:
        plane: Sampled plane of the frame
        inputs: Shared kernel inputs
        frame: Output buffers; every unit gets views onto its own row

    Returns:
        One ImageLine per image row, top to bottom
    """
    return [
        ImageLine(
            index=y,
            zy=plane.row_coordinate(y),
            inputs=inputs,
            rgb=frame.image[y],
            root_index=frame.root_map[y],
            iterations=frame.iterations[y],
        )
        for y in range(plane.height)
    ]


def process_scanline(line: ImageLine) -> int:
    """Compute one scanline in place and return its row index."""
    inputs = line.inputs
    iterate_scanline(line.rgb, line.root_index, line.iterations, line.zy,
                     inputs.left, inputs.right, inputs.values, inputs.colors,
                     inputs.background, inputs.damping, inputs.max_iterations, STEP)
    return line.index


class ParallelAccelerator:
    """Thread-pool backed scanline renderer."""

    def __init__(self, num_workers: Optional[int] = None):
        """
        Initialize the accelerator.

        Args:
            num_workers: Number of worker threads (None for CPU count)
        """
        if num_workers is None:
            self.num_workers = os.cpu_count() or 1
        else:
            self.num_workers = max(1, num_workers)

        self._executor: Optional[ThreadPoolExecutor] = None
        self._gpu_notice_logged = False
        logger.info(f"Parallel accelerator: {self.num_workers} worker threads")

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.num_workers,
                                                thread_name_prefix='newton-scanline')
        return self._executor

    def compute_frame(self, params: RenderParameters) -> FrameData:
        """
        Compute a complete frame for a parameter snapshot.

        Args:
            params: Snapshot; must not be mutated while the frame runs

        Returns:
            Fully populated frame buffers

        Raises:
            MemoryError: If the frame buffers cannot be allocated
        """
        start_time = time.perf_counter()
        width, height = params.scaled_size()

        plane = ComplexPlane(params.viewport, width, height)
        inputs = FrameInputs.from_parameters(params)
        frame = FrameData.allocate(width, height)
        lines = create_scanlines(plane, inputs, frame)

        processor = params.processor
        if processor is Processor.GPU and not self._gpu_notice_logged:
            logger.info("GPU processor requested, rendering on the CPU path")
            self._gpu_notice_logged = True

        if processor is Processor.CPU_SINGLE or self.num_workers == 1:
            for line in lines:
                process_scanline(line)
        else:
            executor = self._get_executor()
            futures = [executor.submit(process_scanline, line) for line in lines]
            # Barrier: every scanline finishes before the frame is used
            wait(futures)
            for future in futures:
                future.result()

        elapsed = time.perf_counter() - start_time
        logger.debug(f"Parallel rendering complete: {width}x{height} on {processor.value} in {elapsed:.3f}s")
        return frame

    def shutdown(self) -> None:
        """Stop the worker threads."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def get_optimal_worker_count() -> int:
    """Number of scanline workers matching the available hardware parallelism."""
    return os.cpu_count() or 1
