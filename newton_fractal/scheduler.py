"""
Interactive render scheduling with latest-wins request coalescing.

The interactive layer calls :meth:`RenderScheduler.request_render` whenever
parameters change. Requests land in a single-slot mailbox guarded by a
condition variable: a newer request replaces an older one that has not been
picked up yet, so bursts of edits cost one frame, not one frame per edit.
A single long-lived worker thread takes the latest request, computes a full
frame and hands the result to the consumer. In-flight frames are never
cancelled; they are only superseded for the next round.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional
import logging

import numpy as np

from .api import FractalRenderer, FrameResult, BenchmarkResult
from .core.complex_plane import Pixel
from .core.parameters import RenderParameters

logger = logging.getLogger(__name__)


class RenderConsumer:
    """
    Receiver of scheduler output.

    Events are delivered on the scheduler's worker thread (or on the caller's
    thread for :meth:`RenderScheduler.request_orbit` and
    :meth:`RenderScheduler.run_benchmark`). Override the ones you need.
    Callbacks running on the worker thread must not call
    :meth:`RenderScheduler.run_benchmark`.
    """

    def frame_ready(self, image: np.ndarray, fps: float) -> None:
        pass

    def orbit_ready(self, points: List[Pixel], fps: float) -> None:
        pass

    def benchmark_done(self, image: np.ndarray, elapsed_ms: float, pixel_count: int) -> None:
        pass

    def frame_failed(self, error: BaseException) -> None:
        pass


class RenderScheduler:
    """Long-lived render worker fed by a latest-wins mailbox."""

    def __init__(self, consumer: Optional[RenderConsumer] = None,
                 renderer: Optional[FractalRenderer] = None,
                 num_workers: Optional[int] = None):
        """
        Initialize the scheduler.

        Args:
            consumer: Receiver of frames and other results
            renderer: Engine to use; a new one is created and owned when None
            num_workers: Scanline worker threads for a new engine
        """
        self.consumer = consumer or RenderConsumer()
        self._owns_renderer = renderer is None
        self.renderer = renderer or FractalRenderer(num_workers)

        self._condition = threading.Condition()
        self._pending: Optional[RenderParameters] = None
        self._busy = False
        self._abort = False
        self._benchmarks = 0
        self._thread: Optional[threading.Thread] = None

        self.requests_received = 0
        self.frames_emitted = 0
        self.last_frame: Optional[FrameResult] = None

    def __enter__(self) -> 'RenderScheduler':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def request_render(self, params: RenderParameters) -> None:
        """
        Ask for a frame computed from ``params``.

        The parameters are copied, so the caller may keep editing its object.
        Any earlier request that has not started yet is dropped. Never blocks
        beyond a short lock.
        """
        snapshot = params.clamped()
        with self._condition:
            if self._abort:
                logger.warning("Render requested after shutdown, ignoring")
                return
            if self._benchmarks:
                logger.debug("Render requested during benchmark, ignoring")
                return

            if self._pending is not None:
                logger.debug("Superseding pending render request")
            self._pending = snapshot
            self.requests_received += 1

            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name='newton-render', daemon=True)
                self._thread.start()
            self._condition.notify_all()

    def request_orbit(self, params: RenderParameters, start: Optional[Pixel] = None) -> List[Pixel]:
        """
        Trace an orbit on the calling thread and report it to the consumer.

        Returns:
            The orbit as pixel positions
        """
        result = self.renderer.trace_orbit(params.clamped(), start)
        self._emit('orbit_ready', result.points, result.fps)
        return result.points

    def run_benchmark(self, params: RenderParameters) -> BenchmarkResult:
        """
        Time one full-resolution frame on the calling thread.

        Waits for an in-flight frame to finish first; render requests arriving
        while the benchmark runs are ignored.

        Raises:
            RuntimeError: If called from a consumer callback on the worker thread
        """
        if self._thread is not None and threading.current_thread() is self._thread:
            raise RuntimeError("run_benchmark cannot be called from a consumer callback")

        snapshot = params.clamped()
        with self._condition:
            self._benchmarks += 1
            self._condition.wait_for(lambda: not self._busy)
        try:
            result = self.renderer.benchmark(snapshot)
        finally:
            with self._condition:
                self._benchmarks -= 1
                self._condition.notify_all()

        self._emit('benchmark_done', result.image, result.elapsed_ms, result.pixel_count)
        return result

    @contextmanager
    def deferred(self) -> Iterator[None]:
        """
        Hold back the worker while several requests are issued.

        Only the last request made inside the block is rendered.
        """
        with self._condition:
            yield

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no request is pending and no frame is in flight.

        Returns:
            False if the timeout expired first
        """
        with self._condition:
            return self._condition.wait_for(
                lambda: self._abort or (self._pending is None and not self._busy), timeout)

    def shutdown(self) -> None:
        """
        Stop the worker and wait for it to exit.

        A frame in flight is allowed to finish but is not emitted. Safe to call
        from any thread, more than once.
        """
        with self._condition:
            already = self._abort
            self._abort = True
            self._pending = None
            self._condition.notify_all()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        if not already:
            if self._owns_renderer:
                self.renderer.shutdown()
            logger.info(f"Render scheduler stopped after {self.frames_emitted} frames")

    def _run(self) -> None:
        """Worker loop: wait for work, snapshot, compute, emit or discard."""
        logger.debug("Render worker started")
        while True:
            with self._condition:
                while not self._abort and (self._pending is None or self._benchmarks):
                    self._condition.wait()
                if self._abort:
                    break
                params = self._pending
                self._pending = None
                self._busy = True

            try:
                self._process(params)
            finally:
                with self._condition:
                    self._busy = False
                    self._condition.notify_all()
        logger.debug("Render worker exiting")

    def _process(self, params: RenderParameters) -> None:
        """Compute one request and hand its result to the consumer."""
        try:
            if params.benchmark:
                with self._condition:
                    self._benchmarks += 1
                try:
                    bench = self.renderer.benchmark(params)
                finally:
                    with self._condition:
                        self._benchmarks -= 1
                        self._condition.notify_all()
                if self._discarding():
                    return
                self._emit('benchmark_done', bench.image, bench.elapsed_ms, bench.pixel_count)

            elif params.orbit_mode:
                orbit = self.renderer.trace_orbit(params)
                if self._discarding():
                    return
                self._emit('orbit_ready', orbit.points, orbit.fps)

            else:
                frame = self.renderer.render(params)
                if self._discarding():
                    return
                self.frames_emitted += 1
                self.last_frame = frame
                self._emit('frame_ready', frame.image, frame.fps)

        except MemoryError as e:
            logger.error(f"Frame aborted, out of memory: {e}")
            self._emit('frame_failed', e)
        except Exception as e:
            logger.exception(f"Frame computation failed: {e}")
            self._emit('frame_failed', e)

    def _discarding(self) -> bool:
        if self._abort:
            logger.debug("Shutdown requested, discarding finished result")
            return True
        return False

    def _emit(self, event: str, *args) -> None:
        try:
            getattr(self.consumer, event)(*args)
        except Exception as e:
            logger.warning(f"Consumer {event} callback failed: {e}")
