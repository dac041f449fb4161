"""
Command-line interface for Newton fractal rendering.

This module exposes the rendering engine, the interactive scheduler, orbit
tracing and benchmarking as click commands.
"""

import click
import sys
import os
import platform
from typing import List, Optional, Tuple
import logging

import numpy as np

from .. import __version__
from ..scheduler import RenderScheduler, RenderConsumer
from ..core.parameters import RenderParameters, Processor
from ..core.roots import ROOT_PRESETS, format_root
from ..io.config import ConfigManager, load_config_from_args, EnvironmentConfig
from ..rendering.coloring import root_coverage
from ..acceleration.numba_backend import numba_version

logger = logging.getLogger(__name__)


class CollectingConsumer(RenderConsumer):
    """Keeps everything the scheduler reports for the CLI to print."""

    def __init__(self):
        self.frames: List[Tuple[np.ndarray, float]] = []
        self.errors: List[BaseException] = []

    def frame_ready(self, image, fps):
        self.frames.append((image, fps))

    def frame_failed(self, error):
        self.errors.append(error)


def _parse_pair(text: str, kind=float, separator: str = ','):
    parts = [kind(x.strip()) for x in text.split(separator)]
    if len(parts) != 2:
        raise ValueError(f"expected two values separated by '{separator}', got '{text}'")
    return parts[0], parts[1]


def _load_parameters(ctx) -> RenderParameters:
    return load_config_from_args(ctx.obj.get('config_file'), ctx.obj.get('preset'))


def _set_size(params: RenderParameters, width: Optional[int], height: Optional[int]) -> None:
    """Change the output resolution, keeping the visible region."""
    params.result_size = (width or params.result_size[0], height or params.result_size[1])
    params.validate()


def _report_error(ctx, e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='JSON parameter record')
@click.option('--preset', help='Root preset to use')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, preset, verbose, quiet):
    """
    Newton Fractal - concurrent Newton fractal rendering engine.

    Renders the basins of attraction of Newton's method for a polynomial
    given by its roots, with orbit tracing and benchmarking.
    """
    env = EnvironmentConfig.from_environ()

    # Setup logging
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=env.log_level or logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Newton Fractal v{__version__}")
        click.echo(f"Python: {sys.version}")
        click.echo(f"Numba: {numba_version()}")

        if ctx.invoked_subcommand is None:
            sys.exit(0)

    # Store global options in context
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['preset'] = preset
    ctx.obj['verbose'] = verbose
    ctx.obj['workers'] = env.workers


@main.command()
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.option('--bounds', type=str, help='Plane bounds: "left,right,top,bottom"')
@click.option('--max-iter', type=int, help='Maximum iterations')
@click.option('--damping', type=str, help='Damping factor "real,imag"')
@click.option('--processor', type=click.Choice([p.value for p in Processor]), help='Processor')
@click.option('--workers', type=int, help='Scanline worker threads')
@click.option('--scale-down', is_flag=True, help='Render at the reduced interactive resolution')
@click.pass_context
def render(ctx, width, height, bounds, max_iter, damping, processor, workers, scale_down):
    """
    Render a single frame and report its statistics.
    """
    try:
        params = _load_parameters(ctx)

        # Apply command-line overrides
        _set_size(params, width, height)
        if bounds:
            values = [float(x.strip()) for x in bounds.split(',')]
            if len(values) != 4:
                raise ValueError("Invalid bounds format. Use 'left,right,top,bottom'")
            params.viewport.set(*values)
        if max_iter is not None:
            params.max_iterations = max_iter
        if damping:
            params.damping = complex(*_parse_pair(damping))
        if processor:
            params.processor = Processor.parse(processor)
        if scale_down:
            params.scale_down = True

        consumer = CollectingConsumer()
        w, h = params.result_size
        click.echo(f"Rendering {w}x{h} Newton fractal with {len(params.roots)} roots...")

        with RenderScheduler(consumer, num_workers=workers or ctx.obj.get('workers')) as scheduler:
            scheduler.request_render(params)
            scheduler.wait_until_idle()
            frame = scheduler.last_frame

        if consumer.errors:
            raise consumer.errors[0]

        width, height = frame.size
        click.echo(f"Render complete: {width}x{height} at {frame.fps:.2f} fps")

        coverage = root_coverage(frame.root_map, len(frame.parameters.roots))
        click.echo("Coverage:")
        for root, fraction in zip(frame.parameters.roots, coverage):
            click.echo(f"  {format_root(root)}  {fraction * 100:5.1f}%")
        click.echo(f"  background  {coverage[-1] * 100:5.1f}%")

    except Exception as e:
        _report_error(ctx, e)


@main.command()
@click.option('--start', type=str, help='Starting pixel "x,y"')
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.pass_context
def orbit(ctx, start, width, height):
    """
    Print the pixel path of one starting point under Newton iteration.
    """
    try:
        params = _load_parameters(ctx)
        _set_size(params, width, height)
        if start:
            params.orbit_start = _parse_pair(start, int)

        with RenderScheduler(num_workers=1) as scheduler:
            points = scheduler.request_orbit(params)

        click.echo(f"Orbit from {params.orbit_start}: {len(points)} points")
        for x, y in points:
            click.echo(f"  {x},{y}")

    except Exception as e:
        _report_error(ctx, e)


@main.command()
@click.option('--size', type=str, default='512x512', help='Benchmark image size (widthxheight)')
@click.option('--iterations', type=int, help='Maximum iterations for benchmark')
@click.option('--workers', type=int, help='Scanline worker threads')
@click.pass_context
def benchmark(ctx, size, iterations, workers):
    """
    Time one full-resolution frame.
    """
    try:
        # Parse size
        try:
            width, height = _parse_pair(size, int, 'x')
        except ValueError:
            click.echo("Error: Invalid size format. Use 'widthxheight'", err=True)
            sys.exit(1)

        params = _load_parameters(ctx)
        _set_size(params, width, height)
        if iterations is not None:
            params.max_iterations = iterations

        click.echo("Newton Fractal Performance Benchmark")
        click.echo(f"Image size: {width}x{height} ({width * height:,} pixels)")
        click.echo(f"Max iterations: {params.max_iterations}")
        click.echo("")

        with RenderScheduler(num_workers=workers or ctx.obj.get('workers')) as scheduler:
            result = scheduler.run_benchmark(params)

        click.echo("Performance Results:")
        click.echo(f"  Time: {result.elapsed_ms:.1f} ms")
        click.echo(f"  Pixels: {result.pixel_count:,}")
        click.echo(f"  Throughput: {result.pixels_per_second:,.0f} pixels/sec")

    except Exception as e:
        _report_error(ctx, e)


@main.command()
@click.option('--steps', type=int, default=30, help='Number of scripted edits')
@click.option('--width', '-w', type=int, default=300, help='Image width')
@click.option('--height', '-h', type=int, default=300, help='Image height')
@click.option('--workers', type=int, help='Scanline worker threads')
@click.pass_context
def explore(ctx, steps, width, height, workers):
    """
    Replay a burst of zoom and pan edits through the scheduler.

    Reports how many frames were actually rendered for the requests made;
    superseded requests are never rendered.
    """
    try:
        params = _load_parameters(ctx)
        _set_size(params, width, height)
        params.scale_down = True

        consumer = CollectingConsumer()
        with RenderScheduler(consumer, num_workers=workers or ctx.obj.get('workers')) as scheduler:
            for step in range(steps):
                if step % 3 == 2:
                    params.viewport.move((width // 20, -(height // 40)), params.result_size)
                else:
                    params.viewport.zoom(True, 0.6, 0.45)
                scheduler.request_render(params)

            # Settle on a full-resolution frame
            params.scale_down = False
            scheduler.request_render(params)
            scheduler.wait_until_idle()

            requested = scheduler.requests_received
            emitted = scheduler.frames_emitted

        if consumer.errors:
            raise consumer.errors[0]

        click.echo(f"Requests: {requested}")
        click.echo(f"Frames rendered: {emitted}")
        click.echo(f"Superseded: {requested - emitted}")
        click.echo(f"Final view: {params.viewport.bounds} (zoom {params.viewport.zoom_factor:.3g}x)")
        if consumer.frames:
            image, fps = consumer.frames[-1]
            click.echo(f"Last frame: {image.shape[1]}x{image.shape[0]} at {fps:.2f} fps")

    except Exception as e:
        _report_error(ctx, e)


@main.command()
@click.pass_context
def list_presets(ctx):
    """List available root presets."""
    try:
        click.echo("Available root presets:")
        for name, roots in ROOT_PRESETS.items():
            click.echo(f"  {name}: {len(roots)} roots")

            # Show preset details if verbose
            if ctx.obj.get('verbose'):
                for root in roots:
                    click.echo(f"    {format_root(root)}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def system_info(ctx):
    """Display system capabilities."""
    try:
        env = EnvironmentConfig.from_environ()

        click.echo("System Information:")
        click.echo(f"  Platform: {platform.platform()}")
        click.echo(f"  CPU cores: {os.cpu_count() or 1}")
        click.echo(f"  NumPy: {np.__version__}")
        click.echo(f"  Numba: {numba_version()}")
        click.echo(f"  Scanline workers: {env.workers or os.cpu_count() or 1}")
        click.echo("  GPU: not supported, frames render on the CPU")

    except Exception as e:
        _report_error(ctx, e)


@main.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.pass_context
def validate_config(ctx, config_file):
    """Validate a parameter record."""
    try:
        manager = ConfigManager()
        record = manager.load_config(config_file)

        errors = manager.validate_config(record)

        if not errors:
            click.echo(f"Configuration file is valid: {config_file}")
        else:
            click.echo(f"Configuration file has errors: {config_file}")
            for error in errors:
                click.echo(f"  Error: {error}")
            sys.exit(1)

    except Exception as e:
        click.echo(f"Error validating config: {e}", err=True)
        if ctx.obj.get('verbose'):
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
