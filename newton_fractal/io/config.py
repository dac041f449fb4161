"""
Configuration loading for render parameters.

Parameter records are plain JSON documents grouped the same way the
settings of the interactive application are::

    {
      "general": {"size": [800, 600], "max_iterations": 500,
                  "damping": [1.0, 0.0], "scale_down_factor": 0.5,
                  "scale_down": false, "processor": "cpu_multi",
                  "orbit_mode": false, "orbit_start": [0, 0]},
      "limits": {"current": {"left": -2, "right": 2, "top": -2, "bottom": 2},
                 "original": {"left": -2, "right": 2, "top": -2, "bottom": 2},
                 "zoom_factor": 1.0},
      "roots": ["-1,0 : #FF0000", "0,1 : #00FF00", "1,0 : #0000FF"]
    }

Every group and key is optional. Out-of-range numbers are clamped with a
warning; values that cannot be interpreted raise :class:`ConfigError`.
"""

import json
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.parameters import (RenderParameters, Processor, DEFAULT_SIZE, DEFAULT_MAX_ITERATIONS,
                               MAX_ITERATIONS, DEFAULT_SCALE_DOWN_FACTOR, MIN_DIMENSION)
from ..core.roots import Root, parse_root, get_preset, equidistant_roots, DEFAULT_ROOT_COUNT
from ..core.viewport import Viewport

logger = logging.getLogger(__name__)

_BOUND_KEYS = ('left', 'right', 'top', 'bottom')


class ConfigError(ValueError):
    """A parameter record could not be turned into render parameters."""


@dataclass
class EnvironmentConfig:
    """Settings taken from ``NEWTON_FRACTAL_*`` environment variables."""

    workers: Optional[int] = None
    log_level: Optional[str] = None

    @classmethod
    def from_environ(cls, environ: Optional[Dict[str, str]] = None) -> 'EnvironmentConfig':
        environ = os.environ if environ is None else environ
        config = cls()

        workers = environ.get('NEWTON_FRACTAL_WORKERS')
        if workers:
            try:
                config.workers = max(1, int(workers))
            except ValueError:
                logger.warning(f"Ignoring invalid NEWTON_FRACTAL_WORKERS={workers!r}")

        level = environ.get('NEWTON_FRACTAL_LOG_LEVEL')
        if level:
            if isinstance(logging.getLevelName(level.upper()), int):
                config.log_level = level.upper()
            else:
                logger.warning(f"Ignoring unknown NEWTON_FRACTAL_LOG_LEVEL={level!r}")
        return config


class ConfigManager:
    """Reads parameter records and builds render parameters from them."""

    def load_config(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Read a JSON parameter record.

        Raises:
            ConfigError: If the file is not a JSON object
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{path}: invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a JSON object at top level")
        logger.info(f"Loaded configuration: {path}")
        return data

    def validate_config(self, record: Dict[str, Any]) -> List[str]:
        """Collect every problem with a record instead of stopping at the first."""
        errors = []
        for group in ('general', 'limits'):
            if group in record and not isinstance(record[group], dict):
                errors.append(f"'{group}' must be an object")

        for i, text in enumerate(record.get('roots', []) or []):
            try:
                parse_root(str(text))
            except ValueError as e:
                errors.append(f"roots[{i}]: {e}")

        if not errors:
            try:
                self.create_render_parameters(record)
            except ValueError as e:
                errors.append(str(e))
        return errors

    def create_render_parameters(self, record: Dict[str, Any]) -> RenderParameters:
        """
        Build render parameters from a record, defaulting missing values.

        Raises:
            ConfigError: For values that cannot be interpreted
        """
        general = record.get('general', {}) or {}
        limits = record.get('limits', {}) or {}

        try:
            size = self._size(general.get('size', DEFAULT_SIZE))
            max_iterations = self._clamp('max_iterations',
                                         int(general.get('max_iterations', DEFAULT_MAX_ITERATIONS)),
                                         1, MAX_ITERATIONS)
            damping = self._complex(general.get('damping', [1.0, 0.0]))
            scale_down_factor = float(general.get('scale_down_factor', DEFAULT_SCALE_DOWN_FACTOR))
            if not 0 < scale_down_factor <= 1:
                logger.warning(f"scale_down_factor {scale_down_factor} out of range, "
                               f"using {DEFAULT_SCALE_DOWN_FACTOR}")
                scale_down_factor = DEFAULT_SCALE_DOWN_FACTOR
            orbit_start = tuple(int(v) for v in general.get('orbit_start', (0, 0)))
            processor = Processor.parse(general.get('processor', Processor.CPU_MULTI))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"general: {e}") from e

        roots = self._roots(record.get('roots'))
        viewport = self._viewport(limits, size)

        return RenderParameters(
            result_size=size,
            roots=roots,
            max_iterations=max_iterations,
            damping=damping,
            scale_down_factor=scale_down_factor,
            scale_down=bool(general.get('scale_down', False)),
            viewport=viewport,
            processor=processor,
            orbit_mode=bool(general.get('orbit_mode', False)),
            orbit_start=orbit_start,
        )

    @staticmethod
    def _clamp(name: str, value, lo, hi):
        clamped = min(max(value, lo), hi)
        if clamped != value:
            logger.warning(f"{name} {value} clamped to {clamped}")
        return clamped

    def _size(self, value) -> tuple:
        width, height = (int(v) for v in value)
        return (self._clamp('width', width, MIN_DIMENSION, 1 << 15),
                self._clamp('height', height, MIN_DIMENSION, 1 << 15))

    @staticmethod
    def _complex(value) -> complex:
        if isinstance(value, (int, float, complex)):
            return complex(value)
        real, imag = value
        return complex(float(real), float(imag))

    @staticmethod
    def _roots(texts) -> List[Root]:
        if texts is None:
            return equidistant_roots(DEFAULT_ROOT_COUNT)
        roots = []
        for i, text in enumerate(texts):
            try:
                roots.append(parse_root(str(text)))
            except ValueError as e:
                raise ConfigError(f"roots[{i}]: {e}") from e
        return roots

    @staticmethod
    def _bounds(group: Dict[str, Any], name: str) -> Optional[Viewport]:
        if not group:
            return None
        try:
            values = [float(group[key]) for key in _BOUND_KEYS]
            return Viewport(*values)
        except KeyError as e:
            raise ConfigError(f"limits.{name}: missing {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"limits.{name}: {e}") from e

    def _viewport(self, limits: Dict[str, Any], size) -> Viewport:
        current = self._bounds(limits.get('current'), 'current')
        original = self._bounds(limits.get('original'), 'original')

        if current is None:
            current = original.copy() if original is not None else Viewport.fit(size)
        current.original = original if original is not None else Viewport(*current.bounds)

        zoom_factor = float(limits.get('zoom_factor', 1.0))
        if zoom_factor <= 0:
            raise ConfigError(f"limits.zoom_factor must be positive, got {zoom_factor}")
        current.zoom_factor = zoom_factor
        return current


def load_config_from_args(config_file: Optional[str] = None,
                          preset: Optional[str] = None) -> RenderParameters:
    """
    Build render parameters from the CLI's global options.

    Args:
        config_file: Optional JSON parameter record
        preset: Optional root preset name, overriding the record's roots

    Returns:
        Render parameters (defaults when neither option is given)
    """
    manager = ConfigManager()
    record = manager.load_config(config_file) if config_file else {}
    params = manager.create_render_parameters(record)
    if preset:
        params.roots = get_preset(preset)
        logger.info(f"Using root preset: {preset}")
    return params
