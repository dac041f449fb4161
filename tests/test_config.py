import json
import logging

import pytest

from newton_fractal.core.parameters import MAX_ITERATIONS, Processor
from newton_fractal.io.config import (
    ConfigError, ConfigManager, EnvironmentConfig, load_config_from_args)
from newton_fractal.rendering.coloring import ColorRGB


@pytest.fixture
def manager():
    return ConfigManager()


@pytest.fixture
def record():
    return {
        'general': {
            'size': [320, 200],
            'max_iterations': 250,
            'damping': [0.8, 0.1],
            'scale_down_factor': 0.25,
            'scale_down': True,
            'processor': 'cpu_single',
            'orbit_mode': False,
            'orbit_start': [10, 20],
        },
        'limits': {
            'current': {'left': -1, 'right': 1, 'top': -0.5, 'bottom': 0.5},
            'original': {'left': -2, 'right': 2, 'top': -1, 'bottom': 1},
            'zoom_factor': 2.0,
        },
        'roots': ['-1,0 : #FF0000', '0.5,0.25 : #00ff80'],
    }


def test_load_and_build_parameters(manager, record, tmp_path):
    path = tmp_path / 'params.json'
    path.write_text(json.dumps(record))

    params = manager.create_render_parameters(manager.load_config(path))
    assert params.result_size == (320, 200)
    assert params.max_iterations == 250
    assert params.damping == complex(0.8, 0.1)
    assert params.scale_down_factor == 0.25
    assert params.scale_down is True
    assert params.processor is Processor.CPU_SINGLE
    assert params.orbit_start == (10, 20)
    assert params.viewport.bounds == (-1, 1, -0.5, 0.5)
    assert params.viewport.original.bounds == (-2, 2, -1, 1)
    assert params.viewport.zoom_factor == 2.0
    assert [r.value for r in params.roots] == [-1, 0.5 + 0.25j]
    assert params.roots[1].color == ColorRGB(0, 255, 128)


def test_empty_record_gives_defaults(manager):
    params = manager.create_render_parameters({})
    assert params.result_size == (500, 500)
    assert len(params.roots) == 3
    assert params.viewport.bounds == (-2.0, 2.0, -2.0, 2.0)
    assert params.viewport.original.bounds == params.viewport.bounds


def test_missing_current_limits_use_original(manager):
    params = manager.create_render_parameters(
        {'limits': {'original': {'left': -3, 'right': 3, 'top': -1, 'bottom': 1}}})
    assert params.viewport.bounds == (-3, 3, -1, 1)


def test_out_of_range_values_are_clamped(manager, caplog):
    with caplog.at_level(logging.WARNING):
        params = manager.create_render_parameters(
            {'general': {'size': [1, 0], 'max_iterations': 10 ** 6, 'scale_down_factor': 3}})
    assert params.result_size == (2, 2)
    assert params.max_iterations == MAX_ITERATIONS
    assert params.scale_down_factor == 0.5
    assert 'clamped' in caplog.text


@pytest.mark.parametrize('bad', [
    {'roots': ['1,2 : blue']},
    {'general': {'processor': 'abacus'}},
    {'general': {'size': 'big'}},
    {'limits': {'current': {'left': 1, 'right': 0, 'top': 0, 'bottom': 1}}},
    {'limits': {'current': {'left': 0, 'right': 1}}},
    {'limits': {'zoom_factor': -1}},
])
def test_uninterpretable_values_raise(manager, bad):
    with pytest.raises(ConfigError):
        manager.create_render_parameters(bad)


def test_load_rejects_invalid_files(manager, tmp_path):
    broken = tmp_path / 'broken.json'
    broken.write_text('{"general": ')
    with pytest.raises(ConfigError, match='invalid JSON'):
        manager.load_config(broken)

    listing = tmp_path / 'list.json'
    listing.write_text('[1, 2]')
    with pytest.raises(ConfigError, match='JSON object'):
        manager.load_config(listing)


def test_validate_config_collects_errors(manager, record):
    assert manager.validate_config(record) == []

    record['roots'].append('nonsense')
    record['roots'].append('1,1 : #12345')
    errors = manager.validate_config(record)
    assert len(errors) == 2
    assert errors[0].startswith('roots[2]')

    assert manager.validate_config({'general': [1, 2]}) == ["'general' must be an object"]


def test_environment_config():
    env = EnvironmentConfig.from_environ(
        {'NEWTON_FRACTAL_WORKERS': '3', 'NEWTON_FRACTAL_LOG_LEVEL': 'debug'})
    assert env.workers == 3
    assert env.log_level == 'DEBUG'

    env = EnvironmentConfig.from_environ(
        {'NEWTON_FRACTAL_WORKERS': 'many', 'NEWTON_FRACTAL_LOG_LEVEL': 'chatty'})
    assert env.workers is None
    assert env.log_level is None

    assert EnvironmentConfig.from_environ({}) == EnvironmentConfig()


def test_load_config_from_args(record, tmp_path):
    path = tmp_path / 'params.json'
    path.write_text(json.dumps(record))

    params = load_config_from_args(str(path), 'cross')
    assert params.result_size == (320, 200)
    assert [r.value for r in params.roots] == [1, 1j, -1, -1j]

    assert len(load_config_from_args().roots) == 3
    with pytest.raises(ValueError):
        load_config_from_args(None, 'missing')
