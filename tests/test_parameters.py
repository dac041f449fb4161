import logging

import pytest

from newton_fractal.core.parameters import (
    MAX_ITERATIONS, Processor, RenderParameters, root_at_pixel)
from newton_fractal.core.roots import MAX_ROOTS, Root, equidistant_roots
from newton_fractal.core.viewport import Viewport
from newton_fractal.rendering.coloring import CYAN, RED, BLUE


def test_defaults():
    params = RenderParameters()
    assert len(params.roots) == 3
    assert params.damping == 1 + 0j
    assert params.processor is Processor.CPU_MULTI
    assert params.scaled_size() == params.result_size


@pytest.mark.parametrize('kwargs', [
    {'result_size': (1, 10)},
    {'max_iterations': 0},
    {'max_iterations': MAX_ITERATIONS + 1},
    {'scale_down_factor': 0},
    {'processor': 'quantum'},
])
def test_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        RenderParameters(**kwargs)


def test_processor_parse():
    assert Processor.parse('CPU_SINGLE') is Processor.CPU_SINGLE
    assert Processor.parse('gpu') is Processor.GPU
    assert Processor.parse(Processor.CPU_MULTI) is Processor.CPU_MULTI


def test_copy_shares_no_mutable_state():
    params = RenderParameters()
    clone = params.copy()
    clone.roots[0].value = 5j
    clone.add_root(2j)
    clone.viewport.zoom(True)

    assert params.roots[0].value == 1
    assert len(params.roots) == 3
    assert params.viewport.bounds == (-2.0, 2.0, -2.0, 2.0)


def test_clamped_fixes_contract_violations(caplog):
    params = RenderParameters()
    params.result_size = (0, 0)
    params.max_iterations = 0
    params.roots = equidistant_roots(MAX_ROOTS) + [Root(5j, RED)]

    with caplog.at_level(logging.WARNING):
        fixed = params.clamped()

    assert fixed.result_size == (2, 2)
    assert fixed.max_iterations == 1
    assert len(fixed.roots) == MAX_ROOTS
    assert "clamped" in caplog.text


def test_clamped_caps_iterations():
    params = RenderParameters()
    params.max_iterations = 10 ** 6
    assert params.clamped().max_iterations == MAX_ITERATIONS


def test_scaled_size():
    params = RenderParameters(result_size=(500, 300), scale_down=True, scale_down_factor=0.5)
    assert params.scaled_size() == (250, 150)

    params = RenderParameters(result_size=(3, 3), scale_down=True, scale_down_factor=0.5)
    assert params.scaled_size() == (2, 2)


def test_add_root_uses_next_palette_color(three_roots):
    params = RenderParameters(roots=three_roots)
    root = params.add_root(0.5 + 0.5j)
    assert root.color == CYAN
    assert params.roots[-1] is root

    custom = params.add_root(2j, BLUE)
    assert custom.color == BLUE


def test_remove_root_preserves_order(three_roots):
    params = RenderParameters(roots=three_roots)
    before = [r.value for r in params.roots]

    removed = params.remove_root(1)
    assert removed.value == before[1]
    assert [r.value for r in params.roots] == [before[0], before[2]]

    params.remove_root()
    assert [r.value for r in params.roots] == [before[0]]


def test_move_root(three_roots):
    params = RenderParameters(roots=three_roots)
    params.move_root(2, 3 - 1j)
    assert params.roots[2].value == 3 - 1j


def test_mirror_roots():
    params = RenderParameters(roots=[Root(1 + 2j, RED)])
    assert params.mirror_root_x(0).value == 1 - 2j
    assert params.mirror_root_y(0).value == -1 + 2j
    assert [r.value for r in params.roots] == [1 + 2j, 1 - 2j, -1 + 2j]


def test_reset_redistributes_roots_and_view():
    params = RenderParameters(viewport=Viewport.with_baseline(-2, 2, -2, 2))
    params.add_root(7j)
    params.move_root(0, 9 + 9j)
    params.viewport.zoom(True)

    params.reset()
    assert [r.value for r in params.roots] == [r.value for r in equidistant_roots(4)]
    assert params.viewport.bounds == (-2, 2, -2, 2)


def test_resize_adapts_viewport():
    params = RenderParameters(result_size=(101, 101))
    params.resize((201, 101))
    assert params.result_size == (201, 101)
    assert params.viewport.bounds == pytest.approx((-4, 4, -2, 2))


def test_root_at_pixel(three_roots):
    params = RenderParameters(result_size=(101, 101), roots=three_roots)
    # -1 sits at (25, 50), i at (50, 75)
    assert root_at_pixel(params, (25, 50), 3) == 0
    assert root_at_pixel(params, (52, 74), 3) == 1
    assert root_at_pixel(params, (75, 49), 3) == 2
    assert root_at_pixel(params, (0, 0), 3) is None


def test_to_dict(three_roots):
    summary = RenderParameters(roots=three_roots).to_dict()
    assert summary['roots'] == [-1, 1j, 1]
    assert summary['processor'] == 'cpu_multi'
