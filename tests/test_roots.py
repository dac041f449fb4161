import cmath

import pytest

from newton_fractal.core.roots import (
    Root, MAX_ROOTS, ROOT_PRESETS, derivative_approx, equidistant_roots, evaluate,
    format_root, get_preset, parse_root)
from newton_fractal.rendering.coloring import ColorRGB, RED, GREEN, BLUE


def test_evaluate_vanishes_at_roots(three_roots):
    for root in three_roots:
        assert evaluate(root.value, three_roots) == 0


def test_evaluate_empty_roots_is_one():
    assert evaluate(3 + 4j, []) == 1


def test_derivative_approximates_exact_derivative():
    roots = [Root(1 + 0j, RED), Root(-1 + 0j, GREEN)]
    # p(z) = z^2 - 1, p'(z) = 2z
    for z in (0.5 + 0.5j, -2 + 1j, 3j):
        assert derivative_approx(z, roots) == pytest.approx(2 * z, abs=1e-3)


def test_equidistant_roots_on_unit_circle():
    roots = equidistant_roots(4)
    assert [r.value for r in roots] == [1, 1j, -1, -1j]
    assert [r.color for r in roots[:3]] == [RED, GREEN, BLUE]


def test_equidistant_roots_spacing():
    roots = equidistant_roots(5, radius=2.0)
    for i, root in enumerate(roots):
        assert abs(root.value) == pytest.approx(2.0)
        assert root.value == pytest.approx(cmath.rect(2.0, 2 * cmath.pi * i / 5), abs=1e-9)


def test_equidistant_roots_clamped_to_palette():
    assert len(equidistant_roots(20)) == MAX_ROOTS


def test_parse_and_format_root():
    root = parse_root("1.5,-2 : #00FF00")
    assert root.value == complex(1.5, -2)
    assert root.color == ColorRGB(0, 255, 0)
    assert parse_root(format_root(root)) == root


@pytest.mark.parametrize('text', ["", "1.5 : #00FF00", "1,2 : 00FF00", "a,b : #00FF00", "1,2 : #GG0000"])
def test_parse_root_rejects_malformed_text(text):
    with pytest.raises(ValueError):
        parse_root(text)


def test_presets_return_independent_copies():
    roots = get_preset('cross')
    roots[0].value = 42j
    assert ROOT_PRESETS['cross'][0].value == 1


def test_unknown_preset():
    with pytest.raises(ValueError, match="Unknown root preset"):
        get_preset('nope')
