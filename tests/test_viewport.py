import pytest

from newton_fractal.core.complex_plane import pixel_to_complex
from newton_fractal.core.viewport import Viewport, ZOOM_STEP


def test_default_viewport():
    viewport = Viewport()
    assert viewport.bounds == (-2.0, 2.0, -2.0, 2.0)
    assert viewport.zoom_factor == 1.0


@pytest.mark.parametrize('bounds', [(1, 1, 0, 1), (2, 1, 0, 1), (0, 1, 1, 0)])
def test_invalid_bounds(bounds):
    with pytest.raises(ValueError):
        Viewport(*bounds)


def test_set_validates_and_keeps_baseline():
    viewport = Viewport.with_baseline(-1, 1, -1, 1)
    viewport.set(0, 3, 0, 3)
    assert viewport.bounds == (0, 3, 0, 3)
    assert viewport.original.bounds == (-1, 1, -1, 1)
    with pytest.raises(ValueError):
        viewport.set(3, 0, 0, 3)
    assert viewport.bounds == (0, 3, 0, 3)


def test_zoom_in_and_out_around_centre():
    viewport = Viewport()
    viewport.zoom(True)
    assert viewport.width == pytest.approx(4 / ZOOM_STEP)
    assert viewport.center == pytest.approx(0j)
    assert viewport.zoom_factor == pytest.approx(ZOOM_STEP)

    viewport.zoom(False)
    assert viewport.bounds == pytest.approx((-2, 2, -2, 2))
    assert viewport.zoom_factor == pytest.approx(1.0)


def test_zoom_keeps_focus_point_fixed():
    viewport = Viewport(-3, 1, -1, 2)
    before = complex(viewport.left + 0.25 * viewport.width, viewport.top + 0.75 * viewport.height)
    viewport.zoom(True, 0.25, 0.75)
    after = complex(viewport.left + 0.25 * viewport.width, viewport.top + 0.75 * viewport.height)
    assert after == pytest.approx(before)


def test_move_by_pixels():
    viewport = Viewport()
    viewport.move((10, -5), (101, 101))
    assert viewport.bounds == pytest.approx((-1.6, 2.4, -2.2, 1.8))


def test_set_zoom_factor_uses_baseline():
    viewport = Viewport.with_baseline(-2, 2, -1, 1)
    viewport.move((25, 0), (101, 101))
    viewport.set_zoom_factor(4)
    assert viewport.width == pytest.approx(1.0)
    assert viewport.height == pytest.approx(0.5)
    assert viewport.center == pytest.approx(1 + 0j)
    assert viewport.zoom_factor == 4

    with pytest.raises(ValueError):
        viewport.set_zoom_factor(0)


def test_reset_restores_baseline():
    viewport = Viewport.with_baseline(-1, 2, -1, 1)
    viewport.zoom(True, 0.1, 0.9)
    viewport.reset()
    assert viewport.bounds == (-1, 2, -1, 1)
    assert viewport.zoom_factor == 1.0


def test_reset_without_baseline_fits_size():
    viewport = Viewport(5, 6, 5, 6)
    viewport.reset((200, 100))
    assert viewport.bounds == pytest.approx((-4, 4, -2, 2))


def test_resize_keeps_centre_and_pixel_pitch():
    viewport = Viewport.with_baseline(-2, 2, -2, 2)
    old_size, new_size = (101, 101), (201, 51)
    probe = pixel_to_complex((50, 50), old_size, viewport)

    viewport.resize(old_size, new_size)
    assert viewport.bounds == pytest.approx((-4, 4, -1, 1))
    assert viewport.original.bounds == pytest.approx((-4, 4, -1, 1))
    assert pixel_to_complex((100, 25), new_size, viewport) == pytest.approx(probe)


def test_copy_is_independent():
    viewport = Viewport.with_baseline(-1, 1, -1, 1)
    clone = viewport.copy()
    clone.zoom(True)
    clone.original.set(0, 1, 0, 1)
    assert viewport.bounds == (-1, 1, -1, 1)
    assert viewport.original.bounds == (-1, 1, -1, 1)
