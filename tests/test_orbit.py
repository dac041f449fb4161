from newton_fractal.core.orbit import trace_orbit, trace_orbit_points
from newton_fractal.core.parameters import RenderParameters


def test_orbit_starting_on_root_has_one_point(three_roots):
    params = RenderParameters(result_size=(101, 101), roots=three_roots)
    assert trace_orbit(params, (25, 50)) == [(25, 50)]


def test_zero_damping_orbit_is_the_start_point(three_roots):
    params = RenderParameters(result_size=(101, 101), roots=three_roots, damping=0)
    assert trace_orbit(params, (80, 52)) == [(80, 52)]
    assert trace_orbit(params, (25, 50)) == [(25, 50)]


def test_orbit_starts_at_start_pixel_and_approaches_root(three_roots):
    params = RenderParameters(result_size=(101, 101), roots=three_roots)
    points = trace_orbit(params, (80, 52))
    assert points[0] == (80, 52)
    assert 1 < len(points) <= params.max_iterations + 1
    # Converges to the root at 1 + 0i, drawn at pixel (75, 50)
    assert points[-1] == (75, 50)


def test_orbit_uses_orbit_start_by_default(three_roots):
    params = RenderParameters(result_size=(101, 101), roots=three_roots, orbit_start=(50, 75))
    assert trace_orbit(params) == [(50, 75)]


def test_orbit_is_bounded_by_iteration_budget(three_roots):
    params = RenderParameters(result_size=(101, 101), roots=three_roots, max_iterations=3)
    assert len(trace_orbit_points(params, (0, 0))) <= 4


def test_orbit_is_recomputed_on_every_call(three_roots):
    params = RenderParameters(result_size=(101, 101), roots=three_roots)
    first = trace_orbit(params, (10, 90))
    params.move_root(0, 0.5 + 0.5j)
    second = trace_orbit(params, (10, 90))
    assert first != second
    params.move_root(0, -1 + 0j)
    assert trace_orbit(params, (10, 90)) == first


def test_renderer_orbit_reports_rate(renderer, three_roots):
    params = RenderParameters(result_size=(101, 101), roots=three_roots)
    result = renderer.trace_orbit(params, (25, 50))
    assert result.points == [(25, 50)]
    assert result.fps > 0
