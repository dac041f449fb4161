import pytest

from newton_fractal.api import FractalRenderer
from newton_fractal.core.parameters import RenderParameters
from newton_fractal.core.roots import get_preset


@pytest.fixture
def three_roots():
    """Roots -1, i and 1 colored red, green and blue."""
    return get_preset('real-3')


@pytest.fixture
def scenario_params(three_roots):
    return RenderParameters(result_size=(100, 100), roots=three_roots, max_iterations=100)


@pytest.fixture(scope='session')
def renderer():
    engine = FractalRenderer(num_workers=4)
    yield engine
    engine.shutdown()
