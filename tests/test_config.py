import pytest

from bezier_mat import MatOptions, get_default_options, set_default_options
from bezier_mat.config import CROSS_TANGENT_LIMIT, resolve_options


@pytest.fixture
def restore_defaults():
    saved = get_default_options()
    yield
    set_default_options(saved)


def test_defaults():
    options = MatOptions()

    assert options.cross_tangent_limit == CROSS_TANGENT_LIMIT == 0.005
    assert options.max_2prong_iterations == 50
    assert options.max_3prong_iterations == 10
    assert options.standard_fallback_t == 0.9
    assert options.seed_spacing is None


def test_squared_tolerances():
    options = MatOptions(separation_tolerance=0.01, one_prong_tolerance=0.5)

    assert options.squared_separation_tolerance == pytest.approx(1e-4)
    assert options.squared_one_prong_tolerance == pytest.approx(0.25)
    assert options.squared_error_tolerance == pytest.approx(1e-6)
    options.error_tolerance = 0.1
    assert options.squared_error_tolerance == pytest.approx(0.01)


def test_get_default_options_returns_a_copy(restore_defaults):
    options = get_default_options()
    options.seed_spacing = 3.0

    assert get_default_options().seed_spacing is None


def test_set_default_options_changes_resolution(restore_defaults):
    set_default_options(MatOptions(max_2prong_iterations=7))

    assert resolve_options(None).max_2prong_iterations == 7
    explicit = MatOptions()
    assert resolve_options(explicit) is explicit
