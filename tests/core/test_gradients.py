import numpy as np
import pytest

from panelmsm.core.gradients import CentralDifference, ForwardDifference, GradientStrategy
from panelmsm.core.posterior import LogPosterior


def quadratic(x):
    return 0.5 * np.sum(x ** 2) + 3.0 * x[0]


def test_central_difference_quadratic():
    x = np.array([0.5, -2.0, 10.0])
    grad = CentralDifference().gradient(quadratic, x)

    np.testing.assert_allclose(grad, x + np.array([3.0, 0.0, 0.0]), atol=1e-6)


def test_forward_difference_quadratic():
    x = np.array([0.5, -2.0])
    grad = ForwardDifference().gradient(quadratic, x)

    np.testing.assert_allclose(grad, [3.5, -2.0], atol=1e-4)


def test_central_difference_on_posterior_agrees_with_forward(small_panel):
    potential = LogPosterior(small_panel, negate=True)
    theta = np.array([0.1, -0.3])

    central = CentralDifference().gradient(potential, theta)
    forward = ForwardDifference().gradient(potential, theta)

    assert np.all(np.isfinite(central))
    np.testing.assert_allclose(central, forward, atol=1e-4)


def test_non_finite_function_propagates():
    grad = CentralDifference().gradient(lambda x: np.inf, np.zeros(2))
    assert not np.any(np.isfinite(grad))


def test_input_is_not_modified():
    x = np.array([1.0, 2.0])
    CentralDifference().gradient(quadratic, x)
    np.testing.assert_array_equal(x, [1.0, 2.0])


@pytest.mark.parametrize("strategy", [CentralDifference, ForwardDifference])
def test_step_must_be_positive(strategy):
    with pytest.raises(ValueError):
        strategy(step=0.0)


def test_strategy_is_abstract():
    with pytest.raises(TypeError):
        GradientStrategy()
