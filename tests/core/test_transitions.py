import numpy as np
import pytest

from panelmsm.core.errors import NumericalInstability
from panelmsm.core.generator import build_generator, n_parameters
from panelmsm.core.transitions import TransitionMatrixCache, transition_probabilities


@pytest.mark.parametrize("n_states", [2, 3, 4])
@pytest.mark.parametrize("t", [0.1, 1.0, 5.0])
def test_rows_are_probability_distributions(n_states, t):
    rng = np.random.default_rng(7)
    params = rng.lognormal(size=n_parameters(n_states))
    P = transition_probabilities(build_generator(params, n_states), t)

    assert P.shape == (n_states, n_states)
    np.testing.assert_allclose(P.sum(axis=1), 1.0, atol=1e-6)
    assert np.all(P >= 0.0)
    assert np.all(P <= 1.0)


def test_two_state_closed_form():
    """Binary chain has P01(t) = g / (g + l) * (1 - exp(-(g + l) t))."""
    gain, loss, t = 1.2, 0.8, 0.7
    Q = np.array([[-gain, gain], [loss, -loss]])
    total = gain + loss
    decay = np.exp(-total * t)

    expected = np.array([
        [(loss + gain * decay) / total, (gain - gain * decay) / total],
        [(loss - loss * decay) / total, (gain + loss * decay) / total],
    ])

    np.testing.assert_allclose(transition_probabilities(Q, t), expected, rtol=1e-10)


def test_unit_time_is_default():
    Q = build_generator([0.5, 2.0], 2)
    np.testing.assert_allclose(transition_probabilities(Q), transition_probabilities(Q, 1.0))


def test_zero_time_is_identity():
    Q = build_generator([0.5, 2.0, 1.0, 0.3, 0.1, 0.9], 3)
    np.testing.assert_allclose(transition_probabilities(Q, 0.0), np.eye(3), atol=1e-12)


def test_non_finite_generator_raises():
    Q = np.array([[-np.inf, np.inf], [0.8, -0.8]])
    with pytest.raises(NumericalInstability):
        transition_probabilities(Q)


def test_nan_generator_raises():
    Q = np.array([[np.nan, 1.0], [0.8, -0.8]])
    with pytest.raises(NumericalInstability):
        transition_probabilities(Q)


def test_cache_reuses_matrices_per_gap():
    Q = build_generator([0.8, 1.2], 2)
    cache = TransitionMatrixCache(Q)

    first = cache.get(2.0)
    second = cache.get(2.0)
    cache.get(0.5)

    assert first is second
    assert len(cache) == 2
    np.testing.assert_allclose(cache.get(), transition_probabilities(Q))
    np.testing.assert_allclose(first, transition_probabilities(Q, 2.0))
