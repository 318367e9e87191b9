import numpy as np
import pytest

from panelmsm.core.errors import InvalidDimension
from panelmsm.core.generator import (
    build_generator,
    generator_to_parameters,
    infer_n_states,
    n_parameters,
    parameter_index_map,
)


def _row_major_with_gaps_transposed(params, n_states):
    """Reference construction: fill row-major skipping the diagonal, then transpose."""
    values = list(params)
    for i in range(n_states):
        values.insert(i * n_states + i, np.nan)
    return np.array(values, dtype=float).reshape(n_states, n_states).T


def test_index_map_two_states():
    assert parameter_index_map(2) == [(1, 0), (0, 1)]


def test_index_map_three_states_is_column_major_off_diagonal():
    assert parameter_index_map(3) == [(1, 0), (2, 0), (0, 1), (2, 1), (0, 2), (1, 2)]


@pytest.mark.parametrize("n_states", [2, 3, 4, 5])
def test_index_map_matches_reference_construction(n_states):
    params = np.arange(1, n_parameters(n_states) + 1, dtype=float)
    reference = _row_major_with_gaps_transposed(params, n_states)

    for k, (row, col) in enumerate(parameter_index_map(n_states)):
        assert reference[row, col] == params[k]


def test_build_generator_two_states():
    Q = build_generator([0.8, 1.2], 2)

    np.testing.assert_allclose(Q, [[-1.2, 1.2], [0.8, -0.8]])


@pytest.mark.parametrize("n_states", [2, 3, 4, 5])
def test_rows_sum_to_zero(n_states):
    rng = np.random.default_rng(n_states)
    for _ in range(20):
        params = rng.lognormal(mean=0.0, sigma=2.0, size=n_parameters(n_states))
        Q = build_generator(params, n_states)

        assert np.all(np.abs(Q.sum(axis=1)) < 1e-9)
        off_diagonal = Q[~np.eye(n_states, dtype=bool)]
        assert np.all(off_diagonal > 0)
        assert np.all(np.diag(Q) < 0)


def test_wrong_length_raises_invalid_dimension():
    with pytest.raises(InvalidDimension):
        build_generator([1.0, 2.0, 3.0], 2)


def test_invalid_dimension_is_value_error():
    with pytest.raises(ValueError):
        build_generator([1.0], 2)


def test_single_state_rejected():
    with pytest.raises(InvalidDimension):
        build_generator([], 1)


def test_infer_n_states():
    assert infer_n_states(2) == 2
    assert infer_n_states(6) == 3
    assert infer_n_states(12) == 4


@pytest.mark.parametrize("n_params", [0, 1, 3, 5, 7])
def test_infer_n_states_rejects_impossible_lengths(n_params):
    with pytest.raises(InvalidDimension):
        infer_n_states(n_params)


def test_generator_to_parameters_inverts_build():
    params = np.array([0.1, 0.2, 0.3, 0.4, 0.5, 0.6])
    Q = build_generator(params, 3)

    np.testing.assert_allclose(generator_to_parameters(Q), params)
    assert Q[1, 0] == pytest.approx(0.1)
    assert Q[0, 2] == pytest.approx(0.5)
