"""
Generator (intensity) matrix construction.

A time-homogeneous CTMC on S states is parameterized by its S*(S-1)
off-diagonal rates. The parameter vector is laid out row-major over the
off-diagonal cells and then transposed, which is the same as walking the
off-diagonal cells column by column:

    S = 3:  index 0 -> (1, 0)   index 2 -> (0, 1)   index 4 -> (0, 2)
            index 1 -> (2, 0)   index 3 -> (2, 1)   index 5 -> (1, 2)

So parameter k names the transition ``row -> col`` returned by
``parameter_index_map(S)[k]``.
"""

from functools import lru_cache
from typing import List, Tuple
import math

import numpy as np

from panelmsm.core.errors import InvalidDimension


def n_parameters(n_states: int) -> int:
    """Number of free rates for an ``n_states`` generator."""
    return n_states * (n_states - 1)


def infer_n_states(n_params: int) -> int:
    """
    Solve S*(S-1) = n_params for S.

    Raises:
        InvalidDimension: If no integer S >= 2 satisfies the equation
    """
    # Positive root of S^2 - S - n = 0
    s = int(round((1 + math.sqrt(1 + 4 * n_params)) / 2))
    if s < 2 or n_parameters(s) != n_params:
        raise InvalidDimension(
            f"{n_params} parameters do not correspond to any S*(S-1) state space"
        )
    return s


@lru_cache(maxsize=64)
def _index_map(n_states: int) -> Tuple[Tuple[int, int], ...]:
    return tuple(
        (row, col)
        for col in range(n_states)
        for row in range(n_states)
        if row != col
    )


def parameter_index_map(n_states: int) -> List[Tuple[int, int]]:
    """
    Map parameter index -> (row, col) cell of the generator.

    Args:
        n_states: Number of states S (>= 2)

    Returns:
        List of length S*(S-1); entry k is the (row, col) named by parameter k
    """
    if n_states < 2:
        raise InvalidDimension(f"A generator needs at least 2 states, got {n_states}")
    return list(_index_map(n_states))


def build_generator(params, n_states: int) -> np.ndarray:
    """
    Build a generator matrix Q from natural-scale rates.

    Off-diagonal cells take the rates named by ``parameter_index_map``;
    each diagonal entry is the negated sum of its row, so rows sum to 0.

    Args:
        params: Rates, length S*(S-1)
        n_states: Number of states S

    Returns:
        (S, S) generator matrix

    Raises:
        InvalidDimension: If len(params) != S*(S-1)
    """
    if n_states < 2:
        raise InvalidDimension(f"A generator needs at least 2 states, got {n_states}")
    params = np.asarray(params, dtype=float)
    if params.ndim != 1 or params.size != n_parameters(n_states):
        raise InvalidDimension(
            f"Expected {n_parameters(n_states)} rates for {n_states} states, "
            f"got {params.size}"
        )

    Q = np.zeros((n_states, n_states), dtype=float)
    rows, cols = zip(*_index_map(n_states))
    Q[list(rows), list(cols)] = params
    np.fill_diagonal(Q, -Q.sum(axis=1))
    return Q


def generator_to_parameters(Q) -> np.ndarray:
    """Inverse of ``build_generator``: read the off-diagonal rates back out."""
    Q = np.asarray(Q, dtype=float)
    if Q.ndim != 2 or Q.shape[0] != Q.shape[1]:
        raise InvalidDimension(f"Generator must be square, got shape {Q.shape}")
    if Q.shape[0] < 2:
        raise InvalidDimension(f"A generator needs at least 2 states, got {Q.shape[0]}")
    rows, cols = zip(*_index_map(Q.shape[0]))
    return Q[list(rows), list(cols)].copy()
