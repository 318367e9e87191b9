"""Finite-time transition probabilities P(t) = expm(t * Q)."""

from typing import Dict, Optional

import numpy as np
from scipy.linalg import expm

from panelmsm.core.errors import NumericalInstability


def transition_probabilities(Q, t: float = 1.0) -> np.ndarray:
    """
    Compute the transition probability matrix for elapsed time ``t``.

    Uses scipy's Padé approximation with scaling and squaring. Row i,
    column j is P(state j at s + t | state i at s).

    Args:
        Q: (S, S) generator matrix
        t: Elapsed time (default 1.0, the unit-time model)

    Returns:
        (S, S) stochastic matrix

    Raises:
        NumericalInstability: If Q*t or the exponential has non-finite entries
    """
    Qt = np.asarray(Q, dtype=float) * t
    if not np.all(np.isfinite(Qt)):
        raise NumericalInstability("Generator contains non-finite entries")

    P = expm(Qt)
    if not np.all(np.isfinite(P)):
        raise NumericalInstability(f"expm(t*Q) is non-finite for t={t}")
    # Round-off can leave entries a few ulp outside [0, 1]
    return np.clip(P, 0.0, 1.0)


class TransitionMatrixCache:
    """
    Per-evaluation cache of P(dt) for one generator.

    Panel data observed on a regular grid share a handful of distinct
    gaps, so each distinct ``dt`` is exponentiated once. A cache is tied to
    a single Q and must not outlive the likelihood call that created it.
    """

    def __init__(self, Q):
        self.Q = np.asarray(Q, dtype=float)
        self._matrices: Dict[float, np.ndarray] = {}

    def get(self, dt: Optional[float] = None) -> np.ndarray:
        key = 1.0 if dt is None else float(dt)
        P = self._matrices.get(key)
        if P is None:
            P = transition_probabilities(self.Q, key)
            self._matrices[key] = P
        return P

    def __len__(self) -> int:
        return len(self._matrices)
