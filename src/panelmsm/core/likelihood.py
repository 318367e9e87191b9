"""Panel-data log-likelihood for a time-homogeneous CTMC."""

from typing import Any, Optional
import logging

import numpy as np

from panelmsm.core.data import as_panel_data, resolve_state_count
from panelmsm.core.generator import build_generator
from panelmsm.core.transitions import TransitionMatrixCache, transition_probabilities

logger = logging.getLogger(__name__)


def transition_counts(data: Any, n_states: Optional[int] = None) -> np.ndarray:
    """(S, S) matrix of observed prev_state -> state counts."""
    return as_panel_data(data, n_states).counts.copy()


def log_likelihood(
    params,
    data: Any,
    n_states: Optional[int] = None,
    time_scaled: bool = False,
) -> float:
    """
    Total log-likelihood of observed transitions under natural-scale rates.

    Each subject contributes sum_k log P[prev_state_k, state_k] over its
    records 2..n; subjects with a single record contribute 0.

    By default every gap is treated as unit time, so a single ``expm(Q)``
    scores all transitions. ``time_scaled=True`` instead scores each
    transition with ``expm(dt * Q)`` for its observed gap ``dt``.

    Args:
        params: Natural-scale rates, length S*(S-1)
        data: Observations or ``PanelData``
        n_states: Optional explicit state count (default: distinct states)
        time_scaled: Use each transition's elapsed time

    Returns:
        Log-likelihood; ``-inf`` when an observed transition has zero
        modelled probability

    Raises:
        InvalidDimension: If len(params) != S*(S-1)
        NumericalInstability: If the matrix exponential is non-finite
    """
    # Data showing fewer than two states take their size from the rates
    panel = resolve_state_count(as_panel_data(data, n_states), np.size(params))
    Q = build_generator(params, panel.n_states)

    if panel.n_transitions == 0:
        return 0.0

    if not time_scaled:
        P = transition_probabilities(Q)
        observed = panel.counts > 0
        with np.errstate(divide="ignore"):
            ll = float(np.sum(panel.counts[observed] * np.log(P[observed])))
    else:
        cache = TransitionMatrixCache(Q)
        probs = np.empty(panel.n_transitions, dtype=float)
        for gap in np.unique(panel.gaps):
            sel = panel.gaps == gap
            probs[sel] = cache.get(gap)[panel.from_index[sel], panel.to_index[sel]]
        with np.errstate(divide="ignore"):
            ll = float(np.sum(np.log(probs)))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Scored %d transitions over %d distinct gaps", probs.size, len(cache))

    return ll
