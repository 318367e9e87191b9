"""
Posterior chain summaries and likelihood surfaces.

Numeric inputs for plotting front ends; nothing here draws.
"""

from typing import Any, Optional
from dataclasses import dataclass

import numpy as np
import pandas as pd

from panelmsm.core.data import as_panel_data, resolve_state_count
from panelmsm.core.errors import NumericalInstability
from panelmsm.core.generator import build_generator, infer_n_states, parameter_index_map
from panelmsm.core.likelihood import log_likelihood
from panelmsm.core.posterior import LOG_REPARAMETERIZATION, Reparameterization


def acceptance_rate(chain) -> float:
    """Fraction of iterations whose row differs from the previous row."""
    chain = np.asarray(chain, dtype=float)
    if chain.shape[0] < 2:
        return float("nan")
    moved = np.any(np.diff(chain, axis=0) != 0, axis=1)
    return float(moved.mean())


@dataclass
class ChainSummary:
    """
    Natural-scale posterior summary of one chain.

    Attributes:
        mean: Posterior mean rate per parameter
        median: Posterior median rate per parameter
        lower: 2.5% quantile per parameter
        upper: 97.5% quantile per parameter
        generator: Generator matrix built from the posterior means
        acceptance_rate: Fraction of moves over the whole chain
        n_draws: Draws kept after burn-in
        burn_in: Rows discarded
    """

    mean: np.ndarray
    median: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    generator: np.ndarray
    acceptance_rate: float
    n_draws: int
    burn_in: int

    def to_frame(self) -> pd.DataFrame:
        """One row per parameter, labelled with its transition (1-based states)."""
        cells = parameter_index_map(self.generator.shape[0])
        return pd.DataFrame({
            "parameter": np.arange(len(cells)),
            "transition": [f"{i + 1}->{j + 1}" for i, j in cells],
            "mean": self.mean,
            "median": self.median,
            "q2.5": self.lower,
            "q97.5": self.upper,
        })

    def __repr__(self) -> str:
        means = ", ".join(f"{m:.4f}" for m in self.mean)
        return (
            f"ChainSummary(mean=[{means}], draws={self.n_draws}, "
            f"acceptance={self.acceptance_rate:.3f})"
        )


def summarize_chain(
    chain,
    burn_in: int = 0,
    reparam: Reparameterization = LOG_REPARAMETERIZATION,
) -> ChainSummary:
    """
    Summarize a sampling-scale chain on the natural scale.

    Args:
        chain: (n, k) chain as returned by the samplers
        burn_in: Number of leading rows to discard
        reparam: Transform used while sampling (default log)

    Raises:
        ValueError: If burn_in leaves no draws
    """
    chain = np.asarray(chain, dtype=float)
    if chain.ndim != 2:
        raise ValueError(f"chain must be 2-D, got shape {chain.shape}")
    if not 0 <= burn_in < chain.shape[0]:
        raise ValueError(f"burn_in must be in [0, {chain.shape[0]}), got {burn_in}")

    draws = reparam.to_natural(chain[burn_in:])
    mean = draws.mean(axis=0)
    lower, median, upper = np.quantile(draws, [0.025, 0.5, 0.975], axis=0)

    return ChainSummary(
        mean=mean,
        median=median,
        lower=lower,
        upper=upper,
        generator=build_generator(mean, infer_n_states(chain.shape[1])),
        acceptance_rate=acceptance_rate(chain),
        n_draws=draws.shape[0],
        burn_in=burn_in,
    )


def negative_log_likelihood_surface(
    grid,
    data: Any,
    n_states: Optional[int] = None,
    time_scaled: bool = False,
) -> np.ndarray:
    """
    Evaluate -log-likelihood at each row of a natural-scale parameter grid.

    Grid points where the matrix exponential breaks down score ``+inf``.

    Args:
        grid: (m, k) natural-scale parameter vectors
        data: Observations or ``PanelData``

    Returns:
        (m,) array of negative log-likelihoods
    """
    grid = np.atleast_2d(np.asarray(grid, dtype=float))
    panel = resolve_state_count(as_panel_data(data, n_states), grid.shape[1])
    surface = np.empty(grid.shape[0], dtype=float)
    for row, params in enumerate(grid):
        try:
            surface[row] = -log_likelihood(params, panel, time_scaled=time_scaled)
        except NumericalInstability:
            surface[row] = np.inf
    return surface
