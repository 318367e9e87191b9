"""
Prior and posterior densities over transition rates.

Samplers work on theta = log(rate). ``Reparameterization`` holds the
forward (sampling -> natural) and inverse transforms so the log scale is
applied in one place instead of inside each sampler.
"""

from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass
import logging

import numpy as np
from scipy import stats

from panelmsm.core.data import PanelData, as_panel_data, resolve_state_count
from panelmsm.core.errors import NumericalInstability
from panelmsm.core.likelihood import log_likelihood

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reparameterization:
    """
    Bijection between the sampling scale and natural-scale rates.

    Attributes:
        forward: sampling-scale vector -> natural-scale rates
        inverse: natural-scale rates -> sampling-scale vector
        name: Label used in summaries
    """

    forward: Callable[[np.ndarray], np.ndarray]
    inverse: Callable[[np.ndarray], np.ndarray]
    name: str = "identity"

    def to_natural(self, theta) -> np.ndarray:
        with np.errstate(over="ignore", under="ignore"):
            return self.forward(np.asarray(theta, dtype=float))

    def to_sampling(self, params) -> np.ndarray:
        with np.errstate(divide="ignore"):
            return self.inverse(np.asarray(params, dtype=float))


LOG_REPARAMETERIZATION = Reparameterization(forward=np.exp, inverse=np.log, name="log")


def log_prior(params) -> float:
    """
    Independent log-normal(0, 1) prior on each natural-scale rate.

    Evaluated as the standard normal log-density of log(rate), summed
    over parameters.
    """
    params = np.asarray(params, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.sum(stats.norm.logpdf(np.log(params))))


def log_posterior(
    theta,
    data: Any,
    negate: bool = False,
    n_states: Optional[int] = None,
    time_scaled: bool = False,
    reparam: Reparameterization = LOG_REPARAMETERIZATION,
) -> float:
    """
    Unnormalized log-posterior at a sampling-scale parameter vector.

    Non-finite results (overflowing rates, a non-finite matrix exponential,
    impossible transitions) come back as ``-inf`` (``+inf`` when negated) so
    accept/reject steps reject them.

    Args:
        theta: Sampling-scale (log) parameters
        data: Observations or ``PanelData``
        negate: Return -log posterior (HMC potential energy)
        n_states: Optional explicit state count
        time_scaled: Score transitions with their elapsed time
        reparam: Sampling-scale transform (default log)

    Raises:
        InvalidDimension: If len(theta) != S*(S-1)
    """
    params = reparam.to_natural(theta)
    try:
        value = log_likelihood(params, data, n_states=n_states, time_scaled=time_scaled)
        value += log_prior(params)
    except NumericalInstability as exc:
        logger.debug("Posterior treated as -inf: %s", exc)
        value = -np.inf

    if np.isnan(value):
        value = -np.inf
    return -value if negate else value


def negative_log_posterior(theta, data: Any) -> float:
    """Potential energy U(theta) = -log posterior, the default HMC potential."""
    return log_posterior(theta, data, negate=True)


class LogPosterior:
    """
    Log-posterior bound to one dataset.

    Formats the data once so repeated evaluations inside a sampler only
    pay for the matrix exponential. Data that show fewer than two states
    are sized from the first parameter vector of each length and reused.
    """

    def __init__(
        self,
        data: Any,
        negate: bool = False,
        n_states: Optional[int] = None,
        time_scaled: bool = False,
        reparam: Reparameterization = LOG_REPARAMETERIZATION,
    ):
        self.data = as_panel_data(data, n_states)
        self.negate = negate
        self.time_scaled = time_scaled
        self.reparam = reparam
        self._sized: Dict[int, PanelData] = {}

    @property
    def n_states(self) -> int:
        return self.data.n_states

    def __call__(self, theta) -> float:
        return log_posterior(
            theta,
            self._panel_for(np.size(theta)),
            negate=self.negate,
            time_scaled=self.time_scaled,
            reparam=self.reparam,
        )

    def _panel_for(self, n_params: int) -> PanelData:
        if not self.data.states_underdetermined:
            return self.data
        panel = self._sized.get(n_params)
        if panel is None:
            panel = resolve_state_count(self.data, n_params)
            self._sized[n_params] = panel
        return panel

    def __repr__(self) -> str:
        sign = "-" if self.negate else ""
        return f"LogPosterior({sign}log p, reparam={self.reparam.name}, data={self.data!r})"
