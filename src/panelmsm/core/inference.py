"""Sampling engine for panel CTMC models.

Separates the sampling run from model specification:
- PanelData: what was observed
- log_posterior: what the rates mean
- run_metropolis / run_hmc: how draws are produced
- SamplingResult: what came out
"""

from typing import Any, Dict, Optional, Union
from dataclasses import dataclass, field

import numpy as np

from panelmsm.core.chain import ProgressCallback
from panelmsm.core.data import as_panel_data
from panelmsm.core.generator import n_parameters
from panelmsm.core.gradients import GradientStrategy
from panelmsm.core.hmc import HMCConfig, run_hmc
from panelmsm.core.likelihood import log_likelihood
from panelmsm.core.metropolis import MetropolisConfig, run_metropolis
from panelmsm.core.posterior import log_posterior
from panelmsm.core.summary import ChainSummary, summarize_chain

METHODS = ("metropolis", "hmc")


@dataclass
class SamplingResult:
    """
    Output of one sampling run.

    Attributes:
        chain: (num_samples + 1, k) log-scale draws, row 0 is the start
        method: "metropolis" or "hmc"
        config: Tuning used for the run
        summary: Natural-scale summary after burn-in
        metadata: Run metadata (seed, time_scaled, ...)
    """

    chain: np.ndarray
    method: str
    config: Union[MetropolisConfig, HMCConfig]
    summary: ChainSummary
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def acceptance_rate(self) -> float:
        return self.summary.acceptance_rate

    def __repr__(self) -> str:
        return (
            f"SamplingResult(method={self.method}, shape={self.chain.shape}, "
            f"acceptance={self.acceptance_rate:.3f})"
        )


class PanelInference:
    """
    Bayesian estimation of a CTMC generator from panel data.

    Attributes:
        data: Formatted panel data shared by every evaluation
        time_scaled: Score transitions with their elapsed time instead of
            the unit-time model
    """

    def __init__(self, data: Any, n_states: Optional[int] = None, time_scaled: bool = False):
        self.data = as_panel_data(data, n_states)
        self.time_scaled = time_scaled

    @property
    def n_parameters(self) -> int:
        # A panel showing a single state still needs at least a 2-state model
        return n_parameters(max(self.data.n_states, 2))

    def log_likelihood(self, params) -> float:
        return log_likelihood(params, self.data, time_scaled=self.time_scaled)

    def log_posterior(self, theta, negate: bool = False) -> float:
        return log_posterior(theta, self.data, negate=negate, time_scaled=self.time_scaled)

    def sample(
        self,
        method: str = "metropolis",
        num_samples: int = 1000,
        start=None,
        burn_in: int = 0,
        rng: Optional[np.random.Generator] = None,
        progress: Optional[ProgressCallback] = None,
        **kwargs,
    ) -> SamplingResult:
        """
        Draw a posterior chain.

        Args:
            method: "metropolis" or "hmc"
            num_samples: Iterations to run
            start: Log-scale start vector (default zeros, i.e. all rates 1)
            burn_in: Rows dropped from the summary (the chain keeps them)
            rng: Random generator
            progress: Optional observer, called as progress(i, num_samples)
            **kwargs: Method-specific tuning
                - metropolis: step_size
                - hmc: epsilon, n_steps, gradient (GradientStrategy)

        Returns:
            SamplingResult
        """
        if start is None:
            start = np.zeros(self.n_parameters)

        if method == "metropolis":
            config = MetropolisConfig(step_size=kwargs.pop("step_size", 0.5))
            self._reject_unknown(kwargs)
            chain = run_metropolis(
                start, num_samples, config.step_size, self.data,
                rng=rng, progress=progress, time_scaled=self.time_scaled,
            )
        elif method == "hmc":
            config = HMCConfig(
                epsilon=kwargs.pop("epsilon", 0.05),
                n_steps=kwargs.pop("n_steps", 10),
            )
            gradient: Optional[GradientStrategy] = kwargs.pop("gradient", None)
            self._reject_unknown(kwargs)
            chain = run_hmc(
                start, num_samples, None, config.epsilon, config.n_steps, self.data,
                gradient=gradient, rng=rng, progress=progress, time_scaled=self.time_scaled,
            )
        else:
            raise ValueError(f"Unknown sampling method '{method}', expected one of {METHODS}")

        return SamplingResult(
            chain=chain,
            method=method,
            config=config,
            summary=summarize_chain(chain, burn_in=burn_in),
            metadata={"time_scaled": self.time_scaled, "burn_in": burn_in},
        )

    @staticmethod
    def _reject_unknown(kwargs: Dict[str, Any]) -> None:
        if kwargs:
            raise TypeError(f"Unexpected sampler options: {sorted(kwargs)}")

    def __repr__(self) -> str:
        return f"PanelInference({self.data!r}, time_scaled={self.time_scaled})"
