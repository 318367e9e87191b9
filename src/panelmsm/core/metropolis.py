"""
Random-walk Metropolis-Hastings over log-scale transition rates.

The proposal is an independent Gaussian step per coordinate, so it is
symmetric and the acceptance ratio reduces to the posterior ratio.
"""

from typing import Any, Callable, Optional, Tuple
from dataclasses import dataclass
import logging

import numpy as np

from panelmsm.core.chain import (
    ProgressCallback,
    accept_proposal,
    as_log_density,
    new_chain,
    validate_num_samples,
    validate_positive,
    validate_start,
)
from panelmsm.core.data import resolve_state_count
from panelmsm.core.posterior import LogPosterior

logger = logging.getLogger(__name__)


@dataclass
class MetropolisConfig:
    """Tuning for the random-walk sampler."""

    step_size: float = 0.5
    """Standard deviation of the per-coordinate Gaussian proposal."""

    def __post_init__(self):
        self.step_size = validate_positive("step_size", self.step_size)


def metropolis_step(
    theta: np.ndarray,
    log_density_current: float,
    log_density_fn: Callable[[np.ndarray], float],
    step_size: float,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, float, bool]:
    """
    One propose/accept cycle.

    Returns:
        (next_theta, log density at next_theta, accepted)
    """
    proposal = theta + step_size * rng.standard_normal(theta.shape)
    log_density_proposal = as_log_density(log_density_fn(proposal))

    if accept_proposal(log_density_current, log_density_proposal, rng):
        return proposal, log_density_proposal, True
    return theta, log_density_current, False


def run_metropolis(
    start,
    num_samples: int,
    step_size: float,
    data: Any,
    rng: Optional[np.random.Generator] = None,
    progress: Optional[ProgressCallback] = None,
    log_density: Optional[Callable[[np.ndarray], float]] = None,
    time_scaled: bool = False,
) -> np.ndarray:
    """
    Sample log-scale rates with random-walk Metropolis.

    No burn-in or thinning is applied; rejected proposals repeat the
    current row.

    Args:
        start: Log-scale start vector, length S*(S-1)
        num_samples: Number of iterations
        step_size: Proposal standard deviation
        data: Observations or ``PanelData``
        rng: Random generator (default: fresh ``default_rng()``)
        progress: Optional observer, called as progress(i, num_samples)
        log_density: Override for the target (default: log posterior of data)
        time_scaled: Score transitions with their elapsed time

    Returns:
        Chain of shape (num_samples + 1, S*(S-1)); row 0 is ``start``

    Raises:
        SamplerConfigError: Bad num_samples, step_size or start values
        InvalidDimension: Start length does not match the data's state count
    """
    config = MetropolisConfig(step_size=step_size)
    num_samples = validate_num_samples(num_samples)
    start = validate_start(start)
    panel = resolve_state_count(data, start.size)
    validate_start(start, panel.n_states)
    if rng is None:
        rng = np.random.default_rng()
    if log_density is None:
        log_density = LogPosterior(panel, time_scaled=time_scaled)

    chain = new_chain(start, num_samples)
    theta = chain[0].copy()
    current = as_log_density(log_density(theta))
    n_accepted = 0

    logger.info(
        "Metropolis: %d iterations, step_size=%.4g, %r",
        num_samples, config.step_size, panel,
    )

    for i in range(1, num_samples + 1):
        theta, current, accepted = metropolis_step(
            theta, current, log_density, config.step_size, rng
        )
        chain[i] = theta
        n_accepted += accepted

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("iter %d accepted=%s log_post=%.4f", i, accepted, current)
        if progress is not None:
            progress(i, num_samples)

    logger.info("Metropolis finished: acceptance rate %.3f", n_accepted / num_samples)
    return chain
