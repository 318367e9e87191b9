"""
Hamiltonian Monte Carlo over log-scale transition rates.

Potential energy is U(q) = -log posterior(q); kinetic energy is
K(p) = sum(p^2) / 2 with unit mass. Gradients of U come from an
injectable ``GradientStrategy`` since expm(Q) has no convenient
closed-form derivative.
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
    validate_positive_int,
    validate_start,
)
from panelmsm.core.data import resolve_state_count
from panelmsm.core.gradients import CentralDifference, GradientStrategy
from panelmsm.core.posterior import LogPosterior

logger = logging.getLogger(__name__)

PotentialFn = Callable[[np.ndarray, Any], float]


@dataclass
class HMCConfig:
    epsilon: float = 0.05
    """Leapfrog step size."""

    n_steps: int = 10
    """Leapfrog steps per proposal (L)."""

    def __post_init__(self):
        self.epsilon = validate_positive("epsilon", self.epsilon)
        self.n_steps = validate_positive_int("n_steps", self.n_steps)


def kinetic_energy(p: np.ndarray) -> float:
    return float(0.5 * np.sum(p ** 2))


def leapfrog(
    q: np.ndarray,
    p: np.ndarray,
    grad_fn: Callable[[np.ndarray], np.ndarray],
    epsilon: float,
    n_steps: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Integrate Hamilton's equations with ``n_steps`` leapfrog steps.

    Half momentum step, alternating full position/momentum steps, then a
    final half momentum step. The map is volume preserving and reversible:
    integrating from (q', -p') returns to (q, -p).

    Args:
        q: Start position
        p: Start momentum
        grad_fn: Gradient of the potential energy
        epsilon: Step size
        n_steps: Number of position updates (L)

    Returns:
        (q, p) at the end of the trajectory (momentum not negated)
    """
    q = np.array(q, dtype=float)
    p = np.array(p, dtype=float)

    p = p - 0.5 * epsilon * grad_fn(q)
    for i in range(1, n_steps + 1):
        q = q + epsilon * p
        if i != n_steps:
            p = p - epsilon * grad_fn(q)
    p = p - 0.5 * epsilon * grad_fn(q)
    return q, p


def hmc_step(
    q_current: np.ndarray,
    u_current: float,
    potential: Callable[[np.ndarray], float],
    grad_fn: Callable[[np.ndarray], np.ndarray],
    epsilon: float,
    n_steps: int,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, float, bool]:
    """
    One HMC transition.

    Draws p ~ N(0, I), integrates, negates the final momentum and accepts
    with probability min(1, exp(H_current - H_proposed)).

    Returns:
        (next position, potential energy there, accepted)
    """
    p_current = rng.standard_normal(q_current.shape)

    with np.errstate(invalid="ignore", over="ignore"):
        q, p = leapfrog(q_current, p_current, grad_fn, epsilon, n_steps)
    p = -p

    u_proposed = potential(q)
    h_current = u_current + kinetic_energy(p_current)
    with np.errstate(invalid="ignore", over="ignore"):
        h_proposed = u_proposed + kinetic_energy(p)

    # Energies enter as log densities -H so the shared -inf ordering applies
    if accept_proposal(-h_current, -h_proposed, rng):
        return q, float(u_proposed), True
    return q_current, u_current, False


def run_hmc(
    start,
    num_samples: int,
    potential_fn: Optional[PotentialFn],
    epsilon: float,
    L: int,
    data: Any,
    gradient: Optional[GradientStrategy] = None,
    rng: Optional[np.random.Generator] = None,
    progress: Optional[ProgressCallback] = None,
    time_scaled: bool = False,
) -> np.ndarray:
    """
    Sample log-scale rates with HMC.

    Args:
        start: Log-scale start vector, length S*(S-1)
        num_samples: Number of outer iterations (one chain row each)
        potential_fn: potential_fn(q, data) -> U(q); None uses the negated
            log posterior. ``data`` is passed as formatted ``PanelData``.
        epsilon: Leapfrog step size
        L: Leapfrog steps per iteration
        data: Observations or ``PanelData``
        gradient: Gradient strategy for U (default ``CentralDifference()``)
        rng: Random generator (default: fresh ``default_rng()``)
        progress: Optional observer, called as progress(i, num_samples)
        time_scaled: Score transitions with their elapsed time (default
            potential only)

    Returns:
        Chain of shape (num_samples + 1, S*(S-1)); row 0 is ``start``

    Raises:
        SamplerConfigError: Bad num_samples, epsilon, L or start values
        InvalidDimension: Start length does not match the data's state count
    """
    config = HMCConfig(epsilon=epsilon, n_steps=L)
    num_samples = validate_num_samples(num_samples)
    start = validate_start(start)
    panel = resolve_state_count(data, start.size)
    validate_start(start, panel.n_states)
    if rng is None:
        rng = np.random.default_rng()
    if gradient is None:
        gradient = CentralDifference()

    if potential_fn is None:
        potential = LogPosterior(panel, negate=True, time_scaled=time_scaled)
    else:
        def potential(q):
            return potential_fn(q, panel)

    def grad_fn(q):
        return gradient.gradient(potential, q)

    chain = new_chain(start, num_samples)
    q = chain[0].copy()
    u = -as_log_density(-potential(q))
    n_accepted = 0

    logger.info(
        "HMC: %d iterations, epsilon=%.4g, L=%d, gradient=%s, %r",
        num_samples, config.epsilon, config.n_steps, type(gradient).__name__, panel,
    )

    for i in range(1, num_samples + 1):
        q, u, accepted = hmc_step(q, u, potential, grad_fn, config.epsilon, config.n_steps, rng)
        chain[i] = q
        n_accepted += accepted

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("iter %d accepted=%s U=%.4f", i, accepted, u)
        if progress is not None:
            progress(i, num_samples)

    logger.info("HMC finished: acceptance rate %.3f", n_accepted / num_samples)
    return chain
