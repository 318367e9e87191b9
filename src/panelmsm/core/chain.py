"""Shared chain bookkeeping and the accept/reject rule used by both samplers."""

from typing import Callable, Optional
import math

import numpy as np

from panelmsm.core.errors import InvalidDimension, SamplerConfigError
from panelmsm.core.generator import n_parameters

ProgressCallback = Callable[[int, int], None]
"""Observer called as ``progress(iteration, num_samples)`` after each step."""


def as_log_density(value: float) -> float:
    """Map NaN onto -inf so log densities are totally ordered."""
    value = float(value)
    return -math.inf if math.isnan(value) else value


def accept_proposal(log_current: float, log_proposed: float, rng: np.random.Generator) -> bool:
    """
    Metropolis accept/reject on log densities.

    - non-finite proposal: reject
    - finite proposal, non-finite current state: accept
    - otherwise accept iff u < exp(log_proposed - log_current), u ~ U(0, 1)

    A uniform draw is consumed on every call so the random stream does not
    depend on which branch is taken.
    """
    u = rng.uniform()
    log_current = as_log_density(log_current)
    log_proposed = as_log_density(log_proposed)

    if not math.isfinite(log_proposed):
        return False
    if not math.isfinite(log_current):
        return True
    log_ratio = log_proposed - log_current
    if log_ratio >= 0:
        return True
    return u < math.exp(log_ratio)


def validate_positive_int(name: str, value) -> int:
    try:
        valid = not isinstance(value, bool) and int(value) == value and value >= 1
    except (TypeError, ValueError, OverflowError):
        valid = False
    if not valid:
        raise SamplerConfigError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def validate_num_samples(num_samples) -> int:
    return validate_positive_int("num_samples", num_samples)


def validate_positive(name: str, value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise SamplerConfigError(f"{name} must be a positive number, got {value!r}") from exc
    if not (math.isfinite(value) and value > 0):
        raise SamplerConfigError(f"{name} must be positive and finite, got {value}")
    return value


def validate_start(start, n_states: Optional[int] = None) -> np.ndarray:
    """
    Check a sampling-scale start vector.

    Raises:
        SamplerConfigError: Not 1-D, empty, or non-finite
        InvalidDimension: Length does not match S*(S-1) for ``n_states``
    """
    start = np.array(start, dtype=float)
    if start.ndim != 1 or start.size == 0:
        raise SamplerConfigError(f"start must be a non-empty 1-D vector, got shape {start.shape}")
    if not np.all(np.isfinite(start)):
        raise SamplerConfigError("start must be finite")
    if n_states is not None and n_states >= 2 and start.size != n_parameters(n_states):
        raise InvalidDimension(
            f"start has {start.size} entries, a {n_states}-state model needs "
            f"{n_parameters(n_states)}"
        )
    return start


def new_chain(start: np.ndarray, num_samples: int) -> np.ndarray:
    """Allocate a (num_samples + 1, k) chain with row 0 set to ``start``."""
    chain = np.empty((num_samples + 1, start.size), dtype=float)
    chain[0] = start
    return chain
