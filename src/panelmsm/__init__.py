"""
PANELMSM: Bayesian estimation of multi-state Markov models from panel data

Estimates the transition-intensity matrix of a continuous-time Markov chain
observed at discrete times, with Metropolis-Hastings and HMC samplers.
"""

__version__ = "0.1.0"

from panelmsm.core.errors import InvalidDimension, NumericalInstability, SamplerConfigError
from panelmsm.core.generator import build_generator, parameter_index_map
from panelmsm.core.transitions import transition_probabilities
from panelmsm.core.data import PanelData, format_observations
from panelmsm.core.likelihood import log_likelihood
from panelmsm.core.posterior import log_posterior, log_prior
from panelmsm.core.metropolis import run_metropolis
from panelmsm.core.hmc import run_hmc
from panelmsm.core.simulation import simulate_panel
from panelmsm.core.summary import summarize_chain
from panelmsm.core.inference import PanelInference, SamplingResult

__all__ = [
    "InvalidDimension",
    "NumericalInstability",
    "SamplerConfigError",
    "build_generator",
    "parameter_index_map",
    "transition_probabilities",
    "PanelData",
    "format_observations",
    "log_likelihood",
    "log_posterior",
    "log_prior",
    "run_metropolis",
    "run_hmc",
    "simulate_panel",
    "summarize_chain",
    "PanelInference",
    "SamplingResult",
    "__version__",
]
