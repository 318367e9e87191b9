"""Core numerics: generators, likelihood, posterior, and samplers."""

from panelmsm.core.errors import InvalidDimension, NumericalInstability, SamplerConfigError
from panelmsm.core.generator import (
    build_generator,
    generator_to_parameters,
    infer_n_states,
    n_parameters,
    parameter_index_map,
)
from panelmsm.core.transitions import TransitionMatrixCache, transition_probabilities
from panelmsm.core.data import (
    PanelData,
    as_panel_data,
    format_observations,
    n_states_in,
    resolve_state_count,
)
from panelmsm.core.likelihood import log_likelihood, transition_counts
from panelmsm.core.posterior import (
    LOG_REPARAMETERIZATION,
    LogPosterior,
    Reparameterization,
    log_posterior,
    log_prior,
    negative_log_posterior,
)
from panelmsm.core.gradients import CentralDifference, ForwardDifference, GradientStrategy
from panelmsm.core.metropolis import MetropolisConfig, metropolis_step, run_metropolis
from panelmsm.core.hmc import HMCConfig, hmc_step, leapfrog, run_hmc
from panelmsm.core.simulation import simulate_panel
from panelmsm.core.summary import (
    ChainSummary,
    acceptance_rate,
    negative_log_likelihood_surface,
    summarize_chain,
)
from panelmsm.core.inference import PanelInference, SamplingResult

__all__ = [
    "InvalidDimension",
    "NumericalInstability",
    "SamplerConfigError",
    "build_generator",
    "generator_to_parameters",
    "infer_n_states",
    "n_parameters",
    "parameter_index_map",
    "TransitionMatrixCache",
    "transition_probabilities",
    "PanelData",
    "as_panel_data",
    "format_observations",
    "n_states_in",
    "resolve_state_count",
    "log_likelihood",
    "transition_counts",
    "LOG_REPARAMETERIZATION",
    "LogPosterior",
    "Reparameterization",
    "log_posterior",
    "log_prior",
    "negative_log_posterior",
    "CentralDifference",
    "ForwardDifference",
    "GradientStrategy",
    "MetropolisConfig",
    "metropolis_step",
    "run_metropolis",
    "HMCConfig",
    "hmc_step",
    "leapfrog",
    "run_hmc",
    "simulate_panel",
    "ChainSummary",
    "acceptance_rate",
    "negative_log_likelihood_surface",
    "summarize_chain",
    "PanelInference",
    "SamplingResult",
]
