import numpy as np
import pytest

from panelmsm.core.data import PanelData
from panelmsm.core.gradients import ForwardDifference
from panelmsm.core.hmc import HMCConfig
from panelmsm.core.inference import PanelInference, SamplingResult
from panelmsm.core.metropolis import MetropolisConfig
from panelmsm.core.posterior import log_posterior


def test_wraps_data_once(small_panel):
    inference = PanelInference(small_panel)

    assert isinstance(inference.data, PanelData)
    assert inference.n_parameters == 2
    assert inference.log_posterior([0.1, 0.2]) == pytest.approx(log_posterior([0.1, 0.2], small_panel))
    assert inference.log_posterior([0.1, 0.2], negate=True) == pytest.approx(
        -inference.log_posterior([0.1, 0.2])
    )


def test_metropolis_result(simulated_panel):
    result = PanelInference(simulated_panel).sample(
        "metropolis", num_samples=300, burn_in=50, rng=np.random.default_rng(0), step_size=0.6,
    )

    assert isinstance(result, SamplingResult)
    assert isinstance(result.config, MetropolisConfig)
    assert result.chain.shape == (301, 2)
    np.testing.assert_array_equal(result.chain[0], [0.0, 0.0])
    assert result.summary.n_draws == 251
    assert 0.0 < result.acceptance_rate < 1.0
    assert result.metadata["burn_in"] == 50


def test_hmc_result(small_panel):
    result = PanelInference(small_panel).sample(
        "hmc",
        num_samples=20,
        start=[0.5, -0.5],
        rng=np.random.default_rng(0),
        epsilon=0.1,
        n_steps=5,
        gradient=ForwardDifference(),
    )

    assert isinstance(result.config, HMCConfig)
    assert result.config.n_steps == 5
    assert result.chain.shape == (21, 2)
    np.testing.assert_array_equal(result.chain[0], [0.5, -0.5])


def test_time_scaled_flag_is_recorded(small_panel):
    result = PanelInference(small_panel, time_scaled=True).sample(
        "metropolis", num_samples=5, rng=np.random.default_rng(0)
    )
    assert result.metadata["time_scaled"] is True


def test_unknown_method(small_panel):
    with pytest.raises(ValueError, match="Unknown sampling method"):
        PanelInference(small_panel).sample("gibbs", num_samples=5)


def test_unknown_option(small_panel):
    with pytest.raises(TypeError):
        PanelInference(small_panel).sample("metropolis", num_samples=5, epsilon=0.1)


@pytest.mark.parametrize("state", [1, 2])
def test_default_start_for_single_state_data(stuck_panel, state):
    inference = PanelInference(stuck_panel.assign(state=state))
    result = inference.sample("metropolis", num_samples=10, rng=np.random.default_rng(2))

    assert inference.n_parameters == 2
    assert result.chain.shape == (11, 2)
    np.testing.assert_array_equal(result.chain[0], [0.0, 0.0])
