import numpy as np
import pytest

from panelmsm.core.summary import (
    ChainSummary,
    acceptance_rate,
    negative_log_likelihood_surface,
    summarize_chain,
)
from panelmsm.core.likelihood import log_likelihood


def test_acceptance_rate_counts_moves():
    chain = np.array([
        [0.0, 0.0],
        [0.0, 0.0],
        [0.1, 0.0],
        [0.1, 0.0],
        [0.1, 0.2],
    ])
    assert acceptance_rate(chain) == pytest.approx(0.5)


def test_acceptance_rate_single_row_is_nan():
    assert np.isnan(acceptance_rate(np.zeros((1, 2))))


def test_summary_on_natural_scale():
    chain = np.log(np.array([
        [5.0, 5.0],
        [1.0, 2.0],
        [3.0, 4.0],
    ]))
    summary = summarize_chain(chain, burn_in=1)

    assert isinstance(summary, ChainSummary)
    assert summary.n_draws == 2
    np.testing.assert_allclose(summary.mean, [2.0, 3.0])
    np.testing.assert_allclose(summary.median, [2.0, 3.0])
    assert np.all(summary.lower <= summary.median)
    assert np.all(summary.upper >= summary.median)
    np.testing.assert_allclose(summary.generator, [[-3.0, 3.0], [2.0, -2.0]])
    assert summary.acceptance_rate == pytest.approx(1.0)


def test_summary_frame_labels_transitions():
    summary = summarize_chain(np.zeros((4, 6)))
    frame = summary.to_frame()

    assert list(frame["transition"]) == ["2->1", "3->1", "1->2", "3->2", "1->3", "2->3"]
    np.testing.assert_allclose(frame["mean"], 1.0)


@pytest.mark.parametrize("burn_in", [-1, 3, 10])
def test_burn_in_bounds(burn_in):
    with pytest.raises(ValueError):
        summarize_chain(np.zeros((3, 2)), burn_in=burn_in)


def test_surface_matches_negative_log_likelihood(small_panel):
    grid = np.array([[0.5, 0.5], [0.8, 1.2], [2.0, 3.0]])
    surface = negative_log_likelihood_surface(grid, small_panel)

    expected = [-log_likelihood(row, small_panel) for row in grid]
    np.testing.assert_allclose(surface, expected)


def test_surface_marks_unstable_points(small_panel):
    surface = negative_log_likelihood_surface([[np.inf, 1.0], [1.0, 1.0]], small_panel)

    assert surface[0] == np.inf
    assert np.isfinite(surface[1])
