import numpy as np
import pandas as pd
import pytest

from panelmsm.core.simulation import simulate_panel

TRUE_Q = np.array([[-1.2, 1.2], [0.8, -0.8]])


@pytest.fixture
def rng():
    """Create a reproducible RNG."""
    return np.random.default_rng(42)


@pytest.fixture
def small_panel():
    """Two subjects: 1->2, 2->2 for subject 1 and 2->1 for subject 2."""
    return pd.DataFrame({
        "subject": [1, 1, 1, 2, 2],
        "time": [0.0, 1.0, 2.0, 0.0, 1.0],
        "state": [1, 2, 2, 2, 1],
    })


@pytest.fixture
def simulated_panel():
    """Two subjects observed over 50 unit steps from the reference generator."""
    return simulate_panel(TRUE_Q, horizon=50, n_subjects=2, rng=np.random.default_rng(11))


@pytest.fixture
def stuck_panel():
    """One subject observed three times, always in state 2."""
    return pd.DataFrame({
        "subject": [1, 1, 1],
        "time": [0.0, 1.0, 2.0],
        "state": [2, 2, 2],
    })
