"""Panel observation data: formatting and the validated container used by the likelihood."""

from typing import Any, Dict, Optional
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from panelmsm.core.errors import InvalidDimension
from panelmsm.core.generator import infer_n_states

REQUIRED_COLUMNS = ("subject", "time", "state")
DERIVED_COLUMNS = ("prev_state", "dt")


def format_observations(observations: Any) -> pd.DataFrame:
    """
    Order observations within subject and derive the lagged state.

    Sorts by (subject, time) and adds:
    - ``prev_state``: state at the subject's previous record (``<NA>`` on
      the first record)
    - ``dt``: elapsed time since the previous record (NaN on the first)

    Existing ``prev_state``/``dt`` columns are recomputed, so formatting
    formatted data is a no-op.

    Args:
        observations: DataFrame (or anything ``pd.DataFrame`` accepts) with
            columns subject, time, state

    Returns:
        New DataFrame; the input is not modified

    Raises:
        ValueError: Missing columns, missing values, non-integer or
            non-positive states, negative times, or repeated times within
            a subject
    """
    frame = pd.DataFrame(observations).copy()
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise ValueError(f"Observations are missing required columns: {missing}")

    frame = frame.drop(columns=[c for c in DERIVED_COLUMNS if c in frame.columns])
    if frame[list(REQUIRED_COLUMNS)].isna().any().any():
        raise ValueError("Observations contain missing subject/time/state values")

    states = frame["state"].to_numpy(dtype=float)
    if np.any(states != np.round(states)) or np.any(states < 1):
        raise ValueError("States must be integers labelled from 1")
    frame["state"] = states.astype(np.int64)
    frame["time"] = frame["time"].astype(float)
    if (frame["time"] < 0).any():
        raise ValueError("Observation times must be non-negative")

    # Stable sort keeps input order for any ties, which are rejected below
    frame = frame.sort_values(["subject", "time"], kind="mergesort").reset_index(drop=True)
    if frame.duplicated(subset=["subject", "time"]).any():
        raise ValueError("Observation times must be strictly increasing within each subject")

    by_subject = frame.groupby("subject", sort=False)
    frame["prev_state"] = by_subject["state"].shift(1).astype("Int64")
    frame["dt"] = by_subject["time"].diff()
    return frame


def n_states_in(data: Any) -> int:
    """Number of distinct states observed in ``data``."""
    if isinstance(data, PanelData):
        return data.n_states
    return int(pd.DataFrame(data)["state"].nunique())


@dataclass
class PanelData:
    """
    Formatted panel observations, ready for repeated likelihood evaluation.

    The formatted frame is read-only input: samplers share one instance
    across every likelihood call of a run. Transition rows (records with a
    defined ``prev_state``) are pre-extracted as 0-based index arrays.

    Attributes:
        frame: Observations with columns subject, time, state (formatted on init)
        n_states: Number of states S (default: distinct states in the data)
        metadata: Free-form metadata (source file, simulation settings, ...)

    When ``n_states`` is not given and fewer than two distinct states are
    observed, the data cannot size the model. ``n_states`` is then the
    largest label seen (a lower bound) and ``states_underdetermined`` is
    set; ``resolve_state_count`` sizes such a panel from the rate vector.
    """

    frame: pd.DataFrame
    n_states: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.frame = format_observations(self.frame)
        observed = int(self.frame["state"].nunique())
        max_state = int(self.frame["state"].max()) if len(self.frame) else 0

        self.states_underdetermined = self.n_states is None and observed < 2
        if self.n_states is None:
            self.n_states = max_state if self.states_underdetermined else observed

        if max_state > self.n_states:
            raise InvalidDimension(
                f"State label {max_state} exceeds the {self.n_states}-state model; "
                "pass n_states explicitly if some states are unobserved"
            )

        has_prev = self.frame["prev_state"].notna().to_numpy()
        transitions = self.frame.loc[has_prev]
        self.from_index = transitions["prev_state"].to_numpy(dtype=np.int64) - 1
        self.to_index = transitions["state"].to_numpy(dtype=np.int64) - 1
        self.gaps = transitions["dt"].to_numpy(dtype=float)

        counts = np.zeros((self.n_states, self.n_states), dtype=np.int64)
        np.add.at(counts, (self.from_index, self.to_index), 1)
        self.counts = counts

    @classmethod
    def from_records(cls, records, n_states: Optional[int] = None, **metadata) -> "PanelData":
        """
        Create from an iterable of (subject, time, state) tuples.

        Args:
            records: Iterable of (subject, time, state)
            n_states: Optional explicit state count
            **metadata: Additional metadata as keyword args
        """
        frame = pd.DataFrame(list(records), columns=list(REQUIRED_COLUMNS))
        return cls(frame=frame, n_states=n_states, metadata=metadata)

    @property
    def n_subjects(self) -> int:
        return int(self.frame["subject"].nunique())

    @property
    def n_transitions(self) -> int:
        return int(self.from_index.size)

    def __len__(self) -> int:
        return len(self.frame)

    def __repr__(self) -> str:
        return (
            f"PanelData(subjects={self.n_subjects}, records={len(self)}, "
            f"transitions={self.n_transitions}, states={self.n_states})"
        )


def as_panel_data(data: Any, n_states: Optional[int] = None) -> PanelData:
    """Coerce raw or formatted observations to ``PanelData``, reusing instances."""
    if isinstance(data, PanelData):
        if n_states is None or n_states == data.n_states:
            return data
        return PanelData(frame=data.frame, n_states=n_states, metadata=dict(data.metadata))
    return PanelData(frame=data, n_states=n_states)


def resolve_state_count(data: Any, n_params: int) -> PanelData:
    """
    Size the state space of ``data`` from the length of a rate vector.

    Only panels with ``states_underdetermined`` are resized; any other panel
    is returned unchanged and checked later against the rate vector.

    Raises:
        InvalidDimension: If ``n_params`` is not S*(S-1) for some S, or a
            state label exceeds that S
    """
    panel = as_panel_data(data)
    if panel.states_underdetermined:
        n_states = infer_n_states(n_params)
        if n_states != panel.n_states:
            panel = as_panel_data(panel, n_states)
    return panel
