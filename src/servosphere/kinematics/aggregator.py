"""Down-sample trials by collapsing consecutive rows into windows.

The servosphere samples movement at a high rate and the individual
increments are dominated by sensor noise. Aggregation groups consecutive,
non-overlapping windows of ``window_size`` rows into one row:

- Incremental columns (dT, dx, dy) are summed: the aggregated row is the
  total elapsed time and net displacement over the window.
- The stimulus column takes one representative value per window, chosen by
  ``categorical_policy``.
- Every other (metadata) column is copied from the window's first row.

The last window may be shorter than ``window_size``.
"""

import logging
from typing import Literal

import numpy as np
import pandas as pd

from servosphere.contracts.base import require, require_columns
from servosphere.contracts.failure import InvalidWindowError
from servosphere.contracts.invariants import INCREMENTAL_COLUMNS
from servosphere.trials.collection import Trial, TrialCollection

__all__ = ["aggregate"]

logger = logging.getLogger(__name__)

CategoricalPolicy = Literal["first", "majority"]


def _majority(values: pd.Series):
    """Most frequent value; ties go to the value seen first."""
    counts = values.value_counts(sort=False, dropna=False)
    return counts.idxmax()


def _aggregate_trial(trial: Trial, window_size: int,
                     categorical_policy: CategoricalPolicy) -> pd.DataFrame:
    """Aggregate one trial."""
    df = trial.data
    require_columns(df, INCREMENTAL_COLUMNS + ("stimulus",),
                    f"trial '{trial.trial_id}'", stage="Aggregate")

    window = np.arange(len(df)) // window_size

    # First row of each window carries the metadata
    out = df.iloc[::window_size].reset_index(drop=True).copy()

    sums = df[list(INCREMENTAL_COLUMNS)].groupby(window).sum()
    for col in INCREMENTAL_COLUMNS:
        out[col] = sums[col].to_numpy()

    stimulus_groups = df["stimulus"].groupby(window)
    mixed = stimulus_groups.nunique(dropna=False) > 1
    if mixed.any():
        logger.warning(
            "Trial %s: %d window(s) span a stimulus change (first at window %d); "
            "using '%s' value",
            trial.trial_id, int(mixed.sum()), int(mixed.idxmax()), categorical_policy
        )
        if categorical_policy == "majority":
            out["stimulus"] = stimulus_groups.agg(_majority).to_numpy()

    return out


def aggregate(collection: TrialCollection, window_size: int,
              categorical_policy: CategoricalPolicy = "first",
              workers: int = 1) -> TrialCollection:
    """Collapse each trial into consecutive windows of ``window_size`` rows.

    Parameters
    ----------
    collection : TrialCollection
        Cleaned trials (stimulus, dT, dx, dy present).
    window_size : int
        Rows per window, 1 <= window_size <= rows in every trial.
        A window size of 1 returns trials unchanged, empty ones included.
    categorical_policy : {"first", "majority"}, default "first"
        Representative stimulus for a window that spans a stimulus change.
        "majority" picks the most frequent value (ties: first seen).
    workers : int, default 1
        Thread pool size for per-trial processing.

    Returns
    -------
    TrialCollection
        One row per window, ceil(n / window_size) rows per trial, in
        window order.

    Raises
    ------
    InvalidWindowError
        If window_size is not a positive integer or exceeds the row count
        of any trial (the error names the trial).
    MissingColumnError
        If a trial lacks stimulus, dT, dx or dy.

    Examples
    --------
    >>> coarse = aggregate(collection, window_size=10)
    >>> [len(t) for t in coarse]
    [30, 28]
    """
    require(
        isinstance(window_size, (int, np.integer)) and not isinstance(window_size, bool),
        f"Aggregation window size must be an integer, got {window_size!r}",
        InvalidWindowError,
    )
    if window_size <= 0:
        raise InvalidWindowError(
            f"Aggregation window size must be positive, got {window_size}",
            window_size=window_size,
        )
    require(
        categorical_policy in ("first", "majority"),
        f"Unknown categorical policy: {categorical_policy!r}",
    )

    if window_size == 1:
        logger.debug("Window size 1: aggregation is the identity")
        return TrialCollection(list(collection), key=collection.key)

    for trial in collection:
        if window_size > len(trial):
            raise InvalidWindowError(
                f"Aggregation window size {window_size} exceeds the "
                f"{len(trial)} rows of trial '{trial.trial_id}'",
                window_size=window_size,
                trial_id=trial.trial_id,
            )

    aggregated = collection.map(
        lambda trial: _aggregate_trial(trial, window_size, categorical_policy),
        stage="aggregate",
        workers=workers,
    )
    logger.info("Aggregated %d trials with window size %d", len(aggregated), window_size)
    return aggregated
