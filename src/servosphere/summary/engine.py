"""Reduce derived trajectories to per-trial summary statistics.

Every summary function has the same shape::

    table = summary_x(collection, table=None, ...)

It computes one or two scalars per trial and appends them as named columns
of a SummaryTable keyed by trial identity. Passing ``table=None`` creates
the table (one row per trial, collection order); passing an existing table
appends to it after checking that its identities match the collection.

Columns written:

- ``total_distance``: path length, sum of ``distance``
- ``net_displacement``: straight line from the origin to the last position
- ``tortuosity`` (or ``tortuosity_inverse``): net / total (or total / net)
- ``bearing_mean``, ``bearing_rho``: circular mean direction and concentration
- ``velocity_mean``: mean of defined velocities
- ``stop_count``, ``stop_duration_mean``: stop runs and their mean length (s)

Undefined results are NaN, never an exception and never a stand-in 0.
"""

import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from servosphere.contracts.base import require, require_columns
from servosphere.contracts.failure import MissingColumnError
from servosphere.contracts.invariants import SUMMARY_COLUMNS, SUMMARY_ORDER
from servosphere.kinematics.circular import circular_mean
from servosphere.summary.table import SummaryTable
from servosphere.trials.collection import Trial, TrialCollection

__all__ = [
    "summary_total_distance",
    "summary_displacement",
    "summary_tortuosity",
    "summary_avg_bearing",
    "summary_avg_velocity",
    "summary_stops",
    "summarize",
]

logger = logging.getLogger(__name__)


def _check_trials(collection: TrialCollection, statistic: str) -> None:
    """Check a statistic's input columns on every trial."""
    for trial in collection:
        require_columns(trial.data, SUMMARY_COLUMNS[statistic]["requires"],
                        f"trial '{trial.trial_id}'", stage=statistic)


def _by_id(collection: TrialCollection, values: list) -> dict:
    return dict(zip(collection.ids, values))


def summary_total_distance(collection: TrialCollection,
                           table: Optional[SummaryTable] = None,
                           workers: int = 1) -> SummaryTable:
    """Append ``total_distance``: the sum of ``distance`` over a trial."""
    _check_trials(collection, "total_distance")
    table = SummaryTable.ensure(collection, table)

    totals = collection.collect(
        lambda trial: float(trial.data["distance"].sum()),
        stage="total_distance", workers=workers,
    )
    table.add_column("total_distance", _by_id(collection, totals))
    return table


def _net_displacement(trial: Trial) -> float:
    if len(trial) == 0:
        return 0.0
    # Position starts at the origin, so the last position is the displacement
    last = trial.data.iloc[-1]
    return float(np.hypot(last["x"], last["y"]))


def summary_displacement(collection: TrialCollection,
                         table: Optional[SummaryTable] = None,
                         workers: int = 1) -> SummaryTable:
    """Append ``net_displacement``: straight-line distance from start to end.

    Requires the position stage (``x``, ``y``). This is the displacement
    between the first and last absolute positions, not the path length.
    """
    _check_trials(collection, "displacement")
    table = SummaryTable.ensure(collection, table)

    values = collection.collect(_net_displacement, stage="displacement", workers=workers)
    table.add_column("net_displacement", _by_id(collection, values))
    return table


def summary_tortuosity(collection: TrialCollection,
                       table: Optional[SummaryTable] = None,
                       inverse: bool = False) -> SummaryTable:
    """Append path straightness from already-summarized columns.

    Parameters
    ----------
    collection : TrialCollection
        Used only to validate identities.
    table : SummaryTable
        Must already contain ``total_distance`` and ``net_displacement``.
    inverse : bool, default False
        False: ``tortuosity`` = net_displacement / total_distance, in [0, 1]
        (1 is a straight path). True: ``tortuosity_inverse`` =
        total_distance / net_displacement, >= 1.

    Raises
    ------
    MissingColumnError
        If either input column is absent (or there is no table yet).

    Notes
    -----
    A zero denominator (stationary trial, or a closed loop when inverse)
    yields NaN.
    """
    required = SUMMARY_COLUMNS["tortuosity"]["table_requires"]
    if table is None:
        raise MissingColumnError(required[0], "summary table (no table yet)", "tortuosity")
    table = SummaryTable.ensure(collection, table)
    table.require(required, stage="tortuosity")

    total = table["total_distance"].to_numpy(dtype=float)
    net = table["net_displacement"].to_numpy(dtype=float)

    if inverse:
        numerator, denominator, name = total, net, "tortuosity_inverse"
    else:
        numerator, denominator, name = net, total, "tortuosity"

    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = np.where(denominator > 0, numerator / denominator, np.nan)

    # Rounding in the cumulative sums can push a straight path past the bound
    ratio = np.maximum(ratio, 1.0) if inverse else np.minimum(ratio, 1.0)

    table.add_column(name, pd.Series(ratio, index=table.frame.index))
    return table


def summary_avg_bearing(collection: TrialCollection,
                        table: Optional[SummaryTable] = None,
                        workers: int = 1) -> SummaryTable:
    """Append ``bearing_mean`` and ``bearing_rho`` (circular statistics).

    Rows with undefined bearing are excluded. A trial with no defined
    bearing gets NaN for both; a single defined bearing gives rho = 1.
    See ``servosphere.kinematics.circular.circular_mean``.
    """
    _check_trials(collection, "avg_bearing")
    table = SummaryTable.ensure(collection, table)

    results = collection.collect(
        lambda trial: circular_mean(trial.data["bearing"].to_numpy(dtype=float)),
        stage="avg_bearing", workers=workers,
    )
    table.add_column("bearing_mean", _by_id(collection, [mean for mean, _ in results]))
    table.add_column("bearing_rho", _by_id(collection, [rho for _, rho in results]))
    return table


def summary_avg_velocity(collection: TrialCollection,
                         table: Optional[SummaryTable] = None,
                         workers: int = 1) -> SummaryTable:
    """Append ``velocity_mean``, the mean over defined velocities (NaN if none)."""
    _check_trials(collection, "avg_velocity")
    table = SummaryTable.ensure(collection, table)

    means = collection.collect(
        lambda trial: float(trial.data["velocity"].astype(float).mean()),
        stage="avg_velocity", workers=workers,
    )
    table.add_column("velocity_mean", _by_id(collection, means))
    return table


def stop_runs(df: pd.DataFrame, stop_threshold: float) -> pd.Series:
    """Duration in seconds of each maximal run of stopped rows.

    A row is stopped when ``velocity <= stop_threshold``. Rows with
    undefined velocity are not stopped and end a run.
    """
    stopped = df["velocity"].astype(float) <= stop_threshold
    if not stopped.any():
        return pd.Series(dtype=float)

    run_id = (stopped != stopped.shift()).cumsum()
    return df["dT"].astype(float)[stopped].groupby(run_id[stopped]).sum() / 1000.0


def summary_stops(collection: TrialCollection,
                  table: Optional[SummaryTable] = None,
                  stop_threshold: float = 0.0,
                  workers: int = 1) -> SummaryTable:
    """Append ``stop_count`` and ``stop_duration_mean``.

    Parameters
    ----------
    stop_threshold : float, default 0.0
        Velocity at or below which a row counts as stopped (sensor noise).

    Notes
    -----
    A stop event is a maximal run of consecutive stopped rows; its duration
    is the sum of the run's dT in seconds. A trial without stops reports
    ``stop_count`` 0 and ``stop_duration_mean`` NaN.
    """
    require(np.isfinite(stop_threshold), f"stop_threshold must be finite, got {stop_threshold}")
    _check_trials(collection, "stops")
    table = SummaryTable.ensure(collection, table)

    runs = collection.collect(
        lambda trial: stop_runs(trial.data, stop_threshold),
        stage="stops", workers=workers,
    )
    counts = [int(len(durations)) for durations in runs]
    means = [float(durations.mean()) if len(durations) else np.nan for durations in runs]

    table.add_column("stop_count", _by_id(collection, counts))
    table.add_column("stop_duration_mean", _by_id(collection, means))
    logger.debug("Stops at threshold %s: %d total events", stop_threshold, sum(counts))
    return table


def summarize(collection: TrialCollection, statistics: Optional[Iterable[str]] = None,
              table: Optional[SummaryTable] = None, stop_threshold: float = 0.0,
              tortuosity_inverse: bool = False, workers: int = 1) -> SummaryTable:
    """Apply several summaries in dependency order.

    Parameters
    ----------
    statistics : iterable of str, optional
        Names from SUMMARY_ORDER. Default: all of them. Tortuosity runs
        after total distance and displacement regardless of the order
        given.
    table : SummaryTable, optional
        Existing table to append to.

    Examples
    --------
    >>> table = summarize(derived, stop_threshold=0.5)
    >>> table.to_frame().columns[:3].tolist()
    ['id', 'total_distance', 'net_displacement']
    """
    requested = list(SUMMARY_ORDER) if statistics is None else list(statistics)
    unknown = [name for name in requested if name not in SUMMARY_COLUMNS]
    require(not unknown, f"Unknown summary statistic(s): {unknown}")

    for name in SUMMARY_ORDER:
        if name not in requested:
            continue
        if name == "total_distance":
            table = summary_total_distance(collection, table, workers=workers)
        elif name == "displacement":
            table = summary_displacement(collection, table, workers=workers)
        elif name == "tortuosity":
            table = summary_tortuosity(collection, table, inverse=tortuosity_inverse)
        elif name == "avg_bearing":
            table = summary_avg_bearing(collection, table, workers=workers)
        elif name == "avg_velocity":
            table = summary_avg_velocity(collection, table, workers=workers)
        elif name == "stops":
            table = summary_stops(collection, table, stop_threshold=stop_threshold,
                                  workers=workers)

    if table is None:
        table = SummaryTable.for_collection(collection)
    logger.info("Summarized %d trials: %s", len(table), ", ".join(table.columns))
    return table
