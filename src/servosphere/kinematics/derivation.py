"""Derive kinematic variables from incremental displacement.

Each derivation is a declared Stage with the columns it requires and the
columns it produces (see ``servosphere.contracts.invariants``). Applying a
stage checks its requirements on every trial first and raises
MissingColumnError naming the column, trial and stage, instead of silently
computing from absent data.

Stages, in dependency order:

=============  =====================  ==========================================
Stage          Column(s)              Rule
=============  =====================  ==========================================
position       x, y                   cumulative dx, dy from the origin
distance       distance               hypot(dx, dy)
bearing        bearing                atan2(dx, dy) in degrees, [0, 360)
turn_angle     turnAngle              bearing - previous bearing, (-180, 180]
turn_velocity  turnVelocity           turnAngle / seconds
velocity       velocity               distance / seconds
=============  =====================  ==========================================

Undefined values (no movement, first row, zero elapsed time) are NaN.
"""

import logging
from typing import Callable, Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from servosphere.contracts.base import require, require_columns
from servosphere.contracts.invariants import STAGE_COLUMNS, STAGE_ORDER
from servosphere.kinematics.circular import bearing_from_xy, wrap_turn
from servosphere.trials.collection import Trial, TrialCollection

__all__ = [
    "Stage",
    "STAGES",
    "calc_position",
    "calc_distance",
    "calc_bearing",
    "calc_turn_angle",
    "calc_turn_velocity",
    "calc_velocity",
    "derive_kinematics",
]

logger = logging.getLogger(__name__)


def _seconds(dt: pd.Series) -> pd.Series:
    """Elapsed milliseconds to seconds; zero elapsed time becomes NaN."""
    return dt.where(dt > 0) / 1000.0


def _position(df: pd.DataFrame) -> pd.DataFrame:
    df["x"] = df["dx"].cumsum()
    df["y"] = df["dy"].cumsum()
    return df


def _distance(df: pd.DataFrame) -> pd.DataFrame:
    df["distance"] = np.hypot(df["dx"].to_numpy(dtype=float), df["dy"].to_numpy(dtype=float))
    return df


def _bearing(df: pd.DataFrame) -> pd.DataFrame:
    df["bearing"] = bearing_from_xy(df["dx"], df["dy"])
    return df


def _turn_angle(df: pd.DataFrame) -> pd.DataFrame:
    bearing = df["bearing"].astype(float)
    # shift() leaves the first row NaN: no previous move
    df["turnAngle"] = wrap_turn((bearing - bearing.shift(1)).to_numpy())
    return df


def _turn_velocity(df: pd.DataFrame) -> pd.DataFrame:
    df["turnVelocity"] = df["turnAngle"].astype(float) / _seconds(df["dT"].astype(float))
    return df


def _velocity(df: pd.DataFrame) -> pd.DataFrame:
    df["velocity"] = df["distance"].astype(float) / _seconds(df["dT"].astype(float))
    return df


class Stage:
    """A per-trial derivation with declared input and output columns.

    Parameters
    ----------
    name : str
        Stage name, a key of STAGE_COLUMNS.
    func : callable
        Takes a copy of the trial DataFrame, adds the produced columns and
        returns it.
    """

    def __init__(self, name: str, func: Callable[[pd.DataFrame], pd.DataFrame]):
        self.name = name
        self.func = func
        self.requires: Tuple[str, ...] = STAGE_COLUMNS[name]["requires"]
        self.produces: Tuple[str, ...] = STAGE_COLUMNS[name]["produces"]

    def __repr__(self) -> str:
        return f"Stage({self.name!r}, requires={self.requires}, produces={self.produces})"

    def check(self, trial: Trial) -> None:
        require_columns(trial.data, self.requires, f"trial '{trial.trial_id}'", stage=self.name)

    def run(self, trial: Trial) -> pd.DataFrame:
        df = self.func(trial.data.copy())
        undefined = int(df[list(self.produces)].isna().any(axis=1).sum())
        if undefined:
            logger.debug("Stage %s, trial %s: %d undefined row(s)",
                         self.name, trial.trial_id, undefined)
        return df

    def apply(self, collection: TrialCollection, workers: int = 1) -> TrialCollection:
        """Check requirements on every trial, then derive.

        Requirements are checked for all trials before any work starts, so a
        missing column fails the call without partial results.
        """
        for trial in collection:
            self.check(trial)
        return collection.map(self.run, stage=self.name, workers=workers)


STAGES = {
    "position": Stage("position", _position),
    "distance": Stage("distance", _distance),
    "bearing": Stage("bearing", _bearing),
    "turn_angle": Stage("turn_angle", _turn_angle),
    "turn_velocity": Stage("turn_velocity", _turn_velocity),
    "velocity": Stage("velocity", _velocity),
}


def calc_position(collection: TrialCollection, workers: int = 1) -> TrialCollection:
    """Add absolute position ``x``, ``y``: cumulative displacement from (0, 0).

    Row i holds the position reached at the end of move i, so the last row
    is the net displacement of the trial.
    """
    return STAGES["position"].apply(collection, workers)


def calc_distance(collection: TrialCollection, workers: int = 1) -> TrialCollection:
    """Add ``distance`` = sqrt(dx^2 + dy^2), defined even when dT is 0."""
    return STAGES["distance"].apply(collection, workers)


def calc_bearing(collection: TrialCollection, workers: int = 1) -> TrialCollection:
    """Add compass ``bearing`` in [0, 360), clockwise from +y.

    Rows without movement (dx = dy = 0) get NaN.
    """
    return STAGES["bearing"].apply(collection, workers)


def calc_turn_angle(collection: TrialCollection, workers: int = 1) -> TrialCollection:
    """Add signed ``turnAngle`` in (-180, 180] relative to the previous row.

    NaN on the first row of a trial and wherever either bearing is NaN.
    """
    return STAGES["turn_angle"].apply(collection, workers)


def calc_turn_velocity(collection: TrialCollection, workers: int = 1) -> TrialCollection:
    """Add ``turnVelocity`` in degrees per second (NaN when dT is 0)."""
    return STAGES["turn_velocity"].apply(collection, workers)


def calc_velocity(collection: TrialCollection, workers: int = 1) -> TrialCollection:
    """Add ``velocity`` in distance units per second (NaN when dT is 0)."""
    return STAGES["velocity"].apply(collection, workers)


def derive_kinematics(collection: TrialCollection, stages: Optional[Iterable[str]] = None,
                      workers: int = 1) -> TrialCollection:
    """Apply derivation stages in dependency order.

    Parameters
    ----------
    collection : TrialCollection
        Cleaned (and optionally aggregated) trials.
    stages : iterable of str, optional
        Subset of stage names to apply. They are always applied in
        STAGE_ORDER regardless of the order given. Default: all stages.
    workers : int, default 1
        Thread pool size for per-trial processing.

    Raises
    ------
    ContractViolation
        If a stage name is unknown.
    MissingColumnError
        If a requested stage's input is neither raw nor produced by an
        earlier requested stage.
    """
    requested = list(STAGE_ORDER) if stages is None else list(stages)
    unknown = [name for name in requested if name not in STAGES]
    require(not unknown, f"Unknown kinematics stage(s): {unknown}")

    for name in STAGE_ORDER:
        if name in requested:
            collection = STAGES[name].apply(collection, workers)
            logger.debug("Applied stage %s to %d trials", name, len(collection))

    logger.info("Derived kinematics (%s) for %d trials",
                ", ".join(n for n in STAGE_ORDER if n in requested), len(collection))
    return collection
