"""In-memory representation of many servosphere trials.

A Trial is one recording session: a pandas DataFrame whose row order is the
recording order, plus the identity used to key summaries. A TrialCollection
is an ordered sequence of trials; every pipeline stage returns a new
collection with the same trial order and identities and additional columns.

Row order is never changed implicitly: no stage sorts, and every per-trial
result is reassembled in collection order, even when trials are processed
on a worker pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, Iterator, List, Optional

import pandas as pd

from servosphere.contracts.failure import (
    ContractViolation,
    IdentityMismatchError,
    TrialProcessingError,
)

__all__ = ["Trial", "TrialCollection"]

logger = logging.getLogger(__name__)


class Trial:
    """One recording session.

    Parameters
    ----------
    trial_id : hashable
        Identity of the trial (``id`` or ``id_stim`` value).
    data : pd.DataFrame
        Movement records in recording order. The index is reset so that
        positional and label access agree.
    """

    def __init__(self, trial_id, data: pd.DataFrame):
        self.trial_id = trial_id
        self.data = data.reset_index(drop=True)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Trial({self.trial_id!r}, rows={len(self.data)}, columns={list(self.data.columns)})"

    @property
    def columns(self) -> List[str]:
        return list(self.data.columns)

    def with_data(self, data: pd.DataFrame) -> "Trial":
        """Return a trial with the same identity and new data."""
        return Trial(self.trial_id, data)


class TrialCollection:
    """Ordered sequence of trials keyed by identity.

    Parameters
    ----------
    trials : iterable of Trial
        Trials in ingestion order.
    key : str, default "id"
        Name of the identity column: ``"id"``, or ``"id_stim"`` when trials
        were split by stimulus. Used as the summary-table index name.

    Raises
    ------
    IdentityMismatchError
        If two trials share an identity.

    Examples
    --------
    >>> collection = TrialCollection([Trial("a", df_a), Trial("b", df_b)])
    >>> collection.ids
    ['a', 'b']
    >>> derived = collection.map(add_distance, stage="distance")
    """

    def __init__(self, trials: Iterable[Trial], key: str = "id"):
        self.trials = list(trials)
        self.key = key

        seen = set()
        duplicates = []
        for trial in self.trials:
            if trial.trial_id in seen:
                duplicates.append(trial.trial_id)
            seen.add(trial.trial_id)
        if duplicates:
            raise IdentityMismatchError(
                f"Duplicate trial identities in collection: {duplicates}",
                identities=duplicates,
            )

    def __len__(self) -> int:
        return len(self.trials)

    def __iter__(self) -> Iterator[Trial]:
        return iter(self.trials)

    def __getitem__(self, index: int) -> Trial:
        return self.trials[index]

    def __repr__(self) -> str:
        return f"TrialCollection(n_trials={len(self.trials)}, key={self.key!r})"

    @property
    def ids(self) -> list:
        """Trial identities in collection order."""
        return [trial.trial_id for trial in self.trials]

    def get(self, trial_id) -> Optional[Trial]:
        """Look up a trial by identity (None if absent)."""
        for trial in self.trials:
            if trial.trial_id == trial_id:
                return trial
        return None

    def collect(self, func: Callable[[Trial], Any], stage: str, workers: int = 1) -> list:
        """Apply a per-trial function and return its results in collection order.

        Parameters
        ----------
        func : callable
            Takes a Trial, returns anything.
        stage : str
            Stage name, reported when a trial fails.
        workers : int, default 1
            Size of the thread pool. 1 processes trials sequentially.
            Trials share no state, so any pool size gives the same results.

        Raises
        ------
        ContractViolation
            Propagated unchanged (it already names the trial).
        TrialProcessingError
            Wrapping any other exception, naming stage and trial.
        """
        def _run(trial: Trial):
            try:
                return func(trial)
            except ContractViolation:
                raise
            except Exception as e:
                raise TrialProcessingError(stage, trial.trial_id, e) from e

        if workers > 1 and len(self.trials) > 1:
            logger.debug("Stage %s: %d trials on %d workers", stage, len(self.trials), workers)
            with ThreadPoolExecutor(max_workers=workers) as pool:
                # Executor.map yields in submission order
                return list(pool.map(_run, self.trials))
        return [_run(trial) for trial in self.trials]

    def map(self, func: Callable[[Trial], pd.DataFrame], stage: str,
            workers: int = 1) -> "TrialCollection":
        """Apply a per-trial function and return a new collection.

        ``func`` takes a Trial and returns the trial's new DataFrame. See
        ``collect`` for ``stage``, ``workers`` and error handling.
        """
        frames = self.collect(func, stage, workers)
        return TrialCollection(
            [trial.with_data(df) for trial, df in zip(self.trials, frames)],
            key=self.key,
        )

    def to_frame(self) -> pd.DataFrame:
        """Concatenate all trials into one long DataFrame.

        The identity column (``self.key``) is placed first. Trials that already
        carry the identity column keep their own values.
        """
        frames = []
        for trial in self.trials:
            df = trial.data.copy()
            if self.key in df.columns:
                df = df[[self.key] + [c for c in df.columns if c != self.key]]
            else:
                df.insert(0, self.key, trial.trial_id)
            frames.append(df)

        if not frames:
            return pd.DataFrame(columns=[self.key])
        return pd.concat(frames, ignore_index=True)
