"""Append-only summary table, one row per trial identity.

The "no table yet" state is ``None``. ``SummaryTable.ensure`` is the single
create-or-append branch: given ``None`` it builds an empty table with one
row per trial in collection order; given a table it checks that its
identities match the collection before anything is appended.

Rows are never dropped or reordered. Columns are only added; re-writing an
existing column replaces its values in place and keeps its position.
"""

import logging
from typing import Iterable, Mapping, Optional, Union

import pandas as pd

from servosphere.contracts.failure import IdentityMismatchError, MissingColumnError
from servosphere.trials.collection import TrialCollection

__all__ = ["SummaryTable"]

logger = logging.getLogger(__name__)


class SummaryTable:
    """Per-trial summary statistics keyed by trial identity.

    Parameters
    ----------
    ids : iterable
        Trial identities, in row order.
    key : str, default "id"
        Index name (``id`` or ``id_stim``).
    """

    def __init__(self, ids: Iterable, key: str = "id"):
        self.frame = pd.DataFrame(index=pd.Index(list(ids), name=key))

    @classmethod
    def for_collection(cls, collection: TrialCollection) -> "SummaryTable":
        """Empty table with one row per trial, in collection order."""
        return cls(collection.ids, key=collection.key)

    @classmethod
    def ensure(cls, collection: TrialCollection,
               table: Optional["SummaryTable"]) -> "SummaryTable":
        """Create the table if absent, otherwise validate identities."""
        if table is None:
            logger.debug("Creating summary table for %d trials", len(collection))
            return cls.for_collection(collection)
        table.check_identity(collection)
        return table

    def __len__(self) -> int:
        return len(self.frame)

    def __contains__(self, column: str) -> bool:
        return column in self.frame.columns

    def __getitem__(self, column: str) -> pd.Series:
        return self.frame[column]

    def __repr__(self) -> str:
        return f"SummaryTable(rows={len(self.frame)}, columns={self.columns})"

    @property
    def key(self) -> str:
        return self.frame.index.name

    @property
    def ids(self) -> list:
        return list(self.frame.index)

    @property
    def columns(self) -> list:
        return list(self.frame.columns)

    def check_identity(self, collection: TrialCollection) -> None:
        """Verify that every trial has exactly one row and vice versa.

        Raises
        ------
        IdentityMismatchError
            Listing the identities present on only one side.
        """
        table_ids = set(self.frame.index)
        trial_ids = set(collection.ids)
        if table_ids == trial_ids and len(self.frame) == len(collection):
            return

        missing = [i for i in collection.ids if i not in table_ids]
        extra = [i for i in self.frame.index if i not in trial_ids]
        raise IdentityMismatchError(
            f"Summary table and trial collection disagree on trial identities: "
            f"not in table={missing}, not in collection={extra}",
            identities=missing + extra,
        )

    def require(self, columns: Iterable[str], stage: str = None) -> None:
        """Raise MissingColumnError for the first absent column."""
        for col in columns:
            if col not in self.frame.columns:
                raise MissingColumnError(col, "summary table", stage)

    def add_column(self, name: str, values: Union[Mapping, pd.Series]) -> None:
        """Append a column keyed by trial identity.

        Identities absent from ``values`` get NaN.
        """
        if isinstance(values, pd.Series):
            series = values
        else:
            series = pd.Series(dict(values), dtype="float64" if len(values) == 0 else None)
        if name in self.frame.columns:
            logger.warning("Summary column '%s' already exists; replacing its values", name)
        self.frame[name] = series.reindex(self.frame.index).to_numpy()

    def to_frame(self) -> pd.DataFrame:
        """Copy of the table with the identity as the first column."""
        return self.frame.reset_index()
