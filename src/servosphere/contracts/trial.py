"""Trial contract.

Enforces the guarantee that a cleaned trial is ready for aggregation and
derivation: raw columns present and elapsed time non-negative.
"""

import pandas as pd

from servosphere.contracts.base import require, require_columns
from servosphere.contracts.invariants import RAW_COLUMNS


def assert_cleaned(df: pd.DataFrame, trial_id) -> None:
    """Enforce the cleaned-trial contract.

    Called after ingestion (parse + rename). We do NOT validate movement
    values, only structure.

    Parameters
    ----------
    df : pd.DataFrame
        Rows of one trial in recording order.

    trial_id : hashable
        Trial identity, used in error messages.

    Raises
    ------
    MissingColumnError
        If a raw column is absent.
    ContractViolation
        If dT contains negative or missing values.
    """
    require_columns(df, RAW_COLUMNS, f"trial '{trial_id}'", stage="Ingest")

    dt = pd.to_numeric(df["dT"], errors="coerce")
    require(
        not dt.isna().any(),
        f"Ingest contract violated: trial '{trial_id}' has non-numeric or missing dT"
    )
    require(
        bool((dt >= 0).all()),
        f"Ingest contract violated: trial '{trial_id}' has negative dT (min={dt.min()})"
    )
