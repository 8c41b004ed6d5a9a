"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
It enforces semantic invariants of the pipeline at stage boundaries.
"""

from typing import Iterable

import pandas as pd

from servosphere.contracts.failure import ContractViolation, MissingColumnError


def require(condition: bool, message: str, error: type = ContractViolation) -> None:
    """Enforce a pipeline contract.

    This is called at stage boundaries to verify the preceding stage
    produced the guaranteed invariants. It is fail-fast: no recovery,
    no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.

    message : str
        Error message explaining the contract violation.

    error : type, optional
        ContractViolation subclass to raise (default ContractViolation).

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(window_size > 0, "window size must be positive", InvalidWindowError)
    """
    if not condition:
        raise error(message)


def require_columns(df: pd.DataFrame, columns: Iterable[str], where: str,
                    stage: str = None) -> None:
    """Enforce that every column in ``columns`` exists in ``df``.

    Raises
    ------
    MissingColumnError
        For the first missing column, naming it and ``where``.
    """
    for col in columns:
        if col not in df.columns:
            raise MissingColumnError(col, where, stage)
