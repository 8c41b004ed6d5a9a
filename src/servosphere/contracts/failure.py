"""Centralized failure types for stage contract violations.

Contracts fail fast, loud, and once. Every structural failure derives from
ContractViolation so callers can handle pipeline errors uniformly, while
the subclasses carry enough context to locate the offending trial.

Mathematically undefined values (zero movement, zero elapsed time, no stop
runs) are NOT failures: they are represented as NaN in the data and the
computation continues.
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    Key distinction:
    - ValueError / ValidationError: User/config error (handled by Pydantic)
    - ContractViolation: a stage was called on data that does not satisfy
      its declared requirements
    - NaN: recoverable per-row undefined values
    """
    pass


class InvalidWindowError(ContractViolation):
    """Aggregation window is non-positive or larger than a trial."""

    def __init__(self, message: str, window_size=None, trial_id=None):
        super().__init__(message)
        self.window_size = window_size
        self.trial_id = trial_id


class MissingColumnError(ContractViolation):
    """A stage was invoked before its required input column exists.

    Parameters
    ----------
    column : str
        Name of the missing column.
    where : str
        Where the column was expected (a trial identity or "summary table").
    stage : str, optional
        Stage that declared the requirement.
    """

    def __init__(self, column: str, where: str, stage: str = None):
        self.column = column
        self.where = where
        self.stage = stage
        prefix = f"{stage} contract violated" if stage else "Contract violated"
        super().__init__(f"{prefix}: missing required column '{column}' in {where}")


class IdentityMismatchError(ContractViolation):
    """Trial identities cannot be matched between two tables."""

    def __init__(self, message: str, identities=None):
        super().__init__(message)
        self.identities = list(identities) if identities is not None else []


class TrialProcessingError(ContractViolation):
    """A stage raised an unexpected error on one trial.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, stage: str, trial_id, cause: BaseException):
        self.stage = stage
        self.trial_id = trial_id
        super().__init__(
            f"Stage '{stage}' failed on trial '{trial_id}': "
            f"{type(cause).__name__}: {cause}"
        )
