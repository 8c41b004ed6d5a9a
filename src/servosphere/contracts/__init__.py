"""Pipeline contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between pipeline stages.
Contracts fail immediately and loudly when a stage is called on data that
lacks the columns it declares, when windows are invalid, or when trial
identities do not line up.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Algorithms represent undefined values as NaN
"""

from servosphere.contracts.failure import (
    ContractViolation,
    IdentityMismatchError,
    InvalidWindowError,
    MissingColumnError,
    TrialProcessingError,
)
from servosphere.contracts.base import require, require_columns
from servosphere.contracts.trial import assert_cleaned

__all__ = [
    "ContractViolation",
    "IdentityMismatchError",
    "InvalidWindowError",
    "MissingColumnError",
    "TrialProcessingError",
    "require",
    "require_columns",
    "assert_cleaned",
]
