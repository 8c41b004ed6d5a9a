"""Trial data model.

- collection: Trial and TrialCollection
"""

from servosphere.trials.collection import Trial, TrialCollection

__all__ = ["Trial", "TrialCollection"]
