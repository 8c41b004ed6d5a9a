"""Tabular input and output.

- loader: Discover and parse trial files, merge metadata
- writer: CSV export of summaries and trials
"""

from servosphere.io.loader import (
    TrialLoader,
    list_trials,
    merge_metadata,
    read_metadata,
    read_trial,
    read_trials,
    split_trials,
)
from servosphere.io.writer import write_summary, write_trials

__all__ = [
    "TrialLoader",
    "list_trials",
    "read_trial",
    "read_trials",
    "read_metadata",
    "merge_metadata",
    "split_trials",
    "write_summary",
    "write_trials",
]
