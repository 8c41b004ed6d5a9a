"""Plain CSV export of summaries and derived trials."""

import logging
from pathlib import Path
from typing import Optional, Union

from servosphere.summary.table import SummaryTable
from servosphere.trials.collection import TrialCollection

__all__ = ["write_summary", "write_trials"]

logger = logging.getLogger(__name__)


def write_summary(table: SummaryTable, path: Union[str, Path],
                  float_format: Optional[str] = None) -> Path:
    """Write the summary table, identity column first, one row per trial."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_frame().to_csv(path, index=False, float_format=float_format)
    logger.info("Summary written: %s (%d rows)", path, len(table))
    return path


def write_trials(collection: TrialCollection, path: Union[str, Path],
                 float_format: Optional[str] = None) -> Path:
    """Write all trials in long format, identity column first."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = collection.to_frame()
    df.to_csv(path, index=False, float_format=float_format)
    logger.info("Trials written: %s (%d rows, %d trials)", path, len(df), len(collection))
    return path
