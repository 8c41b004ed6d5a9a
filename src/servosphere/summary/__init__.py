"""Trial-level summary statistics.

- table: Append-only SummaryTable keyed by trial identity
- engine: Summary functions (distance, displacement, tortuosity,
  bearing, velocity, stops)
"""

from servosphere.summary.table import SummaryTable
from servosphere.summary.engine import (
    summarize,
    summary_avg_bearing,
    summary_avg_velocity,
    summary_displacement,
    summary_stops,
    summary_tortuosity,
    summary_total_distance,
)

__all__ = [
    "SummaryTable",
    "summarize",
    "summary_total_distance",
    "summary_displacement",
    "summary_tortuosity",
    "summary_avg_bearing",
    "summary_avg_velocity",
    "summary_stops",
]
