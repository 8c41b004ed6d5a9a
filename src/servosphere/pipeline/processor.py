"""Trial processing pipeline.

Runs a loaded trial collection through aggregation, kinematics derivation
and summary statistics, in that order.
"""

import logging
import time
from typing import Optional, Tuple, TYPE_CHECKING

from servosphere.contracts import ContractViolation, assert_cleaned
from servosphere.kinematics import aggregate, derive_kinematics
from servosphere.summary import SummaryTable, summarize
from servosphere.trials import TrialCollection

if TYPE_CHECKING:
    from servosphere.schemas import InternalConfig

__all__ = ['TrialProcessor']

logger = logging.getLogger(__name__)


class TrialProcessor:
    """Processes a trial collection through the complete analysis chain.

    **Processing Pipeline:**

    1. **Validate**: every trial carries the cleaned columns
       (stimulus, dT, dx, dy) with usable dT values.

    2. **Aggregate** (optional): collapse consecutive windows of
       ``aggregator.window_size`` rows, summing dT, dx and dy.

    3. **Derive**: apply the configured kinematics stages (position,
       distance, bearing, turnAngle, turnVelocity, velocity) in dependency
       order.

    4. **Summarize**: one row per trial with the configured statistics
       (total distance, net displacement, tortuosity, bearing mean and rho,
       mean velocity, stops).

    Per-trial work runs on a thread pool of ``processing.workers`` threads;
    results are kept in collection order.

    Example usage (typically called by the orchestrator)::

        processor = TrialProcessor(config)
        derived, table = processor.process(collection)
    """

    def __init__(self, config: "InternalConfig"):
        """Initialize processor with validated configuration.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        """
        self.config = config
        self.workers = config.processing.workers

        self.aggregate_enabled = config.aggregator.enabled
        self.window_size = config.aggregator.window_size
        self.categorical_policy = config.aggregator.categorical_policy

        self.stages = list(config.kinematics.stages)
        self.statistics = list(config.summary.statistics)
        self.stop_threshold = config.summary.stop_threshold
        self.tortuosity_inverse = config.summary.tortuosity_inverse

    def validate(self, collection: TrialCollection) -> None:
        for trial in collection:
            assert_cleaned(trial.data, trial.trial_id)

    def aggregate(self, collection: TrialCollection) -> TrialCollection:
        if not self.aggregate_enabled:
            logger.debug("Aggregation disabled")
            return collection
        return aggregate(
            collection,
            self.window_size,
            categorical_policy=self.categorical_policy,
            workers=self.workers,
        )

    def derive(self, collection: TrialCollection) -> TrialCollection:
        return derive_kinematics(collection, self.stages, workers=self.workers)

    def summarize(self, collection: TrialCollection,
                  table: Optional[SummaryTable] = None) -> SummaryTable:
        return summarize(
            collection,
            self.statistics,
            table=table,
            stop_threshold=self.stop_threshold,
            tortuosity_inverse=self.tortuosity_inverse,
            workers=self.workers,
        )

    def process(self, collection: TrialCollection) -> Tuple[TrialCollection, SummaryTable]:
        """Run validation, aggregation, derivation and summary.

        Returns
        -------
        derived : TrialCollection
            Trials with kinematic columns added.
        table : SummaryTable
            One row per trial identity.

        Raises
        ------
        ContractViolation
            Structural failure (missing column, bad window, identity
            mismatch, per-trial stage failure). Logged at CRITICAL and
            re-raised; nothing is retried.
        """
        start = time.time()
        logger.info("Processing %d trials (workers=%d)", len(collection), self.workers)

        try:
            self.validate(collection)
            aggregated = self.aggregate(collection)
            derived = self.derive(aggregated)
            table = self.summarize(derived)
        except ContractViolation as e:
            logger.critical("Pipeline contract violated: %s", e)
            raise

        logger.info("Processed %d trials in %.2f s: %d summary columns",
                    len(derived), time.time() - start, len(table.columns))
        return derived, table
