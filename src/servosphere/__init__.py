"""`servosphere` - trajectory analysis for servosphere (locomotion compensator) trials.

Subpackages:
- trials: Trial and TrialCollection containers
- kinematics: Aggregation, derivation stages, circular helpers
- summary: Per-trial summary statistics
- io: CSV ingestion, metadata merge and export
- pipeline: Processor and orchestrator
"""

__version__ = "0.1.0"
