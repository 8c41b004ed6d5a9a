"""Pipeline modules.

- orchestrator: End-to-end run (load, process, write)
- processor: Aggregation, derivation and summary of a trial collection
"""

from servosphere.pipeline.orchestrator import ServospherePipeline
from servosphere.pipeline.processor import TrialProcessor

__all__ = [
    "ServospherePipeline",
    "TrialProcessor",
]
