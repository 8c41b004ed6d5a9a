"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains no defaults: every value comes from resolution.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from servosphere.schemas.base import ServosphereBaseModel
from servosphere.schemas.param import StageName, StatisticName


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalPathsConfig(ServosphereBaseModel):
    """Runtime paths.

    input_dir and output_dir may be None while merging; the orchestrator
    requires them before running.
    """
    input_dir: Optional[str]
    metadata_file: Optional[str]
    output_dir: Optional[str]


class InternalIngestConfig(ServosphereBaseModel):
    """Runtime ingestion configuration."""
    file_pattern: str
    delimiter: str
    column_map: dict[str, str]
    id_column: str
    keep_stimuli: Optional[list[int]]
    split_by_stimulus: bool


class InternalAggregatorConfig(ServosphereBaseModel):
    """Runtime aggregation configuration."""
    enabled: bool
    window_size: int = Field(ge=1)
    categorical_policy: Literal["first", "majority"]


class InternalKinematicsConfig(ServosphereBaseModel):
    """Runtime derivation configuration."""
    stages: list[StageName]


class InternalSummaryConfig(ServosphereBaseModel):
    """Runtime summary configuration."""
    statistics: list[StatisticName]
    stop_threshold: float = Field(ge=0)
    tortuosity_inverse: bool


class InternalProcessingConfig(ServosphereBaseModel):
    """Runtime processing configuration."""
    workers: int = Field(ge=1, le=64)


class InternalOutputConfig(ServosphereBaseModel):
    """Runtime output configuration."""
    summary_filename: str
    trials_filename: str
    write_trials: bool
    float_format: Optional[str]


class InternalLoggingConfig(ServosphereBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(ServosphereBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated and immutable.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.window_size = config.aggregator.window_size  # NOT .get()
            self.stop_threshold = config.summary.stop_threshold

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    paths: InternalPathsConfig
    ingest: InternalIngestConfig
    aggregator: InternalAggregatorConfig
    kinematics: InternalKinematicsConfig
    summary: InternalSummaryConfig
    processing: InternalProcessingConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
