"""ParamConfig: Expert defaults for the servosphere pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from servosphere.schemas.base import ServosphereBaseModel
from servosphere.contracts.invariants import STAGE_ORDER, SUMMARY_ORDER

StageName = Literal[
    "position", "distance", "bearing", "turn_angle", "turn_velocity", "velocity"
]
StatisticName = Literal[
    "total_distance", "displacement", "tortuosity", "avg_bearing", "avg_velocity", "stops"
]


# =============================================================================
# Nested Configuration Models
# =============================================================================

class PathsConfig(ServosphereBaseModel):
    """Input and output locations."""
    input_dir: Optional[str] = None
    metadata_file: Optional[str] = None
    output_dir: Optional[str] = None


class IngestConfig(ServosphereBaseModel):
    """Trial file discovery, parsing and metadata merge."""
    file_pattern: str = "*.csv"
    delimiter: str = ","
    column_map: dict[str, str] = Field(
        default_factory=dict,
        description="Instrument header -> canonical column (stimulus, dT, dx, dy)",
    )
    id_column: str = "id"
    keep_stimuli: Optional[list[int]] = None
    split_by_stimulus: bool = False


class AggregatorConfig(ServosphereBaseModel):
    """Window down-sampling."""
    enabled: bool = False
    window_size: int = Field(10, ge=1, description="Rows per window")
    categorical_policy: Literal["first", "majority"] = "first"

    @field_validator("categorical_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Normalize policy names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class KinematicsConfig(ServosphereBaseModel):
    """Derivation stages to apply (always run in dependency order)."""
    stages: list[StageName] = Field(default_factory=lambda: list(STAGE_ORDER))


class SummaryConfig(ServosphereBaseModel):
    """Per-trial summary statistics."""
    statistics: list[StatisticName] = Field(default_factory=lambda: list(SUMMARY_ORDER))
    stop_threshold: float = Field(0.0, ge=0, description="Velocity at or below which a row is stopped")
    tortuosity_inverse: bool = False

    @field_validator("stop_threshold", mode="before")
    @classmethod
    def coerce_stop_threshold_to_float(cls, v):
        """Allow int or float for stop_threshold."""
        return float(v)


class ProcessingConfig(ServosphereBaseModel):
    """Per-trial worker pool."""
    workers: int = Field(1, ge=1, le=64)


class OutputConfig(ServosphereBaseModel):
    """Output file configuration."""
    summary_filename: str = "summary.csv"
    trials_filename: str = "trials.csv"
    write_trials: bool = True
    float_format: Optional[str] = None


class LoggingConfig(ServosphereBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(ServosphereBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    aggregator: AggregatorConfig = Field(default_factory=AggregatorConfig)
    kinematics: KinematicsConfig = Field(default_factory=KinematicsConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
