"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., WINDOW_SIZE -> window_size).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from servosphere.schemas.base import ServosphereBaseModel


class UserIngestConfig(ServosphereBaseModel):
    """User-facing ingestion config."""
    file_pattern: Optional[str] = None
    delimiter: Optional[str] = None
    column_map: Optional[dict[str, str]] = None
    id_column: Optional[str] = None
    keep_stimuli: Optional[list[int]] = None
    split_by_stimulus: Optional[bool] = None


class UserAggregatorConfig(ServosphereBaseModel):
    """User-facing aggregation config."""
    enabled: Optional[bool] = None
    window_size: Optional[int] = None
    categorical_policy: Optional[str] = None

    @field_validator("categorical_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Normalize policy names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserSummaryConfig(ServosphereBaseModel):
    """User-facing summary config."""
    statistics: Optional[list[str]] = None
    stop_threshold: Optional[float] = None
    tortuosity_inverse: Optional[bool] = None


class UserConfig(ServosphereBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            input_dir="/data/servosphere/trials",
            metadata_file="/data/servosphere/trial_ids.csv",
            window_size=10,
            stop_threshold=0.1,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Paths
    input_dir: Optional[str] = Field(None, alias="INPUT_DIR")
    metadata_file: Optional[str] = Field(None, alias="METADATA_FILE")
    output_dir: Optional[str] = Field(None, alias="OUTPUT_DIR")

    # Ingestion (flat aliases)
    keep_stimuli: Optional[list[int]] = Field(None, alias="KEEP_STIMULI")
    split_by_stimulus: Optional[bool] = Field(None, alias="SPLIT_BY_STIMULUS")

    # Aggregation (flat aliases); a window size enables aggregation
    window_size: Optional[int] = Field(None, alias="WINDOW_SIZE")

    # Summary (flat aliases)
    stop_threshold: Optional[float] = Field(None, alias="STOP_THRESHOLD")
    tortuosity_inverse: Optional[bool] = Field(None, alias="TORTUOSITY_INVERSE")

    # Processing
    workers: Optional[int] = Field(None, alias="WORKERS")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    ingest: Optional[UserIngestConfig] = None
    aggregator: Optional[UserAggregatorConfig] = None
    summary: Optional[UserSummaryConfig] = None

    model_config = ServosphereBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("stop_threshold", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Paths section
        paths = {}
        if self.input_dir is not None:
            paths["input_dir"] = str(self.input_dir)
        if self.metadata_file is not None:
            paths["metadata_file"] = str(self.metadata_file)
        if self.output_dir is not None:
            paths["output_dir"] = str(self.output_dir)
        if paths:
            overrides["paths"] = paths

        # Ingest section
        ingest = {}
        if self.keep_stimuli is not None:
            ingest["keep_stimuli"] = self.keep_stimuli
        if self.split_by_stimulus is not None:
            ingest["split_by_stimulus"] = self.split_by_stimulus

        # Merge with explicit ingest config
        if self.ingest is not None:
            ingest.update(self.ingest.model_dump(exclude_none=True))
        if ingest:
            overrides["ingest"] = ingest

        # Aggregator section
        aggregator = {}
        if self.window_size is not None:
            aggregator["window_size"] = self.window_size
            aggregator["enabled"] = True

        # Merge with explicit aggregator config
        if self.aggregator is not None:
            aggregator.update(self.aggregator.model_dump(exclude_none=True))
        if aggregator:
            overrides["aggregator"] = aggregator

        # Summary section
        summary = {}
        if self.stop_threshold is not None:
            summary["stop_threshold"] = self.stop_threshold
        if self.tortuosity_inverse is not None:
            summary["tortuosity_inverse"] = self.tortuosity_inverse

        # Merge with explicit summary config
        if self.summary is not None:
            summary.update(self.summary.model_dump(exclude_none=True))
        if summary:
            overrides["summary"] = summary

        if self.workers is not None:
            overrides["processing"] = {"workers": self.workers}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
