"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: input/output paths, window size, worker count, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import Field
from servosphere.schemas.base import ServosphereBaseModel


class CLIConfig(ServosphereBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            input_dir="/data/trials",
            output_dir="/scratch/servosphere_output",
            window_size=5,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    input_dir: Optional[str] = None
    metadata_file: Optional[str] = None
    output_dir: Optional[str] = None
    window_size: Optional[int] = Field(None, ge=1)
    workers: Optional[int] = Field(None, ge=1)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        paths = {}
        if self.input_dir is not None:
            paths["input_dir"] = str(self.input_dir)
        if self.metadata_file is not None:
            paths["metadata_file"] = str(self.metadata_file)
        if self.output_dir is not None:
            paths["output_dir"] = str(self.output_dir)
        if paths:
            overrides["paths"] = paths

        if self.window_size is not None:
            overrides["aggregator"] = {"enabled": True, "window_size": self.window_size}

        if self.workers is not None:
            overrides["processing"] = {"workers": self.workers}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
