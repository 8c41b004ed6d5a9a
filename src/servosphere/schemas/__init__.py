"""Pydantic configuration schemas for the servosphere pipeline.

All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from servosphere.schemas.resolve import resolve_config, deep_merge
from servosphere.schemas.internal import InternalConfig
from servosphere.schemas.param import ParamConfig
from servosphere.schemas.user import UserConfig
from servosphere.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'deep_merge',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
