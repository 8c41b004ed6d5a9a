"""Shared pydantic base for the servosphere config layers.

ParamConfig, CLIConfig and InternalConfig inherit the strict settings
below unchanged. UserConfig relaxes ``extra`` to "ignore" so a CONFIG dict
written for an older release still loads.
"""

from pydantic import BaseModel, ConfigDict


class ServosphereBaseModel(BaseModel):
    """Base model for servosphere configuration schemas.

    - Unknown keys are rejected, so a misspelled section such as
      ``agregator`` or ``stop_treshold`` fails at resolution rather than
      silently falling back to the default.
    - Assignments are re-validated, which keeps window sizes, worker
      counts and stop thresholds inside their bounds after construction.
    - Strings are stripped: paths and the identity column often arrive
      with stray spaces from hand-edited CONFIG files.
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )
