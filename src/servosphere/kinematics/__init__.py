"""Trial transformations.

- aggregator: Window down-sampling
- derivation: Kinematics stages (position, distance, bearing, turns, velocity)
- circular: Angular normalization and circular statistics
"""

from servosphere.kinematics.aggregator import aggregate
from servosphere.kinematics.derivation import (
    STAGES,
    Stage,
    calc_bearing,
    calc_distance,
    calc_position,
    calc_turn_angle,
    calc_turn_velocity,
    calc_velocity,
    derive_kinematics,
)

__all__ = [
    "aggregate",
    "Stage",
    "STAGES",
    "calc_position",
    "calc_distance",
    "calc_bearing",
    "calc_turn_angle",
    "calc_turn_velocity",
    "calc_velocity",
    "derive_kinematics",
]
