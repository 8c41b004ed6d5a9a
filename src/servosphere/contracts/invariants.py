"""Formal pipeline invariants.

This file declares which columns each stage consumes and produces. Stage
definitions in ``servosphere.kinematics`` and ``servosphere.summary`` read
their requirements from here, so this table is the single reference for
column names.
"""

# Columns every cleaned trial carries before derivation
RAW_COLUMNS = ("stimulus", "dT", "dx", "dy")

# Incremental quantities, summed when aggregating
INCREMENTAL_COLUMNS = ("dT", "dx", "dy")

STAGE_COLUMNS = {
    "position": {"requires": ("dx", "dy"), "produces": ("x", "y")},
    "distance": {"requires": ("dx", "dy"), "produces": ("distance",)},
    "bearing": {"requires": ("dx", "dy"), "produces": ("bearing",)},
    "turn_angle": {"requires": ("bearing",), "produces": ("turnAngle",)},
    "turn_velocity": {"requires": ("turnAngle", "dT"), "produces": ("turnVelocity",)},
    "velocity": {"requires": ("distance", "dT"), "produces": ("velocity",)},
}

# Dependency order; derive_kinematics always applies stages in this order
STAGE_ORDER = (
    "position",
    "distance",
    "bearing",
    "turn_angle",
    "turn_velocity",
    "velocity",
)

# Summary statistics: trial columns read, summary-table columns read,
# summary-table columns written
SUMMARY_COLUMNS = {
    "total_distance": {
        "requires": ("distance",),
        "table_requires": (),
        "produces": ("total_distance",),
    },
    "displacement": {
        "requires": ("x", "y"),
        "table_requires": (),
        "produces": ("net_displacement",),
    },
    "tortuosity": {
        "requires": (),
        "table_requires": ("total_distance", "net_displacement"),
        "produces": ("tortuosity",),
    },
    "avg_bearing": {
        "requires": ("bearing",),
        "table_requires": (),
        "produces": ("bearing_mean", "bearing_rho"),
    },
    "avg_velocity": {
        "requires": ("velocity",),
        "table_requires": (),
        "produces": ("velocity_mean",),
    },
    "stops": {
        "requires": ("velocity", "dT"),
        "table_requires": (),
        "produces": ("stop_count", "stop_duration_mean"),
    },
}

SUMMARY_ORDER = (
    "total_distance",
    "displacement",
    "tortuosity",
    "avg_bearing",
    "avg_velocity",
    "stops",
)
