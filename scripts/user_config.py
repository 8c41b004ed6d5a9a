"""Servosphere User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the pipeline behavior. Advanced settings live in servosphere.schemas.param.

Usage:
    servosphere scripts/user_config.py
    servosphere scripts/user_config.py --window-size 5
    python scripts/run_servosphere_pipeline.py scripts/user_config.py --workers 4
"""

CONFIG = {
    # ========================================================================
    # INPUT / OUTPUT
    # ========================================================================
    "INPUT_DIR": "data/trials",            # One cleaned CSV per trial
    "METADATA_FILE": "data/trial_ids.csv", # id, treatment, ... (None = no merge)
    "OUTPUT_DIR": "output",                # summary/, trials/, logs/ go here

    # ========================================================================
    # STIMULI
    # ========================================================================
    "KEEP_STIMULI": None,       # e.g. [1, 2]; None keeps every stimulus
    "SPLIT_BY_STIMULUS": False, # One trial per (id, stimulus), keyed by id_stim

    # ========================================================================
    # AGGREGATION
    # ========================================================================
    "WINDOW_SIZE": None,        # Rows per window; None disables aggregation

    # ========================================================================
    # SUMMARY
    # ========================================================================
    "STOP_THRESHOLD": 0.0,      # Velocity (units/s) at or below which a row is stopped
    "TORTUOSITY_INVERSE": False,

    # ========================================================================
    # PROCESSING
    # ========================================================================
    "WORKERS": 1,
    "LOG_LEVEL": "INFO",

    # Instrument headers -> canonical columns, if the export differs
    "ingest": {
        "column_map": {},
    },
}
