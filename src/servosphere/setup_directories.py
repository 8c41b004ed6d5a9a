"""
Directory setup for servosphere runs.

Flat layout under one base directory:
- summary/ : per-trial summary tables
- trials/  : derived per-row trial tables
- logs/    : run logs and resolved runtime config
"""

import logging
from pathlib import Path
from typing import Dict, Union

logger = logging.getLogger(__name__)

OUTPUT_SUBDIRS = ("summary", "trials", "logs")


def setup_output_directories(base_output_dir: Union[str, Path]) -> Dict[str, Path]:
    """
    Set up organized output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path
        Base output directory. Created if missing.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'summary', 'trials', 'logs'
    """
    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {"base": base_output_dir}
    for name in OUTPUT_SUBDIRS:
        directories[name] = base_output_dir / name

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    for key, path in directories.items():
        logger.debug("Output directory %-8s: %s", key, path)

    return directories
