"""Core servosphere pipeline execution logic.

This module contains the actual pipeline runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import argparse
import importlib.util
import json
import logging
import shutil
from pathlib import Path
from typing import Optional, Dict, Any, List

from servosphere.setup_directories import setup_output_directories
from servosphere.pipeline.orchestrator import ServospherePipeline
from servosphere.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def run_servosphere_pipeline(
    user_config_path: str,
    cli_args: Optional[Dict[str, Any]] = None,
    rerun: bool = False,
    verbose: bool = False
) -> Dict[str, Path]:
    """Execute the servosphere analysis pipeline.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories
    3. Optionally cleans the output directory if rerun=True
    4. Runs the orchestrator once and returns the written paths

    Parameters
    ----------
    user_config_path : str
        Path to user config file (Python file with CONFIG dict).
    cli_args : dict, optional
        CLI argument overrides. Keys: input_dir, metadata_file, output_dir,
        window_size, workers, log_level. None values are ignored.
    rerun : bool, optional
        If True, delete the output directory before running.
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    dict
        Paths written by the run ('summary', 'config', optionally 'trials').

    Raises
    ------
    FileNotFoundError
        If user_config_path or the input directory does not exist.
    ValueError
        If configuration validation fails or no output directory is set.

    Examples
    --------
    Run with CLI overrides::

        run_servosphere_pipeline(
            "config/my_config.py",
            cli_args={"input_dir": "data/trials", "window_size": 10},
        )
    """
    param_cfg = ParamConfig()

    user_cfg_dict = load_user_config_dict(user_config_path)
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and cli_args.get("log_level") is None:
        cli_args["log_level"] = "DEBUG"

    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    if config.paths.output_dir is None:
        raise ValueError("No output directory configured (OUTPUT_DIR or --output-dir)")

    if rerun:
        base_dir_path = Path(config.paths.output_dir)
        if base_dir_path.exists():
            print(f"Cleaning output directory: {base_dir_path}")
            shutil.rmtree(base_dir_path)

    output_dirs = setup_output_directories(config.paths.output_dir)

    print(f"\n{'='*60}")
    print("Servosphere Trial Analysis")
    print('='*60)
    print(f"Config:   {user_config_path}")
    print(f"Input:    {config.paths.input_dir}")
    print(f"Metadata: {config.paths.metadata_file}")
    window = config.aggregator.window_size if config.aggregator.enabled else "off"
    print(f"Window:   {window}")
    print(f"Output:   {output_dirs['base']}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    pipeline = ServospherePipeline(config, output_dirs)
    return pipeline.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the servosphere trial analysis pipeline")
    parser.add_argument("config", help="Path to user config file")
    parser.add_argument("--input-dir", help="Directory of trial CSV files")
    parser.add_argument("--metadata", dest="metadata_file", help="Trial metadata CSV")
    parser.add_argument("--output-dir", help="Output directory")
    parser.add_argument("--window-size", type=int, help="Aggregate windows of N rows")
    parser.add_argument("--workers", type=int, help="Threads for per-trial processing")
    parser.add_argument("--rerun", action="store_true", help="Delete output directory before running")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point (``servosphere``)."""
    args = build_parser().parse_args(argv)
    cli_args = {
        "input_dir": args.input_dir,
        "metadata_file": args.metadata_file,
        "output_dir": args.output_dir,
        "window_size": args.window_size,
        "workers": args.workers,
    }
    outputs = run_servosphere_pipeline(
        args.config, cli_args=cli_args, rerun=args.rerun, verbose=args.verbose
    )
    for name, path in outputs.items():
        print(f"{name:8s}: {path}")
    return 0
