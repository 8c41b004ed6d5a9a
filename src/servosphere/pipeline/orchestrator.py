"""End-to-end pipeline orchestration.

Loads trials, runs the processor and writes the summary (and derived
trials) to the output directory layout. Manages logging and the persisted
runtime configuration of each run.
"""

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, TYPE_CHECKING

from servosphere.io import TrialLoader, write_summary, write_trials
from servosphere.pipeline.processor import TrialProcessor

if TYPE_CHECKING:
    from servosphere.schemas import InternalConfig

__all__ = ['ServospherePipeline']

logger = logging.getLogger(__name__)


class ServospherePipeline:
    """Runs a complete servosphere analysis for one input directory.

    This is the main entry point for running ``servosphere``. A run:

    1. Configures the root logger (console + ``logs/servosphere_<run_id>.log``).
    2. Persists the resolved runtime config next to the log.
    3. Loads trials from ``paths.input_dir`` and merges
       ``paths.metadata_file`` when given.
    4. Processes them with :class:`TrialProcessor`.
    5. Writes ``summary/<summary_filename>`` and, when enabled,
       ``trials/<trials_filename>``.

    Example usage::

        from servosphere.pipeline import ServospherePipeline
        from servosphere.setup_directories import setup_output_directories

        output_dirs = setup_output_directories(config.paths.output_dir)
        pipeline = ServospherePipeline(config, output_dirs)
        outputs = pipeline.run()
    """

    def __init__(self, config: "InternalConfig", output_dirs: Dict[str, Path],
                 run_id: Optional[str] = None):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration. ``paths.input_dir`` is
            required.
        output_dirs : dict
            Output directory paths from ``setup_output_directories()``:
            'base', 'summary', 'trials', 'logs'.
        run_id : str, optional
            Identifier used in log and config file names. Defaults to a
            timestamp.

        Raises
        ------
        ValueError
            If no input directory is configured.
        """
        if config.paths.input_dir is None:
            raise ValueError("No input directory configured (paths.input_dir / INPUT_DIR)")

        self.config = config
        self.output_dirs = {key: Path(path) for key, path in output_dirs.items()}
        self.run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S")

        self.loader = TrialLoader(config)
        self.processor = TrialProcessor(config)

        self._file_handler = None

    def _setup_logging(self):
        """Configure root logger with file and console handlers."""
        log_level = getattr(logging, self.config.logging.level, logging.INFO)

        log_dir = self.output_dirs["logs"]
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / f"servosphere_{self.run_id}.log"

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)
        self._file_handler = fh

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", self.config.logging.level, log_path)

    def _close_logging(self):
        if self._file_handler is not None:
            logging.getLogger().removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

    def _save_runtime_config(self) -> Path:
        """Write the resolved config as JSON for provenance."""
        path = self.output_dirs["logs"] / f"runtime_config_{self.run_id}.json"
        with open(path, "w") as f:
            json.dump(self.config.model_dump(), f, indent=2)
        logger.info("Runtime config: %s", path)
        return path

    def run(self) -> Dict[str, Path]:
        """Execute the pipeline once and write its outputs.

        Returns
        -------
        dict
            Written paths: 'summary', 'config' and, when enabled, 'trials'.

        Raises
        ------
        FileNotFoundError
            Input directory or metadata file missing.
        ContractViolation
            Structural failure in any stage. Outputs are not written.
        """
        self._setup_logging()
        start = time.time()
        try:
            logger.info("=" * 60)
            logger.info("Starting servosphere pipeline (run %s)", self.run_id)
            logger.info("=" * 60)

            outputs = {"config": self._save_runtime_config()}

            paths = self.config.paths
            collection = self.loader.load(paths.input_dir, paths.metadata_file)
            logger.info("Loaded %d trials from %s", len(collection), paths.input_dir)

            derived, table = self.processor.process(collection)

            out = self.config.output
            outputs["summary"] = write_summary(
                table, self.output_dirs["summary"] / out.summary_filename,
                float_format=out.float_format,
            )
            if out.write_trials:
                outputs["trials"] = write_trials(
                    derived, self.output_dirs["trials"] / out.trials_filename,
                    float_format=out.float_format,
                )

            logger.info("=" * 60)
            logger.info("Pipeline finished. Runtime: %.1f seconds", time.time() - start)
            logger.info("=" * 60)
            return outputs
        finally:
            self._close_logging()
