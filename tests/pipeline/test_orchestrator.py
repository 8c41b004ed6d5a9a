import json
import logging

import pandas as pd
import pytest

from servosphere.contracts import IdentityMismatchError
from servosphere.pipeline import ServospherePipeline

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


def test_orchestrator_initialization(pipeline_config, pipeline_output_dirs):
    """Orchestrator stores config, output directories and a run id."""
    orch = ServospherePipeline(pipeline_config, pipeline_output_dirs, run_id="test")
    assert orch.config == pipeline_config
    assert orch.run_id == "test"
    assert orch.output_dirs["logs"] == pipeline_output_dirs["logs"]


def test_orchestrator_requires_input_dir(internal_config, pipeline_output_dirs):
    with pytest.raises(ValueError, match="input directory"):
        ServospherePipeline(internal_config, pipeline_output_dirs)


def test_orchestrator_logging(pipeline_config, pipeline_output_dirs):
    """Root logger gets file and console handlers at the configured level."""
    orch = ServospherePipeline(pipeline_config, pipeline_output_dirs, run_id="log")
    orch._setup_logging()
    try:
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
        assert (pipeline_output_dirs["logs"] / "servosphere_log.log").exists()
    finally:
        orch._close_logging()


def test_run_writes_outputs(pipeline_config, pipeline_output_dirs):
    outputs = ServospherePipeline(pipeline_config, pipeline_output_dirs, run_id="r1").run()

    assert set(outputs) == {"config", "summary", "trials"}
    summary = pd.read_csv(outputs["summary"], dtype={"id": str})
    assert summary["id"].tolist() == ["001", "002"]
    assert summary["total_distance"].tolist() == pytest.approx([4.0, 2.0])

    trials = pd.read_csv(outputs["trials"], dtype={"id": str})
    assert len(trials) == 8
    assert set(trials["treatment"]) == {"control", "drug"}

    runtime = json.loads(outputs["config"].read_text())
    assert runtime["paths"]["input_dir"] == pipeline_config.paths.input_dir

    log_text = (pipeline_output_dirs["logs"] / "servosphere_r1.log").read_text()
    assert "Pipeline finished" in log_text


def test_run_without_trials_output(pipeline_config, pipeline_output_dirs):
    config = pipeline_config.model_copy(
        update={"output": pipeline_config.output.model_copy(update={"write_trials": False})}
    )
    outputs = ServospherePipeline(config, pipeline_output_dirs, run_id="r2").run()
    assert "trials" not in outputs
    assert outputs["summary"].exists()


def test_run_fails_on_unmatched_metadata(pipeline_config, pipeline_output_dirs, metadata_file):
    metadata_file.write_text("id,treatment\n001,control\n")
    orch = ServospherePipeline(pipeline_config, pipeline_output_dirs, run_id="r3")

    with pytest.raises(IdentityMismatchError):
        orch.run()
    assert not (pipeline_output_dirs["summary"] / "summary.csv").exists()
    # file handler released even on failure
    assert orch._file_handler is None
