import pandas as pd
import pytest

from servosphere.schemas import ParamConfig, UserConfig, InternalConfig
from servosphere.schemas.resolve import resolve_config
from servosphere.setup_directories import setup_output_directories


@pytest.fixture
def trial_dir(temp_dir):
    """Two trial files: 001 walks north then east, 002 pauses between moves."""
    directory = temp_dir / "raw"
    directory.mkdir()
    pd.DataFrame({
        "stimulus": [1, 1, 2, 2],
        "dT": [500, 500, 500, 500],
        "dx": [0.0, 0.0, 1.0, 1.0],
        "dy": [1.0, 1.0, 0.0, 0.0],
    }).to_csv(directory / "001.csv", index=False)
    pd.DataFrame({
        "stimulus": [1, 1, 1, 1],
        "dT": [1000, 1000, 1000, 1000],
        "dx": [1.0, 0.0, 0.0, 1.0],
        "dy": [0.0, 0.0, 0.0, 0.0],
    }).to_csv(directory / "002.csv", index=False)
    return directory


@pytest.fixture
def metadata_file(temp_dir):
    path = temp_dir / "trial_ids.csv"
    path.write_text("id,treatment\n002,drug\n001,control\n")
    return path


@pytest.fixture
def pipeline_config(trial_dir, metadata_file, temp_dir) -> InternalConfig:
    """InternalConfig for pipeline tests."""
    user = UserConfig(
        input_dir=str(trial_dir),
        metadata_file=str(metadata_file),
        output_dir=str(temp_dir / "out"),
        log_level="DEBUG",
    )
    return resolve_config(ParamConfig(), user, None)


@pytest.fixture
def pipeline_output_dirs(temp_dir):
    """Output directories for pipeline tests."""
    return setup_output_directories(temp_dir / "out")
