"""Root-level pytest fixtures for the servosphere test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, plus small hand-built trials with known kinematics.
"""

import logging
import pytest
from pathlib import Path
import tempfile
import shutil

import pandas as pd

from servosphere.schemas import ParamConfig, UserConfig, resolve_config
from servosphere.trials import Trial, TrialCollection


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_window(make_config):
    ...     config = make_config(window_size=5)
    ...     assert config.aggregator.enabled
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def output_dirs(temp_dir):
    """Standard servosphere output directory structure.

    Returns dict with keys: base, summary, trials, logs
    """
    dirs = {
        "base": temp_dir,
        "summary": temp_dir / "summary",
        "trials": temp_dir / "trials",
        "logs": temp_dir / "logs",
    }

    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)

    return dirs


# =============================================================================
# Trial Fixtures
# =============================================================================

def trial_frame(moves, dt=1000, stimulus=1):
    """Build a cleaned trial DataFrame from (dx, dy) moves."""
    return pd.DataFrame({
        "stimulus": [stimulus] * len(moves),
        "dT": [dt] * len(moves),
        "dx": [float(dx) for dx, _ in moves],
        "dy": [float(dy) for _, dy in moves],
    })


@pytest.fixture
def make_trial():
    """Factory: make_trial(trial_id, moves, dt=1000, stimulus=1) -> Trial."""
    def _make(trial_id, moves, dt=1000, stimulus=1):
        return Trial(trial_id, trial_frame(moves, dt=dt, stimulus=stimulus))
    return _make


@pytest.fixture
def square_trial(make_trial):
    """Three unit moves: north, east, south. Ends one unit east of the origin."""
    return make_trial("t1", [(0, 1), (1, 0), (0, -1)])


@pytest.fixture
def square_collection(square_trial):
    return TrialCollection([square_trial])


@pytest.fixture
def two_trials(make_trial):
    """A straight path and a path with a pause (second move has no dx/dy)."""
    straight = make_trial("a", [(0, 1), (0, 1), (0, 1), (0, 1)])
    paused = make_trial("b", [(1, 0), (0, 0), (0, 0), (1, 0)])
    return TrialCollection([straight, paused])


@pytest.fixture
def write_trial_csv(temp_dir):
    """Factory: write a DataFrame to <temp_dir>/<subdir>/<name>.csv."""
    def _write(name, df, subdir="trials"):
        directory = temp_dir / subdir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{name}.csv"
        df.to_csv(path, index=False)
        return path
    return _write


# =============================================================================
# Logging
# =============================================================================

@pytest.fixture(autouse=True)
def restore_root_logging():
    """The orchestrator reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
