"""Tests for pipeline contracts.

These tests verify that contracts are enforced at stage boundaries.
They test contract violations directly, without defensive logic downstream.
"""

import pytest
import pandas as pd

pytestmark = pytest.mark.unit

from servosphere.contracts import (
    ContractViolation,
    IdentityMismatchError,
    InvalidWindowError,
    MissingColumnError,
    TrialProcessingError,
    assert_cleaned,
    require,
    require_columns,
)


class TestRequire:
    """Test the single enforcement primitive."""

    def test_require_passes_when_true(self):
        require(True, "never raised")

    def test_require_raises_contract_violation(self):
        with pytest.raises(ContractViolation, match="broken"):
            require(False, "broken")

    def test_require_raises_given_subclass(self):
        with pytest.raises(InvalidWindowError):
            require(False, "bad window", InvalidWindowError)

    def test_require_columns_names_column_and_location(self):
        df = pd.DataFrame({"dx": [1.0]})
        with pytest.raises(MissingColumnError) as exc:
            require_columns(df, ["dx", "dy"], "trial 't1'", stage="distance")

        assert exc.value.column == "dy"
        assert exc.value.where == "trial 't1'"
        assert exc.value.stage == "distance"
        assert "missing required column 'dy'" in str(exc.value)


class TestFailureHierarchy:
    """All structural failures share one base class."""

    @pytest.mark.parametrize("error", [
        InvalidWindowError("w"),
        MissingColumnError("x", "somewhere"),
        IdentityMismatchError("ids"),
        TrialProcessingError("stage", "t1", ValueError("boom")),
    ])
    def test_subclasses_contract_violation(self, error):
        assert isinstance(error, ContractViolation)
        assert isinstance(error, RuntimeError)

    def test_trial_processing_error_message(self):
        err = TrialProcessingError("velocity", "t7", ZeroDivisionError("division by zero"))
        assert err.stage == "velocity"
        assert err.trial_id == "t7"
        assert "t7" in str(err)
        assert "ZeroDivisionError" in str(err)

    def test_identity_mismatch_keeps_identities(self):
        err = IdentityMismatchError("no match", identities=("a", "b"))
        assert err.identities == ["a", "b"]

    def test_invalid_window_attributes(self):
        err = InvalidWindowError("too big", window_size=10, trial_id="t1")
        assert err.window_size == 10
        assert err.trial_id == "t1"


class TestCleanedTrialContract:
    """Test the ingest contract."""

    def test_cleaned_contract_passes(self):
        df = pd.DataFrame({"stimulus": [1], "dT": [10], "dx": [0.1], "dy": [0.2]})
        assert_cleaned(df, "t1")

    def test_cleaned_contract_fails_without_stimulus(self):
        df = pd.DataFrame({"dT": [10], "dx": [0.1], "dy": [0.2]})
        with pytest.raises(MissingColumnError, match="'stimulus'"):
            assert_cleaned(df, "t1")

    def test_cleaned_contract_fails_on_negative_dt(self):
        df = pd.DataFrame({"stimulus": [1, 1], "dT": [10, -5], "dx": [0, 0], "dy": [0, 0]})
        with pytest.raises(ContractViolation, match="negative dT"):
            assert_cleaned(df, "t1")

    def test_cleaned_contract_fails_on_missing_dt(self):
        df = pd.DataFrame({"stimulus": [1, 1], "dT": [10, None], "dx": [0, 0], "dy": [0, 0]})
        with pytest.raises(ContractViolation, match="missing dT"):
            assert_cleaned(df, "t1")
