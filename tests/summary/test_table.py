"""Tests for the append-only SummaryTable."""

import logging

import numpy as np
import pandas as pd
import pytest

pytestmark = pytest.mark.unit

from servosphere.contracts import IdentityMismatchError, MissingColumnError
from servosphere.summary import SummaryTable
from servosphere.trials import TrialCollection


class TestSummaryTable:

    def test_for_collection(self, two_trials):
        table = SummaryTable.for_collection(two_trials)
        assert table.ids == ["a", "b"]
        assert table.key == "id"
        assert table.columns == []
        assert len(table) == 2

    def test_ensure_creates_when_absent(self, two_trials):
        table = SummaryTable.ensure(two_trials, None)
        assert table.ids == ["a", "b"]

    def test_ensure_returns_existing_table(self, two_trials):
        table = SummaryTable.for_collection(two_trials)
        assert SummaryTable.ensure(two_trials, table) is table

    def test_ensure_rejects_other_identities(self, two_trials):
        table = SummaryTable(["a", "c"])
        with pytest.raises(IdentityMismatchError) as exc:
            SummaryTable.ensure(two_trials, table)
        assert set(exc.value.identities) == {"b", "c"}

    def test_add_column_by_identity(self, two_trials):
        table = SummaryTable.for_collection(two_trials)
        table.add_column("score", {"b": 2.0, "a": 1.0})
        assert table["score"].tolist() == [1.0, 2.0]

    def test_missing_identity_gets_nan(self, two_trials):
        table = SummaryTable.for_collection(two_trials)
        table.add_column("score", {"a": 1.0})
        assert np.isnan(table["score"].iloc[1])

    def test_empty_mapping(self):
        table = SummaryTable([])
        table.add_column("score", {})
        assert table.columns == ["score"]

    def test_columns_append_in_order(self, two_trials):
        table = SummaryTable.for_collection(two_trials)
        table.add_column("first", {"a": 1, "b": 2})
        table.add_column("second", pd.Series({"a": 3, "b": 4}))
        assert table.columns == ["first", "second"]

    def test_overwrite_keeps_position_and_warns(self, two_trials, caplog):
        table = SummaryTable.for_collection(two_trials)
        table.add_column("first", {"a": 1, "b": 2})
        table.add_column("second", {"a": 3, "b": 4})
        with caplog.at_level(logging.WARNING, logger="servosphere.summary.table"):
            table.add_column("first", {"a": 10, "b": 20})

        assert table.columns == ["first", "second"]
        assert table["first"].tolist() == [10, 20]
        assert "already exists" in caplog.text

    def test_require(self, two_trials):
        table = SummaryTable.for_collection(two_trials)
        table.add_column("total_distance", {"a": 1.0, "b": 2.0})
        table.require(["total_distance"])
        with pytest.raises(MissingColumnError, match="'net_displacement'"):
            table.require(["total_distance", "net_displacement"], stage="tortuosity")

    def test_to_frame_identity_first(self, two_trials):
        table = SummaryTable.for_collection(two_trials)
        table.add_column("score", {"a": 1.0, "b": 2.0})
        df = table.to_frame()
        assert list(df.columns) == ["id", "score"]
        assert df["id"].tolist() == ["a", "b"]

    def test_key_follows_collection(self, square_trial):
        collection = TrialCollection([square_trial], key="id_stim")
        assert SummaryTable.for_collection(collection).key == "id_stim"
