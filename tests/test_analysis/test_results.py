"""
Tests for ModelSelectionResult reporting.
"""

import json

import pandas as pd
import pytest

from protmodelfinder.analysis.criteria import compute_fit
from protmodelfinder.analysis.ranking import rank_models
from protmodelfinder.analysis.results import (
    TABLE_COLUMNS,
    CandidateFailure,
    ModelSelectionResult,
)
from protmodelfinder.models import enumerate_candidates


@pytest.fixture
def selection_result():
    """Result for the 'test' model set on a 4-sequence, 60-site alignment."""
    lnls = {
        "JTT": -1003.0, "JTT+G": -993.0, "JTT+F": -998.0, "JTT+F+G": -988.0,
        "LG": -1000.0, "LG+G": -990.0, "LG+F": -995.0,
    }
    fits = [
        compute_fit(lnls[c.id], n_branches=5, extra_params=c.extra_params, n_sites=60,
                    model=c.id, oracle_args=c.oracle_args)
        for c in enumerate_candidates("test") if c.id in lnls
    ]
    return ModelSelectionResult(
        alignment="small.phy",
        model_group="test",
        n_sequences=4,
        n_sites=60,
        n_branches=5,
        ranking=rank_models(fits),
        failures=[CandidateFailure("LG+F+G", "LG+F+G: no 'Log-likelihood:' line")],
    )


@pytest.fixture
def degenerate_result():
    """Result with K large enough that AICc is undefined."""
    fits = [
        compute_fit(-80.0, n_branches=19, extra_params=0, n_sites=20, model="LG"),
        compute_fit(-70.0, n_branches=19, extra_params=1, n_sites=20, model="LG+G"),
    ]
    return ModelSelectionResult(
        alignment="tiny.phy", model_group="test", n_sequences=11, n_sites=20,
        n_branches=19, ranking=rank_models(fits),
    )


class TestModelSelectionResult:
    """Tests for the result object."""

    def test_best_model(self, selection_result):
        assert selection_result.best_model == "LG+G"
        assert selection_result.best.oracle_args == ("-m", "LG", "-c", "4", "-a", "e")

    def test_excluded(self, selection_result):
        assert selection_result.excluded == ["LG+F+G"]

    def test_rows_sorted_by_bic(self, selection_result):
        rows = selection_result.rows()
        bics = [row["BIC"] for row in rows]
        assert bics == sorted(bics)
        assert rows[0]["model"] == "LG+G"
        assert rows[0]["deltaBIC"] == 0.0
        assert set(rows[0]) == set(TABLE_COLUMNS)

    def test_tsv(self, selection_result):
        tsv = selection_result.to_tsv()
        lines = tsv.strip().split("\n")

        assert lines[0].split("\t") == TABLE_COLUMNS
        assert len(lines) == 1 + 7
        first = lines[1].split("\t")
        assert first[0] == "LG+G"
        assert first[1] == "6"
        assert first[2] == "10.00"
        assert first[3] == "-990.00000"
        assert first[7] == "0.00000"

    def test_tsv_undefined_aicc(self, degenerate_result):
        tsv = degenerate_result.to_tsv()
        rows = [line.split("\t") for line in tsv.strip().split("\n")[1:]]
        assert all(row[5] == "NA" for row in rows)

    def test_write_tsv(self, selection_result, tmp_path):
        path = selection_result.write_tsv(tmp_path / "fits.tsv")
        assert path.read_text() == selection_result.to_tsv()

    def test_summary(self, selection_result):
        summary = selection_result.summary()

        assert "PROTEIN MODEL SELECTION" in summary
        assert "Best model (BIC): LG+G" in summary
        assert "LG+F+G" in summary  # listed as not ranked
        assert "Candidates not ranked" in summary
        assert "AICc is recommended" in summary
        assert "-m LG -c 4 -a e" in summary
        assert str(selection_result) == summary

    def test_summary_undefined_aicc(self, degenerate_result):
        assert "NA" in degenerate_result.summary()

    def test_to_dict_and_json(self, selection_result, tmp_path):
        data = selection_result.to_dict()
        assert data["best_model"] == "LG+G"
        assert data["oracle_args"] == ["-m", "LG", "-c", "4", "-a", "e"]
        assert len(data["models"]) == 7
        assert data["failures"][0]["model"] == "LG+F+G"

        output_file = tmp_path / "result.json"
        json_str = selection_result.to_json(str(output_file))
        assert json.loads(json_str) == json.loads(output_file.read_text())
        assert json.loads(json_str)["models"][0]["model"] == "LG+G"

    def test_markdown(self, selection_result):
        md = selection_result.to_markdown_table()
        assert md.startswith("### Model selection for small.phy")
        assert "| LG+G | 6 |" in md
        assert "**Best model (BIC):** LG+G" in md

    def test_dataframe(self, selection_result):
        df = selection_result.to_dataframe()

        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == TABLE_COLUMNS
        assert len(df) == 7
        assert df["BIC"].is_monotonic_increasing
        assert df["BICw"].sum() == pytest.approx(1.0)
