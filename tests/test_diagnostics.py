"""Tests for residual diagnostics and the residual display table."""

from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from multinomial_ess import (
    ResidualDiagnostics,
    pearson_residuals,
    print_residual_table,
    residual_diagnostics,
)
from multinomial_ess.diagnostics import sdnr_bound

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _alternating(value: float, n_rows: int = 10) -> np.ndarray:
    """Residual matrix of ±value, mean zero in every column."""
    row = np.array([value, -value])
    return np.vstack([row if i % 2 == 0 else -row for i in range(n_rows)])


# ------------------------------------------------------------------ #
# residual_diagnostics
# ------------------------------------------------------------------ #


class TestResidualDiagnostics:
    def test_basic_statistics(self) -> None:
        res = np.array([[1.0, -2.0], [-1.0, 2.0]])
        diag = residual_diagnostics(res)
        assert isinstance(diag, ResidualDiagnostics)
        assert (diag.n_rows, diag.n_categories) == (2, 2)
        assert diag.n_nonfinite == 0
        assert diag.mean == pytest.approx(0.0)
        assert diag.sdnr == pytest.approx(np.std([1.0, -2.0, -1.0, 2.0], ddof=1))
        assert diag.mar == pytest.approx(1.5)
        assert diag.max_abs == pytest.approx(2.0)
        np.testing.assert_allclose(diag.category_mean, [0.0, 0.0])
        np.testing.assert_allclose(diag.category_rms, [1.0, 2.0])

    def test_nonfinite_cells_excluded(self) -> None:
        res = np.array([[1.0, np.nan], [-1.0, np.inf]])
        diag = residual_diagnostics(res)
        assert diag.n_nonfinite == 2
        assert diag.mean == pytest.approx(0.0)
        assert diag.sdnr == pytest.approx(math.sqrt(2.0))
        assert diag.mar == pytest.approx(1.0)
        assert diag.category_mean[0] == pytest.approx(0.0)
        assert math.isnan(diag.category_mean[1])
        assert math.isnan(diag.category_rms[1])

    def test_single_cell_has_undefined_sdnr(self) -> None:
        diag = residual_diagnostics([[0.5]])
        assert math.isnan(diag.sdnr)
        assert diag.mar == pytest.approx(0.5)

    def test_all_nonfinite(self) -> None:
        diag = residual_diagnostics([[np.nan, np.nan]])
        assert diag.n_nonfinite == 2
        assert math.isnan(diag.mean)
        assert math.isnan(diag.max_abs)

    def test_well_weighted_fit_has_sdnr_near_one(self) -> None:
        rng = np.random.default_rng(3)
        vn = 200
        predicted = np.tile(rng.dirichlet(np.full(5, 10.0)), (400, 1))
        counts = np.vstack([rng.multinomial(vn, p) for p in predicted])
        observed = counts / vn
        res = pearson_residuals(math.log(vn), observed, predicted)
        diag = residual_diagnostics(res)
        # Each cell is marginally binomial with the assumed variance.
        assert 0.9 < diag.sdnr < 1.1

    def test_to_dict(self) -> None:
        d = residual_diagnostics(np.array([[1.0, -1.0]])).to_dict()
        assert d["n_rows"] == 1
        assert isinstance(d["category_mean"], list)

    def test_sdnr_bound(self) -> None:
        assert sdnr_bound(51) == pytest.approx(0.2)
        assert math.isnan(sdnr_bound(1))


# ------------------------------------------------------------------ #
# print_residual_table
# ------------------------------------------------------------------ #


class TestPrintResidualTable:
    def test_layout(self, capsys) -> None:
        print_residual_table(_alternating(1.0), title="Fishery Ages")
        out = capsys.readouterr().out
        assert "Fishery Ages" in out
        assert "Per-category Residuals" in out
        assert "SDNR:" in out
        assert "MAR:" in out
        assert all(len(line) <= 80 for line in out.splitlines())

    def test_note_when_overweighted(self, capsys) -> None:
        print_residual_table(_alternating(3.0))
        out = capsys.readouterr().out
        assert "Notes" in out
        assert "too much weight" in out

    def test_note_when_underweighted(self, capsys) -> None:
        print_residual_table(_alternating(0.1))
        out = capsys.readouterr().out
        assert "too little weight" in out

    def test_no_notes_when_sdnr_in_band(self, capsys) -> None:
        print_residual_table(_alternating(1.0))
        out = capsys.readouterr().out
        assert "Notes" not in out

    def test_frame_columns_label_categories(self, capsys) -> None:
        frame = pd.DataFrame(_alternating(1.0), columns=["age_3", "age_4"])
        print_residual_table(frame)
        out = capsys.readouterr().out
        assert "age_3" in out
        assert "age_4" in out

    def test_nonfinite_note(self, capsys) -> None:
        res = _alternating(1.0)
        res[0, 0] = np.nan
        print_residual_table(res)
        out = capsys.readouterr().out
        assert "non-finite" in out

    def test_label_count_mismatch_raises(self) -> None:
        with pytest.raises(ValueError, match="category labels"):
            print_residual_table(_alternating(1.0), category_labels=["a"])
