"""Formatted ASCII table display of Pearson residual diagnostics.

The table is meant to be printed once per fitted data group: a
per-category panel (mean residual and RMS, which expose categories the
model systematically over- or under-predicts) above a summary panel
with SDNR and MAR, followed by plain-language notes when the SDNR falls
outside its approximate 95 % band.
"""

from __future__ import annotations

import math
import textwrap
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import pandas as pd

from .diagnostics import residual_diagnostics, sdnr_bound

if TYPE_CHECKING:
    from ._typing import MatrixLike


def _truncate(name: str, max_len: int) -> str:
    """Truncate *name* to *max_len*, appending ``'...'`` if needed."""
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."


def _fmt_float(val: float, spec: str = ".4f") -> str:
    """Format a float, rendering ``nan`` as ``'N/A'``."""
    if val is None or (isinstance(val, float) and math.isnan(val)):
        return "N/A"
    return format(val, spec)


def _wrap(text: str, width: int = 80, indent: int = 2) -> str:
    """Word-wrap *text* to *width*, indenting continuation lines.

    Unlike ``textwrap.fill``, this keeps the first line unindented
    (the caller typically supplies its own prefix) and indents only
    the continuation lines by *indent* spaces.
    """
    return textwrap.fill(
        text,
        width=width,
        initial_indent="",
        subsequent_indent=" " * indent,
    )


def print_residual_table(
    residuals: MatrixLike,
    *,
    title: str = "Pearson Residual Diagnostics",
    category_labels: Sequence[Any] | None = None,
) -> None:
    """Print residual diagnostics in a formatted ASCII table.

    Args:
        residuals: Residual matrix from
            :func:`~multinomial_ess.pearson_residuals`.  When a pandas
            DataFrame is passed its column labels name the categories.
        title: Title for the output table.
        category_labels: Explicit category names (overrides frame
            columns).  Defaults to ``0 .. k-1``.
    """
    diag = residual_diagnostics(residuals)

    if category_labels is None:
        if isinstance(residuals, pd.DataFrame):
            category_labels = list(residuals.columns)
        else:
            category_labels = list(range(diag.n_categories))
    if len(category_labels) != diag.n_categories:
        raise ValueError(
            f"Got {len(category_labels)} category labels for "
            f"{diag.n_categories} categories."
        )

    W = 80
    notes: list[str] = []

    # ── Title ──────────────────────────────────────────────────── #

    print("=" * W)
    for line in textwrap.wrap(title, width=W - 2):
        print(f"{line:^{W}}")
    print("=" * W)

    # ── Per-category Residuals ─────────────────────────────────── #

    fc = 22  # category label column width

    print("Per-category Residuals")
    print("-" * W)
    print(f"{'Category':<{fc}}{'Mean':>12} {'RMS':>12}")
    for label, mean, rms in zip(
        category_labels, diag.category_mean, diag.category_rms, strict=True
    ):
        name = _truncate(str(label), fc - 2)
        print(
            f"{name:<{fc}}"
            f"{_fmt_float(float(mean)):>12} "
            f"{_fmt_float(float(rms)):>12}"
        )

    # ── Summary ────────────────────────────────────────────────── #

    lw = 28  # label column width (not counting 2-space indent)
    n_finite = diag.n_rows * diag.n_categories - diag.n_nonfinite
    bound = sdnr_bound(n_finite)

    print("-" * W)
    print("Summary")
    print("-" * W)
    print(f"  {'Rows x categories:':<{lw}}{diag.n_rows} x {diag.n_categories}")
    print(f"  {'Mean residual:':<{lw}}{_fmt_float(diag.mean)}")
    print(f"  {'SDNR:':<{lw}}{_fmt_float(diag.sdnr)}")
    print(f"  {'SDNR 95% band:':<{lw}}1 ± {_fmt_float(bound, '.3f')}")
    print(f"  {'MAR:':<{lw}}{_fmt_float(diag.mar)}")
    print(f"  {'Max |residual|:':<{lw}}{_fmt_float(diag.max_abs)}")

    # ── Notes ──────────────────────────────────────────────────── #

    if diag.n_nonfinite:
        notes.append(
            f"{diag.n_nonfinite} non-finite residual(s) excluded; check for "
            "zero-sum observed rows or predictions outside [0, 1]."
        )
    if not math.isnan(bound) and not math.isnan(diag.sdnr):
        if diag.sdnr > 1.0 + bound:
            notes.append(
                f"SDNR = {diag.sdnr:.3f} is above its band; the effective "
                "sample size gives this composition too much weight."
            )
        elif diag.sdnr < 1.0 - bound:
            notes.append(
                f"SDNR = {diag.sdnr:.3f} is below its band; the effective "
                "sample size gives this composition too little weight."
            )

    if notes:
        print("-" * W)
        print("Notes")
        print("-" * W)
        for note in notes:
            print(_wrap(f"  [!] {note}", width=W, indent=6))

    print("=" * W)
    print()
