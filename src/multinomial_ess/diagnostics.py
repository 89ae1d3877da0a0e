"""Goodness-of-fit summaries for Pearson residual matrices.

The standard check on a composition's weighting is the **standard
deviation of normalized residuals** (SDNR).  If the effective sample
size is about right, the Pearson residuals have unit variance and the
SDNR is close to 1:

* SDNR well above 1 — residuals are larger than the assumed variance
  allows; the effective sample size is too large (the data are given
  too much weight).
* SDNR well below 1 — the effective sample size is too small.

An approximate 95 % band for the SDNR of ``n`` standard-normal values
is ``1 ± 2 / sqrt(2 (n - 1))``.  The median absolute residual (MAR)
is reported alongside because it is insensitive to a few extreme
cells (e.g. a category predicted at nearly zero).
"""

from __future__ import annotations

import logging
import math
import warnings
from typing import TYPE_CHECKING

import numpy as np

from ._compat import _as_matrix
from ._results import ResidualDiagnostics

if TYPE_CHECKING:
    from ._typing import MatrixLike

logger = logging.getLogger(__name__)


def sdnr_bound(n: int) -> float:
    """Half-width of the approximate 95 % band around SDNR = 1.

    Returns ``nan`` when fewer than two residuals are available.
    """
    if n < 2:
        return float("nan")
    return 2.0 / math.sqrt(2.0 * (n - 1))


def residual_diagnostics(residuals: MatrixLike) -> ResidualDiagnostics:
    """Summarise a residual matrix from :func:`~multinomial_ess.pearson_residuals`.

    Non-finite cells (from a zero-sum row or a degenerate prediction)
    are excluded from every statistic and counted in ``n_nonfinite``.

    Args:
        residuals: Residual matrix ``(n, k)``.

    Returns:
        A :class:`~multinomial_ess.ResidualDiagnostics`.
    """
    res = _as_matrix(residuals, name="residuals")
    n_rows, n_categories = res.shape

    finite = np.isfinite(res)
    values = res[finite]
    n_finite = int(values.size)

    if n_finite == 0:
        mean = sdnr = mar = max_abs = float("nan")
    else:
        mean = float(values.mean())
        sdnr = float(values.std(ddof=1)) if n_finite > 1 else float("nan")
        mar = float(np.median(np.abs(values)))
        max_abs = float(np.max(np.abs(values)))

    masked = np.where(finite, res, np.nan)
    # Columns with no finite cell give an all-NaN slice; NaN is the answer.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        category_mean = np.nanmean(masked, axis=0)
        category_rms = np.sqrt(np.nanmean(masked**2, axis=0))

    logger.debug(
        "Residual diagnostics: %d x %d, SDNR=%.4g, MAR=%.4g, non-finite=%d",
        n_rows,
        n_categories,
        sdnr,
        mar,
        res.size - n_finite,
    )

    return ResidualDiagnostics(
        n_rows=n_rows,
        n_categories=n_categories,
        n_nonfinite=int(res.size - n_finite),
        mean=mean,
        sdnr=sdnr,
        mar=mar,
        max_abs=max_abs,
        category_mean=category_mean,
        category_rms=category_rms,
    )
