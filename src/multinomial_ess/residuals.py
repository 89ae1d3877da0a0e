"""Pearson residuals for the effective-sample-size multinomial.

Each category is treated as binomial with variance ``p (1 - p) / vn``,
so the standardized residual of cell ``(i, j)`` is::

    r_ij = (o_ij - p_ij) / sqrt(p_ij (1 - p_ij) / vn + tiny)

Residuals are a reporting product: everything is evaluated on concrete
values and returned as a NumPy array.  JAX inputs must be concrete
(call this after the fit, not inside a traced objective).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from ._compat import _as_matrix
from ._config import TINY
from ._validation import _check_conformable

if TYPE_CHECKING:
    from ._typing import MatrixLike, ScalarLike


def pearson_residuals(
    log_vn: ScalarLike,
    observed: MatrixLike,
    predicted: Any,
    *,
    tiny: float = TINY,
) -> np.ndarray:
    """Standardized residuals of observed against predicted proportions.

    Args:
        log_vn: Natural log of the (fitted) effective sample size.
        observed: Observed proportions ``(n, k)``.
        predicted: Predicted proportions, same extent as *observed*.
        tiny: Offset inside ``sqrt(variance + tiny)``.

    Returns:
        Residual matrix ``(n, k)``.

    Raises:
        ShapeMismatchError: If *observed* and *predicted* differ in
            extent.
    """
    obs = _as_matrix(observed, name="observed")
    pred = _as_matrix(predicted, name="predicted")
    _check_conformable(obs, pred, observed_raw=observed, predicted_raw=predicted)

    vn = float(np.exp(np.asarray(log_vn, dtype=np.float64)))
    res = obs - pred
    var = pred * (1.0 - pred) / vn
    return res / np.sqrt(var + tiny)
