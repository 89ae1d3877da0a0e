"""Precondition checks shared by the likelihood and residual paths.

Two error kinds are defined here:

* :class:`ShapeMismatchError` — observed and predicted matrices do not
  have the same extent.  This is a caller bug: it is raised before any
  arithmetic and is never converted into a numeric result.
* :class:`ZeroRowSumError` — an observed row sums to zero and the
  active zero-row policy is ``"raise"``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np

from ._compat import _frame_labels


class ShapeMismatchError(ValueError):
    """Observed and predicted matrices are not the same size.

    Attributes:
        observed_shape: ``(rows, categories)`` of the observed matrix.
        predicted_shape: ``(rows, categories)`` of the predicted matrix.
    """

    def __init__(
        self,
        observed_shape: tuple[int, ...],
        predicted_shape: tuple[int, ...],
        detail: str | None = None,
    ) -> None:
        self.observed_shape = tuple(observed_shape)
        self.predicted_shape = tuple(predicted_shape)
        msg = (
            "Observed and predicted matrices are not the same size: "
            f"observed {self.observed_shape}, predicted {self.predicted_shape}."
        )
        if detail:
            msg = f"{msg} {detail}"
        super().__init__(msg)


class ZeroRowSumError(ValueError):
    """One or more observed rows sum to zero.

    Attributes:
        rows: Zero-based indices of the offending rows.
    """

    def __init__(self, rows: Sequence[int]) -> None:
        self.rows = [int(r) for r in rows]
        super().__init__(
            f"Observed rows {self.rows} sum to zero; the effective sample "
            "size rescaling is undefined for them."
        )


def _check_conformable(
    observed: np.ndarray,
    predicted: Any,
    *,
    observed_raw: Any = None,
    predicted_raw: Any = None,
) -> None:
    """Raise :class:`ShapeMismatchError` unless both extents agree.

    *observed* and *predicted* are the already-coerced 2-D matrices.
    When the raw inputs are both pandas frames, their row and column
    labels must match as well.
    """
    obs_shape = tuple(observed.shape)
    pred_shape = tuple(predicted.shape)
    if obs_shape != pred_shape:
        raise ShapeMismatchError(obs_shape, pred_shape)

    obs_labels = _frame_labels(observed_raw)
    pred_labels = _frame_labels(predicted_raw)
    if obs_labels is None or pred_labels is None:
        return
    if obs_labels[0] != pred_labels[0]:
        raise ShapeMismatchError(
            obs_shape, pred_shape, "Row labels of the two frames differ."
        )
    if obs_labels[1] != pred_labels[1]:
        raise ShapeMismatchError(
            obs_shape, pred_shape, "Column labels of the two frames differ."
        )


def _zero_sum_rows(observed: np.ndarray) -> np.ndarray:
    """Return indices of observed rows whose sum is exactly zero."""
    return np.flatnonzero(observed.sum(axis=1) == 0.0)
