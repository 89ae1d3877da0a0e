"""Typed result objects.

Frozen dataclasses that provide:

* **Attribute access** — ``result.value``, ``result.sdnr``, etc.
* **Dict-like access** — ``result["value"]``, ``result.get("key")``,
  ``"key" in result`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types converted to native Python.

Two concrete result types:

* :class:`LikelihoodGradient` — value and gradient of the negative
  log-likelihood for one data group.
* :class:`ResidualDiagnostics` — goodness-of-fit summary of a Pearson
  residual matrix.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar

import numpy as np

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy scalars/arrays to Python-native types.

    Handles nested dicts, lists, np.ndarray, np.integer, and
    np.floating so that :meth:`to_dict` returns a fully
    JSON-serialisable structure.
    """
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.bool_)):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Supports three access patterns:

    1. ``result["key"]``     — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``   — membership test
    """

    # Fields to exclude from to_dict() serialisation.
    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset()

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in result``."""
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain, JSON-serialisable dictionary."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name in self._EXCLUDE_FROM_DICT:
                continue
            result[f.name] = _numpy_to_python(getattr(self, f.name))
        return result


# ------------------------------------------------------------------ #
# LikelihoodGradient
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class LikelihoodGradient(_DictAccessMixin):
    """Negative log-likelihood of one data group with its gradient.

    Returned by :func:`~multinomial_ess.dmultinom_value_and_grad`.
    Gradient arrays are host NumPy values regardless of backend.
    """

    value: float
    """Negative log-likelihood summed over rows."""

    d_log_vn: float
    """Derivative with respect to the log effective sample size."""

    d_predicted: np.ndarray
    """Derivative with respect to each predicted proportion ``(n, k)``."""

    backend: str
    """Compute backend used (``"numpy"`` or ``"jax"``)."""


# ------------------------------------------------------------------ #
# ResidualDiagnostics
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class ResidualDiagnostics(_DictAccessMixin):
    """Summary statistics of a standardized residual matrix.

    Returned by :func:`~multinomial_ess.residual_diagnostics`.
    """

    n_rows: int
    """Number of observation groups (rows)."""

    n_categories: int
    """Number of categories (columns)."""

    n_nonfinite: int
    """Cells excluded from the statistics because they are NaN or inf."""

    mean: float
    """Mean residual over finite cells."""

    sdnr: float
    """Standard deviation of normalized residuals (``ddof=1``)."""

    mar: float
    """Median absolute residual."""

    max_abs: float
    """Largest absolute residual."""

    category_mean: np.ndarray
    """Per-category mean residual ``(k,)``."""

    category_rms: np.ndarray
    """Per-category root-mean-square residual ``(k,)``."""
