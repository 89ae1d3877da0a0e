"""Input compatibility layer for matrix arguments.

Observed compositions arrive in many containers: NumPy arrays, nested
lists, pandas frames (rows = years or samples, columns = age or length
bins) and, optionally, Polars frames.  Everything is converted to a
2-D ``float64`` array at the boundary so the likelihood kernels only
ever see one representation.

Predicted proportions are treated differently: under the JAX backend
they may be traced arrays that must **not** be pulled to host, so
:func:`_as_predicted` leaves array-like objects exposing ``ndim`` and
``reshape`` untouched apart from promoting a single row to 2-D.

Polars is **not** a required dependency.  If it is not installed,
Polars inputs are simply rejected as unsupported types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from ._typing import MatrixLike

# Runtime detection — avoids a hard dependency on Polars.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _frame_to_numpy(obj: Any) -> np.ndarray | None:
    """Return the values of a pandas/Polars container, else ``None``."""
    if isinstance(obj, pd.DataFrame):
        return obj.to_numpy(dtype=np.float64)
    if isinstance(obj, pd.Series):
        return obj.to_numpy(dtype=np.float64)[np.newaxis, :]

    if _HAS_POLARS:
        if isinstance(obj, pl.LazyFrame):
            return obj.collect().to_numpy().astype(np.float64)
        if isinstance(obj, pl.DataFrame):
            return obj.to_numpy().astype(np.float64)

    return None


def _promote(arr: Any, name: str) -> Any:
    """Promote a 1-D row to shape ``(1, k)``; reject other ranks."""
    if arr.ndim == 1:
        return arr.reshape(1, -1)
    if arr.ndim != 2:
        raise ValueError(
            f"'{name}' must be a 1-D or 2-D matrix, got {arr.ndim} dimensions."
        )
    return arr


def _as_matrix(obj: MatrixLike, *, name: str = "input") -> np.ndarray:
    """Convert *obj* to a concrete 2-D ``float64`` array.

    Accepted types:
        * ``numpy.ndarray`` (1-D rows are promoted to ``(1, k)``).
        * Nested lists / tuples of numbers (must be rectangular).
        * ``pandas.DataFrame`` / ``pandas.Series``.
        * ``polars.DataFrame`` / ``polars.LazyFrame`` when installed.
        * Concrete JAX arrays (pulled to host).

    Args:
        obj: Matrix-like input.
        name: Label used in error messages (e.g. ``"observed"``).

    Returns:
        A 2-D ``float64`` NumPy array.

    Raises:
        TypeError: If *obj* is not a recognised matrix type.
        ValueError: If *obj* is ragged or has more than two dimensions.
    """
    values = _frame_to_numpy(obj)
    if values is None:
        if isinstance(obj, (str, bytes, dict)) or obj is None:
            raise TypeError(
                f"'{name}' must be an array, nested list, or DataFrame"
                + (" (pandas or Polars)" if _HAS_POLARS else "")
                + f", got {type(obj).__name__}."
            )
        try:
            values = np.asarray(obj, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"'{name}' could not be converted to a rectangular numeric "
                f"matrix: {exc}"
            ) from exc

    return _promote(values, name)


def _as_predicted(obj: Any, *, name: str = "predicted") -> Any:
    """Normalise predicted proportions without leaving the JAX graph.

    Containers (frames, lists) are converted like :func:`_as_matrix`.
    Array objects that are not NumPy arrays (JAX arrays and tracers)
    keep their type so gradients still flow through them.
    """
    if isinstance(obj, np.ndarray) or _frame_to_numpy(obj) is not None:
        return _as_matrix(obj, name=name)
    if hasattr(obj, "ndim") and hasattr(obj, "reshape"):
        return _promote(obj, name)
    return _as_matrix(obj, name=name)


def _frame_labels(obj: Any) -> tuple[list[Any], list[Any]] | None:
    """Return ``(row_labels, column_labels)`` for a pandas frame, else ``None``."""
    if isinstance(obj, pd.DataFrame):
        return list(obj.index), list(obj.columns)
    return None
