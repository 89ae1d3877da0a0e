"""Runtime configuration for the multinomial_ess package.

Two switches are configurable:

* **Backend** — whether likelihoods are evaluated with JAX (traceable,
  autodiff gradients) or with NumPy/SciPy (concrete values, closed-form
  gradients).
* **Zero-row policy** — what happens when an observed row sums to
  zero, which makes the effective-sample-size rescaling divide by
  zero.

Resolution order for both (first match wins):
    1. Programmatic override via :func:`set_backend` /
       :func:`set_zero_row_policy`.
    2. The ``MULTINOMIAL_ESS_BACKEND`` / ``MULTINOMIAL_ESS_ZERO_ROWS``
       environment variable.
    3. Default: backend auto-detection (``"jax"`` if JAX is importable,
       else ``"numpy"``); zero-row policy ``"propagate"``.

The stabilising offset :data:`TINY` is a plain module constant.  Every
public function takes a ``tiny=`` keyword so callers that need a
different offset pass it explicitly rather than mutating global state.

Examples:
    Disable JAX globally from the shell::

        export MULTINOMIAL_ESS_BACKEND=numpy

    Make empty composition rows contribute nothing::

        import multinomial_ess
        multinomial_ess.set_zero_row_policy("skip")
"""

from __future__ import annotations

import os

TINY: float = 1e-8
"""Offset added before ``log`` and ``sqrt`` of possibly-zero quantities.

Applied as ``log(TINY + p)`` in the likelihood and
``sqrt(var + TINY)`` in the Pearson residuals.  Changing it changes
every reported value, so reference comparisons must use the same
constant.
"""

_VALID_BACKENDS = {"jax", "numpy", "auto"}
_VALID_ZERO_ROW_POLICIES = {"propagate", "skip", "raise"}

_BACKEND_ENV = "MULTINOMIAL_ESS_BACKEND"
_ZERO_ROWS_ENV = "MULTINOMIAL_ESS_ZERO_ROWS"

# Sentinels indicating "no programmatic override has been set".
_backend_override: str | None = None
_zero_row_override: str | None = None


def _jax_is_available() -> bool:
    """Return ``True`` if JAX can be imported."""
    try:
        # Side-effect import to test availability; value unused.
        import jax  # noqa: F401

        return True
    except ImportError:
        return False


def get_backend() -> str:
    """Return the active backend name (``"jax"`` or ``"numpy"``).

    Resolution order:
        1. Value set by :func:`set_backend` (unless ``"auto"``).
        2. ``MULTINOMIAL_ESS_BACKEND`` environment variable.
        3. ``"jax"`` if importable, otherwise ``"numpy"``.

    Returns:
        ``"jax"`` or ``"numpy"``.
    """
    # 1. Programmatic override
    if _backend_override is not None and _backend_override != "auto":
        return _backend_override

    # 2. Environment variable
    env = os.environ.get(_BACKEND_ENV, "").strip().lower()
    if env in ("jax", "numpy"):
        return env

    # 3. Auto-detect
    return "jax" if _jax_is_available() else "numpy"


def set_backend(name: str) -> None:
    """Override the backend selection.

    Args:
        name: One of ``"jax"``, ``"numpy"``, or ``"auto"``
            (case-insensitive).  ``"auto"`` restores the default
            resolution order.

    Raises:
        ValueError: If *name* is not a recognised backend.
    """
    global _backend_override
    normalised = name.strip().lower()
    if normalised not in _VALID_BACKENDS:
        raise ValueError(
            f"Unknown backend '{name}'. Choose from: {sorted(_VALID_BACKENDS)}"
        )
    _backend_override = normalised


def get_zero_row_policy() -> str:
    """Return the active zero-row policy.

    ``"propagate"`` lets the division by a zero row sum run through
    the arithmetic (the row's contribution becomes NaN) and warns;
    ``"skip"`` drops the row from the total; ``"raise"`` raises
    :class:`~multinomial_ess.ZeroRowSumError`.
    """
    if _zero_row_override is not None:
        return _zero_row_override

    env = os.environ.get(_ZERO_ROWS_ENV, "").strip().lower()
    if env in _VALID_ZERO_ROW_POLICIES:
        return env

    return "propagate"


def set_zero_row_policy(policy: str | None) -> None:
    """Override the zero-row policy.

    Args:
        policy: ``"propagate"``, ``"skip"``, ``"raise"``
            (case-insensitive), or ``None`` to restore the default
            resolution order.

    Raises:
        ValueError: If *policy* is not recognised.
    """
    global _zero_row_override
    if policy is None:
        _zero_row_override = None
        return
    _zero_row_override = _normalise_zero_row_policy(policy)


def _normalise_zero_row_policy(policy: str) -> str:
    normalised = policy.strip().lower()
    if normalised not in _VALID_ZERO_ROW_POLICIES:
        raise ValueError(
            f"Unknown zero-row policy '{policy}'. "
            f"Choose from: {sorted(_VALID_ZERO_ROW_POLICIES)}"
        )
    return normalised


def resolve_zero_row_policy(policy: str | None) -> str:
    """Return *policy* validated, or the configured default if ``None``."""
    if policy is None:
        return get_zero_row_policy()
    return _normalise_zero_row_policy(policy)
