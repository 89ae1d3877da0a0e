"""Multinomial negative log-likelihood with an estimated effective sample size.

For one data group with observed compositions ``o`` (rows = samples,
columns = categories such as age or length bins) and predicted
proportions ``p``, the effective sample size ``vn = exp(log_vn)``
rescales every observed row to ``vn`` pseudo-counts::

    sobs_ij = vn · o_ij / Σ_j o_ij

and the negative log-likelihood is, summed over rows ``i``::

    f = Σ_i [ -lnΓ(vn) + Σ_{j: sobs_ij > 0} lnΓ(sobs_ij) - Σ_j sobs_ij · log(tiny + p_ij) ]

Cells with ``sobs_ij == 0`` are skipped in the ``lnΓ`` sum because
``lnΓ`` is undefined there; they still enter the last term with weight
zero.  The ``tiny`` offset keeps ``log(0)`` out of the objective when a
predicted proportion is exactly zero.

Estimating ``vn`` alongside the model parameters lets the fit decide how
much independent information a composition carries, which corrects for
the overdispersion of real age/length samples relative to a naive
multinomial with the nominal sample size.

The function is meant to be called once per data group inside an outer
gradient-based fit.  With the JAX backend the returned scalar is a JAX
value that can be traced::

    import jax
    from multinomial_ess import dmultinom

    grad_fn = jax.grad(lambda lv, p: dmultinom(lv, obs, p), argnums=(0, 1))

With the NumPy backend use :func:`dmultinom_value_and_grad`, which
returns the closed-form gradient.
"""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING, Any

import numpy as np

from ._backends import resolve_backend
from ._compat import _as_matrix, _as_predicted
from ._config import TINY, resolve_zero_row_policy
from ._results import LikelihoodGradient
from ._validation import ZeroRowSumError, _check_conformable, _zero_sum_rows

if TYPE_CHECKING:
    from ._typing import MatrixLike, ScalarLike

logger = logging.getLogger(__name__)


def _prepare(
    observed: MatrixLike,
    predicted: Any,
    zero_rows: str | None,
) -> tuple[np.ndarray, Any, np.ndarray]:
    """Coerce and validate inputs, then apply the zero-row policy.

    Returns:
        ``(observed, predicted, row_weight)`` where ``row_weight`` is
        ``0.0`` for rows dropped by the ``"skip"`` policy and ``1.0``
        otherwise.

    Raises:
        ShapeMismatchError: If the two matrices differ in extent.
        ZeroRowSumError: If a row sums to zero under ``"raise"``.
    """
    obs = _as_matrix(observed, name="observed")
    pred = _as_predicted(predicted, name="predicted")
    _check_conformable(obs, pred, observed_raw=observed, predicted_raw=predicted)

    policy = resolve_zero_row_policy(zero_rows)
    row_weight = np.ones(obs.shape[0], dtype=np.float64)
    zero = _zero_sum_rows(obs)
    if zero.size == 0:
        return obs, pred, row_weight

    if policy == "raise":
        raise ZeroRowSumError(zero)

    if policy == "skip":
        # Any positive fill keeps the rescaling finite; the row is
        # masked out of the total by its zero weight.
        obs = obs.copy()
        obs[zero] = 1.0
        row_weight[zero] = 0.0
        logger.debug("Skipping zero-sum observed rows %s", zero.tolist())
    else:
        warnings.warn(
            f"Observed rows {zero.tolist()} sum to zero; the likelihood "
            "is NaN.  Pass zero_rows='skip' to drop empty rows or "
            "zero_rows='raise' to reject them.",
            RuntimeWarning,
            stacklevel=3,
        )

    return obs, pred, row_weight


def dmultinom(
    log_vn: ScalarLike,
    observed: MatrixLike,
    predicted: Any,
    *,
    tiny: float = TINY,
    zero_rows: str | None = None,
    backend: str | None = None,
) -> Any:
    """Negative log-likelihood of compositions under effective sample size.

    Args:
        log_vn: Natural log of the effective sample size.  May be a
            JAX tracer under the JAX backend.
        observed: Observed proportions or counts ``(n, k)``; rows need
            not sum to one.  Must be concrete.  A 1-D input is one row.
        predicted: Predicted proportions, same extent as *observed*.
            May be a JAX tracer under the JAX backend.
        tiny: Offset inside ``log(tiny + predicted)``.
        zero_rows: Zero-row policy for this call (``"propagate"``,
            ``"skip"`` or ``"raise"``); ``None`` uses the configured
            default.
        backend: ``"jax"`` or ``"numpy"`` for this call; ``None`` uses
            the configured default.

    Returns:
        The negative log-likelihood summed over rows: a Python ``float``
        under the NumPy backend, a JAX scalar under the JAX backend.

    Raises:
        ShapeMismatchError: If *observed* and *predicted* differ in
            row count, column count, or (for two pandas frames) labels.
        ZeroRowSumError: If a row sums to zero and the policy is
            ``"raise"``.
    """
    obs, pred, row_weight = _prepare(observed, predicted, zero_rows)
    return resolve_backend(backend).nll(log_vn, obs, pred, row_weight, tiny)


def dmultinom_value_and_grad(
    log_vn: ScalarLike,
    observed: MatrixLike,
    predicted: Any,
    *,
    tiny: float = TINY,
    zero_rows: str | None = None,
    backend: str | None = None,
) -> LikelihoodGradient:
    """Negative log-likelihood and its gradient as host values.

    Arguments are as for :func:`dmultinom`, except that *log_vn* and
    *predicted* must be concrete.  Useful for driving SciPy optimizers
    or for checking an outer model's gradients.

    Returns:
        A :class:`~multinomial_ess.LikelihoodGradient` with the value,
        ``∂f/∂log_vn`` and ``∂f/∂predicted`` (shape of *observed*).
    """
    obs, pred, row_weight = _prepare(observed, predicted, zero_rows)
    impl = resolve_backend(backend)
    value, d_log_vn, d_predicted = impl.nll_and_grad(
        log_vn, obs, pred, row_weight, tiny
    )
    return LikelihoodGradient(
        value=value,
        d_log_vn=d_log_vn,
        d_predicted=d_predicted,
        backend=impl.name,
    )


def effective_sample_size(log_vn: ScalarLike) -> float:
    """Return ``vn = exp(log_vn)`` as a Python float."""
    return float(np.exp(np.asarray(log_vn, dtype=np.float64)))
