"""NumPy / SciPy backend (always available).

This is the fallback backend that requires nothing beyond NumPy and
SciPy, both hard requirements of the package.  It evaluates on
concrete arrays only; gradients come from the closed form rather than
from automatic differentiation.

Closed-form gradient
~~~~~~~~~~~~~~~~~~~~
Write ``q_ij = o_ij / Σ_j o_ij`` for the row-normalised observations
and ``s_ij = vn · q_ij`` for the rescaled ones.  Per row the objective
is::

    f_i = -lnΓ(vn) + Σ_{j: s_ij > 0} lnΓ(s_ij) - Σ_j s_ij · log(tiny + p_ij)

so with ``ψ`` the digamma function::

    ∂f_i/∂vn   = -ψ(vn) + Σ_{j: s_ij > 0} q_ij ψ(s_ij) - Σ_j q_ij log(tiny + p_ij)
    ∂f_i/∂p_ij = -s_ij / (tiny + p_ij)

and the chain rule through ``vn = exp(log_vn)`` multiplies the first
line by ``vn``.  Columns skipped by the ``s_ij > 0`` rule contribute
nothing to either the value or the gradient, matching the autodiff
path of the JAX backend.

NaN handling
~~~~~~~~~~~~
A zero row sum turns ``q`` into ``NaN`` for the whole row.  The
division runs under ``np.errstate`` so no floating-point warnings
escape; the ``NaN`` fails the ``> 0`` test (no ``lnΓ`` term) and then
reaches the total through the dot product, which is exactly the
legacy behaviour.  Whether that is allowed to happen is decided
upstream by the zero-row policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy.special import digamma, gammaln


def _rescale(
    log_vn: float, observed: np.ndarray
) -> tuple[float, np.ndarray, np.ndarray]:
    """Return ``(vn, q, sobs)`` for a concrete observed matrix."""
    vn = float(np.exp(log_vn))
    row_sum = observed.sum(axis=1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        sobs = vn * observed / row_sum
        q = observed / row_sum
    return vn, q, sobs


@dataclass(frozen=True)
class NumpyBackend:
    """NumPy / SciPy compute backend.

    All methods accept plain NumPy arrays and return plain Python /
    NumPy values.  The class is a frozen dataclass with no instance
    state, so it is safe to cache in the module-level
    ``_BACKEND_CACHE`` singleton.
    """

    @property
    def name(self) -> str:
        return "numpy"

    @property
    def is_available(self) -> bool:  # noqa: PLR6301
        return True

    def nll(
        self,
        log_vn: Any,
        observed: np.ndarray,
        predicted: Any,
        row_weight: np.ndarray,
        tiny: float,
    ) -> float:
        """Negative log-likelihood as a Python ``float``."""
        predicted = np.asarray(predicted, dtype=np.float64)
        vn, _, sobs = _rescale(float(log_vn), observed)

        positive = sobs > 0.0
        log_gamma_obs = np.where(
            positive, gammaln(np.where(positive, sobs, 1.0)), 0.0
        )
        rows = (
            -gammaln(vn)
            + log_gamma_obs.sum(axis=1)
            - np.sum(sobs * np.log(tiny + predicted), axis=1)
        )
        return float(np.sum(np.where(row_weight > 0.0, rows, 0.0)))

    def nll_and_grad(
        self,
        log_vn: Any,
        observed: np.ndarray,
        predicted: Any,
        row_weight: np.ndarray,
        tiny: float,
    ) -> tuple[float, float, np.ndarray]:
        """Value plus closed-form gradient (see module docstring)."""
        predicted = np.asarray(predicted, dtype=np.float64)
        value = self.nll(log_vn, observed, predicted, row_weight, tiny)
        vn, q, sobs = _rescale(float(log_vn), observed)

        positive = sobs > 0.0
        log_p = np.log(tiny + predicted)
        psi_obs = np.where(positive, q * digamma(np.where(positive, sobs, 1.0)), 0.0)
        d_vn_rows = -digamma(vn) + psi_obs.sum(axis=1) - np.sum(q * log_p, axis=1)

        included = row_weight > 0.0
        d_log_vn = vn * float(np.sum(np.where(included, d_vn_rows, 0.0)))
        d_predicted = np.where(included[:, np.newaxis], -sobs / (tiny + predicted), 0.0)
        return value, d_log_vn, d_predicted
