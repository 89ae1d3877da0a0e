"""JAX backend: traceable likelihood with autodiff gradients.

Architecture
~~~~~~~~~~~~
The module is structured in two layers:

1. **Kernel functions** (module-level, inside ``if _CAN_IMPORT_JAX``):
   a pure-JAX negative log-likelihood and its JIT-compiled
   ``value_and_grad`` with respect to ``log_vn`` and ``predicted``.

2. **JaxBackend class** (``BackendProtocol`` implementation): a thin
   wrapper.  :meth:`JaxBackend.nll` returns a JAX scalar without
   pulling it to host, so callers can embed it in their own
   ``jax.grad`` / ``jax.jit`` objectives.  :meth:`JaxBackend.nll_and_grad`
   converts results to NumPy at the boundary.

Concrete comparison for the skip rule
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Only cells whose rescaled observation is strictly positive receive a
``lnΓ`` term.  The test runs on ``jax.lax.stop_gradient(sobs)``, so the
comparison never carries derivative information, and the skipped cells
feed ``lnΓ`` a safe argument of ``1.0`` before being masked out.  The
second ``where`` keeps ``lnΓ(0) = inf`` and its infinite derivative
out of the backward pass; masking the output alone would leave
``0 · inf = NaN`` in the gradient.

Float64
~~~~~~~
``jax_enable_x64`` is switched on at import so the JAX and NumPy
backends agree to floating-point tolerance.  ``lnΓ`` of a large
effective sample size (hundreds to thousands) loses several digits
in float32.

Graceful degradation
~~~~~~~~~~~~~~~~~~~~
If JAX is not installed, :class:`JaxBackend` can still be instantiated
(for introspection) but ``is_available`` returns ``False`` and
:func:`resolve_backend` raises ``ImportError`` when this backend is
explicitly requested.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np

# ------------------------------------------------------------------ #
# Optional JAX import
# ------------------------------------------------------------------ #

try:
    import jax

    # Enable 64-bit floating point before any array creation.
    jax.config.update("jax_enable_x64", True)

    import jax.numpy as jnp
    from jax import jit, value_and_grad
    from jax.scipy.special import gammaln

    _CAN_IMPORT_JAX = True
except ImportError:
    _CAN_IMPORT_JAX = False


if _CAN_IMPORT_JAX:

    def _dmultinom_kernel(
        log_vn: jnp.ndarray,
        observed: jnp.ndarray,
        predicted: jnp.ndarray,
        row_weight: jnp.ndarray,
        tiny: jnp.ndarray,
    ) -> jnp.ndarray:
        """Effective-sample-size multinomial NLL summed over rows.

        Args:
            log_vn: Scalar log effective sample size.
            observed: Concrete observations ``(n, k)``.
            predicted: Predicted proportions ``(n, k)``.
            row_weight: ``(n,)`` flags; rows with weight 0 are dropped.
            tiny: Offset inside ``log(tiny + predicted)``.

        Returns:
            Scalar negative log-likelihood.
        """
        vn = jnp.exp(log_vn)
        sobs = vn * observed / jnp.sum(observed, axis=1, keepdims=True)

        positive = jax.lax.stop_gradient(sobs) > 0.0
        safe_sobs = jnp.where(positive, sobs, 1.0)
        log_gamma_obs = jnp.where(positive, gammaln(safe_sobs), 0.0)

        rows = (
            -gammaln(vn)
            + jnp.sum(log_gamma_obs, axis=1)
            - jnp.sum(sobs * jnp.log(tiny + predicted), axis=1)
        )
        return jnp.sum(jnp.where(row_weight > 0.0, rows, 0.0))

    _dmultinom_jit: Callable[..., jnp.ndarray] = jit(_dmultinom_kernel)

    _dmultinom_value_and_grad: Callable[..., Any] = jit(
        value_and_grad(_dmultinom_kernel, argnums=(0, 2))
    )


@dataclass(frozen=True)
class JaxBackend:
    """JAX compute backend.

    The frozen dataclass has no mutable state; all per-call data flows
    through method arguments, so instances are thread-safe and safe to
    cache.

    Unlike the NumPy backend, :meth:`nll` hands back a JAX scalar and
    accepts traced ``log_vn`` / ``predicted`` values, which is what
    makes the likelihood usable inside an outer autodiff objective.
    """

    @property
    def name(self) -> str:
        return "jax"

    @property
    def is_available(self) -> bool:  # noqa: PLR6301
        return _CAN_IMPORT_JAX

    @staticmethod
    def _to_device(
        log_vn: Any,
        observed: np.ndarray,
        predicted: Any,
        row_weight: np.ndarray,
        tiny: float,
    ) -> tuple[jnp.ndarray, ...]:
        return (
            jnp.asarray(log_vn, dtype=jnp.float64),
            jnp.asarray(observed, dtype=jnp.float64),
            jnp.asarray(predicted, dtype=jnp.float64),
            jnp.asarray(row_weight, dtype=jnp.float64),
            jnp.asarray(tiny, dtype=jnp.float64),
        )

    def nll(
        self,
        log_vn: Any,
        observed: np.ndarray,
        predicted: Any,
        row_weight: np.ndarray,
        tiny: float,
    ) -> jnp.ndarray:
        """Negative log-likelihood as a (possibly traced) JAX scalar."""
        args = self._to_device(log_vn, observed, predicted, row_weight, tiny)
        return _dmultinom_jit(*args)

    def nll_and_grad(
        self,
        log_vn: Any,
        observed: np.ndarray,
        predicted: Any,
        row_weight: np.ndarray,
        tiny: float,
    ) -> tuple[float, float, np.ndarray]:
        """Value and autodiff gradient, converted to host values."""
        args = self._to_device(log_vn, observed, predicted, row_weight, tiny)
        value, (d_log_vn, d_predicted) = _dmultinom_value_and_grad(*args)
        return float(value), float(d_log_vn), np.asarray(d_predicted)
