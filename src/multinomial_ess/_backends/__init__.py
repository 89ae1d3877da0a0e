"""Backend abstraction layer for likelihood evaluation.

Each backend implements the :class:`BackendProtocol` interface, which
defines the contract for evaluating the effective-sample-size
multinomial negative log-likelihood and its gradient.  The public
functions in :mod:`..likelihood` dispatch to the active backend via
:func:`resolve_backend` rather than branching on the backend name at
every call site.

Resolution follows the policy set by :mod:`.._config`:

1. Programmatic override via :func:`~multinomial_ess.set_backend`.
2. ``MULTINOMIAL_ESS_BACKEND`` environment variable.
3. Auto-detection: ``"jax"`` if importable, else ``"numpy"``.

When ``"jax"`` is explicitly requested but JAX is not installed, an
:class:`ImportError` is raised; explicit requests are never silently
degraded.  Only the ``"auto"`` policy falls back from JAX to NumPy.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import numpy as np

from .._config import get_backend

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------ #
# BackendProtocol
# ------------------------------------------------------------------ #


@runtime_checkable
class BackendProtocol(Protocol):
    """Interface that every compute backend must implement.

    All methods receive already-validated inputs: ``observed`` is a
    concrete ``(n, k)`` float64 array, ``predicted`` has the same
    shape, and ``row_weight`` is an ``(n,)`` array of ``0.0`` / ``1.0``
    flags marking which rows contribute to the total.

    Attributes:
        name: Short identifier (e.g. ``"numpy"``, ``"jax"``).
    """

    @property
    def name(self) -> str: ...

    @property
    def is_available(self) -> bool:
        """Whether the backend's dependencies are importable."""
        ...

    def nll(
        self,
        log_vn: Any,
        observed: np.ndarray,
        predicted: Any,
        row_weight: np.ndarray,
        tiny: float,
    ) -> Any:
        """Negative log-likelihood summed over rows.

        Returns:
            A scalar in the backend's native type (Python ``float``
            for NumPy, a JAX scalar for JAX so it can be traced).
        """
        ...

    def nll_and_grad(
        self,
        log_vn: Any,
        observed: np.ndarray,
        predicted: Any,
        row_weight: np.ndarray,
        tiny: float,
    ) -> tuple[float, float, np.ndarray]:
        """Value and gradient with respect to ``log_vn`` and ``predicted``.

        Returns:
            ``(value, d_log_vn, d_predicted)`` as host values;
            ``d_predicted`` has the shape of ``observed``.
        """
        ...


# ------------------------------------------------------------------ #
# Backend resolution
# ------------------------------------------------------------------ #

# Singleton cache — instantiated once per backend name.
_BACKEND_CACHE: dict[str, BackendProtocol] = {}


def resolve_backend(name: str | None = None) -> BackendProtocol:
    """Return a :class:`BackendProtocol` instance for *name*.

    When *name* is ``None`` (the default), the policy from
    :func:`~multinomial_ess._config.get_backend` is used.

    Args:
        name: ``"numpy"``, ``"jax"``, or ``None`` for policy default.

    Returns:
        A backend instance ready for evaluation.

    Raises:
        ImportError: If ``"jax"`` is explicitly requested but JAX
            is not installed.
        ValueError: If *name* is not a recognised backend.
    """
    if name is None:
        name = get_backend()
    else:
        name = name.strip().lower()

    if name in _BACKEND_CACHE:
        return _BACKEND_CACHE[name]

    if name == "numpy":
        from ._numpy import NumpyBackend

        backend: BackendProtocol = NumpyBackend()

    elif name == "jax":
        from ._jax import JaxBackend

        jax_backend = JaxBackend()
        if not jax_backend.is_available:
            msg = (
                "Backend 'jax' was explicitly requested but JAX is "
                "not installed.  Install JAX (`pip install jax`) or "
                "use set_backend('numpy')."
            )
            raise ImportError(msg)
        backend = jax_backend

    else:
        msg = f"Unknown backend {name!r}.  Choose 'numpy' or 'jax'."
        raise ValueError(msg)

    logger.debug("Resolved likelihood backend %r", name)
    _BACKEND_CACHE[name] = backend
    return backend
