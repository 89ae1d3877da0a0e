"""multinomial_ess — Multinomial likelihood with estimated effective sample size.

Scores compositional data (proportions across age, length or other
bins) against model predictions with a multinomial negative
log-likelihood whose sample size ``vn = exp(log_vn)`` is itself a
fitted parameter, and reports standardized (Pearson) residuals of the
fit.  The likelihood runs on a JAX backend (traceable, autodiff
gradients) or a NumPy/SciPy backend (closed-form gradients).

Public API:
    .. autosummary::
        dmultinom
        dmultinom_value_and_grad
        effective_sample_size
        pearson_residuals
        residual_diagnostics
        print_residual_table
        get_backend
        set_backend
        get_zero_row_policy
        set_zero_row_policy
        TINY
        ShapeMismatchError
        ZeroRowSumError
        LikelihoodGradient
        ResidualDiagnostics
"""

from ._config import (
    TINY,
    get_backend,
    get_zero_row_policy,
    set_backend,
    set_zero_row_policy,
)
from ._results import LikelihoodGradient, ResidualDiagnostics
from ._validation import ShapeMismatchError, ZeroRowSumError
from .diagnostics import residual_diagnostics
from .display import print_residual_table
from .likelihood import dmultinom, dmultinom_value_and_grad, effective_sample_size
from .residuals import pearson_residuals

__all__ = [
    "TINY",
    "LikelihoodGradient",
    "ResidualDiagnostics",
    "ShapeMismatchError",
    "ZeroRowSumError",
    "dmultinom",
    "dmultinom_value_and_grad",
    "effective_sample_size",
    "get_backend",
    "get_zero_row_policy",
    "pearson_residuals",
    "print_residual_table",
    "residual_diagnostics",
    "set_backend",
    "set_zero_row_policy",
]

__version__ = "0.1.0"
