"""Shared type aliases for the multinomial_ess package."""

from typing import Any

import numpy as np
import pandas as pd

# Concrete matrix inputs accepted by the public API.
MatrixLike = np.ndarray | pd.DataFrame | pd.Series | list[Any]

# Scalars accepted for ``log_vn``: floats, NumPy scalars, JAX scalars or tracers.
ScalarLike = Any
