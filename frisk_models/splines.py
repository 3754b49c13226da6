from __future__ import annotations

"""
Natural cubic spline basis (cubic between knots, linear beyond the boundary).
"""

import numpy as np

from .errors import DataIncompatible


def natural_spline_knots(x, df: int = 3) -> np.ndarray:
    """
    Knot vector for a natural spline with `df` basis columns (no intercept).

    Boundary knots sit at min/max of `x`; the df - 1 interior knots sit at
    evenly spaced quantiles.
    """
    if df < 1:
        raise DataIncompatible(f"Spline df must be >= 1, got {df}")
    x_arr = np.asarray(x, dtype=float)
    x_arr = x_arr[~np.isnan(x_arr)]
    if x_arr.size == 0:
        raise DataIncompatible("Cannot place spline knots without observed values")
    lo, hi = float(x_arr.min()), float(x_arr.max())
    if hi <= lo:
        raise DataIncompatible("Spline variable is constant; knots are undefined")
    probs = np.arange(1, df) / df
    interior = np.quantile(x_arr, probs) if df > 1 else np.array([])
    return np.concatenate([[lo], interior, [hi]])


def natural_spline_basis(x, knots: np.ndarray) -> np.ndarray:
    """
    Evaluate the truncated-power natural spline basis at `x`.

    Returns len(knots) - 1 columns: a linear term followed by one cubic
    term per interior knot. Values are computed on the [0, 1]-rescaled axis
    to keep the cubes well conditioned.
    """
    knots = np.asarray(knots, dtype=float)
    lo, hi = knots[0], knots[-1]
    u = (np.asarray(x, dtype=float) - lo) / (hi - lo)
    xi = (knots - lo) / (hi - lo)
    n_knots = len(xi)

    def d(k):
        num = np.clip(u - xi[k], 0, None) ** 3 - np.clip(u - xi[-1], 0, None) ** 3
        return num / (xi[-1] - xi[k])

    columns = [u]
    last = d(n_knots - 2)
    for k in range(n_knots - 2):
        columns.append(d(k) - last)
    return np.column_stack(columns)
