from __future__ import annotations

"""
Presentation tables derived from fitted models: a coefficient table with
Wald intervals and the partial effect of age with other covariates held at
their modal levels.
"""

import numpy as np
import pandas as pd
from scipy import stats

from .constants import AGE, CATEGORICAL_COLUMNS, CONFIDENCE, INTERCEPT
from .data_prep import modal_levels
from .errors import DataIncompatible
from .models import FittedModel

LINEAR_AGE_LABEL = "Linear age (m1)"
SPLINE_AGE_LABEL = "Spline age (m3, df=3)"


def critical_value(confidence: float = CONFIDENCE) -> float:
    """Two-sided standard-normal quantile, 1.96 for 95%."""
    if not 0.0 < confidence < 1.0:
        raise DataIncompatible(f"Confidence level must lie in (0, 1), got {confidence}")
    return float(stats.norm.ppf(1.0 - (1.0 - confidence) / 2.0))


def coefficient_table(model: FittedModel, confidence: float = CONFIDENCE) -> pd.DataFrame:
    """
    Non-intercept estimates with estimate +/- z * SE intervals, ascending by
    estimate. Aliased terms (no estimate) are left out.
    """
    z = critical_value(confidence)
    table = pd.DataFrame(
        {
            "term": model.coefficients.index,
            "estimate": model.coefficients.to_numpy(),
            "std_error": model.std_errors.to_numpy(),
        }
    )
    table = table[(table["term"] != INTERCEPT) & table["estimate"].notna()].copy()
    table["conf_low"] = table["estimate"] - z * table["std_error"]
    table["conf_high"] = table["estimate"] + z * table["std_error"]
    return table.sort_values("estimate", kind="mergesort").reset_index(drop=True)


def age_grid(frame: pd.DataFrame) -> pd.DataFrame:
    """
    One row per whole year across the observed age range, with every other
    predictor fixed at its dataset-wide modal level.
    """
    ages = pd.to_numeric(frame[AGE]).dropna()
    if ages.empty:
        raise DataIncompatible("No observed ages to build a prediction grid")
    grid = pd.DataFrame(
        {AGE: np.arange(int(np.floor(ages.min())), int(np.ceil(ages.max())) + 1)}
    )
    for col, level in modal_levels(frame).items():
        grid[col] = level
    return grid[[AGE] + CATEGORICAL_COLUMNS]


def age_effects(
    linear: FittedModel, spline: FittedModel, frame: pd.DataFrame
) -> pd.DataFrame:
    """Long table of (age, probability, model) for the linear and spline fits."""
    grid = age_grid(frame)
    pieces = []
    for model, label in ((linear, LINEAR_AGE_LABEL), (spline, SPLINE_AGE_LABEL)):
        pieces.append(
            pd.DataFrame(
                {
                    "age": grid[AGE].to_numpy(),
                    "probability": model.predict_proba(grid),
                    "model": label,
                }
            )
        )
    return pd.concat(pieces, ignore_index=True)
