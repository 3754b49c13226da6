from __future__ import annotations

"""
Model specifications, design-matrix construction and fitting for the three
logistic regression variants plus the intercept-only null.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .constants import (
    AGE,
    AREA,
    GENDER,
    INTERACTION_MODEL,
    INTERCEPT,
    LEVELS,
    MAIN_MODEL,
    NULL_MODEL,
    OUTCOME,
    RACE,
    SPLINE_MODEL,
    TERM_PREFIX,
    VIOLENT,
)
from .data_prep import complete_cases
from .errors import ConvergenceFailure, DataIncompatible
from .logreg import LogisticRegressionIRLS, sigmoid
from .splines import natural_spline_basis, natural_spline_knots

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelSpec:
    """Which terms enter the linear predictor."""

    name: str
    interaction: bool = False
    spline_df: int | None = None
    intercept_only: bool = False


MAIN_SPEC = ModelSpec(MAIN_MODEL)
INTERACTION_SPEC = ModelSpec(INTERACTION_MODEL, interaction=True)
SPLINE_SPEC = ModelSpec(SPLINE_MODEL, spline_df=3)
NULL_SPEC = ModelSpec(NULL_MODEL, intercept_only=True)

MODEL_SPECS = [MAIN_SPEC, INTERACTION_SPEC, SPLINE_SPEC]


def _indicators(series: pd.Series, col: str) -> pd.DataFrame:
    """Reference-coded dummies for every non-baseline declared level."""
    levels = LEVELS[col]
    values = series.astype("string")
    unknown = sorted(set(values.dropna()) - set(levels))
    if unknown:
        raise DataIncompatible(f"Column {col!r} has values outside {levels}: {unknown}")
    prefix = TERM_PREFIX[col]
    return pd.DataFrame(
        {f"{prefix}={lvl}": (values == lvl).fillna(False).astype(float) for lvl in levels[1:]},
        index=series.index,
    )


def _age_terms(frame: pd.DataFrame, spec: ModelSpec, knots) -> tuple[pd.DataFrame, np.ndarray | None]:
    age = pd.to_numeric(frame[AGE]).to_numpy(dtype=float, na_value=np.nan)
    if spec.spline_df is None:
        return pd.DataFrame({"age": age}, index=frame.index), None
    if knots is None:
        knots = natural_spline_knots(age, df=spec.spline_df)
    basis = natural_spline_basis(age, knots)
    cols = [f"ns(age)[{i + 1}]" for i in range(basis.shape[1])]
    return pd.DataFrame(basis, columns=cols, index=frame.index), knots


def build_design(
    frame: pd.DataFrame, spec: ModelSpec, knots: np.ndarray | None = None
) -> tuple[pd.DataFrame, np.ndarray | None]:
    """
    Design matrix (without the intercept column) for `spec`.

    Spline knots are placed on `frame` unless `knots` is supplied, which is
    how predictions re-use the knots chosen at fit time.
    """
    missing = [c for c in (RACE, AGE, GENDER, AREA, VIOLENT) if c not in frame.columns]
    if missing:
        raise DataIncompatible(f"{spec.name}: dataset lacks required columns: {missing}")
    if spec.intercept_only:
        return pd.DataFrame(index=frame.index), None

    race = _indicators(frame[RACE], RACE)
    area = _indicators(frame[AREA], AREA)
    age, knots = _age_terms(frame, spec, knots)
    gender = _indicators(frame[GENDER], GENDER)
    violent = _indicators(frame[VIOLENT], VIOLENT)

    if spec.interaction:
        blocks = [race, area, age, gender, violent]
        products = {
            f"{r}:{a}": race[r] * area[a] for r in race.columns for a in area.columns
        }
        blocks.append(pd.DataFrame(products, index=frame.index))
    else:
        blocks = [race, age, gender, area, violent]
    return pd.concat(blocks, axis=1), knots


@dataclass(frozen=True, eq=False)
class FittedModel:
    """Immutable result of one maximum-likelihood fit."""

    spec: ModelSpec
    coefficients: pd.Series
    std_errors: pd.Series
    log_likelihood: float
    n_obs: int
    n_params: int
    n_iter: int
    knots: tuple | None = None

    @property
    def name(self) -> str:
        return self.spec.name

    def predict_proba(self, frame: pd.DataFrame) -> np.ndarray:
        """P(outcome = 1) for each row of `frame`, using the training knots."""
        knots = np.asarray(self.knots) if self.knots is not None else None
        X, _ = build_design(frame, self.spec, knots=knots)
        coef = self.coefficients.fillna(0.0)
        eta = coef[INTERCEPT] + X.to_numpy(dtype=float) @ coef.drop(INTERCEPT).to_numpy()
        return sigmoid(eta)


def fit_model(frame: pd.DataFrame, spec: ModelSpec) -> FittedModel:
    """Fit `spec` on the complete-case rows of `frame`."""
    data = complete_cases(frame)
    X, knots = build_design(data, spec)
    y = data[OUTCOME].to_numpy(dtype=float)

    model = LogisticRegressionIRLS(label=spec.name)
    model.fit(X.to_numpy(dtype=float), y)

    names = [INTERCEPT] + list(X.columns)
    return FittedModel(
        spec=spec,
        coefficients=pd.Series(model.weights_, index=names),
        std_errors=pd.Series(model.bse_, index=names),
        log_likelihood=model.loglik_,
        n_obs=len(y),
        n_params=model.n_params_,
        n_iter=model.n_iter_,
        knots=tuple(float(k) for k in knots) if knots is not None else None,
    )


def fit_models(
    frame: pd.DataFrame, specs: list[ModelSpec]
) -> tuple[dict[str, FittedModel], dict[str, str]]:
    """
    Fit every spec on one shared complete-case subset.

    A spec that fails to converge or cannot be encoded is logged and
    returned in the failure map; its siblings are still fitted.
    """
    data = complete_cases(frame)
    fitted: dict[str, FittedModel] = {}
    failures: dict[str, str] = {}
    for spec in specs:
        try:
            fitted[spec.name] = fit_model(data, spec)
        except (ConvergenceFailure, DataIncompatible) as exc:
            logger.warning("Skipping %s (rows=%d): %s", spec.name, len(data), exc)
            failures[spec.name] = str(exc)
    return fitted, failures
