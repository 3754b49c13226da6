"""
Logistic regression analysis of force use in stop-and-frisk encounters.

This package contains dataset preparation, an IRLS logistic regression, the
three model specifications, comparison metrics and plotting used by main.py.
"""

from .constants import INTERACTION_MODEL, MAIN_MODEL, NULL_MODEL, SPLINE_MODEL
from .data_prep import (
    clean_dataset,
    complete_cases,
    generate_synthetic,
    load_dataset,
    modal_levels,
    write_dataset,
)
from .effects import age_effects, age_grid, coefficient_table
from .errors import ConvergenceFailure, DataIncompatible, FriskModelError, MissingInput
from .logreg import LogisticRegressionIRLS
from .metrics import aic, best_model, compare_models, cv_log_loss, pseudo_r2
from .models import MODEL_SPECS, NULL_SPEC, FittedModel, ModelSpec, fit_model, fit_models

__all__ = [
    "INTERACTION_MODEL",
    "MAIN_MODEL",
    "NULL_MODEL",
    "SPLINE_MODEL",
    "clean_dataset",
    "complete_cases",
    "generate_synthetic",
    "load_dataset",
    "modal_levels",
    "write_dataset",
    "age_effects",
    "age_grid",
    "coefficient_table",
    "ConvergenceFailure",
    "DataIncompatible",
    "FriskModelError",
    "MissingInput",
    "LogisticRegressionIRLS",
    "aic",
    "best_model",
    "compare_models",
    "cv_log_loss",
    "pseudo_r2",
    "MODEL_SPECS",
    "NULL_SPEC",
    "FittedModel",
    "ModelSpec",
    "fit_model",
    "fit_models",
]
