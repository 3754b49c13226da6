from __future__ import annotations

"""
Model comparison: AIC, McFadden pseudo-R^2 and pooled K-fold CV log-loss.
"""

import logging
import math
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn import metrics
from sklearn.model_selection import KFold

from .constants import CV_FOLDS, CV_SEED, LOG_LOSS_EPS, NULL_MODEL, OUTCOME
from .data_prep import complete_cases
from .errors import ConvergenceFailure, DataIncompatible
from .models import FittedModel, ModelSpec, fit_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonRecord:
    model: str
    status: str
    aic: float = float("nan")
    pseudo_r2: float = float("nan")
    cv_log_loss: float = float("nan")
    n_params: int = 0
    n_obs: int = 0
    error: str = ""


def aic(model: FittedModel) -> float:
    return 2.0 * model.n_params - 2.0 * model.log_likelihood


def pseudo_r2(model: FittedModel, null: FittedModel) -> float:
    """McFadden: 1 - logLik(model) / logLik(null), both on the same rows."""
    if model.n_obs != null.n_obs:
        raise DataIncompatible(
            f"{model.name} fitted on {model.n_obs} rows but null on {null.n_obs}"
        )
    return 1.0 - model.log_likelihood / null.log_likelihood


def check_fold_count(n_rows: int, k: int):
    if k < 2:
        raise DataIncompatible(f"Cross-validation needs at least 2 folds, got {k}")
    if n_rows < k:
        raise DataIncompatible(
            f"{k}-fold cross-validation needs at least {k} complete-case rows, got {n_rows}"
        )


def pooled_log_loss(y_true, probs, eps: float = LOG_LOSS_EPS) -> float:
    """Mean binary log-loss after clamping probabilities into [eps, 1 - eps]."""
    clipped = np.clip(np.asarray(probs, dtype=float), eps, 1.0 - eps)
    return float(metrics.log_loss(np.asarray(y_true, dtype=int), clipped, labels=[0, 1]))


def _fold_predictions(data: pd.DataFrame, spec: ModelSpec, train_idx, test_idx):
    model = fit_model(data.iloc[train_idx], spec)
    return test_idx, model.predict_proba(data.iloc[test_idx])


def out_of_fold_probabilities(
    frame: pd.DataFrame,
    spec: ModelSpec,
    k: int = CV_FOLDS,
    seed: int = CV_SEED,
    n_jobs: int = 1,
) -> np.ndarray:
    """
    Held-out probability for every complete-case row.

    Folds come from a shuffled KFold seeded by `seed`; each prediction is
    written back at its row position, so the result does not depend on the
    order in which folds finish.
    """
    data = complete_cases(frame)
    check_fold_count(len(data), k)
    splitter = KFold(n_splits=k, shuffle=True, random_state=seed)
    folds = list(splitter.split(np.arange(len(data))))

    if n_jobs == 1:
        results = [_fold_predictions(data, spec, tr, te) for tr, te in folds]
    else:
        results = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(_fold_predictions)(data, spec, tr, te) for tr, te in folds
        )

    oof = np.full(len(data), np.nan)
    for test_idx, probs in results:
        oof[test_idx] = probs
    return oof


def cv_log_loss(
    frame: pd.DataFrame,
    spec: ModelSpec,
    k: int = CV_FOLDS,
    seed: int = CV_SEED,
    eps: float = LOG_LOSS_EPS,
    n_jobs: int = 1,
) -> float:
    """Total out-of-fold log-loss divided by the number of out-of-fold rows."""
    data = complete_cases(frame)
    oof = out_of_fold_probabilities(data, spec, k=k, seed=seed, n_jobs=n_jobs)
    return pooled_log_loss(data[OUTCOME].to_numpy(), oof, eps=eps)


def compare_models(
    frame: pd.DataFrame,
    fitted: dict[str, FittedModel],
    failures: dict[str, str],
    specs: list[ModelSpec],
    k: int = CV_FOLDS,
    seed: int = CV_SEED,
    n_jobs: int = 1,
) -> list[ComparisonRecord]:
    """
    One record per spec, failed ones included and marked as such.

    The fold-count check runs before any cross-validation so a dataset that
    is too small stops the comparison with a single clear error.
    """
    data = complete_cases(frame)
    check_fold_count(len(data), k)
    null = fitted.get(NULL_MODEL)
    if null is None:
        logger.warning("Null model unavailable: pseudo-R^2 will be reported as NaN")

    records = []
    for spec in specs:
        if spec.name not in fitted:
            records.append(
                ComparisonRecord(
                    spec.name,
                    "failed",
                    n_obs=len(data),
                    error=failures.get(spec.name, "not fitted"),
                )
            )
            continue

        model = fitted[spec.name]
        try:
            loss = cv_log_loss(data, spec, k=k, seed=seed, n_jobs=n_jobs)
        except (ConvergenceFailure, DataIncompatible) as exc:
            logger.warning(
                "Cross-validation failed for %s (rows=%d): %s", spec.name, len(data), exc
            )
            records.append(
                ComparisonRecord(
                    spec.name,
                    "failed",
                    n_params=model.n_params,
                    n_obs=model.n_obs,
                    error=f"cross-validation: {exc}",
                )
            )
            continue

        records.append(
            ComparisonRecord(
                spec.name,
                "ok",
                aic=aic(model),
                pseudo_r2=pseudo_r2(model, null) if null is not None else float("nan"),
                cv_log_loss=loss,
                n_params=model.n_params,
                n_obs=model.n_obs,
            )
        )
    return records


def best_model(records: list[ComparisonRecord], key: str) -> str | None:
    """
    Name of the record with the lowest `key` ("aic" or "cv_log_loss").

    Ties go to the model with fewer parameters, then to the earlier record.
    """
    candidates = [
        (getattr(r, key), r.n_params, i, r.model)
        for i, r in enumerate(records)
        if r.status == "ok" and math.isfinite(getattr(r, key))
    ]
    if not candidates:
        return None
    return min(candidates)[3]


def records_frame(records: list[ComparisonRecord]) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in records])
