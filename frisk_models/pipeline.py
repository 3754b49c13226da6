from __future__ import annotations

"""
Stage orchestration: build the clean dataset, then fit, compare and plot.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

from .constants import (
    CONFIDENCE,
    CV_FOLDS,
    CV_SEED,
    DATA_SEED,
    DEFAULT_CSV_PATH,
    DEFAULT_OUTPUT_DIR,
    INTERACTION_MODEL,
    MAIN_MODEL,
    SPLINE_MODEL,
)
from .data_prep import (
    clean_dataset,
    complete_cases,
    describe_dataset,
    generate_synthetic,
    load_dataset,
    modal_levels,
    write_dataset,
)
from .effects import age_effects, coefficient_table, critical_value
from .metrics import ComparisonRecord, best_model, check_fold_count, compare_models
from .models import MODEL_SPECS, NULL_SPEC, fit_models
from .plots import plot_age_effects, plot_coefficients

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    csv_path: Path = Path(DEFAULT_CSV_PATH)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    n_rows: int = 2000
    data_seed: int = DATA_SEED
    cv_seed: int = CV_SEED
    folds: int = CV_FOLDS
    confidence: float = CONFIDENCE
    n_jobs: int = 1
    dpi: int = 150


@dataclass
class ModelsResult:
    records: list[ComparisonRecord]
    fitted: dict = field(default_factory=dict)
    failures: dict = field(default_factory=dict)
    coefficients: object = None
    age_effects: object = None
    figures: list[Path] = field(default_factory=list)
    best_by_aic: str | None = None
    best_by_log_loss: str | None = None
    n_rows: int = 0


def run_clean(config: PipelineConfig) -> Path:
    """Generate the synthetic table, clean it and write it to `config.csv_path`."""
    raw = generate_synthetic(config.n_rows, seed=config.data_seed)
    clean = clean_dataset(raw)
    path = write_dataset(clean, config.csv_path)
    logger.info("Wrote %s (%d rows, synthetic)", path, len(clean))
    return path


def run_models(config: PipelineConfig) -> ModelsResult:
    """
    Fit, compare and plot. Missing input and configuration errors stop the run
    before any fitting; a model that fails is reported and skipped.
    """
    critical_value(config.confidence)
    dataset = load_dataset(config.csv_path)
    data = complete_cases(dataset)
    dropped = len(dataset) - len(data)
    if dropped:
        logger.info("Dropped %d rows with missing predictors", dropped)
    check_fold_count(len(data), config.folds)

    fitted, failures = fit_models(data, MODEL_SPECS + [NULL_SPEC])
    records = compare_models(
        data, fitted, failures, MODEL_SPECS, k=config.folds, seed=config.cv_seed, n_jobs=config.n_jobs
    )
    result = ModelsResult(
        records=records,
        fitted=fitted,
        failures=failures,
        best_by_aic=best_model(records, "aic"),
        best_by_log_loss=best_model(records, "cv_log_loss"),
        n_rows=len(data),
    )

    if INTERACTION_MODEL in fitted:
        result.coefficients = coefficient_table(fitted[INTERACTION_MODEL], config.confidence)
        result.figures.append(
            plot_coefficients(result.coefficients, config.output_dir, config.confidence, config.dpi)
        )
    else:
        logger.warning("Coefficient plot skipped: %s was not fitted", INTERACTION_MODEL)

    if MAIN_MODEL in fitted and SPLINE_MODEL in fitted:
        result.age_effects = age_effects(fitted[MAIN_MODEL], fitted[SPLINE_MODEL], data)
        result.figures.append(
            plot_age_effects(result.age_effects, modal_levels(data), config.output_dir, config.dpi)
        )
    else:
        logger.warning("Age effect plot skipped: needs both %s and %s", MAIN_MODEL, SPLINE_MODEL)
    return result


def _fmt(value: float, digits: int = 4) -> str:
    return f"{value:.{digits}f}" if math.isfinite(value) else "nan"


def format_report(result: ModelsResult, folds: int = CV_FOLDS) -> str:
    lines = [f"Rows used for fitting: {result.n_rows}", "", "AIC & McFadden pseudo-R^2"]
    lines.append(f"{'model':<16}{'AIC':>12}{'pseudoR2':>12}")
    for r in result.records:
        if r.status == "ok":
            lines.append(f"{r.model:<16}{_fmt(r.aic, 2):>12}{_fmt(r.pseudo_r2):>12}")
        else:
            lines.append(f"{r.model:<16}  FAILED: {r.error}")

    lines += ["", f"{folds}-fold CV log-loss (lower is better)"]
    lines.append(f"{'model':<16}{'logloss':>12}")
    for r in result.records:
        if r.status == "ok":
            lines.append(f"{r.model:<16}{_fmt(r.cv_log_loss):>12}")
        else:
            lines.append(f"{r.model:<16}  FAILED: {r.error}")

    if result.figures:
        lines += ["", "Saved figures:"] + [f"  - {p}" for p in result.figures]
    lines += [
        "",
        f"Best by AIC: {result.best_by_aic or 'none'}",
        f"Best by {folds}-fold CV log-loss: {result.best_by_log_loss or 'none'}",
    ]
    return "\n".join(lines)


def describe(config: PipelineConfig) -> dict:
    """Summary of the cleaned dataset on disk."""
    meta = describe_dataset(load_dataset(config.csv_path))
    logger.debug("Dataset %s: %s", config.csv_path, meta)
    return meta

