from __future__ import annotations

"""
CLI entrypoint for the force-use regressions. Pick the stage via --stage:
clean (synthetic dataset), models (fit, compare, plot) or all.
"""

import argparse
import logging
import sys
from pathlib import Path

from frisk_models.constants import (
    CONFIDENCE,
    CV_FOLDS,
    CV_SEED,
    DATA_SEED,
    DEFAULT_CSV_PATH,
    DEFAULT_OUTPUT_DIR,
)
from frisk_models.errors import FriskModelError
from frisk_models.pipeline import PipelineConfig, describe, format_report, run_clean, run_models

logger = logging.getLogger("frisk_models")


def describe_dataset(meta: dict):
    """Print a short summary of dataset size, outcome rate and age range."""
    print(f"Rows in cleaned dataset: {meta['num_rows']}")
    print(f"Positive rate (any force): {meta['positive_rate']:.3f}")
    print(f"Age range: {meta['age_range'][0]} -> {meta['age_range'][1]}")
    if meta["missing_predictors"]:
        print(f"Rows missing a predictor: {meta['missing_predictors']}")


def build_arg_parser():
    """CLI parser with knobs for the dataset, cross-validation and plots."""
    parser = argparse.ArgumentParser(
        description="Compare logistic regression variants for any use of force."
    )
    parser.add_argument(
        "--stage",
        choices=["clean", "models", "all"],
        default="all",
        help="clean: write the synthetic dataset; models: fit, compare and plot.",
    )
    parser.add_argument("--csv-path", type=Path, default=Path(DEFAULT_CSV_PATH))
    parser.add_argument("--output-dir", type=Path, default=Path(DEFAULT_OUTPUT_DIR))
    parser.add_argument("--n-rows", type=int, default=2000, help="Synthetic dataset size.")
    parser.add_argument(
        "--data-seed", type=int, default=DATA_SEED, help="Seed for synthetic generation."
    )
    parser.add_argument(
        "--cv-seed", type=int, default=CV_SEED, help="Seed for CV fold assignment."
    )
    parser.add_argument("--folds", type=int, default=CV_FOLDS, help="Number of CV folds K.")
    parser.add_argument(
        "--confidence", type=float, default=CONFIDENCE, help="Coefficient interval level."
    )
    parser.add_argument(
        "--n-jobs", type=int, default=1, help="Parallel workers for CV folds."
    )
    parser.add_argument("--dpi", type=int, default=150, help="Resolution of saved figures.")
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        csv_path=args.csv_path,
        output_dir=args.output_dir,
        n_rows=args.n_rows,
        data_seed=args.data_seed,
        cv_seed=args.cv_seed,
        folds=args.folds,
        confidence=args.confidence,
        n_jobs=args.n_jobs,
        dpi=args.dpi,
    )


def main(args: argparse.Namespace | None = None) -> int:
    """Run the selected stage(s); returns the process exit status."""
    logging.basicConfig(level=logging.INFO, format="%(name)s - %(levelname)s - %(message)s")
    args = args or build_arg_parser().parse_args()
    config = config_from_args(args)

    try:
        if args.stage in ("clean", "all"):
            path = run_clean(config)
            print(f"Wrote: {path} (synthetic, safe for public repos)")
        if args.stage in ("models", "all"):
            describe_dataset(describe(config))
            result = run_models(config)
            print()
            print(format_report(result, folds=config.folds))
    except FriskModelError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
