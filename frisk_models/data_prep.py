from __future__ import annotations

"""
Data preparation for the force-use regressions: synthetic generation,
type harmonisation against closed level sets, and CSV round trips.
"""

from pathlib import Path

import numpy as np
import pandas as pd

from .constants import (
    AGE,
    AREA,
    CATEGORICAL_COLUMNS,
    DATA_SEED,
    GENDER,
    LEVELS,
    OUTCOME,
    PREDICTORS,
    RACE,
    REQUIRED_COLUMNS,
    VIOLENT,
)
from .errors import DataIncompatible, MissingInput


def generate_synthetic(n: int = 2000, seed: int = DATA_SEED) -> pd.DataFrame:
    """
    Build a random encounter table with no real signal.

    Roughly 22% of rows have force used; 3% of ages are blanked out to
    resemble real-world gaps.
    """
    rng = np.random.default_rng(seed)
    frame = pd.DataFrame(
        {
            OUTCOME: rng.binomial(1, 0.22, size=n),
            RACE: rng.choice(LEVELS[RACE], size=n, p=[0.25, 0.35, 0.30, 0.05, 0.05]),
            AGE: np.clip(np.round(rng.normal(31, 10, size=n)), 14, 70),
            GENDER: rng.choice(LEVELS[GENDER], size=n, p=[0.82, 0.18]),
            AREA: rng.choice(LEVELS[AREA], size=n, p=[0.45, 0.55]),
            VIOLENT: rng.choice(LEVELS[VIOLENT], size=n, p=[0.60, 0.40]),
        }
    )
    missing = rng.choice(n, size=int(np.floor(0.03 * n)), replace=False)
    frame[AGE] = frame[AGE].astype("Int64")
    frame.loc[missing, AGE] = pd.NA
    return frame


def _check_columns(frame: pd.DataFrame):
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise DataIncompatible(f"Dataset lacks required columns: {missing}")


def harmonize_types(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce every column onto its declared type.

    Categoricals always carry the full declared level list; values outside it
    are rejected rather than coded as the baseline.
    """
    _check_columns(frame)
    out = frame[REQUIRED_COLUMNS].copy()

    for col in CATEGORICAL_COLUMNS:
        values = out[col].astype("string").str.strip()
        unknown = sorted(set(values.dropna()) - set(LEVELS[col]))
        if unknown:
            raise DataIncompatible(
                f"Column {col!r} has values outside {LEVELS[col]}: {unknown}"
            )
        out[col] = pd.Categorical(values, categories=LEVELS[col])

    ages = pd.to_numeric(out[AGE], errors="coerce")
    bad_age = out[AGE].notna() & ages.isna()
    if bad_age.any():
        raise DataIncompatible(
            f"Column {AGE!r} has non-numeric values: {out.loc[bad_age, AGE].unique().tolist()}"
        )
    if (ages.dropna() % 1 != 0).any():
        raise DataIncompatible(f"Column {AGE!r} must hold whole years")
    out[AGE] = ages.astype("Int64")

    outcome = pd.to_numeric(out[OUTCOME], errors="coerce")
    if outcome.isna().any() or not outcome.isin([0, 1]).all():
        raise DataIncompatible(f"Column {OUTCOME!r} must be 0/1 with no gaps")
    out[OUTCOME] = outcome.astype(int)
    return out


def clean_dataset(frame: pd.DataFrame) -> pd.DataFrame:
    """Harmonise types and drop rows without an age."""
    typed = harmonize_types(frame)
    return typed.dropna(subset=[AGE]).reset_index(drop=True)


def write_dataset(frame: pd.DataFrame, csv_path: Path) -> Path:
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(csv_path, index=False)
    return csv_path


def load_dataset(csv_path: Path) -> pd.DataFrame:
    """Read a cleaned CSV and validate it against the fixed schema."""
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise MissingInput(f"Dataset not found: {csv_path}")
    df = pd.read_csv(csv_path, dtype={c: "string" for c in CATEGORICAL_COLUMNS})
    return harmonize_types(df)


def complete_cases(frame: pd.DataFrame) -> pd.DataFrame:
    """Rows with every predictor and the outcome present, as a new frame."""
    _check_columns(frame)
    return frame.dropna(subset=REQUIRED_COLUMNS).reset_index(drop=True)


def modal_levels(frame: pd.DataFrame) -> dict[str, str]:
    """
    Most frequent level of each categorical predictor.

    Counting runs over the declared level order, so ties resolve to the
    earlier declared level.
    """
    modes = {}
    for col in CATEGORICAL_COLUMNS:
        counts = frame[col].value_counts(sort=False).reindex(LEVELS[col], fill_value=0)
        modes[col] = str(counts.idxmax())
    return modes


def describe_dataset(frame: pd.DataFrame) -> dict:
    """Row count, outcome rate and observed age range."""
    ages = frame[AGE].dropna()
    return {
        "num_rows": len(frame),
        "positive_rate": float(frame[OUTCOME].mean()) if len(frame) else float("nan"),
        "age_range": (int(ages.min()), int(ages.max())) if len(ages) else (None, None),
        "missing_predictors": int(frame[PREDICTORS].isna().any(axis=1).sum()),
    }
