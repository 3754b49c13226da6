import numpy as np
import pandas as pd
import pytest

from frisk_models.constants import AGE, AREA, GENDER, LEVELS, OUTCOME, RACE, VIOLENT
from frisk_models.data_prep import clean_dataset, generate_synthetic, harmonize_types
from frisk_models.logreg import sigmoid


def simulate(n, seed, logit_fn):
    """Encounter table whose outcome follows logit_fn(frame)."""
    rng = np.random.default_rng(seed)
    frame = pd.DataFrame(
        {
            RACE: rng.choice(LEVELS[RACE], size=n, p=[0.25, 0.35, 0.30, 0.05, 0.05]),
            AGE: np.clip(np.round(rng.normal(31, 10, size=n)), 14, 70).astype(int),
            GENDER: rng.choice(LEVELS[GENDER], size=n, p=[0.82, 0.18]),
            AREA: rng.choice(LEVELS[AREA], size=n, p=[0.45, 0.55]),
            VIOLENT: rng.choice(LEVELS[VIOLENT], size=n, p=[0.60, 0.40]),
        }
    )
    frame[OUTCOME] = rng.binomial(1, sigmoid(logit_fn(frame)))
    return harmonize_types(frame)


@pytest.fixture(scope="session")
def clean_frame():
    return clean_dataset(generate_synthetic(2000, seed=42))


@pytest.fixture
def small_frame():
    return pd.DataFrame(
        {
            OUTCOME: [0, 1, 0, 1, 0, 0, 1, 0],
            RACE: ["white", "black", "black", "hispanic", "white", "asian", "other", "black"],
            AGE: [20, 35, 41, 19, None, 52, 28, 33],
            GENDER: ["male", "female", "male", "male", "male", "female", "male", "male"],
            AREA: ["Y", "N", "Y", "Y", "N", "N", "Y", "N"],
            VIOLENT: ["N", "N", "Y", "N", "Y", "N", "N", "Y"],
        }
    )
