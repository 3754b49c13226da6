import pandas as pd
import pytest

from frisk_models.constants import AGE, CATEGORICAL_COLUMNS, LEVELS, OUTCOME, RACE
from frisk_models.data_prep import (
    clean_dataset,
    complete_cases,
    describe_dataset,
    generate_synthetic,
    harmonize_types,
    load_dataset,
    modal_levels,
    write_dataset,
)
from frisk_models.errors import DataIncompatible, MissingInput


def test_generate_synthetic_shape_and_missing_ages():
    raw = generate_synthetic(2000, seed=42)
    assert len(raw) == 2000
    assert raw[AGE].isna().sum() == 60
    ages = raw[AGE].dropna()
    assert ages.min() >= 14 and ages.max() <= 70


def test_generate_synthetic_is_reproducible():
    pd.testing.assert_frame_equal(generate_synthetic(300, seed=7), generate_synthetic(300, seed=7))


def test_clean_dataset_drops_missing_ages():
    clean = clean_dataset(generate_synthetic(2000, seed=42))
    assert len(clean) == 1940
    assert clean[AGE].notna().all()


def test_categories_use_full_declared_levels(small_frame):
    only_white = small_frame.assign(**{RACE: "white"})
    typed = harmonize_types(only_white)
    for col in CATEGORICAL_COLUMNS:
        assert list(typed[col].cat.categories) == LEVELS[col]


def test_unknown_category_is_rejected(small_frame):
    bad = small_frame.copy()
    bad.loc[0, RACE] = "martian"
    with pytest.raises(DataIncompatible, match="martian"):
        harmonize_types(bad)


def test_missing_column_is_rejected(small_frame):
    with pytest.raises(DataIncompatible, match=RACE):
        harmonize_types(small_frame.drop(columns=[RACE]))


def test_non_binary_outcome_is_rejected(small_frame):
    bad = small_frame.copy()
    bad.loc[0, OUTCOME] = 2
    with pytest.raises(DataIncompatible):
        harmonize_types(bad)


def test_fractional_age_is_rejected(small_frame):
    bad = small_frame.copy()
    bad[AGE] = bad[AGE].astype(float)
    bad.loc[0, AGE] = 20.5
    with pytest.raises(DataIncompatible):
        harmonize_types(bad)


def test_load_missing_file(tmp_path):
    with pytest.raises(MissingInput):
        load_dataset(tmp_path / "nope.csv")


def test_load_rejects_martian(tmp_path, small_frame):
    bad = small_frame.copy()
    bad.loc[3, RACE] = "martian"
    path = tmp_path / "bad.csv"
    bad.to_csv(path, index=False)
    with pytest.raises(DataIncompatible):
        load_dataset(path)


def test_write_and_load_round_trip(tmp_path, small_frame):
    typed = harmonize_types(small_frame)
    path = tmp_path / "nested" / "dir" / "clean.csv"
    write_dataset(typed, path)
    write_dataset(typed, path)
    loaded = load_dataset(path)
    assert len(loaded) == len(typed)
    assert loaded[AGE].isna().sum() == 1
    assert list(loaded[RACE]) == list(typed[RACE])


def test_complete_cases_returns_new_frame(small_frame):
    typed = harmonize_types(small_frame)
    before = typed.copy()
    subset = complete_cases(typed)
    assert len(subset) == 7
    assert list(subset.index) == list(range(7))
    pd.testing.assert_frame_equal(typed, before)


def test_modal_levels_ties_go_to_first_declared_level(small_frame):
    typed = harmonize_types(small_frame)
    modes = modal_levels(typed)
    assert modes[RACE] == "black"
    tied = harmonize_types(small_frame.iloc[:2])
    assert modal_levels(tied)[RACE] == "white"


def test_describe_dataset(small_frame):
    meta = describe_dataset(harmonize_types(small_frame))
    assert meta["num_rows"] == 8
    assert meta["age_range"] == (19, 52)
    assert meta["missing_predictors"] == 1
