import numpy as np
import pandas as pd
import pytest

from frisk_models.constants import AGE, INTERCEPT, OUTCOME, RACE
from frisk_models.data_prep import harmonize_types
from frisk_models.errors import DataIncompatible
from frisk_models.models import (
    INTERACTION_SPEC,
    MAIN_SPEC,
    MODEL_SPECS,
    NULL_SPEC,
    SPLINE_SPEC,
    build_design,
    fit_model,
    fit_models,
)

MAIN_COLUMNS = [
    "race=black",
    "race=hispanic",
    "race=asian",
    "race=other",
    "age",
    "gender=female",
    "area=Y",
    "violent=Y",
]


def test_main_design_columns(small_frame):
    X, knots = build_design(harmonize_types(small_frame), MAIN_SPEC)
    assert list(X.columns) == MAIN_COLUMNS
    assert knots is None


def test_interaction_design_has_every_race_area_product(small_frame):
    X, _ = build_design(harmonize_types(small_frame), INTERACTION_SPEC)
    products = [c for c in X.columns if ":" in c]
    assert products == [
        "race=black:area=Y",
        "race=hispanic:area=Y",
        "race=asian:area=Y",
        "race=other:area=Y",
    ]
    assert X.shape[1] == 12
    row = X.iloc[2]
    assert row["race=black:area=Y"] == 1.0
    assert row["race=hispanic:area=Y"] == 0.0


def test_spline_design_replaces_age(small_frame):
    X, knots = build_design(harmonize_types(small_frame).dropna(), SPLINE_SPEC)
    assert "age" not in X.columns
    assert [c for c in X.columns if c.startswith("ns(age)")] == [
        "ns(age)[1]",
        "ns(age)[2]",
        "ns(age)[3]",
    ]
    assert len(knots) == 4


def test_null_design_is_empty(small_frame):
    X, _ = build_design(small_frame, NULL_SPEC)
    assert X.shape == (len(small_frame), 0)


def test_absent_levels_still_get_columns(small_frame):
    only_white = small_frame.assign(**{RACE: "white"})
    X, _ = build_design(only_white, MAIN_SPEC)
    assert (X[["race=black", "race=hispanic", "race=asian", "race=other"]] == 0).all().all()


def test_design_rejects_unknown_level(small_frame):
    bad = small_frame.copy()
    bad.loc[1, RACE] = "martian"
    with pytest.raises(DataIncompatible):
        build_design(bad, MAIN_SPEC)


def test_design_rejects_missing_column(small_frame):
    with pytest.raises(DataIncompatible):
        build_design(small_frame.drop(columns=[AGE]), MAIN_SPEC)


def test_fit_models_share_one_row_set(clean_frame):
    fitted, failures = fit_models(clean_frame, MODEL_SPECS + [NULL_SPEC])
    assert failures == {}
    assert {m.n_obs for m in fitted.values()} == {len(clean_frame)}
    assert fitted["m1_main"].n_params == 9
    assert fitted["m2_interaction"].n_params == 13
    assert fitted["m3_spline"].n_params == 11
    assert fitted["null"].n_params == 1


def test_fit_does_not_mutate_input(clean_frame):
    before = clean_frame.copy()
    fit_model(clean_frame, MAIN_SPEC)
    pd.testing.assert_frame_equal(clean_frame, before)


def test_missing_ages_are_excluded_from_fitting(clean_frame):
    with_gaps = clean_frame.copy()
    with_gaps[AGE] = with_gaps[AGE].astype("Float64")
    with_gaps.loc[:9, AGE] = np.nan
    model = fit_model(with_gaps, MAIN_SPEC)
    assert model.n_obs == len(clean_frame) - 10


def test_failed_spec_does_not_stop_siblings(clean_frame):
    constant_age = clean_frame.assign(**{AGE: 30})
    fitted, failures = fit_models(constant_age, [MAIN_SPEC, SPLINE_SPEC])
    assert "m1_main" in fitted
    assert "m3_spline" in failures
    assert np.isnan(fitted["m1_main"].coefficients["age"])


def test_spline_prediction_reuses_training_knots(clean_frame):
    model = fit_model(clean_frame, SPLINE_SPEC)
    one_row = clean_frame.iloc[[0]]
    probs = model.predict_proba(one_row)
    assert probs.shape == (1,)
    assert 0.0 < probs[0] < 1.0


def test_fitted_model_is_frozen(clean_frame):
    model = fit_model(clean_frame, MAIN_SPEC)
    with pytest.raises(AttributeError):
        model.log_likelihood = 0.0
    assert INTERCEPT in model.coefficients.index
    assert model.coefficients.index.equals(model.std_errors.index)


def test_outcome_column_is_used(clean_frame):
    flipped = clean_frame.assign(**{OUTCOME: 1 - clean_frame[OUTCOME]})
    a = fit_model(clean_frame, NULL_SPEC)
    b = fit_model(flipped, NULL_SPEC)
    assert a.coefficients[INTERCEPT] == pytest.approx(-b.coefficients[INTERCEPT])
