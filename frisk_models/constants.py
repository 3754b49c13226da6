"""
Column names, closed level sets and defaults shared by the pipeline stages.
"""

OUTCOME = "new_force"
RACE = "race2"
AGE = "age2"
GENDER = "gender"
AREA = "ac_incid"
VIOLENT = "cs_vcrim"

# First level of each list is the reference (baseline) category.
LEVELS = {
    RACE: ["white", "black", "hispanic", "asian", "other"],
    GENDER: ["male", "female"],
    AREA: ["N", "Y"],
    VIOLENT: ["N", "Y"],
}

CATEGORICAL_COLUMNS = [RACE, GENDER, AREA, VIOLENT]
PREDICTORS = [RACE, AGE, GENDER, AREA, VIOLENT]
REQUIRED_COLUMNS = [OUTCOME] + PREDICTORS

# Short prefixes used in coefficient labels, e.g. "race=black:area=Y".
TERM_PREFIX = {
    RACE: "race",
    GENDER: "gender",
    AREA: "area",
    VIOLENT: "violent",
}
INTERCEPT = "(Intercept)"

MAIN_MODEL = "m1_main"
INTERACTION_MODEL = "m2_interaction"
SPLINE_MODEL = "m3_spline"
NULL_MODEL = "null"

DEFAULT_CSV_PATH = "data/clean/clean_demo.csv"
DEFAULT_OUTPUT_DIR = "figures"
COEFFICIENT_PLOT = "coefficients_plot.png"
AGE_EFFECT_PLOT = "age_effect_linear_vs_spline.png"

DATA_SEED = 42
CV_SEED = 123
CV_FOLDS = 10
CONFIDENCE = 0.95
LOG_LOSS_EPS = 1e-12
