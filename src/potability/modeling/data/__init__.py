"""Data handling utilities."""

from .load_data import (  # noqa: F401
    COLUMNS,
    FEATURES,
    LABEL,
    OUTCOME,
    clean_water_data,
    load_water_data,
    split_features_target,
)
from .preprocess import (  # noqa: F401
    KNNFeatureImputer,
    build_preprocessing_steps,
    check_imputable,
    make_folds,
    split_data,
)
