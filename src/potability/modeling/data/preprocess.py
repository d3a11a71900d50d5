"""Preprocessing and data splitting utilities.

This module provides the k-nearest-neighbour imputer used inside every
model pipeline, the stratified train/test splitter and the stratified
fold generator used for cross-validation.  Only the training split is
ever passed to :func:`make_folds`; the test split is consumed once, by
the evaluator.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.impute import KNNImputer
from sklearn.model_selection import StratifiedKFold, train_test_split
from sklearn.preprocessing import StandardScaler
from sklearn.utils.validation import check_is_fitted

from ..utils.exceptions import ConfigurationError, DataValidationError
from ..utils.logging_utils import logger


Fold = Tuple[np.ndarray, np.ndarray]

_WEIGHTS = {"uniform", "distance"}


class KNNFeatureImputer(TransformerMixin, BaseEstimator):
    """Fill missing numeric values from the nearest training rows.

    This is a thin wrapper around :class:`~sklearn.impute.KNNImputer`
    that refuses to fit when a column carries no observed values.  The
    underlying imputer would silently drop such a column, which shifts
    the feature layout seen by the downstream estimator.

    Parameters
    ----------
    n_neighbors: int, optional
        Number of neighbouring rows used to fill each missing value.
    weights: {"uniform", "distance"}, optional
        Whether neighbours contribute equally or by inverse distance.
    """

    def __init__(self, n_neighbors: int = 5, weights: str = "uniform") -> None:
        self.n_neighbors = n_neighbors
        self.weights = weights

    def fit(self, X, y=None):
        """Build the neighbour index from ``X``.

        Raises
        ------
        ConfigurationError
            If the settings are invalid or a column is entirely missing.
        """
        if isinstance(self.n_neighbors, bool) or not isinstance(self.n_neighbors, (int, np.integer)) \
                or self.n_neighbors < 1:
            raise ConfigurationError(f"n_neighbors must be an integer >= 1, got {self.n_neighbors!r}")
        if self.weights not in _WEIGHTS:
            raise ConfigurationError(f"weights must be one of {sorted(_WEIGHTS)}, got {self.weights!r}")

        values = np.asarray(X, dtype=float)
        empty = np.flatnonzero(np.isnan(values).all(axis=0))
        if empty.size:
            names = _column_names(X, empty)
            raise ConfigurationError(
                f"Cannot impute columns with no observed values: {names}"
            )
        self.imputer_ = KNNImputer(n_neighbors=self.n_neighbors, weights=self.weights)
        self.imputer_.fit(values)
        self.n_features_in_ = values.shape[1]
        return self

    def transform(self, X):
        check_is_fitted(self, "imputer_")
        values = np.asarray(X, dtype=float)
        if values.ndim != 2 or values.shape[1] != self.n_features_in_:
            raise ValueError(
                f"X has {values.shape[-1]} features, but KNNFeatureImputer was fitted "
                f"with {self.n_features_in_} features"
            )
        if not np.isnan(values).any():
            return values
        return self.imputer_.transform(values)


def _column_names(X, positions: np.ndarray) -> List[str]:
    if isinstance(X, pd.DataFrame):
        return [str(X.columns[i]) for i in positions]
    return [f"column {i}" for i in positions]


def check_imputable(X: pd.DataFrame) -> None:
    """Raise ``DataValidationError`` if any column has no observed values."""
    empty = X.columns[X.isna().all(axis=0)].tolist()
    if empty:
        raise DataValidationError(f"Columns with no observed values cannot be imputed: {empty}")


def build_preprocessing_steps(n_neighbors: int = 5, weights: str = "uniform") -> List[Tuple[str, object]]:
    """Return the ordered preprocessing steps shared by every model pipeline.

    Features are standardised first so that the neighbour search is not
    dominated by large-valued columns such as ``Solids``.  The scaler
    ignores missing values during fitting and passes them through, so the
    imputer still sees them.
    """
    return [
        ("scaler", StandardScaler()),
        ("imputer", KNNFeatureImputer(n_neighbors=n_neighbors, weights=weights)),
    ]


def split_data(
    X: pd.DataFrame,
    y: pd.Series,
    train_fraction: float,
    random_state: int,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """Split data into train and test partitions stratified by outcome.

    Parameters
    ----------
    X: pandas.DataFrame
        Feature matrix.
    y: pandas.Series
        Binary target vector.
    train_fraction: float
        Fraction of rows allocated to the training split, in (0, 1).
    random_state: int
        Random seed for reproducibility.

    Returns
    -------
    tuple
        (X_train, X_test, y_train, y_test)
    """
    if not 0.0 < train_fraction < 1.0:
        raise ConfigurationError(f"train_fraction must lie in (0, 1), got {train_fraction}")
    logger.info(
        f"Splitting data: train_fraction={train_fraction}, random_state={random_state}"
    )
    X_train, X_test, y_train, y_test = train_test_split(
        X,
        y,
        train_size=train_fraction,
        stratify=y,
        random_state=random_state,
    )
    return X_train, X_test, y_train, y_test


def make_folds(y: Sequence, k: int, random_state: int) -> List[Fold]:
    """Assign every training row to exactly one of ``k`` stratified folds.

    Returns
    -------
    list of (fit_indices, validation_indices)
        Positional indices into ``y``.  Fold ``i`` serves once as the
        validation set while the union of the remaining folds is used
        for fitting.
    """
    labels = np.asarray(y)
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 2:
        raise ConfigurationError(f"Number of folds must be an integer >= 2, got {k!r}")
    smallest = int(np.bincount(labels.astype(int), minlength=2).min())
    if k > smallest:
        raise ConfigurationError(
            f"Cannot build {k} stratified folds: the smallest class has {smallest} rows"
        )
    cv = StratifiedKFold(n_splits=k, shuffle=True, random_state=random_state)
    folds = [(fit_idx, val_idx) for fit_idx, val_idx in cv.split(np.zeros(len(labels)), labels)]
    logger.info(f"Built {k} stratified folds over {len(labels)} training rows")
    return folds
