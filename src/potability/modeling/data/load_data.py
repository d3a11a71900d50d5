"""Data loading utilities for the water potability dataset.

This module defines functions to read the raw CSV file into a
pandas DataFrame, to normalise column names and to recode the binary
``Potability`` label into a two-level categorical outcome.  If the file
does not exist, a ``FileNotFoundError`` is raised.  Column names and
label values are validated against the expected schema to detect
unexpected formats early.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import numpy as np
import pandas as pd

from ..utils.exceptions import DataValidationError
from ..utils.logging_utils import logger


# Canonical column names for the water potability dataset.
FEATURES: List[str] = [
    "ph",
    "Hardness",
    "Solids",
    "Chloramines",
    "Sulfate",
    "Conductivity",
    "Organic_carbon",
    "Trihalomethanes",
    "Turbidity",
]
LABEL = "Potability"
COLUMNS: List[str] = FEATURES + [LABEL]

OUTCOME = "outcome"
POSITIVE = "potable"
NEGATIVE = "not_potable"
OUTCOME_LEVELS: List[str] = [NEGATIVE, POSITIVE]


def load_water_data(csv_path: str | Path) -> pd.DataFrame:
    """Load the water potability dataset from a CSV file.

    Parameters
    ----------
    csv_path: str or Path
        Path to the raw CSV file.  The CSV must have the 10 columns listed
        in ``COLUMNS``; empty fields are read as missing feature values.

    Returns
    -------
    pandas.DataFrame
        The cleaned dataset with canonical column names and an
        additional categorical ``outcome`` column.

    Raises
    ------
    FileNotFoundError
        If the specified file does not exist.
    DataValidationError
        If the file does not follow the expected schema.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Dataset file not found at {csv_path}")

    logger.info(f"Loading water potability data from {csv_path}")
    df = pd.read_csv(csv_path)
    return clean_water_data(df)


def clean_water_data(df: pd.DataFrame) -> pd.DataFrame:
    """Validate a raw frame and recode its label into the outcome column."""
    if df.shape[1] != len(COLUMNS):
        raise DataValidationError(
            f"Unexpected number of columns: {df.shape[1]}, expected {len(COLUMNS)}"
        )

    df = df.copy()
    # If the columns do not exactly match, coerce by position.
    if list(df.columns) != COLUMNS:
        logger.info(
            "Column names differ from canonical names; renaming columns to standard schema"
        )
        df.columns = COLUMNS

    for col in FEATURES:
        try:
            df[col] = pd.to_numeric(df[col]).astype(float)
        except (TypeError, ValueError) as exc:
            raise DataValidationError(f"Feature column '{col}' is not numeric: {exc}") from exc

    missing_label = df[LABEL].isna()
    if missing_label.any():
        rows = df.index[missing_label].tolist()[:10]
        raise DataValidationError(
            f"{int(missing_label.sum())} rows have no '{LABEL}' label (first rows: {rows})"
        )
    unexpected = set(pd.unique(df[LABEL])) - {0, 1}
    if unexpected:
        raise DataValidationError(
            f"Label column '{LABEL}' must be binary 0/1; found {sorted(map(str, unexpected))}"
        )

    df[LABEL] = df[LABEL].astype(int)
    df[OUTCOME] = pd.Categorical(
        np.where(df[LABEL] == 1, POSITIVE, NEGATIVE), categories=OUTCOME_LEVELS
    )
    n_missing = df[FEATURES].isna().sum()
    logger.info(
        f"Loaded {len(df)} samples; missing values per feature: "
        f"{n_missing[n_missing > 0].to_dict()}"
    )
    return df


def split_features_target(df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
    """Return the feature matrix and a 0/1 target with ``potable`` as 1."""
    X = df[FEATURES]
    y = (df[OUTCOME] == POSITIVE).astype(int).rename(LABEL)
    return X, y
