"""Shared fixtures: synthetic frames shaped like the water potability dataset."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import yaml

from potability.modeling.data.load_data import COLUMNS, FEATURES, LABEL

# (mean, std) per feature, close to the public dataset
_FEATURE_STATS = {
    "ph": (7.08, 1.59),
    "Hardness": (196.4, 32.9),
    "Solids": (22014.0, 8768.0),
    "Chloramines": (7.12, 1.58),
    "Sulfate": (333.8, 41.4),
    "Conductivity": (426.2, 80.8),
    "Organic_carbon": (14.28, 3.31),
    "Trihalomethanes": (66.4, 16.2),
    "Turbidity": (3.97, 0.78),
}
# Positive-class shift in standard deviations, so that models can beat chance
_SHIFT = {"Solids": 0.5, "Chloramines": 0.4, "Sulfate": -0.3, "ph": 0.2}
_MISSING = {"ph": 0.15, "Sulfate": 0.24, "Trihalomethanes": 0.05}


def make_water_frame(n_rows: int = 3276, n_positive: int = 1278, seed: int = 0) -> pd.DataFrame:
    """Build a raw frame with the dataset's 10 columns and missing values in 3 of them."""
    rng = np.random.default_rng(seed)
    label = np.zeros(n_rows, dtype=int)
    label[:n_positive] = 1
    rng.shuffle(label)

    data = {}
    for col in FEATURES:
        mean, std = _FEATURE_STATS[col]
        values = rng.normal(mean, std, n_rows) + label * _SHIFT.get(col, 0.0) * std
        share = _MISSING.get(col, 0.0)
        if share:
            values[rng.random(n_rows) < share] = np.nan
        data[col] = values
    data[LABEL] = label
    return pd.DataFrame(data, columns=COLUMNS)


@pytest.fixture(scope="session")
def water_frame() -> pd.DataFrame:
    return make_water_frame()


@pytest.fixture(scope="session")
def small_frame() -> pd.DataFrame:
    return make_water_frame(n_rows=400, n_positive=156, seed=1)


@pytest.fixture
def write_csv(tmp_path: Path):
    def _write(frame: pd.DataFrame, name: str = "water_potability.csv") -> Path:
        path = tmp_path / name
        frame.to_csv(path, index=False)
        return path

    return _write


@pytest.fixture
def fast_config(tmp_path: Path):
    """Write a YAML config with small grids and return its path."""

    def _make(raw_file: Path, make_plots: bool = False, **sections) -> Path:
        cfg = {
            "random_state": 7,
            "data": {"raw_file": str(raw_file), "train_fraction": 0.75},
            "imputation": {"n_neighbors": 5, "weights": "uniform"},
            "tuning": {"cv_splits": 3, "metric": "roc_auc", "metrics": ["roc_auc", "accuracy"], "n_jobs": 1},
            "model": {
                "algorithms": ["logistic_regression", "decision_tree", "gradient_boosting"],
                "search": {"gradient_boosting": {"strategy": "random", "n_iter": 2}},
                "params": {
                    "logistic_regression": {},
                    "decision_tree": {"max_depth": [2, 4], "min_samples_leaf": [5, 20]},
                    "gradient_boosting": {"n_estimators": [20, 40], "learning_rate": [0.1], "max_depth": [2]},
                },
            },
            "report": {"artifacts_dir": str(tmp_path / "artifacts"), "min_auc": 0.5, "make_plots": make_plots},
        }
        cfg.update(sections)
        path = tmp_path / "config.yaml"
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(cfg, f)
        return path

    return _make
