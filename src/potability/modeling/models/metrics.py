"""Metric definitions shared by the tuner, the evaluator and the comparator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np
from sklearn.metrics import accuracy_score, f1_score, log_loss, precision_score, recall_score, roc_auc_score

from ..utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class MetricSpec:
    name: str
    func: Callable[[np.ndarray, np.ndarray], float]
    needs_proba: bool
    greater_is_better: bool = True


@dataclass(frozen=True)
class MetricRecord:
    name: str
    estimate: float
    std_err: Optional[float] = None


def _precision(y_true, y_pred) -> float:
    return precision_score(y_true, y_pred, zero_division=0)


def _recall(y_true, y_pred) -> float:
    return recall_score(y_true, y_pred, zero_division=0)


def _f1(y_true, y_pred) -> float:
    return f1_score(y_true, y_pred, zero_division=0)


def _log_loss(y_true, proba) -> float:
    return log_loss(y_true, proba, labels=[0, 1])


METRICS: Dict[str, MetricSpec] = {
    "roc_auc": MetricSpec("roc_auc", roc_auc_score, needs_proba=True),
    "log_loss": MetricSpec("log_loss", _log_loss, needs_proba=True, greater_is_better=False),
    "accuracy": MetricSpec("accuracy", accuracy_score, needs_proba=False),
    "precision": MetricSpec("precision", _precision, needs_proba=False),
    "recall": MetricSpec("recall", _recall, needs_proba=False),
    "f1": MetricSpec("f1", _f1, needs_proba=False),
}

EVALUATION_METRICS = ("roc_auc", "accuracy", "precision", "recall", "f1")


def get_metric(name: str) -> MetricSpec:
    spec = METRICS.get(name)
    if spec is None:
        raise ConfigurationError(f"Unknown metric '{name}'; expected one of {sorted(METRICS)}")
    return spec


def score(name: str, y_true, proba: np.ndarray, threshold: float = 0.5) -> float:
    """Compute metric ``name`` from positive-class probabilities.

    ROC AUC is undefined when ``y_true`` holds a single class; NaN is
    returned in that case.
    """
    spec = get_metric(name)
    y_true = np.asarray(y_true)
    if spec.needs_proba:
        try:
            return float(spec.func(y_true, proba))
        except ValueError:
            return float("nan")
    preds = (np.asarray(proba) >= threshold).astype(int)
    return float(spec.func(y_true, preds))
