"""Final refit on the full training split and one-off test evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
from sklearn.metrics import roc_curve

from ..utils.logging_utils import logger
from .metrics import EVALUATION_METRICS, MetricRecord, score
from .pipeline import FittedPipeline, PipelineTemplate


@dataclass
class EvaluationResult:
    family: str
    label: str
    params: Dict[str, Any]
    model: FittedPipeline
    metrics: List[MetricRecord]
    roc_points: Dict[str, np.ndarray] = field(default_factory=dict)
    cv_score: Optional[MetricRecord] = None

    def metric(self, name: str) -> float:
        for record in self.metrics:
            if record.name == name:
                return record.estimate
        raise KeyError(name)

    def as_dict(self) -> Dict[str, float]:
        return {record.name: record.estimate for record in self.metrics}


def finalize_and_evaluate(
    template: PipelineTemplate,
    configuration: Mapping[str, Any],
    X_train,
    y_train,
    X_test,
    y_test,
    metrics=EVALUATION_METRICS,
    cv_score: Optional[MetricRecord] = None,
) -> EvaluationResult:
    """Refit ``configuration`` on the whole training split and score the test split.

    This is the only place where test rows are used.  The pipeline is
    refitted from scratch on all training rows, not just the ``k - 1``
    folds seen during tuning.

    Returns
    -------
    EvaluationResult
        Fitted pipeline, test metrics and the ROC curve points.
    """
    fitted = template.fit(X_train, y_train, configuration)
    y_true = np.asarray(y_test)
    proba = fitted.predict_proba(X_test)
    records = [MetricRecord(name=m, estimate=score(m, y_true, proba)) for m in metrics]

    roc_points: Dict[str, np.ndarray] = {}
    if len(np.unique(y_true)) == 2:
        fpr, tpr, thresholds = roc_curve(y_true, proba)
        roc_points = {"fpr": fpr, "tpr": tpr, "thresholds": thresholds}

    result = EvaluationResult(
        family=template.name,
        label=template.family.label,
        params=dict(configuration),
        model=fitted,
        metrics=records,
        roc_points=roc_points,
        cv_score=cv_score,
    )
    logger.info(
        f"Test metrics for {template.name}: "
        + ", ".join(f"{r.name}={r.estimate:.4f}" for r in records)
    )
    return result
