"""Rank finalized model families and format the comparison tables."""

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np
import pandas as pd

from ..utils.logging_utils import logger
from .evaluation import EvaluationResult
from .metrics import get_metric


def metrics_table(evaluations: Iterable[EvaluationResult]) -> pd.DataFrame:
    """Long table of final test metrics: one row per (model, metric)."""
    rows = [
        {"model": ev.family, "metric": rec.name, "estimate": rec.estimate}
        for ev in evaluations
        for rec in ev.metrics
    ]
    return pd.DataFrame(rows, columns=["model", "metric", "estimate"])


def rank_models(
    evaluations: Iterable[EvaluationResult],
    metric: str = "roc_auc",
    min_score: Optional[float] = 0.5,
    floor_metric: str = "roc_auc",
) -> pd.DataFrame:
    """Rank model families by their finalized ``metric``.

    Rows are ordered best first.  The sort is stable, so families with
    exactly equal scores keep their input order and share a rank.
    Families whose ``floor_metric`` falls short of ``min_score`` stay in
    the table but are flagged with ``meets_floor=False``.  The floor is
    judged on ``floor_metric`` whatever metric the ranking uses.
    """
    spec = get_metric(metric)
    floor_spec = get_metric(floor_metric)
    rows = []
    for ev in evaluations:
        cv = ev.cv_score
        row = {
            "model": ev.family,
            "label": ev.label,
            metric: ev.metric(metric),
            f"cv_{metric}": cv.estimate if cv is not None else np.nan,
            f"cv_{metric}_std_err": cv.std_err if cv is not None else np.nan,
        }
        if min_score is not None and floor_metric != metric:
            row[floor_metric] = ev.metric(floor_metric)
        row["params"] = str(ev.params)
        rows.append(row)
    frame = pd.DataFrame(rows)
    if frame.empty:
        return frame
    frame = frame.sort_values(
        by=metric, ascending=not spec.greater_is_better, kind="mergesort", na_position="last"
    ).reset_index(drop=True)
    frame.insert(
        0, "rank", frame[metric].rank(method="min", ascending=not spec.greater_is_better).astype("Int64")
    )

    if min_score is None:
        frame["meets_floor"] = True
    else:
        if floor_spec.greater_is_better:
            frame["meets_floor"] = frame[floor_metric] >= min_score
        else:
            frame["meets_floor"] = frame[floor_metric] <= min_score
        for name in frame.loc[~frame["meets_floor"], "model"]:
            logger.warning(f"{name} does not reach the {floor_metric} floor of {min_score}")
    return frame


def render_comparison(frame: pd.DataFrame) -> str:
    """Format a ranked comparison table for logs and the console."""
    if frame.empty:
        return "(no models)"
    columns = [c for c in frame.columns if c != "params"]
    return frame[columns].to_string(index=False, float_format=lambda v: f"{v:.4f}")
