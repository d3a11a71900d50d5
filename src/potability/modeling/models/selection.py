"""Pick the best configuration from a tuning report."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from ..utils.exceptions import ConfigurationError, ModelSelectionError
from .metrics import get_metric
from .tuner import TuningResult


def select_best(
    results: Iterable[TuningResult],
    metric: str = "roc_auc",
    tie_break: str = "lowest_index",
    atol: float = 1e-12,
) -> TuningResult:
    """Return the configuration with the best mean ``metric`` across folds.

    Failed configurations and configurations whose mean is NaN are never
    selected.  Means within ``atol`` of the best are treated as ties and
    resolved by the lowest configuration index, i.e. the first candidate
    in grid or sampling order.

    Raises
    ------
    ModelSelectionError
        If no configuration has a usable score.
    """
    if tie_break != "lowest_index":
        raise ConfigurationError(f"Unsupported tie_break '{tie_break}'")
    spec = get_metric(metric)
    sign = 1.0 if spec.greater_is_better else -1.0

    ranked = [r for r in results if not r.failed and not np.isnan(r.mean(metric))]
    if not ranked:
        raise ModelSelectionError(f"No configuration produced a usable '{metric}' score")

    best_value = max(sign * r.mean(metric) for r in ranked)
    tied = [r for r in ranked if abs(sign * r.mean(metric) - best_value) <= atol]
    return min(tied, key=lambda r: r.index)
