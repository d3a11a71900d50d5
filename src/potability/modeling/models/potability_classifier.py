"""Classifier orchestrator for water potability prediction.

This module defines a ``PotabilityClassifier`` class that tunes one or
more model families on the training split, selects the best
configuration of each by cross-validated ROC AUC, refits it on the full
training split and evaluates it once on the held-out test split.
Supported families are logistic regression (evaluated with its default
configuration only), decision trees and gradient-boosted trees; see
:mod:`potability.modeling.models.search_space`.

:meth:`train` receives the training split only; the test split is first
seen by :meth:`evaluate`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..data.preprocess import check_imputable, make_folds
from ..utils.exceptions import ModelSelectionError
from ..utils.logging_utils import logger
from .comparison import rank_models
from .evaluation import EvaluationResult, finalize_and_evaluate
from .metrics import EVALUATION_METRICS
from .pipeline import PipelineTemplate
from .search_space import get_family
from .selection import select_best
from .tuner import ExecutionContext, Tuner, TuningReport, TuningResult


@dataclass
class FamilyResult:
    name: str
    report: TuningReport
    best: TuningResult
    evaluation: Optional[EvaluationResult] = None


class PotabilityClassifier:
    """Tune, select and evaluate several model families.

    Parameters
    ----------
    context: ExecutionContext
        Seed and worker-pool settings.
    algorithms: Iterable[str]
        Family names, e.g. ``"logistic_regression"``, ``"decision_tree"``,
        ``"gradient_boosting"``.
    param_grid: dict[str, dict[str, list]], optional
        Candidate values per family.  Families missing from the mapping
        use their default grid; an explicit empty dict disables tuning.
    search: dict[str, dict], optional
        Per-family overrides of ``strategy`` and ``n_iter``.
    cv_splits: int, optional
        Number of stratified folds.  Defaults to 10.
    metric: str, optional
        Metric used to select configurations and rank families.
    """

    def __init__(
        self,
        context: ExecutionContext,
        algorithms: Iterable[str],
        param_grid: Optional[Mapping[str, Mapping[str, Sequence[Any]]]] = None,
        search: Optional[Mapping[str, Mapping[str, Any]]] = None,
        cv_splits: int = 10,
        metric: str = "roc_auc",
        metrics: Sequence[str] = ("roc_auc", "accuracy"),
        n_neighbors: int = 5,
        weights: str = "uniform",
    ) -> None:
        self.context = context
        self.cv_splits = cv_splits
        self.metric = metric
        param_grid = param_grid or {}
        search = search or {}
        if metric not in metrics:
            metrics = (metric,) + tuple(metrics)

        # Templates and grids are validated here, before the first fit.
        self.tuners: Dict[str, Tuner] = {}
        for name in algorithms:
            family = get_family(name)
            template = PipelineTemplate(
                family=family,
                random_state=context.random_state,
                n_neighbors=n_neighbors,
                weights=weights,
            )
            options = search.get(family.name, {}) or {}
            self.tuners[family.name] = Tuner(
                template,
                grid=param_grid.get(name, param_grid.get(family.name)),
                strategy=options.get("strategy"),
                n_iter=options.get("n_iter"),
                metrics=metrics,
            )
        self.results: List[FamilyResult] = []
        self._X_train = None
        self._y_train = None

    def train(self, X_train: pd.DataFrame, y_train) -> None:
        """Tune every family on the training split and select its best configuration.

        Families whose every configuration failed are skipped with a
        warning; a ``ModelSelectionError`` is raised if none succeeded.
        """
        check_imputable(X_train)
        y_train = np.asarray(y_train)
        folds = make_folds(y_train, self.cv_splits, self.context.random_state)

        self.results = []
        with self.context.worker_pool() as parallel:
            for name, tuner in self.tuners.items():
                report = tuner.run(X_train, y_train, folds, self.context, parallel=parallel)
                try:
                    best = select_best(report.results, metric=self.metric)
                except ModelSelectionError as exc:
                    logger.warning(f"Skipping algorithm '{name}': {exc}")
                    continue
                logger.info(
                    f"Best configuration for {name}: {best.params} "
                    f"(cv {self.metric}={best.mean(self.metric):.4f} "
                    f"± {best.std_err(self.metric):.4f})"
                )
                self.results.append(FamilyResult(name=name, report=report, best=best))
        if not self.results:
            raise ModelSelectionError("No model family could be tuned successfully")
        self._X_train = X_train
        self._y_train = y_train

    def evaluate(self, X_test: pd.DataFrame, y_test) -> List[EvaluationResult]:
        """Refit each selected configuration on the full training split and score the test split."""
        if not self.results:
            raise RuntimeError("No models have been trained yet")
        evaluations = []
        for result in self.results:
            tuner = self.tuners[result.name]
            result.evaluation = finalize_and_evaluate(
                tuner.template,
                result.best.params,
                self._X_train,
                self._y_train,
                X_test,
                y_test,
                metrics=tuple(dict.fromkeys(EVALUATION_METRICS + (self.metric,))),
                cv_score=result.best.record(self.metric),
            )
            evaluations.append(result.evaluation)
        return evaluations

    def compare(self, min_score: Optional[float] = 0.5) -> pd.DataFrame:
        """Rank evaluated families by the selection metric on the test split.

        ``min_score`` is a floor on the test ROC AUC, which every
        evaluation reports regardless of the selection metric.
        """
        evaluations = [r.evaluation for r in self.results if r.evaluation is not None]
        if not evaluations:
            raise RuntimeError("No models have been evaluated yet")
        return rank_models(evaluations, metric=self.metric, min_score=min_score)

    def best_model(self) -> EvaluationResult:
        """Return the evaluated family ranked first."""
        ranking = self.compare(min_score=None)
        winner = ranking.iloc[0]["model"]
        return next(r.evaluation for r in self.results if r.name == winner)
