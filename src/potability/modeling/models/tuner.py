"""Cross-validated hyperparameter search.

The :class:`Tuner` expands a candidate grid into configurations (either
exhaustively or as a seeded random sample), then fits and scores every
``(configuration, fold)`` pair.  Units are independent of each other and
are dispatched through a joblib worker pool supplied by an explicit
:class:`ExecutionContext`; no process-wide seed or pool is used.

A configuration whose fit raises a numerical error on any fold is kept
in the report as failed, with NaN scores, and is never ranked.  Errors
raised by this package itself (invalid data or settings) abort the
search.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.model_selection import ParameterGrid, ParameterSampler

from ..data.preprocess import Fold
from ..utils.exceptions import ConfigurationError, PotabilityError
from ..utils.logging_utils import logger
from .metrics import MetricRecord, get_metric, score
from .pipeline import PipelineTemplate


@dataclass(frozen=True)
class ExecutionContext:
    """Seed and worker-pool settings passed explicitly to each phase.

    Parameters
    ----------
    random_state: int
        Seed consumed by the splitter, the fold generator, random
        configuration sampling and the estimators.
    n_jobs: int, optional
        Number of parallel workers.  ``-1`` uses all available cores.
    backend: str, optional
        joblib backend name; ``None`` selects joblib's default.
    """

    random_state: int = 42
    n_jobs: int = 1
    backend: Optional[str] = None

    @contextmanager
    def worker_pool(self) -> Iterator[Parallel]:
        """Yield a joblib pool that is shut down when the block exits."""
        with Parallel(n_jobs=self.n_jobs, backend=self.backend) as parallel:
            yield parallel


@dataclass
class TuningResult:
    index: int
    params: Dict[str, Any]
    fold_scores: Dict[str, List[float]]
    errors: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    @property
    def n_folds(self) -> int:
        return max((len(v) for v in self.fold_scores.values()), default=0)

    def mean(self, metric: str) -> float:
        values = self.fold_scores.get(metric, [])
        if self.failed or not values:
            return float("nan")
        return float(np.mean(values))

    def std(self, metric: str) -> float:
        values = self.fold_scores.get(metric, [])
        if self.failed or len(values) < 2:
            return float("nan")
        return float(np.std(values, ddof=1))

    def std_err(self, metric: str) -> float:
        return self.std(metric) / np.sqrt(self.n_folds) if self.n_folds else float("nan")

    def record(self, metric: str) -> MetricRecord:
        return MetricRecord(name=metric, estimate=self.mean(metric), std_err=self.std_err(metric))


@dataclass
class TuningReport:
    family: str
    metrics: Tuple[str, ...]
    n_folds: int
    results: List[TuningResult]

    @property
    def n_fits(self) -> int:
        return len(self.results) * self.n_folds

    def successful(self) -> List[TuningResult]:
        return [r for r in self.results if not r.failed]

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for res in self.results:
            row: Dict[str, Any] = {"config": res.index, "params": str(res.params)}
            for metric in self.metrics:
                row[f"mean_{metric}"] = res.mean(metric)
                row[f"std_{metric}"] = res.std(metric)
                row[f"std_err_{metric}"] = res.std_err(metric)
            row["failed"] = res.failed
            row["error"] = "; ".join(res.errors)
            rows.append(row)
        return pd.DataFrame(rows)


def _take(X, idx: np.ndarray):
    return X.iloc[idx] if hasattr(X, "iloc") else X[idx]


def _evaluate_unit(
    template: PipelineTemplate,
    config_index: int,
    params: Mapping[str, Any],
    fold_index: int,
    X,
    y: np.ndarray,
    fold: Fold,
    metrics: Sequence[str],
) -> Tuple[int, int, Optional[Dict[str, float]], Optional[str]]:
    """Fit one configuration on one fold and score the held-out rows."""
    fit_idx, val_idx = fold
    try:
        fitted = template.fit(_take(X, fit_idx), y[fit_idx], params)
        proba = fitted.predict_proba(_take(X, val_idx))
    except PotabilityError:
        raise
    except (ValueError, ArithmeticError) as exc:
        return config_index, fold_index, None, f"fold {fold_index}: {type(exc).__name__}: {exc}"
    scores = {metric: score(metric, y[val_idx], proba) for metric in metrics}
    return config_index, fold_index, scores, None


class Tuner:
    """Evaluate sampled configurations of one model family across folds.

    Parameters
    ----------
    template: PipelineTemplate
        Pipeline to tune.
    grid: dict[str, list], optional
        Candidate values per hyperparameter.  Defaults to the family's
        own grid; an empty grid yields a single default configuration.
    strategy: {"grid", "random"}, optional
        Exhaustive search or a random sample of ``n_iter`` configurations.
        Defaults to the family's strategy.
    n_iter: int, optional
        Sample size for the random strategy.
    metrics: sequence of str
        Metrics computed on every validation fold.
    """

    def __init__(
        self,
        template: PipelineTemplate,
        grid: Optional[Mapping[str, Sequence[Any]]] = None,
        strategy: Optional[str] = None,
        n_iter: Optional[int] = None,
        metrics: Sequence[str] = ("roc_auc", "accuracy"),
    ) -> None:
        family = template.family
        self.template = template
        self.grid = family.validate_grid(family.default_grid if grid is None else grid)
        self.strategy = strategy or family.strategy
        self.n_iter = n_iter if n_iter is not None else family.n_iter
        if self.strategy not in {"grid", "random"}:
            raise ConfigurationError(f"Unknown search strategy '{self.strategy}' for {family.name}")
        if self.strategy == "random" and self.grid and (self.n_iter is None or self.n_iter < 1):
            raise ConfigurationError(f"Random search for {family.name} needs n_iter >= 1")
        for metric in metrics:
            get_metric(metric)
        self.metrics = tuple(metrics)

    def sample_configurations(self, random_state: int) -> List[Dict[str, Any]]:
        """Return the configurations to evaluate, in a deterministic order."""
        if not self.grid:
            return [{}]
        if self.strategy == "grid":
            configurations = list(ParameterGrid(self.grid))
        else:
            size = len(ParameterGrid(self.grid))
            configurations = list(
                ParameterSampler(self.grid, n_iter=min(self.n_iter, size), random_state=random_state)
            )
        return [self.template.family.validate(c) for c in configurations]

    def run(
        self,
        X,
        y,
        folds: Sequence[Fold],
        context: ExecutionContext,
        parallel: Optional[Parallel] = None,
    ) -> TuningReport:
        """Fit and score every configuration on every fold.

        Parameters
        ----------
        X, y:
            The training split only.
        folds:
            Output of :func:`~potability.modeling.data.preprocess.make_folds`.
        context: ExecutionContext
            Seed for random sampling and pool settings.
        parallel: joblib.Parallel, optional
            An already open pool to reuse.  When omitted, a pool is opened
            for this call and released before returning.
        """
        name = self.template.name
        configurations = self.sample_configurations(context.random_state)
        y = np.asarray(y)
        logger.info(
            f"Starting {self.strategy} search for {name}: {len(configurations)} configurations "
            f"x {len(folds)} folds = {len(configurations) * len(folds)} fits"
        )
        tasks = [
            delayed(_evaluate_unit)(self.template, ci, params, fi, X, y, fold, self.metrics)
            for ci, params in enumerate(configurations)
            for fi, fold in enumerate(folds)
        ]
        if parallel is None:
            with context.worker_pool() as pool:
                outcomes = pool(tasks)
        else:
            outcomes = parallel(tasks)

        results = [
            TuningResult(index=ci, params=params, fold_scores={m: [] for m in self.metrics})
            for ci, params in enumerate(configurations)
        ]
        for ci, _, scores, error in outcomes:
            result = results[ci]
            if error is not None:
                result.errors.append(error)
                for metric in self.metrics:
                    result.fold_scores[metric].append(float("nan"))
                continue
            for metric in self.metrics:
                result.fold_scores[metric].append(scores[metric])

        for result in results:
            if result.failed:
                logger.warning(
                    f"Configuration {result.index} of {name} failed and is excluded from ranking "
                    f"(params={result.params}): {result.errors[0]}"
                )
        logger.info(
            f"Finished search for {name}: {len(results) - sum(r.failed for r in results)}"
            f"/{len(results)} configurations succeeded"
        )
        return TuningReport(family=name, metrics=self.metrics, n_folds=len(folds), results=results)
