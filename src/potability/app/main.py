"""End‑to‑end model comparison for the water potability dataset.

This module orchestrates the entire modelling workflow: it loads the
configuration, reads the raw data, splits it into stratified train and
test partitions, draws the exploratory plots, tunes the configured
model families with cross-validation on the training split, evaluates
the selected configurations once on the test split and ranks them.
Tables, plots and the winning pipeline are saved into the
``artifacts/`` directory.

Run it with ``potability-compare`` or ``python -m potability.app.main``.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import joblib
import pandas as pd

from ..configuration import AppSettings, ConfigurationManager
from ..modeling.data import clean_water_data, load_water_data, split_data, split_features_target
from ..modeling.data.load_data import OUTCOME
from ..modeling.models import (
    EvaluationResult,
    ExecutionContext,
    PotabilityClassifier,
    metrics_table,
    render_comparison,
)
from ..modeling.reporting import (
    plot_class_balance,
    plot_correlation_matrix,
    plot_feature_distributions,
    plot_missing_values,
    plot_model_comparison,
    plot_roc_curves,
)
from ..modeling.utils.exceptions import PotabilityError
from ..modeling.utils.logging_utils import logger, set_log_level


@dataclass
class WorkflowResult:
    classifier: PotabilityClassifier
    evaluations: List[EvaluationResult]
    ranking: pd.DataFrame
    n_train: int
    n_test: int
    artifacts: Dict[str, Path] = field(default_factory=dict)


def build_classifier(settings: AppSettings) -> PotabilityClassifier:
    context = ExecutionContext(random_state=settings.random_state, n_jobs=settings.tuning.n_jobs)
    return PotabilityClassifier(
        context=context,
        algorithms=settings.model.algorithms,
        param_grid=settings.model.params,
        search=settings.model.search,
        cv_splits=settings.tuning.cv_splits,
        metric=settings.tuning.metric,
        metrics=settings.tuning.metrics,
        n_neighbors=settings.imputation.n_neighbors,
        weights=settings.imputation.weights,
    )


def run(settings: AppSettings, data: Optional[pd.DataFrame] = None) -> WorkflowResult:
    """Run the full comparison.

    Parameters
    ----------
    settings: AppSettings
        Parsed configuration.
    data: pandas.DataFrame, optional
        Raw frame with the 10 dataset columns.  When omitted the CSV named
        by ``settings.data.raw_file`` is loaded.
    """
    # Hyperparameter grids are validated before the data is touched
    clf = build_classifier(settings)

    df = clean_water_data(data) if data is not None else load_water_data(settings.data.raw_file)
    X, y = split_features_target(df)
    X_train, X_test, y_train, y_test = split_data(
        X, y, train_fraction=settings.data.train_fraction, random_state=settings.random_state
    )
    logger.info(f"Data split completed: train={len(X_train)}, test={len(X_test)}")

    artifacts_dir = Path(settings.report.artifacts_dir)
    artifacts_dir.mkdir(parents=True, exist_ok=True)
    artifacts: Dict[str, Path] = {}

    # ---------------------------------------------------------------------
    # Data visualisation
    # ---------------------------------------------------------------------
    if settings.report.make_plots:
        viz_dir = artifacts_dir / "visualisations"
        try:
            artifacts["class_balance"] = plot_class_balance(df[OUTCOME], viz_dir / "class_balance.png")
            artifacts["missing_values"] = plot_missing_values(X, viz_dir / "missing_values.png")
            plot_feature_distributions(X_train, df.loc[X_train.index, OUTCOME], viz_dir)
            artifacts["correlation"] = plot_correlation_matrix(X_train, viz_dir / "correlation_matrix.png")
        except Exception as e:
            logger.warning(f"Failed to generate data visualisations: {e}")

    clf.train(X_train, y_train)
    evaluations = clf.evaluate(X_test, y_test)
    ranking = clf.compare(min_score=settings.report.min_auc)
    logger.info("Model comparison:\n" + render_comparison(ranking))

    for result in clf.results:
        path = artifacts_dir / f"tuning_{result.name}.csv"
        result.report.to_frame().to_csv(path, index=False)
        artifacts[f"tuning_{result.name}"] = path
    results_path = artifacts_dir / "model_results.csv"
    metrics_table(evaluations).to_csv(results_path, index=False)
    artifacts["model_results"] = results_path
    comparison_path = artifacts_dir / "model_comparison.csv"
    ranking.to_csv(comparison_path, index=False)
    artifacts["model_comparison"] = comparison_path
    logger.info(f"Saved model results summary to {results_path}")

    if settings.report.make_plots:
        try:
            artifacts["roc_curves"] = plot_roc_curves(evaluations, artifacts_dir / "roc_curves.png")
            artifacts["comparison_bar"] = plot_model_comparison(
                ranking, artifacts_dir / "test_auc_bar.png", metric=settings.tuning.metric
            )
        except Exception as e:
            logger.warning(f"Failed to plot model comparison: {e}")

    best = clf.best_model()
    model_path = artifacts_dir / f"best_model_{best.family}.pkl"
    joblib.dump(best.model.pipeline, model_path)
    artifacts["best_model"] = model_path
    logger.info(f"Best model: {best.family} (params={best.params}); saved to {model_path}")

    return WorkflowResult(
        classifier=clf,
        evaluations=evaluations,
        ranking=ranking,
        n_train=len(X_train),
        n_test=len(X_test),
        artifacts=artifacts,
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare classifiers for water potability.")
    parser.add_argument("--config", type=Path, default=None, help="Path to a YAML configuration file")
    parser.add_argument("--data", type=str, default=None, help="Override data.raw_file")
    parser.add_argument("--artifacts", type=str, default=None, help="Override report.artifacts_dir")
    parser.add_argument("--n-jobs", type=int, default=None, help="Override tuning.n_jobs")
    parser.add_argument("--no-plots", action="store_true", help="Skip all figures")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level)
    overrides: Dict[str, Dict] = {}
    if args.data:
        overrides["data"] = {"raw_file": args.data}
    if args.n_jobs is not None:
        overrides["tuning"] = {"n_jobs": args.n_jobs}
    report = {}
    if args.artifacts:
        report["artifacts_dir"] = args.artifacts
    if args.no_plots:
        report["make_plots"] = False
    if report:
        overrides["report"] = report

    try:
        settings = ConfigurationManager.load(config_path=args.config, overrides=overrides)
        logger.info("Loaded configuration")
        run(settings)
    except (PotabilityError, FileNotFoundError) as exc:
        logger.error(f"Run aborted: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
