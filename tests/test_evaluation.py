"""Tests for the final refit/evaluation and for test-split isolation."""

from __future__ import annotations

import numpy as np
import pytest
from pytest_check import check

from potability.modeling.data import FEATURES, clean_water_data, split_data, split_features_target
from potability.modeling.models import (
    ExecutionContext,
    PipelineTemplate,
    PotabilityClassifier,
    finalize_and_evaluate,
    get_family,
)
from potability.modeling.models.metrics import EVALUATION_METRICS
from potability.modeling.utils.exceptions import ConfigurationError


@pytest.fixture(scope="module")
def split(small_frame):
    X, y = split_features_target(clean_water_data(small_frame))
    return split_data(X, y, train_fraction=0.75, random_state=0)


class TestFinalizeAndEvaluate:
    def test_reports_full_metric_set_and_roc_curve(self, split) -> None:
        # Arrange
        X_train, X_test, y_train, y_test = split
        template = PipelineTemplate(get_family("decision_tree"), random_state=0)

        # Act
        result = finalize_and_evaluate(template, {"max_depth": 3}, X_train, y_train, X_test, y_test)

        # Assert
        with check:
            assert [m.name for m in result.metrics] == list(EVALUATION_METRICS)
        with check:
            assert 0.0 <= result.metric("roc_auc") <= 1.0
        with check:
            assert result.params == {"max_depth": 3}
        with check:
            assert np.all(np.diff(result.roc_points["fpr"]) >= 0)
        with check:
            assert result.roc_points["tpr"][-1] == pytest.approx(1.0)

    def test_refits_on_the_entire_training_split(self, split) -> None:
        X_train, X_test, y_train, y_test = split
        template = PipelineTemplate(get_family("logistic_regression"), random_state=0)
        result = finalize_and_evaluate(template, {}, X_train, y_train, X_test, y_test)
        scaler = result.model.pipeline.named_steps["scaler"]
        # Hardness has no missing values, so every training row was seen
        assert scaler.n_samples_seen_[FEATURES.index("Hardness")] == len(X_train)

    def test_invalid_configuration_is_rejected(self, split) -> None:
        X_train, X_test, y_train, y_test = split
        template = PipelineTemplate(get_family("gradient_boosting"), random_state=0)
        with pytest.raises(ConfigurationError):
            finalize_and_evaluate(template, {"learning_rate": 0}, X_train, y_train, X_test, y_test)


class TestLowerIsBetterSelection:
    def test_log_loss_selection_ranks_on_the_test_split(self, split) -> None:
        # Arrange
        X_train, X_test, y_train, y_test = split
        clf = PotabilityClassifier(
            ExecutionContext(random_state=0),
            algorithms=["logistic_regression", "decision_tree"],
            param_grid={"decision_tree": {"max_depth": [2, 3]}},
            cv_splits=3,
            metric="log_loss",
        )

        # Act
        clf.train(X_train, y_train)
        evaluations = clf.evaluate(X_test, y_test)
        ranking = clf.compare(min_score=0.5)

        # Assert
        with check:
            assert all(ev.metric("log_loss") > 0 for ev in evaluations)
        with check:
            assert "roc_auc" in evaluations[0].as_dict()
        with check:
            assert ranking["log_loss"].is_monotonic_increasing
        with check:
            assert ranking["meets_floor"].tolist() == (ranking["roc_auc"] >= 0.5).tolist()
        with check:
            assert clf.best_model().family == ranking.iloc[0]["model"]


class TestNoLeakage:
    def test_test_rows_do_not_affect_selection(self, water_frame) -> None:
        """Replacing every test-split feature value leaves the selected configuration unchanged."""
        # Arrange
        df = clean_water_data(water_frame)
        X, y = split_features_target(df)
        X_train, X_test, y_train, _ = split_data(X, y, train_fraction=0.75, random_state=4)

        rng = np.random.default_rng(99)
        tampered = X.copy()
        tampered.loc[X_test.index, FEATURES] = rng.uniform(0, 1000, size=(len(X_test), len(FEATURES)))
        X_train_t, _, y_train_t, _ = split_data(tampered, y, train_fraction=0.75, random_state=4)

        def tune(X_fit, y_fit):
            clf = PotabilityClassifier(
                ExecutionContext(random_state=4),
                algorithms=["decision_tree"],
                param_grid={"decision_tree": {"max_depth": [2, 3, 5], "min_samples_leaf": [5, 30]}},
                cv_splits=3,
            )
            clf.train(X_fit, y_fit)
            return clf.results[0].best

        # Act
        original = tune(X_train, y_train)
        after = tune(X_train_t, y_train_t)

        # Assert
        with check:
            assert X_train_t.equals(X_train)
        with check:
            assert original.params == after.params
        with check:
            assert original.mean("roc_auc") == after.mean("roc_auc")

    def test_classifier_refuses_to_evaluate_before_training(self, split) -> None:
        _, X_test, _, y_test = split
        clf = PotabilityClassifier(ExecutionContext(random_state=0), algorithms=["logistic_regression"], cv_splits=3)
        with pytest.raises(RuntimeError):
            clf.evaluate(X_test, y_test)
