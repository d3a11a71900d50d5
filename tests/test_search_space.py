"""Tests for model families, hyperparameter domains and pipeline templates."""

from __future__ import annotations

import numpy as np
import pytest
from pytest_check import check
from sklearn.pipeline import Pipeline

from potability.modeling.data import clean_water_data, split_features_target
from potability.modeling.models import FAMILIES, PipelineTemplate, get_family
from potability.modeling.models.search_space import CategoricalDomain, IntegerDomain, RealDomain
from potability.modeling.utils.exceptions import ConfigurationError


class TestDomains:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(1, True), (10, True), (np.int64(3), True), (0, False), (-2, False), (1.5, False), (True, False), (None, False)],
    )
    def test_integer_domain(self, value, expected: bool) -> None:
        assert IntegerDomain(1).contains(value) is expected

    def test_integer_domain_accepts_none_when_allowed(self) -> None:
        assert IntegerDomain(1, allow_none=True).contains(None)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.0, False), (1e-6, True), (0.5, True), (1.0, True), (1.01, False), (float("nan"), False), ("0.1", False)],
    )
    def test_learning_rate_domain_is_half_open(self, value, expected: bool) -> None:
        assert RealDomain(0.0, 1.0, low_inclusive=False).contains(value) is expected

    def test_categorical_domain(self) -> None:
        domain = CategoricalDomain((None, "balanced"))
        with check:
            assert domain.contains("balanced")
        with check:
            assert not domain.contains("weighted")


class TestModelFamily:
    def test_three_families_are_registered(self) -> None:
        assert set(FAMILIES) == {"logistic_regression", "decision_tree", "gradient_boosting"}

    def test_logistic_regression_has_nothing_to_tune(self) -> None:
        assert dict(get_family("logistic_regression").default_grid) == {}

    def test_alias_and_case_are_resolved(self) -> None:
        with check:
            assert get_family("DT").name == "decision_tree"
        with check:
            assert get_family("Gradient_Boosting").name == "gradient_boosting"

    def test_unknown_family_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported algorithm"):
            get_family("random_forest")

    @pytest.mark.parametrize(
        ("family", "config"),
        [
            ("decision_tree", {"max_depth": 0}),
            ("decision_tree", {"max_depth": -3}),
            ("decision_tree", {"min_samples_leaf": 0}),
            ("gradient_boosting", {"n_estimators": 0}),
            ("gradient_boosting", {"learning_rate": 0.0}),
            ("gradient_boosting", {"learning_rate": 1.5}),
            ("logistic_regression", {"C": 0.0}),
        ],
    )
    def test_out_of_domain_values_are_rejected(self, family: str, config) -> None:
        with pytest.raises(ConfigurationError, match="Invalid value"):
            get_family(family).validate(config)

    def test_unknown_parameter_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown hyperparameter"):
            get_family("decision_tree").validate({"n_estimators": 10})

    def test_validate_grid_checks_every_candidate(self) -> None:
        family = get_family("decision_tree")
        with pytest.raises(ConfigurationError):
            family.validate_grid({"max_depth": [3, 5, 0]})

    def test_validate_grid_wraps_scalars_and_rejects_empty_lists(self) -> None:
        family = get_family("decision_tree")
        with check:
            assert family.validate_grid({"max_depth": 3}) == {"max_depth": [3]}
        with check:
            with pytest.raises(ConfigurationError, match="Empty"):
                family.validate_grid({"max_depth": []})

    def test_default_grids_are_valid(self) -> None:
        for family in FAMILIES.values():
            family.validate_grid(family.default_grid)


class TestPipelineTemplate:
    def test_build_orders_scaler_imputer_model(self) -> None:
        # Arrange
        template = PipelineTemplate(get_family("decision_tree"), random_state=0, n_neighbors=3)

        # Act
        pipeline = template.build({"max_depth": 3})

        # Assert
        with check:
            assert isinstance(pipeline, Pipeline)
        with check:
            assert [name for name, _ in pipeline.steps] == ["scaler", "imputer", "model"]
        with check:
            assert pipeline.named_steps["model"].max_depth == 3
        with check:
            assert pipeline.named_steps["model"].random_state == 0
        with check:
            assert pipeline.named_steps["imputer"].n_neighbors == 3

    def test_build_with_tree_depth_zero_is_rejected_before_fitting(self) -> None:
        template = PipelineTemplate(get_family("decision_tree"), random_state=0)
        with pytest.raises(ConfigurationError):
            template.build({"max_depth": 0})

    def test_fit_returns_new_fitted_pipeline_each_time(self, small_frame) -> None:
        # Arrange
        X, y = split_features_target(clean_water_data(small_frame))
        template = PipelineTemplate(get_family("logistic_regression"), random_state=0)

        # Act
        first = template.fit(X, y)
        second = template.fit(X, y)

        # Assert
        proba = first.predict_proba(X)
        with check:
            assert first is not second and first.pipeline is not second.pipeline
        with check:
            assert proba.shape == (len(X),)
        with check:
            assert ((proba >= 0) & (proba <= 1)).all()
        with check:
            assert set(np.unique(first.predict(X))) <= {0, 1}

    def test_predict_proba_is_the_potable_column(self, small_frame) -> None:
        X, y = split_features_target(clean_water_data(small_frame))
        fitted = PipelineTemplate(get_family("decision_tree"), random_state=0).fit(X, y, {"max_depth": 3})
        np.testing.assert_array_equal(fitted.predict_proba(X), fitted.pipeline.predict_proba(X)[:, 1])
