"""Tests for loading and validating the YAML configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pytest_check import check

from potability.configuration import AppSettings, ConfigurationManager
from potability.configuration.configuration_manager import DEFAULT_CONFIG_PATH
from potability.modeling.utils.exceptions import ConfigurationError

REPO_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "config.yaml"


def _write(tmp_path: Path, cfg: dict) -> Path:
    path = tmp_path / "config.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(cfg, f)
    return path


class TestLoad:
    def test_repository_config_parses(self) -> None:
        # Act
        settings = ConfigurationManager.load(config_path=REPO_CONFIG)

        # Assert
        with check:
            assert isinstance(settings, AppSettings)
        with check:
            assert settings.data.train_fraction == 0.75
        with check:
            assert settings.tuning.cv_splits == 10
        with check:
            assert settings.model.algorithms == ["logistic_regression", "decision_tree", "gradient_boosting"]
        with check:
            assert settings.model.params["logistic_regression"] == {}
        with check:
            assert settings.report.min_auc == 0.5

    def test_default_path_points_at_repository_config(self) -> None:
        assert DEFAULT_CONFIG_PATH == REPO_CONFIG

    def test_nested_overrides_are_merged(self) -> None:
        settings = ConfigurationManager.load(
            config_path=REPO_CONFIG,
            overrides={"tuning": {"cv_splits": 5}, "random_state": 3},
        )
        with check:
            assert settings.tuning.cv_splits == 5
        with check:
            assert settings.tuning.metric == "roc_auc"
        with check:
            assert settings.random_state == 3

    def test_loaded_settings_are_cached(self) -> None:
        first = ConfigurationManager.load(config_path=REPO_CONFIG)
        assert ConfigurationManager.load() is first

    def test_missing_sections_take_defaults(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"data": {"raw_file": "x.csv"}, "model": {"algorithms": ["decision_tree"]}})
        settings = ConfigurationManager.load(config_path=path)
        with check:
            assert settings.random_state == 42
        with check:
            assert settings.imputation.n_neighbors == 5
        with check:
            assert settings.report.make_plots is True


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"data": {"train_fraction": 1.0}},
            {"data": {"train_fraction": 0}},
            {"data": {"shuffle": True}},
            {"tuning": {"cv_splits": 1}},
            {"imputation": {"n_neighbors": 0}},
            {"model": {"algorithms": []}},
            {"random_state": "seed"},
        ],
    )
    def test_invalid_values_are_rejected(self, overrides) -> None:
        with pytest.raises(ConfigurationError):
            ConfigurationManager.load(config_path=REPO_CONFIG, overrides=overrides)
