"""Load application configuration from a YAML file.

This configuration manager reads the YAML file located in the
``configs/`` directory and returns an ``AppSettings`` instance composed
of nested dataclasses.  Values that can be checked without touching
the data (fractions, fold counts, neighbour counts) are validated here;
hyperparameter domains are validated when the model families are
built.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..modeling.utils.exceptions import ConfigurationError
from .appsettings import (
    AppSettings,
    DataSettings,
    ImputationSettings,
    ModelSettings,
    ReportSettings,
    TuningSettings,
)


# The project root is three levels above this file
# (src/potability/configuration -> src/potability -> src -> project root)
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "configs" / "config.yaml"


class ConfigurationManager:
    """Singleton loader for application settings."""

    _settings: Optional[AppSettings] = None

    @classmethod
    def load(
        cls,
        reload: bool = False,
        config_path: Optional[str | Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> AppSettings:
        """Load the configuration from YAML.

        Parameters
        ----------
        reload: bool, optional
            Force reloading the configuration from disk even if it was
            previously loaded.
        config_path: str or Path, optional
            Path to the YAML configuration file.  If not provided, the
            default location ``<project_root>/configs/config.yaml`` is used.
        overrides: dict, optional
            Key–value pairs to override values loaded from YAML.  Only
            top‑level keys in ``AppSettings`` are supported; a nested
            mapping is merged into the corresponding section.

        Returns
        -------
        AppSettings
            Parsed configuration object.

        Raises
        ------
        ConfigurationError
            If the file holds unknown keys or out-of-range values.
        """
        if cls._settings is None or reload or config_path is not None or overrides:
            cfg_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
            with open(cfg_path, "r", encoding="utf-8") as f:
                cfg_dict: Dict[str, Any] = yaml.safe_load(f) or {}
            # Apply overrides to the root dictionary
            for key, value in (overrides or {}).items():
                if isinstance(value, dict) and isinstance(cfg_dict.get(key), dict):
                    cfg_dict[key] = {**cfg_dict[key], **value}
                else:
                    cfg_dict[key] = value
            cls._settings = cls.from_dict(cfg_dict)
        return cls._settings

    @staticmethod
    def from_dict(cfg_dict: Dict[str, Any]) -> AppSettings:
        model_cfg = cfg_dict.get("model", {}) or {}
        try:
            settings = AppSettings(
                random_state=cfg_dict.get("random_state", 42),
                data=DataSettings(**(cfg_dict.get("data", {}) or {})),
                imputation=ImputationSettings(**(cfg_dict.get("imputation", {}) or {})),
                tuning=TuningSettings(**(cfg_dict.get("tuning", {}) or {})),
                model=ModelSettings(
                    algorithms=model_cfg.get("algorithms", []),
                    params=model_cfg.get("params", {}) or {},
                    search=model_cfg.get("search", {}) or {},
                ),
                report=ReportSettings(**(cfg_dict.get("report", {}) or {})),
            )
        except TypeError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc
        validate_settings(settings)
        return settings


def validate_settings(settings: AppSettings) -> None:
    if not isinstance(settings.random_state, int):
        raise ConfigurationError(f"random_state must be an integer, got {settings.random_state!r}")
    if not 0.0 < settings.data.train_fraction < 1.0:
        raise ConfigurationError(
            f"data.train_fraction must lie in (0, 1), got {settings.data.train_fraction}"
        )
    if settings.tuning.cv_splits < 2:
        raise ConfigurationError(f"tuning.cv_splits must be >= 2, got {settings.tuning.cv_splits}")
    if settings.imputation.n_neighbors < 1:
        raise ConfigurationError(
            f"imputation.n_neighbors must be >= 1, got {settings.imputation.n_neighbors}"
        )
    if not settings.model.algorithms:
        raise ConfigurationError("model.algorithms must name at least one algorithm")
