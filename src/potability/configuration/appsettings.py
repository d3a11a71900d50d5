"""Settings sections of ``configs/config.yaml``.

One dataclass per YAML section: ``data`` (CSV location and train
fraction), ``imputation`` (k-NN settings), ``tuning`` (folds, metrics
and worker count), ``model`` (families, candidate grids and search
strategy) and ``report`` (artifact directory, AUC floor, plotting).
Range checks live in :func:`configuration_manager.validate_settings`;
hyperparameter domains are checked when the model families are built.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class DataSettings:
    raw_file: str
    train_fraction: float = 0.75


@dataclass
class ImputationSettings:
    n_neighbors: int = 5
    weights: str = "uniform"


@dataclass
class TuningSettings:
    cv_splits: int = 10
    metric: str = "roc_auc"
    metrics: List[str] = field(default_factory=lambda: ["roc_auc", "accuracy"])
    n_jobs: int = -1


@dataclass
class ModelSettings:
    algorithms: List[str] = field(default_factory=list)
    params: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    search: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass
class ReportSettings:
    artifacts_dir: str = "artifacts"
    min_auc: Optional[float] = 0.5
    make_plots: bool = True


@dataclass
class AppSettings:
    random_state: int
    data: DataSettings
    imputation: ImputationSettings
    tuning: TuningSettings
    model: ModelSettings
    report: ReportSettings
