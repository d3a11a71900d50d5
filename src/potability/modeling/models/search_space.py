"""Model families and their hyperparameter domains.

Each supported algorithm is described by a :class:`ModelFamily`: a
factory for the unfitted scikit-learn estimator, the declared domain of
every parameter that may be tuned, a default candidate grid and the
search strategy used to explore it.  Configurations are validated
against the declared domains before anything is fitted, so an invalid
value such as ``max_depth=0`` surfaces as a :class:`ConfigurationError`
rather than as an exception half-way through a search.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.ensemble import GradientBoostingClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.tree import DecisionTreeClassifier

from ..utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class IntegerDomain:
    low: int
    high: Optional[int] = None
    allow_none: bool = False

    def contains(self, value: Any) -> bool:
        if value is None:
            return self.allow_none
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            return False
        return value >= self.low and (self.high is None or value <= self.high)

    def describe(self) -> str:
        upper = "inf" if self.high is None else str(self.high)
        suffix = " or None" if self.allow_none else ""
        return f"integer in [{self.low}, {upper}]{suffix}"


@dataclass(frozen=True)
class RealDomain:
    low: float
    high: Optional[float] = None
    low_inclusive: bool = True
    high_inclusive: bool = True

    def contains(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
            return False
        if np.isnan(value):
            return False
        above = value >= self.low if self.low_inclusive else value > self.low
        if self.high is None:
            return above
        below = value <= self.high if self.high_inclusive else value < self.high
        return above and below

    def describe(self) -> str:
        left = "[" if self.low_inclusive else "("
        right = "]" if self.high_inclusive else ")"
        upper = "inf" if self.high is None else str(self.high)
        return f"real in {left}{self.low}, {upper}{right}"


@dataclass(frozen=True)
class CategoricalDomain:
    choices: Tuple[Any, ...]

    def contains(self, value: Any) -> bool:
        return value in self.choices

    def describe(self) -> str:
        return f"one of {list(self.choices)}"


Domain = Union[IntegerDomain, RealDomain, CategoricalDomain]


@dataclass(frozen=True)
class ModelFamily:
    """A trainable estimator together with its tunable parameter space.

    Parameters
    ----------
    name: str
        Configuration key, e.g. ``"decision_tree"``.
    label: str
        Human readable name used in reports.
    factory: callable
        Returns an unfitted estimator for a given random seed.
    domains: mapping
        Valid domain of every parameter that may appear in a configuration.
    default_grid: mapping
        Candidate values explored when the YAML file gives none.
    strategy: {"grid", "random"}
        Exhaustive grid search or a bounded random sample of ``n_iter``
        configurations.
    """

    name: str
    label: str
    factory: Callable[[int], BaseEstimator]
    domains: Mapping[str, Domain]
    default_grid: Mapping[str, List[Any]] = field(default_factory=dict)
    strategy: str = "grid"
    n_iter: Optional[int] = None

    def validate(self, configuration: Mapping[str, Any]) -> Dict[str, Any]:
        """Return ``configuration`` as a dict if every value is in its domain."""
        for key, value in configuration.items():
            domain = self.domains.get(key)
            if domain is None:
                raise ConfigurationError(
                    f"Unknown hyperparameter '{key}' for {self.name}; "
                    f"expected one of {sorted(self.domains)}"
                )
            if not domain.contains(value):
                raise ConfigurationError(
                    f"Invalid value {value!r} for {self.name}.{key}: expected {domain.describe()}"
                )
        return dict(configuration)

    def validate_grid(self, grid: Mapping[str, List[Any]]) -> Dict[str, List[Any]]:
        """Validate every candidate value of a search grid."""
        checked: Dict[str, List[Any]] = {}
        for key, values in grid.items():
            if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
                values = [values]
            values = list(values)
            if not values:
                raise ConfigurationError(f"Empty candidate list for {self.name}.{key}")
            for value in values:
                self.validate({key: value})
            checked[key] = values
        return checked

    def build_estimator(self, random_state: int, configuration: Mapping[str, Any]) -> BaseEstimator:
        estimator = self.factory(random_state)
        return estimator.set_params(**self.validate(configuration))


def _logistic_regression(random_state: int) -> BaseEstimator:
    return LogisticRegression(max_iter=1000, random_state=random_state)


def _decision_tree(random_state: int) -> BaseEstimator:
    return DecisionTreeClassifier(random_state=random_state)


def _gradient_boosting(random_state: int) -> BaseEstimator:
    return GradientBoostingClassifier(random_state=random_state)


_CLASS_WEIGHT = CategoricalDomain((None, "balanced"))

FAMILIES: Dict[str, ModelFamily] = {
    "logistic_regression": ModelFamily(
        name="logistic_regression",
        label="Logistic Regression",
        factory=_logistic_regression,
        domains={
            "C": RealDomain(0.0, low_inclusive=False),
            "class_weight": _CLASS_WEIGHT,
            "max_iter": IntegerDomain(1),
        },
    ),
    "decision_tree": ModelFamily(
        name="decision_tree",
        label="Decision Tree",
        factory=_decision_tree,
        domains={
            "max_depth": IntegerDomain(1, allow_none=True),
            "min_samples_leaf": IntegerDomain(1),
            "min_samples_split": IntegerDomain(2),
            "ccp_alpha": RealDomain(0.0),
            "criterion": CategoricalDomain(("gini", "entropy", "log_loss")),
            "class_weight": _CLASS_WEIGHT,
        },
        default_grid={
            "max_depth": [2, 4, 6, 8, 10],
            "min_samples_leaf": [1, 10, 40],
            "ccp_alpha": [0.0, 0.001, 0.01],
        },
        strategy="grid",
    ),
    "gradient_boosting": ModelFamily(
        name="gradient_boosting",
        label="Gradient Boosting",
        factory=_gradient_boosting,
        domains={
            "n_estimators": IntegerDomain(1),
            "learning_rate": RealDomain(0.0, 1.0, low_inclusive=False),
            "max_depth": IntegerDomain(1),
            "min_samples_leaf": IntegerDomain(1),
            "subsample": RealDomain(0.0, 1.0, low_inclusive=False),
        },
        default_grid={
            "n_estimators": [100, 200, 500],
            "learning_rate": [0.01, 0.05, 0.1, 0.2],
            "max_depth": [2, 3, 5],
            "min_samples_leaf": [1, 10, 30],
            "subsample": [0.7, 1.0],
        },
        strategy="random",
        n_iter=10,
    ),
}


def get_family(name: str) -> ModelFamily:
    """Return the :class:`ModelFamily` registered under ``name``."""
    key = name.lower()
    # short aliases
    key = {"dt": "decision_tree", "logreg": "logistic_regression"}.get(key, key)
    family = FAMILIES.get(key)
    if family is None:
        raise ConfigurationError(f"Unsupported algorithm: {name}")
    return family
