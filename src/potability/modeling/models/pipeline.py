"""Preprocessing + estimator pipelines.

A :class:`PipelineTemplate` pairs a model family with the shared
preprocessing settings.  It produces unfitted scikit-learn pipelines
(``scaler -> imputer -> model``) for a given hyperparameter
configuration and fits them into immutable :class:`FittedPipeline`
objects.  Every fittable step is fitted only on the rows passed to
:meth:`PipelineTemplate.fit`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import numpy as np
from sklearn.pipeline import Pipeline

from ..data.preprocess import build_preprocessing_steps
from .search_space import ModelFamily


@dataclass(frozen=True)
class PipelineTemplate:
    family: ModelFamily
    random_state: int
    n_neighbors: int = 5
    weights: str = "uniform"

    @property
    def name(self) -> str:
        return self.family.name

    def build(self, configuration: Optional[Mapping[str, Any]] = None) -> Pipeline:
        """Return an unfitted pipeline; raises ``ConfigurationError`` on bad values."""
        estimator = self.family.build_estimator(self.random_state, configuration or {})
        steps = build_preprocessing_steps(n_neighbors=self.n_neighbors, weights=self.weights)
        return Pipeline(steps + [("model", estimator)])

    def fit(self, X, y, configuration: Optional[Mapping[str, Any]] = None) -> "FittedPipeline":
        pipeline = self.build(configuration)
        pipeline.fit(X, np.asarray(y))
        return FittedPipeline(
            family=self.family.name,
            configuration=dict(configuration or {}),
            pipeline=pipeline,
        )


@dataclass(frozen=True)
class FittedPipeline:
    family: str
    configuration: Dict[str, Any] = field(default_factory=dict)
    pipeline: Optional[Pipeline] = None

    def predict(self, X) -> np.ndarray:
        return self.pipeline.predict(X)

    def predict_proba(self, X) -> np.ndarray:
        """Return the probability of the positive (``potable``) class."""
        positive = list(self.pipeline[-1].classes_).index(1)
        return self.pipeline.predict_proba(X)[:, positive]
