"""Model families, tuning, selection, evaluation and comparison."""

from .comparison import metrics_table, rank_models, render_comparison  # noqa: F401
from .evaluation import EvaluationResult, finalize_and_evaluate  # noqa: F401
from .metrics import METRICS, MetricRecord  # noqa: F401
from .pipeline import FittedPipeline, PipelineTemplate  # noqa: F401
from .potability_classifier import FamilyResult, PotabilityClassifier  # noqa: F401
from .search_space import FAMILIES, ModelFamily, get_family  # noqa: F401
from .selection import select_best  # noqa: F401
from .tuner import ExecutionContext, Tuner, TuningReport, TuningResult  # noqa: F401
