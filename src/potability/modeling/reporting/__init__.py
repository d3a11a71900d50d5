"""Plots for the exploratory analysis and the model comparison."""

from .plots import (  # noqa: F401
    plot_class_balance,
    plot_correlation_matrix,
    plot_feature_distributions,
    plot_missing_values,
    plot_model_comparison,
    plot_roc_curves,
)
