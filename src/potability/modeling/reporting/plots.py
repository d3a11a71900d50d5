"""Static visualisations of the dataset and the model comparison.

Every function writes a PNG and returns its path.  The figures are
meant for people: callers treat plotting as best effort and log a
warning if a figure cannot be produced.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import matplotlib

matplotlib.use("Agg")  # Use a non-interactive backend for image generation
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from ..models.evaluation import EvaluationResult


def _save(fig, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return path


def plot_class_balance(outcome: pd.Series, path: Path) -> Path:
    """Bar chart of how many samples are potable vs not potable."""
    counts = outcome.value_counts().sort_index()
    fig, ax = plt.subplots(figsize=(5, 4))
    sns.barplot(
        x=counts.index.astype(str),
        y=counts.values,
        hue=counts.index.astype(str),
        legend=False,
        palette="Set2",
        ax=ax,
    )
    for i, value in enumerate(counts.values):
        ax.annotate(f"{value} ({value / counts.sum():.0%})", (i, value), ha="center", va="bottom")
    ax.set_title("Class balance")
    ax.set_xlabel("Outcome")
    ax.set_ylabel("Samples")
    return _save(fig, path)


def plot_missing_values(X: pd.DataFrame, path: Path) -> Path:
    share = X.isna().mean().sort_values(ascending=False)
    fig, ax = plt.subplots(figsize=(8, 4))
    sns.barplot(x=share.index, y=share.values, color="steelblue", ax=ax)
    ax.set_title("Share of missing values per feature")
    ax.set_ylabel("Missing fraction")
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right")
    return _save(fig, path)


def plot_feature_distributions(X: pd.DataFrame, outcome: pd.Series, out_dir: Path) -> List[Path]:
    """Plot histograms for each numeric feature separated by outcome."""
    paths = []
    for col in X.columns:
        fig, ax = plt.subplots(figsize=(8, 4))
        tmp_df = pd.DataFrame({col: X[col].to_numpy(), "outcome": outcome.astype(str).to_numpy()})
        sns.histplot(
            data=tmp_df,
            x=col,
            hue="outcome",
            kde=True,
            stat="density",
            common_norm=False,
            palette="Set2",
            ax=ax,
        )
        ax.set_title(f"Distribution of {col} by outcome")
        paths.append(_save(fig, Path(out_dir) / f"hist_{col}.png"))
    return paths


def plot_correlation_matrix(X: pd.DataFrame, path: Path) -> Path:
    corr = X.corr()
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.heatmap(corr, annot=True, cmap="coolwarm", fmt=".2f", vmin=-1, vmax=1, center=0, ax=ax)
    ax.set_title("Correlation matrix of features (training set)")
    return _save(fig, path)


def plot_roc_curves(evaluations: Iterable[EvaluationResult], path: Path) -> Path:
    """Overlay the test-set ROC curve of every evaluated family."""
    fig, ax = plt.subplots(figsize=(6, 6))
    for ev in evaluations:
        if not ev.roc_points:
            continue
        ax.plot(
            ev.roc_points["fpr"],
            ev.roc_points["tpr"],
            label=f"{ev.label} (AUC={ev.metric('roc_auc'):.3f})",
        )
    ax.plot([0, 1], [0, 1], linestyle="--", color="grey", linewidth=1)
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.set_title("ROC curves on the test split")
    ax.legend(loc="lower right")
    return _save(fig, path)


def plot_model_comparison(ranking: pd.DataFrame, path: Path, metric: str = "roc_auc") -> Path:
    """Bar chart of the ranked families."""
    fig, ax = plt.subplots(figsize=(8, 5))
    sns.barplot(
        x="label",
        y=metric,
        data=ranking,
        hue="label",
        dodge=False,
        legend=False,
        palette="viridis",
        ax=ax,
    )
    ax.set_title(f"Test {metric} by model")
    ax.set_ylabel(metric)
    ax.set_xlabel("Model")
    ax.set_ylim(0, 1)
    plt.setp(ax.get_xticklabels(), rotation=30, ha="right")
    return _save(fig, path)
