"""Water potability classification: imputation, tuning and model comparison."""

__version__ = "0.1.0"
