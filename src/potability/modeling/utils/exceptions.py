"""Exception types raised by the potability workflow.

Data and configuration problems are fatal and abort the run.  They derive
from ``ValueError`` so that callers catching the broad built-in type keep
working, but the tuner treats anything deriving from ``PotabilityError``
as fatal rather than as a per-configuration fit failure.
"""


class PotabilityError(Exception):
    """Base class for all errors raised by this package."""


class DataValidationError(PotabilityError, ValueError):
    """The dataset violates the expected schema or label contract."""


class ConfigurationError(PotabilityError, ValueError):
    """A setting or hyperparameter lies outside its valid domain."""


class ModelSelectionError(PotabilityError, RuntimeError):
    """No configuration of a model family could be ranked."""
