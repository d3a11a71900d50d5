"""Shared helpers: logging and exception types."""

from .exceptions import (  # noqa: F401
    ConfigurationError,
    DataValidationError,
    ModelSelectionError,
    PotabilityError,
)
from .logging_utils import logger, set_log_level  # noqa: F401
