"""Typed settings loaded from ``configs/config.yaml``."""

from .appsettings import AppSettings  # noqa: F401
from .configuration_manager import ConfigurationManager  # noqa: F401
