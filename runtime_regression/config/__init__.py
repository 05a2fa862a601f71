"""Configuration module for regression runs."""

from .regression_config import RegressionConfig
from .config_loader import ConfigLoader

__all__ = ["RegressionConfig", "ConfigLoader"]
