"""
Configuration manager for regression runs.

This module provides the ConfigLoader class for loading and validating
regression configuration from YAML files.
"""
from dataclasses import fields
from pathlib import Path
from typing import Optional

import yaml

from runtime_regression.config.regression_config import RegressionConfig
from runtime_regression.errors import ConfigError
from runtime_regression.util.log_config import setup_logger

logger = setup_logger(__name__)

CONFIG_FILE = "config.yaml"


class ConfigLoader:

    def __init__(self, config_path: Path, env: Optional[str] = None):
        self.config_path = Path(config_path)
        self.env = env
        self.config_data = self._load_config()

    def _read_yaml(self, path: Path) -> dict:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")
        return data

    def _load_config(self) -> RegressionConfig:
        """
        Load and parse regression configuration from YAML file.
        Supports environment-specific overrides via config_<env>.yaml

        Returns:
            RegressionConfig: Configured regression configuration instance
        """
        data = self._read_yaml(self.config_path / CONFIG_FILE)

        if self.env:
            env_data = self._read_yaml(self.config_path / f"config_{self.env}.yaml")
            # dict.update() will overwrite existing keys
            data.update(env_data)

        known = {f.name for f in fields(RegressionConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        config = RegressionConfig(**{k: v for k, v in data.items() if k in known})
        self.validate(config)
        return config

    @staticmethod
    def validate(config: RegressionConfig) -> None:
        if config.tolerance < 0:
            raise ConfigError(f"tolerance must be non-negative, got {config.tolerance}")
        if config.max_iterations < 1:
            raise ConfigError(f"max_iterations must be at least 1, got {config.max_iterations}")
        if config.timeout_min <= 0:
            raise ConfigError(f"timeout_min must be positive, got {config.timeout_min}")


def default_config_path() -> Path:
    return Path(__file__).resolve().parent.parent / "config_yaml"
