"""Shared test fixtures for the runtime regression test suite."""

import logging
from pathlib import Path

import pytest

from runtime_regression.config.regression_config import RegressionConfig


@pytest.fixture
def results_path(tmp_path: Path) -> Path:
    path = tmp_path / "runtime_regression"
    path.mkdir()
    return path


@pytest.fixture
def config(results_path: Path) -> RegressionConfig:
    """Small, deterministic configuration."""
    return RegressionConfig(
        tolerance=0.4,
        max_iterations=3,
        timeout_min=1,
        results_path=str(results_path),
        randomized_order=False,
    )


@pytest.fixture
def audit_logger() -> logging.Logger:
    """A logger that propagates to the root so caplog sees it."""
    return logging.getLogger("tests.minimum_finder")
