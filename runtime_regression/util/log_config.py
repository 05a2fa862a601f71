"""
Logging configuration for the runtime regression system.

Provides centralized logging setup with clean, concise terminal output.
Every module logger is a child of the ``runtime_regression`` package logger,
so a handler attached there sees the whole run.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "runtime_regression"

FILE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _package_logger(level: int) -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if not getattr(root, "_console_configured", False):
        root.setLevel(level)

        # Console handler with clean formatting
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        # Clean format: [LEVEL] message
        console_handler.setFormatter(logging.Formatter(fmt='[%(levelname)s] %(message)s'))
        root.addHandler(console_handler)

        # Prevent propagation to root logger
        root.propagate = False
        root._console_configured = True
    return root


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: INFO)
        log_file: Optional file path for log output

    Returns:
        Configured logger instance
    """
    _package_logger(level)

    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    logger = logging.getLogger(name)

    if log_file:
        logger.addHandler(create_file_handler(log_file))

    return logger


def create_file_handler(log_file: Path, mode: str = 'a') -> logging.FileHandler:
    """Detailed file handler, used for run logs kept for postmortem."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, mode=mode, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    return file_handler


def attach_run_log(log_file: Path) -> logging.FileHandler:
    handler = create_file_handler(log_file, mode='w')
    logging.getLogger(PACKAGE_LOGGER).addHandler(handler)
    return handler


def detach_run_log(handler: logging.Handler) -> None:
    logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
    handler.flush()
    handler.close()
