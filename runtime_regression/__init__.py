"""Runtime regression detection for micro-benchmark results."""

__version__ = "0.1.0"
