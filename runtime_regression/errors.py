"""Error hierarchy for the runtime regression system."""


class RegressionError(Exception):
    """Base for all runtime regression errors."""

    pass


class ConfigError(RegressionError):
    """Configuration file missing or invalid."""

    pass


class ResultParseError(RegressionError):
    """A measurement artifact could not be parsed."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class MeasurementEngineError(RegressionError):
    """The benchmark harness failed or timed out while measuring."""

    def __init__(self, benchmark_name: str, reason: str):
        self.benchmark_name = benchmark_name
        self.reason = reason
        super().__init__(f"Measurement of {benchmark_name} failed: {reason}")


class IntegrationFaultError(RegressionError):
    """An exact-match measurement did not produce exactly one result."""

    def __init__(self, benchmark_name: str, count: int):
        self.benchmark_name = benchmark_name
        self.count = count
        super().__init__(f"Expected only one result for {benchmark_name} not {count}")
