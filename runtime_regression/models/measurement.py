"""Measurement data models."""

from dataclasses import dataclass, field
from typing import Dict, Iterable

from runtime_regression.consts.Defaults import IDENTIFIER_SEPARATOR

# identifier -> milliseconds per operation
ResultSet = Dict[str, float]


def make_identifier(benchmark: str, values: Iterable[str]) -> str:
    """Benchmark name followed by each parameter value, ':' separated."""
    return benchmark + "".join(IDENTIFIER_SEPARATOR + str(v) for v in values)


@dataclass
class MeasurementRecord:
    """
    A single named measurement taken from a result artifact.

    ``parameters`` keeps the column order of the artifact, which is also the
    order the values appear in the identifier.
    """
    benchmark: str
    ms_per_op: float
    parameters: Dict[str, str] = field(default_factory=dict)

    @property
    def identifier(self) -> str:
        return make_identifier(self.benchmark, self.parameters.values())

    def __str__(self):
        return f"MeasurementRecord({self.identifier}={self.ms_per_op:.6f} ms/op)"
