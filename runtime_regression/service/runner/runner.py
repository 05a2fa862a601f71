from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from runtime_regression.models.measurement import MeasurementRecord


class MeasurementEngine(ABC):
    """Abstract benchmark harness.

    Subclasses run one benchmark, or every benchmark matching a pattern, and
    return the location of the result artifact they wrote.
    """

    def __init__(self, output_dir: Path, records: Optional[Dict[str, MeasurementRecord]] = None) -> None:
        self.output_dir = Path(output_dir)
        # identifier -> record of a previous run, lets exact runs pin parameters
        self.records = records or {}

    def set_output_dir(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def set_records(self, records: Dict[str, MeasurementRecord]) -> None:
        self.records = records

    @abstractmethod
    def measure(self, benchmark_name: str, exact: bool, timeout_min: float) -> Path:
        """
        Run the benchmark and return the path of its result artifact.

        Args:
            benchmark_name: Benchmark name, or measurement identifier in exact mode
            exact: If true only the benchmark matching the name exactly is run
            timeout_min: Per benchmark timeout in minutes

        Raises:
            MeasurementEngineError: if the harness fails or times out
        """
        pass

    def artifact_path(self, benchmark_name: str) -> Path:
        return self.output_dir / f"{benchmark_name}.csv"
