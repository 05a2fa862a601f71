from pathlib import Path
from typing import List

from runtime_regression.models.measurement import MeasurementRecord


class ResultParser:
    def parse(self, path: Path) -> List[MeasurementRecord]:
        raise NotImplementedError("Subclasses should implement this method.")
