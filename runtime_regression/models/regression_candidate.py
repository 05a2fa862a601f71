import math
from dataclasses import dataclass

from runtime_regression.util.cal_utils import relative_delta


@dataclass
class RegressionCandidate:
    """
    A flagged measurement being re-run by the minimum finder.

    ``best_found_ms`` starts unbounded, so a candidate is only ever accepted
    on the strength of an actual re-measurement.
    """
    identifier: str
    target_ms: float
    best_found_ms: float = math.inf

    def record(self, duration_ms: float) -> float:
        """Fold a new measurement into the running minimum and return its delta to the target."""
        self.best_found_ms = min(self.best_found_ms, duration_ms)
        return relative_delta(duration_ms, self.target_ms)

    @property
    def best_delta(self) -> float:
        return relative_delta(self.best_found_ms, self.target_ms)
