"""Test doubles shared by the regression tests."""

import csv
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from runtime_regression.errors import MeasurementEngineError
from runtime_regression.service.notification.notifier import Notifier
from runtime_regression.service.runner.runner import MeasurementEngine

JMH_HEADER = ["Benchmark", "Mode", "Threads", "Samples", "Score", "Score Error (99.9%)", "Unit"]


def write_jmh_csv(path: Path, rows: Iterable[dict], param_names: Optional[List[str]] = None) -> Path:
    """Write a JMH style CSV. Each row: name, score, optional unit and params."""
    param_names = param_names or []
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_NONNUMERIC)
        writer.writerow(JMH_HEADER + [f"Param: {p}" for p in param_names])
        for row in rows:
            params = row.get("params", {})
            writer.writerow(
                [row["name"], "avgt", 1, 3, row["score"], 0.5, row.get("unit", "ms/op")]
                + [params.get(p, "") for p in param_names]
            )
    return path


class ScriptedEngine(MeasurementEngine):
    """Returns pre-recorded scores, in ms/op, one per call for each benchmark."""

    def __init__(self, output_dir: Path, scores: Dict[str, List[float]], rows_per_call: int = 1):
        super().__init__(output_dir)
        self.scores = {name: list(values) for name, values in scores.items()}
        self.rows_per_call = rows_per_call
        self.calls: List[tuple] = []

    def measure(self, benchmark_name: str, exact: bool, timeout_min: float) -> Path:
        self.calls.append((benchmark_name, exact, timeout_min))
        remaining = self.scores.get(benchmark_name)
        if not remaining:
            raise MeasurementEngineError(benchmark_name, "no scripted score left")
        score = remaining.pop(0)
        rows = [{"name": benchmark_name, "score": score}] * self.rows_per_call
        return write_jmh_csv(self.artifact_path(benchmark_name), rows)

    def call_names(self) -> List[str]:
        return [name for name, _, _ in self.calls]


class RecordingNotifier(Notifier):
    def __init__(self):
        self.sent = []

    def send(self, subject: str, text: str) -> None:
        self.sent.append((subject, text))
