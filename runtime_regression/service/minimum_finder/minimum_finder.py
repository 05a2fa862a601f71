"""
Re-runs flagged benchmarks to weed out false positives.

A benchmark flagged as a regression may have just been unlucky: a noisy
neighbour, thermal throttling, a GC at the wrong time. MinimumFinder runs
each flagged benchmark again, one at a time, for up to ``max_iterations``
rounds. A benchmark is accepted as soon as a single run comes back within
tolerance of its baseline. Whatever is left after the last round is a
confirmed regression, reported with the best time ever seen for it.
"""
import logging
from typing import Dict, List, Optional, Set

from runtime_regression.consts.Defaults import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TIMEOUT_MIN,
    DEFAULT_TOLERANCE,
)
from runtime_regression.errors import IntegrationFaultError
from runtime_regression.models.regression_candidate import RegressionCandidate
from runtime_regression.service.reporting.report_writer import ReportWriter
from runtime_regression.service.result_parser.jmh_csv_parser import JmhCsvParser
from runtime_regression.service.result_parser.result_parser import ResultParser
from runtime_regression.service.runner.runner import MeasurementEngine
from runtime_regression.util.log_config import setup_logger

module_logger = setup_logger(__name__)


class MinimumFinder:
    def __init__(
        self,
        engine: MeasurementEngine,
        parser: Optional[ResultParser] = None,
        tolerance: float = DEFAULT_TOLERANCE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        timeout_min: float = DEFAULT_TIMEOUT_MIN,
        logger: Optional[logging.Logger] = None,
        report: Optional[ReportWriter] = None,
    ):
        self.engine = engine
        self.parser = parser or JmhCsvParser()
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.timeout_min = timeout_min
        self.logger = logger or module_logger
        self.report = report

        self.benchmarks: List[RegressionCandidate] = []
        self.name_to_results: Dict[str, float] = {}
        self.failed_names: Set[str] = set()

    def add_benchmark(self, name: str, target_ms: float) -> None:
        self.benchmarks.append(RegressionCandidate(name, target_ms))

    def process(self) -> Set[str]:
        """
        Re-run every added benchmark until it's within tolerance or the rounds run out.

        Returns:
            Identifiers of the confirmed regressions

        Raises:
            MeasurementEngineError: the harness failed on a benchmark
            IntegrationFaultError: an exact run didn't produce exactly one result
        """
        self.name_to_results = {}
        self.failed_names = set()

        for iteration in range(self.max_iterations):
            if not self.benchmarks:
                break
            # Walk backwards so removing an entry doesn't skip the next one
            for i in range(len(self.benchmarks) - 1, -1, -1):
                info = self.benchmarks[i]
                score = self.measure(info.identifier)
                fractional_difference = info.record(score)

                if fractional_difference < self.tolerance:
                    self.logger.info(
                        f"Accepted: Trial={iteration:2d} score={fractional_difference:7.3f} name={info.identifier}"
                    )
                    self.name_to_results[info.identifier] = info.best_found_ms
                    del self.benchmarks[i]
                else:
                    self.logger.info(
                        f"Rejected: Trial={iteration:2d} score={fractional_difference:7.3f} name={info.identifier}"
                    )

        if not self.benchmarks:
            self.logger.info("No remaining exceptions")
        for info in self.benchmarks:
            self.logger.info(f"Failure: score={info.best_delta:7.3f} name={info.identifier}")
            self.name_to_results[info.identifier] = info.best_found_ms
            self.failed_names.add(info.identifier)

        return self.failed_names

    def measure(self, name: str) -> float:
        """Run a single benchmark exactly once and return its score in ms/op."""
        if self.report is not None:
            self.report.start_benchmark(name)
        try:
            artifact = self.engine.measure(name, exact=True, timeout_min=self.timeout_min)
        except Exception as e:
            self.logger.error(f"Exception running {name} : {e}")
            if self.report is not None:
                self.report.log_exception(f"Exception running {name} : {e}")
            raise
        finally:
            if self.report is not None:
                self.report.finish_benchmark()

        results = self.parser.parse(artifact)
        if len(results) != 1:
            raise IntegrationFaultError(name, len(results))
        return results[0].ms_per_op
