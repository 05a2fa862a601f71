"""
Runs the whole regression: measure, compare, re-measure, summarize, publish.

Results live under ``results_path``: one directory per run named after its
start time in milliseconds, plus ``baseline/`` holding the last known good
run. The first run ever becomes the baseline.
"""
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Set, Tuple

from runtime_regression.config.regression_config import RegressionConfig
from runtime_regression.consts.Defaults import (
    ERRORS_FILE,
    EXCEPTIONS_FILE,
    MINIMUM_DIR,
    RESULTS_FILE,
    SUMMARY_FILE,
)
from runtime_regression.errors import MeasurementEngineError, RegressionError
from runtime_regression.models.measurement import MeasurementRecord, ResultSet
from runtime_regression.service.detector.regression_detector import find_runtime_exceptions
from runtime_regression.service.discovery.benchmark_provider import BenchmarkProvider
from runtime_regression.service.minimum_finder.minimum_finder import MinimumFinder
from runtime_regression.service.notification.notifier import NullNotifier, Notifier
from runtime_regression.service.reporting.report_writer import ReportWriter
from runtime_regression.service.result_loader.result_loader import load_records, load_results, to_result_set
from runtime_regression.service.result_parser.jmh_csv_parser import JmhCsvParser
from runtime_regression.service.result_parser.result_parser import ResultParser
from runtime_regression.service.runner.runner import MeasurementEngine
from runtime_regression.service.summary.regression_summary import (
    SUBJECT_PREFIX,
    RegressionSummary,
    save_all_results,
    save_summary,
)
from runtime_regression.util.log_config import attach_run_log, detach_run_log, setup_logger

logger = setup_logger(__name__)


@dataclass
class RegressionOutcome:
    results_dir: Path
    bootstrapped: bool = False
    flagged: Set[str] = field(default_factory=set)
    exceptions: Set[str] = field(default_factory=set)
    summary_text: str = ""


class RuntimeRegressionApp:

    def __init__(
        self,
        config: RegressionConfig,
        engine: MeasurementEngine,
        provider: BenchmarkProvider,
        notifier: Optional[Notifier] = None,
        parser: Optional[ResultParser] = None,
    ):
        self.config = config
        self.engine = engine
        self.provider = provider
        self.notifier = notifier or NullNotifier()
        self.parser = parser or JmhCsvParser()
        self.results_path = Path(config.results_path)

    @property
    def baseline_dir(self) -> Path:
        return self.results_path / self.config.baseline_dir_name

    def jmh_dir(self, results_dir: Path) -> Path:
        return results_dir / self.config.jmh_dir_name

    def run_all_benchmarks(self, results_dir: Path) -> None:
        """
        Runs every benchmark once and saves the results while logging exceptions.

        A benchmark that fails here is logged to exceptions.txt and skipped; it
        simply has no result to compare.
        """
        names = list(self.config.benchmark_names) or self.provider.list_available_measurements()
        # Randomize the order to reduce systematic bias, e.g. a heavy task heating up the machine
        if self.config.randomized_order:
            random.Random(self.config.shuffle_seed).shuffle(names)

        self.engine.set_output_dir(self.jmh_dir(results_dir))
        with ReportWriter(results_dir) as report:
            for idx, name in enumerate(names, 1):
                logger.info(f"Benchmark {idx}/{len(names)}: {name}")
                report.start_benchmark(name)
                try:
                    self.engine.measure(name, exact=False, timeout_min=self.config.timeout_min)
                except MeasurementEngineError as e:
                    logger.error(f"Exception running {name} : {e}")
                    report.log_exception(f"Exception running {name} : {e}")
                finally:
                    report.finish_benchmark()

    def select_most_recent_results(self) -> Path:
        """Selects the valid results directory with the highest name."""
        if not self.results_path.is_dir():
            raise RegressionError(f"Results path is empty: {self.results_path}")

        selected = None
        for f in self.results_path.iterdir():
            if not f.is_dir() or not (f / EXCEPTIONS_FILE).exists():
                continue
            if f.name == self.config.baseline_dir_name:
                continue
            if selected is None or f.name > selected.name:
                selected = f

        if selected is None:
            raise RegressionError(f"No valid results in {self.results_path}")
        return selected

    def rerun_failed_regression_tests(
        self,
        results_dir: Path,
        current: ResultSet,
        baseline: ResultSet,
        records: Dict[str, MeasurementRecord],
    ) -> Tuple[Set[str], Set[str]]:
        """
        Re-run regression tests to see if they are false positives.

        ``current`` is updated in place with the best time found for every
        flagged benchmark.

        Returns:
            (flagged, confirmed regressions)
        """
        flagged = find_runtime_exceptions(baseline, current, self.config.tolerance)
        logger.info(f"Flagged {len(flagged)} of {len(current)} results")

        minimum_dir = results_dir / MINIMUM_DIR
        self.engine.set_output_dir(minimum_dir)
        self.engine.set_records(records)

        with ReportWriter(minimum_dir) as report:
            find_minimum = MinimumFinder(
                self.engine,
                parser=self.parser,
                tolerance=self.config.tolerance,
                max_iterations=self.config.max_iterations,
                timeout_min=self.config.timeout_min,
                report=report,
            )
            for name in sorted(flagged):
                find_minimum.add_benchmark(name, baseline[name])
            find_minimum.process()

        # Update the results with latest times
        for name in flagged:
            current[name] = find_minimum.name_to_results[name]

        save_all_results(current, results_dir / RESULTS_FILE)
        return flagged, set(find_minimum.failed_names)

    def bootstrap_baseline(self, results_dir: Path) -> RegressionOutcome:
        logger.info("Baseline doesn't exist. Making current results the baseline")
        try:
            results_dir.rename(self.baseline_dir)
            results_dir = self.baseline_dir
        except OSError as e:
            logger.error(f"Failed to rename current results to baseline: {e}")
        self.notifier.send(f"{SUBJECT_PREFIX}: Initialized", "Created new baseline")
        return RegressionOutcome(results_dir=results_dir, bootstrapped=True)

    def perform_regression(self) -> RegressionOutcome:
        start_time = time.perf_counter()

        # Minimum only reuses the last measured run, same as summary only
        reuse_last_run = self.config.summary_only or self.config.minimum_only

        if reuse_last_run:
            results_dir = self.select_most_recent_results()
        else:
            results_dir = self.results_path / str(int(time.time() * 1000))
            self.run_all_benchmarks(results_dir)
        logger.info(f"Current Results: {results_dir}")

        if not self.baseline_dir.exists():
            return self.bootstrap_baseline(results_dir)

        error_log = attach_run_log(results_dir / ERRORS_FILE)
        try:
            records = load_records(self.jmh_dir(results_dir), self.parser)
            current = to_result_set(records)
            baseline = load_results(self.jmh_dir(self.baseline_dir), self.parser)
            logger.info(f"Loaded {len(current)} current and {len(baseline)} baseline results")

            if self.config.minimum_only or not self.config.summary_only:
                record_lookup = {r.identifier: r for r in records}
                flagged, exceptions = self.rerun_failed_regression_tests(results_dir, current, baseline, record_lookup)
            else:
                flagged = find_runtime_exceptions(baseline, current, self.config.tolerance)
                exceptions = set(flagged)

            summary = RegressionSummary(self.config.tolerance)
            summary.timestamp = datetime.now(timezone.utc)
            summary.processing_time_ms = (time.perf_counter() - start_time) * 1000.0
            summary.process(current, baseline, flagged, exceptions)
            return self.publish_summary(results_dir, summary)
        finally:
            detach_run_log(error_log)

    def publish_summary(self, results_dir: Path, summary: RegressionSummary) -> RegressionOutcome:
        text = summary.create_summary()
        save_summary(text, results_dir / SUMMARY_FILE)
        self.notifier.send(summary.subject(), text)
        logger.info("\n" + text)
        return RegressionOutcome(
            results_dir=results_dir,
            flagged=set(summary.get_flagged()),
            exceptions=set(summary.get_exceptions()),
            summary_text=text,
        )
