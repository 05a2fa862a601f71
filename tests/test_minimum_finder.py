"""Tests for re-running flagged benchmarks until they clear or run out of rounds."""

import logging
import math
from pathlib import Path

import pytest

from runtime_regression.errors import IntegrationFaultError, MeasurementEngineError
from runtime_regression.models.regression_candidate import RegressionCandidate
from runtime_regression.service.minimum_finder.minimum_finder import MinimumFinder
from runtime_regression.service.reporting.report_writer import ReportWriter
from tests.helpers import ScriptedEngine


def make_finder(tmp_path: Path, scores: dict, **kwargs) -> MinimumFinder:
    engine = ScriptedEngine(tmp_path / "minimum", scores, rows_per_call=kwargs.pop("rows_per_call", 1))
    kwargs.setdefault("tolerance", 0.4)
    kwargs.setdefault("max_iterations", 3)
    return MinimumFinder(engine, **kwargs)


class TestRegressionCandidate:
    def test_starts_unmeasured(self) -> None:
        candidate = RegressionCandidate("foo", 100.0)
        assert candidate.best_found_ms == math.inf

    def test_best_found_is_running_minimum(self) -> None:
        candidate = RegressionCandidate("foo", 100.0)
        seen = []
        for score in (150.0, 120.0, 130.0, 95.0, 99.0):
            delta = candidate.record(score)
            seen.append(score)
            assert delta == pytest.approx(score / 100.0 - 1.0)
            assert candidate.best_found_ms == min(seen)


class TestMinimumFinder:
    def test_accepted_after_third_round(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"foo": [150.0, 120.0, 95.0]}, tolerance=0.1, max_iterations=10)
        finder.add_benchmark("foo", 100.0)
        failed = finder.process()
        assert failed == set()
        assert finder.name_to_results == {"foo": 95.0}
        assert finder.engine.call_names() == ["foo", "foo", "foo"]

    def test_single_good_round_is_enough(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"foo": [150.0, 120.0, 95.0]}, max_iterations=10)
        finder.add_benchmark("foo", 100.0)
        assert finder.process() == set()
        # 120 is within 40% of 100, so the third score is never needed
        assert finder.name_to_results == {"foo": 120.0}
        assert len(finder.engine.calls) == 2

    def test_confirmed_regression_reports_best_found(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"bar": [150.0, 148.0, 151.0]})
        finder.add_benchmark("bar", 100.0)
        assert finder.process() == {"bar"}
        assert finder.failed_names == {"bar"}
        assert finder.name_to_results == {"bar": 148.0}

    def test_exact_match_requested(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"foo:10": [100.0]}, timeout_min=2)
        finder.add_benchmark("foo:10", 100.0)
        finder.process()
        assert finder.engine.calls == [("foo:10", True, 2)]

    def test_reverse_insertion_order_with_removal(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {
            "a": [200.0, 200.0, 200.0],
            "b": [100.0],
            "c": [200.0, 100.0],
        })
        for name in ("a", "b", "c"):
            finder.add_benchmark(name, 100.0)
        assert finder.process() == {"a"}
        assert finder.engine.call_names() == ["c", "b", "a", "c", "a", "a"]
        assert finder.name_to_results == {"a": 200.0, "b": 100.0, "c": 100.0}

    def test_stops_early_when_everything_accepted(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"foo": [100.0]}, max_iterations=10)
        finder.add_benchmark("foo", 100.0)
        finder.process()
        assert len(finder.engine.calls) == 1

    def test_nothing_to_do(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {})
        assert finder.process() == set()
        assert finder.engine.calls == []
        assert finder.name_to_results == {}

    def test_failed_names_are_those_never_within_tolerance(self, tmp_path: Path) -> None:
        scores = {
            "never": [141.0, 150.0, 145.0],
            "once": [150.0, 139.0],
            "slow": [160.0, 170.0, 180.0],
        }
        finder = make_finder(tmp_path, scores)
        for name in scores:
            finder.add_benchmark(name, 100.0)
        assert finder.process() == {"never", "slow"}
        assert finder.name_to_results == {"never": 141.0, "once": 139.0, "slow": 160.0}

    def test_zero_target_never_accepts_slower_runs(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"foo": [1.0, 2.0, 3.0]})
        finder.add_benchmark("foo", 0.0)
        assert finder.process() == {"foo"}
        assert finder.name_to_results == {"foo": 1.0}

    def test_more_than_one_result_is_fatal(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"foo": [100.0]}, rows_per_call=2)
        finder.add_benchmark("foo", 100.0)
        with pytest.raises(IntegrationFaultError, match="not 2"):
            finder.process()

    def test_no_result_is_fatal(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"foo": [100.0]}, rows_per_call=0)
        finder.add_benchmark("foo", 100.0)
        with pytest.raises(IntegrationFaultError, match="not 0"):
            finder.process()

    def test_engine_failure_propagates(self, tmp_path: Path) -> None:
        finder = make_finder(tmp_path, {"foo": [150.0]})
        finder.add_benchmark("foo", 100.0)
        with pytest.raises(MeasurementEngineError):
            finder.process()
        assert finder.failed_names == set()

    def test_each_decision_is_logged(self, tmp_path: Path, audit_logger: logging.Logger,
                                     caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger=audit_logger.name)
        finder = make_finder(tmp_path, {"foo": [150.0, 120.0], "bar": [150.0, 148.0, 151.0]},
                             logger=audit_logger)
        finder.add_benchmark("foo", 100.0)
        finder.add_benchmark("bar", 100.0)
        finder.process()

        messages = [r.getMessage() for r in caplog.records]
        assert "Rejected: Trial= 0 score=  0.500 name=bar" in messages
        assert "Rejected: Trial= 0 score=  0.500 name=foo" in messages
        assert "Accepted: Trial= 1 score=  0.200 name=foo" in messages
        assert "Rejected: Trial= 2 score=  0.510 name=bar" in messages
        assert "Failure: score=  0.480 name=bar" in messages

    def test_engine_failure_logged_with_identifier(self, tmp_path: Path, audit_logger: logging.Logger,
                                                   caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger=audit_logger.name)
        finder = make_finder(tmp_path, {}, logger=audit_logger)
        finder.add_benchmark("foo", 100.0)
        with pytest.raises(MeasurementEngineError):
            finder.process()
        assert any("Exception running foo" in r.getMessage() for r in caplog.records)

    def test_report_writer_records_runtimes_and_exceptions(self, tmp_path: Path) -> None:
        out = tmp_path / "minimum"
        with pytest.raises(MeasurementEngineError):
            with ReportWriter(out) as report:
                finder = make_finder(tmp_path, {"foo": [150.0]}, report=report)
                finder.add_benchmark("foo", 100.0)
                finder.process()

        assert "Exception running foo" in (out / "exceptions.txt").read_text()
        runtime = (out / "runtime.txt").read_text()
        assert runtime.startswith("# How long each benchmark took")
        assert runtime.count("(min)") == 2
        assert "Total Elapsed Time is" in runtime
        assert "Run aborted" in (out / "stderr.txt").read_text()
