"""Tests for the JMH subprocess harness, with subprocess stubbed out."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from runtime_regression.errors import MeasurementEngineError
from runtime_regression.models.measurement import MeasurementRecord
from runtime_regression.service.runner.jmh_runner import JmhRunner
from tests.helpers import write_jmh_csv

MODULE = "runtime_regression.service.runner.jmh_runner"


@pytest.fixture
def runner(tmp_path: Path) -> JmhRunner:
    with patch(f"{MODULE}.resolve_cmd", return_value="/usr/bin/java"):
        yield JmhRunner(tmp_path / "bench.jar", tmp_path / "out")


class TestBuildArgs:
    def test_pattern_mode(self, runner: JmhRunner, tmp_path: Path) -> None:
        args = runner.build_args("org.ejml.BenchmarkFoo", False, 3, tmp_path / "r.csv")
        assert args[:4] == ["/usr/bin/java", "-jar", str(tmp_path / "bench.jar"), "org.ejml.BenchmarkFoo"]
        assert args[args.index("-to") + 1] == "180s"
        assert args[args.index("-rf") + 1] == "csv"
        assert args[args.index("-rff") + 1] == str(tmp_path / "r.csv")
        assert "-p" not in args

    def test_exact_mode_anchors_name(self, runner: JmhRunner, tmp_path: Path) -> None:
        args = runner.build_args("org.ejml.Foo.mult", True, 1, tmp_path / "r.csv")
        assert args[3] == r"\borg\.ejml\.Foo\.mult\b"

    def test_exact_mode_pins_parameters(self, runner: JmhRunner, tmp_path: Path) -> None:
        record = MeasurementRecord("org.Foo.mult", 1.0, {"size": "100", "kind": "dense"})
        runner.set_records({record.identifier: record})
        args = runner.build_args("org.Foo.mult:100:dense", True, 1, tmp_path / "r.csv")
        assert args[3] == r"\borg\.Foo\.mult\b"
        assert args[-4:] == ["-p", "size=100", "-p", "kind=dense"]


class TestMeasure:
    def test_returns_result_file(self, runner: JmhRunner) -> None:
        def fake_run(args, **kwargs):
            write_jmh_csv(Path(args[args.index("-rff") + 1]), [{"name": "foo", "score": 1.0}])
            return subprocess.CompletedProcess(args, 0)

        with patch(f"{MODULE}.subprocess.run", side_effect=fake_run) as run:
            path = runner.measure("foo", exact=True, timeout_min=2)

        assert path == runner.output_dir / "foo.csv"
        assert path.exists()
        assert run.call_args.kwargs["timeout"] == 2 * 60 + 60

    def test_timeout_is_engine_error(self, runner: JmhRunner) -> None:
        with patch(f"{MODULE}.subprocess.run", side_effect=subprocess.TimeoutExpired(["java"], 180)):
            with pytest.raises(MeasurementEngineError, match="timed out"):
                runner.measure("foo", exact=True, timeout_min=2)

    def test_nonzero_exit_is_engine_error(self, runner: JmhRunner) -> None:
        with patch(f"{MODULE}.subprocess.run", side_effect=subprocess.CalledProcessError(1, ["java"])):
            with pytest.raises(MeasurementEngineError, match="return code 1"):
                runner.measure("foo", exact=False, timeout_min=2)

    def test_missing_result_file_is_engine_error(self, runner: JmhRunner) -> None:
        stale = runner.output_dir / "foo.csv"
        write_jmh_csv(stale, [{"name": "foo", "score": 1.0}])
        with patch(f"{MODULE}.subprocess.run", return_value=subprocess.CompletedProcess([], 0)):
            with pytest.raises(MeasurementEngineError, match="no result file"):
                runner.measure("foo", exact=False, timeout_min=2)

    def test_missing_java(self, tmp_path: Path) -> None:
        runner = JmhRunner(tmp_path / "bench.jar", tmp_path / "out", cmd="definitely-not-java-xyz")
        with pytest.raises(MeasurementEngineError, match="not found"):
            runner.measure("foo", exact=False, timeout_min=1)
