#!/usr/bin/env python3
import re
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from runtime_regression.errors import MeasurementEngineError
from runtime_regression.models.measurement import MeasurementRecord
from runtime_regression.service.runner.runner import MeasurementEngine
from runtime_regression.util.file_utils import resolve_cmd
from runtime_regression.util.log_config import setup_logger

logger = setup_logger(__name__)

# Seconds granted on top of the JMH timeout before the JVM itself is killed
KILL_GRACE_SECONDS = 60


class JmhRunner(MeasurementEngine):
    """Runs JMH benchmarks from an uber jar in a child JVM."""

    def __init__(
        self,
        benchmark_jar: Path,
        output_dir: Path,
        cmd: str = "java",
        records: Optional[Dict[str, MeasurementRecord]] = None,
    ) -> None:
        super().__init__(output_dir, records)
        self.benchmark_jar = Path(benchmark_jar)
        self.cmd = cmd

    def build_args(self, benchmark_name: str, exact: bool, timeout_min: float, result_file: Path) -> List[str]:
        record = self.records.get(benchmark_name) if exact else None
        name = record.benchmark if record else benchmark_name
        include = rf"\b{re.escape(name)}\b" if exact else name

        args = [
            resolve_cmd(self.cmd), "-jar", str(self.benchmark_jar),
            include,
            # Average time has less loss of precision across a range of speeds
            "-bm", "avgt",
            "-tu", "ns",
            # Bare minimum iterations, this catches regressions, it doesn't profile
            "-wi", "2", "-w", "1s",
            "-i", "3", "-r", "1s",
            "-f", "1",
            "-foe", "true",
            "-gc", "true",
            "-to", f"{int(timeout_min * 60)}s",
            "-rf", "csv",
            "-rff", str(result_file),
        ]
        if record:
            for param, value in record.parameters.items():
                args += ["-p", f"{param}={value}"]
        return args

    def measure(self, benchmark_name: str, exact: bool, timeout_min: float) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        result_file = self.artifact_path(benchmark_name)
        if result_file.exists():
            result_file.unlink()

        logger.info(f"Running {benchmark_name}")
        stdout_path = self.output_dir / f"{benchmark_name}.log"
        try:
            cmd_args = self.build_args(benchmark_name, exact, timeout_min, result_file)
            logger.debug(f"Command: {' '.join(cmd_args)}")
            with open(stdout_path, 'w') as output_file:
                subprocess.run(
                    cmd_args,
                    stdin=subprocess.DEVNULL,
                    stdout=output_file,
                    stderr=subprocess.STDOUT,
                    timeout=timeout_min * 60 + KILL_GRACE_SECONDS,
                    check=True,
                    text=True,
                )
        except subprocess.TimeoutExpired as e:
            raise MeasurementEngineError(benchmark_name, f"timed out after {e.timeout:.0f}s") from e
        except subprocess.CalledProcessError as e:
            raise MeasurementEngineError(
                benchmark_name, f"JMH exited with return code {e.returncode}, see {stdout_path}"
            ) from e
        except OSError as e:
            raise MeasurementEngineError(benchmark_name, str(e)) from e

        if not result_file.exists():
            raise MeasurementEngineError(benchmark_name, f"no result file written to {result_file}")
        return result_file
