"""
Per-run log files.

ReportWriter owns the files a run leaves behind for postmortem:
exceptions.txt (benchmarks that failed to run), runtime.txt (how long each
benchmark took) and stderr.txt (every log record of the run). It is a
context manager, so the files are flushed and closed and the log handler is
detached on every exit path, including fatal errors.
"""
import time
from pathlib import Path
from typing import Optional, TextIO

from runtime_regression.consts.Defaults import EXCEPTIONS_FILE, RUNTIME_FILE, STDERR_FILE
from runtime_regression.util.cal_utils import format_elapsed
from runtime_regression.util.log_config import attach_run_log, detach_run_log, setup_logger

logger = setup_logger(__name__)


class ReportWriter:

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.log_exceptions: Optional[TextIO] = None
        self.log_runtimes: Optional[TextIO] = None
        self._log_handler = None
        self._benchmark_start: Optional[float] = None
        self._run_start: Optional[float] = None

    def __enter__(self) -> "ReportWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_val is not None:
            logger.error(f"Run aborted: {exc_val}")
        self.close()

    def open(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Output Directory: {self.output_dir.resolve()}")
        self.log_exceptions = open(self.output_dir / EXCEPTIONS_FILE, 'w', encoding='utf-8')
        self.log_runtimes = open(self.output_dir / RUNTIME_FILE, 'w', encoding='utf-8')
        self._log_handler = attach_run_log(self.output_dir / STDERR_FILE)
        self.log_runtimes.write("# How long each benchmark took\n\n")
        self.log_runtimes.flush()
        self._run_start = time.perf_counter()

    def close(self) -> None:
        if self._run_start is not None:
            self.write_total_elapsed(time.perf_counter() - self._run_start)
            self._run_start = None
        if self._log_handler is not None:
            detach_run_log(self._log_handler)
            self._log_handler = None
        for stream in (self.log_exceptions, self.log_runtimes):
            if stream is not None and not stream.closed:
                stream.close()

    def log_exception(self, message: str) -> None:
        if self.log_exceptions is not None:
            self.log_exceptions.write(message + "\n")
            self.log_exceptions.flush()

    def start_benchmark(self, name: str) -> None:
        self._benchmark_start = time.perf_counter()
        if self.log_runtimes is not None:
            self.log_runtimes.write(f"{name:<80s} ")
            self.log_runtimes.flush()

    def finish_benchmark(self) -> float:
        """Close the runtime.txt line opened by start_benchmark and return the elapsed seconds."""
        elapsed = 0.0 if self._benchmark_start is None else time.perf_counter() - self._benchmark_start
        self._benchmark_start = None
        if self.log_runtimes is not None:
            self.log_runtimes.write(f"{elapsed / 60.0:7.2f} (min)\n")
            self.log_runtimes.flush()
        return elapsed

    def write_total_elapsed(self, seconds: float) -> None:
        message = f"Total Elapsed Time is {format_elapsed(seconds)}"
        logger.info(message)
        if self.log_runtimes is not None and not self.log_runtimes.closed:
            self.log_runtimes.write(f"\n{message}\n")
            self.log_runtimes.flush()
