"""
Text summary of a regression run.

Pure formatting: everything that varies between runs (timestamps, elapsed
time) is handed in, so the same inputs always produce the same report.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Set

import pandas as pd
from tabulate import tabulate

from runtime_regression.consts.Defaults import DEFAULT_TOLERANCE
from runtime_regression.models.measurement import ResultSet
from runtime_regression.util.cal_utils import format_elapsed, relative_delta
from runtime_regression.util.log_config import setup_logger

logger = setup_logger(__name__)

SUBJECT_PREFIX = "Runtime Regression"


def format_date(date: datetime) -> str:
    return date.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


class RegressionSummary:

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        self.tolerance = tolerance
        self.processing_time_ms: Optional[float] = None
        self.timestamp: Optional[datetime] = None

        self.current: ResultSet = {}
        self.baseline: ResultSet = {}
        self.flagged: Set[str] = set()
        self.exceptions: Set[str] = set()

    def process(self, current: ResultSet, baseline: ResultSet,
                flagged: Iterable[str], exceptions: Iterable[str]) -> "RegressionSummary":
        """
        Args:
            current: Current results, already updated with the best re-measured times
            baseline: Baseline results
            flagged: Everything the detector flagged before re-measuring
            exceptions: Confirmed regressions
        """
        self.current = dict(current)
        self.baseline = dict(baseline)
        self.exceptions = set(exceptions)
        # A confirmed regression was necessarily flagged first
        self.flagged = set(flagged) | self.exceptions
        return self

    def get_flagged(self) -> Set[str]:
        return self.flagged

    def get_exceptions(self) -> Set[str]:
        return self.exceptions

    def subject(self) -> str:
        return f"{SUBJECT_PREFIX}: Flagged {len(self.flagged):3d} Exceptions={len(self.exceptions):3d}"

    def exception_rows(self) -> List[list]:
        rows = []
        for name in sorted(self.exceptions):
            baseline = self.baseline.get(name)
            current = self.current.get(name)
            delta = relative_delta(current, baseline) if baseline is not None and current is not None else None
            rows.append([name, baseline, current, delta])
        return rows

    def create_summary(self) -> str:
        compared = self.baseline.keys() & self.current.keys()
        added = self.current.keys() - self.baseline.keys()
        removed = self.baseline.keys() - self.current.keys()

        lines = ["Runtime Regression Summary", ""]
        if self.timestamp is not None:
            lines.append(f"Date:             {format_date(self.timestamp)}")
        if self.processing_time_ms is not None:
            lines.append(f"Processing Time:  {format_elapsed(self.processing_time_ms / 1000.0)}")
        lines += [
            f"Tolerance:        {self.tolerance * 100:.1f}%",
            f"Baseline:         {len(self.baseline)}",
            f"Current:          {len(self.current)}",
            f"Compared:         {len(compared)}",
            f"New:              {len(added)}",
            f"Removed:          {len(removed)}",
            f"Flagged:          {len(self.flagged)}",
            f"Exceptions:       {len(self.exceptions)}",
            "",
        ]

        if self.exceptions:
            headers = ["Benchmark", "Baseline (ms/op)", "Current (ms/op)", "Delta"]
            table = [
                [name, _fmt_ms(baseline), _fmt_ms(current), _fmt_delta(delta)]
                for name, baseline, current, delta in self.exception_rows()
            ]
            lines.append(tabulate(table, headers=headers, tablefmt="github", stralign="left",
                                  disable_numparse=True))
        else:
            lines.append("No runtime exceptions")

        return "\n".join(lines) + "\n"


def _fmt_ms(value: Optional[float]) -> str:
    return "None" if value is None else f"{value:.6f}"


def _fmt_delta(value: Optional[float]) -> str:
    return "None" if value is None else f"{value * 100:+.1f}%"


def save_all_results(results: ResultSet, path: Path) -> bool:
    """
    Save every result as identifier,ms_per_op CSV.

    Failing to write is logged and reported through the return value; it never
    stops the run from producing its summary.
    """
    df = pd.DataFrame(
        sorted(results.items()),
        columns=["identifier", "ms_per_op"],
    )
    try:
        logger.info(f"Saving to {path}")
        df.to_csv(path, index=False)
        return True
    except OSError as e:
        logger.error(f"Failed to save results to {path}: {e}")
        return False


def save_summary(text: str, path: Path) -> bool:
    try:
        logger.info(f"Saving to {Path(path).resolve()}")
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
        return True
    except OSError as e:
        logger.error(f"Failed to save summary to {path}: {e}")
        return False
