import math
from pathlib import Path
from typing import List

import pandas as pd

from runtime_regression.consts.TimeUnit import TimeUnit
from runtime_regression.errors import ResultParseError
from runtime_regression.models.measurement import MeasurementRecord
from runtime_regression.service.result_parser.result_parser import ResultParser
from runtime_regression.util.log_config import setup_logger

logger = setup_logger(__name__)

BENCHMARK_COLUMN = "Benchmark"
SCORE_COLUMN = "Score"
UNIT_COLUMN = "Unit"
PARAM_PREFIX = "Param: "


class JmhCsvParser(ResultParser):
    """Parses the CSV result file JMH writes with ``-rf csv``."""

    def parse(self, path: Path) -> List[MeasurementRecord]:
        """Parse every row of a JMH CSV file into a MeasurementRecord."""
        path = Path(path)
        try:
            # Keep everything as text; parameter values are part of identifiers
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except FileNotFoundError as e:
            raise ResultParseError(path, "file does not exist") from e
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
            raise ResultParseError(path, str(e)) from e

        missing = [c for c in (BENCHMARK_COLUMN, SCORE_COLUMN, UNIT_COLUMN) if c not in df.columns]
        if missing:
            raise ResultParseError(path, f"missing columns {missing}")

        param_columns = [c for c in df.columns if c.startswith(PARAM_PREFIX)]

        records = []
        # Row numbers count the header line, matching what an editor shows
        for row_number, row in enumerate(df.to_dict(orient="records"), start=2):
            records.append(self._parse_row(path, row_number, row, param_columns))

        logger.debug(f"Parsed {len(records)} result(s) from {path.name}")
        return records

    @staticmethod
    def _parse_row(path: Path, row_number: int, row: dict, param_columns: List[str]) -> MeasurementRecord:
        name = row[BENCHMARK_COLUMN].strip()
        if not name:
            raise ResultParseError(path, f"row {row_number} has no benchmark name")

        try:
            unit = TimeUnit(row[UNIT_COLUMN].strip())
        except ValueError as e:
            raise ResultParseError(path, f"row {row_number} has unsupported unit '{row[UNIT_COLUMN]}'") from e

        try:
            score = float(row[SCORE_COLUMN])
        except ValueError as e:
            raise ResultParseError(path, f"row {row_number} has non-numeric score '{row[SCORE_COLUMN]}'") from e
        if score < 0 or math.isnan(score):
            raise ResultParseError(path, f"row {row_number} has invalid score {score}")

        # A file can hold benchmarks that don't share every parameter
        parameters = {
            column[len(PARAM_PREFIX):]: row[column].strip()
            for column in param_columns
            if row[column].strip()
        }

        return MeasurementRecord(
            benchmark=name,
            ms_per_op=unit.to_milliseconds(score),
            parameters=parameters,
        )
