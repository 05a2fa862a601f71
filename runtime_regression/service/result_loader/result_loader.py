"""
Builds ResultSets out of measurement artifacts.

A directory is read in file name order and later files win on duplicate
identifiers. Artifacts that fail to parse are skipped so one corrupted file
doesn't throw away the rest of a run.
"""
from pathlib import Path
from typing import Iterable, List, Optional, Union

from runtime_regression.errors import ResultParseError
from runtime_regression.models.measurement import MeasurementRecord, ResultSet
from runtime_regression.service.result_parser.jmh_csv_parser import JmhCsvParser
from runtime_regression.service.result_parser.result_parser import ResultParser
from runtime_regression.util.log_config import setup_logger

logger = setup_logger(__name__)

ARTIFACT_SUFFIX = ".csv"

Source = Union[Path, str, Iterable[Union[Path, str]]]


def list_artifacts(source: Source) -> List[Path]:
    """Resolve a directory, or an explicit list of files, into artifact paths."""
    if isinstance(source, (str, Path)):
        directory = Path(source)
        if not directory.is_dir():
            logger.info(f"No results directory at {directory}")
            return []
        try:
            return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ARTIFACT_SUFFIX)
        except OSError as e:
            logger.warning(f"Could not list {directory}: {e}")
            return []
    return [Path(p) for p in source]


def load_records(source: Source, parser: Optional[ResultParser] = None) -> List[MeasurementRecord]:
    """Parse every artifact found in ``source``, skipping the ones that can't be read."""
    parser = parser or JmhCsvParser()
    records = []
    for artifact in list_artifacts(source):
        try:
            records.extend(parser.parse(artifact))
        except ResultParseError as e:
            logger.warning(f"Skipping artifact: {e}")
    return records


def load_results(source: Source, parser: Optional[ResultParser] = None) -> ResultSet:
    """
    Loads all results in a directory, or list of files, and puts them into a map.

    Args:
        source: Directory holding the artifacts or an explicit list of artifact paths
        parser: Artifact parser, JMH CSV by default

    Returns:
        Mapping from measurement identifier to milliseconds per operation.
        Empty when the directory is missing.
    """
    return to_result_set(load_records(source, parser))


def to_result_set(records: Iterable[MeasurementRecord]) -> ResultSet:
    """Key records by identifier, the last record wins on duplicates."""
    results: ResultSet = {}
    for record in records:
        identifier = record.identifier
        previous = results.get(identifier)
        if previous is not None and previous != record.ms_per_op:
            logger.warning(
                f"Duplicate result for {identifier}: replacing {previous:.6f} with {record.ms_per_op:.6f} ms/op"
            )
        results[identifier] = record.ms_per_op
    return results
