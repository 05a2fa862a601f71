"""Models for regression data structures."""

from .measurement import MeasurementRecord, ResultSet, make_identifier
from .regression_candidate import RegressionCandidate

__all__ = ["MeasurementRecord", "ResultSet", "make_identifier", "RegressionCandidate"]
