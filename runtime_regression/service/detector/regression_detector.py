from typing import Set

from runtime_regression.models.measurement import ResultSet
from runtime_regression.util.cal_utils import relative_delta


def find_runtime_exceptions(baseline: ResultSet, current: ResultSet, tolerance: float) -> Set[str]:
    """
    For every comparable result, see if the current performance shows a regression.

    Only identifiers present in both sets are compared. A result is flagged when
    it is slower than its baseline by strictly more than ``tolerance``.

    Args:
        baseline: Last known good results
        current: Results being evaluated
        tolerance: Fractional tolerance, e.g. 0.4 for 40% slower

    Returns:
        Identifiers of the flagged results
    """
    exceptions = set()

    for name, value_baseline in baseline.items():
        if name not in current:
            continue

        if relative_delta(current[name], value_baseline) <= tolerance:
            continue

        exceptions.add(name)

    return exceptions
