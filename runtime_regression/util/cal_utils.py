import math


def relative_delta(current: float, baseline: float) -> float:
    """
    Fractional change of ``current`` relative to ``baseline``.

    A zero baseline makes any slowdown infinitely significant; two zeros are
    treated as no change.
    """
    if baseline == 0:
        return math.inf if current > 0 else 0.0
    return current / baseline - 1.0


def format_elapsed(seconds: float) -> str:
    """Format a duration as H:MM:SS, hours wrap at a day."""
    total = int(seconds)
    hours = (total // 3600) % 24
    minutes = (total // 60) % 60
    return f"{hours:2d}:{minutes:02d}:{total % 60:02d}"
