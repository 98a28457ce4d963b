"""Helpers for summarizing many scored results of one instrument.

Averages are reported to one decimal place and percentages as whole numbers,
both rounded half up. An empty input gives zero averages and rates rather
than an error, so an instrument with no saved results still has a summary.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

AVERAGE_STEP = Decimal("0.1")


def mean(values: Sequence[float]) -> float:
    """Average of scores, one decimal place, 0.0 when empty."""
    if not values:
        return 0.0
    exact = Decimal(str(sum(values))) / Decimal(len(values))
    return float(exact.quantize(AVERAGE_STEP, rounding=ROUND_HALF_UP))


def percentage(count: int, total: int) -> int:
    """count as a whole-number percentage of total, 0 when total is 0."""
    if total == 0:
        return 0
    exact = Decimal(count * 100) / Decimal(total)
    return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def distribution(labels: Iterable[str], values: Iterable[str]) -> dict[str, int]:
    """Count values per label.

    Every label is present, in the given order, even with a zero count.

    Raises:
        ValueError: If a value is not one of the labels.
    """
    counts = dict.fromkeys(labels, 0)
    for value, count in Counter(values).items():
        if value not in counts:
            raise ValueError(f"Unexpected label {value!r}, expected one of {list(counts)}")
        counts[value] = count
    return counts
