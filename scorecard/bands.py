"""
Performance band classification.

Bands are lower-bound inclusive percentages of the maximum score:
80%+ Exceptional, 60%+ Strong, 40%+ Developing, anything else Limited.
"""

from typing import List, Tuple

from .models import PerformanceBand


# (lower bound in percent, band), highest first
BAND_THRESHOLDS: List[Tuple[float, PerformanceBand]] = [
    (80, PerformanceBand.EXCEPTIONAL),
    (60, PerformanceBand.STRONG),
    (40, PerformanceBand.DEVELOPING),
]


def classify(total: float, max_total: float) -> PerformanceBand:
    """Map an overall score to its performance band.

    Compares total * 100 against threshold * max_total so that scores sitting
    exactly on a boundary are not pushed below it by float division.
    """
    if max_total <= 0:
        return PerformanceBand.LIMITED
    for lower_bound, band in BAND_THRESHOLDS:
        if total * 100 >= lower_bound * max_total:
            return band
    return PerformanceBand.LIMITED
