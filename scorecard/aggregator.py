"""
Score aggregation.

Sums a criterion -> score mapping into an overall score and a completion
percentage. Knows nothing about bands or insights.
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Dict, List, Mapping

from .catalog import CriteriaCatalog
from .errors import ValidationError
from .models import ScoreVector


@dataclass(frozen=True)
class ScoreSummary:
    total: float            # Sum of (clamped) criterion scores
    max_total: float        # Sum of catalog maxima
    completion_pct: float   # total / max_total * 100, within [0, 100]


def is_score_value(value) -> bool:
    """True for finite ints and floats; bools, NaN and infinities are not scores."""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def aggregate(vector: Mapping[str, float], catalog: CriteriaCatalog) -> ScoreSummary:
    """Aggregate a score vector against a catalog.

    Missing criteria count as 0 and negative values are clamped to 0. Values
    above a criterion's maximum are taken as given. Ids not in the catalog are
    ignored.

    Raises:
        ValidationError: If a catalog criterion has a non-numeric value
    """
    total = 0.0
    for criterion in catalog:
        value = vector.get(criterion.id, 0)
        if value is None:
            value = 0
        if not is_score_value(value):
            raise ValidationError(
                f"Score for '{criterion.id}' must be a finite number, got {value!r}",
                criterion.id,
            )
        total += max(value, 0)

    max_total = catalog.max_total
    if max_total <= 0:
        completion_pct = 0.0
    else:
        completion_pct = min(max(total / max_total * 100, 0.0), 100.0)

    return ScoreSummary(total=total, max_total=max_total, completion_pct=completion_pct)


def scores_from_ticks(ticks: Mapping[str, List[bool]]) -> ScoreVector:
    """Convert a tick sheet into a score vector.

    Each criterion is scored by the number of observed behaviours the assessor
    ticked, e.g. {"leadership": [True, False, True]} -> {"leadership": 2}.
    """
    return {criterion_id: sum(1 for tick in items if tick) for criterion_id, items in ticks.items()}


def validate_scores(vector: Mapping[str, float], catalog: CriteriaCatalog) -> Dict[str, float]:
    """Check a score vector's shape and range against a catalog.

    Returns:
        A copy of the vector

    Raises:
        ValidationError: On unknown criterion ids, non-numeric values, or
                         values outside [0, max_value]
    """
    if not isinstance(vector, Mapping):
        raise ValidationError(f"Scores must be a mapping of criterion id to number, got {type(vector).__name__}")

    for criterion_id, value in vector.items():
        criterion = catalog.get(criterion_id)
        if criterion is None:
            raise ValidationError(
                f"Unknown criterion '{criterion_id}' for catalog '{catalog.key}'",
                criterion_id,
            )
        if not is_score_value(value):
            raise ValidationError(
                f"Score for '{criterion_id}' must be a finite number, got {value!r}",
                criterion_id,
            )
        if value < 0 or value > criterion.max_value:
            raise ValidationError(
                f"Score for '{criterion_id}' must be between 0 and {criterion.max_value}, got {value}",
                criterion_id,
            )
    return dict(vector)
