"""Unit tests for score aggregation and validation."""

import pytest

from scorecard.aggregator import aggregate, scores_from_ticks, validate_scores
from scorecard.catalog import BEHAVIORAL_CATALOG, GROUP_SCORING_CATALOG, CriteriaCatalog
from scorecard.errors import ValidationError


def test_aggregate_full_vector(strong_scores):
    """Test totals for a fully scored vector."""
    summary = aggregate(strong_scores, BEHAVIORAL_CATALOG)
    assert summary.total == 60
    assert summary.max_total == 100
    assert summary.completion_pct == 60


def test_missing_criteria_count_as_zero():
    """Test partial vectors only sum what is present."""
    summary = aggregate({"leadership": 8, "emotional-intelligence": 4}, BEHAVIORAL_CATALOG)
    assert summary.total == 12
    assert summary.completion_pct == 12


def test_empty_vector():
    """Test an empty vector scores zero."""
    summary = aggregate({}, BEHAVIORAL_CATALOG)
    assert summary.total == 0
    assert summary.completion_pct == 0


def test_none_and_unknown_ids_ignored():
    """Test None values and ids outside the catalog do not count."""
    summary = aggregate({"leadership": None, "juggling": 10, "communication": 3}, BEHAVIORAL_CATALOG)
    assert summary.total == 3


def test_negative_scores_clamped():
    """Test negative scores count as zero."""
    summary = aggregate({"leadership": -5, "communication": 4}, BEHAVIORAL_CATALOG)
    assert summary.total == 4


def test_over_max_completion_clamped():
    """Test completion never exceeds 100 percent."""
    catalog = CriteriaCatalog("single", [BEHAVIORAL_CATALOG.get("leadership")])
    summary = aggregate({"leadership": 15}, catalog)
    assert summary.total == 15
    assert summary.completion_pct == 100


def test_zero_max_total():
    """Test catalogs without any maximum report zero completion."""
    summary = aggregate({"anything": 5}, CriteriaCatalog("empty", []))
    assert summary.max_total == 0
    assert summary.completion_pct == 0


def test_aggregate_rejects_non_numeric():
    """Test non-numeric catalog scores are rejected."""
    with pytest.raises(ValidationError) as excinfo:
        aggregate({"leadership": "high"}, BEHAVIORAL_CATALOG)
    assert excinfo.value.criterion_id == "leadership"


def test_aggregate_rejects_nan():
    """Test NaN never reaches a total."""
    with pytest.raises(ValidationError):
        aggregate({"leadership": float("nan")}, BEHAVIORAL_CATALOG)


def test_aggregate_group_catalog():
    """Test totals against the 20-point group criteria."""
    scores = {criterion_id: 15 for criterion_id in GROUP_SCORING_CATALOG.ids}
    summary = aggregate(scores, GROUP_SCORING_CATALOG)
    assert summary.total == 75
    assert summary.completion_pct == 75


def test_scores_from_ticks():
    """Test tick sheets convert to counts of ticked behaviours."""
    scores = scores_from_ticks({
        "leadership": [True, False, True, True],
        "communication": [False, False],
        "innovation": [],
    })
    assert scores == {"leadership": 3, "communication": 0, "innovation": 0}


def test_validate_scores_accepts_valid_vector(strong_scores):
    """Test a valid vector comes back as a copy."""
    validated = validate_scores(strong_scores, BEHAVIORAL_CATALOG)
    assert validated == strong_scores
    assert validated is not strong_scores


def test_validate_scores_unknown_criterion():
    """Test unknown ids are rejected."""
    with pytest.raises(ValidationError) as excinfo:
        validate_scores({"juggling": 5}, BEHAVIORAL_CATALOG)
    assert excinfo.value.criterion_id == "juggling"


@pytest.mark.parametrize("value", [-1, 10.5, 11, "7", None, True, float("nan"), float("inf")])
def test_validate_scores_bad_values(value):
    """Test out-of-range and non-numeric values are rejected."""
    with pytest.raises(ValidationError):
        validate_scores({"leadership": value}, BEHAVIORAL_CATALOG)


def test_validate_scores_bounds_inclusive():
    """Test 0 and the maximum are both valid."""
    assert validate_scores({"leadership": 0, "communication": 10}, BEHAVIORAL_CATALOG)
    assert validate_scores({"shared-leadership": 20}, GROUP_SCORING_CATALOG)


def test_validate_scores_requires_mapping():
    """Test a list is not a score vector."""
    with pytest.raises(ValidationError):
        validate_scores([("leadership", 5)], BEHAVIORAL_CATALOG)
