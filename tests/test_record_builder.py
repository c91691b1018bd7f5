"""Unit tests for record assembly."""

from dataclasses import replace

from scorecard.catalog import BEHAVIORAL_CATALOG
from scorecard.insights import evaluate
from scorecard.models import LifecycleState, PerformanceBand, SubjectKind
from scorecard.record_builder import build_record, refresh_record


def test_build_record(candidate, strong_scores):
    """Test derived fields come from one score snapshot."""
    record = build_record("a-1", candidate, strong_scores, {"leadership": "note"}, "general",
                          BEHAVIORAL_CATALOG)
    assert record.assignment_id == "a-1"
    assert record.catalog_key == "behavioral-v1"
    assert record.total_score == 60
    assert record.max_score == 100
    assert record.completion_pct == 60
    assert record.performance_band == PerformanceBand.STRONG
    report = evaluate(strong_scores, SubjectKind.INDIVIDUAL)
    assert record.reinforcing_findings == report.reinforcing
    assert record.cautionary_findings == report.cautionary
    assert record.lifecycle_state == LifecycleState.NOT_STARTED
    assert record.updated_at is None
    assert record.submitted_at is None


def test_build_record_copies_input(candidate, strong_scores):
    """Test later edits by the caller do not change the record."""
    notes = {"leadership": "note"}
    record = build_record("a-1", candidate, strong_scores, notes, "", BEHAVIORAL_CATALOG)
    strong_scores["leadership"] = 0
    notes["leadership"] = "changed"
    candidate.name = "Someone Else"
    assert record.scores["leadership"] == 8
    assert record.notes["leadership"] == "note"
    assert record.subject.name == "Ada Lovelace"


def test_group_record_uses_team_rules(team):
    """Test group subjects get the team rule table."""
    scores = {"leadership": 9, "collaboration": 2}
    record = build_record("a-2", team, scores, {}, "", BEHAVIORAL_CATALOG)
    assert record.cautionary_findings == evaluate(scores, SubjectKind.GROUP).cautionary
    assert record.cautionary_findings != evaluate(scores, SubjectKind.INDIVIDUAL).cautionary


def test_refresh_record_recomputes_derived_fields(candidate, strong_scores, clock):
    """Test refreshing fixes stale totals and keeps state and timestamps."""
    stamp = clock()
    record = build_record("a-1", candidate, strong_scores, {}, "", BEHAVIORAL_CATALOG,
                          lifecycle_state=LifecycleState.SUBMITTED,
                          updated_at=stamp, submitted_at=stamp)
    stale = replace(record, total_score=999, performance_band=PerformanceBand.LIMITED,
                    reinforcing_findings=[])
    refreshed = refresh_record(stale, BEHAVIORAL_CATALOG)
    assert refreshed == record
