"""Unit tests for data models."""

from datetime import datetime

import pytest
import pytz

from scorecard.models import (
    AssessmentRecord, Criterion, GroupSubject, IndividualSubject, LifecycleState,
    PerformanceBand, SubjectKind,
    deserialize_datetime, draft_from_dict, record_from_dict, record_to_dict,
    serialize_datetime, subject_from_dict, subject_to_dict,
)


def test_criterion():
    """Test Criterion model."""
    criterion = Criterion("leadership", "Leadership")
    assert criterion.id == "leadership"
    assert criterion.display_name == "Leadership"
    assert criterion.max_value == 10
    assert criterion.description == ""


def test_subject_kinds():
    """Test subject variants report their kind."""
    person = IndividualSubject(subject_id="c-1", name="Ada")
    team = GroupSubject(subject_id="g-1", name="Team Alpha")
    assert person.kind is SubjectKind.INDIVIDUAL
    assert team.kind is SubjectKind.GROUP
    assert team.member_ids == []


def test_performance_band_order():
    """Test bands rank from Limited up to Exceptional."""
    assert PerformanceBand.LIMITED.rank < PerformanceBand.DEVELOPING.rank
    assert PerformanceBand.DEVELOPING.rank < PerformanceBand.STRONG.rank
    assert PerformanceBand.STRONG.rank < PerformanceBand.EXCEPTIONAL.rank


def test_serialization():
    """Test datetime serialization helpers."""
    test_datetime = datetime(2026, 10, 15, 23, 59, tzinfo=pytz.utc)
    serialized = serialize_datetime(test_datetime)
    assert serialized == "2026-10-15T23:59:00+00:00"
    assert deserialize_datetime(serialized) == test_datetime


def test_subject_serialization():
    """Test subjects keep their kind through serialization."""
    team = GroupSubject(subject_id="g-1", name="Team Alpha", description="Case 1", member_ids=["a", "b"])
    data = subject_to_dict(team)
    assert data["kind"] == "group"
    assert subject_from_dict(data) == team

    person = IndividualSubject(subject_id="c-1", name="Ada", email="ada@example.com")
    assert subject_from_dict(subject_to_dict(person)) == person
    assert subject_from_dict({"subject_id": "c-2", "name": "Grace"}).kind is SubjectKind.INDIVIDUAL


def test_record_serialization():
    """Test record dict conversion keeps enums and timestamps."""
    record = AssessmentRecord(
        assignment_id="a-1",
        subject=IndividualSubject(subject_id="c-1", name="Ada"),
        catalog_key="behavioral-v1",
        scores={"leadership": 8},
        notes={"leadership": "Clear direction"},
        total_score=8.0,
        max_score=100.0,
        completion_pct=8.0,
        performance_band=PerformanceBand.LIMITED,
        lifecycle_state=LifecycleState.SUBMITTED,
        updated_at=datetime(2026, 3, 2, 9, 0, tzinfo=pytz.utc),
        submitted_at=datetime(2026, 3, 2, 9, 0, tzinfo=pytz.utc),
    )
    data = record_to_dict(record)
    assert data["performance_band"] == "Limited"
    assert data["lifecycle_state"] == "submitted"
    assert record_from_dict(data) == record


def test_draft_from_dict():
    """Test drafts parse from API payloads."""
    draft = draft_from_dict({
        "assignment_id": "a-1",
        "subject": {"kind": "group", "subject_id": "g-1", "name": "Team", "member_ids": ["c-1"]},
        "scores": {"leadership": 7},
    })
    assert draft.subject.kind is SubjectKind.GROUP
    assert draft.scores == {"leadership": 7}
    assert draft.notes == {}
    assert draft.general_notes == ""
    assert draft.catalog_key is None

    flat = draft_from_dict({"assignment_id": "a-2", "candidate_id": "c-9"})
    assert isinstance(flat.subject, IndividualSubject)
    assert flat.subject.subject_id == "c-9"

    flat_group = draft_from_dict({"assignment_id": "a-3", "group_id": "g-9"})
    assert isinstance(flat_group.subject, GroupSubject)


def test_draft_from_dict_missing_fields():
    """Test drafts without assignment or subject are rejected."""
    with pytest.raises(ValueError):
        draft_from_dict({"candidate_id": "c-1"})
    with pytest.raises(ValueError):
        draft_from_dict({"assignment_id": "a-1"})


@pytest.mark.parametrize("payload", [
    {"assignment_id": "a-1", "subject": "c-1"},
    {"assignment_id": "a-1", "subject": {"name": "No id"}},
    {"assignment_id": "a-1", "candidate_id": "c-1", "scores": [1, 2]},
    {"assignment_id": "a-1", "candidate_id": "c-1", "notes": {"leadership": 5}},
    {"assignment_id": "a-1", "candidate_id": "c-1", "general_notes": ["x"]},
    {"assignment_id": "a-1", "group_id": "g-1", "member_ids": "c-1"},
    {"assignment_id": ["a-1"], "candidate_id": "c-1"},
])
def test_draft_from_dict_wrong_shapes(payload):
    """Test payload fields of the wrong type are rejected."""
    with pytest.raises(ValueError):
        draft_from_dict(payload)
