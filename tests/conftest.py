"""Shared fixtures for the test suite."""

from datetime import datetime, timedelta

import pytest
import pytz

from scorecard.lifecycle import AssessmentLifecycle
from scorecard.models import AssessmentDraft, GroupSubject, IndividualSubject
from scorecard.store import SQLiteAssessmentStore


class StepClock:
    """Clock that moves forward one minute per call."""

    def __init__(self, start=None):
        self.current = start or datetime(2026, 3, 2, 9, 0, tzinfo=pytz.utc)

    def __call__(self):
        self.current = self.current + timedelta(minutes=1)
        return self.current


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def store(tmp_path):
    return SQLiteAssessmentStore(data_dir=tmp_path / "data")


@pytest.fixture
def lifecycle(store, clock):
    return AssessmentLifecycle(store, clock=clock)


@pytest.fixture
def candidate():
    return IndividualSubject(subject_id="cand-1", name="Ada Lovelace", department="Engineering")


@pytest.fixture
def team():
    return GroupSubject(subject_id="team-1", name="Team Alpha", member_ids=["cand-1", "cand-2"])


@pytest.fixture
def strong_scores():
    """Leadership 8, emotional intelligence 9, communication 8, everything else 5."""
    scores = {
        "strategic-thinking": 5,
        "innovation": 5,
        "problem-solving": 5,
        "collaboration": 5,
        "adaptability": 5,
        "decision-making": 5,
        "digital-fluency": 5,
    }
    scores.update({"leadership": 8, "emotional-intelligence": 9, "communication": 8})
    return scores


@pytest.fixture
def draft(candidate, strong_scores):
    return AssessmentDraft(
        assignment_id="assign-1",
        subject=candidate,
        scores=strong_scores,
        notes={"leadership": "Ran the planning round and kept everyone involved"},
        general_notes="Solid case study performance overall.",
    )
