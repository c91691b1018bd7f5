"""
Data models for the assessment scoring core.

This module defines the data structures shared by the scoring, insight and
lifecycle components. All models use Python dataclasses so they stay plain
value objects that can be passed between components and serialized to JSON.

These models represent:
- Scoring criteria
- Subjects being assessed (individuals and groups)
- Performance bands and lifecycle states
- Insight findings
- Drafts submitted by the scoring UI
- Assessment records handed to storage
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union


# Criterion id -> numeric score
ScoreVector = Dict[str, float]


@dataclass(frozen=True)
class Criterion:
    """One scorable competency dimension.

    Criteria are defined once in a catalog and shared by every subject, so
    they are frozen.
    """
    id: str                     # Unique key, e.g. "leadership", "emotional-intelligence"
    display_name: str           # Shown to assessors, e.g. "Emotional Intelligence"
    max_value: float = 10       # Highest score an assessor can give
    description: str = ""       # Optional guidance shown next to the score input


class SubjectKind(str, Enum):
    INDIVIDUAL = "individual"
    GROUP = "group"


@dataclass
class IndividualSubject:
    """A single person being assessed."""
    subject_id: str
    name: str
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None

    @property
    def kind(self) -> SubjectKind:
        return SubjectKind.INDIVIDUAL


@dataclass
class GroupSubject:
    """A team assessed as a whole.

    member_ids reference IndividualSubject ids. The list may be empty while
    the assessment is a draft, but not when it is submitted.
    """
    subject_id: str
    name: str
    description: str = ""
    member_ids: List[str] = field(default_factory=list)

    @property
    def kind(self) -> SubjectKind:
        return SubjectKind.GROUP


Subject = Union[IndividualSubject, GroupSubject]


class PerformanceBand(str, Enum):
    """Qualitative label for an overall score, ordered from lowest to highest."""
    LIMITED = "Limited"
    DEVELOPING = "Developing"
    STRONG = "Strong"
    EXCEPTIONAL = "Exceptional"

    @property
    def rank(self) -> int:
        return list(PerformanceBand).index(self)


class LifecycleState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


class Polarity(str, Enum):
    REINFORCING = "reinforcing"   # green flag
    CAUTIONARY = "cautionary"     # red flag


@dataclass(frozen=True)
class InsightFinding:
    """A human-readable observation derived from a score pattern."""
    polarity: Polarity
    text: str


@dataclass
class AssessmentDraft:
    """What the scoring UI sends on save or submit.

    Only raw input lives here; totals, bands and findings are always derived
    by the record builder.
    """
    assignment_id: str
    subject: Subject
    scores: ScoreVector = field(default_factory=dict)
    notes: Dict[str, str] = field(default_factory=dict)   # Criterion id -> free text
    general_notes: str = ""
    catalog_key: Optional[str] = None   # None means the default catalog for the subject kind


@dataclass
class AssessmentRecord:
    """The persisted state of one assessment (one per assignment).

    total_score, performance_band and the findings are derived from scores and
    the catalog; they are cached here for reporting but are never the source
    of truth.
    """
    assignment_id: str
    subject: Subject
    catalog_key: str
    scores: ScoreVector = field(default_factory=dict)
    notes: Dict[str, str] = field(default_factory=dict)
    general_notes: str = ""
    total_score: float = 0.0
    max_score: float = 0.0
    completion_pct: float = 0.0
    performance_band: PerformanceBand = PerformanceBand.LIMITED
    reinforcing_findings: List[str] = field(default_factory=list)
    cautionary_findings: List[str] = field(default_factory=list)
    lifecycle_state: LifecycleState = LifecycleState.NOT_STARTED
    updated_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None


# Serialization helpers for JSON conversion

def serialize_datetime(dt: datetime) -> str:
    """Convert datetime to ISO format string."""
    return dt.isoformat()


def deserialize_datetime(s: str) -> datetime:
    """Convert ISO format string to datetime."""
    return datetime.fromisoformat(s)


def subject_to_dict(subject: Subject) -> dict:
    """Serialize a subject to a dict tagged with its kind."""
    if isinstance(subject, GroupSubject):
        return {
            "kind": SubjectKind.GROUP.value,
            "subject_id": subject.subject_id,
            "name": subject.name,
            "description": subject.description,
            "member_ids": list(subject.member_ids),
        }
    return {
        "kind": SubjectKind.INDIVIDUAL.value,
        "subject_id": subject.subject_id,
        "name": subject.name,
        "email": subject.email,
        "department": subject.department,
        "position": subject.position,
    }


def subject_from_dict(data: dict) -> Subject:
    """Deserialize a subject dict. Missing kind means individual."""
    kind = data.get("kind", SubjectKind.INDIVIDUAL.value)
    if kind == SubjectKind.GROUP.value:
        return GroupSubject(
            subject_id=data["subject_id"],
            name=data.get("name", ""),
            description=data.get("description") or "",
            member_ids=list(data.get("member_ids") or []),
        )
    return IndividualSubject(
        subject_id=data["subject_id"],
        name=data.get("name", ""),
        email=data.get("email"),
        department=data.get("department"),
        position=data.get("position"),
    )


def record_to_dict(record: AssessmentRecord) -> dict:
    """Serialize AssessmentRecord to a JSON-serializable dict."""
    return {
        "assignment_id": record.assignment_id,
        "subject": subject_to_dict(record.subject),
        "catalog_key": record.catalog_key,
        "scores": dict(record.scores),
        "notes": dict(record.notes),
        "general_notes": record.general_notes,
        "total_score": record.total_score,
        "max_score": record.max_score,
        "completion_pct": record.completion_pct,
        "performance_band": record.performance_band.value,
        "reinforcing_findings": list(record.reinforcing_findings),
        "cautionary_findings": list(record.cautionary_findings),
        "lifecycle_state": record.lifecycle_state.value,
        "updated_at": serialize_datetime(record.updated_at) if record.updated_at else None,
        "submitted_at": serialize_datetime(record.submitted_at) if record.submitted_at else None,
    }


def record_from_dict(data: dict) -> AssessmentRecord:
    """Deserialize dict to AssessmentRecord."""
    updated_at = data.get("updated_at")
    submitted_at = data.get("submitted_at")
    return AssessmentRecord(
        assignment_id=data["assignment_id"],
        subject=subject_from_dict(data["subject"]),
        catalog_key=data["catalog_key"],
        scores=dict(data.get("scores") or {}),
        notes=dict(data.get("notes") or {}),
        general_notes=data.get("general_notes") or "",
        total_score=data.get("total_score", 0.0),
        max_score=data.get("max_score", 0.0),
        completion_pct=data.get("completion_pct", 0.0),
        performance_band=PerformanceBand(data.get("performance_band", PerformanceBand.LIMITED.value)),
        reinforcing_findings=list(data.get("reinforcing_findings") or []),
        cautionary_findings=list(data.get("cautionary_findings") or []),
        lifecycle_state=LifecycleState(data.get("lifecycle_state", LifecycleState.NOT_STARTED.value)),
        updated_at=deserialize_datetime(updated_at) if updated_at else None,
        submitted_at=deserialize_datetime(submitted_at) if submitted_at else None,
    )


def _require_text_map(value, field_name: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object")
    for key, text in value.items():
        if not isinstance(text, str):
            raise ValueError(f"{field_name} for '{key}' must be text")
    return dict(value)


def draft_from_dict(data: dict) -> AssessmentDraft:
    """Build an AssessmentDraft from a JSON payload.

    Accepts either "subject" (a subject dict) or the flat
    "candidate_id" / "group_id" fields. Only the payload's shape is checked
    here; score values are checked against the catalog later.

    Raises:
        ValueError: If the payload has no assignment id or subject, or a
                    field has the wrong type
    """
    assignment_id = data.get("assignment_id")
    if not assignment_id:
        raise ValueError("Assignment ID required")
    if not isinstance(assignment_id, str):
        raise ValueError("Assignment ID must be a string")

    if data.get("subject"):
        subject_data = data["subject"]
        if not isinstance(subject_data, dict):
            raise ValueError("Subject must be an object")
        if subject_data.get("kind", SubjectKind.INDIVIDUAL.value) not in [k.value for k in SubjectKind]:
            raise ValueError(f"Unknown subject kind {subject_data.get('kind')!r}")
        if not isinstance(subject_data.get("subject_id"), str):
            raise ValueError("Subject ID must be a string")
        if not isinstance(subject_data.get("member_ids") or [], list):
            raise ValueError("Group member_ids must be a list")
        subject = subject_from_dict(subject_data)
    elif data.get("group_id"):
        if not isinstance(data.get("member_ids") or [], list):
            raise ValueError("Group member_ids must be a list")
        subject = GroupSubject(
            subject_id=str(data["group_id"]),
            name=data.get("name", ""),
            member_ids=list(data.get("member_ids") or []),
        )
    elif data.get("candidate_id"):
        subject = IndividualSubject(subject_id=str(data["candidate_id"]), name=data.get("name", ""))
    else:
        raise ValueError("Subject required")

    scores = data.get("scores") or {}
    if not isinstance(scores, dict):
        raise ValueError("Scores must be an object of criterion id to number")

    general_notes = data.get("general_notes") or ""
    if not isinstance(general_notes, str):
        raise ValueError("General notes must be text")

    catalog_key = data.get("catalog_key")
    if catalog_key is not None and not isinstance(catalog_key, str):
        raise ValueError("Catalog key must be a string")

    return AssessmentDraft(
        assignment_id=assignment_id,
        subject=subject,
        scores=dict(scores),
        notes=_require_text_map(data.get("notes") or {}, "Notes"),
        general_notes=general_notes,
        catalog_key=catalog_key,
    )
