"""
Assessment record assembly.

The one place where aggregation, banding and insight evaluation run together,
so total, band and findings always come from the same score snapshot.
"""

import copy
from dataclasses import replace
from datetime import datetime
from typing import Mapping, Optional

from .aggregator import aggregate
from .bands import classify
from .catalog import CriteriaCatalog
from .insights import evaluate
from .models import AssessmentRecord, LifecycleState, Subject


def build_record(assignment_id: str,
                 subject: Subject,
                 vector: Mapping[str, float],
                 notes: Mapping[str, str],
                 general_notes: str,
                 catalog: CriteriaCatalog,
                 lifecycle_state: LifecycleState = LifecycleState.NOT_STARTED,
                 updated_at: Optional[datetime] = None,
                 submitted_at: Optional[datetime] = None) -> AssessmentRecord:
    """Build a record from raw scoring input.

    Scores, notes and the subject are copied, so later edits by the caller
    never leak into the record. The rule table is chosen by the subject kind.

    Args:
        assignment_id: Assignment the record belongs to
        subject: Individual or group being assessed
        vector: Criterion id -> score
        notes: Criterion id -> assessor note
        general_notes: Overall observations
        catalog: Catalog the scores were given against

    Returns:
        AssessmentRecord with derived fields filled in
    """
    scores = dict(vector)
    summary = aggregate(scores, catalog)
    insights = evaluate(scores, subject.kind, catalog)

    return AssessmentRecord(
        assignment_id=assignment_id,
        subject=copy.deepcopy(subject),
        catalog_key=catalog.key,
        scores=scores,
        notes=dict(notes or {}),
        general_notes=general_notes or "",
        total_score=summary.total,
        max_score=summary.max_total,
        completion_pct=summary.completion_pct,
        performance_band=classify(summary.total, summary.max_total),
        reinforcing_findings=insights.reinforcing,
        cautionary_findings=insights.cautionary,
        lifecycle_state=lifecycle_state,
        updated_at=updated_at,
        submitted_at=submitted_at,
    )


def refresh_record(record: AssessmentRecord, catalog: CriteriaCatalog) -> AssessmentRecord:
    """Recompute a stored record's derived fields from its scores."""
    rebuilt = build_record(
        record.assignment_id, record.subject, record.scores, record.notes,
        record.general_notes, catalog,
    )
    return replace(
        rebuilt,
        lifecycle_state=record.lifecycle_state,
        updated_at=record.updated_at,
        submitted_at=record.submitted_at,
    )
