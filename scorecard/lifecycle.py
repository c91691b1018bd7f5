"""
Assessment lifecycle.

Governs the not_started -> in_progress -> submitted flow and the explicit
reopen back to in_progress. Every transition builds a fresh record from the
draft, checks the transition against the stored state, and only reports
success once the store has accepted the write.

Transitions for one assignment are serialized within the process. Two
processes editing the same assignment still race (last write wins).
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from . import config
from .aggregator import validate_scores
from .catalog import CATALOGS, DEFAULT_CATALOG_KEYS, CriteriaCatalog
from .errors import LifecycleViolation, ValidationError
from .models import AssessmentDraft, AssessmentRecord, GroupSubject, LifecycleState
from .readiness import ReadinessReport, check_readiness
from .record_builder import build_record, refresh_record


logger = logging.getLogger(__name__)

NOT_STARTED = LifecycleState.NOT_STARTED
IN_PROGRESS = LifecycleState.IN_PROGRESS
SUBMITTED = LifecycleState.SUBMITTED

# action -> (states it may start from, state it moves to)
TRANSITIONS: Dict[str, Tuple[FrozenSet[LifecycleState], LifecycleState]] = {
    "save": (frozenset({NOT_STARTED, IN_PROGRESS}), IN_PROGRESS),
    "submit": (frozenset({NOT_STARTED, IN_PROGRESS}), SUBMITTED),
    "reopen": (frozenset({SUBMITTED}), IN_PROGRESS),
}


def next_state(action: str, current: LifecycleState,
               assignment_id: Optional[str] = None) -> LifecycleState:
    """Target state of a transition.

    Raises:
        LifecycleViolation: If action is not allowed from current
    """
    sources, target = TRANSITIONS[action]
    if current not in sources:
        raise LifecycleViolation(action, current, assignment_id)
    return target


class AssessmentLifecycle:
    """Runs save, submit and reopen against a record store."""

    def __init__(self, store,
                 catalogs: Optional[Mapping[str, CriteriaCatalog]] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """Initialize lifecycle.

        Args:
            store: Object with load_record, save_record and submit_record
            catalogs: Catalog key -> catalog. Defaults to the built-in catalogs
            clock: Returns the current time. Defaults to config.now
        """
        self.store = store
        self.catalogs = dict(catalogs) if catalogs is not None else dict(CATALOGS)
        self.clock = clock or config.now
        # assignment id -> [lock, number of transitions holding or waiting on it]
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, assignment_id: str):
        """Serialize transitions for one assignment.

        The lock is dropped from the table when the last user releases it.
        """
        with self._locks_guard:
            entry = self._locks.get(assignment_id)
            if entry is None:
                entry = self._locks[assignment_id] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[assignment_id]

    def _catalog(self, key: str) -> CriteriaCatalog:
        try:
            return self.catalogs[key]
        except KeyError:
            raise ValidationError(f"Unknown criteria catalog '{key}'")

    def _catalog_for(self, draft: AssessmentDraft,
                     existing: Optional[AssessmentRecord]) -> CriteriaCatalog:
        """Pick the catalog for a draft.

        A record keeps the catalog it was first scored with.
        """
        if existing is not None:
            if draft.catalog_key and draft.catalog_key != existing.catalog_key:
                raise ValidationError(
                    f"Assignment {draft.assignment_id} is scored with catalog "
                    f"'{existing.catalog_key}', not '{draft.catalog_key}'"
                )
            return self._catalog(existing.catalog_key)
        return self._catalog(draft.catalog_key or DEFAULT_CATALOG_KEYS[draft.subject.kind])

    def _check_subject(self, draft: AssessmentDraft,
                       existing: Optional[AssessmentRecord]):
        """A record stays with the subject it was first scored for.

        Raises:
            ValidationError: If the draft names another subject or subject kind
        """
        if existing is None:
            return
        stored = existing.subject
        if draft.subject.subject_id != stored.subject_id or draft.subject.kind is not stored.kind:
            raise ValidationError(
                f"Assignment {draft.assignment_id} belongs to {stored.kind.value} "
                f"'{stored.subject_id}', not {draft.subject.kind.value} '{draft.subject.subject_id}'"
            )

    def load(self, assignment_id: str) -> Optional[AssessmentRecord]:
        """Load a record with its derived fields recomputed from its scores."""
        record = self.store.load_record(assignment_id)
        if record is None:
            return None
        return refresh_record(record, self._catalog(record.catalog_key))

    def state_of(self, assignment_id: str) -> LifecycleState:
        record = self.store.load_record(assignment_id)
        return record.lifecycle_state if record else NOT_STARTED

    def list_records(self, state: Optional[LifecycleState] = None) -> List[AssessmentRecord]:
        """Stored records, most recently updated first, with derived fields recomputed.

        Args:
            state: Only return records in this lifecycle state
        """
        return [
            refresh_record(record, self._catalog(record.catalog_key))
            for record in self.store.list_records(state)
        ]

    def preview(self, draft: AssessmentDraft) -> Tuple[AssessmentRecord, ReadinessReport]:
        """Score a draft without storing anything.

        Returns:
            (record as it would be built, readiness report)
        """
        existing = self.store.load_record(draft.assignment_id)
        self._check_subject(draft, existing)
        catalog = self._catalog_for(draft, existing)
        scores = validate_scores(draft.scores, catalog)
        state = existing.lifecycle_state if existing else NOT_STARTED
        record = build_record(
            draft.assignment_id, draft.subject, scores, draft.notes,
            draft.general_notes, catalog, lifecycle_state=state,
        )
        readiness = check_readiness(scores, draft.notes, draft.general_notes, catalog)
        return record, readiness

    def save(self, draft: AssessmentDraft) -> AssessmentRecord:
        """Store a draft as in progress.

        Raises:
            LifecycleViolation: If the assessment is submitted (reopen first)
            ValidationError: If the scores do not fit the catalog, or the draft
                             names another subject than the stored record
            PersistenceError: If the store rejects the write
        """
        with self._locked(draft.assignment_id):
            existing = self.store.load_record(draft.assignment_id)
            current = existing.lifecycle_state if existing else NOT_STARTED
            target = next_state("save", current, draft.assignment_id)
            self._check_subject(draft, existing)
            catalog = self._catalog_for(draft, existing)
            scores = validate_scores(draft.scores, catalog)

            record = build_record(
                draft.assignment_id, draft.subject, scores, draft.notes,
                draft.general_notes, catalog,
                lifecycle_state=target,
                updated_at=self.clock(),
            )
            self.store.save_record(record)
            logger.info("Saved assessment %s (%s -> %s, total %g)",
                        record.assignment_id, current.value, target.value, record.total_score)
            return record

    def submit(self, draft: AssessmentDraft) -> AssessmentRecord:
        """Submit a draft, freezing its scores and notes until reopened.

        Submitting again with identical scores and notes re-stamps
        submitted_at; any change to a submitted record needs a reopen.

        Raises:
            LifecycleViolation: If the assessment is submitted with different content
            ValidationError: If the scores do not fit the catalog, or a group has no members
            PersistenceError: If the store rejects the write
        """
        with self._locked(draft.assignment_id):
            existing = self.store.load_record(draft.assignment_id)
            current = existing.lifecycle_state if existing else NOT_STARTED
            self._check_subject(draft, existing)
            catalog = self._catalog_for(draft, existing)
            scores = validate_scores(draft.scores, catalog)

            if current is SUBMITTED:
                if not _same_content(existing, scores, draft):
                    raise LifecycleViolation("submit", current, draft.assignment_id)
                now = self.clock()
                record = replace(
                    refresh_record(existing, catalog),
                    updated_at=now,
                    submitted_at=now,
                )
            else:
                target = next_state("submit", current, draft.assignment_id)
                if isinstance(draft.subject, GroupSubject) and not draft.subject.member_ids:
                    raise ValidationError(
                        f"Group {draft.subject.subject_id} has no members and cannot be submitted"
                    )
                now = self.clock()
                record = build_record(
                    draft.assignment_id, draft.subject, scores, draft.notes,
                    draft.general_notes, catalog,
                    lifecycle_state=target,
                    updated_at=now,
                    submitted_at=now,
                )

            self.store.submit_record(record)
            logger.info("Submitted assessment %s (from %s, total %g, %s)",
                        record.assignment_id, current.value, record.total_score,
                        record.performance_band.value)
            return record

    def reopen(self, assignment_id: str) -> AssessmentRecord:
        """Return a submitted assessment to in progress, keeping its scores and notes.

        Raises:
            LifecycleViolation: If the assessment is not submitted
            PersistenceError: If the store rejects the write
        """
        with self._locked(assignment_id):
            existing = self.store.load_record(assignment_id)
            current = existing.lifecycle_state if existing else NOT_STARTED
            target = next_state("reopen", current, assignment_id)

            record = replace(
                refresh_record(existing, self._catalog(existing.catalog_key)),
                lifecycle_state=target,
                updated_at=self.clock(),
                submitted_at=None,
            )
            self.store.save_record(record)
            logger.info("Reopened assessment %s", assignment_id)
            return record


def count_by_state(records: Iterable[AssessmentRecord]) -> Dict[str, int]:
    """Number of records in each lifecycle state, every state included."""
    counts = {state.value: 0 for state in LifecycleState}
    for record in records:
        counts[record.lifecycle_state.value] += 1
    return counts


def _same_content(record: AssessmentRecord, scores: Mapping[str, float],
                  draft: AssessmentDraft) -> bool:
    return (
        dict(record.scores) == dict(scores)
        and dict(record.notes) == dict(draft.notes or {})
        and record.general_notes == (draft.general_notes or "")
    )
