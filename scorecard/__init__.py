"""Competency assessment scoring, insight and lifecycle core."""

from .aggregator import ScoreSummary, aggregate, scores_from_ticks, validate_scores
from .bands import classify
from .catalog import BEHAVIORAL_CATALOG, GROUP_SCORING_CATALOG, CriteriaCatalog, get_catalog
from .errors import LifecycleViolation, PersistenceError, ScorecardError, ValidationError
from .insights import InsightReport, compose_summary, evaluate, rank_criteria
from .lifecycle import AssessmentLifecycle
from .models import (
    AssessmentDraft, AssessmentRecord, Criterion, GroupSubject, IndividualSubject,
    LifecycleState, PerformanceBand, SubjectKind,
)
from .readiness import check_readiness
from .record_builder import build_record

__version__ = "0.1.0"
