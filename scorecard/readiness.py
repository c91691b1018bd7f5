"""
Submission readiness checks.

Advisory checks an assessor sees before submitting. Required checks decide
is_ready; warnings and recommendations only lower the completion score.
Nothing here blocks a submit.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional

from .aggregator import is_score_value
from .catalog import CriteriaCatalog
from .insights import RULE_SCALE


REQUIRED = "required"
WARNING = "warning"
RECOMMENDATION = "recommendation"

# Share of the completion score carried by each check type
CHECK_WEIGHTS = {REQUIRED: 60, WARNING: 30, RECOMMENDATION: 10}


@dataclass(frozen=True)
class ReadinessCheck:
    id: str
    type: str           # "required", "warning" or "recommendation"
    title: str
    description: str
    passed: bool


@dataclass(frozen=True)
class ReadinessReport:
    checks: List[ReadinessCheck]

    @property
    def is_ready(self) -> bool:
        return all(check.passed for check in self.checks if check.type == REQUIRED)

    @property
    def completion_score(self) -> int:
        score = 0.0
        for check_type, weight in CHECK_WEIGHTS.items():
            of_type = [check for check in self.checks if check.type == check_type]
            if of_type:
                score += weight * sum(1 for check in of_type if check.passed) / len(of_type)
        return round(score)

    def failed(self, check_type: Optional[str] = None) -> List[ReadinessCheck]:
        return [
            check for check in self.checks
            if not check.passed and (check_type is None or check.type == check_type)
        ]


def _has_note(notes: Mapping[str, str], criterion_id: str, min_length: int) -> bool:
    return len((notes.get(criterion_id) or "").strip()) > min_length


def check_readiness(scores: Mapping[str, float], notes: Mapping[str, str],
                    general_notes: str, catalog: CriteriaCatalog) -> ReadinessReport:
    """Run the pre-submit checks for a draft.

    Args:
        scores: Criterion id -> score
        notes: Criterion id -> assessor note
        general_notes: Overall observations
        catalog: Catalog the scores were given against

    Returns:
        ReadinessReport
    """
    # (criterion id, percent of max, value on the 0-10 rule scale)
    entries = []
    for criterion in catalog:
        value = scores.get(criterion.id, 0)
        if not is_score_value(value):
            value = 0
        if criterion.max_value > 0:
            pct = value / criterion.max_value * 100
        else:
            pct = 0.0
        entries.append((criterion.id, pct, pct * RULE_SCALE / 100))

    all_scored = bool(entries) and all(pct > 0 for _, pct, _ in entries)

    notes_cover_outliers = all(
        _has_note(notes, criterion_id, 10)
        for criterion_id, pct, _ in entries
        if pct < 40 or pct > 80
    )

    scaled = [value for _, _, value in entries]
    balanced = bool(scaled) and max(scaled) - min(scaled) >= 3

    extremes_justified = all(
        _has_note(notes, criterion_id, 15)
        for criterion_id, _, value in entries
        if value <= 2 or value >= 9
    )

    checks = [
        ReadinessCheck(
            "all-scores-set", REQUIRED, "All Criteria Scored",
            "Every assessment criterion must have a score",
            all_scored,
        ),
        ReadinessCheck(
            "notes-coverage", WARNING, "Comprehensive Notes",
            "Add notes for criteria with low scores (< 40%) or high scores (> 80%)",
            notes_cover_outliers,
        ),
        ReadinessCheck(
            "general-notes", RECOMMENDATION, "General Assessment Notes",
            "Add overall observations and recommendations",
            len((general_notes or "").strip()) > 20,
        ),
        ReadinessCheck(
            "balanced-scoring", WARNING, "Balanced Assessment",
            "Avoid clustering all scores in a narrow range",
            balanced,
        ),
        ReadinessCheck(
            "extreme-scores", WARNING, "Extreme Score Justification",
            "Provide detailed notes for very low (<=2) or very high (>=9) scores",
            extremes_justified,
        ),
    ]
    return ReadinessReport(checks=checks)
