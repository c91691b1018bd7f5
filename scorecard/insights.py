"""
Insight rule engine.

Derives reinforcing ("green flag") and cautionary ("red flag") findings from
the pattern of criterion scores. Rules are declared as data: each rule is a
predicate over a ScoreProfile plus a message. Rules fire in declaration order
and every firing appends its message; nothing is deduplicated.

Thresholds are written on a 0-10 scale. Scores from criteria with a different
maximum are normalized to that scale before rules see them.
Rules that read a criterion the catalog does not define are skipped, so a
catalog without the behavioral ids only gets the profile-wide rules.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from .aggregator import is_score_value
from .catalog import BEHAVIORAL_CATALOG, CriteriaCatalog
from .models import AssessmentRecord, InsightFinding, Polarity, SubjectKind


RULE_SCALE = 10


@dataclass(frozen=True)
class RankedCriterion:
    id: str
    name: str
    score: float            # Score as entered (negatives clamped to 0)
    scaled_score: float     # Score on the 0-10 rule scale


class ScoreProfile:
    """A score vector read through a catalog on the rule scale.

    Every catalog criterion has a value; absent, negative and non-numeric
    entries read as 0. Ids outside the catalog read as 0 as well.
    """

    def __init__(self, vector: Mapping[str, float], catalog: CriteriaCatalog):
        self.catalog = catalog
        self.ranked: List[RankedCriterion] = []
        self._values: Dict[str, float] = {}
        for criterion in catalog:
            raw = vector.get(criterion.id, 0)
            raw = max(raw, 0) if is_score_value(raw) else 0
            if criterion.max_value > 0:
                scaled = raw * RULE_SCALE / criterion.max_value
            else:
                scaled = 0
            self._values[criterion.id] = scaled
            self.ranked.append(RankedCriterion(criterion.id, criterion.display_name, raw, scaled))
        # Stable sort keeps catalog order among equal scores
        self.ranked.sort(key=lambda item: item.scaled_score, reverse=True)

    def value(self, criterion_id: str) -> float:
        return self._values.get(criterion_id, 0)

    @property
    def top(self) -> Optional[RankedCriterion]:
        return self.ranked[0] if self.ranked else None

    @property
    def bottom(self) -> Optional[RankedCriterion]:
        return self.ranked[-1] if self.ranked else None

    def count_at_least(self, threshold: float) -> int:
        return sum(1 for item in self.ranked if item.scaled_score >= threshold)

    def count_at_most(self, threshold: float) -> int:
        return sum(1 for item in self.ranked if item.scaled_score <= threshold)


Predicate = Callable[[ScoreProfile], bool]


def _reads(predicate: Predicate, criteria: Tuple[str, ...]) -> Predicate:
    """Tag a predicate with the criterion ids it reads."""
    predicate.criteria = criteria
    return predicate


def at_least(criterion_id: str, threshold: float) -> Predicate:
    return _reads(lambda profile: profile.value(criterion_id) >= threshold, (criterion_id,))


def at_most(criterion_id: str, threshold: float) -> Predicate:
    return _reads(lambda profile: profile.value(criterion_id) <= threshold, (criterion_id,))


def all_of(*predicates: Predicate) -> Predicate:
    criteria: List[str] = []
    for predicate in predicates:
        criteria.extend(c for c in getattr(predicate, "criteria", ()) if c not in criteria)
    return _reads(
        lambda profile: all(predicate(profile) for predicate in predicates),
        tuple(criteria),
    )


def top_at_least(threshold: float) -> Predicate:
    """The single highest-scoring criterion reaches threshold."""
    return lambda profile: profile.top is not None and profile.top.scaled_score >= threshold


def bottom_at_most(threshold: float) -> Predicate:
    """The single lowest-scoring criterion is at or below threshold."""
    return lambda profile: profile.bottom is not None and profile.bottom.scaled_score <= threshold


def uneven_profile(high: float = 8, low: float = 4, min_high: int = 3, min_low: int = 2) -> Predicate:
    """Several excellent scores alongside several weak ones."""
    return lambda profile: (
        profile.count_at_least(high) >= min_high and profile.count_at_most(low) >= min_low
    )


@dataclass(frozen=True)
class InsightRule:
    name: str
    polarity: Polarity
    predicate: Predicate
    message: str    # May reference {top} and {bottom}

    @property
    def criteria(self) -> Tuple[str, ...]:
        """Criterion ids the rule reads; empty for profile-wide rules."""
        return getattr(self.predicate, "criteria", ())

    def applies_to(self, catalog: CriteriaCatalog) -> bool:
        return all(criterion_id in catalog for criterion_id in self.criteria)

    def fires(self, profile: ScoreProfile) -> bool:
        return self.predicate(profile)

    def render(self, profile: ScoreProfile) -> str:
        top = profile.top.name.lower() if profile.top else ""
        bottom = profile.bottom.name.lower() if profile.bottom else ""
        return self.message.format(top=top, bottom=bottom)


REINFORCING = Polarity.REINFORCING
CAUTIONARY = Polarity.CAUTIONARY

INDIVIDUAL_RULES: Tuple[InsightRule, ...] = (
    # Positive behavioral indicators
    InsightRule(
        "authentic-leadership", REINFORCING,
        all_of(at_least("leadership", 8), at_least("emotional-intelligence", 7), at_least("communication", 7)),
        "Demonstrates authentic leadership with strong emotional intelligence and communication skills",
    ),
    InsightRule(
        "inclusive-team-player", REINFORCING,
        all_of(at_least("collaboration", 8), at_least("communication", 7)),
        "Excellent team player with inclusive communication style - builds strong relationships",
    ),
    InsightRule(
        "visionary-thinker", REINFORCING,
        all_of(at_least("innovation", 8), at_least("strategic-thinking", 7)),
        "Visionary thinker who combines creative innovation with strategic business acumen",
    ),
    InsightRule(
        "resilient-problem-solver", REINFORCING,
        all_of(at_least("problem-solving", 8), at_least("adaptability", 7)),
        "Resilient problem-solver who thrives in complex, changing environments",
    ),
    InsightRule(
        "emotional-maturity", REINFORCING,
        all_of(at_least("emotional-intelligence", 8), at_least("leadership", 6)),
        "Shows mature emotional regulation and self-awareness in leadership situations",
    ),
    InsightRule(
        "strategic-decisions", REINFORCING,
        all_of(at_least("decision-making", 8), at_least("strategic-thinking", 7)),
        "Makes well-informed, strategic decisions with consideration of long-term implications",
    ),

    # Behavioral concerns
    InsightRule(
        "directive-leadership", CAUTIONARY,
        all_of(at_least("leadership", 8), at_most("emotional-intelligence", 5)),
        "High leadership drive but may lack emotional sensitivity - risk of being overly directive or dismissive",
    ),
    InsightRule(
        "collaborative-risk", CAUTIONARY,
        all_of(at_least("leadership", 7), at_most("collaboration", 5)),
        "Strong leadership potential but may struggle with collaborative decision-making and team inclusion",
    ),
    InsightRule(
        "impulsive-innovator", CAUTIONARY,
        all_of(at_least("innovation", 8), at_most("decision-making", 5)),
        "Creative and innovative but may be impulsive - needs to balance creativity with practical decision-making",
    ),
    InsightRule(
        "aloof-strategist", CAUTIONARY,
        all_of(at_least("strategic-thinking", 8), at_most("communication", 5)),
        "Strategic thinker but may struggle to articulate vision clearly - could appear aloof or disconnected",
    ),
    InsightRule(
        "rigid-decider", CAUTIONARY,
        all_of(at_least("decision-making", 8), at_most("adaptability", 4)),
        "Decisive but potentially rigid - may struggle when quick pivots or flexibility are required",
    ),
    InsightRule(
        "solo-problem-solver", CAUTIONARY,
        all_of(at_least("problem-solving", 7), at_most("collaboration", 4)),
        "Strong individual problem-solver but may prefer solo work over collaborative solutions",
    ),
    InsightRule(
        "persuasive-but-insensitive", CAUTIONARY,
        all_of(at_least("communication", 8), at_most("emotional-intelligence", 4)),
        "Articulate communicator but may lack empathy - risk of being persuasive but insensitive",
    ),
    InsightRule(
        "low-digital-literacy", CAUTIONARY,
        all_of(at_least("leadership", 6), at_most("digital-fluency", 3)),
        "Leadership potential limited by low digital literacy - may struggle in modern workplace environments",
    ),
    InsightRule(
        "communication-barriers", CAUTIONARY,
        all_of(at_most("communication", 4), at_least("leadership", 5)),
        "Leadership ambitions hindered by communication barriers - essential for advancement",
    ),
    InsightRule(
        "emotional-intelligence-gaps", CAUTIONARY,
        at_most("emotional-intelligence", 3),
        "Significant emotional intelligence gaps - may create interpersonal conflicts and team dysfunction",
    ),
    InsightRule(
        "inflexible-strategist", CAUTIONARY,
        all_of(at_most("adaptability", 3), at_least("strategic-thinking", 6)),
        "Strategic thinking ability undermined by inflexibility - may resist necessary changes",
    ),
    InsightRule(
        "poor-collaboration", CAUTIONARY,
        all_of(at_most("collaboration", 3), at_least("leadership", 5)),
        "Leadership potential compromised by poor collaborative skills - may alienate team members",
    ),

    # Profile-wide patterns
    InsightRule(
        "top-strength", REINFORCING,
        top_at_least(9),
        "Exceptional strength in {top} - potential area of expertise and mentoring others",
    ),
    InsightRule(
        "critical-weakness", CAUTIONARY,
        bottom_at_most(2),
        "Critical weakness in {bottom} - requires immediate and intensive development",
    ),
    InsightRule(
        "uneven-profile", CAUTIONARY,
        uneven_profile(),
        "Uneven performance profile - excellence in some areas may mask critical gaps in others",
    ),
)

GROUP_RULES: Tuple[InsightRule, ...] = (
    # Positive team dynamics
    InsightRule(
        "team-cohesion", REINFORCING,
        all_of(at_least("collaboration", 8), at_least("communication", 7), at_least("emotional-intelligence", 7)),
        "Demonstrates exceptional team cohesion with inclusive communication and mutual respect",
    ),
    InsightRule(
        "distributed-leadership", REINFORCING,
        all_of(at_least("leadership", 7), at_least("collaboration", 8)),
        "Shows distributed leadership model - team members support and elevate each other effectively",
    ),
    InsightRule(
        "creative-powerhouse", REINFORCING,
        all_of(at_least("innovation", 8), at_least("problem-solving", 7)),
        "Creative powerhouse team that generates innovative solutions through collective brainstorming",
    ),
    InsightRule(
        "resilient-team", REINFORCING,
        all_of(at_least("adaptability", 8), at_least("collaboration", 7)),
        "Highly resilient team that navigates change while maintaining strong group dynamics",
    ),
    InsightRule(
        "strategic-team", REINFORCING,
        all_of(at_least("strategic-thinking", 8), at_least("decision-making", 7)),
        "Strategic team that makes well-considered collective decisions with clear direction",
    ),
    InsightRule(
        "emotionally-intelligent-team", REINFORCING,
        all_of(at_least("emotional-intelligence", 8), at_least("communication", 7)),
        "Emotionally intelligent team with healthy conflict resolution and supportive atmosphere",
    ),

    # Team dysfunction patterns
    InsightRule(
        "exclusion-risk", CAUTIONARY,
        all_of(at_least("leadership", 8), at_most("collaboration", 5)),
        "Potential dominant leadership creating team imbalance - risk of excluding quieter members",
    ),
    InsightRule(
        "unfocused-creativity", CAUTIONARY,
        all_of(at_least("innovation", 8), at_most("decision-making", 4)),
        "Creative energy may lack focus - team generates ideas but struggles with implementation decisions",
    ),
    InsightRule(
        "poor-information-sharing", CAUTIONARY,
        all_of(at_least("strategic-thinking", 7), at_most("communication", 5)),
        "Strategic thinking exists but poor information sharing - may create confusion or misalignment",
    ),
    InsightRule(
        "internal-competition", CAUTIONARY,
        all_of(at_least("problem-solving", 7), at_most("collaboration", 4)),
        "Individual problem-solving strength not translating to team solutions - potential for internal competition",
    ),
    InsightRule(
        "rigid-group-thinking", CAUTIONARY,
        all_of(at_least("decision-making", 7), at_most("adaptability", 4)),
        "Team makes quick decisions but may be inflexible when circumstances change - rigid group thinking",
    ),
    InsightRule(
        "burnout-risk", CAUTIONARY,
        all_of(at_least("leadership", 6), at_most("emotional-intelligence", 4)),
        "Leadership present but lacks emotional awareness - potential for team stress and burnout",
    ),
    InsightRule(
        "team-silos", CAUTIONARY,
        all_of(at_least("communication", 7), at_most("collaboration", 4)),
        "Good individual communicators but poor team integration - may have subgroups or silos",
    ),
    InsightRule(
        "collaboration-breakdown", CAUTIONARY,
        at_most("collaboration", 3),
        "Fundamental collaboration breakdown - team may be dysfunctional with interpersonal conflicts",
    ),
    InsightRule(
        "team-conflict-risk", CAUTIONARY,
        all_of(at_most("communication", 3), at_most("emotional-intelligence", 4)),
        "Poor communication combined with low emotional intelligence - high risk of team conflict",
    ),
    InsightRule(
        "resistance-to-change", CAUTIONARY,
        all_of(at_most("adaptability", 3), at_least("strategic-thinking", 6)),
        "Strategic capability undermined by resistance to change - team may become stuck in outdated approaches",
    ),

    # Profile-wide patterns
    InsightRule(
        "team-top-strength", REINFORCING,
        top_at_least(9),
        "Exceptional team strength in {top} - could mentor other teams in this area",
    ),
    InsightRule(
        "team-critical-weakness", CAUTIONARY,
        bottom_at_most(2),
        "Critical team weakness in {bottom} - requires immediate team development intervention",
    ),
    InsightRule(
        "inconsistent-team", CAUTIONARY,
        uneven_profile(),
        "Inconsistent team performance - strong areas may be masking significant team development needs",
    ),
)

RULE_TABLES: Dict[SubjectKind, Tuple[InsightRule, ...]] = {
    SubjectKind.INDIVIDUAL: INDIVIDUAL_RULES,
    SubjectKind.GROUP: GROUP_RULES,
}


@dataclass(frozen=True)
class InsightReport:
    reinforcing: List[str]
    cautionary: List[str]

    @property
    def findings(self) -> List[InsightFinding]:
        return (
            [InsightFinding(Polarity.REINFORCING, text) for text in self.reinforcing]
            + [InsightFinding(Polarity.CAUTIONARY, text) for text in self.cautionary]
        )


def evaluate(vector: Mapping[str, float],
             variant: Union[SubjectKind, str] = SubjectKind.INDIVIDUAL,
             catalog: CriteriaCatalog = BEHAVIORAL_CATALOG) -> InsightReport:
    """Run the rule table for a subject kind against a score vector.

    Args:
        vector: Criterion id -> score; missing or malformed entries read as 0
        variant: Subject kind selecting the rule table
        catalog: Catalog the scores were given against

    Returns:
        InsightReport with findings in rule declaration order
    """
    rules = RULE_TABLES[SubjectKind(variant)]
    profile = ScoreProfile(vector, catalog)
    reinforcing: List[str] = []
    cautionary: List[str] = []
    for rule in rules:
        # Skip rules about criteria this catalog does not score
        if not rule.applies_to(catalog):
            continue
        if not rule.fires(profile):
            continue
        target = reinforcing if rule.polarity is Polarity.REINFORCING else cautionary
        target.append(rule.render(profile))
    return InsightReport(reinforcing=reinforcing, cautionary=cautionary)


def rank_criteria(vector: Mapping[str, float], catalog: CriteriaCatalog,
                  count: int = 3) -> Tuple[List[RankedCriterion], List[RankedCriterion]]:
    """Get the strongest and weakest criteria.

    Returns:
        (strongest, weakest), each up to count entries; weakest starts with
        the lowest score
    """
    ranked = ScoreProfile(vector, catalog).ranked
    strongest = ranked[:count]
    weakest = list(reversed(ranked[-count:])) if count > 0 else []
    return strongest, weakest


def _format_number(value: float) -> str:
    return f"{value:g}"


def compose_summary(name: str, record: AssessmentRecord, catalog: CriteriaCatalog) -> str:
    """Default narrative summary for a scored record."""
    strongest, weakest = rank_criteria(record.scores, catalog)
    summary = (
        f"{name} demonstrated {record.performance_band.value.lower()} performance with an overall "
        f"score of {_format_number(record.total_score)}/{_format_number(record.max_score)}. "
        f"Key strengths include {', '.join(item.name.lower() for item in strongest)}, "
        f"while development opportunities lie in {', '.join(item.name.lower() for item in weakest)}."
    )
    if record.reinforcing_findings:
        summary += f" Notable highlights: {record.reinforcing_findings[0]}"
    return summary
