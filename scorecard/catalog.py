"""
Criteria catalogs.

A catalog is the fixed, ordered list of criteria a subject is scored against.
Catalogs are read-only and shared by every assessment; a record remembers the
key of the catalog it was scored with.
"""

from typing import Dict, Iterator, List, Optional, Sequence

from .errors import ValidationError
from .models import Criterion, SubjectKind


class CriteriaCatalog:
    """Ordered, immutable collection of criteria identified by a key."""

    def __init__(self, key: str, criteria: Sequence[Criterion]):
        """Initialize catalog.

        Args:
            key: Stable identifier stored on every record scored with this catalog
            criteria: Criteria in display order

        Raises:
            ValidationError: If an id is repeated or a maximum is negative
        """
        seen = set()
        for criterion in criteria:
            if criterion.id in seen:
                raise ValidationError(f"Duplicate criterion id '{criterion.id}'", criterion.id)
            if criterion.max_value < 0:
                raise ValidationError(
                    f"Criterion '{criterion.id}' has negative max value {criterion.max_value}",
                    criterion.id,
                )
            seen.add(criterion.id)
        self.key = key
        self._criteria = tuple(criteria)
        self._by_id: Dict[str, Criterion] = {c.id: c for c in self._criteria}

    def __iter__(self) -> Iterator[Criterion]:
        return iter(self._criteria)

    def __len__(self) -> int:
        return len(self._criteria)

    def __contains__(self, criterion_id: str) -> bool:
        return criterion_id in self._by_id

    def __repr__(self) -> str:
        return f"CriteriaCatalog({self.key!r}, {len(self._criteria)} criteria)"

    @property
    def ids(self) -> List[str]:
        return [c.id for c in self._criteria]

    @property
    def max_total(self) -> float:
        return sum(c.max_value for c in self._criteria)

    def get(self, criterion_id: str) -> Optional[Criterion]:
        return self._by_id.get(criterion_id)

    def display_name(self, criterion_id: str) -> str:
        criterion = self._by_id.get(criterion_id)
        return criterion.display_name if criterion else criterion_id


BEHAVIORAL_CATALOG = CriteriaCatalog("behavioral-v1", [
    Criterion("strategic-thinking", "Strategic Thinking", 10),
    Criterion("leadership", "Leadership", 10),
    Criterion("communication", "Communication", 10),
    Criterion("innovation", "Innovation", 10),
    Criterion("problem-solving", "Problem Solving", 10),
    Criterion("collaboration", "Collaboration", 10),
    Criterion("adaptability", "Adaptability", 10),
    Criterion("decision-making", "Decision Making", 10),
    Criterion("emotional-intelligence", "Emotional Intelligence", 10),
    Criterion("digital-fluency", "Digital Fluency", 10),
])

GROUP_SCORING_CATALOG = CriteriaCatalog("group-v1", [
    Criterion("team-collaboration", "Team Collaboration", 20,
              "How effectively the group worked together and leveraged each member's strengths"),
    Criterion("collective-decision-making", "Collective Decision Making", 20,
              "Quality of group decisions and the process used to reach consensus"),
    Criterion("communication-dynamics", "Communication Dynamics", 20,
              "Clarity, inclusivity, and effectiveness of group communication"),
    Criterion("shared-leadership", "Shared Leadership", 20,
              "Distribution of leadership responsibilities and influence within the group"),
    Criterion("innovation-synergy", "Innovation & Synergy", 20,
              "Generation of creative solutions through collective intelligence"),
])

CATALOGS: Dict[str, CriteriaCatalog] = {
    BEHAVIORAL_CATALOG.key: BEHAVIORAL_CATALOG,
    GROUP_SCORING_CATALOG.key: GROUP_SCORING_CATALOG,
}

# Individuals and groups are both scored on the behavioral criteria unless a
# draft names another catalog.
DEFAULT_CATALOG_KEYS = {
    SubjectKind.INDIVIDUAL: BEHAVIORAL_CATALOG.key,
    SubjectKind.GROUP: BEHAVIORAL_CATALOG.key,
}


def get_catalog(key: str) -> CriteriaCatalog:
    """Look up a registered catalog.

    Raises:
        ValidationError: If no catalog is registered under key
    """
    try:
        return CATALOGS[key]
    except KeyError:
        raise ValidationError(f"Unknown criteria catalog '{key}'")
