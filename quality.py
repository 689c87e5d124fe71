"""
quality.py - Per-individual data quality score.

The score is a weighted completeness measure over five categories, each capped
before summing:

    identity   25
    events     25
    sources    20
    relations  15
    media      15

The caps add up to exactly 100.

Module: gedcom_cache.quality
Author: @colin0brass
Last updated: 2026-10-19
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .records import MediaRecord, PersonRecord

logger = logging.getLogger(__name__)

CATEGORY_CAPS: Dict[str, int] = {
    'identity': 25,
    'events': 25,
    'sources': 20,
    'relations': 15,
    'media': 15,
}

KEY_EVENT_KINDS = ('marriage', 'occupation', 'residence', 'military-service')

LEVELS = (
    (80, 'excellent'),
    (60, 'good'),
    (40, 'fair'),
)

# category -> (threshold below which to recommend, priority, message)
RECOMMENDATIONS = {
    'identity': (20, 'high', 'Complete name, sex and vital dates'),
    'sources': (10, 'high', 'Cite sources for this individual'),
    'events': (15, 'medium', 'Document more life events (occupation, marriages, residences)'),
    'relations': (10, 'medium', 'Identify parents, spouses and children'),
    'media': (1, 'low', 'Attach photos or scanned documents'),
}


def quality_level(total: int) -> str:
    """Map a total score to excellent/good/fair/poor."""
    for threshold, level in LEVELS:
        if total >= threshold:
            return level
    return 'poor'


@dataclass
class QualityScore:
    """
    Quality score of one individual.

    Attributes:
        total: Sum of the capped category scores, 0-100.
        breakdown: Capped score per category.
        level: excellent, good, fair or poor.
        recommendations: Suggested improvements for weak categories.
    """
    total: int = 0
    breakdown: Dict[str, int] = field(default_factory=dict)
    level: str = 'poor'
    recommendations: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'total': self.total,
            'breakdown': dict(self.breakdown),
            'level': self.level,
            'recommendations': [dict(r) for r in self.recommendations],
        }


class QualityScorer:
    """
    Computes QualityScore objects.

    Attributes:
        media (Mapping[str, MediaRecord]): Media records, used to recognise attached documents.
    """
    __slots__ = ['media']

    def __init__(self, media: Optional[Mapping[str, MediaRecord]] = None):
        self.media = media if media is not None else {}

    def score(self, person: PersonRecord) -> QualityScore:
        """
        Score one individual.

        Args:
            person (PersonRecord): Resolved and normalized individual.

        Returns:
            QualityScore: Total, breakdown, level and recommendations.
        """
        raw = {
            'identity': self._identity(person),
            'events': self._events(person),
            'sources': self._sources(person),
            'relations': self._relations(person),
            'media': self._media(person),
        }
        breakdown = {category: min(points, CATEGORY_CAPS[category]) for category, points in raw.items()}
        total = sum(breakdown.values())
        return QualityScore(
            total=total,
            breakdown=breakdown,
            level=quality_level(total),
            recommendations=self._recommendations(breakdown),
        )

    @staticmethod
    def _identity(person: PersonRecord) -> int:
        points = 0
        if person.given and person.surname:
            points += 10
        elif person.given or person.surname:
            points += 5
        if person.sex in ('male', 'female'):
            points += 3
        birth = person.get_event('birth')
        if birth is not None:
            if birth.date:
                points += 6
            if birth.place is not None and birth.place.raw:
                points += 2
        death = person.get_event('death')
        if death is not None and death.date:
            points += 4
        return points

    @staticmethod
    def _events(person: PersonRecord) -> int:
        kinds = {event.kind for event in person.events}
        points = min(2 * len(person.events), 15)
        points += min(len(kinds), 5)
        points += sum(1 for kind in KEY_EVENT_KINDS if kind in kinds)
        return points

    @staticmethod
    def _sources(person: PersonRecord) -> int:
        count = len(person.source_ids)
        points = min(5 * count, 15)
        if count >= 2:
            points += 5
        return points

    @staticmethod
    def _relations(person: PersonRecord) -> int:
        points = 0
        if person.father_id and person.mother_id:
            points += 6
        elif person.father_id or person.mother_id:
            points += 3
        if person.spouse_ids:
            points += 4
        if person.child_ids:
            points += 3
        if person.sibling_ids:
            points += 2
        return points

    def _media(self, person: PersonRecord) -> int:
        points = min(3 * len(person.media_ids), 10)
        if person.notes or person.note_ids:
            points += 3
        if any(self.media.get(media_id) is not None and self.media[media_id].media_type == 'document'
               for media_id in person.media_ids):
            points += 2
        return points

    @staticmethod
    def _recommendations(breakdown: Dict[str, int]) -> List[Dict[str, str]]:
        recommendations = []
        for category, (threshold, priority, message) in RECOMMENDATIONS.items():
            if breakdown[category] < threshold:
                recommendations.append({'category': category, 'priority': priority, 'message': message})
        return recommendations
