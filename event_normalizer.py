"""
event_normalizer.py - Date codes, place keys and marriage ceremony fusion.

Module: gedcom_cache.event_normalizer
Author: @colin0brass
Last updated: 2026-10-19
"""

import copy
import logging
from typing import Dict, List, Optional

from .canonical import strip_accents
from .gedcom_date import GedcomDate, add_years
from .gedcom_tags import DIVORCE_KINDS, MARRIAGE_KINDS
from .pipeline_context import PipelineContext
from .records import Ceremony, EventRecord, PersonRecord, PlaceRef

logger = logging.getLogger(__name__)

RELIGIOUS_MARKERS = ('relig', 'eglise', 'church')
CIVIL_MARKERS = ('civil', 'mairie')


def ceremony_type_from_text(text: Optional[str]) -> Optional[str]:
    """Return 'religious' or 'civil' if a marriage TYPE names one, else None."""
    if not text:
        return None
    folded = strip_accents(text.lower())
    if any(marker in folded for marker in RELIGIOUS_MARKERS):
        return 'religious'
    if any(marker in folded for marker in CIVIL_MARKERS):
        return 'civil'
    return None


class EventNormalizer:
    """
    Normalizes the events of resolved individuals.

    Each event gets its YYYYMMDD date code and the canonical key of its place. Then
    marriages with the same spouse are fused into one event with ceremonies when they
    are all dated, lie within max_span_years of each other and the couple never
    divorced.

    Attributes:
        context (PipelineContext): Owner of the place canonicalizer memo.
        max_span_years (int): Largest span (inclusive) between fused ceremonies.
        fused_count (int): Fused marriage events produced so far.
    """
    __slots__ = ['context', 'max_span_years', 'fused_count']

    def __init__(self, context: Optional[PipelineContext] = None, max_span_years: int = 10):
        if max_span_years < 0:
            raise ValueError("max_span_years must not be negative")
        self.context = context if context is not None else PipelineContext()
        self.max_span_years = max_span_years
        self.fused_count = 0

    def normalize(self, persons: Dict[str, PersonRecord]) -> Dict[str, PersonRecord]:
        """Normalize every individual in place and return the mapping."""
        for person in persons.values():
            self.normalize_person(person)
        logger.info(f"Normalized events of {len(persons)} individuals ({self.fused_count} fused marriages)")
        return persons

    def normalize_person(self, person: PersonRecord) -> PersonRecord:
        for event in person.events:
            self.normalize_event(event)
        person.events = self.fuse_marriages(person.events)
        return person

    def normalize_event(self, event: EventRecord) -> EventRecord:
        """Set the date code and place key of one event."""
        if event.date is None and event.date_raw is not None:
            gdate = GedcomDate(event.date_raw)
            event.date = gdate.code
            if gdate.code is None:
                logger.debug(f"No usable date in {event.kind} date '{event.date_raw}'")
        if event.place is not None and event.place.raw:
            event.place.key = self.context.place_key(event.place.raw)
        return event

    def fuse_marriages(self, events: List[EventRecord]) -> List[EventRecord]:
        """
        Fuse marriages with the same spouse.

        Args:
            events (List[EventRecord]): Normalized events of one individual.

        Returns:
            List[EventRecord]: Events with each fused group replaced, at the position of its
            first member, by a single marriage carrying ceremonies.
        """
        groups: Dict[str, List[EventRecord]] = {}
        for event in events:
            if event.kind in MARRIAGE_KINDS and event.spouse_id:
                groups.setdefault(event.spouse_id, []).append(event)

        replacements: Dict[int, Optional[EventRecord]] = {}
        for spouse_id, marriages in groups.items():
            if len(marriages) < 2 or not self._can_fuse(marriages, events, spouse_id):
                continue
            ordered = sorted(marriages, key=lambda e: e.date)
            fused = self._fuse(ordered, spouse_id)
            for marriage in marriages:
                replacements[id(marriage)] = None
            replacements[id(marriages[0])] = fused
            self.fused_count += 1
            logger.debug(f"Fused {len(marriages)} marriages with spouse {spouse_id}")

        if not replacements:
            return events
        result = []
        for event in events:
            if id(event) in replacements:
                if replacements[id(event)] is not None:
                    result.append(replacements[id(event)])
            else:
                result.append(event)
        return result

    def _can_fuse(self, marriages: List[EventRecord], events: List[EventRecord], spouse_id: str) -> bool:
        if any(marriage.date is None for marriage in marriages):
            logger.debug(f"Undated marriage with spouse {spouse_id}, kept distinct")
            return False
        if any(event.kind in DIVORCE_KINDS and event.spouse_id == spouse_id for event in events):
            logger.debug(f"Divorce with spouse {spouse_id}, marriages kept distinct")
            return False
        first = min(marriage.date for marriage in marriages)
        last = max(marriage.date for marriage in marriages)
        return last <= add_years(first, self.max_span_years)

    @staticmethod
    def _fuse(ordered: List[EventRecord], spouse_id: str) -> EventRecord:
        ceremonies = []
        for index, marriage in enumerate(ordered):
            ceremony_type = ceremony_type_from_text(marriage.marriage_type) or ('civil' if index == 0 else 'religious')
            ceremonies.append(Ceremony(
                ceremony_type=ceremony_type,
                date_raw=marriage.date_raw,
                date=marriage.date,
                place=marriage.place,
                notes=marriage.notes,
                note_ids=marriage.note_ids,
                sources=marriage.sources,
            ))
        first = ordered[0]
        media_ids = list(dict.fromkeys(media_id for marriage in ordered for media_id in marriage.media_ids))
        return EventRecord(
            kind='marriage',
            date_raw=first.date_raw,
            date=first.date,
            place=copy.deepcopy(first.place) if isinstance(first.place, PlaceRef) else None,
            spouse_id=spouse_id,
            family_id=first.family_id,
            notes=list(first.notes),
            note_ids=list(first.note_ids),
            sources=list(first.sources),
            media_ids=media_ids,
            ceremonies=ceremonies,
        )
