"""
records.py - Plain data structures produced by the record extractor.

Extraction materialises each GEDCOM record into one of these dataclasses. Later
stages (relation resolution, event normalisation, cache assembly) fill in derived
fields; nothing here holds a reference back into the record source.

Module: gedcom_cache.records
Author: @colin0brass
Last updated: 2026-10-19
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SEX_VALUES = ('male', 'female', 'unknown')


@dataclass
class NoteRef:
    """
    A note attached to a record or event.

    Either a reference to a NOTE record (pointer) or an inline text. Inline notes get a
    synthetic note_id during cache assembly.
    """
    pointer: Optional[str] = None
    text: Optional[str] = None
    note_id: Optional[str] = None

    @property
    def is_inline(self) -> bool:
        return self.pointer is None


@dataclass
class SourceCitation:
    """A SOUR citation with its optional page and quality assessment."""
    pointer: Optional[str] = None
    page: Optional[str] = None
    quality: Optional[int] = None
    text: Optional[str] = None


@dataclass
class PlaceRef:
    """
    A place as attached to an event.

    Attributes:
        raw: Place string as found in the source.
        key: Canonical key (set by the event normaliser).
        subdivision: Sub-place detail such as a church or a street.
        latitude, longitude: Native coordinates from PLAC/MAP. Transport-only: they feed the
            places table and never appear in the encoded cache.
    """
    raw: str
    key: Optional[str] = None
    subdivision: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class Ceremony:
    """One civil or religious ceremony of a fused marriage."""
    ceremony_type: str
    date_raw: Optional[Any] = None
    date: Optional[int] = None
    place: Optional[PlaceRef] = None
    notes: List[NoteRef] = field(default_factory=list)
    note_ids: List[str] = field(default_factory=list)
    sources: List[SourceCitation] = field(default_factory=list)


@dataclass
class EventRecord:
    """
    A life event or attribute of an individual.

    Attributes:
        kind: Long-form kind ('birth', 'marriage', 'occupation', 'custom', ...).
        date_raw: Raw DATE value (string or ged4py DateValue).
        date: Sortable YYYYMMDD integer, set by normalisation.
        place: Optional PlaceRef.
        value: Attribute value (occupation text, children count, ...).
        custom_type: TYPE of EVEN/FACT records.
        marriage_type: TYPE of a marriage record (used to tag ceremonies).
        spouse_id, child_id, family_id: Related records for family events.
        ceremonies: Only present on fused marriage events.
    """
    kind: str
    date_raw: Optional[Any] = None
    date: Optional[int] = None
    place: Optional[PlaceRef] = None
    value: Optional[str] = None
    age: Optional[str] = None
    cause: Optional[str] = None
    custom_type: Optional[str] = None
    marriage_type: Optional[str] = None
    spouse_id: Optional[str] = None
    child_id: Optional[str] = None
    family_id: Optional[str] = None
    notes: List[NoteRef] = field(default_factory=list)
    note_ids: List[str] = field(default_factory=list)
    sources: List[SourceCitation] = field(default_factory=list)
    media_ids: List[str] = field(default_factory=list)
    ceremonies: List[Ceremony] = field(default_factory=list)

    @property
    def source_ids(self) -> List[str]:
        return [citation.pointer for citation in self.sources if citation.pointer]


@dataclass
class PersonRecord:
    """
    An individual with identity, events and direct relations.

    Relation fields are filled by the RelationResolver. Sibling, spouse and child lists
    are deduplicated; their order carries no meaning.
    """
    xref_id: str
    given: str = ''
    surname: str = ''
    name: str = ''
    sex: str = 'unknown'
    events: List[EventRecord] = field(default_factory=list)
    father_id: Optional[str] = None
    mother_id: Optional[str] = None
    sibling_ids: List[str] = field(default_factory=list)
    spouse_ids: List[str] = field(default_factory=list)
    child_ids: List[str] = field(default_factory=list)
    family_child_ids: List[str] = field(default_factory=list)
    family_spouse_ids: List[str] = field(default_factory=list)
    notes: List[NoteRef] = field(default_factory=list)
    note_ids: List[str] = field(default_factory=list)
    media_ids: List[str] = field(default_factory=list)
    sources: List[SourceCitation] = field(default_factory=list)
    identifiers: Dict[str, str] = field(default_factory=dict)
    change_date: Optional[str] = None

    def get_events(self, kind: str) -> List[EventRecord]:
        """Return all events of a kind, in stored order."""
        return [event for event in self.events if event.kind == kind]

    def get_event(self, kind: str) -> Optional[EventRecord]:
        """Return the first event of a kind, or None."""
        return next((event for event in self.events if event.kind == kind), None)

    @property
    def source_ids(self) -> List[str]:
        """All source pointers cited by the person or their events, deduplicated."""
        ids = [citation.pointer for citation in self.sources if citation.pointer]
        for event in self.events:
            ids.extend(event.source_ids)
        return list(dict.fromkeys(ids))


@dataclass
class FamilyRecord:
    xref_id: str
    husband_id: Optional[str] = None
    wife_id: Optional[str] = None
    child_ids: List[str] = field(default_factory=list)
    events: List[EventRecord] = field(default_factory=list)
    notes: List[NoteRef] = field(default_factory=list)
    media_ids: List[str] = field(default_factory=list)
    sources: List[SourceCitation] = field(default_factory=list)

    def other_spouse(self, xref_id: str) -> Optional[str]:
        """Return whichever of husband/wife is not xref_id."""
        if self.husband_id and self.husband_id != xref_id:
            return self.husband_id
        if self.wife_id and self.wife_id != xref_id:
            return self.wife_id
        return None


@dataclass
class SourceRecord:
    xref_id: str
    title: Optional[str] = None
    author: Optional[str] = None
    publication: Optional[str] = None
    text: Optional[str] = None
    abbreviation: Optional[str] = None
    call_number: Optional[str] = None
    source_type: Optional[str] = None
    category: str = 'other'
    date: Optional[str] = None
    url: Optional[str] = None
    repository_ids: List[str] = field(default_factory=list)
    notes: List[NoteRef] = field(default_factory=list)
    media_ids: List[str] = field(default_factory=list)
    change_date: Optional[str] = None


@dataclass
class RepositoryRecord:
    xref_id: str
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    notes: List[NoteRef] = field(default_factory=list)


@dataclass
class MediaRecord:
    xref_id: str
    file: Optional[str] = None
    media_format: Optional[str] = None
    title: Optional[str] = None
    media_type: str = 'unknown'
    date: Optional[str] = None
    notes: List[NoteRef] = field(default_factory=list)
    individual_ids: List[str] = field(default_factory=list)


@dataclass
class NoteRecord:
    """A NOTE record, or an inline note promoted to a note record during assembly."""
    xref_id: str
    text: str = ''
    note_type: str = 'record'
    individual_ids: List[str] = field(default_factory=list)
    source_ids: List[str] = field(default_factory=list)
