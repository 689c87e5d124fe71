"""
event_extractor.py - Event, attribute, place, note and citation extraction.

Builds EventRecord objects from the event sub-records of an INDI or FAM record:
    - Standard events and attributes (see gedcom_tags)
    - Places with native PLAC/MAP coordinates and a sub-place (subdivision)
    - Inline and referenced notes (CONT/CONC reassembled)
    - Source citations with PAGE and QUAY
    - Multimedia references

Module: gedcom_cache.event_extractor
Author: @colin0brass
Last updated: 2026-10-19
"""

import re
import logging
from typing import List, Optional

from .gedcom_tags import ATTRIBUTE_TAGS, FAMILY_EVENT_TAGS, INDIVIDUAL_EVENT_TAGS, MEDIA_TAGS, SUBDIVISION_TAGS
from .record_source import RecordNode
from .records import EventRecord, NoteRef, PlaceRef, SourceCitation

logger = logging.getLogger(__name__)

POINTER_RE = re.compile(r'^@[^@]+@$')
COORD_RE = re.compile(r'^\s*([NSEW])?\s*(-?\d+(?:[.,]\d+)?)\s*$', re.I)


def is_pointer(value) -> bool:
    """Return True if value looks like a '@X@' cross-reference."""
    return isinstance(value, str) and bool(POINTER_RE.match(value.strip()))


def text_value(value) -> Optional[str]:
    """Return a stripped string value, or None for empty, pointer or non-text values."""
    if value is None or is_pointer(value):
        return None
    text = str(value).strip()
    return text or None


def parse_coordinate(value) -> Optional[float]:
    """
    Parse a GEDCOM LATI/LONG value ('N48.8566', 'W1.5', '-3.2') into a signed float.

    Returns:
        Optional[float]: Signed decimal degrees, or None if unparsable.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    m = COORD_RE.match(str(value))
    if not m:
        logger.debug(f"Unparsable coordinate '{value}'")
        return None
    hemisphere, number = m.groups()
    coord = float(number.replace(',', '.'))
    if hemisphere and hemisphere.upper() in ('S', 'W'):
        coord = -abs(coord)
    return coord


def note_text(node: RecordNode) -> str:
    """
    Reassemble the full text of a NOTE node.

    CONT starts a new line, CONC continues the current one.
    """
    text = text_value(node.value) or ''
    for sub in node.sub_records:
        if sub.tag == 'CONT':
            text += '\n' + (str(sub.value) if sub.value is not None else '')
        elif sub.tag == 'CONC':
            text += str(sub.value) if sub.value is not None else ''
    return text


def extract_notes(node: RecordNode) -> List[NoteRef]:
    """Return the NOTE references and inline notes directly under node."""
    notes = []
    for sub in node.sub_tags('NOTE'):
        if is_pointer(sub.value):
            notes.append(NoteRef(pointer=sub.value.strip()))
        else:
            text = note_text(sub)
            if text:
                notes.append(NoteRef(text=text))
    return notes


def extract_citations(node: RecordNode) -> List[SourceCitation]:
    """Return SOUR citations directly under node."""
    citations = []
    for sub in node.sub_tags('SOUR'):
        quality = sub.sub_tag_value('QUAY')
        try:
            quality = int(quality) if quality is not None else None
        except (TypeError, ValueError):
            quality = None
        if is_pointer(sub.value):
            citations.append(SourceCitation(
                pointer=sub.value.strip(),
                page=text_value(sub.sub_tag_value('PAGE')),
                quality=quality,
                text=text_value(sub.sub_tag_value('DATA/TEXT'))))
        else:
            text = note_text(sub)
            if text:
                citations.append(SourceCitation(text=text, quality=quality))
    return citations


def extract_media_ids(node: RecordNode) -> List[str]:
    """Return pointers of OBJE references directly under node."""
    return [sub.value.strip() for sub in node.sub_tags(*MEDIA_TAGS) if is_pointer(sub.value)]


class EventExtractor:
    """
    Extracts EventRecord lists from individual and family records.

    Attributes:
        with_notes (bool): Whether event notes are extracted.
        with_sources (bool): Whether event citations are extracted.
    """
    __slots__ = ['with_notes', 'with_sources']

    def __init__(self, with_notes: bool = True, with_sources: bool = True):
        self.with_notes = with_notes
        self.with_sources = with_sources

    def extract_individual_events(self, record: RecordNode) -> List[EventRecord]:
        """
        Extract all events and attributes of an INDI record, in file order.

        Args:
            record (RecordNode): INDI record.

        Returns:
            List[EventRecord]: Extracted events.
        """
        events = []
        for sub in record.sub_records:
            if sub.tag in INDIVIDUAL_EVENT_TAGS:
                events.append(self.build_event(sub, INDIVIDUAL_EVENT_TAGS[sub.tag]))
            elif sub.tag in ATTRIBUTE_TAGS:
                events.append(self.build_event(sub, ATTRIBUTE_TAGS[sub.tag], is_attribute=True))
        return events

    def extract_family_events(self, record: RecordNode) -> List[EventRecord]:
        """Extract family events (marriage, divorce, ...) of a FAM record."""
        events = []
        for sub in record.sub_records:
            if sub.tag in FAMILY_EVENT_TAGS:
                event = self.build_event(sub, FAMILY_EVENT_TAGS[sub.tag])
                event.family_id = record.xref_id
                events.append(event)
        return events

    def build_event(self, node: RecordNode, kind: str, is_attribute: bool = False) -> EventRecord:
        """
        Build one EventRecord from an event or attribute node.

        Args:
            node (RecordNode): Event node (BIRT, OCCU, MARR, ...).
            kind (str): Long-form kind.
            is_attribute (bool): Whether the node value is the attribute value.

        Returns:
            EventRecord: Extracted event.
        """
        event_type = text_value(node.sub_tag_value('TYPE'))
        event = EventRecord(kind=kind)
        event.date_raw = node.sub_tag_value('DATE')
        event.place = self.extract_place(node)
        event.age = text_value(node.sub_tag_value('AGE'))
        event.cause = text_value(node.sub_tag_value('CAUS'))

        value = text_value(node.value)
        if is_attribute or (value and value.upper() != 'Y'):
            event.value = note_text(node) if is_attribute else value
            event.value = event.value or None

        if kind in ('custom', 'fact'):
            event.custom_type = event_type
        elif kind == 'marriage':
            event.marriage_type = event_type
        elif event_type:
            event.custom_type = event_type

        if self.with_notes:
            event.notes = extract_notes(node)
        if self.with_sources:
            event.sources = extract_citations(node)
        event.media_ids = extract_media_ids(node)
        return event

    def extract_place(self, node: RecordNode) -> Optional[PlaceRef]:
        """
        Extract the place of an event, with coordinates and subdivision.

        Falls back to the CITY/POST/CTRY parts of an ADDR structure when no PLAC is given.

        Args:
            node (RecordNode): Event node.

        Returns:
            Optional[PlaceRef]: Place, or None if the event has no location information.
        """
        plac = node.sub_tag('PLAC')
        raw = text_value(plac.value) if plac is not None else None
        latitude = longitude = None
        subdivision = None

        if plac is not None:
            latitude = parse_coordinate(plac.sub_tag_value('MAP/LATI'))
            longitude = parse_coordinate(plac.sub_tag_value('MAP/LONG'))
            for tag in SUBDIVISION_TAGS:
                subdivision = text_value(plac.sub_tag_value(tag))
                if subdivision:
                    break

        addr = node.sub_tag('ADDR')
        if addr is not None:
            if raw is None:
                parts = [text_value(addr.sub_tag_value(tag)) for tag in ('CITY', 'POST', 'STAE', 'CTRY')]
                parts = [p for p in parts if p]
                raw = ", ".join(parts) if parts else None
            if not subdivision:
                subdivision = text_value(addr.sub_tag_value('ADR1')) or text_value(addr.value)
        if not subdivision:
            subdivision = text_value(node.sub_tag_value('_SUBDIV'))

        if raw is None and latitude is None and longitude is None:
            return None
        if subdivision and raw and subdivision == raw:
            subdivision = None
        return PlaceRef(raw=raw or '', subdivision=subdivision, latitude=latitude, longitude=longitude)
