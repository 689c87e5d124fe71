"""
Pytest fixtures for statistics tests.
"""
from __future__ import annotations

from typing import Optional

import pytest

from gedcom_cache.records import Ceremony, EventRecord, PersonRecord, PlaceRef


@pytest.fixture
def person():
    """Factory for normalized PersonRecord objects."""
    def _create(xref_id: str, sex: str = 'unknown', birth: Optional[int] = None, death: Optional[int] = None,
                birth_place: Optional[str] = None, events=()) -> PersonRecord:
        person_events = []
        if birth is not None:
            place = PlaceRef(raw=birth_place, key=birth_place.lower()) if birth_place else None
            person_events.append(EventRecord(kind='birth', date=birth, place=place))
        if death is not None:
            person_events.append(EventRecord(kind='death', date=death))
        person_events.extend(events)
        return PersonRecord(xref_id=xref_id, sex=sex, events=person_events)
    return _create


@pytest.fixture
def fused_marriage():
    """Factory for a fused marriage with a civil and a religious ceremony."""
    def _create(spouse_id: str, date: int) -> EventRecord:
        return EventRecord(kind='marriage', date=date, spouse_id=spouse_id, ceremonies=[
            Ceremony('civil', date=date),
            Ceremony('religious', date=date + 2),
        ])
    return _create
