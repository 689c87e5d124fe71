"""
Pytest fixtures for gedcom_cache tests.

Fixtures return factories that build RecordNode trees, so each test states only the
GEDCOM structure it cares about.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from gedcom_cache.config import CacheConfig
from gedcom_cache.geo_config import GeoReference
from gedcom_cache.pipeline_context import PipelineContext
from gedcom_cache.record_source import MemoryRecordSource, RecordNode

DATA_DIR = Path(__file__).parent / "data"


def _node(tag: str, value=None, *subs: RecordNode, xref_id: Optional[str] = None) -> RecordNode:
    return RecordNode(tag, value, list(subs), xref_id=xref_id)


def _event(tag: str, date: Optional[str] = None, place: Optional[str] = None, *extra: RecordNode, value=None) -> RecordNode:
    subs: List[RecordNode] = []
    if date:
        subs.append(_node('DATE', date))
    if place:
        subs.append(_node('PLAC', place))
    subs.extend(extra)
    return _node(tag, value, *subs)


@pytest.fixture
def node():
    """Factory: node('TAG', value, *sub_nodes, xref_id=None)."""
    return _node


@pytest.fixture
def event_node():
    """Factory: event_node('BIRT', date, place, *extra_sub_nodes, value=None)."""
    return _event


@pytest.fixture
def individual():
    """Factory for INDI records."""
    def _create(xref_id: str, name: Optional[str] = None, sex: Optional[str] = None,
                birth: Optional[Sequence] = None, death: Optional[Sequence] = None,
                famc: Sequence[str] = (), fams: Sequence[str] = (), extra: Sequence[RecordNode] = ()) -> RecordNode:
        subs: List[RecordNode] = []
        if name:
            subs.append(_node('NAME', name))
        if sex:
            subs.append(_node('SEX', sex))
        if birth is not None:
            subs.append(_event('BIRT', *birth))
        if death is not None:
            subs.append(_event('DEAT', *death))
        subs.extend(_node('FAMC', family_id) for family_id in famc)
        subs.extend(_node('FAMS', family_id) for family_id in fams)
        subs.extend(extra)
        return _node('INDI', None, *subs, xref_id=xref_id)
    return _create


@pytest.fixture
def family():
    """Factory for FAM records."""
    def _create(xref_id: str, husband: Optional[str] = None, wife: Optional[str] = None,
                children: Sequence[str] = (), events: Sequence[RecordNode] = ()) -> RecordNode:
        subs: List[RecordNode] = []
        if husband:
            subs.append(_node('HUSB', husband))
        if wife:
            subs.append(_node('WIFE', wife))
        subs.extend(_node('CHIL', child) for child in children)
        subs.extend(events)
        return _node('FAM', None, *subs, xref_id=xref_id)
    return _create


@pytest.fixture
def context():
    """A fresh pipeline context that never touches the network."""
    return PipelineContext(geo_reference=GeoReference(url=None))


@pytest.fixture
def config():
    return CacheConfig()


@pytest.fixture
def sample_source(individual, family, node, event_node):
    """
    A small three-generation tree.

        @I1@ Jean Martin  x  @I2@ Marie Durand   (@F1@, civil + religious, June 1950)
             |- @I3@ Pierre Martin  x  @I5@ Anne Petit   (@F2@, divorced)
             |        |- @I6@ Luc Martin
             |- @I4@ Claire Martin
    """
    nodes = [
        node('HEAD', None, node('PLAC', None, node('FORM', 'Town, Area code, County, Region, Country'))),
        individual('@I1@', 'Jean /Martin/', 'M',
                   birth=('20 JUL 1925', 'Huisseau-sur-Mauves, 45130, Loiret, Centre, France'),
                   death=('3 MAR 1990', 'Orléans, 45000, Loiret, Centre, France'),
                   fams=['@F1@'],
                   extra=[node('NOTE', 'Ancien combattant', node('CONT', 'Croix de guerre')),
                          node('NOTE', '@N1@'),
                          node('SOUR', '@S1@', node('PAGE', 'Acte 12'), node('QUAY', '3')),
                          node('OBJE', '@O1@'),
                          event_node('OCCU', '1950', 'Orléans, 45000, Loiret, Centre, France', value='Boulanger')]),
        individual('@I2@', 'Marie /Durand/', 'F',
                   birth=('1928', 'Saint-Denis, 93200, Seine-Saint-Denis, Île-de-France, France'),
                   fams=['@F1@']),
        individual('@I3@', 'Pierre /Martin/', 'M', birth=('5 MAY 1952', 'Orléans, 45000, Loiret, Centre, France'),
                   famc=['@F1@'], fams=['@F2@']),
        individual('@I4@', 'Claire /Martin/', 'F', birth=('1955', None), famc=['@F1@']),
        individual('@I5@', 'Anne /Petit/', 'F', fams=['@F2@']),
        individual('@I6@', 'Luc /Martin/', 'M', birth=('1980', 'Paris 15e, 75015, Paris, Île-de-France, France'), famc=['@F2@']),
        family('@F1@', '@I1@', '@I2@', ['@I3@', '@I4@'], events=[
            event_node('MARR', '10 JUN 1950', 'Orléans, 45000, Loiret, Centre, France',
                       node('TYPE', 'Mariage civil'), node('NOTE', 'Mairie d\'Orléans')),
            event_node('MARR', '12 JUN 1950', 'Orléans, 45000, Loiret, Centre, France',
                       node('TYPE', 'Mariage religieux')),
        ]),
        family('@F2@', '@I3@', '@I5@', ['@I6@'], events=[
            event_node('MARR', '1975', 'Paris, 75001, Paris, Île-de-France, France'),
            event_node('MARR', '1976', 'Paris, 75001, Paris, Île-de-France, France'),
            event_node('DIV', '1990'),
        ]),
        node('NOTE', 'Famille originaire du Loiret', xref_id='@N1@'),
        node('SOUR', None, node('TITL', 'Registres paroissiaux de Huisseau'), node('AUTH', 'Archives du Loiret'),
             node('REPO', '@R1@', node('CALN', '3E 1234')), xref_id='@S1@'),
        node('REPO', None, node('NAME', 'Archives départementales du Loiret'), xref_id='@R1@'),
        node('OBJE', None, node('FILE', 'photos/jean.jpg', node('FORM', 'jpg'), node('TITL', 'Jean 1950')), xref_id='@O1@'),
    ]
    return MemoryRecordSource(nodes)


@pytest.fixture
def sample_ged_path() -> Path:
    return DATA_DIR / "sample.ged"
