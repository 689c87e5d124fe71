"""
relations.py - Direct relation resolution from family links.

Populates father/mother/sibling/spouse/child ids on each PersonRecord from its
family-as-child (FAMC) and family-as-spouse (FAMS) associations, and copies family
events onto the spouses. No separate index survives the run: the relation lists on
the individuals are the only result.

Module: gedcom_cache.relations
Author: @colin0brass
Last updated: 2026-10-19
"""

import copy
import logging
from typing import Dict, List, Optional

from .records import EventRecord, FamilyRecord, PersonRecord

logger = logging.getLogger(__name__)


class RelationResolver:
    """
    Resolves direct relations of individuals.

    The first existing family-as-child is the only parental truth; later ones are
    ignored. A child is listed under a parent only when that family is the child's
    parental family, so every child id points back to its father or mother.

    Attributes:
        persons (Dict[str, PersonRecord]): Individuals keyed by xref id.
        families (Dict[str, FamilyRecord]): Families keyed by xref id.
        missing_families (int): Dangling family references seen during resolution.
    """
    __slots__ = ['persons', 'families', 'missing_families', '_child_of', '_spouse_of', '_parental']

    def __init__(self, persons: Dict[str, PersonRecord], families: Dict[str, FamilyRecord]):
        self.persons = persons
        self.families = families
        self.missing_families = 0
        self._child_of: Dict[str, List[str]] = {}
        self._spouse_of: Dict[str, List[str]] = {}
        self._parental: Dict[str, Optional[str]] = {}

    def resolve(self) -> Dict[str, PersonRecord]:
        """
        Resolve relations of every individual, in place.

        Returns:
            Dict[str, PersonRecord]: The same individuals, with relation fields populated.
        """
        self._index_family_members()
        self._parental = {xref_id: self._parental_family(person) for xref_id, person in self.persons.items()}
        for person in self.persons.values():
            self._resolve_parents(person)
            self._resolve_spouse_families(person)
        logger.info(f"Resolved relations for {len(self.persons)} individuals "
                    f"({self.missing_families} missing family references)")
        return self.persons

    def _index_family_members(self) -> None:
        """Record which families name each person as child or spouse, in family order."""
        self._child_of = {}
        self._spouse_of = {}
        for family in self.families.values():
            for child_id in family.child_ids:
                self._child_of.setdefault(child_id, []).append(family.xref_id)
            for spouse_id in (family.husband_id, family.wife_id):
                if spouse_id:
                    self._spouse_of.setdefault(spouse_id, []).append(family.xref_id)

    def _existing(self, family_ids: List[str], xref_id: str) -> List[str]:
        found = []
        for family_id in family_ids:
            if family_id in self.families:
                found.append(family_id)
            else:
                self.missing_families += 1
                logger.debug(f"Individual {xref_id} references missing family {family_id}")
        return found

    def _parental_family(self, person: PersonRecord) -> Optional[str]:
        """The first existing FAMC family, else the first family listing the person as CHIL."""
        families = self._existing(person.family_child_ids, person.xref_id)
        if not families:
            families = self._child_of.get(person.xref_id, [])
        if len(families) > 1:
            logger.debug(f"Individual {person.xref_id} has {len(families)} parental families, using {families[0]}")
        return families[0] if families else None

    def _children_of(self, family: FamilyRecord) -> List[str]:
        return [child_id for child_id in family.child_ids
                if child_id in self.persons and self._parental.get(child_id) == family.xref_id]

    def _resolve_parents(self, person: PersonRecord) -> None:
        family_id = self._parental.get(person.xref_id)
        if family_id is None:
            return
        family = self.families[family_id]
        person.father_id = family.husband_id if family.husband_id in self.persons else None
        person.mother_id = family.wife_id if family.wife_id in self.persons else None
        person.sibling_ids = [child_id for child_id in self._children_of(family) if child_id != person.xref_id]

    def _resolve_spouse_families(self, person: PersonRecord) -> None:
        """Collect spouses and children, and copy family events onto the person."""
        declared = self._existing(person.family_spouse_ids, person.xref_id)
        family_ids = list(dict.fromkeys(declared + self._spouse_of.get(person.xref_id, [])))
        spouse_ids: List[str] = []
        child_ids: List[str] = []
        for family_id in family_ids:
            family = self.families[family_id]
            if person.xref_id not in (family.husband_id, family.wife_id):
                logger.debug(f"Individual {person.xref_id} is not a spouse of family {family_id}, skipped")
                continue
            spouse_id = family.other_spouse(person.xref_id)
            if spouse_id not in self.persons:
                spouse_id = None
            if spouse_id and spouse_id not in spouse_ids:
                spouse_ids.append(spouse_id)
            children = self._children_of(family)
            child_ids.extend(child_id for child_id in children if child_id not in child_ids)
            person.events.extend(self._family_events(family, spouse_id))
            person.events.extend(self._child_birth_events(family, children))
        person.spouse_ids = spouse_ids
        person.child_ids = child_ids

    @staticmethod
    def _family_events(family: FamilyRecord, spouse_id: Optional[str]) -> List[EventRecord]:
        events = []
        for event in family.events:
            own = copy.deepcopy(event)
            own.spouse_id = spouse_id
            own.family_id = family.xref_id
            events.append(own)
        return events

    def _child_birth_events(self, family: FamilyRecord, children: List[str]) -> List[EventRecord]:
        events = []
        for child_id in children:
            birth = self.persons[child_id].get_event('birth')
            if birth is None:
                continue
            events.append(EventRecord(
                kind='child-birth',
                date_raw=birth.date_raw,
                date=birth.date,
                place=copy.deepcopy(birth.place),
                child_id=child_id,
                family_id=family.xref_id,
            ))
        return events
