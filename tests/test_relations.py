"""Tests for relation resolution."""
from gedcom_cache.extractor import RecordExtractor
from gedcom_cache.record_source import MemoryRecordSource
from gedcom_cache.relations import RelationResolver


def resolve(source):
    result = RecordExtractor(source).extract()
    resolver = RelationResolver(result.persons, result.families)
    resolver.resolve()
    return result.persons, resolver


class TestRelationResolver:
    def test_parents_and_siblings(self, sample_source):
        persons, _ = resolve(sample_source)
        pierre = persons['@I3@']
        assert (pierre.father_id, pierre.mother_id) == ('@I1@', '@I2@')
        assert pierre.sibling_ids == ['@I4@']
        assert persons['@I4@'].sibling_ids == ['@I3@']

    def test_spouses_and_children(self, sample_source):
        persons, _ = resolve(sample_source)
        assert persons['@I1@'].spouse_ids == ['@I2@']
        assert persons['@I1@'].child_ids == ['@I3@', '@I4@']
        assert persons['@I3@'].spouse_ids == ['@I5@']
        assert persons['@I5@'].child_ids == ['@I6@']

    def test_person_without_parental_family(self, sample_source):
        persons, _ = resolve(sample_source)
        anne = persons['@I5@']
        assert anne.father_id is None
        assert anne.mother_id is None
        assert anne.sibling_ids == []

    def test_relations_are_symmetric(self, sample_source):
        persons, _ = resolve(sample_source)
        for xref_id, person in persons.items():
            for child_id in person.child_ids:
                assert xref_id in (persons[child_id].father_id, persons[child_id].mother_id)
            for sibling_id in person.sibling_ids:
                assert xref_id in persons[sibling_id].sibling_ids
            for spouse_id in person.spouse_ids:
                assert xref_id in persons[spouse_id].spouse_ids
            for parent_id in (person.father_id, person.mother_id):
                if parent_id:
                    assert xref_id in persons[parent_id].child_ids

    def test_family_events_copied_to_each_spouse(self, sample_source):
        persons, _ = resolve(sample_source)
        husband = [e for e in persons['@I1@'].events if e.kind == 'marriage']
        wife = [e for e in persons['@I2@'].events if e.kind == 'marriage']
        assert [e.spouse_id for e in husband] == ['@I2@', '@I2@']
        assert [e.spouse_id for e in wife] == ['@I1@', '@I1@']
        assert all(e.family_id == '@F1@' for e in husband + wife)
        assert husband[0] is not wife[0]
        assert husband[0].place is not wife[0].place

    def test_child_birth_events(self, sample_source):
        persons, _ = resolve(sample_source)
        births = persons['@I1@'].get_events('child-birth')
        assert [(e.child_id, e.date_raw) for e in births] == [('@I3@', '5 MAY 1952'), ('@I4@', '1955')]
        assert births[0].place.raw == 'Orléans, 45000, Loiret, Centre, France'
        assert births[0].place is not persons['@I3@'].get_event('birth').place
        assert persons['@I4@'].get_event('birth').place is None

    def test_missing_family_reference(self, individual):
        persons, resolver = resolve(MemoryRecordSource([individual('@I1@', famc=['@F9@'], fams=['@F8@'])]))
        assert persons['@I1@'].father_id is None
        assert persons['@I1@'].spouse_ids == []
        assert resolver.missing_families == 2

    def test_first_parental_family_wins(self, individual, family):
        source = MemoryRecordSource([
            individual('@I1@', sex='M', fams=['@F1@']), individual('@I2@', sex='F', fams=['@F1@']),
            individual('@I3@', sex='M', fams=['@F2@']), individual('@I4@', sex='F', fams=['@F2@']),
            individual('@C1@', famc=['@F2@', '@F1@']),
            family('@F1@', '@I1@', '@I2@', ['@C1@']),
            family('@F2@', '@I3@', '@I4@', ['@C1@']),
        ])
        persons, _ = resolve(source)
        assert (persons['@C1@'].father_id, persons['@C1@'].mother_id) == ('@I3@', '@I4@')
        assert persons['@I3@'].child_ids == ['@C1@']
        assert persons['@I1@'].child_ids == []

    def test_child_listed_only_in_family(self, individual, family):
        source = MemoryRecordSource([
            individual('@I1@'), individual('@I2@'), individual('@C1@'), individual('@C2@'),
            family('@F1@', '@I1@', '@I2@', ['@C1@', '@C2@']),
        ])
        persons, _ = resolve(source)
        assert persons['@C1@'].father_id == '@I1@'
        assert persons['@C1@'].sibling_ids == ['@C2@']
        assert persons['@I1@'].child_ids == ['@C1@', '@C2@']
        assert persons['@I1@'].spouse_ids == ['@I2@']

    def test_missing_spouse_record(self, individual, family, event_node):
        source = MemoryRecordSource([
            individual('@I1@', fams=['@F1@']),
            family('@F1@', '@I1@', '@I9@', events=[event_node('MARR', '1900')]),
        ])
        persons, _ = resolve(source)
        assert persons['@I1@'].spouse_ids == []
        assert persons['@I1@'].get_event('marriage').spouse_id is None

    def test_fams_to_foreign_family_is_skipped(self, individual, family, event_node):
        source = MemoryRecordSource([
            individual('@I1@', fams=['@F1@']), individual('@I2@'), individual('@I3@'),
            family('@F1@', '@I2@', '@I3@', events=[event_node('MARR', '1900')]),
        ])
        persons, _ = resolve(source)
        assert persons['@I1@'].spouse_ids == []
        assert persons['@I1@'].events == []
        assert persons['@I2@'].spouse_ids == ['@I3@']
