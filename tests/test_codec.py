"""Tests for the compact codec."""
import pytest

from gedcom_cache.codec import (EVENT_CODES, EVENT_KINDS, FIELD_CODES, FIELD_NAMES, compress_fields, decode_event,
                                decode_event_kind, decode_individual, decompress_fields, duplicate_codes, encode_event,
                                encode_event_kind, encode_individual, event_to_dict, person_to_dict)
from gedcom_cache.records import Ceremony, EventRecord, NoteRef, PersonRecord, PlaceRef, SourceCitation


@pytest.fixture
def person():
    birth = EventRecord(kind='birth', date=19290720, place=PlaceRef(raw='Huisseau-sur-Mauves, 45130, Loiret',
                                                                    key='huisseau_s_mauves', latitude=47.89,
                                                                    longitude=1.70))
    wedding = EventRecord(
        kind='marriage', date=19500610, place=PlaceRef(raw='Orléans', key='orleans'), spouse_id='@I2@',
        note_ids=['INLINE_EVENT_@I1@_marriage_1'],
        sources=[SourceCitation(pointer='@S2@', quality=2), SourceCitation(pointer='@S3@', quality=3)],
        ceremonies=[
            Ceremony('civil', date=19500610, place=PlaceRef(raw='Orléans', key='orleans'),
                     note_ids=['INLINE_EVENT_@I1@_marriage_1']),
            Ceremony('religious', date=19500612,
                     place=PlaceRef(raw='Orléans', key='orleans', subdivision='Cathédrale Sainte-Croix')),
        ])
    occupation = EventRecord(kind='occupation', value='Boulanger', date=19500101)
    return PersonRecord(
        xref_id='@I1@', given='Jean', surname='Martin', sex='male', father_id='@I0@', spouse_ids=['@I2@'],
        child_ids=['@I3@', '@I4@'], sibling_ids=[], events=[birth, wedding, occupation],
        note_ids=['INLINE_@I1@_0', '@N1@'], media_ids=['@O1@'], sources=[SourceCitation(pointer='@S1@', page='p. 12')],
        notes=[NoteRef(text='Ancien combattant', note_id='INLINE_@I1@_0')])


class TestDictionaries:
    def test_event_codes_are_bijective(self):
        assert duplicate_codes(EVENT_CODES) == []
        assert len(EVENT_KINDS) == len(EVENT_CODES)

    def test_field_codes_are_bijective(self):
        assert duplicate_codes(FIELD_CODES) == []
        assert len(FIELD_NAMES) == len(FIELD_CODES)

    def test_duplicate_codes_detected(self):
        assert duplicate_codes({'a': 'x', 'b': 'y', 'c': 'x'}) == ['x']

    def test_event_kind_codes(self):
        assert encode_event_kind('birth') == 'fb'
        assert encode_event_kind('child-birth') == 'fc'
        assert encode_event_kind('document') != encode_event_kind('disability')
        assert encode_event_kind('recovery') != encode_event_kind('recording')
        assert decode_event_kind('fm') == 'marriage'

    def test_unknown_kind_passes_through(self):
        assert encode_event_kind('_CUSTOM_TAG') == '_CUSTOM_TAG'
        assert decode_event_kind('_CUSTOM_TAG') == '_CUSTOM_TAG'


class TestEventCodec:
    def test_encode_minimal_event(self):
        assert encode_event(EventRecord(kind='death')) == {'t': 'fd'}

    def test_encode_event_fields(self, person):
        encoded = encode_event(person.events[1])
        assert encoded['t'] == 'fm'
        assert encoded['d'] == 19500610
        assert encoded['l'] == 'orleans'
        meta = encoded['m']
        assert meta['s'] == '@I2@'
        assert meta['n'] == ['INLINE_EVENT_@I1@_marriage_1']
        assert meta['r'] == ['@S2@', '@S3@']
        assert meta['q'] == 3
        assert meta['ceremonies'] == [
            {'t': 'c', 'd': 19500610, 'l': 'orleans', 'n': ['INLINE_EVENT_@I1@_marriage_1']},
            {'t': 'r', 'd': 19500612, 'l': 'orleans', 'sd': 'Cathédrale Sainte-Croix'},
        ]

    def test_coordinates_never_encoded(self, person):
        encoded = encode_event(person.events[0])
        assert encoded == {'t': 'fb', 'd': 19290720, 'l': 'huisseau_s_mauves'}

    def test_decode_event_inverts_encode(self, person):
        for event in person.events:
            assert decode_event(encode_event(event)) == event_to_dict(event)

    def test_attribute_value(self, person):
        assert encode_event(person.events[2]) == {'t': 'po', 'd': 19500101, 'm': {'v': 'Boulanger'}}


class TestIndividualCodec:
    def test_key_order(self, person):
        encoded = encode_individual(person, quality=72, source_tag='ged4py')
        assert list(encoded) == ['fn', 'g', 'f', 's', 'c', 'e', 'q', 'nt', 'mm', 'sr', '_s']

    def test_values(self, person):
        encoded = encode_individual(person, quality=72, source_tag='ged4py')
        assert encoded['fn'] == 'Martin|Jean'
        assert encoded['g'] == 'M'
        assert encoded['f'] == '@I0@'
        assert 'm' not in encoded
        assert 'b' not in encoded
        assert encoded['nt'] == ['INLINE_@I1@_0', '@N1@']
        assert encoded['sr'] == ['@S1@', '@S2@', '@S3@']

    def test_decode_individual_inverts_encode(self, person):
        encoded = encode_individual(person, quality=72, source_tag='ged4py')
        assert decode_individual(encoded) == person_to_dict(person, 72, 'ged4py')

    def test_empty_person(self):
        bare = PersonRecord(xref_id='@I9@')
        encoded = encode_individual(bare)
        assert encoded == {'g': 'U'}
        assert decode_individual(encoded) == person_to_dict(bare)

    def test_zero_quality_is_kept(self):
        encoded = encode_individual(PersonRecord(xref_id='@I9@', given='Anne'), quality=0)
        assert encoded['q'] == 0
        assert encoded['fn'] == '|Anne'

    def test_surname_only(self):
        encoded = encode_individual(PersonRecord(xref_id='@I9@', surname='Petit'))
        assert encoded['fn'] == 'Petit|'
        assert decode_individual(encoded)['surname'] == 'Petit'

    def test_separator_inside_name_parts(self):
        awkward = PersonRecord(xref_id='@I9@', given='Jean|Paul', surname='A|B\\C')
        encoded = encode_individual(awkward)
        decoded = decode_individual(encoded)
        assert (decoded['surname'], decoded['given']) == ('A|B\\C', 'Jean|Paul')
        assert decoded == person_to_dict(awkward)


class TestFieldCompression:
    def test_compress_and_decompress(self):
        data = {'fullName': 'Martin|Jean', 'fatherId': '@I0@', 'notes': [], 'custom': 1,
                'individualEvents': [{'birthDate': 19290720}]}
        compressed = compress_fields(data)
        assert compressed == {'fn': 'Martin|Jean', 'f': '@I0@', 'custom': 1, 'e': [{'bd': 19290720}]}
        assert decompress_fields(compressed) == {'fullName': 'Martin|Jean', 'fatherId': '@I0@', 'custom': 1,
                                                 'individualEvents': [{'birthDate': 19290720}]}

    def test_shallow_compression(self):
        compressed = compress_fields({'individualEvents': [{'birthDate': 1}]}, deep=False)
        assert compressed == {'e': [{'birthDate': 1}]}

    def test_keep_empty(self):
        assert compress_fields({'notes': []}, skip_empty=False) == {'nt': []}

    def test_non_dict_passthrough(self):
        assert compress_fields('text') == 'text'
