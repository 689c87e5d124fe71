"""Tests for cache assembly."""
import json

import pytest

from gedcom_cache.cache_builder import CacheAssembler, town_display
from gedcom_cache.config import CacheConfig
from gedcom_cache.event_normalizer import EventNormalizer
from gedcom_cache.extractor import RecordExtractor
from gedcom_cache.plac_format import read_plac_form
from gedcom_cache.record_source import MemoryRecordSource
from gedcom_cache.relations import RelationResolver


def assemble(source, context, config=None):
    config = config if config else CacheConfig()
    extraction = RecordExtractor(source, config).extract()
    RelationResolver(extraction.persons, extraction.families).resolve()
    EventNormalizer(context, config.fusion_max_span_years).normalize(extraction.persons)
    assembler = CacheAssembler(config, context, read_plac_form(source))
    return assembler.assemble(extraction.persons, extraction), extraction


@pytest.fixture
def sample_cache(sample_source, context):
    cache, _ = assemble(sample_source, context)
    return cache


def event_by_code(encoded, code):
    return [event for event in encoded['e'] if event['t'] == code]


class TestCacheAssembler:
    def test_collections(self, sample_cache):
        assert sorted(sample_cache.individuals) == ['@I1@', '@I2@', '@I3@', '@I4@', '@I5@', '@I6@']
        assert sample_cache.families == {}
        assert list(sample_cache.sources) == ['@S1@']
        assert list(sample_cache.repositories) == ['@R1@']
        assert set(sample_cache.places) == {'huisseau_s_mauves', 'orleans', 'st_denis', 'paris'}

    def test_encoded_individual(self, sample_cache):
        jean = sample_cache.individuals['@I1@']
        assert jean['fn'] == 'Martin|Jean'
        assert jean['g'] == 'M'
        assert jean['s'] == ['@I2@']
        assert jean['c'] == ['@I3@', '@I4@']
        assert jean['mm'] == ['@O1@']
        assert jean['sr'] == ['@S1@']
        assert jean['_s'] == 'ged4py'
        assert 0 <= jean['q'] <= 100
        assert [event['t'] for event in jean['e']] == ['fb', 'fd', 'po', 'fm', 'fc', 'fc']

    def test_inline_notes(self, sample_cache):
        jean = sample_cache.individuals['@I1@']
        assert jean['nt'] == ['INLINE_@I1@_0', '@N1@']
        inline = sample_cache.notes['INLINE_@I1@_0']
        assert inline.text == 'Ancien combattant\nCroix de guerre'
        assert inline.note_type == 'inline'
        assert inline.individual_ids == ['@I1@']
        assert sample_cache.notes['@N1@'].individual_ids == ['@I1@']

    def test_fused_marriage_encoding(self, sample_cache):
        marriage, = event_by_code(sample_cache.individuals['@I1@'], 'fm')
        assert marriage['d'] == 19500610
        assert marriage['l'] == 'orleans'
        assert marriage['m']['s'] == '@I2@'
        assert marriage['m']['n'] == ['INLINE_EVENT_@I1@_marriage_1']
        civil, religious = marriage['m']['ceremonies']
        assert civil == {'t': 'c', 'd': 19500610, 'l': 'orleans', 'n': ['INLINE_EVENT_@I1@_marriage_1']}
        assert religious == {'t': 'r', 'd': 19500612, 'l': 'orleans'}
        note = sample_cache.notes['INLINE_EVENT_@I1@_marriage_1']
        assert note.text == "Mairie d'Orléans"
        assert note.note_type == 'event'
        assert 'INLINE_EVENT_@I2@_marriage_1' in sample_cache.notes

    def test_divorced_couple_not_fused(self, sample_cache):
        pierre = sample_cache.individuals['@I3@']
        assert [event['d'] for event in event_by_code(pierre, 'fm')] == [19750101, 19760101]
        assert event_by_code(pierre, 'fv')[0]['m']['s'] == '@I5@'

    def test_child_birth_events(self, sample_cache):
        births = event_by_code(sample_cache.individuals['@I1@'], 'fc')
        assert [(event['m']['c'], event['d']) for event in births] == [('@I3@', 19520505), ('@I4@', 19550101)]

    def test_media_cross_reference(self, sample_cache):
        assert sample_cache.media['@O1@'].individual_ids == ['@I1@']

    def test_place_entry(self, sample_cache):
        entry = sample_cache.places['huisseau_s_mauves']
        assert entry['town'] == 'Huisseau-s/-Mauves'
        assert entry['town_display'] == 'Huisseau-s/-Mauves (Loiret)'
        assert entry['department'] == 'Loiret'
        assert entry['region'] == 'Centre'
        assert entry['country'] == 'France'
        assert entry['continent'] == 'Europe'
        assert entry['postal_code'] == '45130'
        assert entry['occurrences'] == 1
        assert entry['samples'] == ['Huisseau-sur-Mauves, 45130, Loiret, Centre, France']

    def test_place_samples_are_unique(self, sample_cache):
        entry = sample_cache.places['paris']
        assert entry['occurrences'] > 1
        assert len(entry['samples']) == len(set(entry['samples'])) == 2

    def test_statistics(self, sample_cache):
        stats = sample_cache.statistics
        assert stats['counts']['individuals'] == 6
        assert stats['counts']['families'] == 2
        assert stats['counts']['notes'] == 4
        assert stats['counts']['places'] == 4
        assert stats['events']['fused_marriages'] == 2
        assert stats['quality']['scored'] == 6
        assert stats['processing']['processed'] == 12
        assert stats['processing']['errors'] == 0
        assert stats['compression']['encoded_size'] < stats['compression']['raw_size']
        assert 0 < stats['compression']['ratio'] < 100

    def test_to_dict_is_json_serializable(self, sample_cache):
        data = json.loads(json.dumps(sample_cache.to_dict(), ensure_ascii=False))
        assert data['families'] == {}
        assert data['sources']['@S1@']['title'] == 'Registres paroissiaux de Huisseau'
        assert 'quality' not in data

    def test_coordinates_only_in_places(self, individual, node, context):
        place = node('PLAC', 'Orléans, 45000, Loiret, Centre, France',
                     node('MAP', None, node('LATI', 'N47.9029'), node('LONG', 'E1.9093')))
        source = MemoryRecordSource([individual('@I1@', 'Jean /Martin/', extra=[node('BIRT', None, node('DATE', '1900'), place)])])
        cache, _ = assemble(source, context)
        assert 'N47' not in json.dumps(cache.individuals)
        assert '47.9029' not in json.dumps(cache.individuals)
        assert cache.places['orleans']['latitude'] == pytest.approx(47.9029)
        assert cache.places['orleans']['longitude'] == pytest.approx(1.9093)
        assert cache.statistics['geographic']['places_with_coordinates'] == 1

    def test_without_plac_form_uses_components(self, individual, context):
        source = MemoryRecordSource([individual('@I1@', birth=('1900', 'Boston, Massachusetts, USA'))])
        cache, _ = assemble(source, context)
        entry = cache.places['boston']
        assert entry['country'] == 'USA'
        assert entry['town_display'] == 'Boston (USA)'
        assert entry['continent'] == 'North America'

    def test_quality_and_source_tag_optional(self, sample_source, context):
        config = CacheConfig(calculate_quality=False, include_source_tag=False)
        cache, _ = assemble(sample_source, context, config)
        assert cache.quality == {}
        assert all('q' not in encoded and '_s' not in encoded for encoded in cache.individuals.values())
        assert 'quality' not in cache.statistics

    def test_disabled_collector(self, sample_source, context):
        config = CacheConfig(statistics_collectors={'geographic': False})
        cache, _ = assemble(sample_source, context, config)
        assert 'geographic' not in cache.statistics
        assert 'counts' in cache.statistics

    def test_extraction_errors_reported(self, individual, node, context):
        source = MemoryRecordSource([individual('@I1@', 'A /B/'), node('FAM', None, node('HUSB', '@I1@'))])
        cache, _ = assemble(source, context)
        assert cache.statistics['processing']['errors'] == 1
        assert cache.statistics['processing']['errors_by_kind'] == {'FAM': 1}

    def test_encode_error_skips_individual(self, sample_source, context, monkeypatch, caplog):
        import gedcom_cache.cache_builder as cache_builder

        real_encode = cache_builder.encode_individual

        def flaky(person, quality=None, source_tag=None):
            if person.xref_id == '@I4@':
                raise ValueError("cannot encode")
            return real_encode(person, quality, source_tag)

        monkeypatch.setattr(cache_builder, 'encode_individual', flaky)
        cache, _ = assemble(sample_source, context)
        assert '@I4@' not in cache.individuals
        assert len(cache.individuals) == 5
        assert cache.statistics['processing']['encode_errors'] == 1
        assert "Failed to encode individual @I4@" in caplog.text


@pytest.mark.parametrize("args, expected", [
    (('Orléans', 'Loiret', 'France', 'FR'), 'Orléans (Loiret)'),
    (('Orléans', None, 'France', 'FR'), 'Orléans'),
    (('Boston', 'Massachusetts', 'USA', 'US'), 'Boston (USA)'),
    (('Blois', 'Loir-et-Cher', None, None), 'Blois (Loir-et-Cher)'),
    ((None, 'Loiret', 'France', 'FR'), None),
])
def test_town_display(args, expected):
    assert town_display(*args) == expected
