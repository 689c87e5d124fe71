import pytest

from gedcom_cache.plac_format import apply_plac_form, read_plac_form
from gedcom_cache.record_source import MemoryRecordSource

FORM = ['town', 'area_code', 'county', 'region', 'country']


def test_read_plac_form(node):
    source = MemoryRecordSource([node('HEAD', None, node('PLAC', None, node('FORM', 'Town, Area code, County, Region, Country')))])
    assert read_plac_form(source) == FORM


def test_read_plac_form_without_header():
    assert read_plac_form(MemoryRecordSource()) == []


def test_read_plac_form_without_form(node):
    assert read_plac_form(MemoryRecordSource([node('HEAD', None, node('CHAR', 'UTF-8'))])) == []


def test_apply_plac_form():
    fields = apply_plac_form("Huisseau-sur-Mauves, 45130, Loiret, Centre, France", FORM)
    assert fields == {'town': 'Huisseau-sur-Mauves', 'area_code': '45130', 'county': 'Loiret',
                      'region': 'Centre', 'country': 'France'}


def test_apply_plac_form_skips_empty_segments():
    assert apply_plac_form("Orléans, , Loiret", FORM) == {'town': 'Orléans', 'county': 'Loiret'}


def test_surplus_segments_merge_into_last_field():
    fields = apply_plac_form("a, b, c", ['town', 'country'])
    assert fields == {'town': 'a', 'country': 'b, c'}


def test_surplus_segments_clipped():
    assert apply_plac_form("a, b, c", ['town', 'country'], extra='clip') == {'town': 'a', 'country': 'b'}


def test_unknown_policy():
    with pytest.raises(ValueError):
        apply_plac_form("a", FORM, extra='wrap')


def test_empty_inputs():
    assert apply_plac_form("", FORM) == {}
    assert apply_plac_form("Orléans", []) == {}
