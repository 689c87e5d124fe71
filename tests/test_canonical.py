import pytest

from gedcom_cache.canonical import (PlaceCanonicalizer, clean_town_name, format_town_name, normalize_geo_string,
                                    strip_accents)


@pytest.mark.parametrize("place, key", [
    ("Huisseau-sur-Mauves, 45130, Loiret, Centre, France", "huisseau_s_mauves"),
    ("Saint-Denis, 93200, Seine-Saint-Denis, Île-de-France, France", "st_denis"),
    ("Sainte-Marie", "ste_marie"),
    ("Mont-Saint-Michel", "mt_st_michel"),
    ("Issy-les-Moulineaux", "issy_les_mlx"),
    ("Saint-Ouen (93)", "st_ouen"),
    ("Paris 15e", "paris"),
    ("Lyon 3ème", "lyon"),
    ("Marseille-XVe", "marseille"),
    ("Châlons-en-Champagne", "chalons_en_champagne"),
])
def test_canonical_keys(place, key):
    assert PlaceCanonicalizer()(place) == key


@pytest.mark.parametrize("place", [None, "", ", ,", "   "])
def test_no_key_without_town(place):
    assert PlaceCanonicalizer()(place) is None


def test_key_is_idempotent():
    canon = PlaceCanonicalizer()
    key = canon("Huisseau-sur-Mauves, 45130, Loiret")
    assert canon(key) == key


def test_first_non_empty_segment_is_the_town():
    assert PlaceCanonicalizer()(", Orléans, Loiret") == "orleans"


def test_memo_counts_hits_and_misses():
    canon = PlaceCanonicalizer()
    canon("Orléans, Loiret")
    canon("Orléans, Loiret")
    canon("Blois, Loir-et-Cher")
    assert canon.cache_stats() == {'size': 2, 'hits': 1, 'misses': 2}
    canon.clear()
    assert len(canon) == 0
    assert canon.cache_stats()['hits'] == 0


def test_failures_are_memoized(monkeypatch):
    canon = PlaceCanonicalizer()

    def broken(place):
        raise RuntimeError("boom")

    monkeypatch.setattr(PlaceCanonicalizer, '_compute', staticmethod(broken))
    assert canon("Anywhere") is None
    assert canon("Anywhere") is None
    assert canon.cache_stats()['misses'] == 1


def test_town_display():
    canon = PlaceCanonicalizer()
    assert canon.town_display("Huisseau-sur-Mauves, 45130, Loiret") == "Huisseau-s/-Mauves"
    assert canon.town_display("Saint-Ouen (93)") == "St-Ouen"
    assert canon.town_display(None) is None


def test_clean_town_name():
    assert clean_town_name("Lyon 3") == "Lyon"
    assert clean_town_name("Saint-Ouen (93)") == "Saint-Ouen"
    assert clean_town_name("Orléans, Loiret") == "Orléans"


def test_format_town_name_elision():
    assert format_town_name("villeneuve d'ascq") == "Villeneuve-d'Ascq"


def test_normalize_geo_string():
    assert normalize_geo_string("  Île-de-France ") == "ile_de_france"
    assert normalize_geo_string("St-Jean d'Angély") == "st_jean_d_angely"
    assert normalize_geo_string(None) == ''


def test_strip_accents():
    assert strip_accents("Châlons Évreux Zürich") == "Chalons Evreux Zurich"
