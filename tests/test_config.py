import pytest

from gedcom_cache.config import CacheConfig


class TestCacheConfig:
    def test_defaults(self):
        config = CacheConfig()
        assert config.fusion_max_span_years == 10
        assert config.calculate_quality is True
        assert config.source_tag == 'ged4py'
        assert config.geography_url is None

    def test_bundled_yaml(self):
        config = CacheConfig.from_yaml()
        assert config.fusion_max_span_years == 10
        assert config.plac_extra_policy == 'merge-last'
        assert config.statistics_collectors['geographic'] is True

    def test_from_dict_flattens_sections(self, caplog):
        config = CacheConfig.from_dict({
            'fusion_max_span_years': 5,
            'geography': {'reference_url': 'http://geo.example/ref.json', 'timeout': 2},
            'statistics': {'collectors': {'timespan': {'enabled': False}, 'counts': True}},
            'colour': 'blue',
        })
        assert config.fusion_max_span_years == 5
        assert config.geography_url == 'http://geo.example/ref.json'
        assert config.geography_timeout == 2.0
        assert config.statistics_collectors == {'timespan': False, 'counts': True}
        assert "colour" in caplog.text

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "cache.yaml"
        path.write_text("cache:\n  calculate_quality: false\n  source_tag: custom\n", encoding='utf-8')
        config = CacheConfig.from_yaml(path)
        assert config.calculate_quality is False
        assert config.source_tag == 'custom'

    def test_missing_yaml_uses_defaults(self, tmp_path, caplog):
        config = CacheConfig.from_yaml(tmp_path / "missing.yaml")
        assert config == CacheConfig()
        assert "Failed to load" in caplog.text

    @pytest.mark.parametrize("kwargs", [
        {'fusion_max_span_years': -1},
        {'place_sample_limit': -2},
        {'geography_timeout': 0},
        {'plac_extra_policy': 'drop'},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            CacheConfig(**kwargs)

    def test_clip_policy_accepted(self):
        assert CacheConfig.from_dict({'plac_extra_policy': 'clip'}).plac_extra_policy == 'clip'

    def test_from_dict_requires_mapping(self):
        with pytest.raises(TypeError):
            CacheConfig.from_dict(['not', 'a', 'dict'])
