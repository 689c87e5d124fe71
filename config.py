"""
config.py - Cache pipeline configuration.

CacheConfig holds the tunable parameters of a cache build. Defaults come from the
config.yaml shipped next to this module; a different YAML file or a plain dict can
override them.

Module: gedcom_cache.config
Author: @colin0brass
Last updated: 2026-10-19
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .plac_format import EXTRA_POLICIES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


@dataclass
class CacheConfig:
    """
    Configuration for building a cache.

    Attributes:
        fusion_max_span_years: Marriages with the same spouse spanning more than this are kept distinct.
        calculate_quality: Whether quality scores are computed and encoded.
        include_source_tag: Whether the encoded individual carries the extraction source tag.
        source_tag: Value of the source tag.
        extract_notes: Whether notes are extracted and cross-referenced.
        extract_sources: Whether citations are extracted.
        place_sample_limit: Raw strings kept per place entry.
        plac_extra_policy: Surplus segment policy when applying HEAD > PLAC > FORM.
        geography_url: Optional remote geography reference URL.
        geography_timeout: Timeout in seconds of the geography request.
        statistics_collectors: collector_id -> enabled.
    """
    fusion_max_span_years: int = 10
    calculate_quality: bool = True
    include_source_tag: bool = True
    source_tag: str = 'ged4py'
    extract_notes: bool = True
    extract_sources: bool = True
    place_sample_limit: int = 3
    plac_extra_policy: str = 'merge-last'
    geography_url: Optional[str] = None
    geography_timeout: float = 5.0
    statistics_collectors: Dict[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.fusion_max_span_years < 0:
            raise ValueError("fusion_max_span_years must not be negative")
        if self.place_sample_limit < 0:
            raise ValueError("place_sample_limit must not be negative")
        if self.geography_timeout is not None and self.geography_timeout <= 0:
            raise ValueError("geography_timeout must be positive")
        if self.plac_extra_policy not in EXTRA_POLICIES:
            raise ValueError(f"plac_extra_policy must be one of {EXTRA_POLICIES}, got '{self.plac_extra_policy}'")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CacheConfig:
        """
        Create configuration from a dictionary with the config.yaml layout.

        Nested 'geography' and 'statistics' sections are flattened; unknown keys are ignored
        with a warning.

        Args:
            data: Configuration dictionary.

        Returns:
            CacheConfig instance.
        """
        if not isinstance(data, dict):
            raise TypeError("configuration data must be a dict")
        values: Dict[str, Any] = {}
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key == 'geography' and isinstance(value, dict):
                if 'reference_url' in value:
                    values['geography_url'] = value['reference_url']
                if 'timeout' in value:
                    values['geography_timeout'] = float(value['timeout'])
            elif key == 'statistics' and isinstance(value, dict):
                collectors = value.get('collectors', {}) or {}
                values['statistics_collectors'] = {
                    collector_id: settings.get('enabled', True) if isinstance(settings, dict) else bool(settings)
                    for collector_id, settings in collectors.items()
                }
            elif key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown configuration key '{key}'")
        return cls(**values)

    @classmethod
    def from_yaml(cls, yaml_path: Optional[Path] = None) -> CacheConfig:
        """
        Load configuration from a YAML file.

        Falls back to defaults (with an error logged) if the file cannot be read or parsed.

        Args:
            yaml_path: Path to YAML config file; the bundled config.yaml if None.

        Returns:
            CacheConfig instance.
        """
        yaml_path = Path(yaml_path) if yaml_path else DEFAULT_CONFIG_PATH
        try:
            with open(yaml_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load cache config from {yaml_path}: {e}")
            return cls()
        logger.info(f"Loaded cache config from {yaml_path}")
        return cls.from_dict(data.get('cache', data))
