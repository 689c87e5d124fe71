"""
pipeline_context.py - Per-run state shared by the cache pipeline stages.

The place normalization memo and the geography reference are the only mutable state
shared between stages. PipelineContext owns both so that independent runs (and tests)
can use separate contexts or clear one between runs.

Module: gedcom_cache.pipeline_context
Author: @colin0brass
Last updated: 2026-10-19
"""

import logging
from typing import Optional

from .canonical import PlaceCanonicalizer
from .config import CacheConfig
from .geo_config import GeoReference, PlaceComponents, extract_place_components

logger = logging.getLogger(__name__)


class PipelineContext:
    """
    Owner of the place canonicalizer memo and the geography reference cache.

    Attributes:
        canonicalizer (PlaceCanonicalizer): Memoized place key pipeline.
        geo_reference (GeoReference): Country/department tables, loaded on first use.
    """
    __slots__ = ['canonicalizer', 'geo_reference']

    def __init__(self, geo_reference: Optional[GeoReference] = None, canonicalizer: Optional[PlaceCanonicalizer] = None):
        self.canonicalizer = canonicalizer if canonicalizer is not None else PlaceCanonicalizer()
        self.geo_reference = geo_reference if geo_reference is not None else GeoReference()

    @classmethod
    def from_config(cls, config: CacheConfig) -> "PipelineContext":
        return cls(geo_reference=GeoReference(url=config.geography_url, timeout=config.geography_timeout))

    def place_key(self, place: Optional[str]) -> Optional[str]:
        return self.canonicalizer(place)

    def place_components(self, place: Optional[str]) -> PlaceComponents:
        return extract_place_components(place, self.geo_reference, self.canonicalizer)

    def clear(self) -> None:
        """Drop both caches; the geography reference is fetched again on next use."""
        self.canonicalizer.clear()
        self.geo_reference.clear()
        logger.debug("Pipeline context caches cleared")
