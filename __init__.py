"""gedcom_cache package: Converts GEDCOM records into a compact, denormalized cache."""

from gedcom_cache.cache_builder import CacheAssembler, GedcomCache
from gedcom_cache.canonical import PlaceCanonicalizer
from gedcom_cache.codec import decode_event, decode_individual, encode_event, encode_individual
from gedcom_cache.config import CacheConfig
from gedcom_cache.event_normalizer import EventNormalizer
from gedcom_cache.extractor import ExtractionResult, RecordExtractor
from gedcom_cache.gedcom_cache_builder import GedcomCacheBuilder, build_cache
from gedcom_cache.gedcom_date import GedcomDate, decode_date, encode_date
from gedcom_cache.geo_config import GeoReference, PlaceComponents, extract_place_components
from gedcom_cache.pipeline_context import PipelineContext
from gedcom_cache.quality import QualityScore, QualityScorer
from gedcom_cache.record_source import Ged4pyRecordSource, MemoryRecordSource, RecordNode, RecordSourceError
from gedcom_cache.relations import RelationResolver

__all__ = [
    "CacheAssembler",
    "CacheConfig",
    "EventNormalizer",
    "ExtractionResult",
    "Ged4pyRecordSource",
    "GedcomCache",
    "GedcomCacheBuilder",
    "GedcomDate",
    "GeoReference",
    "MemoryRecordSource",
    "PipelineContext",
    "PlaceCanonicalizer",
    "PlaceComponents",
    "QualityScore",
    "QualityScorer",
    "RecordExtractor",
    "RecordNode",
    "RecordSourceError",
    "RelationResolver",
    "build_cache",
    "decode_date",
    "decode_event",
    "decode_individual",
    "encode_date",
    "encode_event",
    "encode_individual",
    "extract_place_components",
]
