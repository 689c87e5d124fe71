"""
gedcom_cache_builder.py - Entry point of the GEDCOM cache pipeline.

Runs the stages strictly in order, each on the output of the previous one:
    extraction -> relation resolution -> event normalization -> cache assembly

Module: gedcom_cache.gedcom_cache_builder
Author: @colin0brass
Last updated: 2026-10-19
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .app_hooks import AppHooks
from .cache_builder import CacheAssembler, GedcomCache
from .config import CacheConfig
from .event_normalizer import EventNormalizer
from .extractor import ExtractionResult, RecordExtractor
from .pipeline_context import PipelineContext
from .plac_format import read_plac_form
from .record_source import Ged4pyRecordSource, RecordSource, RecordSourceError
from .relations import RelationResolver

logger = logging.getLogger(__name__)


class GedcomCacheBuilder:
    """
    Builds a GedcomCache from a record source.

    Attributes:
        source (RecordSource): Root query handle over the parsed GEDCOM records.
        config (CacheConfig): Pipeline configuration.
        context (PipelineContext): Place memo and geography reference for this run.
        app_hooks (Optional[AppHooks]): Progress reporting and stop hooks.
        extraction (Optional[ExtractionResult]): Extractor output of the last build.
    """
    __slots__ = ['source', 'config', 'context', 'app_hooks', 'extraction']

    def __init__(self, source: RecordSource, config: Optional[CacheConfig] = None,
                 context: Optional[PipelineContext] = None, app_hooks: Optional[AppHooks] = None):
        if source is None:
            raise RecordSourceError("No record source to build the cache from")
        self.source = source
        self.config = config if config is not None else CacheConfig()
        self.context = context if context is not None else PipelineContext.from_config(self.config)
        self.app_hooks = app_hooks
        self.extraction: Optional[ExtractionResult] = None

    @classmethod
    def from_file(cls, gedcom_file: Union[Path, str], config: Optional[CacheConfig] = None,
                  context: Optional[PipelineContext] = None, app_hooks: Optional[AppHooks] = None,
                  encoding: Optional[str] = None) -> "GedcomCacheBuilder":
        """
        Open a GEDCOM file with ged4py and return a builder over it.

        Raises:
            RecordSourceError: If the file cannot be opened or parsed.
        """
        return cls(Ged4pyRecordSource(gedcom_file, encoding=encoding), config=config, context=context, app_hooks=app_hooks)

    def build(self) -> GedcomCache:
        """
        Run the whole pipeline.

        Returns:
            GedcomCache: The assembled cache.
        """
        self.extraction = RecordExtractor(self.source, self.config, self.app_hooks).extract()
        persons = self.extraction.persons

        self._report_step(info="Resolving relations")
        RelationResolver(persons, self.extraction.families).resolve()

        self._report_step(info="Normalizing events")
        EventNormalizer(self.context, self.config.fusion_max_span_years).normalize(persons)

        plac_form = read_plac_form(self.source)
        assembler = CacheAssembler(self.config, self.context, plac_form, self.app_hooks)
        return assembler.assemble(persons, self.extraction)

    def _report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        else:
            logger.info(info)


def build_cache(source: Union[RecordSource, Path, str], config: Optional[CacheConfig] = None,
                context: Optional[PipelineContext] = None, app_hooks: Optional[AppHooks] = None) -> GedcomCache:
    """
    Build a cache from a record source or a GEDCOM file path.

    Args:
        source: RecordSource, or a path opened with Ged4pyRecordSource.
        config: Pipeline configuration; defaults if None.
        context: Per-run caches; a fresh context if None.
        app_hooks: Optional progress hooks.

    Returns:
        GedcomCache: The assembled cache.

    Raises:
        RecordSourceError: If the record source is unavailable.
    """
    if isinstance(source, (str, Path)):
        builder = GedcomCacheBuilder.from_file(source, config=config, context=context, app_hooks=app_hooks)
    else:
        builder = GedcomCacheBuilder(source, config=config, context=context, app_hooks=app_hooks)
    return builder.build()
