"""
cache_builder.py - Assembly of the final cache.

CacheAssembler turns resolved and normalized individuals into the output collections:
    - secondary caches (sources, repositories, media, notes)
    - note and media cross-references, with ids for inline notes
    - quality scores and compact encoded individuals
    - the places table, keyed by canonical place key
    - corpus statistics, including the compression ratio of the codec

Cross-referencing runs before encoding because the inline note ids it creates are part
of the encoded individuals.

Module: gedcom_cache.cache_builder
Author: @colin0brass
Last updated: 2026-10-19
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .app_hooks import AppHooks
from .codec import encode_individual, person_to_dict
from .config import CacheConfig
from .extractor import ExtractionResult
from .pipeline_context import PipelineContext
from .plac_format import apply_plac_form
from .quality import QualityScore, QualityScorer
from .records import (EventRecord, MediaRecord, NoteRecord, NoteRef, PersonRecord, PlaceRef,
                      RepositoryRecord, SourceRecord)
from .statistics import CorpusView, StatisticsConfig, StatisticsPipeline, Stats

logger = logging.getLogger(__name__)

# PLAC FORM label -> places table field
PLAC_FORM_FIELDS = {
    'department': 'department',
    'departement': 'department',
    'département': 'department',
    'county': 'department',
    'region': 'region',
    'région': 'region',
    'state': 'region',
    'province': 'region',
    'country': 'country',
    'pays': 'country',
    'area_code': 'postal_code',
    'postal_code': 'postal_code',
    'zip': 'postal_code',
    'code_postal': 'postal_code',
}


def town_display(town: Optional[str], department: Optional[str], country: Optional[str],
                 country_code: Optional[str]) -> Optional[str]:
    """'Town (Department)' in France or when the country is unknown, else 'Town (Country)'."""
    if not town:
        return None
    if country_code not in (None, 'FR') and country:
        return f"{town} ({country})"
    if department:
        return f"{town} ({department})"
    return town


@dataclass
class GedcomCache:
    """
    The assembled cache.

    Attributes:
        individuals: Encoded individuals keyed by xref id.
        families: Always empty; relations live on the individuals.
        sources, media, notes, repositories: Plain records keyed by id.
        places: Places table keyed by canonical key.
        statistics: Corpus statistics by category.
        quality: QualityScore per individual (not part of to_dict()).
    """
    individuals: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    families: Dict[str, Any] = field(default_factory=dict)
    sources: Dict[str, SourceRecord] = field(default_factory=dict)
    media: Dict[str, MediaRecord] = field(default_factory=dict)
    notes: Dict[str, NoteRecord] = field(default_factory=dict)
    repositories: Dict[str, RepositoryRecord] = field(default_factory=dict)
    places: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    statistics: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    quality: Dict[str, QualityScore] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Plain, JSON serializable form of the cache."""
        return {
            'individuals': self.individuals,
            'families': self.families,
            'sources': {key: asdict(value) for key, value in self.sources.items()},
            'media': {key: asdict(value) for key, value in self.media.items()},
            'notes': {key: asdict(value) for key, value in self.notes.items()},
            'repositories': {key: asdict(value) for key, value in self.repositories.items()},
            'places': self.places,
            'statistics': self.statistics,
        }


class CacheAssembler:
    """
    Builds a GedcomCache from normalized individuals and extracted records.

    Attributes:
        config (CacheConfig): Pipeline configuration.
        context (PipelineContext): Place canonicalizer and geography reference.
        plac_form (List[str]): HEAD > PLAC > FORM labels, possibly empty.
        app_hooks (Optional[AppHooks]): Progress reporting hooks.
        encode_errors (int): Individuals that failed to encode.
    """
    __slots__ = ['config', 'context', 'plac_form', 'app_hooks', 'encode_errors']

    def __init__(self, config: Optional[CacheConfig] = None, context: Optional[PipelineContext] = None,
                 plac_form: Optional[List[str]] = None, app_hooks: Optional[AppHooks] = None):
        self.config = config if config is not None else CacheConfig()
        self.context = context if context is not None else PipelineContext.from_config(self.config)
        self.plac_form = list(plac_form or [])
        self.app_hooks = app_hooks
        self.encode_errors = 0

    def assemble(self, persons: Dict[str, PersonRecord], extraction: ExtractionResult) -> GedcomCache:
        """
        Assemble the cache.

        Args:
            persons (Dict[str, PersonRecord]): Resolved and normalized individuals.
            extraction (ExtractionResult): Extractor output (secondary records and error tally).

        Returns:
            GedcomCache: The final cache.
        """
        cache = GedcomCache(
            sources=dict(extraction.sources),
            media=dict(extraction.media),
            notes=dict(extraction.notes),
            repositories=dict(extraction.repositories),
        )

        self._report_step(info="Cross-referencing notes and media", target=len(persons), reset_counter=True)
        for person in persons.values():
            self.cross_reference(person, cache.notes, cache.media)
            self._report_step(plus_step=1)

        if self.config.calculate_quality:
            scorer = QualityScorer(cache.media)
            cache.quality = {xref_id: scorer.score(person) for xref_id, person in persons.items()}

        source_tag = self.config.source_tag if self.config.include_source_tag else None
        self.encode_errors = 0
        self._report_step(info="Encoding individuals", target=len(persons), reset_counter=True)
        for xref_id, person in persons.items():
            score = cache.quality.get(xref_id)
            try:
                cache.individuals[xref_id] = encode_individual(person, score.total if score else None, source_tag)
            except Exception as e:
                logger.error(f"Failed to encode individual {xref_id}: {e}", exc_info=True)
                self.encode_errors += 1
            self._report_step(plus_step=1)

        cache.families = {}
        cache.places = self.build_places(persons.values())
        cache.statistics = self.build_statistics(persons, cache, extraction, source_tag).to_dict()
        logger.info(f"Cache assembled: {len(cache.individuals)} individuals, {len(cache.places)} places, "
                    f"{len(cache.notes)} notes ({self.encode_errors} encoding errors)")
        return cache

    def cross_reference(self, person: PersonRecord, notes: Dict[str, NoteRecord], media: Dict[str, MediaRecord]) -> None:
        """
        Link notes and media back onto an individual and its events.

        Referenced notes and media gain the individual id. Inline notes become note records
        named INLINE_{xref}_{i} (individual) or INLINE_EVENT_{xref}_{kind}_{n} (event and
        ceremony), whose ids are added to the owner's note_ids.
        """
        xref_id = person.xref_id
        inline_index = 0
        for note in person.notes:
            if note.is_inline and note.note_id is None:
                note.note_id = f"INLINE_{xref_id}_{inline_index}"
                inline_index += 1
            self._link_note(note, xref_id, person.note_ids, notes, 'inline')

        for media_id in person.media_ids:
            record = media.get(media_id)
            if record is None:
                logger.debug(f"Individual {xref_id} references missing media {media_id}")
            elif xref_id not in record.individual_ids:
                record.individual_ids.append(xref_id)

        counters: Dict[str, int] = {}
        for event in person.events:
            self._link_event_notes(event, xref_id, event.note_ids, event.notes, counters, notes)
            for ceremony in event.ceremonies:
                self._link_event_notes(event, xref_id, ceremony.note_ids, ceremony.notes, counters, notes)

    def _link_event_notes(self, event: EventRecord, xref_id: str, note_ids: List[str], event_notes: List[NoteRef],
                          counters: Dict[str, int], notes: Dict[str, NoteRecord]) -> None:
        for note in event_notes:
            if note.is_inline and note.note_id is None:
                counters[event.kind] = counters.get(event.kind, 0) + 1
                note.note_id = f"INLINE_EVENT_{xref_id}_{event.kind}_{counters[event.kind]}"
            self._link_note(note, xref_id, note_ids, notes, 'event')

    @staticmethod
    def _link_note(note: NoteRef, xref_id: str, note_ids: List[str], notes: Dict[str, NoteRecord], note_type: str) -> None:
        if note.is_inline:
            if not note.text:
                return
            record = notes.get(note.note_id)
            if record is None:
                record = notes[note.note_id] = NoteRecord(xref_id=note.note_id, text=note.text, note_type=note_type)
        else:
            record = notes.get(note.pointer)
            if record is None:
                logger.debug(f"Individual {xref_id} references missing note {note.pointer}")
                return
            note.note_id = note.pointer
        if xref_id not in record.individual_ids:
            record.individual_ids.append(xref_id)
        if record.xref_id not in note_ids:
            note_ids.append(record.xref_id)

    def build_places(self, persons) -> Dict[str, Dict[str, Any]]:
        """
        Build the places table from every event and ceremony place.

        Returns:
            Dict[str, Dict[str, Any]]: Entry per canonical key with town, town_display, department,
            region, country, continent, postal_code, latitude, longitude, occurrences and samples.
        """
        places: Dict[str, Dict[str, Any]] = {}
        for person in persons:
            for event in person.events:
                self._add_place(places, event.place)
                for ceremony in event.ceremonies:
                    self._add_place(places, ceremony.place)
        return places

    def _add_place(self, places: Dict[str, Dict[str, Any]], place: Optional[PlaceRef]) -> None:
        if place is None or not place.key:
            return
        entry = places.get(place.key)
        if entry is None:
            entry = places[place.key] = self._new_place_entry(place)
        entry['occurrences'] += 1
        if place.raw not in entry['samples'] and len(entry['samples']) < self.config.place_sample_limit:
            entry['samples'].append(place.raw)
        if entry['latitude'] is None and place.has_coordinates:
            entry['latitude'] = place.latitude
            entry['longitude'] = place.longitude

    def _new_place_entry(self, place: PlaceRef) -> Dict[str, Any]:
        components = self.context.place_components(place.raw)
        values = {
            'department': components.department,
            'region': components.region,
            'country': components.country,
            'postal_code': components.postal_code,
        }
        country_code = components.country_code
        if self.plac_form:
            for label, value in apply_plac_form(place.raw, self.plac_form, self.config.plac_extra_policy).items():
                target = PLAC_FORM_FIELDS.get(label)
                if target is None:
                    continue
                if target == 'country':
                    match = self.context.geo_reference.match_country(value)
                    country_code, value = match if match else (None, value)
                values[target] = value
        continent = self.context.geo_reference.continent_for(country_code) if country_code else None
        town = self.context.canonicalizer.town_display(place.raw) or components.town
        return {
            'key': place.key,
            'town': town,
            'town_display': town_display(town, values['department'], values['country'], country_code),
            'department': values['department'],
            'region': values['region'],
            'country': values['country'],
            'continent': continent,
            'postal_code': values['postal_code'],
            'latitude': None,
            'longitude': None,
            'occurrences': 0,
            'samples': [],
        }

    def build_statistics(self, persons: Dict[str, PersonRecord], cache: GedcomCache, extraction: ExtractionResult,
                         source_tag: Optional[str]) -> Stats:
        """Run the statistics collectors and add compression and processing figures."""
        pipeline = StatisticsPipeline(config=StatisticsConfig(collectors=dict(self.config.statistics_collectors)),
                                      app_hooks=self.app_hooks)
        corpus = CorpusView(
            families=len(extraction.families),
            sources=cache.sources,
            media=cache.media,
            notes=cache.notes,
            repositories=cache.repositories,
            places=cache.places,
            quality=cache.quality,
        )
        stats = pipeline.run(persons.values(), corpus)

        raw = {xref_id: person_to_dict(person, cache.quality[xref_id].total if xref_id in cache.quality else None, source_tag)
               for xref_id, person in persons.items() if xref_id in cache.individuals}
        raw_size = len(json.dumps(raw, ensure_ascii=False))
        encoded_size = len(json.dumps(cache.individuals, ensure_ascii=False))
        ratio = round((raw_size - encoded_size) / raw_size * 100, 1) if raw_size else 0.0
        stats.add_value('compression', 'raw_size', raw_size)
        stats.add_value('compression', 'encoded_size', encoded_size)
        stats.add_value('compression', 'ratio', ratio)

        stats.add_value('processing', 'processed', extraction.processed)
        stats.add_value('processing', 'errors', extraction.errors + self.encode_errors)
        stats.add_value('processing', 'errors_by_kind', dict(extraction.errors_by_kind))
        stats.add_value('processing', 'encode_errors', self.encode_errors)
        stats.add_value('processing', 'place_cache', self.context.canonicalizer.cache_stats())
        return stats

    def _report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        elif info:
            logger.debug(info)
