"""
extractor.py - Record extraction from a GEDCOM record source.

Defines RecordExtractor, which walks every individual, family, source, repository,
multimedia and note record of a RecordSource and materialises plain records
(see records.py). A record that fails to extract is logged, skipped and counted;
it never aborts the run.

Module: gedcom_cache.extractor
Author: @colin0brass
Last updated: 2026-10-19
"""
import re
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .app_hooks import AppHooks
from .config import CacheConfig
from .event_extractor import (EventExtractor, extract_citations, extract_media_ids, extract_notes,
                              is_pointer, note_text, text_value)
from .gedcom_date import date_text
from .gedcom_tags import IDENTIFIER_TAGS, MEDIA_TAGS, SEX_MAP
from .record_source import RecordNode, RecordSource
from .records import (FamilyRecord, MediaRecord, NoteRecord, PersonRecord, RepositoryRecord,
                      SourceRecord)

logger = logging.getLogger(__name__)

NAME_RE = re.compile(r'^(?P<given>[^/]*)(?:/(?P<surname>[^/]*)/?)?(?P<suffix>.*)$')

SOURCE_CATEGORIES: List[Tuple[str, Tuple[str, ...]]] = [
    ('census', ('census', 'recensement')),
    ('birth-record', ('birth', 'naissance')),
    ('death-record', ('death', 'décès', 'deces')),
    ('marriage-record', ('marriage', 'mariage')),
    ('church-record', ('church', 'parish', 'église', 'eglise', 'paroiss')),
    ('military-record', ('military', 'militaire')),
    ('newspaper', ('newspaper', 'journal')),
    ('book', ('book', 'livre')),
    ('photograph', ('photo', 'image')),
    ('will', ('will', 'testament')),
    ('land-record', ('land', 'property', 'propriété', 'cadastre')),
]

MEDIA_TYPES: List[Tuple[str, Tuple[str, ...]]] = [
    ('image', ('jpg', 'jpeg', 'png', 'gif', 'bmp', 'tif', 'tiff', 'pict', 'webp')),
    ('audio', ('wav', 'mp3', 'aif', 'aiff', 'au', 'ogg', 'm4a')),
    ('video', ('mov', 'mp4', 'mpg', 'mpeg', 'avi', 'wmv', 'flv')),
    ('document', ('pdf', 'doc', 'docx', 'txt', 'rtf')),
]


def categorize_source(title: Optional[str], author: Optional[str]) -> str:
    """Classify a source from keywords in its title and author."""
    combined = f"{title or ''} {author or ''}".lower()
    for category, keywords in SOURCE_CATEGORIES:
        if any(keyword in combined for keyword in keywords):
            return category
    return 'other'


def media_type(media_format: Optional[str], file: Optional[str]) -> str:
    """Derive a media type from its FORM value or file extension."""
    if not media_format and not file:
        return 'unknown'
    fmt = (media_format or '').lower().lstrip('.')
    ext = file.rsplit('.', 1)[-1].lower() if file and '.' in file else ''
    for kind, extensions in MEDIA_TYPES:
        if fmt in extensions or ext in extensions:
            return kind
    if file and file.lower().startswith(('http://', 'https://', 'ftp://')):
        return 'url'
    return 'other'


def split_name(value: Optional[str]) -> Tuple[str, str]:
    """
    Split a GEDCOM 'Given /Surname/ Suffix' name into (given, surname).

    Args:
        value (Optional[str]): NAME value.

    Returns:
        Tuple[str, str]: Given names (with suffix) and surname, stripped.
    """
    if not value:
        return '', ''
    m = NAME_RE.match(str(value).strip())
    given = " ".join(f"{m.group('given') or ''} {m.group('suffix') or ''}".split())
    surname = " ".join((m.group('surname') or '').split())
    return given, surname


@dataclass
class ExtractionResult:
    """
    Output of the record extractor.

    Attributes:
        persons, families, sources, repositories, media, notes: Records keyed by xref id.
        processed: Records successfully extracted.
        errors: Records skipped because extraction failed.
        errors_by_kind: Error counts per record kind ('INDI', 'FAM', ...).
    """
    persons: Dict[str, PersonRecord] = field(default_factory=dict)
    families: Dict[str, FamilyRecord] = field(default_factory=dict)
    sources: Dict[str, SourceRecord] = field(default_factory=dict)
    repositories: Dict[str, RepositoryRecord] = field(default_factory=dict)
    media: Dict[str, MediaRecord] = field(default_factory=dict)
    notes: Dict[str, NoteRecord] = field(default_factory=dict)
    processed: int = 0
    errors: int = 0
    errors_by_kind: Dict[str, int] = field(default_factory=dict)

    def record_error(self, kind: str) -> None:
        self.errors += 1
        self.errors_by_kind[kind] = self.errors_by_kind.get(kind, 0) + 1


class RecordExtractor:
    """
    Extracts plain records from a RecordSource.

    Attributes:
        source (RecordSource): Root query handle.
        config (CacheConfig): Pipeline configuration.
        app_hooks (Optional[AppHooks]): Progress reporting hooks.
        event_extractor (EventExtractor): Event/attribute extraction helper.
        _inline_media (Dict[str, List[MediaRecord]]): OBJE structures embedded in individuals, by individual.
    """
    __slots__ = ['source', 'config', 'app_hooks', 'event_extractor', '_inline_media']

    def __init__(self, source: RecordSource, config: Optional[CacheConfig] = None, app_hooks: Optional[AppHooks] = None):
        self.source = source
        self.config = config if config is not None else CacheConfig()
        self.app_hooks = app_hooks
        self.event_extractor = EventExtractor(with_notes=self.config.extract_notes,
                                              with_sources=self.config.extract_sources)
        self._inline_media: Dict[str, List[MediaRecord]] = {}

    def extract(self) -> ExtractionResult:
        """
        Extract every supported record kind.

        Returns:
            ExtractionResult: All records plus processed/error tallies.
        """
        result = ExtractionResult()
        self._inline_media = {}
        steps: List[Tuple[str, Callable[[RecordNode], Any], Dict[str, Any]]] = [
            ('SOUR', self._create_source, result.sources),
            ('REPO', self._create_repository, result.repositories),
            ('OBJE', self._create_media, result.media),
            ('NOTE', self._create_note, result.notes),
            ('INDI', self._create_person, result.persons),
            ('FAM', self._create_family, result.families),
        ]
        for kind, builder, target in steps:
            if self._stop_requested():
                logger.info(f"Extraction stopped before {kind} records")
                break
            self._extract_all(kind, builder, target, result)
        for inline_media in self._inline_media.values():
            for media in inline_media:
                result.media.setdefault(media.xref_id, media)
        logger.info(f"Extracted {len(result.persons)} individuals, {len(result.families)} families, "
                    f"{len(result.sources)} sources, {len(result.media)} media, {len(result.notes)} notes "
                    f"({result.errors} errors)")
        return result

    def _extract_all(self, kind: str, builder: Callable[[RecordNode], Any], target: Dict[str, Any], result: ExtractionResult) -> None:
        """Run builder over every record of kind, counting failures."""
        nodes = list(self.source.records(kind))
        self._report_step(info=f"Extracting {kind} records", target=len(nodes), reset_counter=True, plus_step=0)
        for node in nodes:
            try:
                record = builder(node)
            except Exception as e:
                logger.error(f"Failed to extract {kind} record {getattr(node, 'xref_id', None)}: {e}", exc_info=True)
                result.record_error(kind)
                continue
            if record.xref_id in target:
                logger.warning(f"Duplicate {kind} record {record.xref_id}, keeping the first one")
            else:
                target[record.xref_id] = record
                result.processed += 1
            self._report_step(plus_step=1)

    @staticmethod
    def _require_xref(node: RecordNode) -> str:
        if not node.xref_id:
            raise ValueError(f"{node.tag} record without xref id")
        return node.xref_id

    def _create_person(self, node: RecordNode) -> PersonRecord:
        """
        Creates a PersonRecord from an INDI record.

        Args:
            node (RecordNode): INDI record.

        Returns:
            PersonRecord: Extracted individual (relations unresolved).
        """
        person = PersonRecord(xref_id=self._require_xref(node))
        person.given, person.surname, person.name = self._get_name(node)
        sex = text_value(node.sub_tag_value('SEX'))
        person.sex = SEX_MAP.get(sex.upper()[:1], 'unknown') if sex else 'unknown'

        person.events = self.event_extractor.extract_individual_events(node)
        person.family_child_ids = [sub.value.strip() for sub in node.sub_tags('FAMC') if is_pointer(sub.value)]
        person.family_spouse_ids = [sub.value.strip() for sub in node.sub_tags('FAMS') if is_pointer(sub.value)]

        if self.config.extract_notes:
            person.notes = extract_notes(node)
        if self.config.extract_sources:
            person.sources = extract_citations(node)
        inline_media = self._embedded_media(node)
        person.media_ids = extract_media_ids(node) + [media.xref_id for media in inline_media]

        for tag, key in IDENTIFIER_TAGS.items():
            value = text_value(node.sub_tag_value(tag))
            if value:
                person.identifiers[key] = value
        person.change_date = date_text(node.sub_tag_value('CHAN/DATE'))
        # only a fully built individual owns its embedded media
        self._inline_media.setdefault(person.xref_id, inline_media)
        return person

    def _get_name(self, node: RecordNode) -> Tuple[str, str, str]:
        """Return (given, surname, full name) from the first NAME structure."""
        name_node = node.sub_tag('NAME')
        if name_node is None:
            return '', '', ''
        given, surname = split_name(text_value(name_node.value))
        given = text_value(name_node.sub_tag_value('GIVN')) or given
        surname = text_value(name_node.sub_tag_value('SURN')) or surname
        return given, surname, " ".join(f"{given} {surname}".split())

    def _embedded_media(self, node: RecordNode) -> List[MediaRecord]:
        """Build media records for the OBJE structures embedded in an individual."""
        records = []
        embedded = [sub for sub in node.sub_tags(*MEDIA_TAGS) if not is_pointer(sub.value)]
        for idx, sub in enumerate(embedded):
            media = self._build_media(sub, f"INLINE_OBJE_{node.xref_id}_{idx}")
            if media.file:
                media.individual_ids.append(node.xref_id)
                records.append(media)
        return records

    def _create_family(self, node: RecordNode) -> FamilyRecord:
        """Creates a FamilyRecord from a FAM record."""
        family = FamilyRecord(xref_id=self._require_xref(node))
        husband = node.sub_tag_value('HUSB')
        wife = node.sub_tag_value('WIFE')
        family.husband_id = husband.strip() if is_pointer(husband) else None
        family.wife_id = wife.strip() if is_pointer(wife) else None
        family.child_ids = list(dict.fromkeys(sub.value.strip() for sub in node.sub_tags('CHIL') if is_pointer(sub.value)))
        family.events = self.event_extractor.extract_family_events(node)
        if self.config.extract_notes:
            family.notes = extract_notes(node)
        if self.config.extract_sources:
            family.sources = extract_citations(node)
        family.media_ids = extract_media_ids(node)
        return family

    def _create_source(self, node: RecordNode) -> SourceRecord:
        """Creates a SourceRecord from a SOUR record."""
        source = SourceRecord(xref_id=self._require_xref(node))
        source.title = self._text(node, 'TITL')
        source.author = self._text(node, 'AUTH')
        source.publication = self._text(node, 'PUBL')
        source.text = self._text(node, 'TEXT')
        source.abbreviation = text_value(node.sub_tag_value('ABBR'))
        source.source_type = text_value(node.sub_tag_value('TYPE')) or text_value(node.sub_tag_value('_TYPE'))
        source.date = date_text(node.sub_tag_value('DATA/EVEN/DATE') or node.sub_tag_value('DATE'))
        source.url = text_value(node.sub_tag_value('WWW')) or text_value(node.sub_tag_value('_URL'))
        for repo in node.sub_tags('REPO'):
            if is_pointer(repo.value):
                source.repository_ids.append(repo.value.strip())
            source.call_number = source.call_number or text_value(repo.sub_tag_value('CALN'))
        source.category = categorize_source(source.title, source.author)
        if self.config.extract_notes:
            source.notes = extract_notes(node)
        source.media_ids = extract_media_ids(node)
        source.change_date = date_text(node.sub_tag_value('CHAN/DATE'))
        return source

    def _create_repository(self, node: RecordNode) -> RepositoryRecord:
        """Creates a RepositoryRecord from a REPO record."""
        repository = RepositoryRecord(xref_id=self._require_xref(node))
        repository.name = text_value(node.sub_tag_value('NAME'))
        addr = node.sub_tag('ADDR')
        repository.address = (note_text(addr) or None) if addr is not None else None
        repository.phone = text_value(node.sub_tag_value('PHON'))
        repository.email = text_value(node.sub_tag_value('EMAIL')) or text_value(node.sub_tag_value('_EMAIL'))
        repository.website = text_value(node.sub_tag_value('WWW')) or text_value(node.sub_tag_value('_URL'))
        if self.config.extract_notes:
            repository.notes = extract_notes(node)
        return repository

    def _create_media(self, node: RecordNode) -> MediaRecord:
        """Creates a MediaRecord from an OBJE record."""
        return self._build_media(node, self._require_xref(node))

    def _build_media(self, node: RecordNode, xref_id: str) -> MediaRecord:
        media = MediaRecord(xref_id=xref_id)
        file_node = node.sub_tag('FILE')
        if file_node is not None:
            media.file = text_value(file_node.value)
            media.media_format = text_value(file_node.sub_tag_value('FORM'))
            media.title = text_value(file_node.sub_tag_value('TITL'))
        media.media_format = media.media_format or text_value(node.sub_tag_value('FORM'))
        media.title = media.title or text_value(node.sub_tag_value('TITL'))
        media.date = date_text(node.sub_tag_value('DATE'))
        media.media_type = media_type(media.media_format, media.file)
        if self.config.extract_notes:
            media.notes = extract_notes(node)
        return media

    def _create_note(self, node: RecordNode) -> NoteRecord:
        """Creates a NoteRecord from a level-0 NOTE record."""
        note = NoteRecord(xref_id=self._require_xref(node), text=note_text(node), note_type='record')
        note.source_ids = [sub.value.strip() for sub in node.sub_tags('SOUR') if is_pointer(sub.value)]
        return note

    @staticmethod
    def _text(node: RecordNode, tag: str) -> Optional[str]:
        sub = node.sub_tag(tag)
        return (note_text(sub) or None) if sub is not None else None

    def _report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        elif info:
            logger.debug(info)

    def _stop_requested(self) -> bool:
        if self.app_hooks and callable(getattr(self.app_hooks, "stop_requested", None)):
            return bool(self.app_hooks.stop_requested())
        return False
