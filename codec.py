"""
codec.py - Compact encoding of individuals and events.

Two bidirectional dictionaries shorten the cache:
    - EVENT_CODES: long event kind <-> 2-character code (unknown kinds pass through)
    - FIELD_CODES: long field name <-> 1-2 character code

Encoding is structural: only non-empty fields are emitted, in a fixed order. The
decode_* functions are exact inverses of the encode_* functions over the long-form
dictionaries produced by event_to_dict() and person_to_dict().

Module: gedcom_cache.codec
Author: @colin0brass
Last updated: 2026-10-19
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .records import Ceremony, EventRecord, PersonRecord

logger = logging.getLogger(__name__)

EVENT_CODES: Dict[str, str] = {
    # family
    'birth': 'fb',
    'death': 'fd',
    'marriage': 'fm',
    'divorce': 'fv',
    'engagement': 'fe',
    'adoption': 'fa',
    'child-birth': 'fc',
    'burial': 'fu',
    'cremation': 'fz',
    'separation': 'fs',
    'annulment': 'fn',
    'divorce-filed': 'fw',
    'marriage-bann': 'fo',
    'marriage-contract': 'fk',
    'marriage-license': 'fl',
    'marriage-settlement': 'ft',
    'children-count': 'fh',
    'marriage-count': 'fg',
    # religious
    'baptism': 'rb',
    'christening': 'rc',
    'confirmation': 'rf',
    'first-communion': 'rp',
    'adult-christening': 'ra',
    'bar-mitzvah': 'rm',
    'bat-mitzvah': 'rw',
    'blessing': 'rl',
    'ordination': 'ro',
    'religion': 'rr',
    # civil
    'census': 'gc',
    'naturalization': 'gn',
    'immigration': 'gi',
    'emigration': 'ge',
    'military-service': 'gm',
    'military-discharge': 'gd',
    'pension': 'gp',
    'id-number': 'gx',
    'nationality': 'gy',
    # education
    'education': 'ee',
    'graduation': 'eg',
    'diploma': 'ed',
    'certification': 'ec',
    'apprenticeship': 'ea',
    # professional
    'occupation': 'po',
    'promotion': 'pp',
    'retirement': 'pr',
    'business-creation': 'pb',
    'business-closure': 'pc',
    'contract': 'pt',
    # assets
    'property-acquisition': 'ap',
    'property-sale': 'as',
    'inheritance': 'ai',
    'will': 'aw',
    'probate': 'ab',
    'debt': 'ad',
    'property': 'aq',
    # medical
    'illness': 'mi',
    'recovery': 'mr',
    'medical-treatment': 'mt',
    'disability': 'md',
    'epidemic': 'me',
    'physical-description': 'mh',
    # geographic
    'residence': 'gr',
    'move': 'gv',
    'travel': 'gt',
    'pilgrimage': 'gl',
    # legal
    'trial': 'lp',
    'conviction': 'lc',
    'acquittal': 'la',
    'imprisonment': 'li',
    'fine': 'lf',
    # social
    'social-event': 'ss',
    'celebration': 'sc',
    'honor': 'sh',
    'membership': 'sm',
    'caste': 'sk',
    'title': 'sn',
    # media
    'photo': 'mp',
    'document': 'mc',
    'recording': 'ma',
    'video': 'mv',
    # custom
    'custom': 'cx',
    'fact': 'fx',
    'note': 'nx',
}

EVENT_KINDS: Dict[str, str] = {code: kind for kind, code in EVENT_CODES.items()}

FIELD_CODES: Dict[str, str] = {
    # identity
    'fullName': 'fn',
    'gender': 'g',
    'nickname': 'nn',
    'title': 'tt',
    # relations
    'fatherId': 'f',
    'motherId': 'm',
    'spouseIds': 's',
    'childIds': 'c',
    'siblingIds': 'b',
    'parentIds': 'p',
    # places
    'individualTowns': 't',
    'birthPlace': 'bl',
    'deathPlace': 'dl',
    'residences': 'r',
    # events
    'individualEvents': 'e',
    'birthDate': 'bd',
    'deathDate': 'dd',
    'marriageDate': 'md',
    # enriched data
    'multimedia': 'mm',
    'notes': 'nt',
    'sources': 'sr',
    'occupations': 'oc',
    'education': 'ed',
    'identifiers': 'id',
    'addresses': 'ad',
    # metadata
    'bgColor': 'bg',
    'quality': 'q',
    'changeDate': 'ch',
    'timeline': 'tl',
    'statistics': 'st',
    'source': '_s',
    # physical
    'height': 'h',
    'weight': 'w',
    'eyeColor': 'ey',
    'hairColor': 'hr',
    # culture
    'religion': 'rl',
    'nationality': 'na',
    'language': 'lg',
    # contact
    'email': 'em',
    'website': 'wb',
    'phone': 'ph',
    'social': 'so',
    # advanced
    'dnaMarkers': 'dn',
    'medicalInfo': 'mi',
    'preferences': 'pr',
    'customFields': 'cf',
}

FIELD_NAMES: Dict[str, str] = {code: name for name, code in FIELD_CODES.items()}

GENDER_CODES = {'male': 'M', 'female': 'F', 'unknown': 'U'}
GENDER_NAMES = {code: sex for sex, code in GENDER_CODES.items()}
CEREMONY_CODES = {'civil': 'c', 'religious': 'r'}
CEREMONY_NAMES = {code: name for name, code in CEREMONY_CODES.items()}

# Encoded individual key order
INDIVIDUAL_FIELDS = ('fullName', 'gender', 'fatherId', 'motherId', 'spouseIds', 'siblingIds', 'childIds',
                     'individualEvents', 'quality', 'notes', 'multimedia', 'sources', 'source')

# Encoded event metadata: code -> long-form key
EVENT_META = (
    ('s', 'spouse_id'),
    ('c', 'child_id'),
    ('v', 'value'),
    ('ct', 'custom_type'),
    ('mt', 'marriage_type'),
    ('a', 'age'),
    ('x', 'cause'),
    ('n', 'note_ids'),
    ('sd', 'subdivision'),
    ('r', 'source_ids'),
    ('q', 'source_quality'),
)


def _is_empty(value: Any) -> bool:
    return value is None or value == '' or value == [] or value == {}


def _prune(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if not _is_empty(value)}


def join_full_name(surname: str, given: str) -> str:
    """Build the 'surname|given' name field; '\\' and '|' inside a part are backslash-escaped."""
    def escape(part: str) -> str:
        return part.replace('\\', '\\\\').replace('|', '\\|')
    return f"{escape(surname)}|{escape(given)}"


def split_full_name(value: str) -> Tuple[str, str]:
    """Inverse of join_full_name(): split on the first unescaped '|'."""
    parts: List[str] = ['']
    chars = iter(value)
    for char in chars:
        if char == '\\':
            parts[-1] += next(chars, '')
        elif char == '|' and len(parts) == 1:
            parts.append('')
        else:
            parts[-1] += char
    return parts[0], parts[1] if len(parts) > 1 else ''


def encode_event_kind(kind: str) -> str:
    return EVENT_CODES.get(kind, kind)


def decode_event_kind(code: str) -> str:
    return EVENT_KINDS.get(code, code)


def ceremony_to_dict(ceremony: Ceremony) -> Dict[str, Any]:
    place = ceremony.place
    return _prune({
        'ceremony_type': ceremony.ceremony_type,
        'date': ceremony.date,
        'place': place.key if place else None,
        'note_ids': list(ceremony.note_ids),
        'subdivision': place.subdivision if place else None,
    })


def event_to_dict(event: EventRecord) -> Dict[str, Any]:
    """
    Long-form view of the event fields the codec preserves.

    Empty fields are omitted. Transport-only coordinates are not part of it.
    """
    place = event.place
    qualities = [citation.quality for citation in event.sources if citation.quality is not None]
    return _prune({
        'kind': event.kind,
        'date': event.date,
        'place': place.key if place else None,
        'spouse_id': event.spouse_id,
        'child_id': event.child_id,
        'value': event.value,
        'custom_type': event.custom_type,
        'marriage_type': event.marriage_type,
        'age': event.age,
        'cause': event.cause,
        'note_ids': list(event.note_ids),
        'subdivision': place.subdivision if place else None,
        'source_ids': list(dict.fromkeys(event.source_ids)),
        'source_quality': max(qualities) if qualities else None,
        'ceremonies': [ceremony_to_dict(ceremony) for ceremony in event.ceremonies],
    })


def encode_event(event: EventRecord) -> Dict[str, Any]:
    """
    Encode one event.

    Args:
        event (EventRecord): Normalized event.

    Returns:
        Dict[str, Any]: {t, d, l, m: {...}} with only non-empty entries.
    """
    data = event_to_dict(event)
    encoded: Dict[str, Any] = {'t': encode_event_kind(data['kind'])}
    if 'date' in data:
        encoded['d'] = data['date']
    if 'place' in data:
        encoded['l'] = data['place']
    meta = {code: data[key] for code, key in EVENT_META if key in data}
    if data.get('ceremonies'):
        meta['ceremonies'] = [_encode_ceremony(ceremony) for ceremony in data['ceremonies']]
    if meta:
        encoded['m'] = meta
    return encoded


def _encode_ceremony(ceremony: Dict[str, Any]) -> Dict[str, Any]:
    encoded = {'t': CEREMONY_CODES.get(ceremony['ceremony_type'], ceremony['ceremony_type'])}
    for code, key in (('d', 'date'), ('l', 'place'), ('n', 'note_ids'), ('sd', 'subdivision')):
        if key in ceremony:
            encoded[code] = ceremony[key]
    return encoded


def decode_event(encoded: Dict[str, Any]) -> Dict[str, Any]:
    """Inverse of encode_event(), returning the event_to_dict() form."""
    data: Dict[str, Any] = {'kind': decode_event_kind(encoded['t'])}
    if 'd' in encoded:
        data['date'] = encoded['d']
    if 'l' in encoded:
        data['place'] = encoded['l']
    meta = encoded.get('m', {})
    for code, key in EVENT_META:
        if code in meta:
            data[key] = meta[code]
    if meta.get('ceremonies'):
        data['ceremonies'] = [_decode_ceremony(ceremony) for ceremony in meta['ceremonies']]
    return data


def _decode_ceremony(encoded: Dict[str, Any]) -> Dict[str, Any]:
    ceremony = {'ceremony_type': CEREMONY_NAMES.get(encoded['t'], encoded['t'])}
    for code, key in (('d', 'date'), ('l', 'place'), ('n', 'note_ids'), ('sd', 'subdivision')):
        if code in encoded:
            ceremony[key] = encoded[code]
    return ceremony


def person_to_dict(person: PersonRecord, quality: Optional[int] = None, source_tag: Optional[str] = None) -> Dict[str, Any]:
    """Long-form view of the individual fields the codec preserves, empty fields omitted."""
    return _prune({
        'given': person.given,
        'surname': person.surname,
        'sex': person.sex if person.sex in GENDER_CODES else 'unknown',
        'father_id': person.father_id,
        'mother_id': person.mother_id,
        'spouse_ids': list(person.spouse_ids),
        'sibling_ids': list(person.sibling_ids),
        'child_ids': list(person.child_ids),
        'events': [event_to_dict(event) for event in person.events],
        'quality': quality,
        'note_ids': list(person.note_ids),
        'media_ids': list(person.media_ids),
        'source_ids': person.source_ids,
        'source_tag': source_tag,
    })


def encode_individual(person: PersonRecord, quality: Optional[int] = None, source_tag: Optional[str] = None) -> Dict[str, Any]:
    """
    Encode one individual.

    Args:
        person (PersonRecord): Resolved and normalized individual.
        quality (Optional[int]): Quality score total, omitted if None.
        source_tag (Optional[str]): Extraction source tag, omitted if None.

    Returns:
        Dict[str, Any]: Encoded individual; keys in the order fn, g, f, m, s, b, c, e, q, nt, mm, sr, _s.
    """
    data = person_to_dict(person, quality, source_tag)
    values = {
        'fullName': join_full_name(data.get('surname', ''), data.get('given', '')) if ('surname' in data or 'given' in data) else None,
        'gender': GENDER_CODES[data['sex']],
        'fatherId': data.get('father_id'),
        'motherId': data.get('mother_id'),
        'spouseIds': data.get('spouse_ids'),
        'siblingIds': data.get('sibling_ids'),
        'childIds': data.get('child_ids'),
        'individualEvents': [encode_event(event) for event in person.events],
        'quality': data.get('quality'),
        'notes': data.get('note_ids'),
        'multimedia': data.get('media_ids'),
        'sources': data.get('source_ids'),
        'source': data.get('source_tag'),
    }
    return {FIELD_CODES[name]: values[name] for name in INDIVIDUAL_FIELDS if not _is_empty(values[name])}


def decode_individual(encoded: Dict[str, Any]) -> Dict[str, Any]:
    """Inverse of encode_individual(), returning the person_to_dict() form."""
    data: Dict[str, Any] = {}
    if 'fn' in encoded:
        surname, given = split_full_name(encoded['fn'])
        data['given'] = given
        data['surname'] = surname
    data['sex'] = GENDER_NAMES.get(encoded.get('g', 'U'), 'unknown')
    for code, key in (('f', 'father_id'), ('m', 'mother_id'), ('s', 'spouse_ids'), ('b', 'sibling_ids'),
                      ('c', 'child_ids')):
        if code in encoded:
            data[key] = encoded[code]
    if 'e' in encoded:
        data['events'] = [decode_event(event) for event in encoded['e']]
    for code, key in (('q', 'quality'), ('nt', 'note_ids'), ('mm', 'media_ids'), ('sr', 'source_ids'),
                      ('_s', 'source_tag')):
        if code in encoded:
            data[key] = encoded[code]
    return _prune(data)


def compress_fields(obj: Any, deep: bool = True, skip_empty: bool = True) -> Any:
    """
    Generic long -> short key mapping.

    Args:
        obj: Dict (or list of dicts when deep) to compress; other values are returned as is.
        deep (bool): Recurse into nested dicts and lists.
        skip_empty (bool): Drop None, empty strings, lists and dicts.
    """
    return _map_keys(obj, FIELD_CODES, deep, skip_empty)


def decompress_fields(obj: Any, deep: bool = True) -> Any:
    """Generic short -> long key mapping, inverse of compress_fields()."""
    return _map_keys(obj, FIELD_NAMES, deep, False)


def _map_keys(obj: Any, mapping: Dict[str, str], deep: bool, skip_empty: bool) -> Any:
    if isinstance(obj, list):
        return [_map_keys(item, mapping, deep, skip_empty) for item in obj] if deep else obj
    if not isinstance(obj, dict):
        return obj
    result = {}
    for key, value in obj.items():
        if skip_empty and _is_empty(value):
            continue
        result[mapping.get(key, key)] = _map_keys(value, mapping, deep, skip_empty) if deep else value
    return result


def duplicate_codes(mapping: Dict[str, str]) -> List[str]:
    """Return the codes used more than once in a dictionary (empty when bijective)."""
    seen, duplicates = set(), []
    for code in mapping.values():
        if code in seen and code not in duplicates:
            duplicates.append(code)
        seen.add(code)
    return duplicates
