"""
plac_format.py - Place jurisdiction schema from the GEDCOM header.

GEDCOM files may declare the meaning of each comma-separated place segment with
HEAD > PLAC > FORM, e.g. 'Town, Area code, County, Region, Country'. This module
reads that schema and maps place strings onto it.

Module: gedcom_cache.plac_format
Author: @colin0brass
Last updated: 2026-10-19
"""

import logging
from typing import Dict, List, Optional

from .canonical import split_segments
from .record_source import RecordNode, RecordSource

logger = logging.getLogger(__name__)

EXTRA_POLICIES = ('merge-last', 'clip')


def _field_key(label: str) -> str:
    return "_".join(label.strip().lower().split())


def read_plac_form(source: RecordSource) -> List[str]:
    """
    Return the HEAD > PLAC > FORM jurisdiction labels as normalized keys.

    Args:
        source (RecordSource): Record source.

    Returns:
        List[str]: Keys such as ['town', 'area_code', 'county', 'region', 'country'], or [].
    """
    header: Optional[RecordNode] = source.header()
    if header is None:
        return []
    form = header.sub_tag_value('PLAC/FORM')
    if not form or not isinstance(form, str):
        return []
    labels = [_field_key(label) for label in form.split(',')]
    logger.debug(f"Place format from header: {labels}")
    return labels


def apply_plac_form(place: str, form: List[str], extra: str = 'merge-last') -> Dict[str, str]:
    """
    Map the segments of a place string onto a jurisdiction schema.

    Args:
        place (str): Raw place string.
        form (List[str]): Keys from read_plac_form().
        extra (str): What to do with surplus segments: 'merge-last' appends them to the last
            field, 'clip' drops them.

    Returns:
        Dict[str, str]: Non-empty fields keyed by schema label.
    """
    if extra not in EXTRA_POLICIES:
        raise ValueError(f"extra must be one of {EXTRA_POLICIES}, got '{extra}'")
    if not place or not form:
        return {}
    parts = split_segments(place)
    if len(parts) > len(form) and extra == 'merge-last':
        parts = parts[:len(form) - 1] + [", ".join(p for p in parts[len(form) - 1:] if p)]
    return {label: value for label, value in zip(form, parts) if value}
