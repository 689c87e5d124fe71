"""
canonical.py - Place name canonicalization for the places index.

Turns a raw GEDCOM place string into a stable lookup key for its town:
    1. Segment split: first non-empty comma-separated part
    2. Clean: drop parenthetical suffixes, trailing district numbers and stray digits
    3. Format: French orthography contractions, applied in a fixed order
    4. Canonicalize: lowercase, strip diacritics, join words with underscores

Example:
    'Huisseau-sur-Mauves, 45130, Loiret, Centre, France' -> 'huisseau_s_mauves'
    'Saint-Denis, 93200, Seine-Saint-Denis, Île-de-France, France' -> 'st_denis'

Module: gedcom_cache.canonical
Author: @colin0brass
Last updated: 2026-10-19
"""

import re
import logging
import unicodedata
from typing import Callable, Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

CLEAN_SPLIT_RE = re.compile(r",|\(.*|\s\d+\s*$")
TRAILING_DIGITS_RE = re.compile(r"\d+$")
TITLE_RE = re.compile(r"(^|[-\s])([a-zà-ÿ])")
ELISION_RE = re.compile(r"(-D'|-d'| D'| d')(\w)")
KEY_SEPARATORS_RE = re.compile(r"[\s\-/'’_]+")

_CITIES = r"(Paris|Marseille|Lyon)"

Replacement = Tuple["re.Pattern", Union[str, Callable[["re.Match"], str]]]

# Order matters: later rules see the output of earlier ones.
FORMAT_RULES: List[Replacement] = [
    (re.compile(r"-Sur-| Sur | s/ "), "-s/-"),
    (re.compile(r"-Sous-| Sous "), "-/s-"),
    (re.compile(r"-La-| La | la "), "-la-"),
    (re.compile(r"-Le-| Le | le "), "-le-"),
    (re.compile(r"-Les-| Les | les "), "-les-"),
    (re.compile(r"-Lès-| Lès | lès "), "-lès-"),
    (re.compile(r"-Au-| Au | au "), "-au-"),
    (re.compile(r"-Du-| Du | du "), "-du-"),
    (re.compile(r"-De-| De | de "), "-de-"),
    (re.compile(r"-Des-| Des | des "), "-des-"),
    (re.compile(r"-Devant-| Devant | devant "), "-devant-"),
    (re.compile(r"-En-| En | en "), "-en-"),
    (re.compile(r"-Et-| Et | et "), "-et-"),
    (re.compile(r"\b(Saint|Sainte)[- ]"), lambda m: "Ste-" if m.group(1) == "Sainte" else "St-"),
    (re.compile(r"^-Mont$|\bMont[- ]"), lambda m: "-Mt" if m.group(0) == "-Mont" else "Mt-"),
    (re.compile(r"-Madame$"), "-Mme"),
    (re.compile(r"-Vieux$"), "-Vx"),
    (re.compile(r"-Grand$"), "-Gd"),
    (re.compile(r"-Petit$"), "-Pt"),
    (re.compile(r"-Moulineaux$"), "-Mlx"),
    (re.compile(_CITIES + r"[-\s][IVXLC]+(?:ème|eme|e|er)?(?![^\W\d_])", re.I), r"\1"),
    (re.compile(_CITIES + r"[-\s]\d{5}", re.I), r"\1"),
    (re.compile(_CITIES + r"[-\s]?\d{1,2}(?:er|ème|eme|e)?(?![^\W\d_])", re.I), r"\1"),
]


def split_segments(place: str) -> List[str]:
    """Split a place string on commas, returning stripped segments (empty ones kept)."""
    return [part.strip() for part in place.split(',')]


def clean_town_name(town: str) -> str:
    """
    Extract the main part of a town name.

    Drops anything after a comma or an opening parenthesis, a trailing district number
    ('Lyon 3') and trailing digits.
    """
    town = CLEAN_SPLIT_RE.split(town)[0]
    return TRAILING_DIGITS_RE.sub("", town).strip()


def format_town_name(town: str) -> str:
    """
    Format a town name with French orthography rules.

    Args:
        town (str): Town name (cleaned or raw).

    Returns:
        str: Formatted town name, e.g. 'Huisseau-s/-Mauves', 'St-Denis', 'Paris'.
    """
    town = clean_town_name(str(town))
    town = TITLE_RE.sub(lambda m: m.group(1) + m.group(2).upper(), town.lower())
    town = ELISION_RE.sub(lambda m: "-d'" + m.group(2).upper(), town)
    for pattern, replacement in FORMAT_RULES:
        town = pattern.sub(replacement, town)
    return town


def strip_accents(text: str) -> str:
    """Remove diacritics by NFD decomposition and combining-mark removal."""
    decomposed = unicodedata.normalize('NFD', text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_geo_string(text: str) -> str:
    """
    Lowercase, strip diacritics and join words with underscores.

    Runs of whitespace, hyphens, slashes, apostrophes and underscores collapse to a
    single underscore; leading and trailing underscores are removed.
    """
    if not text or not isinstance(text, str):
        return ''
    text = strip_accents(text.lower())
    return KEY_SEPARATORS_RE.sub("_", text).strip("_")


class PlaceCanonicalizer:
    """
    Memoized place string to canonical key pipeline.

    The memo is keyed by the raw input string and lives as long as the owning pipeline
    context; call clear() between independent runs.

    Attributes:
        _cache (Dict[str, Optional[str]]): raw place string -> key (None for failures).
        hits (int): Cache hit count.
        misses (int): Cache miss count.
    """
    __slots__ = ['_cache', 'hits', 'misses']

    def __init__(self):
        self._cache: Dict[str, Optional[str]] = {}
        self.hits = 0
        self.misses = 0

    def canonicalize(self, place: Optional[str]) -> Optional[str]:
        """
        Return the canonical key of a place string.

        Args:
            place (Optional[str]): Raw place string.

        Returns:
            Optional[str]: Canonical town key, or None if no town can be derived.
        """
        if not place or not isinstance(place, str):
            return None
        if place in self._cache:
            self.hits += 1
            return self._cache[place]
        self.misses += 1
        try:
            key = self._compute(place)
        except Exception as e:
            logger.warning(f"Failed to canonicalize place '{place}': {e}")
            key = None
        self._cache[place] = key
        return key

    __call__ = canonicalize

    @staticmethod
    def _compute(place: str) -> Optional[str]:
        town = next((segment for segment in split_segments(place) if segment), None)
        if not town:
            return None
        town = clean_town_name(town)
        if not town:
            return None
        formatted = format_town_name(town)
        if not formatted:
            return None
        return normalize_geo_string(formatted) or None

    def town_display(self, place: Optional[str]) -> Optional[str]:
        """Return the formatted (not key-normalized) town name of a place string."""
        if not place:
            return None
        town = next((segment for segment in split_segments(place) if segment), None)
        town = clean_town_name(town) if town else ''
        formatted = format_town_name(town) if town else ''
        return formatted or None

    def clear(self) -> None:
        """Empty the memo table."""
        size = len(self._cache)
        self._cache.clear()
        self.hits = 0
        self.misses = 0
        logger.debug(f"Place normalization cache cleared: {size} entries removed")

    def cache_stats(self) -> Dict[str, int]:
        return {'size': len(self._cache), 'hits': self.hits, 'misses': self.misses}

    def __len__(self) -> int:
        return len(self._cache)
