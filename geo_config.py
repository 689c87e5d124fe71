"""
geo_config.py - Geography reference data and place component extraction.

Provides GeoReference, the country / French department lookup used to split a place
string into town, postal code, department, region and country. The reference is
fetched once from an optional remote service; any failure falls back to the embedded
static table (common countries, dependent territories, French departments 01-95).
Country coverage is completed from pycountry and continents come from
pycountry_convert.

Module: gedcom_cache.geo_config
Author: @colin0brass
Last updated: 2026-10-19
"""

import re
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pycountry
import pycountry_convert as pc
import requests
from unidecode import unidecode

from .canonical import PlaceCanonicalizer, format_town_name, split_segments

logger = logging.getLogger(__name__)

# alpha-2 code -> (display name, aliases). Aliases are matched case/accent-insensitively.
STATIC_COUNTRIES: Dict[str, Tuple[str, List[str]]] = {
    'FR': ('France', ['France', 'Republique francaise']),
    'BE': ('Belgique', ['Belgium', 'Belgie', 'Belgien']),
    'CH': ('Suisse', ['Switzerland', 'Schweiz', 'Svizzera']),
    'DE': ('Allemagne', ['Germany', 'Deutschland', 'Prusse', 'Prussia']),
    'IT': ('Italie', ['Italy', 'Italia']),
    'ES': ('Espagne', ['Spain', 'Espana']),
    'PT': ('Portugal', []),
    'LU': ('Luxembourg', ['Luxemburg']),
    'NL': ('Pays-Bas', ['Netherlands', 'Nederland', 'Hollande', 'Holland']),
    'GB': ('Royaume-Uni', ['United Kingdom', 'UK', 'Great Britain', 'Grande-Bretagne', 'Angleterre', 'England',
                           'Ecosse', 'Scotland', 'Pays de Galles', 'Wales']),
    'IE': ('Irlande', ['Ireland', 'Eire']),
    'AT': ('Autriche', ['Austria', 'Osterreich']),
    'PL': ('Pologne', ['Poland', 'Polska']),
    'DK': ('Danemark', ['Denmark', 'Danmark']),
    'SE': ('Suede', ['Sweden', 'Sverige']),
    'NO': ('Norvege', ['Norway', 'Norge']),
    'GR': ('Grece', ['Greece']),
    'RU': ('Russie', ['Russia']),
    'US': ('USA', ['United States', 'United States of America', 'US', 'Etats-Unis', "Etats-Unis d'Amerique"]),
    'CA': ('Canada', []),
    'MX': ('Mexique', ['Mexico']),
    'AR': ('Argentine', ['Argentina']),
    'BR': ('Bresil', ['Brazil', 'Brasil']),
    'AU': ('Australie', ['Australia']),
    'DZ': ('Algerie', ['Algeria']),
    'MA': ('Maroc', ['Morocco']),
    'TN': ('Tunisie', ['Tunisia']),
}

# Dependent territory alias -> parent country alpha-2
STATIC_TERRITORIES: Dict[str, str] = {
    'Guadeloupe': 'FR', 'Martinique': 'FR', 'Guyane': 'FR', 'Guyane francaise': 'FR', 'French Guiana': 'FR',
    'La Reunion': 'FR', 'Reunion': 'FR', 'Mayotte': 'FR', 'Nouvelle-Caledonie': 'FR', 'New Caledonia': 'FR',
    'Polynesie francaise': 'FR', 'French Polynesia': 'FR', 'Saint-Pierre-et-Miquelon': 'FR',
    'Wallis-et-Futuna': 'FR', 'Saint-Barthelemy': 'FR', 'Saint-Martin': 'FR',
    'Porto Rico': 'US', 'Puerto Rico': 'US', 'Guam': 'US', 'Iles Vierges americaines': 'US',
    'Groenland': 'DK', 'Greenland': 'DK', 'Iles Feroe': 'DK', 'Faroe Islands': 'DK',
    'Gibraltar': 'GB', 'Bermudes': 'GB', 'Bermuda': 'GB', 'Jersey': 'GB', 'Guernesey': 'GB', 'Guernsey': 'GB',
    'Curacao': 'NL', 'Aruba': 'NL',
}

STATIC_DEPARTMENTS: Dict[str, str] = {
    '01': 'Ain', '02': 'Aisne', '03': 'Allier', '04': 'Alpes-de-Haute-Provence', '05': 'Hautes-Alpes',
    '06': 'Alpes-Maritimes', '07': 'Ardèche', '08': 'Ardennes', '09': 'Ariège', '10': 'Aube',
    '11': 'Aude', '12': 'Aveyron', '13': 'Bouches-du-Rhône', '14': 'Calvados', '15': 'Cantal',
    '16': 'Charente', '17': 'Charente-Maritime', '18': 'Cher', '19': 'Corrèze', '20': 'Corse',
    '2A': 'Corse-du-Sud', '2B': 'Haute-Corse', '21': "Côte-d'Or", '22': "Côtes-d'Armor", '23': 'Creuse',
    '24': 'Dordogne', '25': 'Doubs', '26': 'Drôme', '27': 'Eure', '28': 'Eure-et-Loir',
    '29': 'Finistère', '30': 'Gard', '31': 'Haute-Garonne', '32': 'Gers', '33': 'Gironde',
    '34': 'Hérault', '35': 'Ille-et-Vilaine', '36': 'Indre', '37': 'Indre-et-Loire', '38': 'Isère',
    '39': 'Jura', '40': 'Landes', '41': 'Loir-et-Cher', '42': 'Loire', '43': 'Haute-Loire',
    '44': 'Loire-Atlantique', '45': 'Loiret', '46': 'Lot', '47': 'Lot-et-Garonne', '48': 'Lozère',
    '49': 'Maine-et-Loire', '50': 'Manche', '51': 'Marne', '52': 'Haute-Marne', '53': 'Mayenne',
    '54': 'Meurthe-et-Moselle', '55': 'Meuse', '56': 'Morbihan', '57': 'Moselle', '58': 'Nièvre',
    '59': 'Nord', '60': 'Oise', '61': 'Orne', '62': 'Pas-de-Calais', '63': 'Puy-de-Dôme',
    '64': 'Pyrénées-Atlantiques', '65': 'Hautes-Pyrénées', '66': 'Pyrénées-Orientales', '67': 'Bas-Rhin',
    '68': 'Haut-Rhin', '69': 'Rhône', '70': 'Haute-Saône', '71': 'Saône-et-Loire', '72': 'Sarthe',
    '73': 'Savoie', '74': 'Haute-Savoie', '75': 'Paris', '76': 'Seine-Maritime', '77': 'Seine-et-Marne',
    '78': 'Yvelines', '79': 'Deux-Sèvres', '80': 'Somme', '81': 'Tarn', '82': 'Tarn-et-Garonne',
    '83': 'Var', '84': 'Vaucluse', '85': 'Vendée', '86': 'Vienne', '87': 'Haute-Vienne',
    '88': 'Vosges', '89': 'Yonne', '90': 'Territoire de Belfort', '91': 'Essonne', '92': 'Hauts-de-Seine',
    '93': 'Seine-Saint-Denis', '94': 'Val-de-Marne', '95': "Val-d'Oise",
    '971': 'Guadeloupe', '972': 'Martinique', '973': 'Guyane', '974': 'La Réunion', '976': 'Mayotte',
}

POSTAL_CODE_RE = re.compile(r'^(\d{5})$')
PAREN_DEPARTMENT_RE = re.compile(r'\((\d{2}|2[AB]|97\d)\)', re.I)
MATCH_SEPARATORS_RE = re.compile(r"[\s\-_'.]+")


def match_key(text: str) -> str:
    """Case, accent and separator insensitive form used for table lookups."""
    return MATCH_SEPARATORS_RE.sub(' ', unidecode(text or '').lower()).strip()


STATIC_NAME_CODES: Dict[str, str] = {
    match_key(alias): code
    for code, (name, aliases) in STATIC_COUNTRIES.items()
    for alias in [name] + aliases
}


def country_code_for(name: str) -> Optional[str]:
    """
    Resolve a country name, alias or alpha-2 code to an alpha-2 code.

    Tries the static aliases first, then pycountry (alpha-2 codes, names, alpha-3 codes).
    """
    if not isinstance(name, str):
        raise TypeError(f"country name must be a string, not {type(name).__name__}")
    code = STATIC_NAME_CODES.get(match_key(name))
    if code:
        return code
    if len(name) == 2 and pycountry.countries.get(alpha_2=name.upper()) is not None:
        return name.upper()
    try:
        return pycountry.countries.lookup(name).alpha_2
    except LookupError:
        return None


@dataclass
class PlaceComponents:
    """Best-effort split of a place string."""
    town: Optional[str] = None
    postal_code: Optional[str] = None
    department_code: Optional[str] = None
    department: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    continent: Optional[str] = None
    key: Optional[str] = None


class GeoReference:
    """
    Country, territory and department reference tables.

    Loaded lazily, at most once until clear() is called. A remote payload must have the
    shape {"countries": {code: {"name": str, "aliases": [str]}}, "territories": {alias: code},
    "departments": {code: name}}.

    Attributes:
        url (Optional[str]): Remote reference URL, or None to use the static table only.
        timeout (float): Request timeout in seconds.
        origin (Optional[str]): 'remote' or 'static' once loaded.
    """
    __slots__ = ['url', 'timeout', 'origin', '_country_names', '_aliases', '_departments', '_loaded']

    def __init__(self, url: Optional[str] = None, timeout: float = 5.0):
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        self.url = url
        self.timeout = timeout
        self.origin: Optional[str] = None
        self._country_names: Dict[str, str] = {}
        self._aliases: Dict[str, str] = {}
        self._departments: Dict[str, str] = {}
        self._loaded = False

    def load(self) -> "GeoReference":
        """Populate the tables from the remote service or the static fallback."""
        if self._loaded:
            return self
        payload = self._fetch_remote() if self.url else None
        if payload is None:
            if self.url:
                logger.warning(f"Geography reference unavailable at {self.url}, using static fallback table")
            self._apply(self._static_payload())
            self.origin = 'static'
        else:
            self.origin = 'remote'
        self._add_pycountry_names()
        self._loaded = True
        logger.debug(f"Geography reference loaded from {self.origin}: {len(self._aliases)} aliases, {len(self._departments)} departments")
        return self

    def _fetch_remote(self) -> Optional[dict]:
        """Fetch and apply the remote payload; returns None on any failure."""
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
            self._apply(payload)
            return payload
        except requests.RequestException as e:
            logger.warning(f"Geography reference request failed: {e}")
        except (ValueError, TypeError, AttributeError, KeyError) as e:
            logger.warning(f"Geography reference payload invalid: {e}")
        self._country_names.clear()
        self._aliases.clear()
        self._departments.clear()
        return None

    @staticmethod
    def _static_payload() -> dict:
        countries = {}
        for name, aliases in STATIC_COUNTRIES.values():
            for alias in [name] + aliases:
                countries[alias] = name
        return {
            'countries': countries,
            'territories': dict(STATIC_TERRITORIES),
            'departments': dict(STATIC_DEPARTMENTS),
        }

    def _apply(self, payload: dict) -> None:
        """
        Load a payload of the shape
        {"countries": {alias: name}, "departments": {code: name}, "territories": {alias: country}}.

        Country names (and territory parents, given as a name or an alpha-2 code) are
        resolved to alpha-2 codes; unresolvable entries are skipped.
        """
        countries = payload['countries']
        territories = payload.get('territories', {})
        departments = payload.get('departments', {})
        if not isinstance(countries, dict) or not isinstance(territories, dict) or not isinstance(departments, dict):
            raise TypeError("reference tables must be mappings")
        for alias, name in countries.items():
            code = country_code_for(name)
            if code is None:
                logger.debug(f"Unknown country '{name}' for alias '{alias}', skipped")
                continue
            self._country_names.setdefault(code, name)
            self._aliases.setdefault(match_key(name), code)
            self._aliases.setdefault(match_key(alias), code)
        for alias, country in territories.items():
            code = country_code_for(country)
            if code is None:
                logger.debug(f"Unknown parent country '{country}' for territory '{alias}', skipped")
                continue
            self._aliases.setdefault(match_key(alias), code)
        self._departments.update({str(code).upper(): name for code, name in departments.items()})

    def _add_pycountry_names(self) -> None:
        """Complete the alias table with pycountry names and alpha-3 codes."""
        for country in pycountry.countries:
            code = country.alpha_2
            self._country_names.setdefault(code, getattr(country, 'common_name', None) or country.name)
            for name in (country.name, getattr(country, 'official_name', None), getattr(country, 'common_name', None), country.alpha_3):
                if name:
                    self._aliases.setdefault(match_key(name), code)

    def match_country(self, text: str) -> Optional[Tuple[str, str]]:
        """
        Match a place segment against countries and territories.

        Args:
            text (str): Place segment, e.g. 'France', 'USA', 'Porto Rico'.

        Returns:
            Optional[Tuple[str, str]]: (alpha-2 code, display name) or None.
        """
        self.load()
        code = self._aliases.get(match_key(text))
        if code is None:
            return None
        return code, self._country_names.get(code, code)

    def department_name(self, code: Optional[str]) -> Optional[str]:
        self.load()
        return self._departments.get(code.upper()) if code else None

    def is_department_name(self, text: str) -> bool:
        self.load()
        key = match_key(text)
        return any(match_key(name) == key for name in self._departments.values())

    def country_name(self, code: Optional[str]) -> Optional[str]:
        self.load()
        return self._country_names.get(code) if code else None

    def continent_for(self, country_code: Optional[str]) -> Optional[str]:
        """Continent name of an alpha-2 code, via pycountry_convert."""
        if not country_code:
            return None
        try:
            continent_code = pc.country_alpha2_to_continent_code(country_code)
            return pc.convert_continent_code_to_continent_name(continent_code)
        except KeyError:
            return None
        except Exception as e:
            logger.error(f"Error getting continent for country code '{country_code}': {e}")
            return None

    def clear(self) -> None:
        """Forget loaded tables so the next lookup fetches again."""
        self._country_names.clear()
        self._aliases.clear()
        self._departments.clear()
        self._loaded = False
        self.origin = None


def _department_code_from_postal(postal_code: str) -> str:
    return postal_code[:3] if postal_code.startswith('97') else postal_code[:2]


def extract_place_components(place: Optional[str], reference: GeoReference,
                             canonicalizer: Optional[PlaceCanonicalizer] = None) -> PlaceComponents:
    """
    Split a place string into town, postal code, department, region and country.

    Detection order: 5-digit postal code or '(NN)' department code, then a country (or
    dependent territory) matched on any segment, last segment first. Without a country
    and without a known department, the last two remaining segments are taken as
    department and region. Never raises.

    Args:
        place (Optional[str]): Raw place string.
        reference (GeoReference): Reference tables.
        canonicalizer (Optional[PlaceCanonicalizer]): Used to fill the canonical key.

    Returns:
        PlaceComponents: Extracted components (all None for an empty place).
    """
    if not place or not isinstance(place, str):
        return PlaceComponents()
    try:
        return _extract(place, reference, canonicalizer)
    except Exception as e:
        logger.warning(f"Failed to extract components of place '{place}': {e}")
        return PlaceComponents(key=canonicalizer(place) if canonicalizer is not None else None)


def _extract(place: str, reference: GeoReference, canonicalizer: Optional[PlaceCanonicalizer]) -> PlaceComponents:
    segments = [segment for segment in split_segments(place) if segment]
    if not segments:
        return PlaceComponents()
    components = PlaceComponents(town=format_town_name(segments[0]) or None)
    rest = segments[1:]

    postal_index = None
    for idx, segment in enumerate(rest):
        if POSTAL_CODE_RE.match(segment):
            components.postal_code = segment
            postal_index = idx
            break

    paren = PAREN_DEPARTMENT_RE.search(place)
    explicit_department = paren is not None
    if paren:
        components.department_code = paren.group(1).upper()

    country_index = None
    for idx in reversed(range(len(rest))):
        candidates = [rest[idx]] + [part.strip() for part in rest[idx].split('/') if part.strip()]
        for candidate in candidates:
            match = reference.match_country(candidate)
            if match:
                components.country_code, components.country = match
                country_index = idx
                break
        if country_index is not None:
            break

    if components.department_code is None and components.postal_code and components.country_code in (None, 'FR'):
        components.department_code = _department_code_from_postal(components.postal_code)
    if components.department_code and components.country_code in (None, 'FR'):
        components.department = reference.department_name(components.department_code)

    remaining = [segment for idx, segment in enumerate(rest)
                 if idx not in (postal_index, country_index) and not segment.isdigit()]
    if components.department:
        department_key = match_key(components.department)
        named = [segment for segment in remaining if match_key(segment) == department_key]
        if named:
            explicit_department = True
        remaining = [segment for segment in remaining if match_key(segment) != department_key]
        if components.country is None and explicit_department:
            components.country_code = 'FR'
            components.country = reference.country_name('FR')

    if components.department is None:
        if components.country is not None:
            if remaining:
                components.department = remaining.pop(0)
        elif len(remaining) >= 2:
            components.department, components.region = remaining[-2], remaining[-1]
            remaining = []
        elif remaining:
            components.department = remaining.pop()
        if components.country is None and components.department and reference.is_department_name(components.department):
            components.country_code = 'FR'
            components.country = reference.country_name('FR')
    if components.region is None and remaining:
        components.region = remaining[0]

    components.continent = reference.continent_for(components.country_code)
    components.key = canonicalizer(place) if canonicalizer is not None else None
    return components
