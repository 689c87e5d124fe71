"""
Geographic statistics collector.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import logging
from typing import Iterable, Optional

from gedcom_cache.records import PersonRecord
from gedcom_cache.statistics.base import StatisticsCollector, register_collector
from gedcom_cache.statistics.model import CorpusView, Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class GeographicCollector(StatisticsCollector):
    """
    Collects geographic statistics from the places table.

    Statistics collected:
        - Number of places, and of places with native coordinates
        - Most common places by occurrence
        - Country, continent and department distribution
    """
    collector_id: str = "geographic"

    def collect(self, people: Iterable[PersonRecord], existing_stats: Stats, collector_num: Optional[int] = None,
                total_collectors: Optional[int] = None, corpus: Optional[CorpusView] = None) -> Stats:
        stats = Stats()
        corpus = corpus if corpus is not None else CorpusView()
        places = corpus.places
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Analyzing geography", plus_step=0)

        occurrences = Counter()
        countries = Counter()
        continents = Counter()
        departments = Counter()
        with_coordinates = 0
        for key, entry in places.items():
            count = entry.get('occurrences', 0)
            occurrences[entry.get('town_display') or key] += count
            if entry.get('latitude') is not None and entry.get('longitude') is not None:
                with_coordinates += 1
            if entry.get('country'):
                countries[entry['country']] += count
            if entry.get('continent'):
                continents[entry['continent']] += count
            if entry.get('department'):
                departments[entry['department']] += count

        stats.add_value('geographic', 'places', len(places))
        stats.add_value('geographic', 'places_with_coordinates', with_coordinates)
        stats.add_value('geographic', 'most_common_places', dict(occurrences.most_common(20)))
        stats.add_value('geographic', 'countries', dict(countries.most_common(20)))
        stats.add_value('geographic', 'continents', dict(continents.most_common()))
        stats.add_value('geographic', 'departments', dict(departments.most_common(20)))

        logger.info(f"Geographic: {len(places)} places, {with_coordinates} with coordinates, {len(countries)} countries")
        return stats
