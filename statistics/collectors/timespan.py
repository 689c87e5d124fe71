"""
Timespan statistics collector.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, List, Optional

from gedcom_cache.gedcom_date import year_of
from gedcom_cache.records import PersonRecord
from gedcom_cache.statistics.base import StatisticsCollector, register_collector
from gedcom_cache.statistics.model import CorpusView, Stats

logger = logging.getLogger(__name__)


@register_collector
@dataclass
class TimespanCollector(StatisticsCollector):
    """
    Collects the time coverage of the corpus.

    Statistics collected:
        - Earliest and latest event year
        - Earliest birth year and latest death year, and the span between them
        - Shortest, longest and average birth-death span of individuals with both dates
    """
    collector_id: str = "timespan"

    def collect(self, people: Iterable[PersonRecord], existing_stats: Stats, collector_num: Optional[int] = None,
                total_collectors: Optional[int] = None, corpus: Optional[CorpusView] = None) -> Stats:
        stats = Stats()
        people_list = list(people)
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Analyzing timespan",
                          target=len(people_list), reset_counter=True, plus_step=0)

        event_years: List[int] = []
        birth_years: List[int] = []
        death_years: List[int] = []
        lifespans: List[int] = []

        for idx, person in enumerate(people_list):
            if idx % 100 == 0:
                if self._stop_requested("Timespan collection stopped"):
                    break
                self._report_step(plus_step=100)
            event_years.extend(year_of(event.date) for event in person.events if event.date)
            birth = person.get_event('birth')
            death = person.get_event('death')
            birth_year = year_of(birth.date) if birth is not None else None
            death_year = year_of(death.date) if death is not None else None
            if birth_year:
                birth_years.append(birth_year)
            if death_year:
                death_years.append(death_year)
            if birth_year and death_year and death_year >= birth_year:
                lifespans.append(death_year - birth_year)

        if event_years:
            stats.add_value('timespan', 'earliest_year', min(event_years))
            stats.add_value('timespan', 'latest_year', max(event_years))
        if birth_years:
            stats.add_value('timespan', 'earliest_birth_year', min(birth_years))
        if death_years:
            stats.add_value('timespan', 'latest_death_year', max(death_years))
        if birth_years and death_years:
            stats.add_value('timespan', 'birth_death_span', max(death_years) - min(birth_years))
        if lifespans:
            stats.add_value('timespan', 'min_lifespan', min(lifespans))
            stats.add_value('timespan', 'max_lifespan', max(lifespans))
            stats.add_value('timespan', 'average_lifespan', round(sum(lifespans) / len(lifespans), 1))

        logger.info(f"Timespan: {len(event_years)} dated events, {len(lifespans)} complete lifespans")
        return stats
