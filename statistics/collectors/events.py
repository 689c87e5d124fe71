"""
Event statistics collector.
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
class EventsCollector(StatisticsCollector):
    """
    Collects event statistics.

    Statistics collected:
        - Event counts per kind
        - Completeness (events with a date, with a place)
        - Fused marriages and their ceremonies
    """
    collector_id: str = "events"

    def collect(self, people: Iterable[PersonRecord], existing_stats: Stats, collector_num: Optional[int] = None,
                total_collectors: Optional[int] = None, corpus: Optional[CorpusView] = None) -> Stats:
        stats = Stats()
        people_list = list(people)
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Analyzing events",
                          target=len(people_list), reset_counter=True, plus_step=0)

        kinds = Counter()
        with_date = 0
        with_place = 0
        fused = 0
        ceremonies = Counter()

        for idx, person in enumerate(people_list):
            if idx % 100 == 0:
                if self._stop_requested("Event collection stopped"):
                    break
                self._report_step(plus_step=100)
            for event in person.events:
                kinds[event.kind] += 1
                if event.date:
                    with_date += 1
                if event.place is not None and event.place.key:
                    with_place += 1
                if event.ceremonies:
                    fused += 1
                    ceremonies.update(ceremony.ceremony_type for ceremony in event.ceremonies)

        total = sum(kinds.values())
        stats.add_value('events', 'total_events', total)
        stats.add_value('events', 'by_kind', dict(kinds.most_common()))
        stats.add_value('events', 'with_date', with_date)
        stats.add_value('events', 'with_place', with_place)
        stats.add_value('events', 'fused_marriages', fused)
        stats.add_value('events', 'ceremonies', dict(ceremonies))

        logger.info(f"Events: {total} events of {len(kinds)} kinds, {fused} fused marriages")
        return stats
