"""
Record count statistics collector.
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
class CountsCollector(StatisticsCollector):
    """
    Counts the records of the cache.

    Statistics collected:
        - Individuals, by sex
        - Families, sources, media, notes, repositories
        - Places in the places table
    """
    collector_id: str = "counts"

    def collect(self, people: Iterable[PersonRecord], existing_stats: Stats, collector_num: Optional[int] = None,
                total_collectors: Optional[int] = None, corpus: Optional[CorpusView] = None) -> Stats:
        stats = Stats()
        corpus = corpus if corpus is not None else CorpusView()
        people_list = list(people)
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Counting records", plus_step=0)

        by_sex = Counter(person.sex for person in people_list)
        stats.add_value('counts', 'individuals', len(people_list))
        stats.add_value('counts', 'by_sex', {sex: by_sex.get(sex, 0) for sex in ('male', 'female', 'unknown')})
        stats.add_value('counts', 'families', corpus.families)
        stats.add_value('counts', 'sources', len(corpus.sources))
        stats.add_value('counts', 'media', len(corpus.media))
        stats.add_value('counts', 'notes', len(corpus.notes))
        stats.add_value('counts', 'repositories', len(corpus.repositories))
        stats.add_value('counts', 'places', len(corpus.places))

        logger.info(f"Counts: {len(people_list)} individuals, {corpus.families} families, {len(corpus.places)} places")
        return stats
