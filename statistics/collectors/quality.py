"""
Quality score statistics collector.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Optional

from gedcom_cache.quality import CATEGORY_CAPS
from gedcom_cache.records import PersonRecord
from gedcom_cache.statistics.base import StatisticsCollector, register_collector
from gedcom_cache.statistics.model import CorpusView, Stats

logger = logging.getLogger(__name__)

LEVEL_NAMES = ('excellent', 'good', 'fair', 'poor')


@register_collector
@dataclass
class QualityCollector(StatisticsCollector):
    """
    Summarises the per-individual quality scores.

    Statistics collected:
        - Average, minimum and maximum total score
        - Distribution by level (count and percent)
        - Average score per category
    """
    collector_id: str = "quality"

    def collect(self, people: Iterable[PersonRecord], existing_stats: Stats, collector_num: Optional[int] = None,
                total_collectors: Optional[int] = None, corpus: Optional[CorpusView] = None) -> Stats:
        stats = Stats()
        corpus = corpus if corpus is not None else CorpusView()
        self._report_step(info=f"{self._prefix(collector_num, total_collectors)}Analyzing quality", plus_step=0)

        scores = [corpus.quality[person.xref_id] for person in people if person.xref_id in corpus.quality]
        if not scores:
            logger.info("Quality: no scores to summarise")
            return stats

        totals = [score.total for score in scores]
        levels = {level: 0 for level in LEVEL_NAMES}
        by_category: Dict[str, List[int]] = defaultdict(list)
        for score in scores:
            levels[score.level] = levels.get(score.level, 0) + 1
            for category, points in score.breakdown.items():
                by_category[category].append(points)

        stats.add_value('quality', 'scored', len(scores))
        stats.add_value('quality', 'average', round(sum(totals) / len(totals), 1))
        stats.add_value('quality', 'min', min(totals))
        stats.add_value('quality', 'max', max(totals))
        stats.add_value('quality', 'distribution', {
            level: {'count': count, 'percent': round(100.0 * count / len(scores), 1)}
            for level, count in levels.items()
        })
        stats.add_value('quality', 'category_averages', {
            category: round(sum(by_category[category]) / len(by_category[category]), 1)
            for category in CATEGORY_CAPS if by_category.get(category)
        })

        logger.info(f"Quality: average {sum(totals) / len(totals):.1f} over {len(scores)} individuals")
        return stats
