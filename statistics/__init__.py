"""
Statistics module for the GEDCOM cache.

This module aggregates corpus-wide statistics over the normalized individuals and
the assembled cache (record counts, time coverage, quality distribution, events,
geography). Collectors only read the data.

Main components:
    - StatisticsCollector: Base class for creating custom statistics collectors
    - StatisticsPipeline: Orchestrates running multiple collectors
    - Built-in collectors: counts, timespan, quality, events, geographic
"""

from gedcom_cache.statistics.base import StatisticsCollector, register_collector, get_collector_registry
from gedcom_cache.statistics.pipeline import StatisticsPipeline, StatisticsConfig
from gedcom_cache.statistics.model import CorpusView, Stats, StatValue

# Import collectors to ensure they're registered
from gedcom_cache.statistics import collectors

__all__ = [
    'StatisticsCollector',
    'register_collector',
    'get_collector_registry',
    'StatisticsPipeline',
    'StatisticsConfig',
    'CorpusView',
    'Stats',
    'StatValue',
    'collectors',
]
