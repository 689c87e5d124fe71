"""
Built-in statistics collectors.

Import collectors here to automatically register them.
"""

from gedcom_cache.statistics.collectors.counts import CountsCollector
from gedcom_cache.statistics.collectors.timespan import TimespanCollector
from gedcom_cache.statistics.collectors.quality import QualityCollector
from gedcom_cache.statistics.collectors.events import EventsCollector
from gedcom_cache.statistics.collectors.geographic import GeographicCollector

__all__ = [
    'CountsCollector',
    'TimespanCollector',
    'QualityCollector',
    'EventsCollector',
    'GeographicCollector',
]
