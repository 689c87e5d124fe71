"""
Base classes for statistics collectors.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from typing import Any, Dict, Iterable, Optional, Type

from gedcom_cache.records import PersonRecord
from gedcom_cache.statistics.model import CorpusView, Stats

logger = logging.getLogger(__name__)

# Collector Registry
_COLLECTOR_REGISTRY: Dict[str, Type['StatisticsCollector']] = {}


def register_collector(cls: Type['StatisticsCollector']) -> Type['StatisticsCollector']:
    """
    Decorator to register a collector class in the global registry.

    Usage:
        @register_collector
        @dataclass
        class MyCollector(StatisticsCollector):
            collector_id: str = "my_collector"
            ...
    """
    collector_id = getattr(cls, 'collector_id', None)
    if collector_id:
        _COLLECTOR_REGISTRY[collector_id] = cls
        logger.debug(f"Registered statistics collector: {collector_id}")
    else:
        logger.warning(f"Collector {cls.__name__} missing 'collector_id' attribute, not registered")
    return cls


def get_collector_registry() -> Dict[str, Type['StatisticsCollector']]:
    """Get a copy of the global collector registry."""
    return _COLLECTOR_REGISTRY.copy()


@dataclass
class StatisticsCollector(ABC):
    """
    Base class for statistics collectors.

    Collectors read the normalized individuals (and the assembled corpus view) and
    produce aggregate statistics. They never modify the data.

    Attributes:
        collector_id: Unique identifier for this collector
        enabled: Whether this collector is enabled (can be set via config)
        app_hooks: Optional application hooks for progress reporting
    """
    collector_id: str = ""
    enabled: bool = True
    app_hooks: Any = None

    @abstractmethod
    def collect(self, people: Iterable[PersonRecord], existing_stats: Stats, collector_num: Optional[int] = None,
                total_collectors: Optional[int] = None, corpus: Optional[CorpusView] = None) -> Stats:
        """
        Collect statistics from the dataset.

        Args:
            people: Normalized PersonRecord objects
            existing_stats: Statistics collected by earlier collectors
            collector_num: Position of this collector in the run
            total_collectors: Number of enabled collectors
            corpus: Secondary caches, places table and quality scores

        Returns:
            Stats object with collected values
        """
        pass

    def __post_init__(self):
        if not self.collector_id:
            raise ValueError(f"{self.__class__.__name__} must define collector_id")

    def _prefix(self, collector_num: Optional[int], total_collectors: Optional[int]) -> str:
        return f"Statistics ({collector_num}/{total_collectors}): " if collector_num and total_collectors else "Statistics: "

    def _report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        """Report a step via app hooks if available."""
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        elif info:
            logger.debug(info)

    def _stop_requested(self, logger_stop_message: str = "Stop requested by user") -> bool:
        """Check if stop has been requested via app hooks."""
        if self.app_hooks and callable(getattr(self.app_hooks, "stop_requested", None)):
            if self.app_hooks.stop_requested():
                if logger_stop_message:
                    logger.debug(logger_stop_message)
                return True
        return False
