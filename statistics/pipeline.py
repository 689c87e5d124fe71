"""
Pipeline for running statistics collectors.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from gedcom_cache.records import PersonRecord
from gedcom_cache.statistics.base import StatisticsCollector, get_collector_registry
from gedcom_cache.statistics.model import CorpusView, Stats

logger = logging.getLogger(__name__)


@dataclass
class StatisticsConfig:
    """
    Configuration for statistics collection.

    Attributes:
        collectors: Dict of collector_id -> enabled status
        config_file: Path to a YAML file with a cache > statistics > collectors section (optional)
    """
    collectors: Dict[str, bool] = field(default_factory=dict)
    config_file: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.config_file and Path(self.config_file).exists():
            self._load_from_file()

    def _load_from_file(self) -> None:
        """Read collector enable flags from the YAML file; a broken file only logs a warning."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load statistics config from {self.config_file}: {e}")
            return
        section = data.get('cache', data).get('statistics', {}) or {}
        for collector_id, settings in (section.get('collectors', {}) or {}).items():
            if isinstance(settings, dict):
                self.collectors[collector_id] = settings.get('enabled', True)
            elif isinstance(settings, bool):
                self.collectors[collector_id] = settings
        logger.info(f"Loaded statistics config from {self.config_file}")

    def is_enabled(self, collector_id: str) -> bool:
        """Collectors are enabled unless explicitly disabled."""
        return self.collectors.get(collector_id, True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StatisticsConfig:
        """
        Create configuration from dictionary.

        Args:
            data: Dictionary with 'collectors' key mapping collector_id to enabled status

        Returns:
            StatisticsConfig instance
        """
        return cls(collectors=dict(data.get('collectors', {})))


@dataclass
class StatisticsPipeline:
    """
    Runs statistics collectors over the normalized individuals.

    Attributes:
        collectors: Collector instances to run; all registered collectors if empty
        config: Enable/disable flags
        app_hooks: Optional application hooks for progress reporting
    """
    collectors: List[StatisticsCollector] = field(default_factory=list)
    config: StatisticsConfig = field(default_factory=StatisticsConfig)
    app_hooks: Optional[Any] = field(default=None)

    def __post_init__(self) -> None:
        if not self.collectors:
            self._load_collectors_from_registry()

    def _load_collectors_from_registry(self) -> None:
        registry = get_collector_registry()
        for collector_id, collector_cls in registry.items():
            enabled = self.config.is_enabled(collector_id)
            try:
                collector = collector_cls(enabled=enabled, app_hooks=self.app_hooks)
            except Exception as e:
                logger.error(f"Failed to load collector {collector_id}: {e}", exc_info=True)
                continue
            self.collectors.append(collector)
            logger.debug(f"Loaded collector: {collector_id} (enabled={enabled})")

    def run(self, people: Iterable[PersonRecord], corpus: Optional[CorpusView] = None) -> Stats:
        """
        Run all enabled collectors.

        A collector that raises is logged and skipped; the others still run.

        Args:
            people: Normalized PersonRecord objects
            corpus: Secondary caches, places and quality scores

        Returns:
            Stats object with all collected values
        """
        stats = Stats()
        people_list = list(people)
        corpus = corpus if corpus is not None else CorpusView()
        logger.debug(f"Running statistics on {len(people_list)} people")

        enabled_collectors = [c for c in self.collectors if c.enabled]
        total_collectors = len(enabled_collectors)
        self._report_step(info="Collecting statistics", target=total_collectors, reset_counter=True, plus_step=0)

        for collector_num, collector in enumerate(enabled_collectors, start=1):
            if self._stop_requested("Statistics collection stopped by user"):
                logger.info(f"Statistics stopped after {collector_num - 1} collectors")
                break
            try:
                logger.debug(f"Running collector: {collector.collector_id}")
                collector_stats = collector.collect(people_list, stats, collector_num, total_collectors, corpus=corpus)
                stats.merge(collector_stats)
            except Exception as e:
                logger.error(f"Error in collector {collector.collector_id}: {e}", exc_info=True)
            self._report_step(plus_step=1)
        return stats

    def _report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        elif info:
            logger.debug(info)

    def _stop_requested(self, logger_stop_message: str = "Stop requested by user") -> bool:
        if self.app_hooks and callable(getattr(self.app_hooks, "stop_requested", None)):
            if self.app_hooks.stop_requested():
                if logger_stop_message:
                    logger.info(logger_stop_message)
                return True
        return False
