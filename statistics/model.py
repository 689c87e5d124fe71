"""
Data models for the cache statistics.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union


StatValue = Union[int, float, str, None, List[Any], Dict[str, Any]]


@dataclass
class Stats:
    """
    Container for corpus-wide statistics.

    Values are grouped into categories ('counts', 'timespan', 'quality', ...) with named
    values within each category.
    """
    categories: Dict[str, Dict[str, StatValue]] = field(default_factory=dict)

    def add_value(self, category: str, name: str, value: StatValue) -> None:
        """Set a value in a category."""
        self.categories.setdefault(category, {})[name] = value

    def increment(self, category: str, name: str, amount: int = 1) -> None:
        """Add amount to a counter value, starting from 0."""
        current = self.get_value(category, name, 0)
        self.add_value(category, name, (current or 0) + amount)

    def get_value(self, category: str, name: str, default: Optional[StatValue] = None) -> Optional[StatValue]:
        return self.categories.get(category, {}).get(name, default)

    def get_category(self, category: str) -> Dict[str, StatValue]:
        return self.categories.get(category, {})

    def merge(self, other: Stats) -> None:
        """Merge another Stats object into this one; other wins on name clashes."""
        for category, values in other.categories.items():
            self.categories.setdefault(category, {}).update(values)

    def to_dict(self) -> Dict[str, Dict[str, StatValue]]:
        return {category: dict(values) for category, values in self.categories.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, StatValue]]) -> Stats:
        return cls(categories={category: dict(values) for category, values in data.items()})


@dataclass
class CorpusView:
    """
    Read-only view of the assembled cache handed to collectors alongside the individuals.

    Attributes:
        families: Number of family records extracted.
        sources, media, notes, repositories: Secondary caches keyed by id.
        places: Places table keyed by canonical key (plain dicts).
        quality: QualityScore per individual id.
    """
    families: int = 0
    sources: Mapping[str, Any] = field(default_factory=dict)
    media: Mapping[str, Any] = field(default_factory=dict)
    notes: Mapping[str, Any] = field(default_factory=dict)
    repositories: Mapping[str, Any] = field(default_factory=dict)
    places: Mapping[str, Dict[str, Any]] = field(default_factory=dict)
    quality: Mapping[str, Any] = field(default_factory=dict)
