"""
Typed dataclasses for OUS demographic count statistics.

Architectural Overview:
=======================
BaseCountStats is the {respondents, people} pair accumulated per category.
OusStats holds the overall pair plus four category maps (sector, atoll,
island, gear).

Invariant: byAtoll and byIsland sum to the overall pair because atoll and
island are single-valued per respondent. bySector and byGear do NOT, since
a respondent may count towards several sectors or gear types.

Data Flow:
----------
1. overlap_engine.py accumulates one OusStats per partition
2. Workers ship to_dict() output back to the orchestrator
3. result_merger.py folds partition stats into one OusStats

MODIFICATION POINT: Add new category groupings to CLASS_GROUPS
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Tuple


# Category groupings in emission order: (attribute name, wire key)
CLASS_GROUPS: Tuple[Tuple[str, str], ...] = (
    ("by_sector", "bySector"),
    ("by_atoll", "byAtoll"),
    ("by_island", "byIsland"),
    ("by_gear", "byGear"),
)


@dataclass
class BaseCountStats:
    """Respondent and people counts for one category (or overall)."""

    respondents: int = 0
    people: float = 0

    def add(self, respondents: int, people: float) -> None:
        self.respondents += respondents
        self.people += people

    def copy(self) -> "BaseCountStats":
        return BaseCountStats(respondents=self.respondents, people=self.people)

    def to_dict(self) -> Dict[str, Any]:
        return {"respondents": self.respondents, "people": self.people}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BaseCountStats":
        return cls(respondents=d.get("respondents", 0), people=d.get("people", 0))


ClassCountStats = Dict[str, BaseCountStats]


def add_class_count(
    class_stats: ClassCountStats, key: str, respondents: int, people: float
) -> None:
    """Add onto an existing category entry or initialise it."""
    entry = class_stats.get(key)
    if entry is None:
        class_stats[key] = BaseCountStats(respondents=respondents, people=people)
    else:
        entry.add(respondents, people)


@dataclass
class OusStats:
    """
    Overall and per-category demographic counts.

    Usage:
    ------
    ```python
    stats = OusStats()
    stats.add_respondent(atoll_key="Lh", island_key="Lh - Kurendhoo", people=3)
    add_class_count(stats.by_sector, "artisanal fishing", 1, 3)
    stats.to_dict()["byAtoll"]  # {"Lh": {"respondents": 1, "people": 3}}
    ```
    """

    respondents: int = 0
    people: float = 0
    by_sector: ClassCountStats = field(default_factory=dict)
    by_atoll: ClassCountStats = field(default_factory=dict)
    by_island: ClassCountStats = field(default_factory=dict)
    by_gear: ClassCountStats = field(default_factory=dict)

    def add_respondent(self, atoll_key: str, island_key: str, people: float) -> None:
        """Count a respondent once overall and in their atoll and island."""
        self.respondents += 1
        self.people += people
        add_class_count(self.by_atoll, atoll_key, 1, people)
        add_class_count(self.by_island, island_key, 1, people)

    def class_groups(self) -> Iterator[Tuple[str, ClassCountStats]]:
        """Yield (wire key, category map) in emission order."""
        for attr, wire_key in CLASS_GROUPS:
            yield wire_key, getattr(self, attr)

    def copy(self) -> "OusStats":
        """Deep copy (category entries are mutable)."""
        return OusStats(
            respondents=self.respondents,
            people=self.people,
            by_sector={k: v.copy() for k, v in self.by_sector.items()},
            by_atoll={k: v.copy() for k, v in self.by_atoll.items()},
            by_island={k: v.copy() for k, v in self.by_island.items()},
            by_gear={k: v.copy() for k, v in self.by_gear.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire format."""
        result: Dict[str, Any] = {
            "respondents": self.respondents,
            "people": self.people,
        }
        for wire_key, class_stats in self.class_groups():
            result[wire_key] = {k: v.to_dict() for k, v in class_stats.items()}
        return result

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OusStats":
        """Create OusStats from to_dict() output (e.g. a worker result)."""
        stats = cls(respondents=d.get("respondents", 0), people=d.get("people", 0))
        for attr, wire_key in CLASS_GROUPS:
            setattr(
                stats,
                attr,
                {
                    k: BaseCountStats.from_dict(v)
                    for k, v in d.get(wire_key, {}).items()
                },
            )
        return stats
