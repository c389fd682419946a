"""
Typed survey record model.

Architectural Overview:
=======================
One SurveyRecord is one ocean use survey shape: the polygon a respondent
drew plus the respondent attributes joined onto it. A respondent usually
owns several records (one per sector and shape), so respondent_id is NOT
unique across records.

Key Interactions:
-----------------
- Input: data_loader.py builds records from GeoJSON features or GeoDataFrames
- Transport: to_dict()/from_dict() with WKT geometry for worker processes
- Output: overlap_engine.py reads the category keys and resolve_people()

Optional attributes stay Optional[str] on the record and are resolved to
their unknown bucket only in the *_key() accessors.

MODIFICATION POINT: Add new categorical attributes here and in SurveyFieldsConfig
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from shapely import wkt
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from ous_demographics.config_types import SurveyFieldsConfig


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ UNKNOWN BUCKETS
# ═══════════════════════════════════════════════════════════════════════════

UNKNOWN_ATOLL = "unknown-atoll"
UNKNOWN_ISLAND = "unknown-island"
UNKNOWN_SECTOR = "unknown-sector"
UNKNOWN_GEAR = "unknown-gear"

# Gear tokens are separated by runs of two or more whitespace characters.
# Single spaces belong to multi-word gear names ("Hand held nets").
GEAR_SEPARATOR = re.compile(r"\s{2,}")

DEFAULT_PEOPLE_COUNT = 1.0


class PeopleCountError(ValueError):
    """Raised when a people count value cannot be parsed as a number."""


def _clean_optional(value: Any) -> Optional[str]:
    """Normalise a raw property to Optional[str] (None and NaN become None)."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value if isinstance(value, str) else str(value)


def _clean_weight(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(weight) else weight


# ═══════════════════════════════════════════════════════════════════════════
# 🧾 SURVEY RECORD DATACLASS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SurveyRecord:
    """Immutable survey shape with respondent attributes.

    Attributes:
        respondent_id: Respondent identifier ("" when missing)
        geometry: Polygon or MultiPolygon in lon/lat
        weight: Survey weighting factor, carried through only
        atoll, island, sector, gear: Raw categorical values, None when absent
        people_count: Raw people count (str, number or None), parsed lazily
            so that records without a respondent never fail the batch
    """

    respondent_id: str
    geometry: BaseGeometry
    weight: Optional[float] = None
    atoll: Optional[str] = None
    island: Optional[str] = None
    sector: Optional[str] = None
    gear: Optional[str] = None
    people_count: Union[str, float, int, None] = None

    # ═══════════════════════════════════════════════════════════════════
    # CATEGORY KEYS
    # ═══════════════════════════════════════════════════════════════════

    @property
    def has_respondent(self) -> bool:
        return bool(self.respondent_id)

    def atoll_key(self) -> str:
        return self.atoll if self.atoll else UNKNOWN_ATOLL

    def island_key(self) -> str:
        """Island key is qualified by atoll: "{atoll} - {island}"."""
        if self.atoll and self.island:
            return f"{self.atoll} - {self.island}"
        return UNKNOWN_ISLAND

    def sector_key(self) -> str:
        return self.sector if self.sector else UNKNOWN_SECTOR

    def gear_keys(self) -> List[str]:
        """Split the gear string into tokens.

        Returns:
            Gear tokens in source order, or ["unknown-gear"] when absent.
        """
        gear = self.gear.strip() if self.gear else ""
        if not gear:
            return [UNKNOWN_GEAR]
        return GEAR_SEPARATOR.split(gear)

    def resolve_people(self) -> float:
        """Number of people this record represents.

        Unset values (None, blank string, NaN) default to 1.

        Raises:
            PeopleCountError: If a string value is not numeric.
        """
        value = self.people_count
        if value is None:
            return DEFAULT_PEOPLE_COUNT
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return DEFAULT_PEOPLE_COUNT
            try:
                parsed = float(text)
            except ValueError:
                raise PeopleCountError(
                    f"Respondent {self.respondent_id!r}: "
                    f"people count {value!r} is not a number"
                ) from None
        else:
            parsed = float(value)
        if math.isnan(parsed):
            if isinstance(value, str):
                raise PeopleCountError(
                    f"Respondent {self.respondent_id!r}: "
                    f"people count {value!r} is not a number"
                )
            return DEFAULT_PEOPLE_COUNT
        return parsed

    # ═══════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════

    @classmethod
    def from_properties(
        cls,
        properties: Dict[str, Any],
        geometry: BaseGeometry,
        fields: Optional[SurveyFieldsConfig] = None,
    ) -> "SurveyRecord":
        """Create a record from a raw property dict of the survey export.

        Args:
            properties: Feature properties (or a GeoDataFrame row as dict)
            geometry: Shapely geometry of the shape
            fields: Property names; defaults to the standard export names

        Returns:
            SurveyRecord with Optional attributes normalised
        """
        fields = fields or SurveyFieldsConfig()
        people = properties.get(fields.people_count)
        if isinstance(people, float) and math.isnan(people):
            people = None
        return cls(
            respondent_id=_clean_optional(properties.get(fields.respondent_id)) or "",
            geometry=geometry,
            weight=_clean_weight(properties.get(fields.weight)),
            atoll=_clean_optional(properties.get(fields.atoll)),
            island=_clean_optional(properties.get(fields.island)),
            sector=_clean_optional(properties.get(fields.sector)),
            gear=_clean_optional(properties.get(fields.gear)),
            people_count=people,
        )

    @classmethod
    def from_feature(
        cls,
        feature: Dict[str, Any],
        fields: Optional[SurveyFieldsConfig] = None,
    ) -> "SurveyRecord":
        """Create a record from a GeoJSON Feature dict."""
        return cls.from_properties(
            feature.get("properties") or {},
            shape(feature["geometry"]),
            fields,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a picklable dict with WKT geometry."""
        return {
            "respondentId": self.respondent_id,
            "weight": self.weight,
            "atoll": self.atoll,
            "island": self.island,
            "sector": self.sector,
            "gear": self.gear,
            "peopleCount": self.people_count,
            "geometry": self.geometry.wkt,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SurveyRecord":
        """Create a record from to_dict() output."""
        geometry = d["geometry"]
        if isinstance(geometry, str):
            geometry = wkt.loads(geometry)
        return cls(
            respondent_id=d.get("respondentId") or "",
            geometry=geometry,
            weight=d.get("weight"),
            atoll=d.get("atoll"),
            island=d.get("island"),
            sector=d.get("sector"),
            gear=d.get("gear"),
            people_count=d.get("peopleCount"),
        )
