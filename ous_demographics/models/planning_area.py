"""
Planning area ("sketch") model.

A planning area is either a single sketch (GeoJSON Feature) or a sketch
collection (FeatureCollection whose own properties carry the collection id
and name). Either way it reduces to an identifier, a name and a list of
polygonal geometries that are unioned before overlap testing.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from shapely import wkt
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

logger = logging.getLogger("OUS.PlanningArea")

POLYGONAL_TYPES = ("Polygon", "MultiPolygon")


@dataclass(frozen=True)
class PlanningArea:
    """Candidate protected area boundary.

    Attributes:
        sketch_id: Identifier copied onto every emitted metric
        name: Display name (logging only)
        geometries: Member polygons, one per sketch
        is_collection: True when built from a sketch collection
    """

    sketch_id: str
    name: str = ""
    geometries: List[BaseGeometry] = field(default_factory=list)
    is_collection: bool = False

    @classmethod
    def from_geojson(cls, obj: Dict[str, Any]) -> "PlanningArea":
        """Build from a sketch Feature or sketch collection FeatureCollection.

        Raises:
            ValueError: If the object is not a sketch, has no id or members,
                or a member geometry is not polygonal.
        """
        obj_type = obj.get("type")
        properties = obj.get("properties") or {}
        if obj_type == "Feature":
            features = [obj]
            is_collection = False
        elif obj_type == "FeatureCollection":
            features = obj.get("features", [])
            is_collection = True
        else:
            raise ValueError(
                f"Planning area must be a Feature or FeatureCollection, got {obj_type!r}"
            )

        sketch_id = properties.get("id")
        if sketch_id is None or sketch_id == "":
            raise ValueError("Planning area is missing properties.id")

        geometries = []
        for feature in features:
            geom_dict = feature.get("geometry")
            if not geom_dict or geom_dict.get("type") not in POLYGONAL_TYPES:
                raise ValueError(
                    f"Planning area {sketch_id!r} member is not polygonal: "
                    f"{(geom_dict or {}).get('type')!r}"
                )
            geometries.append(shape(geom_dict))
        if not geometries:
            raise ValueError(f"Planning area {sketch_id!r} has no member sketches")

        return cls(
            sketch_id=str(sketch_id),
            name=str(properties.get("name", "")),
            geometries=geometries,
            is_collection=is_collection,
        )

    def simplified(
        self, tolerance: float, preserve_topology: bool = True
    ) -> "PlanningArea":
        """Return a copy with every member geometry simplified.

        A tolerance of 0 returns the planning area unchanged.
        """
        if tolerance <= 0:
            return self
        simplified = [
            g.simplify(tolerance, preserve_topology=preserve_topology)
            for g in self.geometries
        ]
        if logger.isEnabledFor(logging.DEBUG):
            before = sum(_vertex_count(g) for g in self.geometries)
            after = sum(_vertex_count(g) for g in simplified)
            logger.debug(
                f"Simplified sketch {self.sketch_id}: {before} -> {after} vertices "
                f"(tolerance={tolerance})"
            )
        return PlanningArea(
            sketch_id=self.sketch_id,
            name=self.name,
            geometries=simplified,
            is_collection=self.is_collection,
        )

    def combined_geometry(self) -> Optional[BaseGeometry]:
        """Union of all member geometries."""
        return combine_geometries(self.geometries)

    def to_wkts(self) -> List[str]:
        """Member geometries as WKT strings for worker transport."""
        return [g.wkt for g in self.geometries]


def combine_geometries(geometries: Sequence[BaseGeometry]) -> Optional[BaseGeometry]:
    """Union polygons into one geometry (None for an empty sequence)."""
    if not geometries:
        return None
    return unary_union(list(geometries))


def combine_wkts(wkts: Sequence[str]) -> Optional[BaseGeometry]:
    """Parse WKT strings and union them into one geometry."""
    return combine_geometries([wkt.loads(s) for s in wkts])


def _vertex_count(geom: BaseGeometry) -> int:
    if geom.geom_type == "Polygon":
        return len(geom.exterior.coords) + sum(len(r.coords) for r in geom.interiors)
    if hasattr(geom, "geoms"):
        return sum(_vertex_count(g) for g in geom.geoms)
    return 0
