"""
Survey and planning area loading.

Reads the survey shapes export (GeoJSON, FlatGeobuf or shapefile) with
geopandas and turns every row into a SurveyRecord. pandas NaN is normalised
to None so that optional attributes fall into their unknown buckets.

Also hosts the respondent sort step that prepares the export for
partitioning, and the JSON writer for overlap results.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import geopandas as gpd
import pandas as pd

from ous_demographics.config_types import SurveyFieldsConfig
from ous_demographics.models.metric import OverlapResult
from ous_demographics.models.planning_area import PlanningArea
from ous_demographics.models.survey_record import SurveyRecord

logger = logging.getLogger("OUS.DataLoader")

PathLike = Union[str, Path]


def _clean_value(value: Any) -> Any:
    """pandas missing markers (NaN, None, NA) -> None."""
    if value is None:
        return None
    try:
        return None if pd.isna(value) else value
    except (TypeError, ValueError):
        # Array-like values have no scalar truth value
        return value


def _require_file(path: PathLike, name: str) -> Path:
    full_path = Path(path)
    if not full_path.exists():
        raise FileNotFoundError(f"{name} not found: {full_path}")
    return full_path


def read_survey_frame(
    path: PathLike, fields: Optional[SurveyFieldsConfig] = None
) -> gpd.GeoDataFrame:
    """
    Read the survey export into a GeoDataFrame.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the respondent ID column is missing
    """
    fields = fields or SurveyFieldsConfig()
    full_path = _require_file(path, "Survey shapes")

    gdf = gpd.read_file(full_path)

    if fields.respondent_id not in gdf.columns:
        raise ValueError(f"Missing columns: {[fields.respondent_id]}")
    return gdf


def records_from_frame(
    gdf: gpd.GeoDataFrame, fields: Optional[SurveyFieldsConfig] = None
) -> List[SurveyRecord]:
    """Build SurveyRecords from GeoDataFrame rows (rows without geometry dropped)."""
    fields = fields or SurveyFieldsConfig()
    geometry_column = gdf.geometry.name
    records = []
    dropped = 0
    for row in gdf.to_dict("records"):
        geometry = row.pop(geometry_column, None)
        if geometry is None or geometry.is_empty:
            dropped += 1
            continue
        properties = {k: _clean_value(v) for k, v in row.items()}
        records.append(SurveyRecord.from_properties(properties, geometry, fields))
    if dropped:
        logger.warning(f"⚠️ Dropped {dropped} survey row(s) without geometry")
    return records


def load_survey_records(
    path: PathLike, fields: Optional[SurveyFieldsConfig] = None
) -> List[SurveyRecord]:
    """
    Load survey shapes from disk as SurveyRecords.

    Args:
        path: GeoJSON / FlatGeobuf / shapefile path
        fields: Property names; defaults to the standard export names

    Returns:
        List of SurveyRecord in file order
    """
    logger.info(f"📂 Loading survey shapes: {path}")
    gdf = read_survey_frame(path, fields)
    records = records_from_frame(gdf, fields)
    respondents = len({r.respondent_id for r in records if r.has_respondent})
    logger.info(f"   ✅ Loaded {len(records)} shapes from {respondents} respondents")
    return records


def records_from_features(
    features: Iterable[Dict[str, Any]], fields: Optional[SurveyFieldsConfig] = None
) -> List[SurveyRecord]:
    """Build SurveyRecords from GeoJSON Feature dicts."""
    return [SurveyRecord.from_feature(f, fields) for f in features]


def load_planning_area(path: PathLike) -> PlanningArea:
    """
    Load a sketch (Feature) or sketch collection (FeatureCollection) GeoJSON.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the GeoJSON is not a valid sketch
    """
    full_path = _require_file(path, "Sketch")
    logger.info(f"📂 Loading sketch: {path}")
    with open(full_path, "r", encoding="utf-8") as f:
        obj = json.load(f)
    planning_area = PlanningArea.from_geojson(obj)
    logger.info(
        f"   ✅ Loaded sketch {planning_area.sketch_id} "
        f"({len(planning_area.geometries)} polygon(s))"
    )
    return planning_area


def sort_survey_file(
    src: PathLike, dest: PathLike, fields: Optional[SurveyFieldsConfig] = None
) -> int:
    """
    Stable-sort the survey export by respondent ID and write it as GeoJSON.

    Respondent IDs are compared as strings. Rows without a respondent ID go
    last.

    Returns:
        Number of features written
    """
    fields = fields or SurveyFieldsConfig()
    logger.info(f"📂 Sorting survey shapes: {src}")
    gdf = read_survey_frame(src, fields)

    sorted_gdf = gdf.sort_values(
        by=fields.respondent_id,
        key=lambda s: s.astype("string"),
        kind="stable",
        na_position="last",
    )

    dest_path = Path(dest)
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    sorted_gdf.to_file(dest_path, driver="GeoJSON")
    logger.info(f"   ✅ Wrote {len(sorted_gdf)} sorted features to {dest_path}")
    return len(sorted_gdf)


def write_json(data: Any, path: PathLike) -> Path:
    """Write JSON with indent=2, creating parent directories."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return out_path


def write_result_json(result: OverlapResult, path: PathLike) -> Path:
    """Write an OverlapResult as {"stats": ..., "metrics": [...]}."""
    out_path = write_json(result.to_dict(), path)
    logger.info(f"💾 Wrote overlap result: {out_path}")
    return out_path
