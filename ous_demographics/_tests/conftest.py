"""
Shared test fixtures for OUS demographic overlap tests.

Two respondents in two atolls:
- "A" (Lh / Kurendhoo): artisanal fishing with Nets and Jigging, people unset
- "B" (HA / Filladhoo): tuna and bait fishing with Longline, 20 people
"""

from typing import Any, Dict, List

import pytest
from shapely.geometry import MultiPolygon, box, mapping

from ous_demographics.data_loader import records_from_features
from ous_demographics.models import PlanningArea, SurveyRecord

# Respondent regions (lon/lat)
REGION_A = (73.38, 5.48, 73.52, 5.57)
REGION_B = (72.98, 6.88, 73.12, 6.97)


def make_feature(
    resp_id: Any,
    geometry,
    atoll: Any = None,
    island: Any = None,
    sector: Any = None,
    gear: Any = None,
    number_of_ppl: Any = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Survey export feature with the standard property names."""
    properties = {
        "resp_id": resp_id,
        "weight": 1.0,
        "atoll": atoll,
        "island": island,
        "sector": sector,
        "gear": gear,
        "number_of_ppl": number_of_ppl,
    }
    properties.update(extra)
    return {"type": "Feature", "properties": properties, "geometry": mapping(geometry)}


def make_sketch(sketch_id: str, geometry, name: str = "") -> Dict[str, Any]:
    return {
        "type": "Feature",
        "properties": {"id": sketch_id, "name": name},
        "geometry": mapping(geometry),
    }


@pytest.fixture
def survey_features() -> List[Dict[str, Any]]:
    """Four shapes from two respondents, B listed before A."""
    return [
        make_feature(
            "B",
            box(73.00, 6.90, 73.05, 6.95),
            atoll="HA",
            island="Filladhoo",
            sector="tuna fishing",
            gear="Longline",
            number_of_ppl="20",
        ),
        make_feature(
            "A",
            box(73.40, 5.50, 73.45, 5.55),
            atoll="Lh",
            island="Kurendhoo",
            sector="artisanal fishing",
            gear="Nets  Jigging",
            number_of_ppl=None,
        ),
        make_feature(
            "B",
            box(73.06, 6.90, 73.10, 6.95),
            atoll="HA",
            island="Filladhoo",
            sector="bait fishing",
            gear="Longline",
            number_of_ppl="20",
        ),
        make_feature(
            "A",
            box(73.46, 5.50, 73.50, 5.55),
            atoll="Lh",
            island="Kurendhoo",
            sector="artisanal fishing",
            gear="Jigging",
            number_of_ppl=None,
        ),
    ]


@pytest.fixture
def survey_records(survey_features) -> List[SurveyRecord]:
    return records_from_features(survey_features)


@pytest.fixture
def sketch_a_geojson() -> Dict[str, Any]:
    """Single polygon sketch covering respondent A's region only."""
    return make_sketch("sketch-a", box(*REGION_A), name="Lh sketch")


@pytest.fixture
def sketch_a(sketch_a_geojson) -> PlanningArea:
    return PlanningArea.from_geojson(sketch_a_geojson)


@pytest.fixture
def multipolygon_sketch() -> PlanningArea:
    """One MultiPolygon sketch touching one shape of each respondent."""
    geometry = MultiPolygon(
        [box(73.41, 5.51, 73.44, 5.54), box(73.07, 6.91, 73.09, 6.94)]
    )
    return PlanningArea.from_geojson(make_sketch("sketch-multi", geometry))


@pytest.fixture
def sketch_collection_geojson() -> Dict[str, Any]:
    """Collection of two sketches, one per respondent region."""
    return {
        "type": "FeatureCollection",
        "properties": {"id": "collection-1", "name": "Both regions"},
        "features": [
            make_sketch("member-a", box(*REGION_A)),
            make_sketch("member-b", box(*REGION_B)),
        ],
    }


@pytest.fixture
def sketch_collection(sketch_collection_geojson) -> PlanningArea:
    return PlanningArea.from_geojson(sketch_collection_geojson)


@pytest.fixture
def sequential_config() -> Dict[str, Any]:
    """Single partition on a one-worker pool."""
    return {"parallel": {"max_workers": 1}}


@pytest.fixture
def threaded_config() -> Dict[str, Any]:
    """Six partitions on the threading backend (monkeypatch-friendly)."""
    return {
        "parallel": {
            "max_workers": 6,
            "min_records_for_parallel": 0,
            "backend": "threading",
        }
    }


@pytest.fixture
def many_records() -> List[SurveyRecord]:
    """40 respondents owning 1-4 shapes each, in a grid of small squares.

    Respondent i owns (i % 4) + 1 shapes and reports i % 7 people (0 means
    unset). Every fifth respondent lists two gear types.
    """
    atolls = ["Lh", "HA", "K", None]
    sectors = ["tuna fishing", "bait fishing", "artisanal fishing", None]
    records = []
    for i in range(40):
        for j in range((i % 4) + 1):
            x = 73.0 + (i % 8) * 0.1 + j * 0.01
            y = 5.0 + (i // 8) * 0.1
            people = i % 7
            records.append(
                SurveyRecord(
                    respondent_id=f"R{i:03d}",
                    geometry=box(x, y, x + 0.008, y + 0.008),
                    atoll=atolls[i % 4],
                    island=f"Island{i % 5}" if i % 3 else None,
                    sector=sectors[(i + j) % 4],
                    gear="Nets  Handline" if i % 5 == 0 else "Longline",
                    people_count=str(people) if people else None,
                )
            )
    return records
