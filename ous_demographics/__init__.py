"""
OUS Demographics

Counts ocean use survey respondents and the people they represent whose
shapes overlap a planning area, by sector, atoll, island and gear type.
"""

from ous_demographics.config import CONFIG
from ous_demographics.parallel.overlap_orchestrator import (
    OverlapComputationError,
    overlap_ous_demographic,
)

__all__ = ["overlap_ous_demographic", "OverlapComputationError", "CONFIG"]
