"""Data models for the SERP pipeline."""

from serp_pipeline.models.business import (
    BusinessRecord,
    BusinessSearchResult,
    Coordinates,
    RawDocument,
)
from serp_pipeline.models.serp import (
    AdResult,
    FeaturedPassage,
    InfoPanel,
    MapPackEntry,
    OrganicResult,
    QuestionAnswer,
    SerpResponse,
    Sitelink,
    SummaryPanel,
    SummarySource,
)
from serp_pipeline.models.result import StrategyResult

__all__ = [
    "RawDocument",
    "Coordinates",
    "BusinessRecord",
    "BusinessSearchResult",
    "Sitelink",
    "OrganicResult",
    "AdResult",
    "QuestionAnswer",
    "FeaturedPassage",
    "SummarySource",
    "SummaryPanel",
    "MapPackEntry",
    "InfoPanel",
    "SerpResponse",
    "StrategyResult",
]
