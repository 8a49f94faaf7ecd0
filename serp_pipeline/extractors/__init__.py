"""Markup → structured record extraction engine.

This module provides the extraction pipeline that:
1. Rejects challenge/block pages up front
2. Runs prioritized strategy chains over the raw document:
   - Schema.org JSON-LD and embedded app state
   - Aria labels and listing-title classes
   - Place links and last-resort text scanning
3. Enriches each accepted anchor with per-field heuristics
4. Returns immutable, deduplicated records
"""

from serp_pipeline.extractors.pipeline import extract_businesses, extract_place_details, extract_serp
from serp_pipeline.extractors.strategy import CandidateAnchor, Strategy, StrategyChain, detect_challenge

__all__ = [
    "extract_businesses",
    "extract_place_details",
    "extract_serp",
    "CandidateAnchor",
    "Strategy",
    "StrategyChain",
    "detect_challenge",
]
