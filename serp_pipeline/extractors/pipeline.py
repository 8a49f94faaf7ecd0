"""Extraction entry points.

Each call is a pure function of the document: fresh chains, fresh
deduplicators, no network I/O. Strategies run most-structured-first:
1. Embedded structured data (JSON-LD, app state arrays)
2. Semantically marked-up listings (aria labels, title classes)
3. Generic place anchors
4. Last-resort text scanning
"""

from typing import Optional, Union

from rich.console import Console

from serp_pipeline.config import Settings, get_settings
from serp_pipeline.extractors import features
from serp_pipeline.extractors.assembler import BusinessAssembler
from serp_pipeline.extractors.fields import extract_total_results
from serp_pipeline.extractors.heuristics import (
    AriaPlaceLinkStrategy,
    ClassedMarkupStrategy,
    PlaceAnchorStrategy,
    PlaceHeadingStrategy,
    TextScanStrategy,
)
from serp_pipeline.extractors.strategy import StrategyChain, as_document, detect_challenge
from serp_pipeline.extractors.structured import AppStateStrategy, JsonLdStrategy, PageTitleStrategy
from serp_pipeline.models import BusinessRecord, BusinessSearchResult, RawDocument, SerpResponse

console = Console(stderr=True)

Document = Union[RawDocument, str, None]


def business_strategies() -> list:
    """Listing strategies in priority order."""
    return [
        JsonLdStrategy(),
        AppStateStrategy(),
        AriaPlaceLinkStrategy(),
        ClassedMarkupStrategy(),
        PlaceAnchorStrategy(),
        TextScanStrategy(),
    ]


def place_strategies() -> list:
    """Strategies for a single place details page."""
    return [JsonLdStrategy(), AppStateStrategy(), PlaceHeadingStrategy(), PageTitleStrategy()]


def clamp_limit(limit: Optional[int], settings: Settings) -> int:
    if not limit:
        limit = settings.default_limit
    return max(1, min(int(limit), settings.max_limit))


def extract_businesses(
    html: Document,
    limit: Optional[int] = None,
    start: int = 0,
    query: str = "",
    location: str = "",
    settings: Optional[Settings] = None,
) -> BusinessSearchResult:
    """Business listings from a maps/local search results page.

    Args:
        html: Raw document (already fetched at offset `start`)
        limit: Target number of listings, clamped to 1..max_limit
        start: Continuation cursor the document was fetched with
        query: Search query, echoed into the result
        location: Search location, echoed into the result

    Returns:
        BusinessSearchResult whose nextPageToken is set only when the
        target was reached, i.e. when there may be more results.

    Raises:
        ChallengeDetected: the document is a block/challenge page
    """
    settings = settings or get_settings()
    limit = clamp_limit(limit, settings)
    start = max(0, int(start or 0))

    assembler = BusinessAssembler(settings.context_before, settings.context_after, settings.verbose)
    chain = StrategyChain("businesses", business_strategies(), assembler, target=limit, verbose=settings.verbose)
    result = chain.run(html)

    businesses = list(result.records)
    next_page_token = None if result.exhausted else str(start + len(businesses))

    if businesses:
        console.print(
            f"[green]Extracted {len(businesses)} businesses[/green] "
            f"[dim](limit: {limit}, start: {start})[/dim]"
        )
    else:
        console.print("[yellow]No businesses found in document[/yellow]")

    return BusinessSearchResult(
        businesses=businesses,
        total_found=len(businesses),
        next_page_token=next_page_token,
        search_query=query,
        location=location,
    )


def extract_place_details(
    html: Document,
    place_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Optional[BusinessRecord]:
    """One detailed record from a place page, or None if no name was found.

    The whole page describes one place, so fields are searched from the
    name to the end of the document. The caller's place id fills in when
    the page does not carry one.
    """
    settings = settings or get_settings()
    document = as_document(html)

    assembler = BusinessAssembler(settings.context_before, len(document.text), settings.verbose)
    chain = StrategyChain("place", place_strategies(), assembler, target=1, verbose=settings.verbose)
    record = chain.run(document).first
    if record is None:
        console.print("[yellow]No place found in document[/yellow]")
        return None

    if place_id and not record.place_id:
        record = record.model_copy(update={"place_id": place_id})

    console.print(f"[green]Extracted:[/green] {record.name[:50]}")
    return record


def extract_serp(
    html: Document,
    query: str,
    country: str = "us",
    language: str = "en",
    location: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> SerpResponse:
    """Every search-result feature from one results page.

    Raises:
        ChallengeDetected: the document is a block/challenge page
    """
    settings = settings or get_settings()
    document = as_document(html)
    response = SerpResponse(query=query, country=country, language=language, location=location or None)
    if document.is_empty:
        console.print("[yellow]Empty document[/yellow]")
        return response
    detect_challenge(document.text)

    # The page was checked once above; the feature chains skip the rescan
    opts = {"verbose": settings.verbose, "check_challenge": False}
    response = response.model_copy(
        update={
            "total_results": extract_total_results(document.text),
            "organic": features.extract_organic_results(document, limit=settings.organic_limit, **opts),
            "ads": features.extract_ads(document, **opts),
            "people_also_ask": features.extract_questions(document, **opts),
            "featured_snippet": features.extract_featured_passage(document, **opts),
            "ai_overview": features.extract_summary_panel(document, **opts),
            "map_pack": features.extract_map_pack(document, **opts),
            "knowledge_panel": features.extract_info_panel(document, **opts),
            "related_searches": features.extract_related_queries(document, **opts),
        }
    )

    summary = features.feature_counts(
        organic=response.organic,
        ads=response.ads,
        paa=response.people_also_ask,
        map_pack=response.map_pack,
        snippet=response.featured_snippet,
        overview=response.ai_overview,
        panel=response.knowledge_panel,
    )
    console.print(f"[green]SERP:[/green] {query!r} [dim]{summary}[/dim]")
    return response
