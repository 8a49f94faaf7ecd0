"""Turn an accepted anchor into a BusinessRecord."""

from typing import Any, Optional

from rich.console import Console

from serp_pipeline.extractors import fields as fx
from serp_pipeline.extractors.context import DEFAULT_AFTER, DEFAULT_BEFORE, ContextWindow, context_window
from serp_pipeline.extractors.strategy import CandidateAnchor
from serp_pipeline.extractors.urls import resolve_url
from serp_pipeline.extractors.validators import is_valid_category
from serp_pipeline.models import BusinessRecord, Coordinates, RawDocument
from serp_pipeline.models.business import PRICE_LEVEL_RE

console = Console(stderr=True)


def valid_rating(value: Any) -> Optional[float]:
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    return rating if 1.0 <= rating <= 5.0 else None


def valid_review_count(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        count = int(value)
    except (TypeError, ValueError):
        return None
    return count if count >= 0 else None


def valid_coordinates(value: Any) -> Optional[Coordinates]:
    if isinstance(value, Coordinates):
        return value
    try:
        lat, lng = (float(v) for v in value)
    except (TypeError, ValueError):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180) or (lat == 0 and lng == 0):
        return None
    return Coordinates(latitude=lat, longitude=lng)


def valid_price_level(value: Any) -> Optional[str]:
    if isinstance(value, str) and PRICE_LEVEL_RE.match(value.strip()):
        return value.strip()
    return None


def valid_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return " ".join(value.split())
    return None


def valid_hours(value: Any) -> Optional[dict[str, str]]:
    if not isinstance(value, dict):
        return None
    hours = {str(k): str(v) for k, v in value.items() if k and v}
    return hours or None


def valid_categories(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [c for c in value if isinstance(c, str) and is_valid_category(c)]


class BusinessAssembler:
    """Merge strategy-supplied fields with fields mined from the context window.

    A value supplied by the strategy wins when it passes the same range
    checks as the extractors; otherwise the window is scanned for it.
    """

    def __init__(self, before: int = DEFAULT_BEFORE, after: int = DEFAULT_AFTER, verbose: bool = False):
        self.before = before
        self.after = after
        self.verbose = verbose

    def window(self, document: RawDocument, anchor: CandidateAnchor) -> ContextWindow:
        return context_window(document, anchor.offset, self.before, self.after)

    def __call__(self, document: RawDocument, anchor: CandidateAnchor, position: int) -> Optional[BusinessRecord]:
        known = anchor.fields
        window = self.window(document, anchor)
        verbose = self.verbose

        def pick(name: str, check, extract):
            value = check(known.get(name)) if name in known else None
            if value is None:
                value = extract(window, verbose=verbose)
            return value

        website = resolve_url(known.get("website")) if known.get("website") else None
        categories = valid_categories(known.get("categories"))
        if not categories:
            categories = fx.extract_categories(window, name=anchor.text, verbose=verbose)

        record = BusinessRecord(
            name=anchor.text,
            address=pick("address", valid_text, fx.extract_address),
            phone=pick("phone", valid_text, fx.extract_phone),
            website=website or fx.extract_website(window, verbose=verbose),
            email=pick("email", valid_text, fx.extract_email),
            hours=pick("hours", valid_hours, fx.extract_hours),
            rating=pick("rating", valid_rating, fx.extract_rating),
            review_count=pick("review_count", valid_review_count, fx.extract_review_count),
            categories=categories,
            coordinates=pick("coordinates", valid_coordinates, fx.extract_coordinates),
            place_id=pick("place_id", valid_text, fx.extract_place_id),
            price_level=pick("price_level", valid_price_level, fx.extract_price_level),
            permanently_closed=bool(known.get("permanently_closed")) or fx.is_permanently_closed(window),
        )
        if verbose:
            console.print(f"[dim]#{position} {record.name} via {anchor.strategy}[/dim]")
        return record
