"""Business strategies over embedded structured data (Schema.org JSON-LD, app state arrays)."""

import json
import math
import re
from typing import Any, Callable, Iterable, Iterator, Optional

from bs4 import BeautifulSoup

from serp_pipeline.extractors.markup import decode_entities
from serp_pipeline.extractors.strategy import CandidateAnchor, Strategy
from serp_pipeline.extractors.urls import resolve_url
from serp_pipeline.extractors.validators import is_valid_category, is_valid_name
from serp_pipeline.models import RawDocument
from serp_pipeline.models.business import PRICE_LEVEL_RE

BUSINESS_TYPE_SUFFIXES = ("Business", "Restaurant", "Store", "Shop", "Service", "Clinic", "Office")
BUSINESS_TYPES = {
    "LocalBusiness", "Place", "Restaurant", "Store", "Dentist", "Physician",
    "Electrician", "Plumber", "HairSalon", "BeautySalon", "AutoRepair",
    "Hotel", "LodgingBusiness", "FoodEstablishment", "CafeOrCoffeeShop",
    "Bakery", "BarOrPub", "Attorney", "RealEstateAgent", "HealthClub",
}
GENERIC_TYPES = {"Thing", "Place", "LocalBusiness", "Organization"}

DAY_CODES = {
    "Mo": "Monday", "Tu": "Tuesday", "We": "Wednesday", "Th": "Thursday",
    "Fr": "Friday", "Sa": "Saturday", "Su": "Sunday",
}
DAY_ORDER = list(DAY_CODES.values())


def extract_json_ld(soup: BeautifulSoup) -> list[dict]:
    """All JSON-LD objects on the page, flattened (lists, @graph, ItemList)."""
    blocks: list[dict] = []

    def collect(data: Any) -> None:
        if isinstance(data, list):
            for item in data:
                collect(item)
        elif isinstance(data, dict):
            if "@graph" in data:
                collect(data["@graph"])
            if "itemListElement" in data:
                collect(data["itemListElement"])
            if data.get("@type") == "ListItem" and "item" in data:
                collect(data["item"])
            blocks.append(data)

    for script in soup.find_all("script", type="application/ld+json"):
        try:
            collect(json.loads(script.string or ""))
        except (json.JSONDecodeError, TypeError):
            continue

    return blocks


def _types(block: dict) -> list[str]:
    value = block.get("@type", [])
    if isinstance(value, str):
        return [value]
    return [t for t in value if isinstance(t, str)] if isinstance(value, list) else []


def is_business_block(block: dict) -> bool:
    types = _types(block)
    if any(t in BUSINESS_TYPES or t.endswith(BUSINESS_TYPE_SUFFIXES) for t in types):
        return True
    # Untyped or loosely typed blocks still count when they look like a listing
    return bool(block.get("name")) and isinstance(block.get("address"), (dict, str)) and not types


def fold_address(address: Any) -> Optional[str]:
    if isinstance(address, str):
        return address.strip() or None
    if isinstance(address, list) and address:
        return fold_address(address[0])
    if not isinstance(address, dict):
        return None
    parts = [
        address.get("streetAddress"),
        address.get("addressLocality"),
        " ".join(p for p in (address.get("addressRegion"), address.get("postalCode")) if p) or None,
        address.get("addressCountry") if isinstance(address.get("addressCountry"), str) else None,
    ]
    folded = ", ".join(str(p).strip() for p in parts if p)
    return folded or None


def _number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _hours_from_specification(spec: Any) -> dict[str, str]:
    hours: dict[str, str] = {}
    for entry in spec if isinstance(spec, list) else [spec]:
        if not isinstance(entry, dict):
            continue
        days = entry.get("dayOfWeek") or []
        if isinstance(days, str):
            days = [days]
        opens, closes = entry.get("opens"), entry.get("closes")
        span = f"{opens}-{closes}" if opens and closes else "Closed"
        for day in days:
            day = str(day).rsplit("/", 1)[-1]
            if day in DAY_ORDER:
                hours.setdefault(day, span)
    return hours


def _hours_from_strings(values: Any) -> dict[str, str]:
    """`"Mo-Fr 09:00-17:00"` style openingHours."""
    hours: dict[str, str] = {}
    for value in values if isinstance(values, list) else [values]:
        if not isinstance(value, str):
            continue
        match = re.match(r"^\s*([A-Z][a-z](?:\s*[-,]\s*[A-Z][a-z])*)\s+(\S+)\s*$", value)
        if not match:
            continue
        span = match.group(2)
        for chunk in match.group(1).split(","):
            ends = [c.strip() for c in chunk.split("-")]
            if not all(e in DAY_CODES for e in ends):
                continue
            first = DAY_ORDER.index(DAY_CODES[ends[0]])
            last = DAY_ORDER.index(DAY_CODES[ends[-1]])
            for day in DAY_ORDER[first:last + 1]:
                hours.setdefault(day, span)
    return hours


def _read_address(block: dict) -> Optional[str]:
    address = fold_address(block.get("address"))
    return decode_entities(address) if address else None


def _read_phone(block: dict) -> Optional[str]:
    phone = block.get("telephone")
    if isinstance(phone, str) and phone.strip():
        return phone.strip()
    return None


def _read_website(block: dict) -> Optional[str]:
    same_as = block.get("sameAs") or []
    for candidate in [block.get("url")] + (same_as if isinstance(same_as, list) else [same_as]):
        website = resolve_url(candidate) if isinstance(candidate, str) else None
        if website:
            return website
    return None


def _read_email(block: dict) -> Optional[str]:
    email = block.get("email")
    if isinstance(email, str) and "@" in email:
        return email.replace("mailto:", "").strip().lower()
    return None


def _aggregate_rating(block: dict) -> dict:
    rating = block.get("aggregateRating")
    return rating if isinstance(rating, dict) else {}


def _read_rating(block: dict) -> Optional[float]:
    return _number(_aggregate_rating(block).get("ratingValue"))


def _read_review_count(block: dict) -> Optional[int]:
    rating = _aggregate_rating(block)
    count = _number(rating.get("reviewCount") or rating.get("ratingCount"))
    return int(count) if count is not None else None


def _read_coordinates(block: dict) -> Optional[tuple[float, float]]:
    geo = block.get("geo")
    if not isinstance(geo, dict):
        return None
    lat, lng = _number(geo.get("latitude")), _number(geo.get("longitude"))
    return (lat, lng) if lat is not None and lng is not None else None


def _read_categories(block: dict) -> Optional[list[str]]:
    categories = [re.sub(r"(?<=[a-z])(?=[A-Z])", " ", t) for t in _types(block) if t not in GENERIC_TYPES]
    cuisine = block.get("servesCuisine")
    categories.extend([cuisine] if isinstance(cuisine, str) else [c for c in cuisine or [] if isinstance(c, str)])
    return [c for c in categories if is_valid_category(c)] or None


def _read_price_level(block: dict) -> Optional[str]:
    price = block.get("priceRange")
    if isinstance(price, str) and PRICE_LEVEL_RE.match(price.strip()):
        return price.strip()
    return None


def _read_hours(block: dict) -> Optional[dict[str, str]]:
    return _hours_from_specification(block.get("openingHoursSpecification")) or _hours_from_strings(
        block.get("openingHours")
    ) or None


def _read_place_id(block: dict) -> Optional[str]:
    has_map = block.get("hasMap")
    if not isinstance(has_map, str):
        return None
    match = re.search(r"place_id[:=]([A-Za-z0-9_-]{10,})|[?&]cid=(\d+)", has_map)
    return (match.group(1) or match.group(2)) if match else None


BLOCK_READERS: list[tuple[str, Callable[[dict], Any]]] = [
    ("address", _read_address),
    ("phone", _read_phone),
    ("website", _read_website),
    ("email", _read_email),
    ("rating", _read_rating),
    ("review_count", _read_review_count),
    ("coordinates", _read_coordinates),
    ("categories", _read_categories),
    ("price_level", _read_price_level),
    ("hours", _read_hours),
    ("place_id", _read_place_id),
]


def fields_from_block(block: dict) -> dict[str, Any]:
    """Partial record fields read straight from one JSON-LD object.

    Values are passed through as found; the assembler re-validates ranges.
    A value that cannot be converted only drops its own field.
    """
    fields: dict[str, Any] = {}
    for field, read in BLOCK_READERS:
        try:
            value = read(block)
        except (ValueError, TypeError, OverflowError, AttributeError):
            continue
        if value is not None:
            fields[field] = value
    return fields


def _offset_of(text: str, name: str, default: int = 0) -> int:
    for needle in (name, json.dumps(name)[1:-1]):
        idx = text.find(needle)
        if idx != -1:
            return idx
    return default


class JsonLdStrategy(Strategy):
    """Schema.org LocalBusiness objects: the most structured shape there is."""

    name = "json-ld"

    def attempt(self, document: RawDocument) -> Iterator[CandidateAnchor]:
        if "application/ld+json" not in document.text:
            return
        soup = BeautifulSoup(document.text, "lxml")
        for block in extract_json_ld(soup):
            if not is_business_block(block):
                continue
            name = block.get("name")
            if not isinstance(name, str) or not name.strip():
                continue
            name = decode_entities(name).strip()
            yield CandidateAnchor(
                text=name,
                offset=_offset_of(document.text, name),
                strategy=self.name,
                fields=fields_from_block(block),
            )


APP_STATE_RE = re.compile(r"window\.APP_INITIALIZATION_STATE\s*=\s*")
XSSI_PREFIX = ")]}'"


def _is_coordinate_quad(node: Any) -> bool:
    # Maps encodes positions as [null, null, lat, lng]
    return (
        isinstance(node, list)
        and len(node) == 4
        and node[0] is None
        and node[1] is None
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in node[2:])
    )


def _walk_lists(root: Any, max_nodes: int = 200_000) -> Iterator[list]:
    stack = [root]
    seen = 0
    while stack and seen < max_nodes:
        node = stack.pop()
        seen += 1
        if isinstance(node, list):
            yield node
            stack.extend(reversed([n for n in node if isinstance(n, (list, dict, str))]))
        elif isinstance(node, dict):
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, str) and node.startswith(XSSI_PREFIX):
            # Nested payloads are JSON strings behind an anti-XSSI prefix
            try:
                stack.append(json.loads(node[len(XSSI_PREFIX):]))
            except ValueError:
                continue


def place_tuples(payload: Any) -> Iterator[tuple[str, dict[str, Any]]]:
    """(name, fields) for every list node that pairs a name with a coordinate quad."""
    for node in _walk_lists(payload):
        quad = next((child for child in node if _is_coordinate_quad(child)), None)
        if quad is None:
            continue
        strings = [child for child in node if isinstance(child, str)]
        name = next(
            (
                s for s in strings
                if not s.startswith(("http", "0x", "ChIJ", "/")) and is_valid_name(s)
            ),
            None,
        )
        if not name:
            continue
        fields: dict[str, Any] = {"coordinates": (quad[2], quad[3])}
        for s in strings:
            if s.startswith("ChIJ") or re.fullmatch(r"0x[0-9a-f]+:0x[0-9a-f]+", s):
                fields.setdefault("place_id", s)
            elif s.startswith("http"):
                website = resolve_url(s)
                if website:
                    fields.setdefault("website", website)
        labels = next(
            (
                child for child in node
                if isinstance(child, list) and 0 < len(child) <= 5
                and all(isinstance(c, str) and is_valid_category(c) for c in child)
            ),
            None,
        )
        if labels:
            fields["categories"] = list(labels)
        yield name, fields


class AppStateStrategy(Strategy):
    """Places embedded in the app initialization arrays of a maps page."""

    name = "embedded-array"

    def attempt(self, document: RawDocument) -> Iterable[CandidateAnchor]:
        text = document.text
        match = APP_STATE_RE.search(text)
        if not match:
            return []
        try:
            payload, _ = json.JSONDecoder().raw_decode(text, match.end())
        except ValueError:
            return []
        return [
            CandidateAnchor(
                text=name,
                offset=_offset_of(text, name, match.start()),
                strategy=self.name,
                fields=fields,
            )
            for name, fields in place_tuples(payload)
        ]


TITLE_SUFFIX_RE = re.compile(r"\s*[-–|·]\s*Google\s*(?:Maps|Search)?\s*$", re.I)


class PageTitleStrategy(Strategy):
    """og:title, then <title>, with the site suffix removed."""

    name = "page-title"
    fallback = True

    def attempt(self, document: RawDocument) -> Iterator[CandidateAnchor]:
        soup = BeautifulSoup(document.text, "lxml")
        candidates = []
        og_title = soup.find("meta", attrs={"property": "og:title"})
        if og_title and og_title.get("content"):
            candidates.append(og_title["content"])
        title_tag = soup.find("title")
        if title_tag:
            candidates.append(title_tag.get_text())
        for raw in candidates:
            # "Joe's Pizza · 123 Main St - Google Maps"
            name = TITLE_SUFFIX_RE.sub("", decode_entities(raw)).split(" · ", 1)[0].strip()
            if name:
                yield CandidateAnchor(text=name, offset=_offset_of(document.text, name), strategy=self.name)
