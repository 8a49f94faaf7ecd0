"""Per-field heuristic extractors.

No class name or layout is stable, so each field carries an ordered table of
independent rules. A rule is a (pattern, transform, check) triple applied to
either the raw markup or the tag-stripped text of a context window. Rules are
evaluated lazily; the first value that survives its plausibility check wins.
New rules can be appended to a table without touching anything else.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from rich.console import Console

from serp_pipeline.errors import FieldParseError
from serp_pipeline.extractors.context import ContextWindow
from serp_pipeline.extractors.markup import clean_text, decode_entities
from serp_pipeline.extractors.urls import is_external_url, resolve_url
from serp_pipeline.extractors.validators import is_valid_category
from serp_pipeline.models import Coordinates

console = Console(stderr=True)

MARKUP = "markup"
TEXT = "text"


@dataclass(frozen=True)
class FieldRule:
    """One way of finding one field."""
    pattern: re.Pattern
    transform: Callable[[re.Match], Any] = lambda m: m.group(1)
    check: Callable[[Any], bool] = lambda value: value is not None
    source: str = TEXT
    name: str = ""


def apply_rules(
    window: ContextWindow,
    rules: Iterable[FieldRule],
    field: str = "",
    verbose: bool = False,
) -> Optional[Any]:
    """Return the first value produced by a rule that passes its check.

    A rule that blows up while converting its match is a field parse
    error: it is swallowed and the next match (then the next rule) gets
    its turn.
    """
    for rule in rules:
        surface = window.markup if rule.source == MARKUP else window.text
        for match in rule.pattern.finditer(surface):
            try:
                value = rule.transform(match)
                accepted = value is not None and rule.check(value)
            except (ValueError, TypeError, IndexError, AttributeError) as e:
                if verbose:
                    error = FieldParseError(field, f"{rule.name or rule.pattern.pattern[:40]}: {e}")
                    console.print(f"[dim]{error}[/dim]")
                continue
            if accepted:
                return value
    return None


def _parse_int(raw: str) -> int:
    return int(raw.replace(",", "").replace(".", "").replace(" ", ""))


def _parse_abbreviated(raw: str) -> int:
    """'1.2K' -> 1200, '3M' -> 3000000, '1,234' -> 1234."""
    raw = raw.strip()
    suffix = raw[-1].upper()
    if suffix in ("K", "M"):
        number = float(raw[:-1].replace(",", ""))
        return int(round(number * (1_000 if suffix == "K" else 1_000_000)))
    return _parse_int(raw)


# ---------------------------------------------------------------------------
# Rating
# ---------------------------------------------------------------------------

def _rating_in_range(value: float) -> bool:
    return 1.0 <= value <= 5.0


RATING_RULES = [
    FieldRule(
        re.compile(r'aria-label="\s*(?:Rated\s+)?(\d(?:[.,]\d)?)\s*(?:out of 5\s*)?stars?', re.I),
        transform=lambda m: float(m.group(1).replace(",", ".")),
        check=_rating_in_range,
        source=MARKUP,
        name="aria-stars",
    ),
    FieldRule(
        re.compile(r'"ratingValue"\s*:\s*"?(\d(?:\.\d+)?)', re.I),
        transform=lambda m: float(m.group(1)),
        check=_rating_in_range,
        source=MARKUP,
        name="json-rating",
    ),
    FieldRule(
        re.compile(r"\b(\d[.,]\d)\s*(?:out of 5\s*)?stars?\b", re.I),
        transform=lambda m: float(m.group(1).replace(",", ".")),
        check=_rating_in_range,
        name="n-stars",
    ),
    FieldRule(
        re.compile(r"\brat(?:ing|ed)\s*:?\s*(\d(?:[.,]\d)?)\b", re.I),
        transform=lambda m: float(m.group(1).replace(",", ".")),
        check=_rating_in_range,
        name="rating-label",
    ),
    FieldRule(
        re.compile(r"(?<![\d.])(\d\.\d)\s*\(\s*\d[\d,.]*[KkMm]?\s*\)"),
        transform=lambda m: float(m.group(1)),
        check=_rating_in_range,
        name="rating-count-pair",
    ),
]


def extract_rating(window: ContextWindow, verbose: bool = False) -> Optional[float]:
    return apply_rules(window, RATING_RULES, "rating", verbose)


# ---------------------------------------------------------------------------
# Review count
# ---------------------------------------------------------------------------

REVIEW_COUNT_RULES = [
    FieldRule(
        re.compile(r'aria-label="\s*([\d,.]+[KkMm]?)\s+reviews?', re.I),
        transform=lambda m: _parse_abbreviated(m.group(1)),
        check=lambda v: v >= 0,
        source=MARKUP,
        name="aria-reviews",
    ),
    FieldRule(
        re.compile(r'"(?:reviewCount|ratingCount)"\s*:\s*"?(\d+)', re.I),
        transform=lambda m: int(m.group(1)),
        check=lambda v: v >= 0,
        source=MARKUP,
        name="json-reviews",
    ),
    FieldRule(
        re.compile(r"\b(\d{1,3}(?:,\d{3})+|\d+(?:\.\d)?[KkMm]|\d+)\s+(?:Google\s+)?reviews?\b", re.I),
        transform=lambda m: _parse_abbreviated(m.group(1)),
        check=lambda v: v >= 0,
        name="n-reviews",
    ),
    FieldRule(
        re.compile(r"(?<![\d.])\d\.\d\s*\(\s*(\d{1,3}(?:,\d{3})+|\d+(?:\.\d)?[KkMm]|\d+)\s*\)"),
        transform=lambda m: _parse_abbreviated(m.group(1)),
        check=lambda v: v >= 0,
        name="rating-count-pair",
    ),
    FieldRule(
        re.compile(r"\(\s*(\d{1,3}(?:,\d{3})+|\d{1,6})\s*\)(?!\s*\d{3}[\s.-]\d{4})"),
        transform=lambda m: _parse_int(m.group(1)),
        check=lambda v: v >= 0,
        name="parenthesized",
    ),
]


def extract_review_count(window: ContextWindow, verbose: bool = False) -> Optional[int]:
    return apply_rules(window, REVIEW_COUNT_RULES, "reviewCount", verbose)


# ---------------------------------------------------------------------------
# Phone
# ---------------------------------------------------------------------------

def _clean_phone(raw: str) -> str:
    return re.sub(r"\s+", " ", decode_entities(raw)).strip(" .-")


def _plausible_phone(value: str) -> bool:
    digits = re.sub(r"\D", "", value)
    if not 7 <= len(digits) <= 15:
        return False
    # Years, zip+4 codes and coordinates look numeric too
    return not re.fullmatch(r"\d{4}-\d{4}", value)


PHONE_RULES = [
    FieldRule(
        re.compile(r'href="tel:([+\d][\d\s().-]{5,24})"', re.I),
        transform=lambda m: _clean_phone(m.group(1)),
        check=_plausible_phone,
        source=MARKUP,
        name="tel-link",
    ),
    FieldRule(
        re.compile(r'data-item-id="phone:tel:([+\d][\d\s().-]{5,24})"', re.I),
        transform=lambda m: _clean_phone(m.group(1)),
        check=_plausible_phone,
        source=MARKUP,
        name="phone-item",
    ),
    FieldRule(
        re.compile(r'aria-label="Phone:\s*([^"]{7,30})"', re.I),
        transform=lambda m: _clean_phone(m.group(1)),
        check=_plausible_phone,
        source=MARKUP,
        name="phone-label",
    ),
    FieldRule(
        re.compile(r'"telephone"\s*:\s*"([^"]{7,30})"', re.I),
        transform=lambda m: _clean_phone(m.group(1)),
        check=_plausible_phone,
        source=MARKUP,
        name="json-telephone",
    ),
    FieldRule(
        re.compile(r"(?<![\d+])(\+\d{1,3}[\s.-]?\(?\d{1,4}\)?(?:[\s.-]?\d{2,4}){2,4})(?!\d)"),
        transform=lambda m: _clean_phone(m.group(1)),
        check=_plausible_phone,
        name="international",
    ),
    FieldRule(
        re.compile(r"(?<![\d.])((?:1[\s.-])?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]\d{4})(?![\d.])"),
        transform=lambda m: _clean_phone(m.group(1)),
        check=_plausible_phone,
        name="nanp",
    ),
]


def extract_phone(window: ContextWindow, verbose: bool = False) -> Optional[str]:
    return apply_rules(window, PHONE_RULES, "phone", verbose)


# ---------------------------------------------------------------------------
# Address
# ---------------------------------------------------------------------------

STREET_SUFFIXES = (
    r"St|Street|Ave|Avenue|Rd|Road|Blvd|Boulevard|Dr|Drive|Ln|Lane|Way|Ct|Court|"
    r"Pl|Place|Pkwy|Parkway|Hwy|Highway|Sq|Square|Ter|Terrace|Cir|Circle|Trl|Trail|"
    r"Pike|Plaza|Loop|Row|Alley|Broadway"
)


def _clean_address(raw: str) -> str:
    text = re.sub(r"\s+", " ", decode_entities(raw)).strip(" ,·•|")
    return text


def _address_length_ok(value: str) -> bool:
    return 10 <= len(value) <= 200


ADDRESS_RULES = [
    FieldRule(
        re.compile(r'aria-label="Address:\s*([^"]+)"', re.I),
        transform=lambda m: _clean_address(m.group(1)),
        check=_address_length_ok,
        source=MARKUP,
        name="address-label",
    ),
    FieldRule(
        re.compile(r'data-item-id="address"[^>]*>(.*?)</(?:button|div|a)>', re.I | re.S),
        transform=lambda m: _clean_address(clean_text(m.group(1))),
        check=_address_length_ok,
        source=MARKUP,
        name="address-item",
    ),
    FieldRule(
        re.compile(r'"streetAddress"\s*:\s*"([^"]+)"', re.I),
        transform=lambda m: _clean_address(m.group(1)),
        check=_address_length_ok,
        source=MARKUP,
        name="json-street",
    ),
    FieldRule(
        re.compile(
            r'<(?:span|div|address)[^>]*class="[^"]*(?:address|LrzXr|Io6YTe|rllt__details)[^"]*"[^>]*>'
            r"([^<]{10,200})<",
            re.I,
        ),
        transform=lambda m: _clean_address(m.group(1)),
        check=_address_length_ok,
        source=MARKUP,
        name="address-class",
    ),
    FieldRule(
        re.compile(
            r"\b(\d{1,6}[A-Za-z]?\s+(?:[A-Z0-9][\w'.-]*\s+){0,5}(?:" + STREET_SUFFIXES + r")\b\.?"
            r"(?:\s*(?:#|Suite|Ste\.?|Unit|Apt\.?)\s*[\w-]+)?"
            # ", City" then ", ST 12345"; block boundaries collapse to spaces, so each part stays short
            r"(?:,\s*[A-Z][a-z][\w.'-]*(?:\s[A-Z][a-z][\w.'-]*){0,2})?"
            r"(?:,\s*[A-Z]{2}(?:\s+\d{5}(?:-\d{4})?)?\b)?)"
        ),
        transform=lambda m: _clean_address(m.group(1)),
        check=_address_length_ok,
        name="street-suffix",
    ),
]


def extract_address(window: ContextWindow, verbose: bool = False) -> Optional[str]:
    return apply_rules(window, ADDRESS_RULES, "address", verbose)


# ---------------------------------------------------------------------------
# Website / email
# ---------------------------------------------------------------------------

NON_DOCUMENT_EXTENSIONS = (
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico", ".bmp",
    ".css", ".js", ".json", ".xml", ".woff", ".woff2", ".ttf", ".eot",
    ".mp4", ".webm", ".mp3", ".pdf", ".zip",
)


def _document_url(raw: str) -> Optional[str]:
    url = resolve_url(raw)
    if not url:
        return None
    path = url.split("?", 1)[0].split("#", 1)[0].lower()
    if path.endswith(NON_DOCUMENT_EXTENSIONS):
        return None
    return url


WEBSITE_RULES = [
    FieldRule(
        re.compile(r'data-item-id="authority"[^>]*href="([^"]+)"', re.I),
        transform=lambda m: _document_url(m.group(1)),
        source=MARKUP,
        name="authority-item",
    ),
    FieldRule(
        re.compile(r'href="([^"]+)"[^>]*data-item-id="authority"', re.I),
        transform=lambda m: _document_url(m.group(1)),
        source=MARKUP,
        name="authority-item-reversed",
    ),
    FieldRule(
        re.compile(r'<a[^>]*aria-label="Website:?[^"]*"[^>]*href="([^"]+)"', re.I),
        transform=lambda m: _document_url(m.group(1)),
        source=MARKUP,
        name="website-label",
    ),
    FieldRule(
        re.compile(r'href="([^"]*/url\?[^"]*(?:q|url)=https?[^"]+)"', re.I),
        transform=lambda m: _document_url(m.group(1)),
        source=MARKUP,
        name="redirect-wrapper",
    ),
    FieldRule(
        re.compile(r'href="(https?://[^"\s]+)"', re.I),
        transform=lambda m: _document_url(m.group(1)),
        source=MARKUP,
        name="direct-link",
    ),
]


def extract_website(window: ContextWindow, verbose: bool = False) -> Optional[str]:
    return apply_rules(window, WEBSITE_RULES, "website", verbose)


EMAIL_RE = r"([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})"
ASSET_EMAIL_DOMAINS = ("sentry.io", "wixpress.com", "sentry.wixpress.com")


def _plausible_email(value: str) -> bool:
    lowered = value.lower()
    if lowered.endswith(NON_DOCUMENT_EXTENSIONS):
        return False
    domain = lowered.rsplit("@", 1)[-1]
    # Source-owned and asset domains never belong to a listing
    if domain.endswith(ASSET_EMAIL_DOMAINS):
        return False
    return is_external_url(f"https://{domain}/")


EMAIL_RULES = [
    FieldRule(
        re.compile(r'href="mailto:' + EMAIL_RE, re.I),
        transform=lambda m: m.group(1).lower(),
        check=_plausible_email,
        source=MARKUP,
        name="mailto",
    ),
    FieldRule(
        re.compile(r'"email"\s*:\s*"(?:mailto:)?' + EMAIL_RE + '"', re.I),
        transform=lambda m: m.group(1).lower(),
        check=_plausible_email,
        source=MARKUP,
        name="json-email",
    ),
    FieldRule(
        re.compile(r"(?<![\w.])" + EMAIL_RE + r"(?![\w@])"),
        transform=lambda m: m.group(1).lower(),
        check=_plausible_email,
        name="plain",
    ),
]


def extract_email(window: ContextWindow, verbose: bool = False) -> Optional[str]:
    return apply_rules(window, EMAIL_RULES, "email", verbose)


# ---------------------------------------------------------------------------
# Price level
# ---------------------------------------------------------------------------

PRICE_LEVEL_RULES = [
    FieldRule(
        re.compile(r'<span[^>]*aria-label="Price:[^"]*"[^>]*>\s*([$€£¥₩₹]{1,4})\s*<', re.I),
        source=MARKUP,
        name="price-label",
    ),
    FieldRule(
        re.compile(r'"priceRange"\s*:\s*"([$€£¥₩₹]{1,4})"'),
        source=MARKUP,
        name="json-price",
    ),
    FieldRule(
        re.compile(r"(?<![$€£¥₩₹\w])(\${1,4}|€{1,4}|£{1,4}|¥{1,4}|₩{1,4}|₹{1,4})(?=\s*(?:[·•|,]|$)|\s+(?!\d))"),
        name="symbol-run",
    ),
]


def extract_price_level(window: ContextWindow, verbose: bool = False) -> Optional[str]:
    return apply_rules(window, PRICE_LEVEL_RULES, "priceLevel", verbose)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

CATEGORY_CLASS_RE = re.compile(
    r'<(?:span|button|div)[^>]*(?:class="[^"]*(?:DkEaL|category|YhemCb|rllt__category)[^"]*"|'
    r'jsaction="[^"]*category[^"]*")[^>]*>([^<]{2,50})<',
    re.I,
)
CATEGORY_SEGMENT_RE = re.compile(r"[·•|]\s*([^·•|]{2,50}?)\s*(?=[·•|]|$)")
CATEGORY_JSON_RE = re.compile(r'"@type"\s*:\s*"([A-Z][A-Za-z]+)"')
SCHEMA_GENERIC_TYPES = {
    "Place", "Thing", "LocalBusiness", "Organization", "PostalAddress",
    "GeoCoordinates", "AggregateRating", "OpeningHoursSpecification",
    "Review", "Rating", "Person", "WebSite", "WebPage", "ImageObject",
    "BreadcrumbList", "ListItem", "SearchAction",
}
MAX_CATEGORIES = 5


def _split_camel(name: str) -> str:
    return re.sub(r"(?<=[a-z])(?=[A-Z])", " ", name)


def extract_categories(
    window: ContextWindow,
    name: Optional[str] = None,
    verbose: bool = False,
) -> list[str]:
    """Short delimiter-separated labels that pass the category predicate.

    Unlike the scalar fields, categories accumulate across the first rule
    that yields anything, in discovery order.
    """
    exclude = {name.casefold()} if name else set()

    def accept(items: Iterable[str]) -> list[str]:
        out: list[str] = []
        seen = set(exclude)
        for item in items:
            label = re.sub(r"\s+", " ", decode_entities(item)).strip(" ,.")
            key = label.casefold()
            if key in seen or not is_valid_category(label):
                continue
            seen.add(key)
            out.append(label)
            if len(out) >= MAX_CATEGORIES:
                break
        return out

    classed = accept(m.group(1) for m in CATEGORY_CLASS_RE.finditer(window.markup))
    if classed:
        return classed

    json_types = accept(
        _split_camel(m.group(1))
        for m in CATEGORY_JSON_RE.finditer(window.markup)
        if m.group(1) not in SCHEMA_GENERIC_TYPES
    )
    if json_types:
        return json_types

    # "4.5 (120) · Pizza restaurant · $$ · 123 Main St"
    segments = [
        m.group(1)
        for m in CATEGORY_SEGMENT_RE.finditer(window.text)
        if not re.search(r"\d", m.group(1))
    ]
    if verbose and segments:
        console.print(f"[dim]category segments: {segments[:8]}[/dim]")
    return accept(segments)


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------

def _coordinates(m: re.Match) -> Optional[Coordinates]:
    lat, lng = float(m.group(1)), float(m.group(2))
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    if lat == 0 and lng == 0:
        return None
    return Coordinates(latitude=lat, longitude=lng)


DEGREE = r"(-?\d{1,3}\.\d+)"

COORDINATE_RULES = [
    FieldRule(re.compile(r"!3d" + DEGREE + r"!4d" + DEGREE), transform=_coordinates, source=MARKUP, name="data-param"),
    FieldRule(re.compile(r"/@" + DEGREE + "," + DEGREE), transform=_coordinates, source=MARKUP, name="at-path"),
    FieldRule(
        re.compile(r'"latitude"\s*:\s*"?' + DEGREE + r'"?\s*,\s*"longitude"\s*:\s*"?' + DEGREE),
        transform=_coordinates,
        source=MARKUP,
        name="json-geo",
    ),
    FieldRule(
        re.compile(r"\[\s*null\s*,\s*null\s*,\s*" + DEGREE + r"\s*,\s*" + DEGREE + r"\s*\]"),
        transform=_coordinates,
        source=MARKUP,
        name="embedded-array",
    ),
    FieldRule(
        re.compile(r'data-(?:lat|latitude)="' + DEGREE + r'"[^>]*data-(?:lng|lon|longitude)="' + DEGREE + '"'),
        transform=_coordinates,
        source=MARKUP,
        name="data-attrs",
    ),
    FieldRule(
        re.compile(r"[?&](?:ll|sll|center)=" + DEGREE + r"(?:,|%2C)" + DEGREE, re.I),
        transform=_coordinates,
        source=MARKUP,
        name="ll-param",
    ),
    FieldRule(
        re.compile(r"\(\s*" + DEGREE + r"\s*,\s*" + DEGREE + r"\s*\)"),
        transform=_coordinates,
        name="pair",
    ),
]


def extract_coordinates(window: ContextWindow, verbose: bool = False) -> Optional[Coordinates]:
    return apply_rules(window, COORDINATE_RULES, "coordinates", verbose)


# ---------------------------------------------------------------------------
# Hours
# ---------------------------------------------------------------------------

DAY_NAMES = {
    "mon": "Monday", "tue": "Tuesday", "tues": "Tuesday", "wed": "Wednesday",
    "thu": "Thursday", "thur": "Thursday", "thurs": "Thursday", "fri": "Friday",
    "sat": "Saturday", "sun": "Sunday",
}
DAY_RE = (
    r"(Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday|"
    r"Mon|Tues?|Wed|Thu(?:rs?)?|Fri|Sat|Sun)\.?"
)
TIME_RE = r"\d{1,2}(?:[:.]\d{2})?\s*(?:[AaPp]\.?[Mm]\.?)?"
RANGE_RE = (
    r"(" + TIME_RE + r"\s*(?:[-–—]|to)\s*" + TIME_RE
    + r"(?:\s*,\s*" + TIME_RE + r"\s*(?:[-–—]|to)\s*" + TIME_RE + r")*"
    r"|Closed|Open 24 hours|24 hours)"
)
HOURS_RE = re.compile(r"\b" + DAY_RE + r"\s*[:,]?\s*" + RANGE_RE, re.I)


def _canonical_day(raw: str) -> str:
    key = raw.lower().rstrip(".")
    return DAY_NAMES.get(key[:5], DAY_NAMES.get(key[:4], DAY_NAMES.get(key[:3], raw.title())))


def extract_hours(window: ContextWindow, verbose: bool = False) -> Optional[dict[str, str]]:
    """Day name -> free-text range, from the first day mentions in the window."""
    hours: dict[str, str] = {}
    for surface in (window.text, decode_entities(window.markup)):
        for match in HOURS_RE.finditer(surface):
            day = _canonical_day(match.group(1))
            if day not in hours:
                hours[day] = re.sub(r"\s+", " ", match.group(2)).strip()
        if hours:
            break
    if verbose and hours:
        console.print(f"[dim]hours: {hours}[/dim]")
    return hours or None


# ---------------------------------------------------------------------------
# Place id / closed status
# ---------------------------------------------------------------------------

PLACE_ID_RULES = [
    FieldRule(re.compile(r"place_id[:=]([A-Za-z0-9_-]{10,})"), source=MARKUP, name="place-id-param"),
    FieldRule(re.compile(r"\b(ChIJ[A-Za-z0-9_-]{10,})"), source=MARKUP, name="chij-token"),
    FieldRule(re.compile(r'data-pid="([^"]{6,})"'), source=MARKUP, name="data-pid"),
    FieldRule(re.compile(r"!1s(0x[0-9a-f]+:0x[0-9a-f]+)", re.I), source=MARKUP, name="feature-id"),
    FieldRule(re.compile(r'data-cid="(\d{6,})"'), source=MARKUP, name="data-cid"),
]


def extract_place_id(window: ContextWindow, verbose: bool = False) -> Optional[str]:
    return apply_rules(window, PLACE_ID_RULES, "placeId", verbose)


PERMANENTLY_CLOSED_RE = re.compile(r"\bpermanently\s+closed\b", re.I)


def is_permanently_closed(window: ContextWindow) -> bool:
    return bool(PERMANENTLY_CLOSED_RE.search(window.text))


# ---------------------------------------------------------------------------
# Search-result helpers
# ---------------------------------------------------------------------------

DATE_RE = re.compile(
    r"(\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4}\b)",
    re.I,
)


def extract_date(text: str) -> Optional[str]:
    """Publication date shown at the start of a snippet."""
    match = DATE_RE.search(text or "")
    return match.group(1) if match else None


TOTAL_RESULTS_PATTERNS = [
    re.compile(r'id="result-stats"[^>]*>\s*About\s+([\d,.]+)', re.I),
    re.compile(r"About\s+([\d,.]+)\s+results", re.I),
    re.compile(r"\b([\d,.]+)\s+results\b", re.I),
]


def extract_total_results(markup: str) -> Optional[str]:
    """Approximate result count as displayed, e.g. "1,230,000"."""
    for pattern in TOTAL_RESULTS_PATTERNS:
        match = pattern.search(markup)
        if match and re.search(r"\d", match.group(1)):
            return match.group(1).strip(".,")
    return None
