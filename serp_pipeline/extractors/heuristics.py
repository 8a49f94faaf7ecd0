"""Markup heuristics for business listings.

When no structured data is embedded, fall back to class names, aria labels,
place links and finally any short text followed by a rating.
"""

import re
from typing import Iterator, Optional
from urllib.parse import unquote_plus

from serp_pipeline.extractors.markup import attribute, class_pattern, clean_text, decode_entities, inline_text
from serp_pipeline.extractors.strategy import CandidateAnchor, Strategy
from serp_pipeline.extractors.validators import looks_like_address_or_phone
from serp_pipeline.models import RawDocument

A_TAG_RE = re.compile(r"<a\b[^>]*>", re.I)

# Class names the maps and local-results layouts have used for listing titles
NAME_CLASSES = (
    "qBF1Pd",
    "fontHeadlineSmall",
    "OSrXXb",
    "dbg0pd",
    "SPZz6b",
    "NrDZNb",
    "business-name",
)
CLASSED_NAME_RE = re.compile(
    r"<(div|span|h[1-4]|a)\b[^>]*" + class_pattern(*NAME_CLASSES) + r"[^>]*>(.*?)</\1>",
    re.I | re.S,
)
HEADING_ROLE_RE = re.compile(r'<(div|span)\b[^>]*role="heading"[^>]*>(.*?)</\1>', re.I | re.S)
PLACE_PATH_RE = re.compile(r'href="[^"]*/maps/place/([^/"?@]+)', re.I)
TEXT_NODE_RE = re.compile(r">([^<>]{2,80})<")
RATING_AHEAD_RE = re.compile(r"^\W{0,3}\d[.,]\d\s*(?:\(|stars?\b|★)", re.I)


def clean_label(label: str) -> Optional[str]:
    """Name part of a label like "Joe's Pizza4.5(120)Pizza restaurant·123 Main St".

    Cut at the first rating-looking number, else at the first middle dot.
    """
    label = re.sub(r"\s+", " ", label).strip()
    if not label:
        return None
    match = re.match(r"^(.+?)\s*\d+[.,]\d+", label)
    if match and len(match.group(1).strip()) >= 2:
        return match.group(1).strip(" ·,")
    head = label.split("·", 1)[0]
    head = re.sub(r"\d+\.?\d*\s*(?:\(\d[\d,]*\))?$", "", head).strip(" ·,")
    return head if len(head) >= 2 else label


class AriaPlaceLinkStrategy(Strategy):
    """`<a href=".../maps/place/..." aria-label="Name">` result links."""

    name = "aria-place-link"

    def attempt(self, document: RawDocument) -> Iterator[CandidateAnchor]:
        for match in A_TAG_RE.finditer(document.text):
            tag = match.group(0)
            href = attribute(tag, "href")
            label = attribute(tag, "aria-label")
            if not href or not label or "/maps/place/" not in href:
                continue
            name = clean_label(label)
            if name:
                yield CandidateAnchor(text=name, offset=match.start(), strategy=self.name)


class ClassedMarkupStrategy(Strategy):
    """Elements carrying a known listing-title class, or role="heading"."""

    name = "classed-markup"

    def attempt(self, document: RawDocument) -> Iterator[CandidateAnchor]:
        found = []
        for pattern in (CLASSED_NAME_RE, HEADING_ROLE_RE):
            for match in pattern.finditer(document.text):
                text = inline_text(match.group(2))
                if text:
                    found.append((match.start(), text))
        # Discovery order is document order across both patterns
        for offset, text in sorted(found, key=lambda item: item[0]):
            yield CandidateAnchor(text=text, offset=offset, strategy=self.name)


class PlaceAnchorStrategy(Strategy):
    """Names encoded in `/maps/place/<Name>/` paths."""

    name = "place-anchor"

    def attempt(self, document: RawDocument) -> Iterator[CandidateAnchor]:
        for match in PLACE_PATH_RE.finditer(document.text):
            name = unquote_plus(decode_entities(match.group(1))).strip()
            if name:
                yield CandidateAnchor(text=name, offset=match.start(), strategy=self.name)


class TextScanStrategy(Strategy):
    """Last resort: any short text node whose next text is a rating.

    Address and phone lines sit right before the next listing, so they are
    never candidates.
    """

    name = "text-scan"

    def attempt(self, document: RawDocument) -> Iterator[CandidateAnchor]:
        text = document.text
        for match in TEXT_NODE_RE.finditer(text):
            candidate = clean_text(match.group(1))
            if len(candidate) < 2 or not re.search(r"[^\W\d_]", candidate):
                continue
            if looks_like_address_or_phone(candidate):
                continue
            ahead = clean_text(text[match.end() - 1:match.end() + 400])
            if RATING_AHEAD_RE.match(ahead):
                yield CandidateAnchor(text=candidate, offset=match.start(1), strategy=self.name)


PLACE_HEADING_RE = re.compile(
    r"<h1\b[^>]*" + class_pattern("fontHeadlineLarge", "DUwDvf", "x3AX1-LfntMc-header-title-title")
    + r"[^>]*>(.*?)</h1>",
    re.I | re.S,
)
H1_RE = re.compile(r"<h1\b[^>]*>(.*?)</h1>", re.I | re.S)


class PlaceHeadingStrategy(Strategy):
    """The single `<h1>` title of a place details page."""

    name = "place-heading"

    def attempt(self, document: RawDocument) -> Iterator[CandidateAnchor]:
        for pattern in (PLACE_HEADING_RE, H1_RE):
            for match in pattern.finditer(document.text):
                text = inline_text(match.group(1))
                if text:
                    yield CandidateAnchor(text=text, offset=match.start(), strategy=self.name)
