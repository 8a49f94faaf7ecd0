"""Search-result feature extractors.

Each feature (organic results, ads, questions, featured snippet, AI
overview, map pack, knowledge panel, related searches) is its own strategy
chain over the page. Strategies after the first are usually fallbacks:
they only run when the earlier, more specific patterns found nothing.
"""

import re
from dataclasses import replace
from typing import Any, Iterator, Optional

from serp_pipeline.extractors import fields as fx
from serp_pipeline.extractors.context import window_from_fragment
from serp_pipeline.extractors.dedup import name_key, url_key
from serp_pipeline.extractors.markup import attribute, class_pattern, clean_text, inline_text, truncate
from serp_pipeline.extractors.strategy import CandidateAnchor, StrategyChain, strategy
from serp_pipeline.extractors.urls import display_url, resolve_ad_url, resolve_url
from serp_pipeline.extractors.validators import is_valid_name, is_valid_title
from serp_pipeline.models import (
    AdResult,
    FeaturedPassage,
    InfoPanel,
    MapPackEntry,
    OrganicResult,
    QuestionAnswer,
    RawDocument,
    Sitelink,
    SummaryPanel,
    SummarySource,
)

ORGANIC_LIMIT = 10
LIST_LIMIT = 50
BLOCK_LIMIT = 8000
FEATURED_MAX = 500
SUMMARY_MAX = 1000

A_ELEMENT_RE = re.compile(r"(<a\b[^>]*>)(.*?)</a>", re.I | re.S)


def split_blocks(text: str, opener: re.Pattern, stop: Optional[re.Pattern] = None, limit: int = BLOCK_LIMIT):
    """(offset, markup) for each block, from one opener to the next.

    Blocks are cut at the next opener, at `stop`, or after `limit` chars.
    """
    starts = [m.start() for m in opener.finditer(text)]
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else len(text)
        end = min(end, start + limit)
        if stop is not None:
            cut = stop.search(text, start + 1, end)
            if cut:
                end = cut.start()
        yield start, text[start:end]


def links(fragment: str) -> Iterator[tuple[str, str, str]]:
    """(opening tag, href, inner markup) for every anchor element."""
    for match in A_ELEMENT_RE.finditer(fragment):
        href = attribute(match.group(1), "href")
        if href:
            yield match.group(1), href, match.group(2)


def first_match(fragment: str, patterns: list[re.Pattern], min_length: int = 0) -> str:
    """Text of the first pattern whose match is longer than `min_length`."""
    found = ""
    for pattern in patterns:
        match = pattern.search(fragment)
        if match:
            found = clean_text(match.group(1))
            if len(found) > min_length:
                break
    return found


# ---------------------------------------------------------------------------
# Organic results
# ---------------------------------------------------------------------------

RESULT_BLOCK_RE = re.compile(r"<div[^>]*" + class_pattern("MjjYud", "Gx5Zad", "g") + r"[^>]*>", re.I)
BASIC_G_BLOCK_RE = re.compile(r'<div class="g">', re.I)
FOOTER_RE = re.compile(r"<footer\b", re.I)
RESULT_LINK_RE = re.compile(r'<a[^>]*href="((?:/url\?q=|https?://)[^"]+)"[^>]*>', re.I)
TITLE_PATTERNS = [
    re.compile(r"<h3[^>]*>([^<]+)</h3>", re.I),
    re.compile(r'<div[^>]*role="heading"[^>]*>([^<]+)</div>', re.I),
    re.compile(r"<h3[^>]*>(.*?)</h3>", re.I | re.S),
    re.compile(r'<a[^>]*href="[^"]*"[^>]*><div[^>]*>([^<]+)</div>', re.I),
]
SNIPPET_PATTERNS = [
    re.compile(r"<div[^>]*" + class_pattern("VwiC3b", "IsZvec", "s3v9rd") + r"[^>]*>(.*?)</div>", re.I | re.S),
    re.compile(r"<span[^>]*" + class_pattern("aCOpRe", "st") + r"[^>]*>(.*?)</span>", re.I | re.S),
    re.compile(r'<div[^>]*data-sncf="[^"]*"[^>]*>(.*?)</div>', re.I | re.S),
]
BASIC_HEADING_RE = re.compile(
    r"<h3[^>]*" + class_pattern("r") + r'[^>]*>\s*<a[^>]*href="([^"]+)"[^>]*>(.*?)</a>\s*</h3>',
    re.I | re.S,
)
BASIC_SNIPPET_RE = re.compile(r"<span[^>]*" + class_pattern("st", "aCOpRe") + r"[^>]*>(.*?)</span>", re.I | re.S)
G_SNIPPET_PATTERNS = [
    re.compile(r"<span[^>]*" + class_pattern("st") + r"[^>]*>(.*?)</span>", re.I | re.S),
    re.compile(r"<div[^>]*" + class_pattern("s") + r"[^>]*>(.*?)</div>", re.I | re.S),
]
REDIRECT_ANCHOR_RE = re.compile(r'<a[^>]*href="(/url\?q=[^"]+)"[^>]*>(.*?)</a>', re.I | re.S)
FOLLOWING_TEXT_RE = re.compile(r"<(span|div|td)[^>]*>(.{20,300}?)</\1>", re.I | re.S)
DIRECT_ANCHOR_RE = re.compile(r'<a[^>]*href="(https?://[^"]+)"[^>]*>(.*?)</a>', re.I | re.S)
NAV_TITLE_RE = re.compile(r"^(?:here|click|next|prev|more|sign|log|help|learn|about)", re.I)
SITELINK_CLASS_RE = re.compile(class_pattern("fl", "sitelink"), re.I)
CACHED_RE = re.compile(r"cache:", re.I)


def _organic_anchor(offset: int, raw_url: str, title: str, snippet: str, block: str = "") -> Optional[CandidateAnchor]:
    url = resolve_url(raw_url)
    if not url or not title:
        return None
    return CandidateAnchor(
        text=title,
        offset=offset,
        fields={"url": url, "snippet": snippet, "block": block},
    )


def extract_sitelinks(block: str) -> list[Sitelink]:
    sitelinks = []
    for tag, href, inner in links(block):
        if not SITELINK_CLASS_RE.search(tag):
            continue
        url = resolve_url(href)
        title = clean_text(inner)
        if url and title:
            sitelinks.append(Sitelink(title=title, url=url))
    return sitelinks


def parse_organic_block(block: str) -> Optional[tuple[str, str, str]]:
    """(url, title, snippet) of a result block, or None.

    Only the block's first link counts: later links may belong to
    whatever follows the last result.
    """
    match = RESULT_LINK_RE.search(block)
    url = resolve_url(match.group(1)) if match else None
    if not url:
        return None
    title = first_match(block, TITLE_PATTERNS, min_length=2)
    if not title:
        return None
    return url, title, first_match(block, SNIPPET_PATTERNS, min_length=10)


@strategy("result-blocks")
def scan_result_blocks(text: str) -> Iterator[CandidateAnchor]:
    for offset, block in split_blocks(text, RESULT_BLOCK_RE, FOOTER_RE):
        parsed = parse_organic_block(block)
        if parsed:
            url, title, snippet = parsed
            anchor = _organic_anchor(offset, url, title, snippet, block)
            if anchor:
                yield anchor


@strategy("basic-headings", fallback=True)
def scan_basic_headings(text: str) -> Iterator[CandidateAnchor]:
    matches = list(BASIC_HEADING_RE.finditer(text))
    for i, match in enumerate(matches):
        following_end = matches[i + 1].start() if i + 1 < len(matches) else match.end() + 1500
        snippet_match = BASIC_SNIPPET_RE.search(text, match.end(), following_end)
        snippet = clean_text(snippet_match.group(1)) if snippet_match else ""
        anchor = _organic_anchor(match.start(), match.group(1), inline_text(match.group(2)), snippet)
        if anchor:
            yield anchor


@strategy("g-blocks", fallback=True)
def scan_g_blocks(text: str) -> Iterator[CandidateAnchor]:
    for offset, block in split_blocks(text, BASIC_G_BLOCK_RE, FOOTER_RE):
        found = next(links(block), None)
        if not found:
            continue
        _, href, inner = found
        snippet = first_match(block, G_SNIPPET_PATTERNS)
        anchor = _organic_anchor(offset, href, inline_text(inner), snippet, block)
        if anchor:
            yield anchor


@strategy("redirect-anchors", fallback=True)
def scan_redirect_anchors(text: str) -> Iterator[CandidateAnchor]:
    for match in REDIRECT_ANCHOR_RE.finditer(text):
        following = FOLLOWING_TEXT_RE.search(text, match.end(), match.end() + 1000)
        snippet = clean_text(following.group(2)) if following else ""
        anchor = _organic_anchor(match.start(), match.group(1), inline_text(match.group(2)), snippet)
        if anchor:
            yield anchor


@strategy("direct-links", fallback=True)
def scan_direct_links(text: str) -> Iterator[CandidateAnchor]:
    for match in DIRECT_ANCHOR_RE.finditer(text):
        title = inline_text(match.group(2))
        if not 5 <= len(title) <= 200 or NAV_TITLE_RE.match(title):
            continue
        anchor = _organic_anchor(match.start(), match.group(1), title, "")
        if anchor:
            yield anchor


def _url_of(anchor: CandidateAnchor) -> Optional[str]:
    return url_key(anchor.fields.get("url"))


def _assemble_organic(document: RawDocument, anchor: CandidateAnchor, position: int) -> OrganicResult:
    url = anchor.fields["url"]
    snippet = anchor.fields.get("snippet", "")
    block = anchor.fields.get("block", "")
    return OrganicResult(
        position=position,
        title=anchor.text,
        url=url,
        display_url=display_url(url),
        snippet=snippet,
        sitelinks=extract_sitelinks(block) if block else [],
        date=fx.extract_date(snippet),
        cached=bool(block and CACHED_RE.search(block)),
    )


def extract_organic_results(
    document,
    limit: int = ORGANIC_LIMIT,
    verbose: bool = False,
    check_challenge: bool = True,
) -> list[OrganicResult]:
    chain = StrategyChain(
        "organic",
        [scan_result_blocks, scan_basic_headings, scan_g_blocks, scan_redirect_anchors, scan_direct_links],
        _assemble_organic,
        key=_url_of,
        validator=is_valid_title,
        target=limit,
        verbose=verbose,
    )
    return list(chain.run(document, check_challenge=check_challenge).records)


# ---------------------------------------------------------------------------
# Ads
# ---------------------------------------------------------------------------

TOP_ADS_RE = re.compile(r"<div[^>]*(?:id=\"tads\"|" + class_pattern("uEierd", "mnr-c") + r")[^>]*>", re.I)
TOP_ADS_END_RE = re.compile(
    r"<div[^>]*(?:id=\"(?:res|search|center_col)\"|" + class_pattern("MjjYud", "hlcw0c") + r")",
    re.I,
)
BOTTOM_ADS_RE = re.compile(r'<div[^>]*id="bottomads"[^>]*>', re.I)
AD_LINK_CLASS_RE = re.compile(r"data-rw|" + class_pattern("sVXRqc", "Krnil"), re.I)
DIV_TEXT_RE = re.compile(r"<div[^>]*>(.*?)</div>", re.I | re.S)
SPONSORED_LABEL_RE = re.compile(r">\s*(?:Sponsored|Ad)\s*[·•]?\s*<", re.I)
ADS_SECTION_LIMIT = 30000


def _ad_section(text: str, opener: re.Pattern, stop: re.Pattern) -> Optional[tuple[int, str]]:
    match = opener.search(text)
    if not match:
        return None
    end = min(len(text), match.end() + ADS_SECTION_LIMIT)
    cut = stop.search(text, match.end(), end)
    return match.start(), text[match.start():cut.start() if cut else end]


def _section_ads(offset: int, section: str, is_top: bool) -> Iterator[CandidateAnchor]:
    for match in A_ELEMENT_RE.finditer(section):
        tag, inner = match.group(1), match.group(2)
        if not AD_LINK_CLASS_RE.search(tag):
            continue
        url = resolve_ad_url(attribute(tag, "href"))
        title = clean_text(inner)
        if not url or not title:
            continue
        description = DIV_TEXT_RE.search(section, match.end(), match.end() + 500)
        yield CandidateAnchor(
            text=title,
            offset=offset + match.start(),
            fields={
                "url": url,
                "description": clean_text(description.group(1)) if description else "",
                "is_top": is_top,
            },
        )


@strategy("top-ads")
def scan_top_ads(text: str) -> Iterator[CandidateAnchor]:
    section = _ad_section(text, TOP_ADS_RE, TOP_ADS_END_RE)
    if section:
        yield from _section_ads(*section, is_top=True)


@strategy("bottom-ads")
def scan_bottom_ads(text: str) -> Iterator[CandidateAnchor]:
    section = _ad_section(text, BOTTOM_ADS_RE, FOOTER_RE)
    if section:
        yield from _section_ads(*section, is_top=False)


@strategy("sponsored-labels", fallback=True)
def scan_sponsored_labels(text: str) -> Iterator[CandidateAnchor]:
    for label in SPONSORED_LABEL_RE.finditer(text):
        link = A_ELEMENT_RE.search(text, label.end(), label.end() + 2000)
        if not link:
            continue
        url = resolve_ad_url(attribute(link.group(1), "href"))
        title = clean_text(link.group(2))
        if not url or not title:
            continue
        description = DIV_TEXT_RE.search(text, link.end(), link.end() + 500)
        yield CandidateAnchor(
            text=title,
            offset=link.start(),
            fields={
                "url": url,
                "description": clean_text(description.group(1)) if description else "",
                "is_top": True,
            },
        )


def _assemble_ad(document: RawDocument, anchor: CandidateAnchor, position: int) -> AdResult:
    url = anchor.fields["url"]
    return AdResult(
        position=position,
        title=anchor.text,
        url=url,
        display_url=display_url(url),
        description=anchor.fields.get("description", ""),
        is_top=anchor.fields.get("is_top", True),
    )


def extract_ads(
    document,
    limit: int = LIST_LIMIT,
    verbose: bool = False,
    check_challenge: bool = True,
) -> list[AdResult]:
    chain = StrategyChain(
        "ads",
        [scan_top_ads, scan_bottom_ads, scan_sponsored_labels],
        _assemble_ad,
        key=_url_of,
        validator=is_valid_title,
        target=limit,
        verbose=verbose,
    )
    return list(chain.run(document, check_challenge=check_challenge).records)


# ---------------------------------------------------------------------------
# People also ask
# ---------------------------------------------------------------------------

DATA_Q_RE = re.compile(r'data-q="([^"]+)"', re.I)
QA_SNIPPET_RE = re.compile(r"<div[^>]*" + class_pattern("wDYxhc", "LGOjhe") + r"[^>]*>(.*?)</div>", re.I | re.S)
HREF_RE = re.compile(r'<a[^>]*href="([^"]+)"', re.I)
ARIA_EXPANDED_RE = re.compile(r'aria-expanded="[^"]*"[^>]*>[\s\S]{0,500}?<span[^>]*>([^<]+)</span>', re.I)
QUESTION_LIKE_RE = re.compile(
    r"\?$|^(?:what|how|why|when|where|which|who|is|are|can|do|does|will|should)\b",
    re.I,
)
RELATED_QUESTION_RE = re.compile(
    r'<div[^>]*jsname="[^"]*"[^>]*' + class_pattern("related-question", "CBv0Pd")
    + r"[^>]*>[\s\S]{0,800}?<span[^>]*>([^<]{15,200})</span>",
    re.I,
)
QUESTION_SEGMENT_LIMIT = 3000


@strategy("data-q")
def scan_data_q(text: str) -> Iterator[CandidateAnchor]:
    matches = list(DATA_Q_RE.finditer(text))
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else match.end() + QUESTION_SEGMENT_LIMIT
        segment = text[match.end():min(end, match.end() + QUESTION_SEGMENT_LIMIT)]
        snippet = QA_SNIPPET_RE.search(segment)
        href = HREF_RE.search(segment)
        yield CandidateAnchor(
            text=clean_text(match.group(1)),
            offset=match.start(),
            fields={
                "snippet": (clean_text(snippet.group(1)) or None) if snippet else None,
                "url": resolve_url(href.group(1)) if href else None,
            },
        )


@strategy("aria-expanded", fallback=True)
def scan_aria_expanded(text: str) -> Iterator[CandidateAnchor]:
    for match in ARIA_EXPANDED_RE.finditer(text):
        question = clean_text(match.group(1))
        if 15 < len(question) < 200 and QUESTION_LIKE_RE.search(question):
            yield CandidateAnchor(text=question, offset=match.start())


@strategy("related-questions", fallback=True)
def scan_related_questions(text: str) -> Iterator[CandidateAnchor]:
    for match in RELATED_QUESTION_RE.finditer(text):
        yield CandidateAnchor(text=clean_text(match.group(1)), offset=match.start())


def _question_key(anchor: CandidateAnchor) -> Optional[str]:
    return name_key(anchor.text)


def _assemble_question(document: RawDocument, anchor: CandidateAnchor, position: int) -> QuestionAnswer:
    return QuestionAnswer(
        question=anchor.text,
        snippet=anchor.fields.get("snippet"),
        url=anchor.fields.get("url"),
    )


def extract_questions(
    document,
    limit: int = LIST_LIMIT,
    verbose: bool = False,
    check_challenge: bool = True,
) -> list[QuestionAnswer]:
    chain = StrategyChain(
        "questions",
        [scan_data_q, scan_aria_expanded, scan_related_questions],
        _assemble_question,
        key=_question_key,
        validator=is_valid_title,
        target=limit,
        verbose=verbose,
    )
    return list(chain.run(document, check_challenge=check_challenge).records)


# ---------------------------------------------------------------------------
# Featured snippet / AI overview
# ---------------------------------------------------------------------------

FEATURED_PATTERNS = [
    re.compile(
        r"<div[^>]*" + class_pattern("IZ6rdc", "xpdopen", "kno-rdesc", "LGOjhe", "ayqGOc")
        + r"[^>]*>(.*?)</div>\s*<div",
        re.I | re.S,
    ),
    re.compile(r"<div[^>]*" + class_pattern("mod", "wDYxhc") + r'[^>]*data-md="[^"]*"[^>]*>(.*?)</div>', re.I | re.S),
    re.compile(r'<div[^>]*data-tts="answers"[^>]*>(.*?)</div>', re.I | re.S),
]
EXTERNAL_HREF_RE = re.compile(r'<a[^>]*href="(https?://[^"]+)"', re.I)
PASSAGE_TITLE_PATTERNS = [
    re.compile(r"<h[23][^>]*>([^<]+)</h[23]>", re.I),
    re.compile(r"<a[^>]*>([^<]+)</a>", re.I),
]
LIST_RE = re.compile(r"<[uo]l\b", re.I)
TABLE_RE = re.compile(r"<table\b", re.I)

SUMMARY_PATTERNS = [
    re.compile(
        r"<div[^>]*" + class_pattern("wSMpvd", "SoJBgd", "YsSBbe", "KuSmQb", "JMWMJ")
        + r"[^>]*>(.*?)</div>\s*</div>\s*</div>",
        re.I | re.S,
    ),
    re.compile(r'<div[^>]*data-attrid="[^"]*ai[^"]*"[^>]*>(.*?)</div>', re.I | re.S),
    re.compile(
        r"<div[^>]*" + class_pattern("mod") + r"[^>]*>[\s\S]*?(?:AI Overview|AI-generated)(.*?)</div>\s*</div>",
        re.I | re.S,
    ),
]
SOURCE_LINK_RE = re.compile(r'<a[^>]*href="(https?://[^"]+)"[^>]*>([^<]*)</a>', re.I)


def _passage_shape(content: str) -> str:
    if LIST_RE.search(content):
        return "list"
    if TABLE_RE.search(content):
        return "table"
    return "paragraph"


def _passage_strategy(index: int, pattern: re.Pattern):
    @strategy(f"featured-{index}", fallback=index > 1)
    def scan(text: str) -> Iterator[CandidateAnchor]:
        for match in pattern.finditer(text):
            content = match.group(1)
            url = next((u for u in (resolve_url(h) for h in EXTERNAL_HREF_RE.findall(content)) if u), "")
            yield CandidateAnchor(
                text=clean_text(content),
                offset=match.start(),
                fields={
                    "url": url,
                    "title": first_match(content, PASSAGE_TITLE_PATTERNS),
                    "type": _passage_shape(content),
                },
            )
    return scan


def _summary_strategy(index: int, pattern: re.Pattern):
    @strategy(f"summary-{index}", fallback=index > 1)
    def scan(text: str) -> Iterator[CandidateAnchor]:
        for match in pattern.finditer(text):
            content = match.group(1)
            sources: list[SummarySource] = []
            seen = set()
            for href, title in SOURCE_LINK_RE.findall(content):
                url = resolve_url(href)
                title = clean_text(title)
                if url and title and url not in seen:
                    seen.add(url)
                    sources.append(SummarySource(title=title, url=url))
            yield CandidateAnchor(text=clean_text(content), offset=match.start(), fields={"sources": sources})
    return scan


def _min_length(n: int):
    return lambda text: len(text.strip()) >= n


def _assemble_passage(document: RawDocument, anchor: CandidateAnchor, position: int) -> FeaturedPassage:
    return FeaturedPassage(
        text=truncate(anchor.text, FEATURED_MAX),
        url=anchor.fields.get("url", ""),
        title=anchor.fields.get("title", ""),
        type=anchor.fields.get("type", "unknown"),
    )


def _assemble_summary(document: RawDocument, anchor: CandidateAnchor, position: int) -> SummaryPanel:
    return SummaryPanel(text=truncate(anchor.text, SUMMARY_MAX), sources=anchor.fields.get("sources", []))


def extract_featured_passage(
    document,
    verbose: bool = False,
    check_challenge: bool = True,
) -> Optional[FeaturedPassage]:
    chain = StrategyChain(
        "featured",
        [_passage_strategy(i, p) for i, p in enumerate(FEATURED_PATTERNS, 1)],
        _assemble_passage,
        validator=_min_length(20),
        target=1,
        verbose=verbose,
    )
    return chain.run(document, check_challenge=check_challenge).first


def extract_summary_panel(document, verbose: bool = False, check_challenge: bool = True) -> Optional[SummaryPanel]:
    chain = StrategyChain(
        "summary",
        [_summary_strategy(i, p) for i, p in enumerate(SUMMARY_PATTERNS, 1)],
        _assemble_summary,
        validator=_min_length(30),
        target=1,
        verbose=verbose,
    )
    return chain.run(document, check_challenge=check_challenge).first


# ---------------------------------------------------------------------------
# Map pack
# ---------------------------------------------------------------------------

MAP_CARD_RE = re.compile(r"<div[^>]*" + class_pattern("VkpGBb", "rllt__link", "cXedhc", "X7jIDe") + r"[^>]*>", re.I)
CID_CARD_RE = re.compile(r'<div[^>]*data-cid="[^"]*"[^>]*>', re.I)
CARD_NAME_PATTERNS = [
    re.compile(r"<span[^>]*" + class_pattern("OSrXXb", "dbg0pd", "SPZz6b") + r"[^>]*>([^<]+)</span>", re.I),
    re.compile(r'<div[^>]*role="heading"[^>]*>([^<]+)</div>', re.I),
    re.compile(r'aria-label="([^"]{3,60})"', re.I),
]
CARD_LIMIT = 3000


def _card_strategy(name: str, opener: re.Pattern, fallback: bool):
    @strategy(name, fallback=fallback)
    def scan(text: str) -> Iterator[CandidateAnchor]:
        for offset, card in split_blocks(text, opener, FOOTER_RE, limit=CARD_LIMIT):
            title = first_match(card, CARD_NAME_PATTERNS)
            if title:
                yield CandidateAnchor(text=title, offset=offset, fields={"card": card})
    return scan


scan_map_cards = _card_strategy("map-cards", MAP_CARD_RE, fallback=False)
scan_cid_cards = _card_strategy("cid-cards", CID_CARD_RE, fallback=True)


def _assemble_map_entry(document: RawDocument, anchor: CandidateAnchor, position: int) -> MapPackEntry:
    window = window_from_fragment(anchor.fields["card"])
    categories = fx.extract_categories(window, name=anchor.text)
    return MapPackEntry(
        name=anchor.text,
        address=fx.extract_address(window),
        rating=fx.extract_rating(window),
        review_count=fx.extract_review_count(window),
        category=categories[0] if categories else None,
        phone=fx.extract_phone(window),
    )


def extract_map_pack(
    document,
    limit: int = LIST_LIMIT,
    verbose: bool = False,
    check_challenge: bool = True,
) -> list[MapPackEntry]:
    chain = StrategyChain(
        "map-pack",
        [scan_map_cards, scan_cid_cards],
        _assemble_map_entry,
        validator=is_valid_name,
        target=limit,
        verbose=verbose,
    )
    return list(chain.run(document, check_challenge=check_challenge).records)


# ---------------------------------------------------------------------------
# Knowledge panel
# ---------------------------------------------------------------------------

PANEL_CONTAINER_RE = re.compile(
    r"<div[^>]*" + class_pattern("kp-wholepage", "knowledge-panel", "kno-result", "osrp-blk") + r"[^>]*>",
    re.I,
)
PANEL_TITLE_ATTR_RE = re.compile(r'<div[^>]*data-attrid="title"[^>]*>', re.I)
PANEL_TITLE_PATTERNS = [
    re.compile(r'data-attrid="title"[^>]*>(?:\s*<[^>]+>)*\s*([^<]+)<', re.I),
    re.compile(r"<h2[^>]*" + class_pattern("qrShPb", "kno-ecr-pt") + r"[^>]*>(?:\s*<[^>]+>)*\s*([^<]+)", re.I),
]
PANEL_TYPE_PATTERNS = [
    re.compile(r'data-attrid="subtitle"[^>]*>(?:\s*<[^>]+>)*\s*([^<]+)<', re.I),
    re.compile(r"<div[^>]*" + class_pattern("wwUB2c", "YhemCb") + r"[^>]*>(?:\s*<[^>]+>)*\s*([^<]+)", re.I),
]
PANEL_DESCRIPTION_PATTERNS = [
    re.compile(r'data-attrid="description"[^>]*>[\s\S]*?<span[^>]*>([^<]+)', re.I),
    re.compile(r"<div[^>]*" + class_pattern("kno-rdesc", "LGOjhe") + r"[^>]*>[\s\S]*?<span[^>]*>([^<]+)", re.I),
]
PANEL_LINK_CLASS_RE = re.compile(class_pattern("ruhjFe", "ab_button"), re.I)
PANEL_ATTRIBUTE_RE = re.compile(
    r'data-attrid="(?:(?:kc|hw|ss):/[^"]*?/)?([^"]+)"[^>]*>[\s\S]{0,600}?<span[^>]*>([^<]+)</span>',
    re.I,
)
PANEL_RESERVED_KEYS = {"title", "subtitle", "description"}
PANEL_LIMIT = 20000


def panel_attributes(panel: str) -> dict[str, str]:
    """Generic key/value rows, minus keys already used for title/type/description."""
    attributes: dict[str, str] = {}
    for raw_key, raw_value in PANEL_ATTRIBUTE_RE.findall(panel):
        key = raw_key.rsplit(":", 1)[-1].replace("_", " ").strip()
        value = clean_text(raw_value)
        if not key or not value or key.lower() in PANEL_RESERVED_KEYS:
            continue
        attributes.setdefault(key, value)
    return attributes


def _panel_link(panel: str) -> Optional[str]:
    for tag, href, _ in links(panel):
        if PANEL_LINK_CLASS_RE.search(tag):
            url = resolve_url(href)
            if url:
                return url
    return None


def _panel_strategy(name: str, opener: re.Pattern, fallback: bool):
    @strategy(name, fallback=fallback)
    def scan(text: str) -> Iterator[CandidateAnchor]:
        for match in opener.finditer(text):
            panel = text[match.start():match.start() + PANEL_LIMIT]
            footer = FOOTER_RE.search(panel)
            if footer:
                panel = panel[:footer.start()]
            title = first_match(panel, PANEL_TITLE_PATTERNS)
            if not title:
                continue
            yield CandidateAnchor(
                text=title,
                offset=match.start(),
                fields={
                    "type": first_match(panel, PANEL_TYPE_PATTERNS) or None,
                    "description": first_match(panel, PANEL_DESCRIPTION_PATTERNS) or None,
                    "url": _panel_link(panel),
                    "attributes": panel_attributes(panel),
                },
            )
    return scan


scan_panel_container = _panel_strategy("panel-container", PANEL_CONTAINER_RE, fallback=False)
scan_panel_attrids = _panel_strategy("panel-attrids", PANEL_TITLE_ATTR_RE, fallback=True)

is_valid_entity_title = replace(is_valid_title, min_length=2)


def _assemble_panel(document: RawDocument, anchor: CandidateAnchor, position: int) -> InfoPanel:
    return InfoPanel(
        title=anchor.text,
        type=anchor.fields.get("type"),
        description=anchor.fields.get("description"),
        url=anchor.fields.get("url"),
        attributes=anchor.fields.get("attributes", {}),
    )


def extract_info_panel(document, verbose: bool = False, check_challenge: bool = True) -> Optional[InfoPanel]:
    chain = StrategyChain(
        "info-panel",
        [scan_panel_container, scan_panel_attrids],
        _assemble_panel,
        validator=is_valid_entity_title,
        target=1,
        verbose=verbose,
    )
    return chain.run(document, check_challenge=check_challenge).first


# ---------------------------------------------------------------------------
# Related searches
# ---------------------------------------------------------------------------

RELATED_PATTERNS = [
    re.compile(
        r"<a[^>]*" + class_pattern("k8XOCe", "s75CSd", "BVG0Nb") + r"[^>]*>[\s\S]{0,400}?<div[^>]*>(.*?)</div>",
        re.I | re.S,
    ),
    re.compile(
        r"<p[^>]*" + class_pattern("s6JM6d", "r2fjmd") + r"[^>]*>[\s\S]{0,400}?<span[^>]*>(.*?)</span>",
        re.I | re.S,
    ),
    re.compile(r'<a[^>]*href="/search\?q=[^"]*"[^>]*class="[^"]*"[^>]*>([^<]+)</a>', re.I),
]


def _related_strategy(index: int, pattern: re.Pattern):
    @strategy(f"related-{index}", fallback=index > 1)
    def scan(text: str) -> Iterator[CandidateAnchor]:
        for match in pattern.finditer(text):
            yield CandidateAnchor(text=inline_text(match.group(1)), offset=match.start())
    return scan


def _is_related_query(text: str) -> bool:
    return 2 < len(text.strip()) < 100


def _assemble_related(document: RawDocument, anchor: CandidateAnchor, position: int) -> str:
    return anchor.text


def extract_related_queries(
    document,
    limit: int = LIST_LIMIT,
    verbose: bool = False,
    check_challenge: bool = True,
) -> list[str]:
    chain = StrategyChain(
        "related",
        [_related_strategy(i, p) for i, p in enumerate(RELATED_PATTERNS, 1)],
        _assemble_related,
        validator=_is_related_query,
        target=limit,
        verbose=verbose,
    )
    return list(chain.run(document, check_challenge=check_challenge).records)


def feature_counts(**features: Any) -> str:
    """`organic=10 ads=2 ...` summary line for logging."""
    parts = []
    for name, value in features.items():
        if isinstance(value, list):
            parts.append(f"{name}={len(value)}")
        else:
            parts.append(f"{name}={'yes' if value else 'no'}")
    return " ".join(parts)
