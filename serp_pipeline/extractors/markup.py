"""Small helpers for working on raw markup fragments.

The strategies scan the raw document with regular expressions so that every
match keeps its offset; these helpers turn matched fragments into text.
"""

import html
import re
from typing import Optional

TAG_RE = re.compile(r"<[^>]+>")
SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1>", re.I | re.S)
WHITESPACE_RE = re.compile(r"\s+")


def decode_entities(text: str) -> str:
    """Decode HTML entities (&amp;, &#39;, &nbsp; ...)."""
    return html.unescape(text).replace("\xa0", " ")


def strip_tags(fragment: str) -> str:
    """Drop tags from a markup fragment, leaving raw (undecoded) text."""
    return TAG_RE.sub("", fragment).strip()


def clean_text(fragment: str) -> str:
    """Tags removed, entities decoded, whitespace collapsed."""
    text = TAG_RE.sub(" ", SCRIPT_STYLE_RE.sub(" ", fragment))
    return WHITESPACE_RE.sub(" ", decode_entities(text)).strip()


def inline_text(fragment: str) -> str:
    """Like clean_text, but tags are removed without inserting spaces.

    Titles are often split across inline tags (`<b>Foo</b>bar`).
    """
    return WHITESPACE_RE.sub(" ", decode_entities(strip_tags(fragment))).strip()


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]


def attribute(tag: str, name: str) -> Optional[str]:
    """Decoded value of a double-quoted attribute in an opening tag."""
    match = re.search(r"(?<![\w-])" + re.escape(name) + r'\s*=\s*"([^"]*)"', tag, re.I)
    return decode_entities(match.group(1)) if match else None


def class_pattern(*names: str) -> str:
    """Regex fragment matching a class attribute containing any of `names` as a whole token."""
    tokens = "|".join(re.escape(n) for n in names)
    return r'class="[^"]*(?<![\w-])(?:' + tokens + r')(?![\w-])[^"]*"'
