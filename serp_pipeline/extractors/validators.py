"""Validity predicates for candidate names, titles and categories.

Every predicate here is pure: no state, no I/O, same verdict for the same
input.
"""

import re
from dataclasses import dataclass
from typing import Optional

# UI chrome, navigation and promotional phrases that show up where a business
# name would be. Matched case-insensitively against the whole candidate.
NAME_DENYLIST = [
    r"sponsored",
    r"ads?",
    r"advertisement",
    r"open now",
    r"open 24 hours",
    r"closed( now)?",
    r"opens? (soon|at .*)",
    r"closes? (soon|at .*)",
    r"temporarily closed",
    r"permanently closed",
    r"see (more|all|results|photos|outdoor seating)",
    r"show (more|all|less)",
    r"view (more|all|map|larger map)",
    r"more (info|results|places|businesses|options)",
    r"less",
    r"directions",
    r"website",
    r"call",
    r"save",
    r"share",
    r"send to (your )?phone",
    r"nearby",
    r"search( this area)?",
    r"results?",
    r"reviews?",
    r"write a review",
    r"photos?",
    r"menu",
    r"overview",
    r"about",
    r"order (online|now|delivery|pickup)",
    r"reserve a table",
    r"book (now|online|a table)",
    r"get (a )?(quote|directions|started)",
    r"learn more",
    r"click here",
    r"sign (in|up)",
    r"log ?in",
    r"help",
    r"feedback",
    r"privacy",
    r"terms",
    r"settings",
    r"google( maps)?",
    r"maps",
    r"dine-in",
    r"takeout",
    r"delivery",
    r"no delivery",
    r"curbside pickup",
    r"in-store (shopping|pickup)",
    r"onsite services",
    r"online appointments",
    r"about these results",
]

# Promotional phrases anywhere inside the candidate
PROMO_PATTERNS = [
    r"\bfree shipping\b",
    r"\blimited time\b",
    r"\b\d+% off\b",
    r"\bbest .+ near me\b",
    r"\bnear me\b",
    r"\btop \d+ \w+",
    r"\bcall (us )?(now|today)\b",
    r"\bsale ends\b",
    r"\bbuy now\b",
    r"\bdeals? of the day\b",
]

TITLE_DENYLIST = [
    r"cached",
    r"similar",
    r"translate( this page)?",
    r"more results",
    r"sign in",
    r"help",
]

QUOTED_RE = re.compile(r"""^\s*["“”'‘’«].*["“”'’‘»]\s*$""", re.S)
ALPHA_RE = re.compile(r"[^\W\d_]")


def _compile_full(patterns: list[str]) -> re.Pattern:
    return re.compile(r"^\s*(?:" + "|".join(patterns) + r")\s*[.!:]?\s*$", re.I)


@dataclass(frozen=True)
class NameValidator:
    """Accept/reject predicate for entity names and result titles."""

    min_length: int = 2
    max_length: int = 80
    max_words: int = 8
    reject_quoted: bool = True
    max_shouting_length: int = 20
    denylist: re.Pattern = _compile_full(NAME_DENYLIST)
    promo: Optional[re.Pattern] = re.compile("|".join(PROMO_PATTERNS), re.I)

    def __call__(self, candidate: str) -> bool:
        return self.reject_reason(candidate) is None

    def reject_reason(self, candidate: str) -> Optional[str]:
        """Why a candidate is rejected, or None when it is accepted."""
        if candidate is None:
            return "missing"
        text = candidate.strip()
        if not self.min_length <= len(text) <= self.max_length:
            return "length"
        if self.reject_quoted and QUOTED_RE.match(text):
            return "quoted"
        if self.max_words and len(text.split()) > self.max_words:
            return "sentence"
        if self.denylist.match(text):
            return "denylist"
        if self.promo is not None and self.promo.search(text):
            return "denylist"
        if not ALPHA_RE.search(text):
            return "no_letters"
        if self.max_shouting_length and text.isupper() and len(text) > self.max_shouting_length:
            return "banner"
        return None


is_valid_name = NameValidator()

is_valid_title = NameValidator(
    min_length=3,
    max_length=200,
    max_words=0,
    reject_quoted=False,
    max_shouting_length=0,
    denylist=_compile_full(TITLE_DENYLIST),
    promo=None,
)


CATEGORY_STATUS_RE = re.compile(
    r"^(?:open|closed|opens?|closes?|open now|closed now|open 24 hours|"
    r"temporarily closed|permanently closed|opens? soon|closes? soon|"
    r"(?:opens?|closes?) .*\d.*)$",
    re.I,
)
CATEGORY_RATING_RE = re.compile(
    r"^(?:stars?|ratings?|reviews?|rated|no reviews|\d+(?:\.\d+)?\s*(?:stars?|reviews?)?|"
    r"\(\d[\d,]*\))$",
    re.I,
)


ADDRESS_OR_PHONE_RE = re.compile(r"^\d+\s|\d{3}[-.\s]\d{4}")


def looks_like_address_or_phone(candidate: str) -> bool:
    """Starts with a street number or carries a phone-number digit run."""
    return bool(candidate and ADDRESS_OR_PHONE_RE.search(candidate.strip()))


def is_valid_category(candidate: str) -> bool:
    """Short label that plausibly names a business type."""
    text = candidate.strip() if candidate else ""
    if not 2 <= len(text) <= 50:
        return False
    if not ALPHA_RE.search(text):
        return False
    if CATEGORY_STATUS_RE.match(text) or CATEGORY_RATING_RE.match(text):
        return False
    return not looks_like_address_or_phone(text)
