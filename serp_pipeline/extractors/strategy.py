"""Strategy interface and the short-circuiting strategy chain.

A Strategy is one way of finding candidates in a whole document, built on
one assumption about the document's shape. The chain runs strategies in
priority order, filters and deduplicates what they yield, hands survivors
to an assembler and stops as soon as it has enough records.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from rich.console import Console

from serp_pipeline.errors import ChallengeDetected
from serp_pipeline.extractors.dedup import Deduplicator, name_key
from serp_pipeline.extractors.validators import is_valid_name
from serp_pipeline.models import RawDocument, StrategyResult

console = Console(stderr=True)

# Substrings that only appear on block / consent-wall / challenge pages.
# Matched against the lowercased document. A page merely mentioning
# captchas is not a block page.
CHALLENGE_MARKERS = (
    "detected unusual traffic",
    "unusual traffic from your computer network",
    'id="captcha-form"',
    "knitsail",
    "/httpservice/retry/enablejs",
    "/sorry/index",
)


def find_challenge_marker(text: str) -> Optional[str]:
    lowered = text.lower()
    for marker in CHALLENGE_MARKERS:
        if marker in lowered:
            return marker
    return None


def detect_challenge(text: str) -> None:
    """Raise ChallengeDetected if the document is a block page."""
    marker = find_challenge_marker(text)
    if marker:
        console.print(f"[red]Challenge page detected ({marker!r})[/red]")
        raise ChallengeDetected(marker)


def as_document(document: Union[RawDocument, str, None]) -> RawDocument:
    if isinstance(document, RawDocument):
        return document
    return RawDocument(text=document or "")


@dataclass(frozen=True)
class CandidateAnchor:
    """A located candidate name/title plus whatever the strategy already knows."""
    text: str
    offset: int
    strategy: str = ""
    fields: dict[str, Any] = field(default_factory=dict)


class Strategy:
    """One document-shape assumption.

    Subclasses implement `attempt`. A `fallback` strategy only runs while
    the chain has produced nothing yet.
    """

    name = "strategy"
    fallback = False

    def attempt(self, document: RawDocument) -> Iterable[CandidateAnchor]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class ScanStrategy(Strategy):
    """Wrap a plain `scan(text) -> anchors` function as a Strategy."""

    def __init__(self, name: str, scan: Callable[[str], Iterable[CandidateAnchor]], fallback: bool = False):
        self.name = name
        self.scan = scan
        self.fallback = fallback

    def attempt(self, document: RawDocument) -> Iterable[CandidateAnchor]:
        return self.scan(document.text)


def strategy(name: str, fallback: bool = False) -> Callable[[Callable], ScanStrategy]:
    """Decorator form of ScanStrategy."""
    def wrap(scan: Callable[[str], Iterable[CandidateAnchor]]) -> ScanStrategy:
        return ScanStrategy(name, scan, fallback=fallback)
    return wrap


def anchor_name_key(anchor: CandidateAnchor) -> Optional[str]:
    return name_key(anchor.text)


# assemble(document, anchor, position) -> record or None
Assembler = Callable[[RawDocument, CandidateAnchor, int], Any]


class StrategyChain:
    """Run strategies in order until `target` unique records are collected.

    Per candidate: validate the anchor text, compute its dedup key, skip
    keys already emitted, assemble, then record the key. A strategy that
    raises is treated as having found nothing.
    """

    def __init__(
        self,
        name: str,
        strategies: Sequence[Strategy],
        assemble: Assembler,
        key: Callable[[CandidateAnchor], Optional[str]] = anchor_name_key,
        validator: Callable[[str], bool] = is_valid_name,
        target: int = 20,
        verbose: bool = False,
    ):
        self.name = name
        self.strategies = list(strategies)
        self.assemble = assemble
        self.key = key
        self.validator = validator
        self.target = target
        self.verbose = verbose

    def run(
        self,
        document: Union[RawDocument, str, None],
        target: Optional[int] = None,
        check_challenge: bool = True,
    ) -> StrategyResult:
        document = as_document(document)
        if document.is_empty:
            return StrategyResult(records=(), exhausted=True)
        if check_challenge:
            detect_challenge(document.text)

        target = max(1, target or self.target)
        dedup = Deduplicator()
        records: list[Any] = []

        for strat in self.strategies:
            if strat.fallback and records:
                continue
            found = len(records)
            try:
                for anchor in strat.attempt(document):
                    if not anchor.strategy:
                        anchor = replace(anchor, strategy=strat.name)
                    record = self._accept(document, anchor, dedup, len(records) + 1)
                    if record is None:
                        continue
                    records.append(record)
                    if len(records) >= target:
                        self._log(strat, len(records) - found)
                        return StrategyResult(records=tuple(records), exhausted=False)
            except Exception as e:
                console.print(f"[dim]{self.name}/{strat.name} failed: {type(e).__name__}: {e}[/dim]")
            self._log(strat, len(records) - found)

        return StrategyResult(records=tuple(records), exhausted=True)

    def _accept(self, document: RawDocument, anchor: CandidateAnchor, dedup: Deduplicator, position: int) -> Any:
        if not self.validator(anchor.text):
            return None
        key = self.key(anchor)
        if not key or key in dedup:
            return None
        try:
            record = self.assemble(document, anchor, position)
        except ValueError as e:
            # pydantic.ValidationError is a ValueError
            if self.verbose:
                console.print(f"[dim]{self.name}: dropped {anchor.text[:40]!r}: {e}[/dim]")
            return None
        if record is not None:
            dedup.add(key)
        return record

    def _log(self, strat: Strategy, count: int) -> None:
        if self.verbose or count:
            console.print(f"[dim]{self.name}/{strat.name}: +{count}[/dim]")
