"""Bounded text windows around an anchor offset."""

from dataclasses import dataclass
from functools import cached_property
from typing import Union

from serp_pipeline.extractors.markup import clean_text
from serp_pipeline.models import RawDocument

DEFAULT_BEFORE = 200
DEFAULT_AFTER = 1500


@dataclass(frozen=True)
class ContextWindow:
    """A slice of the document used as the scan surface for field extractors."""
    markup: str
    start: int = 0
    end: int = 0

    @cached_property
    def text(self) -> str:
        """Tag-stripped, entity-decoded text of the window."""
        return clean_text(self.markup)

    def __len__(self) -> int:
        return len(self.markup)


def context_window(
    document: Union[RawDocument, str],
    offset: int,
    before: int = DEFAULT_BEFORE,
    after: int = DEFAULT_AFTER,
) -> ContextWindow:
    """Window of `before`/`after` characters around `offset`, clipped to the document."""
    text = document.text if isinstance(document, RawDocument) else document
    offset = min(max(offset, 0), len(text))
    start = max(0, offset - max(before, 0))
    end = min(len(text), offset + max(after, 0))
    return ContextWindow(markup=text[start:end], start=start, end=end)


def window_from_fragment(fragment: str) -> ContextWindow:
    """Treat an already-isolated block (a result card) as its own window."""
    return ContextWindow(markup=fragment, start=0, end=len(fragment))
