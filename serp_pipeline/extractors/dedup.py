"""Per-invocation uniqueness of emitted records."""

from typing import Optional


def name_key(name: Optional[str]) -> Optional[str]:
    """Case-folded, whitespace-collapsed name. No fuzzy matching."""
    if not name:
        return None
    key = " ".join(name.split()).casefold()
    return key or None


def url_key(url: Optional[str]) -> Optional[str]:
    """Resolved URLs are already canonical enough to compare verbatim."""
    return url or None


class Deduplicator:
    """Set of keys already emitted during one pipeline call.

    First-seen attribution wins: a later candidate with the same key is
    dropped, never merged.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def add(self, key: Optional[str]) -> bool:
        """Insert a key; True if it was not seen before."""
        if not key or key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __contains__(self, key: str) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)
