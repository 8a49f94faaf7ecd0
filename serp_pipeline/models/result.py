"""Strategy chain output."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StrategyResult:
    """Ordered records from one chain run.

    `exhausted` is True when every strategy ran without reaching the target.
    """
    records: tuple[Any, ...] = field(default_factory=tuple)
    exhausted: bool = True

    def __len__(self) -> int:
        return len(self.records)

    @property
    def first(self) -> Any:
        return self.records[0] if self.records else None
