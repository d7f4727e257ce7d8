from typing import Dict, Iterable, Iterator, Tuple

import attrs

from src.service.ticketing.domain.enum.fare_class import FareClass


@attrs.define
class FareClassCounts:
    full: int = 0
    half: int = 0

    def add(self, fare_class: FareClass, n: int = 1) -> None:
        if fare_class == FareClass.FULL:
            self.full += n
        else:
            self.half += n

    @property
    def total(self) -> int:
        return self.full + self.half


@attrs.define
class InventoryRestore:
    """Counter increments owed back to events, aggregated per event and fare class."""

    counts: Dict[int, FareClassCounts] = attrs.field(factory=dict)

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[int, FareClass]]) -> 'InventoryRestore':
        restore = cls()
        for event_id, fare_class in rows:
            restore.add(event_id, fare_class)
        return restore

    def add(self, event_id: int, fare_class: FareClass, n: int = 1) -> None:
        self.counts.setdefault(event_id, FareClassCounts()).add(fare_class, n)

    def items(self) -> Iterator[Tuple[int, FareClassCounts]]:
        return iter(sorted(self.counts.items()))

    @property
    def total(self) -> int:
        return sum(c.total for c in self.counts.values())

    @property
    def is_empty(self) -> bool:
        return self.total == 0
