"""In-memory product catalog.

Position is the only identity a product has: removing index ``i`` shifts every
later product down by one, so callers must not hold on to indexes across a
mutation.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional

from .records import Record


class IndexOutOfRange(IndexError):
    """Raised when a catalog index is outside ``[0, size)``."""

    def __init__(self, index: int, size: int):
        super().__init__(f"Invalid product index {index} (catalog has {size} products)")
        self.index = index
        self.size = size


class ProductCatalog:
    """Ordered collection of product records."""

    def __init__(self, records: Iterable[Record] = ()):
        self._records: List[Record] = list(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.snapshot())

    def append(self, record: Record) -> int:
        self._records.append(record)
        return len(self._records) - 1

    def remove_at(self, index: int) -> Record:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError("index must be an integer")
        if not 0 <= index < len(self._records):
            raise IndexOutOfRange(index, len(self._records))
        return self._records.pop(index)

    def get(self, index: int) -> Record:
        if not 0 <= index < len(self._records):
            raise IndexOutOfRange(index, len(self._records))
        return self._records[index]

    def find_by_name(self, name: str) -> Optional[Record]:
        target = name.casefold()
        for record in self._records:
            if record.name.casefold() == target:
                return record
        return None

    def snapshot(self) -> List[Record]:
        return list(self._records)

    def replace_all(self, records: Iterable[Record]) -> None:
        self._records = list(records)
