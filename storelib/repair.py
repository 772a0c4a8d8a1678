"""Structural repair of decoded inventory files.

Older inventory files either omit the ``type`` discriminator or carry the
legacy ``"product"`` tag. :func:`repair_records` rewrites such entries to the
canonical non-perishable tag on the parsed structure and reports what it
changed. It never touches its input and has no side effects; backing up and
persisting a repaired file is the caller's job.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Sequence

from .records import RecordKind

CANONICAL_TAGS = frozenset(kind.value for kind in RecordKind)


@dataclass(frozen=True)
class RepairResult:
    records: List[Any] = field(default_factory=list)
    missing_type: int = 0
    invalid_type: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.missing_type or self.invalid_type)


def repair_records(items: Sequence[Any]) -> RepairResult:
    repaired: List[Any] = []
    missing = 0
    invalid = 0
    for item in items:
        if not isinstance(item, dict):
            repaired.append(item)
            continue
        if "type" not in item:
            missing += 1
            fixed = {"type": RecordKind.STANDARD.value}
            fixed.update(item)
            repaired.append(fixed)
        elif not isinstance(item["type"], str) or item["type"] not in CANONICAL_TAGS:
            invalid += 1
            fixed = dict(item)
            fixed["type"] = RecordKind.STANDARD.value
            repaired.append(fixed)
        else:
            repaired.append(dict(item))
    return RepairResult(records=repaired, missing_type=missing, invalid_type=invalid)
