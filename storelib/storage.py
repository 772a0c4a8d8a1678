"""JSON file helpers for the inventory store.

The inventory lives in a single JSON array on disk. This module owns the raw
file concerns: atomic writes (temp file + rename), sibling backup copies, and
a strict reader that reports every unreadable state as a :class:`StoreError`
so the persistence layer can decide how to recover.
"""
from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, List, Sequence

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when a persistence operation fails."""


class JsonArrayFile:
    """A JSON document on disk whose root must be an array."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonArrayFile({str(self.path)!r})"

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def sibling(self, suffix: str) -> Path:
        """Return ``<file name><suffix>`` next to the primary file."""
        return self.path.with_name(self.path.name + suffix)

    def exists(self) -> bool:
        return self.path.is_file()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def read(self) -> List[Any]:
        """Return the decoded array or raise :class:`StoreError`.

        Missing files, I/O failures, empty files, invalid JSON and non-array
        roots are all reported the same way.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"cannot read {self.path}: {exc}") from exc
        if not raw.strip():
            raise StoreError(f"{self.path} is empty")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise StoreError(f"{self.path}: root element is not an array")
        return data

    def has_records(self) -> bool:
        """Whether the file holds anything worth protecting from truncation.

        Content that cannot be inspected counts as data.
        """
        if not self.exists():
            return False
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError:
            return True
        if not raw.strip():
            return False
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return True
        if isinstance(data, list):
            return len(data) > 0
        return True

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def write(self, items: Sequence[Any]) -> None:
        payload = json.dumps(list(items), indent=2)
        tmp_path = self.sibling(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StoreError(f"cannot write {self.path}: {exc}") from exc
        finally:
            tmp_path.unlink(missing_ok=True)

    def copy_to(self, destination: Path | str) -> Path:
        """Copy the current file to ``destination``, replacing it."""
        destination = Path(destination)
        try:
            shutil.copyfile(self.path, destination)
        except OSError as exc:
            raise StoreError(f"cannot copy {self.path} to {destination}: {exc}") from exc
        logger.info("Created backup at %s", destination)
        return destination
