"""Loading, repairing, backing up and saving the inventory file.

:class:`PersistenceManager` never leaves its caller without a catalog. A load
that cannot use the primary file walks three recovery tiers in order:

1. restore the nearest readable backup and write it back to the primary path;
2. otherwise seed the default dataset and persist it;
3. if even that write fails, hand back a one-product in-memory placeholder.

Saves are whole-file replacements done through a temp file and an atomic
rename. An empty catalog is never written over a file that still holds
products, and a save that shrinks the catalog first copies the current file to
``<name>.emergency.bak``.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .defaults import TEMPLATE_MIN_RECORDS, default_records, placeholder_records, template_payload
from .records import Record, decode_records, encode_records
from .repair import repair_records
from .storage import JsonArrayFile, StoreError

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"
MISSING_TYPE_SUFFIX = ".missing-type.bak"
INVALID_TYPE_SUFFIX = ".invalid-type.bak"
EMERGENCY_SUFFIX = ".emergency.bak"
REFRESH_SUFFIX_TEMPLATE = ".before-refresh-{stamp}.bak"


class LoadSource(str, Enum):
    PRIMARY = "primary"
    BACKUP = "backup"
    DEFAULTS = "defaults"
    PLACEHOLDER = "placeholder"


class SaveOutcome(str, Enum):
    SAVED = "saved"
    REFUSED = "refused"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadResult:
    records: List[Record]
    source: LoadSource


class PersistenceManager:
    """Owns the inventory file and its sibling backups."""

    def __init__(
        self,
        path: Path | str,
        template_path: Path | str,
        *,
        backup_on_load: bool = True,
    ) -> None:
        self._file = JsonArrayFile(path)
        self.template_path = Path(template_path)
        self.backup_on_load = backup_on_load
        self._persisted_count = 0

    @property
    def path(self) -> Path:
        return self._file.path

    def sibling(self, suffix: str) -> Path:
        return self._file.sibling(suffix)

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------
    def initialize(self) -> bool:
        """Create the inventory file with the default dataset if it is absent.

        Returns ``True`` when a new file was seeded. An existing file is left
        untouched whatever its content.
        """
        if self.path.exists():
            logger.info("Using existing inventory file at %s", self.path)
            return False
        logger.info("Inventory file not found at %s; creating it with default products", self.path)
        records = default_records()
        self._file.write(encode_records(records))
        self._persisted_count = len(records)
        logger.info("Created inventory file with %d default products", len(records))
        return True

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self) -> LoadResult:
        try:
            raw_items = self._file.read()
        except StoreError as exc:
            logger.warning("Inventory file unreadable (%s); starting recovery", exc)
            return self._recover()

        raw_items = self._repair(raw_items)
        records = decode_records(raw_items)
        self._persisted_count = len(records)
        logger.info("Inventory loaded with %d products from %s", len(records), self.path)
        if self.backup_on_load:
            self.create_backup()
        return LoadResult(records, LoadSource.PRIMARY)

    def _repair(self, raw_items: List) -> List:
        result = repair_records(raw_items)
        if not result.changed:
            return raw_items
        try:
            if result.missing_type:
                logger.warning("%d products are missing a type; marking them non-perishable", result.missing_type)
                self._file.copy_to(self.sibling(MISSING_TYPE_SUFFIX))
            if result.invalid_type:
                logger.warning("%d products carry an invalid type; marking them non-perishable", result.invalid_type)
                self._file.copy_to(self.sibling(INVALID_TYPE_SUFFIX))
        except StoreError as exc:
            logger.error("Could not back up inventory before repair, leaving file as is: %s", exc)
            return result.records
        try:
            self._file.write(result.records)
            logger.info("Updated inventory file with corrected format")
        except StoreError as exc:
            logger.error("Could not write repaired inventory: %s", exc)
        return result.records

    def backup_candidates(self) -> List[Path]:
        """Backups to try during recovery, nearest first.

        The regular ``.bak`` copy comes first; the other backups follow from
        the most recently modified.
        """
        if not self.path.parent.is_dir():
            return []
        primary_backup = self.sibling(BACKUP_SUFFIX)
        others = [
            candidate
            for candidate in self.path.parent.glob(self.path.name + ".*.bak")
            if candidate.is_file()
        ]
        others.sort(key=lambda candidate: candidate.stat().st_mtime_ns, reverse=True)
        ordered = [primary_backup] if primary_backup.is_file() else []
        return ordered + others

    def _recover(self) -> LoadResult:
        for candidate in self.backup_candidates():
            try:
                raw_items = JsonArrayFile(candidate).read()
            except StoreError as exc:
                logger.warning("Backup %s is unusable: %s", candidate.name, exc)
                continue
            if not raw_items:
                logger.warning("Backup %s holds no products; skipping it", candidate.name)
                continue
            records = decode_records(raw_items)
            logger.info("Restored %d products from backup %s", len(records), candidate.name)
            self._persisted_count = 0
            if self.save(records) is not SaveOutcome.SAVED:
                logger.error("Restored catalog could not be written back to %s", self.path)
            return LoadResult(records, LoadSource.BACKUP)

        logger.warning("No usable backup found; creating the default inventory")
        records = default_records()
        try:
            if self._file.has_records():
                self._file.copy_to(self.sibling(EMERGENCY_SUFFIX))
            self._file.write(encode_records(records))
        except StoreError as exc:
            logger.error("Could not write default inventory (%s); using in-memory placeholder", exc)
            self._persisted_count = 0
            return LoadResult(placeholder_records(), LoadSource.PLACEHOLDER)
        self._persisted_count = len(records)
        return LoadResult(records, LoadSource.DEFAULTS)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------
    def save(self, records: Sequence[Record]) -> SaveOutcome:
        records = list(records)
        if not records and self._file.has_records():
            logger.warning(
                "Refusing to save an empty inventory over existing data in %s", self.path
            )
            return SaveOutcome.REFUSED
        try:
            if len(records) < self._persisted_count and self._file.exists():
                logger.info("Inventory shrinking from %d to %d products", self._persisted_count, len(records))
                self._file.copy_to(self.sibling(EMERGENCY_SUFFIX))
            self._file.write(encode_records(records))
        except StoreError as exc:
            logger.error("Error saving inventory: %s", exc)
            return SaveOutcome.FAILED
        self._persisted_count = len(records)
        logger.info("Inventory saved with %d products to %s", len(records), self.path)
        return SaveOutcome.SAVED

    # ------------------------------------------------------------------
    # Backups and template refresh
    # ------------------------------------------------------------------
    def create_backup(self) -> Optional[Path]:
        """Copy the inventory file to ``<name>.bak``; ``None`` if nothing was copied."""
        if not self._file.exists():
            return None
        try:
            return self._file.copy_to(self.sibling(BACKUP_SUFFIX))
        except StoreError as exc:
            logger.error("Failed to create inventory backup: %s", exc)
            return None

    def ensure_template(self) -> Path:
        """Make sure the template file exists and holds the full dataset."""
        template = JsonArrayFile(self.template_path)
        try:
            count = len(template.read())
        except StoreError:
            count = 0
        if count < TEMPLATE_MIN_RECORDS:
            logger.info("Template at %s has %d products; writing the full template", self.template_path, count)
            template.write(template_payload())
        return self.template_path

    def refresh_from_template(
        self,
        skip_confirmation: bool = False,
        confirm: Callable[[], bool] | None = None,
    ) -> bool:
        """Replace the inventory file with the template dataset.

        When a file already exists and ``skip_confirmation`` is false, the
        refresh only goes ahead if ``confirm`` returns true. Returns whether
        the file was replaced. Raises :class:`StoreError` on I/O failure.
        """
        if self.path.exists() and not skip_confirmation:
            if confirm is None or not confirm():
                logger.info("Refresh cancelled; keeping existing inventory file")
                return False

        template = JsonArrayFile(self.ensure_template())
        payload = template.read()
        if self.path.exists():
            stamp = int(time.time() * 1000)
            self._file.copy_to(self.sibling(REFRESH_SUFFIX_TEMPLATE.format(stamp=stamp)))
        self._file.write(payload)
        logger.info("Refreshed inventory from template with %d products", len(payload))
        return True
