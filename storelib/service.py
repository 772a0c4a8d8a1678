"""The inventory store handle used by every front end.

An :class:`InventoryStore` is built once by the process entry point and passed
to whatever needs it. Every catalog change is written through to disk
immediately. All access to the catalog goes through one re-entrant lock, so a
UI thread and a background task can share the handle.
"""
from __future__ import annotations

import datetime as _dt
import logging
import threading
from typing import Callable, List, Optional, Tuple

from .catalog import ProductCatalog
from .config import StoreConfig
from .persistence import LoadSource, PersistenceManager, SaveOutcome
from .records import Record, is_record
from .storage import StoreError
from .valuation import CatalogTotals, aggregate

logger = logging.getLogger(__name__)


class InventoryStore:
    """Catalog operations backed by a write-through inventory file."""

    def __init__(self, manager: PersistenceManager):
        self._manager = manager
        self._catalog = ProductCatalog()
        self._lock = threading.RLock()
        self._initialized = False
        self._closed = False
        self.load_source: Optional[LoadSource] = None

    @classmethod
    def from_config(cls, config: StoreConfig) -> "InventoryStore":
        manager = PersistenceManager(
            config.inventory_path,
            config.template_path,
            backup_on_load=config.backup_on_load,
        )
        return cls(manager)

    def __enter__(self) -> "InventoryStore":
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.flush_and_close()

    @property
    def manager(self) -> PersistenceManager:
        return self._manager

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def initialize(self) -> LoadSource:
        """Locate or seed the inventory file and load it.

        Calling it again on an initialized store returns the earlier source.
        """
        with self._lock:
            self._check_open()
            if self._initialized:
                return self.load_source
            try:
                self._manager.initialize()
            except StoreError as exc:
                logger.error("Could not create inventory file: %s", exc)
            source = self._load_locked()
            self._initialized = True
            return source

    def load(self) -> LoadSource:
        with self._lock:
            self._check_open()
            source = self._load_locked()
            self._initialized = True
            return source

    reload = load

    def _load_locked(self) -> LoadSource:
        result = self._manager.load()
        self._catalog.replace_all(result.records)
        self.load_source = result.source
        return result.source

    def flush_and_close(self) -> Optional[SaveOutcome]:
        """Save one last time and close the store.

        Safe to call repeatedly; only the first call writes.
        """
        with self._lock:
            if self._closed:
                return None
            self._closed = True
            if not self._initialized:
                return None
            outcome = self._manager.save(self._catalog.snapshot())
            logger.info("Inventory closed (%s)", outcome.value)
            return outcome

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("inventory store is closed")

    def _check_ready(self) -> None:
        self._check_open()
        if not self._initialized:
            raise StoreError("inventory store is not initialized")

    # ------------------------------------------------------------------
    # Catalog operations
    # ------------------------------------------------------------------
    def add(self, record: Record) -> SaveOutcome:
        return self.append(record)[1]

    def append(self, record: Record) -> Tuple[int, SaveOutcome]:
        """Add ``record`` at the end and save; return its index and the save outcome.

        Anything that is not a product record raises :class:`TypeError` and
        leaves the catalog untouched.
        """
        if not is_record(record):
            raise TypeError(f"not a product record: {type(record).__name__}")
        with self._lock:
            self._check_ready()
            index = self._catalog.append(record)
            return index, self._manager.save(self._catalog.snapshot())

    def remove_at(self, index: int) -> Record:
        """Remove and return the product at ``index``.

        Raises :class:`~storelib.catalog.IndexOutOfRange` without changing
        anything when the index is out of range.
        """
        with self._lock:
            self._check_ready()
            removed = self._catalog.remove_at(index)
            self._manager.save(self._catalog.snapshot())
            return removed

    def get(self, index: int) -> Record:
        with self._lock:
            self._check_ready()
            return self._catalog.get(index)

    def find_by_name(self, name: str) -> Optional[Record]:
        with self._lock:
            self._check_ready()
            return self._catalog.find_by_name(name)

    def list(self) -> List[Record]:
        with self._lock:
            self._check_ready()
            return self._catalog.snapshot()

    def __len__(self) -> int:
        with self._lock:
            return len(self._catalog)

    def aggregates(self, today: _dt.date | None = None) -> CatalogTotals:
        return aggregate(self.list(), today)

    # ------------------------------------------------------------------
    # File maintenance
    # ------------------------------------------------------------------
    def create_backup(self):
        with self._lock:
            return self._manager.create_backup()

    def refresh_from_template(
        self,
        skip_confirmation: bool = False,
        confirm: Callable[[], bool] | None = None,
    ) -> bool:
        """Reset the inventory to the template dataset and reload it."""
        with self._lock:
            self._check_open()
            refreshed = self._manager.refresh_from_template(skip_confirmation, confirm)
            if refreshed:
                self._load_locked()
                self._initialized = True
            return refreshed
