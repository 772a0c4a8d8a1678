"""Core inventory library: records, valuation and crash-tolerant persistence."""

from .catalog import IndexOutOfRange, ProductCatalog
from .config import StoreConfig, load_store_config
from .persistence import LoadSource, PersistenceManager, SaveOutcome
from .records import PerishableRecord, Record, RecordKind, StandardRecord
from .service import InventoryStore
from .storage import StoreError
from .valuation import CatalogTotals, aggregate, total_value

__all__ = [
    "IndexOutOfRange",
    "ProductCatalog",
    "StoreConfig",
    "load_store_config",
    "LoadSource",
    "PersistenceManager",
    "SaveOutcome",
    "PerishableRecord",
    "Record",
    "RecordKind",
    "StandardRecord",
    "InventoryStore",
    "StoreError",
    "CatalogTotals",
    "aggregate",
    "total_value",
]
