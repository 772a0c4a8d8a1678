import json

import pytest

from storelib import InventoryStore, PersistenceManager


@pytest.fixture
def inventory_path(tmp_path):
    return tmp_path / "data" / "inventory.json"


@pytest.fixture
def template_path(tmp_path):
    return tmp_path / "resources" / "inventory.json"


@pytest.fixture
def manager(inventory_path, template_path):
    return PersistenceManager(inventory_path, template_path)


@pytest.fixture
def store(manager):
    inventory = InventoryStore(manager)
    yield inventory
    inventory.flush_and_close()


@pytest.fixture
def write_inventory(inventory_path):
    def _write(payload):
        inventory_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(payload, str):
            inventory_path.write_text(payload, encoding="utf-8")
        else:
            inventory_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return inventory_path

    return _write
