import pytest

from editor import app as flask_app
from storelib import InventoryStore, PersistenceManager


@pytest.fixture(autouse=True)
def configure_test_env(request, tmp_path, monkeypatch):
    flask_app.app.config.update(TESTING=True)
    inventory_file = tmp_path / "inventory.json"
    manager = PersistenceManager(inventory_file, tmp_path / "template.json")
    monkeypatch.setattr(flask_app, "_STORE", None)
    if request.path.name != "test_console.py":
        monkeypatch.setattr(flask_app.InventoryStore, "from_config", classmethod(lambda cls, config: InventoryStore(manager)))
    yield inventory_file
    if flask_app._STORE is not None:
        flask_app._STORE.flush_and_close()


@pytest.fixture
def client():
    return flask_app.app.test_client()


@pytest.fixture
def empty_inventory(configure_test_env):
    configure_test_env.write_text("[]", encoding="utf-8")
    return configure_test_env
