import json

import pytest

from storelib.storage import JsonArrayFile, StoreError


def test_write_creates_parent_and_leaves_no_temp_file(tmp_path):
    target = JsonArrayFile(tmp_path / "nested" / "inventory.json")
    target.write([{"name": "Widget", "price": 5.0}])

    assert target.exists()
    assert json.loads(target.path.read_text(encoding="utf-8")) == [{"name": "Widget", "price": 5.0}]
    assert not target.sibling(".tmp").exists()


def test_write_replaces_whole_file(tmp_path):
    target = JsonArrayFile(tmp_path / "inventory.json")
    target.write([{"name": "First"}, {"name": "Second"}])
    target.write([{"name": "Third"}])

    assert target.read() == [{"name": "Third"}]


@pytest.mark.parametrize("content", ["", "   \n", "not-json", '{"bad": true}', "42"])
def test_read_rejects_unusable_content(tmp_path, content):
    path = tmp_path / "inventory.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(StoreError):
        JsonArrayFile(path).read()


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(StoreError):
        JsonArrayFile(tmp_path / "absent.json").read()


def test_has_records(tmp_path):
    path = tmp_path / "inventory.json"
    target = JsonArrayFile(path)
    assert target.has_records() is False

    path.write_text("[]", encoding="utf-8")
    assert target.has_records() is False

    path.write_text('[{"name": "Widget"}]', encoding="utf-8")
    assert target.has_records() is True

    # Unreadable content is treated as data worth keeping.
    path.write_text("{corrupt", encoding="utf-8")
    assert target.has_records() is True


def test_copy_to_overwrites_previous_backup(tmp_path):
    target = JsonArrayFile(tmp_path / "inventory.json")
    backup = target.sibling(".bak")

    target.write([{"name": "Old"}])
    target.copy_to(backup)
    target.write([{"name": "New"}])
    target.copy_to(backup)

    assert json.loads(backup.read_text(encoding="utf-8")) == [{"name": "New"}]


def test_copy_missing_file_raises(tmp_path):
    target = JsonArrayFile(tmp_path / "inventory.json")
    with pytest.raises(StoreError):
        target.copy_to(tmp_path / "inventory.json.bak")
