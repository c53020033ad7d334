"""
Tests for CodeStore: load/save of the JSON backing file and the
used-flag state transitions.
"""

import json

import pytest

from discount_server.models import DiscountCodeResult
from discount_server.storage import CodeStore


def test_missing_file_starts_empty_and_creates_folder(storage_path):
    store = CodeStore(storage_path)
    assert len(store) == 0
    assert storage_path.parent.is_dir()
    assert not storage_path.exists()


def test_malformed_json_starts_empty(storage_path):
    storage_path.parent.mkdir(parents=True)
    storage_path.write_text("{not json", encoding="utf-8")
    assert len(CodeStore(storage_path)) == 0


@pytest.mark.parametrize("content", ['["ABCDEFG"]', '{"ABCDEFG": "yes"}', "42"])
def test_wrong_shape_starts_empty(storage_path, content):
    storage_path.parent.mkdir(parents=True)
    storage_path.write_text(content, encoding="utf-8")
    assert len(CodeStore(storage_path)) == 0


def test_loads_existing_file(storage_path):
    storage_path.parent.mkdir(parents=True)
    storage_path.write_text(json.dumps({"ABCDEFG": False, "HIJKLMN": True}), encoding="utf-8")

    store = CodeStore(storage_path)
    assert store.is_used("ABCDEFG") is False
    assert store.is_used("HIJKLMN") is True
    assert store.is_used("NOPE123") is None
    assert store.stats() == {"total": 2, "used": 1, "unused": 1}


def test_save_writes_json_object(store, storage_path):
    with store.lock:
        store.insert("ABCDEFG")
        assert store.save() is True

    assert json.loads(storage_path.read_text(encoding="utf-8")) == {"ABCDEFG": False}
    # no temp files left behind
    assert [p.name for p in storage_path.parent.iterdir()] == [storage_path.name]


def test_save_recreates_missing_folder(store, storage_path):
    storage_path.parent.rmdir()
    with store.lock:
        store.insert("ABCDEFG")
        assert store.save() is True
    assert storage_path.exists()


def test_save_failure_keeps_memory_state(tmp_path):
    # a directory where the file should be makes every write fail
    target = tmp_path / "codes.json"
    target.mkdir()
    store = CodeStore(target)

    with store.lock:
        store.insert("ABCDEFG")
        assert store.save() is False
        assert store.try_mark_used("ABCDEFG") == DiscountCodeResult.SUCCESS
        assert store.try_mark_used("ABCDEFG") == DiscountCodeResult.ALREADY_USED


def test_insert_duplicate_raises(store):
    with store.lock:
        store.insert("ABCDEFG")
        with pytest.raises(ValueError):
            store.insert("ABCDEFG")


def test_try_mark_used_transitions(store, storage_path):
    with store.lock:
        store.insert("ABCDEFG")
        assert store.try_mark_used("ZZZZZZZ") == DiscountCodeResult.NOT_FOUND
        assert store.try_mark_used("ABCDEFG") == DiscountCodeResult.SUCCESS
        assert store.try_mark_used("ABCDEFG") == DiscountCodeResult.ALREADY_USED

    # redemption persists on its own
    assert json.loads(storage_path.read_text(encoding="utf-8")) == {"ABCDEFG": True}
    assert "ABCDEFG" in store
