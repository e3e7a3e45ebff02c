"""Tests for the command-line store seeding."""
import json

import pytest

from app.routevault.models import Location, Role, StoreDocument, User
from app.routevault.storage import LocalStorage
from app.routevault.store import DocumentStore
from scripts.init_db import seed_only


@pytest.fixture()
def cfg(tmp_path):
    return {
        "STORAGE_BACKEND": "local",
        "DATA_DIR": str(tmp_path),
        "DATA_FILE": "data.json",
        "ADMIN_USERNAME": "admin",
        "ADMIN_PASSWORD": "dev-password",
        "PASSWORD_HASH_METHOD": "pbkdf2:sha256:1000",
        "SEED_LOCATIONS": ("North Gate",),
    }


def _existing_store(tmp_path) -> DocumentStore:
    store = DocumentStore(LocalStorage(root=tmp_path), key="data.json")
    doc = StoreDocument()
    doc.users.append(User(id=1, username="admin", password_hash="pbkdf2:sha256:1000$a$b", role=Role.DEVELOPER))
    doc.users.append(User(id=2, username="alice", password_hash="pbkdf2:sha256:1000$c$d"))
    doc.approved_data.locations.append(Location(id=10, name="Town A"))
    assert store.write(doc)
    return store


def test_seed_fresh_store(cfg, tmp_path):
    assert seed_only(cfg) is True
    raw = json.loads((tmp_path / "data.json").read_text(encoding="utf-8"))
    assert [(u["username"], u["role"]) for u in raw["users"]] == [("admin", "developer")]
    assert [loc["name"] for loc in raw["approvedData"]["locations"]] == ["North Gate"]


def test_seed_keeps_existing_data(cfg, tmp_path):
    _existing_store(tmp_path)
    assert seed_only(cfg) is True
    doc = DocumentStore(LocalStorage(root=tmp_path), key="data.json").read()
    assert [u.username for u in doc.users] == ["admin", "alice"]
    assert [loc.name for loc in doc.approved_data.locations] == ["Town A", "North Gate"]


def test_seed_refuses_to_overwrite_unreadable_store(cfg, tmp_path, monkeypatch):
    _existing_store(tmp_path)
    before = (tmp_path / "data.json").read_bytes()

    def _broken_open(self, key):
        raise OSError("I/O error")

    monkeypatch.setattr(LocalStorage, "open", _broken_open)
    assert seed_only(cfg) is False
    monkeypatch.undo()

    assert (tmp_path / "data.json").read_bytes() == before
    doc = DocumentStore(LocalStorage(root=tmp_path), key="data.json").read()
    assert [u.username for u in doc.users] == ["admin", "alice"]
    assert [loc.name for loc in doc.approved_data.locations] == ["Town A"]


def test_seed_refuses_to_overwrite_corrupt_store(cfg, tmp_path):
    (tmp_path / "data.json").write_text("{not json", encoding="utf-8")
    assert seed_only(cfg) is False
    assert (tmp_path / "data.json").read_text(encoding="utf-8") == "{not json"
