import json

import pytest

from database import DOCUMENT_KEYS, CatalogStore, JsonFileBackend, MemoryBackend
from errors import PersistenceError, RecordNotFound, ReferentialIntegrityError
from security import verify_password


class BrokenBackend(MemoryBackend):
    def write(self, document):
        raise OSError("disk full")


def test_load_empty_backend_seeds_defaults_and_persists(store, backend):
    assert len(store.list("categories")) == 6
    assert len(store.list("floors")) == 5
    assert len(store.list("shops")) == 10
    assert len(store.list("offers")) == 8
    assert store.list("customers") == []
    assert set(backend.document) == set(DOCUMENT_KEYS)
    assert backend.writes == 1

    admin = store.find_user("admin")
    assert admin["role"] == "admin"
    assert verify_password("admin123", admin["passwordHash"])


def test_load_falls_back_on_corrupt_file(tmp_path):
    path = tmp_path / "database.json"
    path.write_text("{not json", encoding="utf-8")

    catalog = CatalogStore(JsonFileBackend(path))
    catalog.load()

    assert len(catalog.list("shops")) == 10
    assert json.loads(path.read_text(encoding="utf-8"))["shops"][0]["name"] == "Zara"


def test_load_swallows_write_failures():
    catalog = CatalogStore(BrokenBackend())
    catalog.load()
    assert len(catalog.list("offers")) == 8


def test_load_existing_document_fills_missing_arrays_and_hashes_passwords():
    legacy = {
        "shops": [],
        "offers": [],
        "categories": [{"id": 4, "name": "Books"}],
        "users": [{"id": 1, "username": "admin", "password": "admin123", "role": "admin"}],
        "customers": [{"id": 1, "name": "A", "email": "a@example.com", "phone": "", "password": "pw1234", "createdAt": "2026-01-01"}],
    }
    backend = MemoryBackend(legacy)
    catalog = CatalogStore(backend)
    catalog.load()

    assert catalog.list("floors") == []
    assert catalog.list("categories") == [{"id": 4, "name": "Books"}]
    persisted = backend.document
    assert "password" not in persisted["users"][0]
    assert "password" not in persisted["customers"][0]
    assert verify_password("pw1234", persisted["customers"][0]["passwordHash"])


def test_json_file_round_trip(tmp_path):
    path = tmp_path / "nested" / "database.json"
    catalog = CatalogStore(JsonFileBackend(path))
    catalog.load()
    catalog.insert("categories", {"name": "Books", "icon": "📚"})

    reloaded = CatalogStore(JsonFileBackend(path))
    reloaded.load()
    assert reloaded.get("categories", 7)["icon"] == "📚"


def test_next_id_is_never_cached(store):
    assert store.next_id("offers") == 9
    store.insert("offers", {"title": "Late Night", "shopId": 5, "validFrom": "2026-01-01", "validUntil": "2026-01-02"})
    assert store.next_id("offers") == 10
    store.delete("offers", 9)
    assert store.next_id("offers") == 9


def test_mutations_persist_each_time(store, backend):
    writes = backend.writes
    store.update("shops", 2, {"hours": "24/7"})
    assert backend.writes == writes + 1
    assert backend.document["shops"][1]["hours"] == "24/7"


def test_list_returns_copies(store):
    shops = store.list("shops")
    shops[0]["name"] = "Changed"
    assert store.get("shops", 1)["name"] == "Zara"


def test_get_missing_record(store):
    with pytest.raises(RecordNotFound):
        store.get("shops", 404)


def test_delete_shop_cascades_and_persists(store, backend):
    store.delete("shops", 1)
    assert all(o["shopId"] != 1 for o in backend.document["offers"])
    assert len(backend.document["offers"]) == 7


def test_blocked_delete_writes_nothing(store, backend):
    writes = backend.writes
    with pytest.raises(ReferentialIntegrityError):
        store.delete("categories", 2)
    assert backend.writes == writes
    assert len(store.list("categories")) == 6


def test_save_failure_raises_persistence_error():
    catalog = CatalogStore(BrokenBackend())
    with pytest.raises(PersistenceError):
        catalog.save()


def test_customers(store):
    customer = store.add_customer({"name": "Meera", "email": "meera@example.com", "phone": "123", "password": "secret99"})
    assert store.get_customer(customer["id"])["phone"] == "123"
    assert store.authenticate_customer("meera@example.com", "secret99")["id"] == customer["id"]
    assert store.get_customer(999) is None


@pytest.fixture
def failing_store(store, backend, monkeypatch):
    def refuse(document):
        raise OSError("disk full")

    monkeypatch.setattr(backend, "write", refuse)
    return store


def test_failed_delete_restores_memory(failing_store):
    with pytest.raises(PersistenceError):
        failing_store.delete("shops", 1)

    assert [s["id"] for s in failing_store.list("shops")] == list(range(1, 11))
    assert len(failing_store.list("offers")) == 8


def test_failed_insert_and_update_restore_memory(failing_store):
    with pytest.raises(PersistenceError):
        failing_store.insert("categories", {"name": "Books"})
    assert failing_store.next_id("categories") == 7

    with pytest.raises(PersistenceError):
        failing_store.update("shops", 2, {"hours": "24/7"})
    assert failing_store.get("shops", 2)["hours"] != "24/7"


def test_failed_registration_restores_memory(failing_store):
    with pytest.raises(PersistenceError):
        failing_store.add_customer({"name": "Ria", "email": "ria@example.com", "password": "ria12345"})
    assert failing_store.list("customers") == []
