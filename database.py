"""
Catalog store: the single source of truth for the mall catalog.

The whole catalog lives in one JSON document with top-level arrays
``shops``, ``offers``, ``categories``, ``floors``, ``users`` (admin
accounts) and ``customers``. Every mutation rewrites the full document
through a pluggable persistence backend.
"""

import copy
import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

import rules
from config import settings
from errors import PersistenceError, RecordNotFound
from sample_data import default_catalog
from security import hash_password

logger = logging.getLogger(__name__)

DOCUMENT_KEYS = ("shops", "offers", "categories", "floors", "users", "customers")


class JsonFileBackend:
    """Persists the document as pretty-printed JSON, replacing the file atomically."""

    def __init__(self, path):
        self.path = Path(path)

    def read(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def write(self, document: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)


class MemoryBackend:
    """Keeps the persisted document in memory; used by tests."""

    def __init__(self, document: Optional[dict] = None):
        self.document = copy.deepcopy(document)
        self.writes = 0

    def read(self) -> Optional[dict]:
        return copy.deepcopy(self.document)

    def write(self, document: dict) -> None:
        self.document = copy.deepcopy(document)
        self.writes += 1


def empty_document() -> dict:
    return {key: [] for key in DOCUMENT_KEYS}


class CatalogStore:
    def __init__(self, backend):
        self.backend = backend
        self.document = empty_document()
        # held across mutate + save so concurrent requests cannot lose updates
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load the persisted document, falling back to the default catalog.

        Never raises: unreadable documents and failed writes of the
        default dataset are logged and the store continues in memory.
        """
        with self._lock:
            try:
                document = self.backend.read()
            except (OSError, ValueError) as e:
                logger.warning("Could not read catalog document: %s", e)
                document = None

            if not isinstance(document, dict):
                logger.info("No existing database found, using default data")
                self.document = {**empty_document(), **default_catalog()}
                self._seed_admin()
                self._save_quietly()
                return

            changed = False
            for key in DOCUMENT_KEYS:
                if not isinstance(document.get(key), list):
                    document[key] = []
                    changed = True
            self.document = document
            changed = self._migrate_plaintext_passwords() or changed
            changed = self._seed_admin() or changed
            if changed:
                self._save_quietly()
            logger.info("Database loaded successfully")

    def save(self) -> None:
        with self._lock:
            try:
                self.backend.write(self.document)
            except (OSError, TypeError, ValueError) as e:
                logger.error("Error saving database: %s", e, exc_info=True)
                raise PersistenceError("Failed to save the catalog") from e
        logger.debug("Database saved successfully")

    def _save_quietly(self) -> None:
        try:
            self.save()
        except PersistenceError:
            pass

    def _seed_admin(self) -> bool:
        users = self.document["users"]
        if self.find_user(settings.ADMIN_USERNAME) is not None:
            return False
        users.append({
            "id": rules.next_id(users),
            "username": settings.ADMIN_USERNAME,
            "passwordHash": hash_password(settings.ADMIN_PASSWORD),
            "role": "admin",
        })
        logger.info("Seeded admin account '%s'", settings.ADMIN_USERNAME)
        return True

    def _migrate_plaintext_passwords(self) -> bool:
        # documents written by older versions kept a "password" field
        changed = False
        for record in self.document["users"] + self.document["customers"]:
            plaintext = record.pop("password", None)
            if plaintext is not None:
                record.setdefault("passwordHash", hash_password(plaintext))
                changed = True
        if changed:
            logger.warning("Replaced plaintext passwords with hashes")
        return changed

    # ------------------------------------------------------------------
    # Catalog collections
    # ------------------------------------------------------------------
    def next_id(self, collection: str) -> int:
        return rules.next_id(self.document[collection])

    def list(self, collection: str) -> List[dict]:
        return [dict(record) for record in self.document[collection]]

    def get(self, collection: str, record_id: int) -> dict:
        record = rules.find(self.document[collection], record_id)
        if record is None:
            raise RecordNotFound(rules.ENTITY_NAMES[collection], record_id)
        return dict(record)

    @contextmanager
    def _transaction(self):
        """Apply a mutation and persist it, or roll memory back on failure."""
        with self._lock:
            snapshot = copy.deepcopy(self.document)
            try:
                yield
                self.save()
            except Exception:
                self.document = snapshot
                raise

    def insert(self, collection: str, fields: dict) -> dict:
        with self._transaction():
            record = rules.insert(self.document, collection, fields)
        logger.info("Created %s %s", rules.ENTITY_NAMES[collection], record["id"])
        return dict(record)

    def update(self, collection: str, record_id: int, fields: dict) -> dict:
        with self._transaction():
            record = rules.update(self.document, collection, record_id, fields)
        logger.info("Updated %s %s", rules.ENTITY_NAMES[collection], record_id)
        return dict(record)

    def delete(self, collection: str, record_id: int) -> dict:
        with self._transaction():
            offers_before = len(self.document["offers"])
            removed = rules.delete(self.document, collection, record_id)
        cascaded = offers_before - len(self.document["offers"])
        if cascaded and collection == "shops":
            logger.info("Deleted Shop %s and %d offer(s)", record_id, cascaded)
        else:
            logger.info("Deleted %s %s", rules.ENTITY_NAMES[collection], record_id)
        return removed

    def stats(self, today: Optional[str] = None) -> dict:
        return rules.catalog_stats(self.document, today)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def find_user(self, username: str) -> Optional[dict]:
        for user in self.document["users"]:
            if user.get("username") == username:
                return user
        return None

    def add_customer(self, fields: dict) -> dict:
        with self._transaction():
            customer = rules.new_customer(self.document["customers"], fields)
            self.document["customers"].append(customer)
        logger.info("Registered customer %s", customer["id"])
        return dict(customer)

    def authenticate_customer(self, email: str, password: str) -> dict:
        return dict(rules.authenticate_customer(self.document["customers"], email, password))

    def get_customer(self, customer_id: int) -> Optional[dict]:
        customer = rules.find(self.document["customers"], customer_id)
        return None if customer is None else dict(customer)


# Global store instance
db = CatalogStore(JsonFileBackend(settings.DATA_FILE))
