"""
Client-side application state for the mall directory.

Mirrors the API collections locally, derives the filtered and comparison
views, and keeps working on the built-in sample catalog when the API
cannot be reached. Offline admin edits go through the same rules module
the server uses.
"""

import asyncio
import json
import logging
import secrets
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

import rules
from config import settings
from errors import (
    AdminRequiredError,
    CatalogError,
    ComparisonLimitError,
    InvalidCredentialsError,
)
from sample_data import default_catalog
from security import create_access_token, decode_access_token

logger = logging.getLogger(__name__)


def api_error(exc: httpx.HTTPStatusError) -> CatalogError:
    """Turn an error response into the matching catalog error."""
    try:
        body = exc.response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    message = detail if isinstance(detail, str) else exc.response.reason_phrase
    if exc.response.status_code == 401:
        return InvalidCredentialsError(message)
    error = CatalogError(message)
    error.status_code = exc.response.status_code
    return error


class CatalogClient:
    """Async HTTP client for the REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.CLIENT_TIMEOUT_SECONDS
        self.transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers: Dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout_seconds, transport=self.transport
        ) as client:
            response = await client.request(
                method, path, json=json_body, params=params, headers=headers
            )
            response.raise_for_status()
            return response.json() if response.content else None

    async def list(self, collection: str, **params) -> List[dict]:
        params = {k: v for k, v in params.items() if v is not None}
        return await self._request("GET", f"/{collection}", params=params or None)

    async def get(self, collection: str, record_id: int) -> dict:
        return await self._request("GET", f"/{collection}/{record_id}")

    async def create(self, collection: str, fields: dict, token: str) -> dict:
        return await self._request("POST", f"/{collection}", token=token, json_body=fields)

    async def update(self, collection: str, record_id: int, fields: dict, token: str) -> dict:
        return await self._request(
            "PUT", f"/{collection}/{record_id}", token=token, json_body=fields
        )

    async def delete(self, collection: str, record_id: int, token: str) -> dict:
        return await self._request("DELETE", f"/{collection}/{record_id}", token=token)

    async def admin_login(self, username: str, password: str) -> dict:
        return await self._request(
            "POST", "/auth/login", json_body={"username": username, "password": password}
        )

    async def register(self, fields: dict) -> dict:
        return await self._request("POST", "/auth/user-register", json_body=fields)

    async def user_login(self, email: str, password: str) -> dict:
        return await self._request(
            "POST", "/auth/user-login", json_body={"email": email, "password": password}
        )

    async def stats(self) -> dict:
        return await self._request("GET", "/stats")


class SessionStore:
    """Durable login state kept in a local JSON file.

    Sessions are signed tokens; a stored token only counts while its
    signature and expiry still verify.
    """

    def __init__(self, path=None):
        self.path = Path(path or settings.SESSION_FILE)
        self.data = self._read()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Discarding unreadable session file: %s", e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2)

    @property
    def admin_token(self) -> Optional[str]:
        token = self.data.get("adminToken")
        payload = decode_access_token(token) if token else None
        if not payload or payload.get("role") != "admin":
            return None
        return token

    @property
    def is_admin(self) -> bool:
        return self.admin_token is not None

    def set_admin(self, token: str) -> None:
        self.data["adminToken"] = token
        self._write()

    def clear_admin(self) -> None:
        self.data.pop("adminToken", None)
        self._write()

    @property
    def current_customer(self) -> Optional[dict]:
        token = self.data.get("customerToken")
        if not token or not decode_access_token(token):
            return None
        return self.data.get("customer")

    def set_customer(self, user: dict, token: str) -> None:
        self.data["customer"] = user
        self.data["customerToken"] = token
        self._write()

    def clear_customer(self) -> None:
        self.data.pop("customer", None)
        self.data.pop("customerToken", None)
        self._write()

    # customers registered while the API was unreachable
    @property
    def local_customers(self) -> List[dict]:
        return self.data.setdefault("customers", [])

    def add_local_customer(self, customer: dict) -> None:
        self.local_customers.append(customer)
        self._write()


class AppState:
    def __init__(
        self,
        api: Optional[CatalogClient] = None,
        session: Optional[SessionStore] = None,
        compare_limit: Optional[int] = None,
    ) -> None:
        self.api = api or CatalogClient()
        self.session = session or SessionStore()
        self.compare_limit = compare_limit or settings.COMPARE_LIMIT
        self.document: Dict[str, List[dict]] = {name: [] for name in rules.CATALOG_COLLECTIONS}
        self.offline = False
        self.selected: List[int] = []

    async def load(self) -> None:
        """Fetch all four collections at once; any failure switches to sample data."""
        try:
            results = await asyncio.gather(
                *(self.api.list(name) for name in rules.CATALOG_COLLECTIONS)
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Backend unavailable (%s), using sample data", e)
            self.document = default_catalog()
            self.offline = True
        else:
            self.document = dict(zip(rules.CATALOG_COLLECTIONS, results))
            self.offline = False

        known = {shop["id"] for shop in self.shops}
        self.selected = [shop_id for shop_id in self.selected if shop_id in known]

    @property
    def shops(self) -> List[dict]:
        return self.document["shops"]

    @property
    def offers(self) -> List[dict]:
        return self.document["offers"]

    @property
    def categories(self) -> List[dict]:
        return self.document["categories"]

    @property
    def floors(self) -> List[dict]:
        return self.document["floors"]

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------
    def filtered_shops(self, category=None, floor=None, search=None) -> List[dict]:
        return rules.filter_shops(self.shops, category=category, floor=floor, search=search)

    def filtered_offers(self, shop_id=None) -> List[dict]:
        return rules.filter_offers(self.offers, shop_id=shop_id)

    def category_name(self, category_id) -> str:
        category = rules.find(self.categories, category_id)
        return category["name"] if category else "N/A"

    def floor_name(self, floor_id) -> str:
        floor = rules.find(self.floors, floor_id)
        return floor["name"] if floor else "N/A"

    def shop_details(self, shop_id: int) -> Optional[dict]:
        shop = rules.find(self.shops, shop_id)
        if shop is None:
            return None
        return {
            **shop,
            "categoryName": self.category_name(shop["category"]),
            "floorName": self.floor_name(shop["floor"]),
            "offers": self.filtered_offers(shop_id=shop_id),
        }

    def stats(self, today: Optional[str] = None) -> dict:
        return rules.catalog_stats(self.document, today)

    def toggle_compare(self, shop_id: int) -> bool:
        """Add or remove a shop from the comparison; returns whether it is now selected."""
        if shop_id in self.selected:
            self.selected.remove(shop_id)
            return False
        if len(self.selected) >= self.compare_limit:
            raise ComparisonLimitError(self.compare_limit)
        self.selected.append(shop_id)
        return True

    def comparison(self, today: Optional[str] = None) -> Optional[List[dict]]:
        """One row per selected shop, or None until at least two are selected."""
        if len(self.selected) < 2:
            return None

        active = rules.filter_offers(self.offers, active=True, today=today)
        rows = []
        for shop in self.shops:
            if shop["id"] not in self.selected:
                continue
            discounts = [f"{o['discount']}% off" for o in active if o["shopId"] == shop["id"]]
            rows.append({
                "id": shop["id"],
                "name": shop["name"],
                "category": self.category_name(shop["category"]),
                "floor": self.floor_name(shop["floor"]),
                "location": shop.get("shopNumber") or "N/A",
                "hours": shop.get("hours") or "N/A",
                "contact": shop.get("contact") or "N/A",
                "offers": ", ".join(discounts) if discounts else "No offers",
            })
        return rows

    # ------------------------------------------------------------------
    # Admin edits
    # ------------------------------------------------------------------
    def _require_admin(self) -> str:
        token = self.session.admin_token
        if token is None:
            raise AdminRequiredError("Admin login required")
        return token

    async def save_record(self, collection: str, fields: dict, record_id: Optional[int] = None) -> dict:
        """Create (no record_id) or update a record, through the API when it is reachable."""
        token = self._require_admin()
        if not self.offline:
            try:
                if record_id is None:
                    record = await self.api.create(collection, fields, token)
                else:
                    record = await self.api.update(collection, record_id, fields, token)
            except httpx.HTTPStatusError as e:
                raise api_error(e) from e
            except httpx.TransportError as e:
                logger.warning("Backend unavailable (%s), editing locally", e)
                self.offline = True
            else:
                self._mirror(collection, record)
                return record

        if record_id is None:
            return rules.insert(self.document, collection, fields)
        return rules.update(self.document, collection, record_id, fields)

    async def delete_record(self, collection: str, record_id: int) -> dict:
        token = self._require_admin()
        if not self.offline:
            try:
                await self.api.delete(collection, record_id, token)
            except httpx.HTTPStatusError as e:
                raise api_error(e) from e
            except httpx.TransportError as e:
                logger.warning("Backend unavailable (%s), editing locally", e)
                self.offline = True
            else:
                removed = self._forget(collection, record_id)
                self._deselect(collection, record_id)
                return removed

        removed = rules.delete(self.document, collection, record_id)
        self._deselect(collection, record_id)
        return removed

    def _mirror(self, collection: str, record: dict) -> None:
        records = self.document[collection]
        index = rules.index_of(records, record["id"])
        if index is None:
            records.append(record)
        else:
            records[index] = record

    def _forget(self, collection: str, record_id: int) -> Optional[dict]:
        removed = rules.find(self.document[collection], record_id)
        self.document[collection] = [r for r in self.document[collection] if r["id"] != record_id]
        if collection == "shops":
            self.document["offers"] = [o for o in self.offers if o["shopId"] != record_id]
        return removed

    def _deselect(self, collection: str, record_id: int) -> None:
        if collection == "shops" and record_id in self.selected:
            self.selected.remove(record_id)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    async def admin_login(self, username: str, password: str) -> None:
        try:
            data = await self.api.admin_login(username, password)
            token = data["access_token"]
        except httpx.HTTPStatusError as e:
            raise api_error(e) from e
        except httpx.TransportError:
            logger.info("Backend unavailable, checking admin credentials locally")
            valid = secrets.compare_digest(
                username.encode("utf-8"), settings.ADMIN_USERNAME.encode("utf-8")
            ) and secrets.compare_digest(
                password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8")
            )
            if not valid:
                raise InvalidCredentialsError("Invalid credentials")
            token = create_access_token(username, "admin", 0)
        self.session.set_admin(token)

    def admin_logout(self) -> None:
        self.session.clear_admin()

    async def register(self, fields: dict) -> dict:
        try:
            data = await self.api.register(fields)
            return data["user"]
        except httpx.HTTPStatusError as e:
            raise api_error(e) from e
        except httpx.TransportError:
            logger.info("Backend unavailable, registering locally")
            customer = rules.new_customer(self.session.local_customers, fields)
            self.session.add_local_customer(customer)
            return rules.public_customer(customer)

    async def user_login(self, email: str, password: str) -> dict:
        try:
            data = await self.api.user_login(email, password)
            user, token = data["user"], data["access_token"]
        except httpx.HTTPStatusError as e:
            raise api_error(e) from e
        except httpx.TransportError:
            logger.info("Backend unavailable, checking customer locally")
            customer = rules.authenticate_customer(self.session.local_customers, email, password)
            user = rules.public_customer(customer)
            token = create_access_token(customer["email"], "customer", customer["id"])
        self.session.set_customer(user, token)
        return user

    def user_logout(self) -> None:
        self.session.clear_customer()
