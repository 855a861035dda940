"""
Catalog rules shared by the API store and the offline client.

Every function here works on a plain catalog document: a dict holding the
``shops``, ``offers``, ``categories`` and ``floors`` lists of camelCase
record dicts, the same shape that is persisted to disk and returned by the
API. Mutating helpers validate everything first and only then touch the
document, so a raised error always leaves it unchanged.
"""

from datetime import date
from typing import Dict, List, Optional

from config import settings
from errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidFieldError,
    MissingFieldsError,
    RecordNotFound,
    ReferentialIntegrityError,
    UnknownReferenceError,
)
from security import hash_password, verify_password
from utils import is_blank, normalize_email, today_iso, utc_now_iso

CATALOG_COLLECTIONS = ("shops", "offers", "categories", "floors")

ENTITY_NAMES = {
    "shops": "Shop",
    "offers": "Offer",
    "categories": "Category",
    "floors": "Floor",
}

FIELDS = {
    "shops": ("name", "category", "floor", "shopNumber", "description", "contact", "email", "hours"),
    "offers": ("title", "shopId", "discount", "description", "validFrom", "validUntil"),
    "categories": ("name", "description", "icon"),
    "floors": ("number", "name", "description"),
}

REQUIRED_FIELDS = {
    "shops": ("name", "category", "floor"),
    "offers": ("title", "shopId", "validFrom", "validUntil"),
    "categories": ("name",),
    "floors": ("number", "name"),
}

INTEGER_FIELDS = {
    "shops": ("category", "floor"),
    "offers": ("shopId", "discount"),
    "floors": ("number",),
}

DATE_FIELDS = ("validFrom", "validUntil")

# shop fields holding a foreign key, by the collection they point into
SHOP_REFERENCES = {"category": "categories", "floor": "floors"}


def next_id(records: List[dict]) -> int:
    return max((record["id"] for record in records), default=0) + 1


def index_of(records: List[dict], record_id: int) -> Optional[int]:
    for index, record in enumerate(records):
        if record["id"] == record_id:
            return index
    return None


def find(records: List[dict], record_id: int) -> Optional[dict]:
    index = index_of(records, record_id)
    return None if index is None else records[index]


def missing_fields(collection: str, fields: dict) -> List[str]:
    return [name for name in REQUIRED_FIELDS[collection] if is_blank(fields.get(name))]


def normalize(collection: str, fields: dict) -> dict:
    """Keep known fields only and coerce integers and dates to their stored form."""
    values = {name: fields[name] for name in FIELDS[collection] if name in fields}

    for name in INTEGER_FIELDS.get(collection, ()):
        if name not in values:
            continue
        value = values[name]
        if is_blank(value):
            values[name] = 0 if name == "discount" else None
            continue
        try:
            values[name] = int(value)
        except (TypeError, ValueError):
            raise InvalidFieldError(f"{name} must be an integer")

    if collection == "offers":
        discount = values.get("discount")
        if discount is not None and not 0 <= discount <= 100:
            raise InvalidFieldError("discount must be between 0 and 100")
        for name in DATE_FIELDS:
            value = values.get(name)
            if is_blank(value):
                continue
            try:
                values[name] = date.fromisoformat(str(value)).isoformat()
            except ValueError:
                raise InvalidFieldError(f"{name} must be an ISO date (YYYY-MM-DD)")

    return values


def merge(record: dict, fields: dict, required=()) -> dict:
    """Overlay supplied fields onto a copy of record.

    Blank values are ignored for required fields so an update can never
    clear them; the id is never overwritten.
    """
    merged = dict(record)
    for name, value in fields.items():
        if name == "id":
            continue
        if name in required and is_blank(value):
            continue
        merged[name] = value
    return merged


def check_references(document: dict, collection: str, record: dict) -> None:
    if collection == "shops":
        for name, target in SHOP_REFERENCES.items():
            if find(document[target], record[name]) is None:
                raise UnknownReferenceError(f"{ENTITY_NAMES[target]} {record[name]} does not exist")
    elif collection == "offers":
        if find(document["shops"], record["shopId"]) is None:
            raise UnknownReferenceError(f"Shop {record['shopId']} does not exist")


def check_validity_window(record: dict) -> None:
    if record["validFrom"] > record["validUntil"]:
        raise InvalidFieldError("validFrom must not be after validUntil")


def _check(document: dict, collection: str, record: dict) -> None:
    check_references(document, collection, record)
    if collection == "offers":
        check_validity_window(record)


def insert(document: dict, collection: str, fields: dict) -> dict:
    missing = missing_fields(collection, fields)
    if missing:
        raise MissingFieldsError(missing)

    values = normalize(collection, fields)
    record = {"id": next_id(document[collection])}
    record.update({name: None for name in FIELDS[collection]})
    if collection == "offers":
        record["discount"] = 0
    record.update({name: value for name, value in values.items() if value is not None})
    _check(document, collection, record)

    document[collection].append(record)
    return dict(record)


def update(document: dict, collection: str, record_id: int, fields: dict) -> dict:
    records = document[collection]
    index = index_of(records, record_id)
    if index is None:
        raise RecordNotFound(ENTITY_NAMES[collection], record_id)

    values = normalize(collection, fields)
    merged = merge(records[index], values, REQUIRED_FIELDS[collection])
    _check(document, collection, merged)

    records[index] = merged
    return dict(merged)


def referencing_shops(document: dict, collection: str, record_id: int) -> List[dict]:
    if collection == "categories":
        return [shop for shop in document["shops"] if shop["category"] == record_id]
    if collection == "floors":
        return [shop for shop in document["shops"] if shop["floor"] == record_id]
    return []


def delete(document: dict, collection: str, record_id: int) -> dict:
    """Remove a record, cascading shop deletes to offers and refusing
    category or floor deletes while shops still reference them."""
    records = document[collection]
    index = index_of(records, record_id)
    if index is None:
        raise RecordNotFound(ENTITY_NAMES[collection], record_id)

    if referencing_shops(document, collection, record_id):
        raise ReferentialIntegrityError(
            f"Cannot delete {ENTITY_NAMES[collection].lower()} with existing shops"
        )

    if collection == "shops":
        document["offers"][:] = [o for o in document["offers"] if o["shopId"] != record_id]

    return records.pop(index)


def is_offer_active(offer: dict, today: Optional[str] = None) -> bool:
    today = today or today_iso()
    return offer["validFrom"] <= today <= offer["validUntil"]


def filter_shops(shops, category=None, floor=None, search=None) -> List[dict]:
    result = list(shops)
    if category:
        result = [s for s in result if s["category"] == int(category)]
    if floor:
        result = [s for s in result if s["floor"] == int(floor)]
    if search:
        term = search.lower()
        result = [
            s for s in result
            if term in s["name"].lower() or term in (s.get("description") or "").lower()
        ]
    return result


def filter_offers(offers, shop_id=None, active=False, today=None) -> List[dict]:
    result = list(offers)
    if shop_id:
        result = [o for o in result if o["shopId"] == int(shop_id)]
    if active:
        today = today or today_iso()
        result = [o for o in result if is_offer_active(o, today)]
    return result


def catalog_stats(document: dict, today: Optional[str] = None) -> Dict[str, int]:
    today = today or today_iso()
    return {
        "totalShops": len(document["shops"]),
        "totalOffers": len(document["offers"]),
        "activeOffers": len(filter_offers(document["offers"], active=True, today=today)),
        "totalCategories": len(document["categories"]),
        "totalFloors": len(document["floors"]),
    }


def new_customer(customers: List[dict], fields: dict) -> dict:
    """Validate a signup and build the customer record; the caller appends it."""
    missing = [name for name in ("name", "email", "password") if is_blank(fields.get(name))]
    if missing:
        raise MissingFieldsError(missing)
    if len(fields["password"]) < settings.MIN_PASSWORD_LENGTH:
        raise InvalidFieldError(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
        )

    email = normalize_email(fields["email"])
    if any(normalize_email(c["email"]) == email for c in customers):
        raise DuplicateEmailError(email)

    return {
        "id": next_id(customers),
        "name": fields["name"].strip(),
        "email": email,
        "phone": fields.get("phone") or "",
        "passwordHash": hash_password(fields["password"]),
        "createdAt": utc_now_iso(),
    }


def authenticate_customer(customers: List[dict], email: str, password: str) -> dict:
    email = normalize_email(email)
    for customer in customers:
        if normalize_email(customer["email"]) == email:
            if verify_password(password, customer.get("passwordHash")):
                return customer
            break
    raise InvalidCredentialsError("Invalid email or password")


def public_customer(customer: dict) -> dict:
    return {
        "id": customer["id"],
        "name": customer["name"],
        "email": customer["email"],
        "phone": customer.get("phone") or "",
    }
