import pytest

import rules
from errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidFieldError,
    MissingFieldsError,
    RecordNotFound,
    ReferentialIntegrityError,
    UnknownReferenceError,
)
from sample_data import default_catalog


@pytest.fixture
def document():
    return default_catalog()


def test_next_id_empty_collection_is_one():
    assert rules.next_id([]) == 1


def test_next_id_is_max_plus_one_and_recomputed_after_delete():
    document = {"shops": [], "offers": [], "categories": [{"id": i, "name": f"c{i}"} for i in (1, 3, 5)], "floors": []}
    assert rules.next_id(document["categories"]) == 6

    created = rules.insert(document, "categories", {"name": "Toys"})
    assert created["id"] == 6
    rules.delete(document, "categories", 6)

    assert rules.next_id(document["categories"]) == 6


def test_insert_reports_every_missing_field(document):
    with pytest.raises(MissingFieldsError) as exc:
        rules.insert(document, "offers", {"title": "", "discount": 5})
    assert exc.value.missing == ["title", "shopId", "validFrom", "validUntil"]
    assert len(document["offers"]) == 8


def test_insert_coerces_integers_and_defaults_discount(document):
    offer = rules.insert(document, "offers", {
        "title": "Flash Sale",
        "shopId": "3",
        "validFrom": "2026-03-01",
        "validUntil": "2026-03-05",
    })
    assert offer["id"] == 9
    assert offer["shopId"] == 3
    assert offer["discount"] == 0
    assert offer["description"] is None


def test_insert_rejects_unknown_category(document):
    with pytest.raises(UnknownReferenceError):
        rules.insert(document, "shops", {"name": "Ghost", "category": 99, "floor": 1})
    assert len(document["shops"]) == 10


def test_insert_rejects_inverted_validity_window(document):
    with pytest.raises(InvalidFieldError):
        rules.insert(document, "offers", {
            "title": "Backwards",
            "shopId": 1,
            "validFrom": "2026-05-01",
            "validUntil": "2026-04-01",
        })


@pytest.mark.parametrize("fields", [
    {"discount": 150},
    {"discount": "lots"},
    {"validFrom": "01/02/2026"},
])
def test_update_rejects_bad_offer_values(document, fields):
    before = dict(document["offers"][0])
    with pytest.raises(InvalidFieldError):
        rules.update(document, "offers", 1, fields)
    assert document["offers"][0] == before


def test_partial_update_keeps_other_fields(document):
    before = dict(rules.find(document["offers"], 1))

    updated = rules.update(document, "offers", 1, {"discount": 60})

    assert updated["discount"] == 60
    assert {k: v for k, v in updated.items() if k != "discount"} == {
        k: v for k, v in before.items() if k != "discount"
    }


def test_update_ignores_blank_required_fields(document):
    updated = rules.update(document, "shops", 1, {"name": "  ", "hours": ""})
    assert updated["name"] == "Zara"
    assert updated["hours"] == ""


def test_update_unknown_id(document):
    with pytest.raises(RecordNotFound) as exc:
        rules.update(document, "floors", 42, {"name": "Roof"})
    assert exc.value.message == "Floor not found"


def test_delete_shop_cascades_only_its_offers(document):
    rules.insert(document, "offers", {
        "title": "Second Zara deal", "shopId": 1, "validFrom": "2026-01-01", "validUntil": "2026-01-31",
    })
    others = [o for o in document["offers"] if o["shopId"] != 1]

    rules.delete(document, "shops", 1)

    assert rules.find(document["shops"], 1) is None
    assert document["offers"] == others


@pytest.mark.parametrize("collection", ["categories", "floors"])
def test_delete_referenced_category_or_floor_is_refused(document, collection):
    before = default_catalog()
    with pytest.raises(ReferentialIntegrityError):
        rules.delete(document, collection, 1)
    assert document == before


def test_delete_unreferenced_floor(document):
    removed = rules.delete(document, "floors", 5)
    assert removed["name"] == "Fourth Floor"
    assert len(document["floors"]) == 4


@pytest.mark.parametrize("today, expected", [
    ("2025-12-31", False),
    ("2026-01-01", True),
    ("2026-06-15", True),
    ("2026-12-31", True),
    ("2027-01-01", False),
])
def test_offer_active_window_is_inclusive(today, expected):
    offer = {"validFrom": "2026-01-01", "validUntil": "2026-12-31"}
    assert rules.is_offer_active(offer, today) is expected


def test_filter_shops_combines_all_filters(document):
    shops = document["shops"]
    assert [s["name"] for s in rules.filter_shops(shops, category=6)] == ["Nike", "Adidas"]
    assert [s["name"] for s in rules.filter_shops(shops, floor=1, search="FASHION")] == ["Zara", "H&M"]
    assert [s["id"] for s in rules.filter_shops(shops, category="2", floor="2", search="apple")] == [3]
    assert rules.filter_shops(shops) == shops


def test_filter_offers_by_shop_and_activity(document):
    offers = document["offers"]
    assert [o["id"] for o in rules.filter_offers(offers, shop_id=5)] == [5]
    active = rules.filter_offers(offers, active=True, today="2026-02-12")
    assert [o["id"] for o in active] == [1, 2, 4, 5, 6, 7, 8]


def test_catalog_stats(document):
    assert rules.catalog_stats(document, today="2026-10-19") == {
        "totalShops": 10,
        "totalOffers": 8,
        "activeOffers": 1,
        "totalCategories": 6,
        "totalFloors": 5,
    }


def test_new_customer_hashes_password_and_rejects_duplicates():
    customers = []
    customer = rules.new_customer(customers, {"name": "Asha", "email": "Asha@Example.com", "password": "secret1"})
    customers.append(customer)

    assert customer["email"] == "asha@example.com"
    assert customer["passwordHash"] != "secret1"
    assert "password" not in customer

    with pytest.raises(DuplicateEmailError):
        rules.new_customer(customers, {"name": "Other", "email": "asha@example.com ", "password": "secret2"})
    assert len(customers) == 1


def test_new_customer_requires_fields_and_password_length():
    with pytest.raises(MissingFieldsError) as exc:
        rules.new_customer([], {"email": "x@example.com"})
    assert exc.value.missing == ["name", "password"]

    with pytest.raises(InvalidFieldError):
        rules.new_customer([], {"name": "X", "email": "x@example.com", "password": "123"})


def test_authenticate_customer():
    customer = rules.new_customer([], {"name": "Ravi", "email": "ravi@example.com", "password": "hunter22"})
    customers = [customer]

    assert rules.authenticate_customer(customers, "RAVI@example.com", "hunter22") is customer
    with pytest.raises(InvalidCredentialsError):
        rules.authenticate_customer(customers, "ravi@example.com", "wrong-pass")
    with pytest.raises(InvalidCredentialsError):
        rules.authenticate_customer(customers, "nobody@example.com", "hunter22")
